"""Fatal error types.

Per-URL problems (timeouts, transport errors, unparseable markup) never raise
out of the pipeline; they are recorded in the output row instead.
"""


class PipelineError(Exception):
    """Base class for errors that abort a whole run."""


class InvalidArgument(PipelineError, ValueError):
    """Window parameters are out of range. Raised before any I/O."""


class PersistenceFailure(PipelineError, OSError):
    """The output store or audit log could not be written."""
