"""Sequential, rate-limited HTTP fetching with response classification."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

import httpx

from .config import Settings, get_settings
from .models import ErrorKind, FetchFailure, FetchOutcome, FetchSuccess

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPES = frozenset({"text/html", "application/xhtml+xml"})


def is_html(content_type: str) -> bool:
    """Return True when a Content-Type header names an HTML media type."""
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type in HTML_CONTENT_TYPES


class RateLimiter:
    """Enforce a minimum gap between the end of one call and the start of the next.

    The first call never waits. ``clock`` and ``sleep`` are injectable so the
    gap can be checked without real delays.
    """

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = max(0.0, min_interval)
        self._clock = clock
        self._sleep = sleep
        self._last_done: Optional[float] = None

    def wait(self) -> None:
        if self._last_done is None:
            return
        remaining = self.min_interval - (self._clock() - self._last_done)
        if remaining > 0:
            logger.debug("Rate limit: sleeping %.3fs", remaining)
            self._sleep(remaining)

    def done(self) -> None:
        self._last_done = self._clock()


def _client(settings: Settings) -> httpx.Client:
    return httpx.Client(
        timeout=settings.timeout_seconds,
        follow_redirects=True,
        headers={
            "user-agent": settings.user_agent,
            "accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "accept-language": settings.accept_language,
        },
    )


def _describe(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


def _read_text(
    resp: httpx.Response, deadline: float, clock: Callable[[], float] = time.monotonic
) -> str:
    """Download and decode the body, aborting once the deadline passes."""
    chunks: List[bytes] = []
    for chunk in resp.iter_bytes():
        if clock() > deadline:
            raise httpx.ReadTimeout(
                f"Deadline exceeded while reading body of {resp.url}",
                request=resp.request,
            )
        chunks.append(chunk)
    return b"".join(chunks).decode(resp.encoding or "utf-8", errors="replace")


class RateLimitedFetcher:
    """Issue one GET at a time and report the outcome as data.

    Transport errors and timeouts are returned as :class:`FetchFailure`;
    ``fetch`` never raises for them. Bodies are downloaded only for 2xx
    responses with an HTML content type.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        client: Optional[httpx.Client] = None,
        limiter: Optional[RateLimiter] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or get_settings()
        self._owns_client = client is None
        self._client = client or _client(self.settings)
        self._limiter = limiter or RateLimiter(self.settings.request_delay_seconds)
        self._clock = clock

    def __enter__(self) -> "RateLimitedFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def fetch(self, url: str) -> FetchOutcome:
        """Fetch ``url`` after honouring the inter-request delay."""
        self._limiter.wait()
        try:
            return self._request(url)
        finally:
            self._limiter.done()

    def _request(self, url: str) -> FetchOutcome:
        budget = self.settings.timeout_seconds
        deadline = self._clock() + budget
        logger.info("Fetching: %s", url)
        try:
            with self._client.stream("GET", url, timeout=budget) as resp:
                # Redirect hops and slow headers each restart httpx's own timers.
                if self._clock() > deadline:
                    raise httpx.ReadTimeout(
                        f"Deadline of {budget}s exceeded before response from {resp.url}",
                        request=resp.request,
                    )
                content_type = resp.headers.get("content-type", "")
                body: Optional[str] = None
                if resp.is_success and is_html(content_type):
                    body = _read_text(resp, deadline, self._clock)
                outcome = FetchSuccess(
                    final_url=str(resp.url),
                    status_code=resp.status_code,
                    redirected=bool(resp.history),
                    content_type=content_type,
                    body=body,
                )
        except httpx.TimeoutException as exc:
            logger.warning("Timeout fetching %s: %s", url, _describe(exc))
            return FetchFailure(
                error_kind=ErrorKind.TIMEOUT,
                error_message=f"{type(exc).__name__}: {_describe(exc)}",
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Fetch error for %s: %s", url, _describe(exc))
            return FetchFailure(
                error_kind=ErrorKind.TRANSPORT,
                error_message=f"{type(exc).__name__}: {_describe(exc)}",
            )

        logger.info(
            "Fetched: status %d%s%s",
            outcome.status_code,
            f" (redirected to {outcome.final_url})" if outcome.redirected else "",
            " (HTML body read)" if outcome.body is not None else "",
        )
        return outcome
