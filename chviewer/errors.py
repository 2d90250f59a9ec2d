"""Error kinds raised by the fetch / parse pipeline.

``UpstreamError`` subclasses describe an HTTP answer from the origin that
was not 200; ``TransportFailure`` means no answer arrived at all.  Both are
raised by the loader and mapped to HTTP responses by the API layer.
"""

from __future__ import annotations


class ViewerError(Exception):
    """Base class for every error the viewer raises on purpose."""


class MalformedInput(ViewerError):
    """A request parameter is missing or cannot be used to build a URL."""


class TransportFailure(ViewerError):
    """Timeout, DNS or connection-level failure while fetching *url*."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"request to {url} failed: {reason}")
        self.url = url
        self.reason = reason


class UpstreamError(ViewerError):
    """The origin answered *url* with a non-200 *status*."""

    def __init__(self, url: str, status: int) -> None:
        super().__init__(f"HTTP {status} from {url}")
        self.url = url
        self.status = status

    @classmethod
    def for_status(cls, url: str, status: int) -> "UpstreamError":
        """Return the most specific subclass for *status*."""
        if status == 404:
            return UpstreamNotFound(url, status)
        if status == 403:
            return UpstreamForbidden(url, status)
        return UpstreamOtherStatus(url, status)


class UpstreamNotFound(UpstreamError):
    pass


class UpstreamForbidden(UpstreamError):
    pass


class UpstreamOtherStatus(UpstreamError):
    pass
