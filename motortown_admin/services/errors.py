from __future__ import annotations


class ApiClientError(Exception):
    """Base error for the server API client."""


class ClientSetupError(ApiClientError):
    """The request could not be built (bad host/port, unusable URL)."""


class EnvelopeDecodeError(ApiClientError, ValueError):
    """A response body did not match the expected envelope shape."""


class TransportError(ApiClientError):
    """The HTTP round trip did not complete (DNS, refused, reset)."""


class RequestTimeoutError(TransportError):
    """The HTTP round trip exceeded its timeout."""


class BodyReadError(ApiClientError):
    """The status line arrived but the body could not be read in full."""

    def __init__(self, status: int, reason: str):
        super().__init__(reason)
        self.status = status
