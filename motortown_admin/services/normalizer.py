"""
Turns whatever the game server sent back into a ``ResponseEnvelope``.

The server is inconsistent: some endpoints answer with the JSON envelope,
some with plain text, some with nothing at all. Each endpoint is bound to one
of three modes:

    STRICT     the body must be a valid envelope, otherwise EnvelopeDecodeError
    LENIENT    an undecodable body becomes an envelope built from the status
    HEURISTIC  ban list only: empty body, JSON, "No banned players" text, error

Transport failures are turned into envelopes by ``from_transport_error`` and
bodies that broke off mid-read by ``from_body_read_error``.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict

from motortown_admin.models import (
    UNIT,
    DataDecoder,
    ResponseEnvelope,
    decode_ban_list,
    decode_envelope,
    decode_no_data,
)
from motortown_admin.services.errors import BodyReadError, EnvelopeDecodeError, RequestTimeoutError, TransportError

_LOGGER = logging.getLogger(__name__)

EMPTY_RESPONSE_MESSAGE = "Empty response received"
NO_BANNED_PLAYERS = "No banned players"
TIMED_OUT_MESSAGE = "Request timed out"


class NormalizationMode(str, Enum):
    STRICT = "strict"
    LENIENT = "lenient"
    HEURISTIC = "heuristic"


# Canonical reason phrases, pinned so fallback messages do not change with
# the interpreter version.
REASON_PHRASES: Dict[int, str] = {
    100: "Continue",
    101: "Switching Protocols",
    102: "Processing",
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",
    207: "Multi-Status",
    208: "Already Reported",
    226: "IM Used",
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    307: "Temporary Redirect",
    308: "Permanent Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Payload Too Large",
    414: "URI Too Long",
    415: "Unsupported Media Type",
    416: "Range Not Satisfiable",
    417: "Expectation Failed",
    418: "I'm a teapot",
    421: "Misdirected Request",
    422: "Unprocessable Entity",
    423: "Locked",
    424: "Failed Dependency",
    426: "Upgrade Required",
    428: "Precondition Required",
    429: "Too Many Requests",
    431: "Request Header Fields Too Large",
    451: "Unavailable For Legal Reasons",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
    506: "Variant Also Negotiates",
    507: "Insufficient Storage",
    508: "Loop Detected",
    510: "Not Extended",
    511: "Network Authentication Required",
}


def status_line(status: int) -> str:
    return f"{status} {REASON_PHRASES.get(status, '<unknown status code>')}"


def is_success(status: int) -> bool:
    return 200 <= status < 300


def normalize_strict(status: int, body: str, decode_data: DataDecoder) -> ResponseEnvelope[Any]:
    try:
        return decode_envelope(body, decode_data)
    except EnvelopeDecodeError as exc:
        raise EnvelopeDecodeError(f"Failed to parse JSON response (status {status}): {exc}") from exc


def normalize_lenient(status: int, body: str) -> ResponseEnvelope[tuple]:
    try:
        return decode_envelope(body, decode_no_data)
    except EnvelopeDecodeError:
        succeeded = is_success(status)
        return ResponseEnvelope(
            data=UNIT if succeeded else None,
            message=f"Status: {status_line(status)}. Raw Body: {body}",
            succeeded=succeeded,
        )


def normalize_ban_list(status: int, body: str) -> ResponseEnvelope[Any]:
    if not body:
        _LOGGER.debug("ban list: empty body (status %s)", status)
        return ResponseEnvelope(data=None, message=EMPTY_RESPONSE_MESSAGE, succeeded=False)

    try:
        envelope = decode_envelope(body, decode_ban_list)
    except EnvelopeDecodeError as exc:
        _LOGGER.debug("ban list: JSON parse error: %s", exc)
        # The server answers an empty ban list with plain text.
        if NO_BANNED_PLAYERS in body:
            _LOGGER.debug("ban list: detected %r message", NO_BANNED_PLAYERS)
            return ResponseEnvelope(data={}, message=NO_BANNED_PLAYERS, succeeded=True)
        return ResponseEnvelope(data=None, message=f"JSON parsing error: {exc}", succeeded=False)

    _LOGGER.debug("ban list: parsed JSON, succeeded=%s", envelope.succeeded)
    return envelope


def normalize(
    mode: NormalizationMode,
    status: int,
    body: str,
    decode_data: DataDecoder = decode_no_data,
) -> ResponseEnvelope[Any]:
    if mode is NormalizationMode.STRICT:
        return normalize_strict(status, body, decode_data)
    if mode is NormalizationMode.LENIENT:
        return normalize_lenient(status, body)
    return normalize_ban_list(status, body)


def from_transport_error(exc: TransportError) -> ResponseEnvelope[Any]:
    if isinstance(exc, RequestTimeoutError):
        return ResponseEnvelope(data=None, message=TIMED_OUT_MESSAGE, succeeded=False)
    return ResponseEnvelope(data=None, message=f"Request failed: {exc}", succeeded=False)


def from_body_read_error(mode: NormalizationMode, exc: BodyReadError) -> ResponseEnvelope[Any]:
    """The status arrived but the body did not; lenient mode still trusts the status."""
    reason = f"Failed to read response body: {exc}"
    if mode is NormalizationMode.STRICT:
        raise EnvelopeDecodeError(f"Failed to parse JSON response (status {exc.status}): {reason}") from exc
    if mode is NormalizationMode.LENIENT:
        return normalize_lenient(exc.status, reason)
    return ResponseEnvelope(data=None, message=reason, succeeded=False)
