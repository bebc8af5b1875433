from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional, Tuple
from urllib.parse import quote, urlencode

import aiohttp

from motortown_admin.services.errors import BodyReadError, ClientSetupError, RequestTimeoutError, TransportError

_LOGGER = logging.getLogger(__name__)

GET = "GET"
POST = "POST"


def build_url(host: str, port: int, path: str, params: Mapping[str, str]) -> str:
    """``http://host:port/path?query`` with every parameter percent-encoded."""
    query = urlencode(list(params.items()), quote_via=quote)
    url = f"http://{host}:{port}{path}"
    return f"{url}?{query}" if query else url


def redact(url: str) -> str:
    """Strip the query string so the password never reaches the logs."""
    return url.split("?", 1)[0]


async def execute(method: str, url: str, timeout: float) -> Tuple[int, str]:
    """
    Send a single request on a throwaway session and return ``(status, body)``.

    POST requests carry an empty body with ``Content-Length: 0``; the server
    reads everything from the query string. The body is returned as text
    whatever it contains.

    Raises RequestTimeoutError when ``timeout`` expires, TransportError for
    any other failed round trip and ClientSetupError when the URL is unusable.
    BodyReadError carries the status when only the body could not be read.
    """
    headers: Optional[dict] = None
    data: Optional[bytes] = None
    if method == POST:
        headers = {"Content-Length": "0"}
        data = b""

    _LOGGER.debug("%s %s (timeout=%.1fs)", method, redact(url), timeout)
    try:
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as s:
            async with s.request(method, url, headers=headers, data=data) as r:
                try:
                    text = await r.text(errors="replace")
                except (asyncio.TimeoutError, aiohttp.ClientError) as exc:
                    _LOGGER.warning("%s %s: failed to read body: %r", method, redact(url), exc)
                    raise BodyReadError(r.status, str(exc) or exc.__class__.__name__) from exc
                _LOGGER.debug("%s %s -> %s (%d bytes)", method, redact(url), r.status, len(text))
                return r.status, text
    except asyncio.TimeoutError as exc:
        _LOGGER.warning("%s %s timed out after %.1fs", method, redact(url), timeout)
        raise RequestTimeoutError(f"request timed out after {timeout:g}s") from exc
    except aiohttp.InvalidURL as exc:
        raise ClientSetupError(f"invalid server address: {redact(url)}") from exc
    except aiohttp.ClientError as exc:
        _LOGGER.warning("%s %s failed: %s", method, redact(url), exc)
        raise TransportError(str(exc) or exc.__class__.__name__) from exc
