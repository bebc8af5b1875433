"""
Administrative operations against a Motor Town dedicated server.

Every operation takes the ``ApiConfig`` to use for that one call; nothing is
cached between calls and each request gets its own session:

    config = ApiConfig(host="127.0.0.1", port=25575, password="secret")
    envelope = await kick_player(config, KickPlayerPayload(unique_id="7656..."))
    if not envelope.succeeded:
        print(envelope.message)

Transport failures come back as envelopes with ``succeeded=False``. A body
that breaks off mid-read still yields an envelope built from the status, except
on the strict endpoints. Only ClientSetupError and, for the strict endpoints,
EnvelopeDecodeError are raised.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from motortown_admin.config import ApiConfig
from motortown_admin.models import (
    BanListData,
    BanPlayerPayload,
    ChatMessagePayload,
    DataDecoder,
    HousingListData,
    KickPlayerPayload,
    PlayerCountData,
    PlayerListData,
    ResponseEnvelope,
    UnbanPlayerPayload,
    VersionData,
    decode_housing_list,
    decode_no_data,
    decode_player_count,
    decode_player_list,
    decode_version,
)
from motortown_admin.services import http
from motortown_admin.services.errors import BodyReadError, TransportError
from motortown_admin.services.normalizer import (
    NormalizationMode,
    from_body_read_error,
    from_transport_error,
    normalize,
)
from motortown_admin.services.timeouts import EndpointKind, timeout_for

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Endpoint:
    kind: EndpointKind
    method: str
    path: str
    mode: NormalizationMode
    decode_data: DataDecoder = decode_no_data


PLAYER_LIST = Endpoint(EndpointKind.PLAYER_LIST, http.GET, "/player/list", NormalizationMode.STRICT, decode_player_list)
PLAYER_COUNT = Endpoint(EndpointKind.PLAYER_COUNT, http.GET, "/player/count", NormalizationMode.STRICT, decode_player_count)
VERSION = Endpoint(EndpointKind.VERSION, http.GET, "/version", NormalizationMode.STRICT, decode_version)
HOUSING_LIST = Endpoint(
    EndpointKind.HOUSING_LIST, http.GET, "/housing/list", NormalizationMode.STRICT, decode_housing_list
)
CHAT = Endpoint(EndpointKind.CHAT, http.POST, "/chat", NormalizationMode.LENIENT)
KICK = Endpoint(EndpointKind.KICK, http.POST, "/player/kick", NormalizationMode.LENIENT)
BAN = Endpoint(EndpointKind.BAN, http.POST, "/player/ban", NormalizationMode.LENIENT)
UNBAN = Endpoint(EndpointKind.UNBAN, http.POST, "/player/unban", NormalizationMode.LENIENT)
BAN_LIST = Endpoint(EndpointKind.BAN_LIST, http.GET, "/player/banlist", NormalizationMode.HEURISTIC)


async def call_endpoint(
    config: ApiConfig,
    endpoint: Endpoint,
    params: Optional[Dict[str, str]] = None,
) -> ResponseEnvelope[Any]:
    query = {"password": config.password}
    query.update(params or {})
    url = http.build_url(config.host, config.port, endpoint.path, query)
    timeout = timeout_for(config.poll_rate_seconds, endpoint.kind)

    try:
        status, body = await http.execute(endpoint.method, url, timeout)
    except TransportError as exc:
        _LOGGER.debug("%s: transport failure %r", endpoint.kind.value, exc)
        return from_transport_error(exc)
    except BodyReadError as exc:
        _LOGGER.debug("%s: body read failure after status %s: %r", endpoint.kind.value, exc.status, exc)
        return from_body_read_error(endpoint.mode, exc)
    return normalize(endpoint.mode, status, body, endpoint.decode_data)


def _require(value: str, field_name: str) -> str:
    if not value:
        raise ValueError(f"{field_name} cannot be empty")
    return value


async def get_player_list(config: ApiConfig) -> ResponseEnvelope[PlayerListData]:
    return await call_endpoint(config, PLAYER_LIST)


async def get_player_count(config: ApiConfig) -> ResponseEnvelope[PlayerCountData]:
    return await call_endpoint(config, PLAYER_COUNT)


async def get_version(config: ApiConfig) -> ResponseEnvelope[VersionData]:
    return await call_endpoint(config, VERSION)


async def get_housing_list(config: ApiConfig) -> ResponseEnvelope[HousingListData]:
    return await call_endpoint(config, HOUSING_LIST)


async def send_chat_message(config: ApiConfig, payload: ChatMessagePayload) -> ResponseEnvelope[tuple]:
    return await call_endpoint(config, CHAT, {"message": _require(payload.message, "message")})


async def kick_player(config: ApiConfig, payload: KickPlayerPayload) -> ResponseEnvelope[tuple]:
    return await call_endpoint(config, KICK, {"unique_id": _require(payload.unique_id, "unique_id")})


async def ban_player(config: ApiConfig, payload: BanPlayerPayload) -> ResponseEnvelope[tuple]:
    params = {"unique_id": _require(payload.unique_id, "unique_id")}
    if payload.hours and payload.hours > 0:
        params["hours"] = str(payload.hours)
    if payload.reason:
        params["reason"] = payload.reason
    return await call_endpoint(config, BAN, params)


async def unban_player(config: ApiConfig, payload: UnbanPlayerPayload) -> ResponseEnvelope[tuple]:
    return await call_endpoint(config, UNBAN, {"unique_id": _require(payload.unique_id, "unique_id")})


async def get_ban_list(config: ApiConfig) -> ResponseEnvelope[BanListData]:
    _LOGGER.debug("ban list: requesting from %s:%s", config.host, config.port)
    return await call_endpoint(config, BAN_LIST)
