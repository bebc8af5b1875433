from __future__ import annotations

import json
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from motortown_admin.services.errors import EnvelopeDecodeError

T = TypeVar("T")

# Marker stored in ``data`` when an action endpoint succeeded without content.
UNIT: tuple = ()

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


@dataclass(frozen=True)
class Player:
    name: str
    unique_id: str


@dataclass(frozen=True)
class BannedPlayer:
    name: str
    unique_id: str


@dataclass(frozen=True)
class PlayerCountData:
    num_players: int


@dataclass(frozen=True)
class VersionData:
    version: str


@dataclass(frozen=True)
class HousingData:
    owner_unique_id: str
    expire_time: str


PlayerListData = Dict[str, Player]
BanListData = Dict[str, BannedPlayer]
HousingListData = Dict[str, HousingData]


@dataclass(frozen=True)
class ChatMessagePayload:
    message: str


@dataclass(frozen=True)
class KickPlayerPayload:
    unique_id: str


@dataclass(frozen=True)
class BanPlayerPayload:
    unique_id: str
    hours: Optional[int] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class UnbanPlayerPayload:
    unique_id: str


@dataclass(frozen=True)
class ResponseEnvelope(Generic[T]):
    """The ``{data, message, succeeded}`` shape every operation returns."""

    data: Optional[T]
    message: str
    succeeded: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"data": _encode(self.data), "message": self.message, "succeeded": self.succeeded}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def _encode(value: Any) -> Any:
    if value is None or value == UNIT:
        return None
    if is_dataclass(value):
        return asdict(value)
    if isinstance(value, dict):
        return {key: _encode(item) for key, item in value.items()}
    return value


# ---------------------------------------------------------------------------
# Wire decoding
# ---------------------------------------------------------------------------
DataDecoder = Callable[[Any], Any]


def _require_str(obj: Dict[str, Any], key: str, where: str) -> str:
    if key not in obj:
        raise EnvelopeDecodeError(f"missing field `{key}` in {where}")
    value = obj[key]
    if not isinstance(value, str):
        raise EnvelopeDecodeError(f"invalid type for `{key}` in {where}: expected a string, got {type(value).__name__}")
    return value


def _require_object(value: Any, where: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise EnvelopeDecodeError(f"invalid type for {where}: expected an object, got {type(value).__name__}")
    return value


def decode_player(raw: Any) -> Player:
    obj = _require_object(raw, "player")
    return Player(name=_require_str(obj, "name", "player"), unique_id=_require_str(obj, "unique_id", "player"))


def decode_banned_player(raw: Any) -> BannedPlayer:
    obj = _require_object(raw, "banned player")
    return BannedPlayer(
        name=_require_str(obj, "name", "banned player"),
        unique_id=_require_str(obj, "unique_id", "banned player"),
    )


def decode_player_list(raw: Any) -> PlayerListData:
    obj = _require_object(raw, "player list")
    return {key: decode_player(item) for key, item in obj.items()}


def decode_ban_list(raw: Any) -> BanListData:
    obj = _require_object(raw, "ban list")
    return {key: decode_banned_player(item) for key, item in obj.items()}


def decode_player_count(raw: Any) -> PlayerCountData:
    obj = _require_object(raw, "player count")
    if "num_players" not in obj:
        raise EnvelopeDecodeError("missing field `num_players` in player count")
    value = obj["num_players"]
    if isinstance(value, bool) or not isinstance(value, int):
        raise EnvelopeDecodeError(
            f"invalid type for `num_players`: expected an integer, got {type(value).__name__}"
        )
    if not INT32_MIN <= value <= INT32_MAX:
        raise EnvelopeDecodeError(f"`num_players` out of range: {value}")
    return PlayerCountData(num_players=value)


def decode_version(raw: Any) -> VersionData:
    obj = _require_object(raw, "version")
    return VersionData(version=_require_str(obj, "version", "version"))


def decode_housing(raw: Any) -> HousingData:
    obj = _require_object(raw, "house")
    return HousingData(
        owner_unique_id=_require_str(obj, "owner_unique_id", "house"),
        expire_time=_require_str(obj, "expire_time", "house"),
    )


def decode_housing_list(raw: Any) -> HousingListData:
    obj = _require_object(raw, "housing list")
    return {name: decode_housing(item) for name, item in obj.items()}


def decode_no_data(raw: Any) -> None:
    raise EnvelopeDecodeError(f"invalid type for `data`: expected null, got {type(raw).__name__}")


def decode_envelope(body: str, decode_data: DataDecoder) -> ResponseEnvelope[Any]:
    """Strictly decode ``body`` as an envelope whose ``data`` is read by ``decode_data``.

    A missing ``data`` key is treated as null, extra keys are ignored.
    Raises EnvelopeDecodeError on anything else that does not fit.
    """
    try:
        raw = json.loads(body)
    except ValueError as exc:
        raise EnvelopeDecodeError(str(exc)) from exc

    obj = _require_object(raw, "envelope")
    message = _require_str(obj, "message", "envelope")
    if "succeeded" not in obj:
        raise EnvelopeDecodeError("missing field `succeeded` in envelope")
    succeeded = obj["succeeded"]
    if not isinstance(succeeded, bool):
        raise EnvelopeDecodeError(
            f"invalid type for `succeeded` in envelope: expected a boolean, got {type(succeeded).__name__}"
        )

    raw_data = obj.get("data")
    data = None if raw_data is None else decode_data(raw_data)
    return ResponseEnvelope(data=data, message=message, succeeded=succeeded)
