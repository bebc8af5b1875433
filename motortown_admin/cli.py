from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any, Awaitable, Callable, Dict, List, Optional

from dotenv import load_dotenv

from motortown_admin.config import DEFAULT_POLL_RATE_SECONDS, ApiConfig, ConfigStore, load_settings
from motortown_admin.models import (
    BanPlayerPayload,
    ChatMessagePayload,
    HousingData,
    KickPlayerPayload,
    PlayerCountData,
    ResponseEnvelope,
    UnbanPlayerPayload,
    VersionData,
)
from motortown_admin.services import server_api
from motortown_admin.services.errors import ApiClientError
from motortown_admin.utils.logger import setup_logger

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_ERROR = 2

Operation = Callable[[ApiConfig, argparse.Namespace], Awaitable[ResponseEnvelope[Any]]]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="motortown-admin", description="Motor Town server administration")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    configure = sub.add_parser("configure", help="save connection settings")
    configure.add_argument("--host", required=True)
    configure.add_argument("--port", required=True, type=int)
    configure.add_argument("--password", required=True)
    configure.add_argument("--poll-rate", type=int, default=DEFAULT_POLL_RATE_SECONDS)
    configure.add_argument("--disable-players", action="store_true", help="hide the players section")

    sub.add_parser("players", help="list connected players")
    sub.add_parser("count", help="show the player count")
    sub.add_parser("banlist", help="list banned players")
    sub.add_parser("version", help="show the server version")
    sub.add_parser("housing", help="list owned houses")

    chat = sub.add_parser("chat", help="send a chat message")
    chat.add_argument("message", nargs="+")

    for name in ("kick", "unban"):
        p = sub.add_parser(name, help=f"{name} a player by unique id")
        p.add_argument("unique_id")

    ban = sub.add_parser("ban", help="ban a player by unique id")
    ban.add_argument("unique_id")
    ban.add_argument("--hours", type=int)
    ban.add_argument("--reason")
    return parser


OPERATIONS: Dict[str, Operation] = {
    "players": lambda cfg, _: server_api.get_player_list(cfg),
    "count": lambda cfg, _: server_api.get_player_count(cfg),
    "banlist": lambda cfg, _: server_api.get_ban_list(cfg),
    "version": lambda cfg, _: server_api.get_version(cfg),
    "housing": lambda cfg, _: server_api.get_housing_list(cfg),
    "chat": lambda cfg, a: server_api.send_chat_message(cfg, ChatMessagePayload(message=" ".join(a.message))),
    "kick": lambda cfg, a: server_api.kick_player(cfg, KickPlayerPayload(unique_id=a.unique_id)),
    "ban": lambda cfg, a: server_api.ban_player(
        cfg, BanPlayerPayload(unique_id=a.unique_id, hours=a.hours, reason=a.reason)
    ),
    "unban": lambda cfg, a: server_api.unban_player(cfg, UnbanPlayerPayload(unique_id=a.unique_id)),
}


def format_envelope(envelope: ResponseEnvelope[Any]) -> List[str]:
    lines = [f"{'OK' if envelope.succeeded else 'FAILED'}: {envelope.message}"]
    data = envelope.data
    if isinstance(data, dict):
        if not data:
            lines.append("  (none)")
        for key, item in sorted(data.items()):
            if isinstance(item, HousingData):
                lines.append(f"  {key} (owner: {item.owner_unique_id}, expires: {item.expire_time})")
            else:
                lines.append(f"  [{key}] {item.name} ({item.unique_id})")
    elif isinstance(data, PlayerCountData):
        lines.append(f"  players online: {data.num_players}")
    elif isinstance(data, VersionData):
        lines.append(f"  version: {data.version}")
    return lines


def _configure(args: argparse.Namespace, store: ConfigStore) -> int:
    config = ApiConfig(
        host=args.host,
        port=args.port,
        password=args.password,
        players_section_enabled=not args.disable_players,
        poll_rate_seconds=args.poll_rate,
    )
    store.save(config)
    print(f"Saved configuration for {config.base_url} to {store.path}")
    return EXIT_OK


async def main(argv: Optional[List[str]] = None, store: Optional[ConfigStore] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logger(verbose=args.verbose)
    store = store or ConfigStore()

    try:
        if args.command == "configure":
            return _configure(args, store)
        config = load_settings(store)
        envelope = await OPERATIONS[args.command](config, args)
    except (ApiClientError, ValueError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return EXIT_ERROR

    for line in format_envelope(envelope):
        print(line)
    return EXIT_OK if envelope.succeeded else EXIT_FAILED


def run() -> None:
    load_dotenv()
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
