"""Discovery of the games in a user's Steam library."""

from __future__ import annotations

import re
import zlib
from dataclasses import dataclass, field
from pathlib import Path

import requests

from gridart.users import ProfileNotFoundError, User, get_profile

# The profile is XML; a regular expression is enough to pull out the games.
_PROFILE_GAME = re.compile(
    r"<appID>(\d+)</appID>\s*<name><!\[CDATA\[(.+?)\]\]></name>"
)

# VDF pattern: "steamid" { "tags" { "0" "category" } }
_SHARED_CONFIG_GAME = re.compile(r'"([0-9]+)"\s*\{[^}]+?"tags"\s*\{([^}]+?)\}')
_SHARED_CONFIG_TAG = re.compile(r'"[0-9]+"\s*"(.+?)"')

_SHORTCUT_GAME = re.compile(
    rb"\x00\x02appid\x00(.{1,4})\x01appname\x00([^\x08]+?)\x00\x01exe\x00"
    rb"([^\x08]+?)\x00\x01.+?\x00tags\x00(?:\x01([^\x08]+?)|)\x08\x08",
    re.IGNORECASE,
)
_SHORTCUT_TAG = re.compile(rb"\d\x00([^\x00\x01\x08]+?)\x00")


@dataclass
class Game:
    """A game in a Steam library, installed or not."""

    id: str
    name: str = ""
    tags: list[str] = field(default_factory=list)
    image_ext: str = ""
    clean_image_bytes: bytes | None = None
    overlay_image_bytes: bytes | None = None
    image_source: str = ""
    custom: bool = False
    legacy_id: int = 0
    original_id: str = ""

    def __post_init__(self) -> None:
        if not self.original_id:
            self.original_id = self.id


def _matches_category(tag: str, skip_category: str) -> bool:
    return bool(skip_category) and skip_category.lower() in tag.lower()


def parse_profile_games(profile: str) -> list[Game]:
    """Extract the games listed in a public profile's XML game list."""
    return [
        Game(id=match.group(1), name=match.group(2), tags=[""])
        for match in _PROFILE_GAME.finditer(profile)
    ]


def parse_shared_config(
    text: str, games: dict[str, Game], skip_category: str = ""
) -> None:
    """Add the categories from sharedconfig.vdf text to ``games``.

    Games missing from ``games`` are created without a name; games with a
    tag containing ``skip_category`` are removed.
    """
    for game_match in _SHARED_CONFIG_GAME.finditer(text):
        game_id = game_match.group(1)
        for tag_match in _SHARED_CONFIG_TAG.finditer(game_match.group(2)):
            tag = tag_match.group(1)
            game = games.get(game_id)
            if game is not None:
                game.tags.append(tag)
            else:
                games[game_id] = Game(id=game_id, tags=[tag])

            if _matches_category(tag, skip_category):
                del games[game_id]
                break


def parse_shortcuts(
    data: bytes, games: dict[str, Game], skip_category: str = ""
) -> None:
    """Add the non-Steam shortcuts from binary shortcuts.vdf data to ``games``."""
    for game_match in _SHORTCUT_GAME.finditer(data):
        raw_id, raw_name, target, raw_tags = game_match.groups()
        game_id = str(int.from_bytes(raw_id[:4].ljust(4, b"\x00"), "little"))
        # Big Picture still uses the old crc32(target + name) identifier.
        legacy_id = zlib.crc32(target + raw_name) | 0x80000000

        game = Game(
            id=game_id,
            name=raw_name.decode("utf-8", errors="replace"),
            tags=[],
            custom=True,
            legacy_id=legacy_id,
        )
        games[game_id] = game

        for tag_match in _SHORTCUT_TAG.finditer(raw_tags or b""):
            tag = tag_match.group(1).decode("utf-8", errors="replace")
            game.tags.append(tag)
            if _matches_category(tag, skip_category):
                del games[game_id]
                break


def add_games_from_profile(user: User, games: dict[str, Game]) -> None:
    """Add the games from the user's public profile to ``games``."""
    for game in parse_profile_games(get_profile(user)):
        games[game.id] = game


def add_unknown_games(
    user: User, games: dict[str, Game], skip_category: str = ""
) -> None:
    """Add categories, and games missing from the profile, from local config."""
    shared_config = Path(user.directory) / "7" / "remote" / "sharedconfig.vdf"
    try:
        data = shared_config.read_bytes()
    except OSError:
        return
    parse_shared_config(data.decode("utf-8", errors="replace"), games, skip_category)


def add_non_steam_games(
    user: User, games: dict[str, Game], skip_category: str = ""
) -> None:
    """Add the locally registered non-Steam shortcuts to ``games``."""
    shortcuts = Path(user.directory) / "config" / "shortcuts.vdf"
    try:
        data = shortcuts.read_bytes()
    except OSError:
        return
    parse_shortcuts(data, games, skip_category)


def get_games(
    user: User,
    non_steam_only: bool = False,
    app_ids: str = "",
    skip_category: str = "",
) -> dict[str, Game]:
    """Return the user's games keyed by ID.

    With ``app_ids`` (comma separated) only those IDs are returned. A profile
    that cannot be fetched is skipped silently.
    """
    games: dict[str, Game] = {}

    if app_ids:
        for app_id in app_ids.split(","):
            games[app_id] = Game(id=app_id)
        return games

    if not non_steam_only:
        try:
            add_games_from_profile(user, games)
        except (ProfileNotFoundError, requests.RequestException):
            pass
        add_unknown_games(user, games, skip_category)
    add_non_steam_games(user, games, skip_category)

    return games