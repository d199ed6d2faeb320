"""Local Steam users and installation discovery."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

import requests

ID_CONVERSION_CONSTANT = 0x110000100000000
"""Offset between a 32-bit Steam account ID and its 64-bit form."""

PROFILE_URL = "http://steamcommunity.com/profiles/{}/games?xml=1"

# Steam answers 200 OK for missing profiles and reports the failure in the body.
STEAM_PROFILE_ERROR_MESSAGE = "The specified profile could not be found."

REQUEST_TIMEOUT = 10

_PERSONA_NAME = re.compile(r'"PersonaName"\s*"(.+?)"')


class ProfileNotFoundError(Exception):
    """The public Steam profile could not be retrieved."""


class SteamNotFoundError(Exception):
    """No Steam installation directory could be located."""


@dataclass
class User:
    """A user of the local Steam installation."""

    name: str
    steam_id32: str
    steam_id64: str
    directory: str


def steam_id64(steam_id32: str) -> str:
    """Convert a 32-bit Steam ID string to its 64-bit form.

    An unparsable ID counts as zero.
    """
    try:
        value = int(steam_id32)
    except ValueError:
        value = 0
    return str(value + ID_CONVERSION_CONSTANT)


def get_users(installation_dir: str | os.PathLike) -> list[User]:
    """Return every user found under the installation's userdata directory."""
    userdata_dir = Path(installation_dir) / "userdata"
    users: list[User] = []

    for entry in sorted(userdata_dir.iterdir(), key=lambda p: p.name):
        user_id = entry.name
        # The anonymous folder is only used for command-line downloads.
        if user_id == "anonymous":
            continue

        config_file = entry / "config" / "localconfig.vdf"
        if not config_file.exists():
            continue

        config_text = config_file.read_bytes().decode("utf-8", errors="replace")

        grid_dir = entry / "config" / "grid"
        grid_dir.mkdir(parents=True, exist_ok=True)

        # Some Steam builds ship the grid directory without the executable bit.
        print("Setting permission...")
        try:
            os.chmod(grid_dir, 0o777)
        except OSError:
            pass

        match = _PERSONA_NAME.search(config_text)
        if match is None:
            raise ValueError(f"no PersonaName in {config_file}")

        users.append(
            User(
                name=match.group(1),
                steam_id32=user_id,
                steam_id64=steam_id64(user_id),
                directory=str(entry),
            )
        )

    return users


def get_profile(user: User) -> str:
    """Download the user's public game list."""
    response = requests.get(
        PROFILE_URL.format(user.steam_id64), timeout=REQUEST_TIMEOUT
    )
    if response.status_code >= 400:
        raise ProfileNotFoundError(
            "profile not found. Make sure you have a public Steam profile"
        )

    profile = response.text
    if STEAM_PROFILE_ERROR_MESSAGE in profile:
        raise ProfileNotFoundError("profile not found")
    return profile


def _home_candidates() -> list[Path]:
    try:
        home = Path(os.path.expanduser("~"))
    except (KeyError, RuntimeError):
        return []
    if str(home) == "~":
        return []
    return [
        home / ".local" / "share" / "Steam",
        home / ".steam" / "steam",
        home / "Library" / "Application Support" / "Steam",
    ]


def get_steam_installation(steam_dir: str = "") -> str:
    """Return the Steam installation directory.

    An explicitly given directory must exist; otherwise the usual Linux,
    macOS and Windows locations are tried in order.
    """
    if steam_dir:
        if os.path.exists(steam_dir):
            return steam_dir
        raise SteamNotFoundError(
            "argument must be a valid Steam directory, or empty for auto "
            "detection. Got: " + steam_dir
        )

    candidates = _home_candidates()
    candidates.append(Path(os.environ.get("ProgramFiles(x86)", "")) / "Steam")
    candidates.append(Path(os.environ.get("ProgramFiles", "")) / "Steam")

    for candidate in candidates:
        if candidate.exists():
            return str(candidate)

    raise SteamNotFoundError(
        "could not find Steam installation folder; you can drag and drop the "
        "Steam folder into `steamgrid.exe` or call `steamgrid STEAMPATH` for "
        "a manual override"
    )