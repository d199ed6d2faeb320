"""Loading, backing up and cleaning up the images in a Steam grid directory."""

from __future__ import annotations

import glob
import hashlib
import os
import re
import sys
from contextlib import suppress
from pathlib import Path
from typing import Iterable

from gridart.artstyles import ArtStyle
from gridart.games import Game

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg"})

# Only ASCII letters, digits and underscore count as word characters here.
_NON_WORD = re.compile(r"\W+", re.ASCII)


def _extension(path: str | os.PathLike) -> str:
    """Return the suffix from the last dot of the final path element."""
    name = os.path.basename(os.fspath(path))
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def _glob(directory: str | os.PathLike, pattern: str) -> list[str]:
    """Glob ``pattern`` inside ``directory``, sorted by path."""
    base = glob.escape(os.fspath(directory))
    return sorted(glob.glob(os.path.join(base, pattern)))


def filter_for_images(paths: Iterable[str | os.PathLike]) -> list:
    """Keep only the paths ending in .png, .jpg or .jpeg."""
    return [path for path in paths if _extension(path) in IMAGE_EXTENSIONS]


def insensitive_glob_pattern(path: str) -> str:
    """Turn ``path`` into a glob pattern that matches letters in any case.

    Windows file systems are already case-insensitive, so the path is
    returned unchanged there.
    """
    if sys.platform == "win32":
        return path

    parts = []
    for char in path:
        if char.isalpha():
            lower = char.lower()
            upper = char.upper()
            lower = lower if len(lower) == 1 else char
            upper = upper if len(upper) == 1 else char
            parts.append(f"[{lower}{upper}]")
        else:
            parts.append(char)
    return "".join(parts)


def get_backup_path(grid_dir: str | os.PathLike, game: Game, art_style: ArtStyle) -> Path:
    """Return where the clean image behind the game's current image is kept.

    The name carries the SHA-256 of the overlaid image so that a backup is
    only used for the image it belongs to.
    """
    digest = hashlib.sha256(game.overlay_image_bytes or b"").hexdigest()
    name = f"{game.id}{art_style.id_extension} {digest}{game.image_ext}"
    return Path(grid_dir) / "originals" / name


def backup_game(grid_dir: str | os.PathLike, game: Game, art_style: ArtStyle) -> Path | None:
    """Write the game's clean image as a backup; return its path, if any."""
    if game.clean_image_bytes is None:
        return None
    path = get_backup_path(grid_dir, game, art_style)
    path.write_bytes(game.clean_image_bytes)
    return path


def remove_existing(grid_dir: str | os.PathLike, game_id: str, art_style: ArtStyle) -> list[str]:
    """Delete the game's current images and backups for one art style.

    Returns the removed paths.
    """
    prefix = glob.escape(game_id + art_style.id_extension)
    images = filter_for_images(_glob(grid_dir, prefix + ".*"))
    backups = filter_for_images(
        _glob(Path(grid_dir) / "originals", glob.escape(game_id + art_style.id_extension + " ") + "*.*")
    )

    removed = []
    for path in images + backups:
        os.remove(path)
        removed.append(path)
    return removed


def load_image(game: Game, source_name: str, image_path: str | os.PathLike) -> None:
    """Read an image file into ``game`` as its clean image.

    Raises OSError if the file cannot be read; ``game`` is then unchanged.
    """
    data = Path(image_path).read_bytes()
    game.image_ext = _extension(image_path)
    game.clean_image_bytes = data
    game.image_source = source_name


def load_existing(
    override_path: str | os.PathLike,
    grid_dir: str | os.PathLike,
    game: Game,
    art_style: ArtStyle,
    ignore_backup: bool = False,
    ignore_manual: bool = False,
) -> None:
    """Load an image already available for ``game``, if there is one.

    Tried in order: an override named by ID, an override named after the
    game, a legacy backup (converted and removed), and the image in the
    grid directory, replaced by its clean backup when one exists.
    """
    id_prefix = game.id + art_style.id_extension

    overrides = _glob(override_path, glob.escape(id_prefix) + ".*")
    if overrides:
        with suppress(OSError):
            load_image(game, "local file in directory 'games'", overrides[0])
        return

    if game.name:
        glob_name = _NON_WORD.sub("*", game.name)
        pattern = insensitive_glob_pattern(glob_name) + glob.escape(art_style.name_extension) + ".*"
        named = _glob(override_path, pattern)
        if named:
            with suppress(OSError):
                load_image(game, "local file in directory games/", named[0])
            return

    old_backups = _glob(grid_dir, glob.escape(id_prefix + " (original)") + "*")
    if old_backups:
        try:
            load_image(game, "legacy backup (now converted)", old_backups[0])
        except OSError:
            pass
        else:
            with suppress(OSError):
                os.remove(old_backups[0])
            return

    files = filter_for_images(_glob(grid_dir, glob.escape(id_prefix) + ".*"))
    if not files or ignore_manual:
        return

    try:
        load_image(game, "manual customization", files[0])
    except OSError:
        return

    if ignore_backup:
        return

    # The backup name depends on the hash of the image it was overlaid into.
    game.overlay_image_bytes = game.clean_image_bytes
    with suppress(OSError):
        load_image(game, "backup", get_backup_path(grid_dir, game, art_style))
    game.overlay_image_bytes = None