"""Art styles handled for each game and writing of the final images."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from gridart.games import Game

_UINT64_LIMIT = 1 << 64
_UINT64_MASK = _UINT64_LIMIT - 1
_LEGACY_SUFFIX = 0x02000000
_DIGITS = re.compile(r"[0-9]+")

BANNER = "Banner"
COVER = "Cover"
HERO = "Hero"
LOGO = "Logo"


@dataclass(frozen=True)
class ArtStyle:
    """How one kind of artwork is named, fetched and filtered."""

    id_extension: str
    name_extension: str
    steam_url_extension: str
    steamgriddb_filter: str


def _filter(styles: str, types: str, nsfw: str, humor: str, dimensions: str | None) -> str:
    query = f"?styles={styles}&types={types}&nsfw={nsfw}&humor={humor}"
    if dimensions is not None:
        query += f"&dimensions={dimensions}"
    return query


def build_art_styles(
    styles: str = "alternate",
    logo_styles: str = "official",
    hero_styles: str = "alternate",
    types: str = "static",
    nsfw: str = "false",
    humor: str = "false",
    banner_dimensions: str = "460x215,920x430",
    cover_dimensions: str = "600x900,342x482,660x930",
    hero_dimensions: str = "1920x620,3840x1240,1600x650",
    skip_banner: bool = False,
    skip_cover: bool = False,
    skip_hero: bool = False,
    skip_logo: bool = False,
) -> dict[str, ArtStyle]:
    """Return the art styles to process, keyed by style name.

    Raises ValueError when every style is skipped.
    """
    candidates = {
        BANNER: (
            skip_banner,
            ArtStyle(
                "",
                ".banner",
                "header.jpg",
                _filter(styles, types, nsfw, humor, banner_dimensions),
            ),
        ),
        COVER: (
            skip_cover,
            ArtStyle(
                "p",
                ".cover",
                "library_600x900_2x.jpg",
                _filter(styles, types, nsfw, humor, cover_dimensions),
            ),
        ),
        HERO: (
            skip_hero,
            ArtStyle(
                "_hero",
                ".hero",
                "library_hero.jpg",
                _filter(hero_styles, types, nsfw, humor, hero_dimensions),
            ),
        ),
        LOGO: (
            skip_logo,
            ArtStyle(
                "_logo",
                ".logo",
                "logo.png",
                _filter(logo_styles, types, nsfw, humor, None),
            ),
        ),
    }
    art_styles = {name: style for name, (skip, style) in candidates.items() if not skip}
    if not art_styles:
        raise ValueError("no artStyles, nothing to do…")
    return art_styles


def legacy_banner_id(game: Game) -> int | None:
    """Return the Big Picture banner ID for ``game``, or None if it has none.

    The game's ID must be an unsigned 64-bit number; a custom shortcut's
    legacy ID takes its place when set.
    """
    if not _DIGITS.fullmatch(game.id):
        return None
    value = int(game.id)
    if value >= _UINT64_LIMIT:
        return None
    if game.legacy_id:
        value = game.legacy_id
    return ((value << 32) & _UINT64_MASK) | _LEGACY_SUFFIX


def save_images(
    grid_dir: str | Path, game: Game, style_name: str, art_style: ArtStyle
) -> list[Path]:
    """Write the game's final image into the grid directory.

    Banners are also written under the legacy Big Picture name. Returns the
    paths written.
    """
    grid = Path(grid_dir)
    data = game.overlay_image_bytes
    if data is None:
        data = game.clean_image_bytes or b""

    written: list[Path] = []
    main_path = grid / f"{game.original_id}{art_style.id_extension}{game.image_ext}"
    main_path.write_bytes(data)
    written.append(main_path)

    if style_name == BANNER:
        legacy = legacy_banner_id(game)
        if legacy is not None:
            legacy_path = grid / f"{legacy}{art_style.id_extension}{game.image_ext}"
            legacy_path.write_bytes(data)
            written.append(legacy_path)

    return written