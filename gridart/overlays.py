"""Category overlays drawn over the game artwork."""

from __future__ import annotations

import io
import os
from pathlib import Path
from typing import Mapping

from PIL import Image

from gridart.artstyles import ArtStyle
from gridart.games import Game

_IMAGE_SUFFIXES = ("png", "jpg", "jpeg", "gif")
_JPEG_QUALITY = 95


def normalize_tag(tag: str) -> str:
    """Lower-case a category, drop trailing "s" and make it file-name safe."""
    name = tag.lower().rstrip("s")
    for char in "<>/":
        name = name.replace(char, "-")
    return name


def _strip_extension(filename: str) -> str:
    dot = filename.rfind(".")
    return filename[:dot] if dot >= 0 else filename


def load_overlays(
    directory: str | os.PathLike, art_styles: Mapping[str, ArtStyle]
) -> dict[str, Image.Image]:
    """Load the overlay images in ``directory``, keyed by normalised name.

    A missing directory yields no overlays; an unreadable image raises.
    """
    root = Path(directory)
    if not root.exists():
        return {}

    overlays: dict[str, Image.Image] = {}
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if not entry.name.endswith(_IMAGE_SUFFIXES) or not entry.is_file():
            continue

        with Image.open(entry) as image:
            image.load()
            loaded = image.copy()

        name = _strip_extension(entry.name)
        for style in art_styles.values():
            if name.endswith(style.name_extension):
                base = name[: len(name) - len(style.name_extension)]
                name = base.lower().rstrip("s") + style.name_extension

        overlays[name] = loaded
    return overlays


def _fit(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Scale ``image`` to ``size`` if both sides differ, else place it top-left."""
    width, height = size
    if image.width != width and image.height != height:
        return image.resize(size, Image.Resampling.BILINEAR)
    canvas = Image.new("RGBA", size, (0, 0, 0, 0))
    canvas.paste(image, (0, 0))
    return canvas


def _read_frames(source: Image.Image) -> tuple[list[Image.Image], list[float]]:
    frames = []
    durations = []
    for index in range(source.n_frames):
        source.seek(index)
        frames.append(source.convert("RGBA"))
        durations.append(source.info.get("duration", 0))
    return frames, durations


def _flatten(image: Image.Image) -> Image.Image:
    background = Image.new("RGBA", image.size, (0, 0, 0, 255))
    return Image.alpha_composite(background, image).convert("RGB")


def apply_overlay(
    game: Game, overlays: Mapping[str, Image.Image], art_style: ArtStyle
) -> bool:
    """Draw the overlays matching the game's categories over its image.

    The result is stored in ``game.overlay_image_bytes``. Returns whether
    an overlay was applied. Raises OSError if the image cannot be decoded.
    """
    if game.clean_image_bytes is None or not game.tags:
        return False

    source = Image.open(io.BytesIO(game.clean_image_bytes))
    source.load()
    animated = source.format == "PNG" and getattr(source, "n_frames", 1) > 1

    frames: list[Image.Image] = []
    durations: list[float] = []
    loop = 0
    still = None
    if animated:
        frames, durations = _read_frames(source)
        loop = source.info.get("loop", 0)
    else:
        still = source.convert("RGBA")

    applied = False
    for tag in game.tags:
        overlay = overlays.get(normalize_tag(tag) + art_style.name_extension)
        if overlay is None:
            continue
        layer = overlay.convert("RGBA")

        if animated:
            fitted = _fit(layer, frames[0].size)
            frames = [Image.alpha_composite(frame, fitted) for frame in frames]
        else:
            still = Image.alpha_composite(_fit(still, layer.size), layer)
        applied = True

    if not applied:
        return False

    buffer = io.BytesIO()
    if game.image_ext in (".jpg", ".jpeg"):
        base = frames[0] if animated else still
        _flatten(base).save(buffer, format="JPEG", quality=_JPEG_QUALITY)
    elif game.image_ext == ".png" and animated:
        frames[0].save(
            buffer,
            format="PNG",
            save_all=True,
            append_images=frames[1:],
            duration=durations,
            loop=loop,
        )
    elif game.image_ext == ".png":
        still.save(buffer, format="PNG")
    else:
        return False

    game.overlay_image_bytes = buffer.getvalue()
    return True