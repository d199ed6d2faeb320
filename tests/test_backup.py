import glob
import os
import sys

import pytest

from gridart.artstyles import build_art_styles
from gridart.backup import (
    backup_game,
    filter_for_images,
    get_backup_path,
    insensitive_glob_pattern,
    load_existing,
    load_image,
    remove_existing,
)
from gridart.games import Game

STYLES = build_art_styles()
COVER = STYLES["Cover"]
BANNER = STYLES["Banner"]

EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


@pytest.fixture
def dirs(tmp_path):
    override = tmp_path / "games"
    grid = tmp_path / "grid"
    override.mkdir()
    (grid / "originals").mkdir(parents=True)
    return override, grid


def test_filter_for_images_keeps_known_extensions():
    paths = ["a.png", "b.jpg", "c.jpeg", "d.gif", "e.PNG", "f", "g.png.txt"]
    assert filter_for_images(paths) == ["a.png", "b.jpg", "c.jpeg"]


def test_insensitive_glob_pattern_brackets_letters(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    assert insensitive_glob_pattern("a1*") == "[aA]1*"


def test_insensitive_glob_pattern_unchanged_on_windows(monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    assert insensitive_glob_pattern("Half*Life") == "Half*Life"


def test_insensitive_glob_pattern_matches_other_case(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    target = tmp_path / "HALF.txt"
    target.write_bytes(b"x")
    pattern = insensitive_glob_pattern("half") + ".txt"
    found = glob.glob(os.path.join(glob.escape(str(tmp_path)), pattern))
    assert found == [str(target)]


def test_get_backup_path_uses_hash_of_overlay(tmp_path):
    game = Game(id="10", image_ext=".png")
    path = get_backup_path(tmp_path, game, COVER)
    assert path == tmp_path / "originals" / f"10p {EMPTY_SHA256}.png"


def test_get_backup_path_depends_on_overlay_bytes(tmp_path):
    first = Game(id="10", image_ext=".png", overlay_image_bytes=b"one")
    second = Game(id="10", image_ext=".png", overlay_image_bytes=b"two")
    same = Game(id="10", image_ext=".png", overlay_image_bytes=b"one")
    assert get_backup_path(tmp_path, first, COVER) != get_backup_path(tmp_path, second, COVER)
    assert get_backup_path(tmp_path, first, COVER) == get_backup_path(tmp_path, same, COVER)


def test_backup_game_writes_clean_bytes(dirs):
    _, grid = dirs
    game = Game(id="10", image_ext=".png", clean_image_bytes=b"clean", overlay_image_bytes=b"over")
    path = backup_game(grid, game, COVER)
    assert path == get_backup_path(grid, game, COVER)
    assert path.read_bytes() == b"clean"


def test_backup_game_without_image_writes_nothing(dirs):
    _, grid = dirs
    game = Game(id="10", image_ext=".png")
    assert backup_game(grid, game, COVER) is None
    assert list((grid / "originals").iterdir()) == []


def test_remove_existing_deletes_images_and_backups(dirs):
    _, grid = dirs
    for name in ["10p.png", "10p.jpg", "10p.txt", "10.png"]:
        (grid / name).write_bytes(b"x")
    for name in ["10p abc.png", "10p abc.txt"]:
        (grid / "originals" / name).write_bytes(b"x")

    removed = remove_existing(grid, "10", COVER)

    assert len(removed) == 3
    assert sorted(p.name for p in grid.iterdir() if p.is_file()) == ["10.png", "10p.txt"]
    assert [p.name for p in (grid / "originals").iterdir()] == ["10p abc.txt"]


def test_load_image_sets_fields(tmp_path):
    path = tmp_path / "picture.jpeg"
    path.write_bytes(b"bytes")
    game = Game(id="10")
    load_image(game, "somewhere", path)
    assert (game.image_ext, game.clean_image_bytes, game.image_source) == (".jpeg", b"bytes", "somewhere")


def test_load_image_missing_file_raises(tmp_path):
    game = Game(id="10")
    with pytest.raises(FileNotFoundError):
        load_image(game, "somewhere", tmp_path / "missing.png")
    assert game.clean_image_bytes is None


def test_load_existing_prefers_override_by_id(dirs):
    override, grid = dirs
    (override / "10p.png").write_bytes(b"override")
    (grid / "10p.png").write_bytes(b"manual")
    game = Game(id="10")
    load_existing(override, grid, game, COVER)
    assert game.clean_image_bytes == b"override"
    assert game.image_source == "local file in directory 'games'"


def test_load_existing_override_by_name(dirs):
    override, grid = dirs
    (override / "HALF-LIFE 2.cover.png").write_bytes(b"named")
    game = Game(id="220", name="Half-Life 2")
    load_existing(override, grid, game, COVER)
    assert game.clean_image_bytes == b"named"
    assert game.image_source == "local file in directory games/"
    assert game.image_ext == ".png"


def test_load_existing_converts_legacy_backup(dirs):
    override, grid = dirs
    legacy = grid / "10p (original).png"
    legacy.write_bytes(b"legacy")
    game = Game(id="10")
    load_existing(override, grid, game, COVER)
    assert game.clean_image_bytes == b"legacy"
    assert game.image_source == "legacy backup (now converted)"
    assert not legacy.exists()


def test_load_existing_manual_without_backup(dirs):
    override, grid = dirs
    (grid / "10p.png").write_bytes(b"manual")
    game = Game(id="10")
    load_existing(override, grid, game, COVER)
    assert game.clean_image_bytes == b"manual"
    assert game.image_source == "manual customization"
    assert game.overlay_image_bytes is None


def test_load_existing_restores_backup(dirs):
    override, grid = dirs
    (grid / "10p.png").write_bytes(b"overlaid")
    reference = Game(id="10", image_ext=".png", overlay_image_bytes=b"overlaid")
    get_backup_path(grid, reference, COVER).write_bytes(b"clean")

    game = Game(id="10")
    load_existing(override, grid, game, COVER)
    assert game.clean_image_bytes == b"clean"
    assert game.image_source == "backup"
    assert game.overlay_image_bytes is None


def test_load_existing_ignore_backup_keeps_manual(dirs):
    override, grid = dirs
    (grid / "10p.png").write_bytes(b"overlaid")
    reference = Game(id="10", image_ext=".png", overlay_image_bytes=b"overlaid")
    get_backup_path(grid, reference, COVER).write_bytes(b"clean")

    game = Game(id="10")
    load_existing(override, grid, game, COVER, ignore_backup=True)
    assert game.clean_image_bytes == b"overlaid"
    assert game.image_source == "manual customization"


def test_load_existing_ignore_manual_loads_nothing(dirs):
    override, grid = dirs
    (grid / "10p.png").write_bytes(b"manual")
    game = Game(id="10")
    load_existing(override, grid, game, COVER, ignore_manual=True)
    assert game.clean_image_bytes is None
    assert game.image_source == ""


def test_load_existing_uses_style_prefix(dirs):
    override, grid = dirs
    (grid / "10p.png").write_bytes(b"cover")
    game = Game(id="10")
    load_existing(override, grid, game, BANNER)
    assert game.clean_image_bytes is None