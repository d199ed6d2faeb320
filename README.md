# gridart

`gridart` is a library for managing the artwork that Steam shows for each game
in a library. Steam shows four kinds of artwork: the wide banner, the tall
cover, the hero image and the logo.

The library can:

- locate the local Steam installation and its users;
- collect each user's games;
- reuse images that are already on disk;
- draw category overlays, such as a "favorites" badge, over the artwork;
- write the results into the user's `grid` directory.

## Finding users and games

```python
from gridart.users import get_steam_installation, get_users
from gridart.games import get_games

steam_dir = get_steam_installation("")  # empty string: detect automatically
for user in get_users(steam_dir):
    games = get_games(user, False, "", "")
    for game_id, game in games.items():
        print(game_id, game.name, game.tags)
```

### Locating the installation

`get_steam_installation` accepts an explicit directory. That directory must
exist, or the function raises `SteamNotFoundError`.

If you pass an empty string, it tries these places in order and returns the
first one that exists:

1. `~/.local/share/Steam`
2. `~/.steam/steam`
3. `~/Library/Application Support/Steam`
4. `%ProgramFiles(x86)%\Steam`
5. `%ProgramFiles%\Steam`

It raises `SteamNotFoundError` when none of them exists.

### Users

`get_users` reads every folder under `userdata` and returns a list of `User`
objects. Each `User` has `name`, `steam_id32`, `steam_id64` and `directory`.

- The `anonymous` folder is skipped.
- Folders without `config/localconfig.vdf` are skipped.
- For each user, `get_users` creates `config/grid` and makes it writable.
- It raises `ValueError` when a config file has no `PersonaName`.

`steam_id64` converts a 32-bit account ID string to its 64-bit form.

### Games

`get_games(user, non_steam_only, app_ids, skip_category)` returns a dict of
`Game` objects keyed by ID.

- `app_ids` is a comma separated list. When given, it replaces discovery: only
  those IDs are returned, without names.
- Otherwise, games come from three places:
  - the public profile's game list;
  - the categories in `7/remote/sharedconfig.vdf`;
  - non-Steam shortcuts in `config/shortcuts.vdf`.
- `non_steam_only` keeps only the shortcuts.
- `skip_category` drops every game that has a tag containing that text. The
  match ignores case.

The profile is downloaded by `get_profile`, which raises `ProfileNotFoundError`
for a missing or private profile. `get_games` silently skips a profile it
cannot fetch.

The parsers also work on data you have already read:

- `parse_profile_games`
- `parse_shared_config`
- `parse_shortcuts`

A shortcut gets these values:

- its ID, read from the file;
- `custom=True`;
- a `legacy_id`, computed as `crc32(target + name) | 0x80000000`.

## Art styles

`build_art_styles` returns a dict of `ArtStyle` values keyed by `"Banner"`,
`"Cover"`, `"Hero"` and `"Logo"`.

Each style has these fields:

| Field | Meaning |
| --- | --- |
| `id_extension` | suffix after the game ID: `""`, `"p"`, `"_hero"`, `"_logo"` |
| `name_extension` | suffix after a game or category name: `.banner`, `.cover`, `.hero`, `.logo` |
| `steam_url_extension` | the official artwork file name |
| `steamgriddb_filter` | a query string built from the style, type, nsfw, humor and dimension options |

The logo filter has no dimensions. Any style can be skipped. If every style is
skipped, `build_art_styles` raises `ValueError`.

```python
from gridart.artstyles import build_art_styles

styles = build_art_styles(
    styles="alternate",
    logo_styles="official",
    hero_styles="alternate",
    types="static",
    nsfw="false",
    humor="false",
    banner_dimensions="460x215,920x430",
    cover_dimensions="600x900,342x482,660x930",
    hero_dimensions="1920x620,3840x1240,1600x650",
    skip_banner=False,
    skip_cover=False,
    skip_hero=True,
    skip_logo=True,
)
```

## Existing images, overlays and saving

```python
from pathlib import Path
from gridart.backup import load_existing, remove_existing, backup_game
from gridart.overlays import load_overlays, apply_overlay
from gridart.artstyles import save_images

overlays = load_overlays(Path("overlays by category"), styles)
grid_dir = Path(user.directory) / "config" / "grid"
(grid_dir / "originals").mkdir(parents=True, exist_ok=True)

for game in games.values():
    for style_name, art_style in styles.items():
        game.image_source = ""
        game.image_ext = ""
        game.clean_image_bytes = None
        game.overlay_image_bytes = None

        load_existing(Path("games"), grid_dir, game, art_style, False, False)
        remove_existing(grid_dir, game.id, art_style)
        if not game.image_source:
            continue  # nothing to work with for this style

        apply_overlay(game, overlays, art_style)
        backup_game(grid_dir, game, art_style)
        save_images(grid_dir, game, style_name, art_style)
```

### Loading existing images

`load_existing` stops at the first of these sources that it finds:

1. An override file `<id><id_extension>.*` in the override directory.
2. An override file named after the game in the override directory. Runs of
   non-word characters in the name become `*`. Letters match in either case,
   except on Windows, where the file system already ignores case.
3. A legacy `<id><id_extension> (original)*` backup in the grid directory. It is
   loaded and then deleted.
4. A `.png`, `.jpg` or `.jpeg` image in the grid directory, unless
   `ignore_manual` is set. In this case, and unless `ignore_backup` is set, the
   function then looks for a clean backup of that image in `originals/`. If one
   exists, the backup replaces the image.

After loading, `game.image_source` says where the image came from.

### Backups and cleanup

`get_backup_path` names a backup `originals/<id><id_extension> <sha256>.<ext>`.
The hash is taken of the overlaid image. A later run can therefore tell images
this library wrote apart from your own edits.

`backup_game` writes the clean image there.

`remove_existing` deletes the game's current images and backups for one style
and returns the deleted paths.

`filter_for_images` keeps only `.png`, `.jpg` and `.jpeg` paths.

`insensitive_glob_pattern` builds the pattern that matches letters in either
case.

### Overlays

`load_overlays` reads the `png`, `jpg`, `jpeg` and `gif` files in a directory.
A missing directory gives an empty dict.

Overlay names work like this:

- The file name without its extension is the category.
- If the name ends with a style's `name_extension`, the part before that suffix
  is lower-cased and loses its trailing `s`.
- Examples: `favorites.png`, `Favorites.cover.png`, `favorites.hero.png`.

`apply_overlay` looks up each of the game's tags. A tag is turned into a key by
`normalize_tag`: it is lower-cased, loses its trailing `s`, and has `<`, `>` and
`/` replaced by `-`. The style's `name_extension` is then appended to form the
key.

How an overlay is drawn depends on the image:

- **Still images.** The game image is fitted to the overlay's size and the
  overlay is drawn on top. The image is scaled when both sides differ;
  otherwise it is placed at the top-left.
- **Animated PNG.** The overlay is fitted to the first frame and drawn on
  every frame.

The result depends on the file type:

| `image_ext` | Result |
| --- | --- |
| `.png` | PNG, or animated PNG for animated input |
| `.jpg` / `.jpeg` | JPEG at quality 95 over a black background |
| anything else | nothing is written |

The result is stored in `game.overlay_image_bytes`. The function returns
whether an overlay was applied. It raises `OSError` when the image cannot be
decoded.

### Saving

`save_images` writes the overlaid image, or the clean image when there is no
overlay, to `<original_id><id_extension><ext>` in the grid directory.

For banners it also writes a copy under the legacy Big Picture name. That name
comes from `legacy_banner_id`: `(id << 32) | 0x02000000`, where `id` is the
shortcut's `legacy_id` if set and the numeric game ID otherwise. No legacy copy
is written when the game ID is not an unsigned 64-bit number.

The function returns the paths it wrote.

## What this package does not do

The package does not download artwork. It does not fetch images from Steam's
servers, SteamGridDB, IGDB or a web search, even though each `ArtStyle` carries
the file name and filter such a download would use. It does not look up the
names of games that have none.

There is no command-line program. The steps above are combined in your own
code.

## Running the tests

Install the `test` extra, then run `pytest` from the project root.