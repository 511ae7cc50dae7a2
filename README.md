# musictui

A curses music player for your local library. It can also search online
sources and download songs through an external helper program. The screen
text is in Chinese.

- Finds the audio files in your music directory and its subdirectories (mp3,
  flac, m4a, ogg, wav, wma, aac, dsf, dff). Title, artist, album and duration
  are read with `ffprobe`. When that fails, the file name is used as the title
  and the artist is "Unknown Artist". Tracks are sorted by title, then artist,
  ignoring case.
- Plays tracks with `ffplay`, one at a time.
- Shows synced lyrics. It first looks for a sidecar file with the same name as
  the track and the extension `.lrc`, `.txt` or `.lyric`. If that file has
  fewer than three lines, it also reads the lyrics embedded in the file's tags
  through `ffprobe`, and uses whichever of the two has more lines. Lyrics
  without timestamps are shown one line every five seconds.
- Searches by song or by artist across the configured sources. The chosen
  result can be downloaded into your music directory, and the library is
  rescanned afterwards.

## Requirements

- Python 3.11 or newer, with the standard `curses` module
- `ffplay` and `ffprobe` (both come with FFmpeg) on your `PATH`
- The `music-dl-helper` program, needed only to search and download

## Installation

```
pip install .
```

## Usage

```
musictui
```

The screen has a sidebar, a search bar, a grid of cards (local tracks or
search results), a "now playing" box, a lyrics box that follows playback, and
a status line.

To download one fixed test track into `/tmp/music-tui-download-test` and print
where it was saved:

```
musictui download-test
```

If the helper fails, the error goes to standard error and the exit status is 1.

### Keys

| Key             | Action                                          |
|-----------------|-------------------------------------------------|
| `Tab`           | switch between local library and search results |
| `←→↑↓` / `hjkl` | move within the card grid                       |
| `Enter`         | search (search view) / play (library view)      |
| `d`             | download the selected search result             |
| `a`             | toggle song / artist search mode                |
| `p`             | play the selected local track                   |
| `s`             | stop playback                                   |
| `r`             | rescan the music directory                      |
| `Backspace`     | delete a character from the query (search view) |
| `q`             | quit                                            |

Other printable characters are added to the query when the search view is
active. The letters bound above act as commands and cannot be typed into the
query.

A query that starts with `@`, `artist:` or `作者:` is always an artist search.

## Configuration

On first start a configuration file with the defaults is written to
`~/.config/music-tui/config.toml`:

```toml
music_dir = "/home/you/Music"
helper_path = "helper/music-dl-helper"
default_sources = ["netease", "qq", "kugou", "kuwo", "migu", "qianqian", "soda"]
embed_cover = true
embed_lyrics = true

[source_cookies]
netease = "placeholder"
```

Any key left out keeps its default. If the file cannot be read or holds a
value of the wrong type, all defaults are used. `music_dir` is created if it
does not exist.

If `helper_path` is relative, the program looks for it in the current
directory, then in the directory of the running program, then two levels above
that. On Windows a path without an extension also matches the same name with
`.exe`. The `source_cookies` table is passed to the helper as JSON in the
`MUSIC_TUI_SOURCE_COOKIES` environment variable. `embed_cover` and
`embed_lyrics` are passed to the helper when downloading.

## What it does not do

The package does not include the `music-dl-helper` program. Search and
download only work with a helper built separately and placed where
`helper_path` points. Without it, the library and playback still work, and
the status line says that the helper was not found.

## Library use

The parts of the program can also be used on their own:

- `musictui.lyrics.parse_lyrics(content)` parses LRC text into a sorted list
  of `LyricLine(timestamp_ms, text)`, and `parse_timestamp("01:02.50")`
  returns milliseconds or `None`. `load_lyrics(path)` finds the lyrics for an
  audio file.
- `musictui.scanner.scan_music_dir(root)` returns a sorted list of
  `LocalTrack`.
- `musictui.helper.MusicDl.from_config(config)` drives the helper. Its
  `search(keyword, mode, sources)` returns a `SearchResult`, and
  `download(song, out_dir, cover, lyrics)` returns a `DownloadResponse`. Both
  raise `HelperError` on failure.
- `musictui.player.Player` plays a file with `play(path)` and stops with
  `stop()`. It can be used as a context manager.
- `musictui.config.AppConfig.load(path)` reads a configuration file.
- `musictui.app.App` holds the application state. Its constructor also accepts
  `helper`, `player` and `scan` keyword arguments to replace the defaults.