"""Discovery of audio files in the music directory and reading of their tags."""

from __future__ import annotations

import json
import math
import subprocess
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from musictui.models import U32_MAX, LocalTrack

AUDIO_EXTENSIONS = frozenset({"mp3", "flac", "m4a", "ogg", "wav", "wma", "aac", "dsf", "dff"})
UNKNOWN_ARTIST = "Unknown Artist"

_FFPROBE = ("ffprobe", "-v", "quiet", "-print_format", "json", "-show_format", "-show_streams")


def scan_music_dir(root: Path | str) -> list[LocalTrack]:
    """All audio tracks under root, sorted by title then artist, ignoring case."""
    tracks = [probe_track(path) for path in collect_audio_files(root)]
    tracks.sort(key=lambda t: (t.title.lower(), t.artist.lower()))
    return tracks


def _walk_audio(directory: Path) -> Iterator[Path]:
    try:
        entries = list(directory.iterdir())
    except OSError:
        return
    for path in entries:
        if path.is_dir():
            yield from _walk_audio(path)
        elif is_audio_file(path):
            yield path


def collect_audio_files(directory: Path | str) -> list[Path]:
    """Audio files found recursively; unreadable directories are skipped."""
    return list(_walk_audio(Path(directory)))


def is_audio_file(path: Path | str) -> bool:
    extension = Path(path).suffix[1:]
    return extension.isascii() and extension.lower() in AUDIO_EXTENSIONS


def probe_track(path: Path | str) -> LocalTrack:
    """Read a track's tags with ffprobe, falling back to the file name."""
    path = Path(path)
    try:
        result = subprocess.run(
            [*_FFPROBE, str(path)],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            check=False,
        )
    except OSError:
        return fallback_track(path)
    if result.returncode == 0:
        try:
            probe = json.loads(result.stdout)
        except ValueError:
            return fallback_track(path)
        return track_from_probe(path, probe)
    return fallback_track(path)


def _tag(tags: Any, key: str) -> str | None:
    if not isinstance(tags, dict):
        return None
    value = tags[key] if key in tags else tags.get(key.upper())
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _duration_seconds(raw: Any) -> int:
    if not isinstance(raw, str) or raw != raw.strip() or "_" in raw:
        return 0
    try:
        value = float(raw)
    except ValueError:
        return 0
    if math.isnan(value):
        return 0
    return int(min(max(value, 0.0), float(U32_MAX)))


def track_from_probe(path: Path | str, probe: Any) -> LocalTrack:
    path = Path(path)
    fmt = probe.get("format") if isinstance(probe, dict) else None
    fmt = fmt if isinstance(fmt, dict) else {}
    tags = fmt.get("tags")
    return LocalTrack(
        path=path,
        title=_tag(tags, "title") or _file_stem(path),
        artist=_tag(tags, "artist") or UNKNOWN_ARTIST,
        album=_tag(tags, "album") or "",
        duration=_duration_seconds(fmt.get("duration")),
    )


def fallback_track(path: Path | str) -> LocalTrack:
    path = Path(path)
    return LocalTrack(path=path, title=_file_stem(path), artist=UNKNOWN_ARTIST)


def _file_stem(path: Path) -> str:
    return path.stem or "Unknown"