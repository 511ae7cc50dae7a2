"""Loading and parsing of LRC lyrics from side files or embedded tags."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any

from musictui.models import U32_MAX, LyricLine

MIN_COMPLETE_LYRIC_LINES = 3
PLAIN_LINE_INTERVAL_MS = 5_000

EXTERNAL_EXTENSIONS = (".lrc", ".txt", ".lyric")

EMBEDDED_KEYS = (
    "lyrics",
    "LYRICS",
    "lyric",
    "LYRIC",
    "syncedlyrics",
    "SYNCEDLYRICS",
    "unsyncedlyrics",
    "UNSYNCEDLYRICS",
    "description",
    "DESCRIPTION",
)

_FFPROBE = ("ffprobe", "-v", "quiet", "-print_format", "json", "-show_format", "-show_streams")
_DIGITS = frozenset("0123456789")


def load_lyrics(audio_path: Path | str) -> list[LyricLine]:
    """Lyrics for an audio file: a side file if complete, else the longer of side and embedded."""
    audio_path = Path(audio_path)
    external = load_external_lyrics(audio_path)
    if len(external) >= MIN_COMPLETE_LYRIC_LINES:
        return external
    embedded = load_embedded_lyrics(audio_path)
    return embedded if len(embedded) > len(external) else external


def load_external_lyrics(audio_path: Path | str) -> list[LyricLine]:
    audio_path = Path(audio_path)
    for extension in EXTERNAL_EXTENSIONS:
        try:
            content = audio_path.with_suffix(extension).read_text(encoding="utf-8")
        except (OSError, ValueError):
            continue
        return parse_lyrics(content)
    return []


def load_embedded_lyrics(audio_path: Path | str) -> list[LyricLine]:
    try:
        result = subprocess.run(
            [*_FFPROBE, str(audio_path)],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            check=False,
        )
    except OSError:
        return []
    if result.returncode != 0:
        return []
    try:
        probe = json.loads(result.stdout)
    except ValueError:
        return []
    content = extract_embedded_lyrics(probe)
    return parse_lyrics(content) if content is not None else []


def _find_in_tags(tags: Any) -> str | None:
    if not isinstance(tags, dict):
        return None
    for key in EMBEDDED_KEYS:
        value = tags.get(key)
        if isinstance(value, str):
            return value
    return None


def extract_embedded_lyrics(probe: Any) -> str | None:
    """Find lyrics text in ffprobe JSON: format tags first, then each stream's tags."""
    if not isinstance(probe, dict):
        return None
    fmt = probe.get("format")
    found = _find_in_tags(fmt.get("tags") if isinstance(fmt, dict) else None)
    if found is not None:
        return found
    streams = probe.get("streams")
    if isinstance(streams, list):
        for stream in streams:
            if isinstance(stream, dict):
                found = _find_in_tags(stream.get("tags"))
                if found is not None:
                    return found
    return None


def parse_lyrics(content: str) -> list[LyricLine]:
    """Parse timed LRC text; without any timed line, fall back to evenly spaced plain lines."""
    lines: list[LyricLine] = []
    for raw_line in content.split("\n"):
        line = raw_line.strip().lstrip("\ufeff")
        if not line:
            continue

        rest = line
        timestamps: list[int] = []
        while rest.startswith("["):
            tagged = rest[1:]
            end = tagged.find("]")
            if end < 0:
                break
            timestamp_ms = parse_timestamp(tagged[:end])
            if timestamp_ms is None:
                break
            timestamps.append(timestamp_ms)
            rest = tagged[end + 1:]

        text = strip_inline_timestamps(rest).strip()
        if not text or not timestamps:
            continue
        lines.extend(LyricLine(timestamp_ms, text) for timestamp_ms in timestamps)

    if not lines:
        return parse_plain_lyrics(content)
    return sorted(lines)


def strip_inline_timestamps(text: str) -> str:
    """Remove bracketed timestamps inside a line, keeping other bracketed text."""
    output: list[str] = []
    rest = text
    while (start := rest.find("[")) >= 0:
        output.append(rest[:start])
        tagged = rest[start + 1:]
        end = tagged.find("]")
        if end < 0:
            output.append(rest[start:])
            return "".join(output)
        if parse_timestamp(tagged[:end]) is not None:
            rest = tagged[end + 1:]
        else:
            output.append("[")
            rest = tagged
    output.append(rest)
    return "".join(output)


def parse_plain_lyrics(content: str) -> list[LyricLine]:
    texts = (line.strip() for line in content.split("\n"))
    return [
        LyricLine(min(index * PLAIN_LINE_INTERVAL_MS, U32_MAX), text)
        for index, text in enumerate(t for t in texts if t)
    ]


def _parse_u32(value: str) -> int | None:
    if value.startswith("+"):
        value = value[1:]
    if not value or not set(value) <= _DIGITS:
        return None
    number = int(value)
    return number if number <= U32_MAX else None


def _fraction_ms(fraction: str) -> int:
    digits = ""
    for char in fraction:
        if char not in _DIGITS or len(digits) == 3:
            break
        digits += char
    if not digits:
        return 0
    return int(digits) * 10 ** (3 - len(digits))


def parse_timestamp(tag: str) -> int | None:
    """Milliseconds for an [mm:ss.xx] or [hh:mm:ss.xx] tag body, or None."""
    parts = tag.split(":")
    if len(parts) == 2:
        hours: int | None = 0
        minutes = _parse_u32(parts[0])
        seconds_part = parts[1]
    elif len(parts) == 3:
        hours = _parse_u32(parts[0])
        minutes = _parse_u32(parts[1])
        seconds_part = parts[2]
    else:
        return None
    if hours is None or minutes is None:
        return None

    seconds_text, dot, fraction = seconds_part.partition(".")
    millis = _fraction_ms(fraction) if dot else 0
    seconds = _parse_u32(seconds_text)
    if seconds is None:
        return None

    total = ((hours * 60 + minutes) * 60 + seconds) * 1000 + millis
    return total if total <= U32_MAX else None