"""Records shared across the player: remote songs, helper replies, local tracks and lyrics."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

U32_MAX = 2**32 - 1

_MISSING: Any = object()


def _as_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be an object")
    return data


def _field(data: Mapping[str, Any], key: str, default: Any) -> Any:
    if key in data:
        return data[key]
    if default is _MISSING:
        raise ValueError(f"missing field {key!r}")
    return default


def _str_field(data: Mapping[str, Any], key: str, default: Any = _MISSING) -> str:
    value = _field(data, key, default)
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _u32_field(data: Mapping[str, Any], key: str) -> int:
    value = _field(data, key, 0)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= U32_MAX:
        raise ValueError(f"field {key!r} must be an unsigned 32-bit integer")
    return value


def _bool_field(data: Mapping[str, Any], key: str) -> bool:
    value = _field(data, key, False)
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean")
    return value


def _str_list_field(data: Mapping[str, Any], key: str, default: Any = _MISSING) -> list[str]:
    value = _field(data, key, default)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"field {key!r} must be a list of strings")
    return list(value)


def _str_map_field(data: Mapping[str, Any], key: str) -> dict[str, str]:
    value = _field(data, key, {})
    if not isinstance(value, Mapping) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise ValueError(f"field {key!r} must map strings to strings")
    return dict(value)


@dataclass
class RemoteSong:
    """A song found by an online search."""

    id: str
    name: str
    artist: str
    album: str = ""
    duration: int = 0
    source: str = ""
    ext: str = ""
    cover: str = ""
    url: str = ""
    extra: dict[str, str] = field(default_factory=dict)
    is_vip: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> RemoteSong:
        data = _as_mapping(data, "song")
        return cls(
            id=_str_field(data, "id"),
            name=_str_field(data, "name"),
            artist=_str_field(data, "artist"),
            album=_str_field(data, "album", ""),
            duration=_u32_field(data, "duration"),
            source=_str_field(data, "source", ""),
            ext=_str_field(data, "ext", ""),
            cover=_str_field(data, "cover", ""),
            url=_str_field(data, "url", ""),
            extra=_str_map_field(data, "extra"),
            is_vip=_bool_field(data, "is_vip"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "artist": self.artist,
            "album": self.album,
            "duration": self.duration,
            "source": self.source,
            "ext": self.ext,
            "cover": self.cover,
            "url": self.url,
            "extra": dict(self.extra),
            "is_vip": self.is_vip,
        }


@dataclass
class SearchResponse:
    """The helper's reply to a search."""

    songs: list[RemoteSong]
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> SearchResponse:
        data = _as_mapping(data, "search response")
        songs = _field(data, "songs", _MISSING)
        if not isinstance(songs, list):
            raise ValueError("field 'songs' must be a list")
        return cls(
            songs=[RemoteSong.from_dict(song) for song in songs],
            warnings=_str_list_field(data, "warnings", []),
        )


@dataclass
class DownloadResponse:
    """The helper's reply to a download."""

    path: Path
    filename: str
    status: str = ""
    lyric_path: Path | None = None
    warning: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> DownloadResponse:
        data = _as_mapping(data, "download response")
        lyric_path = data.get("lyric_path")
        if lyric_path is not None and not isinstance(lyric_path, str):
            raise ValueError("field 'lyric_path' must be a string or null")
        return cls(
            path=Path(_str_field(data, "path")),
            filename=_str_field(data, "filename"),
            status=_str_field(data, "status", ""),
            lyric_path=Path(lyric_path) if lyric_path is not None else None,
            warning=_str_field(data, "warning", ""),
        )


@dataclass
class LocalTrack:
    """An audio file found in the local library."""

    path: Path
    title: str
    artist: str
    album: str = ""
    duration: int = 0


@dataclass(frozen=True, order=True)
class LyricLine:
    """One lyric line; lines order by timestamp, then text."""

    timestamp_ms: int
    text: str


def format_duration(seconds: int) -> str:
    """Format seconds as MM:SS, or a placeholder when unknown."""
    if seconds == 0:
        return "--:--"
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02}:{secs:02}"