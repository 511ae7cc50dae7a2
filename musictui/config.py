"""Application configuration stored as TOML in the user's config directory."""

from __future__ import annotations

import os
import sys
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

DEFAULT_SOURCES = ("netease", "qq", "kugou", "kuwo", "migu", "qianqian", "soda")


def home_dir() -> Path:
    """The user's home directory from HOME, or the current directory."""
    home = os.environ.get("HOME")
    return Path(home) if home is not None else Path(".")


def helper_binary_name() -> str:
    return "music-dl-helper.exe" if os.name == "nt" else "music-dl-helper"


def config_path() -> Path:
    return home_dir() / ".config" / "music-tui" / "config.toml"


@dataclass
class AppConfig:
    """User settings; every field has a default."""

    music_dir: Path = field(default_factory=lambda: home_dir() / "Music")
    helper_path: Path = field(default_factory=lambda: Path("helper") / helper_binary_name())
    default_sources: list[str] = field(default_factory=lambda: list(DEFAULT_SOURCES))
    embed_cover: bool = True
    embed_lyrics: bool = True
    source_cookies: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> AppConfig:
        """Build a config from a table; absent keys keep their defaults."""
        if not isinstance(data, Mapping):
            raise ValueError("configuration must be a table")
        values: dict[str, Any] = {}
        for key in ("music_dir", "helper_path"):
            if key in data:
                if not isinstance(data[key], str):
                    raise ValueError(f"{key} must be a string")
                values[key] = Path(data[key])
        if "default_sources" in data:
            sources = data["default_sources"]
            if not isinstance(sources, list) or not all(isinstance(s, str) for s in sources):
                raise ValueError("default_sources must be a list of strings")
            values["default_sources"] = list(sources)
        for key in ("embed_cover", "embed_lyrics"):
            if key in data:
                if not isinstance(data[key], bool):
                    raise ValueError(f"{key} must be a boolean")
                values[key] = data[key]
        if "source_cookies" in data:
            cookies = data["source_cookies"]
            if not isinstance(cookies, Mapping) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in cookies.items()
            ):
                raise ValueError("source_cookies must map strings to strings")
            values["source_cookies"] = dict(cookies)
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {
            "music_dir": str(self.music_dir),
            "helper_path": str(self.helper_path),
            "default_sources": list(self.default_sources),
            "embed_cover": self.embed_cover,
            "embed_lyrics": self.embed_lyrics,
            "source_cookies": dict(self.source_cookies),
        }

    @classmethod
    def load(cls, path: Path | str | None = None) -> AppConfig:
        """Read the config file, writing defaults when it does not exist yet.

        An unreadable or invalid file yields the defaults.
        """
        path = Path(path) if path is not None else config_path()
        if not path.exists():
            default = cls()
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(tomli_w.dumps(default.to_dict()), encoding="utf-8")
            except OSError:
                pass
            return default
        try:
            return cls.from_dict(tomllib.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError):
            return cls()

    def ensure_dirs(self) -> None:
        try:
            self.music_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass


def _candidate_dirs() -> list[Path]:
    dirs: list[Path] = []
    try:
        dirs.append(Path.cwd())
    except OSError:
        pass
    if sys.argv and sys.argv[0]:
        try:
            exe_dir = Path(sys.argv[0]).resolve().parent
        except OSError:
            exe_dir = None
        if exe_dir is not None:
            dirs.append(exe_dir)
            dirs.append(exe_dir / ".." / "..")
    return dirs


def resolve_helper_path(path: Path | str) -> Path:
    """Locate a relative helper path near the working directory or the program."""
    path = Path(path)
    if path.is_absolute():
        return path
    for base in _candidate_dirs():
        candidate = base / path
        if candidate.exists():
            return candidate
        if os.name == "nt" and not candidate.suffix:
            windows_candidate = candidate.with_suffix(".exe")
            if windows_candidate.exists():
                return windows_candidate
    return path