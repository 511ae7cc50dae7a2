"""Client for the external music-dl helper that searches and downloads songs."""

from __future__ import annotations

import json
import os
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from musictui.config import AppConfig, resolve_helper_path
from musictui.models import DownloadResponse, RemoteSong, SearchResponse

SEARCH_LIMIT = 120
COOKIES_ENV = "MUSIC_TUI_SOURCE_COOKIES"


class HelperError(RuntimeError):
    """The helper could not be run or gave an unusable reply."""


@dataclass
class SearchResult:
    """Songs found by a search, with warnings from sources that failed."""

    songs: list[RemoteSong] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _compact_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


@dataclass(frozen=True)
class MusicDl:
    """Runs the helper program and decodes its JSON replies."""

    helper_path: Path
    source_cookies_json: str = "{}"

    @classmethod
    def from_config(cls, config: AppConfig) -> MusicDl:
        return cls(
            helper_path=resolve_helper_path(config.helper_path),
            source_cookies_json=_compact_json(config.source_cookies),
        )

    def is_ready(self) -> bool:
        return self.helper_path.exists()

    def search(self, keyword: str, mode: str, sources: Sequence[str]) -> SearchResult:
        """Search all given sources; raises HelperError on failure."""
        args = [
            "search",
            "--keyword",
            keyword,
            "--mode",
            mode,
            "--limit",
            str(SEARCH_LIMIT),
        ]
        if sources:
            args += ["--sources", ",".join(sources)]
        response = self._run_json(args, SearchResponse.from_dict)
        return SearchResult(songs=response.songs, warnings=response.warnings)

    def download(
        self, song: RemoteSong, out_dir: Path | str, cover: bool, lyrics: bool
    ) -> DownloadResponse:
        """Download a song into out_dir; raises HelperError on failure."""
        args = [
            "download",
            "--id",
            song.id,
            "--source",
            song.source,
            "--name",
            song.name,
            "--artist",
            song.artist,
            "--album",
            song.album,
            "--cover-url",
            song.cover,
            "--url",
            song.url,
            f"--cover={str(cover).lower()}",
            f"--lyrics={str(lyrics).lower()}",
            "--outdir",
            str(out_dir),
            "--extra",
            _compact_json(song.extra),
        ]
        return self._run_json(args, DownloadResponse.from_dict)

    def _run_json(self, args: list[str], decode):
        env = dict(os.environ)
        env[COOKIES_ENV] = self.source_cookies_json
        try:
            result = subprocess.run(
                [str(self.helper_path), *args],
                stdin=subprocess.DEVNULL,
                capture_output=True,
                env=env,
                check=False,
            )
        except OSError as err:
            raise HelperError(f"failed to run {self.helper_path}: {err}") from err

        stdout = result.stdout.decode("utf-8", errors="replace")
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            detail = stderr or stdout.strip()
            raise HelperError(detail or f"helper exited with status {result.returncode}")

        try:
            return decode(json.loads(stdout))
        except ValueError as err:
            raise HelperError(f"invalid helper JSON: {err}; body={stdout}") from err