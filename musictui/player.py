"""Playback of local files through an external ffplay process."""

from __future__ import annotations

import subprocess
import time
from pathlib import Path


class Player:
    """Plays one file at a time with ffplay."""

    def __init__(self) -> None:
        self._process: subprocess.Popen | None = None
        self._current: str | None = None
        self._started_at: float | None = None

    def play(self, path: Path | str) -> None:
        """Stop any playback and start playing path; raises RuntimeError if ffplay cannot start."""
        self.stop()
        try:
            process = subprocess.Popen(
                ["ffplay", "-nodisp", "-autoexit", "-loglevel", "error", str(path)],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as err:
            raise RuntimeError(f"failed to start ffplay: {err}") from err
        self._current = str(path)
        self._started_at = time.monotonic()
        self._process = process

    def stop(self) -> None:
        process, self._process = self._process, None
        if process is not None:
            try:
                process.kill()
            except OSError:
                pass
            try:
                process.wait()
            except OSError:
                pass
        self._current = None
        self._started_at = None

    def current(self) -> str | None:
        """The path being played, if any."""
        return self._current

    def elapsed(self) -> float:
        """Seconds since playback started, or 0.0 when stopped."""
        if self._started_at is None:
            return 0.0
        return time.monotonic() - self._started_at

    def __enter__(self) -> Player:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def __del__(self) -> None:
        if getattr(self, "_process", None) is not None:
            self.stop()