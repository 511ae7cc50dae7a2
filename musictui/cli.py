"""Terminal entry point: the curses event loop, key bindings and a download self-test."""

from __future__ import annotations

import curses
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from musictui.app import App, Focus
from musictui.config import AppConfig
from musictui.helper import HelperError, MusicDl
from musictui.models import RemoteSong
from musictui.ui import CARD_MIN_WIDTH, SIDEBAR_WIDTH, render

POLL_INTERVAL_MS = 100
DOWNLOAD_TEST_DIR = Path("/tmp/music-tui-download-test")

_ENTER_KEYS = ("\n", "\r", curses.KEY_ENTER)
_BACKSPACE_KEYS = ("\x7f", "\b", curses.KEY_BACKSPACE)
_LEFT_KEYS = (curses.KEY_LEFT, "h")
_RIGHT_KEYS = (curses.KEY_RIGHT, "l")
_UP_KEYS = (curses.KEY_UP, "k")
_DOWN_KEYS = (curses.KEY_DOWN, "j")


def card_columns(width: int) -> int:
    """Number of card columns (1 to 3) a terminal of the given width shows."""
    main_width = max(width - SIDEBAR_WIDTH, 0)
    cards_width = main_width * 72 // 100
    return min(max(max(cards_width - 4, 0) // CARD_MIN_WIDTH, 1), 3)


def handle_key(app: App, key: str | int, columns: int) -> bool:
    """Apply one key press to the app; returns False when the user asks to quit."""
    if key == "q":
        return False
    if key == "\t":
        app.focus = Focus.SEARCH if app.focus is Focus.LIBRARY else Focus.LIBRARY
    elif key in _LEFT_KEYS:
        app.move_left()
    elif key in _RIGHT_KEYS:
        app.move_right()
    elif key in _UP_KEYS:
        app.move_up(columns)
    elif key in _DOWN_KEYS:
        app.move_down(columns)
    elif key in _ENTER_KEYS:
        if app.focus is Focus.LIBRARY:
            app.play_selected_local()
        else:
            app.search()
    elif key == "d":
        app.download_selected()
    elif key == "a":
        app.toggle_search_mode()
    elif key == "p":
        app.play_selected_local()
    elif key == "s":
        app.player.stop()
        app.status = "已停止播放"
    elif key == "r":
        app.refresh_library()
    elif key in _BACKSPACE_KEYS:
        if app.focus is Focus.SEARCH:
            app.query = app.query[:-1]
    elif isinstance(key, str) and len(key) == 1 and key.isprintable():
        if app.focus is Focus.SEARCH:
            app.query += key
    return True


def run_app(screen: Any, app: App) -> None:
    """Draw and react to keys until the user quits."""
    screen.timeout(POLL_INTERVAL_MS)
    while True:
        app.process_worker_events()
        render(screen, app)
        screen.refresh()
        try:
            key = screen.get_wch()
        except curses.error:
            continue
        _, width = screen.getmaxyx()
        if not handle_key(app, key, card_columns(width)):
            return


def run_download_test(config: AppConfig | None = None) -> Path:
    """Download a fixed song through the helper and report where it went."""
    config = config if config is not None else AppConfig.load()
    helper = MusicDl.from_config(config)
    song = RemoteSong(
        id="3378803529",
        name="test",
        artist="FiveY",
        album="test",
        duration=170,
        source="netease",
        extra={"song_id": "3378803529"},
    )
    result = helper.download(song, DOWNLOAD_TEST_DIR, False, False)
    print(f"downloaded: {result.path}")
    return result.path


def _session(screen: Any, config: AppConfig) -> None:
    try:
        curses.raw()
    except curses.error:
        pass
    try:
        curses.curs_set(0)
    except curses.error:
        pass
    screen.keypad(True)
    app = App(config)
    try:
        run_app(screen, app)
    finally:
        app.player.stop()


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if args[:1] == ["download-test"]:
        try:
            run_download_test()
        except HelperError as err:
            print(f"Error: {err}", file=sys.stderr)
            return 1
        return 0

    config = AppConfig.load()
    config.ensure_dirs()
    curses.wrapper(_session, config)
    return 0


if __name__ == "__main__":
    sys.exit(main())