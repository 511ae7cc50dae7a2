import curses
import time
from pathlib import Path

import pytest

from musictui.app import App, Focus, SearchMode
from musictui.cli import card_columns, handle_key, main, run_app, run_download_test
from musictui.config import AppConfig
from musictui.helper import HelperError, MusicDl
from musictui.models import LocalTrack, RemoteSong


def make_app(tmp_path):
    config = AppConfig(music_dir=tmp_path / "music", helper_path=tmp_path / "missing-helper")
    helper = MusicDl(helper_path=tmp_path / "missing-helper")
    app = App(config, helper=helper, scan=lambda directory: [])
    wait_for_events(app, lambda: app.status.startswith("本地曲库已加载"))
    return app


def wait_for_events(app, condition, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        app.process_worker_events()
        if condition():
            return
        time.sleep(0.01)


def songs(count):
    return [RemoteSong(id=str(i), name=f"song{i}", artist="artist") for i in range(count)]


class FakeScreen:
    def __init__(self, keys, rows=40, cols=120):
        self.keys = list(keys)
        self.rows = rows
        self.cols = cols
        self.refreshes = 0

    def getmaxyx(self):
        return self.rows, self.cols

    def erase(self):
        pass

    def addstr(self, y, x, text, attr=0):
        pass

    def refresh(self):
        self.refreshes += 1

    def timeout(self, ms):
        self.timeout_ms = ms

    def get_wch(self):
        if not self.keys:
            return "q"
        return self.keys.pop(0)


def test_card_columns_narrow_terminal_is_one():
    assert card_columns(0) == 1
    assert card_columns(24) == 1


def test_card_columns_wide_terminal_caps_at_three():
    assert card_columns(1000) == 3


def test_card_columns_bounded_and_monotonic():
    values = [card_columns(width) for width in range(0, 400)]
    assert all(1 <= v <= 3 for v in values)
    assert values == sorted(values)


def test_q_quits(tmp_path):
    app = make_app(tmp_path)
    assert handle_key(app, "q", 1) is False


def test_tab_toggles_focus(tmp_path):
    app = make_app(tmp_path)
    assert app.focus is Focus.SEARCH
    assert handle_key(app, "\t", 1) is True
    assert app.focus is Focus.LIBRARY
    handle_key(app, "\t", 1)
    assert app.focus is Focus.SEARCH


def test_typing_edits_query_only_in_search_focus(tmp_path):
    app = make_app(tmp_path)
    for key in "xyz":
        handle_key(app, key, 1)
    assert app.query == "xyz"
    handle_key(app, curses.KEY_BACKSPACE, 1)
    assert app.query == "xy"
    handle_key(app, "\x7f", 1)
    assert app.query == "x"
    app.focus = Focus.LIBRARY
    handle_key(app, "z", 1)
    handle_key(app, "\x7f", 1)
    assert app.query == "x"


def test_command_letters_are_not_typed(tmp_path):
    app = make_app(tmp_path)
    handle_key(app, "a", 1)
    assert app.query == ""
    assert app.search_mode is SearchMode.ARTIST
    assert app.status == "搜索模式: 作者"


def test_navigation_moves_selection(tmp_path):
    app = make_app(tmp_path)
    app.search_results = songs(10)
    app.search_selected = 0
    handle_key(app, curses.KEY_RIGHT, 3)
    assert app.search_selected == 1
    handle_key(app, "j", 3)
    assert app.search_selected == 4
    handle_key(app, curses.KEY_UP, 3)
    assert app.search_selected == 1
    handle_key(app, "h", 3)
    handle_key(app, "h", 3)
    assert app.search_selected == 0


def test_navigation_in_library_focus(tmp_path):
    app = make_app(tmp_path)
    app.focus = Focus.LIBRARY
    app.library = [LocalTrack(path=tmp_path / f"{i}.mp3", title=str(i), artist="a") for i in range(3)]
    app.library_selected = 0
    handle_key(app, curses.KEY_DOWN, 2)
    assert app.library_selected == 2
    handle_key(app, "l", 2)
    assert app.library_selected == 2


def test_stop_key_sets_status(tmp_path):
    app = make_app(tmp_path)
    handle_key(app, "s", 1)
    assert app.status == "已停止播放"
    assert app.player.current() is None


def test_play_without_selection(tmp_path):
    app = make_app(tmp_path)
    handle_key(app, "p", 1)
    assert app.status == "没有选中的本地歌曲"


def test_download_without_helper(tmp_path):
    app = make_app(tmp_path)
    handle_key(app, "d", 1)
    assert app.status.startswith("无法下载")
    assert app.busy is False


def test_enter_with_empty_query_does_nothing(tmp_path):
    app = make_app(tmp_path)
    before = app.status
    handle_key(app, "\n", 1)
    assert app.busy is False
    assert app.status == before


def test_enter_searches_and_reports_failure(tmp_path):
    app = make_app(tmp_path)
    app.query = "xyz"
    handle_key(app, "\n", 1)
    assert app.busy is True
    wait_for_events(app, lambda: not app.busy)
    assert app.busy is False
    assert app.status.startswith("搜索失败: ")


def test_run_app_processes_keys_until_quit(tmp_path):
    app = make_app(tmp_path)
    screen = FakeScreen(["x", "\t", "q", "y"])
    run_app(screen, app)
    assert app.query == "x"
    assert app.focus is Focus.LIBRARY
    assert screen.keys == ["y"]
    assert screen.refreshes == 3


def test_run_download_test_without_helper_raises(tmp_path):
    config = AppConfig(music_dir=tmp_path, helper_path=tmp_path / "missing-helper")
    with pytest.raises(HelperError):
        run_download_test(config)


def test_main_download_test_reports_error(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    assert main(["download-test"]) == 1
    assert capsys.readouterr().err.startswith("Error: ")
    assert (tmp_path / ".config" / "music-tui" / "config.toml").exists()