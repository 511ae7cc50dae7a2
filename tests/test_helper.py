import json
import sys

import pytest

from musictui.config import AppConfig
from musictui.helper import HelperError, MusicDl, SearchResult
from musictui.models import RemoteSong

FAKE_HELPER = """#!{python}
import json, os, sys
from pathlib import Path
here = Path(__file__).resolve().parent
(here / "record.json").write_text(json.dumps({{
    "argv": sys.argv[1:],
    "cookies": os.environ.get("MUSIC_TUI_SOURCE_COOKIES"),
}}))
stderr = here / "stderr.txt"
if stderr.exists():
    sys.stderr.write(stderr.read_text())
response = here / "response.txt"
if response.exists():
    sys.stdout.write(response.read_text())
code = here / "exitcode.txt"
sys.exit(int(code.read_text()) if code.exists() else 0)
"""


@pytest.fixture
def fake(tmp_path):
    script = tmp_path / "music-dl-helper"
    script.write_text(FAKE_HELPER.format(python=sys.executable))
    script.chmod(0o755)
    return MusicDl(helper_path=script, source_cookies_json='{"qq":"token"}'), tmp_path


def _record(directory):
    return json.loads((directory / "record.json").read_text())


def _song():
    return RemoteSong(
        id="42",
        name="Song",
        artist="Singer",
        album="Album",
        source="netease",
        cover="cover-url",
        url="song-url",
        extra={"song_id": "42"},
    )


def test_is_ready_follows_file_existence(fake, tmp_path):
    helper, _ = fake
    assert helper.is_ready() is True
    assert MusicDl(helper_path=tmp_path / "absent").is_ready() is False


def test_from_config_keeps_absolute_path_and_serialises_cookies(tmp_path):
    config = AppConfig(helper_path=tmp_path / "h", source_cookies={"qq": "token"})
    helper = MusicDl.from_config(config)
    assert helper.helper_path == tmp_path / "h"
    assert json.loads(helper.source_cookies_json) == {"qq": "token"}


def test_search_passes_arguments_and_decodes_reply(fake):
    helper, directory = fake
    (directory / "response.txt").write_text(
        json.dumps(
            {
                "songs": [{"id": "1", "name": "n", "artist": "a", "duration": 30}],
                "warnings": ["kuwo down"],
            }
        )
    )
    result = helper.search("hello", "song", ["qq", "kugou"])
    assert result == SearchResult(
        songs=[RemoteSong(id="1", name="n", artist="a", duration=30)],
        warnings=["kuwo down"],
    )
    record = _record(directory)
    assert record["argv"] == [
        "search", "--keyword", "hello", "--mode", "song", "--limit", "120",
        "--sources", "qq,kugou",
    ]
    assert json.loads(record["cookies"]) == {"qq": "token"}


def test_search_without_sources_omits_flag(fake):
    helper, directory = fake
    (directory / "response.txt").write_text('{"songs": []}')
    result = helper.search("x", "artist", [])
    assert result.songs == [] and result.warnings == []
    assert "--sources" not in _record(directory)["argv"]


def test_download_passes_song_fields(fake, tmp_path):
    helper, directory = fake
    (directory / "response.txt").write_text(
        json.dumps({"path": "/m/Song.mp3", "filename": "Song.mp3", "status": "ok"})
    )
    out = tmp_path / "out"
    response = helper.download(_song(), out, True, False)
    assert response.filename == "Song.mp3"
    assert str(response.path) == "/m/Song.mp3"
    assert response.lyric_path is None
    argv = _record(directory)["argv"]
    assert argv[0] == "download"
    assert argv[argv.index("--id") + 1] == "42"
    assert argv[argv.index("--cover-url") + 1] == "cover-url"
    assert "--cover=true" in argv
    assert "--lyrics=false" in argv
    assert argv[argv.index("--outdir") + 1] == str(out)
    assert json.loads(argv[argv.index("--extra") + 1]) == {"song_id": "42"}


def test_failure_reports_stderr(fake):
    helper, directory = fake
    (directory / "exitcode.txt").write_text("3")
    (directory / "stderr.txt").write_text("  bad source \n")
    (directory / "response.txt").write_text("ignored")
    with pytest.raises(HelperError) as info:
        helper.search("x", "song", [])
    assert str(info.value) == "bad source"


def test_failure_falls_back_to_stdout(fake):
    helper, directory = fake
    (directory / "exitcode.txt").write_text("1")
    (directory / "response.txt").write_text("stdout detail\n")
    with pytest.raises(HelperError) as info:
        helper.search("x", "song", [])
    assert str(info.value) == "stdout detail"


def test_failure_without_output_mentions_status(fake):
    helper, directory = fake
    (directory / "exitcode.txt").write_text("2")
    with pytest.raises(HelperError, match="^helper exited with status"):
        helper.search("x", "song", [])


def test_invalid_json_is_reported(fake):
    helper, directory = fake
    (directory / "response.txt").write_text("not json")
    with pytest.raises(HelperError, match="^invalid helper JSON: .*body=not json"):
        helper.search("x", "song", [])


def test_reply_with_wrong_shape_is_invalid(fake):
    helper, directory = fake
    (directory / "response.txt").write_text('{"filename": "a"}')
    with pytest.raises(HelperError, match="^invalid helper JSON"):
        helper.download(_song(), "/tmp", False, False)


def test_missing_helper_cannot_run(tmp_path):
    helper = MusicDl(helper_path=tmp_path / "absent")
    with pytest.raises(HelperError, match="^failed to run"):
        helper.search("x", "song", [])