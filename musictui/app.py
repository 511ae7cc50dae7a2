"""Application state: library, search results, selection, playback and background work."""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from musictui.config import AppConfig
from musictui.helper import HelperError, MusicDl, SearchResult
from musictui.lyrics import load_lyrics
from musictui.models import U32_MAX, DownloadResponse, LocalTrack, LyricLine, RemoteSong
from musictui.player import Player
from musictui.scanner import scan_music_dir


class Focus(Enum):
    LIBRARY = "library"
    SEARCH = "search"


class SearchMode(Enum):
    SONG = "song"
    ARTIST = "artist"

    def toggle(self) -> SearchMode:
        return SearchMode.ARTIST if self is SearchMode.SONG else SearchMode.SONG

    def helper_arg(self) -> str:
        return self.value

    def label(self) -> str:
        return "歌曲" if self is SearchMode.SONG else "作者"


@dataclass
class LibraryScanned:
    tracks: list[LocalTrack]


@dataclass
class SearchFinished:
    result: SearchResult | None = None
    error: str | None = None


@dataclass
class DownloadFinished:
    response: DownloadResponse | None = None
    error: str | None = None


WorkerEvent = LibraryScanned | SearchFinished | DownloadFinished

_ARTIST_PREFIXES = ("@", "artist:", "作者:")


def search_status(label: str, count: int, warnings: Sequence[str]) -> str:
    """Status line summarising a finished search."""
    if count == 0 and warnings:
        return f"{label}搜索失败: {' | '.join(warnings)}"
    status = f"{label}搜索完成: {count} 条结果"
    if warnings:
        preview = " | ".join(warnings[:2])
        suffix = f"{preview} 等 {len(warnings)} 个源失败" if len(warnings) > 2 else preview
        status += f" | 部分源失败: {suffix}"
    return status


class App:
    """Everything the interface shows, plus the actions keys trigger."""

    def __init__(
        self,
        config: AppConfig,
        *,
        helper: MusicDl | None = None,
        player: Player | None = None,
        scan: Callable[..., list[LocalTrack]] = scan_music_dir,
    ) -> None:
        self.config = config
        self.helper = helper if helper is not None else MusicDl.from_config(config)
        self.player = player if player is not None else Player()
        self._scan = scan
        self.events: queue.Queue[WorkerEvent] = queue.Queue()
        self.focus = Focus.SEARCH
        self.library: list[LocalTrack] = []
        self.search_results: list[RemoteSong] = []
        self.library_selected: int | None = None
        self.search_selected: int | None = None
        self.query = ""
        self.search_mode = SearchMode.SONG
        self.status = "输入关键词后按 Enter 搜索；按 a 切换歌曲/作者搜索"
        self.busy = False
        self.lyrics: list[LyricLine] = []
        self.lyric_source = "未播放"
        if not self.helper.is_ready():
            self.status = (
                f"未找到 helper: {self.helper.helper_path}。"
                "请先在 helper 目录运行 go build -buildvcs=false -o music-dl-helper ."
            )
        self.refresh_library()

    def _spawn(self, work: Callable[[], WorkerEvent]) -> None:
        threading.Thread(target=lambda: self.events.put(work()), daemon=True).start()

    def refresh_library(self) -> None:
        music_dir = self.config.music_dir
        self.status = f"扫描本地曲库: {music_dir}"
        scan = self._scan
        self._spawn(lambda: LibraryScanned(scan(music_dir)))

    def search(self) -> None:
        mode, query = self.normalized_search()
        if not query or self.busy:
            return
        self.busy = True
        self.status = f"{mode.label()}搜索中: {query}"
        self.search_results = []
        self.search_selected = None

        helper = self.helper
        sources = list(self.config.default_sources)

        def work() -> WorkerEvent:
            try:
                return SearchFinished(result=helper.search(query, mode.helper_arg(), sources))
            except HelperError as err:
                return SearchFinished(error=str(err))

        self._spawn(work)

    def download_selected(self) -> None:
        if self.busy:
            return
        if not self.helper.is_ready():
            self.status = f"无法下载：未找到 helper {self.helper.helper_path}"
            return
        song = self.selected_remote_song()
        if song is None:
            self.status = "没有选中的搜索结果"
            return

        self.busy = True
        out_dir = self.config.music_dir
        self.status = f"下载中: {song.name} - {song.artist} -> {out_dir}"
        helper = self.helper
        cover = self.config.embed_cover
        lyrics = self.config.embed_lyrics

        def work() -> WorkerEvent:
            try:
                return DownloadFinished(response=helper.download(song, out_dir, cover, lyrics))
            except HelperError as err:
                return DownloadFinished(error=str(err))

        self._spawn(work)

    def play_selected_local(self) -> None:
        track = self.selected_local_track()
        if track is None:
            self.status = "没有选中的本地歌曲"
            return
        lyrics = load_lyrics(track.path)
        if lyrics:
            self.lyric_source = f"{track.title} - {track.artist}: {len(lyrics)} 行歌词"
        else:
            self.lyric_source = f"{track.title} - {track.artist}: 未找到歌词"
        self.lyrics = lyrics
        try:
            self.player.play(track.path)
        except RuntimeError as err:
            self.status = str(err)
        else:
            self.status = f"正在播放: {track.title} - {track.artist}"

    def process_worker_events(self) -> None:
        """Apply every event the background workers have finished so far."""
        while True:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                return
            match event:
                case LibraryScanned(tracks=tracks):
                    self.library = tracks
                    self.library_selected = 0 if tracks else None
                    self.status = f"本地曲库已加载: {len(tracks)} 首"
                case SearchFinished(result=result, error=error):
                    self.busy = False
                    if result is not None:
                        self.search_results = result.songs
                        self.search_selected = 0 if result.songs else None
                        self.status = search_status(
                            self.search_mode.label(), len(result.songs), result.warnings
                        )
                    else:
                        self.search_results = []
                        self.search_selected = None
                        self.status = f"搜索失败: {error}"
                case DownloadFinished(response=response, error=error):
                    self.busy = False
                    if response is not None:
                        warning = f" ({response.warning})" if response.warning else ""
                        lyric = (
                            f" | 歌词: {response.lyric_path}"
                            if response.lyric_path is not None
                            else " | 歌词: 未保存"
                        )
                        self.status = (
                            f"下载完成[{response.status}]: {response.filename} -> "
                            f"{response.path}{lyric}{warning}"
                        )
                        self.refresh_library()
                    else:
                        self.status = f"下载失败: {error}"

    def toggle_search_mode(self) -> None:
        self.search_mode = self.search_mode.toggle()
        self.status = f"搜索模式: {self.search_mode.label()}"

    def active_lyric_index(self) -> int | None:
        """Index of the lyric line for the current playback position."""
        if not self.lyrics:
            return None
        elapsed_ms = min(int(self.player.elapsed() * 1000), U32_MAX)
        next_index = next(
            (i for i, line in enumerate(self.lyrics) if line.timestamp_ms > elapsed_ms),
            len(self.lyrics),
        )
        return max(next_index - 1, 0)

    def move_right(self) -> None:
        self._move_selection(1)

    def move_left(self) -> None:
        self._move_selection(-1)

    def move_down(self, columns: int) -> None:
        self._move_selection(max(columns, 1))

    def move_up(self, columns: int) -> None:
        self._move_selection(-max(columns, 1))

    def _move_selection(self, delta: int) -> None:
        if self.focus is Focus.LIBRARY:
            length, current = len(self.library), self.library_selected
        else:
            length, current = len(self.search_results), self.search_selected
        selected = None if length == 0 else min(max((current or 0) + delta, 0), length - 1)
        if self.focus is Focus.LIBRARY:
            self.library_selected = selected
        else:
            self.search_selected = selected

    def selected_local_track(self) -> LocalTrack | None:
        index = self.library_selected
        if index is None or not 0 <= index < len(self.library):
            return None
        return self.library[index]

    def selected_remote_song(self) -> RemoteSong | None:
        index = self.search_selected
        if index is None or not 0 <= index < len(self.search_results):
            return None
        return self.search_results[index]

    def normalized_search(self) -> tuple[SearchMode, str]:
        """The mode and keyword to search with; an artist prefix forces artist mode."""
        query = self.query.strip()
        for prefix in _ARTIST_PREFIXES:
            if query.startswith(prefix):
                return SearchMode.ARTIST, query[len(prefix):].strip()
        return self.search_mode, query