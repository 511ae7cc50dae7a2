"""Curses drawing of the player screen: sidebar, search bar, cards, lyrics and status."""

from __future__ import annotations

import curses
import unicodedata
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from musictui.app import Focus, SearchMode
from musictui.models import format_duration

if TYPE_CHECKING:
    from musictui.app import App

CARD_MIN_WIDTH = 34
CARD_HEIGHT = 9
SIDEBAR_WIDTH = 24

_WALLPAPER = (
    "      .        *          .        ",
    "   *      MUSIC TOOL TERMINAL   .  ",
    "        .      ▓▓▒▒░░      *       ",
    "   .       neon cards / rust tui   ",
    "        *        .          .      ",
)

_SIDEBAR_ITEMS = (
    ("▌", "Music TUI", "Rust + standalone helper"),
    ("⌂", "首页", "本地曲库"),
    ("⌕", "搜索", "在线下载"),
    ("♫", "歌词", "同步显示"),
    ("⚙", "设置", "config.toml"),
)

_HELP = (
    "[Tab] 切换区域  [←→↑↓/hjkl] 当前区域导航  [Enter] 搜索/播放  "
    "[d] 下载  [a] 作者模式  [q] 退出"
)

_COVERS = {
    "netease": "  Netease  ",
    "qq": "  QQ Music ",
    "kugou": "  Kugou   ",
    "kuwo": "  Kuwo    ",
    "migu": "  Migu    ",
    "soda": "  Soda    ",
    "local": "  Local   ",
}


@dataclass(frozen=True)
class Rect:
    """A screen rectangle in cells."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


def shrink(area: Rect, x: int, y: int) -> Rect:
    """Inset a rectangle by x columns and y rows on each side."""
    return Rect(
        area.x + x,
        area.y + y,
        max(area.width - x * 2, 0),
        max(area.height - y * 2, 0),
    )


def centered_rect(width: int, height: int, area: Rect) -> Rect:
    """A rectangle of the given size centred in area, clipped to it."""
    return Rect(
        area.x + max(area.width - width, 0) // 2,
        area.y + max(area.height - height, 0) // 2,
        min(width, area.width),
        min(height, area.height),
    )


def truncate(value: str, max_chars: int) -> str:
    """Cut value to fewer than max_chars characters, ending with an ellipsis when cut."""
    if max_chars <= 0:
        return ""
    if len(value) < max_chars:
        return value
    return value[: max_chars - 1] + "…"


def cover_art(source: str) -> str:
    """The banner shown on a card for a song source."""
    return _COVERS.get(source, "  Music   ")


def grid_shape(area: Rect) -> tuple[int, int]:
    """Columns (1 to 3) and rows (at least 1) of cards that fit in area."""
    columns = min(max(area.width // CARD_MIN_WIDTH, 1), 3)
    rows = max(area.height // CARD_HEIGHT, 1)
    return columns, rows


def visible_start(selected: int, visible: int) -> int:
    """First card index to show so that the selected card is visible."""
    return max(selected - max(visible - 1, 0), 0)


def lyric_window(active: int, count: int, height: int) -> range:
    """Indices of lyric lines to show around the active one in a box of height rows."""
    visible = max(height - 2, 1)
    start = max(active - visible // 2, 0)
    return range(start, min(start + visible, count))


_COLORS = {
    "black": curses.COLOR_BLACK,
    "red": curses.COLOR_RED,
    "green": curses.COLOR_GREEN,
    "yellow": curses.COLOR_YELLOW,
    "blue": curses.COLOR_BLUE,
    "magenta": curses.COLOR_MAGENTA,
    "cyan": curses.COLOR_CYAN,
    "white": curses.COLOR_WHITE,
}


class _Styles:
    """Turns colour names into curses attributes, allocating colour pairs on demand."""

    def __init__(self) -> None:
        self._pairs: dict[tuple[str, str], int] = {}

    def __call__(
        self, fg: str = "white", bg: str = "black", *, bold: bool = False, dim: bool = False
    ) -> int:
        attr = curses.A_NORMAL
        if bold:
            attr |= curses.A_BOLD
        if dim:
            attr |= curses.A_DIM
        key = (fg, bg)
        try:
            number = self._pairs.get(key)
            if number is None:
                number = len(self._pairs) + 1
                if not curses.has_colors() or number >= getattr(curses, "COLOR_PAIRS", 0):
                    return attr
                curses.init_pair(number, _COLORS[fg], _COLORS[bg])
                self._pairs[key] = number
            return attr | curses.color_pair(number)
        except curses.error:
            return attr


_style = _Styles()


def _char_cells(char: str) -> int:
    if unicodedata.combining(char):
        return 0
    return 2 if unicodedata.east_asian_width(char) in ("W", "F") else 1


def _cells(text: str) -> int:
    return sum(_char_cells(char) for char in text)


def _clip(text: str, width: int) -> str:
    out: list[str] = []
    used = 0
    for char in text:
        cells = _char_cells(char)
        if used + cells > width:
            break
        out.append(char)
        used += cells
    return "".join(out)


@dataclass(frozen=True)
class _Line:
    spans: tuple[tuple[str, int], ...] = ()
    center: bool = False


def _line(*spans: tuple[str, int], center: bool = False) -> _Line:
    return _Line(tuple(spans), center)


def _put(screen: Any, y: int, x: int, text: str, attr: int, right: int) -> None:
    rows, cols = screen.getmaxyx()
    if not 0 <= y < rows or not 0 <= x < cols:
        return
    text = _clip(text, min(right, cols) - x)
    if not text:
        return
    try:
        screen.addstr(y, x, text, attr)
    except curses.error:
        pass


def _fill(screen: Any, area: Rect, attr: int) -> None:
    for y in range(area.y, area.bottom):
        _put(screen, y, area.x, " " * area.width, attr, area.right)


def _box(screen: Any, area: Rect, attr: int, title: str = "") -> None:
    if area.width < 2 or area.height < 2:
        return
    inner = area.width - 2
    _put(screen, area.y, area.x, "╭" + "─" * inner + "╮", attr, area.right)
    for y in range(area.y + 1, area.bottom - 1):
        _put(screen, y, area.x, "│", attr, area.right)
        _put(screen, y, area.right - 1, "│", attr, area.right)
    _put(screen, area.bottom - 1, area.x, "╰" + "─" * inner + "╯", attr, area.right)
    if title:
        _put(screen, area.y, area.x + 1, title, attr, area.right - 1)


def _draw_line(screen: Any, area: Rect, y: int, line: _Line) -> None:
    x = area.x
    if line.center:
        x += max(area.width - sum(_cells(text) for text, _ in line.spans), 0) // 2
    for text, attr in line.spans:
        if x >= area.right:
            break
        _put(screen, y, x, text, attr, area.right)
        x += _cells(text)


def _draw_paragraph(screen: Any, area: Rect, lines: list[_Line]) -> None:
    for offset, line in enumerate(lines[: area.height]):
        _draw_line(screen, area, area.y + offset, line)


def render(screen: Any, app: App) -> None:
    """Draw the whole interface on a curses window; the caller refreshes it."""
    rows, cols = screen.getmaxyx()
    screen.erase()
    area = Rect(0, 0, cols, rows)
    _render_wallpaper(screen, area)

    sidebar_width = min(SIDEBAR_WIDTH, area.width)
    _render_sidebar(screen, Rect(0, 0, sidebar_width, area.height), app)
    _render_main(screen, Rect(sidebar_width, 0, area.width - sidebar_width, area.height), app)

    if app.busy:
        _render_busy(screen, area)


def _render_wallpaper(screen: Any, area: Rect) -> None:
    _fill(screen, area, _style("white", "black"))
    top = area.y + max(area.height - (len(_WALLPAPER) + 2), 0) // 2
    art_style = _style("magenta", "black", dim=True)
    lines = [_line((text, art_style), center=True) for text in _WALLPAPER]
    _draw_paragraph(screen, Rect(area.x, top, area.width, max(area.bottom - top, 0)), lines)


def _render_sidebar(screen: Any, area: Rect, app: App) -> None:
    lines = [_line()]
    for idx, (icon, title, desc) in enumerate(_SIDEBAR_ITEMS):
        selected = (idx == 1 and app.focus is Focus.LIBRARY) or (
            idx == 2 and app.focus is Focus.SEARCH
        )
        if selected:
            style = _style("black", "magenta", bold=True)
        elif idx == 0:
            style = _style("magenta", bold=True)
        else:
            style = _style("white")
        lines.append(_line((f" {icon} ", style), (title, style)))
        lines.append(_line((f"    {desc}", _style("magenta", dim=True))))
        lines.append(_line())

    if area.width > 0:
        border = _style("magenta")
        for y in range(area.y, area.bottom):
            _put(screen, y, area.right - 1, "│", border, area.right)
    _draw_paragraph(screen, Rect(area.x, area.y, max(area.width - 1, 0), area.height), lines)


def _render_main(screen: Any, area: Rect, app: App) -> None:
    top_height = min(5, area.height)
    footer_height = min(3, area.height - top_height)
    body_height = area.height - top_height - footer_height
    top = Rect(area.x, area.y, area.width, top_height)
    body = Rect(area.x, area.y + top_height, area.width, body_height)
    footer = Rect(area.x, body.bottom, area.width, footer_height)

    _render_topbar(screen, top, app)
    cards_width = area.width * 72 // 100
    _render_cards(screen, Rect(body.x, body.y, cards_width, body.height), app)
    _render_info_panel(
        screen, Rect(body.x + cards_width, body.y, body.width - cards_width, body.height), app
    )
    _render_footer(screen, footer, app)


def _render_topbar(screen: Any, area: Rect, app: App) -> None:
    color = "yellow" if app.search_mode is SearchMode.SONG else "magenta"
    title = "本地曲库" if app.focus is Focus.LIBRARY else "在线搜索"
    query = app.query or "输入关键词，Enter 搜索"
    lines = [
        _line((f" {title} ", _style("magenta", bold=True))),
        _line(
            (f"{app.search_mode.label()}搜索: ", _style(color, bold=True)),
            (query, _style("white")),
            ("  _", _style("cyan")),
            center=True,
        ),
    ]
    box = shrink(area, 1, 0)
    _box(screen, box, _style("magenta"), " 首页 ")
    _draw_paragraph(screen, shrink(box, 1, 1), lines)


def _item_count(app: App) -> int:
    return len(app.library) if app.focus is Focus.LIBRARY else len(app.search_results)


def _selected_index(app: App) -> int:
    selected = app.library_selected if app.focus is Focus.LIBRARY else app.search_selected
    return selected or 0


def _render_cards(screen: Any, area: Rect, app: App) -> None:
    area = shrink(area, 1, 0)
    if app.focus is Focus.LIBRARY:
        title = f" ACTIVE 本地曲库 · {len(app.library)} 首 "
        border = _style("cyan", bold=True)
    else:
        title = f" ACTIVE 搜索结果 · {len(app.search_results)} 条 "
        border = _style("yellow", bold=True)
    _box(screen, area, border, title)

    inner = shrink(area, 1, 1)
    columns, rows = grid_shape(inner)
    selected = _selected_index(app)
    index = visible_start(selected, columns * rows)
    count = _item_count(app)

    for row in range(rows):
        row_y = inner.y + row * CARD_HEIGHT
        row_height = min(CARD_HEIGHT, max(inner.height - row * CARD_HEIGHT, 0))
        for column in range(columns):
            if index >= count:
                return
            left = inner.x + column * inner.width // columns
            right = inner.x + (column + 1) * inner.width // columns
            cell = Rect(left, row_y, right - left, row_height)
            _render_card(screen, shrink(cell, 1, 0), app, index, index == selected)
            index += 1


def _render_card(screen: Any, area: Rect, app: App, index: int, selected: bool) -> None:
    width = max(area.width - 4, 0)
    if app.focus is Focus.LIBRARY:
        track = app.library[index]
        title, subtitle, album = track.title, track.artist, track.album
        source, duration = "local", track.duration
    else:
        song = app.search_results[index]
        title, subtitle, album = song.name, song.artist, song.album
        source, duration = song.source, song.duration
    album = truncate(album, width)

    bg = "blue" if selected else "black"
    if selected:
        _fill(screen, area, _style("white", bg))
    border = _style("cyan", bg, bold=True) if selected else _style("magenta", bg)
    _box(screen, area, border, " ▶ " if selected else "   ")

    lines = [
        _line((cover_art(source), _style("magenta", bg, bold=True))),
        _line((truncate(title, width), _style("white", bg, bold=True))),
        _line((truncate(subtitle, width), _style("white", bg))),
        _line((album or "Unknown Album", _style("magenta", bg, dim=True))),
        _line(
            (source, _style("magenta", bg)),
            (" · ", _style("white", bg)),
            (format_duration(duration), _style("green", bg, bold=True)),
        ),
    ]
    _draw_paragraph(screen, shrink(area, 1, 1), lines)


def _render_info_panel(screen: Any, area: Rect, app: App) -> None:
    now_height = min(9, area.height)
    _render_now_card(screen, Rect(area.x, area.y, area.width, now_height), app)
    lyrics_area = Rect(area.x, area.y + now_height, area.width, area.height - now_height)
    _render_lyrics_card(screen, shrink(lyrics_area, 0, 1), app)


def _render_now_card(screen: Any, area: Rect, app: App) -> None:
    accent = _style("magenta")
    lines = [
        _line(("◷", _style("magenta", bold=True)), center=True),
        _line(("正在播放", accent), center=True),
        _line((truncate(app.player.current() or "-", area.width - 4), _style("white"))),
        _line(
            (
                f"曲库: {len(app.library)}  搜索: {len(app.search_results)}",
                _style("magenta", dim=True),
            )
        ),
    ]
    _box(screen, area, accent, " 状态 ")
    _draw_paragraph(screen, shrink(area, 1, 1), lines)


def _render_lyrics_card(screen: Any, area: Rect, app: App) -> None:
    if not app.lyrics:
        hint = _style("white", dim=True)
        lines = [
            _line(),
            _line(("播放本地歌曲后显示歌词", hint), center=True),
            _line(("下载时会保存同名 .lrc", hint), center=True),
        ]
    else:
        active = app.active_lyric_index() or 0
        lines = []
        for index in lyric_window(active, len(app.lyrics), area.height):
            if index == active:
                style = _style("black", "green", bold=True)
            elif index < active:
                style = _style("white", dim=True)
            else:
                style = _style("white")
            lines.append(_line((app.lyrics[index].text, style), center=True))

    _box(screen, area, _style("green"), f" 歌词 | {truncate(app.lyric_source, 24)} ")
    _draw_paragraph(screen, shrink(area, 1, 1), lines)


def _render_footer(screen: Any, area: Rect, app: App) -> None:
    lines = [
        _line((truncate(app.status, area.width - 2), _style("green")), center=True),
        _line((_HELP, _style("magenta")), center=True),
    ]
    _draw_paragraph(screen, area, lines)


def _render_busy(screen: Any, area: Rect) -> None:
    popup = centered_rect(42, 5, area)
    _fill(screen, popup, _style("white"))
    border = _style("magenta")
    _box(screen, popup, border, " Working ")
    lines = [
        _line(("任务执行中...", _style("white")), center=True),
        _line(("搜索/下载由内置 helper 处理", _style("white")), center=True),
    ]
    _draw_paragraph(screen, shrink(popup, 1, 1), lines)