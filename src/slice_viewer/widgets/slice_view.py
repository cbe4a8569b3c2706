"""Slice rendering helpers and the display surface widget."""

from __future__ import annotations

from rich.markup import escape as escape_markup
from rich.text import Text
from textual.message import Message
from textual.widgets import Static

from slice_viewer.live import SliceLiveData
from slice_viewer.models import SLICE_DEFAULT_MODE, Slice, SliceMode
from slice_viewer.themes import THEME_COLORS


def escape_rich_text(text: str) -> str:
    """Escape text for safe Rich markup rendering."""
    return escape_markup(text) if text else ""


def _render_header(slice_: Slice) -> str:
    icon = escape_rich_text(slice_.icon)
    title = f"[bold {THEME_COLORS['accent']}]{escape_rich_text(slice_.title)}[/]"
    return f"{icon} {title}" if icon else title


def render_slice(slice_: Slice | None, mode: SliceMode) -> str:
    """Render *slice_* as Rich markup for the given display density.

    LARGE shows header, subtitle and every row; SMALL a single line with
    the subtitle inline; SHORTCUT just the icon and title.
    """
    if slice_ is None:
        return ""
    muted = THEME_COLORS["muted"]
    if mode is SliceMode.SHORTCUT:
        return _render_header(slice_)
    if mode is SliceMode.SMALL:
        line = _render_header(slice_)
        if slice_.subtitle:
            line += f"  [{muted}]{escape_rich_text(slice_.subtitle)}[/]"
        return line

    lines = [_render_header(slice_)]
    if slice_.subtitle:
        lines.append(f"[{muted}]{escape_rich_text(slice_.subtitle)}[/]")
    if slice_.rows:
        lines.append("")
    text_color = THEME_COLORS["text"]
    for row in slice_.rows:
        row_line = f"  [{text_color}]{escape_rich_text(row.title)}[/]"
        if row.subtitle:
            row_line += f"  [{muted}]{escape_rich_text(row.subtitle)}[/]"
        lines.append(row_line)
    return "\n".join(lines)


def render_slice_plain(slice_: Slice | None, mode: SliceMode) -> str:
    """Render *slice_* as plain text (markup stripped)."""
    return Text.from_markup(render_slice(slice_, mode)).plain


class SliceView(Static):
    """Widget showing the currently bound slice in one display mode."""

    class Updated(Message):
        """A live stream produced new content (posted from any thread)."""

        def __init__(self, live_data: SliceLiveData, slice_: Slice | None) -> None:
            super().__init__()
            self.live_data = live_data
            self.slice = slice_

    DEFAULT_CSS = """
    SliceView {
        height: auto;
        padding: 1 2;
        color: $th-text;
    }
    """

    def __init__(self, mode: SliceMode = SLICE_DEFAULT_MODE, *, id: str | None = None) -> None:
        super().__init__("", id=id)
        self._slice: Slice | None = None
        self._mode = mode

    @property
    def slice(self) -> Slice | None:
        return self._slice

    @property
    def mode(self) -> SliceMode:
        return self._mode

    def set_slice(self, slice_: Slice | None) -> None:
        self._slice = slice_
        self.refresh_content()

    def set_mode(self, mode: SliceMode) -> None:
        self._mode = mode
        self.refresh_content()

    def deliver(self, source: SliceLiveData, slice_: Slice | None) -> None:
        # post_message is thread-safe; the app applies it on the UI thread.
        self.post_message(self.Updated(source, slice_))

    def refresh_content(self) -> None:
        self.update(render_slice(self._slice, self._mode))
