"""Internal UI constants for the SliceViewerApp."""

from __future__ import annotations

from textual.binding import Binding, BindingType

APP_CSS = """
Screen {
    background: $th-background;
}

Header {
    background: $th-panel-alt;
    color: $th-text;
}

#input-bar {
    height: auto;
    padding: 0 1;
    background: $th-panel;
}

.field {
    width: 1fr;
    height: auto;
    padding: 0 1;
}

.field-label {
    color: $th-accent;
    text-style: bold;
}

#authority-input, #path-input {
    width: 100%;
    border: tall $th-highlight;
    background: $th-background;
}

#authority-input:focus, #path-input:focus {
    border: tall $th-accent-alt;
}

#mode-set {
    width: 100%;
    height: auto;
    layout: horizontal;
    background: $th-panel;
    border: tall $th-highlight;
}

#main-container {
    height: 1fr;
}

#suggestions-pane {
    width: 1fr;
    min-width: 30;
    max-width: 60;
    height: 100%;
    border: tall $th-highlight;
    background: $th-panel;
}

#suggestions-pane:focus-within {
    border: tall $th-accent;
}

#slice-pane {
    width: 3fr;
    height: 100%;
    border: tall $th-highlight;
    background: $th-panel;
}

#suggestions-header, #uri-label {
    padding: 0 1;
    background: $th-panel;
    color: $th-accent-alt;
    text-style: bold;
}

#authority-suggestions {
    height: 1fr;
    scrollbar-gutter: stable;
}

#authority-suggestions > .option-list--option-highlighted {
    background: $th-highlight;
}

#authority-suggestions:focus > .option-list--option-highlighted {
    background: $th-highlight-focus;
}

#slice-scroll {
    height: 1fr;
    scrollbar-background: $th-scrollbar-bg;
    scrollbar-color: $th-scrollbar-thumb;
    scrollbar-color-hover: $th-scrollbar-hover;
    scrollbar-color-active: $th-scrollbar-active;
}
"""

APP_BINDINGS: list[BindingType] = [
    Binding("ctrl+q", "quit", "Quit"),
    Binding("f1", "set_mode('large')", "Large"),
    Binding("f2", "set_mode('small')", "Small"),
    Binding("f3", "set_mode('shortcut')", "Shortcut"),
    Binding("ctrl+r", "refresh_authorities", "Refresh authorities"),
    Binding("ctrl+t", "cycle_theme", "Theme"),
    Binding("ctrl+l", "clear_inputs", "Clear", show=False),
]

__all__ = [
    "APP_BINDINGS",
    "APP_CSS",
]
