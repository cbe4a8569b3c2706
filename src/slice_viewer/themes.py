"""Theme system: color palettes and Textual theme builders."""

from __future__ import annotations

from textual.theme import Theme as TextualTheme

DEFAULT_THEME = {
    "background": "#272822",
    "panel": "#1e1e1e",
    "panel_alt": "#3e3d32",
    "text": "#f8f8f2",
    "muted": "#75715e",
    "accent": "#66d9ef",
    "accent_alt": "#e6db74",
    "green": "#a6e22e",
    "orange": "#fd971f",
    "pink": "#f92672",
    "highlight": "#49483e",
    "highlight_focus": "#5a5950",
    "scrollbar_background": "#3e3d32",
    "scrollbar": "#75715e",
    "scrollbar_active": "#66d9ef",
    "scrollbar_hover": "#a8a8a2",
}

CATPPUCCIN_MOCHA_THEME: dict[str, str] = {
    "background": "#1e1e2e",
    "panel": "#181825",
    "panel_alt": "#313244",
    "text": "#cdd6f4",
    "muted": "#6c7086",
    "accent": "#89b4fa",
    "accent_alt": "#f9e2af",
    "green": "#a6e3a1",
    "orange": "#fab387",
    "pink": "#f38ba8",
    "highlight": "#313244",
    "highlight_focus": "#45475a",
    "scrollbar_background": "#313244",
    "scrollbar": "#6c7086",
    "scrollbar_active": "#89b4fa",
    "scrollbar_hover": "#9399b2",
}

SOLARIZED_DARK_THEME: dict[str, str] = {
    "background": "#002b36",
    "panel": "#073642",
    "panel_alt": "#586e75",
    "text": "#839496",
    "muted": "#586e75",
    "accent": "#268bd2",
    "accent_alt": "#b58900",
    "green": "#859900",
    "orange": "#cb4b16",
    "pink": "#d33682",
    "highlight": "#073642",
    "highlight_focus": "#586e75",
    "scrollbar_background": "#073642",
    "scrollbar": "#657b83",
    "scrollbar_active": "#268bd2",
    "scrollbar_hover": "#93a1a1",
}

THEMES: dict[str, dict[str, str]] = {
    "monokai": DEFAULT_THEME,
    "catppuccin-mocha": CATPPUCCIN_MOCHA_THEME,
    "solarized-dark": SOLARIZED_DARK_THEME,
}
THEME_NAMES: list[str] = list(THEMES.keys())

# $th-* CSS variable -> palette key
_CSS_VARIABLES: dict[str, str] = {
    "th-background": "background",
    "th-panel": "panel",
    "th-panel-alt": "panel_alt",
    "th-text": "text",
    "th-muted": "muted",
    "th-accent": "accent",
    "th-accent-alt": "accent_alt",
    "th-highlight": "highlight",
    "th-highlight-focus": "highlight_focus",
    "th-scrollbar-bg": "scrollbar_background",
    "th-scrollbar-thumb": "scrollbar",
    "th-scrollbar-active": "scrollbar_active",
    "th-scrollbar-hover": "scrollbar_hover",
}


def _build_textual_theme(name: str, colors: dict[str, str]) -> TextualTheme:
    """Convert a palette to a Textual Theme exposing the $th-* variables used in APP_CSS."""
    return TextualTheme(
        name=name,
        primary=colors["accent"],
        secondary=colors["accent_alt"],
        accent=colors["green"],
        foreground=colors["text"],
        background=colors["background"],
        surface=colors["panel"],
        panel=colors["panel_alt"],
        warning=colors["orange"],
        error=colors["pink"],
        success=colors["green"],
        dark=True,
        variables={variable: colors[key] for variable, key in _CSS_VARIABLES.items()},
    )


TEXTUAL_THEMES: dict[str, TextualTheme] = {
    name: _build_textual_theme(name, colors) for name, colors in THEMES.items()
}

# Palette used by Rich markup rendering; swapped in place on theme change
THEME_COLORS = DEFAULT_THEME.copy()


def apply_theme_colors(theme_name: str) -> dict[str, str]:
    """Point THEME_COLORS at the named palette (monokai when unknown)."""
    THEME_COLORS.clear()
    THEME_COLORS.update(THEMES.get(theme_name, DEFAULT_THEME))
    return THEME_COLORS


def next_theme_name(current: str) -> str:
    """Return the theme after *current* in THEME_NAMES, wrapping around."""
    try:
        idx = THEME_NAMES.index(current)
    except ValueError:
        idx = -1
    return THEME_NAMES[(idx + 1) % len(THEME_NAMES)]


__all__ = [
    "CATPPUCCIN_MOCHA_THEME",
    "DEFAULT_THEME",
    "SOLARIZED_DARK_THEME",
    "TEXTUAL_THEMES",
    "THEMES",
    "THEME_COLORS",
    "THEME_NAMES",
    "apply_theme_colors",
    "next_theme_name",
]
