"""Slice Viewer TUI - browse the slices installed providers serve.

Usage:
    slice-viewer                                   # Start with empty inputs
    slice-viewer --authority slice_viewer.system --path clock
    slice-viewer --mode small                      # Start in small mode
    slice-viewer --list-authorities                # Print declared authorities

Key bindings:
    F1 / F2 / F3 - Large / Small / Shortcut display mode
    Ctrl+r       - Refresh authority suggestions now
    Ctrl+t       - Cycle color theme
    Ctrl+l       - Clear authority and path
    Ctrl+q       - Quit

Type an authority (suggestions refresh every few seconds) and a path;
the slice they identify is rendered below and keeps updating live.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from textual import on
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.message import Message
from textual.widgets import Footer, Header, Input, Label, RadioButton, RadioSet

from slice_viewer.action_messages import build_actionable_warning, build_authorities_notification
from slice_viewer.cli import main
from slice_viewer.config import get_config_path
from slice_viewer.controller import SliceViewerController
from slice_viewer.models import SliceMode, ViewerConfig
from slice_viewer.refresh import AuthorityRefresher
from slice_viewer.resolver import ContentResolver
from slice_viewer.themes import TEXTUAL_THEMES, apply_theme_colors, next_theme_name
from slice_viewer.ui_constants import APP_BINDINGS, APP_CSS
from slice_viewer.widgets import AuthoritySuggester, AuthoritySuggestions, SliceView

logger = logging.getLogger(__name__)

MODE_LABELS: dict[SliceMode, str] = {
    SliceMode.LARGE: "Large",
    SliceMode.SMALL: "Small",
    SliceMode.SHORTCUT: "Shortcut",
}


def _mode_button_id(mode: SliceMode) -> str:
    return f"mode-{mode.value}"


class SliceViewerApp(App):
    """A TUI application to view live slices by authority and path."""

    TITLE = "Slice Viewer"

    CSS = APP_CSS

    BINDINGS = APP_BINDINGS

    class RunOnUiThread(Message):
        """Carries a callback from a background thread onto the UI thread."""

        def __init__(self, callback: Callable[[], None]) -> None:
            super().__init__()
            self.callback = callback

    def __init__(
        self,
        config: ViewerConfig | None = None,
        *,
        resolver: ContentResolver | None = None,
        initial_authority: str = "",
        initial_path: str = "",
        initial_mode: SliceMode | None = None,
        refresher_factory: Callable[..., AuthorityRefresher] = AuthorityRefresher,
    ) -> None:
        super().__init__()
        # Register all Textual themes so $th-* CSS variables resolve before compose()
        for textual_theme in TEXTUAL_THEMES.values():
            self.register_theme(textual_theme)
        self._config = config or ViewerConfig()
        self._resolver = resolver or ContentResolver(
            granted_permissions=self._config.granted_permissions
        )
        self._initial_authority = initial_authority
        self._initial_path = initial_path
        self._mode = initial_mode or self._config.slice_mode

        self._slice_view = SliceView(self._mode, id="slice-view")
        self._suggester = AuthoritySuggester()
        self._unsubscribe_suggestions: Callable[[], None] | None = None
        self.controller = SliceViewerController(
            self._resolver,
            self._slice_view,
            default_mode=self._mode,
            refresh_period=self._config.refresh_period_seconds,
            dispatch=self._dispatch_to_ui,
            refresher_factory=refresher_factory,
        )
        self._apply_theme()

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="input-bar"):
            with Vertical(classes="field"):
                yield Label("Authority", classes="field-label")
                yield Input(
                    placeholder="com.example.provider",
                    id="authority-input",
                    suggester=self._suggester,
                )
            with Vertical(classes="field"):
                yield Label("Path", classes="field-label")
                yield Input(placeholder="item/1", id="path-input")
        with RadioSet(id="mode-set"):
            for mode, label in MODE_LABELS.items():
                yield RadioButton(label, value=mode is self._mode, id=_mode_button_id(mode))
        with Horizontal(id="main-container"):
            with Vertical(id="suggestions-pane"):
                yield Label(" Authorities", id="suggestions-header")
                yield AuthoritySuggestions(id="authority-suggestions")
            with Vertical(id="slice-pane"):
                yield Label("", id="uri-label")
                with VerticalScroll(id="slice-scroll"):
                    yield self._slice_view
        yield Footer()

    def on_mount(self) -> None:
        """Start the controller and apply any initial authority/path."""
        if self._config.config_defaulted:
            self.notify(
                build_actionable_warning(
                    "Config file could not be used; running with defaults",
                    next_step=f"fix or delete {get_config_path()}",
                ),
                severity="warning",
                timeout=8,
            )

        self._unsubscribe_suggestions = self.controller.suggestions.on_change(
            self._on_suggestions_changed
        )
        self.controller.start()
        self._update_uri_label()

        if self._initial_authority:
            self.query_one("#authority-input", Input).value = self._initial_authority
        if self._initial_path:
            self.query_one("#path-input", Input).value = self._initial_path

        logger.debug(
            "App mounted: mode=%s, theme=%s, permissions=%d",
            self._mode.value,
            self._config.theme_name,
            len(self._config.granted_permissions),
        )
        self.query_one("#authority-input", Input).focus()

    def on_unmount(self) -> None:
        """Stop the refresher and release the live binding."""
        self.controller.stop()
        unsubscribe = self._unsubscribe_suggestions
        self._unsubscribe_suggestions = None
        if unsubscribe is not None:
            unsubscribe()

    # ========================================================================
    # Thread marshalling
    # ========================================================================

    def _dispatch_to_ui(self, callback: Callable[[], None]) -> None:
        # post_message is thread-safe and never blocks the caller.
        self.post_message(self.RunOnUiThread(callback))

    @on(RunOnUiThread)
    def on_run_on_ui_thread(self, event: RunOnUiThread) -> None:
        event.callback()

    # ========================================================================
    # Input events
    # ========================================================================

    @on(Input.Changed, "#authority-input")
    def on_authority_changed(self, event: Input.Changed) -> None:
        self.controller.authority.set(event.value)
        self._update_uri_label()
        self.query_one(AuthoritySuggestions).set_query(event.value)

    @on(Input.Changed, "#path-input")
    def on_path_changed(self, event: Input.Changed) -> None:
        self.controller.path.set(event.value)
        self._update_uri_label()

    @on(RadioSet.Changed, "#mode-set")
    def on_mode_changed(self, event: RadioSet.Changed) -> None:
        for mode in SliceMode:
            if event.pressed.id == _mode_button_id(mode):
                self._mode = mode
                self.controller.mode.set(mode)
                return

    @on(AuthoritySuggestions.Picked)
    def on_authority_picked(self, event: AuthoritySuggestions.Picked) -> None:
        self.query_one("#authority-input", Input).value = event.authority
        self.query_one("#path-input", Input).focus()

    @on(SliceView.Updated)
    def on_slice_updated(self, event: SliceView.Updated) -> None:
        # Updates from a superseded stream may still be queued; drop them.
        if self.controller.is_current(event.live_data):
            self._slice_view.set_slice(event.slice)

    def _on_suggestions_changed(self, authorities: tuple[str, ...]) -> None:
        self._suggester.set_authorities(authorities)
        self.query_one(AuthoritySuggestions).replace_authorities(authorities)

    def _update_uri_label(self) -> None:
        uri = self.controller.current_uri
        self.query_one("#uri-label", Label).update(f" {uri}" if uri is not None else "")

    # ========================================================================
    # Actions
    # ========================================================================

    def action_set_mode(self, mode_name: str) -> None:
        mode = SliceMode.parse(mode_name)
        self.query_one(f"#{_mode_button_id(mode)}", RadioButton).value = True

    def action_refresh_authorities(self) -> None:
        self.run_worker(
            self._refresh_authorities_in_thread,
            thread=True,
            exclusive=True,
            group="authorities-refresh",
        )

    def _refresh_authorities_in_thread(self) -> None:
        authorities = self.controller.refresh_authorities_now()
        if authorities is None:
            return
        count = len(authorities)
        self._dispatch_to_ui(lambda: self.notify(build_authorities_notification(count)))

    def action_cycle_theme(self) -> None:
        self._config.theme_name = next_theme_name(self._config.theme_name)
        self._apply_theme()
        self._slice_view.refresh_content()
        self.notify(f"Theme: {self._config.theme_name}")

    def action_clear_inputs(self) -> None:
        self.query_one("#authority-input", Input).value = ""
        self.query_one("#path-input", Input).value = ""
        self.query_one("#authority-input", Input).focus()

    def _apply_theme(self) -> None:
        """Activate the configured theme for both Rich markup and CSS variables."""
        apply_theme_colors(self._config.theme_name)
        try:
            self.theme = self._config.theme_name
        except Exception as e:
            logger.debug("Skipping theme activation in current context: %s", e, exc_info=True)


__all__ = [
    "MODE_LABELS",
    "SliceViewerApp",
    "main",
]
