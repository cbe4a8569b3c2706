"""Interaction glue: input → URI → access check → live rebind, plus suggestions.

The controller is UI-toolkit agnostic. The host calls ``start()`` when the
screen becomes active and ``stop()`` when it goes away, feeds user edits
through the ``authority``/``path``/``mode`` observables, and supplies a
surface plus a dispatcher that runs callbacks on its UI thread.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from slice_viewer.events import Observable
from slice_viewer.live import LiveBinding, SliceLiveData
from slice_viewer.models import (
    AUTHORITIES_REFRESH_PERIOD_S,
    SLICE_DEFAULT_MODE,
    Slice,
    SliceMode,
    SliceUri,
)
from slice_viewer.providers import SlicePermissionError
from slice_viewer.refresh import AuthorityRefresher, UiDispatcher, run_inline
from slice_viewer.resolver import ContentResolver
from slice_viewer.uri import build_slice_uri

logger = logging.getLogger(__name__)


class SliceSurface(Protocol):
    """Display surface the controller drives."""

    def set_slice(self, slice_: Slice | None) -> None:
        """Show *slice_* (None clears). Called on the UI thread."""
        ...

    def set_mode(self, mode: SliceMode) -> None:
        """Switch display density. Called on the UI thread."""
        ...

    def deliver(self, source: SliceLiveData, slice_: Slice | None) -> None:
        """Accept a live update from *source*. May be called from any thread."""
        ...


RefresherFactory = Callable[..., AuthorityRefresher]


class SliceViewerController:
    """Owns the live binding and the authority suggestion list."""

    def __init__(
        self,
        resolver: ContentResolver,
        surface: SliceSurface,
        *,
        default_mode: SliceMode = SLICE_DEFAULT_MODE,
        refresh_period: float = AUTHORITIES_REFRESH_PERIOD_S,
        dispatch: UiDispatcher = run_inline,
        refresher_factory: RefresherFactory = AuthorityRefresher,
    ) -> None:
        self._resolver = resolver
        self._surface = surface
        self._default_mode = default_mode
        self._refresh_period = refresh_period
        self._dispatch = dispatch
        self._refresher_factory = refresher_factory
        self._refresher: AuthorityRefresher | None = None
        self._binding = LiveBinding()
        self._unsubscribers: list[Callable[[], None]] = []
        self._started = False

        self.authority: Observable[str] = Observable("")
        self.path: Observable[str] = Observable("")
        self.mode: Observable[SliceMode] = Observable(default_mode)
        self.suggestions: Observable[tuple[str, ...]] = Observable(())
        self.current_uri: SliceUri | None = None

    @property
    def started(self) -> bool:
        return self._started

    @property
    def binding(self) -> LiveBinding:
        return self._binding

    @property
    def refresher(self) -> AuthorityRefresher | None:
        return self._refresher

    # ── Lifecycle ────────────────────────────────────────────────────────

    def start(self) -> None:
        """Reset inputs, wire change handlers and begin refreshing authorities."""
        if self._started:
            return
        self._started = True
        self.authority.reset("")
        self.path.reset("")
        self.mode.reset(self._default_mode)
        self.current_uri = None

        self._unsubscribers = [
            self.authority.on_change(lambda _value: self.try_display_slice()),
            self.path.on_change(lambda _value: self.try_display_slice()),
            self.mode.on_change(self._surface.set_mode),
        ]
        self._surface.set_mode(self._default_mode)

        self._refresher = self._refresher_factory(
            self._resolver.registry,
            self._replace_suggestions,
            period=self._refresh_period,
            dispatch=self._dispatch,
        )
        self._refresher.start()
        logger.debug(
            "Controller started: mode=%s, refresh_period=%.1fs",
            self._default_mode.value,
            self._refresh_period,
        )

    def stop(self) -> None:
        """Cancel the refresher and release the live binding."""
        if not self._started:
            return
        self._started = False
        refresher = self._refresher
        self._refresher = None
        if refresher is not None:
            refresher.cancel()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        released = self._binding.release()
        logger.debug("Controller stopped, released binding: %s", released)

    # ── Slice binding ────────────────────────────────────────────────────

    def try_display_slice(self) -> bool:
        """Rebuild the URI from current input and rebind the display to it.

        Returns False when the provider denied access; the display is then
        left empty and the previous binding is released.
        """
        self._surface.set_slice(None)

        uri = build_slice_uri(self.authority.value, self.path.value)
        self.current_uri = uri

        if not self.can_acquire_content_provider(uri):
            logger.warning("Permission denied to access uri %s", uri)
            self._binding.release()
            return False

        self._binding.rebind(SliceLiveData(self._resolver, uri), self._on_live_update)
        return True

    def can_acquire_content_provider(self, uri: SliceUri) -> bool:
        try:
            with self._resolver.acquire_unstable_client(uri):
                return True
        except SlicePermissionError:
            return False

    def is_current(self, source: SliceLiveData) -> bool:
        """True when *source* is the stream currently bound to the display."""
        return self._binding.is_current(source)

    def _on_live_update(self, source: SliceLiveData, slice_: Slice | None) -> None:
        if self._binding.is_current(source):
            self._surface.deliver(source, slice_)

    # ── Authority suggestions ────────────────────────────────────────────

    def refresh_authorities_now(self) -> list[str] | None:
        """Run one enumeration on the calling thread (never the UI thread)."""
        refresher = self._refresher
        if refresher is None:
            return None
        return refresher.tick()

    def _replace_suggestions(self, authorities: list[str]) -> None:
        self.suggestions.set(tuple(authorities))


__all__ = [
    "SliceSurface",
    "SliceViewerController",
]
