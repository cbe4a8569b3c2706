"""Live slice streams and the single-binding owner that feeds the display."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from slice_viewer.models import Slice, SliceUri
from slice_viewer.resolver import ContentResolver

logger = logging.getLogger(__name__)

SliceObserver = Callable[["SliceLiveData", Slice | None], None]


class SliceLiveData:
    """Push-based stream of the content bound to one slice URI.

    The stream is active while it has at least one observer: activation
    registers for change notifications, pins the slice and delivers the
    current content; losing the last observer reverses both steps.
    Observers are called on whichever thread produced the update.
    """

    def __init__(self, resolver: ContentResolver, uri: SliceUri) -> None:
        self._resolver = resolver
        self._uri = uri
        self._observers: list[SliceObserver] = []
        self._value: Slice | None = None
        self._version = 0
        self._requested = 0
        self._stored_seq = 0
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"SliceLiveData({str(self._uri)!r}, observers={len(self._observers)})"

    @property
    def uri(self) -> SliceUri:
        return self._uri

    @property
    def value(self) -> Slice | None:
        return self._value

    @property
    def version(self) -> int:
        """Number of values delivered so far."""
        return self._version

    @property
    def active(self) -> bool:
        with self._lock:
            return bool(self._observers)

    def observe_forever(self, observer: SliceObserver) -> None:
        with self._lock:
            if observer in self._observers:
                return
            self._observers.append(observer)
            first = len(self._observers) == 1
            has_value = self._version > 0
            value = self._value
        if first:
            self._on_active()
        elif has_value:
            observer(self, value)

    def remove_observer(self, observer: SliceObserver) -> None:
        with self._lock:
            if observer not in self._observers:
                return
            self._observers.remove(observer)
            last = not self._observers
        if last:
            self._on_inactive()

    def _on_active(self) -> None:
        logger.debug("Live data active for %s", self._uri)
        self._resolver.register_observer(self._uri, self._on_uri_changed)
        self._resolver.pin_slice(self._uri)
        self._refresh()

    def _on_inactive(self) -> None:
        logger.debug("Live data inactive for %s", self._uri)
        self._resolver.unregister_observer(self._uri, self._on_uri_changed)
        self._resolver.unpin_slice(self._uri)

    def _on_uri_changed(self, uri: SliceUri) -> None:
        if self.active:
            self._refresh()

    def _refresh(self) -> None:
        # Binds may run concurrently (UI thread and a provider's own thread);
        # a result is dropped once a later-started bind has been stored.
        with self._lock:
            self._requested += 1
            seq = self._requested
        value = self._resolver.bind_slice(self._uri)
        with self._lock:
            if seq < self._stored_seq:
                logger.debug("Dropped stale bind %d of %s", seq, self._uri)
                return
            self._stored_seq = seq
            self._value = value
            self._version += 1
            observers = list(self._observers)
        for observer in observers:
            observer(self, value)


class LiveBinding:
    """Owns the one live stream currently feeding a display surface.

    ``rebind`` detaches the observer from the previous stream before
    attaching it to the new one, under a single lock, so at most one
    stream is ever bound.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._live_data: SliceLiveData | None = None
        self._observer: SliceObserver | None = None

    @property
    def current(self) -> SliceLiveData | None:
        return self._live_data

    @property
    def is_bound(self) -> bool:
        return self._live_data is not None

    def is_current(self, live_data: SliceLiveData) -> bool:
        return self._live_data is live_data

    def rebind(self, live_data: SliceLiveData, observer: SliceObserver) -> SliceLiveData | None:
        """Swap the bound stream for *live_data*; returns the stream it replaced."""
        with self._lock:
            previous = self._detach_locked()
            self._live_data = live_data
            self._observer = observer
            live_data.observe_forever(observer)
        return previous

    def release(self) -> SliceLiveData | None:
        """Detach and forget the bound stream, if any; returns it."""
        with self._lock:
            return self._detach_locked()

    def _detach_locked(self) -> SliceLiveData | None:
        previous, observer = self._live_data, self._observer
        self._live_data = None
        self._observer = None
        if previous is not None and observer is not None:
            previous.remove_observer(observer)
        return previous


__all__ = [
    "LiveBinding",
    "SliceLiveData",
    "SliceObserver",
]
