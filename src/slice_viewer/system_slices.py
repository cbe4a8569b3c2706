"""Slice providers shipped with the viewer itself.

Both are declared as entry points of this distribution, so a fresh
install always has something to browse:

- ``slice_viewer.system/clock``     self-updating clock (once per second while pinned)
- ``slice_viewer.system/python``    interpreter and platform facts
- ``slice_viewer.system/providers`` every authority the registry declares
- ``slice_viewer.private/secret``   needs ``slice_viewer.permission.PRIVATE``
"""

from __future__ import annotations

import logging
import platform
import threading
import time

from slice_viewer.models import Slice, SliceRow, SliceUri
from slice_viewer.providers import SliceProvider
from slice_viewer.refresh import collect_authorities
from slice_viewer.uri import path_segments

logger = logging.getLogger(__name__)

SYSTEM_AUTHORITY = "slice_viewer.system"
PRIVATE_AUTHORITY = "slice_viewer.private"
PRIVATE_PERMISSION = "slice_viewer.permission.PRIVATE"

CLOCK_TICK_SECONDS = 1.0

_SYSTEM_PATHS = {
    "clock": "Current local time, updated every second",
    "python": "Interpreter and platform",
    "providers": "Declared slice authorities",
}


class SystemSliceProvider(SliceProvider):
    """Built-in slices describing the running viewer."""

    authority = SYSTEM_AUTHORITY

    def __init__(self, tick_seconds: float = CLOCK_TICK_SECONDS) -> None:
        super().__init__()
        self._tick_seconds = tick_seconds
        self._tickers: dict[str, threading.Event] = {}
        self._lock = threading.Lock()

    def on_bind_slice(self, uri: SliceUri) -> Slice | None:
        segments = path_segments(uri)
        if not segments:
            return self._index_slice(uri)
        if segments == ["clock"]:
            return self._clock_slice(uri)
        if segments == ["python"]:
            return self._python_slice(uri)
        if segments == ["providers"]:
            return self._providers_slice(uri)
        return None

    def on_slice_pinned(self, uri: SliceUri) -> None:
        if path_segments(uri) != ["clock"]:
            return
        key = str(uri)
        stop = threading.Event()
        with self._lock:
            if key in self._tickers:
                return
            self._tickers[key] = stop
        thread = threading.Thread(
            target=self._run_ticker,
            args=(uri, stop),
            name=f"slice-ticker:{key}",
            daemon=True,
        )
        thread.start()

    def on_slice_unpinned(self, uri: SliceUri) -> None:
        with self._lock:
            stop = self._tickers.pop(str(uri), None)
        if stop is not None:
            stop.set()

    @property
    def running_tickers(self) -> int:
        with self._lock:
            return len(self._tickers)

    def _run_ticker(self, uri: SliceUri, stop: threading.Event) -> None:
        while not stop.wait(self._tick_seconds):
            self.notify_change(uri)
        logger.debug("Clock ticker stopped for %s", uri)

    def _index_slice(self, uri: SliceUri) -> Slice:
        return Slice(
            uri=uri,
            title="Viewer system slices",
            subtitle=f"{len(_SYSTEM_PATHS)} paths under {SYSTEM_AUTHORITY}",
            rows=tuple(SliceRow(title=path, subtitle=desc) for path, desc in _SYSTEM_PATHS.items()),
            icon="◆",
        )

    def _clock_slice(self, uri: SliceUri) -> Slice:
        now = time.time()
        local = time.localtime(now)
        return Slice(
            uri=uri,
            title=time.strftime("%H:%M:%S", local),
            subtitle=time.strftime("%A, %d %B %Y", local),
            rows=(SliceRow(title="Time zone", subtitle=time.strftime("%Z", local)),),
            icon="◷",
            updated_at=now,
        )

    def _python_slice(self, uri: SliceUri) -> Slice:
        return Slice(
            uri=uri,
            title=f"{platform.python_implementation()} {platform.python_version()}",
            subtitle=platform.platform(terse=True),
            rows=(
                SliceRow(title="Machine", subtitle=platform.machine() or "unknown"),
                SliceRow(title="Node", subtitle=platform.node() or "unknown"),
            ),
            icon="λ",
        )

    def _providers_slice(self, uri: SliceUri) -> Slice:
        packages = self._resolver.registry.list_installed_packages() if self._resolver else []
        rows = tuple(
            SliceRow(title=provider.authority, subtitle=f"{package.name} {package.version}".strip())
            for package in packages
            for provider in package.providers or ()
        )
        return Slice(
            uri=uri,
            title="Slice providers",
            subtitle=f"{len(collect_authorities(packages))} authorities declared",
            rows=rows,
            icon="☰",
        )


class PrivateSliceProvider(SliceProvider):
    """Permission-guarded provider; denied unless the permission is granted."""

    authority = PRIVATE_AUTHORITY
    required_permission = PRIVATE_PERMISSION

    def on_bind_slice(self, uri: SliceUri) -> Slice | None:
        if path_segments(uri) != ["secret"]:
            return None
        return Slice(
            uri=uri,
            title="Access granted",
            subtitle=f"{PRIVATE_PERMISSION} is held by this viewer",
            icon="✱",
        )


__all__ = [
    "CLOCK_TICK_SECONDS",
    "PRIVATE_AUTHORITY",
    "PRIVATE_PERMISSION",
    "SYSTEM_AUTHORITY",
    "PrivateSliceProvider",
    "SystemSliceProvider",
]
