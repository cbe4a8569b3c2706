"""Periodic background enumeration of declared slice authorities."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable

from slice_viewer.models import (
    AUTHORITIES_REFRESH_PERIOD_S,
    REFRESH_THREAD_NAME,
    PackageInfo,
)
from slice_viewer.providers import PackageRegistry

logger = logging.getLogger(__name__)

UiDispatcher = Callable[[Callable[[], None]], None]


def run_inline(callback: Callable[[], None]) -> None:
    """Dispatcher that runs the callback on the calling thread."""
    callback()


def collect_authorities(packages: Iterable[PackageInfo]) -> list[str]:
    """Flatten the authorities of every declared provider, in package order.

    Duplicates across packages are kept as-is.
    """
    authorities: list[str] = []
    for package in packages:
        if not package.providers:
            continue
        for provider in package.providers:
            if provider.authority is not None:
                authorities.append(provider.authority)
    return authorities


class AuthorityRefresher(threading.Thread):
    """Single background thread enumerating authorities at a fixed rate.

    Enumeration runs on this thread; the result is handed to
    *on_authorities* through *dispatch*, which must run it on the UI
    thread. The first tick runs immediately.
    """

    def __init__(
        self,
        registry: PackageRegistry,
        on_authorities: Callable[[list[str]], None],
        *,
        period: float = AUTHORITIES_REFRESH_PERIOD_S,
        dispatch: UiDispatcher = run_inline,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(name=REFRESH_THREAD_NAME, daemon=True)
        if period <= 0:
            raise ValueError("period must be positive")
        self._registry = registry
        self._on_authorities = on_authorities
        self._period = period
        self._dispatch = dispatch
        self._clock = clock
        self._cancelled = threading.Event()
        self.ticks = 0

    @property
    def period(self) -> float:
        return self._period

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def run(self) -> None:
        next_run = self._clock()
        while not self._cancelled.is_set():
            self.tick()
            next_run += self._period
            delay = next_run - self._clock()
            if delay < 0:
                # Overran the period: start the next tick now, do not burst.
                next_run = self._clock()
                delay = 0.0
            if self._cancelled.wait(delay):
                break
        logger.debug("Authority refresher stopped after %d ticks", self.ticks)

    def tick(self) -> list[str] | None:
        """Run one enumeration; returns the authorities, or None if it failed."""
        self.ticks += 1
        try:
            authorities = collect_authorities(self._registry.list_installed_packages())
            if not self._cancelled.is_set():
                self._dispatch(lambda: self._on_authorities(authorities))
        except Exception:
            logger.warning("Failed to enumerate slice providers", exc_info=True)
            return None
        return authorities

    def cancel(self) -> None:
        """Stop scheduling further ticks; a tick already running completes."""
        self._cancelled.set()


__all__ = [
    "AuthorityRefresher",
    "UiDispatcher",
    "collect_authorities",
    "run_inline",
]
