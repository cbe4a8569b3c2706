"""Content resolver: routes slice URIs to providers, pins and change notifications."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Collection, Iterator
from contextlib import contextmanager

from slice_viewer.models import Slice, SliceUri
from slice_viewer.providers import (
    EntryPointPackageRegistry,
    PackageRegistry,
    SlicePermissionError,
    SliceProvider,
)

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[SliceUri], None]


class ProviderClient:
    """Short-lived handle on the provider serving one URI.

    "Unstable" in the sense that it holds no reference count on the
    provider: it exists to prove access and is closed right away.
    """

    def __init__(self, provider: SliceProvider, uri: SliceUri) -> None:
        self._provider: SliceProvider | None = provider
        self.uri = uri

    @property
    def closed(self) -> bool:
        return self._provider is None

    @property
    def provider(self) -> SliceProvider:
        if self._provider is None:
            raise RuntimeError("ProviderClient is closed")
        return self._provider

    def close(self) -> None:
        self._provider = None

    def __enter__(self) -> ProviderClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ContentResolver:
    """Resolve slice URIs against registered and installed providers."""

    def __init__(
        self,
        registry: PackageRegistry | None = None,
        granted_permissions: Collection[str] = (),
    ) -> None:
        self._registry: PackageRegistry = registry or EntryPointPackageRegistry()
        self._granted_permissions = frozenset(granted_permissions)
        self._providers: dict[str, SliceProvider] = {}
        self._observers: dict[str, list[ChangeCallback]] = {}
        self._pins: dict[str, int] = {}
        self._lock = threading.RLock()

    @property
    def registry(self) -> PackageRegistry:
        return self._registry

    @property
    def granted_permissions(self) -> frozenset[str]:
        return self._granted_permissions

    # ── Providers ────────────────────────────────────────────────────────

    def register_provider(self, provider: SliceProvider) -> None:
        """Register an in-process provider, taking precedence over installed ones."""
        if not provider.authority:
            raise ValueError("Provider has no authority")
        provider.attach(self)
        with self._lock:
            self._providers[provider.authority] = provider

    def get_provider(self, authority: str) -> SliceProvider | None:
        """Return the provider serving *authority*, loading it on first use."""
        with self._lock:
            provider = self._providers.get(authority)
        if provider is not None or not authority:
            return provider
        try:
            provider = self._registry.load_provider(authority)
        except Exception:
            logger.warning("Failed to load slice provider for %s", authority, exc_info=True)
            return None
        if provider is None:
            return None
        provider.attach(self)
        with self._lock:
            # Another thread may have loaded it meanwhile; keep the first one.
            return self._providers.setdefault(authority, provider)

    @contextmanager
    def acquire_unstable_client(self, uri: SliceUri) -> Iterator[ProviderClient | None]:
        """Acquire a throwaway client for *uri*.

        Yields None when no provider serves the authority. Raises
        SlicePermissionError when the provider rejects this caller, including
        when its access check fails outright.
        """
        provider = self.get_provider(uri.authority)
        if provider is None:
            yield None
            return
        try:
            provider.check_caller(uri, self._granted_permissions)
        except SlicePermissionError:
            raise
        except PermissionError as exc:
            raise SlicePermissionError(uri, None, str(exc)) from exc
        except Exception as exc:
            logger.warning(
                "Provider %s failed to check access to %s", uri.authority, uri, exc_info=True
            )
            raise SlicePermissionError(uri, None, f"access check failed: {exc!r}") from exc
        with ProviderClient(provider, uri) as client:
            yield client

    def bind_slice(self, uri: SliceUri) -> Slice | None:
        """Ask the owning provider for the current content of *uri*."""
        provider = self.get_provider(uri.authority)
        if provider is None:
            return None
        try:
            return provider.on_bind_slice(uri)
        except Exception:
            logger.warning("Provider %s failed to bind %s", uri.authority, uri, exc_info=True)
            return None

    # ── Pinning ──────────────────────────────────────────────────────────

    def pin_slice(self, uri: SliceUri) -> None:
        key = str(uri)
        with self._lock:
            count = self._pins.get(key, 0)
            self._pins[key] = count + 1
        if count == 0:
            self._dispatch_pin_hook(uri, pinned=True)

    def unpin_slice(self, uri: SliceUri) -> None:
        key = str(uri)
        with self._lock:
            count = self._pins.get(key, 0)
            if count == 0:
                return
            if count == 1:
                del self._pins[key]
            else:
                self._pins[key] = count - 1
        if count == 1:
            self._dispatch_pin_hook(uri, pinned=False)

    def pinned_count(self, uri: SliceUri) -> int:
        with self._lock:
            return self._pins.get(str(uri), 0)

    def _dispatch_pin_hook(self, uri: SliceUri, *, pinned: bool) -> None:
        provider = self.get_provider(uri.authority)
        if provider is None:
            return
        try:
            if pinned:
                provider.on_slice_pinned(uri)
            else:
                provider.on_slice_unpinned(uri)
        except Exception:
            logger.warning(
                "Provider %s failed to handle %s of %s",
                uri.authority,
                "pin" if pinned else "unpin",
                uri,
                exc_info=True,
            )

    # ── Change notifications ─────────────────────────────────────────────

    def register_observer(self, uri: SliceUri, callback: ChangeCallback) -> None:
        with self._lock:
            self._observers.setdefault(str(uri), []).append(callback)

    def unregister_observer(self, uri: SliceUri, callback: ChangeCallback) -> None:
        key = str(uri)
        with self._lock:
            callbacks = self._observers.get(key)
            if not callbacks or callback not in callbacks:
                return
            callbacks.remove(callback)
            if not callbacks:
                del self._observers[key]

    def observer_count(self, uri: SliceUri) -> int:
        with self._lock:
            return len(self._observers.get(str(uri), ()))

    def notify_change(self, uri: SliceUri) -> None:
        """Deliver a change notification for *uri* on the calling thread."""
        with self._lock:
            callbacks = list(self._observers.get(str(uri), ()))
        for callback in callbacks:
            callback(uri)


__all__ = [
    "ChangeCallback",
    "ContentResolver",
    "ProviderClient",
]
