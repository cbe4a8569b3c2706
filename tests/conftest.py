"""Shared test fixtures for Slice Viewer tests."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

import pytest

from slice_viewer.live import SliceLiveData
from slice_viewer.models import PackageInfo, ProviderInfo, Slice, SliceMode, SliceRow, SliceUri
from slice_viewer.providers import SliceProvider
from slice_viewer.refresh import AuthorityRefresher
from slice_viewer.resolver import ContentResolver
from slice_viewer.themes import DEFAULT_THEME, THEME_COLORS

# ── Module-level dict isolation ──────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reset_theme_colors():
    """Restore THEME_COLORS after each test.

    SliceViewerApp.__init__ and theme cycling mutate this module-level dict.
    """
    yield
    THEME_COLORS.clear()
    THEME_COLORS.update(DEFAULT_THEME)


# ── Test doubles ─────────────────────────────────────────────────────────────


class StaticProvider(SliceProvider):
    """Provider returning a fixed slice for every path, counting binds.

    *check_error*, when set, is raised from the access check as-is.
    """

    def __init__(
        self,
        authority: str,
        *,
        title: str = "Hello",
        required_permission: str | None = None,
        check_error: Exception | None = None,
    ) -> None:
        super().__init__()
        self.authority = authority
        self.required_permission = required_permission
        self.check_error = check_error
        self.title = title
        self.bind_count = 0
        self.pinned: list[str] = []
        self.unpinned: list[str] = []

    def check_caller(self, uri: SliceUri, granted_permissions) -> None:
        if self.check_error is not None:
            raise self.check_error
        super().check_caller(uri, granted_permissions)

    def on_bind_slice(self, uri: SliceUri) -> Slice | None:
        self.bind_count += 1
        return Slice(uri=uri, title=self.title, subtitle=uri.path, icon="*")

    def on_slice_pinned(self, uri: SliceUri) -> None:
        self.pinned.append(str(uri))

    def on_slice_unpinned(self, uri: SliceUri) -> None:
        self.unpinned.append(str(uri))


class FakeRegistry:
    """In-memory PackageRegistry with switchable failure."""

    def __init__(self, packages: list[PackageInfo] | None = None) -> None:
        self.packages = packages or []
        self.providers: dict[str, SliceProvider] = {}
        self.fail_with: Exception | None = None
        self.list_calls = 0
        self.load_calls: list[str] = []

    def list_installed_packages(self) -> list[PackageInfo]:
        self.list_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.packages)

    def load_provider(self, authority: str) -> SliceProvider | None:
        self.load_calls.append(authority)
        return self.providers.get(authority)


class RecordingSurface:
    """SliceSurface that records every call; deliver() applies synchronously."""

    def __init__(self) -> None:
        self.slice: Slice | None = None
        self.mode: SliceMode | None = None
        self.set_slice_calls: list[Slice | None] = []
        self.deliveries: list[tuple[SliceLiveData, Slice | None]] = []
        self._lock = threading.Lock()

    def set_slice(self, slice_: Slice | None) -> None:
        self.slice = slice_
        self.set_slice_calls.append(slice_)

    def set_mode(self, mode: SliceMode) -> None:
        self.mode = mode

    def deliver(self, source: SliceLiveData, slice_: Slice | None) -> None:
        with self._lock:
            self.deliveries.append((source, slice_))
        self.slice = slice_


class ManualRefresher(AuthorityRefresher):
    """Refresher whose thread never starts; tests drive tick() by hand."""

    def start(self) -> None:
        self.started_manually = True


# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_slice():
    """Factory fixture for creating Slice instances with sensible defaults."""

    def _make(
        authority: str = "com.example.provider",
        path: str = "item/1",
        title: str = "Item one",
        subtitle: str = "First item",
        rows: tuple[SliceRow, ...] = (),
        icon: str = "",
    ) -> Slice:
        return Slice(
            uri=SliceUri(authority=authority, path=path),
            title=title,
            subtitle=subtitle,
            rows=rows,
            icon=icon,
        )

    return _make


@pytest.fixture
def make_package():
    """Factory fixture for PackageInfo declaring the given authorities."""

    def _make(name: str, *authorities: str, version: str = "1.0") -> PackageInfo:
        return PackageInfo(
            name=name,
            version=version,
            providers=[ProviderInfo(authority=a, target=f"{name}:P", package=name) for a in authorities],
        )

    return _make


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def resolver(registry: FakeRegistry) -> ContentResolver:
    return ContentResolver(registry=registry)


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def make_controller(resolver: ContentResolver, surface: RecordingSurface):
    """Factory for a started controller whose refresher is driven manually."""
    from slice_viewer.controller import SliceViewerController

    created = []

    def _make(**kwargs: Any) -> SliceViewerController:
        kwargs.setdefault("refresher_factory", ManualRefresher)
        controller = SliceViewerController(
            kwargs.pop("resolver", resolver), kwargs.pop("surface", surface), **kwargs
        )
        controller.start()
        created.append(controller)
        return controller

    yield _make
    for controller in created:
        controller.stop()


@pytest.fixture
def add_provider(resolver: ContentResolver) -> Callable[..., StaticProvider]:
    def _add(authority: str, **kwargs: Any) -> StaticProvider:
        provider = StaticProvider(authority, **kwargs)
        resolver.register_provider(provider)
        return provider

    return _add


@pytest.fixture
def make_provider() -> Callable[..., StaticProvider]:
    """Factory for unregistered StaticProvider instances."""

    def _make(authority: str, **kwargs: Any) -> StaticProvider:
        return StaticProvider(authority, **kwargs)

    return _make


@pytest.fixture
def manual_refresher() -> type[AuthorityRefresher]:
    """Refresher class for apps/controllers under test (no background thread)."""
    return ManualRefresher
