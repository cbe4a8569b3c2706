"""Tests for the built-in system and private slice providers."""

from __future__ import annotations

import platform
import threading

import pytest

from slice_viewer.live import SliceLiveData
from slice_viewer.models import SliceUri
from slice_viewer.providers import SlicePermissionError
from slice_viewer.resolver import ContentResolver
from slice_viewer.system_slices import (
    PRIVATE_AUTHORITY,
    PRIVATE_PERMISSION,
    SYSTEM_AUTHORITY,
    PrivateSliceProvider,
    SystemSliceProvider,
)


def _uri(path: str, authority: str = SYSTEM_AUTHORITY) -> SliceUri:
    return SliceUri(authority=authority, path=path)


@pytest.fixture
def system(resolver) -> SystemSliceProvider:
    provider = SystemSliceProvider(tick_seconds=0.01)
    resolver.register_provider(provider)
    return provider


class TestSystemSlices:
    def test_index_lists_paths(self, system):
        slice_ = system.on_bind_slice(_uri(""))
        assert slice_ is not None
        assert [row.title for row in slice_.rows] == ["clock", "python", "providers"]

    def test_leading_slash_is_ignored(self, system):
        assert system.on_bind_slice(_uri("/python")).title == system.on_bind_slice(_uri("python")).title

    def test_clock_has_timestamp(self, system):
        slice_ = system.on_bind_slice(_uri("clock"))
        assert slice_ is not None
        assert slice_.updated_at is not None
        assert slice_.title.count(":") == 2

    def test_python_reports_interpreter(self, system):
        slice_ = system.on_bind_slice(_uri("python"))
        assert platform.python_version() in slice_.title

    def test_providers_lists_registry(self, system, registry, make_package):
        registry.packages = [make_package("pkg-a", "a.one", "a.two", version="3.1")]

        slice_ = system.on_bind_slice(_uri("providers"))

        assert [row.title for row in slice_.rows] == ["a.one", "a.two"]
        assert slice_.rows[0].subtitle == "pkg-a 3.1"
        assert slice_.subtitle == "2 authorities declared"

    def test_unknown_path_has_no_content(self, system):
        assert system.on_bind_slice(_uri("nope")) is None
        assert system.on_bind_slice(_uri("clock/extra")) is None


class TestClockTicker:
    def test_pin_starts_and_unpin_stops_ticker(self, system, resolver):
        uri = _uri("clock")

        resolver.pin_slice(uri)
        assert system.running_tickers == 1
        resolver.pin_slice(uri)
        assert system.running_tickers == 1

        resolver.unpin_slice(uri)
        resolver.unpin_slice(uri)
        assert system.running_tickers == 0

    def test_other_paths_do_not_tick(self, system, resolver):
        resolver.pin_slice(_uri("python"))
        assert system.running_tickers == 0

    def test_live_clock_pushes_updates_until_unobserved(self, system, resolver):
        live = SliceLiveData(resolver, _uri("clock"))
        updates = threading.Event()
        values = []

        def _observer(source, value):
            values.append(value)
            if len(values) >= 3:
                updates.set()

        live.observe_forever(_observer)
        try:
            assert updates.wait(timeout=5)
        finally:
            live.remove_observer(_observer)

        assert system.running_tickers == 0
        assert all(value is not None for value in values)


class TestPrivateSlices:
    def test_denied_without_permission(self, registry):
        resolver = ContentResolver(registry=registry)
        resolver.register_provider(PrivateSliceProvider())

        with pytest.raises(SlicePermissionError) as excinfo:
            with resolver.acquire_unstable_client(_uri("secret", PRIVATE_AUTHORITY)):
                pass
        assert excinfo.value.permission == PRIVATE_PERMISSION

    def test_granted_permission_serves_secret(self, registry):
        resolver = ContentResolver(registry=registry, granted_permissions=[PRIVATE_PERMISSION])
        resolver.register_provider(PrivateSliceProvider())
        uri = _uri("secret", PRIVATE_AUTHORITY)

        with resolver.acquire_unstable_client(uri) as client:
            assert client is not None
        slice_ = resolver.bind_slice(uri)

        assert slice_ is not None
        assert slice_.title == "Access granted"

    def test_other_private_paths_are_empty(self):
        assert PrivateSliceProvider().on_bind_slice(_uri("public", PRIVATE_AUTHORITY)) is None
