"""Slice provider base class and the installed-package registry.

Distributions declare providers through the ``slice_viewer.providers``
entry-point group, one entry per authority::

    [project.entry-points."slice_viewer.providers"]
    "com.example.weather" = "example_weather.slices:WeatherSliceProvider"
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Iterable
from importlib.metadata import Distribution, EntryPoint, distributions
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from slice_viewer.models import (
    PROVIDER_ENTRY_POINT_GROUP,
    PackageInfo,
    ProviderInfo,
    Slice,
    SliceUri,
)

if TYPE_CHECKING:
    from slice_viewer.resolver import ContentResolver

logger = logging.getLogger(__name__)


class SlicePermissionError(PermissionError):
    """Raised when a provider rejects the caller for a URI.

    ``permission`` names the missing permission; it is None when the
    provider refused without naming one, and ``reason`` then says why.
    """

    def __init__(self, uri: SliceUri, permission: str | None, reason: str = "") -> None:
        if permission:
            message = f"Permission {permission} required to access {uri}"
        else:
            message = f"Access to {uri} denied: {reason or 'rejected by provider'}"
        super().__init__(message)
        self.uri = uri
        self.permission = permission
        self.reason = reason


class SliceProvider:
    """Base class for components that serve slices for one authority.

    Subclasses override ``on_bind_slice`` and, for content that changes on
    its own, the pin hooks plus ``notify_change``.
    """

    authority: str = ""
    required_permission: str | None = None

    def __init__(self) -> None:
        self._resolver: ContentResolver | None = None

    def attach(self, resolver: ContentResolver) -> None:
        """Called by the resolver once, before the provider serves anything."""
        self._resolver = resolver

    def check_caller(self, uri: SliceUri, granted_permissions: Collection[str]) -> None:
        """Raise SlicePermissionError unless the caller may access *uri*."""
        permission = self.required_permission
        if permission and permission not in granted_permissions:
            raise SlicePermissionError(uri, permission)

    def on_bind_slice(self, uri: SliceUri) -> Slice | None:
        """Return the current content for *uri*, or None when there is none."""
        return None

    def on_slice_pinned(self, uri: SliceUri) -> None:
        """Called when the first live observer starts watching *uri*."""

    def on_slice_unpinned(self, uri: SliceUri) -> None:
        """Called when the last live observer stops watching *uri*."""

    def notify_change(self, uri: SliceUri) -> None:
        """Tell live observers of *uri* that its content changed."""
        if self._resolver is not None:
            self._resolver.notify_change(uri)


@runtime_checkable
class PackageRegistry(Protocol):
    """Interface for enumerating installed packages that declare providers."""

    def list_installed_packages(self) -> list[PackageInfo]:
        """Return every installed package declaring at least one provider."""
        ...

    def load_provider(self, authority: str) -> SliceProvider | None:
        """Instantiate the provider declared for *authority*, if any."""
        ...


def _distribution_name(dist: Distribution) -> str:
    name = dist.metadata["Name"]
    return str(name) if name else "unknown"


class EntryPointPackageRegistry:
    """Default registry backed by ``importlib.metadata`` entry points.

    Provider lookups go through an authority index built on first use and
    rebuilt by every ``list_installed_packages`` call, so lookups never
    rescan the installed distributions. A provider installed while the
    viewer runs becomes loadable after the next enumeration.
    """

    def __init__(
        self,
        group: str = PROVIDER_ENTRY_POINT_GROUP,
        distributions_fn: Callable[[], Iterable[Distribution]] = distributions,
    ) -> None:
        self._group = group
        self._distributions_fn = distributions_fn
        self._index: dict[str, EntryPoint] | None = None

    def _provider_entry_points(self, dist: Distribution) -> list[EntryPoint]:
        return [ep for ep in dist.entry_points if ep.group == self._group]

    def _scan(self) -> tuple[list[PackageInfo], dict[str, EntryPoint]]:
        packages: list[PackageInfo] = []
        index: dict[str, EntryPoint] = {}
        for dist in self._distributions_fn():
            entry_points = self._provider_entry_points(dist)
            if not entry_points:
                continue
            name = _distribution_name(dist)
            packages.append(
                PackageInfo(
                    name=name,
                    version=dist.version or "",
                    providers=[
                        ProviderInfo(authority=ep.name, target=ep.value, package=name)
                        for ep in entry_points
                    ],
                )
            )
            for ep in entry_points:
                # First declaration of an authority wins
                index.setdefault(ep.name, ep)
        return packages, index

    def list_installed_packages(self) -> list[PackageInfo]:
        packages, self._index = self._scan()
        return packages

    def load_provider(self, authority: str) -> SliceProvider | None:
        index = self._index
        if index is None:
            _, index = self._scan()
            self._index = index
        ep = index.get(authority)
        if ep is None:
            return None
        provider_cls = ep.load()
        provider = provider_cls()
        if not isinstance(provider, SliceProvider):
            raise TypeError(f"{ep.value} is not a SliceProvider subclass")
        if not provider.authority:
            provider.authority = authority
        logger.debug("Loaded provider %s for authority %s", ep.value, authority)
        return provider


__all__ = [
    "EntryPointPackageRegistry",
    "PackageRegistry",
    "SlicePermissionError",
    "SliceProvider",
]
