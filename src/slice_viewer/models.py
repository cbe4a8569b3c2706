"""Data models and constants for the Slice Viewer application."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Application identity, the single source for platformdirs config paths
CONFIG_APP_NAME = "slice-viewer"

# Every slice URI uses the content scheme
CONTENT_SCHEME = "content"

# Entry-point group that installed distributions use to declare slice providers
PROVIDER_ENTRY_POINT_GROUP = "slice_viewer.providers"

# Authority suggestion refresh settings
AUTHORITIES_REFRESH_PERIOD_S = 5.0
MIN_REFRESH_PERIOD_S = 1.0
MAX_REFRESH_PERIOD_S = 300.0
REFRESH_THREAD_NAME = "authorities-refresh"


class SliceMode(str, Enum):
    """Display density of a rendered slice."""

    LARGE = "large"
    SMALL = "small"
    SHORTCUT = "shortcut"

    @classmethod
    def parse(cls, value: str, default: SliceMode | None = None) -> SliceMode:
        """Parse a mode name case-insensitively, falling back to *default*."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            if default is None:
                raise
            return default


SLICE_MODE_NAMES: tuple[str, ...] = tuple(mode.value for mode in SliceMode)
SLICE_DEFAULT_MODE = SliceMode.LARGE


@dataclass(frozen=True, slots=True)
class SliceUri:
    """A structured content identifier: scheme + authority + path.

    ``authority`` and ``path`` hold the raw (decoded) user text; ``str()``
    produces the encoded ``content://authority/path`` form.
    """

    authority: str
    path: str
    scheme: str = CONTENT_SCHEME

    def __str__(self) -> str:
        from slice_viewer.uri import format_slice_uri

        return format_slice_uri(self)


@dataclass(frozen=True, slots=True)
class SliceRow:
    """One line of content inside a slice."""

    title: str
    subtitle: str = ""


@dataclass(frozen=True, slots=True)
class Slice:
    """Renderable content fragment produced by a provider for one URI."""

    uri: SliceUri
    title: str
    subtitle: str = ""
    rows: tuple[SliceRow, ...] = ()
    icon: str = ""
    updated_at: float | None = None


@dataclass(frozen=True, slots=True)
class ProviderInfo:
    """A slice provider declared by an installed distribution."""

    authority: str
    target: str = ""
    package: str = ""


@dataclass(slots=True)
class PackageInfo:
    """An installed distribution and the slice providers it declares."""

    name: str
    version: str = ""
    providers: list[ProviderInfo] | None = field(default_factory=list)


@dataclass(slots=True)
class ViewerConfig:
    """User configuration loaded from config.json."""

    default_mode: str = SLICE_DEFAULT_MODE.value
    refresh_period_seconds: float = AUTHORITIES_REFRESH_PERIOD_S
    granted_permissions: list[str] = field(default_factory=list)
    theme_name: str = "monokai"
    version: int = 1
    # Set by load_config() when the file existed but could not be used
    config_defaulted: bool = False

    @property
    def slice_mode(self) -> SliceMode:
        return SliceMode.parse(self.default_mode, SLICE_DEFAULT_MODE)


__all__ = [
    "AUTHORITIES_REFRESH_PERIOD_S",
    "CONFIG_APP_NAME",
    "CONTENT_SCHEME",
    "MAX_REFRESH_PERIOD_S",
    "MIN_REFRESH_PERIOD_S",
    "PROVIDER_ENTRY_POINT_GROUP",
    "REFRESH_THREAD_NAME",
    "SLICE_DEFAULT_MODE",
    "SLICE_MODE_NAMES",
    "PackageInfo",
    "ProviderInfo",
    "Slice",
    "SliceMode",
    "SliceRow",
    "SliceUri",
    "ViewerConfig",
]
