"""Slice Viewer, a terminal viewer for live slices served by installed providers."""

from slice_viewer.models import Slice, SliceMode, SliceRow, SliceUri
from slice_viewer.providers import SlicePermissionError, SliceProvider
from slice_viewer.uri import build_slice_uri, parse_slice_uri

__version__ = "1.0.0"

__all__ = [
    "Slice",
    "SliceMode",
    "SlicePermissionError",
    "SliceProvider",
    "SliceRow",
    "SliceUri",
    "__version__",
    "build_slice_uri",
    "parse_slice_uri",
]
