"""Widget classes for the slice viewer UI."""

from slice_viewer.widgets.slice_view import SliceView, render_slice, render_slice_plain
from slice_viewer.widgets.suggestions import (
    FUZZY_SCORE_CUTOFF,
    AuthoritySuggester,
    AuthoritySuggestions,
    filter_authorities,
)

__all__ = [
    "FUZZY_SCORE_CUTOFF",
    "AuthoritySuggester",
    "AuthoritySuggestions",
    "SliceView",
    "filter_authorities",
    "render_slice",
    "render_slice_plain",
]
