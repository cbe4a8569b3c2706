"""Authority autocomplete: inline suggester and the filtered suggestion list."""

from __future__ import annotations

from collections.abc import Sequence

from rapidfuzz import fuzz, process
from textual.message import Message
from textual.suggester import Suggester
from textual.widgets import OptionList
from textual.widgets.option_list import Option

FUZZY_SCORE_CUTOFF = 60  # Minimum score (0-100) for a fuzzy fallback match
FUZZY_LIMIT = 20  # Maximum number of fuzzy fallback matches


def filter_authorities(authorities: Sequence[str], query: str) -> list[str]:
    """Return authorities containing *query* (case-insensitive), in source order.

    When nothing contains the query, fall back to fuzzy matches ordered
    by score. An empty query matches everything.
    """
    needle = query.strip().lower()
    if not needle:
        return list(authorities)
    matches = [authority for authority in authorities if needle in authority.lower()]
    if matches:
        return matches
    scored = process.extract(
        needle,
        list(authorities),
        scorer=fuzz.partial_ratio,
        processor=str.lower,
        score_cutoff=FUZZY_SCORE_CUTOFF,
        limit=FUZZY_LIMIT,
    )
    return [choice for choice, _score, _index in scored]


class AuthoritySuggester(Suggester):
    """Inline completion from the live authority list (prefix match)."""

    def __init__(self) -> None:
        super().__init__(use_cache=False, case_sensitive=False)
        self._authorities: tuple[str, ...] = ()

    def set_authorities(self, authorities: Sequence[str]) -> None:
        self._authorities = tuple(authorities)

    async def get_suggestion(self, value: str) -> str | None:
        # value arrives casefolded because case_sensitive=False
        if not value:
            return None
        for authority in self._authorities:
            if authority.casefold().startswith(value) and len(authority) > len(value):
                return authority
        return None


class AuthoritySuggestions(OptionList):
    """Drop-down style list of authorities matching the authority input."""

    class Picked(Message):
        """The user chose an authority from the list."""

        def __init__(self, authority: str) -> None:
            super().__init__()
            self.authority = authority

    def __init__(self, *, id: str | None = None) -> None:
        super().__init__(id=id)
        self._authorities: tuple[str, ...] = ()
        self._query = ""

    @property
    def authorities(self) -> tuple[str, ...]:
        return self._authorities

    @property
    def visible_authorities(self) -> list[str]:
        return filter_authorities(self._authorities, self._query)

    def replace_authorities(self, authorities: Sequence[str]) -> None:
        """Clear and repopulate from a fresh enumeration."""
        self._authorities = tuple(authorities)
        self._rebuild()

    def set_query(self, query: str) -> None:
        self._query = query
        self._rebuild()

    def _rebuild(self) -> None:
        self.clear_options()
        self.add_options([Option(authority) for authority in self.visible_authorities])

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self.post_message(self.Picked(str(event.option.prompt)))
