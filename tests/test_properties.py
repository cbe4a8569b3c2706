"""Property-based tests using Hypothesis.

Verifies invariants across URI handling, authority enumeration,
suggestion filtering and config validation. Each test runs 50 examples
in CI, 200 in dev.

Run:
    pytest tests/test_properties.py -v
    pytest tests/test_properties.py -v --hypothesis-seed=0  # reproducible
"""

from __future__ import annotations

import hypothesis.strategies as st
from hypothesis import given, settings

from slice_viewer.config import _config_to_dict, _dict_to_config
from slice_viewer.models import (
    MAX_REFRESH_PERIOD_S,
    MIN_REFRESH_PERIOD_S,
    SLICE_MODE_NAMES,
    PackageInfo,
    ProviderInfo,
)
from slice_viewer.refresh import AuthorityRefresher, collect_authorities
from slice_viewer.uri import build_slice_uri, parse_slice_uri
from slice_viewer.widgets import filter_authorities

# ── Hypothesis profiles ─────────────────────────────────────────────
settings.register_profile("ci", max_examples=50, deadline=None)
settings.register_profile("dev", max_examples=200, deadline=None)
settings.load_profile("ci")

# ── Custom strategies ────────────────────────────────────────────────

# Surrogates cannot be UTF-8 encoded, so they never appear in a URI
_TEXT = st.text(alphabet=st.characters(exclude_categories=("Cs",)), max_size=40)
_PATHS = _TEXT.filter(lambda s: not s.startswith("/"))

_AUTHORITY_ALPHABET = st.sampled_from("abcdefghijklmnopqrstuvwxyz0123456789._-")
_AUTHORITIES = st.text(alphabet=_AUTHORITY_ALPHABET, min_size=1, max_size=20)


@st.composite
def packages(draw: st.DrawFn) -> PackageInfo:
    """Generate a PackageInfo declaring zero or more providers."""
    name = draw(st.text(alphabet=_AUTHORITY_ALPHABET, min_size=1, max_size=10))
    authorities = draw(st.one_of(st.none(), st.lists(_AUTHORITIES, max_size=5)))
    providers = None
    if authorities is not None:
        providers = [ProviderInfo(authority=a, package=name) for a in authorities]
    return PackageInfo(name=name, version="1.0", providers=providers)


class _StaticRegistry:
    def __init__(self, installed: list[PackageInfo]) -> None:
        self._installed = installed

    def list_installed_packages(self) -> list[PackageInfo]:
        return list(self._installed)

    def load_provider(self, authority: str):
        return None


# ============================================================================
# URI construction
# ============================================================================


class TestSliceUriProperties:
    """Properties of building and parsing slice URIs."""

    @given(authority=_TEXT, path=_TEXT)
    def test_build_is_deterministic(self, authority: str, path: str) -> None:
        """Equal input always produces equal URIs with equal string forms."""
        first = build_slice_uri(authority, path)
        second = build_slice_uri(authority, path)
        assert first == second
        assert str(first) == str(second)

    @given(authority=_TEXT, path=_TEXT)
    def test_string_form_is_content_uri(self, authority: str, path: str) -> None:
        """Any input, including empty, yields a content:// string."""
        assert str(build_slice_uri(authority, path)).startswith("content://")

    @given(authority=_TEXT, path=_PATHS)
    def test_parse_inverts_build(self, authority: str, path: str) -> None:
        """Parsing the encoded string recovers the raw components."""
        uri = build_slice_uri(authority, path)
        assert parse_slice_uri(str(uri)) == uri

    @given(authority=_TEXT, path=_TEXT)
    def test_encoded_form_has_no_raw_separators_in_authority(
        self, authority: str, path: str
    ) -> None:
        """The authority never leaks '/', '?', '#' or '@' into the string form."""
        text = str(build_slice_uri(authority, path))
        netloc = text[len("content://") :].split("/", 1)[0]
        assert not set("/?#@") & set(netloc)


# ============================================================================
# Authority enumeration
# ============================================================================


class TestAuthorityEnumerationProperties:
    """Properties of authority collection and periodic refresh."""

    @given(installed=st.lists(packages(), max_size=8))
    def test_collect_counts_every_declared_provider(self, installed: list[PackageInfo]) -> None:
        """One entry per declared provider, duplicates included, in order."""
        expected = [p.authority for pkg in installed for p in pkg.providers or ()]
        assert collect_authorities(installed) == expected

    @given(installed=st.lists(packages(), max_size=8), ticks=st.integers(min_value=1, max_value=10))
    def test_suggestions_do_not_grow_across_ticks(
        self, installed: list[PackageInfo], ticks: int
    ) -> None:
        """Each tick replaces the list; its length stays the declared count."""
        received: list[list[str]] = []
        refresher = AuthorityRefresher(_StaticRegistry(installed), received.append)

        for _ in range(ticks):
            refresher.tick()

        expected = len(collect_authorities(installed))
        assert len(received) == ticks
        assert all(len(batch) == expected for batch in received)


# ============================================================================
# Suggestion filtering
# ============================================================================


class TestFilterAuthoritiesProperties:
    """Properties of contains-matching with fuzzy fallback."""

    @given(authorities=st.lists(_AUTHORITIES, max_size=15), query=_TEXT)
    def test_result_is_drawn_from_input(self, authorities: list[str], query: str) -> None:
        """Filtering never invents authorities."""
        assert set(filter_authorities(authorities, query)) <= set(authorities)

    @given(authorities=st.lists(_AUTHORITIES, max_size=15), query=_AUTHORITIES)
    def test_contains_matches_keep_source_order(
        self, authorities: list[str], query: str
    ) -> None:
        """When any authority contains the query, exactly those come back in order."""
        contained = [a for a in authorities if query.lower() in a.lower()]
        if contained:
            assert filter_authorities(authorities, query) == contained

    @given(authorities=st.lists(_AUTHORITIES, max_size=15))
    def test_empty_query_is_identity(self, authorities: list[str]) -> None:
        assert filter_authorities(authorities, "") == authorities


# ============================================================================
# Config validation
# ============================================================================

_JSON_VALUES = st.recursive(
    st.none() | st.booleans() | st.integers() | st.floats(allow_nan=False) | st.text(max_size=10),
    lambda children: st.lists(children, max_size=4) | st.dictionaries(st.text(max_size=5), children, max_size=4),
    max_leaves=10,
)


class TestConfigProperties:
    """_dict_to_config guarantees valid output for any input."""

    @given(
        data=st.fixed_dictionaries(
            {},
            optional={
                "default_mode": _JSON_VALUES,
                "refresh_period_seconds": _JSON_VALUES,
                "granted_permissions": _JSON_VALUES,
                "theme_name": _JSON_VALUES,
                "version": _JSON_VALUES,
            },
        )
    )
    def test_any_dict_yields_valid_config(self, data: dict) -> None:
        config = _dict_to_config(data)
        assert config.default_mode in SLICE_MODE_NAMES
        assert MIN_REFRESH_PERIOD_S <= config.refresh_period_seconds <= MAX_REFRESH_PERIOD_S
        assert all(isinstance(p, str) and p for p in config.granted_permissions)
        assert len(set(config.granted_permissions)) == len(config.granted_permissions)

    @given(
        data=st.fixed_dictionaries(
            {},
            optional={
                "default_mode": _JSON_VALUES,
                "refresh_period_seconds": _JSON_VALUES,
                "granted_permissions": _JSON_VALUES,
            },
        )
    )
    def test_round_trip_is_stable(self, data: dict) -> None:
        """Serializing a validated config and reading it back changes nothing."""
        config = _dict_to_config(data)
        assert _dict_to_config(_config_to_dict(config)) == config
