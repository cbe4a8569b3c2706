"""Slice URI construction and parsing (``content://authority/path``)."""

from __future__ import annotations

from urllib.parse import quote, unquote, urlsplit

from slice_viewer.models import CONTENT_SCHEME, SliceUri

# Characters left unescaped besides ASCII letters, digits and "_.-~"
_UNRESERVED_EXTRA = "!'()*"


def build_slice_uri(authority: str, path: str) -> SliceUri:
    """Build the identifier for raw *authority* and *path* text.

    No validation happens here: empty or odd input still yields a URI and
    the resolver decides whether anything serves it.

    >>> str(build_slice_uri("com.example.provider", "item/1"))
    'content://com.example.provider/item/1'
    """
    return SliceUri(authority=authority, path=path)


def encode_authority(authority: str) -> str:
    """Percent-encode an authority component (":" and "@" included)."""
    return quote(authority, safe=_UNRESERVED_EXTRA)


def encode_path(path: str) -> str:
    """Percent-encode a path, keeping "/" separators and making it absolute."""
    encoded = quote(path, safe="/" + _UNRESERVED_EXTRA)
    if encoded and not encoded.startswith("/"):
        encoded = "/" + encoded
    return encoded


def format_slice_uri(uri: SliceUri) -> str:
    """Render *uri* in its encoded string form."""
    return f"{uri.scheme}://{encode_authority(uri.authority)}{encode_path(uri.path)}"


def parse_slice_uri(text: str) -> SliceUri:
    """Parse an encoded ``content://`` URI string back into a SliceUri.

    Raises ValueError for any other scheme.
    """
    parts = urlsplit(text.strip())
    if parts.scheme != CONTENT_SCHEME:
        raise ValueError(f"Not a {CONTENT_SCHEME}:// URI: {text!r}")
    path = unquote(parts.path)
    if path.startswith("/"):
        path = path[1:]
    return SliceUri(authority=unquote(parts.netloc), path=path)


def path_segments(uri: SliceUri) -> list[str]:
    """Return the non-empty "/"-separated segments of the URI path."""
    return [segment for segment in uri.path.split("/") if segment]


__all__ = [
    "build_slice_uri",
    "encode_authority",
    "encode_path",
    "format_slice_uri",
    "parse_slice_uri",
    "path_segments",
]
