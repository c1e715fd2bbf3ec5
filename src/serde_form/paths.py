"""Bracket path grammar for flat form keys."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from serde_form.errors import FormSyntaxError


@dataclass(frozen=True)
class PathSegment:
    """One addressing unit of a bracketed key.

    ``is_index`` marks the anonymous append marker ``[]``; otherwise ``key``
    names a record field or mapping key.
    """

    key: str = ""
    is_index: bool = False


INDEX = PathSegment(is_index=True)


def parse_key(raw_key: str) -> tuple[PathSegment, ...]:
    """Split a raw form key into path segments.

    Parameters
    ----------
    raw_key
        Key as it appears in the flat multimap, e.g. ``a[b][]``.

    Returns
    -------
    tuple[PathSegment, ...]
        Segments in left-to-right order.

    Raises
    ------
    FormSyntaxError
        Raised when a ``[`` has no matching ``]``.
    """
    segments: list[PathSegment] = []
    rest = raw_key
    while rest:
        start = rest.find("[")
        if start == -1:
            segments.append(PathSegment(rest))
            break
        if start > 0:
            segments.append(PathSegment(rest[:start]))
        rest = rest[start + 1 :]
        end = rest.find("]")
        if end == -1:
            msg = "invalid key syntax: unterminated '['"
            raise FormSyntaxError(msg, key=raw_key)
        part = rest[:end]
        segments.append(PathSegment(part) if part else INDEX)
        rest = rest[end + 1 :]
    return tuple(segments)


def render_path(segments: Sequence[PathSegment]) -> str:
    """Render segments back into a bracketed key.

    Returns
    -------
    str
        First segment bare, later ones wrapped in brackets.
    """
    if not segments:
        return ""
    head, *tail = segments
    parts = ["" if head.is_index else head.key]
    parts.extend("[]" if seg.is_index else f"[{seg.key}]" for seg in tail)
    return "".join(parts)


__all__ = ["INDEX", "PathSegment", "parse_key", "render_path"]
