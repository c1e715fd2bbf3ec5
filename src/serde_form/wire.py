"""``application/x-www-form-urlencoded`` parsing and serialization."""

from __future__ import annotations

import re
from collections.abc import Iterable
from urllib.parse import quote_plus, unquote_plus

from serde_form.core_types import FormPairs
from serde_form.errors import FormSyntaxError

_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _unescape(text: str, *, encoding: str) -> str:
    if _BAD_ESCAPE_RE.search(text):
        msg = f"invalid URL escape in {text!r}"
        raise FormSyntaxError(msg)
    try:
        return unquote_plus(text, encoding=encoding, errors="strict")
    except UnicodeDecodeError as exc:
        msg = f"invalid {encoding} escape sequence in {text!r}"
        raise FormSyntaxError(msg) from exc


def parse_form(data: bytes | str, *, encoding: str = "utf-8") -> FormPairs:
    """Parse a form payload into ordered (key, value) pairs.

    Parameters
    ----------
    data
        Encoded payload; bytes are decoded with ``encoding``.
    encoding
        Character encoding of the payload and its percent escapes.

    Returns
    -------
    FormPairs
        Pairs in payload order. Keys may repeat.

    Raises
    ------
    FormSyntaxError
        Raised for empty input, ``;`` separators and malformed escapes.
    """
    if isinstance(data, bytes):
        try:
            text = data.decode(encoding)
        except UnicodeDecodeError as exc:
            msg = f"form payload is not valid {encoding}"
            raise FormSyntaxError(msg) from exc
    else:
        text = data
    text = text.strip()
    if not text:
        msg = "empty input"
        raise FormSyntaxError(msg)
    pairs: FormPairs = []
    for chunk in text.split("&"):
        if not chunk:
            continue
        raw_key, _, raw_value = chunk.partition("=")
        if ";" in chunk:
            msg = "invalid semicolon separator in query"
            raise FormSyntaxError(msg, key=raw_key)
        key = _unescape(raw_key, encoding=encoding)
        try:
            value = _unescape(raw_value, encoding=encoding)
        except FormSyntaxError as exc:
            exc.with_key(key)
            raise
        pairs.append((key, value))
    return pairs


def serialize_form(pairs: Iterable[tuple[str, str]], *, encoding: str = "utf-8") -> str:
    """Join pairs into an escaped form payload, preserving their order.

    Returns
    -------
    str
        Payload such as ``a%5Bb%5D=1&c=x+y``.
    """
    return "&".join(
        f"{quote_plus(key, encoding=encoding)}={quote_plus(value, encoding=encoding)}"
        for key, value in pairs
    )


__all__ = ["parse_form", "serialize_form"]
