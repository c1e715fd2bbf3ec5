"""Field tag parsing for form records."""

from __future__ import annotations

from dataclasses import dataclass

_IGNORE = "-"


@dataclass(frozen=True)
class FieldTag:
    """Per-field form metadata."""

    name: str = ""
    omit_if_empty: bool = False
    ignore: bool = False


def parse_tag(text: str | None) -> FieldTag:
    """Parse a tag declaration such as ``"age,omitempty"``.

    Parameters
    ----------
    text
        Raw tag text; ``None`` and ``""`` yield the defaults.

    Returns
    -------
    FieldTag
        Parsed tag. Unrecognized flags are dropped rather than rejected.
    """
    raw = (text or "").strip()
    if raw == _IGNORE:
        return FieldTag(ignore=True)
    name, *flags = (part.strip() for part in raw.split(","))
    ignore = name == _IGNORE
    omit = False
    for flag in flags:
        if flag == "omitempty":
            omit = True
        elif flag == "ignore":
            ignore = True
    return FieldTag(
        name="" if ignore else name,
        omit_if_empty=omit,
        ignore=ignore,
    )


__all__ = ["FieldTag", "parse_tag"]
