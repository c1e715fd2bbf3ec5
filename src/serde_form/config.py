"""Codec configuration models and resolution helpers."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from typing import Annotated

import msgspec

from serde_form.errors import FormConfigError
from serde_form.schema import DEFAULT_TAG_KEY

logger = logging.getLogger(__name__)

ENV_PREFIX = "SERDE_FORM_"

_VALIDATION_RE = re.compile(r"^(?P<summary>.*?)(?:\s+-\s+at\s+`(?P<path>[^`]+)`)?$")

NonEmptyStr = Annotated[str, msgspec.Meta(min_length=1)]
PositiveInt = Annotated[int, msgspec.Meta(gt=0)]


class StructBaseStrict(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    omit_defaults=True,
    repr_omit_defaults=True,
    forbid_unknown_fields=True,
):
    """Base struct for strict configuration contracts."""


class FormCodecConfig(StructBaseStrict, frozen=True):
    """Configuration for a form codec.

    Attributes
    ----------
    tag_key
        Field metadata key holding form tags.
    max_pairs
        Reject payloads with more pairs than this.
    max_input_bytes
        Reject payloads larger than this many bytes.
    encoding
        Character encoding for bytes payloads and streams.
    """

    tag_key: NonEmptyStr = DEFAULT_TAG_KEY
    max_pairs: PositiveInt | None = None
    max_input_bytes: PositiveInt | None = None
    encoding: NonEmptyStr = "utf-8"


DEFAULT_CONFIG = FormCodecConfig()


def validation_error_payload(exc: msgspec.ValidationError) -> dict[str, str]:
    """Normalize a msgspec ValidationError for diagnostics.

    Parameters
    ----------
    exc
        ValidationError raised by msgspec conversion.

    Returns
    -------
    dict[str, str]
        Normalized error payload containing type, summary, and optional path.
    """
    message = str(exc).strip()
    match = _VALIDATION_RE.match(message)
    payload: dict[str, str] = {"type": exc.__class__.__name__}
    if match:
        summary = (match.group("summary") or "").strip()
        if summary:
            payload["summary"] = summary
        path = match.group("path")
        if path:
            payload["path"] = path
        return payload
    payload["summary"] = message
    return payload


def config_from_mapping(values: Mapping[str, object]) -> FormCodecConfig:
    """Build a config from a plain mapping.

    Returns
    -------
    FormCodecConfig
        Validated configuration.

    Raises
    ------
    FormConfigError
        Raised when validation fails; ``key`` carries the offending path.
    """
    try:
        return msgspec.convert(dict(values), type=FormCodecConfig)
    except msgspec.ValidationError as exc:
        payload = validation_error_payload(exc)
        msg = payload.get("summary", "invalid configuration")
        raise FormConfigError(msg, key=payload.get("path"), target="FormCodecConfig") from exc


def _env_text(name: str) -> str | None:
    raw = os.environ.get(name)
    if raw is None:
        return None
    stripped = raw.strip()
    return stripped or None


def _env_int(name: str) -> int | None:
    raw = _env_text(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s: %r", name, raw)
        return None


def config_from_env(*, prefix: str = ENV_PREFIX) -> FormCodecConfig:
    """Resolve configuration from environment variables.

    Reads ``<prefix>TAG_KEY``, ``<prefix>MAX_PAIRS``,
    ``<prefix>MAX_INPUT_BYTES`` and ``<prefix>ENCODING``. Unset or blank
    variables keep their defaults; invalid integers are logged and ignored.

    Returns
    -------
    FormCodecConfig
        Resolved configuration.
    """
    values: dict[str, object] = {}
    tag_key = _env_text(f"{prefix}TAG_KEY")
    if tag_key is not None:
        values["tag_key"] = tag_key
    encoding = _env_text(f"{prefix}ENCODING")
    if encoding is not None:
        values["encoding"] = encoding
    for field in ("max_pairs", "max_input_bytes"):
        parsed = _env_int(f"{prefix}{field.upper()}")
        if parsed is not None:
            values[field] = parsed
    return config_from_mapping(values)


__all__ = [
    "DEFAULT_CONFIG",
    "ENV_PREFIX",
    "FormCodecConfig",
    "StructBaseStrict",
    "config_from_env",
    "config_from_mapping",
    "validation_error_payload",
]
