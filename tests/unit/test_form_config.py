"""Tests for codec configuration resolution."""

from __future__ import annotations

import logging

import msgspec
import pytest

from serde_form.config import (
    DEFAULT_CONFIG,
    FormCodecConfig,
    config_from_env,
    config_from_mapping,
    validation_error_payload,
)
from serde_form.errors import FormConfigError, FormErrorKind


def test_defaults() -> None:
    """Expose unlimited defaults under the form tag key."""
    assert DEFAULT_CONFIG == FormCodecConfig()
    assert DEFAULT_CONFIG.tag_key == "form"
    assert DEFAULT_CONFIG.max_pairs is None
    assert DEFAULT_CONFIG.max_input_bytes is None
    assert DEFAULT_CONFIG.encoding == "utf-8"


def test_config_from_mapping() -> None:
    """Validate plain mappings into a config."""
    config = config_from_mapping({"tag_key": "query", "max_pairs": 10})
    assert config == FormCodecConfig(tag_key="query", max_pairs=10)


@pytest.mark.parametrize(
    "values",
    [{"max_pairs": 0}, {"max_input_bytes": -1}, {"tag_key": ""}, {"bogus": 1}, {"max_pairs": "x"}],
)
def test_config_from_mapping_rejects(values: dict[str, object]) -> None:
    """Wrap validation failures as config errors."""
    with pytest.raises(FormConfigError) as excinfo:
        config_from_mapping(values)
    assert excinfo.value.kind is FormErrorKind.CONFIG


def test_config_error_carries_path() -> None:
    """Record the offending field path."""
    with pytest.raises(FormConfigError) as excinfo:
        config_from_mapping({"max_pairs": 0})
    assert excinfo.value.key == "$.max_pairs"


def test_config_is_frozen() -> None:
    """Refuse attribute assignment."""
    config = FormCodecConfig()
    with pytest.raises(AttributeError):
        config.max_pairs = 3  # type: ignore[misc]


def test_validation_error_payload() -> None:
    """Split msgspec messages into summary and path."""
    try:
        msgspec.convert({"max_pairs": "x"}, type=FormCodecConfig)
    except msgspec.ValidationError as exc:
        payload = validation_error_payload(exc)
    else:
        pytest.fail("expected a validation error")
    assert payload["type"] == "ValidationError"
    assert payload["path"] == "$.max_pairs"
    assert "int" in payload["summary"]


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Read prefixed environment variables."""
    monkeypatch.setenv("SERDE_FORM_TAG_KEY", " query ")
    monkeypatch.setenv("SERDE_FORM_MAX_PAIRS", "100")
    monkeypatch.setenv("SERDE_FORM_MAX_INPUT_BYTES", "4096")
    monkeypatch.setenv("SERDE_FORM_ENCODING", "latin-1")
    assert config_from_env() == FormCodecConfig(
        tag_key="query",
        max_pairs=100,
        max_input_bytes=4096,
        encoding="latin-1",
    )


def test_config_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep defaults for unset and blank variables."""
    for name in ("TAG_KEY", "MAX_PAIRS", "MAX_INPUT_BYTES", "ENCODING"):
        monkeypatch.delenv(f"SERDE_FORM_{name}", raising=False)
    monkeypatch.setenv("SERDE_FORM_TAG_KEY", "   ")
    assert config_from_env() == DEFAULT_CONFIG


def test_config_from_env_invalid_integer(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Log and ignore malformed integers."""
    monkeypatch.setenv("SERDE_FORM_MAX_PAIRS", "many")
    monkeypatch.delenv("SERDE_FORM_MAX_INPUT_BYTES", raising=False)
    with caplog.at_level(logging.WARNING, logger="serde_form.config"):
        config = config_from_env()
    assert config.max_pairs is None
    assert "Invalid integer for SERDE_FORM_MAX_PAIRS" in caplog.text


def test_config_from_env_custom_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    """Honor a custom variable prefix."""
    monkeypatch.setenv("APP_FORM_MAX_PAIRS", "5")
    assert config_from_env(prefix="APP_FORM_").max_pairs == 5


def test_config_from_env_invalid_value(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reject values that parse but fail validation."""
    monkeypatch.setenv("SERDE_FORM_MAX_PAIRS", "0")
    with pytest.raises(FormConfigError):
        config_from_env()
