"""Error taxonomy for form decoding and encoding."""

from __future__ import annotations

from enum import StrEnum


class FormErrorKind(StrEnum):
    """Categorize form codec errors."""

    SYNTAX = "syntax"
    STRUCTURE = "structure"
    TYPE = "type"
    INVALID_CALL = "invalid_call"
    CONFIG = "config"
    LIMIT = "limit"


class FormError(Exception):
    """Base exception for form codec failures.

    Parameters
    ----------
    message
        Human readable description.
    kind
        Error category.
    key
        Offending raw key or rendered path, when known.
    target
        Name of the target type, when known.
    """

    default_kind: FormErrorKind = FormErrorKind.STRUCTURE

    def __init__(
        self,
        message: str,
        *,
        kind: FormErrorKind | None = None,
        key: str | None = None,
        target: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind or self.default_kind
        self.key = key
        self.target = target

    def __str__(self) -> str:
        text = f"form: {self.message}"
        if self.key is not None:
            text = f"{text} (key {self.key!r})"
        return text

    def with_key(self, key: str) -> FormError:
        """Attach the offending key unless one is already recorded.

        Returns
        -------
        FormError
            The same error instance.
        """
        if self.key is None:
            self.key = key
        return self


class FormSyntaxError(FormError, ValueError):
    """Raised for malformed keys or form payloads."""

    default_kind = FormErrorKind.SYNTAX


class FormStructureError(FormError, ValueError):
    """Raised when a path does not fit the shape of the target."""

    default_kind = FormErrorKind.STRUCTURE


class FormTypeError(FormError, TypeError):
    """Raised when a leaf cannot be coerced or a kind is unsupported."""

    default_kind = FormErrorKind.TYPE


class FormInvalidCallError(FormError, TypeError):
    """Raised when a decode target is not usable."""

    default_kind = FormErrorKind.INVALID_CALL


class FormConfigError(FormError, ValueError):
    """Raised when codec configuration fails validation."""

    default_kind = FormErrorKind.CONFIG


class FormLimitError(FormError, ValueError):
    """Raised when an input exceeds configured limits."""

    default_kind = FormErrorKind.LIMIT


def type_name(tp: object) -> str:
    """Return a readable name for a type or annotation.

    Returns
    -------
    str
        Qualified name for classes, ``repr`` otherwise.
    """
    if isinstance(tp, type):
        return tp.__qualname__
    return repr(tp)


__all__ = [
    "FormConfigError",
    "FormError",
    "FormErrorKind",
    "FormInvalidCallError",
    "FormLimitError",
    "FormStructureError",
    "FormSyntaxError",
    "FormTypeError",
    "type_name",
]
