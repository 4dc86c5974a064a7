"""Exception types raised while compiling descriptors into Elm models."""

from __future__ import annotations


class Proto2ElmError(Exception):
    """Base class for failures that abort a generation batch."""


class ConfigurationError(Proto2ElmError, ValueError):
    """Raised for unknown or malformed plugin parameters and naming rules."""


class UnsupportedWireKindError(Proto2ElmError, ValueError):
    """Raised when a field uses a descriptor type with no Elm mapping."""

    def __init__(self, kind: object, field_name: str | None = None) -> None:
        self.kind = kind
        self.field_name = field_name
        kind = getattr(kind, "value", kind)
        if field_name:
            message = f"Unsupported field type '{kind}' for field '{field_name}'"
        else:
            message = f"Unsupported field type '{kind}'"
        super().__init__(message)


class MalformedSchemaError(Proto2ElmError, ValueError):
    """Raised when the descriptor tree breaks a structural assumption."""


__all__ = [
    "ConfigurationError",
    "MalformedSchemaError",
    "Proto2ElmError",
    "UnsupportedWireKindError",
]
