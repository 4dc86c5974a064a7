"""Resolved Elm model handed from the descriptor walker to the renderers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple

from . import model
from .classifier import Classification
from .naming import DecoderName, EncoderName, TypeName, VariableName, VariantName


class FieldShape(str, Enum):
    """Composite wrapping selected for a record field."""

    SCALAR = "scalar"
    OPTIONAL = "optional"
    REPEATED = "repeated"
    MAP = "map"
    ONEOF = "oneof"


@dataclass(frozen=True, slots=True)
class EncoderEntry:
    """One encoder call contributed to a message's position-addressed output."""

    number: int
    expression: str
    field_name: VariableName


@dataclass(frozen=True, slots=True)
class EncoderSlot:
    """A position of the encoded array: a real encoder call or a null placeholder."""

    position: int
    number: int
    expression: str
    placeholder: bool = False
    field_name: Optional[VariableName] = None


@dataclass(frozen=True, slots=True)
class ElmField:
    """A record field of a message type alias.

    ``number`` is ``None`` and ``encoder`` is ``None`` for oneof holders; their
    encoding is driven by one :class:`EncoderEntry` per variant instead.
    """

    name: VariableName
    type_expr: str
    number: Optional[int]
    default: str
    decoder: str
    encoder: Optional[str]
    shape: FieldShape
    value: Optional[Classification] = None
    map_key: Optional[Classification] = None
    oneof: Optional[TypeName] = None
    source: model.Field | model.Oneof | None = None


@dataclass(frozen=True, slots=True)
class ElmOneofVariant:
    name: VariantName
    number: int
    type_expr: str
    decoder: str
    encoder: str
    value: Classification
    source: model.Field | None = None


@dataclass(frozen=True, slots=True)
class ElmOneof:
    """Custom type generated for a protobuf oneof."""

    name: TypeName
    field_name: VariableName
    decoder: DecoderName
    encoder: EncoderName
    unspecified: VariantName
    variants: Tuple[ElmOneofVariant, ...] = ()
    source: model.Oneof | None = None


@dataclass(frozen=True, slots=True)
class ElmEnumVariant:
    name: VariantName
    number: int


@dataclass(frozen=True, slots=True)
class ElmEnum:
    """Custom type generated for a protobuf enum; the first variant is the default."""

    name: TypeName
    full_name: str
    decoder: DecoderName
    encoder: EncoderName
    default_name: VariableName
    default_variant: VariantName
    variants: Tuple[ElmEnumVariant, ...] = ()


@dataclass(frozen=True, slots=True)
class ElmMessage:
    """Type alias generated for a protobuf message, with its nested declarations."""

    name: TypeName
    full_name: str
    path: Tuple[str, ...]
    decoder: DecoderName
    encoder: EncoderName
    default_name: VariableName
    fields: Tuple[ElmField, ...] = ()
    field_encoders: Tuple[EncoderEntry, ...] = ()
    encoder_plan: Tuple[EncoderSlot, ...] = ()
    oneofs: Tuple[ElmOneof, ...] = ()
    enums: Tuple[ElmEnum, ...] = ()
    nested_messages: Tuple["ElmMessage", ...] = ()


@dataclass(frozen=True, slots=True)
class ElmFile:
    """Elm view of one protobuf file."""

    name: str
    package: Optional[str]
    module_name: str
    output_name: str
    additional_imports: Tuple[str, ...] = ()
    import_dict: bool = False
    enums: Tuple[ElmEnum, ...] = ()
    messages: Tuple[ElmMessage, ...] = ()

    def iter_messages(self) -> Iterator[ElmMessage]:
        """Yield every message of the file depth first, nested ones included."""

        stack = list(reversed(self.messages))
        while stack:
            message = stack.pop()
            yield message
            stack.extend(reversed(message.nested_messages))

    def iter_enums(self) -> Iterator[ElmEnum]:
        yield from self.enums
        for message in self.iter_messages():
            yield from message.enums


__all__ = [
    "ElmEnum",
    "ElmEnumVariant",
    "ElmField",
    "ElmFile",
    "ElmMessage",
    "ElmOneof",
    "ElmOneofVariant",
    "EncoderEntry",
    "EncoderSlot",
    "FieldShape",
]
