"""Classify protobuf fields into Elm types, codecs and default values."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from . import model
from .errors import UnsupportedWireKindError
from .naming import NameResolver

INT_TYPE = "Int"
FLOAT_TYPE = "Float"
STRING_TYPE = "String"
BYTES_TYPE = "Bytes"
BOOL_TYPE = "Bool"

ABSENT_VALUE = "Nothing"
EMPTY_LIST = "[]"


@dataclass(frozen=True, slots=True)
class WellKnownType:
    """Fixed Elm type and codecs for a Google well known type."""

    type_expr: str
    decoder: str
    encoder: str


WELL_KNOWN_TYPES: Mapping[str, WellKnownType] = MappingProxyType(
    {
        "google.protobuf.Timestamp": WellKnownType("Timestamp", "timestampDecoder", "timestampEncoder"),
        "google.protobuf.Int32Value": WellKnownType(INT_TYPE, "intValueDecoder", "intValueEncoder"),
        "google.protobuf.Int64Value": WellKnownType(INT_TYPE, "intValueDecoder", "numericStringEncoder"),
        "google.protobuf.UInt32Value": WellKnownType(INT_TYPE, "intValueDecoder", "intValueEncoder"),
        "google.protobuf.UInt64Value": WellKnownType(INT_TYPE, "intValueDecoder", "numericStringEncoder"),
        "google.protobuf.DoubleValue": WellKnownType(FLOAT_TYPE, "floatValueDecoder", "floatValueEncoder"),
        "google.protobuf.FloatValue": WellKnownType(FLOAT_TYPE, "floatValueDecoder", "floatValueEncoder"),
        "google.protobuf.StringValue": WellKnownType(STRING_TYPE, "stringValueDecoder", "stringValueEncoder"),
        "google.protobuf.BytesValue": WellKnownType(BYTES_TYPE, "bytesValueDecoder", "bytesValueEncoder"),
        "google.protobuf.BoolValue": WellKnownType(BOOL_TYPE, "boolValueDecoder", "boolValueEncoder"),
    }
)

INT32_KINDS = frozenset(
    {
        model.WireKind.INT32,
        model.WireKind.UINT32,
        model.WireKind.SINT32,
        model.WireKind.FIXED32,
        model.WireKind.SFIXED32,
    }
)
INT64_KINDS = frozenset(
    {
        model.WireKind.INT64,
        model.WireKind.UINT64,
        model.WireKind.SINT64,
        model.WireKind.FIXED64,
        model.WireKind.SFIXED64,
    }
)
FLOAT_KINDS = frozenset({model.WireKind.FLOAT, model.WireKind.DOUBLE})
REFERENCE_KINDS = frozenset({model.WireKind.ENUM, model.WireKind.MESSAGE})

# kind -> (type, decoder, encoder, zero value)
_SCALAR_CODECS: Dict[model.WireKind, Tuple[str, str, str, str]] = {}
for _kind in INT32_KINDS:
    _SCALAR_CODECS[_kind] = (INT_TYPE, "JD.int", "JE.int", "0")
for _kind in INT64_KINDS:
    _SCALAR_CODECS[_kind] = (INT_TYPE, "intDecoder", "numericStringEncoder", "0")
for _kind in FLOAT_KINDS:
    _SCALAR_CODECS[_kind] = (FLOAT_TYPE, "JD.float", "JE.float", "0")
_SCALAR_CODECS[model.WireKind.BOOL] = (BOOL_TYPE, "JD.bool", "JE.bool", "False")
_SCALAR_CODECS[model.WireKind.STRING] = (STRING_TYPE, "JD.string", "JE.string", '""')
_SCALAR_CODECS[model.WireKind.BYTES] = (BYTES_TYPE, "bytesFieldDecoder", "bytesFieldEncoder", EMPTY_LIST)
del _kind

_SPECIAL_FLOATS = {
    "inf": "(1 / 0)",
    "+inf": "(1 / 0)",
    "-inf": "(-1 / 0)",
    "nan": "(0 / 0)",
}


@dataclass(frozen=True, slots=True)
class Classification:
    """Elm type, codec names and default value resolved for one field."""

    kind: model.WireKind
    type_expr: str
    decoder: str
    encoder: str
    default: str
    reference: Optional[str] = None
    well_known: Optional[WellKnownType] = None


def quote_string(value: str) -> str:
    """Return *value* as an Elm string literal."""

    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def _numeric_literal(value: str) -> str:
    stripped = value.strip()
    special = _SPECIAL_FLOATS.get(stripped.lower())
    if special is not None:
        return special
    if stripped.startswith("-"):
        return f"({stripped})"
    return stripped


class TypeClassifier:
    """Dispatch on a field's wire kind to find its Elm representation."""

    def __init__(
        self,
        resolver: NameResolver,
        well_known: Mapping[str, WellKnownType] = WELL_KNOWN_TYPES,
    ) -> None:
        self._resolver = resolver
        self._well_known = well_known

    def classify(self, field: model.Field) -> Classification:
        """Return the classification of *field*, default value included."""

        kind = field.kind
        if kind in _SCALAR_CODECS:
            type_expr, decoder, encoder, _ = _SCALAR_CODECS[kind]
            return Classification(
                kind=kind,
                type_expr=type_expr,
                decoder=decoder,
                encoder=encoder,
                default=self.field_default(field),
            )

        if kind in REFERENCE_KINDS:
            if not field.type_name:
                raise UnsupportedWireKindError(kind, field.name)
            binding = self._well_known.get(field.type_name)
            if binding is not None:
                return Classification(
                    kind=kind,
                    type_expr=binding.type_expr,
                    decoder=binding.decoder,
                    encoder=binding.encoder,
                    default=self.field_default(field),
                    reference=field.type_name,
                    well_known=binding,
                )
            type_name = self._resolver.external_type(field.type_name)
            return Classification(
                kind=kind,
                type_expr=type_name,
                decoder=self._resolver.decoder_name(type_name),
                encoder=self._resolver.encoder_name(type_name),
                default=self.field_default(field),
                reference=field.type_name,
            )

        raise UnsupportedWireKindError(kind, field.name)

    def field_default(self, field: model.Field) -> str:
        """Return the Elm expression a record uses when *field* is absent."""

        if field.is_repeated:
            return EMPTY_LIST

        explicit = field.default_value
        kind = field.kind
        if explicit is not None:
            if kind is model.WireKind.STRING:
                return quote_string(explicit)
            if explicit:
                if kind is model.WireKind.BOOL:
                    return "True" if explicit.strip().lower() == "true" else "False"
                if kind in INT32_KINDS or kind in INT64_KINDS or kind in FLOAT_KINDS:
                    return _numeric_literal(explicit)
                if kind is model.WireKind.ENUM and field.type_name:
                    return self._resolver.external_variant(field.type_name, explicit)

        return self.zero_value(field)

    def zero_value(self, field: model.Field) -> str:
        kind = field.kind
        if kind in _SCALAR_CODECS:
            return _SCALAR_CODECS[kind][3]
        if kind is model.WireKind.ENUM and field.type_name:
            return self._resolver.enum_default_name(self._resolver.external_type(field.type_name))
        if kind is model.WireKind.MESSAGE:
            return ABSENT_VALUE
        raise UnsupportedWireKindError(kind, field.name)


__all__ = [
    "Classification",
    "TypeClassifier",
    "WELL_KNOWN_TYPES",
    "WellKnownType",
    "quote_string",
]
