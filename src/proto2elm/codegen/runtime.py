"""Python mirror of the generated Elm port codecs, used by tests."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .. import model
from ..classifier import FLOAT_TYPE, INT64_KINDS, Classification
from ..ir import ElmEnum, ElmField, ElmFile, ElmMessage, ElmOneof, FieldShape


@dataclass(frozen=True, slots=True)
class OneofValue:
    """Value held by a oneof record field; ``value`` is ``None`` when unspecified."""

    variant: str
    value: Any = None


class PythonPortRuntime:
    """Runtime helpers that mirror the generated Elm semantics for tests.

    Messages travel as lists where index ``N - 1`` holds field ``N`` and ``None``
    stands for ``null``. Records are plain dictionaries keyed by the Elm field
    names, enums are their variant names and oneofs are :class:`OneofValue`.
    References that are not declared in the file, well known types included,
    pass through unchanged.
    """

    def __init__(self, elm_file: ElmFile) -> None:
        self._messages: Dict[str, ElmMessage] = {
            message.full_name: message for message in elm_file.iter_messages()
        }
        self._enums: Dict[str, ElmEnum] = {enum.full_name: enum for enum in elm_file.iter_enums()}

    # Public helpers -----------------------------------------------------
    def encode(self, message_full_name: str, record: Dict[str, Any]) -> List[Any]:
        """Return the port array the generated encoder produces for *record*."""

        message = self._messages[message_full_name]
        fields = {field.name: field for field in message.fields}
        oneofs = {oneof.field_name: oneof for oneof in message.oneofs}
        encoded: List[Any] = []
        for slot in message.encoder_plan:
            if slot.placeholder:
                encoded.append(None)
                continue
            field = fields[slot.field_name]
            value = record.get(field.name, self.default_value(field))
            if field.shape is FieldShape.ONEOF:
                encoded.append(self._encode_oneof(oneofs[field.name], slot.number, value))
            else:
                encoded.append(self._encode_field(field, value))
        return encoded

    def decode(self, message_full_name: str, array: Optional[List[Any]]) -> Dict[str, Any]:
        """Return the record the generated decoder produces for *array*."""

        message = self._messages[message_full_name]
        array = array or []
        oneofs = {oneof.field_name: oneof for oneof in message.oneofs}
        record: Dict[str, Any] = {}
        for field in message.fields:
            if field.shape is FieldShape.ONEOF:
                record[field.name] = self._decode_oneof(oneofs[field.name], array)
                continue
            raw = _slot(array, field.number)
            if raw is None:
                record[field.name] = self.default_value(field)
            else:
                record[field.name] = self._decode_field(field, raw)
        return record

    def default_record(self, message_full_name: str) -> Dict[str, Any]:
        message = self._messages[message_full_name]
        return {field.name: self.default_value(field) for field in message.fields}

    def default_value(self, field: ElmField) -> Any:
        """Return the Python counterpart of the field's Elm default."""

        if field.shape is FieldShape.ONEOF:
            return OneofValue(field.default)
        if field.shape is FieldShape.OPTIONAL:
            return None
        if field.shape is FieldShape.REPEATED:
            return []
        if field.shape is FieldShape.MAP:
            return {}
        return self._scalar_default(field)

    # Encoding helpers ---------------------------------------------------
    def _encode_field(self, field: ElmField, value: Any) -> Any:
        value_type = _value_type(field)
        if field.shape is FieldShape.OPTIONAL:
            return None if value is None else self._encode_value(value_type, value)
        if field.shape is FieldShape.REPEATED:
            return [self._encode_value(value_type, item) for item in value]
        if field.shape is FieldShape.MAP:
            key_type = _key_type(field)
            return [
                [self._encode_value(key_type, key), self._encode_value(value_type, value[key])]
                for key in sorted(value)
            ]
        return self._encode_value(value_type, value)

    def _encode_oneof(self, oneof: ElmOneof, number: int, value: OneofValue) -> Any:
        for variant in oneof.variants:
            if variant.name == value.variant:
                if variant.number != number:
                    return None
                return self._encode_value(variant.value, value.value)
        return None

    def _encode_value(self, classification: Classification, value: Any) -> Any:
        if classification.well_known is not None:
            return value
        kind = classification.kind
        if kind is model.WireKind.MESSAGE:
            if classification.reference in self._messages:
                return self.encode(classification.reference, value)
            return value
        if kind is model.WireKind.ENUM:
            enum = self._enums.get(classification.reference or "")
            if enum is None:
                return value
            for variant in enum.variants:
                if variant.name == value:
                    return variant.number
            raise ValueError(f"'{value}' is not a variant of {enum.name}")
        if kind in INT64_KINDS:
            return str(int(value))
        if kind is model.WireKind.BYTES:
            return base64.b64encode(bytes(value)).decode("ascii")
        if classification.type_expr == FLOAT_TYPE:
            return float(value)
        return value

    # Decoding helpers ---------------------------------------------------
    def _decode_field(self, field: ElmField, raw: Any) -> Any:
        value_type = _value_type(field)
        if field.shape is FieldShape.OPTIONAL:
            return self._decode_value(value_type, raw)
        if field.shape is FieldShape.REPEATED:
            return [self._decode_value(value_type, item) for item in raw]
        if field.shape is FieldShape.MAP:
            key_type = _key_type(field)
            return {
                self._decode_value(key_type, key): self._decode_value(value_type, value)
                for key, value in raw
            }
        return self._decode_value(value_type, raw)

    def _decode_oneof(self, oneof: ElmOneof, array: List[Any]) -> OneofValue:
        for variant in oneof.variants:
            raw = _slot(array, variant.number)
            if raw is not None:
                return OneofValue(variant.name, self._decode_value(variant.value, raw))
        return OneofValue(oneof.unspecified)

    def _decode_value(self, classification: Classification, raw: Any) -> Any:
        if classification.well_known is not None:
            return raw
        kind = classification.kind
        if kind is model.WireKind.MESSAGE:
            if classification.reference in self._messages:
                return self.decode(classification.reference, raw)
            return raw
        if kind is model.WireKind.ENUM:
            enum = self._enums.get(classification.reference or "")
            if enum is None:
                return raw
            for variant in enum.variants:
                if variant.number == raw:
                    return variant.name
            return enum.default_variant
        if kind in INT64_KINDS:
            return int(raw)
        if kind is model.WireKind.BYTES:
            return base64.b64decode(raw)
        if classification.type_expr == FLOAT_TYPE:
            return float(raw)
        return raw

    def _scalar_default(self, field: ElmField) -> Any:
        value_type = _value_type(field)
        kind = value_type.kind
        source = field.source if isinstance(field.source, model.Field) else None
        explicit = source.default_value if source is not None else None
        if kind is model.WireKind.MESSAGE:
            return None
        if kind is model.WireKind.ENUM:
            enum = self._enums.get(value_type.reference or "")
            if enum is not None and field.default == enum.default_name:
                return enum.default_variant
            return field.default
        if kind is model.WireKind.STRING:
            return explicit or ""
        if kind is model.WireKind.BYTES:
            return b""
        if kind is model.WireKind.BOOL:
            return bool(explicit) and explicit.strip().lower() == "true"
        if value_type.type_expr == FLOAT_TYPE:
            return float(explicit) if explicit else 0.0
        return int(explicit) if explicit else 0


def _value_type(field: ElmField) -> Classification:
    if field.value is None:
        raise ValueError(f"Field '{field.name}' has no value classification")
    return field.value


def _key_type(field: ElmField) -> Classification:
    if field.map_key is None:
        raise ValueError(f"Map field '{field.name}' has no key classification")
    return field.map_key


def _slot(array: List[Any], number: Optional[int]) -> Any:
    if number is None or number < 1 or number > len(array):
        return None
    return array[number - 1]


__all__ = ["OneofValue", "PythonPortRuntime"]
