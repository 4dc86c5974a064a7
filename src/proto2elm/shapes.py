"""Select the record wrapping for a field and compose its Elm codecs."""

from __future__ import annotations

from typing import Sequence

from . import model
from .alignment import decode_index
from .classifier import ABSENT_VALUE, EMPTY_LIST, Classification, TypeClassifier
from .errors import MalformedSchemaError
from .ir import ElmField, ElmOneof, ElmOneofVariant, EncoderEntry, FieldShape
from .naming import NameResolver, TypeName

DICT_EMPTY = "Dict.empty"


class ShapeResolver:
    """Turn model fields into :class:`ElmField` and oneof variant nodes."""

    def __init__(self, classifier: TypeClassifier, resolver: NameResolver) -> None:
        self._classifier = classifier
        self._resolver = resolver

    def shape_of(self, field: model.Field, message: model.Message) -> FieldShape:
        """Return the shape of *field* declared on *message*.

        Map entries win over everything, then oneof membership, then singular
        message fields (wrapped in ``Maybe``), then repeated fields. Anything
        else, proto3 ``optional`` scalars included, is a plain field.
        """

        if field.kind is model.WireKind.MESSAGE and message.find_map_entry(field.type_name):
            return FieldShape.MAP
        if field.oneof is not None:
            return FieldShape.ONEOF
        if (
            field.cardinality is model.FieldCardinality.OPTIONAL
            and field.kind is model.WireKind.MESSAGE
        ):
            return FieldShape.OPTIONAL
        if field.is_repeated:
            return FieldShape.REPEATED
        return FieldShape.SCALAR

    def resolve(self, field: model.Field, message: model.Message) -> ElmField:
        """Return the record field for a field that is not part of a oneof."""

        shape = self.shape_of(field, message)
        if shape is FieldShape.ONEOF:
            raise ValueError(f"Field '{field.name}' belongs to oneof '{field.oneof}'")
        if shape is FieldShape.MAP:
            return self._map_field(field, message)

        name = self._resolver.field_name(field.name)
        value = self._classifier.classify(field)
        idx = decode_index(field.number)

        if shape is FieldShape.OPTIONAL:
            return ElmField(
                name=name,
                type_expr=f"Maybe {value.type_expr}",
                number=field.number,
                default=ABSENT_VALUE,
                decoder=f"idxWithDefault {idx} (JD.maybe {value.decoder}) {ABSENT_VALUE}",
                encoder=f"maybeEncoder {value.encoder} v.{name}",
                shape=shape,
                value=value,
                source=field,
            )
        if shape is FieldShape.REPEATED:
            return ElmField(
                name=name,
                type_expr=f"List {value.type_expr}",
                number=field.number,
                default=EMPTY_LIST,
                decoder=f"idxWithDefault {idx} (JD.list {value.decoder}) {EMPTY_LIST}",
                encoder=f"JE.list {value.encoder} v.{name}",
                shape=shape,
                value=value,
                source=field,
            )
        return ElmField(
            name=name,
            type_expr=value.type_expr,
            number=field.number,
            default=value.default,
            decoder=f"idxWithDefault {idx} {value.decoder} {value.default}",
            encoder=f"{value.encoder} v.{name}",
            shape=shape,
            value=value,
            source=field,
        )

    def _map_field(self, field: model.Field, message: model.Message) -> ElmField:
        entry = message.find_map_entry(field.type_name)
        if entry is None or len(entry.fields) != 2:
            raise MalformedSchemaError(
                f"Map field '{field.name}' of '{message.full_name}' needs an entry "
                "message with exactly a key and a value field"
            )
        key = self._classifier.classify(entry.fields[0])
        value = self._classifier.classify(entry.fields[1])
        name = self._resolver.field_name(field.name)
        return ElmField(
            name=name,
            type_expr=f"Dict.Dict {key.type_expr} {value.type_expr}",
            number=field.number,
            default=DICT_EMPTY,
            decoder=f"mapEntries {field.number} {value.decoder}",
            encoder=f"mapEntriesFieldEncoder {field.number} {value.encoder} v.{name}",
            shape=FieldShape.MAP,
            value=value,
            map_key=key,
            source=field,
        )

    # Oneofs -------------------------------------------------------------
    def oneof_type(self, oneof: model.Oneof, path: Sequence[str]) -> TypeName:
        return self._resolver.type_name(oneof.name, path)

    def resolve_variant(self, field: model.Field, path: Sequence[str]) -> ElmOneofVariant:
        """Return the constructor a oneof member contributes to its custom type."""

        value: Classification = self._classifier.classify(field)
        name = self._resolver.variant_name(field.name, path)
        return ElmOneofVariant(
            name=name,
            number=field.number,
            type_expr=value.type_expr,
            decoder=f"JD.map {name} (JD.index {decode_index(field.number)} (failOnNull {value.decoder}))",
            encoder=f"if idx == {field.number} then {value.encoder} x else JE.null",
            value=value,
            source=field,
        )

    def build_oneof(
        self,
        oneof: model.Oneof,
        path: Sequence[str],
        variants: Sequence[ElmOneofVariant],
    ) -> ElmOneof:
        type_name = self.oneof_type(oneof, path)
        return ElmOneof(
            name=type_name,
            field_name=self._resolver.field_name(oneof.name),
            decoder=self._resolver.decoder_name(type_name),
            encoder=self._resolver.encoder_name(type_name),
            unspecified=self._resolver.unspecified_variant(type_name),
            variants=tuple(variants),
            source=oneof,
        )

    def oneof_holder(self, oneof: ElmOneof) -> ElmField:
        """Return the single record field that stores the whole oneof."""

        return ElmField(
            name=oneof.field_name,
            type_expr=oneof.name,
            number=None,
            default=oneof.unspecified,
            decoder=f"custom {oneof.decoder}",
            encoder=None,
            shape=FieldShape.ONEOF,
            oneof=oneof.name,
            source=oneof.source,
        )

    def oneof_encoder(self, oneof: model.Oneof, field: model.Field, path: Sequence[str]) -> EncoderEntry:
        """Return the encoder call consulted at the position of oneof member *field*."""

        type_name = self.oneof_type(oneof, path)
        holder = self._resolver.field_name(oneof.name)
        return EncoderEntry(
            number=field.number,
            expression=f"{self._resolver.encoder_name(type_name)} {field.number} v.{holder}",
            field_name=holder,
        )


__all__ = ["DICT_EMPTY", "ShapeResolver"]
