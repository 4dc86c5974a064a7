"""Walk the descriptor model and build the resolved Elm model."""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from . import model
from .alignment import plan_encoders, sort_encoders
from .classifier import WELL_KNOWN_TYPES, TypeClassifier, WellKnownType
from .config import GeneratorConfig
from .errors import MalformedSchemaError
from .ir import (
    ElmEnum,
    ElmEnumVariant,
    ElmField,
    ElmFile,
    ElmMessage,
    ElmOneof,
    ElmOneofVariant,
    EncoderEntry,
    FieldShape,
)
from .naming import NameResolver, additional_imports, load_naming_rules, module_name, output_file_name
from .shapes import ShapeResolver

_LOG = logging.getLogger(__name__)


class TypeMapper:
    """Maps `proto2elm.model` dataclasses into the resolved Elm model.

    The mapper only holds immutable configuration, so one instance can map any
    number of files or batches.
    """

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        *,
        resolver: NameResolver | None = None,
        well_known: Mapping[str, WellKnownType] = WELL_KNOWN_TYPES,
    ) -> None:
        self._config = config or GeneratorConfig()
        if resolver is None:
            resolver = NameResolver(load_naming_rules(self._config.naming_config))
        self._resolver = resolver
        self._classifier = TypeClassifier(resolver, well_known)
        self._shapes = ShapeResolver(self._classifier, resolver)

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    @property
    def resolver(self) -> NameResolver:
        return self._resolver

    def map_files(
        self,
        proto_files: Mapping[str, model.ProtoFile],
        targets: Optional[Sequence[str]] = None,
    ) -> List[ElmFile]:
        """Map every target file that is not excluded.

        Errors propagate, so either all files are mapped or none are returned.
        """

        names = list(targets) if targets else list(proto_files.keys())
        mapped: List[ElmFile] = []
        for name in names:
            if self._config.is_excluded(name):
                _LOG.info("Skipping excluded file %s", name)
                continue
            if name not in proto_files:
                raise MalformedSchemaError(f"File '{name}' is not part of the request")
            _LOG.info("Processing file %s", name)
            mapped.append(self.map_file(proto_files[name]))
        return mapped

    def map_file(self, proto_file: model.ProtoFile) -> ElmFile:
        """Convert a :class:`model.ProtoFile` into :class:`ElmFile`."""

        messages = self._convert_messages(proto_file.messages, ())
        return ElmFile(
            name=proto_file.name,
            package=proto_file.package,
            module_name=module_name(self._config.module_prefix, proto_file.name),
            output_name=output_file_name(proto_file.name),
            additional_imports=tuple(
                additional_imports(
                    self._config.module_prefix,
                    proto_file.dependencies,
                    self._config.excluded_files,
                )
            ),
            import_dict=_uses_maps(messages),
            enums=self._convert_enums(proto_file.enums, ()),
            messages=messages,
        )

    def _skip(self, element: model.Message | model.Enum | model.EnumValue | model.Field) -> bool:
        return self._config.remove_deprecated and element.deprecated

    # Enums ----------------------------------------------------------------
    def _convert_enums(self, enums: Iterable[model.Enum], path: Tuple[str, ...]) -> Tuple[ElmEnum, ...]:
        return tuple(self._convert_enum(enum, path) for enum in enums if not self._skip(enum))

    def _convert_enum(self, enum: model.Enum, path: Tuple[str, ...]) -> ElmEnum:
        variants = tuple(
            ElmEnumVariant(name=self._resolver.variant_name(value.name, path), number=value.number)
            for value in enum.values
            if not self._skip(value)
        )
        if not variants:
            raise MalformedSchemaError(f"Enum '{enum.full_name}' has no values to use as a default")

        name = self._resolver.type_name(enum.name, path)
        return ElmEnum(
            name=name,
            full_name=enum.full_name,
            decoder=self._resolver.decoder_name(name),
            encoder=self._resolver.encoder_name(name),
            default_name=self._resolver.enum_default_name(name),
            default_variant=variants[0].name,
            variants=variants,
        )

    # Messages -------------------------------------------------------------
    def _convert_messages(
        self, messages: Iterable[model.Message], path: Tuple[str, ...]
    ) -> Tuple[ElmMessage, ...]:
        return tuple(
            self._convert_message(message, path) for message in messages if not self._skip(message)
        )

    def _convert_message(self, message: model.Message, path: Tuple[str, ...]) -> ElmMessage:
        name = self._resolver.type_name(message.name, path)
        nested_path = path + (message.name,)

        fields: List[ElmField] = []
        encoders: List[EncoderEntry] = []
        variants: dict[int, List[ElmOneofVariant]] = {idx: [] for idx in range(len(message.oneofs))}

        for field in message.fields:
            if self._skip(field):
                continue
            if field.oneof_index is not None:
                oneof = message.oneofs[field.oneof_index]
                variants[field.oneof_index].append(self._shapes.resolve_variant(field, nested_path))
                encoders.append(self._shapes.oneof_encoder(oneof, field, nested_path))
                continue
            elm_field = self._shapes.resolve(field, message)
            fields.append(elm_field)
            encoders.append(
                EncoderEntry(number=field.number, expression=elm_field.encoder, field_name=elm_field.name)
            )

        oneofs: List[ElmOneof] = []
        for idx, oneof in enumerate(message.oneofs):
            elm_oneof = self._shapes.build_oneof(oneof, nested_path, variants[idx])
            oneofs.append(elm_oneof)
            fields.append(self._shapes.oneof_holder(elm_oneof))

        return ElmMessage(
            name=name,
            full_name=message.full_name,
            path=path,
            decoder=self._resolver.decoder_name(name),
            encoder=self._resolver.encoder_name(name),
            default_name=self._resolver.record_default_name(name),
            fields=tuple(fields),
            field_encoders=tuple(sort_encoders(encoders)),
            encoder_plan=tuple(plan_encoders(encoders)),
            oneofs=tuple(oneofs),
            enums=self._convert_enums(message.nested_enums, nested_path),
            nested_messages=self._convert_messages(message.nested_messages, nested_path),
        )


def _uses_maps(messages: Iterable[ElmMessage]) -> bool:
    for message in messages:
        if any(field.shape is FieldShape.MAP for field in message.fields):
            return True
        if _uses_maps(message.nested_messages):
            return True
    return False


__all__ = ["TypeMapper"]
