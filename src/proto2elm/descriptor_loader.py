from __future__ import annotations

"""Utilities to convert CodeGeneratorRequest payloads into model dataclasses."""

from typing import Dict, Iterable, List, MutableMapping, Optional

from google.protobuf import descriptor_pb2
from google.protobuf import json_format
from google.protobuf.compiler import plugin_pb2
from google.protobuf.message import Message

from . import model
from .errors import UnsupportedWireKindError


OptionDict = Dict[str, object]


class DescriptorLoader:
    """Load FileDescriptorProto messages into higher level dataclasses."""

    def __init__(self, request: plugin_pb2.CodeGeneratorRequest) -> None:
        self._request = request
        self._loaded_files: MutableMapping[str, model.ProtoFile] = {}
        self._loaded = False

    @property
    def files(self) -> MutableMapping[str, model.ProtoFile]:
        """Mapping of file name to :class:`ProtoFile` after :meth:`load`."""

        self.load()
        return self._loaded_files

    @property
    def files_to_generate(self) -> List[str]:
        """Return the list of files requested for generation."""

        return list(self._request.file_to_generate)

    def get_file(self, name: str) -> model.ProtoFile:
        """Return a loaded :class:`ProtoFile` by name."""

        self.load()
        return self._loaded_files[name]

    def load(self, file_names: Optional[Iterable[str]] = None) -> MutableMapping[str, model.ProtoFile]:
        """Load requested files and return the mapping of filenames to :class:`ProtoFile`.

        If ``file_names`` is ``None`` all files present in the request are loaded.
        Subsequent calls return cached results.
        """

        if not self._loaded:
            for file_proto in self._request.proto_file:
                self._loaded_files[file_proto.name] = self._convert_file(file_proto)
            self._loaded = True

        if file_names is None:
            return self._loaded_files

        missing = sorted(name for name in file_names if name not in self._loaded_files)
        if missing:
            raise KeyError(f"Descriptor(s) not found in request: {', '.join(missing)}")
        return {name: self._loaded_files[name] for name in file_names}

    def _convert_file(self, file_proto: descriptor_pb2.FileDescriptorProto) -> model.ProtoFile:
        package = file_proto.package or None
        proto_file = model.ProtoFile(
            name=file_proto.name,
            package=package,
            dependencies=list(file_proto.dependency),
            options=self._message_to_dict(file_proto.options),
        )

        for enum_proto in file_proto.enum_type:
            proto_file.enums.append(self._convert_enum(enum_proto, package, []))

        for message_proto in file_proto.message_type:
            proto_file.messages.append(self._convert_message(message_proto, package, []))

        return proto_file

    def _convert_enum(
        self,
        enum_proto: descriptor_pb2.EnumDescriptorProto,
        package: Optional[str],
        parents: List[str],
    ) -> model.Enum:
        full_name = self._qualify_name(package, parents, enum_proto.name)
        enum = model.Enum(
            name=enum_proto.name,
            full_name=full_name,
            options=self._message_to_dict(enum_proto.options),
        )
        for value_proto in enum_proto.value:
            enum.values.append(
                model.EnumValue(
                    name=value_proto.name,
                    number=value_proto.number,
                    options=self._message_to_dict(value_proto.options),
                )
            )
        return enum

    def _convert_message(
        self,
        message_proto: descriptor_pb2.DescriptorProto,
        package: Optional[str],
        parents: List[str],
    ) -> model.Message:
        full_name = self._qualify_name(package, parents, message_proto.name)
        message = model.Message(
            name=message_proto.name,
            full_name=full_name,
            options=self._message_to_dict(message_proto.options),
        )

        parents_chain = parents + [message_proto.name]

        # Synthetic oneofs only exist to carry proto3 ``optional`` presence and
        # are not modelled as unions.
        synthetic_oneofs = {
            field_proto.oneof_index
            for field_proto in message_proto.field
            if field_proto.proto3_optional and field_proto.HasField("oneof_index")
        }
        oneof_by_index: Dict[int, model.Oneof] = {}
        for idx, oneof_proto in enumerate(message_proto.oneof_decl):
            if idx in synthetic_oneofs:
                continue
            oneof = model.Oneof(
                name=oneof_proto.name,
                full_name=f"{full_name}.{oneof_proto.name}",
                options=self._message_to_dict(oneof_proto.options),
            )
            oneof_by_index[idx] = oneof
            message.oneofs.append(oneof)

        for nested_proto in message_proto.nested_type:
            message.nested_messages.append(
                self._convert_message(nested_proto, package, parents_chain)
            )

        for enum_proto in message_proto.enum_type:
            message.nested_enums.append(self._convert_enum(enum_proto, package, parents_chain))

        for field_proto in message_proto.field:
            oneof = None
            if field_proto.HasField("oneof_index"):
                oneof = oneof_by_index.get(field_proto.oneof_index)
            field = self._convert_field(field_proto, message.full_name, oneof, message.oneofs)
            message.fields.append(field)
            if oneof is not None:
                oneof.fields.append(field)

        return message

    def _convert_field(
        self,
        field_proto: descriptor_pb2.FieldDescriptorProto,
        message_full_name: str,
        oneof: Optional[model.Oneof],
        oneofs: List[model.Oneof],
    ) -> model.Field:
        cardinality = {
            descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL: model.FieldCardinality.OPTIONAL,
            descriptor_pb2.FieldDescriptorProto.LABEL_REQUIRED: model.FieldCardinality.REQUIRED,
            descriptor_pb2.FieldDescriptorProto.LABEL_REPEATED: model.FieldCardinality.REPEATED,
        }[field_proto.label]

        kind = _WIRE_KINDS.get(field_proto.type)
        if kind is None:
            raise UnsupportedWireKindError(
                field_proto.type, f"{message_full_name}.{field_proto.name}"
            )

        oneof_index = None
        if oneof is not None:
            oneof_index = next(idx for idx, entry in enumerate(oneofs) if entry is oneof)

        return model.Field(
            name=field_proto.name,
            number=field_proto.number,
            cardinality=cardinality,
            kind=kind,
            type_name=self._normalize_type_name(field_proto.type_name) or None,
            default_value=field_proto.default_value if field_proto.HasField("default_value") else None,
            oneof=oneof.name if oneof is not None else None,
            oneof_index=oneof_index,
            proto3_optional=field_proto.proto3_optional,
            options=self._message_to_dict(field_proto.options),
        )

    def _normalize_type_name(self, type_name: str) -> str:
        if not type_name:
            return type_name
        return type_name[1:] if type_name.startswith(".") else type_name

    def _qualify_name(self, package: Optional[str], parents: List[str], name: str) -> str:
        segments: List[str] = []
        if package:
            segments.append(package)
        segments.extend(parents)
        segments.append(name)
        return ".".join(segment for segment in segments if segment)

    def _message_to_dict(self, message: Optional[Message]) -> OptionDict:
        """Convert a protobuf message to a dictionary handling protobuf version differences."""

        if message is None:
            return {}
        kwargs = {
            "preserving_proto_field_name": True,
            "including_default_value_fields": False,
        }
        try:
            return json_format.MessageToDict(message, **kwargs)
        except TypeError:
            kwargs.pop("including_default_value_fields")
            return json_format.MessageToDict(message, **kwargs)


_WIRE_KINDS: Dict[int, model.WireKind] = {
    descriptor_pb2.FieldDescriptorProto.TYPE_DOUBLE: model.WireKind.DOUBLE,
    descriptor_pb2.FieldDescriptorProto.TYPE_FLOAT: model.WireKind.FLOAT,
    descriptor_pb2.FieldDescriptorProto.TYPE_INT64: model.WireKind.INT64,
    descriptor_pb2.FieldDescriptorProto.TYPE_UINT64: model.WireKind.UINT64,
    descriptor_pb2.FieldDescriptorProto.TYPE_INT32: model.WireKind.INT32,
    descriptor_pb2.FieldDescriptorProto.TYPE_FIXED64: model.WireKind.FIXED64,
    descriptor_pb2.FieldDescriptorProto.TYPE_FIXED32: model.WireKind.FIXED32,
    descriptor_pb2.FieldDescriptorProto.TYPE_BOOL: model.WireKind.BOOL,
    descriptor_pb2.FieldDescriptorProto.TYPE_STRING: model.WireKind.STRING,
    descriptor_pb2.FieldDescriptorProto.TYPE_GROUP: model.WireKind.GROUP,
    descriptor_pb2.FieldDescriptorProto.TYPE_MESSAGE: model.WireKind.MESSAGE,
    descriptor_pb2.FieldDescriptorProto.TYPE_BYTES: model.WireKind.BYTES,
    descriptor_pb2.FieldDescriptorProto.TYPE_UINT32: model.WireKind.UINT32,
    descriptor_pb2.FieldDescriptorProto.TYPE_ENUM: model.WireKind.ENUM,
    descriptor_pb2.FieldDescriptorProto.TYPE_SFIXED32: model.WireKind.SFIXED32,
    descriptor_pb2.FieldDescriptorProto.TYPE_SFIXED64: model.WireKind.SFIXED64,
    descriptor_pb2.FieldDescriptorProto.TYPE_SINT32: model.WireKind.SINT32,
    descriptor_pb2.FieldDescriptorProto.TYPE_SINT64: model.WireKind.SINT64,
}
