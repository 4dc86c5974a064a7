from __future__ import annotations

"""Dataclasses representing a protobuf schema in a plugin-friendly format."""

from dataclasses import dataclass, field
from enum import Enum as _Enum
from typing import Any, Dict, List, Optional


class FieldCardinality(str, _Enum):
    """Cardinality for message fields."""

    OPTIONAL = "optional"
    REQUIRED = "required"
    REPEATED = "repeated"


class WireKind(str, _Enum):
    """Every field type a descriptor can declare."""

    DOUBLE = "double"
    FLOAT = "float"
    INT64 = "int64"
    UINT64 = "uint64"
    INT32 = "int32"
    FIXED64 = "fixed64"
    FIXED32 = "fixed32"
    BOOL = "bool"
    STRING = "string"
    GROUP = "group"
    MESSAGE = "message"
    BYTES = "bytes"
    UINT32 = "uint32"
    ENUM = "enum"
    SFIXED32 = "sfixed32"
    SFIXED64 = "sfixed64"
    SINT32 = "sint32"
    SINT64 = "sint64"


def _is_deprecated(options: Dict[str, Any]) -> bool:
    return options.get("deprecated") is True


@dataclass(slots=True)
class Field:
    """Represents a message field."""

    name: str
    number: int
    cardinality: FieldCardinality
    kind: WireKind
    type_name: Optional[str] = None
    default_value: Optional[str] = None
    oneof: Optional[str] = None
    oneof_index: Optional[int] = None
    proto3_optional: bool = False
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def deprecated(self) -> bool:
        return _is_deprecated(self.options)

    @property
    def is_repeated(self) -> bool:
        return self.cardinality is FieldCardinality.REPEATED


@dataclass(slots=True)
class EnumValue:
    """Represents a value within an enum."""

    name: str
    number: int
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def deprecated(self) -> bool:
        return _is_deprecated(self.options)


@dataclass(slots=True)
class Enum:
    """Represents an enum type."""

    name: str
    full_name: str
    values: List[EnumValue] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def deprecated(self) -> bool:
        return _is_deprecated(self.options)


@dataclass(slots=True)
class Oneof:
    """Represents a oneof declaration."""

    name: str
    full_name: str
    fields: List[Field] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Message:
    """Represents a message type.

    Synthetic map entry messages are kept in ``nested_messages`` so that map
    fields can find their key and value descriptors; ``is_map_entry`` marks them.
    """

    name: str
    full_name: str
    fields: List[Field] = field(default_factory=list)
    nested_messages: List[Message] = field(default_factory=list)
    nested_enums: List[Enum] = field(default_factory=list)
    oneofs: List[Oneof] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def deprecated(self) -> bool:
        return _is_deprecated(self.options)

    @property
    def is_map_entry(self) -> bool:
        return self.options.get("map_entry") is True

    def find_map_entry(self, type_name: Optional[str]) -> Optional[Message]:
        """Return the nested map entry message named *type_name*, if any."""

        if not type_name:
            return None
        for nested in self.nested_messages:
            if nested.is_map_entry and nested.full_name == type_name:
                return nested
        return None


@dataclass(slots=True)
class ProtoFile:
    """Represents a protobuf file and its declarations."""

    name: str
    package: Optional[str]
    dependencies: List[str] = field(default_factory=list)
    messages: List[Message] = field(default_factory=list)
    enums: List[Enum] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)
