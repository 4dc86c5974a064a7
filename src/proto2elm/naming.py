"""Name resolution utilities used across proto2elm generators."""

from __future__ import annotations

import json
import os
import posixpath
from dataclasses import dataclass
from importlib import resources
from typing import Iterable, List, Mapping, Optional, Sequence

from .errors import ConfigurationError

_DEFAULT_RESOURCE_PACKAGE = "proto2elm.data"
_DEFAULT_CONFIG_RESOURCE = "naming_config.json"
_ENV_CONFIG_PATH = "PROTO2ELM_NAMING_CONFIG"
_PROTO_SUFFIX = ".proto"


class Identifier(str):
    """An Elm identifier produced by :class:`NameResolver`."""

    __slots__ = ()


class TypeName(Identifier):
    """Upper-case identifier naming an Elm type, type alias or module segment."""

    __slots__ = ()


class VariableName(Identifier):
    """Lower-case identifier naming a record field, decoder, encoder or constant."""

    __slots__ = ()


class DecoderName(VariableName):
    """Name of a generated port decoder."""

    __slots__ = ()


class EncoderName(VariableName):
    """Name of a generated port encoder."""

    __slots__ = ()


class VariantName(Identifier):
    """Upper-case identifier naming a custom type constructor."""

    __slots__ = ()


def _load_json_from_path(path: str) -> Mapping[str, object]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            return json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Unable to read naming rules from '{path}': {exc}") from exc


def _load_default_json() -> Mapping[str, object]:
    data_path = resources.files(_DEFAULT_RESOURCE_PACKAGE) / _DEFAULT_CONFIG_RESOURCE
    with data_path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def _is_ascii_lower(char: str) -> bool:
    return "a" <= char <= "z"


def _is_ascii_digit(char: str) -> bool:
    return "0" <= char <= "9"


def camel_case(name: str) -> str:
    """Convert a protobuf identifier into CamelCase.

    Words are delimited by underscores or by an upper-case letter; digits form
    their own words. A leading underscore becomes ``X`` so the result always
    starts with a letter, and any underscores that survive are dropped, so
    ``foo_1`` becomes ``Foo1``.
    """

    if not name:
        return name
    result: List[str] = []
    index = 0
    if name[0] == "_":
        result.append("X")
        index = 1
    while index < len(name):
        char = name[index]
        if char == "_" and index + 1 < len(name) and _is_ascii_lower(name[index + 1]):
            index += 1
            continue
        if _is_ascii_digit(char):
            result.append(char)
            index += 1
            continue
        if _is_ascii_lower(char):
            char = char.upper()
        result.append(char)
        while index + 1 < len(name) and _is_ascii_lower(name[index + 1]):
            index += 1
            result.append(name[index])
        index += 1
    return "".join(result).replace("_", "")


def first_upper(value: str) -> str:
    return value[:1].upper() + value[1:]


def first_lower(value: str) -> str:
    return value[:1].lower() + value[1:]


def lower_camel_case(name: str) -> str:
    return first_lower(camel_case(name))


@dataclass(frozen=True, slots=True)
class NamingRules:
    """Configuration describing how Elm names are assigned."""

    reserved_words: frozenset[str]
    collision_suffix: str = "_"
    separator: str = "_"
    decoder_suffix: str = "PortDecoder"
    encoder_suffix: str = "PortEncoder"
    default_suffix: str = "Default"
    unspecified_suffix: str = "Unspecified"


def _string_setting(data: Mapping[str, object], key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"'{key}' must be a non-empty string")
    return value


def load_naming_rules(path: Optional[str] = None) -> NamingRules:
    """Load :class:`NamingRules` from *path* or bundled defaults.

    If *path* is ``None`` the environment variable ``PROTO2ELM_NAMING_CONFIG`` is
    consulted before falling back to the packaged defaults.
    """

    config_path = path or os.environ.get(_ENV_CONFIG_PATH)
    if config_path:
        data = _load_json_from_path(config_path)
    else:
        data = _load_default_json()
    if not isinstance(data, Mapping):
        raise ConfigurationError("Naming rules must be a JSON object")

    reserved = data.get("reserved_words", [])
    if isinstance(reserved, str) or not isinstance(reserved, Sequence):
        raise ConfigurationError("'reserved_words' must be a sequence of strings")
    reserved_set = set()
    for entry in reserved:
        if not isinstance(entry, str):
            raise ConfigurationError("Reserved word entries must be strings")
        stripped = entry.strip()
        if stripped:
            reserved_set.add(stripped)

    return NamingRules(
        reserved_words=frozenset(reserved_set),
        collision_suffix=_string_setting(data, "collision_suffix", "_"),
        separator=_string_setting(data, "separator", "_"),
        decoder_suffix=_string_setting(data, "decoder_suffix", "PortDecoder"),
        encoder_suffix=_string_setting(data, "encoder_suffix", "PortEncoder"),
        default_suffix=_string_setting(data, "default_suffix", "Default"),
        unspecified_suffix=_string_setting(data, "unspecified_suffix", "Unspecified"),
    )


class NameResolver:
    """Resolve Elm identifiers from protobuf names and nesting paths.

    Every method is a pure function of its arguments and the rules, so a single
    resolver can be shared by any number of files.
    """

    def __init__(self, rules: Optional[NamingRules] = None) -> None:
        self._rules = rules or load_naming_rules()

    def type_name(self, name: str, path: Sequence[str] = ()) -> TypeName:
        """Return the type name for *name* nested under *path* (outermost first)."""

        segments = [camel_case(segment) for segment in path]
        segments.append(camel_case(name))
        return TypeName(first_upper(self._rules.separator.join(segments)))

    def variant_name(self, name: str, path: Sequence[str] = ()) -> VariantName:
        """Return the constructor name for an enum value or oneof member."""

        segments = [camel_case(segment) for segment in path]
        segments.append(camel_case(name.lower()))
        return VariantName(first_upper(self._rules.separator.join(segments)))

    def field_name(self, name: str) -> VariableName:
        return VariableName(self.avoid_collision(lower_camel_case(name)))

    def avoid_collision(self, name: str) -> str:
        if name in self._rules.reserved_words:
            return f"{name}{self._rules.collision_suffix}"
        return name

    def decoder_name(self, type_name: TypeName) -> DecoderName:
        return DecoderName(first_lower(f"{type_name}{self._rules.decoder_suffix}"))

    def encoder_name(self, type_name: TypeName) -> EncoderName:
        return EncoderName(first_lower(f"{type_name}{self._rules.encoder_suffix}"))

    def enum_default_name(self, type_name: TypeName) -> VariableName:
        return VariableName(first_lower(f"{type_name}{self._rules.default_suffix}"))

    def record_default_name(self, type_name: TypeName) -> VariableName:
        return VariableName(f"default{type_name}")

    def unspecified_variant(self, type_name: TypeName) -> VariantName:
        return VariantName(f"{type_name}{self._rules.unspecified_suffix}")

    def external_path(self, full_name: str) -> List[str]:
        """Return the type segments of *full_name*, dropping package segments."""

        return [
            segment
            for segment in full_name.split(".")
            if segment and not _is_ascii_lower(segment[0])
        ]

    def external_type(self, full_name: str) -> TypeName:
        """Return the type name for a fully qualified protobuf type."""

        segments = self.external_path(full_name)
        return TypeName(
            self._rules.separator.join(first_upper(camel_case(segment)) for segment in segments)
        )

    def external_variant(self, enum_full_name: str, value_name: str) -> VariantName:
        """Return the constructor name for *value_name* of the enum *enum_full_name*."""

        return self.variant_name(value_name, self.external_path(enum_full_name)[:-1])


def _split_proto_path(proto_path: str) -> tuple[List[str], str]:
    directory, file_name = posixpath.split(proto_path)
    if file_name.endswith(_PROTO_SUFFIX):
        file_name = file_name[: -len(_PROTO_SUFFIX)]
    return [segment for segment in directory.split("/") if segment], file_name


def _prefix_segments(module_prefix: str) -> List[str]:
    return [first_upper(segment) for segment in module_prefix.split(".") if segment]


def module_name(module_prefix: str, proto_path: str) -> str:
    """Return the Elm module name for *proto_path*, e.g. ``Prefix.Dir.File``."""

    directories, file_name = _split_proto_path(proto_path)
    segments = _prefix_segments(module_prefix)
    segments.extend(first_upper(segment) for segment in directories)
    segments.append(first_upper(file_name))
    return ".".join(segments)


def output_file_name(proto_path: str, extension: str = ".elm") -> str:
    """Return the generated file path for *proto_path*, e.g. ``Dir/File.elm``."""

    directories, file_name = _split_proto_path(proto_path)
    segments = [first_upper(segment) for segment in directories]
    segments.append(first_upper(file_name) + extension)
    return "/".join(segments)


def additional_imports(
    module_prefix: str,
    dependencies: Iterable[str],
    excluded_files: Iterable[str] = (),
) -> List[str]:
    """Return module names to import for *dependencies* not in *excluded_files*."""

    excluded = set(excluded_files)
    imports: List[str] = []
    for dependency in dependencies:
        if dependency in excluded:
            continue
        imports.append(module_name(module_prefix, dependency))
    return imports


__all__ = [
    "DecoderName",
    "EncoderName",
    "Identifier",
    "NameResolver",
    "NamingRules",
    "TypeName",
    "VariableName",
    "VariantName",
    "additional_imports",
    "camel_case",
    "first_lower",
    "first_upper",
    "load_naming_rules",
    "lower_camel_case",
    "module_name",
    "output_file_name",
]
