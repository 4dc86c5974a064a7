"""Configuration helpers for proto2elm code generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Tuple

from .errors import ConfigurationError

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}

DEFAULT_EXCLUDED_FILES: FrozenSet[str] = frozenset(
    {
        "google/protobuf/timestamp.proto",
        "google/protobuf/wrappers.proto",
        "google/protobuf/descriptor.proto",
    }
)

_FLAG_OPTIONS = {"remove-deprecated", "debug"}
_VALUE_OPTIONS = {"module-prefix", "exclude", "naming-config"}


def _parse_parameter_string(parameter: str | None) -> List[Tuple[str, Optional[str]]]:
    """Split protoc's ``key[=value],...`` parameter, keeping repeated keys."""

    if not parameter:
        return []

    entries: List[Tuple[str, Optional[str]]] = []
    for chunk in parameter.split(","):
        piece = chunk.strip()
        if not piece:
            continue
        if "=" in piece:
            key, value = piece.split("=", 1)
            entries.append((key.strip(), value.strip()))
        else:
            entries.append((piece, None))
    return entries


def _to_bool(key: str, value: Optional[str]) -> bool:
    if value is None:
        return True
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Parameter '{key}' expects a boolean value, got '{value}'")


@dataclass(frozen=True, slots=True)
class GeneratorConfig:
    """Runtime configuration for proto2elm generation."""

    remove_deprecated: bool = False
    module_prefix: str = ""
    excluded_files: FrozenSet[str] = DEFAULT_EXCLUDED_FILES
    debug: bool = False
    naming_config: Optional[str] = None

    def is_excluded(self, file_name: str) -> bool:
        return file_name in self.excluded_files

    @classmethod
    def from_parameter_string(cls, parameter: str | None) -> "GeneratorConfig":
        remove_deprecated = False
        debug = False
        module_prefix = ""
        naming_config: Optional[str] = None
        excluded = set(DEFAULT_EXCLUDED_FILES)

        for key, value in _parse_parameter_string(parameter):
            if key in _FLAG_OPTIONS:
                enabled = _to_bool(key, value)
                if key == "remove-deprecated":
                    remove_deprecated = enabled
                else:
                    debug = enabled
                continue
            if key not in _VALUE_OPTIONS:
                raise ConfigurationError(f'unknown parameter: "{key}"')
            if not value:
                raise ConfigurationError(f"Parameter '{key}' requires a value")
            if key == "module-prefix":
                module_prefix = value
            elif key == "exclude":
                excluded.add(value)
            else:
                naming_config = value

        return cls(
            remove_deprecated=remove_deprecated,
            module_prefix=module_prefix,
            excluded_files=frozenset(excluded),
            debug=debug,
            naming_config=naming_config,
        )


__all__ = ["DEFAULT_EXCLUDED_FILES", "GeneratorConfig"]
