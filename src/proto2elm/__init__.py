"""proto2elm package initialization."""

from __future__ import annotations

from . import model

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DefaultTemplateRenderer",
    "DescriptorLoader",
    "ElmEnum",
    "ElmField",
    "ElmFile",
    "ElmMessage",
    "ElmOneof",
    "GeneratedFile",
    "GeneratorConfig",
    "ITemplateRenderer",
    "MalformedSchemaError",
    "NameResolver",
    "Proto2ElmError",
    "PythonPortRuntime",
    "TypeMapper",
    "UnsupportedWireKindError",
    "model",
]


def __getattr__(name: str):
    if name == "DescriptorLoader":
        from .descriptor_loader import DescriptorLoader

        return DescriptorLoader

    if name in {"DefaultTemplateRenderer", "GeneratedFile", "ITemplateRenderer", "PythonPortRuntime"}:
        from .codegen import DefaultTemplateRenderer, GeneratedFile, ITemplateRenderer, PythonPortRuntime

        mapping = {
            "DefaultTemplateRenderer": DefaultTemplateRenderer,
            "GeneratedFile": GeneratedFile,
            "ITemplateRenderer": ITemplateRenderer,
            "PythonPortRuntime": PythonPortRuntime,
        }
        return mapping[name]

    if name == "GeneratorConfig":
        from .config import GeneratorConfig

        return GeneratorConfig

    if name in {"ConfigurationError", "MalformedSchemaError", "Proto2ElmError", "UnsupportedWireKindError"}:
        from . import errors

        return getattr(errors, name)

    if name == "NameResolver":
        from .naming import NameResolver

        return NameResolver

    if name in {"ElmEnum", "ElmField", "ElmFile", "ElmMessage", "ElmOneof"}:
        from . import ir

        return getattr(ir, name)

    if name == "TypeMapper":
        from .type_mapper import TypeMapper

        return TypeMapper

    raise AttributeError(name)
