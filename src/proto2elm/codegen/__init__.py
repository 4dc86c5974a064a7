"""Rendering of resolved Elm models into generated files."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol

from ..ir import ElmFile
from .elm import ElmModuleTemplate
from .runtime import OneofValue, PythonPortRuntime


@dataclass(frozen=True, slots=True)
class GeneratedFile:
    """A file to hand back to ``protoc``; ``name`` is relative to the output root."""

    name: str
    content: str


class ITemplateRenderer(Protocol):
    def render(self, elm_file: ElmFile) -> List[GeneratedFile]:
        ...


class DefaultTemplateRenderer:
    """Render one Elm module per protobuf file."""

    def render(self, elm_file: ElmFile) -> List[GeneratedFile]:
        template = ElmModuleTemplate(elm_file)
        return [GeneratedFile(name=elm_file.output_name, content=template.render())]


__all__ = [
    "DefaultTemplateRenderer",
    "ElmModuleTemplate",
    "GeneratedFile",
    "ITemplateRenderer",
    "OneofValue",
    "PythonPortRuntime",
]
