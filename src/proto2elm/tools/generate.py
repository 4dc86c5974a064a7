from __future__ import annotations

"""Command-line helpers for generating Elm modules from a descriptor set."""

import argparse
import logging
from pathlib import Path
from typing import List, Sequence

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

from proto2elm.codegen import DefaultTemplateRenderer
from proto2elm.config import GeneratorConfig
from proto2elm.descriptor_loader import DescriptorLoader
from proto2elm.type_mapper import TypeMapper

_LOG = logging.getLogger(__name__)


def _build_request(
    descriptor_set: descriptor_pb2.FileDescriptorSet,
    targets: Sequence[str] | None,
    parameter: str | None,
) -> plugin_pb2.CodeGeneratorRequest:
    request = plugin_pb2.CodeGeneratorRequest()
    request.proto_file.extend(descriptor_set.file)
    if parameter:
        request.parameter = parameter

    if targets:
        request.file_to_generate.extend(targets)
    else:
        request.file_to_generate.extend(file_proto.name for file_proto in descriptor_set.file)

    return request


def generate_elm(
    descriptor_set_path: Path | str,
    targets: Sequence[str] | None,
    output_dir: Path | str,
    parameter: str | None = None,
) -> List[Path]:
    """Generate Elm modules for the given targets.

    Parameters
    ----------
    descriptor_set_path:
        Path to a serialized :class:`~google.protobuf.descriptor_pb2.FileDescriptorSet`.
    targets:
        Proto filenames (as understood by ``protoc``) to generate. ``None`` means "all".
    output_dir:
        Directory that will receive the ``.elm`` files.
    parameter:
        Plugin options in the ``protoc`` syntax, e.g. ``"module-prefix=Api,remove-deprecated"``.

    Errors are raised rather than reported, so nothing is written when any
    file fails to map.
    """

    descriptor_set_path = Path(descriptor_set_path)
    output_dir = Path(output_dir)

    descriptor_set = descriptor_pb2.FileDescriptorSet()
    descriptor_set.ParseFromString(descriptor_set_path.read_bytes())

    request = _build_request(descriptor_set, targets, parameter)
    config = GeneratorConfig.from_parameter_string(request.parameter)

    loader = DescriptorLoader(request)
    type_mapper = TypeMapper(config)
    elm_files = type_mapper.map_files(loader.load(), loader.files_to_generate)

    renderer = DefaultTemplateRenderer()
    generated = [generated for elm_file in elm_files for generated in renderer.render(elm_file)]

    generated_paths: List[Path] = []
    for generated_file in generated:
        path = output_dir / Path(generated_file.name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(generated_file.content)
        _LOG.info("Wrote %s", path)
        generated_paths.append(path)

    return generated_paths


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="proto2elm-generate",
        description="Generate Elm port codec modules from a descriptor set produced by protoc.",
    )
    parser.add_argument(
        "descriptor_set",
        type=Path,
        help="Path to a serialized FileDescriptorSet (output of protoc --descriptor_set_out)",
    )
    parser.add_argument(
        "--proto",
        dest="protos",
        action="append",
        help=(
            "Proto file to generate (relative to the descriptor). Repeat for multiple files. "
            "Defaults to all entries in the descriptor set."
        ),
    )
    parser.add_argument(
        "--out",
        dest="output",
        required=True,
        type=Path,
        help="Directory to write the generated Elm modules to",
    )
    parser.add_argument(
        "--parameter",
        default=None,
        help="Plugin options, e.g. 'module-prefix=Api,remove-deprecated'",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point used by ``python -m proto2elm.tools.generate``."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    generated_paths = generate_elm(args.descriptor_set, args.protos, args.output, args.parameter)

    for path in generated_paths:
        print(path)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
