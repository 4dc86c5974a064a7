"""Protocol Buffers compiler plugin entry point for proto2elm."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, List, Sequence

from google.protobuf.compiler import plugin_pb2

from . import __version__
from .codegen import DefaultTemplateRenderer, GeneratedFile, ITemplateRenderer
from .config import GeneratorConfig
from .descriptor_loader import DescriptorLoader
from .errors import Proto2ElmError
from .type_mapper import TypeMapper

_LOG = logging.getLogger(__name__)

_PROGRAM = "protoc-gen-elm"

_USAGE_EPILOG = """\
protoc invokes this plugin with a CodeGeneratorRequest on stdin and reads the
CodeGeneratorResponse from stdout:

  protoc --elm_out=[OPTIONS:]OUT_DIR input.proto

Options are comma separated:
  remove-deprecated      skip deprecated messages, fields, enums and values
  module-prefix=PREFIX   prepend PREFIX to every generated module name
  exclude=PATH           do not generate PATH (repeatable)
  naming-config=PATH     JSON file overriding the naming rules
  debug                  log the request to stderr
"""


def _log_request(request: plugin_pb2.CodeGeneratorRequest) -> None:
    dump = plugin_pb2.CodeGeneratorRequest()
    dump.CopyFrom(request)
    for file_proto in dump.proto_file:
        file_proto.ClearField("source_code_info")
    _LOG.debug("Request:\n%s", dump)


def _generate(
    request: plugin_pb2.CodeGeneratorRequest,
    renderer: ITemplateRenderer,
) -> List[GeneratedFile]:
    config = GeneratorConfig.from_parameter_string(request.parameter)
    if not config.debug:
        return _generate_files(request, config, renderer)

    package_logger = logging.getLogger(__package__)
    previous_level = package_logger.level
    package_logger.setLevel(logging.DEBUG)
    try:
        _log_request(request)
        return _generate_files(request, config, renderer)
    finally:
        package_logger.setLevel(previous_level)


def _generate_files(
    request: plugin_pb2.CodeGeneratorRequest,
    config: GeneratorConfig,
    renderer: ITemplateRenderer,
) -> List[GeneratedFile]:
    loader = DescriptorLoader(request)
    proto_files = loader.load()
    type_mapper = TypeMapper(config)

    generated: List[GeneratedFile] = []
    for elm_file in type_mapper.map_files(proto_files, loader.files_to_generate):
        generated.extend(renderer.render(elm_file))
    return generated


def generate_code(
    request: plugin_pb2.CodeGeneratorRequest,
    *,
    renderer: ITemplateRenderer | None = None,
) -> plugin_pb2.CodeGeneratorResponse:
    """Run the proto2elm pipeline and return a populated response message.

    Schema and configuration errors are reported through ``response.error``
    and no file is emitted for the batch.
    """

    response = plugin_pb2.CodeGeneratorResponse()
    response.supported_features |= plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL

    try:
        generated_files: Iterable[GeneratedFile] = _generate(
            request, renderer or DefaultTemplateRenderer()
        )
    except Proto2ElmError as exc:
        _LOG.error("%s", exc)
        response.error = str(exc)
        return response

    for generated in generated_files:
        response_file = response.file.add()
        response_file.name = generated.name
        response_file.content = generated.content
    return response


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=_PROGRAM,
        description="protoc plugin generating Elm port decoders and encoders.",
        epilog=_USAGE_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{_PROGRAM} {__version__}",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Execute the protoc plugin workflow."""

    _build_argument_parser().parse_args(argv)
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format=f"{_PROGRAM}: %(levelname)s %(message)s",
    )

    request_payload = sys.stdin.buffer.read()

    request = plugin_pb2.CodeGeneratorRequest()
    if request_payload:
        request.ParseFromString(request_payload)

    response = generate_code(request)
    sys.stdout.buffer.write(response.SerializeToString())
    return 0


if __name__ == "__main__":  # pragma: no cover - convenience execution entry.
    raise SystemExit(main())
