from __future__ import annotations

import io
import logging
import sys
from typing import List

import pytest

pytest.importorskip("google.protobuf")

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

from proto2elm import __version__
from proto2elm.codegen import GeneratedFile
from proto2elm.ir import ElmFile
from proto2elm.plugin import generate_code, main

FDP = descriptor_pb2.FieldDescriptorProto


def _build_request(parameter: str = "") -> plugin_pb2.CodeGeneratorRequest:
    file_proto = descriptor_pb2.FileDescriptorProto()
    file_proto.name = "example/point.proto"
    file_proto.package = "example"
    file_proto.syntax = "proto3"

    point = file_proto.message_type.add()
    point.name = "Point"
    for name, number in (("x", 1), ("y", 2)):
        field = point.field.add()
        field.name = name
        field.number = number
        field.label = FDP.LABEL_OPTIONAL
        field.type = FDP.TYPE_INT32

    request = plugin_pb2.CodeGeneratorRequest()
    request.file_to_generate.append("example/point.proto")
    request.proto_file.append(file_proto)
    request.parameter = parameter
    return request


def test_generate_code_emits_one_module_per_file() -> None:
    response = generate_code(_build_request())

    assert not response.HasField("error")
    assert [generated.name for generated in response.file] == ["Example/Point.elm"]
    content = response.file[0].content
    assert content.startswith("module Example.Point exposing (..)")
    assert "pointPortDecoder : JD.Decoder Point" in content
    assert response.supported_features & plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL


def test_generate_code_applies_module_prefix() -> None:
    response = generate_code(_build_request("module-prefix=Api"))

    assert response.file[0].name == "Example/Point.elm"
    assert response.file[0].content.startswith("module Api.Example.Point exposing (..)")


def test_generate_code_reports_configuration_errors() -> None:
    response = generate_code(_build_request("bogus"))

    assert response.error == 'unknown parameter: "bogus"'
    assert len(response.file) == 0


def test_generate_code_reports_unsupported_kinds_without_partial_output() -> None:
    request = _build_request()
    other = request.proto_file.add()
    other.name = "example/legacy.proto"
    legacy = other.message_type.add()
    legacy.name = "Legacy"
    group_field = legacy.field.add()
    group_field.name = "data"
    group_field.number = 1
    group_field.label = FDP.LABEL_OPTIONAL
    group_field.type = FDP.TYPE_GROUP
    request.file_to_generate.append(other.name)

    response = generate_code(request)

    assert "Unsupported field type 'group'" in response.error
    assert len(response.file) == 0


def test_generate_code_skips_excluded_files() -> None:
    request = _build_request("exclude=example/point.proto")

    response = generate_code(request)

    assert not response.HasField("error")
    assert len(response.file) == 0


def test_generate_code_uses_custom_renderer() -> None:
    seen: List[str] = []

    class RecordingRenderer:
        def render(self, elm_file: ElmFile) -> List[GeneratedFile]:
            seen.append(elm_file.module_name)
            return [GeneratedFile(name="custom.txt", content=elm_file.name)]

    response = generate_code(_build_request(), renderer=RecordingRenderer())

    assert seen == ["Example.Point"]
    assert response.file[0].name == "custom.txt"
    assert response.file[0].content == "example/point.proto"


def test_debug_parameter_logs_request(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="proto2elm")

    generate_code(_build_request("debug"))

    assert "Request:" in caplog.text
    assert "example/point.proto" in caplog.text


def test_debug_parameter_restores_log_level() -> None:
    package_logger = logging.getLogger("proto2elm")
    previous_level = package_logger.level
    package_logger.setLevel(logging.WARNING)
    try:
        generate_code(_build_request("debug"))

        assert package_logger.level == logging.WARNING
    finally:
        package_logger.setLevel(previous_level)


class _BinaryStdin:
    def __init__(self, payload: bytes) -> None:
        self.buffer = io.BytesIO(payload)


class _BinaryStdout:
    def __init__(self) -> None:
        self.buffer = io.BytesIO()


def test_main_round_trips_through_stdio(monkeypatch: pytest.MonkeyPatch) -> None:
    stdout = _BinaryStdout()
    monkeypatch.setattr(sys, "stdin", _BinaryStdin(_build_request().SerializeToString()))
    monkeypatch.setattr(sys, "stdout", stdout)

    assert main([]) == 0

    response = plugin_pb2.CodeGeneratorResponse()
    response.ParseFromString(stdout.buffer.getvalue())
    assert [generated.name for generated in response.file] == ["Example/Point.elm"]


def test_main_reports_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])

    assert excinfo.value.code == 0
    assert capsys.readouterr().out.strip() == f"protoc-gen-elm {__version__}"


def test_main_help_describes_options(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        main(["--help"])

    out = capsys.readouterr().out
    assert "module-prefix=PREFIX" in out
    assert "remove-deprecated" in out
