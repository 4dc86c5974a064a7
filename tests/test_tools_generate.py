from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("google.protobuf")

from google.protobuf import descriptor_pb2

from proto2elm.errors import ConfigurationError
from proto2elm.tools import generate


def _write_descriptor(tmp_path: Path) -> Path:
    file_proto = descriptor_pb2.FileDescriptorProto()
    file_proto.name = "example/person.proto"
    file_proto.package = "example"
    file_proto.syntax = "proto2"

    person_message = file_proto.message_type.add()
    person_message.name = "Person"

    id_field = person_message.field.add()
    id_field.name = "id"
    id_field.number = 1
    id_field.label = descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL
    id_field.type = descriptor_pb2.FieldDescriptorProto.TYPE_INT32

    timestamp_proto = descriptor_pb2.FileDescriptorProto()
    timestamp_proto.name = "google/protobuf/timestamp.proto"
    timestamp_proto.package = "google.protobuf"

    descriptor_set = descriptor_pb2.FileDescriptorSet()
    descriptor_set.file.append(timestamp_proto)
    descriptor_set.file.append(file_proto)

    descriptor_path = tmp_path / "bundle.pb"
    descriptor_path.write_bytes(descriptor_set.SerializeToString())
    return descriptor_path


def test_generate_elm_creates_outputs(tmp_path: Path) -> None:
    descriptor_path = _write_descriptor(tmp_path)
    output_dir = tmp_path / "out"

    generated = generate.generate_elm(descriptor_path, ["example/person.proto"], output_dir)

    module_path = output_dir / "Example" / "Person.elm"
    assert generated == [module_path]
    assert module_path.exists()

    text = module_path.read_text()
    assert text.startswith("module Example.Person exposing (..)")
    assert "personPortEncoder : Person -> JE.Value" in text


def test_generate_elm_passes_parameters(tmp_path: Path) -> None:
    descriptor_path = _write_descriptor(tmp_path)

    generated = generate.generate_elm(descriptor_path, None, tmp_path / "out", "module-prefix=Api")

    assert generated[0].read_text().startswith("module Api.Example.Person exposing (..)")


def test_generate_elm_rejects_unknown_parameters(tmp_path: Path) -> None:
    descriptor_path = _write_descriptor(tmp_path)
    output_dir = tmp_path / "out"

    with pytest.raises(ConfigurationError):
        generate.generate_elm(descriptor_path, None, output_dir, "bogus")

    assert not output_dir.exists()


def test_main_defaults_to_all_targets(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    descriptor_path = _write_descriptor(tmp_path)
    output_dir = tmp_path / "generated"

    exit_code = generate.main([str(descriptor_path), "--out", str(output_dir)])

    assert exit_code == 0

    captured = capsys.readouterr()
    module_path = output_dir / "Example" / "Person.elm"
    assert str(module_path) in captured.out
    assert module_path.exists()
    assert not (output_dir / "Google").exists()
