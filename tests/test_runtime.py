from __future__ import annotations

import pytest

pytest.importorskip("google.protobuf")

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

from proto2elm import model
from proto2elm.classifier import TypeClassifier
from proto2elm.codegen import ElmModuleTemplate, OneofValue, PythonPortRuntime
from proto2elm.descriptor_loader import DescriptorLoader
from proto2elm.ir import ElmField, FieldShape
from proto2elm.naming import NameResolver, VariableName
from proto2elm.type_mapper import TypeMapper

FDP = descriptor_pb2.FieldDescriptorProto


def _add_field(message, name, number, field_type, *, label=FDP.LABEL_OPTIONAL, type_name=None):
    field = message.field.add()
    field.name = name
    field.number = number
    field.label = label
    field.type = field_type
    if type_name:
        field.type_name = type_name
    return field


def _build_sample_runtime() -> PythonPortRuntime:
    file_proto = descriptor_pb2.FileDescriptorProto()
    file_proto.name = "example/person.proto"
    file_proto.package = "example"
    file_proto.syntax = "proto2"

    meta_message = file_proto.message_type.add()
    meta_message.name = "Meta"
    _add_field(meta_message, "created_by", 1, FDP.TYPE_STRING)

    person = file_proto.message_type.add()
    person.name = "Person"

    labels_entry = person.nested_type.add()
    labels_entry.name = "LabelsEntry"
    labels_entry.options.map_entry = True
    _add_field(labels_entry, "key", 1, FDP.TYPE_STRING)
    _add_field(labels_entry, "value", 2, FDP.TYPE_MESSAGE, type_name=".example.Meta")

    mood_enum = person.enum_type.add()
    mood_enum.name = "Mood"
    mood_enum.value.add(name="MOOD_UNSPECIFIED", number=0)
    mood_enum.value.add(name="MOOD_HAPPY", number=1)

    contact = person.oneof_decl.add()
    contact.name = "contact"

    _add_field(person, "id", 1, FDP.TYPE_INT32)
    _add_field(person, "scores", 2, FDP.TYPE_INT32, label=FDP.LABEL_REPEATED)
    _add_field(person, "meta", 3, FDP.TYPE_MESSAGE, type_name=".example.Meta")
    _add_field(
        person,
        "labels",
        4,
        FDP.TYPE_MESSAGE,
        label=FDP.LABEL_REPEATED,
        type_name=".example.Person.LabelsEntry",
    )
    email = _add_field(person, "email", 6, FDP.TYPE_STRING)
    email.oneof_index = 0
    phone = _add_field(person, "phone", 7, FDP.TYPE_INT64)
    phone.oneof_index = 0
    _add_field(person, "mood", 9, FDP.TYPE_ENUM, type_name=".example.Person.Mood")
    greeting = _add_field(person, "greeting", 10, FDP.TYPE_STRING)
    greeting.default_value = "hello"
    _add_field(person, "avatar", 11, FDP.TYPE_BYTES)
    _add_field(person, "ratio", 12, FDP.TYPE_DOUBLE)

    request = plugin_pb2.CodeGeneratorRequest()
    request.file_to_generate.append("example/person.proto")
    request.proto_file.append(file_proto)

    loader = DescriptorLoader(request)
    elm_file = TypeMapper().map_file(loader.get_file("example/person.proto"))
    return ElmModuleTemplate(elm_file).python_runtime()


def test_default_record_matches_elm_defaults() -> None:
    runtime = _build_sample_runtime()

    assert runtime.default_record("example.Person") == {
        "id": 0,
        "scores": [],
        "meta": None,
        "labels": {},
        "mood": "Person_MoodUnspecified",
        "greeting": "hello",
        "avatar": b"",
        "ratio": 0.0,
        "contact": OneofValue("Person_ContactUnspecified"),
    }


def test_encode_places_field_n_at_index_n_minus_one() -> None:
    runtime = _build_sample_runtime()

    encoded = runtime.encode(
        "example.Person",
        {
            "id": 7,
            "scores": [1, 2],
            "mood": "Person_MoodHappy",
            "avatar": b"\x01\x02",
            "ratio": 2,
        },
    )

    assert len(encoded) == 12
    assert encoded[0] == 7
    assert encoded[1] == [1, 2]
    assert encoded[2] is None
    assert encoded[3] == []
    assert encoded[4] is None
    assert encoded[5] is None and encoded[6] is None
    assert encoded[7] is None
    assert encoded[8] == 1
    assert encoded[9] == "hello"
    assert encoded[10] == "AQI="
    assert encoded[11] == 2.0


def test_empty_array_decodes_to_defaults() -> None:
    runtime = _build_sample_runtime()

    decoded = runtime.decode("example.Person", [])

    assert decoded == runtime.default_record("example.Person")
    assert decoded["contact"] == OneofValue("Person_ContactUnspecified")


def test_oneof_round_trip() -> None:
    runtime = _build_sample_runtime()
    record = runtime.default_record("example.Person")
    record["contact"] = OneofValue("Person_Phone", 42)

    encoded = runtime.encode("example.Person", record)

    assert encoded[5] is None
    assert encoded[6] == "42"
    assert runtime.decode("example.Person", encoded)["contact"] == OneofValue("Person_Phone", 42)


def test_oneof_decodes_first_present_member() -> None:
    runtime = _build_sample_runtime()

    decoded = runtime.decode("example.Person", [None, None, None, None, None, "a@b.c"])

    assert decoded["contact"] == OneofValue("Person_Email", "a@b.c")


def test_map_round_trip() -> None:
    runtime = _build_sample_runtime()
    record = runtime.default_record("example.Person")
    record["labels"] = {"b": {"createdBy": "x"}, "a": {"createdBy": "y"}}
    record["meta"] = {"createdBy": "z"}

    encoded = runtime.encode("example.Person", record)

    assert encoded[2] == ["z"]
    assert encoded[3] == [["a", ["y"]], ["b", ["x"]]]
    assert runtime.decode("example.Person", encoded) == record


def test_empty_map_round_trip() -> None:
    runtime = _build_sample_runtime()
    record = runtime.default_record("example.Person")

    encoded = runtime.encode("example.Person", record)

    assert encoded[3] == []
    assert runtime.decode("example.Person", encoded)["labels"] == {}


def test_unknown_enum_number_falls_back_to_default() -> None:
    runtime = _build_sample_runtime()
    array = [None] * 9
    array[8] = 99

    assert runtime.decode("example.Person", array)["mood"] == "Person_MoodUnspecified"


def test_nulls_fall_back_to_defaults() -> None:
    runtime = _build_sample_runtime()

    decoded = runtime.decode("example.Person", [None, None, None, None, None, None, None, None, 1, None])

    assert decoded["id"] == 0
    assert decoded["mood"] == "Person_MoodHappy"
    assert decoded["greeting"] == "hello"


def test_unknown_enum_variant_is_rejected() -> None:
    runtime = _build_sample_runtime()

    with pytest.raises(ValueError):
        runtime.encode("example.Person", {"mood": "Nope"})


def test_fields_without_classification_are_rejected() -> None:
    runtime = _build_sample_runtime()
    unclassified = ElmField(
        name=VariableName("broken"),
        type_expr="Int",
        number=1,
        default="0",
        decoder="idxWithDefault 0 JD.int 0",
        encoder="JE.int v.broken",
        shape=FieldShape.SCALAR,
    )
    labels = ElmField(
        name=VariableName("labels"),
        type_expr="Dict.Dict String Int",
        number=2,
        default="Dict.empty",
        decoder="mapEntries 2 JD.int",
        encoder="mapEntriesFieldEncoder 2 JE.int v.labels",
        shape=FieldShape.MAP,
        value=TypeClassifier(NameResolver()).classify(
            model.Field(
                name="value",
                number=2,
                cardinality=model.FieldCardinality.OPTIONAL,
                kind=model.WireKind.INT32,
            )
        ),
    )

    with pytest.raises(ValueError, match="broken"):
        runtime.default_value(unclassified)
    with pytest.raises(ValueError, match="labels"):
        runtime._encode_field(labels, {"a": 1})
