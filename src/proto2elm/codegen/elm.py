"""Elm module template for proto2elm port codecs."""

from __future__ import annotations

from typing import Dict, List

from ..ir import ElmEnum, ElmFile, ElmMessage, ElmOneof
from .runtime import PythonPortRuntime

_BLOCK_SEPARATOR = ["", ""]

_PRELUDE = """\
noop : JE.Value -> JE.Value
noop v =
    v


valueList : List JE.Value -> JE.Value
valueList l =
    JE.list noop l


custom : JD.Decoder a -> JD.Decoder (a -> b) -> JD.Decoder b
custom =
    JD.map2 (|>)


idxWithDefault : Int -> JD.Decoder a -> a -> JD.Decoder (a -> b) -> JD.Decoder b
idxWithDefault idx decoder default =
    JD.map2 (|>) (JD.oneOf [ JD.index idx decoder, JD.succeed default ])


maybeEncoder : (a -> JE.Value) -> Maybe a -> JE.Value
maybeEncoder enc v =
    case v of
        Nothing ->
            JE.null

        Just av ->
            enc av


type Field a
    = Null
    | Present a


{-| Oneof members share the backing array with the other fields, so an unset
member shows up as a null slot. The variant decoder has to fail on null so
that `JD.oneOf` moves on to the next member.
-}
failOnNull : JD.Decoder a -> JD.Decoder a
failOnNull decoder =
    JD.oneOf
        [ JD.null Null
        , JD.map Present decoder
        ]
        |> JD.andThen
            (\\v ->
                case v of
                    Null ->
                        JD.fail "received null value"

                    Present fv ->
                        JD.succeed fv
            )"""


class ElmModuleTemplate:
    """Render one :class:`ElmFile` into the text of an Elm module."""

    def __init__(self, elm_file: ElmFile) -> None:
        self._elm_file = elm_file

    def render(self) -> str:
        lines: List[str] = []
        lines.extend(self._render_header())
        lines.extend(_BLOCK_SEPARATOR)
        lines.extend(_PRELUDE.splitlines())
        for enum in self._elm_file.enums:
            lines.extend(_BLOCK_SEPARATOR)
            lines.extend(self._render_enum(enum))
        for message in self._elm_file.messages:
            lines.extend(_BLOCK_SEPARATOR)
            lines.extend(self._render_nested_message(message))
        return "\n".join(lines) + "\n"

    def python_runtime(self) -> PythonPortRuntime:
        """Return a Python mirror of the rendered codecs for tests."""

        return PythonPortRuntime(self._elm_file)

    # Module header ------------------------------------------------------
    def _render_header(self) -> List[str]:
        elm_file = self._elm_file
        lines = [
            f"module {elm_file.module_name} exposing (..)",
            "",
            "-- DO NOT EDIT",
            "-- AUTOGENERATED BY proto2elm",
            f"-- source file: {elm_file.name}",
            "",
            "import Protobuf exposing (..)",
            "",
            "import Json.Decode as JD",
            "import Json.Encode as JE",
        ]
        if elm_file.import_dict:
            lines.append("import Dict")
        for module in elm_file.additional_imports:
            lines.append(f"import {module} exposing (..)")
        return lines

    # Messages -----------------------------------------------------------
    def _render_nested_message(self, message: ElmMessage) -> List[str]:
        lines = self._render_type_alias(message)
        for oneof in message.oneofs:
            lines.extend(_BLOCK_SEPARATOR)
            lines.extend(self._render_oneof(oneof))
        for enum in message.enums:
            lines.extend(_BLOCK_SEPARATOR)
            lines.extend(self._render_enum(enum))
        for nested in message.nested_messages:
            lines.extend(_BLOCK_SEPARATOR)
            lines.extend(self._render_nested_message(nested))
        return lines

    def _render_type_alias(self, message: ElmMessage) -> List[str]:
        lines = [f"type alias {message.name} ="]
        if message.fields:
            for index, field in enumerate(message.fields):
                lead = "{" if index == 0 else ","
                comment = f" -- {field.number}" if field.number is not None else ""
                lines.append(f"    {lead} {field.name} : {field.type_expr}{comment}")
            lines.append("    }")
        else:
            lines.append("    {}")

        lines.extend(_BLOCK_SEPARATOR)
        lines.append(f"{message.default_name} : {message.name}")
        lines.append(f"{message.default_name} =")
        if message.fields:
            for index, field in enumerate(message.fields):
                lead = "{" if index == 0 else ","
                lines.append(f"    {lead} {field.name} = {field.default}")
            lines.append("    }")
        else:
            lines.append("    {}")

        lines.extend(_BLOCK_SEPARATOR)
        lines.append(
            f"-- {message.decoder} decodes {message.name} from the position-addressed port array."
        )
        lines.append(f"{message.decoder} : JD.Decoder {message.name}")
        lines.append(f"{message.decoder} =")
        lines.append(f"    JD.lazy <| \\_ -> decode {message.name}")
        for field in message.fields:
            lines.append(f"        |> {field.decoder}")

        lines.extend(_BLOCK_SEPARATOR)
        lines.append(
            f"-- {message.encoder} encodes {message.name} so that index N - 1 holds field N."
        )
        lines.append(f"{message.encoder} : {message.name} -> JE.Value")
        lines.append(f"{message.encoder} v =")
        if not message.encoder_plan:
            lines.append("    valueList []")
            return lines
        lines.append("    valueList")
        for slot in message.encoder_plan:
            lead = "[" if slot.position == 0 else ","
            expression = slot.expression if slot.placeholder else f"({slot.expression})"
            lines.append(f"        {lead} {expression}")
        lines.append("        ]")
        return lines

    # Custom types -------------------------------------------------------
    def _render_oneof(self, oneof: ElmOneof) -> List[str]:
        lines = [f"type {oneof.name}", f"    = {oneof.unspecified}"]
        for variant in oneof.variants:
            lines.append(f"    | {variant.name} {_parenthesize(variant.type_expr)}")

        lines.extend(_BLOCK_SEPARATOR)
        lines.append(f"{oneof.decoder} : JD.Decoder {oneof.name}")
        lines.append(f"{oneof.decoder} =")
        lines.append("    JD.lazy <| \\_ -> JD.oneOf")
        for index, variant in enumerate(oneof.variants):
            lead = "[" if index == 0 else ","
            lines.append(f"        {lead} {variant.decoder}")
        lead = "," if oneof.variants else "["
        lines.append(f"        {lead} JD.succeed {oneof.unspecified}")
        lines.append("        ]")

        lines.extend(_BLOCK_SEPARATOR)
        lines.append(f"{oneof.encoder} : Int -> {oneof.name} -> JE.Value")
        lines.append(f"{oneof.encoder} idx v =")
        lines.append("    case v of")
        lines.append(f"        {oneof.unspecified} ->")
        lines.append("            JE.null")
        for variant in oneof.variants:
            lines.append("")
            lines.append(f"        {variant.name} x ->")
            lines.append(f"            {variant.encoder}")
        return lines

    def _render_enum(self, enum: ElmEnum) -> List[str]:
        lines = [f"type {enum.name}"]
        for index, variant in enumerate(enum.variants):
            lead = "=" if index == 0 else "|"
            lines.append(f"    {lead} {variant.name} -- {variant.number}")

        lines.extend(_BLOCK_SEPARATOR)
        lines.append(f"{enum.decoder} : JD.Decoder {enum.name}")
        lines.append(f"{enum.decoder} =")
        lines.append("    let")
        lines.append("        lookup v =")
        lines.append("            case v of")
        for number, name in _first_variant_per_number(enum).items():
            lines.append(f"                {_int_pattern(number)} ->")
            lines.append(f"                    {name}")
            lines.append("")
        lines.append("                _ ->")
        lines.append(f"                    {enum.default_variant}")
        lines.append("    in")
        lines.append("    JD.map lookup JD.int")

        lines.extend(_BLOCK_SEPARATOR)
        lines.append(f"{enum.default_name} : {enum.name}")
        lines.append(f"{enum.default_name} =")
        lines.append(f"    {enum.default_variant}")

        lines.extend(_BLOCK_SEPARATOR)
        lines.append(f"{enum.encoder} : {enum.name} -> JE.Value")
        lines.append(f"{enum.encoder} v =")
        lines.append("    let")
        lines.append("        lookup s =")
        lines.append("            case s of")
        for index, variant in enumerate(enum.variants):
            if index:
                lines.append("")
            lines.append(f"                {variant.name} ->")
            lines.append(f"                    {variant.number}")
        lines.append("    in")
        lines.append("    JE.int <| lookup v")
        return lines


def _first_variant_per_number(enum: ElmEnum) -> Dict[int, str]:
    # Aliased enum values share a number; Elm rejects duplicate case patterns.
    mapping: Dict[int, str] = {}
    for variant in enum.variants:
        mapping.setdefault(variant.number, variant.name)
    return mapping


def _int_pattern(number: int) -> str:
    return f"({number})" if number < 0 else str(number)


def _parenthesize(type_expr: str) -> str:
    return f"({type_expr})" if " " in type_expr else type_expr


__all__ = ["ElmModuleTemplate"]
