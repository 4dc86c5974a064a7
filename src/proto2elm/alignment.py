"""Align encoder output positions with protobuf field numbers.

The port runtime stores a message as an array where index ``N - 1`` holds field
number ``N``. Encoders therefore have to be emitted in field number order, with
an explicit null for every number the message does not declare.
"""

from __future__ import annotations

from typing import Iterable, List

from .ir import EncoderEntry, EncoderSlot

NULL_PLACEHOLDER = "JE.null"


def decode_index(number: int) -> int:
    """Return the array index holding field *number*."""

    return number - 1


def sort_encoders(entries: Iterable[EncoderEntry]) -> List[EncoderEntry]:
    return sorted(entries, key=lambda entry: entry.number)


def plan_encoders(entries: Iterable[EncoderEntry]) -> List[EncoderSlot]:
    """Return one slot per position from field number 1 to the highest number.

    Numbers skipped by the schema (removed, reserved or filtered as deprecated)
    become ``JE.null`` placeholders. Nothing is emitted past the last real field.
    """

    plan: List[EncoderSlot] = []
    next_number = 1
    for entry in sort_encoders(entries):
        if entry.number < 1:
            raise ValueError(f"Field number must be positive, got {entry.number}")
        for missing in range(next_number, entry.number):
            plan.append(
                EncoderSlot(
                    position=decode_index(missing),
                    number=missing,
                    expression=NULL_PLACEHOLDER,
                    placeholder=True,
                )
            )
        plan.append(
            EncoderSlot(
                position=decode_index(entry.number),
                number=entry.number,
                expression=entry.expression,
                field_name=entry.field_name,
            )
        )
        next_number = entry.number + 1
    return plan


__all__ = ["NULL_PLACEHOLDER", "decode_index", "plan_encoders", "sort_encoders"]
