"""Conditions and actions stored inside events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Sequence

from .errors import IndexOutOfRangeError

MAX_INSTRUCTION_DEPTH = 32


@dataclass(frozen=True)
class InstructionSpec:
    """Literal description of an instruction supplied by a caller.

    ``inverted`` only has meaning for conditions; it is ignored when the spec
    is used to build an action.
    """

    type: str
    parameters: tuple[str, ...] = ()
    inverted: bool = False

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "InstructionSpec":
        instruction_type = payload.get("type")
        if not isinstance(instruction_type, str) or not instruction_type.strip():
            raise ValueError("Instruction specs require a non-empty 'type' string")
        parameters = payload.get("parameters", [])
        if isinstance(parameters, (str, bytes)) or not isinstance(parameters, Sequence):
            raise ValueError("Instruction parameters must be a list of strings")
        return cls(
            type=instruction_type,
            parameters=tuple(str(parameter) for parameter in parameters),
            inverted=bool(payload.get("inverted", False)),
        )


class Instruction:
    """One condition or action: an opaque type identifier plus parameters."""

    def __init__(
        self,
        instruction_type: str = "",
        parameters: Sequence[str] = (),
        *,
        inverted: bool = False,
    ) -> None:
        self.type = instruction_type
        self.inverted = inverted
        self._parameters: List[str] = [str(parameter) for parameter in parameters]
        self.sub_instructions = InstructionsList()

    @classmethod
    def from_spec(cls, spec: InstructionSpec, *, is_condition: bool) -> "Instruction":
        return cls(
            spec.type,
            spec.parameters,
            inverted=spec.inverted if is_condition else False,
        )

    @property
    def parameters(self) -> List[str]:
        return list(self._parameters)

    @property
    def parameter_count(self) -> int:
        return len(self._parameters)

    def get_parameter(self, index: int) -> str:
        if not 0 <= index < len(self._parameters):
            raise IndexOutOfRangeError("parameter", index, len(self._parameters))
        return self._parameters[index]

    def set_parameter(self, index: int, value: str) -> None:
        """Set parameter ``index``, padding with empty strings when needed."""

        if index < 0:
            raise IndexOutOfRangeError("parameter", index, len(self._parameters))
        while len(self._parameters) <= index:
            self._parameters.append("")
        self._parameters[index] = str(value)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "type": {"value": self.type, "inverted": self.inverted},
            "parameters": list(self._parameters),
        }
        if len(self.sub_instructions):
            payload["subInstructions"] = self.sub_instructions.to_payload()
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, _depth: int = 0) -> "Instruction":
        if _depth > MAX_INSTRUCTION_DEPTH:
            raise ValueError("Instruction nesting exceeds the supported depth")
        if not isinstance(payload, Mapping):
            raise ValueError("Instructions must be objects")

        raw_type = payload.get("type")
        if not isinstance(raw_type, Mapping):
            raise ValueError("Instructions require a 'type' object")
        value = raw_type.get("value")
        if not isinstance(value, str):
            raise ValueError("Instruction type must include a 'value' string")

        parameters = payload.get("parameters", [])
        if not isinstance(parameters, list):
            raise ValueError("Instruction parameters must be a list")

        instruction = cls(
            value,
            [str(parameter) for parameter in parameters],
            inverted=bool(raw_type.get("inverted", False)),
        )
        instruction.sub_instructions = InstructionsList.from_payload(
            payload.get("subInstructions"), _depth=_depth + 1
        )
        return instruction

    def __repr__(self) -> str:
        return f"Instruction({self.type!r}, {self._parameters!r}, inverted={self.inverted})"


class InstructionsList:
    """Ordered, index-addressed list of instructions."""

    def __init__(self, instructions: Sequence[Instruction] = ()) -> None:
        self._instructions: List[Instruction] = list(instructions)

    def __len__(self) -> int:
        return len(self._instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(list(self._instructions))

    def get(self, index: int) -> Instruction:
        if not 0 <= index < len(self._instructions):
            raise IndexOutOfRangeError("instruction", index, len(self._instructions))
        return self._instructions[index]

    def insert(self, instruction: Instruction, position: int | None = None) -> int:
        """Insert ``instruction`` and return the index it landed on.

        Raises:
            IndexOutOfRangeError: If ``position`` is outside ``[0, len]``.
        """

        size = len(self._instructions)
        if position is None:
            position = size
        if not 0 <= position <= size:
            raise IndexOutOfRangeError("instruction", position, size)
        self._instructions.insert(position, instruction)
        return position

    def append(self, instruction: Instruction) -> int:
        return self.insert(instruction)

    def remove_at(self, index: int) -> Instruction:
        if not 0 <= index < len(self._instructions):
            raise IndexOutOfRangeError("instruction", index, len(self._instructions))
        return self._instructions.pop(index)

    def to_payload(self) -> List[Dict[str, Any]]:
        return [instruction.to_payload() for instruction in self._instructions]

    @classmethod
    def from_payload(cls, payload: Any, *, _depth: int = 0) -> "InstructionsList":
        if payload is None:
            return cls()
        if not isinstance(payload, list):
            raise ValueError("Instruction lists must be stored as lists")
        return cls(
            [Instruction.from_payload(entry, _depth=_depth) for entry in payload]
        )


__all__ = [
    "MAX_INSTRUCTION_DEPTH",
    "Instruction",
    "InstructionSpec",
    "InstructionsList",
]
