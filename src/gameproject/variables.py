"""Typed, recursively nested variables and the ordered stores that own them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Sequence

from .errors import DuplicateNameError, IndexOutOfRangeError, NotFoundError

MAX_VARIABLE_DEPTH = 64

Scalar = float | str | bool


class VariableType(str, Enum):
    """Closed set of variable variants."""

    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    STRUCTURE = "structure"
    ARRAY = "array"

    @property
    def is_collection(self) -> bool:
        return self in (VariableType.STRUCTURE, VariableType.ARRAY)


def _default_scalar(variable_type: VariableType) -> Scalar | None:
    if variable_type is VariableType.NUMBER:
        return 0.0
    if variable_type is VariableType.STRING:
        return ""
    if variable_type is VariableType.BOOLEAN:
        return False
    return None


def _infer_type(value: Any) -> VariableType:
    # bool is a subclass of int, so it must be checked first.
    if isinstance(value, bool):
        return VariableType.BOOLEAN
    if isinstance(value, (int, float)):
        return VariableType.NUMBER
    if isinstance(value, str):
        return VariableType.STRING
    raise TypeError(f"Unsupported variable value {value!r}")


class Variable:
    """A tagged value: number, string, boolean, structure or array.

    Scalars keep a single value. Structures own an ordered mapping of named
    child variables and arrays own an ordered list of unnamed ones, so a
    variable tree can never contain a cycle.
    """

    __slots__ = ("_type", "_value", "_children", "_items")

    def __init__(self, value: Scalar | None = None) -> None:
        self._type = VariableType.NUMBER
        self._value: Scalar | None = 0.0
        self._children: Dict[str, Variable] = {}
        self._items: List[Variable] = []
        if value is not None:
            self.set_value(value)

    @classmethod
    def of_type(cls, variable_type: VariableType) -> "Variable":
        variable = cls()
        variable.cast_to(variable_type)
        return variable

    @classmethod
    def structure(cls, children: Mapping[str, "Variable"] | None = None) -> "Variable":
        variable = cls.of_type(VariableType.STRUCTURE)
        for name, child in (children or {}).items():
            variable.set_child(name, child)
        return variable

    @classmethod
    def array(cls, items: Sequence["Variable"] | None = None) -> "Variable":
        variable = cls.of_type(VariableType.ARRAY)
        for item in items or ():
            variable.push(item)
        return variable

    @property
    def type(self) -> VariableType:
        return self._type

    @property
    def value(self) -> Scalar | None:
        """The scalar value, or ``None`` for structures and arrays."""

        return self._value

    def set_value(self, value: Scalar) -> None:
        """Replace the variable with a scalar whose variant follows ``value``."""

        variable_type = _infer_type(value)
        self._children = {}
        self._items = []
        self._type = variable_type
        if variable_type is VariableType.NUMBER:
            self._value = float(value)
        else:
            self._value = value

    def cast_to(self, variable_type: VariableType) -> None:
        """Switch the variant, resetting the value to that variant's default."""

        if variable_type is self._type:
            return
        self._type = variable_type
        self._value = _default_scalar(variable_type)
        self._children = {}
        self._items = []

    # Structure children -------------------------------------------------

    @property
    def children(self) -> Mapping[str, "Variable"]:
        return dict(self._children)

    def has_child(self, name: str) -> bool:
        return name in self._children

    def get_child(self, name: str) -> "Variable":
        self._require(VariableType.STRUCTURE)
        try:
            return self._children[name]
        except KeyError as exc:
            raise NotFoundError("child variable", name) from exc

    def set_child(self, name: str, child: "Variable") -> None:
        """Store a copy of ``child`` under ``name``, converting to a structure if needed.

        Raises:
            ValueError: If ``child`` nests deeper than ``MAX_VARIABLE_DEPTH``.
        """

        adopted = child._adopted()
        if self._type is not VariableType.STRUCTURE:
            self.cast_to(VariableType.STRUCTURE)
        self._children[name] = adopted

    def remove_child(self, name: str) -> None:
        self._require(VariableType.STRUCTURE)
        if name not in self._children:
            raise NotFoundError("child variable", name)
        del self._children[name]

    # Array items --------------------------------------------------------

    @property
    def items(self) -> List["Variable"]:
        return list(self._items)

    def at(self, index: int) -> "Variable":
        self._require(VariableType.ARRAY)
        if not 0 <= index < len(self._items):
            raise IndexOutOfRangeError("array element", index, len(self._items))
        return self._items[index]

    def push(self, item: "Variable") -> int:
        adopted = item._adopted()
        if self._type is not VariableType.ARRAY:
            self.cast_to(VariableType.ARRAY)
        self._items.append(adopted)
        return len(self._items) - 1

    def remove_at(self, index: int) -> None:
        self._require(VariableType.ARRAY)
        if not 0 <= index < len(self._items):
            raise IndexOutOfRangeError("array element", index, len(self._items))
        del self._items[index]

    @property
    def child_count(self) -> int:
        if self._type is VariableType.STRUCTURE:
            return len(self._children)
        if self._type is VariableType.ARRAY:
            return len(self._items)
        return 0

    def _require(self, variable_type: VariableType) -> None:
        if self._type is not variable_type:
            raise TypeError(
                f"Variable is a {self._type.value}, expected {variable_type.value}"
            )

    def clone(self) -> "Variable":
        return Variable.from_payload(self.to_payload())

    def _adopted(self) -> "Variable":
        # A variable has at most one parent.
        return Variable.from_payload(self.to_payload(), _depth=1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Variable):
            return NotImplemented
        return self.to_payload() == other.to_payload()

    def __repr__(self) -> str:
        if self._type.is_collection:
            return f"Variable({self._type.value}, {self.child_count} children)"
        return f"Variable({self._type.value}, {self._value!r})"

    # Serialisation ------------------------------------------------------

    def to_payload(self, name: str | None = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if name is not None:
            payload["name"] = name
        payload["type"] = self._type.value
        if self._type is VariableType.STRUCTURE:
            payload["children"] = [
                child.to_payload(child_name) for child_name, child in self._children.items()
            ]
        elif self._type is VariableType.ARRAY:
            payload["children"] = [item.to_payload() for item in self._items]
        else:
            payload["value"] = self._value
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, _depth: int = 0) -> "Variable":
        if _depth > MAX_VARIABLE_DEPTH:
            raise ValueError("Variable nesting exceeds the supported depth")
        if not isinstance(payload, Mapping):
            raise ValueError("Variable entries must be objects")

        raw_type = payload.get("type", VariableType.NUMBER.value)
        try:
            variable_type = VariableType(raw_type)
        except ValueError as exc:
            raise ValueError(f"Unknown variable type {raw_type!r}") from exc

        variable = cls.of_type(variable_type)
        if variable_type is VariableType.STRUCTURE:
            for child_payload in _child_list(payload):
                child_name = child_payload.get("name")
                if not isinstance(child_name, str):
                    raise ValueError("Structure children must be named")
                if child_name in variable._children:
                    raise ValueError(f"Duplicate structure child '{child_name}'")
                variable._children[child_name] = cls.from_payload(
                    child_payload, _depth=_depth + 1
                )
        elif variable_type is VariableType.ARRAY:
            for child_payload in _child_list(payload):
                variable._items.append(cls.from_payload(child_payload, _depth=_depth + 1))
        else:
            value = payload.get("value", _default_scalar(variable_type))
            if variable_type is VariableType.NUMBER:
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError("Number variables require a numeric value")
                variable._value = float(value)
            elif variable_type is VariableType.STRING:
                if not isinstance(value, str):
                    raise ValueError("String variables require a string value")
                variable._value = value
            else:
                if not isinstance(value, bool):
                    raise ValueError("Boolean variables require a boolean value")
                variable._value = value
        return variable


def _child_list(payload: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    children = payload.get("children", [])
    if not isinstance(children, list):
        raise ValueError("Variable children must be a list")
    for child in children:
        if not isinstance(child, Mapping):
            raise ValueError("Variable children must be objects")
    return children


@dataclass(frozen=True)
class VariableSummary:
    """Serialisable description of a single named variable."""

    name: str
    type: str
    value: Scalar | None
    child_count: int = 0

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "value": self.value,
            "child_count": self.child_count,
        }


class VariablesContainer:
    """Ordered mapping of unique names to variables."""

    def __init__(self) -> None:
        self._variables: Dict[str, Variable] = {}

    def __len__(self) -> int:
        return len(self._variables)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._variables))

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def has(self, name: str) -> bool:
        return name in self._variables

    def names(self) -> List[str]:
        return list(self._variables)

    def items(self) -> List[tuple[str, Variable]]:
        return list(self._variables.items())

    def get(self, name: str) -> Variable:
        try:
            return self._variables[name]
        except KeyError as exc:
            raise NotFoundError("variable", name) from exc

    def insert(
        self, name: str, variable: Variable, position: int | None = None
    ) -> Variable:
        """Insert ``variable`` under ``name``; ``position`` defaults to the end.

        Raises:
            DuplicateNameError: If ``name`` is already used in this store.
        """

        if name in self._variables:
            raise DuplicateNameError("variable", name)
        entries = list(self._variables.items())
        index = len(entries) if position is None else max(0, min(position, len(entries)))
        entries.insert(index, (name, variable))
        self._variables = dict(entries)
        return variable

    def insert_new(self, name: str, position: int | None = None) -> Variable:
        return self.insert(name, Variable(), position)

    def remove(self, name: str) -> Variable:
        if name not in self._variables:
            raise NotFoundError("variable", name)
        return self._variables.pop(name)

    def summaries(self) -> List[VariableSummary]:
        return [
            VariableSummary(
                name=name,
                type=variable.type.value,
                value=variable.value,
                child_count=variable.child_count,
            )
            for name, variable in self._variables.items()
        ]

    def clone(self) -> "VariablesContainer":
        return VariablesContainer.from_payload(self.to_payload())

    def to_payload(self) -> List[Dict[str, Any]]:
        return [variable.to_payload(name) for name, variable in self._variables.items()]

    @classmethod
    def from_payload(cls, payload: Any) -> "VariablesContainer":
        if payload is None:
            return cls()
        if not isinstance(payload, list):
            raise ValueError("Variables must be stored as a list")

        container = cls()
        for entry in payload:
            if not isinstance(entry, Mapping):
                raise ValueError("Variable entries must be objects")
            name = entry.get("name")
            if not isinstance(name, str):
                raise ValueError("Variable entries must include a 'name' string")
            if name in container._variables:
                raise ValueError(f"Duplicate variable '{name}'")
            container._variables[name] = Variable.from_payload(entry)
        return container


__all__ = [
    "MAX_VARIABLE_DEPTH",
    "Variable",
    "VariableSummary",
    "VariableType",
    "VariablesContainer",
]
