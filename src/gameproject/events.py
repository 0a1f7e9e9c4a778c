"""Recursive event trees attached to scenes and external events sheets.

An event tree is an ordered list of event nodes. Every node is a tagged
union: its :class:`EventType` decides, through a fixed capability table,
whether it carries a conditions/actions pair and whether it may own a nested
tree of sub-events. Nodes are addressed positionally by *paths*: ``(2,)`` is
the third root event and ``(2, 0)`` its first sub-event. A path is only valid
until the next structural change to the tree.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Sequence

from .errors import IndexOutOfRangeError, UnsupportedOperationError
from .instructions import Instruction, InstructionSpec, InstructionsList

MAX_EVENT_DEPTH = 64

EventPath = tuple[int, ...]


class EventType(str, Enum):
    """Event variants and their persisted type identifiers."""

    STANDARD = "BuiltinCommonInstructions::Standard"
    COMMENT = "BuiltinCommonInstructions::Comment"
    GROUP = "BuiltinCommonInstructions::Group"
    FOR_EACH = "BuiltinCommonInstructions::ForEach"
    REPEAT = "BuiltinCommonInstructions::Repeat"
    WHILE = "BuiltinCommonInstructions::While"
    LINK = "BuiltinCommonInstructions::Link"

    @classmethod
    def parse(cls, value: "str | EventType") -> "EventType":
        """Accept a persisted identifier or a short alias such as ``"foreach"``."""

        if isinstance(value, EventType):
            return value
        try:
            return cls(value)
        except ValueError:
            pass
        alias = value.strip().lower().replace("_", "").replace("-", "")
        if alias in _ALIASES:
            return _ALIASES[alias]
        raise ValueError(f"Unknown event type {value!r}")

    @property
    def alias(self) -> str:
        return self.name.lower().replace("_", "")

    @property
    def has_instructions(self) -> bool:
        return _CAPABILITIES[self][0]

    @property
    def can_have_sub_events(self) -> bool:
        return _CAPABILITIES[self][1]


_ALIASES = {event_type.name.lower().replace("_", ""): event_type for event_type in EventType}

# (has conditions/actions, can have sub-events)
_CAPABILITIES: Dict[EventType, tuple[bool, bool]] = {
    EventType.STANDARD: (True, True),
    EventType.COMMENT: (False, False),
    EventType.GROUP: (False, True),
    EventType.FOR_EACH: (True, True),
    EventType.REPEAT: (True, True),
    EventType.WHILE: (True, True),
    EventType.LINK: (True, False),
}


def parse_event_path(value: "str | int | Sequence[int]") -> EventPath:
    """Normalise ``"2.0"``, ``2`` or ``[2, 0]`` into an event path tuple."""

    if isinstance(value, bool):
        raise ValueError("Event paths must be integers or dotted strings")
    if isinstance(value, int):
        parts: Sequence[Any] = (value,)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValueError("Event paths must not be empty")
        parts = stripped.split(".")
    else:
        parts = tuple(value)

    path: List[int] = []
    for part in parts:
        try:
            path.append(int(part))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid event path component {part!r}") from exc
    if not path:
        raise ValueError("Event paths must not be empty")
    return tuple(path)


def format_event_path(path: Sequence[int]) -> str:
    return ".".join(str(index) for index in path)


class Event:
    """A single node of an event tree."""

    def __init__(self, event_type: EventType = EventType.STANDARD) -> None:
        self.type = event_type
        self.disabled = False
        self.folded = False
        self.conditions = InstructionsList()
        self.actions = InstructionsList()
        self.sub_events = EventsList()
        self.comment = ""
        self.name = ""
        self.object = ""
        self.repeat_expression = ""
        self.while_conditions = InstructionsList()
        self.target = ""

    @property
    def has_instructions(self) -> bool:
        return self.type.has_instructions

    @property
    def can_have_sub_events(self) -> bool:
        return self.type.can_have_sub_events

    @property
    def has_sub_events(self) -> bool:
        return self.can_have_sub_events and len(self.sub_events) > 0

    def add_instruction(
        self, spec: InstructionSpec, *, is_condition: bool, position: int | None = None
    ) -> int:
        """Build an instruction from ``spec`` and insert it.

        Raises:
            UnsupportedOperationError: If this variant holds no instructions.
            IndexOutOfRangeError: If ``position`` is outside the list bounds.
        """

        if not self.has_instructions:
            kind = "conditions" if is_condition else "actions"
            raise UnsupportedOperationError(
                f"{self.type.alias.capitalize()} events do not support {kind}.",
                event_type=self.type.value,
            )
        target = self.conditions if is_condition else self.actions
        return target.insert(Instruction.from_spec(spec, is_condition=is_condition), position)

    def summary(self) -> str:
        if self.type is EventType.COMMENT:
            return "[Comment]"
        if self.type is EventType.GROUP:
            return "[Group]"
        return f"{len(self.conditions)} condition(s), {len(self.actions)} action(s)"

    def clone(self) -> "Event":
        return Event.from_payload(self.to_payload())

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "type": self.type.value,
            "disabled": self.disabled,
            "folded": self.folded,
        }
        if self.type is EventType.COMMENT:
            payload["comment"] = self.comment
        elif self.type is EventType.GROUP:
            payload["name"] = self.name
        elif self.type is EventType.FOR_EACH:
            payload["object"] = self.object
        elif self.type is EventType.REPEAT:
            payload["repeatExpression"] = self.repeat_expression
        elif self.type is EventType.WHILE:
            payload["whileConditions"] = self.while_conditions.to_payload()
        elif self.type is EventType.LINK:
            payload["target"] = self.target

        if self.has_instructions:
            payload["conditions"] = self.conditions.to_payload()
            payload["actions"] = self.actions.to_payload()
        if self.can_have_sub_events:
            payload["events"] = self.sub_events.to_payload()
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, _depth: int = 0) -> "Event":
        if not isinstance(payload, Mapping):
            raise ValueError("Events must be objects")

        raw_type = payload.get("type")
        if not isinstance(raw_type, str):
            raise ValueError("Events require a 'type' string")
        event = cls(EventType.parse(raw_type))
        event.disabled = bool(payload.get("disabled", False))
        event.folded = bool(payload.get("folded", False))
        event.comment = str(payload.get("comment", ""))
        event.name = str(payload.get("name", ""))
        event.object = str(payload.get("object", ""))
        event.repeat_expression = str(payload.get("repeatExpression", ""))
        event.target = str(payload.get("target", ""))
        event.while_conditions = InstructionsList.from_payload(payload.get("whileConditions"))

        if event.has_instructions:
            event.conditions = InstructionsList.from_payload(payload.get("conditions"))
            event.actions = InstructionsList.from_payload(payload.get("actions"))
        elif payload.get("conditions") or payload.get("actions"):
            raise ValueError(f"{event.type.value} events cannot hold instructions")

        raw_sub_events = payload.get("events")
        if event.can_have_sub_events:
            event.sub_events = EventsList.from_payload(raw_sub_events, _depth=_depth + 1)
        elif raw_sub_events:
            raise ValueError(f"{event.type.value} events cannot have sub-events")
        return event

    def __repr__(self) -> str:
        return f"Event({self.type.alias}, sub_events={len(self.sub_events)})"


@dataclass(frozen=True)
class EventSummary:
    """Snapshot of one event produced by :meth:`EventsList.summarize`."""

    index: str
    depth: int
    type: str
    disabled: bool
    folded: bool
    summary: str
    sub_event_count: int
    condition_count: int | None = None
    action_count: int | None = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "index": self.index,
            "depth": self.depth,
            "type": self.type,
            "disabled": self.disabled,
            "folded": self.folded,
            "summary": self.summary,
            "sub_event_count": self.sub_event_count,
        }
        if self.condition_count is not None:
            payload["condition_count"] = self.condition_count
        if self.action_count is not None:
            payload["action_count"] = self.action_count
        return payload


class EventsList:
    """Ordered list of event nodes; the root of an event tree or a sub-tree."""

    def __init__(self, events: Sequence[Event] = ()) -> None:
        self._events: List[Event] = list(events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def get(self, index: int) -> Event:
        if not 0 <= index < len(self._events):
            raise IndexOutOfRangeError("event", index, len(self._events))
        return self._events[index]

    def insert(self, event: Event, position: int | None = None) -> int:
        size = len(self._events)
        if position is None:
            position = size
        if not 0 <= position <= size:
            raise IndexOutOfRangeError("event", position, size)
        self._events.insert(position, event)
        return position

    def insert_new(
        self, event_type: EventType, position: int | None = None
    ) -> tuple[int, Event]:
        event = Event(event_type)
        return self.insert(event, position), event

    def remove_at(self, index: int) -> Event:
        """Remove the event at ``index`` together with its whole sub-tree."""

        if not 0 <= index < len(self._events):
            raise IndexOutOfRangeError("event", index, len(self._events))
        return self._events.pop(index)

    def resolve(self, path: Sequence[int]) -> Event:
        """Return the event addressed by ``path``.

        Raises:
            IndexOutOfRangeError: If any step of the path is out of bounds.
        """

        if not path:
            raise IndexOutOfRangeError("event", "", len(self._events))
        current = self
        event: Event | None = None
        for depth, index in enumerate(path):
            if not 0 <= index < len(current._events):
                raise IndexOutOfRangeError(
                    "event", format_event_path(path[: depth + 1]), len(current._events)
                )
            event = current._events[index]
            current = event.sub_events
        assert event is not None
        return event

    def sub_list(self, parent: Sequence[int] = ()) -> "EventsList":
        """Return the list that holds children of ``parent`` (root for ``()``)."""

        if not parent:
            return self
        return self.resolve(parent).sub_events

    def insertion_list(self, parent: Sequence[int] = ()) -> "EventsList":
        """Like :meth:`sub_list` but refuses parents that cannot nest events."""

        if not parent:
            return self
        event = self.resolve(parent)
        if len(parent) >= MAX_EVENT_DEPTH:
            raise UnsupportedOperationError(
                f"Events cannot be nested deeper than {MAX_EVENT_DEPTH} levels.",
                path=format_event_path(parent),
                max_depth=MAX_EVENT_DEPTH,
            )
        if not event.can_have_sub_events:
            raise UnsupportedOperationError(
                f"{event.type.alias.capitalize()} events cannot have sub-events.",
                event_type=event.type.value,
                path=format_event_path(parent),
            )
        return event.sub_events

    def count_all(self) -> int:
        """Number of events in the tree, sub-events included."""

        return sum(1 + event.sub_events.count_all() for event in self._events)

    def summarize(
        self, depth: int = 1, *, include_disabled: bool = True
    ) -> List[EventSummary]:
        """Flatten the tree into summaries, descending at most ``depth`` levels.

        Root events are at depth 0. A node's sub-events are listed only while
        the node's own depth is below ``depth``; deeper nodes still report
        their ``sub_event_count``.
        """

        limit = max(0, min(depth, MAX_EVENT_DEPTH))
        summaries: List[EventSummary] = []
        self._collect(summaries, (), 0, limit, include_disabled)
        return summaries

    def _collect(
        self,
        summaries: List[EventSummary],
        prefix: EventPath,
        current_depth: int,
        limit: int,
        include_disabled: bool,
    ) -> None:
        for index, event in enumerate(self._events):
            if not include_disabled and event.disabled:
                continue
            path = prefix + (index,)
            summaries.append(
                EventSummary(
                    index=format_event_path(path),
                    depth=current_depth,
                    type=event.type.value,
                    disabled=event.disabled,
                    folded=event.folded,
                    summary=event.summary(),
                    sub_event_count=len(event.sub_events) if event.has_sub_events else 0,
                    condition_count=len(event.conditions) if event.has_instructions else None,
                    action_count=len(event.actions) if event.has_instructions else None,
                )
            )
            if event.has_sub_events and current_depth < limit:
                event.sub_events._collect(
                    summaries, path, current_depth + 1, limit, include_disabled
                )

    def clone(self) -> "EventsList":
        return EventsList.from_payload(self.to_payload())

    def to_payload(self) -> List[Dict[str, Any]]:
        return [event.to_payload() for event in self._events]

    @classmethod
    def from_payload(cls, payload: Any, *, _depth: int = 0) -> "EventsList":
        if _depth > MAX_EVENT_DEPTH:
            raise ValueError("Event nesting exceeds the supported depth")
        if payload is None:
            return cls()
        if not isinstance(payload, list):
            raise ValueError("Event lists must be stored as lists")
        return cls([Event.from_payload(entry, _depth=_depth) for entry in payload])


__all__ = [
    "MAX_EVENT_DEPTH",
    "Event",
    "EventPath",
    "EventSummary",
    "EventType",
    "EventsList",
    "format_event_path",
    "parse_event_path",
]
