"""Initial placements of objects inside a scene."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Tuple

from .errors import IndexOutOfRangeError
from .layers import BASE_LAYER
from .variables import VariablesContainer


def _number(payload: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    value = payload.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Instance field '{key}' must be numeric")
    return float(value)


@dataclass
class InitialInstance:
    """One placed copy of an object.

    ``object_name`` and ``layer`` are weak references: they are only checked
    when the instance is created and may dangle after later edits.
    ``inactive_size`` keeps a stored width and height while ``custom_size`` is
    off, so they are written back unchanged.
    """

    object_name: str
    x: float = 0.0
    y: float = 0.0
    z: float | None = None
    angle: float = 0.0
    z_order: int = 0
    layer: str = BASE_LAYER
    custom_size: Tuple[float, float] | None = None
    inactive_size: Dict[str, float] = field(default_factory=dict)
    locked: bool = False
    flipped_x: bool = False
    flipped_y: bool = False
    variables: VariablesContainer = field(default_factory=VariablesContainer)

    def summary(self, index: int) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "index": index,
            "object_name": self.object_name,
            "x": self.x,
            "y": self.y,
            "angle": self.angle,
            "z_order": self.z_order,
            "layer": self.layer,
            "locked": self.locked,
        }
        if self.z is not None:
            payload["z"] = self.z
        if self.custom_size is not None:
            payload["width"], payload["height"] = self.custom_size
        return payload

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.object_name,
            "x": self.x,
            "y": self.y,
            "angle": self.angle,
            "zOrder": self.z_order,
            "layer": self.layer,
            "locked": self.locked,
            "flippedX": self.flipped_x,
            "flippedY": self.flipped_y,
            "customSize": self.custom_size is not None,
            "variables": self.variables.to_payload(),
        }
        if self.z is not None:
            payload["z"] = self.z
        if self.custom_size is not None:
            payload["width"], payload["height"] = self.custom_size
        else:
            payload.update(self.inactive_size)
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "InitialInstance":
        if not isinstance(payload, Mapping):
            raise ValueError("Instances must be objects")
        object_name = payload.get("name")
        if not isinstance(object_name, str):
            raise ValueError("Instances require a 'name' string")
        layer = payload.get("layer", BASE_LAYER)
        if not isinstance(layer, str):
            raise ValueError("Instance layer must be a string")
        z_order = payload.get("zOrder", 0)
        if isinstance(z_order, bool) or not isinstance(z_order, (int, float)):
            raise ValueError("Instance field 'zOrder' must be numeric")

        custom_size = None
        if payload.get("customSize"):
            custom_size = (_number(payload, "width"), _number(payload, "height"))
        inactive_size = (
            {}
            if custom_size is not None
            else {key: _number(payload, key) for key in ("width", "height") if key in payload}
        )

        return cls(
            object_name=object_name,
            x=_number(payload, "x"),
            y=_number(payload, "y"),
            z=_number(payload, "z") if "z" in payload else None,
            angle=_number(payload, "angle"),
            z_order=int(z_order),
            layer=layer,
            custom_size=custom_size,
            inactive_size=inactive_size,
            locked=bool(payload.get("locked", False)),
            flipped_x=bool(payload.get("flippedX", False)),
            flipped_y=bool(payload.get("flippedY", False)),
            variables=VariablesContainer.from_payload(payload.get("variables")),
        )


class InstancesContainer:
    """Ordered instances of a scene, addressed by index."""

    def __init__(self) -> None:
        self._instances: List[InitialInstance] = []

    def __len__(self) -> int:
        return len(self._instances)

    def __iter__(self) -> Iterator[InitialInstance]:
        return iter(list(self._instances))

    def get(self, index: int) -> InitialInstance:
        if not 0 <= index < len(self._instances):
            raise IndexOutOfRangeError("instance", index, len(self._instances))
        return self._instances[index]

    def insert(self, instance: InitialInstance) -> int:
        self._instances.append(instance)
        return len(self._instances) - 1

    def _remove_where(self, predicate: Callable[[InitialInstance], bool]) -> int:
        kept = [instance for instance in self._instances if not predicate(instance)]
        removed = len(self._instances) - len(kept)
        self._instances = kept
        return removed

    def remove_of_object(self, object_name: str) -> int:
        return self._remove_where(lambda instance: instance.object_name == object_name)

    def remove_on_layer(self, layer: str) -> int:
        return self._remove_where(lambda instance: instance.layer == layer)

    def move_to_layer(self, source: str, destination: str) -> int:
        moved = 0
        for instance in self._instances:
            if instance.layer == source:
                instance.layer = destination
                moved += 1
        return moved

    def rename_object(self, current_name: str, new_name: str) -> int:
        renamed = 0
        for instance in self._instances:
            if instance.object_name == current_name:
                instance.object_name = new_name
                renamed += 1
        return renamed

    def count_of_object(self, object_name: str) -> int:
        return sum(1 for instance in self._instances if instance.object_name == object_name)

    def filtered(
        self, *, object_name: str | None = None, layer: str | None = None
    ) -> List[Tuple[int, InitialInstance]]:
        """Return ``(index, instance)`` pairs matching the given filters."""

        return [
            (index, instance)
            for index, instance in enumerate(self._instances)
            if (object_name is None or instance.object_name == object_name)
            and (layer is None or instance.layer == layer)
        ]

    def to_payload(self) -> List[Dict[str, Any]]:
        return [instance.to_payload() for instance in self._instances]

    @classmethod
    def from_payload(cls, payload: Any) -> "InstancesContainer":
        container = cls()
        if payload is None:
            return container
        if not isinstance(payload, list):
            raise ValueError("Instances must be stored as a list")
        container._instances = [InitialInstance.from_payload(entry) for entry in payload]
        return container


__all__ = ["InitialInstance", "InstancesContainer"]
