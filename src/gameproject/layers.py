"""Scene layers and the colour values they share with scenes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping

from .errors import DuplicateNameError, IndexOutOfRangeError, NotFoundError
from .objects import Effect, effects_from_payload, effects_to_payload

BASE_LAYER = ""


@dataclass(frozen=True)
class Color:
    """An opaque RGB colour with 0-255 channels."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel in ("r", "g", "b"):
            value = getattr(self, channel)
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 255:
                raise ValueError(f"Colour channel '{channel}' must be an integer in [0, 255]")

    @classmethod
    def parse(cls, value: "Color | Mapping[str, Any] | str") -> "Color":
        """Build a colour from another colour, ``{"r", "g", "b"}`` or ``"#rrggbb"``."""

        if isinstance(value, Color):
            return value
        if isinstance(value, str):
            text = value.strip().lstrip("#")
            if len(text) != 6:
                raise ValueError(f"Invalid colour {value!r}")
            try:
                return cls(int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
            except ValueError as exc:
                raise ValueError(f"Invalid colour {value!r}") from exc
        if isinstance(value, Mapping):
            try:
                return cls(int(value["r"]), int(value["g"]), int(value["b"]))
            except (KeyError, TypeError) as exc:
                raise ValueError("Colours require 'r', 'g' and 'b' channels") from exc
        raise ValueError(f"Invalid colour {value!r}")

    def to_payload(self) -> Dict[str, int]:
        return {"r": self.r, "g": self.g, "b": self.b}


DEFAULT_AMBIENT_COLOR = Color(200, 200, 200)


@dataclass
class Layer:
    name: str
    visible: bool = True
    locked: bool = False
    lighting: bool = False
    ambient_color: Color = DEFAULT_AMBIENT_COLOR
    effects: List[Effect] = field(default_factory=list)

    @property
    def is_base(self) -> bool:
        return self.name == BASE_LAYER

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "visibility": self.visible,
            "locked": self.locked,
            "isLightingLayer": self.lighting,
            "ambientLightColor": self.ambient_color.to_payload(),
            "effects": effects_to_payload(self.effects),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Layer":
        if not isinstance(payload, Mapping):
            raise ValueError("Layers must be objects")
        name = payload.get("name")
        if not isinstance(name, str):
            raise ValueError("Layers require a 'name' string")
        ambient = payload.get("ambientLightColor")
        return cls(
            name=name,
            visible=bool(payload.get("visibility", True)),
            locked=bool(payload.get("locked", False)),
            lighting=bool(payload.get("isLightingLayer", False)),
            ambient_color=Color.parse(ambient) if ambient is not None else DEFAULT_AMBIENT_COLOR,
            effects=effects_from_payload(payload.get("effects")),
        )


class LayerList:
    """Ordered layers of a scene; always contains the base layer."""

    def __init__(self, label: str = "scene") -> None:
        self.label = label
        self._layers: List[Layer] = [Layer(BASE_LAYER)]

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(list(self._layers))

    def has(self, name: str) -> bool:
        return any(layer.name == name for layer in self._layers)

    def names(self) -> List[str]:
        return [layer.name for layer in self._layers]

    def position_of(self, name: str) -> int:
        for index, layer in enumerate(self._layers):
            if layer.name == name:
                return index
        return -1

    def get(self, name: str) -> Layer:
        for layer in self._layers:
            if layer.name == name:
                return layer
        raise NotFoundError("layer", name, container=self.label)

    def insert(self, layer: Layer, position: int | None = None) -> int:
        if self.has(layer.name):
            raise DuplicateNameError("layer", layer.name, container=self.label)
        size = len(self._layers)
        index = size if position is None else max(0, min(position, size))
        self._layers.insert(index, layer)
        return index

    def remove(self, name: str) -> Layer:
        index = self.position_of(name)
        if index == -1:
            raise NotFoundError("layer", name, container=self.label)
        return self._layers.pop(index)

    def move(self, name: str, position: int) -> int:
        """Move ``name`` to ``position`` and return its previous index."""

        index = self.position_of(name)
        if index == -1:
            raise NotFoundError("layer", name, container=self.label)
        if not 0 <= position < len(self._layers):
            raise IndexOutOfRangeError("layer", position, len(self._layers))
        layer = self._layers.pop(index)
        self._layers.insert(position, layer)
        return index

    def to_payload(self) -> List[Dict[str, Any]]:
        return [layer.to_payload() for layer in self._layers]

    @classmethod
    def from_payload(cls, payload: Any, *, label: str = "scene") -> "LayerList":
        layers = cls(label)
        if payload is None:
            return layers
        if not isinstance(payload, list):
            raise ValueError("Layers must be stored as a list")
        loaded: List[Layer] = []
        for entry in payload:
            layer = Layer.from_payload(entry)
            if any(existing.name == layer.name for existing in loaded):
                raise ValueError(f"Duplicate layer '{layer.name}' in {label}")
            loaded.append(layer)
        if not any(layer.is_base for layer in loaded):
            loaded.insert(0, Layer(BASE_LAYER))
        layers._layers = loaded
        return layers


__all__ = [
    "BASE_LAYER",
    "Color",
    "DEFAULT_AMBIENT_COLOR",
    "Layer",
    "LayerList",
]
