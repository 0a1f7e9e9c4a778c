"""A scene (layout) and everything it owns."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from .events import EventsList
from .instances import InstancesContainer
from .layers import Color, LayerList
from .objects import ObjectGroupsContainer, ObjectsContainer
from .variables import VariablesContainer

DEFAULT_BACKGROUND = Color(209, 209, 209)


class Scene:
    """A named level of the game with its own objects, instances and events."""

    def __init__(self, name: str, *, background_color: Color = DEFAULT_BACKGROUND) -> None:
        self.title = ""
        self.background_color = background_color
        self.objects = ObjectsContainer()
        self.object_groups = ObjectGroupsContainer()
        self.instances = InstancesContainer()
        self.variables = VariablesContainer()
        self.layers = LayerList()
        self.events = EventsList()
        self.name = name

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        # Containers carry the scene name for error messages.
        self._name = value
        label = f"scene '{value}'"
        self.objects.label = label
        self.object_groups.label = label
        self.layers.label = label

    def clone(self, name: str | None = None) -> "Scene":
        copy = Scene.from_payload(self.to_payload())
        if name is not None:
            copy.name = name
        return copy

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "backgroundColor": self.background_color.to_payload(),
            "objects": self.objects.to_payload(),
            "objectsGroups": self.object_groups.to_payload(),
            "variables": self.variables.to_payload(),
            "instances": self.instances.to_payload(),
            "layers": self.layers.to_payload(),
            "events": self.events.to_payload(),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Scene":
        if not isinstance(payload, Mapping):
            raise ValueError("Scenes must be objects")
        name = payload.get("name")
        if not isinstance(name, str):
            raise ValueError("Scenes require a 'name' string")
        label = f"scene '{name}'"

        background = payload.get("backgroundColor")
        scene = cls(
            name,
            background_color=Color.parse(background) if background is not None else DEFAULT_BACKGROUND,
        )
        title = payload.get("title", "")
        scene.title = title if isinstance(title, str) else str(title)
        scene.objects = ObjectsContainer.from_payload(payload.get("objects"), label=label)
        scene.object_groups = ObjectGroupsContainer.from_payload(
            payload.get("objectsGroups"), label=label
        )
        scene.variables = VariablesContainer.from_payload(payload.get("variables"))
        scene.instances = InstancesContainer.from_payload(payload.get("instances"))
        scene.layers = LayerList.from_payload(payload.get("layers"), label=label)
        scene.events = EventsList.from_payload(payload.get("events"))
        return scene

    def __repr__(self) -> str:
        return f"Scene({self.name!r})"


__all__ = ["DEFAULT_BACKGROUND", "Scene"]
