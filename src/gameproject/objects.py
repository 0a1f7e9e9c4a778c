"""Objects, the behaviors and effects attached to them, and object groups."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Sequence

from .errors import DuplicateNameError, NotFoundError
from .variables import VariablesContainer

# Default properties for the behavior types the editor ships with. A behavior
# only accepts configuration keys that exist in its property map.
BEHAVIOR_DEFAULTS: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "PlatformBehavior::PlatformerObjectBehavior": {
            "gravity": "1000",
            "maxFallingSpeed": "700",
            "acceleration": "1500",
            "deceleration": "1500",
            "maxSpeed": "250",
            "jumpSpeed": "600",
            "canGrabPlatforms": "false",
            "ignoreDefaultControls": "false",
            "slopeMaxAngle": "60",
        },
        "PlatformBehavior::PlatformBehavior": {
            "platformType": "NormalPlatform",
            "canBeGrabbed": "true",
            "yGrabOffset": "0",
        },
        "TopDownMovementBehavior::TopDownMovementBehavior": {
            "allowDiagonals": "true",
            "acceleration": "400",
            "deceleration": "800",
            "maxSpeed": "200",
            "angularMaxSpeed": "180",
            "rotateObject": "true",
            "angleOffset": "0",
            "ignoreDefaultControls": "false",
        },
        "DraggableBehavior::Draggable": {"checkCollisionMask": "true"},
        "DestroyOutsideBehavior::DestroyOutside": {"extraBorder": "0"},
        "Physics2::Physics2Behavior": {
            "bodyType": "Dynamic",
            "bullet": "false",
            "fixedRotation": "false",
            "density": "1",
            "friction": "0.3",
            "restitution": "0.1",
            "gravityScale": "1",
        },
        "PathfindingBehavior::PathfindingBehavior": {
            "allowDiagonals": "true",
            "acceleration": "400",
            "maxSpeed": "200",
            "angularMaxSpeed": "180",
            "rotateObject": "true",
            "cellWidth": "20",
            "cellHeight": "20",
        },
        "TweenBehavior::TweenBehavior": {},
    }
)


@dataclass
class Behavior:
    """Typed configuration block attached to exactly one object."""

    type: str
    name: str
    properties: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def create(cls, behavior_type: str, name: str) -> "Behavior":
        defaults = BEHAVIOR_DEFAULTS.get(behavior_type, {})
        return cls(type=behavior_type, name=name, properties=dict(defaults))

    def update_property(self, key: str, value: str) -> bool:
        """Set ``key`` when the behavior knows it; return whether it was applied."""

        if key not in self.properties:
            return False
        self.properties[key] = str(value)
        return True

    def to_payload(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type, "properties": dict(self.properties)}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Behavior":
        if not isinstance(payload, Mapping):
            raise ValueError("Behaviors must be objects")
        name = payload.get("name")
        behavior_type = payload.get("type")
        if not isinstance(name, str) or not isinstance(behavior_type, str):
            raise ValueError("Behaviors require 'name' and 'type' strings")
        properties = payload.get("properties", {})
        if not isinstance(properties, Mapping):
            raise ValueError(f"Behavior '{name}' properties must be an object")
        return cls(
            type=behavior_type,
            name=name,
            properties={str(key): str(value) for key, value in properties.items()},
        )


EffectParameter = float | str | bool


@dataclass
class Effect:
    """A visual effect applied to an object or a layer."""

    name: str
    type: str
    parameters: Dict[str, EffectParameter] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {"name": self.name, "effectType": self.type, "parameters": dict(self.parameters)}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Effect":
        if not isinstance(payload, Mapping):
            raise ValueError("Effects must be objects")
        name = payload.get("name")
        effect_type = payload.get("effectType")
        if not isinstance(name, str) or not isinstance(effect_type, str):
            raise ValueError("Effects require 'name' and 'effectType' strings")
        parameters = payload.get("parameters", {})
        if not isinstance(parameters, Mapping):
            raise ValueError(f"Effect '{name}' parameters must be an object")
        return cls(name=name, type=effect_type, parameters=dict(parameters))


def effects_to_payload(effects: Sequence[Effect]) -> List[Dict[str, Any]]:
    return [effect.to_payload() for effect in effects]


def effects_from_payload(payload: Any) -> List[Effect]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError("Effects must be stored as a list")
    return [Effect.from_payload(entry) for entry in payload]


class GameObject:
    """An object definition; instances refer to it by name."""

    def __init__(self, name: str, object_type: str = "") -> None:
        self.name = name
        self.type = object_type
        self.variables = VariablesContainer()
        self.effects: List[Effect] = []
        self.tags: List[str] = []
        # Type-specific data (animations, text, ...) kept verbatim.
        self.configuration: Dict[str, Any] = {}
        self._behaviors: Dict[str, Behavior] = {}

    @property
    def behavior_names(self) -> List[str]:
        return list(self._behaviors)

    def has_behavior(self, name: str) -> bool:
        return name in self._behaviors

    def get_behavior(self, name: str) -> Behavior:
        try:
            return self._behaviors[name]
        except KeyError as exc:
            raise NotFoundError("behavior", name, container=f"object '{self.name}'") from exc

    def add_behavior(self, behavior_type: str, name: str) -> Behavior:
        if name in self._behaviors:
            raise DuplicateNameError("behavior", name, container=f"object '{self.name}'")
        behavior = Behavior.create(behavior_type, name)
        self._behaviors[name] = behavior
        return behavior

    def remove_behavior(self, name: str) -> Behavior:
        if name not in self._behaviors:
            raise NotFoundError("behavior", name, container=f"object '{self.name}'")
        return self._behaviors.pop(name)

    def behaviors(self) -> List[Behavior]:
        return list(self._behaviors.values())

    def clone(self) -> "GameObject":
        return GameObject.from_payload(self.to_payload())

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "tags": list(self.tags),
            "variables": self.variables.to_payload(),
            "behaviors": [behavior.to_payload() for behavior in self._behaviors.values()],
            "effects": effects_to_payload(self.effects),
            "configuration": copy.deepcopy(self.configuration),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "GameObject":
        if not isinstance(payload, Mapping):
            raise ValueError("Objects must be objects")
        name = payload.get("name")
        object_type = payload.get("type", "")
        if not isinstance(name, str) or not isinstance(object_type, str):
            raise ValueError("Objects require 'name' and 'type' strings")

        game_object = cls(name, object_type)
        game_object.variables = VariablesContainer.from_payload(payload.get("variables"))
        game_object.effects = effects_from_payload(payload.get("effects"))

        tags = payload.get("tags", [])
        if not isinstance(tags, list):
            raise ValueError(f"Object '{name}' tags must be a list")
        game_object.tags = [str(tag) for tag in tags]

        configuration = payload.get("configuration", {})
        if not isinstance(configuration, Mapping):
            raise ValueError(f"Object '{name}' configuration must be an object")
        game_object.configuration = copy.deepcopy(dict(configuration))

        behaviors = payload.get("behaviors", [])
        if not isinstance(behaviors, list):
            raise ValueError(f"Object '{name}' behaviors must be a list")
        for entry in behaviors:
            behavior = Behavior.from_payload(entry)
            if behavior.name in game_object._behaviors:
                raise ValueError(
                    f"Object '{name}' defines duplicate behavior '{behavior.name}'"
                )
            game_object._behaviors[behavior.name] = behavior
        return game_object

    def __repr__(self) -> str:
        return f"GameObject({self.name!r}, {self.type!r})"


class ObjectsContainer:
    """Ordered collection of objects with unique names."""

    def __init__(self, label: str = "project") -> None:
        self.label = label
        self._objects: List[GameObject] = []

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[GameObject]:
        return iter(list(self._objects))

    def has(self, name: str) -> bool:
        return any(game_object.name == name for game_object in self._objects)

    def names(self) -> List[str]:
        return [game_object.name for game_object in self._objects]

    def get(self, name: str) -> GameObject:
        for game_object in self._objects:
            if game_object.name == name:
                return game_object
        raise NotFoundError("object", name, container=self.label)

    def position_of(self, name: str) -> int:
        for index, game_object in enumerate(self._objects):
            if game_object.name == name:
                return index
        return -1

    def insert(self, game_object: GameObject, position: int | None = None) -> int:
        if self.has(game_object.name):
            raise DuplicateNameError("object", game_object.name, container=self.label)
        size = len(self._objects)
        index = size if position is None else max(0, min(position, size))
        self._objects.insert(index, game_object)
        return index

    def create(self, name: str, object_type: str, position: int | None = None) -> GameObject:
        game_object = GameObject(name, object_type)
        self.insert(game_object, position)
        return game_object

    def remove(self, name: str) -> GameObject:
        index = self.position_of(name)
        if index == -1:
            raise NotFoundError("object", name, container=self.label)
        return self._objects.pop(index)

    def rename(self, current_name: str, new_name: str) -> GameObject:
        """Rename within this container only; references are not touched here."""

        game_object = self.get(current_name)
        if current_name != new_name and self.has(new_name):
            raise DuplicateNameError("object", new_name, container=self.label)
        game_object.name = new_name
        return game_object

    def to_payload(self) -> List[Dict[str, Any]]:
        return [game_object.to_payload() for game_object in self._objects]

    @classmethod
    def from_payload(cls, payload: Any, *, label: str = "project") -> "ObjectsContainer":
        container = cls(label)
        if payload is None:
            return container
        if not isinstance(payload, list):
            raise ValueError("Objects must be stored as a list")
        for entry in payload:
            game_object = GameObject.from_payload(entry)
            if container.has(game_object.name):
                raise ValueError(f"Duplicate object '{game_object.name}' in {label}")
            container._objects.append(game_object)
        return container


@dataclass
class ObjectGroup:
    """Named set of object names; membership is a weak reference by name."""

    name: str
    objects: List[str] = field(default_factory=list)

    def add(self, object_name: str) -> bool:
        if object_name in self.objects:
            return False
        self.objects.append(object_name)
        return True

    def remove(self, object_name: str) -> bool:
        if object_name not in self.objects:
            return False
        self.objects.remove(object_name)
        return True

    def rename_member(self, current_name: str, new_name: str) -> bool:
        if current_name not in self.objects:
            return False
        renamed: List[str] = []
        for member in self.objects:
            member = new_name if member == current_name else member
            if member not in renamed:
                renamed.append(member)
        self.objects = renamed
        return True

    def to_payload(self) -> Dict[str, Any]:
        return {"name": self.name, "objects": [{"name": member} for member in self.objects]}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ObjectGroup":
        if not isinstance(payload, Mapping):
            raise ValueError("Object groups must be objects")
        name = payload.get("name")
        if not isinstance(name, str):
            raise ValueError("Object groups require a 'name' string")
        members = payload.get("objects", [])
        if not isinstance(members, list):
            raise ValueError(f"Object group '{name}' members must be a list")
        objects: List[str] = []
        for member in members:
            member_name = member.get("name") if isinstance(member, Mapping) else None
            if not isinstance(member_name, str):
                raise ValueError(f"Object group '{name}' members require names")
            objects.append(member_name)
        return cls(name=name, objects=objects)


class ObjectGroupsContainer:
    """Ordered collection of object groups with unique names."""

    def __init__(self, label: str = "project") -> None:
        self.label = label
        self._groups: List[ObjectGroup] = []

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[ObjectGroup]:
        return iter(list(self._groups))

    def has(self, name: str) -> bool:
        return any(group.name == name for group in self._groups)

    def get(self, name: str) -> ObjectGroup:
        for group in self._groups:
            if group.name == name:
                return group
        raise NotFoundError("object group", name, container=self.label)

    def create(self, name: str, members: Sequence[str] = ()) -> ObjectGroup:
        if self.has(name):
            raise DuplicateNameError("object group", name, container=self.label)
        group = ObjectGroup(name=name)
        for member in members:
            group.add(member)
        self._groups.append(group)
        return group

    def remove(self, name: str) -> ObjectGroup:
        group = self.get(name)
        self._groups.remove(group)
        return group

    def rename_member_everywhere(self, current_name: str, new_name: str) -> int:
        return sum(1 for group in self._groups if group.rename_member(current_name, new_name))

    def remove_member_everywhere(self, object_name: str) -> int:
        return sum(1 for group in self._groups if group.remove(object_name))

    def to_payload(self) -> List[Dict[str, Any]]:
        return [group.to_payload() for group in self._groups]

    @classmethod
    def from_payload(cls, payload: Any, *, label: str = "project") -> "ObjectGroupsContainer":
        container = cls(label)
        if payload is None:
            return container
        if not isinstance(payload, list):
            raise ValueError("Object groups must be stored as a list")
        for entry in payload:
            group = ObjectGroup.from_payload(entry)
            if container.has(group.name):
                raise ValueError(f"Duplicate object group '{group.name}' in {label}")
            container._groups.append(group)
        return container


__all__ = [
    "BEHAVIOR_DEFAULTS",
    "Behavior",
    "Effect",
    "GameObject",
    "ObjectGroup",
    "ObjectGroupsContainer",
    "ObjectsContainer",
    "effects_from_payload",
    "effects_to_payload",
]
