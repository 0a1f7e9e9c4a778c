"""The project document: the root of everything a session edits."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterator, List, Mapping

from .errors import DuplicateNameError, IndexOutOfRangeError, NotFoundError
from .events import EventsList
from .objects import ObjectGroupsContainer, ObjectsContainer
from .resources import ResourcesManager
from .scene import Scene
from .variables import VariablesContainer

FORMAT_VERSION = 1


@dataclass
class ProjectProperties:
    name: str = "Project"
    version: str = "1.0.0"
    description: str = ""
    author: str = ""
    package_name: str = "com.example.gamename"
    window_width: int = 800
    window_height: int = 600
    max_fps: int = 60
    min_fps: int = 20
    first_scene: str = ""

    # Persisted key for each attribute.
    _KEYS = {
        "name": "name",
        "version": "version",
        "description": "description",
        "author": "author",
        "package_name": "packageName",
        "window_width": "windowWidth",
        "window_height": "windowHeight",
        "max_fps": "maxFPS",
        "min_fps": "minFPS",
        "first_scene": "firstLayout",
    }

    @classmethod
    def field_names(cls) -> List[str]:
        return [item.name for item in fields(cls)]

    def to_payload(self) -> Dict[str, Any]:
        return {key: getattr(self, attribute) for attribute, key in self._KEYS.items()}

    @classmethod
    def from_payload(cls, payload: Any) -> "ProjectProperties":
        if payload is None:
            return cls()
        if not isinstance(payload, Mapping):
            raise ValueError("Project properties must be an object")
        properties = cls()
        for item in fields(cls):
            key = cls._KEYS[item.name]
            if key not in payload:
                continue
            value = payload[key]
            default = getattr(properties, item.name)
            if isinstance(default, int):
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"Project property '{key}' must be numeric")
                value = int(value)
            elif not isinstance(value, str):
                raise ValueError(f"Project property '{key}' must be a string")
            setattr(properties, item.name, value)
        return properties


@dataclass
class ExternalEvents:
    """A named events sheet that lives outside any scene."""

    name: str
    associated_scene: str = ""
    events: EventsList = field(default_factory=EventsList)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "associatedLayout": self.associated_scene,
            "events": self.events.to_payload(),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ExternalEvents":
        if not isinstance(payload, Mapping):
            raise ValueError("External events must be objects")
        name = payload.get("name")
        if not isinstance(name, str):
            raise ValueError("External events require a 'name' string")
        associated = payload.get("associatedLayout", "")
        return cls(
            name=name,
            associated_scene=associated if isinstance(associated, str) else str(associated),
            events=EventsList.from_payload(payload.get("events")),
        )


class _NamedList:
    """Ordered, uniquely named entries (scenes or external events sheets)."""

    def __init__(self, entity: str) -> None:
        self.entity = entity
        self._entries: List[Any] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._entries))

    def has(self, name: str) -> bool:
        return self.position_of(name) != -1

    def names(self) -> List[str]:
        return [entry.name for entry in self._entries]

    def position_of(self, name: str) -> int:
        for index, entry in enumerate(self._entries):
            if entry.name == name:
                return index
        return -1

    def get(self, name: str) -> Any:
        index = self.position_of(name)
        if index == -1:
            raise NotFoundError(self.entity, name)
        return self._entries[index]

    def at(self, index: int) -> Any:
        if not 0 <= index < len(self._entries):
            raise IndexOutOfRangeError(self.entity, index, len(self._entries))
        return self._entries[index]

    def insert(self, entry: Any, position: int | None = None) -> int:
        if self.has(entry.name):
            raise DuplicateNameError(self.entity, entry.name)
        size = len(self._entries)
        index = size if position is None else max(0, min(position, size))
        self._entries.insert(index, entry)
        return index

    def remove(self, name: str) -> Any:
        index = self.position_of(name)
        if index == -1:
            raise NotFoundError(self.entity, name)
        return self._entries.pop(index)

    def rename(self, current_name: str, new_name: str) -> Any:
        entry = self.get(current_name)
        if current_name != new_name and self.has(new_name):
            raise DuplicateNameError(self.entity, new_name)
        entry.name = new_name
        return entry

    def move(self, name: str, position: int) -> int:
        index = self.position_of(name)
        if index == -1:
            raise NotFoundError(self.entity, name)
        if not 0 <= position < len(self._entries):
            raise IndexOutOfRangeError(self.entity, position, len(self._entries))
        entry = self._entries.pop(index)
        self._entries.insert(position, entry)
        return index


class Project:
    """The mutable in-memory game project."""

    def __init__(self, name: str = "Project") -> None:
        self.properties = ProjectProperties(name=name)
        self.scenes = _NamedList("scene")
        self.external_events = _NamedList("external events")
        self.objects = ObjectsContainer("project")
        self.object_groups = ObjectGroupsContainer("project")
        self.variables = VariablesContainer()
        self.resources = ResourcesManager()
        self.used_extensions: List[str] = []

    @property
    def name(self) -> str:
        return self.properties.name

    def get_scene(self, name: str) -> Scene:
        return self.scenes.get(name)

    def get_external_events(self, name: str) -> ExternalEvents:
        return self.external_events.get(name)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "formatVersion": FORMAT_VERSION,
            "properties": self.properties.to_payload(),
            "usedExtensions": list(self.used_extensions),
            "resources": self.resources.to_payload(),
            "objects": self.objects.to_payload(),
            "objectsGroups": self.object_groups.to_payload(),
            "variables": self.variables.to_payload(),
            "layouts": [scene.to_payload() for scene in self.scenes],
            "externalEvents": [sheet.to_payload() for sheet in self.external_events],
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Project":
        """Build a project from its persisted tree.

        Raises:
            ValueError: If the tree is malformed or uses an unknown format version.
        """

        if not isinstance(payload, Mapping):
            raise ValueError("Project files must contain a JSON object")
        version = payload.get("formatVersion", FORMAT_VERSION)
        if isinstance(version, bool) or not isinstance(version, int):
            raise ValueError("'formatVersion' must be an integer")
        if version > FORMAT_VERSION:
            raise ValueError(f"Unsupported project format version {version}")

        project = cls()
        project.properties = ProjectProperties.from_payload(payload.get("properties"))
        project.objects = ObjectsContainer.from_payload(payload.get("objects"), label="project")
        project.object_groups = ObjectGroupsContainer.from_payload(
            payload.get("objectsGroups"), label="project"
        )
        project.variables = VariablesContainer.from_payload(payload.get("variables"))
        project.resources = ResourcesManager.from_payload(payload.get("resources"))

        extensions = payload.get("usedExtensions", [])
        if not isinstance(extensions, list) or not all(isinstance(e, str) for e in extensions):
            raise ValueError("'usedExtensions' must be a list of strings")
        project.used_extensions = list(dict.fromkeys(extensions))

        layouts = payload.get("layouts", [])
        if not isinstance(layouts, list):
            raise ValueError("'layouts' must be a list")
        for entry in layouts:
            scene = Scene.from_payload(entry)
            if project.scenes.has(scene.name):
                raise ValueError(f"Duplicate scene '{scene.name}'")
            project.scenes.insert(scene)

        sheets = payload.get("externalEvents", [])
        if not isinstance(sheets, list):
            raise ValueError("'externalEvents' must be a list")
        for entry in sheets:
            sheet = ExternalEvents.from_payload(entry)
            if project.external_events.has(sheet.name):
                raise ValueError(f"Duplicate external events '{sheet.name}'")
            project.external_events.insert(sheet)
        return project


__all__ = ["FORMAT_VERSION", "ExternalEvents", "Project", "ProjectProperties"]
