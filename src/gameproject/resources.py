"""Project resources: images, sounds, fonts and other files referenced by name."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping

from .errors import DuplicateNameError, NotFoundError


class ResourceKind(str, Enum):
    IMAGE = "image"
    AUDIO = "audio"
    FONT = "font"
    VIDEO = "video"
    JSON = "json"
    TILEMAP = "tilemap"
    TILESET = "tileset"
    MODEL3D = "model3D"
    ATLAS = "atlas"
    BITMAP_FONT = "bitmapFont"
    JAVASCRIPT = "javascript"

    @classmethod
    def parse(cls, value: "str | ResourceKind") -> "ResourceKind":
        if isinstance(value, ResourceKind):
            return value
        for kind in cls:
            if kind.value.lower() == value.strip().lower():
                return kind
        raise ValueError(f"Unknown resource kind {value!r}")


@dataclass
class Resource:
    name: str
    kind: ResourceKind
    file: str
    metadata: str = ""

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "file": self.file,
            "metadata": self.metadata,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Resource":
        if not isinstance(payload, Mapping):
            raise ValueError("Resources must be objects")
        name = payload.get("name")
        kind = payload.get("kind")
        file = payload.get("file", "")
        if not isinstance(name, str) or not isinstance(kind, str):
            raise ValueError("Resources require 'name' and 'kind' strings")
        if not isinstance(file, str):
            raise ValueError(f"Resource '{name}' file must be a string")
        metadata = payload.get("metadata", "")
        return cls(
            name=name,
            kind=ResourceKind.parse(kind),
            file=file,
            metadata=metadata if isinstance(metadata, str) else str(metadata),
        )


class ResourcesManager:
    """Ordered resources with unique names."""

    def __init__(self) -> None:
        self._resources: Dict[str, Resource] = {}

    def __len__(self) -> int:
        return len(self._resources)

    def __iter__(self) -> Iterator[Resource]:
        return iter(list(self._resources.values()))

    def has(self, name: str) -> bool:
        return name in self._resources

    def get(self, name: str) -> Resource:
        try:
            return self._resources[name]
        except KeyError as exc:
            raise NotFoundError("resource", name) from exc

    def add(self, resource: Resource) -> Resource:
        if resource.name in self._resources:
            raise DuplicateNameError("resource", resource.name)
        self._resources[resource.name] = resource
        return resource

    def remove(self, name: str) -> Resource:
        if name not in self._resources:
            raise NotFoundError("resource", name)
        return self._resources.pop(name)

    def rename(self, current_name: str, new_name: str) -> Resource:
        resource = self.get(current_name)
        if current_name == new_name:
            return resource
        if new_name in self._resources:
            raise DuplicateNameError("resource", new_name)
        # Rebuild to keep the resource at its original position.
        resource.name = new_name
        self._resources = {
            (new_name if name == current_name else name): entry
            for name, entry in self._resources.items()
        }
        return resource

    def select(self, kind: ResourceKind | None = None) -> List[Resource]:
        return [
            resource
            for resource in self._resources.values()
            if kind is None or resource.kind is kind
        ]

    def to_payload(self) -> List[Dict[str, Any]]:
        return [resource.to_payload() for resource in self._resources.values()]

    @classmethod
    def from_payload(cls, payload: Any) -> "ResourcesManager":
        manager = cls()
        if payload is None:
            return manager
        if not isinstance(payload, list):
            raise ValueError("Resources must be stored as a list")
        for entry in payload:
            resource = Resource.from_payload(entry)
            if resource.name in manager._resources:
                raise ValueError(f"Duplicate resource '{resource.name}'")
            manager._resources[resource.name] = resource
        return manager


__all__ = ["Resource", "ResourceKind", "ResourcesManager"]
