"""Error kinds raised by the project document and session layers."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class ProjectError(Exception):
    """Base class for every failure surfaced by the document core.

    Each subclass exposes a stable ``kind`` string and a ``context`` mapping
    naming the offending entity so callers can build actionable messages
    without parsing the exception text.
    """

    kind = "ProjectError"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = {
            key: value for key, value in context.items() if value is not None
        }

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-serialisable description of the failure."""

        return {
            "error": self.kind,
            "message": self.message,
            "context": {
                key: str(value) if isinstance(value, Path) else value
                for key, value in self.context.items()
            },
        }


class DuplicateNameError(ProjectError, ValueError):
    """Raised when creating or renaming onto a name that is already taken."""

    kind = "DuplicateName"

    def __init__(self, entity: str, name: str, *, container: str | None = None) -> None:
        location = f" in {container}" if container else ""
        super().__init__(
            f"{entity.capitalize()} '{name}' already exists{location}.",
            entity=entity,
            name=name,
            container=container,
        )
        self.entity = entity
        self.name = name


class NotFoundError(ProjectError, LookupError):
    """Raised when a named scene, object, variable, layer or behavior is absent."""

    kind = "NotFound"

    def __init__(self, entity: str, name: str, *, container: str | None = None) -> None:
        location = f" in {container}" if container else ""
        super().__init__(
            f"{entity.capitalize()} '{name}' not found{location}.",
            entity=entity,
            name=name,
            container=container,
        )
        self.entity = entity
        self.name = name


class IndexOutOfRangeError(ProjectError, IndexError):
    """Raised when a position or index falls outside the current bounds."""

    kind = "IndexOutOfRange"

    def __init__(self, entity: str, index: Any, size: int) -> None:
        super().__init__(
            f"{entity.capitalize()} index {index} is out of range (size {size}).",
            entity=entity,
            index=index,
            size=size,
        )
        self.entity = entity
        self.index = index
        self.size = size


class ObjectNotFoundError(NotFoundError):
    """Raised when an instance references an object that does not exist."""

    kind = "ObjectNotFound"

    def __init__(self, object_name: str, *, scene_name: str | None = None) -> None:
        container = f"scene '{scene_name}' or globally" if scene_name else "project"
        super().__init__("object", object_name, container=container)
        if scene_name is not None:
            self.context["scene_name"] = scene_name
        self.object_name = object_name


class SessionConflictError(ProjectError):
    """Raised when a session identifier is already registered."""

    kind = "SessionConflict"

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session '{session_id}' already exists.", session_id=session_id)
        self.session_id = session_id


class SessionNotFoundError(NotFoundError):
    """Raised when a session identifier is not registered (or was closed)."""

    kind = "SessionNotFound"

    def __init__(self, session_id: str) -> None:
        super().__init__("session", session_id)
        self.context["session_id"] = session_id
        self.session_id = session_id


class ProjectIOError(ProjectError):
    """Raised when reading, writing or copying a project file fails."""

    kind = "IOFailure"

    def __init__(self, message: str, *, path: Path | str) -> None:
        super().__init__(message, path=Path(path))
        self.path = Path(path)


class ProjectFormatError(ProjectError, ValueError):
    """Raised when a project file cannot be decoded into a document."""

    kind = "ProjectFormat"

    def __init__(self, message: str, *, path: Path | str | None = None) -> None:
        super().__init__(message, path=Path(path) if path is not None else None)


class UnsupportedOperationError(ProjectError):
    """Raised when an operation does not apply to the addressed entity."""

    kind = "UnsupportedOperation"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, **context)


__all__ = [
    "ProjectError",
    "DuplicateNameError",
    "NotFoundError",
    "IndexOutOfRangeError",
    "ObjectNotFoundError",
    "SessionConflictError",
    "SessionNotFoundError",
    "ProjectIOError",
    "ProjectFormatError",
    "UnsupportedOperationError",
]
