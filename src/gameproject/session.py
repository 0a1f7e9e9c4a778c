"""Editing operations for a single open project.

A :class:`ProjectSession` owns one :class:`~gameproject.project.Project`
exclusively. Every mutating method validates its arguments, applies one change
and marks the session dirty; nothing touches the disk until :meth:`save` or
:meth:`create_backup` is called. Listing methods return detached snapshots so
callers can serialise them freely.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence

from .errors import (
    DuplicateNameError,
    NotFoundError,
    ObjectNotFoundError,
    ProjectError,
    ProjectIOError,
    SessionNotFoundError,
    UnsupportedOperationError,
)
from .events import Event, EventPath, EventSummary, EventType, EventsList, parse_event_path
from .instances import InitialInstance
from .instructions import InstructionSpec
from .layers import BASE_LAYER, Color, DEFAULT_AMBIENT_COLOR, Layer
from .objects import GameObject, ObjectGroupsContainer, ObjectsContainer
from .persistence import ProjectStore
from .project import ExternalEvents, Project, ProjectProperties
from .resources import Resource, ResourceKind
from .scene import DEFAULT_BACKGROUND, Scene
from .variables import Variable, VariableSummary, VariableType, VariablesContainer

logger = logging.getLogger(__name__)

PROJECT_SETTINGS = tuple(ProjectProperties.field_names())

_SCOPE_KINDS = ("global", "scene", "object", "instance")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class VariableScope:
    """Addresses a variables container: global, scene, object or instance."""

    kind: str = "global"
    scene_name: str | None = None
    object_name: str | None = None
    instance_index: int | None = None

    def __post_init__(self) -> None:
        if self.kind not in _SCOPE_KINDS:
            raise ValueError(f"Unknown variable scope {self.kind!r}")
        if self.kind in ("scene", "instance") and self.scene_name is None:
            raise ValueError(f"{self.kind.capitalize()} variables require a scene name")
        if self.kind == "object" and not self.object_name:
            raise ValueError("Object variables require an object name")
        if self.kind == "instance" and self.instance_index is None:
            raise ValueError("Instance variables require an instance index")

    @classmethod
    def global_scope(cls) -> "VariableScope":
        return cls()

    @classmethod
    def for_scene(cls, scene_name: str) -> "VariableScope":
        return cls("scene", scene_name=scene_name)

    @classmethod
    def for_object(cls, object_name: str, scene_name: str | None = None) -> "VariableScope":
        return cls("object", scene_name=scene_name, object_name=object_name)

    @classmethod
    def for_instance(cls, scene_name: str, instance_index: int) -> "VariableScope":
        return cls("instance", scene_name=scene_name, instance_index=instance_index)

    def describe(self) -> str:
        if self.kind == "scene":
            return f"scene '{self.scene_name}'"
        if self.kind == "object":
            where = f" in scene '{self.scene_name}'" if self.scene_name is not None else ""
            return f"object '{self.object_name}'{where}"
        if self.kind == "instance":
            return f"instance {self.instance_index} of scene '{self.scene_name}'"
        return "project"


@dataclass(frozen=True)
class EventTarget:
    """Selects the events sheet of a scene or of an external events entry."""

    scene_name: str | None = None
    external_events_name: str | None = None

    def __post_init__(self) -> None:
        if (self.scene_name is None) == (self.external_events_name is None):
            raise ValueError(
                "Exactly one of scene_name or external_events_name must be provided"
            )

    @classmethod
    def for_scene(cls, scene_name: str) -> "EventTarget":
        return cls(scene_name=scene_name)

    @classmethod
    def for_external_events(cls, name: str) -> "EventTarget":
        return cls(external_events_name=name)

    def describe(self) -> str:
        if self.scene_name is not None:
            return f"scene '{self.scene_name}'"
        return f"external events '{self.external_events_name}'"


@dataclass(frozen=True)
class ProjectInfo:
    session_id: str
    path: Path
    dirty: bool
    name: str
    version: str
    description: str
    author: str
    package_name: str
    window_width: int
    window_height: int
    max_fps: int
    min_fps: int
    first_scene: str
    scene_count: int
    global_object_count: int
    global_variable_count: int
    external_events_count: int
    resource_count: int

    def to_payload(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["path"] = str(self.path)
        return payload


@dataclass(frozen=True)
class SceneSummary:
    name: str
    position: int
    is_first: bool
    object_count: int | None = None
    instance_count: int | None = None
    layer_count: int | None = None
    event_count: int | None = None
    variable_count: int | None = None

    def to_payload(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass(frozen=True)
class SceneDeletion:
    name: str
    cleared_first_scene: bool


@dataclass(frozen=True)
class ObjectSummary:
    name: str
    type: str
    behaviors: tuple[str, ...] | None = None
    variable_count: int | None = None
    tags: tuple[str, ...] | None = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name, "type": self.type}
        if self.behaviors is not None:
            payload["behaviors"] = list(self.behaviors)
        if self.variable_count is not None:
            payload["variable_count"] = self.variable_count
        if self.tags is not None:
            payload["tags"] = list(self.tags)
        return payload


@dataclass(frozen=True)
class ObjectDeletion:
    """Outcome of deleting an object, including any references swept."""

    name: str
    scene_name: str | None
    instances_removed: int = 0
    group_memberships_removed: int = 0


@dataclass(frozen=True)
class InstanceBatchResult:
    """Outcome of one entry of :meth:`ProjectSession.create_instances`."""

    position: int
    object_name: str
    success: bool
    instance_index: int | None = None
    error: str | None = None
    message: str | None = None

    def to_payload(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass(frozen=True)
class SaveResult:
    path: Path
    backup_path: Path | None = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "path": str(self.path),
            "backup_path": str(self.backup_path) if self.backup_path is not None else None,
        }


def _instruction_spec(spec: "InstructionSpec | Mapping[str, Any]") -> InstructionSpec:
    if isinstance(spec, InstructionSpec):
        return spec
    return InstructionSpec.from_mapping(spec)


def _as_path(path: "EventPath | str | int | Sequence[int]") -> EventPath:
    return parse_event_path(path)


def _as_parent(parent: "EventPath | str | int | Sequence[int] | None") -> EventPath:
    if parent is None or (not isinstance(parent, int) and len(parent) == 0):
        return ()
    return parse_event_path(parent)


class ProjectSession:
    """A live editing context for one project file."""

    def __init__(
        self,
        session_id: str,
        project: Project,
        path: Path | str,
        *,
        store: ProjectStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.session_id = session_id
        self.path = Path(path).expanduser().resolve()
        self._project: Project | None = project
        self._store = store or ProjectStore()
        self._clock = clock or _utcnow
        self.created_at = self._clock()
        self.last_modified_at = self.created_at
        self.dirty = False

    # Lifecycle ----------------------------------------------------------

    @property
    def project(self) -> Project:
        """The owned document; unavailable once the session is disposed."""

        if self._project is None:
            raise SessionNotFoundError(self.session_id)
        return self._project

    @property
    def is_disposed(self) -> bool:
        return self._project is None

    def mark_dirty(self) -> None:
        self.dirty = True
        self.last_modified_at = self._clock()

    def dispose(self) -> None:
        """Release the document. Any later use raises ``SessionNotFoundError``."""

        self._project = None

    # Persistence --------------------------------------------------------

    def serialize(self) -> Dict[str, Any]:
        return self._store.serialize(self.project)

    def create_backup(self) -> Path:
        return self._store.backup(self.path)

    def save(self, path: Path | str | None = None, *, backup: bool = False) -> SaveResult:
        """Write the project to ``path`` (or the session path).

        When ``backup`` is set an existing file at the destination is copied
        first. A failed backup is logged and does not prevent the save.

        Raises:
            ProjectIOError: If the project cannot be written.
        """

        project = self.project
        destination = Path(path).expanduser().resolve() if path is not None else self.path

        backup_path = None
        if backup and destination.exists():
            try:
                backup_path = self._store.backup(destination)
            except ProjectIOError as exc:
                logger.warning(
                    "Backup before saving session %s failed: %s", self.session_id, exc.message
                )

        self._store.save(project, destination)
        self.path = destination
        self.dirty = False
        logger.info("Session %s saved to %s", self.session_id, destination)
        return SaveResult(path=destination, backup_path=backup_path)

    # Project ------------------------------------------------------------

    def get_info(self) -> ProjectInfo:
        project = self.project
        properties = project.properties
        return ProjectInfo(
            session_id=self.session_id,
            path=self.path,
            dirty=self.dirty,
            name=properties.name,
            version=properties.version,
            description=properties.description,
            author=properties.author,
            package_name=properties.package_name,
            window_width=properties.window_width,
            window_height=properties.window_height,
            max_fps=properties.max_fps,
            min_fps=properties.min_fps,
            first_scene=properties.first_scene,
            scene_count=len(project.scenes),
            global_object_count=len(project.objects),
            global_variable_count=len(project.variables),
            external_events_count=len(project.external_events),
            resource_count=len(project.resources),
        )

    def update_settings(self, **changes: Any) -> List[str]:
        """Apply project settings and return the names of those that changed.

        ``None`` values are skipped. An empty ``first_scene`` unsets it.

        Raises:
            ValueError: If a setting name is unknown or a value has the wrong type.
            NotFoundError: If ``first_scene`` names no scene.
        """

        unknown = sorted(key for key in changes if key not in PROJECT_SETTINGS)
        if unknown:
            raise ValueError(f"Unknown project setting(s): {', '.join(unknown)}")

        project = self.project
        first_scene = changes.get("first_scene")
        if first_scene and not project.scenes.has(first_scene):
            raise NotFoundError("scene", first_scene)

        properties = project.properties
        updates: Dict[str, Any] = {}
        for key, value in changes.items():
            if value is None:
                continue
            current = getattr(properties, key)
            if isinstance(current, int):
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"Project setting '{key}' must be numeric")
                if value <= 0:
                    raise ValueError(f"Project setting '{key}' must be positive")
                value = int(value)
            elif not isinstance(value, str):
                raise ValueError(f"Project setting '{key}' must be a string")
            if value != current:
                updates[key] = value

        for key, value in updates.items():
            setattr(properties, key, value)
        if updates:
            self.mark_dirty()
            logger.debug("Session %s updated settings %s", self.session_id, sorted(updates))
        return list(updates)

    # Scenes -------------------------------------------------------------

    def create_scene(
        self,
        name: str,
        position: int | None = None,
        *,
        background_color: "Color | Mapping[str, Any] | str | None" = None,
        set_as_first: bool = False,
    ) -> Scene:
        project = self.project
        if project.scenes.has(name):
            raise DuplicateNameError("scene", name)
        color = Color.parse(background_color) if background_color is not None else DEFAULT_BACKGROUND
        scene = Scene(name, background_color=color)
        index = project.scenes.insert(scene, position)
        if set_as_first:
            project.properties.first_scene = name
        self.mark_dirty()
        logger.debug("Scene %s created at position %d", name, index)
        return scene

    def delete_scene(self, name: str) -> SceneDeletion:
        """Delete a scene; a first-scene reference to it is cleared and reported."""

        project = self.project
        project.scenes.remove(name)
        cleared = project.properties.first_scene == name
        if cleared:
            project.properties.first_scene = ""
        self.mark_dirty()
        logger.debug("Scene %s deleted", name)
        return SceneDeletion(name=name, cleared_first_scene=cleared)

    def rename_scene(self, current_name: str, new_name: str) -> None:
        project = self.project
        project.scenes.rename(current_name, new_name)
        if project.properties.first_scene == current_name:
            project.properties.first_scene = new_name
        for sheet in project.external_events:
            if sheet.associated_scene == current_name:
                sheet.associated_scene = new_name
        self.mark_dirty()
        logger.debug("Scene %s renamed to %s", current_name, new_name)

    def move_scene(self, name: str, position: int) -> int:
        previous = self.project.scenes.move(name, position)
        self.mark_dirty()
        return previous

    def get_scene(self, name: str) -> Scene:
        return self.project.get_scene(name)

    def get_scene_at(self, index: int) -> Scene:
        return self.project.scenes.at(index)

    def scene_position(self, name: str) -> int:
        index = self.project.scenes.position_of(name)
        if index == -1:
            raise NotFoundError("scene", name)
        return index

    def list_scenes(self, include_details: bool = False) -> List[SceneSummary]:
        project = self.project
        summaries = []
        for index, scene in enumerate(project.scenes):
            summary = SceneSummary(
                name=scene.name,
                position=index,
                is_first=scene.name == project.properties.first_scene,
            )
            if include_details:
                summary = SceneSummary(
                    name=summary.name,
                    position=summary.position,
                    is_first=summary.is_first,
                    object_count=len(scene.objects),
                    instance_count=len(scene.instances),
                    layer_count=len(scene.layers),
                    event_count=scene.events.count_all(),
                    variable_count=len(scene.variables),
                )
            summaries.append(summary)
        return summaries

    def duplicate_scene(self, source_name: str, new_name: str) -> Scene:
        """Deep-copy a scene, placing the copy right after the source."""

        project = self.project
        source = project.get_scene(source_name)
        if project.scenes.has(new_name):
            raise DuplicateNameError("scene", new_name)
        copy = source.clone(new_name)
        project.scenes.insert(copy, project.scenes.position_of(source_name) + 1)
        self.mark_dirty()
        logger.debug("Scene %s duplicated as %s", source_name, new_name)
        return copy

    # Objects ------------------------------------------------------------

    def _objects_for(self, scene_name: str | None) -> ObjectsContainer:
        if scene_name is None:
            return self.project.objects
        return self.project.get_scene(scene_name).objects

    def _groups_for(self, scene_name: str | None) -> ObjectGroupsContainer:
        if scene_name is None:
            return self.project.object_groups
        return self.project.get_scene(scene_name).object_groups

    def _scenes_using(self, object_name: str, scene_name: str | None) -> List[Scene]:
        """Scenes whose instances named ``object_name`` refer to the given object.

        A scene-local object with the same name shadows a global one.
        """

        if scene_name is not None:
            return [self.project.get_scene(scene_name)]
        return [scene for scene in self.project.scenes if not scene.objects.has(object_name)]

    def create_object(
        self, name: str, object_type: str, scene_name: str | None = None
    ) -> GameObject:
        game_object = self._objects_for(scene_name).create(name, object_type)
        self.mark_dirty()
        logger.debug("Object %s (%s) created in %s", name, object_type, scene_name or "project")
        return game_object

    def delete_object(
        self, name: str, scene_name: str | None = None, *, remove_instances: bool = False
    ) -> ObjectDeletion:
        """Delete an object.

        Without ``remove_instances`` its instances and group memberships are
        left in place as dangling references. With it they are removed from
        every scene that resolves the name to this object.
        """

        objects = self._objects_for(scene_name)
        if not objects.has(name):
            raise NotFoundError("object", name, container=objects.label)

        instances_removed = 0
        memberships_removed = 0
        if remove_instances:
            for scene in self._scenes_using(name, scene_name):
                instances_removed += scene.instances.remove_of_object(name)
                memberships_removed += scene.object_groups.remove_member_everywhere(name)
            if scene_name is None:
                memberships_removed += self.project.object_groups.remove_member_everywhere(name)
        objects.remove(name)

        self.mark_dirty()
        logger.debug(
            "Object %s deleted from %s (%d instance(s) removed)",
            name,
            scene_name or "project",
            instances_removed,
        )
        return ObjectDeletion(
            name=name,
            scene_name=scene_name,
            instances_removed=instances_removed,
            group_memberships_removed=memberships_removed,
        )

    def rename_object(
        self, current_name: str, new_name: str, scene_name: str | None = None
    ) -> int:
        """Rename an object and rewrite the instances and groups that use it.

        Returns:
            The number of instances whose object reference was rewritten.
        """

        objects = self._objects_for(scene_name)
        scenes = self._scenes_using(current_name, scene_name)
        objects.rename(current_name, new_name)

        renamed = 0
        if current_name != new_name:
            for scene in scenes:
                renamed += scene.instances.rename_object(current_name, new_name)
                scene.object_groups.rename_member_everywhere(current_name, new_name)
            if scene_name is None:
                self.project.object_groups.rename_member_everywhere(current_name, new_name)
        self.mark_dirty()
        logger.debug("Object %s renamed to %s (%d instance(s))", current_name, new_name, renamed)
        return renamed

    def get_object(self, name: str, scene_name: str | None = None) -> GameObject:
        return self._objects_for(scene_name).get(name)

    def list_objects(
        self,
        scene_name: str | None = None,
        type_filter: str | None = None,
        include_details: bool = False,
    ) -> List[ObjectSummary]:
        summaries = []
        for game_object in self._objects_for(scene_name):
            if type_filter is not None and game_object.type != type_filter:
                continue
            if include_details:
                summaries.append(
                    ObjectSummary(
                        name=game_object.name,
                        type=game_object.type,
                        behaviors=tuple(game_object.behavior_names),
                        variable_count=len(game_object.variables),
                        tags=tuple(game_object.tags),
                    )
                )
            else:
                summaries.append(ObjectSummary(name=game_object.name, type=game_object.type))
        return summaries

    def create_object_group(
        self, name: str, members: Sequence[str] = (), scene_name: str | None = None
    ) -> List[str]:
        group = self._groups_for(scene_name).create(name, members)
        self.mark_dirty()
        return list(group.objects)

    def delete_object_group(self, name: str, scene_name: str | None = None) -> None:
        self._groups_for(scene_name).remove(name)
        self.mark_dirty()

    def list_object_groups(self, scene_name: str | None = None) -> List[Dict[str, Any]]:
        return [
            {"name": group.name, "objects": list(group.objects)}
            for group in self._groups_for(scene_name)
        ]

    # Variables ----------------------------------------------------------

    def _variables_for(self, scope: VariableScope) -> VariablesContainer:
        project = self.project
        if scope.kind == "global":
            return project.variables
        if scope.kind == "object":
            return self._objects_for(scope.scene_name).get(scope.object_name).variables
        scene = project.get_scene(scope.scene_name)
        if scope.kind == "scene":
            return scene.variables
        return scene.instances.get(scope.instance_index).variables

    def create_variable(
        self,
        scope: VariableScope,
        name: str,
        value: "float | str | bool | None" = None,
        *,
        variable_type: VariableType | None = None,
    ) -> Variable:
        """Create a variable in ``scope``.

        ``value`` decides the variant of a scalar (``None`` gives the number
        0). Passing ``variable_type`` creates an empty variable of that
        variant instead, which is how structures and arrays are made.
        """

        container = self._variables_for(scope)
        if variable_type is not None:
            if value is not None:
                raise ValueError("Pass either a value or a variable type, not both")
            variable = Variable.of_type(VariableType(variable_type))
        else:
            variable = Variable(value)
        if container.has(name):
            raise DuplicateNameError("variable", name, container=scope.describe())
        container.insert(name, variable)
        self.mark_dirty()
        logger.debug("Variable %s created in %s", name, scope.describe())
        return variable

    def delete_variable(self, scope: VariableScope, name: str) -> None:
        container = self._variables_for(scope)
        if not container.has(name):
            raise NotFoundError("variable", name, container=scope.describe())
        container.remove(name)
        self.mark_dirty()

    def get_variable(self, scope: VariableScope, name: str) -> Variable:
        container = self._variables_for(scope)
        if not container.has(name):
            raise NotFoundError("variable", name, container=scope.describe())
        return container.get(name).clone()

    def set_variable_value(
        self, scope: VariableScope, name: str, value: "float | str | bool"
    ) -> Variable:
        container = self._variables_for(scope)
        if not container.has(name):
            raise NotFoundError("variable", name, container=scope.describe())
        variable = container.get(name)
        variable.set_value(value)
        self.mark_dirty()
        return variable

    def list_variables(self, scope: VariableScope) -> List[VariableSummary]:
        return self._variables_for(scope).summaries()

    # Instances ----------------------------------------------------------

    def _resolve_object(self, scene: Scene, object_name: str) -> GameObject:
        if scene.objects.has(object_name):
            return scene.objects.get(object_name)
        if self.project.objects.has(object_name):
            return self.project.objects.get(object_name)
        raise ObjectNotFoundError(object_name, scene_name=scene.name)

    @staticmethod
    def _build_instance(
        object_name: str,
        *,
        x: float = 0.0,
        y: float = 0.0,
        z: float | None = None,
        angle: float = 0.0,
        z_order: int = 0,
        layer: str = BASE_LAYER,
        width: float | None = None,
        height: float | None = None,
        locked: bool = False,
        flipped_x: bool = False,
        flipped_y: bool = False,
    ) -> InitialInstance:
        custom_size = None
        if width is not None or height is not None:
            if width is None or height is None:
                raise ValueError("A custom size needs both width and height")
            custom_size = (float(width), float(height))
        return InitialInstance(
            object_name=object_name,
            x=float(x),
            y=float(y),
            z=float(z) if z is not None else None,
            angle=float(angle),
            z_order=int(z_order),
            layer=layer,
            custom_size=custom_size,
            locked=bool(locked),
            flipped_x=bool(flipped_x),
            flipped_y=bool(flipped_y),
        )

    def create_instance(self, scene_name: str, object_name: str, **placement: Any) -> int:
        """Place ``object_name`` in the scene and return the new instance index.

        Raises:
            ObjectNotFoundError: If neither the scene nor the project defines the object.
        """

        scene = self.project.get_scene(scene_name)
        self._resolve_object(scene, object_name)
        instance = self._build_instance(object_name, **placement)
        index = scene.instances.insert(instance)
        self.mark_dirty()
        logger.debug("Instance %d of %s created in scene %s", index, object_name, scene_name)
        return index

    def create_instances(
        self, scene_name: str, specs: Iterable[Mapping[str, Any]]
    ) -> List[InstanceBatchResult]:
        """Create several instances, reporting success or failure per entry.

        Failed entries do not stop the batch and nothing is rolled back.
        """

        scene = self.project.get_scene(scene_name)
        results: List[InstanceBatchResult] = []
        for position, spec in enumerate(specs):
            placement = dict(spec)
            object_name = str(placement.pop("object_name", ""))
            try:
                self._resolve_object(scene, object_name)
                index = scene.instances.insert(self._build_instance(object_name, **placement))
            except ProjectError as exc:
                results.append(
                    InstanceBatchResult(
                        position=position,
                        object_name=object_name,
                        success=False,
                        error=exc.kind,
                        message=exc.message,
                    )
                )
            except (TypeError, ValueError) as exc:
                results.append(
                    InstanceBatchResult(
                        position=position,
                        object_name=object_name,
                        success=False,
                        error="InvalidInstance",
                        message=str(exc),
                    )
                )
            else:
                results.append(
                    InstanceBatchResult(
                        position=position,
                        object_name=object_name,
                        success=True,
                        instance_index=index,
                    )
                )

        created = sum(1 for result in results if result.success)
        if created:
            self.mark_dirty()
        logger.debug(
            "Batch created %d of %d instance(s) in scene %s", created, len(results), scene_name
        )
        return results

    def delete_instances_of_object(self, scene_name: str, object_name: str) -> int:
        removed = self.project.get_scene(scene_name).instances.remove_of_object(object_name)
        if removed:
            self.mark_dirty()
        return removed

    def delete_instances_on_layer(self, scene_name: str, layer: str) -> int:
        removed = self.project.get_scene(scene_name).instances.remove_on_layer(layer)
        if removed:
            self.mark_dirty()
        return removed

    def list_instances(
        self,
        scene_name: str,
        object_name: str | None = None,
        layer: str | None = None,
    ) -> List[Dict[str, Any]]:
        instances = self.project.get_scene(scene_name).instances
        return [
            instance.summary(index)
            for index, instance in instances.filtered(object_name=object_name, layer=layer)
        ]

    # Layers -------------------------------------------------------------

    def create_layer(
        self,
        scene_name: str,
        name: str,
        position: int | None = None,
        *,
        visible: bool = True,
        lighting: bool = False,
        ambient_color: "Color | Mapping[str, Any] | str | None" = None,
    ) -> Layer:
        layers = self.project.get_scene(scene_name).layers
        layer = Layer(
            name=name,
            visible=visible,
            lighting=lighting,
            ambient_color=(
                Color.parse(ambient_color) if ambient_color is not None else DEFAULT_AMBIENT_COLOR
            ),
        )
        layers.insert(layer, position)
        self.mark_dirty()
        return layer

    def delete_layer(
        self, scene_name: str, name: str, move_instances_to: str | None = None
    ) -> int:
        """Delete a layer, optionally moving its instances to another layer.

        Returns:
            The number of instances moved. Without a move target instances
            keep referring to the deleted layer.
        """

        scene = self.project.get_scene(scene_name)
        layer = scene.layers.get(name)
        if layer.is_base:
            raise UnsupportedOperationError(
                "The base layer cannot be deleted.", scene_name=scene_name, layer=name
            )
        if move_instances_to is not None and move_instances_to == name:
            raise ValueError("Instances cannot be moved to the layer being deleted")
        if move_instances_to is not None and not scene.layers.has(move_instances_to):
            raise NotFoundError("layer", move_instances_to, container=scene.layers.label)

        moved = 0
        if move_instances_to is not None:
            moved = scene.instances.move_to_layer(name, move_instances_to)
        scene.layers.remove(name)
        self.mark_dirty()
        logger.debug("Layer %s deleted from scene %s (%d moved)", name, scene_name, moved)
        return moved

    def update_layer(
        self,
        scene_name: str,
        name: str,
        *,
        visible: bool | None = None,
        locked: bool | None = None,
        lighting: bool | None = None,
        ambient_color: "Color | Mapping[str, Any] | str | None" = None,
    ) -> List[str]:
        layer = self.project.get_scene(scene_name).layers.get(name)
        changes: Dict[str, Any] = {}
        if visible is not None and visible != layer.visible:
            changes["visible"] = visible
        if locked is not None and locked != layer.locked:
            changes["locked"] = locked
        if lighting is not None and lighting != layer.lighting:
            changes["lighting"] = lighting
        if ambient_color is not None:
            color = Color.parse(ambient_color)
            if color != layer.ambient_color:
                changes["ambient_color"] = color

        for key, value in changes.items():
            setattr(layer, key, value)
        if changes:
            self.mark_dirty()
        return list(changes)

    def move_layer(self, scene_name: str, name: str, position: int) -> int:
        previous = self.project.get_scene(scene_name).layers.move(name, position)
        self.mark_dirty()
        return previous

    def list_layers(self, scene_name: str) -> List[Dict[str, Any]]:
        scene = self.project.get_scene(scene_name)
        return [
            {
                "name": layer.name,
                "position": index,
                "visible": layer.visible,
                "locked": layer.locked,
                "lighting": layer.lighting,
                "ambient_color": layer.ambient_color.to_payload(),
                "instance_count": len(scene.instances.filtered(layer=layer.name)),
            }
            for index, layer in enumerate(scene.layers)
        ]

    # Behaviors ----------------------------------------------------------

    def add_behavior(
        self,
        object_name: str,
        behavior_type: str,
        name: str,
        scene_name: str | None = None,
    ) -> Dict[str, str]:
        game_object = self._objects_for(scene_name).get(object_name)
        behavior = game_object.add_behavior(behavior_type, name)
        self.mark_dirty()
        logger.debug("Behavior %s (%s) added to %s", name, behavior_type, object_name)
        return dict(behavior.properties)

    def remove_behavior(
        self, object_name: str, name: str, scene_name: str | None = None
    ) -> None:
        self._objects_for(scene_name).get(object_name).remove_behavior(name)
        self.mark_dirty()

    def configure_behavior(
        self,
        object_name: str,
        name: str,
        properties: Mapping[str, Any],
        scene_name: str | None = None,
    ) -> List[str]:
        """Update behavior properties and return the keys that were applied.

        Keys the behavior does not define are ignored.
        """

        behavior = self._objects_for(scene_name).get(object_name).get_behavior(name)
        applied = [
            key
            for key, value in properties.items()
            if behavior.update_property(key, _property_text(value))
        ]
        if applied:
            self.mark_dirty()
        ignored = [key for key in properties if key not in applied]
        if ignored:
            logger.debug("Behavior %s ignored unknown properties %s", name, ignored)
        return applied

    def list_behaviors(
        self, object_name: str, scene_name: str | None = None
    ) -> List[Dict[str, Any]]:
        game_object = self._objects_for(scene_name).get(object_name)
        return [behavior.to_payload() for behavior in game_object.behaviors()]

    # Resources ----------------------------------------------------------

    def add_resource(
        self, name: str, kind: "ResourceKind | str", file: str, metadata: str = ""
    ) -> Resource:
        resource = self.project.resources.add(
            Resource(name=name, kind=ResourceKind.parse(kind), file=file, metadata=metadata)
        )
        self.mark_dirty()
        return resource

    def remove_resource(self, name: str) -> None:
        self.project.resources.remove(name)
        self.mark_dirty()

    def rename_resource(self, current_name: str, new_name: str) -> None:
        self.project.resources.rename(current_name, new_name)
        self.mark_dirty()

    def list_resources(self, kind: "ResourceKind | str | None" = None) -> List[Dict[str, Any]]:
        selected = ResourceKind.parse(kind) if kind is not None else None
        return [resource.to_payload() for resource in self.project.resources.select(selected)]

    # Extensions ---------------------------------------------------------

    def list_extensions(self, include_builtin: bool = False) -> List[Dict[str, Any]]:
        return [
            {"name": name, "builtin": name.startswith("Builtin")}
            for name in self.project.used_extensions
            if include_builtin or not name.startswith("Builtin")
        ]

    def add_extension(self, name: str) -> bool:
        """Mark ``name`` as used; returns ``False`` if it already was."""

        extensions = self.project.used_extensions
        if name in extensions:
            return False
        extensions.append(name)
        self.mark_dirty()
        return True

    def remove_extension(self, name: str) -> None:
        extensions = self.project.used_extensions
        if name not in extensions:
            raise NotFoundError("extension", name)
        extensions.remove(name)
        self.mark_dirty()

    # External events ----------------------------------------------------

    def create_external_events(self, name: str, associated_scene: str = "") -> ExternalEvents:
        sheet = ExternalEvents(name=name, associated_scene=associated_scene)
        self.project.external_events.insert(sheet)
        self.mark_dirty()
        return sheet

    def delete_external_events(self, name: str) -> None:
        self.project.external_events.remove(name)
        self.mark_dirty()

    def rename_external_events(self, current_name: str, new_name: str) -> None:
        self.project.external_events.rename(current_name, new_name)
        self.mark_dirty()

    def list_external_events(self) -> List[Dict[str, Any]]:
        return [
            {
                "name": sheet.name,
                "associated_scene": sheet.associated_scene,
                "event_count": len(sheet.events),
            }
            for sheet in self.project.external_events
        ]

    # Events -------------------------------------------------------------

    def _events_for(self, target: EventTarget) -> EventsList:
        if target.scene_name is not None:
            return self.project.get_scene(target.scene_name).events
        return self.project.get_external_events(target.external_events_name).events

    def list_events(
        self, target: EventTarget, depth: int = 1, include_disabled: bool = True
    ) -> List[EventSummary]:
        return self._events_for(target).summarize(depth, include_disabled=include_disabled)

    def insert_event(
        self,
        target: EventTarget,
        event_type: "EventType | str",
        position: int | None = None,
        *,
        parent: "EventPath | str | Sequence[int]" = (),
        conditions: Sequence["InstructionSpec | Mapping[str, Any]"] | None = None,
        actions: Sequence["InstructionSpec | Mapping[str, Any]"] | None = None,
    ) -> EventPath:
        """Insert an empty event and return its path.

        Conditions and actions are only honoured for standard events.

        Raises:
            UnsupportedOperationError: If ``parent`` cannot hold sub-events.
            IndexOutOfRangeError: If ``parent`` or ``position`` is out of range.
        """

        events = self._events_for(target)
        parsed_type = EventType.parse(event_type)
        parent_path = _as_parent(parent)
        container = events.insertion_list(parent_path)

        event = Event(parsed_type)
        if parsed_type is EventType.STANDARD:
            for spec in conditions or ():
                event.add_instruction(_instruction_spec(spec), is_condition=True)
            for spec in actions or ():
                event.add_instruction(_instruction_spec(spec), is_condition=False)
        elif conditions or actions:
            logger.warning(
                "Ignoring conditions/actions supplied for a %s event", parsed_type.alias
            )

        index = container.insert(event, position)
        self.mark_dirty()
        path = parent_path + (index,)
        logger.debug("Event %s inserted in %s", path, target.describe())
        return path

    def delete_event(self, target: EventTarget, path: "EventPath | str | Sequence[int]") -> None:
        """Remove the event at ``path`` with all of its sub-events."""

        event_path = _as_path(path)
        events = self._events_for(target)
        events.sub_list(event_path[:-1]).remove_at(event_path[-1])
        self.mark_dirty()
        logger.debug("Event %s deleted from %s", event_path, target.describe())

    def update_event(
        self,
        target: EventTarget,
        path: "EventPath | str | Sequence[int]",
        *,
        disabled: bool | None = None,
        folded: bool | None = None,
    ) -> bool:
        event = self._events_for(target).resolve(_as_path(path))
        changed = False
        if disabled is not None and disabled != event.disabled:
            event.disabled = disabled
            changed = True
        if folded is not None and folded != event.folded:
            event.folded = folded
            changed = True
        if changed:
            self.mark_dirty()
        return changed

    def add_condition(
        self,
        target: EventTarget,
        path: "EventPath | str | Sequence[int]",
        spec: "InstructionSpec | Mapping[str, Any]",
        position: int | None = None,
    ) -> int:
        return self._add_instruction(target, path, spec, position, is_condition=True)

    def add_action(
        self,
        target: EventTarget,
        path: "EventPath | str | Sequence[int]",
        spec: "InstructionSpec | Mapping[str, Any]",
        position: int | None = None,
    ) -> int:
        return self._add_instruction(target, path, spec, position, is_condition=False)

    def _add_instruction(
        self,
        target: EventTarget,
        path: "EventPath | str | Sequence[int]",
        spec: "InstructionSpec | Mapping[str, Any]",
        position: int | None,
        *,
        is_condition: bool,
    ) -> int:
        event = self._events_for(target).resolve(_as_path(path))
        index = event.add_instruction(
            _instruction_spec(spec), is_condition=is_condition, position=position
        )
        self.mark_dirty()
        return index

    def __repr__(self) -> str:
        state = "disposed" if self.is_disposed else ("dirty" if self.dirty else "clean")
        return f"ProjectSession({self.session_id!r}, {str(self.path)!r}, {state})"


def _property_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


__all__ = [
    "EventTarget",
    "InstanceBatchResult",
    "ObjectDeletion",
    "ObjectSummary",
    "ProjectInfo",
    "ProjectSession",
    "SaveResult",
    "SceneDeletion",
    "SceneSummary",
    "VariableScope",
]
