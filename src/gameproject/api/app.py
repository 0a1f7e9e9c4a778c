"""FastAPI application exposing project session endpoints."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncIterator, Dict, Iterator, List, Literal

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field, field_validator

from ..errors import ProjectError
from ..events import format_event_path
from ..logging_config import setup_logging
from ..manager import ProjectManager
from ..session import EventTarget, ProjectSession, VariableScope
from ..variables import VariableType
from .settings import SessionApiSettings

logger = logging.getLogger(__name__)

ScopeKind = Literal["global", "scene", "object", "instance"]
VariableKind = Literal["number", "string", "boolean", "structure", "array"]

_STATUS_BY_KIND = {
    "NotFound": 404,
    "ObjectNotFound": 404,
    "SessionNotFound": 404,
    "DuplicateName": 409,
    "SessionConflict": 409,
    "IndexOutOfRange": 400,
    "UnsupportedOperation": 400,
    "ProjectFormat": 400,
    "IOFailure": 500,
}


def _http_error(exc: ProjectError) -> HTTPException:
    return HTTPException(status_code=_STATUS_BY_KIND.get(exc.kind, 500), detail=exc.to_payload())


@contextmanager
def _translate_errors() -> Iterator[None]:
    """Turn document errors raised inside the block into HTTP errors."""

    try:
        yield
    except ProjectError as exc:
        raise _http_error(exc) from exc
    except (TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=400,
            detail={"error": "InvalidRequest", "message": str(exc), "context": {}},
        ) from exc


# Request models ------------------------------------------------------------


class SessionOpenRequest(BaseModel):
    """Request payload for opening an existing project file."""

    path: str = Field(..., description="Project file to open.")
    session_id: str | None = Field(
        None, description="Optional identifier; a random one is generated when omitted."
    )

    @field_validator("path")
    @classmethod
    def _validate_path(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Project path must be a non-empty string.")
        return trimmed


class SessionCreateRequest(SessionOpenRequest):
    """Request payload for starting a new, unsaved project."""

    name: str = Field(..., min_length=1, description="Name of the new project.")


class SessionSaveRequest(BaseModel):
    path: str | None = Field(None, description="Save to this path instead of the session path.")
    create_backup: bool | None = Field(
        None,
        description=(
            "Copy the existing file before overwriting it. Defaults to the "
            "GAMEPROJECT_BACKUP_ON_SAVE setting."
        ),
    )


class ProjectSettingsRequest(BaseModel):
    name: str | None = None
    version: str | None = None
    description: str | None = None
    author: str | None = None
    package_name: str | None = None
    window_width: int | None = Field(None, ge=1)
    window_height: int | None = Field(None, ge=1)
    max_fps: int | None = Field(None, ge=1)
    min_fps: int | None = Field(None, ge=1)
    first_scene: str | None = None


class ColorModel(BaseModel):
    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)


class SceneCreateRequest(BaseModel):
    name: str = Field(..., description="Name of the new scene.")
    position: int | None = Field(None, description="Insert position; appends when omitted.")
    background_color: ColorModel | None = None
    set_as_first: bool = False


class RenameRequest(BaseModel):
    new_name: str = Field(..., description="Replacement name.")


class ObjectRenameRequest(RenameRequest):
    scene_name: str | None = Field(None, description="Scene owning the object; global when omitted.")


class MoveRequest(BaseModel):
    position: int = Field(..., ge=0)


class SceneDuplicateRequest(BaseModel):
    new_name: str


class ObjectCreateRequest(BaseModel):
    name: str
    type: str = Field(..., description="Object type identifier, e.g. 'Sprite'.")
    scene_name: str | None = None


class ObjectGroupCreateRequest(BaseModel):
    name: str
    members: List[str] = Field(default_factory=list)
    scene_name: str | None = None


class VariableScopeFields(BaseModel):
    scope: ScopeKind = "global"
    scene_name: str | None = None
    object_name: str | None = None
    instance_index: int | None = None

    def to_scope(self) -> VariableScope:
        return VariableScope(
            self.scope,
            scene_name=self.scene_name,
            object_name=self.object_name,
            instance_index=self.instance_index,
        )


class VariableCreateRequest(VariableScopeFields):
    name: str
    value: bool | float | str | None = None
    type: VariableKind | None = Field(
        None, description="Create an empty variable of this type instead of using 'value'."
    )


class VariableValueRequest(VariableScopeFields):
    value: bool | float | str


class InstanceCreateRequest(BaseModel):
    object_name: str
    x: float = 0.0
    y: float = 0.0
    z: float | None = None
    angle: float = 0.0
    z_order: int = 0
    layer: str = ""
    width: float | None = None
    height: float | None = None
    locked: bool = False
    flipped_x: bool = False
    flipped_y: bool = False


class InstanceBatchRequest(BaseModel):
    instances: List[InstanceCreateRequest] = Field(..., min_length=1)


class LayerCreateRequest(BaseModel):
    name: str
    position: int | None = None
    visible: bool = True
    lighting: bool = False
    ambient_color: ColorModel | None = None


class LayerUpdateRequest(BaseModel):
    name: str = Field(..., description="Layer to update; the base layer is ''.")
    visible: bool | None = None
    locked: bool | None = None
    lighting: bool | None = None
    ambient_color: ColorModel | None = None


class LayerMoveRequest(BaseModel):
    name: str
    position: int = Field(..., ge=0)


class BehaviorAddRequest(BaseModel):
    type: str = Field(..., description="Behavior type, e.g. 'PlatformBehavior::PlatformerObjectBehavior'.")
    name: str
    scene_name: str | None = None


class BehaviorConfigureRequest(BaseModel):
    properties: Dict[str, str | float | bool]
    scene_name: str | None = None


class EventTargetFields(BaseModel):
    scene_name: str | None = None
    external_events_name: str | None = None

    def to_target(self) -> EventTarget:
        return EventTarget(
            scene_name=self.scene_name, external_events_name=self.external_events_name
        )


class InstructionModel(BaseModel):
    type: str = Field(..., min_length=1, description="Instruction type identifier.")
    parameters: List[str] = Field(default_factory=list)
    inverted: bool = False


class EventCreateRequest(EventTargetFields):
    type: str = Field("standard", description="Event type identifier or alias.")
    position: int | None = None
    parent: str | None = Field(None, description="Dotted path of the parent event.")
    conditions: List[InstructionModel] = Field(default_factory=list)
    actions: List[InstructionModel] = Field(default_factory=list)


class EventUpdateRequest(EventTargetFields):
    disabled: bool | None = None
    folded: bool | None = None


class InstructionAddRequest(EventTargetFields):
    instruction: InstructionModel
    position: int | None = None


class ExternalEventsCreateRequest(BaseModel):
    name: str
    associated_scene: str = ""


class ResourceAddRequest(BaseModel):
    name: str
    kind: str = Field(..., description="Resource kind, e.g. 'image' or 'audio'.")
    file: str
    metadata: str = ""


class ExtensionAddRequest(BaseModel):
    name: str = Field(..., min_length=1)


# Application -----------------------------------------------------------------


def _color(model: ColorModel | None) -> Dict[str, int] | None:
    return model.model_dump() if model is not None else None


def create_app(
    manager: ProjectManager | None = None,
    *,
    settings: SessionApiSettings | None = None,
) -> FastAPI:
    """Create a FastAPI app exposing the project session endpoints."""

    resolved_settings = settings or SessionApiSettings.from_env()
    sessions = manager or ProjectManager()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        setup_logging(resolved_settings.log_level, resolved_settings.log_file)
        yield
        if resolved_settings.save_on_shutdown:
            result = sessions.close_all_sessions(save=True)
        else:
            result = sessions.shutdown()
        if result.failed:
            logger.warning("Sessions left open at shutdown: %s", sorted(result.failed))

    def _session(session_id: str) -> ProjectSession:
        with _translate_errors():
            return sessions.get_session(session_id)

    tags_metadata = [
        {"name": "Sessions", "description": "Open, create, save and close project sessions."},
        {"name": "Scenes", "description": "Create, reorder and rename the scenes of a project."},
        {"name": "Objects", "description": "Global and scene objects, groups and behaviors."},
        {"name": "Variables", "description": "Global, scene, object and instance variables."},
        {"name": "Instances", "description": "Objects placed in scenes."},
        {"name": "Layers", "description": "Scene layers."},
        {"name": "Events", "description": "Scene and external event trees."},
        {"name": "Resources", "description": "Project resources and used extensions."},
    ]

    app = FastAPI(
        title="Game Project Session API",
        version="0.1.0",
        description=(
            "HTTP API for editing game project documents through sessions. "
            "Every change stays in memory until the session is saved."
        ),
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )

    # Sessions ----------------------------------------------------------------

    @app.post("/api/sessions/open", status_code=201, tags=["Sessions"])
    def open_session(payload: SessionOpenRequest) -> Dict[str, Any]:
        with _translate_errors():
            path = resolved_settings.resolve_project_path(payload.path)
            session = sessions.open_project(path, payload.session_id)
            return {
                "success": True,
                "session_id": session.session_id,
                "path": str(session.path),
                "project_name": session.project.name,
            }

    @app.post("/api/sessions", status_code=201, tags=["Sessions"])
    def create_session(payload: SessionCreateRequest) -> Dict[str, Any]:
        with _translate_errors():
            path = resolved_settings.resolve_project_path(payload.path)
            session = sessions.create_project(path, payload.name, payload.session_id)
            return {
                "success": True,
                "session_id": session.session_id,
                "path": str(session.path),
                "project_name": session.project.name,
            }

    @app.get("/api/sessions", tags=["Sessions"])
    def list_sessions() -> Dict[str, Any]:
        summaries = sessions.list_sessions()
        return {
            "count": len(summaries),
            "sessions": [summary.to_payload() for summary in summaries],
        }

    @app.get("/api/sessions/{session_id}", tags=["Sessions"])
    def get_session_info(session_id: str) -> Dict[str, Any]:
        with _translate_errors():
            return _session(session_id).get_info().to_payload()

    @app.patch("/api/sessions/{session_id}/settings", tags=["Sessions"])
    def update_settings(session_id: str, payload: ProjectSettingsRequest) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            applied = session.update_settings(**payload.model_dump(exclude_none=True))
            return {"success": True, "updated": applied}

    @app.post("/api/sessions/{session_id}/save", tags=["Sessions"])
    def save_session(session_id: str, payload: SessionSaveRequest | None = None) -> Dict[str, Any]:
        request = payload or SessionSaveRequest()
        session = _session(session_id)
        backup = (
            request.create_backup
            if request.create_backup is not None
            else resolved_settings.backup_on_save
        )
        with _translate_errors():
            path = (
                resolved_settings.resolve_project_path(request.path)
                if request.path is not None
                else None
            )
            result = session.save(path, backup=backup)
            return {"success": True, **result.to_payload()}

    @app.post("/api/sessions/{session_id}/backup", tags=["Sessions"])
    def backup_session(session_id: str) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            return {"success": True, "backup_path": str(session.create_backup())}

    @app.delete("/api/sessions/{session_id}", tags=["Sessions"])
    def close_session(
        session_id: str,
        save: bool = Query(False, description="Save unsaved changes before closing."),
    ) -> Dict[str, Any]:
        with _translate_errors():
            closed = sessions.close_session(session_id, save=save)
        if not closed:
            raise HTTPException(
                status_code=404,
                detail={
                    "error": "SessionNotFound",
                    "message": f"Session '{session_id}' not found.",
                    "context": {"session_id": session_id},
                },
            )
        return {"success": True, "session_id": session_id}

    # Scenes ------------------------------------------------------------------

    @app.get("/api/sessions/{session_id}/scenes", tags=["Scenes"])
    def list_scenes(
        session_id: str, include_details: bool = Query(False)
    ) -> Dict[str, Any]:
        summaries = _session(session_id).list_scenes(include_details=include_details)
        return {
            "count": len(summaries),
            "scenes": [summary.to_payload() for summary in summaries],
        }

    @app.post("/api/sessions/{session_id}/scenes", status_code=201, tags=["Scenes"])
    def create_scene(session_id: str, payload: SceneCreateRequest) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            scene = session.create_scene(
                payload.name,
                payload.position,
                background_color=_color(payload.background_color),
                set_as_first=payload.set_as_first,
            )
            return {
                "success": True,
                "name": scene.name,
                "position": session.scene_position(scene.name),
            }

    @app.delete("/api/sessions/{session_id}/scenes/{scene_name}", tags=["Scenes"])
    def delete_scene(session_id: str, scene_name: str) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            deletion = session.delete_scene(scene_name)
            return {
                "success": True,
                "name": deletion.name,
                "cleared_first_scene": deletion.cleared_first_scene,
            }

    @app.post("/api/sessions/{session_id}/scenes/{scene_name}/rename", tags=["Scenes"])
    def rename_scene(session_id: str, scene_name: str, payload: RenameRequest) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            session.rename_scene(scene_name, payload.new_name)
            return {"success": True, "old_name": scene_name, "new_name": payload.new_name}

    @app.post("/api/sessions/{session_id}/scenes/{scene_name}/move", tags=["Scenes"])
    def move_scene(session_id: str, scene_name: str, payload: MoveRequest) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            previous = session.move_scene(scene_name, payload.position)
            return {
                "success": True,
                "name": scene_name,
                "old_position": previous,
                "new_position": payload.position,
            }

    @app.post(
        "/api/sessions/{session_id}/scenes/{scene_name}/duplicate",
        status_code=201,
        tags=["Scenes"],
    )
    def duplicate_scene(
        session_id: str, scene_name: str, payload: SceneDuplicateRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            copy = session.duplicate_scene(scene_name, payload.new_name)
            return {
                "success": True,
                "name": copy.name,
                "position": session.scene_position(copy.name),
            }

    # Objects -----------------------------------------------------------------

    @app.get("/api/sessions/{session_id}/objects", tags=["Objects"])
    def list_objects(
        session_id: str,
        scene_name: str | None = Query(None, description="List scene objects instead of global ones."),
        type_filter: str | None = Query(None),
        include_details: bool = Query(False),
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            summaries = session.list_objects(scene_name, type_filter, include_details)
            return {
                "count": len(summaries),
                "objects": [summary.to_payload() for summary in summaries],
            }

    @app.post("/api/sessions/{session_id}/objects", status_code=201, tags=["Objects"])
    def create_object(session_id: str, payload: ObjectCreateRequest) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            game_object = session.create_object(payload.name, payload.type, payload.scene_name)
            return {
                "success": True,
                "name": game_object.name,
                "type": game_object.type,
                "scene_name": payload.scene_name,
            }

    @app.delete("/api/sessions/{session_id}/objects/{object_name}", tags=["Objects"])
    def delete_object(
        session_id: str,
        object_name: str,
        scene_name: str | None = Query(None),
        remove_instances: bool = Query(True, description="Also delete the object's instances."),
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            deletion = session.delete_object(
                object_name, scene_name, remove_instances=remove_instances
            )
            return {
                "success": True,
                "name": deletion.name,
                "instances_removed": deletion.instances_removed,
                "group_memberships_removed": deletion.group_memberships_removed,
            }

    @app.post("/api/sessions/{session_id}/objects/{object_name}/rename", tags=["Objects"])
    def rename_object(
        session_id: str, object_name: str, payload: ObjectRenameRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            renamed = session.rename_object(object_name, payload.new_name, payload.scene_name)
            return {
                "success": True,
                "old_name": object_name,
                "new_name": payload.new_name,
                "instances_updated": renamed,
            }

    @app.get("/api/sessions/{session_id}/object-groups", tags=["Objects"])
    def list_object_groups(
        session_id: str, scene_name: str | None = Query(None)
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            groups = session.list_object_groups(scene_name)
            return {"count": len(groups), "groups": groups}

    @app.post("/api/sessions/{session_id}/object-groups", status_code=201, tags=["Objects"])
    def create_object_group(
        session_id: str, payload: ObjectGroupCreateRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            members = session.create_object_group(
                payload.name, payload.members, payload.scene_name
            )
            return {"success": True, "name": payload.name, "objects": members}

    @app.delete("/api/sessions/{session_id}/object-groups/{group_name}", tags=["Objects"])
    def delete_object_group(
        session_id: str, group_name: str, scene_name: str | None = Query(None)
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            session.delete_object_group(group_name, scene_name)
            return {"success": True, "name": group_name}

    # Behaviors ---------------------------------------------------------------

    @app.get("/api/sessions/{session_id}/objects/{object_name}/behaviors", tags=["Objects"])
    def list_behaviors(
        session_id: str, object_name: str, scene_name: str | None = Query(None)
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            behaviors = session.list_behaviors(object_name, scene_name)
            return {"count": len(behaviors), "behaviors": behaviors}

    @app.post(
        "/api/sessions/{session_id}/objects/{object_name}/behaviors",
        status_code=201,
        tags=["Objects"],
    )
    def add_behavior(
        session_id: str, object_name: str, payload: BehaviorAddRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            properties = session.add_behavior(
                object_name, payload.type, payload.name, payload.scene_name
            )
            return {
                "success": True,
                "object_name": object_name,
                "name": payload.name,
                "type": payload.type,
                "properties": properties,
            }

    @app.delete(
        "/api/sessions/{session_id}/objects/{object_name}/behaviors/{behavior_name}",
        tags=["Objects"],
    )
    def remove_behavior(
        session_id: str,
        object_name: str,
        behavior_name: str,
        scene_name: str | None = Query(None),
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            session.remove_behavior(object_name, behavior_name, scene_name)
            return {"success": True, "object_name": object_name, "name": behavior_name}

    @app.patch(
        "/api/sessions/{session_id}/objects/{object_name}/behaviors/{behavior_name}",
        tags=["Objects"],
    )
    def configure_behavior(
        session_id: str,
        object_name: str,
        behavior_name: str,
        payload: BehaviorConfigureRequest,
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            applied = session.configure_behavior(
                object_name, behavior_name, payload.properties, payload.scene_name
            )
            return {"success": True, "name": behavior_name, "updated": applied}

    # Variables ---------------------------------------------------------------

    @app.get("/api/sessions/{session_id}/variables", tags=["Variables"])
    def list_variables(
        session_id: str,
        scope: ScopeKind = Query("global"),
        scene_name: str | None = Query(None),
        object_name: str | None = Query(None),
        instance_index: int | None = Query(None),
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            fields = VariableScopeFields(
                scope=scope,
                scene_name=scene_name,
                object_name=object_name,
                instance_index=instance_index,
            )
            summaries = session.list_variables(fields.to_scope())
            return {
                "count": len(summaries),
                "variables": [summary.to_payload() for summary in summaries],
            }

    @app.post("/api/sessions/{session_id}/variables", status_code=201, tags=["Variables"])
    def create_variable(session_id: str, payload: VariableCreateRequest) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            variable = session.create_variable(
                payload.to_scope(),
                payload.name,
                payload.value,
                variable_type=VariableType(payload.type) if payload.type else None,
            )
            return {"success": True, **variable.to_payload(payload.name)}

    @app.put("/api/sessions/{session_id}/variables/{variable_name}", tags=["Variables"])
    def set_variable_value(
        session_id: str, variable_name: str, payload: VariableValueRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            variable = session.set_variable_value(
                payload.to_scope(), variable_name, payload.value
            )
            return {"success": True, **variable.to_payload(variable_name)}

    @app.delete("/api/sessions/{session_id}/variables/{variable_name}", tags=["Variables"])
    def delete_variable(
        session_id: str,
        variable_name: str,
        scope: ScopeKind = Query("global"),
        scene_name: str | None = Query(None),
        object_name: str | None = Query(None),
        instance_index: int | None = Query(None),
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            fields = VariableScopeFields(
                scope=scope,
                scene_name=scene_name,
                object_name=object_name,
                instance_index=instance_index,
            )
            session.delete_variable(fields.to_scope(), variable_name)
            return {"success": True, "name": variable_name}

    # Instances ---------------------------------------------------------------

    @app.get("/api/sessions/{session_id}/scenes/{scene_name}/instances", tags=["Instances"])
    def list_instances(
        session_id: str,
        scene_name: str,
        object_name: str | None = Query(None),
        layer: str | None = Query(None),
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            instances = session.list_instances(scene_name, object_name, layer)
            return {"count": len(instances), "instances": instances}

    @app.post(
        "/api/sessions/{session_id}/scenes/{scene_name}/instances",
        status_code=201,
        tags=["Instances"],
    )
    def create_instance(
        session_id: str, scene_name: str, payload: InstanceCreateRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        placement = payload.model_dump()
        object_name = placement.pop("object_name")
        with _translate_errors():
            index = session.create_instance(scene_name, object_name, **placement)
            return {"success": True, "object_name": object_name, "instance_index": index}

    @app.post(
        "/api/sessions/{session_id}/scenes/{scene_name}/instances/batch",
        tags=["Instances"],
    )
    def create_instances(
        session_id: str, scene_name: str, payload: InstanceBatchRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            results = session.create_instances(
                scene_name, [item.model_dump() for item in payload.instances]
            )
        created = sum(1 for result in results if result.success)
        return {
            "success": created > 0,
            "created": created,
            "failed": len(results) - created,
            "results": [result.to_payload() for result in results],
        }

    @app.delete("/api/sessions/{session_id}/scenes/{scene_name}/instances", tags=["Instances"])
    def delete_instances(
        session_id: str,
        scene_name: str,
        object_name: str | None = Query(None),
        layer: str | None = Query(None),
    ) -> Dict[str, Any]:
        if (object_name is None) == (layer is None):
            raise HTTPException(
                status_code=400,
                detail={
                    "error": "InvalidRequest",
                    "message": "Provide exactly one of 'object_name' or 'layer'.",
                    "context": {},
                },
            )
        session = _session(session_id)
        with _translate_errors():
            if object_name is not None:
                removed = session.delete_instances_of_object(scene_name, object_name)
            else:
                removed = session.delete_instances_on_layer(scene_name, layer)
            return {"success": True, "removed": removed}

    # Layers ------------------------------------------------------------------

    @app.get("/api/sessions/{session_id}/scenes/{scene_name}/layers", tags=["Layers"])
    def list_layers(session_id: str, scene_name: str) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            layers = session.list_layers(scene_name)
            return {"count": len(layers), "layers": layers}

    @app.post(
        "/api/sessions/{session_id}/scenes/{scene_name}/layers",
        status_code=201,
        tags=["Layers"],
    )
    def create_layer(
        session_id: str, scene_name: str, payload: LayerCreateRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            layer = session.create_layer(
                scene_name,
                payload.name,
                payload.position,
                visible=payload.visible,
                lighting=payload.lighting,
                ambient_color=_color(payload.ambient_color),
            )
            return {"success": True, "name": layer.name}

    @app.patch("/api/sessions/{session_id}/scenes/{scene_name}/layers", tags=["Layers"])
    def update_layer(
        session_id: str, scene_name: str, payload: LayerUpdateRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            changed = session.update_layer(
                scene_name,
                payload.name,
                visible=payload.visible,
                locked=payload.locked,
                lighting=payload.lighting,
                ambient_color=_color(payload.ambient_color),
            )
            return {"success": True, "name": payload.name, "updated": changed}

    @app.post("/api/sessions/{session_id}/scenes/{scene_name}/layers/move", tags=["Layers"])
    def move_layer(
        session_id: str, scene_name: str, payload: LayerMoveRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            previous = session.move_layer(scene_name, payload.name, payload.position)
            return {
                "success": True,
                "name": payload.name,
                "old_position": previous,
                "new_position": payload.position,
            }

    @app.delete(
        "/api/sessions/{session_id}/scenes/{scene_name}/layers/{layer_name}",
        tags=["Layers"],
    )
    def delete_layer(
        session_id: str,
        scene_name: str,
        layer_name: str,
        move_instances_to: str | None = Query(
            None, description="Layer receiving the deleted layer's instances."
        ),
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            moved = session.delete_layer(scene_name, layer_name, move_instances_to)
            return {"success": True, "name": layer_name, "instances_moved": moved}

    # Events ------------------------------------------------------------------

    @app.get("/api/sessions/{session_id}/events", tags=["Events"])
    def list_events(
        session_id: str,
        scene_name: str | None = Query(None),
        external_events_name: str | None = Query(None),
        depth: int = Query(1, ge=0, description="How many levels of sub-events to descend."),
        include_disabled: bool = Query(True),
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            target = EventTargetFields(
                scene_name=scene_name, external_events_name=external_events_name
            ).to_target()
            summaries = session.list_events(target, depth, include_disabled)
            return {
                "count": len(summaries),
                "events": [summary.to_payload() for summary in summaries],
            }

    @app.post("/api/sessions/{session_id}/events", status_code=201, tags=["Events"])
    def create_event(session_id: str, payload: EventCreateRequest) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            path = session.insert_event(
                payload.to_target(),
                payload.type,
                payload.position,
                parent=payload.parent or (),
                conditions=[item.model_dump() for item in payload.conditions],
                actions=[item.model_dump() for item in payload.actions],
            )
            return {"success": True, "index": format_event_path(path)}

    @app.delete("/api/sessions/{session_id}/events/{event_path}", tags=["Events"])
    def delete_event(
        session_id: str,
        event_path: str,
        scene_name: str | None = Query(None),
        external_events_name: str | None = Query(None),
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            target = EventTargetFields(
                scene_name=scene_name, external_events_name=external_events_name
            ).to_target()
            session.delete_event(target, event_path)
            return {"success": True, "index": event_path}

    @app.patch("/api/sessions/{session_id}/events/{event_path}", tags=["Events"])
    def update_event(
        session_id: str, event_path: str, payload: EventUpdateRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            changed = session.update_event(
                payload.to_target(),
                event_path,
                disabled=payload.disabled,
                folded=payload.folded,
            )
            return {"success": True, "index": event_path, "changed": changed}

    @app.post(
        "/api/sessions/{session_id}/events/{event_path}/conditions",
        status_code=201,
        tags=["Events"],
    )
    def add_condition(
        session_id: str, event_path: str, payload: InstructionAddRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            index = session.add_condition(
                payload.to_target(),
                event_path,
                payload.instruction.model_dump(),
                payload.position,
            )
            return {"success": True, "event": event_path, "condition_index": index}

    @app.post(
        "/api/sessions/{session_id}/events/{event_path}/actions",
        status_code=201,
        tags=["Events"],
    )
    def add_action(
        session_id: str, event_path: str, payload: InstructionAddRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            index = session.add_action(
                payload.to_target(),
                event_path,
                payload.instruction.model_dump(),
                payload.position,
            )
            return {"success": True, "event": event_path, "action_index": index}

    @app.get("/api/sessions/{session_id}/external-events", tags=["Events"])
    def list_external_events(session_id: str) -> Dict[str, Any]:
        sheets = _session(session_id).list_external_events()
        return {"count": len(sheets), "external_events": sheets}

    @app.post("/api/sessions/{session_id}/external-events", status_code=201, tags=["Events"])
    def create_external_events(
        session_id: str, payload: ExternalEventsCreateRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            sheet = session.create_external_events(payload.name, payload.associated_scene)
            return {"success": True, "name": sheet.name}

    @app.delete("/api/sessions/{session_id}/external-events/{name}", tags=["Events"])
    def delete_external_events(session_id: str, name: str) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            session.delete_external_events(name)
            return {"success": True, "name": name}

    @app.post("/api/sessions/{session_id}/external-events/{name}/rename", tags=["Events"])
    def rename_external_events(
        session_id: str, name: str, payload: RenameRequest
    ) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            session.rename_external_events(name, payload.new_name)
            return {"success": True, "old_name": name, "new_name": payload.new_name}

    # Resources and extensions ------------------------------------------------

    @app.get("/api/sessions/{session_id}/resources", tags=["Resources"])
    def list_resources(session_id: str, kind: str | None = Query(None)) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            resources = session.list_resources(kind)
            return {"count": len(resources), "resources": resources}

    @app.post("/api/sessions/{session_id}/resources", status_code=201, tags=["Resources"])
    def add_resource(session_id: str, payload: ResourceAddRequest) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            resource = session.add_resource(
                payload.name, payload.kind, payload.file, payload.metadata
            )
            return {"success": True, **resource.to_payload()}

    @app.delete("/api/sessions/{session_id}/resources/{name}", tags=["Resources"])
    def remove_resource(session_id: str, name: str) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            session.remove_resource(name)
            return {"success": True, "name": name}

    @app.post("/api/sessions/{session_id}/resources/{name}/rename", tags=["Resources"])
    def rename_resource(session_id: str, name: str, payload: RenameRequest) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            session.rename_resource(name, payload.new_name)
            return {"success": True, "old_name": name, "new_name": payload.new_name}

    @app.get("/api/sessions/{session_id}/extensions", tags=["Resources"])
    def list_extensions(
        session_id: str, include_builtin: bool = Query(False)
    ) -> Dict[str, Any]:
        extensions = _session(session_id).list_extensions(include_builtin)
        return {"count": len(extensions), "extensions": extensions}

    @app.post("/api/sessions/{session_id}/extensions", tags=["Resources"])
    def add_extension(session_id: str, payload: ExtensionAddRequest) -> Dict[str, Any]:
        added = _session(session_id).add_extension(payload.name)
        return {"success": True, "name": payload.name, "added": added}

    @app.delete("/api/sessions/{session_id}/extensions/{name}", tags=["Resources"])
    def remove_extension(session_id: str, name: str) -> Dict[str, Any]:
        session = _session(session_id)
        with _translate_errors():
            session.remove_extension(name)
            return {"success": True, "name": name}

    return app


__all__ = ["create_app"]
