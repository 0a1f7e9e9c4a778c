"""Registry of open project sessions."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List

from .errors import ProjectError, SessionConflictError, SessionNotFoundError
from .persistence import ProjectStore
from .session import ProjectSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSummary:
    """Snapshot of a registered session."""

    session_id: str
    path: Path
    project_name: str
    dirty: bool
    created_at: datetime
    last_modified_at: datetime

    def to_payload(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "path": str(self.path),
            "project_name": self.project_name,
            "dirty": self.dirty,
            "created_at": self.created_at.isoformat(),
            "last_modified_at": self.last_modified_at.isoformat(),
        }


@dataclass
class CloseAllResult:
    closed: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {"closed": list(self.closed), "failed": dict(self.failed)}


class ProjectManager:
    """Own every open :class:`ProjectSession`, keyed by session id.

    Create one manager per host process and call :meth:`shutdown` when the
    host stops.
    """

    def __init__(
        self,
        store: ProjectStore | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.store = store or ProjectStore()
        self._clock = clock
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._sessions: Dict[str, ProjectSession] = {}

    def _claim_id(self, session_id: str | None) -> str:
        if session_id is None:
            session_id = self._id_factory()
        if not isinstance(session_id, str) or not session_id.strip():
            raise ValueError("session_id must be a non-empty string")
        if session_id in self._sessions:
            raise SessionConflictError(session_id)
        return session_id

    def open_project(self, path: Path | str, session_id: str | None = None) -> ProjectSession:
        """Load the project at ``path`` into a new session.

        Raises:
            SessionConflictError: If ``session_id`` is already registered.
            ProjectIOError: If the file cannot be read.
            ProjectFormatError: If the file is not a valid project.
        """

        session_id = self._claim_id(session_id)
        resolved = Path(path).expanduser().resolve()
        project = self.store.load(resolved)
        session = ProjectSession(
            session_id, project, resolved, store=self.store, clock=self._clock
        )
        self._sessions[session_id] = session
        logger.info("Opened project %s as session %s", resolved, session_id)
        return session

    def create_project(
        self, path: Path | str, name: str, session_id: str | None = None
    ) -> ProjectSession:
        """Start a session on a new, empty project. Nothing is written yet."""

        session_id = self._claim_id(session_id)
        project = self.store.create(name)
        session = ProjectSession(
            session_id, project, path, store=self.store, clock=self._clock
        )
        session.mark_dirty()
        self._sessions[session_id] = session
        logger.info("Created project %s as session %s", name, session_id)
        return session

    def get_session(self, session_id: str) -> ProjectSession:
        try:
            return self._sessions[session_id]
        except KeyError as exc:
            raise SessionNotFoundError(session_id) from exc

    def has_session(self, session_id: str) -> bool:
        return session_id in self._sessions

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def find_sessions_by_path(self, path: Path | str) -> List[ProjectSession]:
        resolved = Path(path).expanduser().resolve()
        return [session for session in self._sessions.values() if session.path == resolved]

    def close_session(self, session_id: str, save: bool = False) -> bool:
        """Close a session, saving it first when ``save`` is set and it is dirty.

        Returns:
            ``False`` when no such session is registered.

        Raises:
            ProjectIOError: If the requested save fails. The session then
                stays registered.
        """

        session = self._sessions.get(session_id)
        if session is None:
            return False
        if save and session.dirty:
            session.save()
        session.dispose()
        del self._sessions[session_id]
        logger.info("Closed session %s", session_id)
        return True

    def list_sessions(self) -> List[SessionSummary]:
        return [
            SessionSummary(
                session_id=session.session_id,
                path=session.path,
                project_name=session.project.name,
                dirty=session.dirty,
                created_at=session.created_at,
                last_modified_at=session.last_modified_at,
            )
            for session in self._sessions.values()
        ]

    def close_all_sessions(self, save: bool = False) -> CloseAllResult:
        """Close every session; a failing save is recorded instead of raised."""

        result = CloseAllResult()
        for session_id in list(self._sessions):
            try:
                self.close_session(session_id, save=save)
            except ProjectError as exc:
                logger.warning("Failed to close session %s: %s", session_id, exc.message)
                result.failed[session_id] = exc.message
            else:
                result.closed.append(session_id)
        return result

    def shutdown(self) -> CloseAllResult:
        """Close every session without saving."""

        return self.close_all_sessions(save=False)


__all__ = ["CloseAllResult", "ProjectManager", "SessionSummary"]
