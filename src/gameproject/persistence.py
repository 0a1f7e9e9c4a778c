"""Reading, writing and backing up project files on disk."""

from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict

from .errors import ProjectFormatError, ProjectIOError
from .project import Project

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S%fZ"


def backup_path_for(path: Path, moment: datetime) -> Path:
    """Return the sibling backup location for ``path`` taken at ``moment``."""

    stamp = moment.astimezone(timezone.utc).strftime(BACKUP_TIMESTAMP_FORMAT)
    return path.with_name(f"{path.stem}.backup-{stamp}{path.suffix}")


class ProjectStore:
    """Load and persist :class:`Project` documents as JSON files.

    The store holds no per-project state, so one instance can serve every
    session of a manager.
    """

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def create(self, name: str) -> Project:
        return Project(name)

    def load(self, path: Path) -> Project:
        """Read the project stored at ``path``.

        Raises:
            ProjectIOError: If the file is missing or cannot be read.
            ProjectFormatError: If the content is not a valid project tree.
        """

        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ProjectIOError(f"Project file '{path}' does not exist.", path=path) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ProjectIOError(f"Failed to read project file '{path}': {exc}", path=path) from exc

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ProjectFormatError(
                f"Project file '{path}' is not valid JSON: {exc.msg} (line {exc.lineno}).",
                path=path,
            ) from exc

        try:
            project = Project.from_payload(payload)
        except ValueError as exc:
            raise ProjectFormatError(f"Invalid project file '{path}': {exc}", path=path) from exc
        logger.debug("Loaded project %s from %s", project.name, path)
        return project

    def save(self, project: Project, path: Path) -> Path:
        """Write ``project`` to ``path`` through a temporary sibling file.

        The existing file is only replaced once the new content has been
        written completely.

        Raises:
            ProjectIOError: If the directory or file cannot be written.
        """

        destination = Path(path)
        payload = self.serialize(project)
        temporary = (
            destination.with_suffix(destination.suffix + ".tmp")
            if destination.suffix
            else destination.with_suffix(".tmp")
        )

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with temporary.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2)
            temporary.replace(destination)
        except OSError as exc:
            if temporary.exists():
                temporary.unlink()
            raise ProjectIOError(
                f"Failed to write project file '{destination}': {exc}", path=destination
            ) from exc

        logger.debug("Wrote project %s to %s", project.name, destination)
        return destination

    def backup(self, path: Path) -> Path:
        """Copy the file at ``path`` to a timestamped sibling and return it.

        Raises:
            ProjectIOError: If there is no file to back up or the copy fails.
        """

        source = Path(path)
        if not source.is_file():
            raise ProjectIOError(f"Cannot back up '{source}': file does not exist.", path=source)
        destination = backup_path_for(source, self._clock())
        try:
            shutil.copy2(source, destination)
        except OSError as exc:
            raise ProjectIOError(
                f"Failed to back up '{source}' to '{destination}': {exc}", path=source
            ) from exc
        logger.info("Backed up %s to %s", source, destination)
        return destination

    @staticmethod
    def serialize(project: Project) -> Dict[str, Any]:
        return project.to_payload()


__all__ = ["BACKUP_TIMESTAMP_FORMAT", "ProjectStore", "backup_path_for"]
