"""Test configuration for the game project package."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from gameproject import ProjectManager, ProjectSession, ProjectStore


class FakeClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def manager(clock: FakeClock) -> ProjectManager:
    return ProjectManager(ProjectStore(clock=clock), clock=clock)


@pytest.fixture()
def session(manager: ProjectManager, tmp_path: Path) -> ProjectSession:
    """A fresh, unsaved project with no scenes."""

    return manager.create_project(tmp_path / "game.json", "Test Game", "test")


@pytest.fixture()
def populated_session(session: ProjectSession) -> ProjectSession:
    """A project with two scenes, a few objects, instances and events."""

    session.create_scene("Menu", set_as_first=True)
    session.create_scene("Level1")
    session.create_object("Player", "Sprite")
    session.create_object("Enemy", "Sprite", "Level1")
    session.create_object("Title", "TextObject", "Menu")
    session.create_instance("Level1", "Player", x=10, y=20)
    session.create_instance("Level1", "Enemy", x=50, y=20)
    session.create_instance("Level1", "Enemy", x=80, y=20)
    session.create_instance("Menu", "Player")
    session.add_behavior("Player", "PlatformBehavior::PlatformerObjectBehavior", "Platformer")
    return session


@pytest.fixture()
def saved_project(populated_session: ProjectSession) -> Path:
    """Path of a project file written from ``populated_session``."""

    populated_session.save()
    return populated_session.path


@pytest.fixture()
def make_session(manager: ProjectManager, tmp_path: Path) -> Callable[[str], ProjectSession]:
    def _factory(session_id: str) -> ProjectSession:
        return manager.create_project(tmp_path / f"{session_id}.json", session_id, session_id)

    return _factory


__all__ = ["FakeClock"]
