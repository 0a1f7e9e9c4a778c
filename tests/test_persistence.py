import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from gameproject import (
    EventTarget,
    Project,
    ProjectFormatError,
    ProjectIOError,
    ProjectManager,
    ProjectSession,
    ProjectStore,
    VariableScope,
)
from gameproject.persistence import backup_path_for


def test_save_writes_json_document(saved_project: Path) -> None:
    payload = json.loads(saved_project.read_text(encoding="utf-8"))

    assert payload["formatVersion"] == 1
    assert payload["properties"]["name"] == "Test Game"
    assert payload["properties"]["firstLayout"] == "Menu"
    assert [layout["name"] for layout in payload["layouts"]] == ["Menu", "Level1"]
    assert payload["objects"][0]["behaviors"][0]["type"] == (
        "PlatformBehavior::PlatformerObjectBehavior"
    )


def test_saving_clears_dirty_flag(populated_session: ProjectSession) -> None:
    result = populated_session.save()

    assert populated_session.dirty is False
    assert result.path == populated_session.path
    assert result.backup_path is None


def test_loaded_project_saves_identically(
    manager: ProjectManager, populated_session: ProjectSession, tmp_path: Path
) -> None:
    scope = VariableScope.for_scene("Level1")
    populated_session.create_variable(scope, "lives", 3)
    populated_session.create_layer("Level1", "HUD", lighting=True)
    populated_session.insert_event(
        EventTarget.for_scene("Level1"),
        "standard",
        conditions=[{"type": "KeyPressed", "parameters": ["", "Space"]}],
    )
    populated_session.add_resource("hero", "image", "hero.png")
    populated_session.save()

    reopened = manager.open_project(populated_session.path, "copy")
    reopened.save(tmp_path / "copy.json")

    original = json.loads(populated_session.path.read_text(encoding="utf-8"))
    copy = json.loads((tmp_path / "copy.json").read_text(encoding="utf-8"))
    assert copy == original


def test_repeated_save_leaves_document_unchanged(populated_session: ProjectSession) -> None:
    populated_session.save()
    assert populated_session.dirty is False
    first = json.loads(populated_session.path.read_text(encoding="utf-8"))

    populated_session.save()
    assert populated_session.dirty is False
    second = json.loads(populated_session.path.read_text(encoding="utf-8"))

    assert second == first


def test_inactive_instance_size_is_kept(tmp_path: Path) -> None:
    instance = {
        "name": "Player",
        "layer": "",
        "customSize": False,
        "width": 32,
        "height": 48,
    }
    path = tmp_path / "sized.json"
    path.write_text(
        json.dumps({"layouts": [{"name": "A", "instances": [instance]}]}), encoding="utf-8"
    )

    store = ProjectStore()
    store.save(store.load(path), tmp_path / "copy.json")

    copy = json.loads((tmp_path / "copy.json").read_text(encoding="utf-8"))
    saved = copy["layouts"][0]["instances"][0]
    assert saved["customSize"] is False
    assert (saved["width"], saved["height"]) == (32, 48)


def test_save_as_adopts_new_path(populated_session: ProjectSession, tmp_path: Path) -> None:
    target = tmp_path / "nested" / "dir" / "other.json"
    populated_session.save(target)

    assert target.is_file()
    assert populated_session.path == target.resolve()


def test_save_leaves_no_temporary_file(saved_project: Path) -> None:
    leftovers = [path.name for path in saved_project.parent.iterdir() if path.suffix == ".tmp"]
    assert leftovers == []


def test_failed_save_raises_io_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")

    with pytest.raises(ProjectIOError) as excinfo:
        ProjectStore().save(Project("Game"), blocker / "game.json")
    assert excinfo.value.kind == "IOFailure"


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ProjectIOError) as excinfo:
        ProjectStore().load(tmp_path / "missing.json")
    assert excinfo.value.to_payload()["context"]["path"] == str(tmp_path / "missing.json")


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[]",
        json.dumps({"formatVersion": 2}),
        json.dumps({"layouts": [{"name": "A"}, {"name": "A"}]}),
        json.dumps({"layouts": [{"name": "A", "instances": "nope"}]}),
    ],
)
def test_load_rejects_malformed_documents(tmp_path: Path, content: str) -> None:
    path = tmp_path / "bad.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ProjectFormatError):
        ProjectStore().load(path)


def test_load_tolerates_missing_sections(tmp_path: Path) -> None:
    path = tmp_path / "minimal.json"
    path.write_text(json.dumps({"properties": {"name": "Tiny"}}), encoding="utf-8")

    project = ProjectStore().load(path)

    assert project.name == "Tiny"
    assert len(project.scenes) == 0
    assert project.properties.window_width == 800


def test_load_adds_missing_base_layer(tmp_path: Path) -> None:
    path = tmp_path / "layers.json"
    path.write_text(
        json.dumps({"layouts": [{"name": "A", "layers": [{"name": "HUD"}]}]}),
        encoding="utf-8",
    )

    scene = ProjectStore().load(path).get_scene("A")
    assert scene.layers.names() == ["", "HUD"]


def test_backup_path_naming() -> None:
    moment = datetime(2024, 3, 5, 7, 8, 9, 123456, tzinfo=timezone.utc)
    path = backup_path_for(Path("/games/demo.json"), moment)

    assert path == Path("/games/demo.backup-20240305T070809123456Z.json")


def test_backup_copies_existing_file(saved_project: Path) -> None:
    backup = ProjectStore().backup(saved_project)

    assert backup.parent == saved_project.parent
    assert backup.name.startswith("game.backup-")
    assert backup.suffix == ".json"
    assert backup.read_bytes() == saved_project.read_bytes()


def test_backup_without_source_fails(tmp_path: Path) -> None:
    with pytest.raises(ProjectIOError):
        ProjectStore().backup(tmp_path / "missing.json")


def test_save_with_backup_keeps_previous_content(
    populated_session: ProjectSession, saved_project: Path
) -> None:
    previous = saved_project.read_bytes()
    populated_session.create_scene("Level2")

    result = populated_session.save(backup=True)

    assert result.backup_path is not None
    assert result.backup_path.read_bytes() == previous
    assert saved_project.read_bytes() != previous


def test_save_with_backup_skips_missing_destination(populated_session: ProjectSession) -> None:
    result = populated_session.save(backup=True)

    assert result.backup_path is None
    assert populated_session.path.is_file()


def test_failed_backup_is_logged_and_save_continues(
    populated_session: ProjectSession,
    saved_project: Path,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    def failing_backup(self: ProjectStore, path: Path) -> Path:
        raise ProjectIOError("disk full", path=path)

    monkeypatch.setattr(ProjectStore, "backup", failing_backup)
    populated_session.create_scene("Level2")

    with caplog.at_level(logging.WARNING, logger="gameproject"):
        result = populated_session.save(backup=True)

    assert result.backup_path is None
    assert populated_session.dirty is False
    assert "disk full" in caplog.text
    assert "Level2" in saved_project.read_text(encoding="utf-8")


def test_create_backup_uses_session_path(populated_session: ProjectSession, saved_project: Path) -> None:
    backup = populated_session.create_backup()
    assert backup.is_file()
    assert backup != saved_project


def test_serialize_does_not_touch_disk(populated_session: ProjectSession) -> None:
    payload = populated_session.serialize()

    assert payload["layouts"][1]["instances"][0]["name"] == "Player"
    assert not populated_session.path.exists()
