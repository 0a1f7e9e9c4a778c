"""Tests for the editing operations of a project session."""

from __future__ import annotations

import logging

import pytest

from gameproject import (
    BEHAVIOR_DEFAULTS,
    Color,
    DuplicateNameError,
    EventTarget,
    EventType,
    IndexOutOfRangeError,
    NotFoundError,
    ObjectNotFoundError,
    ProjectManager,
    ProjectSession,
    UnsupportedOperationError,
    VariableScope,
    VariableType,
)
from gameproject.events import MAX_EVENT_DEPTH


def _clean(session: ProjectSession) -> ProjectSession:
    session.dirty = False
    return session


# Dirty tracking -------------------------------------------------------------


def test_created_project_starts_dirty(session: ProjectSession) -> None:
    assert session.dirty is True
    assert session.last_modified_at >= session.created_at


def test_mutation_marks_dirty_and_bumps_modification_time(session: ProjectSession) -> None:
    _clean(session)
    before = session.last_modified_at

    session.create_scene("Level1")

    assert session.dirty is True
    assert session.last_modified_at > before


def test_reads_and_failed_mutations_do_not_mark_dirty(
    populated_session: ProjectSession,
) -> None:
    session = _clean(populated_session)

    session.list_scenes(include_details=True)
    session.list_objects("Level1", include_details=True)
    session.get_info()
    session.list_events(EventTarget.for_scene("Level1"), depth=3)
    with pytest.raises(DuplicateNameError):
        session.create_scene("Menu")

    assert session.dirty is False


def test_disposed_session_refuses_access(session: ProjectSession) -> None:
    session.dispose()
    with pytest.raises(NotFoundError):
        session.create_scene("Late")


# Project settings -----------------------------------------------------------


def test_project_info_reports_defaults_and_counts(populated_session: ProjectSession) -> None:
    info = populated_session.get_info()

    assert info.name == "Test Game"
    assert info.version == "1.0.0"
    assert info.package_name == "com.example.gamename"
    assert (info.window_width, info.window_height) == (800, 600)
    assert (info.max_fps, info.min_fps) == (60, 20)
    assert info.first_scene == "Menu"
    assert info.scene_count == 2
    assert info.global_object_count == 1
    assert info.to_payload()["path"].endswith("game.json")


def test_update_settings_reports_changed_keys(populated_session: ProjectSession) -> None:
    session = _clean(populated_session)

    applied = session.update_settings(author="Me", window_width=1280, version="1.0.0")

    assert applied == ["author", "window_width"]
    assert session.dirty is True
    assert session.get_info().window_width == 1280


def test_update_settings_without_changes_stays_clean(populated_session: ProjectSession) -> None:
    session = _clean(populated_session)
    assert session.update_settings(version="1.0.0", name=None) == []
    assert session.dirty is False


def test_update_settings_validates(populated_session: ProjectSession) -> None:
    with pytest.raises(NotFoundError):
        populated_session.update_settings(first_scene="Nowhere")
    with pytest.raises(ValueError):
        populated_session.update_settings(colour="red")
    with pytest.raises(ValueError):
        populated_session.update_settings(max_fps="fast")


# Scenes ---------------------------------------------------------------------


def test_scene_names_are_unique(session: ProjectSession) -> None:
    session.create_scene("Level1")
    count_before = len(session.list_scenes())

    with pytest.raises(DuplicateNameError):
        session.create_scene("Level1")
    assert len(session.list_scenes()) == count_before


def test_create_scene_position_is_clamped(session: ProjectSession) -> None:
    session.create_scene("B")
    session.create_scene("A", 0)
    session.create_scene("Z", 50)
    session.create_scene("First", -3)

    assert [summary.name for summary in session.list_scenes()] == ["First", "A", "B", "Z"]


def test_new_scene_has_defaults(session: ProjectSession) -> None:
    scene = session.create_scene("Level1")

    assert scene.background_color == Color(209, 209, 209)
    assert scene.layers.names() == [""]

    custom = session.create_scene("Night", background_color="#102030")
    assert custom.background_color == Color(16, 32, 48)


def test_rename_first_scene_updates_reference(populated_session: ProjectSession) -> None:
    populated_session.rename_scene("Menu", "MainMenu")

    assert populated_session.get_info().first_scene == "MainMenu"
    assert populated_session.list_scenes()[0].is_first is True


def test_rename_scene_errors(populated_session: ProjectSession) -> None:
    with pytest.raises(NotFoundError):
        populated_session.rename_scene("Missing", "Other")
    with pytest.raises(DuplicateNameError):
        populated_session.rename_scene("Menu", "Level1")


def test_delete_first_scene_clears_reference(populated_session: ProjectSession) -> None:
    deletion = populated_session.delete_scene("Menu")

    assert deletion.cleared_first_scene is True
    assert populated_session.get_info().first_scene == ""

    other = populated_session.delete_scene("Level1")
    assert other.cleared_first_scene is False
    with pytest.raises(NotFoundError):
        populated_session.delete_scene("Level1")


def test_move_scene_and_lookup_by_index(populated_session: ProjectSession) -> None:
    previous = populated_session.move_scene("Level1", 0)

    assert previous == 1
    assert populated_session.get_scene_at(0).name == "Level1"
    assert populated_session.scene_position("Menu") == 1
    with pytest.raises(IndexOutOfRangeError):
        populated_session.move_scene("Level1", 2)
    with pytest.raises(IndexOutOfRangeError):
        populated_session.get_scene_at(5)
    with pytest.raises(NotFoundError):
        populated_session.move_scene("Missing", 0)


def test_duplicate_scene_is_a_deep_copy(populated_session: ProjectSession) -> None:
    populated_session.insert_event(EventTarget.for_scene("Level1"), EventType.STANDARD)
    copy = populated_session.duplicate_scene("Level1", "Level2")

    assert populated_session.scene_position("Level2") == 2
    assert copy.objects.names() == ["Enemy"]
    assert len(copy.instances) == 3
    assert len(copy.events) == 1

    populated_session.delete_instances_of_object("Level2", "Enemy")
    assert len(populated_session.get_scene("Level1").instances) == 3
    with pytest.raises(DuplicateNameError):
        populated_session.duplicate_scene("Level1", "Menu")


# Objects --------------------------------------------------------------------


def test_object_names_are_unique_per_container(populated_session: ProjectSession) -> None:
    with pytest.raises(DuplicateNameError):
        populated_session.create_object("Player", "Sprite")
    # Scene containers are separate from the global one.
    populated_session.create_object("Player", "Sprite", "Menu")


def test_rename_global_object_rewrites_instances_everywhere(
    populated_session: ProjectSession,
) -> None:
    renamed = populated_session.rename_object("Player", "Hero")

    assert renamed == 2
    for scene_name in ("Menu", "Level1"):
        names = {item["object_name"] for item in populated_session.list_instances(scene_name)}
        assert "Player" not in names
    assert len(populated_session.list_instances("Level1", object_name="Hero")) == 1


def test_rename_scene_object_only_touches_its_scene(populated_session: ProjectSession) -> None:
    populated_session.create_instance("Menu", "Player")
    populated_session.create_object("Enemy", "Sprite", "Menu")
    populated_session.create_instance("Menu", "Enemy")

    renamed = populated_session.rename_object("Enemy", "Boss", "Level1")

    assert renamed == 2
    assert len(populated_session.list_instances("Menu", object_name="Enemy")) == 1
    assert len(populated_session.list_instances("Level1", object_name="Boss")) == 2


def test_rename_global_object_skips_scenes_that_shadow_it(
    populated_session: ProjectSession,
) -> None:
    populated_session.create_object("Player", "Sprite", "Menu")

    renamed = populated_session.rename_object("Player", "Hero")

    assert renamed == 1
    assert len(populated_session.list_instances("Menu", object_name="Player")) == 1


def test_rename_object_updates_group_membership(populated_session: ProjectSession) -> None:
    populated_session.create_object_group("Actors", ["Enemy"], "Level1")
    populated_session.rename_object("Enemy", "Boss", "Level1")

    assert populated_session.list_object_groups("Level1") == [
        {"name": "Actors", "objects": ["Boss"]}
    ]


def test_rename_object_does_not_duplicate_group_members(
    populated_session: ProjectSession,
) -> None:
    populated_session.create_object_group("Actors", ["Enemy", "Boss", "Player"], "Level1")
    populated_session.rename_object("Enemy", "Boss", "Level1")

    assert populated_session.list_object_groups("Level1") == [
        {"name": "Actors", "objects": ["Boss", "Player"]}
    ]


def test_rename_object_errors(populated_session: ProjectSession) -> None:
    populated_session.create_object("Coin", "Sprite")
    with pytest.raises(DuplicateNameError):
        populated_session.rename_object("Coin", "Player")
    with pytest.raises(NotFoundError):
        populated_session.rename_object("Ghost", "Spirit")


def test_delete_object_leaves_instances_unless_asked(populated_session: ProjectSession) -> None:
    deletion = populated_session.delete_object("Enemy", "Level1")

    assert deletion.instances_removed == 0
    assert len(populated_session.list_instances("Level1", object_name="Enemy")) == 2


def test_delete_object_can_sweep_instances(populated_session: ProjectSession) -> None:
    deletion = populated_session.delete_object("Player", remove_instances=True)

    assert deletion.instances_removed == 2
    assert populated_session.list_instances("Level1", object_name="Player") == []
    assert populated_session.list_instances("Menu", object_name="Player") == []
    with pytest.raises(NotFoundError):
        populated_session.get_object("Player")


def test_list_objects_filters_by_type(populated_session: ProjectSession) -> None:
    populated_session.create_object("Score", "TextObject")

    sprites = populated_session.list_objects(type_filter="Sprite")
    assert [summary.name for summary in sprites] == ["Player"]

    detailed = populated_session.list_objects(include_details=True)[0].to_payload()
    assert detailed["behaviors"] == ["Platformer"]
    assert detailed["variable_count"] == 0


def test_object_group_names_are_unique(populated_session: ProjectSession) -> None:
    populated_session.create_object_group("All", ["Player"])
    with pytest.raises(DuplicateNameError):
        populated_session.create_object_group("All")
    populated_session.delete_object_group("All")
    assert populated_session.list_object_groups() == []


# Variables ------------------------------------------------------------------


def test_variables_in_every_scope(populated_session: ProjectSession) -> None:
    scopes = [
        VariableScope.global_scope(),
        VariableScope.for_scene("Level1"),
        VariableScope.for_object("Player"),
        VariableScope.for_object("Enemy", "Level1"),
        VariableScope.for_instance("Level1", 0),
    ]
    for scope in scopes:
        populated_session.create_variable(scope, "score", 10)
        summaries = populated_session.list_variables(scope)
        assert [summary.name for summary in summaries] == ["score"]
        assert summaries[0].value == 10.0


def test_create_variable_types(session: ProjectSession) -> None:
    scope = VariableScope.global_scope()
    session.create_variable(scope, "count")
    session.create_variable(scope, "name", "hero")
    session.create_variable(scope, "alive", True)
    session.create_variable(scope, "stats", variable_type=VariableType.STRUCTURE)

    types = {summary.name: summary.type for summary in session.list_variables(scope)}
    assert types == {
        "count": "number",
        "name": "string",
        "alive": "boolean",
        "stats": "structure",
    }
    assert session.get_variable(scope, "count").value == 0.0


def test_variable_errors(populated_session: ProjectSession) -> None:
    scope = VariableScope.for_scene("Level1")
    populated_session.create_variable(scope, "lives", 3)

    with pytest.raises(DuplicateNameError):
        populated_session.create_variable(scope, "lives")
    with pytest.raises(NotFoundError):
        populated_session.delete_variable(scope, "missing")
    with pytest.raises(NotFoundError):
        populated_session.get_variable(VariableScope.for_scene("Nowhere"), "lives")
    with pytest.raises(IndexOutOfRangeError):
        populated_session.list_variables(VariableScope.for_instance("Level1", 42))


def test_set_variable_value_and_delete(session: ProjectSession) -> None:
    scope = VariableScope.global_scope()
    session.create_variable(scope, "level", 1)

    session.set_variable_value(scope, "level", "two")
    assert session.get_variable(scope, "level").type is VariableType.STRING

    session.delete_variable(scope, "level")
    assert session.list_variables(scope) == []


def test_get_variable_returns_a_detached_copy(session: ProjectSession) -> None:
    scope = VariableScope.global_scope()
    session.create_variable(scope, "level", 1)

    session.get_variable(scope, "level").set_value(99)
    assert session.get_variable(scope, "level").value == 1.0


def test_variable_scope_validation() -> None:
    with pytest.raises(ValueError):
        VariableScope("layer")
    with pytest.raises(ValueError):
        VariableScope("instance", scene_name="Level1")
    with pytest.raises(ValueError):
        VariableScope("object")


# Instances ------------------------------------------------------------------


def test_instance_requires_a_known_object(populated_session: ProjectSession) -> None:
    count_before = len(populated_session.list_instances("Menu"))

    with pytest.raises(ObjectNotFoundError):
        populated_session.create_instance("Menu", "Enemy")
    assert len(populated_session.list_instances("Menu")) == count_before


def test_instance_placement_is_recorded(populated_session: ProjectSession) -> None:
    index = populated_session.create_instance(
        "Level1", "Enemy", x=5, y=6, z=1, angle=90, z_order=3, layer="UI", width=32, height=16
    )

    entry = populated_session.list_instances("Level1")[index]
    assert entry["x"] == 5.0
    assert entry["z"] == 1.0
    assert entry["angle"] == 90.0
    assert entry["z_order"] == 3
    assert entry["layer"] == "UI"
    assert (entry["width"], entry["height"]) == (32.0, 16.0)


def test_batch_creation_reports_each_entry(populated_session: ProjectSession) -> None:
    session = _clean(populated_session)

    results = session.create_instances(
        "Level1",
        [
            {"object_name": "Enemy", "x": 1},
            {"object_name": "Ghost"},
            {"object_name": "Player", "width": 10},
            {"object_name": "Player", "y": 2},
        ],
    )

    assert [result.success for result in results] == [True, False, False, True]
    assert results[1].error == "ObjectNotFound"
    assert results[2].error == "InvalidInstance"
    assert results[3].instance_index == 4
    assert session.dirty is True


def test_batch_without_successes_stays_clean(populated_session: ProjectSession) -> None:
    session = _clean(populated_session)
    results = session.create_instances("Level1", [{"object_name": "Ghost"}])

    assert results[0].success is False
    assert session.dirty is False


def test_delete_instances_by_object_and_layer(populated_session: ProjectSession) -> None:
    populated_session.create_instance("Level1", "Player", layer="HUD")

    assert populated_session.delete_instances_on_layer("Level1", "HUD") == 1
    assert populated_session.delete_instances_of_object("Level1", "Enemy") == 2
    assert [item["object_name"] for item in populated_session.list_instances("Level1")] == [
        "Player"
    ]


# Layers ---------------------------------------------------------------------


def test_layer_lifecycle(populated_session: ProjectSession) -> None:
    populated_session.create_layer("Level1", "Background", 0)
    populated_session.create_layer("Level1", "HUD", lighting=True)

    names = [layer["name"] for layer in populated_session.list_layers("Level1")]
    assert names == ["Background", "", "HUD"]

    with pytest.raises(DuplicateNameError):
        populated_session.create_layer("Level1", "HUD")

    previous = populated_session.move_layer("Level1", "HUD", 0)
    assert previous == 2
    assert populated_session.list_layers("Level1")[0]["name"] == "HUD"


def test_delete_layer_moves_instances(populated_session: ProjectSession) -> None:
    populated_session.create_layer("Level1", "HUD")
    populated_session.create_instance("Level1", "Player", layer="HUD")
    populated_session.create_instance("Level1", "Enemy", layer="HUD")

    moved = populated_session.delete_layer("Level1", "HUD", move_instances_to="")

    assert moved == 2
    assert populated_session.list_instances("Level1", layer="HUD") == []
    assert len(populated_session.list_instances("Level1", layer="")) == 5


def test_delete_layer_errors(populated_session: ProjectSession) -> None:
    populated_session.create_layer("Level1", "HUD")

    with pytest.raises(UnsupportedOperationError):
        populated_session.delete_layer("Level1", "")
    with pytest.raises(NotFoundError):
        populated_session.delete_layer("Level1", "Missing")
    with pytest.raises(NotFoundError):
        populated_session.delete_layer("Level1", "HUD", move_instances_to="Nowhere")


def test_update_layer_returns_changed_fields(populated_session: ProjectSession) -> None:
    session = _clean(populated_session)

    changed = session.update_layer("Level1", "", visible=False, locked=False)
    assert changed == ["visible"]
    assert session.list_layers("Level1")[0]["visible"] is False

    _clean(session)
    assert session.update_layer("Level1", "", visible=False) == []
    assert session.dirty is False


# Behaviors ------------------------------------------------------------------


def test_add_behavior_seeds_default_properties(populated_session: ProjectSession) -> None:
    behaviors = populated_session.list_behaviors("Player")

    assert behaviors[0]["name"] == "Platformer"
    assert behaviors[0]["properties"] == dict(
        BEHAVIOR_DEFAULTS["PlatformBehavior::PlatformerObjectBehavior"]
    )

    properties = populated_session.add_behavior("Player", "Custom::Thing", "Thing")
    assert properties == {}


def test_behavior_names_are_unique_per_object(populated_session: ProjectSession) -> None:
    with pytest.raises(DuplicateNameError):
        populated_session.add_behavior("Player", "DraggableBehavior::Draggable", "Platformer")
    with pytest.raises(NotFoundError):
        populated_session.remove_behavior("Player", "Missing")


def test_configure_behavior_reports_recognised_keys_only(
    populated_session: ProjectSession,
) -> None:
    applied = populated_session.configure_behavior(
        "Player",
        "Platformer",
        {"gravity": 1500, "flying": True, "canGrabPlatforms": True, "jumpSpeed": "800"},
    )

    assert applied == ["gravity", "canGrabPlatforms", "jumpSpeed"]
    properties = populated_session.list_behaviors("Player")[0]["properties"]
    assert properties["gravity"] == "1500"
    assert properties["canGrabPlatforms"] == "true"
    assert "flying" not in properties


def test_configure_unknown_keys_only_stays_clean(populated_session: ProjectSession) -> None:
    session = _clean(populated_session)
    assert session.configure_behavior("Player", "Platformer", {"flying": "yes"}) == []
    assert session.dirty is False


# Resources, extensions and external events ----------------------------------


def test_resources(session: ProjectSession) -> None:
    session.add_resource("hero.png", "image", "assets/hero.png")
    session.add_resource("theme", "audio", "assets/theme.ogg")

    with pytest.raises(DuplicateNameError):
        session.add_resource("theme", "audio", "other.ogg")
    with pytest.raises(ValueError):
        session.add_resource("clip", "hologram", "clip.bin")

    session.rename_resource("hero.png", "player.png")
    assert [entry["name"] for entry in session.list_resources()] == ["player.png", "theme"]
    assert [entry["name"] for entry in session.list_resources("audio")] == ["theme"]

    session.remove_resource("theme")
    with pytest.raises(NotFoundError):
        session.remove_resource("theme")


def test_extensions(session: ProjectSession) -> None:
    assert session.add_extension("BuiltinObject") is True
    assert session.add_extension("Physics2") is True

    _clean(session)
    assert session.add_extension("Physics2") is False
    assert session.dirty is False

    assert [entry["name"] for entry in session.list_extensions()] == ["Physics2"]
    assert len(session.list_extensions(include_builtin=True)) == 2

    session.remove_extension("Physics2")
    with pytest.raises(NotFoundError):
        session.remove_extension("Physics2")


def test_external_events(populated_session: ProjectSession) -> None:
    populated_session.create_external_events("Shared", "Level1")
    with pytest.raises(DuplicateNameError):
        populated_session.create_external_events("Shared")

    target = EventTarget.for_external_events("Shared")
    populated_session.insert_event(target, "standard")
    populated_session.rename_scene("Level1", "Stage1")

    sheets = populated_session.list_external_events()
    assert sheets == [{"name": "Shared", "associated_scene": "Stage1", "event_count": 1}]

    populated_session.rename_external_events("Shared", "Common")
    populated_session.delete_external_events("Common")
    assert populated_session.list_external_events() == []


# Events ---------------------------------------------------------------------


def test_insert_standard_event_with_instructions(populated_session: ProjectSession) -> None:
    target = EventTarget.for_scene("Level1")
    path = populated_session.insert_event(
        target,
        EventType.STANDARD,
        conditions=[
            {"type": "SourisSurObjet", "parameters": ["Player"], "inverted": True},
            {"type": "KeyPressed", "parameters": ["", "Space"]},
        ],
        actions=[{"type": "Delete", "parameters": ["Enemy"]}],
    )

    assert path == (0,)
    event = populated_session.get_scene("Level1").events.resolve(path)
    assert [condition.type for condition in event.conditions] == ["SourisSurObjet", "KeyPressed"]
    assert event.conditions.get(0).inverted is True
    assert event.actions.get(0).parameters == ["Enemy"]


def test_insert_event_ignores_instructions_for_other_variants(
    populated_session: ProjectSession, caplog: pytest.LogCaptureFixture
) -> None:
    target = EventTarget.for_scene("Level1")
    with caplog.at_level(logging.WARNING, logger="gameproject"):
        path = populated_session.insert_event(
            target, "group", actions=[{"type": "Delete", "parameters": ["Enemy"]}]
        )

    assert "Ignoring conditions/actions" in caplog.text
    assert populated_session.list_events(target)[path[0]].to_payload()["summary"] == "[Group]"


def test_insert_into_parent_and_depth_listing(populated_session: ProjectSession) -> None:
    target = EventTarget.for_scene("Level1")
    populated_session.insert_event(target, "standard")
    group = populated_session.insert_event(target, "group")
    for _ in range(3):
        populated_session.insert_event(target, "standard", parent=group)
    nested = populated_session.insert_event(target, "standard", parent="1.0")

    assert nested == (1, 0, 0)
    shallow = [summary.index for summary in populated_session.list_events(target, depth=0)]
    assert shallow == ["0", "1"]
    one_level = [summary.index for summary in populated_session.list_events(target, depth=1)]
    assert one_level == ["0", "1", "1.0", "1.1", "1.2"]
    everything = populated_session.list_events(target, depth=10)
    assert len(everything) == 6


def test_insert_under_comment_is_unsupported(populated_session: ProjectSession) -> None:
    target = EventTarget.for_scene("Level1")
    populated_session.insert_event(target, "comment")

    with pytest.raises(UnsupportedOperationError):
        populated_session.insert_event(target, "standard", parent=(0,))


def test_deepest_insertable_event_survives_save_and_reopen(
    manager: ProjectManager, populated_session: ProjectSession
) -> None:
    target = EventTarget.for_scene("Level1")
    parent: tuple = ()
    for _ in range(MAX_EVENT_DEPTH):
        parent = populated_session.insert_event(target, "standard", parent=parent)

    with pytest.raises(UnsupportedOperationError) as excinfo:
        populated_session.insert_event(target, "standard", parent=parent)
    assert excinfo.value.context["path"] == ".".join(str(index) for index in parent)

    populated_session.save()
    reopened = manager.open_project(populated_session.path, "reopened")
    listing = reopened.list_events(target, depth=MAX_EVENT_DEPTH)
    assert len(listing) == MAX_EVENT_DEPTH


def test_delete_group_removes_nested_events(populated_session: ProjectSession) -> None:
    target = EventTarget.for_scene("Level1")
    populated_session.insert_event(target, "group")
    for _ in range(3):
        populated_session.insert_event(target, "standard", parent=(0,))
    populated_session.insert_event(target, "comment")

    populated_session.delete_event(target, (0,))

    listing = populated_session.list_events(target, depth=5)
    assert [summary.type for summary in listing] == [EventType.COMMENT.value]
    with pytest.raises(IndexOutOfRangeError):
        populated_session.delete_event(target, "0.0")


def test_update_event_only_marks_dirty_on_change(populated_session: ProjectSession) -> None:
    target = EventTarget.for_scene("Level1")
    populated_session.insert_event(target, "standard")
    session = _clean(populated_session)

    assert session.update_event(target, 0, disabled=False, folded=False) is False
    assert session.dirty is False

    assert session.update_event(target, 0, disabled=True) is True
    assert session.dirty is True
    assert session.list_events(target)[0].disabled is True


def test_add_condition_and_action(populated_session: ProjectSession) -> None:
    target = EventTarget.for_scene("Level1")
    populated_session.insert_event(target, "standard")
    populated_session.insert_event(target, "comment")

    assert populated_session.add_condition(target, 0, {"type": "Timer", "parameters": ["1"]}) == 0
    assert populated_session.add_action(target, 0, {"type": "Create"}) == 0
    assert (
        populated_session.add_action(target, 0, {"type": "Wait", "parameters": []}, position=0)
        == 0
    )

    with pytest.raises(UnsupportedOperationError):
        populated_session.add_condition(target, 1, {"type": "Timer"})
    with pytest.raises(IndexOutOfRangeError):
        populated_session.add_action(target, 7, {"type": "Create"})
    with pytest.raises(IndexOutOfRangeError):
        populated_session.add_action(target, 0, {"type": "Create"}, position=9)


def test_event_target_requires_exactly_one_sheet() -> None:
    with pytest.raises(ValueError):
        EventTarget()
    with pytest.raises(ValueError):
        EventTarget(scene_name="A", external_events_name="B")


def test_events_on_unknown_scene(populated_session: ProjectSession) -> None:
    with pytest.raises(NotFoundError):
        populated_session.list_events(EventTarget.for_scene("Missing"))
