import json
import random

import pytest

from workout_app.catalog import REST
from workout_app.generate import generate_routine
from workout_app.transfer import RoutineFormatError, dumps, export_routine, import_routine


def test_export_lists_every_entry(catalog):
    routine = [catalog.find("Squats"), REST, catalog.find("Bear Taps")]
    doc = export_routine(routine, 30, 15)
    assert doc["version"] == 1
    assert [e["name"] for e in doc["exercises"]] == ["Squats", "Rest", "Bear Taps"]
    assert doc["exercises"][0] == {
        "name": "Squats",
        "time_based": True,
        "exercise_duration": 30,
        "rest_duration": 15,
        "sets": 1,
    }


def test_export_then_import_keeps_order_and_length(catalog):
    routine = generate_routine(catalog, ["Legs", "Core"], "Medium", 4, 25, 10, 2, rng=random.Random(11))
    imported = import_routine(dumps(routine, 25, 10), catalog)
    assert [ex.name for ex in imported.routine] == [ex.name for ex in routine]
    assert imported.exercise_duration == 25
    assert imported.rest_duration == 10
    assert [ex.video_path for ex in imported.routine] == [ex.video_path for ex in routine]


def test_unknown_names_become_placeholders(catalog):
    doc = {"exercises": [{"name": "Cartwheels", "time_based": True, "exercise_duration": 20,
                          "rest_duration": 10, "sets": 1}]}
    imported = import_routine(doc, catalog)
    assert imported.routine[0].name == "Cartwheels"
    assert imported.routine[0].video_path is None


def test_rest_resolves_to_sentinel(catalog):
    doc = {"exercises": [{"name": "Squats"}, {"name": "Rest"}, {"name": "Squats"}]}
    imported = import_routine(doc, catalog)
    assert imported.routine[1] is REST


def test_last_time_based_entry_wins_and_is_clamped(catalog):
    doc = {"exercises": [
        {"name": "Squats", "time_based": True, "exercise_duration": 30, "rest_duration": 5},
        {"name": "Bear Taps", "time_based": True, "exercise_duration": 2, "rest_duration": 9000},
        {"name": "Frog Hops", "time_based": False, "exercise_duration": 45, "rest_duration": 20},
    ]}
    imported = import_routine(doc, catalog)
    assert imported.exercise_duration == 5
    assert imported.rest_duration == 600


def test_sets_repeat_entries(catalog):
    imported = import_routine({"exercises": [{"name": "Squats", "sets": 3}]}, catalog)
    assert [ex.name for ex in imported.routine] == ["Squats"] * 3


@pytest.mark.parametrize("doc", [
    "not json at all",
    b"",
    json.dumps([1, 2, 3]),
    {"exercises": "Squats"},
    {"exercises": [42]},
    {"exercises": [{"name": ""}]},
    {"exercises": [{"name": "Squats", "sets": "many"}]},
    '{"exercises": [{"name": "Squats", "exercise_duration": 1e400}]}',
    '{"exercises": [{"name": "Squats", "sets": 1e400}]}',
    {"exercises": [{"name": "Squats", "rest_duration": float("nan")}]},
    {"exercises": [{"name": "Squats", "sets": 50}] * 301},
])
def test_malformed_documents_raise(catalog, doc):
    with pytest.raises(RoutineFormatError):
        import_routine(doc, catalog)


def test_sets_are_clamped(catalog):
    imported = import_routine({"exercises": [{"name": "Squats", "sets": 10 ** 7}, {"name": "Rest", "sets": 0}]}, catalog)
    assert len(imported.routine) == 51
    assert imported.routine[-1] is REST
