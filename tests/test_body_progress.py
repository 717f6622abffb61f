from types import SimpleNamespace

import pytest

from buddylifts.services.body_progress import (
    body_progress,
    calculate_muscle_progress,
    calculate_progress_percentage,
    detect_muscle_groups,
    fill_opacity,
    progress_color,
    scale_factor,
)

EXERCISES = [
    SimpleNamespace(id="e1", name="Bench Press"),
    SimpleNamespace(id="e2", name="Squat"),
    SimpleNamespace(id="e3", name="Burpee"),
]


@pytest.mark.parametrize(
    "name, muscles",
    [
        ("Bench Press", ["chest"]),
        ("Squat", ["quads", "hamstrings", "glutes"]),
        ("Shoulder Press", ["chest", "triceps"]),  # "press" steht vor "shoulder press"
        ("Hammer Curl", ["biceps"]),
        ("Pull Ups", ["back", "biceps"]),
        ("Burpee", ["chest"]),
    ],
)
def test_detect_muscle_groups(name, muscles):
    assert detect_muscle_groups(name) == muscles


def test_progress_percentages():
    assert calculate_progress_percentage(["e1", "e2"], EXERCISES) == 67
    assert calculate_progress_percentage(["e1", "other"], EXERCISES) == 33
    assert calculate_progress_percentage([], []) == 0
    assert calculate_muscle_progress(["e1"], EXERCISES, "chest") == 50
    assert calculate_muscle_progress(["e2"], EXERCISES, "quads") == 100
    assert calculate_muscle_progress(["e1"], EXERCISES, "back") == 0


@pytest.mark.parametrize(
    "p, color",
    [(100, "#22c55e"), (75, "#84cc16"), (50, "#eab308"), (25, "#f97316"), (24, "#ef4444"), (0, "#ef4444")],
)
def test_progress_color(p, color):
    assert progress_color(p) == color


def test_scale_and_opacity():
    assert scale_factor(0) == 1.0
    assert scale_factor(50) == 1.15
    assert scale_factor(100) == 1.3
    assert fill_opacity(0) == 0.3
    assert fill_opacity(100) == 1.0


def test_body_progress():
    result = body_progress(["e1", "e2"], EXERCISES)
    assert result["overall"] == 67
    assert result["completed_exercises"] == 2
    assert result["total_exercises"] == 3
    assert result["muscles"]["chest"] == {"progress": 50, "color": "#eab308", "scale": 1.15, "opacity": 0.65}
    assert result["muscles"]["quads"]["progress"] == 100
    assert result["muscles"]["back"]["progress"] == 0
