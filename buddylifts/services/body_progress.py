"""
Muscle-group progress for the body visualisation.

Exercise names are mapped to muscle groups by keyword (first key in table
order contained in the lower-cased name wins). A muscle's progress is the
share of its exercises the user has completed in the session.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence, Tuple

from .metrics import percentage

MUSCLE_GROUPS: Tuple[str, ...] = (
    "chest",
    "back",
    "shoulders",
    "biceps",
    "triceps",
    "abs",
    "quads",
    "hamstrings",
    "calves",
)

# Reihenfolge ist Teil der Semantik: "press" greift z. B. vor "shoulder press"
EXERCISE_MUSCLE_MAP: Dict[str, List[str]] = {
    # Chest
    "bench": ["chest"],
    "press": ["chest", "triceps"],
    "dumbbell press": ["chest", "triceps"],
    "dumbbell fly": ["chest"],
    "incline press": ["chest", "shoulders"],
    "decline press": ["chest"],
    "push up": ["chest", "triceps", "shoulders"],
    "pushup": ["chest", "triceps", "shoulders"],
    "pec deck": ["chest"],
    "crossover": ["chest"],
    # Back
    "pull up": ["back", "biceps"],
    "pullup": ["back", "biceps"],
    "lat pulldown": ["back", "biceps"],
    "row": ["back", "biceps"],
    "seated row": ["back", "biceps"],
    "bent over row": ["back", "biceps"],
    "deadlift": ["back", "hamstrings", "quads"],
    "t bar row": ["back", "biceps"],
    "chinup": ["back", "biceps"],
    # Shoulders
    "shoulder press": ["shoulders", "triceps"],
    "military press": ["shoulders", "triceps"],
    "lateral raise": ["shoulders"],
    "front raise": ["shoulders"],
    "reverse fly": ["shoulders"],
    "upright row": ["shoulders"],
    "arnold press": ["shoulders"],
    # Biceps
    "curl": ["biceps"],
    "bicep curl": ["biceps"],
    "hammer curl": ["biceps", "forearms"],
    "preacher curl": ["biceps"],
    "concentration curl": ["biceps"],
    "barbell curl": ["biceps"],
    # Triceps
    "tricep extension": ["triceps"],
    "tricep pushdown": ["triceps"],
    "skullcrusher": ["triceps"],
    "overhead extension": ["triceps"],
    "dip": ["triceps", "chest"],
    "close grip bench": ["triceps", "chest"],
    # Abs
    "crunch": ["abs"],
    "sit up": ["abs"],
    "plank": ["abs"],
    "leg raise": ["abs"],
    "russian twist": ["abs"],
    "ab roller": ["abs"],
    "hanging leg raise": ["abs"],
    "cable": ["abs"],
    # Legs
    "squat": ["quads", "hamstrings", "glutes"],
    "leg press": ["quads", "hamstrings"],
    "leg extension": ["quads"],
    "leg curl": ["hamstrings"],
    "lunge": ["quads", "hamstrings", "glutes"],
    "calf raise": ["calves"],
    "hack squat": ["quads"],
    "bulgarian split squat": ["quads", "hamstrings", "glutes"],
}

DEFAULT_MUSCLES: List[str] = ["chest"]


def detect_muscle_groups(exercise_name: str) -> List[str]:
    name = exercise_name.lower()
    for key, muscles in EXERCISE_MUSCLE_MAP.items():
        if key in name:
            return muscles
    return DEFAULT_MUSCLES


def calculate_progress_percentage(completed_exercise_ids: Iterable[str], exercises: Sequence) -> int:
    """Anteil abgeschlossener Übungen (0-100)."""
    done = set(completed_exercise_ids) & {ex.id for ex in exercises}
    return percentage(len(done), len(exercises))


def calculate_muscle_progress(completed_exercise_ids: Iterable[str], exercises: Sequence, muscle: str) -> int:
    targeting = [ex for ex in exercises if muscle in detect_muscle_groups(ex.name)]
    if not targeting:
        return 0
    done = set(completed_exercise_ids)
    completed = [ex for ex in targeting if ex.id in done]
    return percentage(len(completed), len(targeting))


def progress_color(progress: int) -> str:
    if progress == 100:
        return "#22c55e"  # green
    if progress >= 75:
        return "#84cc16"  # lime
    if progress >= 50:
        return "#eab308"  # yellow
    if progress >= 25:
        return "#f97316"  # orange
    return "#ef4444"  # red


def scale_factor(progress: int) -> float:
    """1.0 = dünn (0 %), 1.3 = muskulös (100 %)."""
    return round(1 + progress * 0.003, 4)


def fill_opacity(progress: int) -> float:
    return round(0.3 + progress * 0.007, 4)


def body_progress(completed_exercise_ids: Iterable[str], exercises: Sequence) -> Dict[str, Any]:
    """Gesamt- und Muskelgruppen-Fortschritt inkl. Darstellungswerten."""
    completed = set(completed_exercise_ids)
    muscles: Dict[str, Dict[str, Any]] = {}
    for muscle in MUSCLE_GROUPS:
        p = calculate_muscle_progress(completed, exercises, muscle)
        muscles[muscle] = {
            "progress": p,
            "color": progress_color(p),
            "scale": scale_factor(p),
            "opacity": fill_opacity(p),
        }
    return {
        "overall": calculate_progress_percentage(completed, exercises),
        "completed_exercises": len(completed & {ex.id for ex in exercises}),
        "total_exercises": len(exercises),
        "muscles": muscles,
    }
