"""
Parses free-text workout descriptions into structured exercises.

Supported formats:
  - "10x4 pushup"              -> 4 sets of 10 reps (larger number = reps)
  - "5x12 bench press at 135lbs, 90s rest"
  - "10,10,8,6 pull ups"       -> 4 sets, reps averaged, list kept as completed_reps
  - "5 sets of 10 pushups"

Several exercises can be combined with commas or "and"; the word "between"
puts a default rest after every exercise that is followed by another one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .metrics import round_half_up

DEFAULT_REST_SECONDS = 60

_NAME = r"([a-zA-Z\s]+?)"
_WEIGHT = r"(?:\s+(?:at|with|@)\s+(\d+(?:\.\d+)?)\s*(?:lbs?|kg?))?"
_SEGMENT_END = r"(?:\s*,\s*|\s*$)"

STANDARD = re.compile(
    r"(\d+)[xX*](\d+)\s+" + _NAME + _WEIGHT + r"\s*(?:,\s*(\d+)s?\s*rest)?$", re.IGNORECASE
)
SETS_LIST = re.compile(r"^(\d+(?:,\s*\d+)+)\s+" + _NAME + _WEIGHT + r"$", re.IGNORECASE)
WORDS = re.compile(r"^(\d+)\s+sets?\s+of\s+(\d+)\s+" + _NAME + _WEIGHT + r"$", re.IGNORECASE)

# Segment-Erkennung im Fließtext; Reihenfolge ist wichtig (Satzliste vor NxM)
_SEGMENTS = (
    re.compile(r"\d+(?:,\s*\d+)+\s+" + _NAME + _WEIGHT + _SEGMENT_END, re.IGNORECASE),
    re.compile(r"\d+[xX*]\d+\s+" + _NAME + _WEIGHT + _SEGMENT_END, re.IGNORECASE),
    re.compile(r"\d+\s+sets?\s+of\s+\d+\s+" + _NAME + _WEIGHT + _SEGMENT_END, re.IGNORECASE),
)

_AND = re.compile(r"\s+and\s+", re.IGNORECASE)
_BETWEEN = re.compile(r"\bbetween\b", re.IGNORECASE)
_TRAILING_COMMA = re.compile(r",\s*$")


@dataclass
class ParsedExercise:
    name: str
    target_sets: int
    target_reps: int
    weight: Optional[float] = None
    rest_seconds: Optional[int] = None
    completed_reps: List[int] = field(default_factory=list)


def normalize_exercise_name(name: str) -> str:
    """'  bench   PRESS ' -> 'Bench Press'"""
    return " ".join(word[:1].upper() + word[1:].lower() for word in name.split())


def _weight(raw: Optional[str]) -> Optional[float]:
    return float(raw) if raw else None


def _counted(exercise: ParsedExercise) -> Optional[ParsedExercise]:
    # 0 Sätze oder 0 Wiederholungen sind keine Übung
    if exercise.target_sets < 1 or exercise.target_reps < 1:
        return None
    return exercise


def parse_exercise(text: str) -> Optional[ParsedExercise]:
    """Parse a single exercise; returns None when no format matches or a count is 0."""
    trimmed = (text or "").strip()

    m = STANDARD.search(trimmed)
    if m:
        first, second = int(m.group(1)), int(m.group(2))
        # Heuristik: Wiederholungen sind meist die größere Zahl
        reps, sets = (first, second) if first >= second else (second, first)
        return _counted(ParsedExercise(
            name=normalize_exercise_name(m.group(3)),
            target_sets=sets,
            target_reps=reps,
            weight=_weight(m.group(4)),
            rest_seconds=int(m.group(5)) if m.group(5) else None,
        ))

    m = SETS_LIST.match(trimmed)
    if m:
        reps_list = [int(part) for part in m.group(1).split(",") if part.strip().isdigit()]
        if not reps_list:
            return None
        return _counted(ParsedExercise(
            name=normalize_exercise_name(m.group(2)),
            target_sets=len(reps_list),
            target_reps=round_half_up(sum(reps_list) / len(reps_list)),
            weight=_weight(m.group(3)),
            completed_reps=reps_list,
        ))

    m = WORDS.match(trimmed)
    if m:
        return _counted(ParsedExercise(
            name=normalize_exercise_name(m.group(3)),
            target_sets=int(m.group(1)),
            target_reps=int(m.group(2)),
            weight=_weight(m.group(4)),
        ))

    return None


def _split_segments(part: str) -> List[str]:
    """
    Zerlegt einen Teil in Übungs-Segmente.
    Kommas trennen Übungen, gehören aber bei "10,10,8,6" zur Satzliste.
    Text vor einem erkannten Segment wird diesem vorangestellt.
    """
    segments: List[str] = []
    current = ""
    remaining = part.strip()

    while remaining:
        for pattern in _SEGMENTS:
            m = pattern.match(remaining)
            if m:
                segments.append(current + _TRAILING_COMMA.sub("", m.group(0)))
                current = ""
                remaining = remaining[m.end():].strip()
                break
        else:
            current += remaining[0]
            remaining = remaining[1:]

    if current.strip():
        segments.append(current.strip())
    return segments


def parse_exercise_input(text: str, rest_seconds: int = DEFAULT_REST_SECONDS) -> List[ParsedExercise]:
    """Parse free text into a list of exercises (possibly empty)."""
    exercises: List[ParsedExercise] = []
    has_between = bool(_BETWEEN.search(text or ""))

    for part in _AND.split(text or ""):
        for segment in _split_segments(part):
            clean = _BETWEEN.sub("", segment).strip()
            if len(clean) < 3:
                continue
            exercise = parse_exercise(clean)
            if exercise is None:
                continue
            if has_between and exercises:
                exercises[-1].rest_seconds = rest_seconds
            exercises.append(exercise)

    return exercises


def exercises_to_db_format(exercises: List[ParsedExercise]) -> List[Dict[str, Any]]:
    """Mappt geparste Übungen auf Exercise-Spalten, order = Position in der Eingabe."""
    return [
        {
            "name": ex.name,
            "target_sets": ex.target_sets,
            "target_reps": ex.target_reps,
            "weight": ex.weight,
            "order": index,
            "rest_seconds": ex.rest_seconds,
        }
        for index, ex in enumerate(exercises)
    ]
