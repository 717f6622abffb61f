"""
Rule-based training summaries.

Compares what each participant completed against the training's targets and
turns the numbers into short highlight and insight lines. Everything here is
pure arithmetic over the (small) lists handed in by the summary blueprint.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence

from .metrics import percentage

PERFECT = 100
STRONG_THRESHOLD = 80
WEAK_THRESHOLD = 70
EXCELLENT_THRESHOLD = 90
CLOSE_MATCH_GAP = 5


def _plural(count: int, word: str) -> str:
    return f"{word}{'s' if count > 1 else ''}"


def calculate_exercise_percentage(completed_reps: Sequence[int], target_sets: int, target_reps: int) -> int:
    """Completed reps vs. sets x reps, rounded half up and capped at 100."""
    return percentage(sum(completed_reps), target_sets * target_reps)


def exercise_performance(exercise, completed_reps: Sequence[int]) -> Dict[str, Any]:
    """Leistung eines Users für eine Übung (exercise = Exercise-Modell)."""
    reps = list(completed_reps)
    return {
        "exercise_id": exercise.id,
        "exercise_name": exercise.name,
        "target_sets": exercise.target_sets,
        "target_reps": exercise.target_reps,
        "target_total_reps": exercise.target_sets * exercise.target_reps,
        "completed_reps": reps,
        "completed_total_reps": sum(reps),
        "completion_percentage": calculate_exercise_percentage(reps, exercise.target_sets, exercise.target_reps),
    }


def participant_summary(
    user_id: str,
    user_name: str,
    exercises: Iterable,
    reps_by_exercise: Mapping[str, Sequence[int]],
) -> Dict[str, Any]:
    """
    Baut die Zusammenfassung eines Teilnehmers.
    Übungen ohne Fortschritt zählen mit 0 Wiederholungen.
    """
    performances = [exercise_performance(ex, reps_by_exercise.get(ex.id, [])) for ex in exercises]
    total_target = sum(p["target_total_reps"] for p in performances)
    total_completed = sum(p["completed_total_reps"] for p in performances)
    return {
        "user_id": user_id,
        "user_name": user_name,
        "exercises": performances,
        "total_target_reps": total_target,
        "total_completed_reps": total_completed,
        "overall_completion": percentage(total_completed, total_target),
    }


def reps_by_user(session) -> Dict[str, Dict[str, List[int]]]:
    """user_id -> exercise_id -> Wiederholungen je Satz (session = TrainingSession)."""
    reps: Dict[str, Dict[str, List[int]]] = {}
    for entry in session.progress:
        reps.setdefault(entry.user_id, {})[entry.exercise_id] = entry.reps
    return reps


def session_summaries(session) -> List[Dict[str, Any]]:
    reps = reps_by_user(session)
    exercises = session.training.exercises
    return [
        participant_summary(p.user_id, p.user.name, exercises, reps.get(p.user_id, {}))
        for p in session.participants
    ]


def generate_highlights(participant: Mapping[str, Any]) -> List[str]:
    highlights: List[str] = []
    exercises = participant["exercises"]

    perfect = [ex for ex in exercises if ex["completion_percentage"] == PERFECT]
    if perfect:
        if len(perfect) == len(exercises):
            highlights.append("Crushed it! Perfect completion on all exercises!")
        else:
            highlights.append(f"Nailed {len(perfect)} {_plural(len(perfect), 'exercise')} with 100% completion")

    if exercises:
        strongest = max(exercises, key=lambda ex: ex["completion_percentage"])
        if strongest["completion_percentage"] >= STRONG_THRESHOLD:
            highlights.append(
                f"Strongest performance: {strongest['exercise_name']} ({strongest['completion_percentage']}%)"
            )

    needs_work = [ex["exercise_name"] for ex in exercises if ex["completion_percentage"] < WEAK_THRESHOLD]
    if needs_work:
        highlights.append(f"Room for growth: {', '.join(needs_work)}")

    return highlights


def ranked(participants: Sequence[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    return sorted(participants, key=lambda p: p["overall_completion"], reverse=True)


def generate_comparisons(participants: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Ranking nach Gesamt-Erfüllung; bei Gleichstand sind alle Ersten Gewinner."""
    if not participants:
        return []

    ordered = ranked(participants)
    best = ordered[0]["overall_completion"]
    return [
        {
            "user_id": p["user_id"],
            "user_name": p["user_name"],
            "overall_completion": p["overall_completion"],
            "total_completed_reps": p["total_completed_reps"],
            "difference_from_winner": best - p["overall_completion"],
            "is_winner": p["overall_completion"] == best,
        }
        for p in ordered
    ]


def generate_session_insights(participants: Sequence[Mapping[str, Any]]) -> List[str]:
    insights: List[str] = []
    if not participants:
        return insights

    if len(participants) == 1:
        completion = participants[0]["overall_completion"]
        if completion >= EXCELLENT_THRESHOLD:
            insights.append("Excellent solo session! You're on fire!")
        elif completion >= WEAK_THRESHOLD:
            insights.append("Solid workout! Consistency is key.")
        else:
            insights.append("Good effort! Every rep counts toward progress.")
        return insights

    average = sum(p["overall_completion"] for p in participants) / len(participants)
    if average >= EXCELLENT_THRESHOLD:
        insights.append("Incredible team effort! Everyone crushed this workout!")
    elif average >= WEAK_THRESHOLD:
        insights.append("Great teamwork! Consistent performance across the board.")

    # bei Gleichstand gewinnt der zuletzt gelistete Teilnehmer
    winner = participants[0]
    for p in participants[1:]:
        if not winner["overall_completion"] > p["overall_completion"]:
            winner = p
    if winner["overall_completion"] >= EXCELLENT_THRESHOLD:
        insights.append(
            f"\U0001F3C6 {winner['user_name']} takes the win with {winner['overall_completion']}% completion!"
        )

    first, second = ranked(participants)[:2]
    gap = first["overall_completion"] - second["overall_completion"]
    if 0 <= gap <= CLOSE_MATCH_GAP:
        insights.append(
            f"What a close match! Just {gap}% between {first['user_name']} and {second['user_name']}!"
        )

    total_reps = sum(p["total_completed_reps"] for p in participants)
    insights.append(
        f"Combined effort: {total_reps} reps completed by {len(participants)} "
        f"{_plural(len(participants), 'participant')}"
    )
    return insights


def format_highlight_lines(summaries: Sequence[Mapping[str, Any]]) -> List[str]:
    """Eine Zeile pro Teilnehmer: '**Name**: Highlight. Highlight'"""
    return [f"**{s['user_name']}**: {'. '.join(generate_highlights(s))}" for s in summaries]
