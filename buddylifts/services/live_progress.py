from __future__ import annotations

from typing import Any, Dict, List, Optional

from .metrics import percentage


def progress_bucket(pct: int) -> str:
    """Farbstufe für Fortschrittsbalken."""
    if pct == 100:
        return "green"
    if pct >= 75:
        return "lime"
    if pct >= 50:
        return "yellow"
    if pct >= 25:
        return "orange"
    return "red"


def participant_progress(session, current_user_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Fortschritt aller Teilnehmer einer Session, absteigend sortiert.
    Zählt Übungen mit completed_at; Gleichstand behält die Beitrittsreihenfolge.
    """
    exercise_ids = {ex.id for ex in session.training.exercises}
    total = len(exercise_ids)

    done: Dict[str, set] = {}
    for entry in session.progress:
        if entry.completed_at and entry.exercise_id in exercise_ids:
            done.setdefault(entry.user_id, set()).add(entry.exercise_id)

    rows = []
    for participant in session.participants:
        completed = len(done.get(participant.user_id, ()))
        pct = percentage(completed, total)
        rows.append(
            {
                "user_id": participant.user_id,
                "user_name": participant.user.name,
                "user_email": participant.user.email,
                "role": participant.role,
                "completed_count": completed,
                "total_exercises": total,
                "percentage": pct,
                "color": progress_bucket(pct),
                "is_current_user": participant.user_id == current_user_id,
            }
        )

    rows.sort(key=lambda r: r["percentage"], reverse=True)
    for rank, row in enumerate(rows, start=1):
        row["rank"] = rank
    return rows


def snapshot(session, current_user_id: Optional[str] = None) -> Dict[str, Any]:
    """Kompletter Live-Zustand einer Session (für JSON-Endpoint und SSE-Stream)."""
    return {
        "session": session.to_dict(),
        "training": {"id": session.training.id, "name": session.training.name},
        "participants": participant_progress(session, current_user_id),
    }
