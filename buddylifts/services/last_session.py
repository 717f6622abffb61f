# -*- coding: utf-8 -*-
"""
Service: Last Session
Zeigt die zuletzt beendete Session eines Users (höchstes completed_at).
Gibt die Keys zurück, die das Dashboard erwartet:
  - date (YYYY-MM-DD)
  - training_name
  - duration_min
"""

from __future__ import annotations

from typing import Any, Dict

from ..db import db
from ..models import SessionParticipant, TrainingSession

PLACEHOLDER = "—"


def get_last_session(user_id: str) -> Dict[str, Any]:
    """Letzte abgeschlossene Session, an der der User teilgenommen hat."""
    sess = db.session.execute(
        db.select(TrainingSession)
        .join(SessionParticipant, SessionParticipant.session_id == TrainingSession.id)
        .where(SessionParticipant.user_id == user_id, TrainingSession.status == "completed")
        .order_by(TrainingSession.completed_at.desc())
        .limit(1)
    ).scalar_one_or_none()

    if sess is None:
        return {"session_id": None, "date": PLACEHOLDER, "training_name": PLACEHOLDER, "duration_min": PLACEHOLDER}

    start_dt, end_dt = sess.started_at, sess.completed_at

    duration_min: Any = PLACEHOLDER
    if start_dt and end_dt:
        duration_min = max(0, int((end_dt - start_dt).total_seconds() // 60))

    ref = end_dt or start_dt
    return {
        "session_id": sess.id,
        "date": ref.date().isoformat() if ref else PLACEHOLDER,
        "training_name": sess.training.name or PLACEHOLDER,
        "duration_min": duration_min,
    }
