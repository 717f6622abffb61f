"""
Training feed: the caller's and their friends' trainings with session state.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from ..db import db
from ..models import Exercise, Training, TrainingSession
from ..models.base import iso, utcnow
from .access import friend_ids

FEED_FILTERS = ("all", "upcoming", "past")
GROUP_ORDER = ("Today", "Yesterday", "Tomorrow", "Older")


def date_group(value: datetime, today: date) -> str:
    day = value.date()
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    if day == today + timedelta(days=1):
        return "Tomorrow"
    return "Older"


def _latest_sessions(training_ids: List[str]) -> Dict[str, TrainingSession]:
    """Neueste Session (nach created_at) je Training."""
    if not training_ids:
        return {}
    sessions = db.session.execute(
        db.select(TrainingSession)
        .where(TrainingSession.training_id.in_(training_ids))
        .order_by(TrainingSession.created_at.desc())
    ).scalars()
    latest: Dict[str, TrainingSession] = {}
    for sess in sessions:
        latest.setdefault(sess.training_id, sess)
    return latest


def _exercise_counts(training_ids: List[str]) -> Dict[str, int]:
    if not training_ids:
        return {}
    rows = db.session.execute(
        db.select(Exercise.training_id, db.func.count(Exercise.id))
        .where(Exercise.training_id.in_(training_ids))
        .group_by(Exercise.training_id)
    ).all()
    return {training_id: count for training_id, count in rows}


def build_feed(user_id: str, feed_filter: str = "all", now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    now = now or utcnow()
    user_ids = [user_id, *friend_ids(user_id)]

    trainings = db.session.execute(
        db.select(Training).where(Training.user_id.in_(user_ids)).order_by(Training.created_at.desc())
    ).scalars().all()

    ids = [t.id for t in trainings]
    sessions = _latest_sessions(ids)
    counts = _exercise_counts(ids)

    items: List[Dict[str, Any]] = []
    for training in trainings:
        sess = sessions.get(training.id)
        reference = (sess.started_at if sess else None) or training.created_at
        is_past = bool(sess and sess.status == "completed") or reference < now
        item = {
            **training.to_dict(),
            "user_name": training.user.name if training.user else "Unknown User",
            "user_email": training.user.email if training.user else "",
            "user_image": training.user.image if training.user else None,
            "is_own": training.user_id == user_id,
            "exercise_count": counts.get(training.id, 0),
            "session_id": sess.id if sess else None,
            "session_status": sess.status if sess else None,
            "invite_code": sess.invite_code if sess and sess.status == "active" else None,
            "scheduled_for": iso(sess.started_at) if sess else None,
            "is_past": is_past,
            "group": date_group(training.created_at, now.date()),
        }
        if feed_filter == "upcoming" and is_past:
            continue
        if feed_filter == "past" and not is_past:
            continue
        items.append(item)
    return items


def group_feed(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Gruppiert Feed-Einträge nach Today/Yesterday/Tomorrow/Older (leere Gruppen entfallen)."""
    groups: Dict[str, List[Dict[str, Any]]] = {}
    for item in items:
        groups.setdefault(item["group"], []).append(item)
    return [{"group": name, "items": groups[name]} for name in GROUP_ORDER if name in groups]
