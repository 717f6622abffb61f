"""
Lookup helpers shared by the blueprints: load a row or raise NotFound,
check ownership or raise Forbidden.
"""

from __future__ import annotations

from typing import List, Optional

from ..db import db
from ..errors import Forbidden, NotFound
from ..models import Exercise, Friend, SessionParticipant, Training, TrainingSession, User


def get_training(training_id: str) -> Training:
    training = db.session.get(Training, training_id) if training_id else None
    if training is None:
        raise NotFound("Training not found")
    return training


def owned_training(training_id: str, user: User, message: str) -> Training:
    """Training laden und sicherstellen, dass es dem User gehört."""
    training = get_training(training_id)
    if training.user_id != user.id:
        raise Forbidden(message)
    return training


def owned_exercise(exercise_id: str, user: User, message: str) -> Exercise:
    exercise = db.session.get(Exercise, exercise_id) if exercise_id else None
    if exercise is None:
        raise NotFound("Exercise not found")
    if exercise.training.user_id != user.id:
        raise Forbidden(message)
    return exercise


def get_session(session_id: str) -> TrainingSession:
    sess = db.session.get(TrainingSession, session_id) if session_id else None
    if sess is None:
        raise NotFound("Session not found")
    return sess


def get_user(user_id: str) -> User:
    user = db.session.get(User, user_id) if user_id else None
    if user is None:
        raise NotFound("User not found")
    return user


def relationship_between(user_id: str, other_id: str) -> Optional[Friend]:
    """Die (einzige) Friend-Zeile zwischen zwei Usern, egal in welcher Richtung."""
    return db.session.execute(
        db.select(Friend).where(
            db.or_(
                db.and_(Friend.user_id == user_id, Friend.friend_id == other_id),
                db.and_(Friend.user_id == other_id, Friend.friend_id == user_id),
            )
        )
    ).scalars().first()


def friend_ids(user_id: str) -> List[str]:
    """IDs aller akzeptierten Freunde (beide Richtungen)."""
    rows = db.session.execute(
        db.select(Friend).where(
            Friend.status == "accepted",
            db.or_(Friend.user_id == user_id, Friend.friend_id == user_id),
        )
    ).scalars()
    return [row.other(user_id) for row in rows]


def is_participant(sess: TrainingSession, user_id: str) -> bool:
    return db.session.execute(
        db.select(SessionParticipant.id).where(
            SessionParticipant.session_id == sess.id, SessionParticipant.user_id == user_id
        )
    ).first() is not None


def can_view_training(training: Training, user: User) -> bool:
    """Besitzer, akzeptierte Freunde und Teilnehmer einer Session dürfen lesen."""
    if training.user_id == user.id or training.user_id in friend_ids(user.id):
        return True
    return db.session.execute(
        db.select(SessionParticipant.id)
        .join(TrainingSession, TrainingSession.id == SessionParticipant.session_id)
        .where(TrainingSession.training_id == training.id, SessionParticipant.user_id == user.id)
    ).first() is not None


def can_view_session(sess: TrainingSession, user: User) -> bool:
    return sess.training.user_id == user.id or is_participant(sess, user.id)


def viewable_session(session_id: str, user: User) -> TrainingSession:
    sess = get_session(session_id)
    if not can_view_session(sess, user):
        raise Forbidden("You are not a participant in this session")
    return sess
