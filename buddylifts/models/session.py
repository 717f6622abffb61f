import json
from typing import Any, Dict, List

from ..db import db
from .base import iso, new_id, utcnow

SESSION_STATUSES = ("pending", "active", "completed")
ACCESS_TYPES = ("read", "admin")
PARTICIPANT_ROLES = ("host", "admin", "read")


class TrainingSession(db.Model):
    """Live-Instanz eines Trainings, ggf. mit mehreren Teilnehmern (Einladung per Code)."""

    __tablename__ = "training_session"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    training_id = db.Column(
        db.String(36), db.ForeignKey("training.id", ondelete="CASCADE"), nullable=False, index=True
    )
    host_user_id = db.Column(
        db.String(36), db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    invite_code = db.Column(db.String(16), nullable=False, unique=True, index=True)
    access_type = db.Column(db.String(10), nullable=False)
    status = db.Column(db.String(12), nullable=False, default="pending")
    started_at = db.Column(db.DateTime)
    completed_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("status IN ('pending', 'active', 'completed')", name="ck_session_status"),
        db.CheckConstraint("access_type IN ('read', 'admin')", name="ck_session_access_type"),
    )

    training = db.relationship("Training", back_populates="sessions")
    host = db.relationship("User")
    participants = db.relationship(
        "SessionParticipant",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SessionParticipant.joined_at",
        passive_deletes=True,
    )
    progress = db.relationship(
        "ExerciseProgress", back_populates="session", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def participant_for(self, user_id: str):
        for p in self.participants:
            if p.user_id == user_id:
                return p
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "training_id": self.training_id,
            "host_user_id": self.host_user_id,
            "invite_code": self.invite_code,
            "access_type": self.access_type,
            "status": self.status,
            "started_at": iso(self.started_at),
            "completed_at": iso(self.completed_at),
            "created_at": iso(self.created_at),
        }


class SessionParticipant(db.Model):
    __tablename__ = "session_participant"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    session_id = db.Column(
        db.String(36), db.ForeignKey("training_session.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role = db.Column(db.String(10), nullable=False)
    joined_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("session_id", "user_id", name="uq_participant_session_user"),
        db.CheckConstraint("role IN ('host', 'admin', 'read')", name="ck_participant_role"),
    )

    session = db.relationship("TrainingSession", back_populates="participants")
    user = db.relationship("User")

    @property
    def can_manage(self) -> bool:
        """host/admin dürfen Fortschritt für andere Teilnehmer erfassen."""
        return self.role in ("host", "admin")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "user_id": self.user_id,
            "user_name": self.user.name if self.user else None,
            "role": self.role,
            "joined_at": iso(self.joined_at),
        }


class ExerciseProgress(db.Model):
    """
    Tatsächlich geschaffte Wiederholungen pro Satz für eine Übung in einer Session.
    completed_reps wird als JSON-Array (Text) gespeichert.
    """

    __tablename__ = "exercise_progress"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    session_id = db.Column(
        db.String(36), db.ForeignKey("training_session.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    exercise_id = db.Column(
        db.String(36), db.ForeignKey("exercise.id", ondelete="CASCADE"), nullable=False, index=True
    )
    completed_reps = db.Column(db.Text, nullable=False, default="[]")
    completed_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("session_id", "user_id", "exercise_id", name="uq_progress_session_user_exercise"),
    )

    session = db.relationship("TrainingSession", back_populates="progress")
    exercise = db.relationship("Exercise", back_populates="progress")
    user = db.relationship("User")

    @property
    def reps(self) -> List[int]:
        return json.loads(self.completed_reps or "[]")

    @reps.setter
    def reps(self, values: List[int]) -> None:
        self.completed_reps = json.dumps(list(values))

    @property
    def total_reps(self) -> int:
        return sum(self.reps)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "user_id": self.user_id,
            "exercise_id": self.exercise_id,
            "completed_reps": self.reps,
            "completed_at": iso(self.completed_at),
            "created_at": iso(self.created_at),
        }
