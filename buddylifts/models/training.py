from typing import Any, Dict

from ..db import db
from .base import iso, new_id, utcnow


class Training(db.Model):
    """Trainingsvorlage eines Users – geordnete Liste von Übungen."""

    __tablename__ = "training"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(
        db.String(36), db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = db.relationship("User", back_populates="trainings")
    exercises = db.relationship(
        "Exercise",
        back_populates="training",
        cascade="all, delete-orphan",
        order_by="Exercise.order",
        passive_deletes=True,
    )
    sessions = db.relationship(
        "TrainingSession", back_populates="training", cascade="all, delete-orphan", passive_deletes=True
    )

    def to_dict(self, with_exercises: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "description": self.description,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
        if with_exercises:
            data["exercises"] = [ex.to_dict() for ex in self.exercises]
        return data

    def __repr__(self):
        return f"<Training {self.name}>"


class Exercise(db.Model):
    """
    Eine Übung innerhalb eines Trainings:
    - target_sets, target_reps: Vorgaben
    - weight, rest_seconds: optional
    - order: Position im Training (0-basiert)
    """

    __tablename__ = "exercise"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    training_id = db.Column(
        db.String(36), db.ForeignKey("training.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = db.Column(db.String(200), nullable=False)
    target_sets = db.Column(db.Integer, nullable=False)
    target_reps = db.Column(db.Integer, nullable=False)
    weight = db.Column(db.Float)
    order = db.Column("order", db.Integer, nullable=False, default=0)
    rest_seconds = db.Column(db.Integer)

    training = db.relationship("Training", back_populates="exercises")
    progress = db.relationship(
        "ExerciseProgress", back_populates="exercise", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def target_total_reps(self) -> int:
        return self.target_sets * self.target_reps

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "training_id": self.training_id,
            "name": self.name,
            "target_sets": self.target_sets,
            "target_reps": self.target_reps,
            "weight": self.weight,
            "order": self.order,
            "rest_seconds": self.rest_seconds,
        }

    def __repr__(self):
        return f"<Exercise {self.name} ({self.target_sets}x{self.target_reps})>"
