from flask import Blueprint, jsonify

from ..auth import current_user, login_required
from ..db import db
from ..errors import BadRequest
from ..models import Exercise
from ..services.access import owned_exercise, owned_training
from ..services.validation import (
    json_body,
    optional_int,
    optional_number,
    require_int,
    require_str,
)

bp = Blueprint("exercises", __name__, url_prefix="/exercises")

ADD_FORBIDDEN = "You can only add exercises to your own trainings"
TRAINING_ID_REQUIRED = "Training ID is required"


def exercise_fields(data, partial: bool = False) -> dict:
    """
    Validiert Übungsfelder. Bei partial=True nur die übergebenen Keys
    (für PATCH), sonst sind name/target_sets/target_reps Pflicht.
    """
    fields = {}
    if not partial or "name" in data:
        fields["name"] = require_str(data, "name", "Exercise name is required")
    if not partial or "target_sets" in data:
        fields["target_sets"] = require_int(data, "target_sets", 1, "Target sets must be at least 1")
    if not partial or "target_reps" in data:
        fields["target_reps"] = require_int(data, "target_reps", 1, "Target reps must be at least 1")
    if not partial or "weight" in data:
        fields["weight"] = optional_number(data, "weight", minimum=0)
    if not partial or "order" in data:
        fields["order"] = optional_int(data, "order", 0, "Order must not be negative") or 0
    if not partial or "rest_seconds" in data:
        fields["rest_seconds"] = optional_int(data, "rest_seconds", 0, "Rest seconds must not be negative")
    return fields


@bp.post("/")
@login_required
def create():
    data = json_body()
    training_id = require_str(data, "training_id", TRAINING_ID_REQUIRED)
    training = owned_training(training_id, current_user(), ADD_FORBIDDEN)
    exercise = Exercise(training_id=training.id, **exercise_fields(data))
    db.session.add(exercise)
    db.session.commit()
    return jsonify(exercise.to_dict()), 201


@bp.post("/bulk")
@login_required
def create_many():
    data = json_body()
    training_id = require_str(data, "training_id", TRAINING_ID_REQUIRED)
    training = owned_training(training_id, current_user(), ADD_FORBIDDEN)
    items = data.get("exercises")
    if not isinstance(items, list) or not items:
        raise BadRequest("At least one exercise is required")
    if not all(isinstance(item, dict) for item in items):
        raise BadRequest("Exercises must be objects")

    exercises = [Exercise(training_id=training.id, **exercise_fields(item)) for item in items]
    db.session.add_all(exercises)
    db.session.commit()
    return jsonify([ex.to_dict() for ex in exercises]), 201


@bp.patch("/<exercise_id>")
@login_required
def update(exercise_id: str):
    exercise = owned_exercise(exercise_id, current_user(), "You can only update exercises in your own trainings")
    for key, value in exercise_fields(json_body(), partial=True).items():
        setattr(exercise, key, value)
    db.session.commit()
    return jsonify(exercise.to_dict())


@bp.delete("/<exercise_id>")
@login_required
def delete(exercise_id: str):
    exercise = owned_exercise(exercise_id, current_user(), "You can only delete exercises from your own trainings")
    db.session.delete(exercise)
    db.session.commit()
    return jsonify({"success": True})


@bp.delete("/by-training/<training_id>")
@login_required
def delete_by_training(training_id: str):
    training = owned_training(training_id, current_user(), "You can only delete exercises from your own trainings")
    deleted = db.session.execute(db.delete(Exercise).where(Exercise.training_id == training.id)).rowcount
    db.session.commit()
    return jsonify({"success": True, "deleted": deleted})
