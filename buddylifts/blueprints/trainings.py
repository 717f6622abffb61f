from flask import Blueprint, current_app, jsonify

from ..auth import current_user, login_required
from ..db import db
from ..errors import BadRequest, Forbidden
from ..models import Exercise, Training
from ..models.base import utcnow
from ..services.access import can_view_training, get_training, owned_training
from ..services.exercise_parser import exercises_to_db_format, parse_exercise_input
from ..services.validation import json_body, optional_str, require_str

bp = Blueprint("trainings", __name__, url_prefix="/trainings")

NO_EXERCISES_MESSAGE = (
    "Could not parse any exercises. Try formats like '10x4 pushup' or '5 sets of 10 bench press'"
)


def parser_input(data) -> str:
    """Freitext für den Parser, Länge laut PARSER_MIN_INPUT/PARSER_MAX_INPUT."""
    return require_str(
        data,
        "input",
        "Input is required",
        min_len=current_app.config["PARSER_MIN_INPUT"],
        max_len=current_app.config["PARSER_MAX_INPUT"],
        min_message="Input is too short",
        max_message="Input is too long",
    )


@bp.get("/")
@login_required
def list_trainings():
    """JSON: eigene Trainings, neueste zuerst, mit Anzahl Übungen."""
    user = current_user()
    counts = (
        db.select(Exercise.training_id, db.func.count(Exercise.id).label("n"))
        .group_by(Exercise.training_id)
        .subquery()
    )
    rows = db.session.execute(
        db.select(Training, db.func.coalesce(counts.c.n, 0))
        .outerjoin(counts, counts.c.training_id == Training.id)
        .where(Training.user_id == user.id)
        .order_by(Training.created_at.desc())
    ).all()
    return jsonify([{**t.to_dict(), "exercise_count": n} for t, n in rows])


@bp.get("/<training_id>")
@login_required
def get_one(training_id: str):
    training = get_training(training_id)
    if not can_view_training(training, current_user()):
        raise Forbidden("You do not have access to this training")
    return jsonify(training.to_dict(with_exercises=True))


@bp.post("/")
@login_required
def create():
    data = json_body()
    training = Training(
        user_id=current_user().id,
        name=require_str(data, "name", "Training name is required"),
        description=optional_str(data, "description"),
    )
    db.session.add(training)
    db.session.commit()
    current_app.logger.info("Training created: %s", training.id)
    return jsonify(training.to_dict()), 201


@bp.post("/with-exercises")
@login_required
def create_with_exercises():
    """Training + per Freitext geparste Übungen in einer Transaktion anlegen."""
    data = json_body()
    name = require_str(data, "name", "Training name is required")
    description = optional_str(data, "description")
    text = parser_input(data)

    parsed = parse_exercise_input(text, current_app.config["DEFAULT_REST_SECONDS"])
    if not parsed:
        raise BadRequest(NO_EXERCISES_MESSAGE)

    training = Training(user_id=current_user().id, name=name, description=description)
    training.exercises = [Exercise(**row) for row in exercises_to_db_format(parsed)]
    db.session.add(training)
    db.session.commit()

    current_app.logger.info("Training created: %s (%d exercises)", training.id, len(parsed))
    return (
        jsonify(
            {
                "training": training.to_dict(),
                "exercises": [ex.to_dict() for ex in training.exercises],
                "count": len(training.exercises),
            }
        ),
        201,
    )


@bp.patch("/<training_id>")
@login_required
def update(training_id: str):
    training = owned_training(training_id, current_user(), "You can only update your own trainings")
    data = json_body()
    if "name" in data:
        training.name = require_str(data, "name", "Training name is required")
    if "description" in data:
        training.description = optional_str(data, "description")
    # onupdate greift nur bei geänderten Spalten
    training.updated_at = utcnow()
    db.session.commit()
    return jsonify(training.to_dict())


@bp.delete("/<training_id>")
@login_required
def delete(training_id: str):
    training = owned_training(training_id, current_user(), "You can only delete your own trainings")
    db.session.delete(training)
    db.session.commit()
    current_app.logger.info("Training deleted: %s", training_id)
    return jsonify({"success": True})
