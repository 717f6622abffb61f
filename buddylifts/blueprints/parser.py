from dataclasses import asdict

from flask import Blueprint, current_app, jsonify

from ..auth import current_user, login_required
from ..db import db
from ..errors import BadRequest
from ..models import Exercise
from ..services.access import owned_training
from ..services.exercise_parser import exercises_to_db_format, parse_exercise_input
from ..services.validation import json_body, optional_bool, require_str
from .trainings import NO_EXERCISES_MESSAGE, parser_input

bp = Blueprint("parser", __name__, url_prefix="/parser")


@bp.post("/parse")
@login_required
def parse():
    """Vorschau: Freitext parsen, ohne etwas zu speichern."""
    text = parser_input(json_body())
    parsed = parse_exercise_input(text, current_app.config["DEFAULT_REST_SECONDS"])
    return jsonify({"exercises": [asdict(ex) for ex in parsed], "count": len(parsed)})


@bp.post("/parse-and-create")
@login_required
def parse_and_create():
    data = json_body()
    training = owned_training(
        require_str(data, "training_id", "Training ID is required"),
        current_user(),
        "You can only add exercises to your own trainings",
    )
    text = parser_input(data)
    replace_existing = optional_bool(data, "replace_existing")

    parsed = parse_exercise_input(text, current_app.config["DEFAULT_REST_SECONDS"])
    if not parsed:
        raise BadRequest(NO_EXERCISES_MESSAGE)

    if replace_existing:
        db.session.execute(db.delete(Exercise).where(Exercise.training_id == training.id))

    exercises = [Exercise(training_id=training.id, **row) for row in exercises_to_db_format(parsed)]
    db.session.add_all(exercises)
    db.session.commit()

    current_app.logger.info(
        "Parsed %d exercises into training %s (replace=%s)", len(exercises), training.id, replace_existing
    )
    return jsonify({"exercises": [ex.to_dict() for ex in exercises], "count": len(exercises)}), 201
