# buddylifts/blueprints/progress.py
from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify, request

from ..auth import current_user, login_required
from ..db import db
from ..errors import BadRequest, Forbidden, NotFound
from ..models import Exercise, ExerciseProgress, TrainingSession
from ..models.base import utcnow
from ..services.access import can_view_training, get_session, viewable_session
from ..services.charts import completion_bar_png, reps_history_png
from ..services.metrics import percentage
from ..services.summary import session_summaries
from ..services.validation import json_body, optional_str, require_int, require_int_list, require_str

bp = Blueprint("progress", __name__, url_prefix="/progress")


def _own_entry(progress_id: str, message: str) -> ExerciseProgress:
    entry = db.session.get(ExerciseProgress, progress_id) if progress_id else None
    if entry is None:
        raise NotFound("Progress entry not found")
    if entry.user_id != current_user().id:
        raise Forbidden(message)
    return entry


def _png_response(png: bytes, filename: str) -> Response:
    """PNG ausliefern; mit ?download=1 als Attachment."""
    resp = Response(png, mimetype="image/png")
    if request.args.get("download") == "1":
        resp.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return resp


@bp.post("/")
@login_required
def record():
    """
    Erfasst geschaffte Wiederholungen für eine Übung (Upsert pro Session/User/Übung).
    Host und Admins dürfen per user_id für andere Teilnehmer eintragen.
    """
    data = json_body()
    user = current_user()
    sess = get_session(require_str(data, "session_id", "Session ID is required"))
    exercise_id = require_str(data, "exercise_id", "Exercise ID is required")
    reps = require_int_list(data, "completed_reps")

    me = sess.participant_for(user.id)
    if me is None:
        raise Forbidden("You are not a participant in this session")
    if not sess.is_active:
        raise BadRequest("This session is not active")

    target_user_id = optional_str(data, "user_id") or user.id
    if target_user_id != user.id:
        if not me.can_manage:
            raise Forbidden("You can only record your own progress")
        if sess.participant_for(target_user_id) is None:
            raise NotFound("Participant not found")

    exercise = db.session.get(Exercise, exercise_id)
    if exercise is None or exercise.training_id != sess.training_id:
        raise NotFound("Exercise not found")

    entry = db.session.execute(
        db.select(ExerciseProgress).where(
            ExerciseProgress.session_id == sess.id,
            ExerciseProgress.user_id == target_user_id,
            ExerciseProgress.exercise_id == exercise.id,
        )
    ).scalar_one_or_none()
    if entry is None:
        entry = ExerciseProgress(session_id=sess.id, user_id=target_user_id, exercise_id=exercise.id)
        db.session.add(entry)
    entry.reps = reps
    entry.completed_at = utcnow()
    db.session.commit()

    current_app.logger.info("Progress recorded: session %s, user %s, exercise %s", sess.id, target_user_id, exercise.id)
    return jsonify(entry.to_dict())


@bp.patch("/<progress_id>")
@login_required
def update(progress_id: str):
    entry = _own_entry(progress_id, "You can only update your own progress")
    entry.reps = require_int_list(json_body(), "completed_reps")
    entry.completed_at = utcnow()
    db.session.commit()
    return jsonify(entry.to_dict())


@bp.delete("/<progress_id>")
@login_required
def delete(progress_id: str):
    entry = _own_entry(progress_id, "You can only delete your own progress")
    db.session.delete(entry)
    db.session.commit()
    return jsonify({"success": True})


@bp.get("/session/<session_id>")
@login_required
def get_by_session(session_id: str):
    sess = viewable_session(session_id, current_user())
    stmt = db.select(ExerciseProgress).where(ExerciseProgress.session_id == sess.id)
    user_id = request.args.get("user_id")
    if user_id:
        stmt = stmt.where(ExerciseProgress.user_id == user_id)
    entries = db.session.execute(stmt.order_by(ExerciseProgress.created_at)).scalars()
    return jsonify([entry.to_dict() for entry in entries])


@bp.get("/<progress_id>/percentage")
@login_required
def calculate_percentage(progress_id: str):
    """Erfüllung eines Eintrags gegen Zielvorgaben (?target_reps=10&target_sets=3)."""
    entry = db.session.get(ExerciseProgress, progress_id)
    if entry is None:
        raise NotFound("Progress entry not found")
    viewable_session(entry.session_id, current_user())
    args = {k: request.args.get(k, type=int) for k in ("target_reps", "target_sets")}
    target_reps = require_int(args, "target_reps", 0)
    target_sets = require_int(args, "target_sets", 0)

    reps = entry.reps
    total_target = target_sets * target_reps
    return jsonify(
        {
            "percentage": percentage(sum(reps), total_target),
            "total_completed_reps": sum(reps),
            "total_target_reps": total_target,
            "completed_reps": reps,
        }
    )


# ---------- Charts ----------

@bp.get("/sessions/<session_id>/png")
@login_required
def session_chart_png(session_id: str):
    """Balkendiagramm: Gesamt-Erfüllung je Teilnehmer."""
    sess = viewable_session(session_id, current_user())
    summaries = session_summaries(sess)
    png = completion_bar_png(
        [s["user_name"] for s in summaries],
        [s["overall_completion"] for s in summaries],
        f"{sess.training.name} – completion",
    )
    return _png_response(png, f"session_{session_id}.png")


@bp.get("/exercises/<exercise_id>/png")
@login_required
def exercise_chart_png(exercise_id: str):
    """Liniendiagramm: eigene Gesamt-Wiederholungen dieser Übung über alle Sessions."""
    user = current_user()
    exercise = db.session.get(Exercise, exercise_id)
    if exercise is None:
        raise NotFound("Exercise not found")
    if not can_view_training(exercise.training, user):
        raise Forbidden("You do not have access to this training")

    rows = db.session.execute(
        db.select(ExerciseProgress, TrainingSession)
        .join(TrainingSession, TrainingSession.id == ExerciseProgress.session_id)
        .where(ExerciseProgress.exercise_id == exercise.id, ExerciseProgress.user_id == user.id)
        .order_by(TrainingSession.started_at)
    ).all()

    days, totals = [], []
    for entry, sess in rows:
        when = sess.started_at or entry.completed_at or entry.created_at
        days.append(when)
        totals.append(entry.total_reps)
    targets = [exercise.target_total_reps] * len(totals)

    png = reps_history_png(days, totals, targets, f"{exercise.name} – reps per session")
    return _png_response(png, f"exercise_{exercise_id}.png")
