"""
Session summaries: per-participant performance, ranking and highlight text.
"""

from flask import Blueprint, jsonify

from ..auth import current_user, login_required
from ..errors import BadRequest, Forbidden, NotFound
from ..models.base import iso, utcnow
from ..services.access import get_session, viewable_session
from ..services.metrics import percentage
from ..services.summary import (
    format_highlight_lines,
    generate_comparisons,
    generate_highlights,
    generate_session_insights,
    participant_summary,
    reps_by_user,
    session_summaries,
)

bp = Blueprint("summary", __name__, url_prefix="/summary")


@bp.get("/<session_id>")
@login_required
def generate(session_id: str):
    sess = viewable_session(session_id, current_user())
    if sess.status != "completed":
        raise BadRequest("Can only generate summaries for completed sessions")
    if not sess.participants:
        raise NotFound("No participants found for this session")
    if not sess.training.exercises:
        raise NotFound("No exercises found for this training")

    summaries = session_summaries(sess)
    return jsonify(
        {
            "session_id": sess.id,
            "training_name": sess.training.name,
            "training_description": sess.training.description,
            "completed_at": iso(sess.completed_at or utcnow()),
            "participant_count": len(summaries),
            "participants": summaries,
            "comparisons": generate_comparisons(summaries),
            "highlights": format_highlight_lines(summaries),
            "insights": generate_session_insights(summaries),
        }
    )


@bp.get("/<session_id>/quick")
@login_required
def quick(session_id: str):
    """Kurzfassung: Summen über alle Teilnehmer, auch für laufende Sessions."""
    sess = viewable_session(session_id, current_user())
    exercises = sess.training.exercises
    participant_count = len(sess.participants)

    total_target = sum(ex.target_total_reps for ex in exercises) * participant_count
    total_completed = sum(entry.total_reps for entry in sess.progress)
    return jsonify(
        {
            "session_id": sess.id,
            "training_name": sess.training.name,
            "status": sess.status,
            "participant_count": participant_count,
            "exercise_count": len(exercises),
            "total_target_reps": total_target,
            "total_completed_reps": total_completed,
            "overall_completion": percentage(total_completed, total_target, cap=False),
            "completed_at": iso(sess.completed_at),
        }
    )


@bp.get("/<session_id>/personal")
@login_required
def personal(session_id: str):
    user = current_user()
    sess = get_session(session_id)
    if sess.participant_for(user.id) is None:
        raise Forbidden("You were not a participant in this session")

    summary = participant_summary(
        user.id, user.name, sess.training.exercises, reps_by_user(sess).get(user.id, {})
    )
    return jsonify(
        {
            "session_id": sess.id,
            "training_name": sess.training.name,
            "training_description": sess.training.description,
            "completed_at": iso(sess.completed_at),
            "participant": summary,
            "highlights": generate_highlights(summary),
        }
    )
