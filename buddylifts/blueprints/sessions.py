from flask import Blueprint, Response, current_app, jsonify, request, stream_with_context

from ..auth import current_user, login_required
from ..db import db
from ..errors import BadRequest, Conflict, Forbidden, NotFound
from ..models import ExerciseProgress, SessionParticipant, TrainingSession
from ..models.base import utcnow
from ..models.session import ACCESS_TYPES
from ..services import live_progress
from ..services.access import can_view_training, get_session, get_training, owned_training, viewable_session
from ..services.body_progress import body_progress
from ..services.invite_code import generate_invite_code, is_valid_invite_code
from ..services.notifications import notify_complete, notify_join
from ..services.realtime import change_feed, event_stream
from ..services.validation import json_body, require_choice, require_str

bp = Blueprint("sessions", __name__, url_prefix="/sessions")

ACCESS_TYPE_MESSAGE = "Access type is required"
STREAM_TABLES = ("exercise_progress", "session_participant", "training_session")


def _unique_invite_code() -> str:
    code = generate_invite_code()
    # Kollisionen sind extrem selten, aber möglich
    while db.session.execute(db.select(TrainingSession.id).where(TrainingSession.invite_code == code)).first():
        code = generate_invite_code()
    return code


def _session_by_code(code) -> TrainingSession:
    if not is_valid_invite_code(code):
        raise BadRequest("Invalid invite code format")
    sess = db.session.execute(
        db.select(TrainingSession).where(TrainingSession.invite_code == code)
    ).scalar_one_or_none()
    if sess is None:
        raise NotFound("Invalid invite code")
    return sess


def _hosted_session(session_id: str, message: str) -> TrainingSession:
    sess = get_session(session_id)
    if sess.host_user_id != current_user().id:
        raise Forbidden(message)
    return sess


@bp.post("/")
@login_required
def start():
    """Startet eine Live-Session; der Host wird als erster Teilnehmer eingetragen."""
    data = json_body()
    user = current_user()
    training_id = require_str(data, "training_id", "Training ID is required")
    training = owned_training(training_id, user, "You can only start sessions for your own trainings")
    access_type = require_choice(data, "access_type", ACCESS_TYPES, ACCESS_TYPE_MESSAGE)

    active = db.session.execute(
        db.select(TrainingSession.id).where(
            TrainingSession.training_id == training.id, TrainingSession.status == "active"
        )
    ).first()
    if active:
        raise Conflict("An active session already exists for this training")

    sess = TrainingSession(
        training_id=training.id,
        host_user_id=user.id,
        invite_code=_unique_invite_code(),
        access_type=access_type,
        status="active",
        started_at=utcnow(),
    )
    sess.participants.append(SessionParticipant(user_id=user.id, role="host"))
    db.session.add(sess)
    db.session.commit()

    current_app.logger.info("Session started: %s (training %s)", sess.id, training.id)
    return jsonify(sess.to_dict()), 201


@bp.post("/<session_id>/end")
@login_required
def end(session_id: str):
    sess = _hosted_session(session_id, "Only the host can end the session")
    if sess.status == "completed":
        raise Conflict("Session is already completed")
    sess.status = "completed"
    sess.completed_at = utcnow()
    db.session.commit()
    current_app.logger.info("Session ended: %s", sess.id)

    # nur beim ersten Wechsel auf completed, ein zweites Ende endet oben mit 409
    notify_complete(sess)
    return jsonify(sess.to_dict())


@bp.post("/join")
@login_required
def join():
    data = json_body()
    user = current_user()
    sess = _session_by_code(data.get("invite_code"))
    if sess.status != "active":
        raise Conflict("This session is not active")
    if sess.participant_for(user.id) is not None:
        raise Conflict("You have already joined this session")

    role = "admin" if sess.access_type == "admin" else "read"
    participant = SessionParticipant(session_id=sess.id, user_id=user.id, role=role)
    db.session.add(participant)
    db.session.commit()

    current_app.logger.info("User %s joined session %s as %s", user.id, sess.id, role)
    notify_join(sess, participant)
    return jsonify({"session_id": sess.id, "training_id": sess.training_id, "role": role})


@bp.post("/<session_id>/leave")
@login_required
def leave(session_id: str):
    """Verlassen einer Session; der eigene Fortschritt darin wird mit gelöscht."""
    user = current_user()
    sess = get_session(session_id)
    if sess.host_user_id == user.id:
        raise Forbidden("Host cannot leave. Use the end session action instead.")
    participant = sess.participant_for(user.id)
    if participant is None:
        raise NotFound("You are not a participant in this session")

    db.session.execute(
        db.delete(ExerciseProgress).where(
            ExerciseProgress.session_id == sess.id, ExerciseProgress.user_id == user.id
        )
    )
    db.session.delete(participant)
    db.session.commit()

    current_app.logger.info("User %s left session %s", user.id, sess.id)
    return jsonify({"success": True})


@bp.patch("/<session_id>/access")
@login_required
def update_access(session_id: str):
    data = json_body()
    access_type = require_choice(data, "access_type", ACCESS_TYPES, ACCESS_TYPE_MESSAGE)
    sess = _hosted_session(session_id, "Only the host can change access type")
    sess.access_type = access_type
    db.session.commit()
    return jsonify(sess.to_dict())


@bp.get("/<session_id>")
@login_required
def get_one(session_id: str):
    sess = viewable_session(session_id, current_user())
    return jsonify(
        {
            **sess.to_dict(),
            "training": sess.training.to_dict(with_exercises=True),
            "participants": [p.to_dict() for p in sess.participants],
        }
    )


@bp.get("/code/<code>")
@login_required
def lookup(code: str):
    """Vorschau für die Join-Seite."""
    sess = _session_by_code(code)
    user = current_user()
    return jsonify(
        {
            "session_id": sess.id,
            "training_id": sess.training_id,
            "training_name": sess.training.name,
            "host_name": sess.host.name if sess.host else None,
            "status": sess.status,
            "access_type": sess.access_type,
            "participant_count": len(sess.participants),
            "exercise_count": len(sess.training.exercises),
            "already_joined": sess.participant_for(user.id) is not None,
        }
    )


@bp.get("/training/<training_id>/active")
@login_required
def active_for_training(training_id: str):
    training = get_training(training_id)
    if not can_view_training(training, current_user()):
        raise Forbidden("You do not have access to this training")
    sess = db.session.execute(
        db.select(TrainingSession).where(
            TrainingSession.training_id == training.id, TrainingSession.status == "active"
        )
    ).scalar_one_or_none()
    return jsonify(sess.to_dict() if sess else None)


@bp.get("/history")
@login_required
def history():
    """Alle Sessions, an denen der User teilgenommen hat, neueste zuerst."""
    rows = db.session.execute(
        db.select(TrainingSession, SessionParticipant.role)
        .join(SessionParticipant, SessionParticipant.session_id == TrainingSession.id)
        .where(SessionParticipant.user_id == current_user().id)
        .order_by(TrainingSession.created_at.desc())
    ).all()
    return jsonify(
        [
            {**sess.to_dict(), "training_name": sess.training.name, "role": role, "participant_count": len(sess.participants)}
            for sess, role in rows
        ]
    )


@bp.get("/<session_id>/live")
@login_required
def live(session_id: str):
    user = current_user()
    sess = viewable_session(session_id, user)
    return jsonify(live_progress.snapshot(sess, user.id))


@bp.get("/<session_id>/body-progress")
@login_required
def get_body_progress(session_id: str):
    """Muskelgruppen-Fortschritt eines Teilnehmers (Default: eigener)."""
    user = current_user()
    sess = viewable_session(session_id, user)
    user_id = request.args.get("user_id") or user.id
    completed = [
        entry.exercise_id for entry in sess.progress if entry.user_id == user_id and entry.completed_at
    ]
    return jsonify({"user_id": user_id, **body_progress(completed, sess.training.exercises)})


@bp.get("/<session_id>/stream")
@login_required
def stream(session_id: str):
    """
    Server-Sent Events: Live-Fortschritt der Session.
    Sendet sofort einen Snapshot, danach bei jeder Änderung an Fortschritt,
    Teilnehmern oder Session-Status. Endet, wenn die Session abgeschlossen ist.
    """
    user_id = current_user().id
    viewable_session(session_id, current_user())
    config = current_app.config

    def load():
        # frische Session, damit Commits anderer Requests sichtbar werden
        db.session.remove()
        sess = db.session.get(TrainingSession, session_id)
        return live_progress.snapshot(sess, user_id) if sess else None

    events = event_stream(
        load,
        lambda snap: snap["session"]["status"] == "completed",
        STREAM_TABLES,
        change_feed(),
        config["REALTIME_POLL_SECONDS"],
        config["REALTIME_HEARTBEAT_SECONDS"],
    )
    return Response(
        stream_with_context(events),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
