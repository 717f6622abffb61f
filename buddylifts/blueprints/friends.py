from flask import Blueprint, current_app, jsonify

from ..auth import current_user, login_required
from ..db import db
from ..errors import BadRequest, Forbidden, NotFound
from ..models import Friend
from ..services.access import get_user, relationship_between
from ..services.validation import json_body, require_str

bp = Blueprint("friends", __name__, url_prefix="/friends")


def _friend_id() -> str:
    return require_str(json_body(), "friend_id", "Friend ID is required")


def _incoming_request(friend_id: str, user_id: str) -> Friend:
    """Offene Anfrage von friend_id an den aktuellen User."""
    row = db.session.execute(
        db.select(Friend).where(
            Friend.user_id == friend_id, Friend.friend_id == user_id, Friend.status == "pending"
        )
    ).scalar_one_or_none()
    if row is None:
        raise NotFound("No pending friend request found from this user")
    return row


def _with_user(row: Friend, other) -> dict:
    return {
        **row.to_dict(),
        "user": {"id": other.id, "name": other.name, "email": other.email, "image": other.image},
    }


@bp.post("/request")
@login_required
def send():
    user = current_user()
    friend_id = _friend_id()
    if friend_id == user.id:
        raise BadRequest("You cannot send a friend request to yourself")
    get_user(friend_id)

    existing = relationship_between(user.id, friend_id)
    if existing is not None:
        if existing.status == "accepted":
            raise BadRequest("You are already friends with this user")
        if existing.status == "pending":
            if existing.user_id == user.id:
                raise BadRequest("You already have a pending friend request to this user")
            raise BadRequest("This user already has a pending friend request to you")
        raise Forbidden("Cannot send friend request: relationship is blocked")

    row = Friend(user_id=user.id, friend_id=friend_id, status="pending")
    db.session.add(row)
    db.session.commit()
    current_app.logger.info("Friend request %s -> %s", user.id, friend_id)
    return jsonify(row.to_dict()), 201


@bp.post("/accept")
@login_required
def accept():
    user = current_user()
    row = _incoming_request(_friend_id(), user.id)
    row.status = "accepted"
    db.session.commit()
    current_app.logger.info("Friend request accepted: %s", row.id)
    return jsonify(row.to_dict())


@bp.post("/reject")
@login_required
def reject():
    user = current_user()
    row = _incoming_request(_friend_id(), user.id)
    db.session.delete(row)
    db.session.commit()
    current_app.logger.info("Friend request rejected: %s", row.id)
    return jsonify({"success": True})


@bp.post("/remove")
@login_required
def remove():
    user = current_user()
    row = relationship_between(user.id, _friend_id())
    if row is None:
        raise NotFound("No friend relationship found with this user")
    # offene Anfragen kann nur der Absender zurückziehen
    if row.status == "pending" and row.user_id != user.id:
        raise Forbidden("You cannot cancel a friend request sent to you. Use reject instead.")
    db.session.delete(row)
    db.session.commit()
    current_app.logger.info("Friend relationship removed: %s", row.id)
    return jsonify({"success": True})


@bp.post("/block")
@login_required
def block():
    user = current_user()
    friend_id = _friend_id()
    if friend_id == user.id:
        raise BadRequest("You cannot block yourself")

    row = relationship_between(user.id, friend_id)
    if row is not None and row.status == "blocked" and row.user_id == user.id:
        return jsonify(row.to_dict())

    if row is not None:
        if row.user_id != user.id and row.status != "accepted":
            raise Forbidden("You cannot block this user")
        row.user_id, row.friend_id, row.status = user.id, friend_id, "blocked"
    else:
        get_user(friend_id)
        row = Friend(user_id=user.id, friend_id=friend_id, status="blocked")
        db.session.add(row)
    db.session.commit()
    current_app.logger.info("User %s blocked %s", user.id, friend_id)
    return jsonify(row.to_dict())


@bp.get("/")
@login_required
def list_friends():
    """Akzeptierte Freunde mit Userdaten der jeweils anderen Seite."""
    user = current_user()
    rows = db.session.execute(
        db.select(Friend)
        .where(Friend.status == "accepted", db.or_(Friend.user_id == user.id, Friend.friend_id == user.id))
        .order_by(Friend.created_at.desc())
    ).scalars()
    return jsonify([_with_user(row, row.friend if row.user_id == user.id else row.user) for row in rows])


@bp.get("/requests")
@login_required
def requests():
    user = current_user()
    pending = db.session.execute(
        db.select(Friend)
        .where(Friend.status == "pending", db.or_(Friend.user_id == user.id, Friend.friend_id == user.id))
        .order_by(Friend.created_at.desc())
    ).scalars().all()
    return jsonify(
        {
            "incoming": [_with_user(r, r.user) for r in pending if r.friend_id == user.id],
            "outgoing": [_with_user(r, r.friend) for r in pending if r.user_id == user.id],
        }
    )
