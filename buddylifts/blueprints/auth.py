from flask import Blueprint, current_app, jsonify, request

from ..auth import current_user, login_required, login_user, logout_user
from ..db import db
from ..errors import BadRequest, Conflict, Unauthorized
from ..models import User
from ..services.validation import json_body, optional_str, require_str

bp = Blueprint("auth", __name__, url_prefix="/auth")

MIN_PASSWORD_LENGTH = 8


@bp.post("/register")
def register():
    """Legt einen neuen User an und loggt ihn direkt ein."""
    data = json_body()
    email = require_str(data, "email", "Email is required").lower()
    name = require_str(data, "name", "Name is required")
    password = data.get("password")
    if "@" not in email:
        raise BadRequest("Invalid email address")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise BadRequest(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if db.session.execute(db.select(User.id).where(User.email == email)).first():
        raise Conflict("Email already registered")

    user = User(email=email, name=name, image=optional_str(data, "image"))
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    login_user(user)
    current_app.logger.info("User registered: %s", user.id)
    return jsonify(user.to_dict()), 201


@bp.post("/login")
def login():
    data = json_body()
    email = require_str(data, "email", "Email is required").lower()
    password = data.get("password")
    if not isinstance(password, str) or not password:
        raise BadRequest("Password is required")
    user = db.session.execute(db.select(User).where(User.email == email)).scalar_one_or_none()
    if user is None or not user.check_password(password):
        raise Unauthorized("Invalid email or password")
    login_user(user)
    return jsonify(user.to_dict())


@bp.post("/logout")
def logout():
    logout_user()
    return jsonify({"success": True})


@bp.get("/me")
@login_required
def me():
    return jsonify(current_user().to_dict())


@bp.get("/users/search")
@login_required
def search_users():
    """Suche nach Usern (Name oder E-Mail), z. B. für den Freund-hinzufügen-Dialog."""
    q = (request.args.get("q") or "").strip()
    if len(q) < 2:
        return jsonify([])
    # % und _ sind in der Suche normale Zeichen
    escaped = q.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    users = db.session.execute(
        db.select(User)
        .where(
            User.id != current_user().id,
            db.or_(
                db.func.lower(User.email).like(pattern, escape="\\"),
                db.func.lower(User.name).like(pattern, escape="\\"),
            ),
        )
        .order_by(User.name)
        .limit(10)
    ).scalars()
    return jsonify([{"id": u.id, "name": u.name, "email": u.email, "image": u.image} for u in users])
