# buddylifts/auth.py
from __future__ import annotations

import functools
from typing import Callable, Optional

from flask import Flask, g, session

from .db import db
from .errors import Unauthorized
from .models import User


def load_current_user() -> None:
    """Lädt den eingeloggten User aus dem signierten Session-Cookie nach g.user."""
    user_id = session.get("user_id")
    g.user = db.session.get(User, user_id) if user_id else None


def current_user() -> Optional[User]:
    return getattr(g, "user", None)


def login_required(view: Callable) -> Callable:
    @functools.wraps(view)
    def wrapped(*args, **kwargs):
        if current_user() is None:
            raise Unauthorized("You must be logged in")
        return view(*args, **kwargs)

    return wrapped


def login_user(user: User) -> None:
    session.clear()
    session["user_id"] = user.id
    session.permanent = True
    g.user = user


def logout_user() -> None:
    session.clear()
    g.user = None


def init_auth(app: Flask) -> None:
    app.before_request(load_current_user)
