from __future__ import annotations

"""
Seed-Daten und CLI-Befehle für BuddyLifts.

Ausführung:
    flask --app buddylifts init-db
    flask --app buddylifts seed

Der Seed legt zwei Demo-User an, macht sie zu Freunden und erzeugt für den
ersten ein Training aus Freitext. Mehrfaches Ausführen ändert nichts.
"""

import click
from flask import Flask

from .db import create_tables, db
from .models import Exercise, Friend, Training, User
from .services.exercise_parser import exercises_to_db_format, parse_exercise_input

DEMO_PASSWORD = "buddylifts"

# (E-Mail, Name)
DEMO_USERS: list[tuple[str, str]] = [
    ("alex@example.com", "Alex Demo"),
    ("sam@example.com", "Sam Demo"),
]

DEMO_TRAINING = "Push Day"
DEMO_INPUT = "5x10 bench press at 60kg, 3x12 dips and 4 sets of 8 shoulder press between"


def _get_or_create_user(email: str, name: str) -> tuple[User, bool]:
    user = db.session.execute(db.select(User).where(User.email == email)).scalar_one_or_none()
    if user is not None:
        return user, False
    user = User(email=email, name=name)
    user.set_password(DEMO_PASSWORD)
    db.session.add(user)
    db.session.flush()
    return user, True


def seed_demo_data() -> dict[str, int]:
    """Fügt Demo-Daten ein (idempotent) und liefert, was neu angelegt wurde."""
    created = {"users": 0, "friendships": 0, "trainings": 0, "exercises": 0}

    users = []
    for email, name in DEMO_USERS:
        user, is_new = _get_or_create_user(email, name)
        users.append(user)
        created["users"] += int(is_new)

    first, second = users
    friendship = db.session.execute(
        db.select(Friend).where(Friend.user_id == first.id, Friend.friend_id == second.id)
    ).scalar_one_or_none()
    if friendship is None:
        db.session.add(Friend(user_id=first.id, friend_id=second.id, status="accepted"))
        created["friendships"] += 1

    training = db.session.execute(
        db.select(Training).where(Training.user_id == first.id, Training.name == DEMO_TRAINING)
    ).scalar_one_or_none()
    if training is None:
        training = Training(user_id=first.id, name=DEMO_TRAINING, description="Seeded demo training")
        training.exercises = [
            Exercise(**row) for row in exercises_to_db_format(parse_exercise_input(DEMO_INPUT))
        ]
        db.session.add(training)
        created["trainings"] += 1
        created["exercises"] += len(training.exercises)

    db.session.commit()
    return created


def register_commands(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db_command():
        """Tabellen anlegen (idempotent)."""
        create_tables()
        click.echo("Datenbank initialisiert.")

    @app.cli.command("seed")
    def seed_command():
        """Demo-User, Freundschaft und ein Training einfügen."""
        create_tables()
        created = seed_demo_data()
        click.echo(
            "Seeding abgeschlossen: {users} User, {friendships} Freundschaften, "
            "{trainings} Trainings, {exercises} Übungen neu.".format(**created)
        )
        click.echo(f"Login: {DEMO_USERS[0][0]} / {DEMO_PASSWORD}")
