"""
E-Mail-Benachrichtigungen rund um Live-Sessions.

- notify_join: der Host erfährt, wer seiner Session beigetreten ist
- notify_complete: jeder Teilnehmer bekommt Platz, Erfüllung und Session-Statistik

Versand über Flask-Mail. Fehler beim Versand werden geloggt und brechen den
Request nicht ab; ist NOTIFICATIONS_ENABLED aus, wird gar nichts verschickt.
"""

from __future__ import annotations

import logging
import smtplib
from datetime import datetime
from typing import Any, Dict, List, Optional

from flask import Flask, current_app, render_template
from flask_mail import Mail, Message

from .metrics import round_half_up
from .summary import ranked, session_summaries

logger = logging.getLogger(__name__)

mail = Mail()

RANK_EMOJI = {1: "\U0001F3C6", 2: "\U0001F948", 3: "\U0001F949"}
CLAP = "\U0001F44F"


def init_notifications(app: Flask) -> None:
    mail.init_app(app)


def rank_emoji(rank: int) -> str:
    return RANK_EMOJI.get(rank, CLAP)


def format_duration(started_at: Optional[datetime], completed_at: Optional[datetime]) -> str:
    """'45 minutes' unter einer Stunde, sonst '1h 30m'; leer ohne Start/Ende."""
    if started_at is None or completed_at is None:
        return ""
    minutes = round_half_up((completed_at - started_at).total_seconds() / 60)
    if minutes < 60:
        return f"{minutes} minutes"
    return f"{minutes // 60}h {minutes % 60}m"


def training_url(training_id: str) -> str:
    return f"{current_app.config['APP_BASE_URL'].rstrip('/')}/trainings/{training_id}/session"


def _send(message: Message) -> bool:
    if not current_app.config.get("NOTIFICATIONS_ENABLED", True):
        return False
    try:
        mail.send(message)
    except (smtplib.SMTPException, OSError) as e:
        logger.warning("Notification not sent to %s (%s): %s", message.recipients, message.subject, e)
        return False
    logger.info("Notification sent to %s: %s", message.recipients, message.subject)
    return True


def notify_join(session, participant) -> bool:
    """Mail an den Host, wenn jemand anderes der Session beitritt."""
    if participant.user_id == session.host_user_id:
        logger.debug("Host joined session %s, no notification", session.id)
        return False
    host = session.host
    if host is None or not host.email:
        logger.warning("Session %s has no host email, no join notification", session.id)
        return False

    name = participant.user.name
    message = Message(
        subject=f"{name} joined your training session!",
        recipients=[host.email],
        body=render_template(
            "email/participant_joined.txt",
            host=host,
            participant_name=name,
            training=session.training,
            role=participant.role,
            joined_at=participant.joined_at,
            url=training_url(session.training_id),
        ),
    )
    return _send(message)


def completion_stats(session) -> List[Dict[str, Any]]:
    """
    Teilnehmer nach Gesamt-Erfüllung sortiert (bei Gleichstand Beitrittsreihenfolge),
    mit Platz, Rolle, E-Mail und geschafften/geplanten Sätzen.
    """
    by_user = {p.user_id: p for p in session.participants}
    total_sets = sum(ex.target_sets for ex in session.training.exercises)
    stats = []
    for rank, summary in enumerate(ranked(session_summaries(session)), start=1):
        participant = by_user[summary["user_id"]]
        stats.append(
            {
                "rank": rank,
                "emoji": rank_emoji(rank),
                "user_id": summary["user_id"],
                "name": summary["user_name"],
                "email": participant.user.email,
                "role": participant.role,
                "completion": summary["overall_completion"],
                "completed_sets": sum(len(ex["completed_reps"]) for ex in summary["exercises"]),
                "total_sets": total_sets,
            }
        )
    return stats


def notify_complete(session) -> int:
    """Abschluss-Mail an jeden Teilnehmer; liefert die Anzahl verschickter Mails."""
    stats = completion_stats(session)
    if not stats:
        return 0

    average = round_half_up(sum(s["completion"] for s in stats) / len(stats))
    gap = abs(stats[0]["completion"] - stats[1]["completion"]) if len(stats) > 1 else None
    context = {
        "training": session.training,
        "duration": format_duration(session.started_at, session.completed_at),
        "team": stats,
        "participant_count": len(stats),
        "exercise_count": len(session.training.exercises),
        "average": average,
        "gap": gap,
        "url": training_url(session.training_id),
    }

    sent = 0
    for stat in stats:
        if not stat["email"]:
            continue
        message = Message(
            subject=f"Training Complete! {stat['emoji']} You finished #{stat['rank']}",
            recipients=[stat["email"]],
            body=render_template(
                "email/session_complete.txt",
                me=stat,
                is_top=stat["rank"] == 1,
                **context,
            ),
        )
        if _send(message):
            sent += 1
    return sent
