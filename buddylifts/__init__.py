from pathlib import Path

from flask import Flask, jsonify


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)

    # Basis-Konfiguration, danach instance/config.py und BUDDYLIFTS_*-Variablen
    app.config.from_object("buddylifts.config")
    app.config.from_pyfile("config.py", silent=True)
    app.config.from_prefixed_env("BUDDYLIFTS")

    # Test-Config überschreibt alles (z. B. für Tests)
    if test_config:
        app.config.update(test_config)

    # Instance-Ordner sicherstellen
    Path(app.instance_path).mkdir(parents=True, exist_ok=True)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    from .db import db, init_db
    init_db(app)

    from .auth import current_user, init_auth, login_required
    init_auth(app)

    from .errors import register_error_handlers
    register_error_handlers(app)

    from .services.realtime import init_realtime
    init_realtime(app)

    from .services.notifications import init_notifications
    init_notifications(app)

    from .seed import register_commands
    register_commands(app)

    # Healthcheck
    @app.get("/health")
    def health():
        db.session.execute(db.text("SELECT 1"))
        return {"status": "ok"}

    @app.get("/private")
    @login_required
    def private():
        user = current_user()
        return {"message": f"Hello {user.name}, this is private data", "user": user.to_dict()}

    # Startseite: letzte Session + Kennzahlen
    @app.get("/")
    @login_required
    def index():
        from .models import Training
        from .services.access import friend_ids
        from .services.last_session import get_last_session

        user = current_user()
        trainings = db.session.scalar(
            db.select(db.func.count(Training.id)).where(Training.user_id == user.id)
        )
        return jsonify(
            {
                "user": user.to_dict(),
                "last_session": get_last_session(user.id),
                "training_count": trainings or 0,
                "friend_count": len(friend_ids(user.id)),
            }
        )

    # Blueprints registrieren
    from .blueprints.auth import bp as auth_bp
    app.register_blueprint(auth_bp)

    from .blueprints.trainings import bp as trainings_bp
    app.register_blueprint(trainings_bp)

    from .blueprints.exercises import bp as exercises_bp
    app.register_blueprint(exercises_bp)

    from .blueprints.parser import bp as parser_bp
    app.register_blueprint(parser_bp)

    from .blueprints.sessions import bp as sessions_bp
    app.register_blueprint(sessions_bp)

    from .blueprints.progress import bp as progress_bp
    app.register_blueprint(progress_bp)

    from .blueprints.friends import bp as friends_bp
    app.register_blueprint(friends_bp)

    from .blueprints.summary import bp as summary_bp
    app.register_blueprint(summary_bp)

    from .blueprints.feed import bp as feed_bp
    app.register_blueprint(feed_bp)

    return app
