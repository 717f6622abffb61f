"""
BuddyLifts – Standardkonfiguration
----------------------------------
Defaults, die `create_app` zuerst lädt. Danach greifen (in dieser Reihenfolge):

1. `instance/config.py` (lokal, nicht im Repository)
2. Umgebungsvariablen mit Präfix `BUDDYLIFTS_`, z. B. `BUDDYLIFTS_SECRET_KEY`
3. das `test_config`-Mapping aus den Tests
"""

# Flask-Grundeinstellungen
SECRET_KEY = "dev"  # für Produktivbetrieb über BUDDYLIFTS_SECRET_KEY setzen
TESTING = False

# Datenbank: Dateiname relativ zum instance-Ordner.
# SQLALCHEMY_DATABASE_URI (falls gesetzt) hat Vorrang, z. B. für Postgres.
DATABASE = "buddylifts.db"
SQLALCHEMY_DATABASE_URI = None
SQLALCHEMY_TRACK_MODIFICATIONS = False

# Logging
LOG_LEVEL = "INFO"

# Textparser für Übungen (Pause nach jeder Übung bei "between")
DEFAULT_REST_SECONDS = 60
PARSER_MIN_INPUT = 3
PARSER_MAX_INPUT = 500

# Realtime (Server-Sent Events)
REALTIME_POLL_SECONDS = 1.0
REALTIME_HEARTBEAT_SECONDS = 15.0

# Cookies
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = "Lax"

# Benachrichtigungen per E-Mail (Flask-Mail)
NOTIFICATIONS_ENABLED = True
MAIL_SERVER = "localhost"
MAIL_PORT = 25
MAIL_USE_TLS = False
MAIL_DEFAULT_SENDER = "BuddyLifts <noreply@buddylifts.local>"
APP_BASE_URL = "http://localhost:5000"  # für Links in den Mails
