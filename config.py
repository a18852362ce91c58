import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as exchange.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "exchange.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Header set by the identity gateway with the authenticated actor id
    ACTOR_HEADER = os.getenv("ACTOR_HEADER", "X-Actor-Id")

    # Shared secret the external scheduler sends in X-Cron-Secret
    CRON_SECRET = os.getenv("CRON_SECRET")

    # Calendar: 30 minute slots from 08:00 until 17:00, local time
    TIMEZONE = os.getenv("TIMEZONE", "America/Sao_Paulo")
    OPENING_HOUR = int(os.getenv("OPENING_HOUR", "8"))
    CLOSING_HOUR = int(os.getenv("CLOSING_HOUR", "17"))
    SLOT_MINUTES = int(os.getenv("SLOT_MINUTES", "30"))

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
    MAIL_SENDER_NAME = os.getenv("MAIL_SENDER_NAME", "Exchange Desk")
    ORG_SIGNATURE = os.getenv("ORG_SIGNATURE", "Functional Exchange Desk")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Basic app settings
    DEBUG = False
