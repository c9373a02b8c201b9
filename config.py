# config.py
import os
BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    # --- Database ---
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{os.path.join(BASE_DIR, 'kinder.db')}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # --- Flask-WTF CSRF / Sessions ---
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")  # change in production

    # --- Logging ---
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # --- Report constants ---
    # Students with this % (or more) of "Needs Practice" ratings are flagged
    ATTENTION_THRESHOLD = 50
    # Classes scoring below this are listed on the school summary (worst N)
    CLASS_ATTENTION_MAX_SCORE = 60
    CLASS_ATTENTION_LIMIT = 5
    TREND_GROUPINGS = ("day", "week", "month")
    DEFAULT_TREND_GROUPING = "week"

    # --- Assessment writes ---
    # Reject assessments dated outside their term's start/end dates
    ENFORCE_TERM_DATES = True


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    WTF_CSRF_ENABLED = False
    LOG_LEVEL = "DEBUG"
