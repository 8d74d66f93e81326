"""Flask configuration."""

import os
from pathlib import Path


class Config:
    """Base configuration."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key-change-in-prod")

    # Database - instance folder is at project root
    PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
    INSTANCE_PATH = PROJECT_ROOT / "instance"
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{INSTANCE_PATH}/poisongame.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Match storage
    STORAGE_BACKEND = os.environ.get("POISONGAME_STORAGE_BACKEND", "file")  # 'file' or 'sqlite'
    MATCHES_PATH = os.environ.get("POISONGAME_MATCHES_PATH", str(INSTANCE_PATH / "matches"))
    SETTINGS_PATH = os.environ.get("POISONGAME_SETTINGS_PATH", str(INSTANCE_PATH / "settings"))
    ESCROW_PATH = os.environ.get("POISONGAME_ESCROW_PATH", str(INSTANCE_PATH / "escrow"))
    MATCH_DATABASE_URI = os.environ.get("POISONGAME_DATABASE_URI", str(INSTANCE_PATH / "matches.db"))

    # Deployment
    RULES_VARIANT = os.environ.get("POISONGAME_RULES_VARIANT", "race")
    DEPLOYMENT_ID = os.environ.get("POISONGAME_DEPLOYMENT_ID", "poison-game")
    ADMIN_USERNAME = os.environ.get("POISONGAME_ADMIN", "admin")
    ESCROW_ADDRESS = os.environ.get("POISONGAME_ESCROW_ADDRESS", "local-escrow")
    MATCH_TTL_SECONDS = 30 * 24 * 60 * 60

    # Start intents
    INTENT_MAX_AGE = 15 * 60  # seconds a signed start intent stays valid


class TestConfig(Config):
    """Testing configuration."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    STORAGE_BACKEND = "file"
    RULES_VARIANT = "exhaustive"
    ADMIN_USERNAME = "admin"
