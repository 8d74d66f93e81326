"""Engine service - one MatchEngine per application.

The engine is built from app config in the application factory and kept in
``app.extensions`` so every request shares its per-session locks. Match
records, settings and escrow locks are all opened on the configured storage
backend, so a restarted app can still settle matches started before it.
"""

import logging

from flask import Flask, current_app

from poisongame.engine.escrow import StoredEscrow
from poisongame.engine.match_engine import MatchEngine
from poisongame.engine.proof import DigestVerifier
from poisongame.engine.rules import get_rules
from poisongame.storage import StorageBackend, StorageSettings, open_repositories

logger = logging.getLogger(__name__)

EXTENSION_KEY = "poisongame"


def storage_settings(config: dict) -> StorageSettings:
    """Storage locations named by Flask config values.

    Raises:
        ValueError: If STORAGE_BACKEND names no backend.
    """
    return StorageSettings(
        backend=StorageBackend.parse(config["STORAGE_BACKEND"]),
        matches_path=config["MATCHES_PATH"],
        settings_path=config["SETTINGS_PATH"],
        escrow_path=config["ESCROW_PATH"],
        database_uri=config["MATCH_DATABASE_URI"],
    )


def build_engine(config: dict) -> tuple[MatchEngine, StoredEscrow]:
    """Create a MatchEngine and its escrow ledger from Flask config values.

    Raises:
        ValueError: If STORAGE_BACKEND or RULES_VARIANT is unknown.
    """
    repos = open_repositories(storage_settings(config))
    escrow = StoredEscrow(repos.escrow)
    engine = MatchEngine(
        matches=repos.matches,
        settings=repos.settings,
        verifier=DigestVerifier(),
        escrow=escrow,
        rules=get_rules(config["RULES_VARIANT"]),
        deployment_id=config["DEPLOYMENT_ID"],
        ttl_seconds=config["MATCH_TTL_SECONDS"],
    )
    return engine, escrow


def init_app(app: Flask) -> MatchEngine:
    """Build the engine, bootstrap deployment settings on first run, attach to ``app``."""
    engine, escrow = build_engine(app.config)
    if not engine.is_initialized():
        engine.bootstrap(app.config["ADMIN_USERNAME"], app.config["ESCROW_ADDRESS"])

    app.extensions[EXTENSION_KEY] = {"engine": engine, "escrow": escrow}
    logger.info(
        f"Match engine ready: rules={engine.rules.variant.value}, "
        f"storage={app.config['STORAGE_BACKEND']}, deployment={engine.deployment_id}, "
        f"verification key {'set' if engine.has_verification_key() else 'NOT set'}"
    )
    return engine


def get_engine() -> MatchEngine:
    """Get the current application's engine."""
    return current_app.extensions[EXTENSION_KEY]["engine"]


def get_escrow() -> StoredEscrow:
    """Get the current application's escrow ledger."""
    return current_app.extensions[EXTENSION_KEY]["escrow"]
