"""
Flask Application Factory.

Creates and configures the Flask application for Cloud Run.
"""

import signal
import sys
from typing import Optional

from flask import Flask

from mailentine.api import api_bp
from mailentine.config import Settings, load_settings
from mailentine.core.day_count import resolve_timezone
from mailentine.infrastructure.logging import log_request_context, logger


def _handle_sigterm(signum: int, frame) -> None:
    """
    Handle SIGTERM for graceful shutdown on Cloud Run.

    Cloud Run sends SIGTERM before stopping the container.
    """
    logger.info(
        "Received SIGTERM, shutting down gracefully",
        extra={"extra_fields": {"signal": signum}}
    )
    sys.exit(0)


signal.signal(signal.SIGTERM, _handle_sigterm)


def _warn_about_settings(settings: Settings) -> None:
    if not settings.auth.enabled:
        logger.warning("Basic Auth credentials not set, /send-email is unauthenticated")
    elif settings.auth.is_partial:
        logger.warning(
            "Only one of BASIC_AUTH_USER and BASIC_AUTH_PASS is set, "
            "clients must send the other one empty"
        )
    if not settings.smtp.verify_tls:
        logger.warning(
            "SMTP_VERIFY_TLS is false, STARTTLS will accept any server certificate"
        )
    if not settings.smtp.is_configured:
        logger.warning("SMTP sender or receiver settings are incomplete")


def create_app(
    config: Optional[dict] = None,
    settings: Optional[Settings] = None,
) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config: Optional Flask configuration overrides.
        settings: Service settings; read from the environment if omitted.

    Returns:
        Configured Flask application.

    Raises:
        ConfigurationError: If SCHEDULE_TIMEZONE names an unknown zone.
    """
    settings = settings or load_settings()

    # Fail at startup rather than on the first scheduled call
    resolve_timezone(settings.schedule.timezone)

    app = Flask(__name__)
    app.json.sort_keys = False
    app.config["SETTINGS"] = settings

    if config:
        app.config.update(config)

    log_request_context(app)

    app.register_blueprint(api_bp)

    _warn_about_settings(settings)
    logger.info(
        "Application initialized",
        extra={"extra_fields": {
            "environment": settings.environment,
            "state_file": settings.schedule.state_file,
            "messages_file": settings.schedule.messages_file,
            "smtp_host": settings.smtp.host,
            "smtp_port": settings.smtp.port,
        }}
    )

    return app


if __name__ == "__main__":
    app = create_app()
    settings: Settings = app.config["SETTINGS"]

    logger.info(f"Server starting on port {settings.port}")
    app.run(
        host="0.0.0.0",
        port=settings.port,
        debug=settings.debug,
    )
