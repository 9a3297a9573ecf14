"""
Flask API Routes.

Defines the HTTP endpoints of the notification service.
"""

from typing import Any, Dict, Tuple

from flask import Blueprint, current_app

from mailentine import __version__
from mailentine.api.auth import requires_basic_auth
from mailentine.config import Settings
from mailentine.core.exceptions import InfrastructureError, StateError
from mailentine.infrastructure.logging import get_logger
from mailentine.services import NotificationService


logger = get_logger(__name__)


api_bp = Blueprint("api", __name__)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def _settings() -> Settings:
    return current_app.config["SETTINGS"]


def _error_response(
    message: str,
    status_code: int,
    error_type: str = "error",
) -> Tuple[Dict[str, Any], int]:
    """Create standardized error response."""
    return {
        "success": False,
        "error": message,
        "error_type": error_type,
    }, status_code


def _success_response(
    data: Dict[str, Any],
    status_code: int = 200,
) -> Tuple[Dict[str, Any], int]:
    """Create standardized success response."""
    return {
        "success": True,
        **data,
    }, status_code


# ============================================================================
# Health Check
# ============================================================================

@api_bp.route("/", methods=["GET"])
def root() -> Tuple[str, int, Dict[str, str]]:
    """Liveness probe. Always 200, never authenticated."""
    return "Service is up\n", 200, {"Content-Type": "text/plain; charset=utf-8"}


@api_bp.route("/health", methods=["GET"])
def health_check() -> Tuple[Dict[str, Any], int]:
    """
    Health check endpoint for Cloud Run.

    Used for startup and liveness probes; does not touch the
    schedule files or the SMTP server.
    """
    return _success_response({
        "status": "healthy",
        "service": "mailentine",
        "version": __version__,
    })


# ============================================================================
# Notification Endpoint
# ============================================================================

@api_bp.route("/send-email", methods=ALL_METHODS)
@requires_basic_auth
def send_email() -> Tuple[Dict[str, Any], int]:
    """
    Send today's scheduled message, if there is one.

    Triggered by an external scheduler. Any method is accepted.

    Returns:
        200 with the day number when sent, 204 when nothing is due,
        500 when delivery fails.
    """
    try:
        service = NotificationService(_settings())
        result = service.run()
    except InfrastructureError as e:
        logger.error(
            f"Failed to send email: {e}",
            extra={"extra_fields": {
                "error_type": type(e).__name__,
                **e.details,
            }}
        )
        return _error_response("Failed to send email", 500, "delivery_failed")

    if not result.sent:
        # 204 responses carry no body on the wire
        return _success_response({
            "day": result.day,
            "message": "No email sent for today.",
        }, 204)

    return _success_response({
        "day": result.day,
        "message": f"Email sent for Day {result.day}",
    })


# ============================================================================
# Error Handlers
# ============================================================================

@api_bp.errorhandler(StateError)
def handle_state_error(error: StateError) -> Tuple[Dict[str, Any], int]:
    """Corrupt or unreadable schedule files. Needs manual repair."""
    logger.critical(
        f"Schedule state error: {error}",
        extra={"extra_fields": {
            "error_type": type(error).__name__,
            **error.details,
        }}
    )
    return _error_response(
        "Schedule state is unreadable",
        500,
        "state_error",
    )


@api_bp.errorhandler(Exception)
def handle_unexpected_error(error: Exception) -> Tuple[Dict[str, Any], int]:
    """Handle unexpected errors (500)."""
    logger.exception(
        f"Unexpected error: {error}",
        extra={"extra_fields": {"error_type": type(error).__name__}}
    )
    return _error_response(
        "An unexpected error occurred",
        500,
        "internal_error",
    )
