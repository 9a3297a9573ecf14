"""
HTTP Basic Authentication.

Optional gate in front of the send endpoint.
"""

import hmac
import json
from functools import wraps
from typing import Any, Callable, Optional

from flask import Response, current_app, request
from werkzeug.datastructures import Authorization

from mailentine.config import AuthSettings
from mailentine.infrastructure.logging import get_logger


logger = get_logger(__name__)

REALM = "Restricted"


def _safe_equals(given: Optional[str], expected: str) -> bool:
    return hmac.compare_digest(
        (given or "").encode("utf-8"),
        expected.encode("utf-8"),
    )


def credentials_match(
    authorization: Optional[Authorization],
    auth_settings: AuthSettings,
) -> bool:
    """Check Basic credentials against the configured pair."""
    if authorization is None or authorization.type != "basic":
        return False
    # Both comparisons always run so timing does not reveal which one failed
    user_ok = _safe_equals(authorization.username, auth_settings.username)
    pass_ok = _safe_equals(authorization.password, auth_settings.password)
    return user_ok and pass_ok


def _unauthorized_response() -> Response:
    response = Response(
        json.dumps({
            "success": False,
            "error": "Unauthorized",
            "error_type": "unauthorized",
        }),
        status=401,
        mimetype="application/json",
    )
    response.headers["WWW-Authenticate"] = f'Basic realm="{REALM}"'
    return response


def requires_basic_auth(func: Callable) -> Callable:
    """
    Decorator enforcing Basic Auth when credentials are configured.

    Usage:
        @api_bp.route("/send-email")
        @requires_basic_auth
        def send_email():
            ...
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        auth_settings: AuthSettings = current_app.config["SETTINGS"].auth

        if auth_settings.enabled and not credentials_match(
            request.authorization,
            auth_settings,
        ):
            logger.warning(
                "Rejected request with missing or invalid credentials",
                extra={"extra_fields": {"path": request.path}}
            )
            return _unauthorized_response()

        return func(*args, **kwargs)

    return wrapper
