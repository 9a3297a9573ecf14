"""
API Layer.

Flask HTTP endpoints, Basic Auth gate and error handling.
"""

# api_bp is resolved lazily so importing mailentine.api.auth does not
# pull in the routes and the services layer.

__all__ = ["api_bp"]


def __getattr__(name: str):
    """Lazy import of the blueprint."""
    if name == "api_bp":
        from mailentine.api.routes import api_bp
        return api_bp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
