"""
Broadcast Operations Issue Tracker
Authentication & Authorization Middleware.

Provides:
    - Actor resolution from the user-id request header (AUTH_USER_HEADER,
      default ``X-User-ID``), set by the front-end after login
    - ``require_auth`` decorator (401 without a valid actor)
    - ``require_role`` decorator (403 unless the actor holds one of the
      roles; admin always passes)

Security model:
    - The header is trusted as-is: this service sits behind the operations
      network's reverse proxy and does not issue tokens.
    - Issue and notification services never enforce roles themselves; routes
      opt in with the decorators below.
"""

import functools
import logging

from flask import current_app, g, jsonify, request

from issue_tracker.models.user import ROLE_ADMIN
from issue_tracker.services import user_service

logger = logging.getLogger(__name__)


def _header_user_id():
    header = current_app.config.get("AUTH_USER_HEADER", "X-User-ID")
    return request.headers.get(header) or request.headers.get("user-id")


def current_user_id():
    """Id of the acting user for this request, or None."""
    return getattr(g, "current_user_id", None)


def current_user():
    return getattr(g, "current_user", None)


# ── Authentication decorator ─────────────────────────────────────────────────

def require_auth(f):
    """
    Decorator: require a resolvable acting user for the endpoint.

    The actor is resolved once per request by the ``init_auth`` hook.
    """
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        if not _header_user_id():
            return jsonify({"error": "Authentication required"}), 401
        if current_user() is None:
            return jsonify({"error": "Invalid authentication"}), 401
        return f(*args, **kwargs)

    return decorated


def require_role(*roles):
    """
    Decorator: require one of ``roles``. Admins pass every role check.

    Usage:
        @require_auth
        @require_role("technical")
        def technical_only(): ...
    """
    def decorator(f):
        @functools.wraps(f)
        def decorated(*args, **kwargs):
            user = current_user()
            if user is None:
                return jsonify({"error": "Authentication required"}), 401

            if user.role != ROLE_ADMIN and user.role not in roles:
                logger.warning(
                    "Access denied: role '%s' tried to access %s (requires %s)",
                    user.role, request.path, ", ".join(roles),
                )
                return jsonify({"error": "Access denied", "required_role": list(roles)}), 403

            return f(*args, **kwargs)
        return decorated
    return decorator


# ── App-level before_request hook installer ──────────────────────────────────

def init_auth(app):
    """
    Install actor resolution on the Flask app.

    Every /api/ request gets ``g.current_user`` / ``g.current_user_id``
    (None when the header is absent or names no user). Rejection is left
    to ``require_auth`` so anonymous routes keep working.
    """
    @app.before_request
    def _resolve_actor():
        g.current_user = None
        g.current_user_id = None
        if not request.path.startswith("/api/") or request.method == "OPTIONS":
            return None

        raw = _header_user_id()
        if not raw:
            return None
        user = user_service.find_by_id(raw)
        if user is None:
            logger.debug("Unknown user id in auth header: %r", raw)
            return None
        g.current_user = user
        g.current_user_id = user.id
        return None

    logger.info("Auth middleware installed (header=%s)", app.config.get("AUTH_USER_HEADER"))
