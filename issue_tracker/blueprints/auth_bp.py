"""
Auth Blueprint — login and role probes.

Endpoints:
  POST /api/v1/auth/login       — email or employee id + password → user profile
  GET  /api/v1/auth/me          — current user profile (from the auth header)
  GET  /api/v1/auth/admin       — 200 for admins
  GET  /api/v1/auth/technical   — 200 for technical staff (and admins)
  GET  /api/v1/auth/support     — 200 for customer support (and admins)

The front-end stores the returned user id and sends it back in the
AUTH_USER_HEADER on every subsequent request.
"""

from flask import Blueprint, jsonify, request

from issue_tracker.auth import current_user, require_auth, require_role
from issue_tracker.blueprints import register_error_handlers
from issue_tracker.models.user import ROLE_ADMIN, ROLE_CUSTOMER_SUPPORT, ROLE_TECHNICAL
from issue_tracker.services import user_service

auth_bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")
register_error_handlers(auth_bp)


# ═══════════════════════════════════════════════════════════════
# POST /api/v1/auth/login
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Authenticate with email or employee id + password.

    Body: { "email": "...", "password": "..." }  or
          { "employee_id": "...", "password": "..." }
    """
    data = request.get_json(silent=True) or {}
    user = user_service.authenticate(
        data.get("password"),
        email=str(data.get("email") or "").strip() or None,
        employee_id=str(data.get("employee_id") or "").strip() or None,
    )
    return jsonify({"message": "Login successful", "user": user.to_dict()}), 200


# ═══════════════════════════════════════════════════════════════
# GET /api/v1/auth/me + role probes
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    return jsonify(current_user().to_dict()), 200


@auth_bp.route("/admin", methods=["GET"])
@require_auth
@require_role(ROLE_ADMIN)
def admin_probe():
    return jsonify({"message": "Admin access granted"}), 200


@auth_bp.route("/technical", methods=["GET"])
@require_auth
@require_role(ROLE_TECHNICAL)
def technical_probe():
    return jsonify({"message": "Technical access granted"}), 200


@auth_bp.route("/support", methods=["GET"])
@require_auth
@require_role(ROLE_CUSTOMER_SUPPORT)
def support_probe():
    return jsonify({"message": "Customer support access granted"}), 200
