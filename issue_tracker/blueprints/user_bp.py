"""
Broadcast Operations Issue Tracker
Users Blueprint — directory listing, registration, profile and role updates.

Endpoints:
    GET    /api/v1/users                 — all users (?role= filter)
    GET    /api/v1/users/roles           — role vocabulary
    GET    /api/v1/users/role/<role>     — users holding a role
    GET    /api/v1/users/<id>            — detail
    POST   /api/v1/users                 — register (JSON, or multipart with ``avatar``)
    PUT    /api/v1/users/<id>            — partial update (JSON or multipart)
    PATCH  /api/v1/users/<id>/role       — change role
    DELETE /api/v1/users/<id>            — delete
    GET    /uploads/avatars/<filename>   — serve stored avatars
"""

import logging

from flask import Blueprint, current_app, jsonify, request, send_from_directory

from issue_tracker.blueprints import register_error_handlers
from issue_tracker.models.user import ROLES
from issue_tracker.services import user_service
from issue_tracker.utils.uploads import avatar_dir, save_avatar

logger = logging.getLogger(__name__)

user_bp = Blueprint("users", __name__, url_prefix="/api/v1/users")
register_error_handlers(user_bp)

uploads_bp = Blueprint("uploads", __name__, url_prefix="/uploads")


def _payload_and_avatar():
    """Request fields plus the stored avatar URL (None when no file sent)."""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict() if request.form else {}
    avatar_url = save_avatar(
        request.files.get("avatar"),
        current_app.config["UPLOAD_FOLDER"],
        request.host_url,
    )
    return (data if isinstance(data, dict) else {}), avatar_url


@user_bp.route("", methods=["GET"])
def list_users():
    role = request.args.get("role")
    users = user_service.get_users_by_role(role) if role else user_service.find_all()
    return jsonify([u.to_dict() for u in users]), 200


@user_bp.route("/roles", methods=["GET"])
def list_roles():
    return jsonify({"roles": list(ROLES)}), 200


@user_bp.route("/role/<role>", methods=["GET"])
def users_by_role(role):
    return jsonify([u.to_dict() for u in user_service.get_users_by_role(role)]), 200


@user_bp.route("/<int:user_id>", methods=["GET"])
def get_user(user_id):
    return jsonify(user_service.get_user(user_id).to_dict()), 200


@user_bp.route("", methods=["POST"])
def create_user():
    data, avatar_url = _payload_and_avatar()
    user = user_service.create_user(data, avatar_url=avatar_url)
    return jsonify(user.to_dict()), 201


@user_bp.route("/<int:user_id>", methods=["PUT"])
def update_user(user_id):
    data, avatar_url = _payload_and_avatar()
    user = user_service.update_user(user_id, data, avatar_url=avatar_url)
    return jsonify(user.to_dict()), 200


@user_bp.route("/<int:user_id>/role", methods=["PATCH"])
def update_user_role(user_id):
    data = request.get_json(silent=True) or {}
    user = user_service.update_role(user_id, data.get("role"))
    return jsonify(user.to_dict()), 200


@user_bp.route("/<int:user_id>", methods=["DELETE"])
def delete_user(user_id):
    user_service.delete_user(user_id)
    return jsonify({"message": "User deleted"}), 200


@uploads_bp.route("/avatars/<path:filename>", methods=["GET"])
def serve_avatar(filename):
    return send_from_directory(avatar_dir(current_app.config["UPLOAD_FOLDER"]), filename)
