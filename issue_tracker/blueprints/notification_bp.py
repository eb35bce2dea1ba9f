"""
Broadcast Operations Issue Tracker
Notification Blueprint.

Endpoints:
    GET   /api/v1/notifications                    — all notifications (limit/offset)
    POST  /api/v1/notifications                    — manual create
    GET   /api/v1/notifications/unread             — current user's unread inbox
    GET   /api/v1/notifications/unread-count       — current user's unread count
    GET   /api/v1/notifications/user/<user_id>     — unread inbox of any user
    PATCH /api/v1/notifications/<id|all>/read      — mark read for the current user
"""

import logging

from flask import Blueprint, jsonify, request

from issue_tracker.auth import current_user_id, require_auth
from issue_tracker.blueprints import paginate_query, register_error_handlers
from issue_tracker.core.exceptions import ValidationError
from issue_tracker.models.notification import ENTITY_TYPES, NOTIFICATION_TYPE_ISSUE_ASSIGNED
from issue_tracker.services.notification import NotificationService
from issue_tracker.utils.helpers import parse_int

logger = logging.getLogger(__name__)

notification_bp = Blueprint("notifications", __name__, url_prefix="/api/v1/notifications")
register_error_handlers(notification_bp)


def _inbox_response(items):
    return jsonify({"count": len(items), "items": [n.to_dict() for n in items]}), 200


@notification_bp.route("", methods=["GET"])
def list_notifications():
    items, total = paginate_query(NotificationService.query_all())
    return jsonify({"items": [n.to_dict() for n in items], "total": total}), 200


@notification_bp.route("", methods=["POST"])
def create_notification():
    """Create a notification directly (integration testing, admin broadcasts)."""
    data = request.get_json(silent=True) or {}

    user_id = parse_int(data.get("user_id"))
    message = (data.get("message") or "").strip()
    missing = [k for k, v in (("user_id", user_id), ("message", message)) if not v]
    if missing:
        raise ValidationError("Missing required fields", details={"required": ["user_id", "message"],
                                                                  "missing": missing})

    entity_type = data.get("entity_type") or None
    if entity_type and entity_type not in ENTITY_TYPES:
        raise ValidationError("Invalid entity_type", details={"allowed": sorted(ENTITY_TYPES)})

    notif = NotificationService.create(
        user_id=user_id,
        message=message,
        type=data.get("type") or NOTIFICATION_TYPE_ISSUE_ASSIGNED,
        entity_type=entity_type,
        entity_id=parse_int(data.get("entity_id")),
    )
    return jsonify(notif.to_dict()), 201


@notification_bp.route("/unread", methods=["GET"])
@require_auth
def unread_for_current_user():
    return _inbox_response(NotificationService.list_unread(current_user_id()))


@notification_bp.route("/unread-count", methods=["GET"])
@require_auth
def unread_count():
    return jsonify({"count": NotificationService.unread_count(current_user_id())}), 200


@notification_bp.route("/user/<user_id>", methods=["GET"])
def unread_for_user(user_id):
    """Unread inbox of ``user_id``; an invalid id yields an empty inbox."""
    return _inbox_response(NotificationService.list_unread(user_id))


@notification_bp.route("/<notification_id>/read", methods=["PATCH"])
def mark_read(notification_id):
    """Mark one notification, or ``all``, as read for the acting user.

    The user comes from the auth header, falling back to ``?user_id=`` or a
    ``user_id`` body field.
    """
    data = request.get_json(silent=True) or {}
    user_id = current_user_id() or request.args.get("user_id") or data.get("user_id")
    if not user_id:
        return jsonify({"error": "Authentication required"}), 401

    if NotificationService.mark_read(notification_id, user_id):
        return jsonify({"message": "Notification(s) marked as read"}), 200
    return jsonify({"error": "Failed to mark notification(s) as read"}), 400
