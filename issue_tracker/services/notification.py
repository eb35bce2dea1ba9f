"""
Broadcast Operations Issue Tracker
Notification Service.

Assignment fan-out plus the recipient inbox (unread listing, mark-as-read).

Fan-out is best-effort: it runs after the issue has been committed, in its
own commit, and any failure is logged and rolled back without reaching
the caller. The inbox reads fail closed to an empty result.
"""

import logging
from datetime import datetime, timezone

from issue_tracker.models import db
from issue_tracker.models.notification import (
    ENTITY_CAS_ISSUE,
    ENTITY_CHANNEL_ISSUE,
    ENTITY_FREQUENCY_ISSUE,
    NOTIFICATION_TYPE_ISSUE_ASSIGNED,
    Notification,
)
from issue_tracker.services import user_service
from issue_tracker.utils.helpers import parse_int

logger = logging.getLogger(__name__)

UNKNOWN_ACTOR = "Someone"

MESSAGE_TEMPLATES = {
    ENTITY_FREQUENCY_ISSUE: '{actor} assigned you to a frequency issue: "{issue.frequency} - {issue.issue_type}"',
    ENTITY_CHANNEL_ISSUE: '{actor} assigned you to a channel issue: "{issue.channel} - {issue.issue_type}"',
    ENTITY_CAS_ISSUE: '{actor} assigned you to a CAS issue: "{issue.issue_type} - {issue.severity}"',
}
DEFAULT_TEMPLATE = '{actor} assigned you to an issue: "{issue.issue_type}"'


class NotificationService:
    """Stateless service class for notification operations."""

    # ── Create ────────────────────────────────────────────────────────────

    @staticmethod
    def create(*, user_id, message, type=NOTIFICATION_TYPE_ISSUE_ASSIGNED,
               entity_type=None, entity_id=None):
        """
        Create a single notification record.

        Returns:
            The created Notification instance (already committed).
        """
        notif = Notification(
            user_id=user_id,
            message=message,
            type=type,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        db.session.add(notif)
        db.session.commit()
        return notif

    @staticmethod
    def actor_name(actor_id):
        actor = user_service.find_by_id(actor_id)
        return actor.full_name if actor else UNKNOWN_ACTOR

    @staticmethod
    def build_message(issue, entity_type, actor_name):
        template = MESSAGE_TEMPLATES.get(entity_type, DEFAULT_TEMPLATE)
        return template.format(actor=actor_name, issue=issue)

    @staticmethod
    def notify_assignment(user_ids, issue, entity_type, actor_id=None):
        """
        Create one ``issue_assigned`` notification per newly-assigned user.

        Args:
            user_ids: iterable of recipient ids (duplicates collapse to one).
            issue: the committed issue the users were assigned to.
            entity_type: cas_issue / channel_issue / frequency_issue.
            actor_id: user credited with the assignment; "Someone" if unknown.

        Returns:
            List of created Notification instances, or [] on empty input or
            any failure (logged and rolled back, never raised).
        """
        recipients = sorted({uid for uid in (user_ids or ()) if uid is not None})
        if not recipients:
            return []

        try:
            message = NotificationService.build_message(
                issue, entity_type, NotificationService.actor_name(actor_id),
            )
            notifications = []
            for uid in recipients:
                notif = Notification(
                    user_id=uid,
                    message=message,
                    type=NOTIFICATION_TYPE_ISSUE_ASSIGNED,
                    entity_type=entity_type,
                    entity_id=issue.id,
                )
                db.session.add(notif)
                notifications.append(notif)
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.exception(
                "Assignment fan-out failed entity=%s id=%s recipients=%s",
                entity_type, getattr(issue, "id", None), recipients,
                extra={"entity_type": entity_type, "entity_id": getattr(issue, "id", None)},
            )
            return []

        logger.info("Notified %d user(s) of assignment to %s id=%s",
                    len(notifications), entity_type, issue.id,
                    extra={"entity_type": entity_type, "entity_id": issue.id, "user_id": actor_id})
        return notifications

    # ── Query ─────────────────────────────────────────────────────────────

    @staticmethod
    def query_all():
        """All notifications, newest first (paginated by the caller)."""
        return Notification.query.order_by(Notification.created_at.desc(), Notification.id.desc())

    @staticmethod
    def list_unread(user_id):
        """
        Unread notifications of ``user_id``, newest first.

        A missing or non-numeric id, or a storage error, yields [].
        """
        uid = parse_int(user_id)
        if uid is None:
            return []
        try:
            return (
                Notification.query.filter_by(user_id=uid, is_read=False)
                .order_by(Notification.created_at.desc(), Notification.id.desc())
                .all()
            )
        except Exception:
            logger.exception("Failed to load unread notifications for user=%s", uid)
            return []

    @staticmethod
    def unread_count(user_id):
        """Return count of unread notifications (0 for an invalid id)."""
        uid = parse_int(user_id)
        if uid is None:
            return 0
        return Notification.query.filter_by(user_id=uid, is_read=False).count()

    # ── Actions ───────────────────────────────────────────────────────────

    @staticmethod
    def mark_read(notification_id, user_id):
        """
        Mark one notification, or ``"all"`` of a user's notifications, as read.

        A specific id is only marked when it belongs to ``user_id``.

        Returns:
            True on success; False for an invalid id, a notification not
            owned by the user, or a storage failure.
        """
        uid = parse_int(user_id)
        if uid is None:
            return False

        try:
            if notification_id == "all":
                now = datetime.now(timezone.utc)
                Notification.query.filter_by(user_id=uid, is_read=False).update(
                    {"is_read": True, "read_at": now}, synchronize_session="fetch",
                )
                db.session.commit()
                return True

            nid = parse_int(notification_id)
            if nid is None:
                return False
            notif = db.session.get(Notification, nid)
            if notif is None or notif.user_id != uid:
                return False
            if not notif.is_read:
                notif.mark_read()
                db.session.commit()
            return True
        except Exception:
            db.session.rollback()
            logger.exception("Failed to mark notification(s) %s read for user=%s", notification_id, uid)
            return False
