"""
Broadcast Operations Issue Tracker
Notification domain model.

Models:
    - Notification: in-app notification record with read tracking
"""

from datetime import datetime, timezone

from issue_tracker.models import db


# ── Constants ────────────────────────────────────────────────────────────────

NOTIFICATION_TYPE_ISSUE_ASSIGNED = "issue_assigned"

ENTITY_CAS_ISSUE = "cas_issue"
ENTITY_CHANNEL_ISSUE = "channel_issue"
ENTITY_FREQUENCY_ISSUE = "frequency_issue"
ENTITY_TYPES = {ENTITY_CAS_ISSUE, ENTITY_CHANNEL_ISSUE, ENTITY_FREQUENCY_ISSUE}


class Notification(db.Model):
    """
    In-app notification entity.

    One record per recipient per event. The message is written once and
    never edited; only the read flag changes afterwards.
    """

    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False, index=True, comment="Recipient user id")
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(50), default=NOTIFICATION_TYPE_ISSUE_ASSIGNED)

    # Link to source entity
    entity_type = db.Column(db.String(30), nullable=True, comment="cas_issue/channel_issue/frequency_issue")
    entity_id = db.Column(db.Integer, nullable=True)

    # Read tracking
    is_read = db.Column(db.Boolean, default=False, index=True)
    read_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))

    def mark_read(self):
        self.is_read = True
        self.read_at = datetime.now(timezone.utc)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "message": self.message,
            "type": self.type,
            "entity_id": self.entity_id,
            "entity_type": self.entity_type,
            "is_read": bool(self.is_read),
            "read_at": self.read_at.isoformat() if self.read_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Notification {self.id}: user={self.user_id} {self.type}>"
