"""
Broadcast Operations Issue Tracker
Issue domain models.

Models:
    - IssueBase: abstract columns shared by every issue domain
    - CasIssue: conditional-access-system fault (single assignee, completion audit)
    - ChannelIssue: channel fault (assignee set, hard-deletable)
    - FrequencyIssue: frequency / transmitter fault (assignee set, hard-deletable)

All user references (assignees, reporter, creator, completer) are plain
integer ids without FK constraints.
"""

from datetime import date, datetime, timezone

from issue_tracker.models import db


# ── Constants ────────────────────────────────────────────────────────────────

SEVERITY_LEVELS = ("Low", "Medium", "High")

CAS_ISSUE_TYPES = (
    "Error",
    "Loading... Takes More Time",
    "Loading... no response",
    "Error: disconnected to CAS",
    "Error For One Ic Card",
    "General Error",
    "CAS Down",
)
CAS_STATUS_NEW = "New"
CAS_STATUS_IN_PROGRESS = "In Progress"
CAS_STATUS_COMPLETED = "Completed"
CAS_STATUSES = (CAS_STATUS_NEW, CAS_STATUS_IN_PROGRESS, CAS_STATUS_COMPLETED)

BROADCAST_STATUS_OPEN = "Open"
BROADCAST_STATUS_IN_PROGRESS = "In Progress"
BROADCAST_STATUS_RESOLVED = "Resolved"
BROADCAST_STATUSES = (BROADCAST_STATUS_OPEN, BROADCAST_STATUS_IN_PROGRESS, BROADCAST_STATUS_RESOLVED)

CHANNEL_OPTIONS = ("Channel 15", "Channel 27", "Channel 42", "Channel 78", "Channel 103")
CHANNEL_ISSUE_TYPES = (
    "Mugdi waaye",
    "Lacag la'aan waaye",
    "Jajabaa soo qalaayo",
    "Channalkiisa saxda ma saarno",
)

FREQUENCY_OPTIONS = (
    "Frequency 1",
    "Frequency 2",
    "Frequency 3",
    "Frequency 4",
    "Frequency 5",
    "Frequency 6",
    "All Frequencies",
)
FREQUENCY_ISSUE_TYPES = (
    "Jajab waaye",
    "Mugdi waaye",
    "Dhagax dhigay",
    "Lacag la'aan waaye",
)


def _iso(value):
    return value.isoformat() if value else None


class IssueBase(db.Model):
    """Abstract base for the three issue tables."""

    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True)
    issue_type = db.Column(db.String(100), nullable=False)
    severity = db.Column(db.String(20), nullable=False)
    description = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))

    def _base_dict(self):
        return {
            "id": self.id,
            "issue_type": self.issue_type,
            "severity": self.severity,
            "description": self.description,
            "status": self.status,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class CasIssue(IssueBase):
    """A fault in the conditional-access system. Never deleted (audit retention)."""

    __tablename__ = "cas_issues"

    assigned_to = db.Column(db.Integer, nullable=True, index=True, comment="User id of the assignee")
    reported_by_id = db.Column(db.Integer, nullable=True, comment="User id of the reporter")
    reported_by_email = db.Column(db.String(200), nullable=True)
    status = db.Column(db.String(30), default=CAS_STATUS_NEW, index=True)
    completed_by_id = db.Column(db.Integer, nullable=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    @property
    def assignee_ids(self):
        return [self.assigned_to] if self.assigned_to is not None else []

    @property
    def is_completed(self):
        return self.status == CAS_STATUS_COMPLETED

    def mark_completed(self, completed_by_id):
        self.status = CAS_STATUS_COMPLETED
        self.completed_by_id = completed_by_id
        self.completed_at = datetime.now(timezone.utc)

    def clear_completion(self):
        self.completed_by_id = None
        self.completed_at = None

    def to_dict(self):
        d = self._base_dict()
        d.update({
            "assigned_to": self.assigned_to,
            "reported_by_id": self.reported_by_id,
            "reported_by_email": self.reported_by_email,
            "completed_by_id": self.completed_by_id,
            "completed_at": _iso(self.completed_at),
        })
        return d

    def __repr__(self):
        return f"<CasIssue {self.id}: {self.issue_type} [{self.status}]>"


class _BroadcastIssue(IssueBase):
    """Columns shared by channel and frequency issues."""

    __abstract__ = True

    assigned_to = db.Column(db.JSON, default=list, comment="List of assignee user ids")
    created_by = db.Column(db.Integer, nullable=True)
    date_reported = db.Column(db.Date, default=date.today)
    status = db.Column(db.String(30), default=BROADCAST_STATUS_OPEN, index=True)

    @property
    def assignee_ids(self):
        return list(self.assigned_to or [])

    def to_dict(self):
        d = self._base_dict()
        d.update({
            "assigned_to": self.assignee_ids,
            "created_by": self.created_by,
            "date_reported": _iso(self.date_reported),
        })
        return d


class ChannelIssue(_BroadcastIssue):
    __tablename__ = "channel_issues"

    channel = db.Column(db.String(100), nullable=False, index=True)

    def to_dict(self):
        d = super().to_dict()
        d["channel"] = self.channel
        return d

    def __repr__(self):
        return f"<ChannelIssue {self.id}: {self.channel} [{self.status}]>"


class FrequencyIssue(_BroadcastIssue):
    __tablename__ = "frequency_issues"

    frequency = db.Column(db.String(100), nullable=False, index=True)

    def to_dict(self):
        d = super().to_dict()
        d["frequency"] = self.frequency
        return d

    def __repr__(self):
        return f"<FrequencyIssue {self.id}: {self.frequency} [{self.status}]>"
