"""
Broadcast Operations Issue Tracker
User model — identity, display name and role classification.

Issues reference users by plain integer ids (no FK): deleting a user is
neither cascaded to nor blocked by the issues that mention them.
"""

from datetime import datetime, timezone

from issue_tracker.models import db


# ── Constants ────────────────────────────────────────────────────────────────

ROLE_ADMIN = "admin"
ROLE_CUSTOMER_SUPPORT = "customer_support"
ROLE_TECHNICAL = "technical"

ROLES = (ROLE_ADMIN, ROLE_CUSTOMER_SUPPORT, ROLE_TECHNICAL)

UNKNOWN_NAME = "Unknown"


class User(db.Model):
    __tablename__ = "app_users"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.String(50), unique=True, nullable=True)
    email = db.Column(db.String(200), unique=True, nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)
    first_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    phone_number = db.Column(db.String(50))
    avatar = db.Column(db.String(500), comment="URL of the uploaded avatar image")
    work_experience = db.Column(db.Text)
    role = db.Column(db.String(30), nullable=False, default=ROLE_ADMIN, index=True)
    active = db.Column(db.Boolean, default=True)
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))

    @property
    def full_name(self):
        """``"First Last"`` with blanks dropped, or ``"Unknown"``."""
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or UNKNOWN_NAME

    def summary(self):
        """Compact reference embedded in issue payloads."""
        return {"id": self.id, "name": self.full_name, "email": self.email}

    def to_dict(self, fields=None):
        d = {
            "id": self.id,
            "employee_id": self.employee_id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "phone_number": self.phone_number,
            "avatar": self.avatar,
            "work_experience": self.work_experience,
            "role": self.role,
            "active": bool(self.active) if self.active is not None else True,
            "last_login_at": self.last_login_at.isoformat() if self.last_login_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if fields:
            return {k: d[k] for k in fields if k in d}
        return d

    def __repr__(self):
        return f"<User {self.id}: {self.role}>"
