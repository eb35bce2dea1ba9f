"""
User Service — directory lookups, registration, profile/role updates, login.

The issue services only need the read side (``find_by_id``, ``find_all``,
``resolve_users``); the write side backs the users and auth blueprints.
"""

import logging
from datetime import datetime, timezone

from email_validator import EmailNotValidError, validate_email

from issue_tracker.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from issue_tracker.models import db
from issue_tracker.models.user import ROLE_ADMIN, ROLES, User
from issue_tracker.utils.crypto import hash_password, verify_password
from issue_tracker.utils.helpers import commit_or_raise, parse_int

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("first_name", "last_name", "phone_number", "avatar", "work_experience")


# ═══════════════════════════════════════════════════════════════
# Lookups
# ═══════════════════════════════════════════════════════════════
def find_by_id(user_id) -> User | None:
    """Find a user by id. Non-numeric ids resolve to None."""
    pk = parse_int(user_id)
    if pk is None:
        return None
    return db.session.get(User, pk)


def find_all(role: str | None = None) -> list[User]:
    """All users, newest first, optionally restricted to one role."""
    q = User.query
    if role:
        q = q.filter_by(role=role)
    return q.order_by(User.created_at.desc(), User.id.desc()).all()


def resolve_users(user_ids) -> dict[int, User]:
    """Batch lookup: ``{id: User}`` for the ids that exist."""
    ids = {i for i in user_ids if i is not None}
    if not ids:
        return {}
    return {u.id: u for u in User.query.filter(User.id.in_(ids)).all()}


def missing_user_ids(user_ids) -> list[int]:
    """Ids from ``user_ids`` with no matching user, in input order."""
    found = resolve_users(user_ids)
    return [i for i in user_ids if i not in found]


def get_user(user_id) -> User:
    user = find_by_id(user_id)
    if not user:
        raise NotFoundError(resource="User", resource_id=user_id)
    return user


def get_users_by_role(role: str) -> list[User]:
    return find_all(role=normalise_role(role))


# ═══════════════════════════════════════════════════════════════
# Validation helpers
# ═══════════════════════════════════════════════════════════════
def normalise_role(role) -> str:
    """Lower-case and validate a role name."""
    value = str(role or "").strip().lower()
    if value not in ROLES:
        raise ValidationError("Invalid role", details={"valid_roles": list(ROLES)})
    return value


def _normalise_email(email):
    if email is None or str(email).strip() == "":
        return None
    try:
        return validate_email(str(email).strip(), check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}", details={"email": email}) from None


def _blank_to_none(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _ensure_unique(email, employee_id, exclude_id=None):
    if email:
        q = User.query.filter(User.email == email)
        if exclude_id is not None:
            q = q.filter(User.id != exclude_id)
        if q.first():
            raise ConflictError("User", "email", email)
    if employee_id:
        q = User.query.filter(User.employee_id == employee_id)
        if exclude_id is not None:
            q = q.filter(User.id != exclude_id)
        if q.first():
            raise ConflictError("User", "employee_id", employee_id)


def _parse_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


# ═══════════════════════════════════════════════════════════════
# User CRUD
# ═══════════════════════════════════════════════════════════════
def create_user(data: dict, avatar_url: str | None = None) -> User:
    """Register a new user.

    Password is required. Role defaults to ``admin`` and is matched
    case-insensitively. Email (when given) must be well-formed; email and
    employee id must both be unique.
    """
    password = data.get("password")
    if not password:
        raise ValidationError("Password is required", details={"required": ["password"]})

    email = _normalise_email(data.get("email"))
    employee_id = _blank_to_none(data.get("employee_id"))
    role = normalise_role(data["role"]) if data.get("role") else ROLE_ADMIN
    _ensure_unique(email, employee_id)

    user = User(
        email=email,
        employee_id=employee_id,
        password_hash=hash_password(str(password)),
        role=role,
        active=True,
    )
    for key in _PROFILE_FIELDS:
        if key in data:
            setattr(user, key, data[key])
    if avatar_url:
        user.avatar = avatar_url

    db.session.add(user)
    commit_or_raise("create user")
    logger.info("User registered id=%s role=%s", user.id, user.role)
    return user


def update_user(user_id, data: dict, avatar_url: str | None = None) -> User:
    """Partial profile update. Only keys present in ``data`` change."""
    user = get_user(user_id)

    email = _normalise_email(data["email"]) if "email" in data else user.email
    employee_id = _blank_to_none(data["employee_id"]) if "employee_id" in data else user.employee_id
    _ensure_unique(
        email if email != user.email else None,
        employee_id if employee_id != user.employee_id else None,
        exclude_id=user.id,
    )
    user.email = email
    user.employee_id = employee_id

    if data.get("role"):
        user.role = normalise_role(data["role"])
    if "active" in data:
        user.active = _parse_bool(data["active"])
    if data.get("password"):
        user.password_hash = hash_password(str(data["password"]))
    for key in _PROFILE_FIELDS:
        if key in data:
            setattr(user, key, data[key])
    if avatar_url:
        user.avatar = avatar_url

    commit_or_raise("update user")
    return user


def update_role(user_id, role) -> User:
    if not role:
        raise ValidationError("Role is required", details={"required": ["role"]})
    normalised = normalise_role(role)
    user = get_user(user_id)
    user.role = normalised
    commit_or_raise("update user role")
    logger.info("User id=%s role changed to %s", user.id, normalised)
    return user


def delete_user(user_id) -> None:
    """Hard delete. Issues keep their plain-integer references to the user."""
    user = get_user(user_id)
    db.session.delete(user)
    commit_or_raise("delete user")
    logger.info("User id=%s deleted", user_id)


# ═══════════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════════
def authenticate(password, email=None, employee_id=None) -> User:
    """Resolve a user by email or employee id and verify the password.

    Raises:
        ValidationError: neither identifier, or no password, supplied.
        AuthenticationError: unknown user or wrong password.
        AuthorizationError: account disabled.
    """
    if not email and not employee_id:
        raise ValidationError("Either email or employee_id is required")
    if not password:
        raise ValidationError("Password is required", details={"required": ["password"]})

    q = User.query
    if email:
        q = q.filter(db.func.lower(User.email) == str(email).strip().lower())
    if employee_id:
        q = q.filter(User.employee_id == str(employee_id).strip())
    user = q.first()

    if not user:
        raise AuthenticationError()
    if not user.active:
        raise AuthorizationError("Account is disabled. Please contact administrator.")
    if not verify_password(str(password), user.password_hash):
        logger.warning("Failed login for user id=%s", user.id)
        raise AuthenticationError()

    user.last_login_at = datetime.now(timezone.utc)
    commit_or_raise("stamp last login")
    return user
