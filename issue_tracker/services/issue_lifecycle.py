"""
Broadcast Operations Issue Tracker
Issue lifecycle service — create / read / list / update / delete for every
issue domain, plus assignment notifications.

One engine serves CAS, channel and frequency issues; per-domain rules come
from the ``IssueDomain`` descriptor passed in by the caller.

Write flow:
    validate payload → apply → commit issue → assignee_delta → notify_assignment

The notification step commits separately and never raises, so a fan-out
failure cannot undo or fail the issue write.
"""

import logging

from issue_tracker.core.exceptions import InvalidReferenceError, NotFoundError, ValidationError
from issue_tracker.models import db
from issue_tracker.services import user_service
from issue_tracker.services.assignment import assignee_delta, normalise_assignees
from issue_tracker.services.notification import NotificationService
from issue_tracker.utils.helpers import commit_or_raise, parse_date, parse_int

logger = logging.getLogger(__name__)

METADATA_USER_FIELDS = ("id", "email", "first_name", "last_name")


# ═════════════════════════════════════════════════════════════════════════════
# Validation helpers
# ═════════════════════════════════════════════════════════════════════════════

def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def _clean(value):
    return value.strip() if isinstance(value, str) else value


def _check_required(domain, data, keys):
    missing = [k for k in keys if _is_blank(data.get(k))]
    if missing:
        raise ValidationError(
            "Missing required fields",
            details={"required": list(domain.required_fields), "missing": missing},
        )


def _check_vocabulary(domain, data):
    checks = (
        ("issue_type", domain.issue_types),
        ("severity", domain.severities),
        ("status", domain.statuses),
    )
    for key, allowed in checks:
        if key in data and not _is_blank(data[key]) and _clean(data[key]) not in allowed:
            raise ValidationError(
                f"Invalid {key}",
                details={key: data[key], "allowed": list(allowed)},
            )


def _resolve_user(raw, field):
    """Turn a payload user id into an existing User or raise."""
    user_id = parse_int(raw)
    if user_id is None:
        raise ValidationError(f"{field} must be a user id", details={field: raw})
    user = user_service.find_by_id(user_id)
    if user is None:
        raise InvalidReferenceError("User", user_id, field=field)
    return user


def _check_assignees(domain, raw):
    assignees = normalise_assignees(raw, many=domain.multi_assignee)
    ids = assignees if domain.multi_assignee else ([assignees] if assignees is not None else [])
    missing = user_service.missing_user_ids(ids)
    if missing:
        raise InvalidReferenceError("User", missing[0], field="assigned_to")
    return assignees


def _parse_report_date(raw):
    value = parse_date(raw)
    if value is None:
        raise ValidationError("Invalid date_reported", details={"date_reported": raw})
    return value


def _log_extra(domain, issue_id, actor_id):
    return {"entity_type": domain.entity_type, "entity_id": issue_id, "user_id": actor_id}


def _notify(domain, issue, old_assignees, new_assignees, actor_id):
    delta = assignee_delta(old_assignees, new_assignees)
    if delta:
        NotificationService.notify_assignment(delta, issue, domain.entity_type, actor_id)


# ═════════════════════════════════════════════════════════════════════════════
# Read
# ═════════════════════════════════════════════════════════════════════════════

def get_issue(domain, issue_id):
    """Return the issue or raise NotFoundError."""
    pk = parse_int(issue_id)
    issue = db.session.get(domain.model, pk) if pk is not None else None
    if issue is None:
        raise NotFoundError(resource=domain.label, resource_id=issue_id)
    return issue


def issue_query(domain, filters=None):
    """Filtered query, most recent first.

    Only the domain's filter fields are honoured; blank values are ignored.
    """
    model = domain.model
    q = model.query
    for key in domain.filter_fields:
        value = (filters or {}).get(key)
        if not _is_blank(value):
            q = q.filter(getattr(model, key) == _clean(value))

    if hasattr(model, "date_reported"):
        q = q.order_by(model.date_reported.desc(), model.created_at.desc(), model.id.desc())
    else:
        q = q.order_by(model.created_at.desc(), model.id.desc())
    return q


def list_issues(domain, filters=None):
    return issue_query(domain, filters).all()


def get_metadata(domain):
    """Vocabularies plus the users that can be picked as assignees."""
    meta = domain.metadata()
    meta["users"] = [u.to_dict(fields=METADATA_USER_FIELDS) for u in user_service.find_all()]
    return meta


# ═════════════════════════════════════════════════════════════════════════════
# Create
# ═════════════════════════════════════════════════════════════════════════════

def create_issue(domain, data, actor_id=None):
    """Validate and persist a new issue, then notify its assignees.

    Args:
        domain: IssueDomain descriptor.
        data: request payload (snake_case keys).
        actor_id: authenticated user id, recorded as creator when the
            payload names none.

    Returns:
        The committed issue.

    Raises:
        ValidationError: missing/blank required field or unknown vocabulary.
        InvalidReferenceError: creator or an assignee does not exist.
    """
    _check_required(domain, data, domain.required_fields)
    _check_vocabulary(domain, data)

    creator = None
    if not _is_blank(data.get(domain.creator_field)):
        creator = _resolve_user(data[domain.creator_field], domain.creator_field)
    elif actor_id is not None:
        creator = user_service.find_by_id(actor_id)

    assignees = None
    if "assigned_to" in data:
        assignees = _check_assignees(domain, data["assigned_to"])

    issue = domain.model()
    for key in domain.required_fields:
        setattr(issue, key, _clean(data[key]))
    issue.status = domain.initial_status
    if domain.multi_assignee:
        issue.assigned_to = assignees or []
    else:
        issue.assigned_to = assignees
    setattr(issue, domain.creator_field, creator.id if creator else None)
    if hasattr(issue, "reported_by_email"):
        issue.reported_by_email = creator.email if creator else None
    if "date_reported" in domain.optional_fields and not _is_blank(data.get("date_reported")):
        issue.date_reported = _parse_report_date(data["date_reported"])

    db.session.add(issue)
    commit_or_raise(f"create {domain.entity_type}")
    logger.info("Created %s id=%s by user=%s", domain.entity_type, issue.id,
                creator.id if creator else None,
                extra=_log_extra(domain, issue.id, creator.id if creator else actor_id))

    if assignees is not None:
        _notify(domain, issue, [], issue.assignee_ids, creator.id if creator else actor_id)
    return issue


# ═════════════════════════════════════════════════════════════════════════════
# Update
# ═════════════════════════════════════════════════════════════════════════════

def update_issue(domain, issue_id, data, actor_id=None):
    """Apply a partial update; only keys present in ``data`` change.

    Any status may follow any status. For domains with a completion status
    (CAS), entering it requires ``completed_by_id`` naming an existing user;
    ``completed_by_id``/``completed_at`` are then set together, and leaving
    the completion status clears both.

    Raises:
        NotFoundError: unknown issue id.
        ValidationError: blank required field, unknown vocabulary, or a
            completion without a completer.
        InvalidReferenceError: assignee or completer does not exist.
    """
    issue = get_issue(domain, issue_id)

    _check_required(domain, data, [k for k in domain.required_fields if k in data])
    _check_vocabulary(domain, data)

    changes = {k: _clean(data[k]) for k in domain.required_fields if k in data}

    if "date_reported" in domain.optional_fields and not _is_blank(data.get("date_reported")):
        changes["date_reported"] = _parse_report_date(data["date_reported"])

    old_assignees = issue.assignee_ids
    new_assignees = None
    if "assigned_to" in data:
        new_assignees = _check_assignees(domain, data["assigned_to"])
        changes["assigned_to"] = new_assignees

    new_status = None if _is_blank(data.get("status")) else _clean(data["status"])
    completer = None
    if new_status is not None and domain.requires_completer:
        entering = new_status == domain.completion_status and issue.status != domain.completion_status
        if entering:
            if _is_blank(data.get("completed_by_id")):
                raise ValidationError(
                    f"completed_by_id is required when setting status to {domain.completion_status}",
                    details={"required": ["completed_by_id"]},
                )
            completer = _resolve_user(data["completed_by_id"], "completed_by_id")

    # Everything validated; apply.
    old_status = issue.status
    for key, value in changes.items():
        setattr(issue, key, value)
    if new_status is not None:
        if completer is not None:
            issue.mark_completed(completer.id)
        else:
            issue.status = new_status
            if (domain.requires_completer and old_status == domain.completion_status
                    and new_status != domain.completion_status):
                issue.clear_completion()

    commit_or_raise(f"update {domain.entity_type}")
    logger.info("Updated %s id=%s fields=%s", domain.entity_type, issue.id,
                sorted(set(changes) | ({"status"} if new_status else set())),
                extra=_log_extra(domain, issue.id, actor_id))

    if new_assignees is not None:
        notify_as = actor_id or (completer.id if completer else None) or getattr(issue, domain.creator_field)
        _notify(domain, issue, old_assignees, issue.assignee_ids, notify_as)
    return issue


# ═════════════════════════════════════════════════════════════════════════════
# Delete
# ═════════════════════════════════════════════════════════════════════════════

def delete_issue(domain, issue_id, actor_id=None):
    """Hard-delete an issue. Domains that retain issues for audit refuse."""
    if not domain.deletable:
        raise ValidationError(f"{domain.label}s cannot be deleted")
    issue = get_issue(domain, issue_id)
    pk = issue.id
    db.session.delete(issue)
    commit_or_raise(f"delete {domain.entity_type}")
    logger.info("Deleted %s id=%s", domain.entity_type, pk,
                extra=_log_extra(domain, pk, actor_id))


# ═════════════════════════════════════════════════════════════════════════════
# Serialization
# ═════════════════════════════════════════════════════════════════════════════

def _referenced_user_ids(domain, issue):
    ids = set(issue.assignee_ids)
    ids.add(getattr(issue, domain.creator_field))
    if domain.requires_completer:
        ids.add(issue.completed_by_id)
    ids.discard(None)
    return ids


def _embed(d, prefix, user):
    d[f"{prefix}_name"] = user.full_name if user else None
    d[f"{prefix}_user"] = user.summary() if user else None


def serialize_issues(domain, issues):
    """``to_dict`` plus display names of assignee(s), creator and completer."""
    ids = set()
    for issue in issues:
        ids |= _referenced_user_ids(domain, issue)
    users = user_service.resolve_users(ids)

    out = []
    for issue in issues:
        d = issue.to_dict()
        if domain.multi_assignee:
            d["assigned_users"] = [users[i].summary() for i in issue.assignee_ids if i in users]
        else:
            _embed(d, "assigned_to", users.get(issue.assigned_to))
        prefix = "reported_by" if domain.creator_field == "reported_by_id" else domain.creator_field
        _embed(d, prefix, users.get(getattr(issue, domain.creator_field)))
        if domain.requires_completer:
            _embed(d, "completed_by", users.get(issue.completed_by_id))
        out.append(d)
    return out


def serialize_issue(domain, issue):
    return serialize_issues(domain, [issue])[0]
