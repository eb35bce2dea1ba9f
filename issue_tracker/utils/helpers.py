"""Shared utility functions for services and blueprints.

parse_int:     lenient integer coercion (returns None on bad input)
parse_date:    ISO / DD.MM.YYYY date parsing (returns None on bad input)
commit_or_raise: commit with rollback + logging, re-raising the failure
"""
import logging
from datetime import date, datetime

from sqlalchemy.exc import SQLAlchemyError

from issue_tracker.models import db

logger = logging.getLogger(__name__)


_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1


def parse_int(value):
    """Coerce ``value`` to int, returning None for anything non-numeric.

    Booleans are rejected even though ``bool`` subclasses ``int``. Values
    outside the signed 64-bit range are rejected too: no primary key can
    hold them and the database driver refuses to bind them.
    """
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, int):
        try:
            value = int(str(value).strip())
        except (ValueError, TypeError):
            return None
    if not _INT64_MIN <= value <= _INT64_MAX:
        return None
    return value


def parse_date(value):
    """Parse a date string (ISO or DD.MM.YYYY) to a date object.

    Returns None for empty/invalid input.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (ValueError, TypeError):
        pass
    try:
        return datetime.fromisoformat(str(value)).date()
    except (ValueError, TypeError):
        pass
    try:
        return datetime.strptime(str(value), "%d.%m.%Y").date()
    except (ValueError, TypeError):
        return None


# ── Database commit helper ───────────────────────────────────────────────────

def commit_or_raise(context):
    """Commit the current session; on failure roll back, log and re-raise.

    Services call this for writes that must not half-apply. The caller's
    blueprint error handler turns the re-raised error into a 500.

    Usage::

        db.session.add(issue)
        commit_or_raise("create channel issue")
    """
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Database error on commit (%s)", context)
        raise
