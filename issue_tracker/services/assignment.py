"""
Broadcast Operations Issue Tracker
Assignment differ — who was newly assigned by a write.

Pure functions, no database access. Single-valued assignment (CAS) and
set-valued assignment (channel / frequency) are both normalised to sets so
the same rule applies to every domain.
"""

import json

from issue_tracker.core.exceptions import ValidationError
from issue_tracker.utils.helpers import parse_int


def _as_set(value):
    if value is None or value == "":
        return set()
    if isinstance(value, (list, tuple, set, frozenset)):
        return {v for v in value if v is not None}
    return {value}


def assignee_delta(old, new):
    """Return the members of ``new`` that are absent from ``old``.

    ``new is None`` means the assignee field was not part of the write, so
    nobody is newly assigned. Scalars are treated as sets of size one.

        >>> assignee_delta([7, 9], [7, 9, 11])
        {11}
        >>> assignee_delta(4, 4)
        set()
    """
    if new is None:
        return set()
    return _as_set(new) - _as_set(old)


def normalise_assignees(raw, many=True):
    """Coerce an assignee payload value to ``list[int]`` (many) or ``int | None``.

    Accepts ints, numeric strings, lists of either and, for set-valued
    domains, a JSON-encoded list string as sent by multipart form posts.
    Anything else raises ValidationError.
    """
    if not many:
        if raw is None or raw == "":
            return None
        user_id = parse_int(raw)
        if user_id is None:
            raise ValidationError("assigned_to must be a user id", details={"assigned_to": raw})
        return user_id

    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise ValidationError("assigned_to must be a list of user ids",
                                  details={"assigned_to": raw}) from None
    if not isinstance(raw, list):
        raw = [raw]

    ids = []
    for item in raw:
        user_id = parse_int(item)
        if user_id is None:
            raise ValidationError("assigned_to must be a list of user ids",
                                  details={"assigned_to": raw})
        if user_id not in ids:
            ids.append(user_id)
    return ids
