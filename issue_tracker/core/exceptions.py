"""
Service-layer exception hierarchy.

Services raise these; blueprints register handlers against them once (see
``issue_tracker.blueprints.register_error_handlers``) and get consistent
HTTP status codes everywhere.

Usage:
    from issue_tracker.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Channel issue", resource_id=42)
    raise ValidationError("Missing required fields", details={"required": [...]})
"""


class NotFoundError(Exception):
    """Raised when the target of an operation does not exist.

    Maps to HTTP 404.

    Args:
        resource: Human-readable entity name (e.g. "CAS issue", "User").
        resource_id: The PK that was looked up.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input fails validation in the service layer.

    Covers missing required fields, values outside a closed vocabulary and
    gated status transitions (e.g. completing a CAS issue without a
    completer). Maps to HTTP 400.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class InvalidReferenceError(Exception):
    """Raised when a referenced record (reporter, assignee, completer) does not exist.

    Distinct from NotFoundError: the operation target exists, but a
    foreign id carried in the payload does not. Maps to HTTP 400.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None,
                 field: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        self.field = field
        msg = f"{resource} not found"
        if resource_id is not None:
            msg += f" (id={resource_id})"
        super().__init__(msg)


class ConflictError(Exception):
    """Raised when an operation would violate a unique constraint.

    Maps to HTTP 409.
    """

    def __init__(self, resource: str, field: str, value: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(f"{resource} with {field}={value!r} already exists")


class AuthenticationError(Exception):
    """Raised when credentials are missing or wrong. Maps to HTTP 401."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class AuthorizationError(Exception):
    """Raised when the authenticated user may not perform an action. Maps to HTTP 403."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)
