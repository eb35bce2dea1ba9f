"""
Rate limiting configuration.

Applies per-blueprint and per-route limits using Flask-Limiter. The Limiter
instance is created in ``issue_tracker/__init__.py`` with no default
limits; this module applies granular limits per route category.

Usage:
    from issue_tracker.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

WRITE_LIMIT = "60/minute"
READ_LIMIT = "200/minute"

_ISSUE_BLUEPRINTS = ("cas_issues", "channel_issues", "frequency_issues")


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - Login:            LOGIN_RATE_LIMIT (default 20/minute, brute-force guard)
        - Issue / user API: 60/minute
        - Notifications:    200/minute (polled by the SPA)
        - Health, uploads:  exempt

    Rate limiting is disabled in testing mode.
    """

    if app.config.get("TESTING") or not app.config.get("RATELIMIT_ENABLED", True):
        app.logger.info("Rate limiter disabled (TESTING=%s)", app.config.get("TESTING"))
        return

    login_view = app.view_functions.get("auth.login")
    if login_view:
        app.view_functions["auth.login"] = limiter.limit(app.config["LOGIN_RATE_LIMIT"])(login_view)

    for bp_name in _ISSUE_BLUEPRINTS + ("users",):
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(WRITE_LIMIT)(bp)

    bp = app.blueprints.get("notifications")
    if bp:
        limiter.limit(READ_LIMIT)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info(
        "Rate limiter configured — login: %s, issues/users: %s, notifications: %s",
        app.config["LOGIN_RATE_LIMIT"], WRITE_LIMIT, READ_LIMIT,
    )
