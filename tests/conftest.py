"""
Shared pytest fixtures for the Broadcast Operations Issue Tracker test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - make_user: factory for persisted users
    - auth_headers: builds the acting-user header for a user
"""

import pytest

from issue_tracker import create_app
from issue_tracker.models import db as _db
from issue_tracker.models.user import User
from issue_tracker.utils.crypto import hash_password

DEFAULT_PASSWORD = "Secret123!"

_hash_cache = {}


def _password_hash(password):
    # bcrypt at 12 rounds is slow; hash each distinct test password once
    if password not in _hash_cache:
        _hash_cache[password] = hash_password(password)
    return _hash_cache[password]


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """Create the Flask application once per test session."""
    application = create_app("testing")
    application.config["UPLOAD_FOLDER"] = str(tmp_path_factory.mktemp("uploads"))
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def make_user():
    """Factory: ``make_user(first_name="Amina", role="technical")`` → User."""
    counter = {"n": 0}

    def _make(**kw):
        counter["n"] += 1
        n = counter["n"]
        password = kw.pop("password", DEFAULT_PASSWORD)
        fields = {
            "email": f"user{n}@opsdesk.so",
            "employee_id": f"EMP{n:04d}",
            "first_name": f"User{n}",
            "last_name": "Test",
            "role": "technical",
            "active": True,
        }
        fields.update(kw)
        user = User(password_hash=_password_hash(password), **fields)
        _db.session.add(user)
        _db.session.commit()
        return user

    return _make


@pytest.fixture()
def auth_headers(app):
    """``auth_headers(user)`` → header dict identifying ``user`` as the actor."""
    def _headers(user):
        return {app.config["AUTH_USER_HEADER"]: str(user.id)}
    return _headers
