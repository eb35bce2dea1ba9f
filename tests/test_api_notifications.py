"""
Broadcast Operations Issue Tracker
Tests — Notification API.
"""

from issue_tracker.models import db
from issue_tracker.models.notification import Notification


def _seed(user_id, n=1, **kw):
    items = []
    for i in range(n):
        notif = Notification(user_id=user_id, message=f"msg {i}", type="issue_assigned", **kw)
        db.session.add(notif)
        items.append(notif)
    db.session.commit()
    return items


class TestNotificationApi:
    def test_list_all_paginated(self, client):
        _seed(1, 3)
        _seed(2, 2)
        res = client.get("/api/v1/notifications?limit=2")
        assert res.status_code == 200
        body = res.get_json()
        assert body["total"] == 5
        assert len(body["items"]) == 2

    def test_manual_create(self, client):
        res = client.post("/api/v1/notifications", json={
            "user_id": 4, "message": "Shift handover at 18:00", "type": "announcement",
        })
        assert res.status_code == 201
        body = res.get_json()
        assert body["user_id"] == 4
        assert body["type"] == "announcement"
        assert body["is_read"] is False

    def test_manual_create_requires_fields(self, client):
        res = client.post("/api/v1/notifications", json={"message": "no recipient"})
        assert res.status_code == 400
        assert res.get_json()["required"] == ["user_id", "message"]

    def test_serialized_shape(self, client):
        _seed(6, entity_id=12, entity_type="frequency_issue")
        item = client.get("/api/v1/notifications/user/6").get_json()["items"][0]
        for key in ("user_id", "message", "type", "entity_id", "entity_type", "is_read", "created_at"):
            assert key in item

    def test_unread_for_user_fails_closed(self, client):
        _seed(1)
        res = client.get("/api/v1/notifications/user/not-a-number")
        assert res.status_code == 200
        assert res.get_json() == {"count": 0, "items": []}

    def test_unread_requires_auth(self, client):
        assert client.get("/api/v1/notifications/unread").status_code == 401

    def test_unread_for_current_user(self, client, make_user, auth_headers):
        user = make_user()
        _seed(user.id, 2)
        _seed(user.id + 100)
        res = client.get("/api/v1/notifications/unread", headers=auth_headers(user))
        assert res.status_code == 200
        assert res.get_json()["count"] == 2

        res = client.get("/api/v1/notifications/unread-count", headers=auth_headers(user))
        assert res.get_json() == {"count": 2}

    def test_mark_single_read(self, client, make_user, auth_headers):
        user = make_user()
        [notif] = _seed(user.id)
        res = client.patch(f"/api/v1/notifications/{notif.id}/read", headers=auth_headers(user))
        assert res.status_code == 200
        assert client.get(f"/api/v1/notifications/user/{user.id}").get_json()["count"] == 0

    def test_mark_all_read_with_query_param(self, client):
        _seed(5, 3)
        res = client.patch("/api/v1/notifications/all/read?user_id=5")
        assert res.status_code == 200
        assert client.get("/api/v1/notifications/user/5").get_json()["count"] == 0

    def test_mark_other_users_notification_is_400(self, client, make_user, auth_headers):
        owner, intruder = make_user(), make_user()
        [notif] = _seed(owner.id)
        res = client.patch(f"/api/v1/notifications/{notif.id}/read", headers=auth_headers(intruder))
        assert res.status_code == 400
        db.session.refresh(notif)
        assert notif.is_read is False

    def test_mark_read_without_user_is_401(self, client):
        [notif] = _seed(1)
        assert client.patch(f"/api/v1/notifications/{notif.id}/read").status_code == 401
