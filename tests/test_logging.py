"""Structured log records: entity + acting user attached by the services."""

import json
import logging

from issue_tracker.middleware.logging_config import JSONFormatter, ReadableFormatter
from issue_tracker.services import issue_lifecycle as lifecycle
from issue_tracker.services.issue_domains import CHANNEL_DOMAIN


def _payload(**kw):
    data = {
        "channel": "Channel 15",
        "issue_type": "Mugdi waaye",
        "severity": "Medium",
        "description": "Black screen on decoder",
    }
    data.update(kw)
    return data


def _records(caplog, logger_name):
    return [r for r in caplog.records if r.name == logger_name]


class TestServiceLogExtras:
    def test_create_update_delete_carry_entity(self, caplog, make_user):
        actor = make_user()
        tech = make_user()
        with caplog.at_level(logging.INFO):
            issue_id = lifecycle.create_issue(CHANNEL_DOMAIN, _payload(), actor_id=actor.id).id
            lifecycle.update_issue(CHANNEL_DOMAIN, issue_id, {"assigned_to": [tech.id]}, actor_id=actor.id)
            lifecycle.delete_issue(CHANNEL_DOMAIN, issue_id, actor_id=actor.id)

        records = _records(caplog, "issue_tracker.services.issue_lifecycle")
        assert [r.getMessage().split()[0] for r in records] == ["Created", "Updated", "Deleted"]
        for r in records:
            assert r.entity_type == "channel_issue"
            assert r.entity_id == issue_id
            assert r.user_id == actor.id

    def test_fan_out_carries_entity(self, caplog, make_user):
        actor = make_user()
        tech = make_user()
        with caplog.at_level(logging.INFO):
            issue = lifecycle.create_issue(
                CHANNEL_DOMAIN, _payload(assigned_to=[tech.id]), actor_id=actor.id,
            )

        [record] = _records(caplog, "issue_tracker.services.notification")
        assert record.entity_type == "channel_issue"
        assert record.entity_id == issue.id
        assert record.user_id == actor.id


class TestFormatters:
    def _record(self, **extra):
        record = logging.LogRecord("issue_tracker.test", logging.INFO, __file__, 1,
                                   "Created %s", ("channel_issue",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_includes_entity_fields(self):
        out = json.loads(JSONFormatter().format(
            self._record(entity_type="channel_issue", entity_id=12, user_id=3),
        ))
        assert out["message"] == "Created channel_issue"
        assert out["entity_type"] == "channel_issue"
        assert out["entity_id"] == 12
        assert out["user_id"] == 3

    def test_json_omits_missing_extras(self):
        out = json.loads(JSONFormatter().format(self._record()))
        assert "entity_type" not in out
        assert "duration_ms" not in out

    def test_readable_shows_entity_tag(self):
        line = ReadableFormatter().format(self._record(entity_type="cas_issue", entity_id=4))
        assert "[cas_issue#4]" in line
