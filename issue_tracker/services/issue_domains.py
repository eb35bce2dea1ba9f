"""
Broadcast Operations Issue Tracker
Issue domain descriptors.

The lifecycle engine (``issue_lifecycle``) is written once; everything that
differs between CAS, channel and frequency issues lives in an
``IssueDomain`` instance: vocabularies, assignee cardinality, initial
status, completion rule, deletability and the entity-type tag stamped on
notifications.
"""

from dataclasses import dataclass, field

from issue_tracker.models.issue import (
    BROADCAST_STATUS_OPEN,
    BROADCAST_STATUSES,
    CAS_ISSUE_TYPES,
    CAS_STATUS_COMPLETED,
    CAS_STATUS_NEW,
    CAS_STATUSES,
    CHANNEL_ISSUE_TYPES,
    CHANNEL_OPTIONS,
    FREQUENCY_ISSUE_TYPES,
    FREQUENCY_OPTIONS,
    SEVERITY_LEVELS,
    CasIssue,
    ChannelIssue,
    FrequencyIssue,
)
from issue_tracker.models.notification import (
    ENTITY_CAS_ISSUE,
    ENTITY_CHANNEL_ISSUE,
    ENTITY_FREQUENCY_ISSUE,
)


@dataclass(frozen=True)
class IssueDomain:
    name: str
    label: str
    model: type
    entity_type: str
    issue_types: tuple
    statuses: tuple
    initial_status: str
    creator_field: str
    required_fields: tuple
    filter_fields: tuple
    key_field: str | None = None
    key_options: tuple = ()
    severities: tuple = SEVERITY_LEVELS
    multi_assignee: bool = True
    completion_status: str | None = None
    deletable: bool = True
    # Extra writable columns beyond the required fields, assignees and creator
    optional_fields: tuple = field(default=())

    @property
    def requires_completer(self):
        return self.completion_status is not None

    def metadata(self):
        """Static vocabularies exposed to form builders."""
        meta = {
            "issue_types": list(self.issue_types),
            "severities": list(self.severities),
            "statuses": list(self.statuses),
        }
        if self.key_field:
            meta[f"{self.key_field}_options"] = list(self.key_options)
        return meta


CAS_DOMAIN = IssueDomain(
    name="cas",
    label="CAS issue",
    model=CasIssue,
    entity_type=ENTITY_CAS_ISSUE,
    issue_types=CAS_ISSUE_TYPES,
    statuses=CAS_STATUSES,
    initial_status=CAS_STATUS_NEW,
    creator_field="reported_by_id",
    required_fields=("issue_type", "severity", "description"),
    filter_fields=("status", "issue_type", "severity"),
    multi_assignee=False,
    completion_status=CAS_STATUS_COMPLETED,
    deletable=False,
)

CHANNEL_DOMAIN = IssueDomain(
    name="channel",
    label="Channel issue",
    model=ChannelIssue,
    entity_type=ENTITY_CHANNEL_ISSUE,
    issue_types=CHANNEL_ISSUE_TYPES,
    statuses=BROADCAST_STATUSES,
    initial_status=BROADCAST_STATUS_OPEN,
    creator_field="created_by",
    required_fields=("channel", "issue_type", "severity", "description"),
    filter_fields=("status", "channel", "severity"),
    key_field="channel",
    key_options=CHANNEL_OPTIONS,
    optional_fields=("date_reported",),
)

FREQUENCY_DOMAIN = IssueDomain(
    name="frequency",
    label="Frequency issue",
    model=FrequencyIssue,
    entity_type=ENTITY_FREQUENCY_ISSUE,
    issue_types=FREQUENCY_ISSUE_TYPES,
    statuses=BROADCAST_STATUSES,
    initial_status=BROADCAST_STATUS_OPEN,
    creator_field="created_by",
    required_fields=("frequency", "issue_type", "severity", "description"),
    filter_fields=("status", "frequency", "severity"),
    key_field="frequency",
    key_options=FREQUENCY_OPTIONS,
    optional_fields=("date_reported",),
)

DOMAINS = {d.entity_type: d for d in (CAS_DOMAIN, CHANNEL_DOMAIN, FREQUENCY_DOMAIN)}
