"""
Broadcast Operations Issue Tracker
Issue blueprints — one per issue domain, built by a single factory.

Endpoints (per domain prefix: /api/v1/cas-issues, /channel-issues, /frequency-issues):
    GET    /metadata      — vocabularies, statuses, domain options, assignable users
    GET    /              — list (filters: status, domain key, severity; limit/offset)
    POST   /              — create
    GET    /<id>          — detail
    PUT    /<id>          — partial update
    DELETE /<id>          — hard delete (channel / frequency only)

Request bodies are JSON or multipart/form-data (the app-level guard answers
415 to anything else, urlencoded included). Keys are snake_case. camelCase
names are not translated: unknown keys are ignored, so a required field sent
under its camelCase name is reported missing (400). Mapping:

    assignedTo      -> assigned_to
    createdBy       -> created_by          (channel / frequency)
    reportedById    -> reported_by_id      (CAS)
    completedById   -> completed_by_id     (CAS)
    issueType       -> issue_type
    dateReported    -> date_reported       (channel / frequency)

The acting user comes from the auth header (see ``issue_tracker.auth``).
Service layer owns all business logic and commits.
"""

import logging

from flask import Blueprint, jsonify, request

from issue_tracker.auth import current_user_id
from issue_tracker.blueprints import paginate_query, register_error_handlers
from issue_tracker.services import issue_lifecycle as lifecycle
from issue_tracker.services.issue_domains import CAS_DOMAIN, CHANNEL_DOMAIN, FREQUENCY_DOMAIN

logger = logging.getLogger(__name__)


def _payload():
    """JSON body, or the form fields of a multipart post."""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict() if request.form else {}
    return data if isinstance(data, dict) else {}


def make_issue_blueprint(domain, name, url_prefix):
    """Build the CRUD blueprint for one issue domain."""
    bp = Blueprint(name, __name__, url_prefix=url_prefix)
    register_error_handlers(bp)

    @bp.route("/metadata", methods=["GET"])
    def get_metadata():
        return jsonify(lifecycle.get_metadata(domain)), 200

    @bp.route("", methods=["GET"])
    def list_issues():
        query = lifecycle.issue_query(domain, request.args)
        items, total = paginate_query(query)
        return jsonify({"items": lifecycle.serialize_issues(domain, items), "total": total}), 200

    @bp.route("", methods=["POST"])
    def create_issue():
        issue = lifecycle.create_issue(domain, _payload(), actor_id=current_user_id())
        return jsonify(lifecycle.serialize_issue(domain, issue)), 201

    @bp.route("/<int:issue_id>", methods=["GET"])
    def get_issue(issue_id):
        issue = lifecycle.get_issue(domain, issue_id)
        return jsonify(lifecycle.serialize_issue(domain, issue)), 200

    @bp.route("/<int:issue_id>", methods=["PUT"])
    def update_issue(issue_id):
        issue = lifecycle.update_issue(domain, issue_id, _payload(), actor_id=current_user_id())
        return jsonify(lifecycle.serialize_issue(domain, issue)), 200

    if domain.deletable:
        @bp.route("/<int:issue_id>", methods=["DELETE"])
        def delete_issue(issue_id):
            lifecycle.delete_issue(domain, issue_id, actor_id=current_user_id())
            return jsonify({"message": f"{domain.label} deleted"}), 200

    return bp


cas_issues_bp = make_issue_blueprint(CAS_DOMAIN, "cas_issues", "/api/v1/cas-issues")
channel_issues_bp = make_issue_blueprint(CHANNEL_DOMAIN, "channel_issues", "/api/v1/channel-issues")
frequency_issues_bp = make_issue_blueprint(FREQUENCY_DOMAIN, "frequency_issues", "/api/v1/frequency-issues")
