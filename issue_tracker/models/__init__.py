"""
Broadcast Operations Issue Tracker
Model package — exposes the shared SQLAlchemy handle.

Usage:
    from issue_tracker.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
