"""
All SQLAlchemy models. Schema is the source of truth for new DBs.
Base.metadata.create_all() creates every table; no migration scripts needed for fresh installs.
"""
from app.models.user import User, Gender
from app.models.pending_signup import PendingSignup
from app.models.audit_log import AuditLog

__all__ = [
    "User",
    "Gender",
    "PendingSignup",
    "AuditLog",
]
