from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization decisions."""

    STAFF = "STAFF"
    PIMPINAN = "PIMPINAN"
    ADMIN = "ADMIN"


class ReportStatus(str, Enum):
    """Report lifecycle states stored in the database."""

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


REVIEWER_ROLES = frozenset({Role.PIMPINAN, Role.ADMIN})
REVIEW_OUTCOMES = frozenset({ReportStatus.APPROVED, ReportStatus.REJECTED})
