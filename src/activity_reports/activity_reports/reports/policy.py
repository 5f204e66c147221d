"""Access rules for reports and their comments/attachments.

Every function here is a pure decision over ids, roles and statuses; nothing
reads storage. Services load the report first and ask these functions.
"""

from __future__ import annotations

from typing import Optional

from ..core.enums import REVIEWER_ROLES, ReportStatus, Role

STAFF_EDITABLE_STATUSES = frozenset({ReportStatus.DRAFT})
STAFF_DELETABLE_STATUSES = frozenset({ReportStatus.DRAFT})

EDIT_NOT_OWNER_REASON = "staff users can only update their own reports"
EDIT_NOT_DRAFT_REASON = "staff users can only update reports in draft status"


def is_elevated(role: Role) -> bool:
    return Role(role) in REVIEWER_ROLES


def can_view(user_id: int, role: Role, owner_id: int) -> bool:
    return is_elevated(role) or int(owner_id) == int(user_id)


def can_create(role: Role) -> bool:
    return Role(role) in {Role.STAFF, Role.PIMPINAN, Role.ADMIN}


def edit_denial_reason(user_id: int, role: Role, owner_id: int, status: ReportStatus) -> Optional[str]:
    """``None`` when the edit is allowed, else the message for PermissionDeniedError."""
    if is_elevated(role):
        return None
    if int(owner_id) != int(user_id):
        return EDIT_NOT_OWNER_REASON
    if ReportStatus(status) not in STAFF_EDITABLE_STATUSES:
        return EDIT_NOT_DRAFT_REASON
    return None


def can_edit(user_id: int, role: Role, owner_id: int, status: ReportStatus) -> bool:
    return edit_denial_reason(user_id, role, owner_id, status) is None


def can_delete_report(user_id: int, role: Role, owner_id: int, status: ReportStatus) -> bool:
    if is_elevated(role):
        return True
    return int(owner_id) == int(user_id) and ReportStatus(status) in STAFF_DELETABLE_STATUSES


def can_review(role: Role) -> bool:
    return is_elevated(role)


def can_comment(user_id: int, role: Role, owner_id: int) -> bool:
    return can_view(user_id, role, owner_id)


def can_upload_attachment(user_id: int, report_owner_id: int) -> bool:
    # Creator only; elevated roles get no bypass here.
    return int(report_owner_id) == int(user_id)


def can_delete_attachment(user_id: int, role: Role, report_owner_id: int) -> bool:
    return is_elevated(role) or int(report_owner_id) == int(user_id)


def scoped_creator(user_id: int, role: Role, requested_creator: Optional[int]) -> Optional[int]:
    """Creator filter actually applied to a listing.

    STAFF always see their own reports whatever they asked for; elevated roles
    get the filter they passed (``None`` meaning everyone).
    """
    if not is_elevated(role):
        return int(user_id)
    return int(requested_creator) if requested_creator is not None else None
