from __future__ import annotations

import logging
from typing import Optional

from ..common.datetime_utils import Clock, now_local
from ..common.validators import require_date, require_hhmm, require_non_empty, require_string, require_text
from ..core.constants import LOCATION_MAX_LENGTH, REVIEW_INVALID_STATE_MESSAGE, TITLE_MAX_LENGTH
from ..core.enums import REVIEW_OUTCOMES, ReportStatus, Role
from ..core.exceptions import InvalidStateError, NotFoundError, PermissionDeniedError, ValidationError
from ..storage.blob_store import BlobStore, remove_blob_quietly
from ..users.repository import UserRepository
from . import policy
from .model import NewReport, Report, ReportFilters, ReportPage, ReportPatch, ReviewInput
from .query import resolve_criteria
from .repository import ReportRepository

logger = logging.getLogger(__name__)

INITIAL_STATUSES = frozenset({ReportStatus.DRAFT, ReportStatus.SUBMITTED})
STAFF_SETTABLE_STATUSES = frozenset({ReportStatus.DRAFT, ReportStatus.SUBMITTED})


def _parse_status(value, field_name: str = "status") -> ReportStatus:
    try:
        return ReportStatus(value)
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid report status")


def validate_new_report(data: NewReport) -> NewReport:
    status = _parse_status(data.status) if data.status is not None else None
    if status is not None and status not in INITIAL_STATUSES:
        raise ValidationError("a new report can only start as DRAFT or SUBMITTED")

    return NewReport(
        title=require_text(data.title, "title", TITLE_MAX_LENGTH),
        activity_date=require_date(data.activity_date, "activity_date"),
        start_time=require_hhmm(data.start_time, "start_time"),
        end_time=require_hhmm(data.end_time, "end_time"),
        description=require_non_empty(data.description, "description"),
        location=require_text(data.location, "location", LOCATION_MAX_LENGTH),
        participants=require_non_empty(data.participants, "participants"),
        status=status,
    )


def validate_changes(patch: ReportPatch) -> dict:
    validators = {
        "title": lambda v: require_text(v, "title", TITLE_MAX_LENGTH),
        "activity_date": lambda v: require_date(v, "activity_date"),
        "start_time": lambda v: require_hhmm(v, "start_time"),
        "end_time": lambda v: require_hhmm(v, "end_time"),
        "description": lambda v: require_non_empty(v, "description"),
        "location": lambda v: require_text(v, "location", LOCATION_MAX_LENGTH),
        "participants": lambda v: require_non_empty(v, "participants"),
        "status": _parse_status,
    }
    return {name: validators[name](value) for name, value in patch.changes().items()}


class ReportService:
    """Report CRUD, listing and the DRAFT → SUBMITTED → APPROVED/REJECTED lifecycle."""

    def __init__(
        self,
        reports: ReportRepository,
        users: UserRepository,
        *,
        blobs: Optional[BlobStore] = None,
        clock: Clock = now_local,
    ):
        self._reports = reports
        self._users = users
        self._blobs = blobs
        self._clock = clock

    def create(self, data: NewReport, creator_id: int) -> Report:
        data = validate_new_report(data)

        creator = self._users.get_by_id(int(creator_id))
        if not creator:
            raise NotFoundError(f"user with id {creator_id} not found")
        if not policy.can_create(creator.role):
            raise PermissionDeniedError("this role cannot create reports")

        report = self._reports.create(
            data=data,
            status=data.status or ReportStatus.DRAFT,
            created_by=creator.id,
            now=self._clock(),
        )
        logger.info("report %s created by user %s as %s", report.id, creator.id, report.status.value)
        return report

    def get_by_id(self, report_id: int, caller_id: int, caller_role: Role) -> Optional[Report]:
        report = self._reports.get_by_id(int(report_id))
        if not report or not policy.can_view(caller_id, caller_role, report.created_by):
            return None
        return report

    def update(self, patch: ReportPatch, caller_id: int) -> Report:
        changes = validate_changes(patch)

        caller = self._users.get_by_id(int(caller_id))
        if not caller:
            raise NotFoundError(f"user with id {caller_id} not found")

        report = self._reports.get_by_id(int(patch.id))
        if not report:
            raise NotFoundError("report not found")

        return self._apply(report, caller.id, caller.role, changes)

    def submit(self, report_id: int, caller_id: int) -> Report:
        caller = self._users.get_by_id(int(caller_id))
        if not caller:
            raise NotFoundError(f"user with id {caller_id} not found")

        report = self._reports.get_by_id(int(report_id))
        if not report:
            raise NotFoundError("report not found")
        if report.status != ReportStatus.DRAFT:
            raise InvalidStateError("only draft reports can be submitted")

        return self._apply(report, caller.id, caller.role, {"status": ReportStatus.SUBMITTED})

    def _apply(self, report: Report, caller_id: int, caller_role: Role, changes: dict) -> Report:
        reason = policy.edit_denial_reason(caller_id, caller_role, report.created_by, report.status)
        if reason:
            raise PermissionDeniedError(reason)

        elevated = policy.is_elevated(caller_role)
        new_status = changes.get("status")
        if new_status is not None and not elevated and new_status not in STAFF_SETTABLE_STATUSES:
            raise PermissionDeniedError("only PIMPINAN or ADMIN users can approve or reject reports")

        # Staff writes are conditioned on the status the policy check saw.
        expected = None if elevated else report.status
        updated = self._reports.update_fields(report.id, changes=changes, now=self._clock(), expected_status=expected)
        if not updated:
            raise InvalidStateError("report was changed by someone else, reload and try again")

        if new_status is not None and new_status != report.status:
            logger.info(
                "report %s moved %s -> %s by user %s",
                report.id,
                report.status.value,
                new_status.value,
                caller_id,
            )
        return updated

    def review(self, data: ReviewInput, reviewer_id: int) -> Report:
        outcome = _parse_status(data.status)
        if outcome not in REVIEW_OUTCOMES:
            raise ValidationError("review status must be APPROVED or REJECTED")

        comment = None
        if data.comment is not None:
            comment = require_string(data.comment, "comment").strip() or None

        reviewer = self._users.get_by_id(int(reviewer_id))
        if not reviewer:
            raise NotFoundError(f"user with id {reviewer_id} not found")
        if not policy.can_review(reviewer.role):
            raise PermissionDeniedError("only PIMPINAN or ADMIN users can review reports")

        report = self._reports.get_by_id(int(data.report_id))
        if not report:
            raise NotFoundError("report not found")
        if report.status != ReportStatus.SUBMITTED:
            raise InvalidStateError(REVIEW_INVALID_STATE_MESSAGE)

        updated = self._reports.review(
            report.id,
            status=outcome,
            reviewer_id=reviewer.id,
            comment=comment,
            now=self._clock(),
        )
        if not updated:
            # Another reviewer won the compare-and-set.
            raise InvalidStateError(REVIEW_INVALID_STATE_MESSAGE)

        logger.info("report %s reviewed as %s by user %s", report.id, outcome.value, reviewer.id)
        return updated

    def delete(self, report_id: int, caller_id: int, caller_role: Role) -> bool:
        report = self._reports.get_by_id(int(report_id))
        if not report:
            return False
        if not policy.can_delete_report(caller_id, caller_role, report.created_by, report.status):
            return False

        expected = None if policy.is_elevated(caller_role) else report.status
        removed_paths = self._reports.delete(report.id, expected_status=expected)
        if removed_paths is None:
            return False

        for path in removed_paths:
            remove_blob_quietly(self._blobs, path)
        logger.info("report %s deleted by user %s", report.id, caller_id)
        return True

    def list(self, filters: ReportFilters, caller_id: int, caller_role: Role) -> ReportPage:
        criteria = resolve_criteria(filters, caller_id, caller_role)
        return self._reports.list(criteria)
