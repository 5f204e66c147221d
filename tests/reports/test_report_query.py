from __future__ import annotations

from datetime import date

import pytest

from activity_reports.core.enums import ReportStatus, Role
from activity_reports.core.exceptions import ValidationError
from activity_reports.reports.model import ReportFilters
from activity_reports.reports.query import ReportCriteria, build_where, escape_like, resolve_criteria


def test_empty_criteria_matches_everything():
    sql, params = build_where(ReportCriteria())
    assert sql == "1=1"
    assert params == []


def test_all_filters_are_parameterised_in_order():
    criteria = ReportCriteria(
        status=ReportStatus.SUBMITTED,
        created_by=3,
        date_from=date(2024, 1, 1),
        date_to=date(2024, 1, 31),
        search="Training",
    )
    sql, params = build_where(criteria)

    assert sql.startswith("1=1 AND r.created_by=%s AND r.status=%s")
    assert "r.activity_date>=%s" in sql
    assert "r.activity_date<=%s" in sql
    assert "LOWER(r.title) LIKE %s OR LOWER(r.description) LIKE %s OR LOWER(r.location) LIKE %s" in sql
    assert params == [3, "SUBMITTED", date(2024, 1, 1), date(2024, 1, 31), "%training%", "%training%", "%training%"]


def test_search_wildcards_are_escaped():
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
    _, params = build_where(ReportCriteria(search="100%"))
    assert params[0] == "%100\\%%"


def test_staff_created_by_is_overridden():
    criteria = resolve_criteria(ReportFilters(created_by=99), caller_id=5, caller_role=Role.STAFF)
    assert criteria.created_by == 5


def test_admin_keeps_requested_creator():
    assert resolve_criteria(ReportFilters(created_by=99), 1, Role.ADMIN).created_by == 99
    assert resolve_criteria(ReportFilters(), 1, Role.ADMIN).created_by is None


def test_blank_search_is_dropped():
    assert resolve_criteria(ReportFilters(search="   "), 1, Role.ADMIN).search is None
    assert resolve_criteria(ReportFilters(search=" x "), 1, Role.ADMIN).search == "x"


@pytest.mark.parametrize("limit,offset", [(0, 0), (101, 0), (10, -1)])
def test_out_of_range_paging_is_rejected(limit, offset):
    with pytest.raises(ValidationError):
        resolve_criteria(ReportFilters(limit=limit, offset=offset), 1, Role.ADMIN)
