"""Report listing criteria and the MySQL WHERE clause built from them.

``resolve_criteria`` applies role scoping and pagination bounds to the raw
filters a caller sent; ``build_where`` turns the result into a parameterised
predicate. Both are pure so they can be tested without a database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.constants import MAX_PAGE_LIMIT
from ..core.enums import ReportStatus, Role
from ..core.exceptions import ValidationError
from . import policy
from .model import ReportFilters

SEARCH_COLUMNS = ("r.title", "r.description", "r.location")


@dataclass(frozen=True)
class ReportCriteria:
    status: Optional[ReportStatus] = None
    created_by: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    search: Optional[str] = None
    limit: int = 20
    offset: int = 0


def resolve_criteria(filters: ReportFilters, caller_id: int, caller_role: Role) -> ReportCriteria:
    limit = int(filters.limit)
    offset = int(filters.offset)
    if limit < 1 or limit > MAX_PAGE_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_LIMIT}")
    if offset < 0:
        raise ValidationError("offset must not be negative")

    search = (filters.search or "").strip() or None

    return ReportCriteria(
        status=ReportStatus(filters.status) if filters.status is not None else None,
        created_by=policy.scoped_creator(caller_id, caller_role, filters.created_by),
        date_from=filters.activity_date_from,
        date_to=filters.activity_date_to,
        search=search,
        limit=limit,
        offset=offset,
    )


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_where(criteria: ReportCriteria) -> tuple[str, list[object]]:
    clauses = ["1=1"]
    params: list[object] = []

    if criteria.created_by is not None:
        clauses.append("r.created_by=%s")
        params.append(int(criteria.created_by))
    if criteria.status is not None:
        clauses.append("r.status=%s")
        params.append(criteria.status.value)
    if criteria.date_from is not None:
        clauses.append("r.activity_date>=%s")
        params.append(criteria.date_from)
    if criteria.date_to is not None:
        clauses.append("r.activity_date<=%s")
        params.append(criteria.date_to)
    if criteria.search:
        pattern = f"%{escape_like(criteria.search.lower())}%"
        clauses.append("(" + " OR ".join(f"LOWER({col}) LIKE %s" for col in SEARCH_COLUMNS) + ")")
        params.extend([pattern] * len(SEARCH_COLUMNS))

    return " AND ".join(clauses), params
