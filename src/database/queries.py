from dataclasses import dataclass
from datetime import date

from sqlalchemy import Select, and_, or_, select

from case_types import NatureOfCase
from database.models import CaseRecord
from utils import format_date


@dataclass(frozen=True)
class CaseFilter:
    """Inclusive date range plus the two optional exact-match filters of a report query."""

    start_date: date
    end_date: date
    nature_of_case: NatureOfCase | None = None
    assigned_to: str | None = None


def todays_docket_statement(today: date) -> Select:
    day = format_date(today)
    return select(CaseRecord).where(
        or_(CaseRecord.date == day, CaseRecord.ndoh_date == day)
    )


def filtered_cases_statement(case_filter: CaseFilter) -> Select:
    start = format_date(case_filter.start_date)
    end = format_date(case_filter.end_date)

    # the range bounds always come first, then nature, then assignee
    clauses = [
        or_(
            CaseRecord.date.between(start, end),
            CaseRecord.ndoh_date.between(start, end),
        )
    ]
    if case_filter.nature_of_case is not None:
        clauses.append(CaseRecord.nature_of_case == case_filter.nature_of_case.value)
    if case_filter.assigned_to is not None:
        clauses.append(CaseRecord.assigned_to == case_filter.assigned_to)

    return select(CaseRecord).where(and_(*clauses)).order_by(CaseRecord.id)
