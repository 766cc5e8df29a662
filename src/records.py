import logging
from dataclasses import dataclass, field
from datetime import date, time

from case_types import DisposalOfCase, NatureOfCase
from errors import CaseDecodeError
from utils import format_date, format_time, parse_date, parse_time

logger = logging.getLogger(__name__)

FALLBACK_DATE = date(1970, 1, 1)
FALLBACK_TIME = time(0, 0)


@dataclass
class Case:
    id: int
    case_no: int
    year: int
    nature_of_case: NatureOfCase
    received_from: str
    date: date
    time_slot: time
    party1: str
    party2: str
    assigned_to: str
    ndoh_date: date | None = None
    ndoh_time: time | None = None
    disposal_of_case: DisposalOfCase | None = None
    connected: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "case_no": self.case_no,
            "year": self.year,
            "nature_of_case": self.nature_of_case.value,
            "received_from": self.received_from,
            "date": format_date(self.date),
            "time_slot": format_time(self.time_slot),
            "party1": self.party1,
            "party2": self.party2,
            "assigned_to": self.assigned_to,
            "ndoh_date": format_date(self.ndoh_date),
            "ndoh_time": format_time(self.ndoh_time),
            "disposal_of_case": self.disposal_of_case.value if self.disposal_of_case else None,
            "connected": self.connected,
        }


@dataclass
class CaseSummary:
    settled: int = 0
    not_settled: int = 0
    not_fit: int = 0
    pending: int = 0

    @classmethod
    def from_cases(cls, cases: list[Case]) -> "CaseSummary":
        summary = cls()
        for case in cases:
            match case.disposal_of_case:
                case DisposalOfCase.SETTLED:
                    summary.settled += 1
                case DisposalOfCase.NOT_SETTLED:
                    summary.not_settled += 1
                case DisposalOfCase.NOT_FIT_FOR_MEDIATION:
                    summary.not_fit += 1
                case DisposalOfCase.PENDING:
                    summary.pending += 1
        return summary

    @property
    def total(self) -> int:
        return self.settled + self.not_settled + self.not_fit + self.pending

    def to_dict(self) -> dict:
        return {
            "settled": self.settled,
            "not_settled": self.not_settled,
            "not_fit": self.not_fit,
            "pending": self.pending,
        }


@dataclass
class CaseQueryResult:
    cases: list[Case] = field(default_factory=list)
    summary: CaseSummary = field(default_factory=CaseSummary)

    def to_dict(self) -> dict:
        return {
            "cases": [case.to_dict() for case in self.cases],
            "summary": self.summary.to_dict(),
        }


def _optional(value, parser):
    # absent disposition fields stay absent, unparseable ones are dropped
    return parser(value) if value else None


def _strict_optional(row, field: str, parser):
    value = getattr(row, field)
    if not value:
        return None
    parsed = parser(value)
    if parsed is None:
        raise CaseDecodeError(row.id, field, value)
    return parsed


def decode_case_strict(row) -> Case:
    """Build a Case from a case_table row, failing on any malformed stored field."""
    nature = NatureOfCase.from_stored(row.nature_of_case)
    if nature is None or nature is NatureOfCase.UNKNOWN:
        raise CaseDecodeError(row.id, "nature_of_case", row.nature_of_case)
    intake_date = parse_date(row.date)
    if intake_date is None:
        raise CaseDecodeError(row.id, "date", row.date)
    time_slot = parse_time(row.time_slot)
    if time_slot is None:
        raise CaseDecodeError(row.id, "time_slot", row.time_slot)
    disposal = DisposalOfCase.from_stored(row.disposal_of_case)
    if row.disposal_of_case and disposal is None:
        raise CaseDecodeError(row.id, "disposal_of_case", row.disposal_of_case)

    return Case(
        id=row.id,
        case_no=row.case_no,
        year=row.year,
        nature_of_case=nature,
        received_from=row.received_from,
        date=intake_date,
        time_slot=time_slot,
        party1=row.party1,
        party2=row.party2,
        assigned_to=row.assigned_to,
        ndoh_date=_strict_optional(row, "ndoh_date", parse_date),
        ndoh_time=_strict_optional(row, "ndoh_time", parse_time),
        disposal_of_case=disposal,
        connected=row.connected or 0,
    )


def decode_case_lenient(row) -> Case:
    """Build a Case from a possibly legacy row, substituting defaults for bad values."""
    nature = NatureOfCase.from_stored(row.nature_of_case)
    if nature is None:
        logger.debug("Case row %s: unknown nature %r", row.id, row.nature_of_case)
        nature = NatureOfCase.UNKNOWN
    intake_date = parse_date(row.date)
    if intake_date is None:
        logger.debug("Case row %s: bad date %r, using %s", row.id, row.date, FALLBACK_DATE)
        intake_date = FALLBACK_DATE
    time_slot = parse_time(row.time_slot)
    if time_slot is None:
        logger.debug("Case row %s: bad time slot %r", row.id, row.time_slot)
        time_slot = FALLBACK_TIME

    return Case(
        id=row.id,
        case_no=row.case_no,
        year=row.year,
        nature_of_case=nature,
        received_from=row.received_from or "",
        date=intake_date,
        time_slot=time_slot,
        party1=row.party1 or "",
        party2=row.party2 or "",
        assigned_to=row.assigned_to or "",
        ndoh_date=_optional(row.ndoh_date, parse_date),
        ndoh_time=_optional(row.ndoh_time, parse_time),
        disposal_of_case=DisposalOfCase.from_stored(row.disposal_of_case),
        connected=row.connected or 0,
    )
