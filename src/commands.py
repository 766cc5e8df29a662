import logging
import os
from datetime import date
from typing import Callable

from sqlalchemy.exc import IntegrityError

from case_store import CaseStore
from case_types import DisposalOfCase, NatureOfCase
from database.queries import CaseFilter
from errors import CaseStoreError, CommandError, InvalidInput
from utils import parse_date, parse_time

logger = logging.getLogger(__name__)


def _require_int(payload: dict, key: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidInput(f"Invalid {key}: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"Invalid {key}: {value!r}") from None


def _optional_int(payload: dict, key: str) -> int | None:
    if payload.get(key) in (None, ""):
        return None
    return _require_int(payload, key)


def _require_text(payload: dict, key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"Missing {key}")
    return value.strip()


def _require_date(payload: dict, key: str) -> date:
    parsed = parse_date(payload.get(key))
    if parsed is None:
        raise InvalidInput(f"Invalid {key}: expected YYYY-MM-DD, got {payload.get(key)!r}")
    return parsed


def _require_time(payload: dict, key: str):
    parsed = parse_time(payload.get(key))
    if parsed is None:
        raise InvalidInput(f"Invalid {key}: expected HH:MM, got {payload.get(key)!r}")
    return parsed


def parse_nature(value: str) -> NatureOfCase:
    nature = NatureOfCase.from_stored(value)
    if nature is None or nature is NatureOfCase.UNKNOWN:
        raise InvalidInput(f"Invalid nature_of_case: {value!r}")
    return nature


def parse_disposal(value: str) -> DisposalOfCase:
    disposal = DisposalOfCase.from_stored(value)
    if disposal is None:
        raise InvalidInput(f"Invalid disposal_of_case: {value!r}")
    return disposal


class CaseCommands:
    """Request-facing operations over one explicitly initialized CaseStore.

    Payloads are plain dicts and results are JSON-friendly values. Any
    failure is raised as ``CommandError`` carrying a printable message.
    """

    def __init__(self, today: Callable[[], date] = date.today):
        self._today = today
        self._path: str | None = None
        self._store: CaseStore | None = None

    @property
    def store(self) -> CaseStore:
        if self._store is None:
            raise CommandError("Database not initialized")
        return self._store

    def init_db(self, path: str) -> None:
        logger.info("DB path: %s", path)
        if self._path is not None:
            raise CommandError("Database path has already been set!")
        self._path = path

        parent = os.path.dirname(os.path.abspath(path))
        try:
            os.makedirs(parent, exist_ok=True)
        except OSError as error:
            raise CommandError(f"Failed to create directory: {error}") from error

        try:
            self._store = CaseStore(path, today=self._today)
        except CaseStoreError as error:
            raise CommandError(str(error)) from error

    def insert_case(self, payload: dict) -> int:
        logger.info("Inserting case: %s", payload)
        try:
            return self.store.create_case(
                case_no=_require_int(payload, "case_no"),
                year=_require_int(payload, "year"),
                nature_of_case=parse_nature(payload.get("nature_of_case")),
                received_from=_require_text(payload, "received_from"),
                time_slot=_require_time(payload, "time_slot"),
                party1=_require_text(payload, "party1"),
                party2=_require_text(payload, "party2"),
                assigned_to=_require_text(payload, "assigned_to"),
            )
        except CaseStoreError as error:
            raise CommandError(str(error)) from error
        except IntegrityError as error:
            raise CommandError(f"Failed to insert case: {error.orig}") from error

    def update_case(self, payload: dict) -> int:
        logger.info("Updating case: %s", payload)
        try:
            return self.store.update_disposition(
                case_no=_require_int(payload, "case_no"),
                ndoh_date=_require_date(payload, "ndoh_date"),
                ndoh_time=_require_time(payload, "ndoh_time"),
                disposal_of_case=parse_disposal(payload.get("disposal_of_case")),
                connected=_optional_int(payload, "connected"),
                year=_optional_int(payload, "year"),
            )
        except CaseStoreError as error:
            raise CommandError(str(error)) from error

    def get_todays_cases(self) -> list[dict]:
        try:
            return [case.to_dict() for case in self.store.todays_docket()]
        except CaseStoreError as error:
            raise CommandError(str(error)) from error

    def query_cases_with_filters(self, payload: dict) -> dict:
        try:
            start = _require_date(payload, "start_date")
            end = _require_date(payload, "end_date")
            nature = payload.get("nature_of_case")
            assigned_to = payload.get("assigned_to")
            case_filter = CaseFilter(
                start_date=start,
                end_date=end,
                nature_of_case=parse_nature(nature) if nature else None,
                assigned_to=assigned_to or None,
            )
            return self.store.query(case_filter).to_dict()
        except CaseStoreError as error:
            raise CommandError(str(error)) from error

    def get_assigned_to_list(self) -> list[str]:
        return self.store.list_assignees()

    def add_assigned_to(self, name: str) -> None:
        if not isinstance(name, str) or not name.strip():
            raise CommandError("Missing name")
        self.store.add_assignee(name.strip())

    def delete_assigned_to(self, name: str) -> None:
        self.store.remove_assignee(name)
