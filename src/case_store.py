import logging
import os
import threading
from datetime import date, time
from typing import Callable

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from case_types import DisposalOfCase, NatureOfCase
from database.db import create_session_factory, create_sqlite_engine
from database.models import AssignedTo, Base, CaseRecord
from database.queries import CaseFilter, filtered_cases_statement, todays_docket_statement
from database.seed import insert_assignees, seed_assignees
from errors import StoreSetupError, UniquenessViolation
from legacy_upgrade import needs_upgrade
from records import Case, CaseQueryResult, CaseSummary, decode_case_lenient, decode_case_strict
from utils import format_date, format_time

logger = logging.getLogger(__name__)

# keeps multi-row inserts under the SQLite bound-parameter limit
IMPORT_BATCH_SIZE = 50


class CaseStore:
    """Mediation case table and assignee registry behind one serialized connection.

    Every public method takes the store lock for its whole duration, so reads
    and writes never interleave. ``today`` supplies the local date used for
    intake dates, the docket and the default update year.
    """

    def __init__(
        self,
        path: str | os.PathLike,
        today: Callable[[], date] = date.today,
        echo: bool = False,
    ):
        self.path = os.fspath(path)
        self._today = today
        self._lock = threading.Lock()
        self._engine = create_sqlite_engine(self.path, echo=echo)
        self._session_factory = create_session_factory(self._engine)
        try:
            self._create_schema()
        except SQLAlchemyError as error:
            self._engine.dispose()
            raise StoreSetupError(f"Failed to initialize DB at {self.path}: {error}") from error
        except StoreSetupError:
            self._engine.dispose()
            raise
        logger.info("Case store opened at %s", self.path)

    def _create_schema(self) -> None:
        with self._engine.connect() as conn:
            if needs_upgrade(conn):
                raise StoreSetupError(
                    f"{self.path} uses the pre-year case layout, run the legacy upgrade first"
                )
        Base.metadata.create_all(self._engine)
        with self._session_factory.begin() as session:
            added = seed_assignees(session)
        if added:
            logger.info("Seeded %d assignees", added)

    def today(self) -> date:
        return self._today()

    def close(self) -> None:
        with self._lock:
            self._engine.dispose()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def create_case(
        self,
        case_no: int,
        year: int,
        nature_of_case: NatureOfCase | str,
        received_from: str,
        time_slot: time,
        party1: str,
        party2: str,
        assigned_to: str,
    ) -> int:
        """Insert a new case dated today and return its id."""
        nature = nature_of_case.value if isinstance(nature_of_case, NatureOfCase) else nature_of_case
        record = CaseRecord(
            case_no=case_no,
            year=year,
            nature_of_case=nature,
            received_from=received_from,
            date=format_date(self._today()),
            time_slot=format_time(time_slot),
            party1=party1,
            party2=party2,
            assigned_to=assigned_to,
            connected=0,
        )
        with self._lock:
            try:
                with self._session_factory.begin() as session:
                    session.add(record)
                    session.flush()
                    case_id = record.id
            except IntegrityError as error:
                if "UNIQUE" not in str(error.orig).upper():
                    raise
                raise UniquenessViolation(case_no, year) from error

        logger.info("Inserted case %s/%s with id %s", case_no, year, case_id)
        return case_id

    def update_disposition(
        self,
        case_no: int,
        ndoh_date: date,
        ndoh_time: time,
        disposal_of_case: DisposalOfCase,
        connected: int | None = None,
        year: int | None = None,
    ) -> int:
        """Set the next hearing and disposal of a case, returning the affected row count.

        ``year`` defaults to the current year. A missing case is not an error,
        the call simply affects no rows. ``connected`` keeps its stored value
        when not supplied.
        """
        if year is None:
            year = self._today().year

        values = {
            "ndoh_date": format_date(ndoh_date),
            "ndoh_time": format_time(ndoh_time),
            "disposal_of_case": disposal_of_case.value,
        }
        if connected is not None:
            values["connected"] = connected

        with self._lock, self._session_factory.begin() as session:
            count = session.scalar(
                select(func.count())
                .select_from(CaseRecord)
                .where(CaseRecord.case_no == case_no, CaseRecord.year == year)
            )
            if not count:
                logger.info("No case found with case_no %s/%s", case_no, year)
                return 0

            result = session.execute(
                update(CaseRecord)
                .where(CaseRecord.case_no == case_no, CaseRecord.year == year)
                .values(**values)
            )
            affected = result.rowcount

        logger.info("Updated %d row(s) for case %s/%s: %s", affected, case_no, year, values)
        return affected

    def get_case(self, case_no: int, year: int) -> Case | None:
        with self._lock, self._session_factory() as session:
            row = session.scalars(
                select(CaseRecord).where(CaseRecord.case_no == case_no, CaseRecord.year == year)
            ).first()
            return decode_case_lenient(row) if row is not None else None

    def todays_docket(self) -> list[Case]:
        """Cases received today or whose next hearing is today, in storage order."""
        with self._lock, self._session_factory() as session:
            rows = session.scalars(todays_docket_statement(self._today())).all()
            return [decode_case_strict(row) for row in rows]

    def query(self, case_filter: CaseFilter) -> CaseQueryResult:
        logger.info("Querying cases with %s", case_filter)
        with self._lock, self._session_factory() as session:
            rows = session.scalars(filtered_cases_statement(case_filter)).all()
            cases = [decode_case_lenient(row) for row in rows]

        return CaseQueryResult(cases=cases, summary=CaseSummary.from_cases(cases))

    def list_assignees(self) -> list[str]:
        with self._lock, self._session_factory() as session:
            return list(session.scalars(select(AssignedTo.name).order_by(AssignedTo.id)))

    def add_assignee(self, name: str) -> None:
        with self._lock, self._session_factory.begin() as session:
            insert_assignees(session, [name])

    def remove_assignee(self, name: str) -> None:
        with self._lock, self._session_factory.begin() as session:
            session.execute(delete(AssignedTo).where(AssignedTo.name == name))

    def import_records(self, records: list[dict]) -> int:
        """Insert historical rows as given, skipping any (case_no, year) already stored."""
        inserted = 0
        with self._lock, self._session_factory.begin() as session:
            for start in range(0, len(records), IMPORT_BATCH_SIZE):
                stmt = (
                    sqlite_insert(CaseRecord.__table__)
                    .values(records[start : start + IMPORT_BATCH_SIZE])
                    .on_conflict_do_nothing(index_elements=["case_no", "year"])
                )
                inserted += session.execute(stmt).rowcount or 0
        logger.info("Imported %d of %d historical rows", inserted, len(records))
        return inserted
