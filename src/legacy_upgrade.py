import logging
import os

from sqlalchemy import Connection, inspect, text

from case_types import DisposalOfCase, NatureOfCase
from database.db import create_sqlite_engine
from database.models import CaseRecord
from records import FALLBACK_DATE
from utils import format_time, parse_date, parse_time

logger = logging.getLogger(__name__)

LEGACY_TABLE = "case_table_legacy"
LEGACY_CONNECTED_DISPOSAL = "connected"


def needs_upgrade(conn: Connection) -> bool:
    """True when case_table exists in the layout written before cases were keyed by year."""
    inspector = inspect(conn)
    if not inspector.has_table(CaseRecord.__tablename__):
        return False
    columns = {column["name"] for column in inspector.get_columns(CaseRecord.__tablename__)}
    return "year" not in columns


def _convert_row(row: dict) -> dict:
    intake_date = parse_date(row["date"])
    year = (intake_date or FALLBACK_DATE).year

    nature = NatureOfCase.from_stored(row["nature_of_case"])
    time_slot = parse_time(row["time_slot"])
    ndoh_time = parse_time(row.get("ndoh_time"))

    disposal_raw = row.get("disposal_of_case")
    connected = 0
    if disposal_raw and disposal_raw.strip().lower() == LEGACY_CONNECTED_DISPOSAL:
        # older files recorded linkage as a disposal value
        disposal_raw = None
        connected = 1
    disposal = DisposalOfCase.from_stored(disposal_raw)

    return {
        "id": row["id"],
        "case_no": row["case_no"],
        "year": year,
        "nature_of_case": nature.value if nature else row["nature_of_case"],
        "received_from": row["received_from"],
        "date": row["date"],
        "time_slot": format_time(time_slot) if time_slot else row["time_slot"],
        "party1": row["party1"],
        "party2": row["party2"],
        "assigned_to": row["assigned_to"],
        "ndoh_date": row.get("ndoh_date"),
        "ndoh_time": format_time(ndoh_time) if ndoh_time else row.get("ndoh_time"),
        "disposal_of_case": disposal.value if disposal else disposal_raw,
        "connected": connected,
    }


def upgrade_connection(conn: Connection) -> int:
    if not needs_upgrade(conn):
        return 0

    logger.info("Upgrading legacy case_table layout")
    conn.execute(text(f"ALTER TABLE {CaseRecord.__tablename__} RENAME TO {LEGACY_TABLE}"))
    CaseRecord.__table__.create(conn)

    rows = conn.execute(text(f"SELECT * FROM {LEGACY_TABLE} ORDER BY id")).mappings().all()
    converted = [_convert_row(dict(row)) for row in rows]
    if converted:
        conn.execute(CaseRecord.__table__.insert(), converted)

    conn.execute(text(f"DROP TABLE {LEGACY_TABLE}"))
    logger.info("Upgraded %d legacy case rows", len(converted))
    return len(converted)


def upgrade_legacy_schema(path: str | os.PathLike) -> int:
    """Rewrite an old-layout database file in place, returning the number of migrated rows."""
    engine = create_sqlite_engine(path)
    try:
        with engine.begin() as conn:
            return upgrade_connection(conn)
    finally:
        engine.dispose()
