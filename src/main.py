import argparse
import logging
import os
from datetime import date, time

from dotenv import load_dotenv

from case_store import CaseStore
from csv_to_db import import_csv_files
from database.queries import CaseFilter
from errors import CaseStoreError
from export_cases import assignee_label, export_report
from legacy_upgrade import upgrade_legacy_schema
from records import Case
from utils import parse_date

DEFAULT_DB_PATH = os.path.join("data", "cases.db")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Mediation case register")
    parser.add_argument("--upgrade", action="store_true", help="upgrade a pre-year database file first")
    parser.add_argument("--import-dir", help="import historical register CSV files from this directory")
    parser.add_argument(
        "--report",
        nargs="+",
        metavar="ARG",
        help="START END [OUTPUT]: summarize cases between two YYYY-MM-DD dates",
    )
    return parser.parse_args(argv)


def hearing_slot(case: Case, today: date) -> time:
    if case.ndoh_date == today and case.ndoh_time is not None:
        return case.ndoh_time
    return case.time_slot


def print_docket(store: CaseStore):
    today = store.today()
    cases = sorted(store.todays_docket(), key=lambda c: (hearing_slot(c, today), c.case_no))
    print(f"Today's docket: {len(cases)} case(s)")
    for case in cases:
        slot = hearing_slot(case, today)
        print(
            f"{slot:%H:%M}  {case.case_no}/{case.year}  {case.nature_of_case.value}  "
            f"{case.party1} vs {case.party2}  ({assignee_label(case.assigned_to)})"
        )


def print_report(store: CaseStore, args: list[str]):
    if len(args) not in (2, 3):
        raise SystemExit("--report expects START END [OUTPUT]")
    start, end = parse_date(args[0]), parse_date(args[1])
    if start is None or end is None:
        raise SystemExit("Report dates must be YYYY-MM-DD")

    case_filter = CaseFilter(start_date=start, end_date=end)
    if len(args) == 3:
        result = export_report(store, case_filter, args[2])
        print(f"Report written to {args[2]}")
    else:
        result = store.query(case_filter)

    summary = result.summary
    print(f"{len(result.cases)} case(s) between {start} and {end}")
    print(f"Settled: {summary.settled}")
    print(f"Not settled: {summary.not_settled}")
    print(f"Not fit for mediation: {summary.not_fit}")
    print(f"Pending: {summary.pending}")


def main(argv=None):
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)

    db_path = os.getenv("CASE_DB_PATH") or DEFAULT_DB_PATH
    echo = os.getenv("CASE_DB_ECHO", "").lower() in ("1", "true", "yes")
    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)

    if args.upgrade:
        migrated = upgrade_legacy_schema(db_path)
        print(f"Upgraded {migrated} legacy case(s)")

    try:
        store = CaseStore(db_path, echo=echo)
    except CaseStoreError as error:
        raise SystemExit(f"❌ {error}")

    with store:
        if args.import_dir:
            imported = import_csv_files(store, args.import_dir)
            print(f"✅ Imported {imported} case(s) from {args.import_dir}")
        if args.report:
            print_report(store, args.report)
        else:
            print_docket(store)


if __name__ == "__main__":
    main()
