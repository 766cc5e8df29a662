import logging
import os
from datetime import datetime

import pandas as pd

from case_store import CaseStore
from case_types import NatureOfCase
from utils import DATE_FORMAT, detect_encoding, format_time, parse_time

logger = logging.getLogger(__name__)

EXPECTED_COLUMNS = [
    "case_no",
    "year",
    "nature_of_case",
    "received_from",
    "date",
    "time_slot",
    "party1",
    "party2",
    "assigned_to",
    "ndoh_date",
    "ndoh_time",
    "disposal_of_case",
    "connected",
]

TEXT_COLUMNS = ["received_from", "time_slot", "party1", "party2", "assigned_to"]

REGISTER_DATE_FORMATS = (DATE_FORMAT, "%d.%m.%Y", "%d-%m-%Y", "%d/%m/%Y")

NULL_MARKERS = {"nan", "null", "none"}


def normalize_register_date(value):
    """Rewrite a register date as YYYY-MM-DD, leaving unrecognized text untouched."""
    if not isinstance(value, str) or not value.strip():
        return None
    for fmt in REGISTER_DATE_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).strftime(DATE_FORMAT)
        except ValueError:
            continue
    return value.strip()


def normalize_register_time(value):
    if not isinstance(value, str) or not value.strip():
        return None
    parsed = parse_time(value)
    return format_time(parsed) if parsed else value.strip()


def normalize_nature(value):
    if not isinstance(value, str) or not value.strip():
        return NatureOfCase.UNKNOWN.value
    nature = NatureOfCase.from_stored(value)
    return nature.value if nature else value.strip()


def _clean_cell(value):
    if not isinstance(value, str):
        return None
    value = value.replace("\xa0", "").strip()
    if not value or value.lower() in NULL_MARKERS:
        return None
    return value


def _year_from_date(value):
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).year
    except ValueError:
        return None


def normalize_csv(input_path: str) -> pd.DataFrame:
    enc = detect_encoding(input_path)
    try:
        df = pd.read_csv(
            input_path,
            encoding=enc,
            sep=None,
            engine="python",
            dtype=str,
            on_bad_lines="skip",
        )
    except Exception:
        df = pd.read_csv(
            input_path,
            encoding=enc,
            sep=";",
            engine="python",
            dtype=str,
            on_bad_lines="skip",
        )

    df.columns = [
        c.replace("\ufeff", "").strip().lower().replace(" ", "_").replace("-", "_")
        for c in df.columns
    ]

    for col in EXPECTED_COLUMNS:
        if col not in df.columns:
            df[col] = None

    df = df[EXPECTED_COLUMNS].copy()

    for col in df.columns:
        df[col] = df[col].map(_clean_cell)

    df["date"] = df["date"].apply(normalize_register_date)
    df["ndoh_date"] = df["ndoh_date"].apply(normalize_register_date)
    df["time_slot"] = df["time_slot"].apply(normalize_register_time)
    df["ndoh_time"] = df["ndoh_time"].apply(normalize_register_time)
    df["nature_of_case"] = df["nature_of_case"].apply(normalize_nature)

    df["case_no"] = pd.to_numeric(df["case_no"], errors="coerce")
    df["year"] = pd.to_numeric(df["year"], errors="coerce")
    df["year"] = df["year"].fillna(df["date"].apply(_year_from_date))
    df = df.dropna(subset=["case_no", "year"]).copy()
    df["case_no"] = df["case_no"].astype(int)
    df["year"] = df["year"].astype(int)

    df["connected"] = pd.to_numeric(df["connected"], errors="coerce").fillna(0).astype(int)
    df["date"] = df["date"].fillna("")
    for col in TEXT_COLUMNS:
        df[col] = df[col].fillna("")

    df = df.drop_duplicates(subset=["case_no", "year"], keep="first")
    return df


def _records(df: pd.DataFrame) -> list[dict]:
    records = []
    for row in df.to_dict(orient="records"):
        record = {k: (None if pd.isna(v) else v) for k, v in row.items()}
        for key in ("case_no", "year", "connected"):
            record[key] = int(record[key])
        records.append(record)
    return records


def import_csv_file(store: CaseStore, input_path: str) -> int:
    df = normalize_csv(input_path)
    logger.info("Normalized %s -> %d rows", os.path.basename(input_path), len(df))
    return store.import_records(_records(df))


def import_csv_files(store: CaseStore, directory: str) -> int:
    csv_files = sorted(
        os.path.join(directory, f)
        for f in os.listdir(directory)
        if f.lower().endswith(".csv")
    )
    if not csv_files:
        logger.warning("No CSV files found in %s", directory)
        return 0

    total = 0
    for path in csv_files:
        total += import_csv_file(store, path)
    logger.info("Imported %d cases from %d files", total, len(csv_files))
    return total
