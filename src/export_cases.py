import csv
import os

from case_store import CaseStore
from database.queries import CaseFilter
from records import CaseQueryResult

COLUMNS = [
    "case_no", "year", "nature_of_case", "received_from", "date",
    "time_slot", "party1", "party2", "assigned_to", "ndoh_date",
    "ndoh_time", "disposal_of_case", "connected",
]

SUMMARY_LABELS = [
    ("settled", "Settled"),
    ("not_settled", "Not Settled"),
    ("not_fit", "Not Fit For Mediation"),
    ("pending", "Pending"),
]


def assignee_label(name: str) -> str:
    return name.replace("_", " ")


def _write_csv(path: str, result: CaseQueryResult):
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=COLUMNS)
        writer.writeheader()
        for case in result.cases:
            row = case.to_dict()
            row["assigned_to"] = assignee_label(row["assigned_to"])
            writer.writerow({k: row.get(k) for k in COLUMNS})

        summary = result.summary.to_dict()
        plain = csv.writer(f)
        plain.writerow([])
        for key, label in SUMMARY_LABELS:
            plain.writerow([label, summary[key]])
        plain.writerow(["Total", len(result.cases)])


def export_report(store: CaseStore, case_filter: CaseFilter, output_csv: str) -> CaseQueryResult:
    result = store.query(case_filter)
    _write_csv(output_csv, result)
    return result
