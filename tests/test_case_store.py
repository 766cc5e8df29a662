import threading
from datetime import date, time

import pytest
from sqlalchemy import text

from case_store import CaseStore
from case_types import DisposalOfCase, NatureOfCase
from database.models import CaseRecord
from database.queries import CaseFilter
from database.seed import DEFAULT_ASSIGNEES
from errors import CaseDecodeError, StoreSetupError, UniquenessViolation
from records import FALLBACK_DATE, FALLBACK_TIME


def _insert_raw(store: CaseStore, **values):
    row = {
        "case_no": 900,
        "year": 2024,
        "nature_of_case": "Civil Recovery",
        "received_from": "Registry",
        "date": "2024-02-01",
        "time_slot": "10:00",
        "party1": "A",
        "party2": "B",
        "assigned_to": "Sh_Harish_Mehta",
        "connected": 0,
    }
    row.update(values)
    with store._engine.begin() as conn:
        conn.execute(CaseRecord.__table__.insert(), [row])


def test_create_case_returns_id_and_dates_it_today(store, make_case):
    case_id = make_case(101)
    assert case_id > 0

    case = store.get_case(101, 2024)
    assert case.id == case_id
    assert case.date == date(2024, 3, 15)
    assert case.time_slot == time(10, 30)
    assert case.nature_of_case is NatureOfCase.CIVIL_RECOVERY
    assert case.ndoh_date is None
    assert case.disposal_of_case is None
    assert case.connected == 0


def test_nature_is_stored_as_canonical_label(store, make_case):
    make_case(102, nature_of_case=NatureOfCase.CAW_CELL_OD)
    with store._engine.connect() as conn:
        stored = conn.execute(text("SELECT nature_of_case FROM case_table")).scalar_one()
    assert stored == "CawCell (OD)"


def test_duplicate_case_no_and_year_is_rejected(store, make_case):
    make_case(7, 2024)
    with pytest.raises(UniquenessViolation) as excinfo:
        make_case(7, 2024, party1="Someone Else")
    assert excinfo.value.case_no == 7
    assert excinfo.value.year == 2024

    assert make_case(7, 2023) > 0


def test_update_disposition_sets_fields(store, make_case):
    make_case(5)
    affected = store.update_disposition(
        5, date(2024, 4, 2), time(11, 0), DisposalOfCase.NOT_SETTLED
    )
    assert affected == 1

    case = store.get_case(5, 2024)
    assert case.ndoh_date == date(2024, 4, 2)
    assert case.ndoh_time == time(11, 0)
    assert case.disposal_of_case is DisposalOfCase.NOT_SETTLED


def test_update_missing_case_affects_nothing(store, make_case):
    make_case(5)
    affected = store.update_disposition(
        6, date(2024, 4, 2), time(11, 0), DisposalOfCase.SETTLED
    )
    assert affected == 0
    assert store.get_case(5, 2024).disposal_of_case is None
    assert store.get_case(6, 2024) is None


def test_update_defaults_to_current_year(store, make_case):
    make_case(8, 2023)
    assert store.update_disposition(8, date(2024, 4, 2), time(11, 0), DisposalOfCase.SETTLED) == 0
    assert store.update_disposition(
        8, date(2024, 4, 2), time(11, 0), DisposalOfCase.SETTLED, year=2023
    ) == 1
    assert store.get_case(8, 2023).disposal_of_case is DisposalOfCase.SETTLED


def test_connected_marker_is_preserved_unless_supplied(store, make_case):
    make_case(9)
    store.update_disposition(9, date(2024, 4, 2), time(11, 0), DisposalOfCase.PENDING, connected=42)
    assert store.get_case(9, 2024).connected == 42

    store.update_disposition(9, date(2024, 4, 9), time(12, 0), DisposalOfCase.PENDING)
    case = store.get_case(9, 2024)
    assert case.connected == 42
    assert case.ndoh_date == date(2024, 4, 9)

    store.update_disposition(9, date(2024, 4, 9), time(12, 0), DisposalOfCase.SETTLED, connected=0)
    assert store.get_case(9, 2024).connected == 0


def test_todays_docket_includes_new_and_adjourned_cases(store, make_case, clock):
    clock.current = date(2024, 3, 10)
    make_case(1)
    make_case(2)
    store.update_disposition(1, date(2024, 3, 15), time(14, 0), DisposalOfCase.PENDING)
    store.update_disposition(2, date(2024, 3, 20), time(14, 0), DisposalOfCase.PENDING)

    clock.current = date(2024, 3, 15)
    make_case(3)

    docket = store.todays_docket()
    assert sorted(case.case_no for case in docket) == [1, 3]


def test_todays_docket_fails_on_malformed_row(store, clock):
    _insert_raw(store, date="2024-03-15", time_slot="half past ten")
    with pytest.raises(CaseDecodeError) as excinfo:
        store.todays_docket()
    assert excinfo.value.field == "time_slot"


def test_query_matches_on_intake_or_hearing_date(store, make_case, clock):
    clock.current = date(2023, 12, 20)
    make_case(1, 2023)
    make_case(2, 2023)
    store.update_disposition(1, date(2024, 1, 5), time(10, 0), DisposalOfCase.SETTLED, year=2023)

    clock.current = date(2024, 6, 1)
    make_case(3)
    store.update_disposition(3, date(2024, 6, 20), time(10, 0), DisposalOfCase.NOT_FIT_FOR_MEDIATION)
    make_case(4)

    clock.current = date(2025, 1, 2)
    make_case(5, 2025)

    result = store.query(CaseFilter(start_date=date(2024, 1, 1), end_date=date(2024, 12, 31)))

    assert sorted((c.case_no, c.year) for c in result.cases) == [(1, 2023), (3, 2024), (4, 2024)]
    assert result.summary.settled == 1
    assert result.summary.not_fit == 1
    assert result.summary.not_settled == 0
    assert result.summary.pending == 0
    with_disposal = [c for c in result.cases if c.disposal_of_case is not None]
    assert result.summary.total == len(with_disposal)


def test_query_range_is_inclusive(store, make_case, clock):
    clock.current = date(2024, 1, 1)
    make_case(1)
    clock.current = date(2024, 1, 31)
    make_case(2)

    result = store.query(CaseFilter(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)))
    assert len(result.cases) == 2


def test_query_with_optional_filters(store, make_case):
    make_case(1, nature_of_case=NatureOfCase.PETITION_FOR_DIVORCE, assigned_to="Ms_Neha_Arora")
    make_case(2, nature_of_case=NatureOfCase.PETITION_FOR_DIVORCE, assigned_to="Sh_Vinod_Kumar")
    make_case(3, nature_of_case=NatureOfCase.CRIMINAL_MATTER, assigned_to="Ms_Neha_Arora")

    start, end = date(2024, 1, 1), date(2024, 12, 31)

    by_nature = store.query(
        CaseFilter(start, end, nature_of_case=NatureOfCase.PETITION_FOR_DIVORCE)
    )
    assert sorted(c.case_no for c in by_nature.cases) == [1, 2]

    by_assignee = store.query(CaseFilter(start, end, assigned_to="Ms_Neha_Arora"))
    assert sorted(c.case_no for c in by_assignee.cases) == [1, 3]

    both = store.query(
        CaseFilter(
            start,
            end,
            nature_of_case=NatureOfCase.PETITION_FOR_DIVORCE,
            assigned_to="Ms_Neha_Arora",
        )
    )
    assert [c.case_no for c in both.cases] == [1]


def test_query_tolerates_malformed_legacy_rows(store):
    _insert_raw(
        store,
        case_no=1,
        date="15/13/2024",
        ndoh_date="2024-05-01",
        time_slot="",
        nature_of_case="Something Odd",
        disposal_of_case="Connected",
    )
    _insert_raw(store, case_no=2, date="2024-05-02", nature_of_case="PetitionForCustody")

    result = store.query(CaseFilter(start_date=date(2024, 5, 1), end_date=date(2024, 5, 31)))

    assert len(result.cases) == 2
    legacy = next(c for c in result.cases if c.case_no == 1)
    assert legacy.date == FALLBACK_DATE
    assert legacy.time_slot == FALLBACK_TIME
    assert legacy.nature_of_case is NatureOfCase.UNKNOWN
    assert legacy.disposal_of_case is None
    assert legacy.ndoh_date == date(2024, 5, 1)

    other = next(c for c in result.cases if c.case_no == 2)
    assert other.nature_of_case is NatureOfCase.PETITION_FOR_CUSTODY
    assert result.summary.total == 0


def test_registry_is_seeded_once(tmp_path, clock):
    path = tmp_path / "cases.db"
    with CaseStore(path, today=clock) as first:
        assert first.list_assignees() == DEFAULT_ASSIGNEES
    with CaseStore(path, today=clock) as second:
        assert second.list_assignees() == DEFAULT_ASSIGNEES
    assert len(DEFAULT_ASSIGNEES) >= 17


def test_registry_add_and_remove_are_idempotent(store):
    store.add_assignee("Adv_New_Mediator")
    store.add_assignee("Adv_New_Mediator")
    names = store.list_assignees()
    assert names.count("Adv_New_Mediator") == 1
    assert names[-1] == "Adv_New_Mediator"

    before = store.list_assignees()
    store.remove_assignee("Nobody_By_That_Name")
    assert store.list_assignees() == before

    store.remove_assignee("Adv_New_Mediator")
    assert "Adv_New_Mediator" not in store.list_assignees()


def test_removing_assignee_leaves_cases_untouched(store, make_case):
    make_case(1, assigned_to="Ms_Ritu_Saini")
    store.remove_assignee("Ms_Ritu_Saini")
    assert "Ms_Ritu_Saini" not in store.list_assignees()
    assert store.get_case(1, 2024).assigned_to == "Ms_Ritu_Saini"


def test_import_records_skips_existing_keys(store, make_case):
    make_case(1)
    record = {
        "case_no": 1,
        "year": 2024,
        "nature_of_case": "Arbitration",
        "received_from": "Registry",
        "date": "2024-01-10",
        "time_slot": "10:00",
        "party1": "X",
        "party2": "Y",
        "assigned_to": "Sh_Vinod_Kumar",
        "ndoh_date": None,
        "ndoh_time": None,
        "disposal_of_case": None,
        "connected": 0,
    }
    fresh = dict(record, case_no=2)

    assert store.import_records([record, fresh]) == 1
    assert store.get_case(1, 2024).nature_of_case is NatureOfCase.CIVIL_RECOVERY
    assert store.get_case(2, 2024).date == date(2024, 1, 10)


def test_open_fails_when_directory_is_missing(tmp_path):
    with pytest.raises(StoreSetupError):
        CaseStore(tmp_path / "missing" / "cases.db")


def test_operations_wait_for_the_store_lock(store, make_case):
    make_case(41)
    results = {}

    def read_docket():
        results["docket"] = store.todays_docket()

    def write_case():
        results["case_id"] = store.create_case(
            42, 2024, NatureOfCase.MACT_CASE, "MACT", time(12, 0), "Asha", "Transport Co", "Sh_Harish_Mehta"
        )

    store._lock.acquire()
    try:
        threads = [threading.Thread(target=read_docket), threading.Thread(target=write_case)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=0.2)
            assert thread.is_alive()
        assert results == {}
    finally:
        store._lock.release()

    for thread in threads:
        thread.join(timeout=5)
        assert not thread.is_alive()
    assert results["case_id"] > 0
    assert 41 in [case.case_no for case in results["docket"]]


def test_register_spelling_of_electricity_act_matches_nature_filter(store, make_case):
    _insert_raw(store, case_no=51, nature_of_case="PetitionUnderElectricityAct", date="2024-03-15")
    make_case(52, nature_of_case=NatureOfCase.PETITION_UNDER_ELECTRICITY_ACT)

    result = store.query(
        CaseFilter(
            start_date=date(2024, 3, 15),
            end_date=date(2024, 3, 15),
            nature_of_case=NatureOfCase.PETITION_UNDER_ELECTRICITY_ACT,
        )
    )
    assert sorted(case.case_no for case in result.cases) == [51, 52]
