from datetime import date, time

import pytest

from case_store import CaseStore
from case_types import NatureOfCase


class FixedClock:
    def __init__(self, current: date):
        self.current = current

    def __call__(self) -> date:
        return self.current


@pytest.fixture
def clock():
    return FixedClock(date(2024, 3, 15))


@pytest.fixture
def store(tmp_path, clock):
    case_store = CaseStore(tmp_path / "cases.db", today=clock)
    yield case_store
    case_store.close()


@pytest.fixture
def make_case(store):
    def _make(case_no: int, year: int = 2024, **overrides) -> int:
        fields = {
            "nature_of_case": NatureOfCase.CIVIL_RECOVERY,
            "received_from": "Civil Judge Jr. Div.",
            "time_slot": time(10, 30),
            "party1": "Ram Lal",
            "party2": "Shyam Lal",
            "assigned_to": "Smt_Anita_Verma",
        }
        fields.update(overrides)
        return store.create_case(case_no=case_no, year=year, **fields)

    return _make
