class CaseStoreError(Exception):
    pass


class StoreSetupError(CaseStoreError):
    """Raised when the database file can not be opened or its schema created."""


class UniquenessViolation(CaseStoreError):
    def __init__(self, case_no: int, year: int):
        super().__init__(f"Case {case_no}/{year} already exists")
        self.case_no = case_no
        self.year = year


class CaseDecodeError(CaseStoreError):
    """Raised when a stored row can not be turned into a Case."""

    def __init__(self, case_id: int | None, field: str, value):
        super().__init__(f"Invalid {field} {value!r} in case row {case_id}")
        self.case_id = case_id
        self.field = field
        self.value = value


class InvalidInput(CaseStoreError, ValueError):
    pass


class CommandError(Exception):
    pass
