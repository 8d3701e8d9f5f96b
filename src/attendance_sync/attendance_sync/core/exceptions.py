class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConnectivityError(DomainError):
    """Raised when an external source cannot be reached."""


class SchemaError(DomainError):
    """Raised when an expected table or column is missing."""


class GroupProcessingError(DomainError):
    """Raised when one (employee, date) group fails to resolve."""

    def __init__(self, employee_code: str, work_date, cause: BaseException):
        super().__init__(f"{employee_code}@{work_date}: {cause}")
        self.employee_code = employee_code
        self.work_date = work_date
        self.cause = cause


class WriteConflict(DomainError):
    """Raised by repositories when a unique key rejects an insert."""
