from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class EmployeeRepository(Protocol):
    """Giao diện repository cho Employee.

    Lưu ý (DIP): resolver phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def find_by_code(self, code: str, *, legacy_id: Optional[int] = None) -> Optional[Employee]:
        """Match `pin_code == code`, falling back to `id == legacy_id` when given."""

        raise NotImplementedError

    def create_employee(self, *, name: str, pin_code: str, email: str) -> Employee:
        raise NotImplementedError
