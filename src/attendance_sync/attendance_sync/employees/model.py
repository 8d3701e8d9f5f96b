from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional


@dataclass(frozen=True)
class Schedule:
    """Lịch làm việc: giờ vào / giờ ra dự kiến."""

    time_in: time
    time_out: time


@dataclass(frozen=True)
class Employee:
    """Thực thể miền (domain): Nhân viên.

    Lưu ý: chỉ đọc đối với bộ đồng bộ, ngoại trừ trường hợp tự tạo nhân viên
    từ nguồn Hikvision.
    """

    employee_id: int
    name: str
    pin_code: Optional[str]
    schedule: Optional[Schedule] = None
