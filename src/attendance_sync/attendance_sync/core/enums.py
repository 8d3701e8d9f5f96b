from __future__ import annotations

from enum import Enum, IntEnum


class PunchDirection(str, Enum):
    """Hướng quẹt thẻ do thiết bị ghi nhận (chỉ mang tính tham khảo)."""

    IN = "in"
    OUT = "out"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value) -> "PunchDirection":
        raw = str(value).strip().lower() if value is not None else ""
        if raw in {"in", "entry", "0"}:
            return cls.IN
        if raw in {"out", "exit", "1"}:
            return cls.OUT
        return cls.UNKNOWN


class RecordKind(IntEnum):
    """Giá trị cột `type` của bảng attendances/leaves."""

    CHECK_IN = 0
    CHECK_OUT = 1


class RecordStatus(str, Enum):
    """Trạng thái chấm công chuẩn hoá.

    Cột `status` trong CSDL chỉ lưu 1 (đúng giờ) hoặc 0 (đi muộn / về sớm).
    """

    ON_TIME = "ON_TIME"
    LATE = "LATE"
    EARLY_LEAVE = "EARLY_LEAVE"

    @property
    def db_value(self) -> int:
        return 1 if self is RecordStatus.ON_TIME else 0


class WriteResult(str, Enum):
    CREATED = "created"
    SKIPPED = "skipped"


class Disposition(str, Enum):
    """Kết quả xử lý một nhóm (nhân viên, ngày).

    Nhóm bị lỗi không có kết quả riêng; được đếm vào SyncStats.errors.
    """

    CREATED = "created"
    SKIPPED = "skipped"
    EMPLOYEE_NOT_FOUND = "employee_not_found"


class SyncOutcome(str, Enum):
    OK = "ok"
    CONNECTIVITY_FAILED = "connectivity_failed"
    PARTIAL_WITH_ERRORS = "partial_with_errors"
