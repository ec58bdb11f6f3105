import math
from enum import IntEnum

import numpy as np


class InvalidParameter(ValueError):
    """Tham số không hợp lệ (sd <= 0, window_days <= 0, ...)."""


class QCStatus(IntEnum):
    # giá trị số = mức độ nghiêm trọng
    IN_CONTROL = 0
    WARNING = 1
    OUT_OF_CONTROL = 2


# Chỉ dùng cho hiển thị / xuất file / prompt, không dùng trong classify()
STATUS_LABELS = {
    QCStatus.IN_CONTROL: "In Control",
    QCStatus.WARNING: "Warning",
    QCStatus.OUT_OF_CONTROL: "Out of Control",
}

WARNING_LIMIT_SD = 2.0
REJECT_LIMIT_SD = 3.0


def check_sd(sd):
    """Raise InvalidParameter unless sd is a number > 0."""
    try:
        ok = float(sd) > 0
    except (TypeError, ValueError):
        ok = False
    if not ok:
        raise InvalidParameter(f"sd must be > 0 (got {sd!r})")


def deviation_sd(value, mean, sd):
    """Số SD mà `value` lệch khỏi `mean` (luôn >= 0)."""
    check_sd(sd)
    return abs(float(value) - float(mean)) / float(sd)


def classify(value, mean, sd) -> QCStatus:
    """
    Phân loại 1 điểm QC theo ngưỡng Levey–Jennings:
    - |dev| > 3 SD  -> OUT_OF_CONTROL
    - |dev| > 2 SD  -> WARNING
    - còn lại       -> IN_CONTROL
    So sánh dùng '>' (đúng 2SD vẫn là IN_CONTROL, đúng 3SD vẫn là WARNING).
    """
    dev = deviation_sd(value, mean, sd)
    if dev > REJECT_LIMIT_SD:
        return QCStatus.OUT_OF_CONTROL
    if dev > WARNING_LIMIT_SD:
        return QCStatus.WARNING
    return QCStatus.IN_CONTROL


def mean_sd_cv(values):
    arr = np.asarray(values, dtype=float)
    arr = arr[~np.isnan(arr)]
    if arr.size == 0:
        return np.nan, np.nan, np.nan
    mean = float(np.mean(arr))
    sd = float(np.std(arr, ddof=1)) if arr.size > 1 else np.nan
    cv = (sd / mean * 100.0) if mean != 0.0 and not math.isnan(sd) else np.nan
    return mean, sd, cv
