"""
Chuỗi điểm QC theo ngày (mô phỏng) cho biểu đồ Levey–Jennings.

Nguồn nhiễu được truyền vào (`random_source`) để có thể seed và tái lập kết quả
trong test; bất kỳ object nào có `random() -> float trong [0, 1)` đều dùng được
(numpy Generator, random.Random, stub trong test).
"""
import logging
from dataclasses import dataclass, field, fields
from datetime import date, timedelta
from typing import Optional, Tuple

import numpy as np
import pandas as pd

from utils.statistics import STATUS_LABELS, InvalidParameter, QCStatus, check_sd, classify

logger = logging.getLogger(__name__)

DEFAULT_TEST_NAME = "Hemoglobin A1c"
DEFAULT_INSTRUMENT_ID = "INST-01"


@dataclass(frozen=True)
class QCObservation:
    id: str
    test_name: str
    timestamp: date
    value: float
    mean: float
    sd: float
    status: QCStatus
    instrument_id: str

    def __post_init__(self):
        # status luôn = classify(value, mean, sd), kể cả khi tạo qua dataclasses.replace
        expected = classify(self.value, self.mean, self.sd)
        if self.status != expected:
            raise InvalidParameter(
                f"status {self.status!r} does not match value {self.value} "
                f"(mean {self.mean}, sd {self.sd}): expected {expected.name}"
            )
        object.__setattr__(self, "status", expected)

    @classmethod
    def create(cls, id, test_name, timestamp, value, mean, sd, instrument_id):
        """Tạo observation với status tính từ (value, mean, sd)."""
        return cls(
            id=id,
            test_name=test_name,
            timestamp=timestamp,
            value=float(value),
            mean=float(mean),
            sd=float(sd),
            status=classify(value, mean, sd),
            instrument_id=instrument_id,
        )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "test_name": self.test_name,
            "timestamp": self.timestamp.isoformat(),
            "value": self.value,
            "mean": self.mean,
            "sd": self.sd,
            "status": STATUS_LABELS[self.status],
            "instrument_id": self.instrument_id,
        }


@dataclass(frozen=True)
class QCSeries:
    observations: Tuple[QCObservation, ...] = ()

    def __post_init__(self):
        obs = tuple(self.observations)
        for prev, cur in zip(obs, obs[1:]):
            if cur.timestamp <= prev.timestamp:
                raise InvalidParameter(
                    f"timestamps must be strictly increasing ({prev.timestamp} -> {cur.timestamp})"
                )
        object.__setattr__(self, "observations", obs)

    def __len__(self):
        return len(self.observations)

    def __iter__(self):
        return iter(self.observations)

    def __getitem__(self, idx):
        return self.observations[idx]

    @property
    def mean(self):
        return self.observations[0].mean if self.observations else np.nan

    @property
    def sd(self):
        return self.observations[0].sd if self.observations else np.nan

    @property
    def test_name(self):
        return self.observations[0].test_name if self.observations else ""

    @property
    def instrument_id(self):
        return self.observations[0].instrument_id if self.observations else ""

    def values(self):
        return [o.value for o in self.observations]

    def count(self, status: QCStatus) -> int:
        return sum(1 for o in self.observations if o.status == status)

    def alerts(self, min_status: QCStatus = QCStatus.WARNING):
        """Các điểm có mức độ >= min_status, theo thứ tự thời gian."""
        return [o for o in self.observations if o.status >= min_status]

    def tail(self, n: int) -> "QCSeries":
        if n <= 0:
            return QCSeries(())
        return QCSeries(self.observations[-n:])

    def to_records(self) -> list:
        return [o.to_record() for o in self.observations]

    def to_frame(self) -> pd.DataFrame:
        cols = [f.name for f in fields(QCObservation)]
        if not self.observations:
            return pd.DataFrame(columns=cols + ["z_score", "status_label"])
        df = pd.DataFrame([{c: getattr(o, c) for c in cols} for o in self.observations])
        df["timestamp"] = pd.to_datetime(df["timestamp"])
        df["status"] = df["status"].astype(int)
        df["z_score"] = (df["value"] - df["mean"]) / df["sd"]
        df["status_label"] = [STATUS_LABELS[o.status] for o in self.observations]
        return df


def generate_series(
    window_days: int = 30,
    base_mean: float = 100.0,
    sd: float = 5.0,
    drift_start_day: int = 25,
    drift_rate_per_day: float = 3.0,
    random_source=None,
    test_name: str = DEFAULT_TEST_NAME,
    instrument_id: str = DEFAULT_INSTRUMENT_ID,
    today: Optional[date] = None,
) -> QCSeries:
    """
    Sinh chuỗi QC 1 điểm/ngày trong `window_days` ngày, kết thúc trước `today`.

    - nhiễu đều khoảng ±1 SD: (r - 0.5) * sd * 2
    - từ ngày i > drift_start_day cộng thêm (i - drift_start_day) * drift_rate_per_day
    - giá trị làm tròn 2 chữ số, status phân loại trên giá trị đã làm tròn
    """
    if int(window_days) <= 0:
        raise InvalidParameter(f"window_days must be > 0 (got {window_days!r})")
    check_sd(sd)

    window_days = int(window_days)
    if random_source is None:
        random_source = np.random.default_rng()
    if today is None:
        today = date.today()

    start_date = today - timedelta(days=window_days)

    observations = []
    for i in range(window_days):
        noise = (float(random_source.random()) - 0.5) * sd * 2
        val = base_mean + noise
        if i > drift_start_day:
            val += (i - drift_start_day) * drift_rate_per_day

        observations.append(
            QCObservation.create(
                id=f"QC-{i}",
                test_name=test_name,
                timestamp=start_date + timedelta(days=i),
                value=round(val, 2),
                mean=base_mean,
                sd=sd,
                instrument_id=instrument_id,
            )
        )

    series = QCSeries(tuple(observations))
    logger.debug(
        "Generated %d QC points for %s (%d warning, %d out of control)",
        len(series),
        test_name,
        series.count(QCStatus.WARNING),
        series.count(QCStatus.OUT_OF_CONTROL),
    )
    return series


@dataclass
class SeriesConfig:
    window_days: int = 30
    base_mean: float = 100.0
    sd: float = 5.0
    drift_start_day: int = 25
    drift_rate_per_day: float = 3.0
    test_name: str = DEFAULT_TEST_NAME
    instrument_id: str = DEFAULT_INSTRUMENT_ID
    seed: Optional[int] = field(default=None)

    @classmethod
    def from_mapping(cls, mapping) -> "SeriesConfig":
        """Đọc từ dict/secrets, bỏ qua key lạ, ép kiểu theo default."""
        cfg = cls()
        if not mapping:
            return cfg
        casts = {
            "window_days": int,
            "base_mean": float,
            "sd": float,
            "drift_start_day": int,
            "drift_rate_per_day": float,
            "test_name": str,
            "instrument_id": str,
        }
        for key, cast in casts.items():
            if key in mapping and mapping[key] not in (None, ""):
                setattr(cfg, key, cast(mapping[key]))
        seed = mapping.get("seed")
        if seed not in (None, ""):
            cfg.seed = int(seed)
        return cfg

    def generate(self, random_source=None, today: Optional[date] = None) -> QCSeries:
        if random_source is None and self.seed is not None:
            random_source = np.random.default_rng(self.seed)
        return generate_series(
            window_days=self.window_days,
            base_mean=self.base_mean,
            sd=self.sd,
            drift_start_day=self.drift_start_day,
            drift_rate_per_day=self.drift_rate_per_day,
            random_source=random_source,
            test_name=self.test_name,
            instrument_id=self.instrument_id,
            today=today,
        )
