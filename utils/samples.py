from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional


class SampleStatus(str, Enum):
    COLLECTED = "Collected"
    RECEIVED = "Received"
    PROCESSING = "Processing"
    ANALYZED = "Analyzed"
    ARCHIVED = "Archived"


# Thứ tự chuỗi lưu mẫu (chain of custody)
CUSTODY_ORDER = [
    SampleStatus.COLLECTED,
    SampleStatus.RECEIVED,
    SampleStatus.PROCESSING,
    SampleStatus.ANALYZED,
    SampleStatus.ARCHIVED,
]

SAMPLE_TYPES = [
    "Whole Blood",
    "Whole Blood (EDTA)",
    "Serum",
    "Plasma",
    "Urine",
    "Tissue Biopsy",
    "CSF",
]


@dataclass(frozen=True)
class Patient:
    id: str
    name: str
    dob: date
    mrn: str
    gender: str


@dataclass(frozen=True)
class Sample:
    id: str
    patient_id: str
    sample_type: str
    collection_date: datetime
    status: SampleStatus
    barcode: str


@dataclass(frozen=True)
class CustodyEvent:
    status: SampleStatus
    at: datetime
    actor: str


def find_patient(patients, patient_id) -> Optional[Patient]:
    for p in patients:
        if p.id == patient_id:
            return p
    return None


def filter_samples(samples, patients, search: str = "", status: Optional[SampleStatus] = None) -> List[Sample]:
    """Lọc theo barcode / mã mẫu / tên bệnh nhân (không phân biệt hoa thường) và trạng thái."""
    term = (search or "").strip().lower()
    out = []
    for s in samples:
        if status is not None and s.status != status:
            continue
        if term:
            patient = find_patient(patients, s.patient_id)
            hay = [s.barcode.lower(), s.id.lower()]
            if patient is not None:
                hay.append(patient.name.lower())
            if not any(term in h for h in hay):
                continue
        out.append(s)
    return out


def count_in_process(samples) -> int:
    done = (SampleStatus.ANALYZED, SampleStatus.ARCHIVED)
    return sum(1 for s in samples if s.status not in done)


def next_sample_id(samples) -> str:
    return f"S00{len(samples) + 1}"


def make_barcode(patient: Patient, rng) -> str:
    suffix = patient.mrn.split("-")[1] if "-" in patient.mrn else patient.mrn
    return f"{suffix}-S{int(rng.random() * 100)}"


def create_sample(samples, patient: Patient, sample_type: str, status: SampleStatus, rng, now=None) -> List[Sample]:
    """Trả về list mới, mẫu mới nằm đầu danh sách."""
    if now is None:
        now = datetime.now()
    sample = Sample(
        id=next_sample_id(samples),
        patient_id=patient.id,
        sample_type=sample_type or "Unknown",
        collection_date=now,
        status=status or SampleStatus.COLLECTED,
        barcode=make_barcode(patient, rng),
    )
    return [sample] + list(samples)


def custody_timeline(sample: Sample) -> List[CustodyEvent]:
    idx = CUSTODY_ORDER.index(sample.status)
    events = []
    for i, status in enumerate(CUSTODY_ORDER[: idx + 1]):
        if i == 0:
            actor = "Phlebotomist"
        elif i == 1:
            actor = "Lab Reception"
        else:
            actor = "Lab Tech"
        at = sample.collection_date + timedelta(hours=i * 2.5)
        events.append(CustodyEvent(status=status, at=at, actor=actor))
    events.reverse()
    return events


def simulate_barcode_scan(samples, rng) -> Optional[str]:
    if not samples:
        return None
    return samples[int(rng.random() * len(samples))].barcode
