"""Tests for sample / document helpers and the demo data."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from utils.documents import DocumentSOP, add_document, new_draft, preview
from utils.mock_data import MOCK_DOCUMENTS, MOCK_PATIENTS, MOCK_SAMPLES, SOP_EXAMPLE_PROMPTS
from utils.samples import (
    CUSTODY_ORDER,
    SampleStatus,
    count_in_process,
    create_sample,
    custody_timeline,
    filter_samples,
    find_patient,
    make_barcode,
    next_sample_id,
    simulate_barcode_scan,
)


class TestFilterSamples:
    def test_no_filter_returns_all(self) -> None:
        assert filter_samples(MOCK_SAMPLES, MOCK_PATIENTS) == list(MOCK_SAMPLES)

    def test_search_by_barcode(self) -> None:
        out = filter_samples(MOCK_SAMPLES, MOCK_PATIENTS, search="9932")
        assert [s.id for s in out] == ["S002"]

    def test_search_by_patient_name_case_insensitive(self) -> None:
        out = filter_samples(MOCK_SAMPLES, MOCK_PATIENTS, search="emily")
        assert [s.id for s in out] == ["S004"]

    def test_search_by_sample_id(self) -> None:
        out = filter_samples(MOCK_SAMPLES, MOCK_PATIENTS, search="s003")
        assert [s.id for s in out] == ["S003"]

    def test_status_filter(self) -> None:
        out = filter_samples(MOCK_SAMPLES, MOCK_PATIENTS, status=SampleStatus.PROCESSING)
        assert [s.id for s in out] == ["S002"]

    def test_search_and_status_combined(self) -> None:
        out = filter_samples(MOCK_SAMPLES, MOCK_PATIENTS, search="john", status=SampleStatus.RECEIVED)
        assert [s.id for s in out] == ["S003"]

    def test_no_match(self) -> None:
        assert filter_samples(MOCK_SAMPLES, MOCK_PATIENTS, search="zzz") == []


class TestSampleHelpers:
    def test_count_in_process(self) -> None:
        # S001 analyzed; S002..S004 still in process
        assert count_in_process(MOCK_SAMPLES) == 3

    def test_next_sample_id(self) -> None:
        assert next_sample_id(MOCK_SAMPLES) == "S005"

    def test_make_barcode(self, fixed_source) -> None:
        patient = MOCK_PATIENTS[0]
        assert make_barcode(patient, fixed_source([0.42])) == "8821-S42"

    def test_create_sample_prepends_and_does_not_mutate(self, fixed_source) -> None:
        original = list(MOCK_SAMPLES)
        now = datetime(2024, 1, 2, 9, 0)
        out = create_sample(original, MOCK_PATIENTS[1], "Serum", SampleStatus.COLLECTED,
                            fixed_source([0.07]), now=now)
        assert len(out) == len(original) + 1
        assert original == list(MOCK_SAMPLES)
        new = out[0]
        assert new.id == "S005"
        assert new.patient_id == "P002"
        assert new.barcode == "9932-S7"
        assert new.collection_date == now
        assert new.status == SampleStatus.COLLECTED

    def test_create_sample_defaults(self, fixed_source) -> None:
        out = create_sample([], MOCK_PATIENTS[0], "", None, fixed_source([0.5]))
        assert out[0].sample_type == "Unknown"
        assert out[0].status == SampleStatus.COLLECTED
        assert out[0].id == "S001"

    def test_find_patient(self) -> None:
        assert find_patient(MOCK_PATIENTS, "P003").name == "Robert Johnson"
        assert find_patient(MOCK_PATIENTS, "P999") is None

    def test_simulate_scan(self, fixed_source) -> None:
        assert simulate_barcode_scan(MOCK_SAMPLES, fixed_source([0.6])) == "1120-S01"
        assert simulate_barcode_scan([], fixed_source([0.6])) is None


class TestCustodyTimeline:
    def test_timeline_up_to_current_status_newest_first(self) -> None:
        sample = MOCK_SAMPLES[1]  # Processing
        events = custody_timeline(sample)
        assert [e.status for e in events] == [
            SampleStatus.PROCESSING,
            SampleStatus.RECEIVED,
            SampleStatus.COLLECTED,
        ]
        assert [e.actor for e in events] == ["Lab Tech", "Lab Reception", "Phlebotomist"]

    def test_timeline_offsets(self) -> None:
        sample = MOCK_SAMPLES[0]  # Analyzed
        events = list(reversed(custody_timeline(sample)))
        assert len(events) == 4
        for i, e in enumerate(events):
            assert e.at == sample.collection_date + timedelta(hours=2.5 * i)

    def test_custody_order(self) -> None:
        assert CUSTODY_ORDER[0] == SampleStatus.COLLECTED
        assert CUSTODY_ORDER[-1] == SampleStatus.ARCHIVED


class TestDocuments:
    def test_new_draft(self) -> None:
        now = datetime(2024, 5, 6, 7, 8, 9)
        doc = new_draft("  Spill Clean-up ", "1. PURPOSE\n...", now=now)
        assert doc.id == f"DOC-{int(now.timestamp() * 1000)}"
        assert doc.title == "Spill Clean-up"
        assert doc.version == "0.1-DRAFT"
        assert doc.status == "Draft"
        assert doc.last_updated == date(2024, 5, 6)

    def test_add_document_prepends(self) -> None:
        doc = new_draft("X", "y", now=datetime(2024, 1, 1))
        docs = add_document(MOCK_DOCUMENTS, doc)
        assert docs[0] is doc
        assert len(docs) == len(MOCK_DOCUMENTS) + 1

    def test_unknown_status_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown document status"):
            DocumentSOP("D", "t", "c", "1.0", date(2024, 1, 1), status="Retired")

    def test_preview(self) -> None:
        assert preview("short") == "short"
        long = "a" * 200
        assert preview(long) == "a" * 150 + "..."
        assert preview(None) == ""


class TestMockData:
    def test_samples_reference_known_patients(self) -> None:
        ids = {p.id for p in MOCK_PATIENTS}
        assert all(s.patient_id in ids for s in MOCK_SAMPLES)

    def test_documents(self) -> None:
        assert [d.id for d in MOCK_DOCUMENTS] == ["DOC-001", "DOC-002"]
        assert MOCK_DOCUMENTS[0].status == "Approved"

    def test_example_prompts(self) -> None:
        assert len(SOP_EXAMPLE_PROMPTS) == 3
        assert all(len(p) == 3 for p in SOP_EXAMPLE_PROMPTS)
