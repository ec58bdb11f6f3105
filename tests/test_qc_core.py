"""Tests for the session store in qc_core (plain dict stands in for st.session_state)."""

from __future__ import annotations

import logging

import pytest

import qc_core
from utils.qc_series import DEFAULT_TEST_NAME, SeriesConfig


@pytest.fixture
def session(monkeypatch) -> dict:
    state: dict = {}
    monkeypatch.setattr(qc_core.st, "session_state", state)
    return state


class TestLabState:
    def test_series_generated_once_per_session(self, session, monkeypatch) -> None:
        monkeypatch.setattr(qc_core, "load_series_config", lambda: SeriesConfig(seed=7))
        first = qc_core.get_lab_state()["qc_series"]
        assert len(first) == 30
        assert qc_core.get_lab_state()["qc_series"] is first

    def test_invalid_settings_fall_back_to_defaults(self, session, monkeypatch, caplog) -> None:
        bad = SeriesConfig(sd=0.0, test_name="Broken analyte")
        monkeypatch.setattr(qc_core, "load_series_config", lambda: bad)
        with caplog.at_level(logging.INFO, logger="qc_core"):
            lab = qc_core.get_lab_state()

        assert lab["series_config"] == SeriesConfig()
        assert lab["qc_series"].test_name == DEFAULT_TEST_NAME
        generated = [r.getMessage() for r in caplog.records if "QC series generated" in r.getMessage()]
        assert generated == [f"QC series generated: 30 points for {DEFAULT_TEST_NAME}"]
        assert "Broken analyte" not in generated[0]
