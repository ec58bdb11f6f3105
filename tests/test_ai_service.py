"""Tests for the Gemini assistant wrapper (no network: fake client)."""

from __future__ import annotations

import logging

import pytest

from services import ai_service
from services.ai_service import (
    DEFAULT_MODEL,
    MSG_EMPTY_ANALYSIS,
    MSG_EMPTY_DRAFT,
    MSG_ERR_ANALYSIS,
    MSG_ERR_DRAFT,
    MSG_NO_KEY,
    MSG_NO_KEY_ANALYSIS,
    analyze_qc_trends,
    build_qc_trend_prompt,
    build_sop_prompt,
    generate_sop_draft,
    resolve_api_key,
)


class TestPrompts:
    def test_trend_prompt_lists_every_point(self, flat_series) -> None:
        prompt = build_qc_trend_prompt(flat_series)
        assert prompt.count("Date: ") == 30
        assert "Date: 2024-03-30, Value: 112.0, Status: Warning" in prompt
        assert "Hemoglobin A1c" in prompt
        assert "Mean is 100, SD is 5." in prompt
        assert "1-3s" in prompt

    def test_sop_prompt_sections(self) -> None:
        prompt = build_sop_prompt("Centrifuge Maintenance", "weekly cleaning")
        assert "Title: Centrifuge Maintenance" in prompt
        assert "Context/Specific Requirements: weekly cleaning" in prompt
        for section in ("1. Purpose", "2. Scope", "3. Materials/Equipment",
                        "4. Procedure", "5. Safety Precautions"):
            assert section in prompt


class TestAnalyzeQcTrends:
    def test_no_key_no_client(self, flat_series) -> None:
        assert analyze_qc_trends(flat_series) == MSG_NO_KEY_ANALYSIS

    def test_returns_model_text(self, flat_series, make_client) -> None:
        client = make_client(text="Shift detected on last 4 runs.")
        assert analyze_qc_trends(flat_series, client=client) == "Shift detected on last 4 runs."
        call = client.models.calls[0]
        assert call["model"] == DEFAULT_MODEL
        assert "Hemoglobin A1c" in call["contents"]

    def test_model_override(self, flat_series, make_client) -> None:
        client = make_client(text="ok")
        analyze_qc_trends(flat_series, client=client, model="gemini-x")
        assert client.models.calls[0]["model"] == "gemini-x"

    def test_empty_text(self, flat_series, make_client) -> None:
        assert analyze_qc_trends(flat_series, client=make_client(text="")) == MSG_EMPTY_ANALYSIS

    def test_api_error_is_logged_not_raised(self, flat_series, make_client, caplog) -> None:
        client = make_client(exc=ConnectionError("boom"))
        with caplog.at_level(logging.ERROR, logger="services.ai_service"):
            assert analyze_qc_trends(flat_series, client=client) == MSG_ERR_ANALYSIS
        assert "Gemini API error" in caplog.text

    def test_missing_sdk(self, flat_series, monkeypatch) -> None:
        monkeypatch.setattr(ai_service, "genai", None)
        assert analyze_qc_trends(flat_series, api_key="k") == MSG_ERR_ANALYSIS


class TestGenerateSopDraft:
    def test_no_key_no_client(self) -> None:
        assert generate_sop_draft("T", "C") == MSG_NO_KEY

    def test_returns_model_text(self, make_client) -> None:
        client = make_client(text="1. PURPOSE\n...")
        assert generate_sop_draft("T", "C", client=client) == "1. PURPOSE\n..."
        assert "Title: T" in client.models.calls[0]["contents"]

    def test_empty_text(self, make_client) -> None:
        assert generate_sop_draft("T", "C", client=make_client(text=None)) == MSG_EMPTY_DRAFT

    def test_api_error(self, make_client) -> None:
        client = make_client(exc=RuntimeError("quota"))
        assert generate_sop_draft("T", "C", client=client) == MSG_ERR_DRAFT

    def test_make_client_without_sdk_raises(self, monkeypatch) -> None:
        monkeypatch.setattr(ai_service, "genai", None)
        with pytest.raises(RuntimeError, match="google-genai"):
            ai_service.make_client("k")


class TestResolveApiKey:
    def test_secrets_first(self, monkeypatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        assert resolve_api_key({"gemini": {"api_key": "secret-key"}}) == "secret-key"

    def test_env_fallbacks(self, monkeypatch) -> None:
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("API_KEY", " legacy ")
        assert resolve_api_key({}) == "legacy"
        monkeypatch.setenv("GEMINI_API_KEY", "gem")
        assert resolve_api_key(None) == "gem"

    def test_nothing_configured(self, monkeypatch) -> None:
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("API_KEY", raising=False)
        assert resolve_api_key({"gemini": {}}) == ""
