"""Pytest configuration and fixtures."""

from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import numpy as np
import pytest

from utils.qc_series import generate_series

TODAY = date(2024, 3, 31)


class FixedSource:
    """Nguồn 'ngẫu nhiên' trả lần lượt các giá trị cho trước (lặp vòng)."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        v = self.values[self.calls % len(self.values)]
        self.calls += 1
        return v


class FakeModels:
    def __init__(self, text="", exc=None):
        self.text = text
        self.exc = exc
        self.calls = []

    def generate_content(self, model, contents):
        self.calls.append({"model": model, "contents": contents})
        if self.exc is not None:
            raise self.exc
        return SimpleNamespace(text=self.text)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def fixed_source():
    """Factory: FixedSource(values)."""
    return FixedSource


@pytest.fixture
def flat_series():
    """30 điểm không nhiễu (r = 0.5) với drift mặc định."""
    return generate_series(random_source=FixedSource([0.5]), today=TODAY)


@pytest.fixture
def seeded_series():
    return generate_series(random_source=np.random.default_rng(42), today=TODAY)


@pytest.fixture
def make_client():
    """Factory cho client Gemini giả: make_client(text=..., exc=...)."""

    def _make(text="", exc=None):
        return SimpleNamespace(models=FakeModels(text=text, exc=exc))

    return _make
