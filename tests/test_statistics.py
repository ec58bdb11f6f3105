"""Tests for the QC classifier and descriptive statistics."""

from __future__ import annotations

import math

import pytest

from utils.statistics import (
    STATUS_LABELS,
    InvalidParameter,
    QCStatus,
    classify,
    deviation_sd,
    mean_sd_cv,
)


class TestClassifyExamples:
    def test_warning_example(self) -> None:
        assert classify(111, 100, 5) == QCStatus.WARNING

    def test_out_of_control_example(self) -> None:
        assert classify(116, 100, 5) == QCStatus.OUT_OF_CONTROL

    def test_in_control_example(self) -> None:
        assert classify(105, 100, 5) == QCStatus.IN_CONTROL

    def test_value_on_mean(self) -> None:
        assert classify(100, 100, 5) == QCStatus.IN_CONTROL


class TestBoundaries:
    """Limits are strict: exactly 2SD / 3SD stay in the lower class."""

    @pytest.mark.parametrize("mean,sd", [(100.0, 5.0), (0.0, 1.0), (-20.0, 0.5), (7.5, 2.0)])
    def test_exactly_two_sd_is_in_control(self, mean, sd) -> None:
        assert classify(mean + 2 * sd, mean, sd) == QCStatus.IN_CONTROL
        assert classify(mean - 2 * sd, mean, sd) == QCStatus.IN_CONTROL

    @pytest.mark.parametrize("mean,sd", [(100.0, 5.0), (0.0, 1.0), (-20.0, 0.5), (7.5, 2.0)])
    def test_exactly_three_sd_is_warning(self, mean, sd) -> None:
        assert classify(mean + 3 * sd, mean, sd) == QCStatus.WARNING
        assert classify(mean - 3 * sd, mean, sd) == QCStatus.WARNING

    @pytest.mark.parametrize("eps", [1e-6, 0.01, 0.5])
    def test_just_above_two_sd_is_warning(self, eps) -> None:
        assert classify(110 + eps, 100, 5) == QCStatus.WARNING

    @pytest.mark.parametrize("eps", [1e-6, 0.01, 0.5])
    def test_just_above_three_sd_is_out_of_control(self, eps) -> None:
        assert classify(115 + eps, 100, 5) == QCStatus.OUT_OF_CONTROL


class TestProperties:
    @pytest.mark.parametrize("d", [0.0, 1.25, 9.75, 10.0, 10.5, 15.0, 15.25, 40.0])
    def test_symmetry(self, d) -> None:
        assert classify(100 + d, 100, 5) == classify(100 - d, 100, 5)

    def test_monotonic_in_distance(self) -> None:
        distances = [i * 0.25 for i in range(0, 100)]
        severities = [classify(100 + d, 100, 5) for d in distances]
        assert severities == sorted(severities)

    def test_severity_order(self) -> None:
        assert QCStatus.IN_CONTROL < QCStatus.WARNING < QCStatus.OUT_OF_CONTROL
        assert max(QCStatus) == QCStatus.OUT_OF_CONTROL

    def test_labels_cover_all_statuses(self) -> None:
        assert set(STATUS_LABELS) == set(QCStatus)
        assert STATUS_LABELS[QCStatus.OUT_OF_CONTROL] == "Out of Control"


class TestInvalidParameters:
    @pytest.mark.parametrize("sd", [0, 0.0, -1, -5.0, float("nan")])
    def test_non_positive_sd_raises(self, sd) -> None:
        with pytest.raises(InvalidParameter):
            classify(100, 100, sd)

    def test_invalid_parameter_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="sd must be > 0"):
            deviation_sd(100, 100, 0)

    def test_non_numeric_sd_raises(self) -> None:
        with pytest.raises(InvalidParameter):
            classify(100, 100, None)


class TestDeviation:
    def test_deviation_in_sd_units(self) -> None:
        assert deviation_sd(111, 100, 5) == pytest.approx(2.2)
        assert deviation_sd(89, 100, 5) == pytest.approx(2.2)


class TestMeanSdCv:
    def test_basic(self) -> None:
        mean, sd, cv = mean_sd_cv([98.0, 100.0, 102.0])
        assert mean == pytest.approx(100.0)
        assert sd == pytest.approx(2.0)
        assert cv == pytest.approx(2.0)

    def test_ignores_nan(self) -> None:
        mean, sd, _ = mean_sd_cv([1.0, float("nan"), 3.0])
        assert mean == pytest.approx(2.0)
        assert sd == pytest.approx(math.sqrt(2.0))

    def test_empty(self) -> None:
        assert all(math.isnan(x) for x in mean_sd_cv([]))

    def test_single_value_has_no_sd(self) -> None:
        mean, sd, cv = mean_sd_cv([5.0])
        assert mean == 5.0
        assert math.isnan(sd)
        assert math.isnan(cv)
