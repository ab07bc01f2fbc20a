from __future__ import annotations

import pytest

from mirrorfit_core.calibration import (
    Calibration,
    CalibrationError,
    InvalidCalibrationInput,
    NoMeasurement,
)
from mirrorfit_core.measurement import MeasurementConfig, MeasurementEngine

from .helpers import STANDING, make_keypoints


@pytest.mark.parametrize("k, px", [(0.25, 160.0), (1.0, 40.0), (0.0123, 333.3)])
def test_round_trip(k, px):
    cal = Calibration()
    cal.set(k)
    assert cal.to_unit(px) == px * k
    cal.reset()
    assert cal.to_unit(px) is None


def test_uncalibrated_to_unit_is_none():
    cal = Calibration()
    assert not cal.is_calibrated
    assert cal.to_unit(10.0) is None
    cal.set(2)
    assert cal.to_unit(None) is None


@pytest.mark.parametrize("bad", [0, -1.5, float("nan"), float("inf"), "abc", None, True, [1]])
def test_invalid_manual_input_leaves_state(bad):
    cal = Calibration(0.5)
    with pytest.raises(InvalidCalibrationInput):
        cal.set(bad)
    assert cal.units_per_px == 0.5


def test_errors_share_base_class():
    assert issubclass(NoMeasurement, CalibrationError)
    assert issubclass(InvalidCalibrationInput, CalibrationError)
    assert issubclass(CalibrationError, ValueError)


def test_set_text():
    cal = Calibration()
    assert cal.set_text(" 0.2500 ") == 0.25
    with pytest.raises(InvalidCalibrationInput):
        cal.set_text("12cm")
    assert cal.units_per_px == 0.25
    assert cal.set_text("") is None
    assert not cal.is_calibrated


def test_from_known_width():
    cal = Calibration()
    assert cal.from_known_width(45, 90.0) == 0.5
    with pytest.raises(NoMeasurement):
        cal.from_known_width(45, None)
    with pytest.raises(NoMeasurement):
        cal.from_known_width(45, 0.0)
    with pytest.raises(InvalidCalibrationInput):
        cal.from_known_width(-1, 90.0)
    assert cal.units_per_px == 0.5


def _engine_with_shoulders(width_px: float) -> MeasurementEngine:
    engine = MeasurementEngine()
    half = width_px / 2
    engine.evaluate_frame(make_keypoints(
        left_shoulder=(100 - half, 100, 0.9),
        right_shoulder=(100 + half, 100, 0.9),
    ))
    return engine


def test_auto_calibrate_default_reference():
    engine = _engine_with_shoulders(40.0)
    assert engine.auto_calibrate() == 1.0
    assert engine.units_per_px == 1.0
    assert engine.to_unit(123.0) == 123.0


def test_auto_calibrate_custom_reference():
    engine = _engine_with_shoulders(80.0)
    assert engine.auto_calibrate(46) == pytest.approx(46 / 80)


def test_auto_calibrate_default_comes_from_config(standing):
    engine = MeasurementEngine(MeasurementConfig(reference_width=36.0))
    engine.evaluate_frame(standing)
    assert engine.auto_calibrate() == pytest.approx(0.9)


def test_auto_calibrate_without_shoulders_fails():
    engine = MeasurementEngine()
    engine.set_calibration(0.3)
    engine.evaluate_frame(make_keypoints(**{**STANDING, "left_shoulder": (80, 100, 0.1)}))
    with pytest.raises(NoMeasurement):
        engine.auto_calibrate()
    assert engine.units_per_px == 0.3


def test_auto_calibrate_before_any_frame_fails():
    engine = MeasurementEngine()
    with pytest.raises(NoMeasurement):
        engine.auto_calibrate()
    assert not engine.is_calibrated


def test_known_width_on_engine_uses_last_measurement(standing):
    engine = MeasurementEngine()
    engine.evaluate_frame(standing)
    assert engine.calibrate_from_known_width(20) == pytest.approx(0.5)
    assert engine.calibrate_from_known_width(30, shoulder_width_px=60.0) == pytest.approx(0.5)


def test_reset_calibration_keeps_height_buffer(standing):
    engine = MeasurementEngine()
    engine.evaluate_frame(standing)
    engine.auto_calibrate()
    engine.reset_calibration()

    assert not engine.is_calibrated
    assert engine.smoothed_height_px == pytest.approx(287.5)
    out = engine.evaluate_frame(standing)
    assert out.height_unit is None
    assert out.shoulder_width_unit is None
