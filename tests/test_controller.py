from __future__ import annotations

import pytest

QtCore = pytest.importorskip("PySide6.QtCore")

from mirrorfit_app.controller.measure_controller import MeasureController  # noqa: E402
from mirrorfit_core.pose_detector import PoseDetector  # noqa: E402
from mirrorfit_core.readout import describe_calibration  # noqa: E402


class FakeView:
    def __init__(self):
        self.statuses: list[str] = []
        self.errors: list[tuple[str, str]] = []
        self.calibration_text: str | None = None

    def set_measurements(self, output) -> None:
        pass

    def set_calibration_text(self, text: str) -> None:
        self.calibration_text = text

    def set_status(self, message: str, timeout_ms: int = 3000) -> None:
        self.statuses.append(message)

    def show_error(self, title: str, message: str) -> None:
        self.errors.append((title, message))

    def set_frame_pixmap(self, pixmap) -> None:
        pass

    def ask_snapshot_dir(self):
        return None


class FakePose:
    def __init__(self):
        self.closed = False

    def close(self) -> None:
        self.closed = True


@pytest.fixture(scope="module")
def qt_app():
    app = QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])
    yield app


@pytest.fixture
def controller(qt_app):
    view = FakeView()
    ctrl = MeasureController(view)
    yield ctrl, view
    ctrl.close()


def _fake_detector() -> tuple[PoseDetector, FakePose]:
    det = PoseDetector.__new__(PoseDetector)
    pose = FakePose()
    det._pose = pose
    return det, pose


def test_rejected_text_reports_active_ratio(controller):
    ctrl, view = controller
    ctrl.engine.set_calibration(0.25)

    ctrl.set_calibration_text("0.")
    assert ctrl.engine.units_per_px == 0.25
    assert describe_calibration(0.25) in view.statuses[-1]

    ctrl.sync_calibration_field()
    assert view.calibration_text == "0.2500"


def test_field_cleared_after_rejected_text_when_uncalibrated(controller):
    ctrl, view = controller
    ctrl.set_calibration_text("abc")
    assert not ctrl.engine.is_calibrated
    assert describe_calibration(None) in view.statuses[-1]
    ctrl.sync_calibration_field()
    assert view.calibration_text == ""


def test_detector_ready_before_close_starts_session(controller):
    ctrl, view = controller
    det, pose = _fake_detector()
    ctrl._on_detector_ready(det)
    assert ctrl._session is not None
    ctrl.close()
    assert pose.closed


def test_detector_arriving_after_close_is_released(controller):
    ctrl, view = controller
    ctrl.close()
    det, pose = _fake_detector()
    ctrl._on_detector_ready(det)

    assert pose.closed
    assert ctrl._session is None
    assert ctrl._detector is None
