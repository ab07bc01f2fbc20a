from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from typing import TypeGuard

import cv2
import numpy as np
from PySide6.QtCore import QObject, QThread, QTimer, Signal, Slot
from PySide6.QtCore import Qt
from PySide6.QtGui import QImage, QPixmap

import shiboken6

from mirrorfit_core.calibration import CalibrationError
from mirrorfit_core.measurement import MeasurementConfig, MeasurementEngine
from mirrorfit_core.pose_detector import PoseDetector, PoseDetectorConfig
from mirrorfit_core.posture import PostureMode
from mirrorfit_core.readout import describe_calibration
from mirrorfit_core.session import MeasurementSession, SessionConfig
from mirrorfit_core.snapshot import SnapshotError, save_snapshot

from .view_protocol import MeasureView

logger = logging.getLogger(__name__)


def _bgr_to_qpixmap(frame_bgr: np.ndarray, max_w: int, max_h: int) -> QPixmap:
    """BGR 帧转 QPixmap 并按最大尺寸等比缩放。

    输入: frame_bgr (h,w,3) BGR 图像；max_w/max_h 最大显示尺寸。
    输出: QPixmap。
    """
    h, w = frame_bgr.shape[:2]
    rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
    qimg = QImage(rgb.data, w, h, rgb.strides[0], QImage.Format.Format_RGB888)
    pm = QPixmap.fromImage(qimg.copy())
    return pm.scaled(
        max_w,
        max_h,
        Qt.AspectRatioMode.KeepAspectRatio,
        Qt.TransformationMode.SmoothTransformation,
    )


def format_ratio(units_per_px: Optional[float]) -> str:
    return "" if units_per_px is None else f"{units_per_px:.4f}"


@dataclass
class RuntimeState:
    camera_index: int = 0
    running: bool = False
    last_frame: Optional[np.ndarray] = None


class DetectorWorker(QObject):
    """后台线程工作者：加载 MediaPipe 模型（首次加载较慢）。

    输出: finished 信号发出 PoseDetector；failed 信号发出错误信息。
    """
    finished = Signal(object)  # PoseDetector
    failed = Signal(str)

    def __init__(self, config: Optional[PoseDetectorConfig] = None):
        super().__init__()
        self._config = config

    def run(self) -> None:
        try:
            self.finished.emit(PoseDetector(self._config))
        except Exception as e:
            self.failed.emit(str(e))


def _is_valid_thread(thread: Optional[QThread]) -> TypeGuard[QThread]:
    """结合 shiboken6 判断 Qt 线程对象是否仍然有效。"""
    try:
        return thread is not None and shiboken6.isValid(thread)  # type: ignore[attr-defined]
    except Exception:
        return False


class MeasureController(QObject):
    """控制器：承接UI事件，驱动逐帧测量；视图通过 MeasureView 协议更新。

    帧循环由 QTimer 驱动（UI 线程），MeasurementEngine 只在 UI 线程被访问。
    """

    def __init__(self, view: MeasureView, config: Optional[MeasurementConfig] = None):
        super().__init__()
        self._view = view
        self._state = RuntimeState()
        self._engine = MeasurementEngine(config)

        self._detector: Optional[PoseDetector] = None
        self._session: Optional[MeasurementSession] = None
        self._draw_skeleton = True

        self._loader_thread: Optional[QThread] = None
        self._loader_worker: Optional[DetectorWorker] = None

        # QTimer 必须归属 UI 线程
        self._timer = QTimer(self)
        self._timer.setInterval(33)  # ~30fps
        self._timer.timeout.connect(self._on_tick)

        self._cap: Optional[cv2.VideoCapture] = None
        self._closed = False

    @property
    def engine(self) -> MeasurementEngine:
        return self._engine

    def load_detector(self) -> None:
        """启动后台线程加载姿态模型。"""
        if _is_valid_thread(self._loader_thread) or self._detector is not None:
            return
        self._view.set_status("正在加载姿态模型（后台）…", 3000)

        thread = QThread()
        worker = DetectorWorker()
        worker.moveToThread(thread)

        thread.started.connect(worker.run)
        worker.finished.connect(self._on_detector_ready)
        worker.failed.connect(self._on_detector_failed)

        worker.finished.connect(thread.quit)
        worker.failed.connect(thread.quit)
        worker.finished.connect(worker.deleteLater)
        worker.failed.connect(worker.deleteLater)

        thread.finished.connect(self._on_loader_finished)
        thread.finished.connect(thread.deleteLater)

        self._loader_thread = thread
        self._loader_worker = worker
        thread.start()

    @Slot()
    def _on_loader_finished(self) -> None:
        self._loader_thread = None
        self._loader_worker = None

    @Slot(object)
    def _on_detector_ready(self, detector: object) -> None:
        if not isinstance(detector, PoseDetector):
            self._view.show_error("模型加载失败", "加载结果类型异常")
            return
        if self._closed:
            # 窗口已关闭后才加载完成，直接释放
            detector.close()
            return
        self._detector = detector
        self._session = MeasurementSession(
            self._engine,
            detector,
            SessionConfig(mirror=True, draw_skeleton=self._draw_skeleton),
        )
        self._view.set_status("姿态模型已就绪", 3000)

    @Slot(str)
    def _on_detector_failed(self, msg: str) -> None:
        logger.error("pose detector failed to load: %s", msg)
        self._view.show_error("模型加载失败", msg)

    # ---- 帧循环 ----

    def start(self, camera_index: int = 0) -> None:
        """打开摄像头并启动定时器。"""
        self.stop()
        self._state.camera_index = camera_index
        self._cap = cv2.VideoCapture(camera_index)
        if self._cap is None or not self._cap.isOpened():
            self._cap = None
            self._view.show_error("打开失败", f"无法打开摄像头 {camera_index}")
            return

        self.load_detector()
        self._state.running = True
        self._timer.start()
        self._view.set_status("摄像头已开启，请站到画面中", 3000)

    def stop(self) -> None:
        """停止帧循环并释放摄像头。测量历史与标定保留。"""
        self._state.running = False
        if self._timer.isActive():
            self._timer.stop()
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def _on_tick(self) -> None:
        if not self._state.running or self._cap is None:
            return
        ok, frame = self._cap.read()
        if not ok:
            self.stop()
            self._view.set_status("摄像头读取失败，已停止", 5000)
            return

        if self._session is None:
            # 模型还没加载完，只显示镜像画面
            shown = cv2.flip(frame, 1)
        else:
            result = self._session.process(frame)
            shown = result.frame
            self._view.set_measurements(result.output)

        self._state.last_frame = shown
        self._view.set_frame_pixmap(_bgr_to_qpixmap(shown, 960, 540))

    # ---- 用户操作 ----

    def toggle_skeleton(self) -> bool:
        self._draw_skeleton = not self._draw_skeleton
        if self._session is not None:
            self._session.draw_skeleton = self._draw_skeleton
        return self._draw_skeleton

    def set_posture_mode(self, mode: str) -> None:
        self._engine.set_posture_mode(PostureMode(mode))

    def auto_calibrate(self) -> None:
        try:
            ratio = self._engine.auto_calibrate()
        except CalibrationError as e:
            self._view.show_error("自动标定失败", str(e))
            return
        self._view.set_calibration_text(format_ratio(ratio))
        self._view.set_status(f"已自动标定：{ratio:.4f} cm/px", 3000)

    def set_calibration_text(self, text: str) -> None:
        try:
            self._engine.set_calibration_text(text)
        except CalibrationError as e:
            self._view.set_status(f"{e}；{describe_calibration(self._engine.units_per_px)}", 3000)

    def sync_calibration_field(self) -> None:
        """输入结束后把输入框回填为当前生效的标定系数。"""
        self._view.set_calibration_text(format_ratio(self._engine.units_per_px))

    def reset_calibration(self) -> None:
        self._engine.reset_calibration()
        self._view.set_calibration_text("")
        self._view.set_status("已清除标定", 2000)

    def snapshot(self) -> None:
        frame = self._state.last_frame
        if frame is None:
            self._view.show_error("截图失败", "当前没有画面")
            return
        directory = self._view.ask_snapshot_dir()
        if not directory:
            return
        try:
            path = save_snapshot(frame, directory)
        except SnapshotError as e:
            self._view.show_error("截图失败", str(e))
            return
        self._view.set_status(f"截图已保存：{path}", 5000)

    def close(self) -> None:
        """关闭控制器：停止循环、结束后台线程、释放模型。"""
        self._closed = True
        self.stop()

        thread = self._loader_thread
        if _is_valid_thread(thread):
            thread.quit()
            thread.wait(1500)
        self._loader_thread = None
        self._loader_worker = None

        if self._detector is not None:
            self._detector.close()
            self._detector = None
        self._session = None
