from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget, QGridLayout, QStatusBar, QMessageBox, QMainWindow,
)

from mirrorfit_app.controller.measure_controller import MeasureController
from mirrorfit_core.posture import PostureMode, posture_grade
from mirrorfit_core.readout import format_angle, format_length, format_score
from mirrorfit_core.types import MeasurementOutput

GRADE_STYLES = {
    "good": "color: rgb(58,210,159);",
    "fair": "color: rgb(255,204,102);",
    "poor": "color: rgb(255,107,107);",
}


class MainWindow(QMainWindow):
    def __init__(self):
        """初始化主窗口并构造控制器。

        输入/输出: 无。
        作用: 设置窗口属性，创建控制器并搭建 UI 与事件绑定。
        """
        super().__init__()
        self.setWindowTitle("MirrorFit 身体测量（MediaPipe + PySide6）")
        self.resize(1200, 760)

        self._controller = MeasureController(self)

        self._build_ui()
        self._wire_events()

    def _build_ui(self) -> None:
        root = QWidget(self)
        self.setCentralWidget(root)

        self.btn_start_cam = QPushButton("开始摄像头")
        self.btn_stop = QPushButton("停止")
        self.btn_toggle_skel = QPushButton("显示/隐藏骨架")
        self.btn_snapshot = QPushButton("截图")

        self.cmb_mode = QComboBox()
        self.cmb_mode.addItem("体态：颈部", PostureMode.SIMPLE.value)
        self.cmb_mode.addItem("体态：颈部 + 背部", PostureMode.EXTENDED.value)

        self.edit_ratio = QLineEdit()
        self.edit_ratio.setPlaceholderText("cm/px")
        self.edit_ratio.setMaximumWidth(120)
        self.btn_auto_calib = QPushButton("自动标定（肩宽 40cm）")
        self.btn_reset_calib = QPushButton("清除标定")

        self.lbl_video = QLabel("摄像头画面")
        self.lbl_video.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.lbl_video.setMinimumSize(960, 540)

        self.lbl_shoulder_px = QLabel(format_length(None, "px"))
        self.lbl_shoulder_cm = QLabel(format_length(None, "cm"))
        self.lbl_height_px = QLabel(format_length(None, "px"))
        self.lbl_height_cm = QLabel(format_length(None, "cm"))
        self.lbl_posture = QLabel(format_score(None))
        self.lbl_angle = QLabel(format_angle(None))

        grp_controls = QGroupBox("操作")
        controls_layout = QHBoxLayout(grp_controls)
        controls_layout.addWidget(self.btn_start_cam)
        controls_layout.addWidget(self.btn_stop)
        controls_layout.addWidget(self.btn_toggle_skel)
        controls_layout.addWidget(self.btn_snapshot)
        controls_layout.addWidget(self.cmb_mode)
        controls_layout.addStretch(1)

        grp_calib = QGroupBox("标定")
        calib_layout = QHBoxLayout(grp_calib)
        calib_layout.addWidget(QLabel("cm/px："))
        calib_layout.addWidget(self.edit_ratio)
        calib_layout.addWidget(self.btn_auto_calib)
        calib_layout.addWidget(self.btn_reset_calib)
        calib_layout.addStretch(1)

        grp_readout = QGroupBox("测量")
        readout = QGridLayout(grp_readout)
        readout.addWidget(QLabel("肩宽"), 0, 0)
        readout.addWidget(self.lbl_shoulder_px, 0, 1)
        readout.addWidget(self.lbl_shoulder_cm, 0, 2)
        readout.addWidget(QLabel("身高"), 1, 0)
        readout.addWidget(self.lbl_height_px, 1, 1)
        readout.addWidget(self.lbl_height_cm, 1, 2)
        readout.addWidget(QLabel("体态"), 2, 0)
        readout.addWidget(self.lbl_posture, 2, 1)
        readout.addWidget(self.lbl_angle, 2, 2)

        layout = QVBoxLayout(root)
        layout.addWidget(grp_controls)
        layout.addWidget(grp_calib)
        layout.addWidget(self.lbl_video, 1)
        layout.addWidget(grp_readout)

        self._status = QStatusBar(self)
        self.setStatusBar(self._status)

    def _wire_events(self) -> None:
        self.btn_start_cam.clicked.connect(lambda: self._controller.start(0))
        self.btn_stop.clicked.connect(self._controller.stop)
        self.btn_toggle_skel.clicked.connect(self._controller.toggle_skeleton)
        self.btn_snapshot.clicked.connect(self._controller.snapshot)
        self.btn_auto_calib.clicked.connect(self._controller.auto_calibrate)
        self.btn_reset_calib.clicked.connect(self._controller.reset_calibration)
        self.edit_ratio.textEdited.connect(self._controller.set_calibration_text)
        self.edit_ratio.editingFinished.connect(self._controller.sync_calibration_field)
        self.cmb_mode.currentIndexChanged.connect(self._on_mode_changed)

    def _on_mode_changed(self, index: int) -> None:
        self._controller.set_posture_mode(self.cmb_mode.itemData(index))

    # ====== 供控制器调用（视图接口） ======

    def set_measurements(self, output: MeasurementOutput) -> None:
        """刷新测量读数与体态分颜色。输入: MeasurementOutput。输出: 无。"""
        self.lbl_shoulder_px.setText(format_length(output.shoulder_width_px, "px"))
        self.lbl_shoulder_cm.setText(format_length(output.shoulder_width_unit, "cm"))
        self.lbl_height_px.setText(format_length(output.height_px, "px"))
        self.lbl_height_cm.setText(format_length(output.height_unit, "cm"))
        self.lbl_posture.setText(format_score(output.posture_score))
        self.lbl_angle.setText(format_angle(output.posture_angle_deg))
        self.lbl_posture.setStyleSheet(GRADE_STYLES.get(posture_grade(output.posture_score), ""))

    def set_calibration_text(self, text: str) -> None:
        self.edit_ratio.setText(text)

    def set_frame_pixmap(self, pixmap: QPixmap) -> None:
        self.lbl_video.setPixmap(pixmap)

    def ask_snapshot_dir(self) -> Optional[str]:
        path = QFileDialog.getExistingDirectory(self, "选择截图保存目录")
        return path or None

    def show_error(self, title: str, message: str) -> None:
        """弹出错误消息框。输入: 标题与内容。输出: 无。"""
        QMessageBox.critical(self, title, message)

    def set_status(self, message: str, timeout_ms: int = 3000) -> None:
        """更新状态栏消息。输入: 文本与超时毫秒。输出: 无。"""
        self.statusBar().showMessage(message, timeout_ms)

    def closeEvent(self, event) -> None:
        """窗口关闭钩子：释放控制器资源后再关闭。"""
        try:
            self._controller.close()
        finally:
            super().closeEvent(event)
