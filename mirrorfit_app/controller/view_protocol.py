from __future__ import annotations

from typing import Optional, Protocol

from PySide6.QtGui import QPixmap

from mirrorfit_core.types import MeasurementOutput


class MeasureView(Protocol):
    """测量视图接口：控制器通过该协议调用视图更新。"""

    def set_measurements(self, output: MeasurementOutput) -> None:
        """显示肩宽/身高/体态分读数。输入: MeasurementOutput。输出: 无。"""
        ...

    def set_calibration_text(self, text: str) -> None:
        """回填标定输入框。输入: 文本（空串表示未标定）。输出: 无。"""
        ...

    def set_status(self, message: str, timeout_ms: int = 3000) -> None:
        """更新状态栏。输入: 文本与超时毫秒。输出: 无。"""
        ...

    def show_error(self, title: str, message: str) -> None:
        """显示错误弹窗。输入: 标题与内容。输出: 无。"""
        ...

    def set_frame_pixmap(self, pixmap: QPixmap) -> None:
        """更新摄像头预览图。输入: QPixmap。输出: 无。"""
        ...

    def ask_snapshot_dir(self) -> Optional[str]:
        """选择截图保存目录，取消时返回 None。"""
        ...
