from __future__ import annotations

import logging
import math
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_WIDTH = 40.0  # 成人平均肩宽（cm）


class CalibrationError(ValueError):
    pass


class NoMeasurement(CalibrationError):
    """当前没有可用的肩宽测量（肩膀不可见或测量值非正）。"""


class InvalidCalibrationInput(CalibrationError):
    """手动标定输入不是正的有限数值。"""


def _positive_float(value: Any, what: str) -> float:
    if isinstance(value, bool):
        raise InvalidCalibrationInput(f"{what} 必须是数值：{value!r}")
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise InvalidCalibrationInput(f"{what} 必须是数值：{value!r}") from None
    if not math.isfinite(v) or v <= 0.0:
        raise InvalidCalibrationInput(f"{what} 必须为正数：{value!r}")
    return v


class Calibration:
    """像素 -> 物理单位的线性标定：unit = px * units_per_px。

    未标定时 units_per_px 为 None，to_unit() 返回 None。
    所有失败的操作都会抛出 CalibrationError 子类，且不修改当前状态。
    """

    def __init__(self, units_per_px: Optional[float] = None) -> None:
        self._units_per_px: Optional[float] = None
        if units_per_px is not None:
            self.set(units_per_px)

    @property
    def units_per_px(self) -> Optional[float]:
        return self._units_per_px

    @property
    def is_calibrated(self) -> bool:
        return self._units_per_px is not None

    def set(self, units_per_px: Any) -> float:
        ratio = _positive_float(units_per_px, "标定系数")
        self._units_per_px = ratio
        logger.debug("calibration set: %.6f units/px", ratio)
        return ratio

    def set_text(self, text: Optional[str]) -> Optional[float]:
        """解析输入框文本。空文本清除标定，无法解析则抛 InvalidCalibrationInput。"""
        stripped = (text or "").strip()
        if not stripped:
            self.reset()
            return None
        return self.set(stripped)

    def from_known_width(self, units_known: Any, width_px: Optional[float]) -> float:
        """由已知真实宽度与当前像素宽度求标定系数：units_known / width_px。"""
        units = _positive_float(units_known, "参考宽度")
        if width_px is None or not math.isfinite(width_px) or width_px <= 0.0:
            raise NoMeasurement("当前没有可用的肩宽测量，请让双肩完整出现在画面中")
        return self.set(units / width_px)

    def reset(self) -> None:
        self._units_per_px = None
        logger.debug("calibration cleared")

    def to_unit(self, px: Optional[float]) -> Optional[float]:
        if px is None or self._units_per_px is None:
            return None
        return px * self._units_per_px
