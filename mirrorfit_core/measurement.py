from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence

from .calibration import DEFAULT_REFERENCE_WIDTH, Calibration
from .geometry import distance, midpoint
from .keypoints import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    LEFT_ANKLE,
    LEFT_SHOULDER,
    NOSE,
    RIGHT_ANKLE,
    RIGHT_SHOULDER,
    filter_landmarks,
)
from .posture import PostureMode, posture_score
from .types import LandmarkSet, MeasurementOutput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeasurementConfig:
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    height_window: int = 10
    # 鼻子到脚踝中点的距离比真实身高短（头顶在鼻子之上、脚底在踝点之下）
    height_factor: float = 1.15
    neck_max_deg: float = 30.0
    back_max_deg: float = 15.0
    reference_width: float = DEFAULT_REFERENCE_WIDTH
    posture_mode: PostureMode = PostureMode.SIMPLE


class MeasurementEngine:
    """逐帧测量引擎：肩宽、平滑身高、体态分，以及像素->厘米标定。

    引擎持有身高样本缓冲与标定状态，由外部帧驱动（定时器/回调）每帧调用
    evaluate_frame()，单线程使用，不加锁。
    """

    def __init__(self, config: Optional[MeasurementConfig] = None):
        self.cfg = config or MeasurementConfig()
        self._calibration = Calibration()
        self._height_samples: deque[float] = deque(maxlen=max(1, int(self.cfg.height_window)))
        self._last_shoulder_width_px: Optional[float] = None

    # ---- 状态访问 ----

    @property
    def posture_mode(self) -> PostureMode:
        return self.cfg.posture_mode

    @property
    def units_per_px(self) -> Optional[float]:
        return self._calibration.units_per_px

    @property
    def is_calibrated(self) -> bool:
        return self._calibration.is_calibrated

    @property
    def shoulder_width_px(self) -> Optional[float]:
        """最近一帧测得的肩宽（像素）；该帧肩膀不可见时为 None。"""
        return self._last_shoulder_width_px

    @property
    def smoothed_height_px(self) -> Optional[float]:
        if not self._height_samples:
            return None
        return sum(self._height_samples) / len(self._height_samples)

    @property
    def height_samples(self) -> tuple[float, ...]:
        return tuple(self._height_samples)

    def set_posture_mode(self, mode: PostureMode | str) -> PostureMode:
        self.cfg = replace(self.cfg, posture_mode=PostureMode(mode))
        return self.cfg.posture_mode

    def reset(self) -> None:
        """清空身高缓冲与最近肩宽，不影响标定。"""
        self._height_samples.clear()
        self._last_shoulder_width_px = None

    # ---- 标定 ----

    def set_calibration(self, units_per_px: Any) -> float:
        return self._calibration.set(units_per_px)

    def set_calibration_text(self, text: Optional[str]) -> Optional[float]:
        return self._calibration.set_text(text)

    def calibrate_from_known_width(self, units_known: Any, shoulder_width_px: Optional[float] = None) -> float:
        width = self._last_shoulder_width_px if shoulder_width_px is None else shoulder_width_px
        return self._calibration.from_known_width(units_known, width)

    def auto_calibrate(self, reference_width_units: Any = None) -> float:
        """用当前肩宽与参考肩宽（默认 40）自动标定。

        输入: reference_width_units 参考真实肩宽，None 时使用配置默认值。
        输出: 新的标定系数（单位/像素）。
        作用: 肩宽不可用时抛出 NoMeasurement，标定状态保持不变。
        """
        ref = self.cfg.reference_width if reference_width_units is None else reference_width_units
        ratio = self._calibration.from_known_width(ref, self._last_shoulder_width_px)
        logger.info("auto-calibrated: %.4f units/px (shoulder %.1f px)", ratio, self._last_shoulder_width_px)
        return ratio

    def reset_calibration(self) -> None:
        self._calibration.reset()

    def to_unit(self, px: Optional[float]) -> Optional[float]:
        return self._calibration.to_unit(px)

    # ---- 逐帧测量 ----

    def push_height_sample(self, raw_height_px: float) -> None:
        self._height_samples.append(float(raw_height_px))

    def raw_height_px(self, landmarks: LandmarkSet) -> Optional[float]:
        if not landmarks.has(NOSE, LEFT_ANKLE, RIGHT_ANKLE):
            return None
        mid_ankle = midpoint(landmarks.get(LEFT_ANKLE), landmarks.get(RIGHT_ANKLE))
        return distance(landmarks.get(NOSE), mid_ankle) * self.cfg.height_factor

    @staticmethod
    def shoulder_width(landmarks: LandmarkSet) -> Optional[float]:
        if not landmarks.has(LEFT_SHOULDER, RIGHT_SHOULDER):
            return None
        return distance(landmarks.get(LEFT_SHOULDER), landmarks.get(RIGHT_SHOULDER))

    def evaluate_landmarks(self, landmarks: LandmarkSet) -> MeasurementOutput:
        """由已过滤的关键点计算本帧测量结果。

        输入: landmarks 为 LandmarkSet（可以为空）。
        输出: MeasurementOutput；缺少所需关键点的字段为 None。
        作用: 更新最近肩宽与身高缓冲；关键点缺失的帧不会清空缓冲，
              因此平滑身高可能沿用历史样本。
        """
        shoulder_px = self.shoulder_width(landmarks)
        self._last_shoulder_width_px = shoulder_px

        raw_h = self.raw_height_px(landmarks)
        if raw_h is not None:
            self.push_height_sample(raw_h)
        height_px = self.smoothed_height_px

        posture = posture_score(
            landmarks,
            mode=self.cfg.posture_mode,
            neck_max_deg=self.cfg.neck_max_deg,
            back_max_deg=self.cfg.back_max_deg,
        )

        return MeasurementOutput(
            shoulder_width_px=shoulder_px,
            shoulder_width_unit=self.to_unit(shoulder_px),
            height_px=height_px,
            height_unit=self.to_unit(height_px),
            posture_score=None if posture is None else posture.score,
            posture_angle_deg=None if posture is None else posture.neck_angle_deg,
            back_angle_deg=None if posture is None else posture.back_angle_deg,
        )

    def evaluate_frame(self, raw_keypoints: Optional[Sequence[Any]]) -> MeasurementOutput:
        """每帧入口：按阈值过滤原始关键点后计算测量结果。"""
        landmarks = filter_landmarks(raw_keypoints, self.cfg.confidence_threshold)
        return self.evaluate_landmarks(landmarks)
