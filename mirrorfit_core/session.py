from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import cv2
import numpy as np

from .keypoints import filter_landmarks
from .measurement import MeasurementEngine
from .overlay import OverlayConfig, draw_measurement_guides, draw_skeleton
from .types import LandmarkSet, MeasurementOutput

logger = logging.getLogger(__name__)


class KeypointSource(Protocol):
    def detect_keypoints(self, frame_bgr: np.ndarray) -> Optional[np.ndarray]:
        ...


@dataclass(frozen=True)
class SessionConfig:
    mirror: bool = True
    draw_skeleton: bool = True


@dataclass(frozen=True)
class FrameResult:
    frame: np.ndarray                 # 已翻转并叠加绘制的画面
    keypoints: Optional[np.ndarray]   # (17,3) 或 None
    landmarks: LandmarkSet
    output: MeasurementOutput


class MeasurementSession:
    """单帧处理流程：镜像 -> 检测 -> 测量 -> 叠加绘制。

    不包含循环，由外部定时器每帧调用 process()。
    """

    def __init__(
        self,
        engine: MeasurementEngine,
        detector: KeypointSource,
        config: Optional[SessionConfig] = None,
        overlay: Optional[OverlayConfig] = None,
    ):
        self.engine = engine
        self.detector = detector
        cfg = config or SessionConfig()
        self.mirror = cfg.mirror
        self.draw_skeleton = cfg.draw_skeleton
        self._overlay = overlay or OverlayConfig(confidence_threshold=engine.cfg.confidence_threshold)

    def toggle_skeleton(self) -> bool:
        self.draw_skeleton = not self.draw_skeleton
        return self.draw_skeleton

    def _detect(self, frame_bgr: np.ndarray) -> Optional[np.ndarray]:
        try:
            return self.detector.detect_keypoints(frame_bgr)
        except Exception:
            # 单帧检测失败不应中断逐帧循环
            logger.warning("pose detection failed, treating frame as empty", exc_info=True)
            return None

    def process(self, frame_bgr: np.ndarray) -> FrameResult:
        """处理一帧。

        输入: frame_bgr 原始 BGR 画面。
        输出: FrameResult（画面副本已绘制骨架与测量辅助线）。
        """
        frame = cv2.flip(frame_bgr, 1) if self.mirror else frame_bgr.copy()
        keypoints = self._detect(frame)

        landmarks = filter_landmarks(keypoints, self.engine.cfg.confidence_threshold)
        output = self.engine.evaluate_landmarks(landmarks)

        if self.draw_skeleton:
            draw_skeleton(frame, keypoints, self._overlay)
        draw_measurement_guides(frame, landmarks, self._overlay)
        return FrameResult(frame=frame, keypoints=keypoints, landmarks=landmarks, output=output)
