from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from .keypoints import NUM_KEYPOINTS


# COCO-17 顺序对应的 MediaPipe Pose 33 点索引
# https://developers.google.com/mediapipe/solutions/vision/pose_landmarker
MEDIAPIPE_TO_COCO17: tuple[int, ...] = (
    0,   # nose
    2,   # left_eye
    5,   # right_eye
    7,   # left_ear
    8,   # right_ear
    11,  # left_shoulder
    12,  # right_shoulder
    13,  # left_elbow
    14,  # right_elbow
    15,  # left_wrist
    16,  # right_wrist
    23,  # left_hip
    24,  # right_hip
    25,  # left_knee
    26,  # right_knee
    27,  # left_ankle
    28,  # right_ankle
)


@dataclass(frozen=True)
class PoseDetectorConfig:
    model_complexity: int = 1
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5


class PoseDetector:
    """MediaPipe Pose 的薄封装。业务层只拿到 COCO-17 顺序的像素坐标数组。"""

    def __init__(self, config: Optional[PoseDetectorConfig] = None):
        """初始化 PoseDetector。

        输入:
        - config: 可选的 PoseDetectorConfig，用于控制模型复杂度与置信度阈值。

        输出: 无（构造器）。

        作用: 延迟导入 mediapipe 并创建内部的 Pose 推理对象。
        """
        self._config = config or PoseDetectorConfig()
        # 延迟导入，只用核心测量时不需要安装 mediapipe
        import mediapipe as mp

        self._pose = mp.solutions.pose.Pose(
            static_image_mode=False,
            model_complexity=self._config.model_complexity,
            enable_segmentation=False,
            smooth_landmarks=True,
            min_detection_confidence=self._config.min_detection_confidence,
            min_tracking_confidence=self._config.min_tracking_confidence,
        )

    def detect_keypoints(self, frame_bgr: np.ndarray) -> Optional[np.ndarray]:
        """返回 (17,3) 的 numpy 数组：x_px, y_px, confidence。

        输入:
        - frame_bgr: BGR 格式的图像帧，形状 (h,w,3)。

        输出:
        - 检测到人体时返回 float32 数组，坐标已换算为像素，置信度取 MediaPipe 的 visibility；
        - 未检测到人体或输入无效时返回 None。
        """
        if frame_bgr is None or frame_bgr.size == 0:
            return None

        h, w = frame_bgr.shape[:2]
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        result = self._pose.process(frame_rgb)
        if result.pose_landmarks is None:
            return None

        return landmarks_to_coco17(result.pose_landmarks.landmark, w, h)

    def close(self) -> None:
        """释放内部 MediaPipe 资源，调用后不应再使用该实例。"""
        self._pose.close()


def landmarks_to_coco17(landmarks, width: int, height: int) -> np.ndarray:
    """把 MediaPipe 的 33 个归一化关键点转换为 (17,3) 像素坐标数组。"""
    data = np.zeros((NUM_KEYPOINTS, 3), dtype=np.float32)
    for i, mp_idx in enumerate(MEDIAPIPE_TO_COCO17):
        lm = landmarks[mp_idx]
        data[i, 0] = float(lm.x) * width
        data[i, 1] = float(lm.y) * height
        data[i, 2] = float(getattr(lm, "visibility", 0.0) or 0.0)
    return data
