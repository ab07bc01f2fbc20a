"""骨架叠加用的连线（COCO-17 索引），只用于画面显示。"""
from __future__ import annotations

from .keypoints import KEYPOINT_INDEX as K

# 连接对 (a, b)
SKELETON_EDGES: tuple[tuple[int, int], ...] = (
    # torso
    (K["left_shoulder"], K["right_shoulder"]),
    (K["left_hip"], K["right_hip"]),
    (K["left_shoulder"], K["left_hip"]),
    (K["right_shoulder"], K["right_hip"]),
    # legs
    (K["left_hip"], K["left_knee"]),
    (K["right_hip"], K["right_knee"]),
    (K["left_knee"], K["left_ankle"]),
    (K["right_knee"], K["right_ankle"]),
    # neck
    (K["nose"], K["left_shoulder"]),
    (K["nose"], K["right_shoulder"]),
)
