from __future__ import annotations

import numpy as np

from mirrorfit_core.keypoints import KEYPOINT_INDEX, NUM_KEYPOINTS


def make_keypoints(**points: tuple[float, float, float]) -> np.ndarray:
    """按名字构造 (17,3) 关键点数组，未给出的点置信度为 0。"""
    data = np.zeros((NUM_KEYPOINTS, 3), dtype=np.float64)
    for name, (x, y, c) in points.items():
        data[KEYPOINT_INDEX[name]] = (x, y, c)
    return data


STANDING = dict(
    nose=(100, 50, 0.9),
    left_shoulder=(80, 100, 0.9),
    right_shoulder=(120, 100, 0.9),
    left_hip=(85, 200, 0.9),
    right_hip=(115, 200, 0.9),
    left_ankle=(85, 300, 0.9),
    right_ankle=(115, 300, 0.9),
)
