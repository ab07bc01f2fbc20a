from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from .geometry import distance, midpoint
from .keypoints import LEFT_ANKLE, LEFT_SHOULDER, NOSE, RIGHT_ANKLE, RIGHT_SHOULDER
from .pose_connections import SKELETON_EDGES
from .types import Keypoint, LandmarkSet


@dataclass(frozen=True)
class OverlayConfig:
    color_bgr: tuple[int, int, int] = (255, 197, 124)
    line_thickness: int = 3
    point_radius: int = 4
    confidence_threshold: float = 0.3
    dash_px: int = 8
    gap_px: int = 6


def _finite(*values: float) -> bool:
    return bool(np.all(np.isfinite(values)))


def _pt(kp: Keypoint) -> tuple[int, int]:
    return int(round(kp.x)), int(round(kp.y))


def draw_skeleton(
    frame_bgr: np.ndarray,
    keypoints: Optional[np.ndarray],
    config: Optional[OverlayConfig] = None,
) -> np.ndarray:
    """在 BGR 帧上原地绘制关键点与骨架连线。

    输入: frame_bgr 图像；keypoints 为 (17,3) 像素坐标数组或 None。
    输出: 同一个 frame_bgr（便于链式调用）。
    作用: 置信度 >= 阈值的点画圆；两端置信度都 > 阈值的连线才画。
    """
    if keypoints is None:
        return frame_bgr
    cfg = config or OverlayConfig()
    th = cfg.confidence_threshold
    n = len(keypoints)

    for x, y, conf in keypoints:
        if not (conf >= th and _finite(x, y)):
            continue
        cv2.circle(frame_bgr, (int(round(x)), int(round(y))), cfg.point_radius, cfg.color_bgr, -1, cv2.LINE_AA)

    for a, b in SKELETON_EDGES:
        if a >= n or b >= n:
            continue
        xa, ya, ca = keypoints[a]
        xb, yb, cb = keypoints[b]
        if ca > th and cb > th and _finite(xa, ya, xb, yb):
            cv2.line(
                frame_bgr,
                (int(round(xa)), int(round(ya))),
                (int(round(xb)), int(round(yb))),
                cfg.color_bgr,
                cfg.line_thickness,
                cv2.LINE_AA,
            )
    return frame_bgr


def draw_dashed_line(
    frame_bgr: np.ndarray,
    p0: tuple[int, int],
    p1: tuple[int, int],
    color: tuple[int, int, int],
    thickness: int,
    dash_px: int = 8,
    gap_px: int = 6,
) -> None:
    start = np.array(p0, dtype=np.float64)
    end = np.array(p1, dtype=np.float64)
    length = float(np.linalg.norm(end - start))
    if length < 1e-6:
        return
    direction = (end - start) / length
    pos = 0.0
    while pos < length:
        seg_end = min(pos + dash_px, length)
        a = start + direction * pos
        b = start + direction * seg_end
        cv2.line(
            frame_bgr,
            (int(round(a[0])), int(round(a[1]))),
            (int(round(b[0])), int(round(b[1]))),
            color,
            thickness,
            cv2.LINE_AA,
        )
        pos = seg_end + gap_px


def draw_measurement_guides(
    frame_bgr: np.ndarray,
    landmarks: LandmarkSet,
    config: Optional[OverlayConfig] = None,
) -> np.ndarray:
    """绘制测量辅助线：肩宽实线，鼻子到脚踝中点的虚线（身高）。"""
    cfg = config or OverlayConfig()
    if landmarks.has(LEFT_SHOULDER, RIGHT_SHOULDER):
        cv2.line(
            frame_bgr,
            _pt(landmarks.get(LEFT_SHOULDER)),
            _pt(landmarks.get(RIGHT_SHOULDER)),
            cfg.color_bgr,
            cfg.line_thickness,
            cv2.LINE_AA,
        )
    if landmarks.has(NOSE, LEFT_ANKLE, RIGHT_ANKLE):
        nose = landmarks.get(NOSE)
        mid_ankle = midpoint(landmarks.get(LEFT_ANKLE), landmarks.get(RIGHT_ANKLE))
        if distance(nose, mid_ankle) > 0:
            draw_dashed_line(
                frame_bgr,
                _pt(nose),
                _pt(mid_ankle),
                cfg.color_bgr,
                cfg.line_thickness,
                cfg.dash_px,
                cfg.gap_px,
            )
    return frame_bgr
