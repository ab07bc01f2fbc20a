from __future__ import annotations

import math

import numpy as np

from .types import Keypoint


def distance(a: Keypoint, b: Keypoint) -> float:
    """两点欧氏距离（像素）。"""
    return float(np.linalg.norm(a.xy - b.xy))


def midpoint(a: Keypoint, b: Keypoint) -> Keypoint:
    """两点坐标均值。置信度取两者较小值，仅作记录。"""
    mx, my = (a.xy + b.xy) / 2.0
    return Keypoint(x=float(mx), y=float(my), confidence=min(a.confidence, b.confidence))


def tilt_from_vertical_deg(upper: Keypoint, lower: Keypoint) -> float:
    """计算 upper 相对 lower 偏离竖直方向的角度（度）。

    输入: upper 为上方点（如鼻子），lower 为下方点（如双肩中点）。
    输出: 角度值，范围 [0, 90)。
    作用: 向量 (vx, vy) = (upper.x - lower.x, lower.y - upper.y)，
          角度 = atan2(|vx|, max(1, vy))；vy 至少取 1，避免上下颠倒或重合时发散。
    """
    vx = upper.x - lower.x
    vy = lower.y - upper.y
    return math.degrees(math.atan2(abs(vx), max(1.0, vy)))
