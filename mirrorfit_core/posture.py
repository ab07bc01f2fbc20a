from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .geometry import midpoint, tilt_from_vertical_deg
from .keypoints import LEFT_HIP, LEFT_SHOULDER, NOSE, RIGHT_HIP, RIGHT_SHOULDER
from .types import LandmarkSet


class PostureMode(str, Enum):
    SIMPLE = "simple"      # 仅颈部角度
    EXTENDED = "extended"  # 颈部 + 背部角度取平均


@dataclass(frozen=True)
class PostureResult:
    score: int
    neck_angle_deg: float
    back_angle_deg: Optional[float] = None


def _angle_to_score(angle_deg: float, max_deg: float) -> float:
    a = min(max_deg, max(0.0, angle_deg))
    return 100.0 * (1.0 - a / max_deg)


def _clamp_score(value: float) -> int:
    # .5 向上取整，不用 round() 的银行家舍入
    return int(min(100, max(0, math.floor(value + 0.5))))


def posture_score(
    landmarks: LandmarkSet,
    mode: PostureMode = PostureMode.SIMPLE,
    neck_max_deg: float = 30.0,
    back_max_deg: float = 15.0,
) -> Optional[PostureResult]:
    """根据鼻子、双肩（及双髋）计算 0~100 的体态分。

    输入:
    - landmarks: 已过滤的关键点集合。
    - mode: SIMPLE 只看颈部；EXTENDED 额外考虑背部（双肩中点到双髋中点）。
    - neck_max_deg / back_max_deg: 角度截断上限，达到上限即 0 分。

    输出: PostureResult；鼻子或任一肩膀缺失时返回 None。

    作用:
    - 颈部角度截断到 [0, neck_max_deg] 后线性映射为 neck 分；
    - EXTENDED 模式下背部角度截断到 [0, back_max_deg] 得到 back 分，
      双髋缺失时 back 分按 100 计，最终分为两者平均后取整。
    """
    if not landmarks.has(NOSE, LEFT_SHOULDER, RIGHT_SHOULDER):
        return None

    nose = landmarks.get(NOSE)
    mid_shoulder = midpoint(landmarks.get(LEFT_SHOULDER), landmarks.get(RIGHT_SHOULDER))
    neck_angle = tilt_from_vertical_deg(nose, mid_shoulder)
    neck = _angle_to_score(neck_angle, neck_max_deg)

    if mode is PostureMode.SIMPLE:
        return PostureResult(score=_clamp_score(neck), neck_angle_deg=round(neck_angle, 1))

    back_angle: Optional[float] = None
    back = 100.0
    if landmarks.has(LEFT_HIP, RIGHT_HIP):
        mid_hip = midpoint(landmarks.get(LEFT_HIP), landmarks.get(RIGHT_HIP))
        back_angle = tilt_from_vertical_deg(mid_shoulder, mid_hip)
        back = _angle_to_score(back_angle, back_max_deg)

    return PostureResult(
        score=_clamp_score((neck + back) / 2.0),
        neck_angle_deg=round(neck_angle, 1),
        back_angle_deg=None if back_angle is None else round(back_angle, 1),
    )


def posture_grade(score: Optional[int]) -> Optional[str]:
    """分数分档：>=80 good，>=50 fair，否则 poor；None 表示无分数。"""
    if score is None:
        return None
    if score >= 80:
        return "good"
    if score >= 50:
        return "fair"
    return "poor"
