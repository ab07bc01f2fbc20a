from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping, Optional

import numpy as np


@dataclass(frozen=True)
class Keypoint:
    """单个关键点（像素坐标）。

    属性:
    - x, y: 源画面坐标系下的像素坐标。
    - confidence: 置信度，一般在 [0,1]，仅用于与阈值比较。
    """

    x: float
    y: float
    confidence: float

    @property
    def xy(self) -> np.ndarray:
        """返回 (2,) 的坐标数组，供几何计算使用。"""
        return np.array([self.x, self.y], dtype=np.float64)


@dataclass(frozen=True)
class LandmarkSet:
    """单帧中“有效”的命名关键点集合。

    未检测到或置信度不足的关键点直接不出现在 points 中，
    get() 返回 None 表示“不可计算”，不会用默认坐标代替。
    """

    points: Mapping[str, Keypoint] = field(default_factory=dict)

    def get(self, name: str) -> Optional[Keypoint]:
        return self.points.get(name)

    def has(self, *names: str) -> bool:
        return all(n in self.points for n in names)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[str]:
        return iter(self.points)


@dataclass(frozen=True)
class MeasurementOutput:
    """单帧测量结果。每个字段都可能为 None（对应关键点缺失或未标定）。"""

    shoulder_width_px: Optional[float] = None
    shoulder_width_unit: Optional[float] = None
    height_px: Optional[float] = None
    height_unit: Optional[float] = None
    posture_score: Optional[int] = None
    posture_angle_deg: Optional[float] = None
    back_angle_deg: Optional[float] = None
