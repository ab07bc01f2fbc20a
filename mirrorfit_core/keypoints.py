from __future__ import annotations

import math
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence

from .types import Keypoint, LandmarkSet


# COCO-17 keypoint indices (MoveNet / MediaPipe-mapped order)
NOSE = "nose"
LEFT_EYE = "left_eye"
RIGHT_EYE = "right_eye"
LEFT_EAR = "left_ear"
RIGHT_EAR = "right_ear"
LEFT_SHOULDER = "left_shoulder"
RIGHT_SHOULDER = "right_shoulder"
LEFT_HIP = "left_hip"
RIGHT_HIP = "right_hip"
LEFT_KNEE = "left_knee"
RIGHT_KNEE = "right_knee"
LEFT_ANKLE = "left_ankle"
RIGHT_ANKLE = "right_ankle"

KEYPOINT_INDEX: Mapping[str, int] = MappingProxyType({
    NOSE: 0,
    LEFT_EYE: 1,
    RIGHT_EYE: 2,
    LEFT_EAR: 3,
    RIGHT_EAR: 4,
    LEFT_SHOULDER: 5,
    RIGHT_SHOULDER: 6,
    LEFT_HIP: 11,
    RIGHT_HIP: 12,
    LEFT_KNEE: 13,
    RIGHT_KNEE: 14,
    LEFT_ANKLE: 15,
    RIGHT_ANKLE: 16,
})

NUM_KEYPOINTS = 17
DEFAULT_CONFIDENCE_THRESHOLD = 0.3


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def to_keypoint(entry: Any) -> Optional[Keypoint]:
    """把一条原始关键点数据转换为 Keypoint。

    输入: entry 可以是带 x/y/confidence（或 score）属性的对象、同名键的字典，
          或长度为 3 的行 (x, y, confidence)（包括 numpy 数组的一行）。
    输出: Keypoint；格式不对、数值非法或坐标非有限值时返回 None。
    作用: 统一不同姿态模型的输出格式，不抛异常。
    """
    if entry is None or isinstance(entry, (str, bytes, bytearray)):
        return None
    if isinstance(entry, Keypoint):
        raw = (entry.x, entry.y, entry.confidence)
    elif isinstance(entry, Mapping):
        conf = entry.get("confidence", entry.get("score"))
        raw = (entry.get("x"), entry.get("y"), conf)
    elif hasattr(entry, "x") and hasattr(entry, "y"):
        conf = getattr(entry, "confidence", getattr(entry, "score", None))
        raw = (entry.x, entry.y, conf)
    else:
        try:
            if len(entry) != 3:
                return None
            raw = (entry[0], entry[1], entry[2])
        except TypeError:
            return None

    x, y, conf = (_as_float(v) for v in raw)
    if x is None or y is None or conf is None:
        return None
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return Keypoint(x=x, y=y, confidence=conf)


def _entry_at(raw_keypoints: Any, idx: int) -> Any:
    try:
        if idx >= len(raw_keypoints):
            return None
        return raw_keypoints[idx]
    except (TypeError, IndexError, KeyError):
        return None


def filter_landmarks(
    raw_keypoints: Optional[Sequence[Any]],
    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
) -> LandmarkSet:
    """按置信度阈值抽取命名关键点。

    输入:
    - raw_keypoints: 按 COCO-17 顺序排列的原始关键点序列（可为 None 或长度不足）。
    - threshold: 置信度阈值，严格大于该值才算有效。

    输出: LandmarkSet，只包含有效的命名关键点。

    作用: 缺失、为 None 或格式错误的条目一律视为缺失，不抛异常，无状态。
    """
    if raw_keypoints is None:
        return LandmarkSet()

    points: dict[str, Keypoint] = {}
    for name, idx in KEYPOINT_INDEX.items():
        kp = to_keypoint(_entry_at(raw_keypoints, idx))
        # NaN 置信度比较结果为 False，同样视为缺失
        if kp is not None and kp.confidence > threshold:
            points[name] = kp
    return LandmarkSet(points)
