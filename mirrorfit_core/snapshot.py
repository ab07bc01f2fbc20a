from __future__ import annotations

import os
import time
from typing import Optional

import cv2
import numpy as np


class SnapshotError(RuntimeError):
    pass


def snapshot_filename(timestamp_ms: Optional[int] = None) -> str:
    ts = int(time.time() * 1000) if timestamp_ms is None else int(timestamp_ms)
    return f"mirrorfit_{ts}.png"


def save_snapshot(frame_bgr: np.ndarray, directory: str, timestamp_ms: Optional[int] = None) -> str:
    """把带叠加的画面保存为 PNG。

    输入:
    - frame_bgr: 已绘制叠加层的 BGR 图像。
    - directory: 保存目录，不存在时自动创建。
    - timestamp_ms: 可选时间戳（毫秒），默认取当前时间，用于文件名。

    输出: 保存后的文件路径。

    作用: 空帧或写入失败时抛出 SnapshotError。
    """
    if frame_bgr is None or frame_bgr.size == 0:
        raise SnapshotError("没有可保存的画面")
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, snapshot_filename(timestamp_ms))
    if not cv2.imwrite(path, frame_bgr):
        raise SnapshotError(f"无法写入截图：{path}")
    return path
