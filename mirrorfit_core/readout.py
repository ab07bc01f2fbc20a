from __future__ import annotations

from typing import Optional

PLACEHOLDER = "--"


def format_length(value: Optional[float], unit: str) -> str:
    """格式化长度读数，例如 "123.4 px"；None 显示为 "-- px"。"""
    if value is None:
        return f"{PLACEHOLDER} {unit}"
    return f"{value:.1f} {unit}"


def format_score(score: Optional[int]) -> str:
    if score is None:
        return f"{PLACEHOLDER}/100"
    return f"{score}/100"


def format_angle(angle_deg: Optional[float]) -> str:
    if angle_deg is None:
        return f"{PLACEHOLDER}°"
    return f"{angle_deg:.1f}°"


def describe_calibration(units_per_px: Optional[float]) -> str:
    if units_per_px is None:
        return "当前未标定"
    return f"当前标定：{units_per_px:.4f} cm/px"
