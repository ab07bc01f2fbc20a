from __future__ import annotations

from types import SimpleNamespace

import numpy as np

from mirrorfit_core.keypoints import KEYPOINT_INDEX, filter_landmarks, to_keypoint
from mirrorfit_core.types import Keypoint

from .helpers import make_keypoints


def test_threshold_is_strict():
    raw = make_keypoints(nose=(1, 2, 0.3), left_shoulder=(3, 4, 0.31))
    lms = filter_landmarks(raw)
    assert lms.get("nose") is None
    assert lms.get("left_shoulder") == Keypoint(3.0, 4.0, 0.31)


def test_custom_threshold():
    raw = make_keypoints(nose=(1, 2, 0.6))
    assert filter_landmarks(raw, threshold=0.7).get("nose") is None
    assert filter_landmarks(raw, threshold=0.5).get("nose") is not None


def test_only_named_landmarks_are_kept(standing):
    lms = filter_landmarks(standing)
    assert set(lms) <= set(KEYPOINT_INDEX)
    assert "left_shoulder" in lms
    assert len(lms) == 7


def test_missing_and_malformed_entries_are_absent():
    raw = [None, "garbage", (1, 2), {"x": 5, "y": 6, "score": 0.9}]
    lms = filter_landmarks(raw)
    assert lms.get("nose") is None
    assert lms.get("left_eye") is None
    assert lms.get("right_eye") is None
    assert lms.get("left_ear") == Keypoint(5.0, 6.0, 0.9)
    # 序列长度不足，后面的点全部缺失
    assert lms.get("right_ankle") is None


def test_none_and_empty_input():
    assert len(filter_landmarks(None)) == 0
    assert len(filter_landmarks([])) == 0


def test_nan_values_are_absent():
    raw = make_keypoints(nose=(np.nan, 2, 0.9), left_eye=(1, 2, np.nan))
    lms = filter_landmarks(raw)
    assert lms.get("nose") is None
    assert lms.get("left_eye") is None


def test_to_keypoint_accepts_attribute_objects():
    obj = SimpleNamespace(x=1.5, y=2.5, score=0.8)
    assert to_keypoint(obj) == Keypoint(1.5, 2.5, 0.8)
    assert to_keypoint(SimpleNamespace(x=1, y=2)) is None
    assert to_keypoint(42) is None
    assert to_keypoint((1, 2, True)) is None


def test_text_entries_are_absent():
    # 长度恰好为 3 的字符串/字节串不能被当成 (x, y, confidence) 行
    lms = filter_landmarks(["159", b"abc", bytearray(b"123")])
    assert lms.get("nose") is None
    assert lms.get("left_eye") is None
    assert lms.get("right_eye") is None
    assert to_keypoint("159") is None
