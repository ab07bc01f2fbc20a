from __future__ import annotations

import math
import random

import pytest

from mirrorfit_core.keypoints import filter_landmarks
from mirrorfit_core.posture import PostureMode, posture_grade, posture_score

from .helpers import STANDING, make_keypoints


def _landmarks(**overrides):
    return filter_landmarks(make_keypoints(**{**STANDING, **overrides}))


def test_upright_scores_100_in_both_modes():
    lms = _landmarks()
    assert posture_score(lms, PostureMode.SIMPLE).score == 100
    assert posture_score(lms, PostureMode.EXTENDED).score == 100


def test_simple_score_decreases_with_neck_tilt():
    # 鼻子相对双肩中点水平偏移 50，竖直 50 -> 45°，超过 30° 上限
    res = posture_score(_landmarks(nose=(150, 50, 0.9)))
    assert res.score == 0
    assert res.neck_angle_deg == 45.0
    assert res.back_angle_deg is None


def test_simple_score_linear_in_angle():
    dx = 50 * math.tan(math.radians(15))
    res = posture_score(_landmarks(nose=(100 + dx, 50, 0.9)))
    assert res.neck_angle_deg == 15.0
    assert res.score == 50


def test_angle_is_reported_with_one_decimal():
    res = posture_score(_landmarks(nose=(107, 50, 0.9)))
    assert res.neck_angle_deg == round(math.degrees(math.atan2(7, 50)), 1)


def test_nose_below_shoulders_uses_minimum_vertical():
    res = posture_score(_landmarks(nose=(101, 150, 0.9)))
    # vy 被截到 1：atan2(1, 1) = 45°
    assert res.neck_angle_deg == 45.0
    assert res.score == 0


def test_missing_nose_means_no_score():
    assert posture_score(_landmarks(nose=(100, 50, 0.1))) is None
    assert posture_score(_landmarks(nose=(100, 50, 0.1)), PostureMode.EXTENDED) is None


def test_extended_without_hips_assumes_perfect_back():
    dx = 50 * math.tan(math.radians(15))
    lms = _landmarks(nose=(100 + dx, 50, 0.9), left_hip=(85, 200, 0.0), right_hip=(115, 200, 0.0))
    res = posture_score(lms, PostureMode.EXTENDED)
    assert res.back_angle_deg is None
    # neck 50 分，back 按 100 分计
    assert res.score == 75


def test_extended_back_tilt():
    lms = _landmarks(left_hip=(45, 200, 0.9), right_hip=(75, 200, 0.9))
    res = posture_score(lms, PostureMode.EXTENDED)
    assert res.back_angle_deg == round(math.degrees(math.atan2(40, 100)), 1)
    assert res.score == 50


def test_score_always_int_in_range():
    rng = random.Random(7)
    for _ in range(500):
        pts = {
            name: (rng.uniform(-500, 500), rng.uniform(-500, 500), 0.9)
            for name in ("nose", "left_shoulder", "right_shoulder", "left_hip", "right_hip")
        }
        lms = filter_landmarks(make_keypoints(**pts))
        for mode in PostureMode:
            res = posture_score(lms, mode)
            assert isinstance(res.score, int)
            assert 0 <= res.score <= 100


@pytest.mark.parametrize(
    "score, grade",
    [(100, "good"), (80, "good"), (79, "fair"), (50, "fair"), (49, "poor"), (None, None)],
)
def test_posture_grade(score, grade):
    assert posture_grade(score) == grade
