"""
mirrorfit_core - 由 2D 人体关键点估计肩宽、身高与体态分，并支持像素->厘米标定。
"""

from .calibration import (
    DEFAULT_REFERENCE_WIDTH,
    Calibration,
    CalibrationError,
    InvalidCalibrationInput,
    NoMeasurement,
)
from .geometry import distance, midpoint
from .keypoints import KEYPOINT_INDEX, filter_landmarks
from .measurement import MeasurementConfig, MeasurementEngine
from .posture import PostureMode, PostureResult, posture_grade, posture_score
from .types import Keypoint, LandmarkSet, MeasurementOutput

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_REFERENCE_WIDTH",
    "Calibration",
    "CalibrationError",
    "InvalidCalibrationInput",
    "NoMeasurement",
    "distance",
    "midpoint",
    "KEYPOINT_INDEX",
    "filter_landmarks",
    "MeasurementConfig",
    "MeasurementEngine",
    "PostureMode",
    "PostureResult",
    "posture_grade",
    "posture_score",
    "Keypoint",
    "LandmarkSet",
    "MeasurementOutput",
    "__version__",
]
