from __future__ import annotations

import numpy as np
import pytest

from .helpers import STANDING, make_keypoints


@pytest.fixture
def standing() -> np.ndarray:
    return make_keypoints(**STANDING)
