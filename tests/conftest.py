"""Pytest configuration for pdt3d tests."""
import sys
from pathlib import Path

import numpy as np
import pytest

# корінь репозиторію — щоб pdt3d імпортувався і без pip install -e .
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))


@pytest.fixture
def simplex_points():
    """Чотири некомпланарні точки всередині [0,1)^3."""
    return np.array([
        0.1, 0.1, 0.1,
        0.9, 0.1, 0.1,
        0.1, 0.9, 0.1,
        0.1, 0.1, 0.9,
    ])


@pytest.fixture
def coplanar_points():
    return np.array([
        0.1, 0.1, 0.5,
        0.9, 0.1, 0.5,
        0.1, 0.9, 0.5,
        0.7, 0.6, 0.5,
    ])


@pytest.fixture
def random_points():
    def make(n, seed=0):
        return np.random.default_rng(seed).random((n, 3))
    return make
