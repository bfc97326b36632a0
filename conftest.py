# conftest.py
import numpy as np
import pytest

from pycdo.core import TimeStep
from pycdo.utils.meshgen import single_cell, unit_hexahedron


# hexahedron with moved corners: non-planar faces, no symmetry
DISTORTED_HEX_VERTICES = np.array([
    [0.0, 0.0, 0.0], [1.1, 0.0, 0.05], [1.0, 0.9, -0.1], [0.05, 1.0, 0.0],
    [0.0, 0.1, 1.0], [1.2, 0.0, 1.1], [0.9, 1.1, 1.0], [-0.1, 0.95, 0.9],
])
HEX_FACES = ((0, 3, 2, 1), (4, 5, 6, 7), (0, 1, 5, 4), (1, 2, 6, 5), (2, 3, 7, 6), (3, 0, 4, 7))


@pytest.fixture
def unit_hex():
    """Unit cube [0,1]^3 as a one-cell mesh."""
    return unit_hexahedron()


@pytest.fixture
def distorted_hex():
    return single_cell(DISTORTED_HEX_VERTICES, HEX_FACES, "hexahedron")


@pytest.fixture
def time_step():
    return TimeStep(t_cur=0.0)
