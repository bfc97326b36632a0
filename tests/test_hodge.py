import numpy as np
import pytest

from pycdo.core import CellMeshBuilder
from pycdo.core.hodge import vertex_cell_hodge, vertex_hodge
from pycdo.utils.meshgen import unit_prism, unit_tetrahedron


def cell(mesh):
    return CellMeshBuilder(mesh).build(0)


def test_voronoi_is_diagonal(distorted_hex):
    cm = cell(distorted_hex)
    H = vertex_hodge(cm)
    assert np.allclose(H, np.diag(np.diag(H)))
    assert np.allclose(np.diag(H), cm.wvc * cm.vol_c)


@pytest.mark.parametrize("factory", [unit_tetrahedron, unit_prism])
def test_wbs_is_symmetric_positive_and_consistent(factory):
    cm = cell(factory())
    H = vertex_hodge(cm, "wbs")
    assert H.shape == (cm.n_vc, cm.n_vc)
    assert np.allclose(H, H.T)
    assert np.all(np.linalg.eigvalsh(H) > 0.0)
    assert np.isclose(H.sum(), cm.vol_c)


def test_vertex_cell_hodge(distorted_hex):
    cm = cell(distorted_hex)
    H = vertex_cell_hodge(cm)
    assert H.shape == (cm.n_vc + 1, cm.n_vc + 1)
    assert np.allclose(H, H.T)
    assert np.allclose(H.sum(axis=1).sum(), cm.vol_c)
    assert np.all(np.linalg.eigvalsh(H) > 0.0)


def test_unknown_algorithm(unit_hex):
    with pytest.raises(ValueError):
        vertex_hodge(cell(unit_hex), "cost")
