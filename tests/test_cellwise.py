import numpy as np
import pytest

from pycdo.core import CellMeshBuilder, TimeStep
from pycdo.core.analytic import x
from pycdo.source.cellwise import compute_cellwise, compute_setup_cellwise
from pycdo.source.descriptor import SourceTerm
from pycdo.source.dispatch import SourceTermBuilder
from pycdo.source.workspace import Workspace
from pycdo.utils.meshgen import structured_hex


@pytest.fixture
def mesh():
    return structured_hex(2.0, 1.0, 1.0, nx=2, ny=1, nz=1)


def dual_value(mesh, st_id, value, ml_id=0):
    return SourceTerm.by_value(st_id, None, "scalar", ml_id, {"dual", "cell"}, mesh.locations, value)


def test_terms_add_up(mesh):
    terms = [dual_value(mesh, 0, 1.0), dual_value(mesh, 1, 2.0)]
    setup = SourceTermBuilder(mesh, TimeStep()).build("cdovb", terms)
    ws = Workspace.for_mesh(mesh)
    cm = CellMeshBuilder(mesh).build(0)
    values = np.full(cm.n_vc, 123.0)
    out = compute_setup_cellwise(setup, cm, ws, values)
    assert out is values
    assert np.allclose(values, 3.0 / 8)


def test_values_reset_without_source_flag(mesh):
    cm = CellMeshBuilder(mesh).build(0)
    values = np.full(cm.n_vc, -1.0)
    compute_cellwise([], cm, set(), None, [None] * 8, None, values)
    assert np.all(values == 0.0)


def test_mask_selects_terms(mesh):
    left = mesh.add_location("left", [0])
    right = mesh.add_location("right", [1])
    terms = [dual_value(mesh, 0, 1.0, left), dual_value(mesh, 1, 10.0, right),
             SourceTerm.by_analytic(2, None, "scalar", 0, {"dual", "cell"}, mesh.locations, x)]
    setup = SourceTermBuilder(mesh, TimeStep()).build("cdovb", terms)
    assert setup.mask.tolist() == [0b101, 0b110]

    ws = Workspace.for_mesh(mesh)
    builder = CellMeshBuilder(mesh)
    values = np.zeros(mesh.n_max_vbyc)
    totals = []
    for cm in builder:
        compute_setup_cellwise(setup, cm, ws, values)
        totals.append(values.sum())
    # cell 0: 1 + ∫x over [0,1]; cell 1: 10 + ∫x over [1,2]
    assert np.allclose(totals, [1.5, 11.5])


def test_unmasked_terms_run_everywhere(mesh):
    terms = [dual_value(mesh, 0, 1.0)]
    setup = SourceTermBuilder(mesh, TimeStep()).build("cdovb", terms)
    assert setup.mask is None
    ws = Workspace.for_mesh(mesh)
    for cm in CellMeshBuilder(mesh):
        values = compute_setup_cellwise(setup, cm, ws, np.zeros(cm.n_vc))
        assert np.isclose(values.sum(), 1.0)


def test_unit_hex_by_value(unit_hex):
    setup = SourceTermBuilder(unit_hex, TimeStep()).build("cdovb", [dual_value(unit_hex, 0, 1.0)])
    cm = CellMeshBuilder(unit_hex).build(0)
    values = compute_setup_cellwise(setup, cm, Workspace.for_mesh(unit_hex), np.zeros(cm.n_vc))
    assert np.allclose(values, cm.wvc)
    assert np.isclose(values.sum(), 1.0)


def test_two_terms_sum_their_single_outputs(mesh):
    a = dual_value(mesh, 0, 1.0)
    b = SourceTerm.by_analytic(1, None, "scalar", 0, {"dual", "cell"}, mesh.locations, x)
    builder = SourceTermBuilder(mesh, TimeStep())
    cm = CellMeshBuilder(mesh).build(1)
    ws = Workspace.for_mesh(mesh)

    single = [compute_setup_cellwise(builder.build("cdovb", [st]), cm, ws, np.zeros(cm.n_vc))
              for st in (a, b)]
    both = compute_setup_cellwise(builder.build("cdovb", [a, b]), cm, ws, np.zeros(cm.n_vc))
    assert np.allclose(both, single[0] + single[1])
