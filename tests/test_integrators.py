import numpy as np
import pytest

from pycdo.core import CellMeshBuilder, TimeStep
from pycdo.core.analytic import t, x, y, z
from pycdo.core.hodge import vertex_cell_hodge, vertex_hodge
from pycdo.integration.quadrature import tet_5pts, tet_10pts
from pycdo.source.descriptor import SourceTerm
from pycdo.source.integrators import SourceIntegrator
from pycdo.source.workspace import Workspace
from pycdo.utils.meshgen import unit_prism, unit_tetrahedron

DUAL_ROUTINES = {
    "bary": "dual_bary_by_analytic",
    "bary_subdiv": "dual_subdiv_by_analytic",
    "higher": "dual_q10_by_analytic",
    "highest": "dual_q5_by_analytic",
}


def analytic_term(mesh, func, flag=("dual", "cell")):
    return SourceTerm.by_analytic(0, None, "scalar", 0, set(flag), mesh.locations, func)


def integrate_cell(mesh, routine, st, t_cur=0.0, hdg=None, n_dofs=None):
    cm = CellMeshBuilder(mesh).build(0)
    ws = Workspace.for_mesh(mesh)
    ws.hdg = hdg(cm) if hdg is not None else None
    values = np.zeros(n_dofs or cm.n_vc)
    getattr(SourceIntegrator(TimeStep(t_cur=t_cur)), routine)(st, cm, ws, values)
    return cm, values


def reference_integral(mesh, func):
    """Cubic-exact integral on the (v1, v2, f, c) tetrahedra of the cell."""
    tess = CellMeshBuilder(mesh).build(0).tessellation
    pts, wts = tet_5pts(tess.xv1, tess.xv2, tess.xf, tess.xc, tess.pef_vol)
    return float((func(0.0, pts.reshape(-1, 3)).reshape(-1, 5) * wts).sum())


# ----------------------------------------------------------------------
# densities on dual cells
# ----------------------------------------------------------------------
@pytest.mark.parametrize("quad", list(DUAL_ROUTINES))
def test_constant_density_gives_dual_volumes(unit_hex, quad):
    st = analytic_term(unit_hex, lambda t, X: 1.0)
    _, vals = integrate_cell(unit_hex, DUAL_ROUTINES[quad], st)
    assert np.allclose(vals, 1 / 8)


@pytest.mark.parametrize("quad", list(DUAL_ROUTINES))
def test_affine_density_exact_for_every_quadrature(unit_hex, quad):
    st = analytic_term(unit_hex, x)
    cm, vals = integrate_cell(unit_hex, DUAL_ROUTINES[quad], st)
    assert np.isclose(vals.sum(), 0.5)
    # vertex at x=1 owns the sub-cell [0.5, 1] x ...: integral 0.75 / 8
    assert np.allclose(vals, np.where(cm.xv[:, 0] > 0.5, 0.75, 0.25) / 8)


@pytest.mark.parametrize("factory", [unit_tetrahedron, unit_prism])
@pytest.mark.parametrize("quad", list(DUAL_ROUTINES))
def test_affine_density_on_simple_cells(factory, quad):
    mesh = factory()
    f = 1.0 + 2.0 * x - y + 3.0 * z
    st = analytic_term(mesh, f)
    _, vals = integrate_cell(mesh, DUAL_ROUTINES[quad], st)
    assert np.isclose(vals.sum(), reference_integral(mesh, st.analytic))


def test_quadratic_density_on_the_unit_cube(unit_hex):
    st = analytic_term(unit_hex, x ** 2)
    exact = 1 / 3
    for quad in ("higher", "highest"):
        _, vals = integrate_cell(unit_hex, DUAL_ROUTINES[quad], st)
        assert np.isclose(vals.sum(), exact)
    _, bary = integrate_cell(unit_hex, DUAL_ROUTINES["bary"], st)
    assert abs(bary.sum() - exact) > 1e-3


@pytest.mark.parametrize("func, exact_quads", [
    (x ** 2 + x * y - 2 * z ** 2, ("higher", "highest")),
    (x ** 3 + x * y * z - y ** 2 * z, ("highest",)),
])
def test_exactness_on_a_distorted_hex(distorted_hex, func, exact_quads):
    st = analytic_term(distorted_hex, func)
    ref = reference_integral(distorted_hex, st.analytic)
    for quad, routine in DUAL_ROUTINES.items():
        _, vals = integrate_cell(distorted_hex, routine, st)
        if quad in exact_quads:
            assert np.isclose(vals.sum(), ref, rtol=1e-10), quad
        else:
            assert not np.isclose(vals.sum(), ref, rtol=1e-6), quad


def test_ten_point_rule_matches_sub_tet_quadrature(distorted_hex):
    st = analytic_term(distorted_hex, lambda t, X: np.exp(X[:, 0]) * np.sin(X[:, 1] + 2 * X[:, 2]))
    cm, vals = integrate_cell(distorted_hex, "dual_q10_by_analytic", st)

    tess = cm.tessellation
    xv, xe, xf, xc = tess.corners()
    pts, wts = tet_10pts(xv, xe, xf, xc, tess.volumes())
    per_tet = (st.analytic(0.0, pts.reshape(-1, 3)).reshape(-1, 10) * wts).sum(axis=1)
    expected = np.bincount(tess.owners(), per_tet, cm.n_vc)
    assert np.allclose(vals, expected, rtol=1e-12)


def test_barycentric_rules_agree_on_affine_functions(distorted_hex):
    st = analytic_term(distorted_hex, 2 * x - 3 * y + z + 1)
    _, bary = integrate_cell(distorted_hex, "dual_bary_by_analytic", st)
    _, subdiv = integrate_cell(distorted_hex, "dual_subdiv_by_analytic", st)
    assert np.allclose(bary, subdiv)


def test_dual_by_value(distorted_hex):
    st = SourceTerm.by_value(0, None, "scalar", 0, {"dual", "cell"}, distorted_hex.locations, 3.0)
    cm, vals = integrate_cell(distorted_hex, "dual_by_value", st)
    assert np.allclose(vals, 3.0 * cm.wvc * cm.vol_c)
    assert np.isclose(vals.sum(), 3.0 * cm.vol_c)


def test_time_dependent_density(unit_hex):
    st = analytic_term(unit_hex, t * x)
    _, at_zero = integrate_cell(unit_hex, "dual_bary_by_analytic", st, t_cur=0.0)
    _, at_two = integrate_cell(unit_hex, "dual_bary_by_analytic", st, t_cur=2.0)
    assert np.allclose(at_zero, 0.0)
    assert np.isclose(at_two.sum(), 1.0)


def test_routines_accumulate(unit_hex):
    st = SourceTerm.by_value(0, None, "scalar", 0, {"dual", "cell"}, unit_hex.locations, 1.0)
    cm = CellMeshBuilder(unit_hex).build(0)
    ws = Workspace.for_mesh(unit_hex)
    integ = SourceIntegrator(TimeStep())
    values = np.full(cm.n_vc, 1.0)
    integ.dual_by_value(st, cm, ws, values)
    integ.dual_bary_by_analytic(analytic_term(unit_hex, lambda t, X: 1.0), cm, ws, values)
    assert np.allclose(values, 1.0 + 2 / 8)


def test_missing_source_adds_nothing(unit_hex):
    integ = SourceIntegrator(TimeStep())
    cm = CellMeshBuilder(unit_hex).build(0)
    ws = Workspace.for_mesh(unit_hex)
    values = np.zeros(cm.n_vc)
    for name in list(DUAL_ROUTINES.values()) + ["dual_by_value", "vertex_potential_by_value"]:
        getattr(integ, name)(None, cm, ws, values)
    assert np.all(values == 0.0)


# ----------------------------------------------------------------------
# potentials through a Hodge operator
# ----------------------------------------------------------------------
def test_voronoi_potential_matches_dual_density(distorted_hex):
    locs = distorted_hex.locations
    dual = SourceTerm.by_value(0, None, "scalar", 0, {"dual", "cell"}, locs, 2.0)
    primal = SourceTerm.by_value(1, None, "scalar", 0, {"primal", "vertex"}, locs, 2.0)
    _, d = integrate_cell(distorted_hex, "dual_by_value", dual)
    _, p = integrate_cell(distorted_hex, "vertex_potential_by_value", primal,
                          hdg=lambda cm: vertex_hodge(cm, "voronoi"))
    assert np.allclose(p, d)


@pytest.mark.parametrize("algo", ["voronoi", "wbs"])
def test_constant_potential_integrates_exactly(distorted_hex, algo):
    st = analytic_term(distorted_hex, lambda t, X: 1.5, flag=("primal", "vertex"))
    cm, vals = integrate_cell(distorted_hex, "vertex_potential_by_analytic", st,
                              hdg=lambda cm: vertex_hodge(cm, algo))
    assert np.isclose(vals.sum(), 1.5 * cm.vol_c)


def test_vertex_cell_potential(unit_hex):
    st = analytic_term(unit_hex, x, flag=("primal",))
    cm, vals = integrate_cell(unit_hex, "vertex_cell_potential_by_analytic", st,
                              hdg=vertex_cell_hodge, n_dofs=9)
    # x is linear on every (v1, v2, f, c) tetrahedron of a cube
    assert np.isclose(vals.sum(), 0.5)

    cst = SourceTerm.by_value(1, None, "scalar", 0, {"primal"}, unit_hex.locations, 4.0)
    _, vals = integrate_cell(unit_hex, "vertex_cell_potential_by_value", cst,
                             hdg=vertex_cell_hodge, n_dofs=9)
    assert np.isclose(vals.sum(), 4.0)
    assert vals[8] > 0.0


def test_potential_without_hodge_fails(unit_hex):
    st = SourceTerm.by_value(0, None, "scalar", 0, {"primal", "vertex"}, unit_hex.locations, 1.0)
    with pytest.raises(AssertionError):
        integrate_cell(unit_hex, "vertex_potential_by_value", st)


def test_evaluation_counts(unit_hex):
    # 24 (face, edge) pairs, 48 sub-tetrahedra
    expected = {"bary": 8, "bary_subdiv": 48, "highest": 5 * 48}
    for quad, n_evals in expected.items():
        st = analytic_term(unit_hex, x)
        integrate_cell(unit_hex, DUAL_ROUTINES[quad], st)
        assert st.analytic.n_evals == n_evals, quad
