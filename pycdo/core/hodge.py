"""pycdo.core.hodge
Cellwise discrete Hodge operators mapping point values to integrated loads.

Primal-reduction source terms are evaluated at points and then multiplied
by one of these matrices. Every operator satisfies ``hdg @ 1 = measure`` so a
constant potential yields the exact integral.
"""
import numpy as np

__all__ = ["vertex_hodge", "vertex_cell_hodge", "HODGE_ALGOS"]

HODGE_ALGOS = ("voronoi", "wbs")

# P1 mass matrix on a tetrahedron of unit volume
_P1_TET_MASS = (np.ones((4, 4)) + np.eye(4)) / 20.0


def _face_average(cm) -> np.ndarray:
    """(n_fc, n_vc) matrix averaging the vertex values of each face."""
    A = np.zeros((cm.n_fc, cm.n_vc))
    for f in range(cm.n_fc):
        edges = cm.f2e_ids[cm.f2e_idx[f]:cm.f2e_idx[f + 1]]
        verts = np.unique(cm.e2v[edges].ravel())
        A[f, verts] = 1.0 / len(verts)
    return A


def _wbs_mass(cm, with_cell: bool) -> np.ndarray:
    tess = cm.tessellation
    n_dofs = cm.n_vc + 1 if with_cell else cm.n_vc
    n_pairs = tess.n_pairs
    idx = np.arange(n_pairs)

    # linear reconstruction of the four corner values of each (v1, v2, f, c) tet
    R = np.zeros((n_pairs, 4, n_dofs))
    R[idx, 0, tess.v1] = 1.0
    R[idx, 1, tess.v2] = 1.0
    R[:, 2, :cm.n_vc] = _face_average(cm)[tess.f]
    if with_cell:
        R[:, 3, cm.n_vc] = 1.0
    else:
        R[:, 3, :] = 1.0 / cm.n_vc

    Mt = tess.pef_vol[:, None, None] * _P1_TET_MASS[None, :, :]
    return np.einsum("pai,pab,pbj->ij", R, Mt, R)


def vertex_hodge(cm, algo: str = "voronoi") -> np.ndarray:
    """Hodge operator on the cell vertices, shape (n_vc, n_vc)."""
    if algo == "voronoi":
        return np.diag(cm.wvc * cm.vol_c)
    if algo == "wbs":
        return _wbs_mass(cm, with_cell=False)
    raise ValueError(f"Unknown Hodge algorithm '{algo}'. Use one of {HODGE_ALGOS}.")


def vertex_cell_hodge(cm) -> np.ndarray:
    """Hodge operator on the cell vertices and the cell center, shape (n_vc+1, n_vc+1)."""
    return _wbs_mass(cm, with_cell=True)
