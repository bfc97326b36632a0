"""pycdo.integration.quadrature
Tetrahedron kernels and point rules used by the cellwise source integrators.

All rules are batched: a tetrahedron is given by four (n, 3) arrays of corner
coordinates and the result carries a leading axis of length n.
"""
import numpy as np
import numba

__all__ = ["tet_volumes", "voltet", "tet_5pts", "tet_10pts",
           "TET_Q5_WEIGHTS", "TET_Q10_WEIGHTS"]


# centroid, then the four (1/2, 1/6, 1/6, 1/6) points; exact for cubics
TET_Q5_WEIGHTS = np.array([-0.8, 0.45, 0.45, 0.45, 0.45])
# four corners, then the six edge midpoints; exact for quadratics
TET_Q10_WEIGHTS = np.array([-0.05] * 4 + [0.2] * 6)

_TET_EDGES = ((0, 1), (0, 2), (0, 3), (1, 2), (1, 3), (2, 3))


@numba.njit(cache=True)
def _tet_volumes(xa, xb, xc, xd, out):
    """Unsigned volume |det(b-a, c-a, d-a)| / 6 of each tetrahedron."""
    for i in range(xa.shape[0]):
        u0 = xb[i, 0] - xa[i, 0]; u1 = xb[i, 1] - xa[i, 1]; u2 = xb[i, 2] - xa[i, 2]
        v0 = xc[i, 0] - xa[i, 0]; v1 = xc[i, 1] - xa[i, 1]; v2 = xc[i, 2] - xa[i, 2]
        w0 = xd[i, 0] - xa[i, 0]; w1 = xd[i, 1] - xa[i, 1]; w2 = xd[i, 2] - xa[i, 2]
        det = (u0 * (v1 * w2 - v2 * w1)
               - u1 * (v0 * w2 - v2 * w0)
               + u2 * (v0 * w1 - v1 * w0))
        out[i] = abs(det) / 6.0


def _as_points(x):
    return np.ascontiguousarray(np.atleast_2d(np.asarray(x, dtype=np.float64)))


def tet_volumes(xa, xb, xc, xd) -> np.ndarray:
    xa, xb, xc, xd = (_as_points(p) for p in (xa, xb, xc, xd))
    n = max(p.shape[0] for p in (xa, xb, xc, xd))
    xa, xb, xc, xd = (np.ascontiguousarray(np.broadcast_to(p, (n, 3)))
                      for p in (xa, xb, xc, xd))
    out = np.empty(n, dtype=np.float64)
    _tet_volumes(xa, xb, xc, xd, out)
    return out


def voltet(xa, xb, xc, xd) -> float:
    """Volume of a single tetrahedron."""
    return float(tet_volumes(xa, xb, xc, xd)[0])


def tet_5pts(xa, xb, xc, xd, vol):
    """
    Five-point Gauss rule on tetrahedra (degree 3).

    Returns
    -------
    pts : (n, 5, 3)
    wts : (n, 5) already scaled by the tetrahedron volume
    """
    corners = np.stack(np.broadcast_arrays(_as_points(xa), _as_points(xb),
                                           _as_points(xc), _as_points(xd)), axis=1)
    n = corners.shape[0]
    total = corners.sum(axis=1)
    pts = np.empty((n, 5, 3))
    pts[:, 0] = 0.25 * total
    # (1/2, 1/6, 1/6, 1/6): x_i/2 + (sum - x_i)/6 = sum/6 + x_i/3
    pts[:, 1:] = total[:, None, :] / 6.0 + corners / 3.0
    vol = np.broadcast_to(np.asarray(vol, dtype=float).reshape(-1), (n,))
    wts = vol[:, None] * TET_Q5_WEIGHTS[None, :]
    return pts, wts


def tet_10pts(xa, xb, xc, xd, vol):
    """
    Ten-point rule on tetrahedra (degree 2): -1/20 at the corners and 1/5 at
    the edge midpoints.
    """
    corners = np.stack(np.broadcast_arrays(_as_points(xa), _as_points(xb),
                                           _as_points(xc), _as_points(xd)), axis=1)
    n = corners.shape[0]
    pts = np.empty((n, 10, 3))
    pts[:, :4] = corners
    for k, (i, j) in enumerate(_TET_EDGES):
        pts[:, 4 + k] = 0.5 * (corners[:, i] + corners[:, j])
    vol = np.broadcast_to(np.asarray(vol, dtype=float).reshape(-1), (n,))
    wts = vol[:, None] * TET_Q10_WEIGHTS[None, :]
    return pts, wts
