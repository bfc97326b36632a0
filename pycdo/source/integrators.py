"""pycdo.source.integrators
Cellwise integration of a source term.

Every routine has the signature ``(source, cm, ws, values)`` and adds the
contribution of ``source`` in the cell ``cm`` to ``values`` (vertex dofs
first, then the cell dof for vertex+cell schemes). A ``None`` source adds
nothing.

Dual-cell densities are integrated on the sub-tetrahedra
(x_v, x_e, x_f, x_c) of the cell, see pycdo.integration.tessellation. The sum
of their contributions over the vertices of a cell is the integral over the
cell, exact for affine functions (``bary``, ``bary_subdiv``), quadratic
(``higher``) and cubic (``highest``) ones.
"""
import numpy as np

from pycdo.integration.quadrature import tet_5pts

__all__ = ["SourceIntegrator"]


class SourceIntegrator:

    def __init__(self, time_step):
        self.time_step = time_step

    @property
    def t_cur(self) -> float:
        return self.time_step.t_cur

    # ------------------------------------------------------------------
    # Potentials at primal entities, pushed through a local Hodge operator
    # ------------------------------------------------------------------
    def _apply_hodge(self, cm, ws, n_dofs, values):
        assert ws is not None and ws.hdg is not None, \
            f"A local Hodge operator is needed in cell {cm.c_id}"
        assert ws.hdg.shape == (n_dofs, n_dofs), \
            f"Hodge operator of shape {ws.hdg.shape} for {n_dofs} dofs"
        ev = ws.values[:n_dofs]
        hdg_ev = ws.values[n_dofs:2 * n_dofs]
        np.dot(ws.hdg, ev, out=hdg_ev)
        values[:n_dofs] += hdg_ev

    def vertex_potential_by_value(self, source, cm, ws, values):
        """Constant potential at the cell vertices."""
        if source is None:
            return
        ws.values[:cm.n_vc] = source.value
        self._apply_hodge(cm, ws, cm.n_vc, values)

    def vertex_potential_by_analytic(self, source, cm, ws, values):
        """Analytic potential evaluated at the cell vertices."""
        if source is None:
            return
        ws.values[:cm.n_vc] = source.analytic(self.t_cur, cm.xv)
        self._apply_hodge(cm, ws, cm.n_vc, values)

    def vertex_cell_potential_by_value(self, source, cm, ws, values):
        """Constant potential at the cell vertices and the cell center."""
        if source is None:
            return
        ws.values[:cm.n_vc + 1] = source.value
        self._apply_hodge(cm, ws, cm.n_vc + 1, values)

    def vertex_cell_potential_by_analytic(self, source, cm, ws, values):
        """Analytic potential evaluated at the cell vertices and the cell center."""
        if source is None:
            return
        n = cm.n_vc
        ws.values[:n] = source.analytic(self.t_cur, cm.xv)
        ws.values[n] = source.analytic(self.t_cur, cm.xc)[0]
        self._apply_hodge(cm, ws, n + 1, values)

    # ------------------------------------------------------------------
    # Densities on dual cells
    # ------------------------------------------------------------------
    def dual_by_value(self, source, cm, ws, values):
        """Constant density: value times the dual volume of each vertex in the cell."""
        if source is None:
            return
        values[:cm.n_vc] += source.value * cm.wvc * cm.vol_c

    def dual_bary_by_analytic(self, source, cm, ws, values):
        """
        One evaluation per vertex, at the barycenter of its part of the cell.
        Exact for affine functions.
        """
        if source is None:
            return
        tess = cm.tessellation
        n = cm.n_vc

        # barycenter of (x_v, x_e, x_f, x_c) with x_e = (x_v + x_w)/2
        xfc = 0.25 * (tess.xf + cm.xc)
        xg1 = xfc + 0.375 * tess.xv1 + 0.125 * tess.xv2
        xg2 = xfc + 0.375 * tess.xv2 + 0.125 * tess.xv1

        xgv = ws.vectors[:n]
        xgv[:] = 0.0
        np.add.at(xgv, tess.v1, tess.tet_vol[:, None] * xg1)
        np.add.at(xgv, tess.v2, tess.tet_vol[:, None] * xg2)

        vol_vc = cm.vol_c * cm.wvc
        xgv /= vol_vc[:, None]

        result = source.analytic(self.t_cur, xgv)
        values[:n] += vol_vc * result

    def dual_subdiv_by_analytic(self, source, cm, ws, values):
        """
        One evaluation at the barycenter of every sub-tetrahedron, weighted by
        its volume. Exact for affine functions.
        """
        if source is None:
            return
        tess = cm.tessellation
        xfc = 0.25 * (tess.xf + cm.xc)
        xg = np.concatenate([xfc + 0.375 * tess.xv1 + 0.125 * tess.xv2,
                             xfc + 0.375 * tess.xv2 + 0.125 * tess.xv1])
        result = source.analytic(self.t_cur, xg)
        np.add.at(values, tess.owners(), tess.volumes() * result)

    def dual_q10_by_analytic(self, source, cm, ws, values):
        """
        Ten-point rule (-1/20 at the corners, 1/5 at the edge midpoints) on every
        sub-tetrahedron, with the evaluations shared between sub-tetrahedra
        grouped per point. Exact for quadratic functions.
        """
        if source is None:
            return
        f, t = source.analytic, self.t_cur
        tess = cm.tessellation
        n, n_ec = cm.n_vc, cm.n_ec

        # cell center, vertices and vertex-cell midpoints
        val_c = f(t, cm.xc)[0]
        val_v = f(t, cm.xv)
        val_vc = f(t, 0.5 * (cm.xc + cm.xv))
        contrib = ws.values[:n]
        contrib[:] = cm.wvc * cm.vol_c * (-0.05 * (val_c + val_v) + 0.2 * val_vc)

        # edge-face midpoints, shared by the two halves of each (v1, v2, f, c)
        val_ef = f(t, 0.5 * (tess.xe + tess.xf))
        ef_contrib = 0.1 * tess.pef_vol * val_ef
        np.add.at(contrib, tess.v1, ef_contrib)
        np.add.at(contrib, tess.v2, ef_contrib)

        # faces: face center, face-cell and face-vertex midpoints
        pfv_vol = np.zeros((cm.n_fc, n))
        np.add.at(pfv_vol, (tess.f, tess.v1), 0.5 * tess.pef_vol)
        np.add.at(pfv_vol, (tess.f, tess.v2), 0.5 * tess.pef_vol)
        val_f = -0.05 * f(t, cm.xf) + 0.2 * f(t, 0.5 * (cm.xf + cm.xc))
        fi, vi = np.nonzero(pfv_vol)
        val_fv = f(t, 0.5 * (cm.xf[fi] + cm.xv[vi]))
        np.add.at(contrib, vi, pfv_vol[fi, vi] * (val_f[fi] + 0.2 * val_fv))

        # edges: vertex-edge midpoints, edge center and edge-cell midpoints
        pec_vol = np.bincount(tess.e, tess.pef_vol, n_ec)
        ev1, ev2 = cm.e2v[:, 0], cm.e2v[:, 1]
        val_ev = f(t, np.concatenate([0.5 * (cm.xv[ev1] + cm.xe),
                                      0.5 * (cm.xv[ev2] + cm.xe)]))
        np.add.at(contrib, ev1, 0.1 * pec_vol * val_ev[:n_ec])
        np.add.at(contrib, ev2, 0.1 * pec_vol * val_ev[n_ec:])

        val_e = f(t, np.concatenate([cm.xe, 0.5 * (cm.xc + cm.xe)]))
        e_contrib = 0.5 * pec_vol * (-0.05 * val_e[:n_ec] + 0.2 * val_e[n_ec:])
        np.add.at(contrib, ev1, e_contrib)
        np.add.at(contrib, ev2, e_contrib)

        values[:n] += contrib

    def dual_q5_by_analytic(self, source, cm, ws, values):
        """
        Five-point Gauss rule on every sub-tetrahedron. Exact for cubic
        functions; needs 10 evaluations per (face, edge) pair, use with care.
        """
        if source is None:
            return
        tess = cm.tessellation
        xv, xe, xf, xc = tess.corners()
        pts, wts = tet_5pts(xv, xe, xf, xc, tess.volumes())
        result = source.analytic(self.t_cur, pts.reshape(-1, 3)).reshape(-1, 5)
        np.add.at(values, tess.owners(), (result * wts).sum(axis=1))
