"""pycdo.core.cellmesh
Per-cell geometric cache consumed by the cellwise source integrators.

All connectivity inside a CellMesh uses local ids (0 .. n_vc-1 for vertices,
0 .. n_ec-1 for edges, 0 .. n_fc-1 for faces).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from pycdo.integration.tessellation import CellTessellation

__all__ = ["CellMesh", "CellMeshBuilder"]


@dataclass
class CellMesh:
    c_id: int
    xc: np.ndarray            # (3,)
    vol_c: float
    v_ids: np.ndarray         # (n_vc,) global vertex ids
    xv: np.ndarray            # (n_vc, 3)
    wvc: np.ndarray           # (n_vc,) dual volume fraction, sums to 1
    e_ids: np.ndarray         # (n_ec,)
    e2v: np.ndarray           # (n_ec, 2) local vertex ids
    xe: np.ndarray            # (n_ec, 3) edge centers
    f_ids: np.ndarray         # (n_fc,)
    xf: np.ndarray            # (n_fc, 3) face centers
    f2e_idx: np.ndarray       # (n_fc+1,) CSR index into f2e_ids
    f2e_ids: np.ndarray       # local edge ids
    _tess: Optional[CellTessellation] = field(default=None, repr=False, compare=False)

    @property
    def n_vc(self) -> int:
        return self.xv.shape[0]

    @property
    def n_ec(self) -> int:
        return self.e2v.shape[0]

    @property
    def n_fc(self) -> int:
        return self.xf.shape[0]

    @property
    def tessellation(self) -> CellTessellation:
        if self._tess is None:
            self._tess = CellTessellation(self)
        return self._tess


class CellMeshBuilder:
    """Builds CellMesh records from a PolyMesh, one cell at a time."""

    def __init__(self, mesh):
        self.mesh = mesh

    def build(self, c_id: int) -> CellMesh:
        m = self.mesh
        c_id = int(c_id)
        v_ids = m.cell_vertices[c_id]
        e_ids = m.cell_edges[c_id]
        f_ids = m.cell_faces[c_id]
        v_g2l = {int(v): i for i, v in enumerate(v_ids)}
        e_g2l = {int(e): i for i, e in enumerate(e_ids)}

        e2v = np.array([[v_g2l[int(a)], v_g2l[int(b)]] for a, b in m.edge_vertices[e_ids]],
                       dtype=np.int64).reshape(-1, 2)
        f2e_idx = np.zeros(len(f_ids) + 1, dtype=np.int64)
        f2e_ids = []
        for i, f in enumerate(f_ids):
            loc = [e_g2l[int(e)] for e in m.face_edges[f]]
            f2e_ids.extend(loc)
            f2e_idx[i + 1] = f2e_idx[i] + len(loc)

        return CellMesh(
            c_id=c_id,
            xc=m.cell_centers[c_id].copy(),
            vol_c=float(m.cell_volumes[c_id]),
            v_ids=v_ids,
            xv=m.vertices[v_ids],
            wvc=m.cell_wvc[c_id],
            e_ids=e_ids,
            e2v=e2v,
            xe=m.edge_centers[e_ids],
            f_ids=f_ids,
            xf=m.face_centers[f_ids],
            f2e_idx=f2e_idx,
            f2e_ids=np.array(f2e_ids, dtype=np.int64),
        )

    def __iter__(self):
        for c_id in range(self.mesh.n_cells):
            yield self.build(c_id)
