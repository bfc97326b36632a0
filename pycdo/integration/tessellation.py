"""pycdo.integration.tessellation
Sub-tetrahedra of a polyhedral cell.

Every (face, edge) incidence of a cell spans the tetrahedron
(x_v1, x_v2, x_f, x_c). Cutting it through the edge midpoint gives two
sub-tetrahedra (x_v, x_e, x_f, x_c), one per edge vertex. The sub-tetrahedra
owned by a vertex tile the part of its dual cell that lies in the cell, so
every dual-cell quadrature is a loop over this tessellation.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import numpy as np

from pycdo.integration.quadrature import tet_volumes

__all__ = ["SubTet", "CellTessellation"]


@dataclass(frozen=True)
class SubTet:
    vertex: int       # owning vertex (local id)
    other: int        # second vertex of the edge
    edge: int
    face: int
    volume: float
    points: np.ndarray   # (4, 3): x_v, x_e, x_f, x_c


class CellTessellation:
    """
    Restartable sequence of the sub-tetrahedra of one cell.

    Parallel arrays are indexed by (face, edge) pair; ``pef_vol`` is the volume
    of the full tetrahedron (x_v1, x_v2, x_f, x_c) and ``tet_vol`` the volume of
    each of its two halves.
    """

    def __init__(self, cm):
        assert cm.n_vc > 0 and cm.n_ec > 0 and cm.n_fc > 0, \
            f"Empty cell geometry for cell {cm.c_id}"
        self.n_vc = cm.n_vc
        counts = np.diff(cm.f2e_idx)
        self.f = np.repeat(np.arange(cm.n_fc), counts)
        self.e = np.asarray(cm.f2e_ids, dtype=np.int64)
        self.v1 = cm.e2v[self.e, 0]
        self.v2 = cm.e2v[self.e, 1]
        self.xv1 = cm.xv[self.v1]
        self.xv2 = cm.xv[self.v2]
        self.xe = cm.xe[self.e]
        self.xf = cm.xf[self.f]
        self.xc = cm.xc
        self.pef_vol = tet_volumes(self.xv1, self.xv2, self.xf, self.xc)
        self.tet_vol = 0.5 * self.pef_vol

    @property
    def n_pairs(self) -> int:
        return self.e.shape[0]

    def __len__(self) -> int:
        return 2 * self.n_pairs

    def __iter__(self) -> Iterator[SubTet]:
        for i in range(self.n_pairs):
            for v, o, xv in ((self.v1[i], self.v2[i], self.xv1[i]),
                             (self.v2[i], self.v1[i], self.xv2[i])):
                yield SubTet(int(v), int(o), int(self.e[i]), int(self.f[i]),
                             float(self.tet_vol[i]),
                             np.stack([xv, self.xe[i], self.xf[i], self.xc]))

    def owners(self) -> np.ndarray:
        """Owning vertex of every sub-tetrahedron, v1-halves first."""
        return np.concatenate([self.v1, self.v2])

    def corners(self):
        """Corners (x_v, x_e, x_f, x_c) of every sub-tetrahedron, same order as owners()."""
        xv = np.concatenate([self.xv1, self.xv2])
        xe = np.concatenate([self.xe, self.xe])
        xf = np.concatenate([self.xf, self.xf])
        return xv, xe, xf, self.xc

    def volumes(self) -> np.ndarray:
        return np.concatenate([self.tet_vol, self.tet_vol])

    def dual_volumes(self) -> np.ndarray:
        """Volume of each vertex's portion of the cell."""
        return np.bincount(self.owners(), self.volumes(), self.n_vc)
