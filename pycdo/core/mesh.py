import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from pycdo.core.location import MeshLocations
from pycdo.integration.quadrature import tet_volumes

logger = logging.getLogger(__name__)


class PolyMesh:
    """
    Unstructured 3D mesh made of arbitrary polyhedral cells.

    Each cell is given as a list of faces and each face as a loop of global
    vertex ids. Faces shared by two cells are detected from their vertex sets,
    so faces may be listed in any orientation. Faces need not be planar: every
    geometric quantity is computed on the sub-tetrahedra
    (edge-vertex, edge-vertex, face center, cell center).
    """

    def __init__(self,
                 vertices: np.ndarray,
                 cells: Sequence[Sequence[Sequence[int]]],
                 *,
                 cell_vertices: Optional[Sequence[Sequence[int]]] = None,
                 cell_type: Optional[str] = None):
        self.vertices = np.ascontiguousarray(vertices, dtype=float)
        if self.vertices.ndim != 2 or self.vertices.shape[1] != 3:
            raise ValueError("vertices must be an (n, 3) array")
        self.cell_type = cell_type
        self.n_vertices = self.vertices.shape[0]
        self.n_cells = len(cells)

        self.face_vertices: List[np.ndarray] = []
        self.face_edges: List[np.ndarray] = []
        self.edge_vertices = np.empty((0, 2), dtype=np.int64)
        self.cell_faces: List[np.ndarray] = []
        self.cell_edges: List[np.ndarray] = []
        self.cell_vertices: List[np.ndarray] = []
        self._face_dict: Dict[Tuple[int, ...], int] = {}
        self._edge_dict: Dict[Tuple[int, int], int] = {}
        self._build_topology(cells, cell_vertices)
        self._compute_quantities()

        self.locations = MeshLocations(self.n_cells)
        logger.debug("PolyMesh: %d vertices, %d edges, %d faces, %d cells",
                     self.n_vertices, self.n_edges, self.n_faces, self.n_cells)

    # ------------------------------------------------------------------
    # Topology
    # ------------------------------------------------------------------
    def _edge_id(self, a: int, b: int, edges: List[Tuple[int, int]]) -> int:
        key = (a, b) if a < b else (b, a)
        eid = self._edge_dict.get(key)
        if eid is None:
            eid = len(edges)
            self._edge_dict[key] = eid
            edges.append(key)
        return eid

    def _build_topology(self, cells, cell_vertices):
        edges: List[Tuple[int, int]] = []
        for cid, cell in enumerate(cells):
            if len(cell) < 4:
                raise ValueError(f"Cell {cid} has {len(cell)} faces; a polyhedron needs at least 4.")
            f_ids = []
            for face in cell:
                loop = [int(v) for v in face]
                if len(loop) < 3:
                    raise ValueError(f"Cell {cid} has a face with fewer than 3 vertices.")
                key = tuple(sorted(loop))
                fid = self._face_dict.get(key)
                if fid is None:
                    fid = len(self.face_vertices)
                    self._face_dict[key] = fid
                    self.face_vertices.append(np.array(loop, dtype=np.int64))
                    self.face_edges.append(np.array(
                        [self._edge_id(loop[i], loop[(i + 1) % len(loop)], edges)
                         for i in range(len(loop))], dtype=np.int64))
                f_ids.append(fid)
            f_ids = np.array(f_ids, dtype=np.int64)
            self.cell_faces.append(f_ids)
            self.cell_edges.append(np.array(
                list(dict.fromkeys(int(e) for f in f_ids for e in self.face_edges[f])),
                dtype=np.int64))
            if cell_vertices is not None:
                self.cell_vertices.append(np.asarray(cell_vertices[cid], dtype=np.int64))
            else:
                self.cell_vertices.append(np.array(
                    list(dict.fromkeys(int(v) for f in f_ids for v in self.face_vertices[f])),
                    dtype=np.int64))
        self.edge_vertices = np.array(edges, dtype=np.int64).reshape(-1, 2)

    @property
    def n_faces(self) -> int:
        return len(self.face_vertices)

    @property
    def n_edges(self) -> int:
        return self.edge_vertices.shape[0]

    @property
    def n_max_vbyc(self) -> int:
        return max((len(v) for v in self.cell_vertices), default=0)

    @property
    def n_max_ebyc(self) -> int:
        return max((len(e) for e in self.cell_edges), default=0)

    @property
    def n_max_fbyc(self) -> int:
        return max((len(f) for f in self.cell_faces), default=0)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    def _cell_pairs(self, cid: int):
        """(face, edge) incidences of a cell as parallel arrays."""
        f_ids = self.cell_faces[cid]
        pf = np.concatenate([np.full(len(self.face_edges[f]), f) for f in f_ids])
        pe = np.concatenate([self.face_edges[f] for f in f_ids])
        return pf, pe

    def _compute_quantities(self):
        V = self.vertices
        self.edge_centers = 0.5 * (V[self.edge_vertices[:, 0]] + V[self.edge_vertices[:, 1]]) \
            if self.n_edges else np.empty((0, 3))
        self.face_centers = np.array([V[fv].mean(axis=0) for fv in self.face_vertices]).reshape(-1, 3)

        self.cell_centers = np.empty((self.n_cells, 3))
        self.cell_volumes = np.empty(self.n_cells)
        self.cell_wvc: List[np.ndarray] = []
        self.dual_volumes = np.zeros(self.n_vertices)

        for cid in range(self.n_cells):
            pf, pe = self._cell_pairs(cid)
            xv1 = V[self.edge_vertices[pe, 0]]
            xv2 = V[self.edge_vertices[pe, 1]]
            xf = self.face_centers[pf]

            # volume barycenter, computed from a first guess inside the cell
            x0 = V[self.cell_vertices[cid]].mean(axis=0)
            vol = tet_volumes(xv1, xv2, xf, x0)
            vol_c = vol.sum()
            if vol_c <= 0.0:
                raise ValueError(f"Cell {cid} has a non-positive volume.")
            xg = 0.25 * (xv1 + xv2 + xf + x0)
            xc = (vol[:, None] * xg).sum(axis=0) / vol_c

            # dual volume fractions on the final tessellation
            pef_vol = tet_volumes(xv1, xv2, xf, xc)
            vol_c = pef_vol.sum()
            g2l = {int(v): i for i, v in enumerate(self.cell_vertices[cid])}
            l1 = np.array([g2l[int(v)] for v in self.edge_vertices[pe, 0]], dtype=np.int64)
            l2 = np.array([g2l[int(v)] for v in self.edge_vertices[pe, 1]], dtype=np.int64)
            n_vc = len(g2l)
            pvol = np.bincount(l1, 0.5 * pef_vol, n_vc) + np.bincount(l2, 0.5 * pef_vol, n_vc)

            self.cell_centers[cid] = xc
            self.cell_volumes[cid] = vol_c
            self.cell_wvc.append(pvol / vol_c)
            np.add.at(self.dual_volumes, self.cell_vertices[cid], pvol)

    def volume(self) -> float:
        return float(self.cell_volumes.sum())

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------
    def add_location(self, name: str, cells=None, *, where=None) -> int:
        """
        Register a cell location. ``where`` is a predicate evaluated on the
        cell centers, e.g. ``lambda x: x[:, 0] < 0.5``.
        """
        if cells is not None and where is not None:
            raise ValueError("Give either 'cells' or 'where', not both.")
        if where is not None:
            cells = np.asarray(where(self.cell_centers), dtype=bool)
        return self.locations.add(name, cells)

    def location_cells(self, ml_id: int) -> np.ndarray:
        """Cell ids of a location (all cells for the full location)."""
        elts = self.locations.get_elt_list(ml_id)
        return np.arange(self.n_cells) if elts is None else elts
