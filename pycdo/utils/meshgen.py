"""pycdo.utils.meshgen
Mesh generators for quick tests.
"""
import numpy as np
from scipy.spatial import Delaunay
from typing import Optional, Tuple

from pycdo.core.mesh import PolyMesh

__all__ = ["structured_hex", "delaunay_tets", "unit_hexahedron", "unit_tetrahedron",
           "unit_prism", "single_cell"]

# local faces of a VTK-ordered hexahedron / tetrahedron / wedge
_HEX_FACES = ((0, 3, 2, 1), (4, 5, 6, 7), (0, 1, 5, 4), (1, 2, 6, 5), (2, 3, 7, 6), (3, 0, 4, 7))
_TET_FACES = ((0, 2, 1), (0, 1, 3), (1, 2, 3), (0, 3, 2))
_PRISM_FACES = ((0, 2, 1), (3, 4, 5), (0, 1, 4, 3), (1, 2, 5, 4), (2, 0, 3, 5))


def structured_hex(Lx: float, Ly: float, Lz: float, *, nx: int, ny: int, nz: int,
                   offset: Optional[Tuple[float, float, float]] = None) -> PolyMesh:
    """Box [0,Lx]x[0,Ly]x[0,Lz] split into nx*ny*nz hexahedra (VTK vertex order)."""
    x = np.linspace(0.0, Lx, nx + 1)
    y = np.linspace(0.0, Ly, ny + 1)
    z = np.linspace(0.0, Lz, nz + 1)
    Z, Y, X = np.meshgrid(z, y, x, indexing="ij")
    coords = np.column_stack([X.ravel(), Y.ravel(), Z.ravel()])
    if offset is not None:
        coords += np.asarray(offset, dtype=float)

    def vid(i, j, k):
        return i + (nx + 1) * (j + (ny + 1) * k)

    cells, cell_vertices = [], []
    for k in range(nz):
        for j in range(ny):
            for i in range(nx):
                hv = [vid(i, j, k), vid(i + 1, j, k), vid(i + 1, j + 1, k), vid(i, j + 1, k),
                      vid(i, j, k + 1), vid(i + 1, j, k + 1), vid(i + 1, j + 1, k + 1), vid(i, j + 1, k + 1)]
                cells.append([[hv[a] for a in f] for f in _HEX_FACES])
                cell_vertices.append(hv)
    return PolyMesh(coords, cells, cell_vertices=cell_vertices, cell_type="hexahedron")


def delaunay_tets(points: np.ndarray, *, min_volume: float = 0.0) -> PolyMesh:
    """Tetrahedral mesh of the convex hull of a point cloud."""
    pts = np.asarray(points, dtype=float)
    tri = Delaunay(pts)
    tets = tri.simplices.copy()
    if min_volume > 0.0:
        a, b, c, d = (pts[tets[:, i]] for i in range(4))
        vol = np.abs(np.einsum("ij,ij->i", b - a, np.cross(c - a, d - a))) / 6.0
        tets = tets[vol > min_volume]
    cells = [[[t[a] for a in f] for f in _TET_FACES] for t in tets]
    return PolyMesh(pts, cells, cell_vertices=tets, cell_type="tetra")


def single_cell(vertices, faces, cell_type: Optional[str] = None) -> PolyMesh:
    """One-cell mesh from local vertices and face loops."""
    return PolyMesh(np.asarray(vertices, dtype=float), [faces],
                    cell_vertices=[list(range(len(vertices)))], cell_type=cell_type)


def unit_hexahedron(origin=(0.0, 0.0, 0.0), h: float = 1.0) -> PolyMesh:
    o = np.asarray(origin, dtype=float)
    V = o + h * np.array([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],
                          [0, 0, 1], [1, 0, 1], [1, 1, 1], [0, 1, 1]], dtype=float)
    return single_cell(V, _HEX_FACES, "hexahedron")


def unit_tetrahedron() -> PolyMesh:
    V = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]], dtype=float)
    return single_cell(V, _TET_FACES, "tetra")


def unit_prism() -> PolyMesh:
    V = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1], [1, 0, 1], [0, 1, 1]], dtype=float)
    return single_cell(V, _PRISM_FACES, "wedge")
