import numpy as np
import meshio
from typing import Dict

from pycdo.core.mesh import PolyMesh

_SUPPORTED = {"tetra": 4, "hexahedron": 8, "wedge": 6}


def export_vtk(filename: str, mesh: PolyMesh, fields: Dict[str, np.ndarray]):
    """
    Exports evaluated source fields to a VTK (.vtu) file.

    Arrays of length n_vertices become point data, arrays of length n_cells
    become cell data. Only meshes made of a single standard cell type
    (tetra, hexahedron, wedge) can be written.
    """
    if mesh.cell_type not in _SUPPORTED:
        raise ValueError(f"Unsupported cell type for VTK export: {mesh.cell_type}")
    conn = np.array(mesh.cell_vertices, dtype=np.int64)
    if conn.ndim != 2 or conn.shape[1] != _SUPPORTED[mesh.cell_type]:
        raise ValueError(f"Inconsistent connectivity for '{mesh.cell_type}' cells.")
    cells = [meshio.CellBlock(mesh.cell_type, conn)]

    point_data, cell_data = {}, {}
    for name, arr in fields.items():
        arr = np.asarray(arr, dtype=float)
        if arr.shape[0] == mesh.n_vertices:
            point_data[name] = arr
        elif arr.shape[0] == mesh.n_cells:
            cell_data[name] = [arr]
        else:
            raise ValueError(f"Field '{name}' has {arr.shape[0]} values, expected "
                             f"{mesh.n_vertices} (vertices) or {mesh.n_cells} (cells).")

    meshio.write(filename, meshio.Mesh(points=mesh.vertices, cells=cells,
                                       point_data=point_data, cell_data=cell_data))
