"""pycdo.assembly.source_vector"""
import numpy as np

from pycdo.core.cellmesh import CellMeshBuilder
from pycdo.core.hodge import vertex_cell_hodge, vertex_hodge
from pycdo.source.cellwise import compute_setup_cellwise
from pycdo.source.workspace import Workspace

__all__ = ["assemble_source_vector"]


def assemble_source_vector(mesh, setup, scheme: str, *, hodge_algo: str = "voronoi"):
    """
    Loop over the cells, compute the local source vector of each one and
    scatter it on the mesh dofs: vertices for 'cdovb', vertices then cells for
    'cdovcb'.
    """
    with_cell = scheme == "cdovcb"
    n_dofs = mesh.n_vertices + (mesh.n_cells if with_cell else 0)
    rhs = np.zeros(n_dofs)
    ws = Workspace.for_mesh(mesh)
    local = np.zeros(mesh.n_max_vbyc + 1)

    for cm in CellMeshBuilder(mesh):
        ws.check(cm)
        n_loc = cm.n_vc + 1 if with_cell else cm.n_vc
        if setup.needs_hodge:
            ws.hdg = vertex_cell_hodge(cm) if with_cell else vertex_hodge(cm, hodge_algo)
        compute_setup_cellwise(setup, cm, ws, local[:n_loc])
        np.add.at(rhs, cm.v_ids, local[:cm.n_vc])
        if with_cell:
            rhs[mesh.n_vertices + cm.c_id] += local[cm.n_vc]
    return rhs
