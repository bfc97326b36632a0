"""pycdo.source.evaluate
Evaluation of a source term on the whole mesh (not cellwise).

Used to initialise or visualise a field: potentials are point values at
vertices or cell centers, densities are integrals over dual cells or cells.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from pycdo.core.cellmesh import CellMeshBuilder
from pycdo.source.descriptor import _ERR_EMPTY_ST, SourceTerm, SourceTermConfigError
from pycdo.source.integrators import SourceIntegrator
from pycdo.source.workspace import Workspace

logger = logging.getLogger(__name__)

__all__ = ["DofDesc", "SourceEvaluator", "DOF_LOCATIONS", "DOF_STATES"]

DOF_LOCATIONS = ("primal_vtx", "primal_cell", "dual_cell")
DOF_STATES = ("potential", "density")

_DUAL_ROUTINES = {
    "bary": "dual_bary_by_analytic",
    "bary_subdiv": "dual_subdiv_by_analytic",
    "higher": "dual_q10_by_analytic",
    "highest": "dual_q5_by_analytic",
}


@dataclass(frozen=True)
class DofDesc:
    location: str
    state: str


class SourceEvaluator:

    def __init__(self, mesh, time_step):
        self.mesh = mesh
        self.time_step = time_step
        self.integrator = SourceIntegrator(time_step)
        self.cell_builder = CellMeshBuilder(mesh)

    # ------------------------------------------------------------------
    def _n_entities(self, location: str) -> int:
        if location in ("dual_cell", "primal_vtx"):
            return self.mesh.n_vertices
        if location == "primal_cell":
            return self.mesh.n_cells
        raise SourceTermConfigError(
            f"Invalid DoF location '{location}'. Not able to compute the source term.")

    def _vertices_of(self, cells: np.ndarray) -> np.ndarray:
        if len(cells) == self.mesh.n_cells:
            return np.arange(self.mesh.n_vertices)
        return np.unique(np.concatenate([self.mesh.cell_vertices[c] for c in cells]))

    def compute(self, dof_desc: DofDesc, source: Optional[SourceTerm],
                values: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Values of ``source`` on the entities described by ``dof_desc``.

        ``values`` is allocated when None; in both cases it is reset before
        the evaluation.
        """
        if source is None:
            raise SourceTermConfigError(_ERR_EMPTY_ST)
        if source.var_type != "scalar":
            raise SourceTermConfigError(
                f"Only scalar source terms can be evaluated ('{source.name}' is a {source.var_type}).")

        n_ent = self._n_entities(dof_desc.location)
        if values is None:
            values = np.zeros(n_ent)
        else:
            values[:n_ent] = 0.0

        cells = self.mesh.location_cells(source.ml_id)
        logger.debug("evaluating '%s' as %s at %s on %d cells", source.name,
                     dof_desc.state, dof_desc.location, len(cells))

        if dof_desc.state == "potential":
            if source.def_type == "value":
                self._potential_by_value(dof_desc.location, cells, source.value, values)
            elif source.def_type == "analytic":
                self._potential_by_analytic(dof_desc.location, cells, source.analytic, values)
            else:
                raise SourceTermConfigError(f"Invalid type of definition '{source.def_type}' for a potential.")
        elif dof_desc.state == "density":
            if source.def_type == "value":
                self._density_by_value(dof_desc.location, cells, source.value, values)
            elif source.def_type == "analytic":
                self._density_by_analytic(dof_desc.location, cells, source, values)
            else:
                raise SourceTermConfigError(f"Invalid type of definition '{source.def_type}' for a density.")
        else:
            raise SourceTermConfigError(f"Invalid DoF state '{dof_desc.state}'. Use one of {DOF_STATES}.")

        return values

    # ------------------------------------------------------------------
    def _potential_by_value(self, location, cells, value, values):
        if location == "primal_vtx":
            values[self._vertices_of(cells)] = value
        elif location == "primal_cell":
            values[cells] = value
        else:
            raise SourceTermConfigError(f"A potential cannot be located at '{location}'.")

    def _potential_by_analytic(self, location, cells, func, values):
        t = self.time_step.t_cur
        if location == "primal_vtx":
            idx = self._vertices_of(cells)
            values[idx] = func(t, self.mesh.vertices[idx])
        elif location == "primal_cell":
            values[cells] = func(t, self.mesh.cell_centers[cells])
        else:
            raise SourceTermConfigError(f"A potential cannot be located at '{location}'.")

    def _density_by_value(self, location, cells, value, values):
        m = self.mesh
        if location == "dual_cell":
            for c in cells:
                np.add.at(values, m.cell_vertices[c], value * m.cell_wvc[c] * m.cell_volumes[c])
        elif location == "primal_cell":
            values[cells] = value * m.cell_volumes[cells]
        else:
            raise SourceTermConfigError(f"A density cannot be located at '{location}'.")

    def _density_by_analytic(self, location, cells, source, values):
        m = self.mesh
        if location == "primal_cell" and source.quad_type == "bary":
            values[cells] = m.cell_volumes[cells] * source.analytic(self.time_step.t_cur,
                                                                    m.cell_centers[cells])
            return
        if location not in ("dual_cell", "primal_cell"):
            raise SourceTermConfigError(f"A density cannot be located at '{location}'.")

        integrate = getattr(self.integrator, _DUAL_ROUTINES[source.quad_type])
        ws = Workspace.for_mesh(m)
        for c in cells:
            cm = self.cell_builder.build(c)
            local = np.zeros(cm.n_vc)
            integrate(source, cm, ws, local)
            if location == "dual_cell":
                np.add.at(values, cm.v_ids, local)
            else:
                values[c] = local.sum()
