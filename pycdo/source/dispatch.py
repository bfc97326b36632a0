"""pycdo.source.dispatch
Selection of the cellwise integration routine of every source term.

The routine only depends on (scheme, reduction, definition, quadrature), so
the selection is a table lookup. Combinations missing from the table are not
implemented and are rejected while setting up the equation, before any cell
is visited.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set

import numpy as np

from pycdo.source.descriptor import (N_MAX_SOURCE_TERMS, SCHEMES, SourceTerm,
                                     SourceTermConfigError)
from pycdo.source.integrators import SourceIntegrator
from pycdo.source.mask import build_source_mask

logger = logging.getLogger(__name__)

__all__ = ["SourceTermSetup", "SourceTermBuilder", "init_source_terms", "DISPATCH_TABLE"]

# (scheme, reduction, def_type, quad_type) -> SourceIntegrator method.
# quad_type only matters for analytic densities on dual cells.
DISPATCH_TABLE = {
    ("cdovb", "dual", "value", None): "dual_by_value",
    ("cdovb", "dual", "analytic", "bary"): "dual_bary_by_analytic",
    ("cdovb", "dual", "analytic", "bary_subdiv"): "dual_subdiv_by_analytic",
    ("cdovb", "dual", "analytic", "higher"): "dual_q10_by_analytic",
    ("cdovb", "dual", "analytic", "highest"): "dual_q5_by_analytic",
    ("cdovb", "primal", "value", None): "vertex_potential_by_value",
    ("cdovb", "primal", "analytic", None): "vertex_potential_by_analytic",
    ("cdovcb", "primal", "value", None): "vertex_cell_potential_by_value",
    ("cdovcb", "primal", "analytic", None): "vertex_cell_potential_by_analytic",
}


def _dispatch_key(scheme: str, st: SourceTerm) -> tuple:
    quad = st.quad_type if (st.def_type == "analytic" and st.reduction == "dual") else None
    return scheme, st.reduction, st.def_type, quad


@dataclass
class SourceTermSetup:
    """What the cellwise evaluation needs for one equation."""
    source_terms: List[SourceTerm]
    compute_source: List[Optional[Callable]]
    sys_flag: Set[str] = field(default_factory=set)
    mask: Optional[np.ndarray] = None

    @property
    def n_source_terms(self) -> int:
        return len(self.source_terms)

    @property
    def needs_hodge(self) -> bool:
        return "sources_hloc" in self.sys_flag


class SourceTermBuilder:
    """
    Resolves source terms into cellwise routines for a given mesh.

    The mesh (locations, number of cells) and the time step are explicit
    dependencies; the integration routines read the current time from the
    time step when they are called.
    """

    def __init__(self, mesh, time_step):
        self.mesh = mesh
        self.time_step = time_step
        self.integrator = SourceIntegrator(time_step)

    def resolve(self, scheme: str, st: SourceTerm, eqname: Optional[str] = None) -> Callable:
        eqn = "Equation" if eqname is None else eqname
        where = f"<{eqn}/{st.name}>"
        if scheme not in SCHEMES:
            raise SourceTermConfigError(f"{where} Invalid space scheme '{scheme}' for setting the source term.")
        if st.var_type != "scalar":
            raise SourceTermConfigError(
                f"{where} Only scalar source terms can be computed (got a {st.var_type} one).")
        key = _dispatch_key(scheme, st)
        name = DISPATCH_TABLE.get(key)
        if name is None:
            raise SourceTermConfigError(
                f"{where} Invalid source term for scheme '{scheme}': reduction={st.reduction}, "
                f"definition={st.def_type}, quadrature={st.quad_type}.")
        logger.debug("%s resolved to %s", where, name)
        return getattr(self.integrator, name)

    def build(self, scheme: str, source_terms: Sequence[SourceTerm],
              eqname: Optional[str] = None) -> SourceTermSetup:
        """Dispatch table, system flag and activation mask of an equation."""
        source_terms = list(source_terms)
        n_terms = len(source_terms)
        if n_terms > N_MAX_SOURCE_TERMS:
            raise SourceTermConfigError(
                f"Limitation to {N_MAX_SOURCE_TERMS} source terms has been reached "
                f"({n_terms} given for {eqname or 'Equation'}).")

        compute_source: List[Optional[Callable]] = [None] * N_MAX_SOURCE_TERMS
        sys_flag: Set[str] = set()
        if n_terms == 0:
            return SourceTermSetup(source_terms, compute_source, sys_flag, None)

        sys_flag.add("sourceterm")
        for st_id, st in enumerate(source_terms):
            if st.reduction == "primal":
                sys_flag |= {"hloc_conf", "sources_hloc"}
            compute_source[st_id] = self.resolve(scheme, st, eqname)

        mask = build_source_mask(source_terms, self.mesh.locations, self.mesh.n_cells)
        logger.debug("%d source term(s) set up for %s (mask: %s)", n_terms,
                     eqname or "Equation", "none" if mask is None else "per cell")
        return SourceTermSetup(source_terms, compute_source, sys_flag, mask)


def init_source_terms(scheme: str, source_terms: Sequence[SourceTerm], mesh, time_step,
                      eqname: Optional[str] = None) -> SourceTermSetup:
    return SourceTermBuilder(mesh, time_step).build(scheme, source_terms, eqname)
