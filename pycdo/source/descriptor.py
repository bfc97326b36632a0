"""pycdo.source.descriptor
Definition of a volumetric source term attached to a mesh location.

A SourceTerm is built by one of three factories (by value, by analytic
function, by array). Apart from the quadrature type and the primal/dual
reduction, which have explicit mutators, it does not change after
construction.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import numpy as np
import sympy as sp

from pycdo.core.analytic import Analytic

logger = logging.getLogger(__name__)

__all__ = ["SourceTerm", "ArrayDesc", "SourceTermConfigError", "default_flag",
           "destroy_source_terms", "get_flag", "get_name", "set_quadrature",
           "set_reduction", "summary",
           "N_MAX_SOURCE_TERMS", "SCHEMES", "VAR_TYPES", "DEF_TYPES",
           "QUADRATURE_TYPES", "REDUCTIONS"]

# one bit per term in a uint8 cell mask
N_MAX_SOURCE_TERMS = 8

SCHEMES = ("cdovb", "cdovcb", "cdofb", "hho")
VAR_TYPES = ("scalar", "vector", "tensor")
DEF_TYPES = ("value", "analytic", "array")
QUADRATURE_TYPES = ("bary", "bary_subdiv", "higher", "highest")
REDUCTIONS = ("primal", "dual")

_DEF_NAMES = {"value": "by value", "analytic": "by analytic function", "array": "by array"}
_QUAD_NAMES = {"bary": "barycentric", "bary_subdiv": "barycentric on a tetrahedral subdivision",
               "higher": "ten-point (degree 2)", "highest": "five-point Gauss (degree 3)"}

_ERR_EMPTY_ST = "Stop setting an empty source term. Please check your settings."


class SourceTermConfigError(ValueError):
    """Invalid or unsupported source-term configuration."""


@dataclass(frozen=True)
class ArrayDesc:
    location: str = "primal_cell"
    state: str = "shared"     # 'owner' or 'shared'

    @property
    def is_owner(self) -> bool:
        return self.state == "owner"


def default_flag(scheme: str) -> frozenset:
    """Default reduction flags of a source term for a given space scheme."""
    if scheme == "cdovb":
        return frozenset({"dual", "cell"})
    if scheme == "cdofb":
        return frozenset({"primal", "cell"})
    if scheme in ("cdovcb", "hho"):
        return frozenset({"primal"})
    raise SourceTermConfigError(f"Invalid numerical scheme '{scheme}' to set a source term.")


def _parse_flag(flag) -> tuple:
    flag = frozenset(flag)
    unknown = flag - {"primal", "dual", "vertex", "cell"}
    if unknown:
        raise SourceTermConfigError(f"Unknown source-term flag(s): {sorted(unknown)}")
    if ("primal" in flag) == ("dual" in flag):
        raise SourceTermConfigError("A source term is either 'primal' or 'dual'.")
    if "vertex" in flag and "cell" in flag:
        raise SourceTermConfigError("A source term lives either on vertices or on cells.")
    reduction = "primal" if "primal" in flag else "dual"
    support = "vertex" if "vertex" in flag else ("cell" if "cell" in flag else None)
    return reduction, support


def _check_var_type(var_type: str, value=None):
    if var_type not in VAR_TYPES:
        raise SourceTermConfigError(f"Invalid type of source term: '{var_type}'.")
    if value is None:
        return None
    if var_type == "scalar":
        return float(value)
    shape = (3,) if var_type == "vector" else (3, 3)
    arr = np.asarray(value, dtype=float)
    if arr.shape != shape:
        raise SourceTermConfigError(f"A {var_type} source term expects a value of shape {shape}, got {arr.shape}.")
    return arr


class SourceTerm:
    """One source term of an equation."""

    def __init__(self, st_id: int, name: Optional[str], var_type: str, ml_id: int,
                 flag, locations, def_type: str, *, value=None, analytic=None,
                 array=None, array_desc: Optional[ArrayDesc] = None):
        if ml_id is None or ml_id < 0:
            raise SourceTermConfigError("A source term needs a valid mesh location.")
        self.id = int(st_id)
        self._name = name if name is not None else f"sourceterm_{self.id:02d}"
        self._ml_id = int(ml_id)
        self._full_domain = bool(locations.is_full(ml_id))
        self._location_name = locations.get_name(ml_id)
        self._reduction, self._support = _parse_flag(flag)
        self._var_type = var_type
        self._def_type = def_type
        self._value = _check_var_type(var_type, value)
        self._analytic = analytic
        self._array = array
        self._array_desc = array_desc if array_desc is not None else ArrayDesc(state="")
        self._quad_type = "bary"

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------
    @classmethod
    def by_value(cls, st_id: int, name: Optional[str], var_type: str, ml_id: int,
                 flag, locations, value) -> "SourceTerm":
        return cls(st_id, name, var_type, ml_id, flag, locations, "value",
                   value=0.0 if value is None else value)

    @classmethod
    def by_analytic(cls, st_id: int, name: Optional[str], var_type: str, ml_id: int,
                    flag, locations, func: Callable) -> "SourceTerm":
        if not isinstance(func, Analytic):
            if not (isinstance(func, sp.Basic) or callable(func)):
                raise SourceTermConfigError("An analytic source term needs a callable f(t, x).")
            func = Analytic(func)
        return cls(st_id, name, var_type, ml_id, flag, locations, "analytic", analytic=func)

    @classmethod
    def by_array(cls, st_id: int, name: Optional[str], var_type: str, ml_id: int,
                 flag, locations, desc: ArrayDesc, array: np.ndarray) -> "SourceTerm":
        return cls(st_id, name, var_type, ml_id, flag, locations, "array",
                   array=array, array_desc=desc)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    name = property(lambda self: self._name)
    ml_id = property(lambda self: self._ml_id)
    full_domain = property(lambda self: self._full_domain)
    var_type = property(lambda self: self._var_type)
    def_type = property(lambda self: self._def_type)
    reduction = property(lambda self: self._reduction)
    support = property(lambda self: self._support)
    quad_type = property(lambda self: self._quad_type)
    value = property(lambda self: self._value)
    analytic = property(lambda self: self._analytic)
    array = property(lambda self: self._array)
    array_desc = property(lambda self: self._array_desc)

    @property
    def stride(self) -> int:
        return {"scalar": 1, "vector": 3, "tensor": 9}[self._var_type]

    @property
    def flag(self) -> frozenset:
        flags = {self._reduction, self._var_type}
        if self._support is not None:
            flags.add(self._support)
        if self._full_domain:
            flags.add("full_loc")
        return frozenset(flags)

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------
    def set_quadrature(self, quad_type: str):
        if quad_type not in QUADRATURE_TYPES:
            raise SourceTermConfigError(
                f"Invalid type of quadrature '{quad_type}' for the source term '{self._name}'.")
        self._quad_type = quad_type

    def set_reduction(self, reduction: str):
        """Switch between a dual-cell density and a primal-vertex potential."""
        if reduction == self._reduction:
            return
        if reduction == "dual" and self._support == "vertex":
            self._reduction, self._support = "dual", "cell"
        elif reduction == "primal" and self._reduction == "dual" and self._support == "cell":
            self._reduction, self._support = "primal", "vertex"
        else:
            raise SourceTermConfigError(
                f"Stop modifying the flag of the source term '{self._name}'. "
                f"Switching from {self._reduction}/{self._support} to '{reduction}' is not handled.")

    def _release(self):
        self._name = None
        if self._array_desc.is_owner:
            self._array = None

    def summary(self, eqname: Optional[str] = None):
        eqn = "Equation" if eqname is None else eqname
        logger.info("  <%s/%s> mesh_location: %s", eqn, self._name, self._location_name)
        logger.info("  <%s/%s> Definition: %s", eqn, self._name, _DEF_NAMES[self._def_type])
        if self._def_type == "analytic":
            logger.info("  <%s/%s> Quadrature: %s", eqn, self._name, _QUAD_NAMES[self._quad_type])

    def __repr__(self):
        return (f"SourceTerm({self._name!r}, {self._def_type}, {self._var_type}, "
                f"{self._reduction}, quad={self._quad_type})")


# ----------------------------------------------------------------------
# Module-level helpers working on possibly missing terms
# ----------------------------------------------------------------------
def get_flag(st: Optional[SourceTerm]) -> frozenset:
    if st is None:
        raise SourceTermConfigError(_ERR_EMPTY_ST)
    return st.flag


def get_name(st: Optional[SourceTerm]) -> Optional[str]:
    return None if st is None else st.name


def set_quadrature(st: Optional[SourceTerm], quad_type: str):
    if st is None:
        raise SourceTermConfigError(_ERR_EMPTY_ST)
    st.set_quadrature(quad_type)


def set_reduction(st: Optional[SourceTerm], reduction: str):
    if st is None:
        raise SourceTermConfigError(_ERR_EMPTY_ST)
    st.set_reduction(reduction)


def summary(eqname: Optional[str], st: Optional[SourceTerm]):
    if st is None:
        logger.info("  <%s/NULL>", "Equation" if eqname is None else eqname)
        return
    st.summary(eqname)


def destroy_source_terms(source_terms: Optional[Sequence[SourceTerm]]):
    """Release names and owned arrays of every term. Always returns None."""
    if source_terms is None:
        return None
    for st in source_terms:
        st._release()
    return None
