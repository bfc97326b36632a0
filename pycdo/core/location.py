"""pycdo.core.location
Named cell subsets of a mesh ("mesh locations").

A location without an explicit cell list spans the whole mesh. Location ids
are positions in the registry; id 0 is always the full set of cells.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from pycdo.utils.bitset import BitSet


@dataclass
class MeshLocation:
    name: str
    cells: Optional[BitSet] = None   # None → every cell

    def elt_list(self) -> Optional[np.ndarray]:
        return None if self.cells is None else self.cells.to_indices()

    def n_elts(self, n_cells: int) -> int:
        return n_cells if self.cells is None else self.cells.cardinality()


class MeshLocations:
    """Registry of cell locations for one mesh."""

    def __init__(self, n_cells: int):
        self.n_cells = int(n_cells)
        self._locations: List[MeshLocation] = [MeshLocation("cells")]

    def add(self, name: str, cells=None) -> int:
        """
        Register a location and return its id.

        ``cells`` may be None (whole mesh), a BitSet, a boolean mask of
        length n_cells, or a sequence of cell ids.
        """
        if cells is None:
            sel = None
        elif isinstance(cells, BitSet):
            sel = cells
        else:
            arr = np.asarray(cells)
            if arr.dtype == bool:
                if arr.shape != (self.n_cells,):
                    raise ValueError(f"Boolean selection for '{name}' must have length {self.n_cells}.")
                sel = BitSet(arr)
            else:
                sel = BitSet.from_indices(arr.astype(np.int64).reshape(-1), self.n_cells)
        if sel is not None and len(sel) != self.n_cells:
            raise ValueError(f"Selection for '{name}' does not match the number of cells.")
        self._locations.append(MeshLocation(name, sel))
        return len(self._locations) - 1

    def get(self, ml_id: int) -> MeshLocation:
        if not 0 <= ml_id < len(self._locations):
            raise KeyError(ml_id)
        return self._locations[ml_id]

    def get_name(self, ml_id: int) -> str:
        return self.get(ml_id).name

    def get_elt_list(self, ml_id: int) -> Optional[np.ndarray]:
        return self.get(ml_id).elt_list()

    def get_n_elts(self, ml_id: int) -> int:
        return self.get(ml_id).n_elts(self.n_cells)

    def is_full(self, ml_id: int) -> bool:
        """True when the location covers every cell."""
        loc = self.get(ml_id)
        return loc.cells is None or loc.cells.is_full()

    def __len__(self):
        return len(self._locations)
