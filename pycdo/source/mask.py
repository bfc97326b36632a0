"""pycdo.source.mask
Per-cell activation mask of the source terms of an equation.
"""
import logging

import numba
import numpy as np

logger = logging.getLogger(__name__)

__all__ = ["MASK_DTYPE", "build_source_mask", "active_terms"]

MASK_DTYPE = np.uint8


@numba.njit(cache=True, parallel=True)
def _mark_cells(cell_mask, elt_ids, bit):
    for i in numba.prange(elt_ids.shape[0]):
        c = elt_ids[i]
        cell_mask[c] = cell_mask[c] | bit


def build_source_mask(source_terms, locations, n_cells: int):
    """
    Return None when every term spans the whole mesh, otherwise an array of
    n_cells words where bit i is set if term i is active in the cell.
    """
    if all(st.full_domain for st in source_terms):
        return None

    cell_mask = np.zeros(int(n_cells), dtype=MASK_DTYPE)
    for st_id, st in enumerate(source_terms):
        bit = MASK_DTYPE(1 << st_id)
        if st.full_domain:
            elt_ids = np.arange(n_cells, dtype=np.int64)
        else:
            elt_ids = locations.get_elt_list(st.ml_id)
            if elt_ids is None or len(elt_ids) == 0:
                raise RuntimeError(
                    f"Source term '{st.name}' is not defined on the whole mesh but its "
                    f"location {st.ml_id} has no cell list.")
            elt_ids = np.ascontiguousarray(elt_ids, dtype=np.int64)
        _mark_cells(cell_mask, elt_ids, bit)
        logger.debug("mask: term %d '%s' active on %d cells", st_id, st.name, elt_ids.shape[0])

    return cell_mask


def active_terms(cell_word) -> list:
    """Ids of the terms whose bit is set in a cell word."""
    word = int(cell_word)
    return [i for i in range(8 * MASK_DTYPE().itemsize) if word & (1 << i)]
