"""pycdo.source.cellwise"""
import numpy as np

__all__ = ["compute_cellwise", "compute_setup_cellwise"]


def compute_cellwise(source_terms, cm, sys_flag, source_mask, compute_source, ws, values):
    """
    Local contributions of all the source terms active in the cell ``cm``.

    ``values`` is the local source vector of the cell (one entry per local
    dof). It is reset first, then every active term adds its contribution.
    With ``source_mask`` None every term is active everywhere; otherwise only
    the terms whose bit is set in ``source_mask[cm.c_id]`` are computed.
    """
    values[:] = 0.0

    if "sourceterm" not in sys_flag:
        return values

    if source_mask is None:
        for st_id, st in enumerate(source_terms):
            compute_source[st_id](st, cm, ws, values)
    else:
        cell_word = int(source_mask[cm.c_id])
        for st_id, st in enumerate(source_terms):
            if cell_word & (1 << st_id):
                compute_source[st_id](st, cm, ws, values)

    return values


def compute_setup_cellwise(setup, cm, ws, values: np.ndarray):
    """Same as compute_cellwise, with the arguments taken from a SourceTermSetup."""
    return compute_cellwise(setup.source_terms, cm, setup.sys_flag, setup.mask,
                            setup.compute_source, ws, values)
