"""pycdo.utils.bitset"""
from __future__ import annotations

import numpy as np


class BitSet:
    """Boolean selection over the cells of a mesh."""

    def __init__(self, mask):
        self.mask = np.asarray(mask, dtype=bool)

    @classmethod
    def from_indices(cls, indices, size: int) -> "BitSet":
        mask = np.zeros(int(size), dtype=bool)
        idx = np.asarray(indices, dtype=np.int64)
        if idx.size and (idx.min() < 0 or idx.max() >= size):
            raise IndexError(f"cell ids out of range [0, {size})")
        mask[idx] = True
        return cls(mask)

    def union(self, other): return BitSet(self.mask | other.mask)
    def intersect(self, other): return BitSet(self.mask & other.mask)
    def diff(self, other): return BitSet(self.mask & ~other.mask)
    __or__ = union
    __and__ = intersect
    __sub__ = diff
    def cardinality(self): return int(self.mask.sum())
    def to_indices(self): return np.flatnonzero(self.mask)
    def is_full(self): return bool(self.mask.all())
    def __len__(self): return len(self.mask)
    def __repr__(self): return f'<BitSet {self.cardinality()}/{len(self)}>'

    def __getitem__(self, idx):      # BitSet[i] → bool
        return self.mask[idx]

    def __contains__(self, idx):     # idx in BitSet
        return bool(self.mask[idx])
