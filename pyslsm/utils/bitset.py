"""pyslsm.utils.bitset"""
from __future__ import annotations

import numpy as np


class BitSet:
    """Boolean mask over mesh entities (nodes or elements)."""

    def __init__(self, mask):
        self.mask = np.asarray(mask, dtype=bool)

    def cardinality(self): return int(self.mask.sum())
    def to_indices(self): return np.flatnonzero(self.mask)
    def __len__(self): return len(self.mask)
    def __repr__(self): return f'<BitSet {self.cardinality()}/{len(self)}>'

    def __contains__(self, idx):     # idx in BitSet
        return bool(self.mask[idx])
