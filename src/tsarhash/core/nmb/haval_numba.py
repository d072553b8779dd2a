# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: HAVAL (Zheng, Pieprzyk, Seberry 1992); sphlib haval.c

from typing import Final
from numba import njit
import numpy as np
HAVE_NUMBA: Final[bool] = True

# ---- HAVAL compression for Numba ----
# State and tables are int64 arrays; every stored word is kept in 0..2^32-1.

if HAVE_NUMBA:
    @njit(cache=True, nogil=True)
    def _rotr(x, n):
        return ((x >> n) | (x << (32 - n))) & 0xFFFFFFFF

    @njit(cache=True, nogil=True)
    def _f(fn, x6, x5, x4, x3, x2, x1, x0):
        if fn == 0:
            return (x1 & (x0 ^ x4)) ^ (x2 & x5) ^ (x3 & x6) ^ x0
        if fn == 1:
            return ((x2 & ((x1 & ~x3) ^ (x4 & x5) ^ x6 ^ x0))
                    ^ (x4 & (x1 ^ x5)) ^ ((x3 & x5) ^ x0))
        if fn == 2:
            return (x3 & ((x1 & x2) ^ x6 ^ x0)) ^ (x1 & x4) ^ (x2 & x5) ^ x0
        if fn == 3:
            return ((x3 & ((x1 & x2) ^ (x4 | x6) ^ x5))
                    ^ (x4 & ((~x2 & x5) ^ x1 ^ x6 ^ x0))
                    ^ (x2 & x6) ^ x0)
        return (x0 & ~((x1 & x2 & x3) ^ x5)) ^ (x1 & x4) ^ (x2 & x5) ^ (x3 & x6)

    @njit(cache=True, nogil=True)
    def haval_compress(state: np.ndarray, data: np.ndarray, nblocks: int, passes: int,
                       phi: np.ndarray, order: np.ndarray, consts: np.ndarray) -> None:
        """Run `nblocks` 128-byte blocks of `data` through the state in place.

        phi[p] lists, for the pass function's formal inputs x6..x0, which
        logical state word feeds each one. order[p] and consts[p] give the
        word index and round constant of each of the 32 steps of pass p.
        """
        w = np.zeros(32, dtype=np.int64)
        s = np.zeros(8, dtype=np.int64)
        for b in range(nblocks):
            base = b * 128
            for j in range(32):
                k = base + 4 * j
                w[j] = (np.int64(data[k])
                        | (np.int64(data[k + 1]) << 8)
                        | (np.int64(data[k + 2]) << 16)
                        | (np.int64(data[k + 3]) << 24))
            for j in range(8):
                s[j] = state[j]
            for p in range(passes):
                for i in range(32):
                    r = i & 7
                    t = _f(p,
                           s[(phi[p, 0] - r) & 7], s[(phi[p, 1] - r) & 7],
                           s[(phi[p, 2] - r) & 7], s[(phi[p, 3] - r) & 7],
                           s[(phi[p, 4] - r) & 7], s[(phi[p, 5] - r) & 7],
                           s[(phi[p, 6] - r) & 7]) & 0xFFFFFFFF
                    d = (7 - r) & 7
                    s[d] = (_rotr(t, 7) + _rotr(s[d], 11) + w[order[p, i]] + consts[p, i]) & 0xFFFFFFFF
            for j in range(8):
                state[j] = (state[j] + s[j]) & 0xFFFFFFFF
