# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: CubeHash (Bernstein 2008), CubeHash16/32 as used by sphlib

from typing import Final
from numba import njit
import numpy as np
HAVE_NUMBA: Final[bool] = True

# ---- CubeHash round function for Numba ----

if HAVE_NUMBA:
    @njit(cache=True, nogil=True)
    def _rotl(x, n):
        return ((x << n) | (x >> (32 - n))) & 0xFFFFFFFF

    @njit(cache=True, nogil=True)
    def cubehash_rounds(x: np.ndarray, rounds: int) -> None:
        for _ in range(rounds):
            for i in range(16):
                x[i + 16] = (x[i + 16] + x[i]) & 0xFFFFFFFF
            for i in range(16):
                x[i] = _rotl(x[i], 7)
            for i in range(8):
                t = x[i]; x[i] = x[i + 8]; x[i + 8] = t
            for i in range(16):
                x[i] ^= x[i + 16]
            for i in range(16, 32):
                if (i & 2) == 0:
                    t = x[i]; x[i] = x[i + 2]; x[i + 2] = t
            for i in range(16):
                x[i + 16] = (x[i + 16] + x[i]) & 0xFFFFFFFF
            for i in range(16):
                x[i] = _rotl(x[i], 11)
            for i in range(16):
                if (i & 4) == 0:
                    t = x[i]; x[i] = x[i + 4]; x[i + 4] = t
            for i in range(16):
                x[i] ^= x[i + 16]
            for i in range(16, 32, 2):
                t = x[i]; x[i] = x[i + 1]; x[i + 1] = t

    @njit(cache=True, nogil=True)
    def cubehash_absorb(x: np.ndarray, data: np.ndarray, nblocks: int, rounds: int) -> None:
        for b in range(nblocks):
            base = b * 32
            for j in range(8):
                k = base + 4 * j
                x[j] ^= (np.int64(data[k])
                         | (np.int64(data[k + 1]) << 8)
                         | (np.int64(data[k + 2]) << 16)
                         | (np.int64(data[k + 3]) << 24))
            cubehash_rounds(x, rounds)
