# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: RIPEMD-160 (Dobbertin, Bosselaers, Preneel 1996)

from typing import Final
from numba import njit
import numpy as np
HAVE_NUMBA: Final[bool] = True

# ---- RIPEMD-160 compression for Numba ----

R_LEFT = np.array([
    0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15,
    7, 4, 13, 1, 10, 6, 15, 3, 12, 0, 9, 5, 2, 14, 11, 8,
    3, 10, 14, 4, 9, 15, 8, 1, 2, 7, 0, 6, 13, 11, 5, 12,
    1, 9, 11, 10, 0, 8, 12, 4, 13, 3, 7, 15, 14, 5, 6, 2,
    4, 0, 5, 9, 7, 12, 2, 10, 14, 1, 3, 8, 11, 6, 15, 13,
], dtype=np.int64)

R_RIGHT = np.array([
    5, 14, 7, 0, 9, 2, 11, 4, 13, 6, 15, 8, 1, 10, 3, 12,
    6, 11, 3, 7, 0, 13, 5, 10, 14, 15, 8, 12, 4, 9, 1, 2,
    15, 5, 1, 3, 7, 14, 6, 9, 11, 8, 12, 2, 10, 0, 4, 13,
    8, 6, 4, 1, 3, 11, 15, 0, 5, 12, 2, 13, 9, 7, 10, 14,
    12, 15, 10, 4, 1, 5, 8, 7, 6, 2, 13, 14, 0, 3, 9, 11,
], dtype=np.int64)

S_LEFT = np.array([
    11, 14, 15, 12, 5, 8, 7, 9, 11, 13, 14, 15, 6, 7, 9, 8,
    7, 6, 8, 13, 11, 9, 7, 15, 7, 12, 15, 9, 11, 7, 13, 12,
    11, 13, 6, 7, 14, 9, 13, 15, 14, 8, 13, 6, 5, 12, 7, 5,
    11, 12, 14, 15, 14, 15, 9, 8, 9, 14, 5, 6, 8, 6, 5, 12,
    9, 15, 5, 11, 6, 8, 13, 12, 5, 12, 13, 14, 11, 8, 5, 6,
], dtype=np.int64)

S_RIGHT = np.array([
    8, 9, 9, 11, 13, 15, 15, 5, 7, 7, 8, 11, 14, 14, 12, 6,
    9, 13, 15, 7, 12, 8, 9, 11, 7, 7, 12, 7, 6, 15, 13, 11,
    9, 7, 15, 11, 8, 6, 6, 14, 12, 13, 5, 14, 13, 13, 7, 5,
    15, 5, 8, 11, 14, 14, 6, 14, 6, 9, 12, 9, 12, 5, 15, 8,
    8, 5, 12, 9, 12, 5, 14, 6, 8, 13, 6, 5, 15, 13, 11, 11,
], dtype=np.int64)

K_LEFT = np.array([0x00000000, 0x5A827999, 0x6ED9EBA1, 0x8F1BBCDC, 0xA953FD4E], dtype=np.int64)
K_RIGHT = np.array([0x50A28BE6, 0x5C4DD124, 0x6D703EF3, 0x7A6D76E9, 0x00000000], dtype=np.int64)

if HAVE_NUMBA:
    @njit(cache=True, nogil=True)
    def _rotl(x, n):
        return ((x << n) | (x >> (32 - n))) & 0xFFFFFFFF

    @njit(cache=True, nogil=True)
    def _f(j, x, y, z):
        if j == 0:
            return x ^ y ^ z
        if j == 1:
            return (x & y) | (~x & z & 0xFFFFFFFF)
        if j == 2:
            return ((x | (~y & 0xFFFFFFFF)) ^ z) & 0xFFFFFFFF
        if j == 3:
            return (x & z) | (y & ~z & 0xFFFFFFFF)
        return (x ^ (y | (~z & 0xFFFFFFFF))) & 0xFFFFFFFF

    @njit(cache=True, nogil=True)
    def ripemd160_compress(state: np.ndarray, data: np.ndarray, nblocks: int,
                           rl: np.ndarray, rr: np.ndarray, sl: np.ndarray, sr: np.ndarray,
                           kl: np.ndarray, kr: np.ndarray) -> None:
        x = np.zeros(16, dtype=np.int64)
        for b in range(nblocks):
            base = b * 64
            for j in range(16):
                k = base + 4 * j
                x[j] = (np.int64(data[k])
                        | (np.int64(data[k + 1]) << 8)
                        | (np.int64(data[k + 2]) << 16)
                        | (np.int64(data[k + 3]) << 24))
            al, bl, cl, dl, el = state[0], state[1], state[2], state[3], state[4]
            ar, br, cr, dr, er = state[0], state[1], state[2], state[3], state[4]
            for j in range(80):
                rnd = j >> 4
                t = (al + _f(rnd, bl, cl, dl) + x[rl[j]] + kl[rnd]) & 0xFFFFFFFF
                t = (_rotl(t, sl[j]) + el) & 0xFFFFFFFF
                al, el, dl, cl, bl = el, dl, _rotl(cl, 10), bl, t
                t = (ar + _f(4 - rnd, br, cr, dr) + x[rr[j]] + kr[rnd]) & 0xFFFFFFFF
                t = (_rotl(t, sr[j]) + er) & 0xFFFFFFFF
                ar, er, dr, cr, br = er, dr, _rotl(cr, 10), br, t
            t = (state[1] + cl + dr) & 0xFFFFFFFF
            state[1] = (state[2] + dl + er) & 0xFFFFFFFF
            state[2] = (state[3] + el + ar) & 0xFFFFFFFF
            state[3] = (state[4] + al + br) & 0xFFFFFFFF
            state[4] = (state[0] + bl + cr) & 0xFFFFFFFF
            state[0] = t
