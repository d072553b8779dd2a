# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: BLAKE SHA-3 round 3 submission (Aumasson et al.)

from __future__ import annotations

import struct
from functools import lru_cache

# ---------------- Local Project ----------------
from .primitive import Primitive, PrimitiveTemplate, make_template, msb_pad_byte
from .tables import pi_fraction_words64, prime_root_fractions64
from ..utils.helpers import MASK64, rotr64, words_be64

BLOCK_SIZE = 128
ROUNDS = 16

SIGMA = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15),
    (14, 10, 4, 8, 9, 15, 13, 6, 1, 12, 0, 2, 11, 7, 5, 3),
    (11, 8, 12, 0, 5, 2, 15, 13, 10, 14, 3, 6, 7, 1, 9, 4),
    (7, 9, 3, 1, 13, 12, 11, 14, 2, 6, 5, 10, 4, 0, 15, 8),
    (9, 0, 5, 7, 2, 4, 10, 15, 14, 1, 11, 12, 6, 8, 3, 13),
    (2, 12, 6, 10, 0, 11, 8, 3, 4, 13, 7, 5, 15, 14, 1, 9),
    (12, 5, 1, 15, 14, 13, 4, 10, 0, 7, 6, 3, 9, 2, 8, 11),
    (13, 11, 7, 14, 12, 1, 3, 9, 5, 0, 15, 4, 8, 6, 2, 10),
    (6, 15, 14, 9, 11, 3, 0, 8, 12, 2, 13, 7, 1, 4, 10, 5),
    (10, 2, 8, 4, 7, 6, 1, 5, 15, 11, 9, 14, 3, 12, 13, 0),
)

# (a, b, c, d) of the four column steps then the four diagonal steps
_G_LANES = (
    (0, 4, 8, 12), (1, 5, 9, 13), (2, 6, 10, 14), (3, 7, 11, 15),
    (0, 5, 10, 15), (1, 6, 11, 12), (2, 7, 8, 13), (3, 4, 9, 14),
)


def _compress_one(h: list, block: bytes, off: int, counter: int, cst) -> None:
    m = struct.unpack_from(">16Q", block, off)
    t0 = counter & MASK64
    t1 = (counter >> 64) & MASK64
    v = list(h) + list(cst[:8])
    v[12] ^= t0
    v[13] ^= t0
    v[14] ^= t1
    v[15] ^= t1
    for rnd in range(ROUNDS):
        s = SIGMA[rnd % 10]
        for i, (a, b, c, d) in enumerate(_G_LANES):
            x, y = s[2 * i], s[2 * i + 1]
            va = (v[a] + v[b] + (m[x] ^ cst[y])) & MASK64
            vd = rotr64(v[d] ^ va, 32)
            vc = (v[c] + vd) & MASK64
            vb = rotr64(v[b] ^ vc, 25)
            va = (va + vb + (m[y] ^ cst[x])) & MASK64
            vd = rotr64(vd ^ va, 16)
            vc = (vc + vd) & MASK64
            vb = rotr64(vb ^ vc, 11)
            v[a], v[b], v[c], v[d] = va, vb, vc, vd
    for i in range(8):
        h[i] ^= v[i] ^ v[i + 8]


class Blake512Context(Primitive):
    """BLAKE-512 with a null salt.

    The block counter is the number of message bits up to the end of the
    block, and zero for a final block that holds padding only.
    """

    __slots__ = ("_t",)

    def reset(self) -> None:
        super().reset()
        self._t = 0

    def _compress(self, blocks: bytes) -> None:
        cst = self.template.tables
        for off in range(0, len(blocks), BLOCK_SIZE):
            self._t += BLOCK_SIZE << 3
            _compress_one(self._state, blocks, off, self._t, cst)

    def _close(self, tail: bytes, ub: int, n: int) -> bytes:
        cst = self.template.tables
        ptr = len(tail)
        total = self._t + (ptr << 3) + n
        buf = bytearray(tail)
        buf.append(msb_pad_byte(ub, n))
        if ptr <= 111:
            buf += bytes(112 - len(buf))
            buf[111] |= 0x01
            buf += total.to_bytes(16, "big")
            _compress_one(self._state, bytes(buf), 0, total if (ptr or n) else 0, cst)
        else:
            buf += bytes(BLOCK_SIZE - len(buf))
            _compress_one(self._state, bytes(buf), 0, total, cst)
            last = bytearray(112)
            last[111] = 0x01
            last += total.to_bytes(16, "big")
            _compress_one(self._state, bytes(last), 0, 0, cst)
        return words_be64(self._state)


@lru_cache(maxsize=None)
def blake512_template() -> PrimitiveTemplate:
    return make_template("blake512", BLOCK_SIZE, 64, prime_root_fractions64(8, 2), Blake512Context,
                         tables=pi_fraction_words64(16))
