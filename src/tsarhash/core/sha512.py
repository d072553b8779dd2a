# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: FIPS 180-4

from __future__ import annotations

import struct
from functools import lru_cache

# ---------------- Local Project ----------------
from .primitive import Primitive, PrimitiveTemplate, make_template, msb_pad_byte
from .tables import prime_root_fractions64
from ..utils.helpers import MASK64, rotr64, words_be64

BLOCK_SIZE = 128


def _constants():
    return prime_root_fractions64(80, 3)


class Sha512Context(Primitive):
    __slots__ = ()

    def _compress(self, blocks: bytes) -> None:
        K = self.template.tables
        h = self._state
        for off in range(0, len(blocks), BLOCK_SIZE):
            w = list(struct.unpack_from(">16Q", blocks, off))
            for t in range(16, 80):
                x, y = w[t - 15], w[t - 2]
                s0 = rotr64(x, 1) ^ rotr64(x, 8) ^ (x >> 7)
                s1 = rotr64(y, 19) ^ rotr64(y, 61) ^ (y >> 6)
                w.append((w[t - 16] + s0 + w[t - 7] + s1) & MASK64)
            a, b, c, d, e, f, g, hh = h
            for t in range(80):
                S1 = rotr64(e, 14) ^ rotr64(e, 18) ^ rotr64(e, 41)
                ch = (e & f) ^ (~e & g)
                t1 = (hh + S1 + ch + K[t] + w[t]) & MASK64
                S0 = rotr64(a, 28) ^ rotr64(a, 34) ^ rotr64(a, 39)
                maj = (a & b) ^ (a & c) ^ (b & c)
                t2 = (S0 + maj) & MASK64
                hh, g, f, e, d, c, b, a = g, f, e, (d + t1) & MASK64, c, b, a, (t1 + t2) & MASK64
            h[:] = [(x + y) & MASK64 for x, y in zip(h, (a, b, c, d, e, f, g, hh))]

    def _close(self, tail: bytes, ub: int, n: int) -> bytes:
        buf = bytearray(tail)
        buf.append(msb_pad_byte(ub, n))
        if len(buf) > 112:
            buf += bytes(BLOCK_SIZE - len(buf))
            self._compress(bytes(buf))
            buf = bytearray()
        buf += bytes(112 - len(buf))
        buf += ((self._count << 3) + n).to_bytes(16, "big")
        self._compress(bytes(buf))
        return words_be64(self._state)


@lru_cache(maxsize=None)
def sha512_template() -> PrimitiveTemplate:
    return make_template("sha512", BLOCK_SIZE, 64, prime_root_fractions64(8, 2), Sha512Context,
                         tables=_constants())
