# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: The WHIRLPOOL Hashing Function (Barreto, Rijmen), 2003 revision and Whirlpool-T

from __future__ import annotations

import struct
from functools import lru_cache

# ---------------- Local Project ----------------
from .primitive import Primitive, PrimitiveTemplate, make_template, msb_pad_byte
from .tables import whirlpool_round_constants, whirlpool_tables
from ..utils.helpers import words_be64

BLOCK_SIZE = 64
ROUNDS = 10

# first row of the circulant diffusion matrix
MATRIX = {
    "whirlpool": (1, 1, 4, 1, 8, 5, 2, 9),
    "whirlpool1": (1, 1, 3, 1, 5, 8, 9, 5),
}


def _round(k, c) -> list:
    c0, c1, c2, c3, c4, c5, c6, c7 = c
    return [
        c0[k[i] >> 56]
        ^ c1[(k[(i - 1) & 7] >> 48) & 0xFF]
        ^ c2[(k[(i - 2) & 7] >> 40) & 0xFF]
        ^ c3[(k[(i - 3) & 7] >> 32) & 0xFF]
        ^ c4[(k[(i - 4) & 7] >> 24) & 0xFF]
        ^ c5[(k[(i - 5) & 7] >> 16) & 0xFF]
        ^ c6[(k[(i - 6) & 7] >> 8) & 0xFF]
        ^ c7[k[(i - 7) & 7] & 0xFF]
        for i in range(8)
    ]


class WhirlpoolContext(Primitive):
    __slots__ = ()

    def _compress(self, blocks: bytes) -> None:
        c = self.template.tables
        rc = whirlpool_round_constants(ROUNDS)
        h = self._state
        for off in range(0, len(blocks), BLOCK_SIZE):
            m = struct.unpack_from(">8Q", blocks, off)
            k = list(h)
            s = [m[i] ^ k[i] for i in range(8)]
            for r in range(ROUNDS):
                k = _round(k, c)
                k[0] ^= rc[r]
                s = _round(s, c)
                for i in range(8):
                    s[i] ^= k[i]
            for i in range(8):
                h[i] ^= s[i] ^ m[i]

    def _close(self, tail: bytes, ub: int, n: int) -> bytes:
        buf = bytearray(tail)
        buf.append(msb_pad_byte(ub, n))
        if len(buf) > 32:
            buf += bytes(BLOCK_SIZE - len(buf))
            self._compress(bytes(buf))
            buf = bytearray()
        buf += bytes(32 - len(buf))
        buf += ((self._count << 3) + n).to_bytes(32, "big")
        self._compress(bytes(buf))
        return words_be64(self._state)


@lru_cache(maxsize=None)
def whirlpool_template(name: str = "whirlpool") -> PrimitiveTemplate:
    return make_template(name, BLOCK_SIZE, 64, (0,) * 8, WhirlpoolContext,
                         options={"matrix": MATRIX[name]}, tables=whirlpool_tables(MATRIX[name]))
