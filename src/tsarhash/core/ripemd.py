# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: RIPEMD-160 (Dobbertin, Bosselaers, Preneel 1996)

from __future__ import annotations

from functools import lru_cache

import numpy as np

# ---------------- Local Project ----------------
from .nmb import ripemd160_compress
from .nmb.ripemd_numba import K_LEFT, K_RIGHT, R_LEFT, R_RIGHT, S_LEFT, S_RIGHT
from .primitive import Primitive, PrimitiveTemplate, make_template, msb_pad_byte
from ..utils.helpers import words_le32

BLOCK_SIZE = 64
IV = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476, 0xC3D2E1F0)


class Ripemd160Context(Primitive):
    __slots__ = ()

    def _load_state(self, initial):
        return np.array(initial, dtype=np.int64)

    def _compress(self, blocks: bytes) -> None:
        data = np.frombuffer(blocks, dtype=np.uint8)
        ripemd160_compress(self._state, data, len(blocks) // BLOCK_SIZE,
                           R_LEFT, R_RIGHT, S_LEFT, S_RIGHT, K_LEFT, K_RIGHT)

    def _close(self, tail: bytes, ub: int, n: int) -> bytes:
        buf = bytearray(tail)
        buf.append(msb_pad_byte(ub, n))
        if len(buf) > 56:
            buf += bytes(BLOCK_SIZE - len(buf))
            self._compress(bytes(buf))
            buf = bytearray()
        buf += bytes(56 - len(buf))
        buf += (((self._count << 3) + n) & 0xFFFFFFFFFFFFFFFF).to_bytes(8, "little")
        self._compress(bytes(buf))
        return words_le32(self._state)


@lru_cache(maxsize=None)
def ripemd160_template() -> PrimitiveTemplate:
    return make_template("ripemd160", BLOCK_SIZE, 20, IV, Ripemd160Context)
