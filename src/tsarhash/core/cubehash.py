# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: CubeHash (Bernstein 2008), parameters 16/32 as used by sphlib

from __future__ import annotations

from functools import lru_cache

import numpy as np

# ---------------- Local Project ----------------
from .nmb import cubehash_absorb, cubehash_rounds
from .primitive import Primitive, PrimitiveTemplate, make_template, msb_pad_byte
from ..utils.helpers import words_le32

BLOCK_SIZE = 32
ROUNDS = 16
FINAL_ROUNDS = 10 * ROUNDS


def initial_state(digest_bits: int):
    x = np.zeros(32, dtype=np.int64)
    x[0] = digest_bits // 8
    x[1] = BLOCK_SIZE
    x[2] = ROUNDS
    cubehash_rounds(x, FINAL_ROUNDS)
    return tuple(int(v) for v in x)


class CubeHashContext(Primitive):
    __slots__ = ()

    def _load_state(self, initial):
        return np.array(initial, dtype=np.int64)

    def _compress(self, blocks: bytes) -> None:
        data = np.frombuffer(blocks, dtype=np.uint8)
        cubehash_absorb(self._state, data, len(blocks) // BLOCK_SIZE, ROUNDS)

    def _close(self, tail: bytes, ub: int, n: int) -> bytes:
        buf = bytearray(tail)
        buf.append(msb_pad_byte(ub, n))
        buf += bytes(BLOCK_SIZE - len(buf))
        self._compress(bytes(buf))
        self._state[31] ^= 1
        cubehash_rounds(self._state, FINAL_ROUNDS)
        return words_le32(self._state[:16])[:self.digest_size]


@lru_cache(maxsize=None)
def cubehash_template(digest_bits: int = 512) -> PrimitiveTemplate:
    return make_template(f"cubehash{digest_bits}", BLOCK_SIZE, digest_bits // 8,
                         initial_state(digest_bits), CubeHashContext,
                         options={"digest_bits": digest_bits})
