# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: The Keccak reference 3.0; FIPS 202

"""
Keccak-f[1600] sponge with a 512-bit output (rate 72 bytes).

`keccak512` is the round-3 submission padding (suffix 0x01) that sphlib and
the mining chains use; `sha3_512` is the FIPS 202 variant (suffix 0x06).
"""

from __future__ import annotations

from functools import lru_cache

# ---------------- Local Project ----------------
from .primitive import Primitive, PrimitiveTemplate, make_template
from .tables import keccak_rotation_offsets, keccak_round_constants
from ..utils.helpers import MASK64, rotl64

RATE = 72
DIGEST_SIZE = 64
SUFFIX = {"keccak512": 0x01, "sha3_512": 0x06}


def keccak_f1600(a: list) -> None:
    rc = keccak_round_constants()
    rot = keccak_rotation_offsets()
    b = [0] * 25
    for rnd in range(24):
        c = [a[x] ^ a[x + 5] ^ a[x + 10] ^ a[x + 15] ^ a[x + 20] for x in range(5)]
        d = [c[(x - 1) % 5] ^ rotl64(c[(x + 1) % 5], 1) for x in range(5)]
        for i in range(25):
            a[i] ^= d[i % 5]
        for x in range(5):
            for y in range(5):
                i = x + 5 * y
                b[y + 5 * ((2 * x + 3 * y) % 5)] = rotl64(a[i], rot[i])
        for y in range(0, 25, 5):
            row = b[y:y + 5]
            for x in range(5):
                a[y + x] = row[x] ^ (~row[(x + 1) % 5] & row[(x + 2) % 5])
        a[0] ^= rc[rnd]


class KeccakContext(Primitive):
    __slots__ = ()

    def _compress(self, blocks: bytes) -> None:
        a = self._state
        for off in range(0, len(blocks), RATE):
            for i in range(RATE // 8):
                a[i] ^= int.from_bytes(blocks[off + 8 * i:off + 8 * i + 8], "little")
            keccak_f1600(a)

    def _close(self, tail: bytes, ub: int, n: int) -> bytes:
        # Bits are numbered LSB-first: message, extra bits, suffix, then the last bit of a block.
        suffix = self.template.tables
        bits = int.from_bytes(tail, "little")
        pos = 8 * len(tail)
        if n:
            bits |= ((ub >> (8 - n)) & ((1 << n) - 1)) << pos
            pos += n
        bits |= suffix << pos
        pos += suffix.bit_length()
        size = ((pos + 1 + 8 * RATE - 1) // (8 * RATE)) * RATE
        bits |= 1 << (8 * size - 1)
        self._compress(bits.to_bytes(size, "little"))
        out = b"".join((lane & MASK64).to_bytes(8, "little") for lane in self._state[:DIGEST_SIZE // 8])
        return out


@lru_cache(maxsize=None)
def keccak_template(name: str = "keccak512") -> PrimitiveTemplate:
    return make_template(name, RATE, DIGEST_SIZE, (0,) * 25, KeccakContext,
                         options={"suffix": SUFFIX[name]}, tables=SUFFIX[name])
