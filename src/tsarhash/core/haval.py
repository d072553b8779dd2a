# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: HAVAL (Zheng, Pieprzyk, Seberry, AUSCRYPT 1992); sphlib sph_haval.h

"""
HAVAL with 3, 4 or 5 passes and 128..256-bit tailored output.

A block runs through one generic routine driven by per-pass tables:
which state words feed the pass function (phi), in which order the 32
message words are consumed, and the 32 round constants. Pass 1 uses the
natural word order and no constants. The output width is applied last by
a table of fold rules, one per output word.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Tuple

import numpy as np

# ---------------- Local Project ----------------
from .nmb import haval_compress
from .primitive import ConfigurationError, Primitive, PrimitiveTemplate, lsb_pad_byte, make_template
from .tables import pi_fraction_words
from ..utils.helpers import MASK32, MASK64, rotl32, words_le32
from ..utils.tsar_logging import get_ctx_logger

log = get_ctx_logger("tsarhash.core.haval")

BLOCK_SIZE = 128
PASSES = (3, 4, 5)
OUTPUT_WORDS = (4, 5, 6, 7, 8)
VERSION = 1

# phi: for each pass, the logical state word fed to the pass function's
# formal inputs x6, x5, x4, x3, x2, x1, x0.
PHI: Dict[int, Tuple[Tuple[int, ...], ...]] = {
    3: (
        (1, 0, 3, 5, 6, 2, 4),
        (4, 2, 1, 0, 5, 3, 6),
        (6, 1, 2, 3, 4, 5, 0),
    ),
    4: (
        (2, 6, 1, 4, 5, 3, 0),
        (3, 5, 2, 0, 1, 6, 4),
        (1, 4, 3, 6, 0, 2, 5),
        (6, 4, 0, 5, 2, 1, 3),
    ),
    5: (
        (3, 4, 1, 0, 5, 2, 6),
        (6, 2, 1, 0, 3, 4, 5),
        (2, 6, 0, 4, 3, 1, 5),
        (1, 5, 3, 2, 0, 4, 6),
        (2, 5, 0, 6, 4, 3, 1),
    ),
}

WORD_ORDER: Tuple[Tuple[int, ...], ...] = (
    tuple(range(32)),
    (5, 14, 26, 18, 11, 28, 7, 16, 0, 23, 20, 22, 1, 10, 4, 8,
     30, 3, 21, 9, 17, 24, 29, 6, 19, 12, 15, 13, 2, 25, 31, 27),
    (19, 9, 4, 20, 28, 17, 8, 22, 29, 14, 25, 12, 24, 30, 16, 26,
     31, 15, 7, 3, 1, 0, 18, 27, 13, 6, 21, 10, 23, 11, 5, 2),
    (24, 4, 0, 14, 2, 7, 28, 23, 26, 6, 30, 20, 18, 25, 19, 3,
     22, 11, 31, 21, 8, 27, 12, 9, 1, 29, 5, 15, 17, 10, 16, 13),
    (27, 3, 21, 26, 17, 11, 20, 29, 19, 0, 12, 7, 13, 8, 31, 10,
     5, 9, 14, 30, 18, 6, 28, 24, 2, 23, 16, 22, 4, 1, 25, 15),
)


def initial_value() -> Tuple[int, ...]:
    return pi_fraction_words(8)


def round_constants() -> Tuple[Tuple[int, ...], ...]:
    """Per-pass constants: zeros for pass 1, then 128 successive pi words."""
    pi = pi_fraction_words(8 + 4 * 32)
    out = [(0,) * 32]
    for p in range(4):
        out.append(pi[8 + 32 * p:8 + 32 * (p + 1)])
    return tuple(out)


# ---------------- output tailoring ----------------

@dataclass(frozen=True)
class FoldRule:
    """One output word: OR the masked source words, rotate left, shift right, add to s[i]."""
    terms: Tuple[Tuple[int, int], ...]
    rotl: int = 0
    shr: int = 0

    def apply(self, s) -> int:
        v = 0
        for src, mask in self.terms:
            v |= s[src] & mask
        return rotl32(v, self.rotl) >> self.shr


FOLD_RULES: Dict[int, Tuple[FoldRule, ...]] = {
    4: (
        FoldRule(((7, 0x000000FF), (4, 0x0000FF00), (5, 0x00FF0000), (6, 0xFF000000)), rotl=24),
        FoldRule(((6, 0x000000FF), (7, 0x0000FF00), (4, 0x00FF0000), (5, 0xFF000000)), rotl=16),
        FoldRule(((5, 0x000000FF), (6, 0x0000FF00), (7, 0x00FF0000), (4, 0xFF000000)), rotl=8),
        FoldRule(((4, 0x000000FF), (5, 0x0000FF00), (6, 0x00FF0000), (7, 0xFF000000))),
    ),
    5: (
        FoldRule(((5, 0x01F80000), (6, 0xFE000000), (7, 0x0000003F)), rotl=13),
        FoldRule(((5, 0xFE000000), (6, 0x0000003F), (7, 0x00000FC0)), rotl=7),
        FoldRule(((5, 0x0000003F), (6, 0x00000FC0), (7, 0x0007F000))),
        FoldRule(((5, 0x00000FC0), (6, 0x0007F000), (7, 0x01F80000)), shr=6),
        FoldRule(((5, 0x0007F000), (6, 0x01F80000), (7, 0xFE000000)), shr=12),
    ),
    6: (
        FoldRule(((6, 0xFC000000), (7, 0x0000001F)), rotl=6),
        FoldRule(((6, 0x0000001F), (7, 0x000003E0))),
        FoldRule(((6, 0x000003E0), (7, 0x0000FC00)), shr=5),
        FoldRule(((6, 0x0000FC00), (7, 0x001F0000)), shr=10),
        FoldRule(((6, 0x001F0000), (7, 0x03E00000)), shr=16),
        FoldRule(((6, 0x03E00000), (7, 0xFC000000)), shr=21),
    ),
    7: (
        FoldRule(((7, 0x1F << 27),), shr=27),
        FoldRule(((7, 0x1F << 22),), shr=22),
        FoldRule(((7, 0x0F << 18),), shr=18),
        FoldRule(((7, 0x1F << 13),), shr=13),
        FoldRule(((7, 0x0F << 9),), shr=9),
        FoldRule(((7, 0x1F << 4),), shr=4),
        FoldRule(((7, 0x0F),)),
    ),
}


def tailor(state, output_words: int) -> bytes:
    s = [int(v) & MASK32 for v in state]
    if output_words == 8:
        return words_le32(s)
    rules = FOLD_RULES[output_words]
    return words_le32((s[i] + rule.apply(s)) & MASK32 for i, rule in enumerate(rules))


# ---------------- context ----------------

@dataclass(frozen=True, eq=False)
class HavalTables:
    passes: int
    output_words: int
    phi: np.ndarray
    order: np.ndarray
    consts: np.ndarray


class HavalContext(Primitive):
    __slots__ = ()

    def _load_state(self, initial):
        return np.array(initial, dtype=np.int64)

    def _compress(self, blocks: bytes) -> None:
        t = self.template.tables
        data = np.frombuffer(blocks, dtype=np.uint8)
        haval_compress(self._state, data, len(blocks) // BLOCK_SIZE, t.passes, t.phi, t.order, t.consts)

    def _close(self, tail: bytes, ub: int, n: int) -> bytes:
        t = self.template.tables
        buf = bytearray(tail)
        buf.append(lsb_pad_byte(ub, n))
        if len(buf) > 118:
            buf += bytes(BLOCK_SIZE - len(buf))
            self._compress(bytes(buf))
            buf = bytearray()
        buf += bytes(118 - len(buf))
        buf.append((VERSION | (t.passes << 3)) & 0xFF)
        buf.append((t.output_words << 3) & 0xFF)
        buf += (((self._count << 3) + n) & MASK64).to_bytes(8, "little")
        self._compress(bytes(buf))
        return tailor(self._state, t.output_words)


def validate(output_words: int, passes: int) -> Tuple[int, int]:
    if output_words not in OUTPUT_WORDS:
        log.warning("Rejected HAVAL output_words=%r", output_words)
        raise ConfigurationError(f"HAVAL output_words must be one of {OUTPUT_WORDS}, got {output_words!r}")
    if passes not in PASSES:
        log.warning("Rejected HAVAL passes=%r", passes)
        raise ConfigurationError(f"HAVAL passes must be one of {PASSES}, got {passes!r}")
    return int(output_words), int(passes)


@lru_cache(maxsize=None)
def haval_template(output_words: int = 8, passes: int = 5) -> PrimitiveTemplate:
    output_words, passes = validate(output_words, passes)
    consts = round_constants()
    tables = HavalTables(
        passes=passes,
        output_words=output_words,
        phi=_frozen(PHI[passes]),
        order=_frozen(WORD_ORDER[:passes]),
        consts=_frozen(consts[:passes]),
    )
    return make_template(
        f"haval{32 * output_words}_{passes}", BLOCK_SIZE, 4 * output_words,
        initial_value(), HavalContext,
        options={"output_words": output_words, "passes": passes}, tables=tables,
    )


def _frozen(rows) -> np.ndarray:
    arr = np.array(rows, dtype=np.int64)
    arr.setflags(write=False)
    return arr


def haval(output_words: int, passes: int, message: bytes, extra_bits: int = 0, n_extra_bits: int = 0) -> bytes:
    """HAVAL digest of `message` as `output_words * 4` bytes."""
    return haval_template(output_words, passes).digest(message, extra_bits, n_extra_bits)
