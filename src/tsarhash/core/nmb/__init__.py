# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md

from .haval_numba import HAVE_NUMBA, haval_compress
from .ripemd_numba import ripemd160_compress
from .cubehash_numba import cubehash_absorb, cubehash_rounds
__all__ = ["HAVE_NUMBA", "haval_compress", "ripemd160_compress", "cubehash_absorb", "cubehash_rounds"]
