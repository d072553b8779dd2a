# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md

'''
=============================================================================
 -------- !!! CONSENSUS-CRITICAL - stage order defines the PoW value --------
=============================================================================
'''

from __future__ import annotations

from typing import Dict

# ---------------- Local Project ----------------
from .chain import ChainDefinition, StageDescriptor
from ..core.primitive import ConfigurationError
from ..utils import config as CFG

# The 24-stage chain runs every stage in a 64-byte slot: ripemd160, tiger,
# tiger2, panama and cubehash384 are zero-filled up to 64 bytes before the
# next stage reads them.
HASH24 = ChainDefinition("hash24", tuple(
    StageDescriptor.of(p, width=CFG.STAGE_DIGEST_BYTES) for p in (
        "whirlpool1", "bmw512", "groestl512", "echo512", "hamsi512", "fugue512",
        "shabal512", "jh512", "keccak512", "skein512", "luffa512", "tiger",
        "cubehash512", "panama", "sha512", "shavite512", "simd512", "blake512",
        "ripemd160", "haval256_5", "cubehash384", "whirlpool1", "tiger2", "whirlpool",
    )
))

LITE4 = ChainDefinition.parse("blake512,haval256_5,keccak512,whirlpool", name="lite4")

NATIVE10 = ChainDefinition.parse(
    "blake512,sha512,keccak512,whirlpool1,ripemd160,haval256_5,cubehash384,cubehash512,haval224_4,whirlpool",
    name="native10",
)

CHAINS: Dict[str, ChainDefinition] = {c.name: c for c in (HASH24, LITE4, NATIVE10)}


def get_chain(name: str) -> ChainDefinition:
    key = str(name).strip().lower()
    try:
        return CHAINS[key]
    except KeyError:
        raise ConfigurationError(f"unknown chain {name!r}; known: {', '.join(sorted(CHAINS))}") from None


def default_chain() -> ChainDefinition:
    return get_chain(CFG.POW_CHAIN)
