# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md

from __future__ import annotations

import re
from functools import lru_cache
from typing import Callable, Dict, Tuple

# ---------------- Local Project ----------------
from .blake import blake512_template
from .cubehash import cubehash_template
from .haval import haval_template
from .keccak import keccak_template
from .primitive import ConfigurationError, Primitive, PrimitiveTemplate
from .ripemd import ripemd160_template
from .sha512 import sha512_template
from .sph_native import SPH_PRIMITIVES, sph_template
from .whirlpool import whirlpool_template
from ..utils.tsar_logging import get_ctx_logger

log = get_ctx_logger("tsarhash.core.registry")

_HAVAL_ID = re.compile(r"^haval(128|160|192|224|256)_([345])$")

NATIVE: Dict[str, Callable[[], PrimitiveTemplate]] = {
    "sha512": sha512_template,
    "keccak512": lambda: keccak_template("keccak512"),
    "sha3_512": lambda: keccak_template("sha3_512"),
    "blake512": blake512_template,
    "whirlpool": lambda: whirlpool_template("whirlpool"),
    "whirlpool1": lambda: whirlpool_template("whirlpool1"),
    "ripemd160": ripemd160_template,
    "cubehash512": lambda: cubehash_template(512),
    "cubehash384": lambda: cubehash_template(384),
}

HAVAL_IDS = tuple(f"haval{bits}_{p}" for bits in (128, 160, 192, 224, 256) for p in (3, 4, 5))


def known_primitives() -> Tuple[str, ...]:
    return tuple(sorted(("haval",) + HAVAL_IDS + tuple(NATIVE) + tuple(SPH_PRIMITIVES)))


def is_native(primitive: str) -> bool:
    key = str(primitive).strip().lower()
    return key == "haval" or key in NATIVE or bool(_HAVAL_ID.match(key))


def _reject(msg: str):
    log.warning(msg)
    raise ConfigurationError(msg)


@lru_cache(maxsize=None)
def _lookup(key: str, options: Tuple[Tuple[str, object], ...]) -> PrimitiveTemplate:
    opts = dict(options)
    if key == "haval":
        unknown = set(opts) - {"output_words", "passes"}
        if unknown:
            _reject(f"unknown HAVAL options: {sorted(unknown)}")
        return haval_template(opts.get("output_words", 8), opts.get("passes", 5))
    if opts:
        _reject(f"primitive {key!r} takes no options, got {sorted(opts)}")
    m = _HAVAL_ID.match(key)
    if m:
        return haval_template(int(m.group(1)) // 32, int(m.group(2)))
    if key in NATIVE:
        return NATIVE[key]()
    _reject(f"unknown primitive {key!r}")


def get_template(primitive: str, **options) -> PrimitiveTemplate:
    """Process-wide immutable template for an algorithm+configuration pair."""
    key = str(primitive).strip().lower()
    if key in SPH_PRIMITIVES and not options:
        return sph_template(key)
    try:
        return _lookup(key, tuple(sorted(options.items())))
    except TypeError as exc:
        raise ConfigurationError(f"invalid options for {key!r}: {exc}") from exc


def new_context(primitive: str, **options) -> Primitive:
    return get_template(primitive, **options).new()
