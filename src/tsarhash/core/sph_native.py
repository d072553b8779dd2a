# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: sphlib 3.0 (Projet RNRT SAPHIR)

"""
Optional sphlib backend for the chain stages that have no native code here.

A sphlib shared library exposes, per algorithm, ``sph_<id>_init``,
``sph_<id>``, ``sph_<id>_close`` and (for most algorithms)
``sph_<id>_addbits_and_close``. sph contexts are flat structs, so a template
is simply a context initialised once and kept as bytes; every new context is
a copy of it.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import os
import threading
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

# ---------------- Local Project ----------------
from .primitive import ConfigurationError, Primitive, PrimitiveTemplate, PrimitiveUnavailable, check_extra_bits, make_template
from ..utils import config as CFG
from ..utils.helpers import as_message
from ..utils.tsar_logging import get_ctx_logger

log = get_ctx_logger("tsarhash.core.sph_native")

# id -> (digest bytes, nominal block bytes)
SPH_PRIMITIVES = {
    "bmw512": (64, 128),
    "groestl512": (64, 128),
    "echo512": (64, 128),
    "hamsi512": (64, 8),
    "fugue512": (64, 4),
    "shabal512": (64, 64),
    "jh512": (64, 64),
    "skein512": (64, 64),
    "luffa512": (64, 32),
    "shavite512": (64, 128),
    "simd512": (64, 128),
    "tiger": (24, 64),
    "tiger2": (24, 64),
    "panama": (32, 32),
}

_LIB_LOCK = threading.Lock()
_LIB: Optional[ctypes.CDLL] = None
_LIB_PATH: Optional[str] = None


def configure_sph_library(path: Optional[str | os.PathLike] = None) -> None:
    """Use the sphlib build at `path` (None restores automatic discovery)."""
    global _LIB, _LIB_PATH
    with _LIB_LOCK:
        _LIB = None
        _LIB_PATH = str(path) if path else None
    sph_template.cache_clear()
    log.info("sph library path set to %s", _LIB_PATH or "<auto>")


def _candidates():
    if _LIB_PATH:
        yield _LIB_PATH
        return
    for d in CFG.SPH_LIBRARY_DIRS:
        for name in CFG.SPH_LIBRARY_NAMES:
            p = Path(d) / name
            if p.exists():
                yield str(p)
    found = ctypes.util.find_library("sph")
    if found:
        yield found
    yield from CFG.SPH_LIBRARY_NAMES


def load_sph_library() -> ctypes.CDLL:
    global _LIB
    with _LIB_LOCK:
        if _LIB is not None:
            return _LIB
        errors = []
        for cand in _candidates():
            try:
                _LIB = ctypes.CDLL(cand)
            except OSError as exc:
                errors.append(f"{cand}: {exc}")
                continue
            log.debug("Loaded sph library %s", cand)
            return _LIB
    log.warning("No sph library found (%d candidates tried)", len(errors))
    raise PrimitiveUnavailable(
        "sphlib shared library not found; configure it with configure_sph_library(path)"
        + (f" ({errors[0]})" if errors else "")
    )


@dataclass(frozen=True, eq=False)
class SphFunctions:
    init: object
    update: object
    close: object
    addbits: Optional[object]


def _bind(lib: ctypes.CDLL, name: str) -> SphFunctions:
    def sym(symbol: str, argtypes, required: bool = True):
        try:
            fn = getattr(lib, symbol)
        except AttributeError:
            if required:
                log.warning("sph library lacks %s", symbol)
                raise PrimitiveUnavailable(f"sph library has no symbol {symbol}") from None
            return None
        fn.argtypes = argtypes
        fn.restype = None
        return fn

    vp = ctypes.c_void_p
    return SphFunctions(
        init=sym(f"sph_{name}_init", [vp]),
        update=sym(f"sph_{name}", [vp, vp, ctypes.c_size_t]),
        close=sym(f"sph_{name}_close", [vp, vp]),
        addbits=sym(f"sph_{name}_addbits_and_close", [vp, ctypes.c_uint, ctypes.c_uint, vp], required=False),
    )


class SphContext(Primitive):
    """Context whose buffering and padding live inside the native library."""

    __slots__ = ()

    def _load_state(self, initial):
        raw = bytes(initial)
        buf = ctypes.create_string_buffer(max(len(raw), CFG.SPH_CONTEXT_BYTES))
        ctypes.memmove(buf, raw, len(raw))
        return buf

    def update(self, data) -> None:
        data = as_message(data)
        if not data:
            return
        self._count += len(data)
        self.template.tables.update(ctypes.byref(self._state), data, len(data))

    def close(self, extra_bits: int = 0, n_extra_bits: int = 0) -> bytes:
        n = check_extra_bits(n_extra_bits)
        fns = self.template.tables
        out = (ctypes.c_ubyte * self.digest_size)()
        if n:
            if fns.addbits is None:
                raise ConfigurationError(f"{self.name} does not accept extra bits")
            fns.addbits(ctypes.byref(self._state), int(extra_bits) & 0xFF, n, ctypes.byref(out))
        else:
            fns.close(ctypes.byref(self._state), ctypes.byref(out))
        self.reset()
        return bytes(out)


@lru_cache(maxsize=None)
def sph_template(name: str) -> PrimitiveTemplate:
    if name not in SPH_PRIMITIVES:
        raise ConfigurationError(f"unknown sph primitive {name!r}")
    digest_size, block_size = SPH_PRIMITIVES[name]
    fns = _bind(load_sph_library(), name)
    ctx = ctypes.create_string_buffer(CFG.SPH_CONTEXT_BYTES)
    fns.init(ctypes.byref(ctx))
    return make_template(name, block_size, digest_size, ctx.raw, SphContext,
                         options={"backend": "sph"}, tables=fns)
