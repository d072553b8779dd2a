# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: sphlib sph_types.h (init/update/close contract)

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple

# ---------------- Local Project ----------------
from ..utils import config as CFG
from ..utils.helpers import as_message
from ..utils.tsar_logging import get_ctx_logger

log = get_ctx_logger("tsarhash.core.primitive")


class ConfigurationError(ValueError):
    """Unsupported primitive configuration, raised before any data is processed."""


class PrimitiveUnavailable(ConfigurationError):
    """The primitive is known but no implementation can be loaded."""


def check_extra_bits(n_extra_bits: int) -> int:
    n = int(n_extra_bits)
    if not 0 <= n <= CFG.MAX_EXTRA_BITS:
        log.warning("Rejected n_extra_bits=%s", n_extra_bits)
        raise ConfigurationError(f"n_extra_bits must be in 0..{CFG.MAX_EXTRA_BITS}, got {n_extra_bits}")
    return n


def msb_pad_byte(ub: int, n: int) -> int:
    """Final byte for MSB-first algorithms: n high bits of ub, then the 1 bit."""
    z = 0x80 >> n
    return ((ub & -z) | z) & 0xFF


def lsb_pad_byte(ub: int, n: int) -> int:
    """Final byte for LSB-first algorithms: n high bits of ub moved low, then the 1 bit."""
    return ((1 << n) | ((ub & 0xFF) >> (8 - n))) & 0xFF


@dataclass(frozen=True)
class PrimitiveTemplate:
    """Immutable initial state of one algorithm+configuration pair.

    `initial_state` is a tuple of ints and `tables` holds whatever read-only
    constant tables the compression core needs. Contexts never keep a
    reference to anything mutable in here.
    """
    name: str
    block_size: int
    digest_size: int
    initial_state: Tuple[int, ...]
    factory: Callable[["PrimitiveTemplate"], "Primitive"] = field(repr=False, compare=False)
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}), compare=False)
    tables: Any = field(default=None, repr=False, compare=False)

    def new(self) -> "Primitive":
        return self.factory(self)

    def digest(self, data: bytes = b"", extra_bits: int = 0, n_extra_bits: int = 0) -> bytes:
        ctx = self.new()
        ctx.update(data)
        return ctx.close(extra_bits, n_extra_bits)


class Primitive:
    """Buffered init -> update* -> close state machine.

    Subclasses supply `_load_state` (template tuple -> working state),
    `_compress` (called with a whole number of blocks) and `_close`
    (padding, final compression, output). `close` re-arms the context.
    """

    __slots__ = ("template", "block_size", "digest_size", "_state", "_buf", "_count")

    def __init__(self, template: PrimitiveTemplate):
        self.template = template
        self.block_size = template.block_size
        self.digest_size = template.digest_size
        self.reset()

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def bit_count(self) -> int:
        return self._count << 3

    def reset(self) -> None:
        self._state = self._load_state(self.template.initial_state)
        self._buf = bytearray()
        self._count = 0

    def update(self, data) -> None:
        data = as_message(data)
        if not data:
            return
        self._count += len(data)
        bs = self.block_size
        buf = self._buf
        if buf:
            need = bs - len(buf)
            buf += data[:need]
            if len(buf) < bs:
                return
            self._compress(bytes(buf))
            buf.clear()
            data = data[need:]
        full = len(data) - (len(data) % bs)
        if full:
            self._compress(data[:full])
        if full < len(data):
            buf += data[full:]

    def close(self, extra_bits: int = 0, n_extra_bits: int = 0) -> bytes:
        n = check_extra_bits(n_extra_bits)
        out = self._close(bytes(self._buf), int(extra_bits) & 0xFF, n)
        self.reset()
        return out

    # ---- algorithm hooks ----
    def _load_state(self, initial: Tuple[int, ...]):
        return list(initial)

    def _compress(self, blocks: bytes) -> None:
        raise NotImplementedError

    def _close(self, tail: bytes, ub: int, n: int) -> bytes:
        raise NotImplementedError


def make_template(name: str, block_size: int, digest_size: int, initial_state,
                  factory, options: Optional[Mapping[str, Any]] = None, tables=None) -> PrimitiveTemplate:
    tpl = PrimitiveTemplate(
        name=name,
        block_size=int(block_size),
        digest_size=int(digest_size),
        initial_state=tuple(int(v) for v in initial_state),
        factory=factory,
        options=MappingProxyType(dict(options or {})),
        tables=tables,
    )
    log.debug("Template built: %s block=%d digest=%d", name, tpl.block_size, tpl.digest_size)
    return tpl
