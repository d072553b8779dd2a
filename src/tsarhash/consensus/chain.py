# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md

"""
Chain sequencing: stage descriptors, chain definitions and the sequencer
that feeds each stage's digest to the next one as its only input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Tuple, Union

# ---------------- Local Project ----------------
from ..core.primitive import ConfigurationError, PrimitiveTemplate
from ..core.registry import get_template
from ..utils import config as CFG
from ..utils.helpers import as_message
from ..utils.tsar_logging import TRACE, get_ctx_logger

log = get_ctx_logger("tsarhash.consensus.chain")


@dataclass(frozen=True)
class StageDescriptor:
    """One pipeline position.

    `width` is the size of the stage's digest slot. None means the primitive's
    native digest width; a larger slot is zero-filled after the digest, which
    is how narrow primitives sit in a chain of 64-byte slots.
    """
    primitive: str
    options: Tuple[Tuple[str, Any], ...] = ()
    width: Optional[int] = None
    final: bool = False

    @classmethod
    def of(cls, primitive: str, width: Optional[int] = None, final: bool = False, **options) -> "StageDescriptor":
        return cls(str(primitive).strip().lower(), tuple(sorted(options.items())), width, final)

    @classmethod
    def parse(cls, text: str) -> "StageDescriptor":
        ident = text.strip()
        width = None
        if ":" in ident:
            ident, _, w = ident.partition(":")
            try:
                width = int(w)
            except ValueError:
                raise ConfigurationError(f"bad slot width in stage {text!r}") from None
        if not ident.strip():
            raise ConfigurationError(f"empty stage in {text!r}")
        return cls.of(ident, width=width)

    def template(self) -> PrimitiveTemplate:
        return get_template(self.primitive, **dict(self.options))

    def __str__(self) -> str:
        label = self.primitive
        if self.options:
            label += "(" + ",".join(f"{k}={v}" for k, v in self.options) + ")"
        if self.width is not None:
            label += f":{self.width}"
        return label


@dataclass(frozen=True)
class StageRecord:
    index: int
    primitive: str
    input: bytes
    output: bytes


@dataclass(frozen=True)
class ChainTrace:
    records: Tuple[StageRecord, ...]
    digest: bytes


StageLike = Union[StageDescriptor, str]


@dataclass(frozen=True)
class ChainDefinition:
    """Immutable ordered list of stages; the last one is the truncation point."""
    name: str
    stages: Tuple[StageDescriptor, ...]
    _templates: Optional[Tuple[PrimitiveTemplate, ...]] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        stages = tuple(s if isinstance(s, StageDescriptor) else StageDescriptor.parse(s) for s in self.stages)
        if not stages:
            log.warning("Rejected chain %r: no stages", self.name)
            raise ConfigurationError(f"chain {self.name!r} has no stages")
        for i, st in enumerate(stages[:-1]):
            if st.final:
                log.warning("Rejected chain %r: stage %d is final but not last", self.name, i)
                raise ConfigurationError(f"chain {self.name!r}: stage {i} ({st}) is final but not last")
        for st in stages:
            if st.width is not None and st.width < 1:
                log.warning("Rejected chain %r: slot width %r", self.name, st.width)
                raise ConfigurationError(f"chain {self.name!r}: stage {st} has slot width {st.width}")
        last = stages[-1]
        if not last.final:
            last = StageDescriptor(last.primitive, last.options, last.width, True)
        object.__setattr__(self, "stages", stages[:-1] + (last,))

    @classmethod
    def build(cls, name: str, stages: Iterable[StageLike]) -> "ChainDefinition":
        return cls(name, tuple(stages))

    @classmethod
    def parse(cls, text: str, name: str = "custom") -> "ChainDefinition":
        """Definition from a comma-separated stage list, e.g. ``blake512,haval256_5,whirlpool``."""
        parts = (text or "").split(",")
        if any(not p.strip() for p in parts):
            raise ConfigurationError(f"malformed stage list {text!r}")
        return cls(name, tuple(StageDescriptor.parse(p) for p in parts))

    def __len__(self) -> int:
        return len(self.stages)

    def __iter__(self):
        return iter(self.stages)

    def describe(self) -> str:
        return ",".join(str(s) for s in self.stages)

    def resolve(self) -> Tuple[PrimitiveTemplate, ...]:
        """Templates for every stage; all configuration errors surface here."""
        if self._templates is not None:
            return self._templates
        templates = tuple(st.template() for st in self.stages)
        for st, tpl in zip(self.stages, templates):
            if st.width is not None and st.width < tpl.digest_size:
                raise ConfigurationError(
                    f"chain {self.name!r}: slot width {st.width} of {st} is narrower than its {tpl.digest_size}-byte digest")
        final = templates[-1].digest_size if self.stages[-1].width is None else self.stages[-1].width
        if final < CFG.DIGEST_BYTES:
            log.warning("Rejected chain %r: final stage yields %d bytes", self.name, final)
            raise ConfigurationError(
                f"chain {self.name!r}: final stage {self.stages[-1]} yields {final} bytes, need {CFG.DIGEST_BYTES}")
        object.__setattr__(self, "_templates", templates)
        log.debug("Resolved chain %s: %d stages", self.name, len(templates))
        return templates


class ChainSequencer:
    """Runs a resolved chain definition: init -> update -> close per stage."""

    __slots__ = ("definition", "templates")

    def __init__(self, definition: ChainDefinition):
        self.definition = definition
        self.templates = definition.resolve()

    def digest(self, message, trace: Optional[List[StageRecord]] = None) -> bytes:
        data = as_message(message)
        slots: List[bytes] = []
        tracing = log.isEnabledFor(TRACE)
        for i, (stage, tpl) in enumerate(zip(self.definition.stages, self.templates)):
            ctx = tpl.new()
            ctx.update(data)
            out = ctx.close()
            if stage.width is not None and len(out) < stage.width:
                out += bytes(stage.width - len(out))
            slots.append(out)
            if trace is not None:
                trace.append(StageRecord(i, str(stage), data, out))
            if tracing:
                log.trace("stage %d %s -> %s", i, stage, out.hex(),
                          extra={"chain": self.definition.name, "stage": i})
            data = out
        return slots[-1][:CFG.DIGEST_BYTES]

    __call__ = digest


def chain_digest(definition: ChainDefinition, message, trace: Optional[List[StageRecord]] = None) -> bytes:
    """32-byte digest of `message` through every stage of `definition`."""
    return ChainSequencer(definition).digest(message, trace)


def chain_trace(definition: ChainDefinition, message) -> ChainTrace:
    records: List[StageRecord] = []
    digest = chain_digest(definition, message, records)
    return ChainTrace(tuple(records), digest)
