# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md

from .core.primitive import ConfigurationError, PrimitiveUnavailable
from .core.haval import haval
from .core.registry import get_template, new_context
from .consensus.chain import ChainDefinition, StageDescriptor, chain_digest, chain_trace
from .consensus.chains import CHAINS, get_chain

__all__ = [
    "CHAINS",
    "ChainDefinition",
    "ConfigurationError",
    "PrimitiveUnavailable",
    "StageDescriptor",
    "chain_digest",
    "chain_trace",
    "get_chain",
    "get_template",
    "haval",
    "new_context",
]
