# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md

import hashlib
import logging
import os
import random
import sys

import pytest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(PROJECT_ROOT, "src")
for path in (PROJECT_ROOT, SRC_ROOT):
    if path not in sys.path:
        sys.path.append(path)

import tsarhash  # noqa: E402
from tsarhash.consensus.chain import (  # noqa: E402
    ChainDefinition,
    ChainSequencer,
    StageDescriptor,
    chain_digest,
    chain_trace,
)
from tsarhash.consensus.chains import CHAINS, HASH24, LITE4, NATIVE10, get_chain  # noqa: E402
from tsarhash.core import sph_native  # noqa: E402
from tsarhash.core.registry import get_template  # noqa: E402
from tsarhash.core.primitive import ConfigurationError, PrimitiveUnavailable  # noqa: E402
from tsarhash.utils.helpers import bit_difference  # noqa: E402
from tsarhash.utils.tsar_logging import TRACE  # noqa: E402


def _header(nonce: int) -> bytes:
    return bytes(range(76)) + nonce.to_bytes(4, "little")


# -----------------------------
# Digest shape
# -----------------------------

@pytest.mark.parametrize("length", [0, 1, 64, 80, 1000, 20_000])
def test_digest_is_always_32_bytes(length):
    assert len(chain_digest(LITE4, bytes(length))) == 32


def test_megabyte_message_digest_is_32_bytes():
    msg = b"a" * 1_000_000
    assert len(chain_digest(LITE4, msg)) == 32
    assert len(chain_digest(NATIVE10, msg)) == 32


def test_digest_is_deterministic():
    msg = _header(42)
    assert chain_digest(LITE4, msg) == chain_digest(LITE4, msg)
    seq = ChainSequencer(LITE4)
    assert seq(msg) == seq.digest(msg) == chain_digest(LITE4, msg)


def test_chaining_matches_manual_composition():
    msg = b"The quick brown fox"
    data = msg
    for pid in ("blake512", "haval256_5", "keccak512", "whirlpool"):
        data = get_template(pid).digest(data)
    assert chain_digest(LITE4, msg) == data[:32]


def test_trace_links_each_stage_to_the_next():
    msg = _header(7)
    tr = chain_trace(NATIVE10, msg)
    assert len(tr.records) == len(NATIVE10)
    assert tr.records[0].input == msg
    for prev, cur in zip(tr.records, tr.records[1:]):
        assert cur.input == prev.output
    assert tr.digest == tr.records[-1].output[:32]
    assert tr.digest == chain_digest(NATIVE10, msg)


def test_native_stage_widths_in_trace():
    tr = chain_trace(NATIVE10, b"")
    widths = {r.primitive: len(r.output) for r in tr.records}
    assert widths["ripemd160"] == 20
    assert widths["cubehash384"] == 48
    assert widths["haval224_4"] == 28


def test_fixed_slot_zero_fills_narrow_digest():
    chain = ChainDefinition.parse("ripemd160:64,sha512")
    tr = chain_trace(chain, b"abc")
    first = tr.records[0].output
    assert len(first) == 64
    assert first[:20] == get_template("ripemd160").digest(b"abc")
    assert first[20:] == bytes(44)
    assert tr.digest == hashlib.sha512(first).digest()[:32]


def test_native_width_passes_digest_unpadded():
    chain = ChainDefinition.parse("ripemd160,sha512")
    ripe = get_template("ripemd160").digest(b"abc")
    assert chain_digest(chain, b"abc") == hashlib.sha512(ripe).digest()[:32]


def test_single_stage_chain_truncates():
    chain = ChainDefinition.parse("sha512")
    assert chain_digest(chain, b"abc") == hashlib.sha512(b"abc").digest()[:32]


def test_avalanche_on_single_bit_flip():
    rng = random.Random(1)
    for _ in range(4):
        msg = bytearray(_header(rng.randrange(1 << 32)))
        base = chain_digest(LITE4, bytes(msg))
        bit = rng.randrange(len(msg) * 8)
        msg[bit // 8] ^= 1 << (bit % 8)
        flipped = chain_digest(LITE4, bytes(msg))
        assert bit_difference(base, flipped) > 64


def test_different_chains_give_different_digests():
    msg = _header(1)
    assert chain_digest(LITE4, msg) != chain_digest(NATIVE10, msg)


def test_message_must_be_bytes():
    with pytest.raises(TypeError):
        chain_digest(LITE4, "not bytes")
    assert chain_digest(LITE4, bytearray(b"ab")) == chain_digest(LITE4, memoryview(b"ab"))


# -----------------------------
# Definitions and validation
# -----------------------------

def test_last_stage_is_final():
    chain = ChainDefinition.build("two", ["sha512", StageDescriptor.of("blake512")])
    assert chain.stages[-1].final
    assert not chain.stages[0].final
    assert len(chain) == 2
    assert [s.primitive for s in chain] == ["sha512", "blake512"]


def test_final_stage_must_be_last():
    with pytest.raises(ConfigurationError):
        ChainDefinition("bad", (StageDescriptor.of("sha512", final=True), StageDescriptor.of("blake512")))


@pytest.mark.parametrize("text", ["", "sha512,", ",sha512", "sha512,,blake512", "sha512:x", "sha512:0"])
def test_malformed_stage_lists(text):
    with pytest.raises(ConfigurationError):
        ChainDefinition.parse(text)


def test_empty_chain_rejected():
    with pytest.raises(ConfigurationError):
        ChainDefinition("empty", ())


def test_unknown_primitive_fails_before_hashing():
    chain = ChainDefinition.parse("sha512,md5")
    with pytest.raises(ConfigurationError):
        ChainSequencer(chain)


def test_final_stage_too_narrow():
    with pytest.raises(ConfigurationError):
        ChainSequencer(ChainDefinition.parse("sha512,ripemd160"))
    with pytest.raises(ConfigurationError):
        ChainSequencer(ChainDefinition.parse("sha512,haval192_3"))


def test_slot_narrower_than_digest():
    with pytest.raises(ConfigurationError):
        ChainSequencer(ChainDefinition.parse("sha512:32,blake512"))


def test_stage_options_and_describe():
    chain = ChainDefinition.build("opts", [
        StageDescriptor.of("haval", output_words=8, passes=3),
        StageDescriptor.of("whirlpool"),
    ])
    assert chain.describe() == "haval(output_words=8,passes=3),whirlpool"
    data = get_template("haval256_3").digest(b"x")
    assert chain_digest(chain, b"x") == get_template("whirlpool").digest(data)[:32]


def test_parse_round_trips_describe():
    assert ChainDefinition.parse(NATIVE10.describe(), name="native10") == NATIVE10
    assert ChainDefinition(HASH24.name, HASH24.stages) == HASH24


# -----------------------------
# Built-in chains
# -----------------------------

def test_builtin_chains():
    assert set(CHAINS) == {"hash24", "lite4", "native10"}
    assert len(HASH24) == 24
    assert all(s.width == 64 for s in HASH24)
    assert HASH24.stages[0].primitive == "whirlpool1"
    assert HASH24.stages[-1].primitive == "whirlpool"
    assert get_chain(" LITE4 ") is LITE4
    with pytest.raises(ConfigurationError):
        get_chain("x11")


def test_hash24_needs_sph_backend(tmp_path):
    sph_native.configure_sph_library(tmp_path / "absent.so")
    try:
        with pytest.raises(PrimitiveUnavailable):
            chain_digest(HASH24, b"")
    finally:
        sph_native.configure_sph_library(None)


def test_package_exports():
    assert tsarhash.chain_digest is chain_digest
    assert tsarhash.haval(8, 5, b"").hex().startswith("be417bb4")


# -----------------------------
# Logging
# -----------------------------

def test_stage_trace_logging(caplog):
    caplog.set_level(TRACE, logger="tsarhash.consensus.chain")
    chain_digest(LITE4, b"log me")
    traced = [r for r in caplog.records if r.levelno == TRACE]
    assert len(traced) == len(LITE4)
    assert traced[0].chain == "lite4"
    assert traced[0].stage == 0


def test_no_trace_records_above_trace_level(caplog):
    caplog.set_level(logging.INFO, logger="tsarhash.consensus.chain")
    chain_digest(LITE4, b"quiet")
    assert not [r for r in caplog.records if r.levelno == TRACE]
