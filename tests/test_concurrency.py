# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md

import os
import queue
import sys
import threading

import pytest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(PROJECT_ROOT, "src")
for path in (PROJECT_ROOT, SRC_ROOT):
    if path not in sys.path:
        sys.path.append(path)

from tsarhash.consensus.chain import ChainSequencer, chain_digest  # noqa: E402
from tsarhash.consensus.chains import LITE4, NATIVE10, get_chain  # noqa: E402
from tsarhash.consensus.pow import BenchResult, bench_header, benchmark, digest_many, pow_hash  # noqa: E402
from tsarhash.core.primitive import ConfigurationError  # noqa: E402
from tsarhash.utils import config as CFG  # noqa: E402


def _messages(n):
    return [bench_header() + i.to_bytes(4, "little") for i in range(n)]


def test_digest_many_matches_sequential():
    msgs = _messages(24)
    expected = [chain_digest(NATIVE10, m) for m in msgs]
    assert digest_many(NATIVE10, msgs, workers=6) == expected
    assert digest_many("native10", msgs) == expected


def test_shared_sequencer_across_threads():
    seq = ChainSequencer(LITE4)
    msgs = _messages(16)
    expected = [seq.digest(m) for m in msgs]
    results = [None] * len(msgs)

    def work(i):
        results[i] = seq.digest(msgs[i])

    threads = [threading.Thread(target=work, args=(i,)) for i in range(len(msgs))]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results == expected


def test_pow_hash_uses_configured_chain():
    msg = _messages(1)[0]
    assert pow_hash(msg) == chain_digest(get_chain(CFG.POW_CHAIN), msg)
    assert pow_hash(msg, "native10") == chain_digest(NATIVE10, msg)
    with pytest.raises(ConfigurationError):
        pow_hash(msg, "nope")


def test_bench_header_shape():
    assert len(bench_header()) + 4 == CFG.BENCH_HEADER_BYTES


def test_single_core_benchmark():
    progress = queue.Queue()
    res = benchmark(LITE4, seconds=0.3, use_cores=1, progress_queue=progress)
    assert isinstance(res, BenchResult)
    assert res.chain == "lite4"
    assert res.cores == 1
    assert res.hashes >= 1
    assert res.hps > 0


def test_benchmark_rejects_bad_chain():
    with pytest.raises(ConfigurationError):
        benchmark("unknown-chain", seconds=0.1)
