# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md

from __future__ import annotations

import multiprocessing as mp
import queue
import struct
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from multiprocessing.synchronize import Event as MpEvent
from typing import Iterable, List, Optional, Union

import psutil

# ---------------- Local Project ----------------
from .chain import ChainDefinition, ChainSequencer, chain_digest
from .chains import default_chain, get_chain
from ..core.sph_native import configure_sph_library
from ..utils import config as CFG
from ..utils.tsar_logging import get_ctx_logger

log = get_ctx_logger("tsarhash.consensus.pow")

ChainRef = Union[ChainDefinition, str]


def _as_chain(chain: Optional[ChainRef]) -> ChainDefinition:
    if chain is None:
        return default_chain()
    if isinstance(chain, ChainDefinition):
        return chain
    return get_chain(chain)


def pow_hash(message, chain: Optional[ChainRef] = None) -> bytes:
    """Proof-of-work digest with the configured chain (config.POW_CHAIN)."""
    return chain_digest(_as_chain(chain), message)


def digest_many(definition: ChainRef, messages: Iterable, workers: Optional[int] = None) -> List[bytes]:
    """Digest independent messages on a thread pool; results follow input order."""
    seq = ChainSequencer(_as_chain(definition))
    with ThreadPoolExecutor(max_workers=workers or CFG.DIGEST_MANY_WORKERS) as ex:
        return list(ex.map(seq.digest, messages))


# ---------------- benchmark ----------------

@dataclass(frozen=True)
class BenchResult:
    chain: str
    cores: int
    hashes: int
    seconds: float
    hps: float


def bench_header() -> bytes:
    return bytes(i & 0xFF for i in range(CFG.BENCH_HEADER_BYTES - 4))


def _bench_loop(seq: ChainSequencer, start_nonce: int, step: int, deadline: float,
                stop_event: Optional[MpEvent], report) -> int:
    header = bytearray(bench_header())
    header.extend(b"\x00\x00\x00\x00")
    nonce_offset = len(header) - 4
    nonce = start_nonce
    total = 0
    hash_count = 0
    last_report_time = time.time()
    while True:
        now = time.time()
        if now >= deadline or (stop_event is not None and stop_event.is_set()):
            break
        struct.pack_into("<I", header, nonce_offset, nonce & 0xFFFFFFFF)
        seq.digest(bytes(header))
        hash_count += 1
        total += 1
        if now - last_report_time >= CFG.BENCH_REPORT_SECONDS:
            report(hash_count / max(1e-9, now - last_report_time))
            hash_count = 0
            last_report_time = now
        nonce += step
    return total


def bench_worker(index: int, step: int, chain_name: str, stages: tuple, seconds: float,
                 result_queue, stop_event: MpEvent, sph_lib: Optional[str] = None):
    """Worker process: sends ('PROGRESS', hps) periodically and ('DONE', hashes) at the end."""
    wlog = get_ctx_logger("tsarhash.consensus.pow", chain=chain_name, worker=index)
    try:
        if sph_lib:
            configure_sph_library(sph_lib)
        seq = ChainSequencer(ChainDefinition(chain_name, stages))
        deadline = time.time() + seconds
        total = _bench_loop(seq, index, step, deadline, stop_event,
                            lambda hps: result_queue.put(("PROGRESS", hps)))
        result_queue.put(("DONE", total))
    except KeyboardInterrupt:
        stop_event.set()
    except Exception as e:
        wlog.exception("bench worker failed")
        result_queue.put(("ERR", f"worker {index} -> {e!r}"))


def benchmark(definition: Optional[ChainRef] = None, seconds: float = 5.0, use_cores: int = 1,
              stop_event: Optional[MpEvent] = None, progress_queue=None,
              sph_lib: Optional[str] = None) -> BenchResult:
    chain = _as_chain(definition)
    ChainSequencer(chain)  # surface configuration errors before spawning
    total_cores = mp.cpu_count()
    if not isinstance(use_cores, int) or use_cores < 1:
        use_cores = 1
    num_cores = min(use_cores, total_cores)
    log.info("[bench] chain=%s stages=%d cores=%s/%s seconds=%.1f",
             chain.name, len(chain), num_cores, total_cores, seconds)

    start = time.time()
    if num_cores == 1:
        def report(hps):
            log.info("[bench] %.1f H/s", hps)
            if progress_queue is not None:
                progress_queue.put(("TOTAL_HPS", hps))
        hashes = _bench_loop(ChainSequencer(chain), 0, 1, start + seconds, stop_event, report)
        return _result(chain, 1, hashes, time.time() - start)

    result_queue = mp.Queue()
    created_local_stop = stop_event is None
    if stop_event is None:
        stop_event = mp.Event()
    processes: list[mp.Process] = []
    cpu_ids = list(range(total_cores))
    for i in range(num_cores):
        p = mp.Process(target=bench_worker,
                       args=(i, num_cores, chain.name, chain.stages, seconds,
                             result_queue, stop_event, sph_lib))
        p.daemon = True
        p.start()
        processes.append(p)
        try:
            proc = psutil.Process(p.pid)
            if hasattr(proc, "cpu_affinity"):
                proc.cpu_affinity([cpu_ids[i % len(cpu_ids)]])
        except (psutil.Error, OSError):
            log.exception("[bench] psutil affinity failed for pid=%s", p.pid)

    hashes = 0
    done = 0
    deadline = start + seconds + max(5.0, seconds)
    try:
        while done < num_cores:
            if stop_event.is_set() and not any(p.is_alive() for p in processes):
                break
            try:
                msg = result_queue.get(timeout=0.2)
            except queue.Empty:
                if time.time() >= deadline or not any(p.is_alive() for p in processes):
                    break
                continue
            kind, value = msg
            if kind == "PROGRESS":
                log.debug("[bench] worker %.1f H/s", value)
                if progress_queue is not None:
                    progress_queue.put(("PROGRESS", value))
            elif kind == "DONE":
                hashes += int(value)
                done += 1
            elif kind == "ERR":
                log.error("[bench] Worker error: %s", value)
                done += 1
    finally:
        if created_local_stop:
            stop_event.set()
        for p in processes:
            p.join(timeout=CFG.BENCH_JOIN_TIMEOUT)
        for p in processes:
            if p.is_alive():
                p.terminate()
                p.join(timeout=CFG.BENCH_JOIN_TIMEOUT)
        result_queue.close()
        result_queue.join_thread()
    return _result(chain, num_cores, hashes, time.time() - start)


def _result(chain: ChainDefinition, cores: int, hashes: int, elapsed: float) -> BenchResult:
    res = BenchResult(chain.name, cores, hashes, elapsed, hashes / max(1e-9, elapsed))
    log.info("[bench] done: %s hashes in %.2fs (%.1f H/s)", res.hashes, res.seconds, res.hps)
    return res
