# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md

"""
TsarHash — CLI

Commands
- digest : chained PoW digest of text, hex or a file (optionally per-stage trace).
- haval  : a single HAVAL digest with chosen output size and pass count.
- chains : list the built-in chain variants and their stage order.
- bench  : hash an 80-byte header with a moving nonce on N cores.

Notes
- Chains that use sphlib primitives need a shared library build; point
  `--sph-lib` at it or drop it in the data dir `lib/` folder.
"""

import argparse, queue, threading, colorama, platform, psutil, sys
import multiprocessing as mp
from datetime import datetime

# ---------- Local Project ----------
from tsarhash.consensus.chain import ChainDefinition, chain_trace
from tsarhash.consensus.chains import CHAINS, get_chain
from tsarhash.consensus.pow import benchmark, pow_hash
from tsarhash.core.haval import haval
from tsarhash.core.primitive import ConfigurationError, PrimitiveUnavailable
from tsarhash.core.sph_native import configure_sph_library
from tsarhash.utils import config as CFG
from tsarhash.utils.helpers import human_hps, print_banner, to_bytes
from tsarhash.utils.tsar_logging import setup_logging

# ---------- Simple color + timestamp utilities ----------

colorama.init()
RESET  = "\033[0m"
BLUE   = "\033[34m"
YELLOW = "\033[33m"
GREEN  = "\033[32m"
RED    = "\033[31m"
CYAN   = "\033[36m"
DIM    = "\033[2m"

def _stamp() -> str:
    now = datetime.now()
    d = f"{now.year:04d}.{now.month:02d}.{now.day:02d}"
    t = f"{now.hour:02d}.{now.minute:02d}.{now.second:02d}"
    return f"[{BLUE}{d}{RESET}] - [{YELLOW}{t}{RESET}]"

def clog(message: str, color: str = GREEN):
    print(f"{_stamp()} : {color}{message}{RESET}")


def print_system_snapshot(cores_hint: int | None = None):
    uname = platform.uname()
    phys = psutil.cpu_count(logical=False) or 0
    logi = psutil.cpu_count(logical=True) or 0
    clog("System snapshot:", color=CYAN)
    clog(f"  CPU     : {platform.processor() or uname.machine}")
    line_core = f"  Cores   : {phys} phys / {logi} logical"
    if cores_hint:
        line_core += f"  |  use {cores_hint}"
    clog(line_core)
    clog(f"  OS      : {uname.system} {uname.release} ({uname.machine})")
    clog(f"  Python  : {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    clog("-" * 40, color=RED)


class HashrateReporter(threading.Thread):
    def __init__(self, q: queue.Queue, name="HashrateReporter"):
        super().__init__(name=name, daemon=True)
        self.q = q
        self.stop_event = threading.Event()

    def run(self):
        last_line = ""
        while not self.stop_event.is_set():
            try:
                msg = self.q.get(timeout=0.5)
            except queue.Empty:
                continue
            if not (isinstance(msg, tuple) and len(msg) == 2):
                continue
            kind, hps = msg
            label = "Hashrate" if kind == "TOTAL_HPS" else "Core"
            line = f"{label} ~ {human_hps(hps)} {DIM}{RESET}"
            if line != last_line:
                clog(line, color=CYAN)
                last_line = line


# ---------- command handlers ----------

def _chain_from_args(args) -> ChainDefinition:
    if getattr(args, "stages", None):
        return ChainDefinition.parse(args.stages, name="custom")
    if getattr(args, "chain", None):
        return get_chain(args.chain)
    return get_chain(CFG.POW_CHAIN)


def _message_from_args(args) -> bytes:
    if args.file:
        with open(args.file, "rb") as f:
            return f.read()
    if args.hex is not None:
        return bytes.fromhex(args.hex)
    if args.text is not None:
        return to_bytes(args.text) if args.loose else args.text.encode("utf-8")
    return sys.stdin.buffer.read()


def cmd_digest(args) -> int:
    chain = _chain_from_args(args)
    message = _message_from_args(args)
    if args.trace:
        tr = chain_trace(chain, message)
        for rec in tr.records:
            clog(f"[{rec.index:02d}] {rec.primitive:<14} {rec.output.hex()}", color=DIM)
        print(tr.digest.hex())
    else:
        print(pow_hash(message, chain).hex())
    return 0


def cmd_haval(args) -> int:
    message = _message_from_args(args)
    print(haval(args.bits // 32, args.passes, message).hex())
    return 0


def cmd_chains(_args) -> int:
    for name, chain in sorted(CHAINS.items()):
        mark = " (default)" if name == CFG.POW_CHAIN else ""
        try:
            chain.resolve()
            status, color = "ready", CYAN
        except PrimitiveUnavailable:
            status, color = "needs sph library", YELLOW
        clog(f"{name}{mark}: {len(chain)} stages, {status}", color=color)
        print("    " + chain.describe())
    return 0


def cmd_bench(args) -> int:
    chain = _chain_from_args(args)
    cores = max(1, int(args.cores or 1))
    print_system_snapshot(cores)
    clog(f"Benchmark chain={chain.name} stages={len(chain)} seconds={args.seconds}")

    progress_q: queue.Queue = queue.Queue()
    reporter = HashrateReporter(progress_q)
    reporter.start()
    stop = mp.Event()
    try:
        res = benchmark(chain, seconds=float(args.seconds), use_cores=cores,
                        stop_event=stop, progress_queue=progress_q, sph_lib=args.sph_lib)
    except KeyboardInterrupt:
        stop.set()
        clog("Interrupted by user.", color=YELLOW)
        return 130
    finally:
        reporter.stop_event.set()
        reporter.join(timeout=1.0)
    clog(f"Done: {res.hashes} hashes in {res.seconds:.2f}s on {res.cores} core(s) -> {human_hps(res.hps)}")
    return 0


def _add_message_args(p: argparse.ArgumentParser):
    src = p.add_mutually_exclusive_group()
    src.add_argument("--hex", help="Message as hex")
    src.add_argument("--file", help="Read message from file")
    p.add_argument("text", nargs="?", help="Message text (stdin when omitted)")
    p.add_argument("--loose", action="store_true", help="Treat TEXT as hex when it parses as hex")


def _add_chain_args(p: argparse.ArgumentParser):
    grp = p.add_mutually_exclusive_group()
    grp.add_argument("--chain", help=f"Built-in chain ({', '.join(sorted(CHAINS))})")
    grp.add_argument("--stages", help="Custom stage list, e.g. blake512,haval256_5,whirlpool")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="TsarHash chained PoW digest CLI")
    parser.add_argument("--sph-lib", help="Path to a sphlib shared library")
    parser.add_argument("--log-level", default=None, help="Override log level (TRACE, DEBUG, INFO, ...)")
    parser.add_argument("--no-banner", action="store_true", help="Skip the banner")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("digest", help="Chained PoW digest")
    _add_chain_args(p)
    _add_message_args(p)
    p.add_argument("--trace", action="store_true", help="Print every stage output")
    p.set_defaults(func=cmd_digest)

    p = sub.add_parser("haval", help="Single HAVAL digest")
    p.add_argument("--bits", type=int, default=256, choices=(128, 160, 192, 224, 256))
    p.add_argument("--passes", type=int, default=5, choices=(3, 4, 5))
    _add_message_args(p)
    p.set_defaults(func=cmd_haval)

    p = sub.add_parser("chains", help="List built-in chains")
    p.set_defaults(func=cmd_chains)

    p = sub.add_parser("bench", help="Hashrate benchmark")
    _add_chain_args(p)
    p.add_argument("--cores", type=int, default=1, help="CPU cores to dedicate")
    p.add_argument("--seconds", type=float, default=10.0, help="Benchmark duration")
    p.set_defaults(func=cmd_bench)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(force=True, level=args.log_level)
    if args.sph_lib:
        configure_sph_library(args.sph_lib)
    if args.command == "bench" and not args.no_banner:
        print_banner()
    try:
        return args.func(args)
    except PrimitiveUnavailable as e:
        clog(f"{e} (use --sph-lib or a native-only chain such as 'lite4')", color=RED)
        return 3
    except (ConfigurationError, ValueError, OSError) as e:
        clog(f"Error: {e}", color=RED)
        return 2


if __name__ == "__main__":
    mp.freeze_support()
    sys.exit(main())
