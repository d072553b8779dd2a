# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md

'''
=============================================================================
 -------- !!! CONSENSUS-CRITICAL REMINDER - READ BEFORE EDITING !!! --------
=============================================================================

The values below **MUST BE IDENTICAL** across every node that checks work.
Changing them changes the proof-of-work value of every header.

  1) DIGEST SHAPE
   - DIGEST_BYTES, STAGE_DIGEST_BYTES

  2) CHAIN SELECTION
   - POW_CHAIN (the stage lists themselves live in consensus/chains.py)

NOT CONSENSUS (safety differs between nodes):
   native library lookup, benchmark knobs, thread fan-out, logging/path.

=============================================================================
'''

import os
import appdirs


# =============================================================================
# 1. MODE & APPLICATION
# =============================================================================
# ---- RUNTIME PROFILE ----
MODE   = "dev"  # default runtime profile, switch to "prod" for live nodes
IS_DEV = (MODE.lower() == "dev")  # cached boolean to simplify dev/prod toggles

# ---- APP METADATA ----
APP_NAME   = "TsarHash"  # display name used for user data directories
APP_AUTHOR = "TsarStudio"  # vendor string passed into platform dir helpers
DATA_DIR   = appdirs.user_data_dir(APP_NAME, APP_AUTHOR)  # OS-specific data folder resolved via appdirs
LOG_DIR    = appdirs.user_log_dir(APP_NAME, APP_AUTHOR)  # OS-specific log folder resolved via appdirs


# =============================================================================
# 2. DIGEST & CHAIN
# =============================================================================
# ---- DIGEST SHAPE ----
DIGEST_BYTES       = 32  # final chain digest width (256 bits)
STAGE_DIGEST_BYTES = 64  # native width of every 512-bit stage

# ---- CHAIN SELECTION ----
POW_CHAIN_DEV  = "lite4"  # native-only chain, runs without the sph backend
POW_CHAIN_PROD = "hash24"  # full 24-stage chain, needs the sph backend
POW_CHAIN      = POW_CHAIN_DEV if IS_DEV else POW_CHAIN_PROD  # chain used by pow_hash()

# ---- EXTRA BITS ----
MAX_EXTRA_BITS = 7  # close() accepts 0..7 trailing bits


# =============================================================================
# 3. NATIVE SPH BACKEND
# =============================================================================
# ---- LIBRARY LOOKUP ----
SPH_LIBRARY_NAMES = ("libsph.so", "libsph.dylib", "sph.dll")  # candidate file names for a sphlib build
SPH_LIBRARY_DIRS  = (
    os.path.join(DATA_DIR, "lib"),
    "lib",
)  # directories probed before the system loader
SPH_CONTEXT_BYTES = 1024  # opaque context buffer size, larger than any sph context


# =============================================================================
# 4. PARALLEL INVOCATION
# =============================================================================
# ---- THREAD FAN-OUT ----
DIGEST_MANY_WORKERS = min(32, (os.cpu_count() or 1) + 4)  # default ThreadPoolExecutor width

# ---- BENCHMARK ----
BENCH_HEADER_BYTES   = 80  # candidate size, header without nonce is 76 bytes
BENCH_REPORT_SECONDS = 2.0  # seconds between worker progress reports
BENCH_JOIN_TIMEOUT   = 1.0  # seconds to wait for each worker on shutdown


# =============================================================================
# 5. LOGGING
# =============================================================================
# ---- BASE OUTPUT ----
LOG_PATH             = os.path.join(LOG_DIR, "tsarhash.log")  # canonical log file path before format-specific override
LOG_SHOW_PROCESS     = False  # include process metadata in log context when True
LOG_PROC_PLACEHOLDER = "-"  # value used when process info is hidden

# ---- MODE PROFILES ----
if IS_DEV:
    # ---- DEV PROFILE ----
    LOG_LEVEL                   = "DEBUG"  # verbose logging for development
    LOG_FORMAT                  = "plain"  # plain text logs ease local debugging
    LOG_TO_CONSOLE              = True  # mirror logs to stdout for dev loops
    LOG_RATE_LIMIT_SECONDS      = 0.0  # disable console throttling in dev
    LOG_FILE_RATE_LIMIT_SECONDS = 0.0  # disable file throttling in dev
    LOG_ROTATE_MAX_BYTES        = 5_000_000  # rollover log files after ~5MB in dev
    LOG_BACKUP_COUNT            = 3  # retain a few rotated dev log files
else:
    # ---- PROD PROFILE ----
    LOG_LEVEL                   = "INFO"  # balanced verbosity for production
    LOG_FORMAT                  = "json"  # JSON logs simplify ingestion in prod
    LOG_TO_CONSOLE              = False  # suppress console spam for daemons
    LOG_RATE_LIMIT_SECONDS      = 2.0  # throttle console spam in prod
    LOG_FILE_RATE_LIMIT_SECONDS = 1.0  # throttle file spam in prod
    LOG_ROTATE_MAX_BYTES        = 10_000_000  # rollover log files after ~10MB in prod
    LOG_BACKUP_COUNT            = 7  # keep more history on production nodes

# ---- LOG PATH NORMALIZATION ----
_LOG_BASE = os.path.join(LOG_DIR, "tsarhash")  # base path used to pick extension
if str(LOG_FORMAT).lower().strip() == "json":
    LOG_PATH = _LOG_BASE + ".jsonl"  # JSON lines extension to aid parsing
else:
    LOG_PATH = _LOG_BASE + ".log"  # plain-text log extension fallback
