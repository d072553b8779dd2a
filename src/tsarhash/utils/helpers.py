# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md
from __future__ import annotations

import struct
from typing import Iterable, Sequence

MASK32 = 0xFFFFFFFF
MASK64 = 0xFFFFFFFFFFFFFFFF


def print_banner():
    banner = r"""
  _______                 _    _           _
 |__   __|               | |  | |         | |
    | |___  __ _ _ __    | |__| | __ _ ___| |__
    | / __|/ _` | '__|   |  __  |/ _` / __| '_ \
    | \__ \ (_| | |      | |  | | (_| \__ \ | | |
    |_|___/\__,_|_|      |_|  |_|\__,_|___/_| |_|

                          Tsar Hash CLI
                 Chained Proof-of-Work Digest Engine
    """
    print(banner)


# -----------------------------
# MESSAGE INPUT
# -----------------------------

def as_message(data) -> bytes:
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"message must be bytes-like, not {type(data).__name__}")


def to_bytes(x) -> bytes:
    """Loose conversion for CLI input: hex strings first, then UTF-8 text."""
    if isinstance(x, (bytes, bytearray, memoryview)):
        return bytes(x)
    if isinstance(x, str):
        try:
            return bytes.fromhex(x)
        except ValueError:
            return x.encode("utf-8")
    raise TypeError(f"cannot convert {type(x).__name__} to bytes")


# -----------------------------
# WORD PACKING
# -----------------------------

def words_le32(words: Iterable[int]) -> bytes:
    w = [int(v) & MASK32 for v in words]
    return struct.pack("<%dI" % len(w), *w)

def words_be64(words: Iterable[int]) -> bytes:
    w = [int(v) & MASK64 for v in words]
    return struct.pack(">%dQ" % len(w), *w)

def rotl32(x: int, n: int) -> int:
    n &= 31
    x &= MASK32
    return ((x << n) | (x >> (32 - n))) & MASK32

def rotr64(x: int, n: int) -> int:
    return ((x >> n) | (x << (64 - n))) & MASK64

def rotl64(x: int, n: int) -> int:
    n &= 63
    return ((x << n) | (x >> (64 - n))) & MASK64


# -----------------------------
# DIAGNOSTICS
# -----------------------------

def bit_difference(a: Sequence[int], b: Sequence[int]) -> int:
    if len(a) != len(b):
        raise ValueError("length mismatch")
    return sum(bin(x ^ y).count("1") for x, y in zip(a, b))

def human_hps(hps: float) -> str:
    units = ["H/s", "kH/s", "MH/s", "GH/s", "TH/s"]
    i = 0
    val = float(hps)
    while val >= 1000.0 and i < len(units) - 1:
        val /= 1000.0
        i += 1
    return f"{val:.2f} {units[i]}"
