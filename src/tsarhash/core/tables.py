# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: HAVAL (Zheng, Pieprzyk, Seberry 1992); FIPS 180-4; FIPS 202; Whirlpool (Barreto, Rijmen 2003)

"""
Constant tables shared by the primitives.

Everything here is derived from its mathematical definition on first use
and cached for the life of the process, so the large literal tables of the
reference code never appear in the tree. Every function returns tuples.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Tuple

from ..utils.helpers import MASK64, rotr64


# ---------------- pi ----------------

def _arctan_inv(x: int, one: int) -> int:
    total = term = one // x
    x2 = x * x
    k = 3
    sign = -1
    while term:
        term //= x2
        total += sign * (term // k)
        sign = -sign
        k += 2
    return total


@lru_cache(maxsize=None)
def pi_fraction_words(count: int) -> Tuple[int, ...]:
    """First `count` 32-bit words of the fractional part of pi (Machin)."""
    guard = 64
    bits = 32 * count + guard
    one = 1 << bits
    pi = 16 * _arctan_inv(5, one) - 4 * _arctan_inv(239, one)
    frac = (pi - (3 << bits)) >> guard
    return tuple((frac >> (32 * (count - 1 - i))) & 0xFFFFFFFF for i in range(count))


def pi_fraction_words64(count: int) -> Tuple[int, ...]:
    w = pi_fraction_words(2 * count)
    return tuple((w[2 * i] << 32) | w[2 * i + 1] for i in range(count))


# ---------------- primes ----------------

@lru_cache(maxsize=None)
def first_primes(count: int) -> Tuple[int, ...]:
    out = []
    cand = 2
    while len(out) < count:
        if all(cand % p for p in out if p * p <= cand):
            out.append(cand)
        cand += 1
    return tuple(out)


def _iroot(n: int, k: int) -> int:
    if n < 2:
        return n
    x = 1 << ((n.bit_length() + k - 1) // k)
    while True:
        y = ((k - 1) * x + n // x ** (k - 1)) // k
        if y >= x:
            return x
        x = y


@lru_cache(maxsize=None)
def prime_root_fractions64(count: int, k: int) -> Tuple[int, ...]:
    """64 fraction bits of the k-th root of each of the first `count` primes."""
    return tuple(_iroot(p << (64 * k), k) & MASK64 for p in first_primes(count))


# ---------------- Keccak ----------------

def _lfsr_bit(t: int) -> int:
    t %= 255
    r = 1
    for _ in range(t):
        r <<= 1
        if r & 0x100:
            r ^= 0x171
    return r & 1


@lru_cache(maxsize=None)
def keccak_round_constants(rounds: int = 24) -> Tuple[int, ...]:
    out = []
    for i in range(rounds):
        rc = 0
        for j in range(7):
            if _lfsr_bit(j + 7 * i):
                rc |= 1 << ((1 << j) - 1)
        out.append(rc)
    return tuple(out)


@lru_cache(maxsize=None)
def keccak_rotation_offsets() -> Tuple[int, ...]:
    """rho offsets indexed by x + 5*y."""
    rot = [0] * 25
    x, y = 1, 0
    for t in range(24):
        rot[x + 5 * y] = ((t + 1) * (t + 2) // 2) % 64
        x, y = y, (2 * x + 3 * y) % 5
    return tuple(rot)


# ---------------- Whirlpool ----------------

_WP_E = (0x1, 0xB, 0x9, 0xC, 0xD, 0x6, 0xF, 0x3, 0xE, 0x8, 0x7, 0x4, 0xA, 0x2, 0x5, 0x0)
_WP_R = (0x7, 0xC, 0xB, 0xD, 0xE, 0x4, 0x9, 0xF, 0x6, 0x3, 0x8, 0xA, 0x2, 0x5, 0x1, 0x0)


@lru_cache(maxsize=None)
def whirlpool_sbox() -> Tuple[int, ...]:
    e_inv = [0] * 16
    for i, v in enumerate(_WP_E):
        e_inv[v] = i
    out = []
    for u in range(256):
        a = _WP_E[u >> 4]
        b = e_inv[u & 0xF]
        r = _WP_R[a ^ b]
        out.append((_WP_E[a ^ r] << 4) | e_inv[b ^ r])
    return tuple(out)


def gf256_mul(a: int, b: int, poly: int = 0x11D) -> int:
    r = 0
    while b:
        if b & 1:
            r ^= a
        a <<= 1
        if a & 0x100:
            a ^= poly
        b >>= 1
    return r


@lru_cache(maxsize=None)
def whirlpool_tables(row: Tuple[int, ...]) -> Tuple[Tuple[int, ...], ...]:
    """C0..C7 lookup tables for the circulant matrix whose first row is `row`."""
    sbox = whirlpool_sbox()
    c0 = []
    for x in range(256):
        s = sbox[x]
        v = 0
        for coeff in row:
            v = (v << 8) | gf256_mul(s, coeff)
        c0.append(v)
    return tuple(tuple(rotr64(v, 8 * k) for v in c0) for k in range(8))


@lru_cache(maxsize=None)
def whirlpool_round_constants(rounds: int = 10) -> Tuple[int, ...]:
    sbox = whirlpool_sbox()
    return tuple(int.from_bytes(bytes(sbox[8 * r:8 * r + 8]), "big") for r in range(rounds))

