# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of TsarHash — see LICENSE and TRADEMARKS.md
# Refs: HAVAL (Zheng, Pieprzyk, Seberry 1992); sphlib haval test vectors

import os
import random
import sys

import pytest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(PROJECT_ROOT, "src")
for path in (PROJECT_ROOT, SRC_ROOT):
    if path not in sys.path:
        sys.path.append(path)

from tsarhash.core import haval as H  # noqa: E402
from tsarhash.core.nmb.haval_numba import _f  # noqa: E402
from tsarhash.core.primitive import ConfigurationError  # noqa: E402
from tsarhash.core.tables import pi_fraction_words  # noqa: E402


EMPTY_VECTORS = {
    (4, 3): "c68f39913f901f3ddf44c707357a7d70",
    (4, 4): "ee6bbf4d6a46a679b3a856c88538bb98",
    (4, 5): "184b8482a0c050dca54b59c7f05bf5dd",
    (5, 3): "d353c3ae22a25401d257643836d7231a9a95f953",
    (5, 4): "1d33aae1be4146dbaaca0b6e70d7a11f10801525",
    (5, 5): "255158cfc1eed1a7be7c55ddd64d9790415b933b",
    (6, 3): "e9c48d7903eaf2a91c5b350151efcb175c0fc82de2289a4e",
    (6, 4): "4a8372945afa55c7dead800311272523ca19d42ea47b72da",
    (6, 5): "4839d0626f95935e17ee2fc4509387bbe2cc46cb382ffe85",
    (7, 3): "c5aae9d47bffcaaf84a8c6e7ccacd60a0dd1932be7b1a192b9214b6d",
    (7, 4): "3e56243275b3b81561750550e36fcd676ad2f5dd9e15f2e89e6ed78e",
    (7, 5): "4a0513c032754f5582a758d35917ac9adf3854219b39e3ac77d1837e",
    (8, 3): "4f6938531f0bc8991f62da7bbd6f7de3fad44562b8c6f4ebf146d5b4e46f7c17",
    (8, 4): "c92b2e23091e80e375dadce26982482d197b1a2521be82da819f8ca2c579b99b",
    (8, 5): "be417bb4dd5cfb76c7126f4f8eeb1553a449039307b1a3cd451dbfdc0fbbe330",
}


A_VECTORS = {
    (4, 3): "0cd40739683e15f01ca5dbceef4059f1",
    (4, 4): "5cd07f03330c3b5020b29ba75911e17d",
    (4, 5): "f23fbe704be8494bfa7a7fb4f8ab09e5",
    (5, 3): "4da08f514a7275dbc4cece4a347385983983a830",
    (5, 4): "e0a5be29627332034d4dd8a910a1a0e6fe04084d",
    (5, 5): "f5147df7abc5e3c81b031268927c2b5761b5a2b5",
    (6, 3): "b359c8835647f5697472431c142731ff6e2cddcacc4f6e08",
    (6, 4): "856c19f86214ea9a8a2f0c4b758b973cce72a2d8ff55505c",
    (6, 5): "5ffa3b3548a6e2cfc06b7908ceb5263595df67cf9c4b9341",
    (7, 3): "731814ba5605c59b673e4caae4ad28eeb515b3abc2b198336794e17b",
    (7, 4): "742f1dbeeaf17f74960558b44f08aa98bdc7d967e6c0ab8f799b3ac1",
    (7, 5): "67b3cb8d4068e3641fa4f156e03b52978b421947328bfb9168c7655d",
    (8, 3): "e3891cb6fd1a883a1ae723f13ba336f586fa8c10506c4799c209d10113675bc1",
    (8, 4): "e686d2394a49b44d306ece295cf9021553221db132b36cc0ff5b593d39295899",
    (8, 5): "de8fd5ee72a5e4265af0a756f4e1a1f65c9b2b2f47cf17ecf0d1b88679a3e22f",
}


@pytest.mark.parametrize("config", sorted(EMPTY_VECTORS))
def test_empty_message_vectors(config):
    output_words, passes = config
    assert H.haval(output_words, passes, b"").hex() == EMPTY_VECTORS[config]


@pytest.mark.parametrize("config", sorted(A_VECTORS))
def test_single_letter_vectors(config):
    output_words, passes = config
    assert H.haval(output_words, passes, b"a").hex() == A_VECTORS[config]


def test_haval128_3_text_vectors():
    assert H.haval(4, 3, b"HAVAL").hex() == "dc1f3c893d17cc4edd9ae94af76a0af0"
    assert (H.haval(4, 3, b"The quick brown fox jumps over the lazy dog").hex()
            == "713502673d67e5fa557629a71d331945")


def test_haval256_5_text_vectors():
    assert H.haval(8, 5, b"HAVAL").hex() == "153d2c81cd3c24249ab7cd476934287af845af37f53f51f5c7e2be99ba28443f"


@pytest.mark.parametrize("output_words", H.OUTPUT_WORDS)
@pytest.mark.parametrize("passes", H.PASSES)
def test_digest_size_and_template_name(output_words, passes):
    tpl = H.haval_template(output_words, passes)
    assert tpl.digest_size == 4 * output_words
    assert tpl.block_size == 128
    assert tpl.name == f"haval{32 * output_words}_{passes}"
    assert len(tpl.digest(b"x" * 300)) == 4 * output_words


def test_configurations_are_distinct():
    msg = b"distinct"
    seen = {H.haval(w, p, msg) for w in H.OUTPUT_WORDS for p in H.PASSES}
    assert len(seen) == len(H.OUTPUT_WORDS) * len(H.PASSES)


@pytest.mark.parametrize("length", [0, 1, 117, 118, 119, 127, 128, 129, 255, 256, 1000])
def test_streaming_matches_one_shot(length):
    rng = random.Random(length)
    msg = bytes(rng.randrange(256) for _ in range(length))
    tpl = H.haval_template(8, 4)
    expected = tpl.digest(msg)
    for split in sorted({0, 1, length // 3, length // 2, max(0, length - 1), length}):
        ctx = tpl.new()
        ctx.update(msg[:split])
        ctx.update(b"")
        ctx.update(msg[split:])
        assert ctx.close() == expected


def test_byte_at_a_time_matches_one_shot():
    msg = bytes(range(256)) * 2
    ctx = H.haval_template(5, 3).new()
    for b in msg:
        ctx.update(bytes([b]))
    assert ctx.close() == H.haval(5, 3, msg)


def test_close_rearms_context():
    ctx = H.haval_template(8, 5).new()
    ctx.update(b"first message")
    ctx.close()
    assert ctx.close() == H.haval(8, 5, b"")
    assert ctx.bit_count == 0


def test_extra_bits_only_high_bits_count():
    msg = b"abc"
    # only the n highest bits of extra_bits are used
    assert H.haval(8, 5, msg, 0xFF, 1) == H.haval(8, 5, msg, 0x80, 1)
    assert H.haval(8, 5, msg, 0xA0, 3) == H.haval(8, 5, msg, 0xBF, 3)
    assert H.haval(8, 5, msg, 0x00, 1) != H.haval(8, 5, msg, 0x80, 1)
    assert H.haval(8, 5, msg, 0x80, 1) != H.haval(8, 5, msg)


def test_zero_valued_extra_bits_change_digest():
    assert H.haval(4, 3, b"", 0x00, 1) != H.haval(4, 3, b"")
    assert H.haval(4, 3, b"", 0x00, 1) != H.haval(4, 3, b"", 0x00, 2)


@pytest.mark.parametrize("n", [-1, 8, 100])
def test_extra_bit_count_out_of_range(n):
    with pytest.raises(ConfigurationError):
        H.haval(8, 5, b"", 0, n)


@pytest.mark.parametrize("output_words, passes", [(3, 5), (9, 5), (8, 2), (8, 6), (0, 0)])
def test_unsupported_configuration(output_words, passes):
    with pytest.raises(ConfigurationError):
        H.haval_template(output_words, passes)


def test_initial_value_and_round_constants_come_from_pi():
    assert H.initial_value() == (
        0x243F6A88, 0x85A308D3, 0x13198A2E, 0x03707344,
        0xA4093822, 0x299F31D0, 0x082EFA98, 0xEC4E6C89,
    )
    rc = H.round_constants()
    assert rc[0] == (0,) * 32
    assert rc[1][0] == 0x452821E6
    assert rc[1][1] == 0x38D01377
    assert all(len(row) == 32 for row in rc)
    assert pi_fraction_words(136)[8:] == sum(rc[1:], ())


def test_word_orders_are_permutations():
    for row in H.WORD_ORDER:
        assert sorted(row) == list(range(32))
    for passes, rows in H.PHI.items():
        assert len(rows) == passes
        for row in rows:
            assert len(set(row)) == 7


def _paper_f(fn, x6, x5, x4, x3, x2, x1, x0):
    m = 0xFFFFFFFF
    if fn == 0:
        return (x1 & x4) ^ (x2 & x5) ^ (x3 & x6) ^ (x0 & x1) ^ x0
    if fn == 1:
        return ((x1 & x2 & x3) ^ (x2 & x4 & x5) ^ (x1 & x2) ^ (x1 & x4) ^ (x2 & x6)
                ^ (x3 & x5) ^ (x4 & x5) ^ (x0 & x2) ^ x0)
    if fn == 2:
        return (x1 & x2 & x3) ^ (x1 & x4) ^ (x2 & x5) ^ (x3 & x6) ^ (x0 & x3) ^ x0
    if fn == 3:
        return ((x1 & x2 & x3) ^ (x2 & x4 & x5) ^ (x3 & x4 & x6) ^ (x1 & x4) ^ (x2 & x6)
                ^ (x3 & x4) ^ (x3 & x5) ^ (x3 & x6) ^ (x4 & x5) ^ (x4 & x6) ^ (x0 & x4) ^ x0)
    return ((x1 & x4) ^ (x2 & x5) ^ (x3 & x6) ^ (x0 & x1 & x2 & x3) ^ (x0 & x5) ^ x0) & m


@pytest.mark.parametrize("fn", range(5))
def test_boolean_functions_match_paper_form(fn):
    rng = random.Random(fn)
    for _ in range(200):
        xs = [rng.getrandbits(32) for _ in range(7)]
        assert (_f(fn, *xs) & 0xFFFFFFFF) == _paper_f(fn, *xs)


def test_tailor_is_identity_for_256_bits():
    state = list(range(1, 9))
    assert H.tailor(state, 8) == b"".join(v.to_bytes(4, "little") for v in state)


def test_tailor_128_folds_high_words():
    s = [0] * 4 + [0x11223344, 0x55667788, 0x99AABBCC, 0xDDEEFF00]
    out = H.tailor(s, 4)
    w0 = int.from_bytes(out[:4], "little")
    # bytes of s7, s4, s5, s6 low to high, rotated left by 24
    v = (0x00) | (0x3300) | (0x660000) | (0x99000000)
    assert w0 == ((v << 24) | (v >> 8)) & 0xFFFFFFFF


def test_template_tables_are_read_only():
    tpl = H.haval_template(8, 5)
    with pytest.raises(ValueError):
        tpl.tables.consts[0, 0] = 1
    with pytest.raises(TypeError):
        tpl.options["passes"] = 3


# -----------------------------
# Paper-form reference model
# -----------------------------

def _rotr32(x, n):
    return ((x >> n) | (x << (32 - n))) & 0xFFFFFFFF


def _ref_pad(message: bytes, output_words: int, passes: int, extra_bits: int = 0, n: int = 0) -> bytes:
    bit_len = 8 * len(message) + n
    last = ((extra_bits & 0xFF) >> (8 - n)) | (1 << n) if n else 0x01
    data = bytearray(message) + bytes([last])
    while len(data) % 128 != 118:
        data.append(0)
    data.append(H.VERSION | (passes << 3))
    data.append((32 * output_words) >> 2)
    data += bit_len.to_bytes(8, "little")
    return bytes(data)


def _ref_haval(message: bytes, output_words: int, passes: int, extra_bits: int = 0, n: int = 0) -> bytes:
    rc = H.round_constants()
    state = list(H.initial_value())
    padded = _ref_pad(message, output_words, passes, extra_bits, n)
    for off in range(0, len(padded), 128):
        w = [int.from_bytes(padded[off + 4 * j:off + 4 * j + 4], "little") for j in range(32)]
        x = list(state)  # x[0]..x[7]
        for p in range(passes):
            for i in range(32):
                t = _paper_f(p, *(x[j] for j in H.PHI[passes][p]))
                r = (_rotr32(t, 7) + _rotr32(x[7], 11) + w[H.WORD_ORDER[p][i]] + rc[p][i]) & 0xFFFFFFFF
                x = [r] + x[:7]
        state = [(a + b) & 0xFFFFFFFF for a, b in zip(state, x)]
    return H.tailor(state, output_words)


def test_reference_model_reproduces_published_vectors():
    for (output_words, passes), hexdigest in EMPTY_VECTORS.items():
        assert _ref_haval(b"", output_words, passes).hex() == hexdigest
    for (output_words, passes), hexdigest in A_VECTORS.items():
        assert _ref_haval(b"a", output_words, passes).hex() == hexdigest


@pytest.mark.parametrize("output_words", H.OUTPUT_WORDS)
@pytest.mark.parametrize("passes", H.PASSES)
def test_kernel_matches_reference_model(output_words, passes):
    for length in (0, 3, 117, 118, 200, 300):
        msg = bytes((7 * i + length) & 0xFF for i in range(length))
        assert H.haval(output_words, passes, msg) == _ref_haval(msg, output_words, passes)


@pytest.mark.parametrize("length", [0, 5, 117, 118, 127])
def test_extra_bits_are_a_bit_level_extension(length):
    msg = bytes(range(length))
    # message followed by the three bits 1, 0, 1
    expected = _ref_haval(msg, 8, 5, 0b1010_0000, 3)
    assert H.haval(8, 5, msg, 0b1010_0000, 3) == expected
    ctx = H.haval_template(8, 5).new()
    ctx.update(msg)
    assert ctx.close(0b1010_0000, 3) == expected
