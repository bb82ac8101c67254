# tests/test_compression.py
"""
CompFHE Compression Test Suite

Tests for: compress, decrypt_compressed, CompressedEngine
Categories:
  C1. Correctness (round-trip, LUT outputs, bootstrapping-dimension keys)
  C2. Homomorphic linearity on synthetic vectors
  C3. Input validation
  C4. Parameter validation
  C5. Threading and size accounting
"""

import inspect

import numpy as np
import pytest

from compfhe.cryptography.common import (
    PAILLIER_KEY_BITS,
    CompressedCiphertext,
    InvalidInputError,
    LWECiphertext,
    LWESecretKey,
    ParameterError,
    decode_phase,
    switch_modulus,
)
from compfhe.cryptography.compression import (
    compress,
    compression_ratio,
    decrypt_compressed,
)
from compfhe.cryptography.core import (
    CompressedEngine,
    bind_compression_key,
    validate_parameters,
)
from compfhe.engines.lwe import ReferenceLweEngine

WIDE_SEED = b"compfhe-test-wide".ljust(32, b"\x00")


# =============================================================================
# C1. Correctness
# =============================================================================

def test_c1_1_round_trip_all_plaintexts(toy_compressed, toy_keys):
    """Every plaintext of Z_p survives compress + decrypt_compressed."""
    engine = toy_compressed.lwe
    p = engine.max_plaintext_space()

    for m in range(p):
        ct = engine.encrypt(toy_keys.lwe, m)
        compressed = toy_compressed.compress(toy_keys.compression_key, ct)
        result = toy_compressed.decrypt_compressed(toy_keys.paillier.private_key, compressed)

        assert result == m
        assert engine.decrypt(toy_keys.lwe, ct) == m


@pytest.mark.slow
def test_c1_2_round_trip_exhaustive_p4096(paillier_engine):
    """Exhaustive check over the full plaintext space at p = 4096."""
    engine = ReferenceLweEngine("WIDE", seed=WIDE_SEED)
    ce = CompressedEngine(engine, paillier=paillier_engine)
    keys = ce.key_gen()
    p = engine.max_plaintext_space()
    assert p == 4096

    failures = []
    for m in range(p):
        ct = engine.encrypt(keys.lwe, m, p)
        compressed = ce.compress(keys.compression_key, ct)
        if ce.decrypt_compressed(keys.paillier.private_key, compressed, p) != m:
            failures.append(m)

    assert failures == []


def test_c1_3_lut_output_round_trip(toy_compressed, toy_keys):
    """Compress the output of a LUT evaluation (x^3 mod p)."""
    engine = toy_compressed.lwe
    p = engine.max_plaintext_space()
    lut = engine.generate_lut(lambda m, p1: (m * m * m) % p1, p)

    for m in range(p):
        ct_cube = engine.eval_func(engine.encrypt(toy_keys.lwe, m), lut)
        compressed = toy_compressed.compress(toy_keys.compression_key, ct_cube)

        assert toy_compressed.decrypt_compressed(toy_keys.paillier.private_key, compressed, p) == (m ** 3) % p


def test_c1_4_bootstrapping_dimension_key(toy_compressed):
    """key_gen_n binds a key of the bootstrapping dimension."""
    engine = toy_compressed.lwe
    keys = toy_compressed.key_gen_n()

    assert len(keys.lwe) == engine.N
    assert len(keys.compression_key) == engine.N

    for m in (0, 1, engine.max_plaintext_space() - 1):
        ct = engine.encrypt(keys.lwe, m)
        compressed = toy_compressed.compress(keys.compression_key, ct)
        assert toy_compressed.decrypt_compressed(keys.paillier.private_key, compressed) == m


def test_c1_5_compression_key_encrypts_switched_key(toy_keys, paillier_engine):
    """Compression key decrypts to the secret key switched into Z_q."""
    q = toy_keys.compression_key.q
    expected = toy_keys.lwe.switched(q).tolist()
    decrypted = [
        paillier_engine.decrypt(toy_keys.paillier.private_key, c)
        for c in toy_keys.compression_key.ciphertexts
    ]
    assert decrypted == expected
    assert set(decrypted) <= {0, 1, q - 1}


def test_c1_6_compress_uses_only_public_material(toy_compressed, toy_keys):
    """compress never takes the LWE secret key."""
    params = list(inspect.signature(compress).parameters)
    assert params == ["compression_key", "ciphertext", "scheme", "workers"]

    ck, public_key = toy_keys.public_material()
    assert ck.public_key is public_key

    ct = toy_compressed.lwe.encrypt(toy_keys.lwe, 5)
    compressed = compress(ck, ct)
    assert decrypt_compressed(toy_keys.paillier.private_key, compressed, ct.p) == 5


def test_c1_7_decode_uses_ciphertext_plaintext_modulus(toy_compressed, toy_keys):
    """A ciphertext encrypted under p = 4 decodes under 4, not the engine maximum."""
    engine = toy_compressed.lwe
    assert engine.max_plaintext_space() == 8

    ct = engine.encrypt(toy_keys.lwe, 3, 4)
    compressed = toy_compressed.compress(toy_keys.compression_key, ct)
    private_key = toy_keys.paillier.private_key

    assert compressed.p == 4
    assert toy_compressed.decrypt_compressed(private_key, compressed) == 3
    assert decrypt_compressed(private_key, compressed) == 3
    assert decrypt_compressed(private_key, compressed, 8) == 6


# =============================================================================
# C2. Homomorphic Linearity
# =============================================================================

def _synthetic_ciphertext(rng, s, m, q, p):
    a = rng.randint(0, q, size=len(s)).astype(np.int64)
    e = int(rng.randint(-2, 3))
    b = (int(a @ s) + m * (q // p) + e) % q
    return LWECiphertext(a=a, b=b, q=q, p=p)


def test_c2_1_sum_of_ciphertexts(paillier_keys, paillier_engine):
    """compress(ct1 + ct2) decodes to m1 + m2 mod p, with exact phase."""
    q, p, k = 1 << 12, 16, 8
    rng = np.random.RandomState(7)
    s = rng.randint(0, q, size=k).astype(np.int64)
    ck = bind_compression_key(LWESecretKey(s=s, modulus=q), paillier_keys, q, scheme=paillier_engine)

    for m1, m2 in [(0, 0), (3, 4), (9, 9), (15, 1)]:
        ct1 = _synthetic_ciphertext(rng, s, m1, q, p)
        ct2 = _synthetic_ciphertext(rng, s, m2, q, p)
        ct_sum = LWECiphertext(a=ct1.a + ct2.a, b=ct1.b + ct2.b, q=q, p=p)

        ph1 = (ct1.b - int(ct1.a @ s)) % q
        ph2 = (ct2.b - int(ct2.a @ s)) % q

        compressed = compress(ck, ct_sum, scheme=paillier_engine)
        raw = paillier_engine.decrypt(paillier_keys.private_key, compressed.ciphertext)

        assert raw % q == (ph1 + ph2) % q
        assert decode_phase(raw, q, p) == (m1 + m2) % p
        assert decrypt_compressed(paillier_keys.private_key, compressed, p) == (m1 + m2) % p


def test_c2_2_trivial_ciphertext(paillier_keys, paillier_engine):
    """a = 0 compresses to an encryption of b."""
    q, p, k = 1 << 11, 8, 4
    ck = bind_compression_key(
        LWESecretKey(s=np.array([1, 0, 1, 1]), modulus=q), paillier_keys, q, scheme=paillier_engine
    )
    ct = LWECiphertext(a=np.zeros(k, dtype=np.int64), b=5 * (q // p), q=q, p=p)

    compressed = compress(ck, ct, scheme=paillier_engine)
    assert paillier_engine.decrypt(paillier_keys.private_key, compressed.ciphertext) == 5 * (q // p)


# =============================================================================
# C3. Input Validation
# =============================================================================

def test_c3_1_mismatched_length_rejected(toy_compressed, toy_keys):
    """Key of length k against a ciphertext of length k + 1 fails loudly."""
    ct = toy_compressed.lwe.encrypt(toy_keys.lwe, 1)
    longer = LWECiphertext(a=np.append(ct.a, 1), b=ct.b, q=ct.q, p=ct.p)
    shorter = LWECiphertext(a=ct.a[:-1], b=ct.b, q=ct.q, p=ct.p)

    for bad in (longer, shorter):
        with pytest.raises(InvalidInputError):
            toy_compressed.compress(toy_keys.compression_key, bad)


def test_c3_2_mismatch_is_value_error(toy_keys):
    ct = LWECiphertext(a=np.zeros(3, dtype=np.int64), b=0, q=toy_keys.compression_key.q, p=8)
    with pytest.raises(ValueError):
        compress(toy_keys.compression_key, ct)


def test_c3_3_modulus_mismatch_rejected(toy_compressed, toy_keys):
    ct = toy_compressed.lwe.encrypt(toy_keys.lwe, 1)
    other = LWECiphertext(a=ct.a, b=ct.b, q=ct.q * 2, p=ct.p)
    with pytest.raises(InvalidInputError):
        compress(toy_keys.compression_key, other)


# =============================================================================
# C4. Parameter Validation
# =============================================================================

def test_c4_1_q_must_be_multiple_of_2p():
    validate_parameters(1 << 11, 8, 16, 512)
    with pytest.raises(ParameterError):
        validate_parameters(3 * (1 << 10), 1024, 16, 512)
    with pytest.raises(ParameterError):
        validate_parameters(1 << 11, 1 << 11, 16, 512)


def test_c4_2_paillier_modulus_too_small():
    # 64 * (2^20 - 1)^2 needs 46 bits
    with pytest.raises(ParameterError):
        validate_parameters(1 << 20, 4096, 64, 48)
    validate_parameters(1 << 20, 4096, 64, 64)


def test_c4_3_key_gen_fails_fast(toy_engine):
    ce = CompressedEngine(toy_engine, key_bits=24)
    with pytest.raises(ParameterError):
        ce.key_gen()


def test_c4_4_bind_rejects_small_paillier_key(paillier_engine):
    """Binding directly checks the phase bound against the key pair itself."""
    small_keys = paillier_engine.generate_key_pair(64)

    # 16 * (2^32 - 1)^2 needs 68 bits, a 64-bit modulus holds about 62
    q = 1 << 32
    with pytest.raises(ParameterError):
        bind_compression_key(LWESecretKey(s=np.zeros(16, dtype=np.int64), modulus=q), small_keys, q)

    q = 1 << 11
    ck = bind_compression_key(LWESecretKey(s=np.array([1, 0, q - 1, 1]), modulus=q), small_keys, q)
    assert len(ck) == 4


def test_c4_5_paillier_engine_and_key_bits_exclusive(toy_engine, paillier_engine):
    with pytest.raises(InvalidInputError):
        CompressedEngine(toy_engine, paillier=paillier_engine, key_bits=4096)

    assert CompressedEngine(toy_engine, paillier=paillier_engine).paillier is paillier_engine
    assert CompressedEngine(toy_engine, key_bits=1024).paillier.key_bits == 1024
    assert CompressedEngine(toy_engine).paillier.key_bits == PAILLIER_KEY_BITS


# =============================================================================
# C5. Threading and Size Accounting
# =============================================================================

def test_c5_1_threaded_compress_matches_serial(toy_compressed, toy_keys, paillier_engine):
    """Partial sums over worker threads give the same phase integer."""
    private_key = toy_keys.paillier.private_key
    ct = toy_compressed.lwe.encrypt(toy_keys.lwe, 6)

    serial = toy_compressed.compress(toy_keys.compression_key, ct)
    for workers in (2, 3, 16, 64):
        threaded = toy_compressed.compress(toy_keys.compression_key, ct, workers=workers)
        assert paillier_engine.decrypt(private_key, threaded.ciphertext) == \
            paillier_engine.decrypt(private_key, serial.ciphertext)
        assert toy_compressed.decrypt_compressed(private_key, threaded) == 6


def test_c5_2_compression_ratio(paillier_keys):
    q = 1 << 16
    ct = LWECiphertext(a=np.zeros(512, dtype=np.int64), b=0, q=q, p=16)
    compressed = CompressedCiphertext(ciphertext=paillier_keys.public_key.encrypt(0), q=q, p=16)

    assert ct.wire_size() == 513 * 16 // 8
    assert compressed.wire_size() == (paillier_keys.nsquare.bit_length() + 7) // 8
    assert compression_ratio(ct, compressed) > 1.0


# =============================================================================
# Decoding Arithmetic
# =============================================================================

@pytest.mark.parametrize("phase, expected", [
    (0, 0),
    (256 * 3, 3),
    (256 * 3 + 127, 3),
    (256 * 3 - 128, 3),
    (256 * 3 + 128, 4),
    (2047, 0),
    (-5, 0),
    (2048 * 7 + 256 * 2, 2),
])
def test_decode_phase_rounds_to_nearest(phase, expected):
    assert decode_phase(phase, 2048, 8) == expected


def test_switch_modulus_centered():
    Q, q = 1 << 14, 1 << 11
    out = switch_modulus([0, 1, Q - 1, Q - 2], Q, q)
    assert out.tolist() == [0, 1, q - 1, q - 2]
