# compfhe/protocols/equality.py
"""
CompFHE Equality Protocol

Encrypted equality test of two 32-bit unsigned integers over LWE.

Protocol:
    1. Split each value into limbs of floor(log2 p) bits, least
       significant first, and encrypt every limb under modulus p
    2. XOR corresponding limbs (equal limbs give 0)
    3. OR all XOR results together (any difference gives non-zero)
    4. Apply the LUT f(x) = [x == 0] to get one ciphertext of 1 / 0

The result is an ordinary LWE ciphertext and can be compressed with
compfhe.cryptography.compression.compress before transmission.

Usage:
    proto = EqualityProtocol(engine, sk)
    ct = proto.evaluate(proto.decompose(5), proto.decompose(5))
    assert engine.decrypt(sk, ct) == 1
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import reduce
from typing import List, Optional, Sequence

from ..cryptography.common import InvalidInputError, LWECiphertext, LWESecretKey
from ..engines.base import LUT, BinGate, LweEngine

logger = logging.getLogger(__name__)


VALUE_BITS: int = 32


# =============================================================================
# Limb Arithmetic
# =============================================================================

def limb_bits(p: int) -> int:
    """Largest power-of-two chunk width fitting in Z_p: floor(log2 p)."""
    if p < 2:
        raise InvalidInputError(f"Plaintext modulus must be >= 2, got {p}")
    return p.bit_length() - 1


def limb_count(bits: int, width: int = VALUE_BITS) -> int:
    """ceil(width / bits)"""
    return -(-width // bits)


def split_limbs(value: int, bits: int, width: int = VALUE_BITS) -> List[int]:
    """Plaintext limbs of value, least significant first."""
    if not 0 <= value < (1 << width):
        raise InvalidInputError(f"Value {value} is not a {width}-bit unsigned integer")
    mask = (1 << bits) - 1
    return [(value >> (i * bits)) & mask for i in range(limb_count(bits, width))]


def recompose(limbs: Sequence[int], bits: int) -> int:
    """Inverse of split_limbs: sum limb_i << (i * bits)."""
    return sum(int(limb) << (i * bits) for i, limb in enumerate(limbs))


# =============================================================================
# Protocol Steps
# =============================================================================

def decompose(
    engine: LweEngine,
    secret_key: LWESecretKey,
    value: int,
    bits: Optional[int] = None,
    width: int = VALUE_BITS,
) -> List[LWECiphertext]:
    """
    Encrypt value limb by limb.

    Args:
        engine: LWE engine
        secret_key: Encryption key
        value: Unsigned integer of at most `width` bits
        bits: Limb width (default: floor(log2 p))

    Returns:
        ceil(width / bits) ciphertexts, least significant limb first
    """
    p = engine.max_plaintext_space()
    bits = bits if bits is not None else limb_bits(p)
    if not 1 <= bits <= limb_bits(p):
        raise InvalidInputError(f"Limb width {bits} does not fit plaintext modulus {p}")
    return [engine.encrypt(secret_key, limb, p) for limb in split_limbs(value, bits, width)]


def equality_lut(engine: LweEngine, p: Optional[int] = None) -> LUT:
    """LUT of f(x) = 1 if x == 0 (mod p) else 0."""
    p = p if p is not None else engine.max_plaintext_space()
    return engine.generate_lut(lambda m, p1: int(m % p1 == 0), p)


def evaluate_equality(
    engine: LweEngine,
    cts_x: Sequence[LWECiphertext],
    cts_y: Sequence[LWECiphertext],
    lut: Optional[LUT] = None,
    workers: Optional[int] = None,
) -> LWECiphertext:
    """
    Encrypted [x == y] from two limb decompositions.

    Raises:
        InvalidInputError: If limb counts differ or are zero
    """
    if len(cts_x) != len(cts_y):
        raise InvalidInputError(f"Limb counts differ: {len(cts_x)} != {len(cts_y)}")
    if not cts_x:
        raise InvalidInputError("Equality needs at least one limb")

    lut = lut if lut is not None else equality_lut(engine, cts_x[0].p)

    def xor(pair):
        return engine.eval_bin_gate(BinGate.XOR, pair[0], pair[1])

    pairs = list(zip(cts_x, cts_y))
    if workers is not None and workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            diffs = list(pool.map(xor, pairs))
    else:
        diffs = [xor(pair) for pair in pairs]

    combined = reduce(lambda acc, d: engine.eval_bin_gate(BinGate.OR, acc, d), diffs)
    logger.debug("Equality evaluated over %d limbs", len(pairs))
    return engine.eval_func(combined, lut)


# =============================================================================
# Protocol Object
# =============================================================================

class EqualityProtocol:
    """
    Equality protocol bound to one engine and key, reusing a single LUT
    across queries.
    """

    def __init__(
        self,
        engine: LweEngine,
        secret_key: LWESecretKey,
        bits: Optional[int] = None,
    ):
        self.engine = engine
        self.secret_key = secret_key
        self.p = engine.max_plaintext_space()
        self.bits = bits if bits is not None else limb_bits(self.p)
        self.lut = equality_lut(engine, self.p)

    def decompose(self, value: int) -> List[LWECiphertext]:
        return decompose(self.engine, self.secret_key, value, bits=self.bits)

    def evaluate(
        self,
        cts_x: Sequence[LWECiphertext],
        cts_y: Sequence[LWECiphertext],
        workers: Optional[int] = None,
    ) -> LWECiphertext:
        return evaluate_equality(self.engine, cts_x, cts_y, lut=self.lut, workers=workers)

    def decrypt_limbs(self, cts: Sequence[LWECiphertext]) -> int:
        """Decrypt limbs and reassemble the integer."""
        return recompose([self.engine.decrypt(self.secret_key, ct) for ct in cts], self.bits)
