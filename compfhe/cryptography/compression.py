# compfhe/cryptography/compression.py
"""
CompFHE Ciphertext Compression

Turns an LWE ciphertext (k + 1 coefficients mod q) into one Paillier
ciphertext of its phase, computed from the compression key alone.

Compression:
    CK = (E(s_1), ..., E(s_k))            Paillier encryptions of s mod q
    C  = prod_i E(s_i)^(-a_i mod q) * g^b  mod N^2
       = E(b + sum_i (-a_i) s_i)
       = E(b - <a, s>)                     (an integer congruent to the phase)

Decoding:
    phase = D(C) mod q
    m     = floor(p * ((phase + q / 2p) mod q) / q)

The unreduced phase is at most k (q - 1)^2 + q - 1; key generation
checks it stays below the Paillier plaintext capacity so decryption
never wraps mod N.

Decoding cannot detect noise overflow: a phase outside q / 2p of the
intended multiple of q / p decodes to a wrong plaintext.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import reduce
from typing import List, Optional, Sequence

from phe import paillier

from ..engines.paillier import PaillierEngine
from .common import (
    CompressedCiphertext,
    CompressionKey,
    InvalidInputError,
    LWECiphertext,
    decode_phase,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Compression
# =============================================================================

def _inner_product(
    scheme: PaillierEngine,
    keys: Sequence[paillier.EncryptedNumber],
    scalars: Sequence[int],
) -> paillier.EncryptedNumber:
    """E(sum_i scalars_i * s_i) from E(s_i)."""
    terms = [scheme.scalar_multiply(c, k) for c, k in zip(keys, scalars)]
    return reduce(scheme.add, terms)


def _chunks(k: int, workers: int) -> List[range]:
    size = -(-k // workers)
    return [range(i, min(i + size, k)) for i in range(0, k, size)]


def compress(
    compression_key: CompressionKey,
    ciphertext: LWECiphertext,
    scheme: Optional[PaillierEngine] = None,
    workers: Optional[int] = None,
) -> CompressedCiphertext:
    """
    Compress an LWE ciphertext into a single Paillier ciphertext.

    Needs only the compression key (which carries the Paillier public
    key), never the LWE secret key.

    Args:
        compression_key: Encrypted secret key, same length as ciphertext.a
        ciphertext: LWE ciphertext (a, b) over Z_q
        scheme: Paillier capability (default: PaillierEngine())
        workers: Threads for the per-coefficient products (default: 1)

    Returns:
        CompressedCiphertext encrypting b - <a, s>

    Raises:
        InvalidInputError: Length or modulus mismatch
    """
    k = len(ciphertext.a)
    if len(compression_key) != k:
        raise InvalidInputError(
            f"Compression key length {len(compression_key)} != ciphertext length {k}"
        )
    if k == 0:
        raise InvalidInputError("Cannot compress a ciphertext with an empty a-vector")
    if compression_key.q != ciphertext.q:
        raise InvalidInputError(
            f"Compression key modulus {compression_key.q} != ciphertext modulus {ciphertext.q}"
        )

    scheme = scheme or PaillierEngine()
    q = ciphertext.q
    neg_a = [(-int(x)) % q for x in ciphertext.a]
    keys = compression_key.ciphertexts

    if workers is None or workers <= 1 or k == 1:
        acc = _inner_product(scheme, keys, neg_a)
    else:
        parts = _chunks(k, workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(_inner_product, scheme, keys[r.start:r.stop], neg_a[r.start:r.stop])
                for r in parts
            ]
            # join: every partial sum is in before the reduction
            acc = reduce(scheme.add, [f.result() for f in futures])

    result = scheme.add_plain(acc, ciphertext.b)
    logger.debug("Compressed LWE ciphertext (k=%d, q=%d)", k, q)
    return CompressedCiphertext(ciphertext=result, q=q, p=ciphertext.p)


# =============================================================================
# Decoding
# =============================================================================

def decrypt_compressed(
    private_key: paillier.PaillierPrivateKey,
    compressed: CompressedCiphertext,
    p: Optional[int] = None,
    scheme: Optional[PaillierEngine] = None,
) -> int:
    """
    Decrypt a compressed ciphertext and round it into Z_p.

    p defaults to the plaintext modulus the source ciphertext was
    encrypted under.

    Returns:
        Plaintext in [0, p); wrong (not an error) if the LWE noise was
        outside tolerance
    """
    scheme = scheme or PaillierEngine()
    phase = scheme.decrypt(private_key, compressed.ciphertext)
    return decode_phase(phase, compressed.q, p if p is not None else compressed.p)


# =============================================================================
# Size Accounting
# =============================================================================

def compression_ratio(ciphertext: LWECiphertext, compressed: CompressedCiphertext) -> float:
    """Original size divided by compressed size."""
    return ciphertext.wire_size() / compressed.wire_size()
