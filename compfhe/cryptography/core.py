# compfhe/cryptography/core.py
"""
CompFHE Core Components

CompressedEngine composes an LWE engine with a Paillier engine:

    key_gen()             LWE secret key + Paillier key pair + compression key
    compress()            LWE ciphertext -> one Paillier ciphertext
    decrypt_compressed()  Paillier ciphertext -> plaintext in Z_p

The compressing party needs only the compression key; the LWE secret key
and the Paillier private key stay with the decrypting party.
"""

from __future__ import annotations

import logging
from typing import Optional

from phe import paillier as phe_paillier

from ..engines.base import LweEngine
from ..engines.paillier import PaillierEngine
from .common import (
    PAILLIER_KEY_BITS,
    CompressedCiphertext,
    CompressionKey,
    InvalidInputError,
    KeySet,
    LWECiphertext,
    LWESecretKey,
    PaillierKeyPair,
    ParameterError,
    max_phase,
)
from .compression import compress, decrypt_compressed

logger = logging.getLogger(__name__)


# =============================================================================
# Parameter Validation
# =============================================================================

def validate_parameters(q: int, p: int, k: int, key_bits: int) -> None:
    """
    Check LWE and Paillier parameters fit together.

    Raises:
        ParameterError: If q is not a multiple of 2p, or the unreduced
            phase can exceed the Paillier plaintext capacity (N / 3)
    """
    if p < 2 or q % (2 * p) != 0:
        raise ParameterError(f"q={q} must be a multiple of 2p={2 * p}")

    # phe rejects plaintexts above N // 3; N has key_bits bits
    capacity_bits = key_bits - 2
    needed_bits = max_phase(k, q).bit_length()
    if needed_bits >= capacity_bits:
        raise ParameterError(
            f"Paillier modulus too small: phase needs {needed_bits} bits, "
            f"{key_bits}-bit key holds {capacity_bits}"
        )


# =============================================================================
# Compression Key Binding
# =============================================================================

def bind_compression_key(
    secret_key: LWESecretKey,
    key_pair: PaillierKeyPair,
    q: int,
    scheme: Optional[PaillierEngine] = None,
) -> CompressionKey:
    """
    Paillier-encrypt the secret key coefficients switched into Z_q.

    Raises:
        ParameterError: If the unreduced phase of a length-k ciphertext
            can exceed the key pair's plaintext capacity
    """
    bound = max_phase(len(secret_key), q)
    if bound > key_pair.public_key.max_int:
        raise ParameterError(
            f"Paillier modulus too small: phase bound {bound.bit_length()} bits, "
            f"key holds {key_pair.public_key.max_int.bit_length()}"
        )

    scheme = scheme or PaillierEngine()
    coeffs = secret_key.switched(q)
    ciphertexts = scheme.encrypt_vector(key_pair.public_key, coeffs.tolist())
    return CompressionKey(ciphertexts=tuple(ciphertexts), public_key=key_pair.public_key, q=q)


# =============================================================================
# Compressed Engine
# =============================================================================

class CompressedEngine:
    """
    LWE engine plus Paillier compression.

    Args:
        lwe: LWE engine used for keys, encryption and evaluation
        paillier: Paillier engine (default: PaillierEngine(key_bits))
        key_bits: Paillier modulus bit length (default: PAILLIER_KEY_BITS);
            only when no paillier engine is given, which carries its own

    Raises:
        InvalidInputError: If both paillier and key_bits are given
    """

    def __init__(
        self,
        lwe: LweEngine,
        paillier: Optional[PaillierEngine] = None,
        key_bits: Optional[int] = None,
    ):
        if paillier is not None and key_bits is not None:
            raise InvalidInputError(
                "Pass key_bits or a paillier engine, not both; "
                f"the engine already uses {paillier.key_bits}-bit keys"
            )
        self.lwe = lwe
        self.paillier = paillier or PaillierEngine(
            key_bits=key_bits if key_bits is not None else PAILLIER_KEY_BITS
        )

    @property
    def q(self) -> int:
        return self.lwe.q

    def _bind(self, secret_key: LWESecretKey) -> KeySet:
        p = self.lwe.max_plaintext_space()
        validate_parameters(self.q, p, len(secret_key), self.paillier.key_bits)

        key_pair = self.paillier.generate_key_pair()
        ck = bind_compression_key(secret_key, key_pair, self.q, scheme=self.paillier)

        logger.info(
            "Key set generated (k=%d, q=%d, p=%d, paillier=%d bits)",
            len(secret_key), self.q, p, self.paillier.key_bits,
        )
        return KeySet(lwe=secret_key, paillier=key_pair, compression_key=ck)

    def key_gen(self) -> KeySet:
        """Key set over the main LWE secret key."""
        return self._bind(self.lwe.key_gen())

    def key_gen_n(self) -> KeySet:
        """Key set over a bootstrapping-dimension secret key."""
        return self._bind(self.lwe.key_gen_n())

    def compress(
        self,
        compression_key: CompressionKey,
        ciphertext: LWECiphertext,
        workers: Optional[int] = None,
    ) -> CompressedCiphertext:
        return compress(compression_key, ciphertext, scheme=self.paillier, workers=workers)

    def decrypt_compressed(
        self,
        private_key: phe_paillier.PaillierPrivateKey,
        compressed: CompressedCiphertext,
        p: Optional[int] = None,
    ) -> int:
        """Decode into Z_p; p defaults to the one the ciphertext was encrypted under."""
        return decrypt_compressed(private_key, compressed, p, scheme=self.paillier)
