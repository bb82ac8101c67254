# compfhe/engines/paillier.py
"""
CompFHE Paillier Engine

Thin capability layer over phe (python-paillier).

Homomorphic operations (ciphertexts in Z_{N^2}):
    add(E(x), E(y))          = E(x) * E(y)  mod N^2   -> E(x + y)
    scalar_multiply(E(x), k) = E(x) ^ k     mod N^2   -> E(k * x)
    add_plain(E(x), y)       = E(x) * g^y   mod N^2   -> E(x + y)

phe draws encryption and key-generation randomness from the system
CSPRNG, and uses gmpy2 for modular exponentiation when it is installed.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from phe import paillier

from ..cryptography.common import PAILLIER_KEY_BITS, PaillierKeyPair

logger = logging.getLogger(__name__)


class PaillierEngine:
    """
    Paillier key generation and arithmetic.

    Args:
        key_bits: Modulus bit length N used by generate_key_pair()
    """

    def __init__(self, key_bits: int = PAILLIER_KEY_BITS):
        self.key_bits = int(key_bits)

    def generate_key_pair(self, key_bits: Optional[int] = None) -> PaillierKeyPair:
        bits = int(key_bits if key_bits is not None else self.key_bits)
        public_key, private_key = paillier.generate_paillier_keypair(n_length=bits)
        logger.info("Generated %d-bit Paillier key pair", bits)
        return PaillierKeyPair(public_key=public_key, private_key=private_key)

    @staticmethod
    def encrypt(public_key: paillier.PaillierPublicKey, m: int) -> paillier.EncryptedNumber:
        return public_key.encrypt(int(m))

    @staticmethod
    def encrypt_vector(
        public_key: paillier.PaillierPublicKey,
        values: Iterable[int],
    ) -> List[paillier.EncryptedNumber]:
        """Encrypt each value independently."""
        return [public_key.encrypt(int(v)) for v in values]

    @staticmethod
    def decrypt(private_key: paillier.PaillierPrivateKey, c: paillier.EncryptedNumber) -> int:
        return int(private_key.decrypt(c))

    @staticmethod
    def add(
        c1: paillier.EncryptedNumber,
        c2: paillier.EncryptedNumber,
    ) -> paillier.EncryptedNumber:
        return c1 + c2

    @staticmethod
    def scalar_multiply(c: paillier.EncryptedNumber, k: int) -> paillier.EncryptedNumber:
        return c * int(k)

    @staticmethod
    def add_plain(c: paillier.EncryptedNumber, m: int) -> paillier.EncryptedNumber:
        return c + int(m)
