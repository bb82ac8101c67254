# compfhe/engines/base.py
"""
CompFHE Engines: Abstract LWE Engine Interface

The compression layer does not implement LWE itself. It consumes an
engine exposing key generation, encryption, decryption, binary gates and
lookup-table (LUT) evaluation, and holds it by composition.

Implementations:
    - ReferenceLweEngine: numpy engine with simulated bootstrapping
      (testing and reference use)

Usage:
    engine = ReferenceLweEngine("TOY", seed=b"...")
    sk = engine.key_gen()
    engine.bt_key_gen(sk)

    ct = engine.encrypt(sk, 3)
    lut = engine.generate_lut(lambda m, p: (m * m) % p, engine.max_plaintext_space())
    assert engine.decrypt(sk, engine.eval_func(ct, lut)) == 9 % engine.max_plaintext_space()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Callable, Optional, Sequence, Tuple

from ..cryptography.common import LWECiphertext, LWESecretKey


# =============================================================================
# Enums
# =============================================================================

class BinGate(Enum):
    """Binary gates, applied bitwise to plaintexts in Z_p."""
    AND = auto()
    OR = auto()
    XOR = auto()
    NAND = auto()
    NOR = auto()
    XNOR = auto()


LUT = Tuple[int, ...]
LUTFunction = Callable[[int, int], int]


# =============================================================================
# Abstract Engine
# =============================================================================

class LweEngine(ABC):
    """
    Abstract LWE-FHE engine.

    All methods are synchronous and may be called from worker threads
    once keys are generated.
    """

    @property
    @abstractmethod
    def q(self) -> int:
        """Ciphertext modulus."""
        pass

    @property
    @abstractmethod
    def key_modulus(self) -> int:
        """Modulus the secret key coefficients are stored in."""
        pass

    @abstractmethod
    def max_plaintext_space(self) -> int:
        """Largest plaintext modulus p supported for LUT evaluation."""
        pass

    @abstractmethod
    def key_gen(self) -> LWESecretKey:
        """Generate a secret key for the main LWE scheme."""
        pass

    @abstractmethod
    def key_gen_n(self) -> LWESecretKey:
        """Generate a secret key of the bootstrapping dimension."""
        pass

    @abstractmethod
    def bt_key_gen(self, secret_key: LWESecretKey) -> None:
        """Generate bootstrapping (refresh and switching) keys."""
        pass

    @abstractmethod
    def encrypt(
        self,
        secret_key: LWESecretKey,
        m: int,
        p: Optional[int] = None,
    ) -> LWECiphertext:
        pass

    @abstractmethod
    def decrypt(
        self,
        secret_key: LWESecretKey,
        ct: LWECiphertext,
        p: Optional[int] = None,
    ) -> int:
        pass

    @abstractmethod
    def eval_bin_gate(
        self,
        gate: BinGate,
        ct1: LWECiphertext,
        ct2: LWECiphertext,
    ) -> LWECiphertext:
        pass

    @abstractmethod
    def eval_func(self, ct: LWECiphertext, lut: Sequence[int]) -> LWECiphertext:
        """Evaluate a LUT homomorphically."""
        pass

    def generate_lut(self, fn: LUTFunction, p: int) -> LUT:
        """
        Tabulate fn(m, p) for every m in Z_p.

        Outputs are reduced mod p.
        """
        return tuple(int(fn(m, p)) % p for m in range(p))
