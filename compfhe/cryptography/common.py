# compfhe/cryptography/common.py
"""
CompFHE Common Components

Shared constants, parameter presets, exceptions and data structures for
compressed decryption of LWE ciphertexts under Paillier.

Conventions:
  - LWE ciphertext (a, b) with b = <a, s> + m * (q / p) + e  (mod q)
  - Phase: b - <a, s> mod q
  - Secret keys are stored mod a key modulus Q and switched into Z_q
    (centered lift) wherever they meet a ciphertext
"""

from __future__ import annotations

import hashlib
import hmac
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np
from phe import paillier


# =============================================================================
# Constants
# =============================================================================

PAILLIER_KEY_BITS: int = 2048

DEFAULT_PARAMS: str = "TOY"

# n: LWE dimension, N: bootstrapping key dimension, q: ciphertext modulus,
# Q: key modulus, p: maximal plaintext space, eta: noise parameter
LWE_PARAMS: Dict[str, Dict[str, int]] = {
    "TOY": {"n": 16, "N": 32, "q": 1 << 11, "Q": 1 << 14, "p": 8, "eta": 2},
    "WIDE": {"n": 64, "N": 128, "q": 1 << 20, "Q": 1 << 27, "p": 4096, "eta": 2},
    "DEFAULT": {"n": 512, "N": 1024, "q": 1 << 16, "Q": 1 << 27, "p": 16, "eta": 2},
}


def get_params(name: str) -> Dict[str, int]:
    """
    Get a copy of a named LWE parameter preset.

    Raises:
        ValueError: If name is unknown
    """
    if name not in LWE_PARAMS:
        raise ValueError(f"Unknown parameter set: {name!r}. Valid: {list(LWE_PARAMS)}")
    return dict(LWE_PARAMS[name])


# =============================================================================
# Exceptions
# =============================================================================

class CompFHEError(Exception):
    """Base compfhe error."""
    pass


class InvalidInputError(CompFHEError, ValueError):
    """Operation called with inputs that violate its preconditions."""
    pass


class ParameterError(CompFHEError):
    """LWE and Paillier parameters cannot support compressed decryption."""
    pass


class BootstrapKeyError(CompFHEError):
    """Gate or LUT evaluation attempted without bootstrapping keys."""
    def __init__(self):
        super().__init__("Bootstrapping keys not generated; call bt_key_gen() first")


# =============================================================================
# Utility Functions
# =============================================================================

def _sha256(*chunks: bytes) -> bytes:
    """Compute SHA-256 hash of concatenated inputs."""
    h = hashlib.sha256()
    for c in chunks:
        h.update(c)
    return h.digest()


def switch_modulus(values: Any, from_q: int, to_q: int) -> np.ndarray:
    """
    Switch integer coefficients from Z_{from_q} to Z_{to_q}.

    Coefficients are centered-lifted into (-from_q/2, from_q/2] first, so
    small signed values (ternary secret keys) keep their meaning.
    """
    x = np.asarray(values, dtype=np.int64) % from_q
    centered = np.where(x > from_q // 2, x - from_q, x)
    return centered % to_q


def decode_phase(phase: int, q: int, p: int) -> int:
    """
    Round an LWE phase from Z_q to the nearest plaintext in Z_p.

    Adds the offset q / (2p) before the truncating division so values
    within noise tolerance of a multiple of q / p round to it.
    """
    r = int(phase) % q
    r = (r + q // (2 * p)) % q
    return (p * r) // q


def max_phase(k: int, q: int) -> int:
    """Largest integer the unreduced compressed phase can take."""
    return k * (q - 1) ** 2 + (q - 1)


def coefficient_bits(q: int) -> int:
    """Bits needed to store one element of Z_q."""
    return max(1, math.ceil(math.log2(q)))


# =============================================================================
# Seed Derivation
# =============================================================================

def derive_seed(master_seed: bytes, salt: bytes, label: str) -> int:
    """
    32-bit RNG seed for one purpose, HKDF-SHA256 (RFC 5869) style.

    PRK = HMAC(salt, master_seed); seed = HMAC(PRK, label || 0x01)[:4]
    """
    prk = hmac.new(salt, master_seed, hashlib.sha256).digest()
    okm = hmac.new(prk, label.encode() + b"\x01", hashlib.sha256).digest()
    return int.from_bytes(okm[:4], "big")


# =============================================================================
# Centered Binomial Distribution
# =============================================================================

class CenteredBinomial:
    """
    Centered binomial distribution sampler.

    Samples from: sum_{i=1}^{eta} b_i - sum_{i=1}^{eta} b'_i
    where b_i, b'_i are uniform in {0, 1}.

    Range: [-eta, eta]
    """

    def __init__(self, eta: int = 2):
        if eta <= 0:
            raise ValueError("Parameter eta must be positive")
        self.eta = int(eta)

    def sample_vector(self, n: int, rng: np.random.RandomState) -> np.ndarray:
        """Sample a 1D vector."""
        bits = rng.randint(0, 2, size=(n, 2 * self.eta)).astype(np.int8)
        a = bits[:, :self.eta].sum(axis=-1)
        b = bits[:, self.eta:].sum(axis=-1)
        return (a - b).astype(np.int64)


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class LWESecretKey:
    """LWE secret key, coefficients stored mod the key modulus."""
    s: np.ndarray   # (k,) vector, int64
    modulus: int    # key modulus Q

    def __len__(self) -> int:
        return len(self.s)

    def switched(self, q: int) -> np.ndarray:
        """Coefficients switched into Z_q."""
        return switch_modulus(self.s, self.modulus, q)


@dataclass(frozen=True, eq=False)
class LWECiphertext:
    """
    LWE ciphertext: (a, b) over Z_q, encrypting a plaintext in Z_p.

    Immutable: fields cannot be rebound and the coefficient vector is
    read-only.
    """
    a: np.ndarray   # (k,) vector, int64
    b: int
    q: int
    p: int

    def __post_init__(self):
        a = np.array(self.a, dtype=np.int64) % self.q
        a.setflags(write=False)
        object.__setattr__(self, "a", a)
        object.__setattr__(self, "b", int(self.b) % self.q)

    def __len__(self) -> int:
        return len(self.a)

    def wire_size(self) -> int:
        """Theoretical size in bytes: (k + 1) coefficients of ceil(log2 q) bits."""
        return ((len(self.a) + 1) * coefficient_bits(self.q) + 7) // 8


@dataclass
class PaillierKeyPair:
    """Paillier key pair. The private key stays with the decrypting party."""
    public_key: paillier.PaillierPublicKey
    private_key: paillier.PaillierPrivateKey

    @property
    def n(self) -> int:
        return self.public_key.n

    @property
    def nsquare(self) -> int:
        return self.public_key.nsquare


@dataclass(frozen=True)
class CompressionKey:
    """
    Paillier encryptions of the LWE secret key coefficients in Z_q.

    Can be published: it allows compressing ciphertexts without access
    to the LWE secret key.
    """
    ciphertexts: Tuple[paillier.EncryptedNumber, ...]
    public_key: paillier.PaillierPublicKey
    q: int

    def __len__(self) -> int:
        return len(self.ciphertexts)


@dataclass(frozen=True)
class CompressedCiphertext:
    """
    Single Paillier ciphertext of the LWE phase b - <a, s>.

    Carries the source ciphertext's q and p so it decodes on its own.
    """
    ciphertext: paillier.EncryptedNumber
    q: int
    p: int

    def wire_size(self) -> int:
        """Size in bytes of one element of Z_{N^2}."""
        return (self.ciphertext.public_key.nsquare.bit_length() + 7) // 8


@dataclass
class KeySet:
    """
    Keys issued together by one key generation.

    lwe and paillier.private_key stay with the decrypting party;
    compression_key (with the Paillier public key) may be distributed.
    """
    lwe: LWESecretKey
    paillier: PaillierKeyPair
    compression_key: CompressionKey

    def public_material(self) -> Tuple[CompressionKey, paillier.PaillierPublicKey]:
        """What an untrusted compressing party receives."""
        return self.compression_key, self.paillier.public_key


# =============================================================================
# Optional Accelerator Detection
# =============================================================================

try:
    import gmpy2  # noqa: F401  (picked up by phe automatically)
    GMPY2_AVAILABLE = True
except ImportError:
    GMPY2_AVAILABLE = False
