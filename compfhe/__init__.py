# compfhe/__init__.py
"""
CompFHE: Compressed Decryption for LWE-based FHE

Shrinks LWE ciphertexts into a single Paillier ciphertext without access
to the LWE secret key.
- Compression key: Paillier-encrypted LWE secret key
- Homomorphic LWE phase b - <a, s> under Paillier
- Rounding decoder back into the plaintext space Z_p
- Encrypted 32-bit equality protocol (XOR / OR gates + LUT)

Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │  compfhe                                                │
    │  ├── cryptography/     # Compression core               │
    │  │   ├── common.py     # Params, errors, data types     │
    │  │   ├── compression.py # compress / decrypt_compressed │
    │  │   └── core.py       # CompressedEngine, key binding  │
    │  │                                                      │
    │  ├── engines/          # Capabilities                   │
    │  │   ├── base.py       # LweEngine interface            │
    │  │   ├── lwe.py        # ReferenceLweEngine (numpy)     │
    │  │   └── paillier.py   # PaillierEngine (phe)           │
    │  │                                                      │
    │  └── protocols/                                         │
    │      └── equality.py   # n-bit equality                 │
    └─────────────────────────────────────────────────────────┘
"""

__version__ = "0.1.0"

# =============================================================================
# Core Cryptography
# =============================================================================

from .cryptography import (
    PAILLIER_KEY_BITS,
    LWE_PARAMS,
    GMPY2_AVAILABLE,
    get_params,
    CompFHEError,
    InvalidInputError,
    ParameterError,
    BootstrapKeyError,
    LWESecretKey,
    LWECiphertext,
    PaillierKeyPair,
    CompressionKey,
    CompressedCiphertext,
    KeySet,
    CompressedEngine,
    compress,
    decrypt_compressed,
    compression_ratio,
)

# =============================================================================
# Engines
# =============================================================================

from .engines import (
    BinGate,
    LweEngine,
    ReferenceLweEngine,
    PaillierEngine,
)

# =============================================================================
# Protocols
# =============================================================================

from .protocols import (
    EqualityProtocol,
    decompose,
    evaluate_equality,
    equality_lut,
    recompose,
)

# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "__version__",
    # Core
    "CompressedEngine",
    "compress",
    "decrypt_compressed",
    "compression_ratio",
    # Data structures
    "LWESecretKey",
    "LWECiphertext",
    "PaillierKeyPair",
    "CompressionKey",
    "CompressedCiphertext",
    "KeySet",
    # Engines
    "BinGate",
    "LweEngine",
    "ReferenceLweEngine",
    "PaillierEngine",
    # Protocols
    "EqualityProtocol",
    "decompose",
    "evaluate_equality",
    "equality_lut",
    "recompose",
    # Exceptions
    "CompFHEError",
    "InvalidInputError",
    "ParameterError",
    "BootstrapKeyError",
    # Constants
    "PAILLIER_KEY_BITS",
    "LWE_PARAMS",
    "get_params",
    # Flags
    "GMPY2_AVAILABLE",
]


def status() -> dict:
    """
    Get availability status of optional components.

    Example:
        >>> import compfhe
        >>> compfhe.status()
        {'version': '0.1.0', 'core': True, 'gmpy2': False}
    """
    return {
        'version': __version__,
        'core': True,
        'gmpy2': GMPY2_AVAILABLE,
    }
