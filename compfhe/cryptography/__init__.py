# compfhe/cryptography/__init__.py
"""
CompFHE Cryptography Module

Compressed decryption:
  - Compression key: Paillier encryption of the LWE secret key (mod q)
  - compress: LWE ciphertext -> E(b - <a, s>) without the secret key
  - decrypt_compressed: Paillier decryption, then rounding into Z_p
"""

# Common utilities and data structures
from .common import (
    # Constants
    PAILLIER_KEY_BITS,
    DEFAULT_PARAMS,
    LWE_PARAMS,
    GMPY2_AVAILABLE,
    get_params,
    # Exceptions
    CompFHEError,
    InvalidInputError,
    ParameterError,
    BootstrapKeyError,
    # Utilities
    derive_seed,
    CenteredBinomial,
    switch_modulus,
    decode_phase,
    max_phase,
    # Data structures
    LWESecretKey,
    LWECiphertext,
    PaillierKeyPair,
    CompressionKey,
    CompressedCiphertext,
    KeySet,
)

# Compression
from .compression import (
    compress,
    decrypt_compressed,
    compression_ratio,
)

# Core
from .core import (
    CompressedEngine,
    bind_compression_key,
    validate_parameters,
)

__all__ = [
    # Core
    "CompressedEngine",
    "bind_compression_key",
    "validate_parameters",
    # Compression
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
    # Exceptions
    "CompFHEError",
    "InvalidInputError",
    "ParameterError",
    "BootstrapKeyError",
    # Common
    "derive_seed",
    "CenteredBinomial",
    "switch_modulus",
    "decode_phase",
    "max_phase",
    "get_params",
    "PAILLIER_KEY_BITS",
    "DEFAULT_PARAMS",
    "LWE_PARAMS",
    # Flags
    "GMPY2_AVAILABLE",
]
