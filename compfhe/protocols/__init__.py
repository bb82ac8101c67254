# compfhe/protocols/__init__.py
"""
CompFHE Protocols

Higher-level protocols composing LWE gate / LUT evaluation:
  - equality.py: n-bit encrypted equality test
"""

from .equality import (
    VALUE_BITS,
    EqualityProtocol,
    decompose,
    equality_lut,
    evaluate_equality,
    limb_bits,
    limb_count,
    recompose,
    split_limbs,
)

__all__ = [
    "VALUE_BITS",
    "EqualityProtocol",
    "decompose",
    "equality_lut",
    "evaluate_equality",
    "limb_bits",
    "limb_count",
    "recompose",
    "split_limbs",
]
