# compfhe/engines/__init__.py
"""
CompFHE Engines

Capabilities the compression layer is composed with:
  - LweEngine: LWE keys, encryption, gates, LUT evaluation
  - PaillierEngine: Paillier keys and additive homomorphism (phe)
"""

from .base import LUT, BinGate, LweEngine
from .lwe import ReferenceLweEngine
from .paillier import PaillierEngine

__all__ = [
    "LUT",
    "BinGate",
    "LweEngine",
    "ReferenceLweEngine",
    "PaillierEngine",
]
