# tests/conftest.py
"""
Shared fixtures.

Paillier keys use a 512-bit modulus to keep the suite fast; every preset
in LWE_PARAMS still fits its phase bound.
"""

import pytest

from compfhe.cryptography.core import CompressedEngine
from compfhe.engines.lwe import ReferenceLweEngine
from compfhe.engines.paillier import PaillierEngine

TEST_KEY_BITS = 512
TOY_SEED = b"compfhe-test-toy".ljust(32, b"\x00")
WIDE_SEED = b"compfhe-test-wide".ljust(32, b"\x00")


@pytest.fixture(scope="session")
def paillier_engine():
    return PaillierEngine(key_bits=TEST_KEY_BITS)


@pytest.fixture(scope="session")
def paillier_keys(paillier_engine):
    return paillier_engine.generate_key_pair()


@pytest.fixture(scope="module")
def toy_engine():
    return ReferenceLweEngine("TOY", seed=TOY_SEED)


@pytest.fixture(scope="module")
def toy_compressed(toy_engine, paillier_engine):
    return CompressedEngine(toy_engine, paillier=paillier_engine)


@pytest.fixture(scope="module")
def toy_keys(toy_compressed):
    keys = toy_compressed.key_gen()
    toy_compressed.lwe.bt_key_gen(keys.lwe)
    return keys
