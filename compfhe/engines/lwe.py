# compfhe/engines/lwe.py
"""
CompFHE Reference LWE Engine

numpy implementation of the LweEngine interface.

Encryption:
    a <- U(Z_q^k),  e <- CBD(eta)
    b  = <a, s mod q> + m * (q / p) + e   (mod q)

Gates and LUTs use a simulated bootstrap: bt_key_gen() hands the engine
the refresh key, and each gate / LUT output is re-encrypted fresh under
it. Noise therefore never accumulates, which is what a real bootstrapped
engine guarantees too. This engine is a test and reference collaborator;
it offers no security against whoever holds it.

Randomness is derived from a master seed via HKDF, one stream per
purpose, so a fixed seed reproduces keys and ciphertexts exactly.
"""

from __future__ import annotations

import logging
import secrets
from typing import Dict, Optional, Sequence, Union

import numpy as np

from ..cryptography.common import (
    derive_seed,
    CenteredBinomial,
    DEFAULT_PARAMS,
    InvalidInputError,
    LWECiphertext,
    LWESecretKey,
    BootstrapKeyError,
    ParameterError,
    _sha256,
    decode_phase,
    get_params,
)
from .base import BinGate, LweEngine

logger = logging.getLogger(__name__)


_GATES = {
    BinGate.AND: lambda x, y: x & y,
    BinGate.OR: lambda x, y: x | y,
    BinGate.XOR: lambda x, y: x ^ y,
    BinGate.NAND: lambda x, y: ~(x & y),
    BinGate.NOR: lambda x, y: ~(x | y),
    BinGate.XNOR: lambda x, y: ~(x ^ y),
}


class ReferenceLweEngine(LweEngine):
    """
    LWE engine over a named parameter preset (see LWE_PARAMS).

    Args:
        params: Preset name or explicit parameter dict
        seed: Master seed (default: fresh 32 random bytes)
    """

    def __init__(
        self,
        params: Union[str, Dict[str, int]] = DEFAULT_PARAMS,
        seed: Optional[bytes] = None,
    ):
        cfg = get_params(params) if isinstance(params, str) else dict(params)
        self.n = int(cfg["n"])
        self.N = int(cfg["N"])
        self._q = int(cfg["q"])
        self._Q = int(cfg["Q"])
        self.p = int(cfg["p"])
        self.eta = int(cfg["eta"])

        if self.p < 2 or self._q % self.p != 0:
            raise ParameterError(f"Plaintext modulus {self.p} must divide q={self._q}")
        if 2 * self.eta >= self._q // (2 * self.p):
            raise ParameterError(
                f"Noise bound eta={self.eta} exceeds decoding tolerance q/(2p)={self._q // (2 * self.p)}"
            )

        self._cbd = CenteredBinomial(eta=self.eta)

        self.master_seed = seed if seed is not None else secrets.token_bytes(32)
        salt = self._compute_salt()
        self._rng_key = np.random.RandomState(derive_seed(self.master_seed, salt, "secret_s"))
        self._rng_enc = np.random.RandomState(derive_seed(self.master_seed, salt, "encrypt"))

        self._refresh_key: Optional[LWESecretKey] = None

    def _compute_salt(self) -> bytes:
        s = f"reference-lwe,n={self.n},N={self.N},q={self._q},Q={self._Q},p={self.p},eta={self.eta}"
        return _sha256(s.encode())

    # -------------------------------------------------------------------------
    # Parameters
    # -------------------------------------------------------------------------

    @property
    def q(self) -> int:
        return self._q

    @property
    def key_modulus(self) -> int:
        return self._Q

    def max_plaintext_space(self) -> int:
        return self.p

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def _ternary_key(self, k: int) -> LWESecretKey:
        s = self._rng_key.randint(-1, 2, size=k).astype(np.int64) % self._Q
        return LWESecretKey(s=s, modulus=self._Q)

    def key_gen(self) -> LWESecretKey:
        return self._ternary_key(self.n)

    def key_gen_n(self) -> LWESecretKey:
        return self._ternary_key(self.N)

    def bt_key_gen(self, secret_key: LWESecretKey) -> None:
        self._refresh_key = secret_key
        logger.info("Bootstrapping keys generated (k=%d)", len(secret_key))

    # -------------------------------------------------------------------------
    # Encryption
    # -------------------------------------------------------------------------

    def _check_p(self, p: int) -> int:
        if p < 2 or self._q % p != 0:
            raise InvalidInputError(f"Plaintext modulus {p} must divide q={self._q}")
        return p

    def encrypt(
        self,
        secret_key: LWESecretKey,
        m: int,
        p: Optional[int] = None,
    ) -> LWECiphertext:
        p = self._check_p(p if p is not None else self.p)
        q = self._q

        a = self._rng_enc.randint(0, q, size=len(secret_key), dtype=np.int64)
        e = int(self._cbd.sample_vector(1, rng=self._rng_enc)[0])
        b = (int(a @ secret_key.switched(q)) + (int(m) % p) * (q // p) + e) % q

        return LWECiphertext(a=a, b=b, q=q, p=p)

    def phase(self, secret_key: LWESecretKey, ct: LWECiphertext) -> int:
        """Compute b - <a, s> mod q."""
        if len(secret_key) != len(ct):
            raise InvalidInputError(
                f"Secret key length {len(secret_key)} != ciphertext length {len(ct)}"
            )
        return (ct.b - int(ct.a @ secret_key.switched(ct.q))) % ct.q

    def decrypt(
        self,
        secret_key: LWESecretKey,
        ct: LWECiphertext,
        p: Optional[int] = None,
    ) -> int:
        return decode_phase(self.phase(secret_key, ct), ct.q, p if p is not None else ct.p)

    # -------------------------------------------------------------------------
    # Bootstrapped Evaluation
    # -------------------------------------------------------------------------

    def _refresh(self, ct: LWECiphertext) -> int:
        if self._refresh_key is None:
            raise BootstrapKeyError()
        return self.decrypt(self._refresh_key, ct)

    def eval_bin_gate(
        self,
        gate: BinGate,
        ct1: LWECiphertext,
        ct2: LWECiphertext,
    ) -> LWECiphertext:
        if ct1.p != ct2.p:
            raise InvalidInputError(f"Plaintext moduli differ: {ct1.p} != {ct2.p}")
        p = ct1.p
        x = self._refresh(ct1)
        y = self._refresh(ct2)

        mask = (1 << (p - 1).bit_length()) - 1
        out = (_GATES[gate](x, y) & mask) % p
        logger.debug("%s gate evaluated", gate.name)
        return self.encrypt(self._refresh_key, out, p)

    def eval_func(self, ct: LWECiphertext, lut: Sequence[int]) -> LWECiphertext:
        if len(lut) != ct.p:
            raise InvalidInputError(f"LUT size {len(lut)} != plaintext modulus {ct.p}")
        m = self._refresh(ct)
        return self.encrypt(self._refresh_key, int(lut[m]), ct.p)
