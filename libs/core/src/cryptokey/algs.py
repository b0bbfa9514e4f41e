from __future__ import annotations
"""Algorithm identifiers and their primitive parameters.

Each supported signing scheme is described by one ``AlgParams`` record: the
hash bound to it, the curve (ECDSA only), and the fixed byte widths of the
signature, the public ``x`` field and the private ``d`` field of a key
record. Everything downstream sizes buffers from these records and nothing
else.
"""
import os
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Tuple

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

from .errors import UnsupportedAlgorithmError

DEFAULT_ALG_ENV = "CRYPTOKEY_DEFAULT_ALG"


class Genus(str, Enum):
    ECDSA = "ECDSA"
    EDDSA = "EdDSA"


class Alg(str, Enum):
    ES224 = "ES224"
    ES256 = "ES256"
    ES384 = "ES384"
    ES512 = "ES512"
    ED25519 = "Ed25519"
    ED25519PH = "Ed25519ph"

    @classmethod
    def parse(cls, value: "Alg | str") -> "Alg":
        """Return the ``Alg`` for *value*; names are case sensitive."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedAlgorithmError(f"unsupported alg: {value!r}") from None


_HASHES = {
    "SHA-224": hashes.SHA224,
    "SHA-256": hashes.SHA256,
    "SHA-384": hashes.SHA384,
    "SHA-512": hashes.SHA512,
}

_CURVES = {
    "P-224": ec.SECP224R1,
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
}


@dataclass(frozen=True)
class AlgParams:
    alg: Alg
    genus: Genus
    hash_name: str      # key into _HASHES
    hash_size: int      # digest bytes
    curve_name: str
    sig_size: int       # R || S for ECDSA
    x_size: int         # X || Y for ECDSA, raw public key for EdDSA
    d_size: int

    @property
    def coordinate_size(self) -> int:
        return self.x_size // 2

    def hash_algorithm(self) -> hashes.HashAlgorithm:
        return _HASHES[self.hash_name]()

    def curve(self) -> ec.EllipticCurve:
        """The ``cryptography`` curve instance; ECDSA algorithms only."""
        if self.genus is not Genus.ECDSA:
            raise UnsupportedAlgorithmError(f"alg {self.alg.value} has no ECDSA curve")
        return _CURVES[self.curve_name]()

    def digest(self, msg: bytes) -> bytes:
        h = hashes.Hash(self.hash_algorithm())
        h.update(msg)
        return h.finalize()

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["alg"] = self.alg.value
        d["genus"] = self.genus.value
        return d


BUILTIN_ALGS: Tuple[AlgParams, ...] = (
    AlgParams(Alg.ES224, Genus.ECDSA, "SHA-224", 28, "P-224", sig_size=56, x_size=56, d_size=28),
    AlgParams(Alg.ES256, Genus.ECDSA, "SHA-256", 32, "P-256", sig_size=64, x_size=64, d_size=32),
    AlgParams(Alg.ES384, Genus.ECDSA, "SHA-384", 48, "P-384", sig_size=96, x_size=96, d_size=48),
    # P-521 field elements are 66 bytes, so ES512 sizes are not powers of two.
    AlgParams(Alg.ES512, Genus.ECDSA, "SHA-512", 64, "P-521", sig_size=132, x_size=132, d_size=66),
    AlgParams(Alg.ED25519, Genus.EDDSA, "SHA-512", 64, "Ed25519", sig_size=64, x_size=32, d_size=32),
    AlgParams(Alg.ED25519PH, Genus.EDDSA, "SHA-512", 64, "Ed25519", sig_size=64, x_size=32, d_size=32),
)


def default_alg() -> Alg:
    override = os.getenv(DEFAULT_ALG_ENV)
    if override:
        try:
            return Alg.parse(override)
        except UnsupportedAlgorithmError as exc:
            raise UnsupportedAlgorithmError(f"{DEFAULT_ALG_ENV} must name a supported alg, got {override!r}") from exc
    return Alg.ES256
