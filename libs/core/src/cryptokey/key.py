from __future__ import annotations
"""Algorithm-tagged signing keys.

``CryptoKey`` pairs an algorithm identifier with ``cryptography`` key
objects and dispatches generate/sign/verify on the algorithm's genus. ECDSA
signatures are emitted as fixed-width ``R || S`` rather than DER, so every
signature of a given algorithm has the same length.

EdDSA keys sign the digest itself: the bytes handed to ``sign`` are the
message given to pure Ed25519, for both ``Ed25519`` and ``Ed25519ph``.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ec, ed25519
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
    encode_dss_signature,
)

from .algs import Alg, AlgParams, Genus
from .errors import DigestLengthError, InvalidPrivateKeyError, ShapeMismatchError, UnsupportedAlgorithmError
from .interfaces import AlgorithmRegistry
from .registry import registry as _default_registry

log = logging.getLogger(__name__)

PublicKey = Union[ec.EllipticCurvePublicKey, ed25519.Ed25519PublicKey]
PrivateKey = Union[ec.EllipticCurvePrivateKey, ed25519.Ed25519PrivateKey]


def concat_padded(r: int, s: int, size: int) -> bytes:
    """Encode ``r`` and ``s`` big-endian, each left-padded to ``size // 2``."""
    half = size // 2
    try:
        return r.to_bytes(half, "big") + s.to_bytes(half, "big")
    except OverflowError as exc:
        raise ShapeMismatchError(f"signature component does not fit in {half} bytes") from exc


def split_padded(sig: bytes, size: int) -> tuple[int, int]:
    half = size // 2
    return int.from_bytes(sig[:half], "big"), int.from_bytes(sig[half:], "big")


def _ecdsa_shape_ok(value: object, kind: type, params: AlgParams) -> bool:
    return isinstance(value, kind) and value.curve.name == params.curve().name  # type: ignore[attr-defined]


@dataclass(frozen=True)
class CryptoKey:
    """A public key, private key, or key pair for one algorithm.

    ``private`` is optional; a public-only key verifies but cannot sign.
    Instances are never mutated, so one key may be shared across threads.
    """

    alg: Alg
    public: Optional[PublicKey]
    private: Optional[PrivateKey] = None
    registry: AlgorithmRegistry = field(default=_default_registry, repr=False, compare=False)

    @property
    def params(self) -> AlgParams:
        return self.registry.get(self.alg)

    @property
    def is_private(self) -> bool:
        return self.private is not None

    @classmethod
    def generate(cls, alg: Alg | str, registry: Optional[AlgorithmRegistry] = None) -> "CryptoKey":
        """Generate a fresh key pair for *alg* from the OS random source."""
        reg = registry if registry is not None else _default_registry
        params = reg.get(alg)
        if params.genus is Genus.ECDSA:
            private: PrivateKey = ec.generate_private_key(params.curve())
        elif params.genus is Genus.EDDSA:
            private = ed25519.Ed25519PrivateKey.generate()
        else:
            raise UnsupportedAlgorithmError(f"unsupported alg: {params.alg.value}")
        log.debug("generated %s key", params.alg.value)
        return cls(alg=params.alg, public=private.public_key(), private=private, registry=reg)

    def public_key(self) -> "CryptoKey":
        """Copy of this key without the private half."""
        return replace(self, private=None)

    def sign(self, digest: bytes) -> bytes:
        """Sign a precalculated digest.

        ``len(digest)`` must equal the algorithm's hash size. ECDSA output is
        always ``sig_size`` bytes; short ``R`` or ``S`` values are padded.
        """
        params = self.params
        if len(digest) != params.hash_size:
            raise DigestLengthError(params.alg.value, len(digest), params.hash_size)

        if params.genus is Genus.ECDSA:
            if not _ecdsa_shape_ok(self.private, ec.EllipticCurvePrivateKey, params):
                raise InvalidPrivateKeyError(f"not a valid ECDSA private key for {params.alg.value}")
            der = self.private.sign(digest, ec.ECDSA(Prehashed(params.hash_algorithm())))  # type: ignore[union-attr]
            r, s = decode_dss_signature(der)
            return concat_padded(r, s, params.sig_size)
        if params.genus is Genus.EDDSA:
            if not isinstance(self.private, ed25519.Ed25519PrivateKey):
                raise InvalidPrivateKeyError(f"not a valid EdDSA private key for {params.alg.value}")
            return self.private.sign(digest)
        raise UnsupportedAlgorithmError(f"unsupported alg: {params.alg.value}")

    def verify(self, digest: bytes, sig: bytes) -> bool:
        """Return True if *sig* is valid for *digest*; never raises."""
        if not digest or not sig:
            return False
        try:
            params = self.params
        except UnsupportedAlgorithmError:
            log.debug("verify rejected: unsupported alg %r", self.alg)
            return False
        if len(digest) != params.hash_size or len(sig) != params.sig_size:
            log.debug(
                "verify rejected: %s expects digest %d/sig %d bytes, got %d/%d",
                params.alg.value, params.hash_size, params.sig_size, len(digest), len(sig),
            )
            return False

        if params.genus is Genus.ECDSA:
            if not _ecdsa_shape_ok(self.public, ec.EllipticCurvePublicKey, params):
                log.debug("verify rejected: public key is not an ECDSA %s key", params.curve_name)
                return False
            r, s = split_padded(sig, params.sig_size)
            try:
                self.public.verify(  # type: ignore[union-attr]
                    encode_dss_signature(r, s),
                    digest,
                    ec.ECDSA(Prehashed(params.hash_algorithm())),
                )
                return True
            except InvalidSignature:
                return False
        if params.genus is Genus.EDDSA:
            if not isinstance(self.public, ed25519.Ed25519PublicKey):
                log.debug("verify rejected: public key is not an Ed25519 key")
                return False
            try:
                self.public.verify(sig, digest)
                return True
            except InvalidSignature:
                return False
        return False

    def sign_msg(self, msg: bytes) -> bytes:
        """Hash *msg* with the algorithm's hash, then sign the digest."""
        return self.sign(self.params.digest(msg))

    def verify_msg(self, msg: bytes, sig: bytes) -> bool:
        try:
            digest = self.params.digest(msg)
        except UnsupportedAlgorithmError:
            return False
        return self.verify(digest, sig)
