from __future__ import annotations
"""Bridge between ``CryptoKey`` and the compact key record.

A key record carries an algorithm name, the public ``x`` bytes and an
optional private ``d``. Field widths come from the algorithm registry:

* ECDSA: ``x`` is ``X || Y``, each coordinate left-padded to half of
  ``x_size``; ``d`` is the scalar left-padded to ``d_size``.
* EdDSA: ``x`` is the raw 32-byte public key; ``d`` is the 32-byte seed.

Conversion copies values in both directions; neither side keeps a
reference to the other.
"""
import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519

from .algs import Alg, AlgParams, Genus
from .errors import InvalidKeyRecordError, ShapeMismatchError, UnsupportedAlgorithmError
from .interfaces import AlgorithmRegistry
from .key import CryptoKey, PrivateKey, PublicKey, _ecdsa_shape_ok
from .registry import registry as _default_registry

log = logging.getLogger(__name__)


def b64ut_encode(data: bytes) -> str:
    """base64url without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64ut_decode(text: str) -> bytes:
    if not isinstance(text, str):
        raise InvalidKeyRecordError(f"expected base64url string, got {type(text).__name__}")
    if any(c in text for c in "+/="):
        raise InvalidKeyRecordError("invalid base64url value: padding or standard-alphabet characters")
    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidKeyRecordError(f"invalid base64url value: {exc}") from exc


@dataclass(frozen=True)
class KeyRecord:
    alg: str
    x: bytes
    d: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"alg": Alg.parse(self.alg).value, "x": b64ut_encode(self.x)}
        if self.d:
            out["d"] = b64ut_encode(self.d)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KeyRecord":
        if not isinstance(data, Mapping):
            raise InvalidKeyRecordError(f"key record must be an object, got {type(data).__name__}")
        try:
            alg = data["alg"]
            x = data["x"]
        except KeyError as exc:
            raise InvalidKeyRecordError(f"key record missing field {exc.args[0]!r}") from exc
        d = data.get("d") or ""
        return cls(alg=alg, x=b64ut_decode(x), d=b64ut_decode(d))

    def public(self) -> "KeyRecord":
        return KeyRecord(alg=self.alg, x=self.x)


def to_crypto_key(
    record: KeyRecord,
    *,
    strict: bool = False,
    registry: Optional[AlgorithmRegistry] = None,
) -> CryptoKey:
    """Build a ``CryptoKey`` from *record*.

    The supplied ``x`` and ``d`` are trusted to belong together: signing uses
    ``d`` and verifying uses ``x`` exactly as given. Pass ``strict=True`` to
    reject records whose ``x`` is not the public key of ``d``.
    """
    if not record.x:
        raise InvalidKeyRecordError("invalid key record: empty x")
    reg = registry if registry is not None else _default_registry
    params = reg.get(record.alg)

    if params.genus is Genus.ECDSA:
        public, private = _ecdsa_from_record(record, params)
    elif params.genus is Genus.EDDSA:
        public, private = _eddsa_from_record(record, params)
    else:
        raise UnsupportedAlgorithmError(f"unsupported alg: {params.alg.value}")

    if strict and private is not None and _public_bytes(private.public_key(), params) != record.x:
        raise InvalidKeyRecordError(f"{params.alg.value} record: x does not match d")

    log.debug("loaded %s %s key from record", params.alg.value, "private" if private is not None else "public")
    return CryptoKey(alg=params.alg, public=public, private=private, registry=reg)


def _ecdsa_from_record(record: KeyRecord, params: AlgParams) -> tuple[PublicKey, Optional[PrivateKey]]:
    if len(record.x) != params.x_size:
        raise InvalidKeyRecordError(
            f"{params.alg.value} x must be {params.x_size} bytes, got {len(record.x)}"
        )
    half = params.coordinate_size
    x = int.from_bytes(record.x[:half], "big")
    y = int.from_bytes(record.x[half:], "big")
    curve = params.curve()
    try:
        public = ec.EllipticCurvePublicNumbers(x, y, curve).public_key()
    except ValueError as exc:
        raise InvalidKeyRecordError(f"{params.alg.value} x is not a point on {params.curve_name}") from exc

    if not record.d:
        return public, None
    try:
        private = ec.derive_private_key(int.from_bytes(record.d, "big"), curve)
    except ValueError as exc:
        raise InvalidKeyRecordError(f"{params.alg.value} d is out of range") from exc
    return public, private


def _eddsa_from_record(record: KeyRecord, params: AlgParams) -> tuple[PublicKey, Optional[PrivateKey]]:
    try:
        public = ed25519.Ed25519PublicKey.from_public_bytes(record.x)
    except ValueError as exc:
        raise InvalidKeyRecordError(f"{params.alg.value} x: {exc}") from exc

    if not record.d:
        return public, None
    try:
        private = ed25519.Ed25519PrivateKey.from_private_bytes(record.d)
    except ValueError as exc:
        raise InvalidKeyRecordError(f"{params.alg.value} d: {exc}") from exc
    return public, private


def _public_bytes(public: object, params: AlgParams) -> bytes:
    if params.genus is Genus.ECDSA:
        if not _ecdsa_shape_ok(public, ec.EllipticCurvePublicKey, params):
            raise ShapeMismatchError(f"not an ECDSA {params.curve_name} public key for {params.alg.value}")
        numbers = public.public_numbers()
        size = params.coordinate_size
        return numbers.x.to_bytes(size, "big") + numbers.y.to_bytes(size, "big")
    if params.genus is Genus.EDDSA:
        if not isinstance(public, ed25519.Ed25519PublicKey):
            raise ShapeMismatchError(f"not an EdDSA public key for {params.alg.value}")
        return public.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
    raise UnsupportedAlgorithmError(f"unsupported alg: {params.alg.value}")


def _private_bytes(private: object, params: AlgParams) -> bytes:
    if params.genus is Genus.ECDSA:
        if not _ecdsa_shape_ok(private, ec.EllipticCurvePrivateKey, params):
            raise ShapeMismatchError(f"not an ECDSA {params.curve_name} private key for {params.alg.value}")
        return private.private_numbers().private_value.to_bytes(params.d_size, "big")
    if params.genus is Genus.EDDSA:
        if not isinstance(private, ed25519.Ed25519PrivateKey):
            raise ShapeMismatchError(f"not an EdDSA private key for {params.alg.value}")
        return private.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
    raise UnsupportedAlgorithmError(f"unsupported alg: {params.alg.value}")


def from_crypto_key(key: CryptoKey) -> KeyRecord:
    """Reduce *key* to a record; the exact inverse of ``to_crypto_key``."""
    params = key.params
    if key.public is None:
        raise ShapeMismatchError(f"{params.alg.value} key has no public value")
    x = _public_bytes(key.public, params)
    d = _private_bytes(key.private, params) if key.private is not None else b""
    return KeyRecord(alg=params.alg.value, x=x, d=d)
