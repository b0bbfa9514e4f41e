from .algs import Alg, AlgParams, Genus, default_alg
from .errors import (
    CryptoKeyError,
    DigestLengthError,
    InvalidKeyRecordError,
    InvalidPrivateKeyError,
    ShapeMismatchError,
    UnsupportedAlgorithmError,
)
from .interfaces import AlgorithmRegistry
from .registry import registry
from .key import CryptoKey, concat_padded
from .record import KeyRecord, from_crypto_key, to_crypto_key

__all__ = [
    "Alg",
    "AlgParams",
    "Genus",
    "default_alg",
    "AlgorithmRegistry",
    "registry",
    "CryptoKey",
    "concat_padded",
    "KeyRecord",
    "from_crypto_key",
    "to_crypto_key",
    "CryptoKeyError",
    "DigestLengthError",
    "InvalidKeyRecordError",
    "InvalidPrivateKeyError",
    "ShapeMismatchError",
    "UnsupportedAlgorithmError",
]
