from __future__ import annotations

"""Exception hierarchy shared by the key abstraction and the record bridge.

Every error is a ``ValueError``: they all describe misuse or malformed input,
never an internal fault. Verification failure is not an error and has no
class here.
"""


class CryptoKeyError(ValueError):
    pass


class UnsupportedAlgorithmError(CryptoKeyError):
    pass


class ShapeMismatchError(CryptoKeyError):
    pass


class DigestLengthError(ShapeMismatchError):
    def __init__(self, alg: str, actual: int, expected: int) -> None:
        self.alg = alg
        self.actual = actual
        self.expected = expected
        super().__init__(
            f"digest length does not match alg hash size. Len: {actual}, expected: {expected}, Alg: {alg}."
        )


class InvalidPrivateKeyError(ShapeMismatchError):
    pass


class InvalidKeyRecordError(CryptoKeyError):
    pass
