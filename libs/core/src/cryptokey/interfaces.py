from __future__ import annotations
from typing import Dict, Protocol, TYPE_CHECKING

"""Capability interfaces consumed by the key abstraction.

``CryptoKey`` and the record bridge only ever ask a registry for parameters;
they never branch on concrete algorithm names. Any object satisfying
``AlgorithmRegistry`` can stand in for the global registry.
"""

if TYPE_CHECKING:
    from .algs import Alg, AlgParams


class AlgorithmRegistry(Protocol):
    """Algorithm identifier -> primitive parameters lookup."""
    def get(self, alg: "Alg | str") -> "AlgParams": ...
    def list(self) -> "Dict[Alg, AlgParams]": ...
