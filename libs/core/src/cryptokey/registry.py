from __future__ import annotations
from typing import Dict

from .algs import BUILTIN_ALGS, Alg, AlgParams
from .errors import UnsupportedAlgorithmError


class _Registry:
    def __init__(self) -> None:
        self._items: Dict[Alg, AlgParams] = {}

    def register(self, params: AlgParams) -> AlgParams:
        self._items[params.alg] = params
        return params

    def get(self, alg: Alg | str) -> AlgParams:
        name = Alg.parse(alg)
        try:
            return self._items[name]
        except KeyError:
            raise UnsupportedAlgorithmError(f"unsupported alg: {name.value}") from None

    def list(self) -> Dict[Alg, AlgParams]:
        return dict(self._items)

    def __contains__(self, alg: object) -> bool:
        try:
            return Alg.parse(alg) in self._items  # type: ignore[arg-type]
        except UnsupportedAlgorithmError:
            return False


registry = _Registry()

for _params in BUILTIN_ALGS:
    registry.register(_params)
