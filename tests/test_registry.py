from __future__ import annotations

from pathlib import Path
import sys
from typing import Dict

import pytest

ROOT = Path(__file__).resolve().parents[1]
CORE_SRC = ROOT / "libs" / "core" / "src"
core_str = str(CORE_SRC)
if core_str not in sys.path:
    sys.path.insert(0, core_str)

from cryptokey import (  # noqa: E402
    Alg,
    AlgParams,
    CryptoKey,
    Genus,
    UnsupportedAlgorithmError,
    default_alg,
    from_crypto_key,
    registry,
    to_crypto_key,
)
from cryptokey.algs import BUILTIN_ALGS, DEFAULT_ALG_ENV  # noqa: E402


class EdOnlyRegistry:
    """Minimal registry that only knows Ed25519."""

    def __init__(self) -> None:
        self._items: Dict[Alg, AlgParams] = {Alg.ED25519: registry.get(Alg.ED25519)}

    def get(self, alg):
        name = Alg.parse(alg)
        if name not in self._items:
            raise UnsupportedAlgorithmError(f"unsupported alg: {name.value}")
        return self._items[name]

    def list(self):
        return dict(self._items)


def test_registry_lists_all_builtin_algs():
    items = registry.list()
    assert set(items) == {Alg.ES224, Alg.ES256, Alg.ES384, Alg.ES512, Alg.ED25519, Alg.ED25519PH}
    assert len(items) == len(BUILTIN_ALGS)


@pytest.mark.parametrize(
    "alg, genus, hash_size, sig_size, x_size, d_size",
    [
        ("ES224", Genus.ECDSA, 28, 56, 56, 28),
        ("ES256", Genus.ECDSA, 32, 64, 64, 32),
        ("ES384", Genus.ECDSA, 48, 96, 96, 48),
        ("ES512", Genus.ECDSA, 64, 132, 132, 66),
        ("Ed25519", Genus.EDDSA, 64, 64, 32, 32),
        ("Ed25519ph", Genus.EDDSA, 64, 64, 32, 32),
    ],
)
def test_params_table(alg, genus, hash_size, sig_size, x_size, d_size):
    params = registry.get(alg)
    assert params.genus is genus
    assert params.hash_size == hash_size
    assert params.hash_algorithm().digest_size == hash_size
    assert params.sig_size == sig_size
    assert params.x_size == x_size
    assert params.d_size == d_size
    assert len(params.digest(b"abc")) == hash_size


def test_ecdsa_curves_match_coordinate_width():
    for params in registry.list().values():
        if params.genus is not Genus.ECDSA:
            continue
        assert (params.curve().key_size + 7) // 8 == params.coordinate_size


def test_eddsa_has_no_ecdsa_curve():
    with pytest.raises(UnsupportedAlgorithmError):
        registry.get(Alg.ED25519).curve()


def test_alg_parse_is_case_sensitive():
    assert Alg.parse("Ed25519") is Alg.ED25519
    assert Alg.parse(Alg.ES256) is Alg.ES256
    with pytest.raises(UnsupportedAlgorithmError):
        Alg.parse("es256")
    with pytest.raises(UnsupportedAlgorithmError):
        Alg.parse("")


def test_registry_get_unknown():
    with pytest.raises(UnsupportedAlgorithmError, match="RS256"):
        registry.get("RS256")
    assert "RS256" not in registry
    assert "ES256" in registry


def test_params_to_dict():
    d = registry.get("ES512").to_dict()
    assert d["alg"] == "ES512"
    assert d["genus"] == "ECDSA"
    assert d["curve_name"] == "P-521"


def test_default_alg_without_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(DEFAULT_ALG_ENV, raising=False)
    assert default_alg() is Alg.ES256


def test_default_alg_env_override(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(DEFAULT_ALG_ENV, "Ed25519ph")
    assert default_alg() is Alg.ED25519PH


def test_default_alg_env_invalid(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(DEFAULT_ALG_ENV, "RS256")
    with pytest.raises(UnsupportedAlgorithmError, match=DEFAULT_ALG_ENV):
        default_alg()


def test_custom_registry_is_consulted():
    custom = EdOnlyRegistry()
    key = CryptoKey.generate("Ed25519", registry=custom)
    assert key.registry is custom
    assert key.verify_msg(b"hi", key.sign_msg(b"hi"))
    with pytest.raises(UnsupportedAlgorithmError):
        CryptoKey.generate("ES256", registry=custom)


def test_custom_registry_drives_record_bridge():
    custom = EdOnlyRegistry()
    ed_record = from_crypto_key(CryptoKey.generate(Alg.ED25519))
    assert to_crypto_key(ed_record, registry=custom).registry is custom
    es_record = from_crypto_key(CryptoKey.generate(Alg.ES256))
    with pytest.raises(UnsupportedAlgorithmError):
        to_crypto_key(es_record, registry=custom)
