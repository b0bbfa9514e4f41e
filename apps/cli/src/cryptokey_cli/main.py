from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer

from cryptokey import (
    Alg,
    CryptoKey,
    CryptoKeyError,
    KeyRecord,
    default_alg,
    from_crypto_key,
    registry,
    to_crypto_key,
)
from cryptokey.record import b64ut_decode, b64ut_encode

app = typer.Typer(add_completion=False, help="Generate, sign and verify with algorithm-tagged keys")

DEMO_MESSAGE = b"Test message."


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _fail(exc: Exception) -> NoReturn:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(2)


def _resolve_alg(alg: Optional[str]) -> Alg:
    return registry.get(alg if alg else default_alg()).alg


def _load_key(path: Path) -> CryptoKey:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        typer.echo(f"error: cannot read key file {path}: {exc}", err=True)
        raise typer.Exit(2)
    return to_crypto_key(KeyRecord.from_dict(data))


@app.command("list-algs")
def list_algs():
    """List supported algorithms and their sizes."""
    for alg, params in registry.list().items():
        typer.echo(
            f"- {alg.value}: genus={params.genus.value} hash={params.hash_name} "
            f"sig={params.sig_size} x={params.x_size} d={params.d_size}"
        )


@app.command()
def demo(alg: Optional[str] = typer.Argument(None, help="Algorithm name; defaults to $CRYPTOKEY_DEFAULT_ALG.")):
    """Generate a key, sign a test message and verify it both ways."""
    try:
        name = _resolve_alg(alg)
        key = CryptoKey.generate(name)
        sig = key.sign_msg(DEMO_MESSAGE)
        ok = key.verify_msg(DEMO_MESSAGE, sig)
        digest_ok = key.verify(key.params.digest(DEMO_MESSAGE), sig)
    except CryptoKeyError as exc:
        _fail(exc)
    typer.echo(f"[{name.value}] verify={ok} digest_verify={digest_ok}")


@app.command()
def generate(
    alg: Optional[str] = typer.Argument(None, help="Algorithm name; defaults to $CRYPTOKEY_DEFAULT_ALG."),
    public_only: bool = typer.Option(False, "--public-only", help="Omit the private d field."),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the key record here instead of stdout."),
) -> None:
    """Generate a key and print its key record as JSON."""
    try:
        record = from_crypto_key(CryptoKey.generate(_resolve_alg(alg)))
    except CryptoKeyError as exc:
        _fail(exc)
    if public_only:
        record = record.public()
    text = json.dumps(record.to_dict(), indent=2)
    if out is None:
        typer.echo(text)
        return
    out.write_text(text + "\n", encoding="utf-8")
    typer.echo(f"wrote {record.alg} key record to {out}")


@app.command()
def sign(key_file: Path, message: str) -> None:
    """Sign MESSAGE with the private key record in KEY_FILE."""
    try:
        sig = _load_key(key_file).sign_msg(message.encode("utf-8"))
    except CryptoKeyError as exc:
        _fail(exc)
    typer.echo(b64ut_encode(sig))


@app.command()
def verify(key_file: Path, message: str, signature: str) -> None:
    """Verify a base64url SIGNATURE over MESSAGE; exit code 1 when invalid."""
    try:
        key = _load_key(key_file)
        sig = b64ut_decode(signature)
    except CryptoKeyError as exc:
        _fail(exc)
    valid = key.verify_msg(message.encode("utf-8"), sig)
    typer.echo(f"valid={valid}")
    if not valid:
        raise typer.Exit(1)


def app_main():
    app()


if __name__ == "__main__":
    app_main()
