"""tlsigner CLI application with Typer."""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer

from tlsigner import __version__
from tlsigner.app import SignWith
from tlsigner.app.ports import Configuration, OutboundRequest
from tlsigner.bootstrap import bootstrap_application
from tlsigner.config import get_settings
from tlsigner.errors import (
    IncompleteConfigurationError,
    KeyFormatError,
    SignatureVerificationError,
)
from tlsigner.signing import (
    IDEMPOTENCY_KEY_HEADER,
    SIGNATURE_HEADER,
    describe_key,
    load_public_key,
    verify_signature,
)

app = typer.Typer(
    name="tlsigner",
    help="Sign HTTP requests with detached JWS Tl-Signature headers",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"tlsigner version {__version__}")
        raise typer.Exit()


def _fail(message: str, *, code: int = 1) -> typer.Exit:
    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(code=code)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise _fail(f"Cannot read {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise _fail(f"{path} is not PEM text: {exc}") from exc


def _resolve_body(body: str | None, body_file: Path | None) -> bytes:
    if body is not None and body_file is not None:
        raise _fail("Use either --body or --body-file, not both.", code=2)
    if body_file is not None:
        try:
            return body_file.read_bytes()
        except OSError as exc:
            raise _fail(f"Cannot read {body_file}: {exc}") from exc
    return (body or "").encode("utf-8")


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Logging level (defaults to TLSIGNER_LOG_LEVEL)"),
    ] = None,
) -> None:
    """tlsigner - detached JWS request signing."""
    level = (log_level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("validate-key")
def validate_key(
    pem_file: Annotated[Path, typer.Argument(help="PEM file holding an EC private key")],
) -> None:
    """Check that a PEM private key can be used for signing."""
    container = bootstrap_application()
    try:
        handle = container.validate_key(_read_text(pem_file))
    except KeyFormatError as exc:
        raise _fail(f"Failed to parse private key: {exc}") from exc

    typer.secho(f"Private key parsed OK: {describe_key(handle)}", fg=typer.colors.GREEN)
    if handle.algorithm is None:
        typer.secho(
            f"Warning: curve {handle.curve_name} cannot be used for JWS signing.",
            fg=typer.colors.YELLOW,
        )


@app.command()
def sign(
    method: Annotated[str, typer.Option("--method", "-X", help="HTTP method")] = "POST",
    path: Annotated[str, typer.Option("--path", help="Request path, including query")] = "/",
    body: Annotated[str | None, typer.Option("--body", help="Request body text")] = None,
    body_file: Annotated[
        Path | None, typer.Option("--body-file", help="Read the request body from a file")
    ] = None,
    key_id: Annotated[
        str | None, typer.Option("--key-id", help="Override the configured key id")
    ] = None,
    key_file: Annotated[
        Path | None, typer.Option("--key-file", help="Override the configured private key")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Emit headers as JSON")] = False,
) -> None:
    """Sign a request and print the headers to attach."""
    container = bootstrap_application()
    stored = container.policy.configuration

    configuration = Configuration(
        enabled=True,
        key_id=key_id if key_id is not None else stored.key_id,
        private_key_pem=_read_text(key_file) if key_file is not None else stored.private_key_pem,
    )
    try:
        container.apply_configuration(configuration)
    except (IncompleteConfigurationError, KeyFormatError) as exc:
        raise _fail(str(exc)) from exc

    request = OutboundRequest.build(method, path, body=_resolve_body(body, body_file))
    signed = container.interceptor.on_request(request)
    signature = signed.header(SIGNATURE_HEADER)
    idempotency_key = signed.header(IDEMPOTENCY_KEY_HEADER)
    if signature is None or idempotency_key is None:
        raise _fail("Signing failed; see log output for details.")

    if as_json:
        typer.echo(
            json.dumps(
                {IDEMPOTENCY_KEY_HEADER: idempotency_key, SIGNATURE_HEADER: signature},
                indent=2,
            )
        )
        return

    typer.echo(f"{IDEMPOTENCY_KEY_HEADER}: {idempotency_key}")
    typer.echo(f"{SIGNATURE_HEADER}: {signature}")


@app.command()
def verify(
    public_key_file: Annotated[
        Path,
        typer.Option("--public-key-file", help="PEM public key (or private key) to verify with"),
    ],
    signature: Annotated[str, typer.Option("--signature", help="Tl-Signature header value")],
    idempotency_key: Annotated[
        str, typer.Option("--idempotency-key", help="Idempotency-Key header value")
    ],
    method: Annotated[str, typer.Option("--method", "-X", help="HTTP method")] = "POST",
    path: Annotated[str, typer.Option("--path", help="Request path, including query")] = "/",
    body: Annotated[str | None, typer.Option("--body", help="Request body text")] = None,
    body_file: Annotated[
        Path | None, typer.Option("--body-file", help="Read the request body from a file")
    ] = None,
) -> None:
    """Verify a Tl-Signature against request components."""
    try:
        public_key = load_public_key(_read_text(public_key_file))
    except KeyFormatError as exc:
        raise _fail(f"Failed to parse public key: {exc}") from exc

    try:
        header = verify_signature(
            public_key,
            signature.strip(),
            method,
            path,
            idempotency_key.strip(),
            _resolve_body(body, body_file),
        )
    except SignatureVerificationError as exc:
        raise _fail(f"Signature invalid: {exc}") from exc

    typer.secho(
        f"Signature valid (alg={header.get('alg')}, kid={header.get('kid')})",
        fg=typer.colors.GREEN,
    )


@app.command()
def status() -> None:
    """Show the active signing configuration and whether requests would be signed."""
    container = bootstrap_application()
    configuration = container.policy.configuration
    handle = container.policy.key_handle

    typer.echo(f"Enabled: {configuration.enabled}")
    typer.echo(f"Key id: {configuration.key_id or '(not set)'}")
    typer.echo(f"Private key: {describe_key(handle) if handle else '(not set)'}")

    decision = container.policy.evaluate(OutboundRequest.build("GET", "/"))
    if isinstance(decision, SignWith):
        typer.secho("Requests will be signed.", fg=typer.colors.GREEN)
    else:
        typer.secho(
            f"Requests will not be signed: {decision.reason.message}",
            fg=typer.colors.YELLOW,
        )


if __name__ == "__main__":  # pragma: no cover
    app()
