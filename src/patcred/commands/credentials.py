"""Credential commands -- check, encrypt, and describe personal access tokens.

These commands are the CLI face of the form checks and the secret cipher:

* ``patcred check-token`` runs the ``token`` field check.
* ``patcred encrypt`` turns a token into an encrypted blob.
* ``patcred describe`` builds a credential and prints its record.
* ``patcred types`` lists registered credential types.

Tokens are read from the command line, from stdin with ``--stdin``, or
from a hidden prompt. Plaintext is never printed.

Typical workflow::

    patcred check-token              # prompts for the token
    patcred encrypt --stdin < token.txt
    patcred check-token '{gAAAAAB...}'
"""

from __future__ import annotations

from typing import Optional

import typer

from patcred.credentials import PERSONAL_ACCESS_TOKEN_TYPE
from patcred.exit_codes import EXIT_VALIDATION_FAILURE
from patcred.models import CredentialsScope
from patcred.output import debug, error, format_data, print_data, print_table, success, warning
from patcred.validation import FormValidation, Kind


def _read_token(value: Optional[str], from_stdin: bool) -> str:
    """Return the token from the argument, stdin, or a hidden prompt."""
    if value is not None:
        return value
    if from_stdin:
        return typer.get_text_stream("stdin").read().rstrip("\r\n")
    return typer.prompt("Token", default="", show_default=False, hide_input=True)


def _build_registry(ctx: typer.Context, token: str = ""):  # noqa: ANN202
    """Resolve config and build a registry with built-in and discovered types.

    The master key is only looked up, never generated, and only when
    *token* is an encrypted blob.

    Raises:
        typer.Exit: With code 1 if the configuration or master key is unusable.
    """
    from patcred.config import resolve_config
    from patcred.credentials import create_default_registry
    from patcred.exceptions import ConfigError
    from patcred.secret import SecretCipher, is_encrypted_blob

    key_source = ctx.obj.get("key_source") if ctx.obj else None
    try:
        config = resolve_config(cli_key_source=key_source)
        cipher = SecretCipher.find(config) if is_encrypted_blob(token) else None
    except ConfigError as exc:
        error(f"Config error: {exc}")
        raise typer.Exit(code=exc.exit_code) from None

    registry = create_default_registry(cipher)
    loaded = registry.discover(config)
    if loaded:
        debug(f"Discovered credential types: {', '.join(loaded)}")
    return registry


def _report(result: FormValidation) -> None:
    """Print *result* to stderr and exit non-zero when it is blocking."""
    if result.kind is Kind.ERROR:
        error(f"Token rejected: {result.message}")
        raise typer.Exit(code=EXIT_VALIDATION_FAILURE)
    if result.kind is Kind.WARNING:
        warning(f"Token accepted with warning: {result.message}")
    else:
        success("Token OK.")


def check_token_command(
    ctx: typer.Context,
    value: Optional[str] = typer.Argument(
        None, help="Token or encrypted blob. Prompted for when omitted."
    ),
    from_stdin: bool = typer.Option(False, "--stdin", help="Read the token from stdin."),
    credential_type: str = typer.Option(
        PERSONAL_ACCESS_TOKEN_TYPE, "--type", "-t", help="Credential type to check against."
    ),
) -> None:
    """Check a token the way the credential form does.

    Exits 0 when the token is accepted (with or without a warning) and 3
    when it is rejected.

    Example::

        patcred check-token glpat0123456789abcde
    """
    from patcred.exceptions import PluginError

    token = _read_token(value, from_stdin)
    registry = _build_registry(ctx, token)
    try:
        result = registry.check_field(credential_type, "token", token)
    except PluginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    _report(result)


def encrypt_command(
    ctx: typer.Context,
    value: Optional[str] = typer.Argument(
        None, help="Token to encrypt. Prompted for when omitted."
    ),
    from_stdin: bool = typer.Option(False, "--stdin", help="Read the token from stdin."),
) -> None:
    """Print a token as an encrypted blob.

    The blob can be fed back to ``check-token`` or ``describe``; it
    decrypts only with the same master key.

    Example::

        patcred encrypt --stdin < token.txt
    """
    from patcred.config import resolve_config
    from patcred.exceptions import ConfigError
    from patcred.messages import TOKEN_REQUIRED
    from patcred.secret import SecretCipher, parse_secret

    token = _read_token(value, from_stdin)
    if not token:
        error(f"Token rejected: {TOKEN_REQUIRED}")
        raise typer.Exit(code=EXIT_VALIDATION_FAILURE)

    key_source = ctx.obj.get("key_source") if ctx.obj else None
    try:
        cipher = SecretCipher.from_config(resolve_config(cli_key_source=key_source))
    except ConfigError as exc:
        error(f"Config error: {exc}")
        raise typer.Exit(code=exc.exit_code) from None

    secret = parse_secret(token, cipher)
    print_data(secret.encrypted_value(cipher))


def describe_command(
    ctx: typer.Context,
    value: Optional[str] = typer.Argument(
        None, help="Token or encrypted blob. Prompted for when omitted."
    ),
    from_stdin: bool = typer.Option(False, "--stdin", help="Read the token from stdin."),
    credential_id: Optional[str] = typer.Option(
        None, "--id", help="Credential id (generated when omitted)."
    ),
    description: Optional[str] = typer.Option(
        None, "--description", "-d", help="Free-text label."
    ),
    scope: Optional[CredentialsScope] = typer.Option(
        None, "--scope", case_sensitive=False, help="Credential scope."
    ),
) -> None:
    """Build a personal access token credential and print its record.

    The token is checked first; a blocking result exits 3. The printed
    record carries the token encrypted with the master key.

    Example::

        patcred describe --id ci-bot -d "CI bot" --scope system
    """
    from patcred.config import resolve_config
    from patcred.credentials import create_default_registry
    from patcred.exceptions import ConfigError
    from patcred.secret import SecretCipher

    token = _read_token(value, from_stdin)
    key_source = ctx.obj.get("key_source") if ctx.obj else None
    try:
        cipher = SecretCipher.from_config(resolve_config(cli_key_source=key_source))
    except ConfigError as exc:
        error(f"Config error: {exc}")
        raise typer.Exit(code=exc.exit_code) from None

    registry = create_default_registry(cipher)
    _report(registry.check_field(PERSONAL_ACCESS_TOKEN_TYPE, "token", token))

    credential = registry.create(
        PERSONAL_ACCESS_TOKEN_TYPE,
        scope=scope,
        id=credential_id,
        description=description,
        token=token,
    )
    debug(f"Built {credential!r}")
    format_data(credential.to_record(cipher).model_dump(mode="json"))


def types_command(ctx: typer.Context) -> None:
    """List registered credential types.

    Example::

        patcred types
        patcred --json types
    """
    registry = _build_registry(ctx)
    rows = [[d["type"], d["display_name"]] for d in registry.list_descriptors()]
    print_table(["Type", "Name"], rows, title="Credential types")
