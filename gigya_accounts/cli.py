"""
Command-line interface for the accounts client.

Results go to stdout as JSON; progress and errors go to stderr.
"""

import json
import logging.config
import sys
from typing import Optional, Tuple

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from gigya_accounts import __version__
from gigya_accounts.config.provider import ClientConfig, EnvConfigProvider
from gigya_accounts.logging_config import get_logging_config
from gigya_accounts.modules.accounts import AccountsClient, PaginatedRetriever
from gigya_accounts.modules.auth import sign
from gigya_accounts.modules.errors import GigyaError
from gigya_accounts.modules.tokens import verify_rsa_signature

console = Console(stderr=True)


def _load_config(ctx: click.Context) -> ClientConfig:
    try:
        return ctx.obj["provider"].get_client_config()
    except ValueError as e:
        raise click.ClickException(str(e))


def _client(ctx: click.Context) -> AccountsClient:
    return AccountsClient(_load_config(ctx))


def _echo_json(payload) -> None:
    click.echo(json.dumps(payload, ensure_ascii=False))


@click.group()
@click.version_option(__version__, prog_name="gigya-accounts")
@click.option("--log-level", default="WARNING", help="Logging level for the client")
@click.option("--env-file", type=click.Path(dir_okay=False), default=None, help="Load variables from this .env file")
@click.pass_context
def cli(ctx: click.Context, log_level: str, env_file: Optional[str]):
    """Client for the customer identity service accounts API."""
    load_dotenv(env_file)
    logging.config.dictConfig(get_logging_config(log_level.upper()))
    ctx.ensure_object(dict)
    ctx.obj.setdefault("provider", EnvConfigProvider())


@cli.command()
@click.argument("query")
@click.option("--limit", default=100, show_default=True, help="Page size (1-100)")
@click.pass_context
def search(ctx: click.Context, query: str, limit: int):
    """Fetch a single page of QUERY results."""
    with _client(ctx) as client:
        result = PaginatedRetriever(client).search(query, limit)

    if result.error:
        raise click.ClickException(str(result.error))

    console.print(f"{len(result.accounts)} of {result.total_count} account(s)")
    for account in result.accounts:
        _echo_json(account)


@cli.command()
@click.argument("query")
@click.option("--batch-size", default=100, show_default=True, help="Page size (1-100)")
@click.pass_context
def retrieve(ctx: click.Context, query: str, batch_size: int):
    """Fetch every account matching QUERY, following the cursor."""
    with _client(ctx) as client, Progress(
        TextColumn("[bold]accounts"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("retrieve", total=None)

        def on_page(accumulated: int, total: int) -> None:
            progress.update(task, completed=accumulated, total=total)

        result = PaginatedRetriever(client).retrieve_all(query, batch_size, progress=on_page)

    for account in result.accounts:
        _echo_json(account)

    if result.error:
        console.print(
            f"[red]Stopped after {len(result.accounts)} of {result.total_count} "
            f"account(s):[/red] {result.error}"
        )
        sys.exit(1)


@cli.command("public-key")
@click.pass_context
def public_key(ctx: click.Context):
    """Print the key the service signs its tokens with."""
    with _client(ctx) as client:
        try:
            key = client.get_jwt_public_key()
        except GigyaError as e:
            raise click.ClickException(str(e))

    _echo_json({"kid": key.kid, "alg": key.alg, "kty": key.kty, "n": key.n, "e": key.e})


@cli.command("verify-token")
@click.argument("token")
@click.option("--n", "modulus", default=None, help="base64url modulus (fetched if omitted)")
@click.option("--e", "exponent", default=None, help="base64url exponent (fetched if omitted)")
@click.pass_context
def verify_token(ctx: click.Context, token: str, modulus: Optional[str], exponent: Optional[str]):
    """Verify TOKEN against the service's published key."""
    config = None
    if not (modulus and exponent):
        config = _load_config(ctx)
        with AccountsClient(config) as client:
            try:
                key = client.get_jwt_public_key()
            except GigyaError as e:
                raise click.ClickException(str(e))
        modulus, exponent = key.n, key.e

    max_bits = config.max_exponent_bits if config else None
    valid, error = verify_rsa_signature(token, modulus, exponent, max_bits)
    if valid:
        console.print("[green]Valid signature[/green]")
        return

    console.print(f"[red]Invalid signature:[/red] {error}")
    sys.exit(1)


@cli.command("sign")
@click.argument("params", nargs=-1)
@click.option("--secret", envvar="GIGYA_SECRET", required=True, help="Base64 secret")
def sign_params(params: Tuple[str, ...], secret: str):
    """Sign KEY=VALUE parameters and print the signature."""
    mapping = {}
    for item in params:
        if "=" not in item:
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'")
        key, value = item.split("=", 1)
        mapping[key] = value

    try:
        click.echo(sign(mapping, secret))
    except GigyaError as e:
        raise click.ClickException(str(e))


if __name__ == "__main__":
    cli()
