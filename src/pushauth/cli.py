"""pushauth CLI - Produce and check request and channel signatures."""

import json
import sys
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from pushauth.auth.channels import JsonUserDataEncoder
from pushauth.auth.credentials import Credentials
from pushauth.auth.verify import verify_channel_token
from pushauth.client import AuthClient
from pushauth.common.errors import ConfigurationError
from pushauth.common.hmac import sign, to_bytes
from pushauth.common.logging import setup_logging
from pushauth.common.settings import Settings

console = Console()


def _parse_params(values: tuple[str, ...]) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    for item in values:
        key, sep, value = item.partition("=")
        if not sep:
            raise click.BadParameter(f"Expected key=value, got {item!r}", param_hint="--param")
        params.append((key, value))
    return params


def _read_body(body: str | None, body_file: str | None) -> bytes:
    if body_file:
        with open(body_file, "rb") as f:
            return f.read()
    return to_bytes(body or "")


def _load_user_data(user_data: str) -> Any:
    try:
        return json.loads(user_data)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"Invalid JSON: {exc}", param_hint="--user-data") from exc


@click.group()
@click.option("--app-key", default=None, help="Application key (defaults to PUSHAUTH_APP_KEY)")
@click.option("--app-secret", default=None, help="Application secret (defaults to PUSHAUTH_APP_SECRET)")
@click.option("--app-id", default=None, help="Application ID (defaults to PUSHAUTH_APP_ID)")
@click.pass_context
def cli(
    ctx: click.Context,
    app_key: str | None,
    app_secret: str | None,
    app_id: str | None,
) -> None:
    """pushauth CLI - Sign REST requests and channel subscriptions."""
    ctx.ensure_object(dict)
    settings = Settings()
    overrides = {"app_key": app_key, "app_secret": app_secret, "app_id": app_id}
    settings = settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})
    setup_logging(settings.log_level, json_logs=settings.log_json)
    ctx.obj["settings"] = settings


def _client(ctx: click.Context) -> AuthClient:
    try:
        return AuthClient.from_settings(ctx.obj["settings"])
    except ConfigurationError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)


# === Primitives ===


@cli.command("sign")
@click.argument("message")
@click.pass_context
def sign_cmd(ctx: click.Context, message: str) -> None:
    """Print the HMAC-SHA256 hex signature of MESSAGE."""
    client = _client(ctx)
    click.echo(sign(client.credentials.app_secret, to_bytes(message)))


# === REST requests ===


@cli.command("rest-params")
@click.option("--method", "-X", default="POST", show_default=True, help="HTTP method")
@click.option("--path", "-p", required=True, help="Request path")
@click.option("--param", "params", multiple=True, help="Extra query parameter key=value")
@click.option("--body", help="Request body")
@click.option("--body-file", type=click.Path(exists=True, dir_okay=False), help="Read body from file")
@click.option("--timestamp", type=int, help="UNIX timestamp (default: now)")
@click.pass_context
def rest_params(
    ctx: click.Context,
    method: str,
    path: str,
    params: tuple[str, ...],
    body: str | None,
    body_file: str | None,
    timestamp: int | None,
) -> None:
    """Show the signed query parameters for a REST request."""
    client = _client(ctx)
    auth_params = client.auth_params(
        method,
        path,
        _parse_params(params),
        _read_body(body, body_file),
        timestamp,
    )

    table = Table(title=f"{method} {path}")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for key, value in auth_params:
        table.add_row(key.decode("utf-8"), value.decode("utf-8", "replace"))

    console.print(table)


@cli.command("signed-url")
@click.option("--method", "-X", default="POST", show_default=True, help="HTTP method")
@click.option("--path", "-p", required=True, help="Request path")
@click.option("--param", "params", multiple=True, help="Extra query parameter key=value")
@click.option("--body", help="Request body")
@click.option("--body-file", type=click.Path(exists=True, dir_okay=False), help="Read body from file")
@click.option("--timestamp", type=int, help="UNIX timestamp (default: now)")
@click.pass_context
def signed_url(
    ctx: click.Context,
    method: str,
    path: str,
    params: tuple[str, ...],
    body: str | None,
    body_file: str | None,
    timestamp: int | None,
) -> None:
    """Print a full signed URL for a REST request."""
    client = _client(ctx)
    click.echo(
        client.signed_url(
            method,
            path,
            _parse_params(params),
            _read_body(body, body_file),
            timestamp,
        )
    )


# === Channel tokens ===


@cli.command("private-token")
@click.option("--socket-id", "-s", required=True, help="Socket ID of the connection")
@click.option("--channel", "-c", required=True, help="Private channel name")
@click.pass_context
def private_token(ctx: click.Context, socket_id: str, channel: str) -> None:
    """Print an auth token for a private channel."""
    client = _client(ctx)
    click.echo(client.authenticate_private(socket_id, channel))


@cli.command("presence-token")
@click.option("--socket-id", "-s", required=True, help="Socket ID of the connection")
@click.option("--channel", "-c", required=True, help="Presence channel name")
@click.option("--user-data", "-u", required=True, help="User data as JSON")
@click.option("--sort-keys", is_flag=True, help="Encode user data with sorted keys")
@click.pass_context
def presence_token(
    ctx: click.Context,
    socket_id: str,
    channel: str,
    user_data: str,
    sort_keys: bool,
) -> None:
    """Print the auth response for a presence channel."""
    settings: Settings = ctx.obj["settings"]
    try:
        client = AuthClient.from_settings(settings, encoder=JsonUserDataEncoder(sort_keys=sort_keys))
    except ConfigurationError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)
    response = client.channel_auth(socket_id, channel, _load_user_data(user_data))
    click.echo(json.dumps(response))


@cli.command("verify-token")
@click.option("--token", "-t", required=True, help="Token of the form app_key:signature")
@click.option("--socket-id", "-s", required=True, help="Socket ID of the connection")
@click.option("--channel", "-c", required=True, help="Channel name")
@click.option("--channel-data", help="Exact channel_data string for presence channels")
@click.pass_context
def verify_token(
    ctx: click.Context,
    token: str,
    socket_id: str,
    channel: str,
    channel_data: str | None,
) -> None:
    """Verify a channel auth token."""
    credentials: Credentials = _client(ctx).credentials
    if verify_channel_token(credentials, token, socket_id, channel, channel_data):
        console.print("[green]✓ Token is valid[/green]")
    else:
        console.print("[red]✗ Token is invalid[/red]")
        sys.exit(1)


def main() -> None:
    """CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
