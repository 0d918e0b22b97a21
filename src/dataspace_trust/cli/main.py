# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Dataspace Trust CLI

Commands:
- serve: run the trusted-participants service
- participants list/add/remove: manage the registry of a running service
- negotiate: ask a running service to negotiate with a counterparty
"""

import json
import sys
from typing import Any, Optional

import click
import httpx
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dataspace_trust import __version__
from dataspace_trust.config import load_config
from dataspace_trust.constants import DEFAULT_BASE_PATH
from dataspace_trust.exceptions import ConfigurationError

console = Console()

DEFAULT_SERVICE_URL = f"http://localhost:8080{DEFAULT_BASE_PATH}"


def _output_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _participant_body(participant_id: str, name: Optional[str], endpoint: Optional[str]) -> Any:
    if name is None and endpoint is None:
        return participant_id
    body: dict[str, Any] = {"id": participant_id}
    if name:
        body["name"] = name
    if endpoint:
        body["endpoint"] = endpoint
    return body


def _call(ctx: click.Context, method: str, path: str, **kwargs: Any) -> httpx.Response:
    """Send a request to the service, exiting with status 1 on failure."""
    url = ctx.obj["service_url"].rstrip("/") + path
    try:
        response = httpx.request(method, url, timeout=ctx.obj["timeout"], **kwargs)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        console.print(f"[red]Service returned {e.response.status_code}: {escape(e.response.text)}[/red]")
        sys.exit(1)
    except httpx.HTTPError as e:
        console.print(f"[red]Cannot reach service at {url}: {escape(str(e))}[/red]")
        sys.exit(1)
    return response


@click.group()
@click.version_option(__version__, prog_name="dataspace-trust")
@click.option(
    "--service-url",
    envvar="DSTRUST_SERVICE_URL",
    default=DEFAULT_SERVICE_URL,
    show_default=True,
    help="Base URL of a running trusted-participants service.",
)
@click.option("--timeout", type=float, default=10.0, show_default=True, help="Request timeout in seconds.")
@click.pass_context
def app(ctx: click.Context, service_url: str, timeout: float):
    """Manage trusted participants and trustee negotiation."""
    ctx.ensure_object(dict)
    ctx.obj["service_url"] = service_url
    ctx.obj["timeout"] = timeout


@app.command()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="YAML configuration file.")
@click.option("--host", default=None, help="Override the bind address.")
@click.option("--port", type=int, default=None, help="Override the bind port.")
def serve(config_path: Optional[str], host: Optional[str], port: Optional[int]):
    """Run the trusted-participants service."""
    import uvicorn

    from dataspace_trust.api import create_app
    from dataspace_trust.observability import configure_logging

    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    if host:
        config = config.model_copy(update={"host": host})
    if port:
        config = config.model_copy(update={"port": port})

    configure_logging(config.log_level)
    uvicorn.run(create_app(config), host=config.host, port=config.port,
                log_level=config.log_level.lower())


@app.group()
def participants():
    """Inspect and edit the trusted-participants registry."""


@participants.command("list")
@click.option("--json", "json_flag", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_participants(ctx: click.Context, json_flag: bool):
    """List trusted participants."""
    data = _call(ctx, "GET", "/snapshot").json()
    if json_flag:
        _output_json(data)
        return

    table = Table(box=box.ROUNDED)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Endpoint", style="dim")
    for p in data.get("participants", []):
        table.add_row(p["id"], p.get("name") or "-", p.get("endpoint") or "-")

    console.print(table)
    console.print(f"\n  Total participants: {len(data.get('participants', []))}")
    console.print(f"  Hash: {data.get('hash')}\n")


@participants.command("add")
@click.argument("participant_id")
@click.option("--name", default=None, help="Display name.")
@click.option("--endpoint", default=None, help="Callback base URL used for notifications.")
@click.pass_context
def add_participant(ctx: click.Context, participant_id: str, name: Optional[str], endpoint: Optional[str]):
    """Trust PARTICIPANT_ID."""
    body = _participant_body(participant_id, name, endpoint)
    click.echo(_call(ctx, "POST", "/add", json=body).json()["response"])


@participants.command("remove")
@click.argument("participant_id")
@click.pass_context
def remove_participant(ctx: click.Context, participant_id: str):
    """Stop trusting PARTICIPANT_ID."""
    click.echo(_call(ctx, "DELETE", "/remove", json=participant_id).json()["response"])


@app.command()
@click.argument("counterparty_url")
@click.option("--data-sink", default=None, help="Receiving participant of the exchange.")
@click.option("--asset", "assets", multiple=True, help="Asset id (repeatable).")
@click.pass_context
def negotiate(ctx: click.Context, counterparty_url: str, data_sink: Optional[str], assets: tuple[str, ...]):
    """Negotiate a common data trustee with COUNTERPARTY_URL."""
    params: dict[str, Any] = {"id": counterparty_url}
    if data_sink:
        params["dataSink"] = data_sink
    if assets:
        params["asset"] = list(assets)
    response = _call(ctx, "POST", "/negotiate", params=params)
    try:
        _output_json(response.json())
    except ValueError:
        click.echo(response.text)


def main() -> None:
    app(obj={})


if __name__ == "__main__":
    main()
