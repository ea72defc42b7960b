"""CLI: jetpack auth login|status|logout"""

from typing import Optional

import click
from rich.console import Console

from jetpack_admin.transport.http import DEFAULT_BASE_URL

console = Console()


def _load_config() -> dict:
    from jetpack_admin.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from jetpack_admin.cli.main import _save_config
    _save_config(cfg)


@click.group()
def auth():
    """Authentication commands."""


@auth.command("login")
@click.option("--base-url", default=None, help="Dashboard base URL")
def auth_login(base_url: Optional[str]):
    """Save an admin access token."""
    cfg = _load_config()
    url = base_url or cfg.get("base_url", DEFAULT_BASE_URL)
    token = click.prompt("Access token", hide_input=True)
    _save_config({**cfg, "access_token": token.strip(), "base_url": url})
    console.print(f"[green]Token saved for {url}[/green]")


@auth.command("status")
def auth_status():
    """Show current auth status."""
    cfg = _load_config()
    if cfg.get("access_token"):
        console.print(f"[green]Logged in[/green] to {cfg.get('base_url', DEFAULT_BASE_URL)}")
    else:
        console.print("[yellow]Not logged in. Run `jetpack auth login`.[/yellow]")


@auth.command("logout")
def auth_logout():
    """Clear saved credentials."""
    cfg = _load_config()
    cfg.pop("access_token", None)
    _save_config(cfg)
    console.print("[green]Logged out.[/green]")
