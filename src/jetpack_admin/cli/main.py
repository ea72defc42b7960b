"""
Jetpack admin CLI: `jetpack` command.

Commands:
  jetpack auth login             Save an access token and base URL
  jetpack invoices list          Draft and approved invoices
  jetpack invoices regenerate    Regenerate a draft and wait for the new version
  jetpack invoices approve       Finalize drafts
  jetpack invoices preflight     Validation report before generating
"""

import asyncio
import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install jetpack-admin[cli]")

from jetpack_admin.client import AsyncJetpackAdmin
from jetpack_admin.errors import JetpackError
from jetpack_admin.models.config import WatchConfig
from jetpack_admin.transport.http import DEFAULT_BASE_URL

console = Console()
CONFIG_FILE = Path.home() / ".jetpack" / "config.json"


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _get_client(**watch_overrides) -> AsyncJetpackAdmin:
    cfg = _load_config()
    token = os.environ.get("JETPACK_ACCESS_TOKEN") or cfg.get("access_token")
    if not token:
        console.print("[red]Not logged in. Run `jetpack auth login` first.[/red]")
        raise SystemExit(1)
    watch = {k: cfg[k] for k in ("poll_interval", "max_attempts", "max_consecutive_failures") if cfg.get(k)}
    watch.update({k: v for k, v in watch_overrides.items() if v is not None})
    try:
        watch_config = WatchConfig(**watch)
    except ValidationError as e:
        console.print(f"[red]Invalid watch settings: {e.errors()[0]['msg']}[/red]")
        raise SystemExit(1)
    return AsyncJetpackAdmin(
        access_token=token,
        base_url=os.environ.get("JETPACK_BASE_URL") or cfg.get("base_url", DEFAULT_BASE_URL),
        watch_config=watch_config,
    )


def _run(coro):
    try:
        return asyncio.run(coro)
    except JetpackError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def main(verbose: bool):
    """Jetpack admin CLI: invoice generation, review and approval."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(message)s", datefmt="[%X]",
            handlers=[RichHandler(console=console, show_path=False)],
        )


# Register subcommands from separate modules
from jetpack_admin.cli.auth import auth
from jetpack_admin.cli.invoices import invoices

main.add_command(auth)
main.add_command(invoices)


if __name__ == "__main__":
    main()
