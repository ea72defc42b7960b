"""CLI: jetpack invoices list|generate|approve|regenerate|preflight|files"""

import json
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from jetpack_admin.models.invoice import BulkResult, Invoice
from jetpack_admin.models.watch import WatchOutcome, WatchStatus

console = Console()


def _get_client(**kwargs):
    from jetpack_admin.cli.main import _get_client
    return _get_client(**kwargs)


def _run(coro):
    from jetpack_admin.cli.main import _run
    return _run(coro)


def _invoice_row(i: Invoice) -> tuple[str, ...]:
    client = i.client.company_name if i.client else i.client_id
    return (
        i.invoice_number or i.id, client, i.status, f"v{i.version}",
        f"{i.period_start} - {i.period_end}", f"${i.total_amount:,.2f}", i.generated_at or "",
    )


def _print_bulk(verb: str, result: BulkResult) -> None:
    if result.failed:
        console.print(f"[yellow]{verb} {len(result.succeeded)} invoices, {len(result.failed)} failed[/yellow]")
    else:
        console.print(f"[green]{verb} {len(result.succeeded)} invoices.[/green]")


@click.group()
def invoices():
    """Invoice generation, review and approval."""


@invoices.command("list")
@click.option("--status", default=None, help="Only invoices in this status (draft, approved, sent)")
@click.option("--json-output", "--json", is_flag=True)
def invoices_list(status: Optional[str], json_output: bool):
    """List invoices."""

    async def _list():
        async with _get_client() as client:
            items = await client.invoices.list()
        if status:
            items = [i for i in items if i.status == status]
        if json_output:
            click.echo(json.dumps([i.model_dump() for i in items], indent=2))
            return
        table = Table(title=f"Invoices ({len(items)})")
        for col in ("Number", "Client", "Status", "Version", "Period", "Total", "Generated"):
            table.add_column(col)
        for i in items:
            table.add_row(*_invoice_row(i))
        console.print(table)

    _run(_list())


@invoices.command("generate")
def invoices_generate():
    """Generate draft invoices from unprocessed charges."""

    async def _generate():
        async with _get_client() as client:
            with console.status("Generating invoices..."):
                result = await client.invoices.generate()
        console.print(f"[green]Generated {result.generated} invoices.[/green]")
        if result.errors:
            console.print(f"[yellow]{result.errors} clients failed.[/yellow]")

    _run(_generate())


@invoices.command("approve")
@click.argument("invoice_id", required=False)
@click.option("--all", "approve_all", is_flag=True, help="Approve every draft")
def invoices_approve(invoice_id: Optional[str], approve_all: bool):
    """Approve a draft invoice. Approved invoices cannot be modified."""
    if not invoice_id and not approve_all:
        raise click.UsageError("Pass an INVOICE_ID or --all")

    async def _approve():
        async with _get_client() as client:
            if approve_all:
                with console.status("Approving drafts..."):
                    result = await client.invoices.approve_all()
                _print_bulk("Approved", result)
                return
            with console.status("Approving..."):
                await client.invoices.approve(invoice_id)
            console.print(f"[green]Invoice {invoice_id} approved.[/green]")

    _run(_approve())


def _report_outcome(outcome: WatchOutcome) -> None:
    if outcome.completed:
        version = f" (v{outcome.final_state.version})" if outcome.final_state else ""
        console.print(f"[green]Invoice {outcome.resource_id} regenerated{version}.[/green]")
    elif outcome.status is WatchStatus.UNREACHABLE:
        console.print("[yellow]Invoice state could not be read; regeneration may still be running.[/yellow]")
    else:
        console.print(
            f"[yellow]No new version after {outcome.elapsed:.0f}s; regeneration may still be running.[/yellow]"
        )


@invoices.command("regenerate")
@click.argument("invoice_id", required=False)
@click.option("--all", "regenerate_all", is_flag=True, help="Regenerate every draft")
@click.option("--poll-interval", type=click.FloatRange(min=0, min_open=True), default=None, help="Seconds between state reads")
@click.option("--max-attempts", type=click.IntRange(min=1), default=None, help="State reads before giving up")
def invoices_regenerate(
    invoice_id: Optional[str], regenerate_all: bool,
    poll_interval: Optional[float], max_attempts: Optional[int],
):
    """Regenerate a draft with fresh data and wait for the new version."""
    if not invoice_id and not regenerate_all:
        raise click.UsageError("Pass an INVOICE_ID or --all")

    async def _regenerate():
        async with _get_client(poll_interval=poll_interval, max_attempts=max_attempts) as client:
            if regenerate_all:
                with console.status("Regenerating drafts..."):
                    result = await client.invoices.regenerate_all()
                _print_bulk("Regenerated", result)
                return
            with console.status(f"Regenerating {invoice_id}..."):
                outcome = await client.regenerate_invoice(invoice_id)
            _report_outcome(outcome)
            if outcome.timed_out:
                # One authoritative read; show whatever it reveals.
                invoice = await client.invoices.get(invoice_id)
                console.print(f"Current state: {invoice.status} v{invoice.version}, generated {invoice.generated_at}")
                console.print(f"[dim]Retry with `jetpack invoices regenerate {invoice_id}`.[/dim]")

    _run(_regenerate())


@invoices.command("preflight")
@click.option("--json-output", "--json", is_flag=True)
def invoices_preflight(json_output: bool):
    """Validate unprocessed charges before generating."""

    async def _preflight():
        async with _get_client() as client:
            with console.status("Running preflight validation..."):
                result = await client.invoices.preflight()
        if json_output:
            click.echo(json.dumps(result.model_dump(by_alias=True), indent=2))
            return
        s = result.summary
        color = "red" if s.failed else "yellow" if s.warnings else "green"
        console.print(
            f"[{color}]{s.total_clients} clients: {s.passed} passed, "
            f"{s.warnings} with warnings, {s.failed} failed[/{color}]"
        )
        for c in result.clients:
            if c.issues or c.warnings:
                console.print(f"  {c.client_name}: {len(c.issues)} issues, {len(c.warnings)} warnings")
        if s.has_global_issues:
            console.print(f"[red]{len(result.global_issues)} global data issues[/red]")

    _run(_preflight())


@invoices.command("files")
@click.argument("invoice_id")
@click.option("--type", "kind", type=click.Choice(["pdf", "xlsx"]), default="pdf")
@click.option("--open", "open_url", is_flag=True, help="Open in the browser")
def invoices_files(invoice_id: str, kind: str, open_url: bool):
    """Print (or open) the signed URL of an invoice file."""

    async def _files():
        async with _get_client() as client:
            files = await client.invoices.files(invoice_id)
        url = files.url_for(kind)
        if open_url:
            click.launch(url)
        click.echo(url)

    _run(_files())
