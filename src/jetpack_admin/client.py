"""
JetpackAdmin / AsyncJetpackAdmin: main SDK clients.
"""

import asyncio
from typing import Any, Optional

import httpx

from jetpack_admin.invoices import InvoicesAPI
from jetpack_admin.models.config import WatchConfig
from jetpack_admin.models.invoice import BulkResult, GenerateResult, Invoice, InvoiceFiles, PreflightResult
from jetpack_admin.models.watch import WatchOutcome
from jetpack_admin.transport.http import DEFAULT_BASE_URL, HttpClient
from jetpack_admin.watcher import OutcomeCallback


class AsyncJetpackAdmin:
    """Async Jetpack admin client (primary)."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        watch_config: Optional[WatchConfig] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.watch_config = watch_config or WatchConfig()
        self.http = HttpClient(base_url=base_url, token=access_token, timeout=timeout, transport=transport)
        self.invoices = InvoicesAPI(self.http)
        self._watcher = self.watch_config.build_watcher()

    async def regenerate_invoice(
        self, invoice_id: str, on_outcome: Optional[OutcomeCallback] = None,
    ) -> WatchOutcome:
        """Regenerate a draft invoice and watch for the new version."""
        return await self.invoices.regenerate_and_watch(invoice_id, watcher=self._watcher, on_outcome=on_outcome)

    async def close(self) -> None:
        await self._watcher.aclose()
        await self.http.close()

    async def __aenter__(self) -> "AsyncJetpackAdmin":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()


class JetpackAdmin:
    """Sync wrapper around AsyncJetpackAdmin. Runs the event loop internally."""

    def __init__(self, **kwargs: Any):
        self._loop = asyncio.new_event_loop()
        self._async = AsyncJetpackAdmin(**kwargs)

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def invoices(self) -> InvoicesAPI:
        return self._async.invoices

    @property
    def watch_config(self) -> WatchConfig:
        return self._async.watch_config

    def list_invoices(self) -> list[Invoice]:
        return self._run(self._async.invoices.list())

    def get_invoice(self, invoice_id: str) -> Invoice:
        return self._run(self._async.invoices.get(invoice_id))

    def find_invoice(self, invoice_id: str) -> Optional[Invoice]:
        return self._run(self._async.invoices.find(invoice_id))

    def approve_invoice(self, invoice_id: str) -> None:
        self._run(self._async.invoices.approve(invoice_id))

    def approve_all(self) -> BulkResult:
        return self._run(self._async.invoices.approve_all())

    def generate_invoices(self) -> GenerateResult:
        return self._run(self._async.invoices.generate())

    def preflight(self) -> PreflightResult:
        return self._run(self._async.invoices.preflight())

    def invoice_files(self, invoice_id: str) -> InvoiceFiles:
        return self._run(self._async.invoices.files(invoice_id))

    def regenerate_all(self) -> BulkResult:
        return self._run(self._async.invoices.regenerate_all())

    def regenerate_invoice(self, invoice_id: str, on_outcome: Optional[OutcomeCallback] = None) -> WatchOutcome:
        return self._run(self._async.regenerate_invoice(invoice_id, on_outcome=on_outcome))

    def close(self) -> None:
        try:
            self._run(self._async.close())
        finally:
            self._loop.close()
