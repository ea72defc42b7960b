"""
Invoices REST API: /admin/invoices and the regenerate-and-watch flow.
"""

from __future__ import annotations

import logging
from typing import Optional

from jetpack_admin.errors import InvoiceError, JetpackError
from jetpack_admin.models.invoice import (
    BulkResult,
    GenerateResult,
    Invoice,
    InvoiceFiles,
    PreflightResult,
    RegenerateResult,
)
from jetpack_admin.models.watch import WatchedResource, WatchOutcome
from jetpack_admin.transport.http import HttpClient
from jetpack_admin.watcher import CompletionWatcher, OutcomeCallback

logger = logging.getLogger(__name__)


class InvoicesAPI:
    def __init__(self, http: HttpClient):
        self._http = http

    async def list(self) -> list[Invoice]:
        """List all invoices, drafts and approved."""
        data = await self._http.get("/admin/invoices")
        return [Invoice.model_validate(i) for i in (data or {}).get("invoices") or []]

    async def find(self, invoice_id: str) -> Optional[Invoice]:
        for invoice in await self.list():
            if invoice.id == invoice_id:
                return invoice
        return None

    async def get(self, invoice_id: str) -> Invoice:
        invoice = await self.find(invoice_id)
        if invoice is None:
            raise InvoiceError(f"Invoice {invoice_id} not found", code="not_found")
        return invoice

    async def generate(self) -> GenerateResult:
        """Generate draft invoices for every client with unprocessed charges."""
        return GenerateResult.model_validate(await self._http.post("/admin/invoices/generate") or {})

    async def approve(self, invoice_id: str) -> None:
        """Finalize a draft. Approved invoices cannot be modified."""
        await self._http.post(f"/admin/invoices/{invoice_id}/approve")

    async def approve_all(self) -> BulkResult:
        return await self._for_each_draft(self.approve, "approve")

    async def regenerate(self, invoice_id: str) -> RegenerateResult:
        """Trigger regeneration. The server increments the version on success."""
        return RegenerateResult.model_validate(
            await self._http.post(f"/admin/invoices/{invoice_id}/regenerate") or {}
        )

    async def regenerate_all(self) -> BulkResult:
        return await self._for_each_draft(self.regenerate, "regenerate")

    async def preflight(self) -> PreflightResult:
        """Validation report for the unprocessed charges the next run would bill."""
        return PreflightResult.model_validate(await self._http.get("/admin/invoices/preflight") or {})

    async def files(self, invoice_id: str) -> InvoiceFiles:
        return InvoiceFiles.model_validate(await self._http.get(f"/admin/invoices/{invoice_id}/files") or {})

    async def watched_state(self, invoice_id: str) -> Optional[WatchedResource]:
        invoice = await self.find(invoice_id)
        if invoice is None:
            return None
        return WatchedResource.from_invoice(invoice)

    async def regenerate_and_watch(
        self,
        invoice_id: str,
        watcher: Optional[CompletionWatcher] = None,
        on_outcome: Optional[OutcomeCallback] = None,
    ) -> WatchOutcome:
        """Regenerate a draft and wait until the new version is visible.

        The baseline is read before the regenerate request goes out. On a
        timed-out outcome the caller should read the invoice once more and
        show whatever state that reveals.
        """
        invoice = await self.get(invoice_id)
        if not invoice.is_draft:
            raise InvoiceError(
                f"Cannot regenerate {invoice.status} invoice. Only draft invoices can be regenerated.",
                code="not_draft",
            )
        baseline = WatchedResource.from_invoice(invoice)
        logger.debug("regenerating %s from v%d", invoice_id, baseline.version)
        watcher = watcher or CompletionWatcher()
        return await watcher.watch(
            invoice_id,
            lambda: self.regenerate(invoice_id),
            lambda: self.watched_state(invoice_id),
            baseline=baseline,
            on_outcome=on_outcome,
        )

    async def _for_each_draft(self, action, name: str) -> BulkResult:
        result = BulkResult()
        for invoice in await self.list():
            if not invoice.is_draft:
                continue
            try:
                await action(invoice.id)
            except JetpackError as e:
                logger.warning("%s %s failed: %s", name, invoice.id, e)
                result.failed.append(invoice.id)
            else:
                result.succeeded.append(invoice.id)
        return result
