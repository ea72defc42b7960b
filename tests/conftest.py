"""Shared fixtures: a fake clock for the watcher cadence and an in-memory invoices server."""

import asyncio
import json
from typing import Any, Optional

import httpx
import pytest

from jetpack_admin import AsyncJetpackAdmin, WatchConfig


class FakeClock:
    """Drives CompletionWatcher's sleep/clock hooks without real waiting."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


async def _drain(ticks: int = 10) -> None:
    for _ in range(ticks):
        await asyncio.sleep(0)


class FakeInvoiceServer:
    """Answers the /api/admin/invoices endpoints from an in-memory table."""

    def __init__(self) -> None:
        self.invoices: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        # Set per test: bump the version on regenerate, hang the regenerate response, fail it.
        self.regenerate_bumps = True
        self.regenerate_hangs = False
        self.regenerate_error: Optional[tuple[int, str]] = None
        self.approve_errors: set[str] = set()
        self.preflight: dict[str, Any] = {"success": True, "clients": [], "summary": {}}
        self.files: dict[str, dict[str, Any]] = {}

    def add(self, invoice_id: str, **fields: Any) -> dict[str, Any]:
        invoice = {
            "id": invoice_id,
            "client_id": "client-1",
            "invoice_number": f"JP-{invoice_id}",
            "period_start": "2025-01-01",
            "period_end": "2025-01-07",
            "total_amount": 100.0,
            "status": "draft",
            "generated_at": "2025-01-08T00:00:00Z",
            "version": 1,
        }
        invoice.update(fields)
        self.invoices[invoice_id] = invoice
        return invoice

    @staticmethod
    def _json(status: int, body: Any) -> httpx.Response:
        return httpx.Response(status, content=json.dumps(body), headers={"Content-Type": "application/json"})

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        parts = path.strip("/").split("/")
        if path == "/admin/invoices" and request.method == "GET":
            return self._json(200, {"invoices": list(self.invoices.values())})
        if path == "/admin/invoices/preflight":
            return self._json(200, self.preflight)
        if path == "/admin/invoices/generate":
            return self._json(200, {"success": True, "generated": 2, "errors": 0, "invoices": [], "errorDetails": []})
        if len(parts) == 4 and parts[3] == "approve":
            invoice_id = parts[2]
            if invoice_id in self.approve_errors:
                return self._json(500, {"error": "Failed to approve invoice"})
            self.invoices[invoice_id]["status"] = "approved"
            return self._json(200, {"success": True})
        if len(parts) == 4 and parts[3] == "regenerate":
            return await self._regenerate(parts[2])
        if len(parts) == 4 and parts[3] == "files":
            return self._json(200, self.files.get(parts[2], {}))
        return self._json(404, {"error": "Not found"})

    async def _regenerate(self, invoice_id: str) -> httpx.Response:
        if self.regenerate_error:
            status, message = self.regenerate_error
            return self._json(status, {"error": message})
        invoice = self.invoices[invoice_id]
        if self.regenerate_bumps:
            invoice["version"] += 1
            invoice["generated_at"] = f"2025-01-08T00:0{invoice['version']}:00Z"
        if self.regenerate_hangs:
            await asyncio.Event().wait()
        return self._json(200, {
            "success": True,
            "invoice": {"id": invoice_id, "invoice_number": invoice["invoice_number"], "version": invoice["version"]},
            "validation": {"passed": True, "warnings": 0},
        })

    def client(self, watch_config: Optional[WatchConfig] = None) -> AsyncJetpackAdmin:
        return AsyncJetpackAdmin(
            access_token="test-token",
            base_url="https://jetpack.test",
            watch_config=watch_config or WatchConfig(poll_interval=0.01, max_attempts=5),
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def server() -> FakeInvoiceServer:
    return FakeInvoiceServer()


@pytest.fixture
def drain():
    """Let losing paths run to completion after a watch resolves."""
    return _drain
