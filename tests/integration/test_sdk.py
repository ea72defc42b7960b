"""
Integration tests for the jetpack-admin SDK: run against a real dashboard.

Requires environment variables:
  JETPACK_ACCESS_TOKEN    admin access token
  JETPACK_BASE_URL        (optional) dashboard base URL
  JETPACK_DRAFT_INVOICE   (optional) id of a draft invoice that may be regenerated

Run: JETPACK_INTEGRATION=1 pytest tests/integration/ -v
"""

import os

import pytest

from jetpack_admin import AsyncJetpackAdmin, AuthError
from jetpack_admin.transport.http import DEFAULT_BASE_URL

SKIP = not os.environ.get("JETPACK_INTEGRATION")
ACCESS_TOKEN = os.environ.get("JETPACK_ACCESS_TOKEN", "")
BASE_URL = os.environ.get("JETPACK_BASE_URL", DEFAULT_BASE_URL)
DRAFT_INVOICE = os.environ.get("JETPACK_DRAFT_INVOICE")

pytestmark = pytest.mark.skipif(SKIP, reason="JETPACK_INTEGRATION not set")


def make_client() -> AsyncJetpackAdmin:
    return AsyncJetpackAdmin(access_token=ACCESS_TOKEN, base_url=BASE_URL)


class TestInvoices:
    @pytest.mark.asyncio
    async def test_list_invoices(self):
        async with make_client() as client:
            invoices = await client.invoices.list()
        assert all(i.version >= 1 for i in invoices)

    @pytest.mark.asyncio
    async def test_preflight(self):
        async with make_client() as client:
            result = await client.invoices.preflight()
        assert result.summary.total_clients == len(result.clients)

    @pytest.mark.asyncio
    async def test_rejects_invalid_token(self):
        async with AsyncJetpackAdmin(access_token="invalid", base_url=BASE_URL) as client:
            with pytest.raises(AuthError):
                await client.invoices.list()


class TestRegeneration:
    @pytest.mark.asyncio
    @pytest.mark.skipif(not DRAFT_INVOICE, reason="JETPACK_DRAFT_INVOICE not set")
    async def test_regenerate_reports_new_version(self):
        async with make_client() as client:
            before = await client.invoices.get(DRAFT_INVOICE)
            outcome = await client.regenerate_invoice(DRAFT_INVOICE)
        assert outcome.completed
        if outcome.final_state is not None:
            assert outcome.final_state.version > before.version
