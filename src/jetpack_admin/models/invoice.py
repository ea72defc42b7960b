"""
Invoice models: JSON shapes of the /admin/invoices endpoints.
"""

from __future__ import annotations

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from jetpack_admin.errors import InvoiceError


class Client(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    company_name: str = ""
    short_code: Optional[str] = None


class Invoice(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    client_id: str = ""
    invoice_number: str = ""
    invoice_date: str = ""
    period_start: str = ""
    period_end: str = ""
    subtotal: float = 0.0
    total_markup: float = 0.0
    total_amount: float = 0.0
    status: str = "draft"
    generated_at: Optional[str] = None
    approved_at: Optional[str] = None
    version: int = 1
    client: Optional[Client] = None

    @property
    def is_draft(self) -> bool:
        return self.status == "draft"


class RegeneratedInvoice(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    invoice_number: str = ""
    version: int = 1
    subtotal: float = 0.0
    total_markup: float = 0.0
    total_amount: float = 0.0
    transactions: int = 0


class RegenerateValidation(BaseModel):
    passed: bool = True
    warnings: int = 0
    summary: Optional[dict[str, Any]] = None


class RegenerateResult(BaseModel):
    """POST /admin/invoices/{id}/regenerate response"""
    success: bool = False
    invoice: Optional[RegeneratedInvoice] = None
    validation: Optional[RegenerateValidation] = None


class GenerateResult(BaseModel):
    """POST /admin/invoices/generate response"""
    success: bool = False
    generated: int = 0
    errors: int = 0
    invoices: list[dict[str, Any]] = Field(default_factory=list)
    error_details: list[dict[str, Any]] = Field(default_factory=list, alias="errorDetails")

    model_config = ConfigDict(populate_by_name=True)


class PreflightClientResult(BaseModel):
    client_id: str = Field(alias="clientId")
    client_name: str = Field("", alias="clientName")
    passed: bool = True
    issues: list[Any] = Field(default_factory=list)
    warnings: list[Any] = Field(default_factory=list)
    summary: Optional[dict[str, Any]] = None

    model_config = ConfigDict(populate_by_name=True)


class PreflightSummary(BaseModel):
    total_clients: int = Field(0, alias="totalClients")
    passed: int = 0
    warnings: int = 0
    failed: int = 0
    has_global_issues: bool = Field(False, alias="hasGlobalIssues")

    model_config = ConfigDict(populate_by_name=True)


class PreflightResult(BaseModel):
    """GET /admin/invoices/preflight response"""
    success: bool = False
    message: Optional[str] = None
    shipbob_invoice_count: int = Field(0, alias="shipbobInvoiceCount")
    global_issues: list[Any] = Field(default_factory=list, alias="globalIssues")
    clients: list[PreflightClientResult] = Field(default_factory=list)
    summary: PreflightSummary = Field(default_factory=PreflightSummary)

    model_config = ConfigDict(populate_by_name=True)

    @property
    def has_issues(self) -> bool:
        return self.summary.failed > 0 or self.summary.warnings > 0


class InvoiceFiles(BaseModel):
    pdf_url: Optional[str] = Field(None, alias="pdfUrl")
    xls_url: Optional[str] = Field(None, alias="xlsUrl")

    model_config = ConfigDict(populate_by_name=True)

    def url_for(self, kind: str) -> str:
        url = self.pdf_url if kind == "pdf" else self.xls_url
        if not url:
            raise InvoiceError(f"{kind.upper()} file not available", code="file_unavailable")
        return url


class BulkResult(BaseModel):
    """Outcome of a sequential bulk action over draft invoices."""
    succeeded: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)
