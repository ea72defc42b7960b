"""
jetpack-admin: Jetpack admin invoicing SDK for Python.

REST client for the admin invoicing endpoints, with completion watching
for invoice regeneration.
"""

from jetpack_admin.client import JetpackAdmin, AsyncJetpackAdmin
from jetpack_admin.invoices import InvoicesAPI
from jetpack_admin.watcher import CompletionWatcher
from jetpack_admin.errors import (
    JetpackError, AuthError, InvoiceError, ConnectionError, StartActionError, TransientPollError,
)
from jetpack_admin.models.config import WatchConfig
from jetpack_admin.models.watch import WatchedResource, WatchOutcome, WatchStatus

__version__ = "0.1.0"
__all__ = [
    "JetpackAdmin",
    "AsyncJetpackAdmin",
    "InvoicesAPI",
    "CompletionWatcher",
    "WatchConfig",
    "WatchedResource",
    "WatchOutcome",
    "WatchStatus",
    "JetpackError",
    "AuthError",
    "InvoiceError",
    "ConnectionError",
    "StartActionError",
    "TransientPollError",
]
