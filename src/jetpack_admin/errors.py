"""
Jetpack admin error types.
"""

from typing import Any, Optional


class JetpackError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class AuthError(JetpackError):
    def __init__(self, message: str, code: str = "auth_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class InvoiceError(JetpackError):
    def __init__(self, message: str, code: str = "invoice_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class ConnectionError(JetpackError):
    def __init__(self, message: str):
        super().__init__("connection_error", message)


class StartActionError(JetpackError):
    """The job-trigger call for a watched resource failed."""

    def __init__(self, message: str, resource_id: Optional[str] = None, details: Optional[dict[str, Any]] = None):
        super().__init__("start_action_error", message, details)
        self.resource_id = resource_id


class TransientPollError(JetpackError):
    """A single state read failed during polling. Never escapes the watcher."""

    def __init__(self, message: str, attempt: int):
        super().__init__("transient_poll_error", message, {"attempt": attempt})
        self.attempt = attempt
