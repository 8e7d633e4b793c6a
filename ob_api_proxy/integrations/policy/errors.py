"""
Classified failures raised by the payment setup core.

Every failure surfaced to the routing layer is one of these. They all carry
http_status=500: from the caller's point of view the proxy itself failed to
complete the operation, whatever the underlying cause.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class PaymentSetupError(Exception):
    http_status: int = 500

    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.payload = payload or {}

    @property
    def kind(self) -> str:
        return type(self).__name__


class MissingContextError(PaymentSetupError):
    """Inbound headers/config are absent or malformed."""


class AuthFailureError(PaymentSetupError):
    """Client-credentials token could not be obtained."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, payload=payload)
        self.status_code = status_code


class InvalidInstructionError(PaymentSetupError):
    def __init__(self, errors: List[str]) -> None:
        super().__init__(f"Invalid payment instruction: {'; '.join(errors)}", payload={"errors": list(errors)})
        self.errors = list(errors)


class TransportError(PaymentSetupError):
    """Network failure or timeout reaching the institution."""


class UpstreamHttpError(PaymentSetupError):
    def __init__(self, status_code: int, body: Any = None) -> None:
        super().__init__(
            f"Payment endpoint returned HTTP {status_code}",
            payload={"status_code": status_code, "body": body},
        )
        self.status_code = status_code
        self.body = body


class RejectedPaymentError(PaymentSetupError):
    def __init__(self, status: Optional[str], *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(f'Payment response status: "{status}"', payload=payload)
        self.status = status


class MalformedResponseError(PaymentSetupError):
    """Accepted status without a PaymentId, or no Data block at all."""


class PaymentRecordError(PaymentSetupError):
    """Local persistence failed. Reported alongside a successful payment, never raised to the caller."""
