"""
Payment setup policy: header verification, payload building, response
interpretation, persistence handoff and the orchestrating service.
"""

from .errors import (
    AuthFailureError,
    InvalidInstructionError,
    MalformedResponseError,
    MissingContextError,
    PaymentRecordError,
    PaymentSetupError,
    RejectedPaymentError,
    TransportError,
    UpstreamHttpError,
)
from .header_validator import verify_headers
from .payment_data_builder import build_payments_data
from .payment_recorder import PaymentRecorder
from .payment_setup_service import PaymentSetupService
from .response_wrappers import interpret_submission_response

__all__ = [
    "AuthFailureError", "InvalidInstructionError", "MalformedResponseError",
    "MissingContextError", "PaymentRecordError", "PaymentSetupError",
    "RejectedPaymentError", "TransportError", "UpstreamHttpError",
    "verify_headers", "build_payments_data", "PaymentRecorder",
    "PaymentSetupService", "interpret_submission_response",
]
