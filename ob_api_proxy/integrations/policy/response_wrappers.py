from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ValidationError

from ob_api_proxy.integrations.contracts.interfaces import SubmissionResponse, SubmissionStatus
from ob_api_proxy.integrations.contracts.payments import is_accepted_status
from ob_api_proxy.integrations.policy.errors import MalformedResponseError, RejectedPaymentError


class AcceptedPaymentModel(BaseModel):
    payment_id: str
    status: SubmissionStatus


def interpret_submission_response(response: SubmissionResponse) -> Tuple[str, SubmissionStatus]:
    """
    Classify a /payments response.

    AcceptedTechnicalValidation / AcceptedCustomerProfile with a PaymentId is
    the only success. An accepted status without PaymentId, or no Data object,
    is malformed. Any other status (including a missing one) is a rejection.
    """
    body = response.body
    data = body.get("Data") if isinstance(body, dict) else None
    if not isinstance(data, dict):
        raise MalformedResponseError("Payment response missing payload", payload=_diagnostics(response))

    status = _first_non_empty(data, "Status")
    if not is_accepted_status(status):
        raise RejectedPaymentError(status, payload=_diagnostics(response))

    payment_id = _first_non_empty(data, "PaymentId")
    if payment_id is None:
        raise MalformedResponseError(
            f'Payment response status "{status}" carries no PaymentId',
            payload=_diagnostics(response),
        )
    if isinstance(payment_id, bool) or not isinstance(payment_id, (str, int)):
        raise MalformedResponseError(
            f"Payment response PaymentId has unsupported type {type(payment_id).__name__}",
            payload=_diagnostics(response),
        )

    try:
        model = AcceptedPaymentModel(payment_id=str(payment_id), status=status)
    except ValidationError as exc:
        raise MalformedResponseError(f"Response validation failed: {exc}", payload=_diagnostics(response)) from exc
    return model.payment_id, model.status


def _first_non_empty(data: Dict[str, Any], *keys: str) -> Optional[Any]:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _diagnostics(response: SubmissionResponse) -> Dict[str, Any]:
    return {"status_code": response.status_code, "body": response.body}
