"""
Open Banking institution: MOCK payments client.

⚠️  Mock implementation for development and testing. Makes no network calls.
    Responds like an ASPSP /payments resource with a configurable status so
    accepted, rejected and malformed outcomes can all be exercised locally.
"""

import hashlib
import logging
from typing import Any, Dict, List, Optional

from ob_api_proxy.integrations.clients.real_http.payments import build_payment_headers
from ob_api_proxy.integrations.contracts.interfaces import (
    PaymentInitiationGateway,
    RequestContext,
    SubmissionResponse,
    SubmissionStatus,
)
from ob_api_proxy.integrations.contracts.payments import PaymentInitiationPayload

logger = logging.getLogger(__name__)


class MockPaymentsClient(PaymentInitiationGateway):
    """
    Mock ASPSP payments resource.

    Parameters
    ----------
    status : str
        Data.Status returned for every submission. Default AcceptedTechnicalValidation.
    include_payment_id : bool
        If False, the response omits Data.PaymentId. Default True.
    """

    def __init__(
        self,
        status: str = SubmissionStatus.ACCEPTED_TECHNICAL_VALIDATION.value,
        include_payment_id: bool = True,
    ) -> None:
        self._status = status
        self._include_payment_id = include_payment_id

        # In-memory log of submissions (reset on restart)
        self.submissions: List[Dict[str, Any]] = []

        logger.info("[OB MOCK] Payments client initialised (status=%s)", status)

    def _payment_id(self, idempotency_key: str) -> str:
        # Same idempotency key, same PaymentId, as a compliant ASPSP would answer.
        return f"PMT-{hashlib.sha256(idempotency_key.encode('utf-8')).hexdigest()[:16].upper()}"

    async def post_payments(
        self,
        resource_path: str,
        versioned_sub_path: str,
        context: RequestContext,
        payload: PaymentInitiationPayload,
    ) -> SubmissionResponse:
        headers = build_payment_headers(context)
        url = f"{resource_path.rstrip('/')}{versioned_sub_path}"
        self.submissions.append({"url": url, "headers": headers, "body": payload.to_wire()})
        logger.info("[OB MOCK] Payment submitted url=%s interaction_id=%s", url, context.interaction_id)

        data: Dict[str, Any] = {
            "Status": self._status,
            "Initiation": payload.to_wire()["Data"]["Initiation"],
        }
        payment_id: Optional[str] = None
        if self._include_payment_id:
            payment_id = self._payment_id(context.idempotency_key)
            data["PaymentId"] = payment_id

        logger.info("[OB MOCK] Payment %s → %s", payment_id, self._status)
        return SubmissionResponse(
            status_code=201,
            body={"Data": data, "Risk": dict(payload.Risk), "Links": {"Self": f"{url}/{payment_id or ''}"}},
            headers={"x-fapi-interaction-id": context.interaction_id},
        )
