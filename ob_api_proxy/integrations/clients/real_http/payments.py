"""
Real Payments HTTP Client.

Submits payment-initiation payloads to an institution's
/open-banking/v{version}/payments resource. One call per submission, no retry:
a request that reached the institution may already be in effect upstream.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ob_api_proxy.integrations.contracts.interfaces import (
    PaymentInitiationGateway,
    RequestContext,
    SubmissionResponse,
)
from ob_api_proxy.integrations.contracts.payments import PaymentInitiationPayload
from ob_api_proxy.integrations.policy.errors import MissingContextError, TransportError, UpstreamHttpError

logger = logging.getLogger(__name__)


def payments_path(api_version: str) -> str:
    return f"/open-banking/v{api_version}/payments"


def build_payment_headers(context: RequestContext) -> Dict[str, str]:
    if not context.access_token:
        raise MissingContextError("accessToken missing from request context")

    headers: Dict[str, str] = {
        "Authorization": f"Bearer {context.access_token}",
        "Content-Type": "application/json",
        "Accept": "application/json",
        "x-fapi-financial-id": context.fapi_financial_id,
        "x-fapi-interaction-id": context.interaction_id,
        "x-idempotency-key": context.idempotency_key,
    }
    if context.customer_last_logged_time:
        headers["x-fapi-customer-last-logged-time"] = context.customer_last_logged_time
    if context.customer_ip_address:
        headers["x-fapi-customer-ip-address"] = context.customer_ip_address
    if context.jws_signature:
        headers["x-jws-signature"] = context.jws_signature
    return headers


class RealPaymentsClient(PaymentInitiationGateway):
    def __init__(
        self,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def post_payments(
        self,
        resource_path: str,
        versioned_sub_path: str,
        context: RequestContext,
        payload: PaymentInitiationPayload,
    ) -> SubmissionResponse:
        headers = build_payment_headers(context)
        url = f"{resource_path.rstrip('/')}{versioned_sub_path}"
        timeout = self.timeout_seconds or context.config.timeout_seconds

        logger.info("Submitting payment to %s interaction_id=%s", url, context.interaction_id)
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload.to_wire(), headers=headers)
        except httpx.TimeoutException as exc:
            logger.error("Payment submission to %s timed out", url)
            raise TransportError(
                f"Payment submission timed out: {exc}",
                payload={"url": url, "interaction_id": context.interaction_id},
            ) from exc
        except httpx.RequestError as exc:
            logger.error("Request error submitting payment to %s: %s", url, exc)
            raise TransportError(
                f"Payment submission failed: {exc}",
                payload={"url": url, "interaction_id": context.interaction_id},
            ) from exc

        body = _decode_body(response)
        if not response.is_success:
            logger.error("HTTP error from payment endpoint: %s %s", response.status_code, response.text)
            raise UpstreamHttpError(response.status_code, body if body is not None else response.text)

        logger.info("Received payment response: status=%s", response.status_code)
        return SubmissionResponse(
            status_code=response.status_code,
            body=body,
            headers=dict(response.headers),
        )


def _decode_body(response: httpx.Response) -> Optional[Dict[str, Any]]:
    if not response.content:
        return None
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
