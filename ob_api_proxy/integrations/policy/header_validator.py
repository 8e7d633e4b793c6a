"""
Inbound header verification.

Turns the loose header bag handed over by the routing layer into a validated,
immutable RequestContext. Runs before any network call.
"""

from __future__ import annotations

import uuid
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from ob_api_proxy.integrations.contracts.interfaces import RequestContext, TenantConfig
from ob_api_proxy.integrations.policy.errors import MissingContextError

INTERACTION_ID_KEYS = ("interactionId", "interaction_id", "x-fapi-interaction-id")
FINANCIAL_ID_KEYS = ("fapiFinancialId", "fapi_financial_id", "x-fapi-financial-id")
IDEMPOTENCY_KEY_KEYS = ("idempotencyKey", "idempotency_key", "x-idempotency-key")
LAST_LOGGED_KEYS = ("customerLastLogged", "customer_last_logged_time", "x-fapi-customer-last-logged-time")
CUSTOMER_IP_KEYS = ("customerIp", "customer_ip_address", "x-fapi-customer-ip-address")
JWS_SIGNATURE_KEYS = ("jwsSignature", "jws_signature", "x-jws-signature")

_IDEMPOTENCY_NAMESPACE = uuid.UUID("5b0c8f43-6a55-4a1e-9d57-2f0c0f6b5e21")


def _first_non_empty(headers: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = headers.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            value = str(value)
        if not value.strip():
            continue
        return value.strip()
    return None


def _coerce_config(raw: Any) -> TenantConfig:
    if isinstance(raw, TenantConfig):
        return raw
    if not isinstance(raw, Mapping):
        raise MissingContextError("config header missing")
    try:
        return TenantConfig(**raw)
    except ValidationError as exc:
        raise MissingContextError(f"config header malformed: {exc}") from exc


def derive_idempotency_key(interaction_id: str) -> str:
    """Stable per interaction so a replayed interaction cannot create a second payment upstream."""
    return str(uuid.uuid5(_IDEMPOTENCY_NAMESPACE, interaction_id))


def verify_headers(headers: Optional[Mapping[str, Any]]) -> RequestContext:
    """
    Validate mandatory context and return it as a RequestContext.

    Raises:
        MissingContextError: interactionId, config or the institution's
            financial id is absent or malformed.
    """
    if not isinstance(headers, Mapping):
        raise MissingContextError("headers missing")

    interaction_id = _first_non_empty(headers, *INTERACTION_ID_KEYS)
    if not interaction_id:
        raise MissingContextError("interactionId missing from headers")

    config = _coerce_config(headers.get("config"))

    financial_id = _first_non_empty(headers, *FINANCIAL_ID_KEYS) or config.fapi_financial_id
    if not financial_id:
        raise MissingContextError(
            "fapiFinancialId missing from headers and config",
            payload={"interaction_id": interaction_id},
        )

    idempotency_key = _first_non_empty(headers, *IDEMPOTENCY_KEY_KEYS) or derive_idempotency_key(interaction_id)

    return RequestContext(
        interaction_id=interaction_id,
        config=config,
        fapi_financial_id=financial_id,
        idempotency_key=idempotency_key,
        customer_last_logged_time=_first_non_empty(headers, *LAST_LOGGED_KEYS),
        customer_ip_address=_first_non_empty(headers, *CUSTOMER_IP_KEYS),
        jws_signature=_first_non_empty(headers, *JWS_SIGNATURE_KEYS),
        access_token=_first_non_empty(headers, "accessToken", "access_token"),
    )
