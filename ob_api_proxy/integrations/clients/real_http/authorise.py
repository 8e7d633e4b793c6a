"""
Client-credentials token client.

Obtains a machine-to-machine access token from the institution's OAuth2
token endpoint. Tokens are not cached here; every call performs one grant.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ob_api_proxy.integrations.contracts.interfaces import AccessTokenProvider, TenantConfig
from ob_api_proxy.integrations.policy.errors import AuthFailureError

logger = logging.getLogger(__name__)


class ClientCredentialsTokenClient(AccessTokenProvider):
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._transport = transport

    async def obtain_access_token(self, config: TenantConfig) -> str:
        credentials = config.client_credentials
        form: Dict[str, str] = {"grant_type": "client_credentials", "scope": credentials.scope}
        auth: Optional[httpx.BasicAuth] = None
        if credentials.auth_method == "client_secret_post":
            form["client_id"] = credentials.client_id
            form["client_secret"] = credentials.client_secret.get_secret_value()
        else:
            auth = httpx.BasicAuth(credentials.client_id, credentials.client_secret.get_secret_value())

        url = config.authorization_endpoint
        logger.debug("Requesting client-credentials token from %s scope=%s", url, credentials.scope)
        try:
            async with httpx.AsyncClient(timeout=config.timeout_seconds, transport=self._transport) as client:
                response = await client.post(url, data=form, auth=auth, headers={"Accept": "application/json"})
        except httpx.TimeoutException as exc:
            logger.error("Token request to %s timed out", url)
            raise AuthFailureError(f"Token request timed out: {exc}") from exc
        except httpx.RequestError as exc:
            logger.error("Token request to %s failed: %s", url, exc)
            raise AuthFailureError(f"Token request failed: {exc}") from exc

        if not response.is_success:
            logger.error("Token endpoint returned HTTP %s", response.status_code)
            raise AuthFailureError(
                f"Token endpoint returned HTTP {response.status_code}",
                status_code=response.status_code,
                payload={"body": response.text},
            )

        return _extract_access_token(response)


def _extract_access_token(response: httpx.Response) -> str:
    try:
        data: Any = response.json()
    except ValueError as exc:
        raise AuthFailureError(
            "Token response is not JSON",
            status_code=response.status_code,
            payload={"body": response.text},
        ) from exc

    if not isinstance(data, dict):
        raise AuthFailureError("Token response is not a JSON object", status_code=response.status_code)

    token = data.get("access_token")
    if not isinstance(token, str) or not token.strip():
        raise AuthFailureError("Token response missing access_token", status_code=response.status_code)

    token_type = data.get("token_type")
    if token_type is not None and str(token_type).lower() != "bearer":
        raise AuthFailureError(
            f"Unsupported token_type '{token_type}'",
            status_code=response.status_code,
        )
    return token
