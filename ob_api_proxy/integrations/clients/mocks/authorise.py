"""
Mock client-credentials token client.

Returns an opaque token without calling an authorization server.
"""

import logging
import uuid

from ob_api_proxy.integrations.contracts.interfaces import AccessTokenProvider, TenantConfig
from ob_api_proxy.integrations.policy.errors import AuthFailureError

logger = logging.getLogger(__name__)


class MockTokenClient(AccessTokenProvider):
    def __init__(self, fail: bool = False) -> None:
        self._fail = fail
        self.calls = 0

    async def obtain_access_token(self, config: TenantConfig) -> str:
        self.calls += 1
        if self._fail:
            logger.info("[OB MOCK] Refusing token for client_id=%s", config.client_credentials.client_id)
            raise AuthFailureError("Token endpoint returned HTTP 401", status_code=401)
        logger.info("[OB MOCK] Issuing token for client_id=%s", config.client_credentials.client_id)
        return f"mock-{uuid.uuid4().hex}"
