"""
Real Redis-backed payment store for production when REDIS_URL is set.
Implements the same interface as ob_api_proxy.database.redis (in-memory stub).
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ob_api_proxy.integrations.contracts.interfaces import PaymentStore
from ob_api_proxy.integrations.policy.errors import PaymentRecordError


class RedisPaymentStore(PaymentStore):
    """
    Stores one JSON document per interaction under payments:<interaction_id>.
    Writes use SET NX, so a record can never be overwritten.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        ttl: Optional[int] = None,
        client: Optional[Any] = None,
    ) -> None:
        if client is None and not url:
            raise ValueError("RedisPaymentStore needs a url or a client")
        self._client = client if client is not None else redis.from_url(url, decode_responses=True)
        self._ttl = ttl

    def _key(self, interaction_id: str) -> str:
        return f"payments:{interaction_id}"

    async def save_payment(self, interaction_id: str, record: Dict[str, Any]) -> None:
        payload = json.dumps(record, default=str)
        try:
            written = await self._client.set(self._key(interaction_id), payload, nx=True, ex=self._ttl)
        except RedisError as exc:
            raise PaymentRecordError(
                f"Redis write failed for interaction {interaction_id}: {exc}",
                payload={"interaction_id": interaction_id},
            ) from exc
        if not written:
            raise PaymentRecordError(
                f"Payment already recorded for interaction {interaction_id}",
                payload={"interaction_id": interaction_id},
            )

    async def get_payment(self, interaction_id: str) -> Optional[Dict[str, Any]]:
        raw = await self._client.get(self._key(interaction_id))
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return None

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        await self._client.aclose()
