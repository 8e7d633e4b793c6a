"""
Lightweight in-memory payment store for local development and tests.

Implements the same interface as ob_api_proxy.database.redis_real so the
payment setup flow can run without a Redis instance. It is NOT intended for
production use: records are lost on restart.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any, Dict, Optional

from ob_api_proxy.integrations.contracts.interfaces import PaymentStore
from ob_api_proxy.integrations.policy.errors import PaymentRecordError


class InMemoryPaymentStore(PaymentStore):
    def __init__(self) -> None:
        # interaction_id -> record document
        self._payments: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def save_payment(self, interaction_id: str, record: Dict[str, Any]) -> None:
        async with self._lock:
            if interaction_id in self._payments:
                raise PaymentRecordError(
                    f"Payment already recorded for interaction {interaction_id}",
                    payload={"interaction_id": interaction_id},
                )
            self._payments[interaction_id] = copy.deepcopy(record)

    async def get_payment(self, interaction_id: str) -> Optional[Dict[str, Any]]:
        record = self._payments.get(interaction_id)
        return copy.deepcopy(record) if record is not None else None

    def ping(self) -> bool:
        return True
