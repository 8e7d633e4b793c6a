"""
Persistence handoff for accepted payments.

Records are keyed by interaction id and written once. A failed write is
reported as PaymentRecordError; the payment already exists upstream, so the
caller decides how loudly to surface it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ob_api_proxy.integrations.contracts.interfaces import PaymentStore
from ob_api_proxy.integrations.contracts.payments import PersistedPaymentRecord
from ob_api_proxy.integrations.policy.errors import PaymentRecordError

logger = logging.getLogger(__name__)


class PaymentRecorder:
    def __init__(self, store: PaymentStore) -> None:
        self.store = store

    async def record(self, interaction_id: str, record: PersistedPaymentRecord) -> None:
        if record.interaction_id != interaction_id:
            raise PaymentRecordError(
                f"Record belongs to interaction {record.interaction_id}, not {interaction_id}",
                payload={"interaction_id": interaction_id},
            )
        try:
            await self.store.save_payment(interaction_id, record.to_document())
        except PaymentRecordError:
            raise
        except Exception as exc:
            logger.exception("Payment store write failed for interaction %s", interaction_id)
            raise PaymentRecordError(
                f"Payment store write failed: {exc}",
                payload={"interaction_id": interaction_id},
            ) from exc
        logger.debug("Payment %s recorded for interaction %s", record.Data.PaymentId, interaction_id)

    async def get_payment(self, interaction_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored record for a status-polling or reporting path."""
        return await self.store.get_payment(interaction_id)
