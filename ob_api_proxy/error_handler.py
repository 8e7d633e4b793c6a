"""Error handling helpers for the payment setup core."""
from typing import Any, Dict
import logging

from ob_api_proxy.integrations.policy.errors import PaymentSetupError

logger = logging.getLogger(__name__)


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        if isinstance(exc, PaymentSetupError):
            logger.warning("Payment setup failed: %s: %s", exc.kind, exc.message)
            return {
                "status": exc.http_status,
                "error": exc.kind,
                "message": exc.message,
                "metadata": {"details": exc.payload, "context": context or {}},
            }

        logger.error("Unhandled exception in payment setup: %s", exc, exc_info=True)
        return {
            "status": 500,
            "error": "InternalError",
            "message": "An internal error occurred while setting up the payment.",
            "metadata": {"error": str(exc), "context": context or {}},
        }
