"""
Wiring for host processes.

Chooses mock vs real integration clients and the payment store from the
environment, and builds a ready PaymentSetupService:

- INTEGRATIONS_MODE=mock|real   (default: real when ASPSP_CONFIG_PATH is set)
- REDIS_URL                     Redis-backed store when set, in-memory otherwise
- REDIS_PAYMENT_TTL             optional record TTL in seconds
- ASPSP_CONFIG_PATH             tenants YAML, defaults to config/aspsps.yml
- LOG_LEVEL                     root log level, default INFO
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os
from pathlib import Path
from typing import Dict, Optional

from ob_api_proxy.database.redis import InMemoryPaymentStore
from ob_api_proxy.integrations.clients.mocks import MockPaymentsClient, MockTokenClient
from ob_api_proxy.integrations.clients.real_http import ClientCredentialsTokenClient, RealPaymentsClient
from ob_api_proxy.integrations.contracts.interfaces import PaymentStore, TenantConfig
from ob_api_proxy.integrations.policy.payment_recorder import PaymentRecorder
from ob_api_proxy.integrations.policy.payment_setup_service import PaymentSetupService
from ob_api_proxy.utils.config_loader import get_tenant_config, load_tenants_file

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )


def _should_use_real_integrations() -> bool:
    mode = os.getenv("INTEGRATIONS_MODE", "").strip().lower()
    if mode in {"real", "live"}:
        return True
    if mode in {"mock", "test"}:
        return False
    return bool(os.getenv("ASPSP_CONFIG_PATH"))


def build_payment_store() -> PaymentStore:
    if os.getenv("REDIS_URL"):
        from ob_api_proxy.database.redis_real import RedisPaymentStore

        ttl = os.getenv("REDIS_PAYMENT_TTL")
        return RedisPaymentStore(url=os.environ["REDIS_URL"], ttl=int(ttl) if ttl else None)

    logger.warning("REDIS_URL not set; payment records are kept in memory only")
    return InMemoryPaymentStore()


def build_payment_setup_service(store: Optional[PaymentStore] = None) -> PaymentSetupService:
    if _should_use_real_integrations():
        token_client, payments_client = ClientCredentialsTokenClient(), RealPaymentsClient()
        logger.info("Payment setup using real institution clients")
    else:
        token_client, payments_client = MockTokenClient(), MockPaymentsClient()
        logger.info("Payment setup using mock institution clients")

    return PaymentSetupService(
        token_client=token_client,
        payments_client=payments_client,
        recorder=PaymentRecorder(store or build_payment_store()),
        logger=logging.getLogger("ob_api_proxy.payments"),
    )


def load_tenant_configs(config_path: Optional[Path] = None) -> Dict[str, TenantConfig]:
    """Resolve every configured institution, keyed by authorisation server id."""
    if config_path is None and os.getenv("ASPSP_CONFIG_PATH"):
        config_path = Path(os.environ["ASPSP_CONFIG_PATH"])
    tenants = load_tenants_file(config_path)
    return {aspsp_id: get_tenant_config(aspsp_id, tenants) for aspsp_id in tenants.aspsps}
