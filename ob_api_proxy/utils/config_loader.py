"""
Configuration loader for institution (ASPSP) tenant settings
"""

import logging
import os
from pathlib import Path
from typing import Dict, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from ob_api_proxy.integrations.contracts.interfaces import ClientCredentials, TenantConfig

logger = logging.getLogger(__name__)


class AspspEntryConfig(BaseModel):
    """One institution, keyed by authorisation server id in the YAML file"""

    api_version: str
    resource_endpoint: str
    authorization_endpoint: str
    fapi_financial_id: Optional[str] = None
    client_id: str
    client_secret_env: str
    scope: str = "payments"
    auth_method: Literal["client_secret_basic", "client_secret_post"] = "client_secret_basic"
    timeout_seconds: float = Field(default=20.0, gt=0, le=300)


class TenantsFileConfig(BaseModel):
    """Complete tenants configuration"""

    aspsps: Dict[str, AspspEntryConfig] = Field(default_factory=dict)


def default_config_path() -> Path:
    return Path(__file__).parent.parent.parent / "config" / "aspsps.yml"


def load_tenants_file(config_path: Optional[Path] = None) -> TenantsFileConfig:
    """
    Load and validate the tenants file

    Args:
        config_path: Path to config file. Defaults to config/aspsps.yml

    Returns:
        Validated TenantsFileConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    if config_path is None:
        config_path = default_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"Tenants config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    try:
        cfg = TenantsFileConfig(**data)
        logger.info("Loaded %d ASPSP configs from %s", len(cfg.aspsps), config_path)
        return cfg
    except ValidationError as e:
        logger.error("Tenants config validation failed: %s", e)
        raise


def to_tenant_config(entry: AspspEntryConfig, environ: Optional[Mapping[str, str]] = None) -> TenantConfig:
    """Resolve the client secret from the environment and build a TenantConfig"""
    environ = os.environ if environ is None else environ
    secret = environ.get(entry.client_secret_env, "")
    if not secret:
        raise ValueError(f"Environment variable {entry.client_secret_env} is not set")

    return TenantConfig(
        api_version=entry.api_version,
        resource_endpoint=entry.resource_endpoint,
        authorization_endpoint=entry.authorization_endpoint,
        fapi_financial_id=entry.fapi_financial_id,
        timeout_seconds=entry.timeout_seconds,
        client_credentials=ClientCredentials(
            client_id=entry.client_id,
            client_secret=secret,
            scope=entry.scope,
            auth_method=entry.auth_method,
        ),
    )


def get_tenant_config(
    authorisation_server_id: str,
    config: TenantsFileConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> TenantConfig:
    """Extract one institution's TenantConfig"""
    if authorisation_server_id not in config.aspsps:
        raise ValueError(f"No ASPSP config for authorisation server '{authorisation_server_id}'")
    return to_tenant_config(config.aspsps[authorisation_server_id], environ)
