"""
Utility modules for the payment setup core
"""
from .config_loader import load_tenants_file, get_tenant_config, to_tenant_config

__all__ = [
    'load_tenants_file',
    'get_tenant_config',
    'to_tenant_config',
]
