"""
Mock integration clients.

These clients return fake (but realistic) responses without calling any external API.
They are used when:
- institution sandbox credentials are not available
- we want to exercise the payment setup flow end-to-end without external dependencies

Important:
- Mock clients must follow the SAME interface as real HTTP clients.
- Mock clients should return data shaped according to ob_api_proxy/integrations/contracts/*

Switching to real:
Set INTEGRATIONS_MODE=real; ob_api_proxy/wiring.py then uses clients/real_http/*.
"""

from .authorise import MockTokenClient
from .payments import MockPaymentsClient

__all__ = ["MockTokenClient", "MockPaymentsClient"]
