"""
Real HTTP integration clients.

These clients talk to the institution and its authorization server via httpx:
- authorise.py: OAuth2 client-credentials token acquisition
- payments.py: payment-initiation submission

Important:
- Must implement the same interfaces as the mock clients
- Must return data shaped according to ob_api_proxy/integrations/contracts/*

Switching:
The selection of mock vs real clients happens in ob_api_proxy/wiring.py only.
"""

from .authorise import ClientCredentialsTokenClient
from .payments import RealPaymentsClient, build_payment_headers, payments_path

__all__ = ["ClientCredentialsTokenClient", "RealPaymentsClient", "build_payment_headers", "payments_path"]
