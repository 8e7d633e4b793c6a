"""
Open Banking API proxy: payment setup core.

Obtains a client-credentials token, builds and submits a payment-initiation
payload to an institution, interprets the acceptance outcome and records the
payment against the originating interaction id.
"""

__version__ = "0.1.0"
