"""
Contracts (data models).

This folder defines the request/response shapes for the payment setup core:
- tenant configuration and the per-request context
- the payment-initiation wire payload and the persisted record
- the collaborator interfaces (token provider, payment gateway, store)

Both mock and real HTTP clients should use these contracts.
"""
