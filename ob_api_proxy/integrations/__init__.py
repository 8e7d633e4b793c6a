"""
Integrations layer.
This package contains all code used to set up a payment with an Open Banking
institution (ASPSP):
- contracts/: config, context and wire models shared by every client
- clients/: mock and real_http clients for the token endpoint and /payments
- policy/: validation, payload building, response interpretation, orchestration

Key rule:
- Policy code MUST NOT call external APIs directly.
- It goes through the collaborator interfaces in contracts/interfaces.py.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (ob_api_proxy/wiring.py).
"""

from .contracts.interfaces import (
    ACCEPTED_PENDING_STATUSES,
    AccessTokenProvider,
    ClientCredentials,
    PaymentInitiationGateway,
    PaymentOutcome,
    PaymentStore,
    RequestContext,
    StepResult,
    SubmissionResponse,
    SubmissionStatus,
    TenantConfig,
)
from .contracts.payments import (
    PaymentInitiationPayload,
    PaymentInstruction,
    PersistedPaymentRecord,
    is_accepted_status,
    validate_account,
    validate_instructed_amount,
)

__all__ = [
    # interfaces
    "ACCEPTED_PENDING_STATUSES", "AccessTokenProvider", "ClientCredentials",
    "PaymentInitiationGateway", "PaymentOutcome", "PaymentStore",
    "RequestContext", "StepResult", "SubmissionResponse", "SubmissionStatus",
    "TenantConfig",
    # payments
    "PaymentInitiationPayload", "PaymentInstruction", "PersistedPaymentRecord",
    "is_accepted_status", "validate_account", "validate_instructed_amount",
]
