from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

if TYPE_CHECKING:
    from ob_api_proxy.integrations.contracts.payments import PaymentInitiationPayload
    from ob_api_proxy.integrations.policy.errors import PaymentSetupError

T = TypeVar("T")

_API_VERSION_RE = re.compile(r"^\d+(\.\d+){1,2}$")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class SubmissionStatus(str, Enum):
    ACCEPTED_TECHNICAL_VALIDATION = "AcceptedTechnicalValidation"
    ACCEPTED_CUSTOMER_PROFILE = "AcceptedCustomerProfile"
    ACCEPTED_SETTLEMENT_IN_PROCESS = "AcceptedSettlementInProcess"
    ACCEPTED_SETTLEMENT_COMPLETED = "AcceptedSettlementCompleted"
    PENDING = "Pending"
    REJECTED = "Rejected"


# Asynchronous pending acceptance; settlement is tracked outside this core.
ACCEPTED_PENDING_STATUSES = frozenset(
    {
        SubmissionStatus.ACCEPTED_TECHNICAL_VALIDATION,
        SubmissionStatus.ACCEPTED_CUSTOMER_PROFILE,
    }
)


# ---------------------------------------------------------------------------
# Tenant configuration and per-request context
# ---------------------------------------------------------------------------

class ClientCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    client_id: str = Field(min_length=1)
    client_secret: SecretStr
    scope: str = "payments"
    auth_method: Literal["client_secret_basic", "client_secret_post"] = "client_secret_basic"


class TenantConfig(BaseModel):
    """Per-institution settings. Loaded outside the core and read-only to it."""

    model_config = ConfigDict(frozen=True)

    api_version: str
    resource_endpoint: str
    authorization_endpoint: str
    client_credentials: ClientCredentials
    fapi_financial_id: Optional[str] = None
    timeout_seconds: float = Field(default=20.0, gt=0)

    @field_validator("api_version")
    @classmethod
    def _check_api_version(cls, value: str) -> str:
        value = value.strip().lstrip("v")
        if not _API_VERSION_RE.match(value):
            raise ValueError(f"api_version '{value}' is not a dotted version number")
        return value

    @field_validator("resource_endpoint", "authorization_endpoint")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"'{value}' is not an http(s) URL")
        return value


class RequestContext(BaseModel):
    """Immutable per-call bundle. Enriched copies are made, the original is never mutated."""

    model_config = ConfigDict(frozen=True)

    interaction_id: str = Field(min_length=1)
    config: TenantConfig
    fapi_financial_id: str = Field(min_length=1)
    idempotency_key: str = Field(min_length=1)
    customer_last_logged_time: Optional[str] = None
    customer_ip_address: Optional[str] = None
    jws_signature: Optional[str] = None
    access_token: Optional[str] = None

    def with_access_token(self, access_token: str) -> "RequestContext":
        return self.model_copy(update={"access_token": access_token})


# ---------------------------------------------------------------------------
# Shared result models
# ---------------------------------------------------------------------------

@dataclass
class SubmissionResponse:
    """Raw institution response. body is None when the payload was not a JSON object."""
    status_code: int
    body: Optional[Dict[str, Any]]
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class PaymentOutcome:
    payment_id: str
    status: SubmissionStatus
    recorded: bool = False
    record_error: Optional[str] = None


@dataclass
class StepResult(Generic[T]):
    step: str
    value: Optional[T] = None
    error: Optional["PaymentSetupError"] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------

class AccessTokenProvider(ABC):
    """Obtains machine-to-machine access tokens. Implementations must not cache."""

    @abstractmethod
    async def obtain_access_token(self, config: TenantConfig) -> str:
        """Run a client-credentials grant and return the bearer token."""


class PaymentInitiationGateway(ABC):
    """Submits payment-initiation payloads to an institution."""

    @abstractmethod
    async def post_payments(
        self,
        resource_path: str,
        versioned_sub_path: str,
        context: RequestContext,
        payload: "PaymentInitiationPayload",
    ) -> SubmissionResponse:
        """Issue exactly one POST and return the raw response."""


class PaymentStore(ABC):
    """Durable sink for payment records, keyed by interaction id."""

    @abstractmethod
    async def save_payment(self, interaction_id: str, record: Dict[str, Any]) -> None:
        """Write once. A second write for the same key must fail."""

    @abstractmethod
    async def get_payment(self, interaction_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored record or None."""
