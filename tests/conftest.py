"""Pytest fixtures and collaborator fakes for payment setup tests."""

from typing import Any, Dict, List, Optional

import pytest

from ob_api_proxy.database.redis import InMemoryPaymentStore
from ob_api_proxy.integrations.contracts.interfaces import (
    AccessTokenProvider,
    ClientCredentials,
    PaymentInitiationGateway,
    SubmissionResponse,
    TenantConfig,
)
from ob_api_proxy.integrations.policy.payment_recorder import PaymentRecorder
from ob_api_proxy.integrations.policy.payment_setup_service import PaymentSetupService


class FakeTokenClient(AccessTokenProvider):
    def __init__(self, token: str = "token-123", error: Optional[Exception] = None):
        self.token = token
        self.error = error
        self.calls = 0

    async def obtain_access_token(self, config):
        self.calls += 1
        if self.error:
            raise self.error
        return self.token


class FakePaymentsClient(PaymentInitiationGateway):
    def __init__(self, body: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None, status_code: int = 201):
        self.body = body
        self.error = error
        self.status_code = status_code
        self.calls: List[Dict[str, Any]] = []

    async def post_payments(self, resource_path, versioned_sub_path, context, payload):
        self.calls.append(
            {
                "resource_path": resource_path,
                "versioned_sub_path": versioned_sub_path,
                "context": context,
                "payload": payload,
            }
        )
        if self.error:
            raise self.error
        return SubmissionResponse(status_code=self.status_code, body=self.body)


class CountingStore(InMemoryPaymentStore):
    def __init__(self, fail_with: Optional[Exception] = None):
        super().__init__()
        self.fail_with = fail_with
        self.saved: List[str] = []

    async def save_payment(self, interaction_id, record):
        self.saved.append(interaction_id)
        if self.fail_with:
            raise self.fail_with
        await super().save_payment(interaction_id, record)


@pytest.fixture
def tenant_config():
    return TenantConfig(
        api_version="1.1",
        resource_endpoint="https://aspsp.example.com",
        authorization_endpoint="https://auth.aspsp.example.com/token",
        fapi_financial_id="aaax5nTR33811Qy",
        client_credentials=ClientCredentials(client_id="client-1", client_secret="s3cret"),
        timeout_seconds=5,
    )


@pytest.fixture
def headers(tenant_config):
    return {
        "config": tenant_config,
        "interactionId": "interaction-1",
        "fapiFinancialId": "aaax5nTR33811Qy",
    }


@pytest.fixture
def creditor_account():
    return {
        "SchemeName": "SortCodeAccountNumber",
        "Identification": "01122313235478",
        "Name": "Mr Kevin",
    }


@pytest.fixture
def instructed_amount():
    return {"Amount": "10.00", "Currency": "GBP"}


@pytest.fixture
def token_client():
    return FakeTokenClient()


@pytest.fixture
def store():
    return CountingStore()


@pytest.fixture
def make_service(token_client, store):
    def _make(payments_client, token=None, payment_store=None):
        return PaymentSetupService(
            token_client=token or token_client,
            payments_client=payments_client,
            recorder=PaymentRecorder(payment_store or store),
        )

    return _make
