"""Tests for the payment setup pipeline."""

import asyncio

import pytest

from conftest import CountingStore, FakePaymentsClient, FakeTokenClient
from ob_api_proxy.integrations.contracts.interfaces import SubmissionStatus
from ob_api_proxy.integrations.policy.errors import (
    AuthFailureError,
    InvalidInstructionError,
    MalformedResponseError,
    MissingContextError,
    PaymentSetupError,
    RejectedPaymentError,
    TransportError,
    UpstreamHttpError,
)


def _accepted(status="AcceptedCustomerProfile", payment_id="abc123"):
    return {"Data": {"Status": status, "PaymentId": payment_id}}


@pytest.mark.asyncio
async def test_accepted_payment_returns_id_and_records_once(make_service, store, headers, creditor_account, instructed_amount):
    service = make_service(FakePaymentsClient(body=_accepted()))

    payment_id = await service.setup_payment("aspsp-1", headers, creditor_account, instructed_amount)

    assert payment_id == "abc123"
    assert store.saved == ["interaction-1"]
    record = await store.get_payment("interaction-1")
    assert record["interaction_id"] == "interaction-1"
    assert record["authorisation_server_id"] == "aspsp-1"
    assert record["status"] == "AcceptedCustomerProfile"
    assert record["Data"]["PaymentId"] == "abc123"
    assert record["Data"]["Initiation"]["InstructedAmount"] == {"Amount": "10.00", "Currency": "GBP"}
    assert record["Data"]["Initiation"]["CreditorAccount"] == creditor_account
    assert record["Risk"] == {}


@pytest.mark.asyncio
async def test_technical_validation_status_is_also_success(make_service, headers, creditor_account, instructed_amount):
    service = make_service(FakePaymentsClient(body=_accepted(status="AcceptedTechnicalValidation", payment_id="p-9")))

    outcome = await service.run("aspsp-1", headers, creditor_account, instructed_amount)

    assert outcome.payment_id == "p-9"
    assert outcome.status is SubmissionStatus.ACCEPTED_TECHNICAL_VALIDATION
    assert outcome.recorded is True
    assert outcome.record_error is None


@pytest.mark.asyncio
async def test_rejected_status_raises_and_never_records(make_service, store, headers, creditor_account, instructed_amount):
    service = make_service(FakePaymentsClient(body={"Data": {"Status": "Rejected"}}))

    with pytest.raises(RejectedPaymentError) as exc_info:
        await service.setup_payment("aspsp-1", headers, creditor_account, instructed_amount)

    assert exc_info.value.status == "Rejected"
    assert exc_info.value.http_status == 500
    assert store.saved == []


@pytest.mark.asyncio
async def test_accepted_without_payment_id_is_malformed(make_service, store, headers, creditor_account, instructed_amount):
    service = make_service(FakePaymentsClient(body={"Data": {"Status": "AcceptedTechnicalValidation"}}))

    with pytest.raises(MalformedResponseError):
        await service.setup_payment("aspsp-1", headers, creditor_account, instructed_amount)
    assert store.saved == []


@pytest.mark.asyncio
async def test_response_without_data_is_malformed(make_service, store, headers, creditor_account, instructed_amount):
    service = make_service(FakePaymentsClient(body={"Links": {}}))

    with pytest.raises(MalformedResponseError):
        await service.setup_payment("aspsp-1", headers, creditor_account, instructed_amount)
    assert store.saved == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"Data": {"Status": ["Rejected"], "PaymentId": "1"}},
        {"Data": {"Status": {"code": "AcceptedCustomerProfile"}, "PaymentId": "1"}},
        {"Data": {"Status": "AcceptedCustomerProfile", "PaymentId": {"nested": 1}}},
        {"Data": {"Status": "AcceptedTechnicalValidation", "PaymentId": ["p-1"]}},
    ],
)
async def test_non_compliant_bodies_surface_classified_errors(make_service, store, headers, creditor_account, instructed_amount, body):
    service = make_service(FakePaymentsClient(body=body))

    with pytest.raises(PaymentSetupError) as exc_info:
        await service.setup_payment("aspsp-1", headers, creditor_account, instructed_amount)

    assert isinstance(exc_info.value, (RejectedPaymentError, MalformedResponseError))
    assert store.saved == []


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["interactionId", "config"])
async def test_missing_context_fails_before_network(make_service, token_client, headers, creditor_account, instructed_amount, missing):
    payments = FakePaymentsClient(body=_accepted())
    service = make_service(payments)
    del headers[missing]

    with pytest.raises(MissingContextError):
        await service.setup_payment("aspsp-1", headers, creditor_account, instructed_amount)

    assert token_client.calls == 0
    assert payments.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [{"Amount": "0", "Currency": "GBP"}, {"Amount": "10.00", "Currency": "XXX"}])
async def test_invalid_instruction_fails_before_network(make_service, token_client, headers, creditor_account, amount):
    payments = FakePaymentsClient(body=_accepted())
    service = make_service(payments)

    with pytest.raises(InvalidInstructionError):
        await service.setup_payment("aspsp-1", headers, creditor_account, amount)

    assert token_client.calls == 0
    assert payments.calls == []


@pytest.mark.asyncio
async def test_token_failure_short_circuits_before_submission(make_service, store, headers, creditor_account, instructed_amount):
    payments = FakePaymentsClient(body=_accepted())
    failing = FakeTokenClient(error=AuthFailureError("Token endpoint returned HTTP 401", status_code=401))
    service = make_service(payments, token=failing)

    with pytest.raises(AuthFailureError) as exc_info:
        await service.setup_payment("aspsp-1", headers, creditor_account, instructed_amount)

    assert exc_info.value.status_code == 401
    assert failing.calls == 1
    assert payments.calls == []
    assert store.saved == []


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [UpstreamHttpError(503, {"Code": "Unavailable"}), TransportError("connect failed")])
async def test_submission_errors_propagate_unchanged(make_service, store, headers, creditor_account, instructed_amount, error):
    service = make_service(FakePaymentsClient(error=error))

    with pytest.raises(type(error)) as exc_info:
        await service.setup_payment("aspsp-1", headers, creditor_account, instructed_amount)

    assert exc_info.value is error
    assert store.saved == []


@pytest.mark.asyncio
async def test_submission_gets_versioned_path_and_token(make_service, headers, creditor_account, instructed_amount):
    payments = FakePaymentsClient(body=_accepted())
    service = make_service(payments)

    await service.setup_payment("aspsp-1", headers, creditor_account, instructed_amount)

    (call,) = payments.calls
    assert call["resource_path"] == "https://aspsp.example.com"
    assert call["versioned_sub_path"] == "/open-banking/v1.1/payments"
    assert call["context"].access_token == "token-123"
    assert call["context"].interaction_id == "interaction-1"
    assert call["payload"].Data.Initiation.CreditorAccount.Identification == "01122313235478"
    assert "accessToken" not in headers


@pytest.mark.asyncio
async def test_persistence_failure_still_returns_payment_id(make_service, headers, creditor_account, instructed_amount):
    failing_store = CountingStore(fail_with=ConnectionError("redis down"))
    service = make_service(FakePaymentsClient(body=_accepted()), payment_store=failing_store)

    outcome = await service.run("aspsp-1", headers, creditor_account, instructed_amount)

    assert outcome.payment_id == "abc123"
    assert outcome.recorded is False
    assert "redis down" in outcome.record_error
    assert failing_store.saved == ["interaction-1"]


@pytest.mark.asyncio
async def test_duplicate_interaction_is_reported_not_raised(make_service, store, headers, creditor_account, instructed_amount):
    service = make_service(FakePaymentsClient(body=_accepted()))

    first = await service.run("aspsp-1", headers, creditor_account, instructed_amount)
    second = await service.run("aspsp-1", headers, creditor_account, instructed_amount)

    assert first.recorded is True
    assert second.payment_id == "abc123"
    assert second.recorded is False
    assert store.saved == ["interaction-1", "interaction-1"]


@pytest.mark.asyncio
async def test_concurrent_runs_are_independent(make_service, store, headers, creditor_account, instructed_amount):
    service = make_service(FakePaymentsClient(body=_accepted()))
    other_headers = dict(headers, interactionId="interaction-2")

    results = await asyncio.gather(
        service.setup_payment("aspsp-1", headers, creditor_account, instructed_amount),
        service.setup_payment("aspsp-1", other_headers, creditor_account, instructed_amount),
    )

    assert results == ["abc123", "abc123"]
    assert sorted(store.saved) == ["interaction-1", "interaction-2"]
    assert headers["interactionId"] == "interaction-1"


@pytest.mark.asyncio
async def test_cancelled_submission_skips_local_processing(make_service, store, headers, creditor_account, instructed_amount):
    started = asyncio.Event()

    class HangingPaymentsClient(FakePaymentsClient):
        async def post_payments(self, *args):
            started.set()
            await asyncio.Event().wait()

    service = make_service(HangingPaymentsClient())
    task = asyncio.create_task(service.setup_payment("aspsp-1", headers, creditor_account, instructed_amount))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert store.saved == []


@pytest.mark.asyncio
async def test_get_payment_reads_back_record(make_service, headers, creditor_account, instructed_amount):
    service = make_service(FakePaymentsClient(body=_accepted()))
    await service.setup_payment("aspsp-1", headers, creditor_account, instructed_amount)

    record = await service.get_payment("interaction-1")

    assert record["Data"]["PaymentId"] == "abc123"
    assert await service.get_payment("unknown") is None
