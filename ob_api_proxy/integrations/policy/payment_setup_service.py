"""
Payment setup orchestration.

Sequences one payment initiation as a linear pipeline of steps:

    verify_headers -> build_payload -> obtain_token -> submit -> interpret -> record

Each step yields a StepResult. The pipeline stops at the first failed step and
re-raises its classified error unchanged. The payload is built before the
token is requested, so an invalid instruction never causes a network call.

Nothing is retried. Once the submission has been sent, the payment may exist
upstream whether or not this coroutine completes; cancellation only stops the
local processing that follows.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, TypeVar

from ob_api_proxy.integrations.clients.real_http.payments import payments_path
from ob_api_proxy.integrations.contracts.interfaces import (
    AccessTokenProvider,
    PaymentInitiationGateway,
    PaymentOutcome,
    StepResult,
)
from ob_api_proxy.integrations.contracts.payments import PersistedPaymentData, PersistedPaymentRecord
from ob_api_proxy.integrations.policy.errors import PaymentSetupError
from ob_api_proxy.integrations.policy.header_validator import verify_headers
from ob_api_proxy.integrations.policy.payment_data_builder import build_payments_data
from ob_api_proxy.integrations.policy.payment_recorder import PaymentRecorder
from ob_api_proxy.integrations.policy.response_wrappers import interpret_submission_response

T = TypeVar("T")


class PaymentSetupService:
    def __init__(
        self,
        token_client: AccessTokenProvider,
        payments_client: PaymentInitiationGateway,
        recorder: PaymentRecorder,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.token_client = token_client
        self.payments_client = payments_client
        self.recorder = recorder
        self.logger = logger or logging.getLogger(__name__)

    async def setup_payment(
        self,
        authorisation_server_id: str,
        headers: Mapping[str, Any],
        creditor_account: Any,
        instructed_amount: Any,
        *,
        options: Optional[Mapping[str, Any]] = None,
        risk: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Run the pipeline and return the institution-assigned PaymentId."""
        outcome = await self.run(
            authorisation_server_id,
            headers,
            creditor_account,
            instructed_amount,
            options=options,
            risk=risk,
        )
        return outcome.payment_id

    async def run(
        self,
        authorisation_server_id: str,
        headers: Mapping[str, Any],
        creditor_account: Any,
        instructed_amount: Any,
        *,
        options: Optional[Mapping[str, Any]] = None,
        risk: Optional[Mapping[str, Any]] = None,
    ) -> PaymentOutcome:
        context = self._unwrap(self._run_step("verify_headers", verify_headers, headers))
        log_ctx = f"interaction_id={context.interaction_id} aspsp={authorisation_server_id}"

        payload = self._unwrap(
            self._run_step("build_payload", build_payments_data, options, risk, creditor_account, instructed_amount),
            log_ctx,
        )

        access_token = self._unwrap(
            await self._run_async_step("obtain_token", self.token_client.obtain_access_token, context.config),
            log_ctx,
        )
        context = context.with_access_token(access_token)

        try:
            response = self._unwrap(
                await self._run_async_step(
                    "submit",
                    self.payments_client.post_payments,
                    context.config.resource_endpoint,
                    payments_path(context.config.api_version),
                    context,
                    payload,
                ),
                log_ctx,
            )
        except asyncio.CancelledError:
            self.logger.warning("Payment submission cancelled, upstream outcome unknown %s", log_ctx)
            raise

        payment_id, status = self._unwrap(
            self._run_step("interpret", interpret_submission_response, response),
            log_ctx,
        )
        self.logger.info("Payment accepted payment_id=%s status=%s %s", payment_id, status.value, log_ctx)

        record = PersistedPaymentRecord(
            interaction_id=context.interaction_id,
            authorisation_server_id=authorisation_server_id,
            status=status,
            Data=PersistedPaymentData(PaymentId=payment_id, Initiation=payload.Data.Initiation),
            Risk=payload.Risk,
        )
        recorded = await self._run_async_step("record", self.recorder.record, context.interaction_id, record)

        outcome = PaymentOutcome(payment_id=payment_id, status=status, recorded=recorded.ok)
        if not recorded.ok:
            # The payment exists upstream; losing the local record is degraded, not fatal.
            outcome.record_error = recorded.error.message
            self.logger.error(
                "Payment %s accepted but not recorded: %s %s",
                payment_id,
                recorded.error.message,
                log_ctx,
            )
        return outcome

    async def get_payment(self, interaction_id: str) -> Optional[Mapping[str, Any]]:
        return await self.recorder.get_payment(interaction_id)

    def _run_step(self, name: str, fn: Callable[..., T], *args: Any) -> StepResult[T]:
        self.logger.debug("step %s started", name)
        try:
            return StepResult(step=name, value=fn(*args))
        except PaymentSetupError as exc:
            return StepResult(step=name, error=exc)

    async def _run_async_step(self, name: str, fn: Callable[..., Awaitable[T]], *args: Any) -> StepResult[T]:
        self.logger.debug("step %s started", name)
        try:
            return StepResult(step=name, value=await fn(*args))
        except PaymentSetupError as exc:
            return StepResult(step=name, error=exc)

    def _unwrap(self, result: StepResult[T], log_ctx: str = "") -> T:
        if result.ok:
            return result.value
        error = result.error
        self.logger.warning("step %s failed: %s: %s %s", result.step, error.kind, error.message, log_ctx)
        raise error
