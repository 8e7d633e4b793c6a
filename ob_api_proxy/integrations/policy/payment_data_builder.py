"""
Builds the Open Banking payment-initiation payload.

build_payments_data is a pure function: identical arguments give a
structurally identical payload, including the default identifiers, which are
derived from a digest of the instruction instead of being random.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ValidationError

from ob_api_proxy.integrations.contracts.payments import (
    PaymentInitiationPayload,
    format_amount,
    parse_amount,
    validate_account,
    validate_instructed_amount,
)
from ob_api_proxy.integrations.policy.errors import InvalidInstructionError

SUPPORTED_OPTIONS = frozenset(
    {
        "instruction_identification",
        "end_to_end_identification",
        "debtor_account",
        "remittance_information",
    }
)


def _as_mapping(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_none=True)
    return value


def _derive_identifiers(initiation: Mapping[str, Any], risk: Mapping[str, Any]) -> tuple[str, str]:
    canonical = json.dumps({"initiation": initiation, "risk": risk}, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return digest[:32], digest[32:64]


def build_payments_data(
    options: Optional[Mapping[str, Any]],
    risk: Optional[Mapping[str, Any]],
    creditor_account: Any,
    instructed_amount: Any,
) -> PaymentInitiationPayload:
    """
    Assemble {Data: {Initiation}, Risk} for POST /payments.

    Args:
        options: Optional overrides, see SUPPORTED_OPTIONS.
        risk: Risk block; {} when not supplied.
        creditor_account: SchemeName / Identification / Name mapping or Account model.
        instructed_amount: Amount / Currency mapping or Amount model.

    Raises:
        InvalidInstructionError: with every problem found, not just the first.
    """
    options = _as_mapping(options) if options is not None else {}
    if not isinstance(options, Mapping):
        raise InvalidInstructionError(["options must be an object"])
    options = dict(options)
    risk = _as_mapping(risk) if risk is not None else {}
    creditor_account = _as_mapping(creditor_account)
    instructed_amount = _as_mapping(instructed_amount)

    errors: List[str] = []
    unknown = set(options) - SUPPORTED_OPTIONS
    if unknown:
        errors.append(f"unsupported options: {', '.join(sorted(unknown))}")
    if not isinstance(risk, Mapping):
        errors.append("Risk must be an object")
    errors.extend(validate_account(creditor_account, "CreditorAccount"))
    errors.extend(validate_instructed_amount(instructed_amount))

    debtor_account = _as_mapping(options.get("debtor_account"))
    if debtor_account is not None:
        errors.extend(validate_account(debtor_account, "DebtorAccount"))

    remittance = _as_mapping(options.get("remittance_information"))
    if remittance is not None and not isinstance(remittance, Mapping):
        errors.append("RemittanceInformation must be an object")

    if errors:
        raise InvalidInstructionError(errors)

    initiation: Dict[str, Any] = {
        "InstructedAmount": {
            "Amount": format_amount(parse_amount(instructed_amount["Amount"])),
            "Currency": instructed_amount["Currency"],
        },
        "CreditorAccount": dict(creditor_account),
    }
    if debtor_account is not None:
        initiation["DebtorAccount"] = dict(debtor_account)
    if remittance:
        initiation["RemittanceInformation"] = dict(remittance)

    instruction_id, end_to_end_id = _derive_identifiers(initiation, risk)
    initiation["InstructionIdentification"] = options.get("instruction_identification") or instruction_id
    initiation["EndToEndIdentification"] = options.get("end_to_end_identification") or end_to_end_id

    try:
        return PaymentInitiationPayload(Data={"Initiation": initiation}, Risk=dict(risk))
    except ValidationError as exc:
        raise InvalidInstructionError([f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()]) from exc
