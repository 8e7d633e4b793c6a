from __future__ import annotations

import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .interfaces import ACCEPTED_PENDING_STATUSES, SubmissionStatus

"""
Payment initiation contracts.

Wire shapes for the Open Banking /payments resource, e.g.:
- the Initiation block sent to the institution
- the record kept locally once the institution accepts the payment

These contracts must be used by both:
- clients/mocks/payments.py (fake institution responses for development/testing)
- clients/real_http/payments.py (real institution calls)

Field names follow the wire schema (SchemeName, InstructedAmount, ...) so
payloads can be dumped without a mapping layer.
"""

CURRENCY_RE = re.compile(r"^[A-Z]{3}$")

# ISO 4217 codes that denote no currency, test units, metals or fund units.
NON_TRANSACTIONAL_CURRENCIES = frozenset(
    {"XXX", "XTS", "XAU", "XAG", "XPD", "XPT", "XBA", "XBB", "XBC", "XBD", "XDR", "XSU", "XUA"}
)

MAX_AMOUNT_INTEGER_DIGITS = 13
MAX_AMOUNT_FRACTION_DIGITS = 5
MAX_IDENTIFICATION_LENGTH = 34
MAX_NAME_LENGTH = 70


# ---------------------------------------------------------------------------
# Wire models
# ---------------------------------------------------------------------------

class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Account(_WireModel):
    SchemeName: str
    Identification: str
    Name: Optional[str] = None
    SecondaryIdentification: Optional[str] = None


class Amount(_WireModel):
    Amount: str
    Currency: str


class Remittance(_WireModel):
    Reference: Optional[str] = Field(default=None, max_length=35)
    Unstructured: Optional[str] = Field(default=None, max_length=140)


class PaymentInstruction(_WireModel):
    InstructionIdentification: str = Field(max_length=35)
    EndToEndIdentification: str = Field(max_length=35)
    InstructedAmount: Amount
    CreditorAccount: Account
    DebtorAccount: Optional[Account] = None
    RemittanceInformation: Optional[Remittance] = None


class PaymentInitiationData(_WireModel):
    Initiation: PaymentInstruction


class PaymentInitiationPayload(_WireModel):
    Data: PaymentInitiationData
    Risk: Dict[str, Any] = Field(default_factory=dict)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class PersistedPaymentData(_WireModel):
    PaymentId: str
    Initiation: PaymentInstruction


class PersistedPaymentRecord(_WireModel):
    interaction_id: str
    authorisation_server_id: Optional[str] = None
    status: SubmissionStatus
    Data: PersistedPaymentData
    Risk: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def validate_account(account: Any, label: str = "CreditorAccount") -> List[str]:
    """
    Return a list of validation errors.
    Empty list means the account carries its identifying fields.
    """
    if not isinstance(account, Mapping):
        return [f"{label} must be an object"]

    errors: List[str] = []
    for key in ("SchemeName", "Identification"):
        value = account.get(key)
        if not isinstance(value, str) or not value.strip():
            errors.append(f"{label}.{key} is required")

    identification = account.get("Identification")
    if isinstance(identification, str) and len(identification) > MAX_IDENTIFICATION_LENGTH:
        errors.append(f"{label}.Identification exceeds {MAX_IDENTIFICATION_LENGTH} characters")

    name = account.get("Name")
    if name is not None and (not isinstance(name, str) or len(name) > MAX_NAME_LENGTH):
        errors.append(f"{label}.Name must be a string of at most {MAX_NAME_LENGTH} characters")

    unknown = set(account) - set(Account.model_fields)
    if unknown:
        errors.append(f"{label} has unsupported fields: {', '.join(sorted(unknown))}")
    return errors


def parse_amount(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def validate_instructed_amount(instructed_amount: Any) -> List[str]:
    if not isinstance(instructed_amount, Mapping):
        return ["InstructedAmount must be an object"]

    errors: List[str] = []
    amount = parse_amount(instructed_amount.get("Amount"))
    if amount is None:
        errors.append(f"InstructedAmount.Amount {instructed_amount.get('Amount')!r} is not a decimal number")
    elif amount <= 0:
        errors.append("InstructedAmount.Amount must be greater than zero")
    else:
        digits, exponent = _significant_digits(amount)
        fraction_digits = max(0, -exponent)
        integer_digits = max(1, len(digits) + exponent)
        if integer_digits > MAX_AMOUNT_INTEGER_DIGITS:
            errors.append(f"InstructedAmount.Amount exceeds {MAX_AMOUNT_INTEGER_DIGITS} integer digits")
        if fraction_digits > MAX_AMOUNT_FRACTION_DIGITS:
            errors.append(f"InstructedAmount.Amount exceeds {MAX_AMOUNT_FRACTION_DIGITS} fraction digits")

    currency = instructed_amount.get("Currency")
    if not isinstance(currency, str) or not CURRENCY_RE.match(currency):
        errors.append(f"InstructedAmount.Currency {currency!r} is not an ISO 4217 alpha-3 code")
    elif currency in NON_TRANSACTIONAL_CURRENCIES:
        errors.append(f"InstructedAmount.Currency '{currency}' is not supported")
    return errors


def _significant_digits(amount: Decimal) -> Tuple[Tuple[int, ...], int]:
    # as_tuple() is exact; normalize() would round to the context precision.
    _, digits, exponent = amount.as_tuple()
    digits = list(digits)
    while exponent < 0 and len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    return tuple(digits), exponent


def format_amount(amount: Decimal) -> str:
    """Render with at least two fraction digits, e.g. 10 -> '10.00', 1.5 -> '1.50', 0.125 -> '0.125'."""
    digits, exponent = _significant_digits(amount)
    text = format(Decimal((int(amount.is_signed()), digits, exponent)), "f")
    whole, _, fraction = text.partition(".")
    return f"{whole}.{fraction.ljust(2, '0')}"


def is_accepted_status(status: Any) -> bool:
    """Return True for the asynchronous accepted-pending statuses."""
    if not isinstance(status, str):
        return False
    return status in {s.value for s in ACCEPTED_PENDING_STATUSES}
