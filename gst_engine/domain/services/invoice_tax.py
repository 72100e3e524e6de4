# gst_engine/domain/services/invoice_tax.py
"""
Invoice-level tax resolution.

Given an invoice's tax settings and its bill-to / ship-to states, decide
whether GST applies, whether a manual breakup overrides the computed one,
and what the invoice total comes to.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable

from gst_engine.core.config import settings
from gst_engine.domain.models.gst import (
    ZERO,
    InvoiceTax,
    OverrideValidation,
    TaxableTransaction,
    TaxSettings,
)
from gst_engine.domain.services.gst_calculation import (
    INDIAN_STATES,
    UNION_TERRITORIES,
    calculate_gst,
    generate_invoice_number,
    normalize_state_name,
    validate_gst_override,
)

logger = logging.getLogger("invoice_tax")

UNKNOWN_STATE = "Unknown"

# Longest first within a part.
_ADDRESS_STATES = sorted(INDIAN_STATES + UNION_TERRITORIES, key=len, reverse=True)


class InvoiceNumberCollisionError(Exception):
    """Raised when every generated invoice number is already taken."""
    pass


def extract_state_from_address(address: str) -> str:
    """
    Best-effort state lookup in a free-text address.

    Comma-separated parts are scanned from the end, so the state part of
    "..., City, State PIN" wins over street or locality names. With no
    known name anywhere, falls back to the raw second-last part, then to
    ``"Unknown"``.
    """
    parts = [part.strip() for part in address.split(",")]
    for part in reversed(parts):
        upper = part.upper()
        for state in _ADDRESS_STATES:
            if state.upper() in upper:
                return state

    if len(parts) >= 2:
        return parts[-2]

    return UNKNOWN_STATE


def resolve_invoice_tax(
    tax_settings: TaxSettings,
    bill_to_state: str,
    ship_to_state: str | None,
    subtotal: Decimal,
    shipping_charges: Decimal = ZERO,
) -> InvoiceTax:
    """
    Work out the GST breakup and total for one invoice.

    ``ship_to_state`` defaults to the bill-to state. A manual override is
    validated but never rejected here; the caller inspects
    ``override_validation`` and decides whether to block the write.
    May raise ``InvalidStateError`` when the breakup is computed.
    """
    subtotal = Decimal(str(subtotal))
    shipping_charges = Decimal(str(shipping_charges))
    ship_to_state = ship_to_state or bill_to_state
    taxable_amount = subtotal + shipping_charges

    if not tax_settings.is_tax_optional:
        return InvoiceTax(calculated_total=taxable_amount)

    if tax_settings.is_manual_override and tax_settings.gst_breakup is not None:
        breakup = tax_settings.gst_breakup
        is_intra_state = normalize_state_name(bill_to_state) == normalize_state_name(ship_to_state)
        validation = validate_gst_override(breakup, subtotal, is_intra_state)

        if not tax_settings.override_reason:
            validation = OverrideValidation(
                is_valid=False,
                errors=validation.errors + ["Override reason is required for manual GST override"],
            )

        logger.info(
            "resolve_invoice_tax: manual override (valid=%s) reason=%r",
            validation.is_valid,
            tax_settings.override_reason,
        )
        return InvoiceTax(
            gst_breakup=breakup,
            calculated_total=taxable_amount + breakup.total,
            is_manual_override=True,
            override_reason=tax_settings.override_reason,
            override_validation=validation,
        )

    result = calculate_gst(
        TaxableTransaction(
            bill_to_state=bill_to_state,
            ship_to_state=ship_to_state,
            subtotal=subtotal,
            shipping_charges=shipping_charges,
            tax_rate=tax_settings.tax_rate,
        )
    )
    return InvoiceTax(gst_breakup=result.gst_breakup, calculated_total=result.grand_total)


def generate_unique_invoice_number(
    exists: Callable[[str], bool],
    max_attempts: int | None = None,
) -> str:
    """
    Generate invoice numbers until ``exists`` reports one as free.

    ``max_attempts`` defaults to ``INVOICE_NUMBER_MAX_ATTEMPTS``; values
    below 1 raise ``ValueError``.
    """
    attempts = settings.INVOICE_NUMBER_MAX_ATTEMPTS if max_attempts is None else max_attempts
    if attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {attempts}")

    for attempt in range(1, attempts + 1):
        number = generate_invoice_number()
        if not exists(number):
            return number
        logger.warning("generate_unique_invoice_number: %s taken (attempt %d/%d)", number, attempt, attempts)

    raise InvoiceNumberCollisionError(
        f"Could not generate a free invoice number after {attempts} attempts"
    )
