# gst_engine/domain/services/gst_calculation.py
"""
GST calculation engine.

Classifies a transaction as intra-state or inter-state from its bill-to and
ship-to states and splits the tax accordingly:

  - intra-state: tax split equally into CGST + SGST
  - inter-state: full tax as IGST

Every function here is pure; nothing touches the database or the network.
"""

from __future__ import annotations

import logging
import random
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping

from gst_engine.core.config import settings
from gst_engine.domain.models.gst import (
    ZERO,
    GSTBreakup,
    GSTCalculationResult,
    OverrideValidation,
    TaxableTransaction,
)
from gst_engine.domain.services.gstin_validation import (  # noqa: F401
    get_state_code_from_gstin,
    validate_gstin,
)

logger = logging.getLogger("gst_calculation")

TWO_PLACES = Decimal("0.01")

# Ceiling for manually entered GST, as a fraction of the subtotal
MAX_OVERRIDE_GST_RATIO = Decimal("0.5")

INDIAN_STATES: tuple[str, ...] = (
    "Andhra Pradesh", "Arunachal Pradesh", "Assam", "Bihar", "Chhattisgarh",
    "Goa", "Gujarat", "Haryana", "Himachal Pradesh", "Jharkhand",
    "Karnataka", "Kerala", "Madhya Pradesh", "Maharashtra", "Manipur",
    "Meghalaya", "Mizoram", "Nagaland", "Odisha", "Punjab",
    "Rajasthan", "Sikkim", "Tamil Nadu", "Telangana", "Tripura",
    "Uttar Pradesh", "Uttarakhand", "West Bengal",
)

UNION_TERRITORIES: tuple[str, ...] = (
    "Andaman and Nicobar Islands", "Chandigarh",
    "Dadra and Nagar Haveli and Daman and Diu", "Delhi",
    "Jammu and Kashmir", "Ladakh", "Lakshadweep", "Puducherry",
)

_KNOWN_STATES = frozenset(
    name.lower() for name in INDIAN_STATES + UNION_TERRITORIES
)


class InvalidStateError(Exception):
    """Raised when a bill-to or ship-to state is not an Indian state/UT."""

    def __init__(self, state: str, field: str):
        self.state = state
        self.field = field
        # "bill_to_state" -> "bill-to state"
        label = field.removesuffix("_state").replace("_", "-")
        super().__init__(f"Invalid {label} state: {state}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def normalize_state_name(state_name: str) -> str:
    return state_name.strip().lower()


def round_currency(amount: Decimal) -> Decimal:
    """Round half-up to 2 decimal places."""
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _dec(val: Any) -> Decimal:
    if val is None:
        return ZERO
    if isinstance(val, Decimal):
        return val
    return Decimal(str(val))


def validate_states(bill_to_state: str, ship_to_state: str) -> None:
    """Raise InvalidStateError for the first state not in the states/UT list.

    Names are trimmed and case-folded before lookup, so "Maharashtra " and
    "maharashtra" are accepted; the ERP finance service this replaces
    required an exact match.
    """
    if normalize_state_name(bill_to_state) not in _KNOWN_STATES:
        raise InvalidStateError(bill_to_state, "bill_to_state")
    if normalize_state_name(ship_to_state) not in _KNOWN_STATES:
        raise InvalidStateError(ship_to_state, "ship_to_state")


def is_union_territory(state_name: str) -> bool:
    # Exact match: "delhi" is not found.
    return state_name in UNION_TERRITORIES


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def calculate_gst(transaction: TaxableTransaction | Mapping[str, Any]) -> GSTCalculationResult:
    """
    Compute the GST breakup and grand total for a single transaction.

    Accepts a ``TaxableTransaction`` or a raw mapping with the same fields
    (camelCase or snake_case). Raises ``InvalidStateError`` if either state
    is unknown; no partial result is produced.
    """
    if not isinstance(transaction, TaxableTransaction):
        transaction = TaxableTransaction.model_validate(transaction)

    validate_states(transaction.bill_to_state, transaction.ship_to_state)

    taxable_amount = transaction.taxable_amount
    is_intra_state = (
        normalize_state_name(transaction.bill_to_state)
        == normalize_state_name(transaction.ship_to_state)
    )

    breakup = _calculate_breakup(taxable_amount, transaction.tax_rate, is_intra_state)
    total_tax = breakup.total
    grand_total = taxable_amount + total_tax

    logger.debug(
        "calculate_gst: %s -> %s taxable=%s rate=%s total_tax=%s",
        transaction.bill_to_state,
        transaction.ship_to_state,
        taxable_amount,
        transaction.tax_rate,
        total_tax,
    )

    return GSTCalculationResult(
        transaction_type="intra-state" if is_intra_state else "inter-state",
        gst_breakup=breakup,
        total_tax=total_tax,
        grand_total=grand_total,
    )


def _calculate_breakup(taxable_amount: Decimal, tax_rate: Decimal, is_intra_state: bool) -> GSTBreakup:
    total_tax_amount = taxable_amount * tax_rate / Decimal("100")

    if is_intra_state:
        # Each half is rounded on its own; the pair may drift one cent
        # from the unrounded total.
        half = round_currency(total_tax_amount / 2)
        return GSTBreakup(cgst=half, sgst=half, igst=ZERO)

    return GSTBreakup(cgst=ZERO, sgst=ZERO, igst=round_currency(total_tax_amount))


def validate_gst_override(
    gst_breakup: GSTBreakup | Mapping[str, Any],
    subtotal: Decimal | float | int,
    is_intra_state: bool,
) -> OverrideValidation:
    """
    Sanity-check a manually entered GST breakup.

    All rules are evaluated; the result lists every violation found.
    """
    if not isinstance(gst_breakup, GSTBreakup):
        gst_breakup = GSTBreakup.model_validate(gst_breakup)

    cgst, sgst, igst = gst_breakup.cgst, gst_breakup.sgst, gst_breakup.igst
    total_gst = gst_breakup.total
    errors: list[str] = []

    if cgst < 0 or sgst < 0 or igst < 0:
        errors.append("GST amounts cannot be negative")

    if total_gst > _dec(subtotal) * MAX_OVERRIDE_GST_RATIO:
        errors.append("Total GST cannot exceed 50% of subtotal")

    if is_intra_state:
        if igst > 0:
            errors.append("IGST should be 0 for intra-state transactions")
        if cgst == 0 and sgst == 0 and total_gst > 0:
            errors.append("Intra-state transactions should have CGST and SGST")
    else:
        if cgst > 0 or sgst > 0:
            errors.append("CGST and SGST should be 0 for inter-state transactions")
        if igst == 0 and total_gst > 0:
            errors.append("Inter-state transactions should have IGST")

    if errors:
        logger.info("validate_gst_override: %d issue(s): %s", len(errors), errors)

    return OverrideValidation(is_valid=not errors, errors=errors)


def generate_invoice_number(today: date | None = None) -> str:
    """
    Return ``INV-YYYYMMDD-NNNN`` with a random 4-digit suffix.

    Not unique: callers that persist invoices must handle collisions.
    """
    today = today or date.today()
    suffix = random.randint(1000, 9999)
    return f"{settings.INVOICE_NUMBER_PREFIX}-{today:%Y%m%d}-{suffix}"
