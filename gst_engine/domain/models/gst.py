# gst_engine/domain/models/gst.py
"""
Value types for the GST engine.

Inputs accept both snake_case and the camelCase keys used on the wire
(``billToState``, ``shippingCharges`` ...). ``to_dict()`` produces the
camelCase JSON shape with plain floats.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ZERO = Decimal("0")

TransactionType = Literal["intra-state", "inter-state"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaxableTransaction(_CamelModel):
    model_config = ConfigDict(frozen=True)

    bill_to_state: str
    ship_to_state: str
    subtotal: Decimal = Field(ge=0)
    shipping_charges: Decimal = Field(default=ZERO, ge=0)
    tax_rate: Decimal = Field(ge=0, le=50, description="Tax rate percentage")

    @property
    def taxable_amount(self) -> Decimal:
        return self.subtotal + self.shipping_charges


class GSTBreakup(_CamelModel):
    # May hold negative amounts; validate_gst_override reports them.
    cgst: Decimal = Field(default=ZERO)
    sgst: Decimal = Field(default=ZERO)
    igst: Decimal = Field(default=ZERO)
    utgst: Optional[Decimal] = None

    @property
    def total(self) -> Decimal:
        return self.cgst + self.sgst + self.igst + (self.utgst or ZERO)

    def to_dict(self) -> dict:
        data = {
            "cgst": float(self.cgst),
            "sgst": float(self.sgst),
            "igst": float(self.igst),
        }
        if self.utgst is not None:
            data["utgst"] = float(self.utgst)
        return data


class GSTCalculationResult(_CamelModel):
    transaction_type: TransactionType
    gst_breakup: GSTBreakup
    total_tax: Decimal
    grand_total: Decimal

    def to_dict(self) -> dict:
        return {
            "transactionType": self.transaction_type,
            "gstBreakup": self.gst_breakup.to_dict(),
            "totalTax": float(self.total_tax),
            "grandTotal": float(self.grand_total),
        }


class OverrideValidation(_CamelModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class TaxSettings(_CamelModel):
    """
    Per-invoice tax settings.

    ``is_tax_optional`` switches GST on for the invoice; when it is false
    the invoice total is untaxed. A manual override replaces the computed
    breakup with ``gst_breakup`` and should carry an ``override_reason``.
    """

    is_tax_optional: bool = True
    tax_rate: Decimal = Field(ge=0, le=50)
    gst_breakup: Optional[GSTBreakup] = None
    is_manual_override: bool = False
    override_reason: Optional[str] = None


class InvoiceTax(_CamelModel):
    gst_breakup: Optional[GSTBreakup] = None
    calculated_total: Decimal
    is_manual_override: bool = False
    override_reason: Optional[str] = None
    override_validation: Optional[OverrideValidation] = None
