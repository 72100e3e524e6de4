"""Tests for invoice-level tax resolution."""

import re
from decimal import Decimal

import pytest

from gst_engine.core.config import settings
from gst_engine.domain.models.gst import GSTBreakup, TaxSettings
from gst_engine.domain.services.gst_calculation import InvalidStateError
from gst_engine.domain.services.invoice_tax import (
    InvoiceNumberCollisionError,
    extract_state_from_address,
    generate_unique_invoice_number,
    resolve_invoice_tax,
)


class TestExtractStateFromAddress:
    """Test state detection in free-text addresses."""

    def test_known_state(self):
        assert extract_state_from_address("12 MG Road, Bengaluru, Karnataka 560001") == "Karnataka"

    def test_case_insensitive(self):
        assert extract_state_from_address("plot 4, andheri east, mumbai, maharashtra") == "Maharashtra"

    def test_union_territory(self):
        assert extract_state_from_address("Sector 17, Chandigarh 160017") == "Chandigarh"

    def test_state_part_beats_locality_name(self):
        assert extract_state_from_address("Chandigarh Road, Ludhiana, Punjab 141001") == "Punjab"

    def test_state_found_before_pincode_part(self):
        assert extract_state_from_address("Delhi Gate, Agra, Uttar Pradesh, 282001") == "Uttar Pradesh"

    def test_fallback_second_last_part(self):
        assert extract_state_from_address("221B Baker Street, Westminster, London NW1") == "Westminster"

    def test_unknown(self):
        assert extract_state_from_address("Somewhere") == "Unknown"


class TestResolveInvoiceTax:
    """Test invoice tax resolution: untaxed, computed and overridden."""

    def test_tax_not_applied(self):
        settings = TaxSettings(is_tax_optional=False, tax_rate=Decimal("18"))
        result = resolve_invoice_tax(settings, "Maharashtra", None, Decimal("1000"), Decimal("50"))
        assert result.gst_breakup is None
        assert result.calculated_total == Decimal("1050")

    def test_computed_intra_state_defaults_ship_to(self):
        settings = TaxSettings(tax_rate=Decimal("18"))
        result = resolve_invoice_tax(settings, "Maharashtra", None, Decimal("100000"), Decimal("5000"))
        assert result.gst_breakup.cgst == Decimal("9450")
        assert result.gst_breakup.sgst == Decimal("9450")
        assert result.calculated_total == Decimal("123900")
        assert result.is_manual_override is False
        assert result.override_validation is None

    def test_computed_inter_state(self):
        settings = TaxSettings(tax_rate=Decimal("12"))
        result = resolve_invoice_tax(settings, "Gujarat", "Rajasthan", Decimal("1000"))
        assert result.gst_breakup.igst == Decimal("120")
        assert result.calculated_total == Decimal("1120")

    def test_computed_invalid_state_raises(self):
        settings = TaxSettings(tax_rate=Decimal("18"))
        with pytest.raises(InvalidStateError):
            resolve_invoice_tax(settings, "Unknown", None, Decimal("1000"))

    def test_manual_override(self):
        settings = TaxSettings(
            tax_rate=Decimal("18"),
            is_manual_override=True,
            gst_breakup=GSTBreakup(igst=Decimal("90")),
            override_reason="Export exemption - partial IGST applicable",
        )
        result = resolve_invoice_tax(settings, "Maharashtra", "Karnataka", Decimal("1000"), Decimal("100"))
        assert result.is_manual_override is True
        assert result.gst_breakup.igst == Decimal("90")
        assert result.calculated_total == Decimal("1190")
        assert result.override_validation.is_valid is True

    def test_manual_override_without_reason(self):
        settings = TaxSettings(
            tax_rate=Decimal("18"),
            is_manual_override=True,
            gst_breakup=GSTBreakup(igst=Decimal("90")),
        )
        result = resolve_invoice_tax(settings, "Maharashtra", "Karnataka", Decimal("1000"))
        assert result.override_validation.is_valid is False
        assert result.override_validation.errors == [
            "Override reason is required for manual GST override"
        ]

    def test_inconsistent_override_is_reported_not_raised(self):
        settings = TaxSettings(
            tax_rate=Decimal("18"),
            is_manual_override=True,
            gst_breakup=GSTBreakup(igst=Decimal("90")),
            override_reason="manual",
        )
        # Override does not validate state names; the split is checked only.
        result = resolve_invoice_tax(settings, "Goa", "goa", Decimal("1000"))
        assert result.override_validation.is_valid is False
        assert "IGST should be 0 for intra-state transactions" in result.override_validation.errors

    def test_override_flag_without_breakup_computes(self):
        settings = TaxSettings(tax_rate=Decimal("18"), is_manual_override=True)
        result = resolve_invoice_tax(settings, "Goa", "Goa", Decimal("1000"))
        assert result.is_manual_override is False
        assert result.gst_breakup.cgst == Decimal("90")

    def test_tax_settings_from_camel_case(self):
        settings = TaxSettings.model_validate({
            "isTaxOptional": True,
            "taxRate": 5,
            "isManualOverride": True,
            "gstBreakup": {"cgst": 25, "sgst": 25, "igst": 0},
            "overrideReason": "rate revision",
        })
        result = resolve_invoice_tax(settings, "Kerala", "Kerala", Decimal("1000"))
        assert result.calculated_total == Decimal("1050")
        assert result.override_validation.is_valid is True


class TestGenerateUniqueInvoiceNumber:
    """Test invoice number generation with collision retries."""

    def test_first_free_number(self):
        number = generate_unique_invoice_number(lambda n: False)
        assert re.fullmatch(r"INV-\d{8}-\d{4}", number)

    def test_retries_on_collision(self):
        seen = []

        def exists(number):
            seen.append(number)
            return len(seen) == 1

        number = generate_unique_invoice_number(exists)
        assert len(seen) == 2
        assert number == seen[1]

    def test_gives_up(self):
        calls = []

        def exists(number):
            calls.append(number)
            return True

        with pytest.raises(InvoiceNumberCollisionError):
            generate_unique_invoice_number(exists, max_attempts=3)
        assert len(calls) == 3

    def test_zero_attempts_rejected(self):
        calls = []
        with pytest.raises(ValueError):
            generate_unique_invoice_number(lambda n: calls.append(n) or False, max_attempts=0)
        assert calls == []

    def test_default_attempts_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "INVOICE_NUMBER_MAX_ATTEMPTS", 4)
        calls = []

        def exists(number):
            calls.append(number)
            return True

        with pytest.raises(InvoiceNumberCollisionError):
            generate_unique_invoice_number(exists)
        assert len(calls) == 4
