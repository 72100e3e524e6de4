"""Shared test fixtures for the GST engine test suite."""

from decimal import Decimal

import pytest

from gst_engine.domain.models.gst import TaxableTransaction


@pytest.fixture
def intra_state_transaction() -> TaxableTransaction:
    """Maharashtra -> Maharashtra, 1,00,000 + 5,000 shipping @ 18%."""
    return TaxableTransaction(
        bill_to_state="Maharashtra",
        ship_to_state="Maharashtra",
        subtotal=Decimal("100000"),
        shipping_charges=Decimal("5000"),
        tax_rate=Decimal("18"),
    )


@pytest.fixture
def inter_state_transaction() -> TaxableTransaction:
    """Maharashtra -> Karnataka, same amounts as the intra-state case."""
    return TaxableTransaction(
        bill_to_state="Maharashtra",
        ship_to_state="Karnataka",
        subtotal=Decimal("100000"),
        shipping_charges=Decimal("5000"),
        tax_rate=Decimal("18"),
    )


@pytest.fixture
def calculation_payload() -> dict:
    """Request body as it arrives from the HTTP layer."""
    return {
        "billToState": "Maharashtra",
        "shipToState": "Karnataka",
        "subtotal": 100000,
        "shippingCharges": 5000,
        "taxRate": 18,
    }
