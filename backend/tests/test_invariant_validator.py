"""
Sale invariants checked before a number is assigned
"""
import pytest
from decimal import Decimal

from pos_ledger.invariant_validator import (
    TransactionInvariantValidator,
    TransactionValidationError,
    ValidationErrorCode,
)
from pos_ledger.models import RetailLineItem


@pytest.fixture
def validator():
    return TransactionInvariantValidator()


class TestValidateSale:

    def test_valid_sale_returns_normalized_amounts(self, validator, chips, regular_fuel):
        items, total, tendered = validator.validate_sale([chips, regular_fuel], 17.5, "20")
        assert items == [chips, regular_fuel]
        assert total == Decimal("17.50")
        assert tendered == Decimal("20.00")

    def test_checks_items_before_amounts(self, validator, chips):
        with pytest.raises(TransactionValidationError) as exc_info:
            validator.validate_sale([chips, "not an item"], "99.00", "0.00")
        assert exc_info.value.code == ValidationErrorCode.EMPTY_OR_INVALID_ITEMS

    def test_collects_every_invalid_entry(self, validator, chips):
        bad = RetailLineItem(product_id=9, product_name="Bad", unit_price="1.00", quantity=2, total_price="1.00")
        with pytest.raises(TransactionValidationError) as exc_info:
            validator.validate_line_items([None, chips, bad])
        violations = exc_info.value.details["violations"]
        assert [v["index"] for v in violations] == [0, 2]

    def test_amount_mismatch_details(self, validator, chips):
        with pytest.raises(TransactionValidationError) as exc_info:
            validator.validate_sale([chips], "3.00", "5.00")
        error = exc_info.value
        assert error.code == ValidationErrorCode.AMOUNT_MISMATCH
        assert error.details == {"items_total": "2.50", "total_amount": "3.00"}

    def test_unparseable_total(self, validator, chips):
        with pytest.raises(TransactionValidationError) as exc_info:
            validator.validate_sale([chips], "two fifty", "5.00")
        assert exc_info.value.code == ValidationErrorCode.AMOUNT_MISMATCH

    def test_unparseable_tender(self, validator, chips):
        with pytest.raises(TransactionValidationError) as exc_info:
            validator.validate_sale([chips], "2.50", None)
        assert exc_info.value.code == ValidationErrorCode.INSUFFICIENT_TENDER

    def test_tender_compared_at_cent_precision(self, validator, chips):
        # 2.495 rounds half up to 2.50
        _, total, tendered = validator.validate_sale([chips], "2.50", "2.495")
        assert tendered == total
