"""
POS LEDGER: TRANSACTION INVARIANT VALIDATOR

Enforces the sale constraints before a transaction number is consumed:
1. At least one line item, every entry a well-formed retail or fuel line
2. line total == round(price x quantity)
3. total_amount == sum(line totals)
4. tendered_amount >= total_amount

Blocks the transaction if violated.
"""

from pydantic import ValidationError
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union
import logging

from pos_ledger.financial_precision import (
    FinancialPrecisionError,
    NegativeValueError,
    calculate_line_total,
    round_currency,
    sum_currency,
)
from pos_ledger.models import FuelLineItem, RetailLineItem, parse_line_items

logger = logging.getLogger(__name__)

LineItemModel = Union[RetailLineItem, FuelLineItem]


class ValidationErrorCode(str, Enum):
    EMPTY_OR_INVALID_ITEMS = "EMPTY_OR_INVALID_ITEMS"
    AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
    INSUFFICIENT_TENDER = "INSUFFICIENT_TENDER"


class TransactionValidationError(Exception):
    """Raised when a sale violates a transaction invariant"""
    def __init__(self, code: ValidationErrorCode, message: str, details: dict = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class TransactionInvariantValidator:
    """
    Centralized sale validation.

    Pure: never touches the ledger or the number sequence, so a rejected
    sale has no side effects.
    """

    def validate_line_items(self, line_items: Optional[Sequence]) -> List[LineItemModel]:
        """
        Check the item list and return it as line item models.

        Raw dict entries (e.g. from a cart payload) are parsed on the way;
        anything else that is not a line item model is rejected.
        """
        if not line_items:
            raise TransactionValidationError(
                code=ValidationErrorCode.EMPTY_OR_INVALID_ITEMS,
                message="Transaction has no line items"
            )

        items = []
        violations = []
        for index, entry in enumerate(line_items):
            item = self._coerce_item(entry)
            if item is None:
                violations.append({
                    "index": index,
                    "message": f"Entry {index} is not a valid line item: {entry!r}"
                })
                continue

            problem = self._check_item(item)
            if problem:
                violations.append({"index": index, "message": problem})
                continue

            items.append(item)

        if violations:
            raise TransactionValidationError(
                code=ValidationErrorCode.EMPTY_OR_INVALID_ITEMS,
                message=f"{len(violations)} invalid line item(s): {violations[0]['message']}",
                details={"violations": violations}
            )

        return items

    def validate_amounts(
        self,
        items: Sequence[LineItemModel],
        total_amount
    ) -> Decimal:
        """Recompute the item sum and compare it against the claimed total."""
        try:
            total = round_currency(total_amount)
        except FinancialPrecisionError as e:
            raise TransactionValidationError(
                code=ValidationErrorCode.AMOUNT_MISMATCH,
                message=f"Total amount is not a valid amount: {total_amount!r}",
                details={"total_amount": repr(total_amount)}
            ) from e

        items_total = sum_currency(item.total_price for item in items)
        if items_total != total:
            raise TransactionValidationError(
                code=ValidationErrorCode.AMOUNT_MISMATCH,
                message=f"Line items sum to ${items_total:.2f} but total is ${total:.2f}",
                details={"items_total": str(items_total), "total_amount": str(total)}
            )
        return total

    def validate_tender(self, total: Decimal, tendered_amount) -> Decimal:
        try:
            tendered = round_currency(tendered_amount)
        except FinancialPrecisionError as e:
            raise TransactionValidationError(
                code=ValidationErrorCode.INSUFFICIENT_TENDER,
                message=f"Tendered amount is not a valid amount: {tendered_amount!r}",
                details={"tendered_amount": repr(tendered_amount)}
            ) from e

        if tendered < total:
            raise TransactionValidationError(
                code=ValidationErrorCode.INSUFFICIENT_TENDER,
                message=f"Tendered ${tendered:.2f} does not cover total ${total:.2f}",
                details={"tendered_amount": str(tendered), "total_amount": str(total)}
            )
        return tendered

    def validate_sale(
        self,
        line_items: Optional[Sequence],
        total_amount,
        tendered_amount
    ) -> Tuple[List[LineItemModel], Decimal, Decimal]:
        """
        Run every check in order: items, amounts, tender.

        Returns:
            tuple: (line items, total, tendered)

        Raises:
            TransactionValidationError: first failing check
        """
        items = self.validate_line_items(line_items)
        total = self.validate_amounts(items, total_amount)
        tendered = self.validate_tender(total, tendered_amount)
        return items, total, tendered

    # -------------------------------------------------------------------------

    @staticmethod
    def _coerce_item(entry) -> Optional[LineItemModel]:
        if isinstance(entry, (RetailLineItem, FuelLineItem)):
            return entry
        if isinstance(entry, dict):
            try:
                return parse_line_items([entry])[0]
            except ValidationError:
                return None
        return None

    @staticmethod
    def _check_item(item: LineItemModel) -> Optional[str]:
        """Return a description of what is wrong with the item, or None."""
        if isinstance(item, RetailLineItem):
            price, quantity = item.unit_price, item.quantity
        else:
            price, quantity = item.price_per_litre, item.quantity_litres

        try:
            expected = calculate_line_total(price, quantity)
        except NegativeValueError as e:
            return f"{item.product_name}: {e}"

        if item.total_price != expected:
            return (
                f"{item.product_name}: total ${item.total_price:.2f} "
                f"does not match price x quantity ${expected:.2f}"
            )
        return None
