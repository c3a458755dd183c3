"""
POS LEDGER: TRANSACTION SERVICE

Implements:
1. Sale validation before number assignment (invariant validator)
2. Serialized commit: build record, append, advance counter
3. Clamped lookup and replay of past transactions
4. Bulk delete without number reuse

ALL amounts use Decimal (2 dp money, 3 dp litres).
ALL blocking ledger calls run in a worker thread.
The counter advances ONLY after the ledger append succeeded.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Union
import asyncio
import threading
import logging

from pos_ledger.atomic_numbering import TransactionNumberSequence
from pos_ledger.financial_precision import calculate_change
from pos_ledger.invariant_validator import (
    TransactionInvariantValidator,
    TransactionValidationError,
    ValidationErrorCode,
)
from pos_ledger.ledger_store import LedgerStore, StorageError
from pos_ledger.models import (
    FuelLineItem,
    PaymentMethod,
    RetailLineItem,
    Transaction,
)

logger = logging.getLogger(__name__)


@dataclass
class TransactionResult:
    """Outcome of a create request"""
    success: bool
    transaction_number: Optional[int] = None
    error: Optional[ValidationErrorCode] = None
    message: str = ""
    transaction: Optional[Transaction] = None

    @classmethod
    def rejected(cls, error: TransactionValidationError) -> "TransactionResult":
        return cls(success=False, error=error.code, message=error.message)


class TransactionService:
    """
    Owner of transaction number assignment.

    Composes the ledger store, the number sequence and the validator. One
    thread lock covers every ledger mutation made through the service; the
    locked section runs in a worker thread, so callers on any event loop or
    thread are serialized.
    """

    def __init__(self, store: LedgerStore):
        self.store = store
        self.validator = TransactionInvariantValidator()
        self.sequence = TransactionNumberSequence.from_store(store)
        self._commit_lock = threading.Lock()

    @property
    def next_transaction_number(self) -> int:
        return self.sequence.next_number

    @property
    def latest_transaction_number(self) -> int:
        return self.sequence.latest

    # =========================================================================
    # CREATE
    # =========================================================================

    async def create_transaction(
        self,
        payment_method: Union[PaymentMethod, str],
        total_amount,
        tendered_amount,
        line_items: Optional[Sequence]
    ) -> TransactionResult:
        """
        Validate and durably record a completed sale.

        Validation failures come back as a failed TransactionResult and leave
        the ledger and counter untouched.

        Raises:
            ValueError: unknown payment method
            StorageError: the append failed; nothing was committed
        """
        method = PaymentMethod(payment_method)

        try:
            items, total, tendered = self.validator.validate_sale(
                line_items, total_amount, tendered_amount
            )
        except TransactionValidationError as e:
            logger.warning(f"[TRANSACTION] Rejected ({e.code.value}): {e.message}")
            return TransactionResult.rejected(e)

        retail_items = [item for item in items if isinstance(item, RetailLineItem)]
        fuel_items = [item for item in items if isinstance(item, FuelLineItem)]
        change = calculate_change(total, tendered)

        transaction = await asyncio.to_thread(
            self._commit, retail_items, fuel_items, method, total, change
        )
        number = transaction.transaction_number

        logger.info(
            f"[TRANSACTION] Committed #{number}: {method.value} "
            f"total ${total:.2f}, tendered ${tendered:.2f}, change ${change:.2f}"
        )
        return TransactionResult(
            success=True,
            transaction_number=number,
            message=f"Transaction #{number} recorded",
            transaction=transaction
        )

    def _commit(self, retail_items, fuel_items, method: PaymentMethod, total, change) -> Transaction:
        """
        Read counter, build record, append, advance counter.

        Runs in a worker thread under the commit lock.
        """
        with self._commit_lock:
            transaction = Transaction(
                transaction_number=self.sequence.next_number,
                retail_items=retail_items,
                fuel_items=fuel_items,
                payment_method=method,
                total_amount=total,
                change_amount=change,
                timestamp=datetime.now(timezone.utc)
            )

            try:
                self.store.append(transaction)
            except StorageError as e:
                logger.error(
                    f"[TRANSACTION] Append failed for #{transaction.transaction_number}, "
                    f"counter not advanced: {e}"
                )
                raise

            self.sequence.advance()
            return transaction

    def _clear(self) -> None:
        with self._commit_lock:
            self.store.clear()

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def get_clamped_transaction_number(self, requested: int) -> int:
        """Clamp a requested number into [1, latest assigned]."""
        return self.sequence.clamp(requested)

    async def get_transaction(self, transaction_number: int) -> Optional[Transaction]:
        number = self.get_clamped_transaction_number(transaction_number)
        return await asyncio.to_thread(self.store.find_by_number, number)

    async def get_transaction_line_items(
        self,
        transaction_number: int
    ) -> List[Union[RetailLineItem, FuelLineItem]]:
        """
        Reconstruct the line items of a past sale for redisplay.

        Retail items come first, then fuel items. Empty when the clamped
        number has no stored transaction (e.g. after delete-all).
        """
        transaction = await self.get_transaction(transaction_number)
        if transaction is None:
            return []
        return transaction.line_items

    async def list_transactions(self) -> List[Transaction]:
        return await asyncio.to_thread(self.store.load_all)

    # =========================================================================
    # DELETE
    # =========================================================================

    async def delete_all_transactions(self) -> bool:
        """
        Clear the ledger. The counter is kept, so numbers are never reused.

        Returns False (and logs) if the store failed.
        """
        try:
            await asyncio.to_thread(self._clear)
        except StorageError as e:
            logger.error(f"[TRANSACTION] Delete-all failed: {e}")
            return False

        logger.info(
            f"[TRANSACTION] All transactions deleted; next number stays #{self.sequence.next_number}"
        )
        return True
