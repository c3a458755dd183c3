"""
Gas station POS transaction ledger
"""
from .financial_precision import (
    to_decimal,
    round_currency,
    round_litres,
    calculate_line_total,
    calculate_change,
    format_currency,
    format_litres,
    FinancialPrecisionError,
    NegativeValueError
)

from .models import (
    PaymentMethod,
    FuelGrade,
    RetailLineItem,
    FuelLineItem,
    Transaction,
    parse_line_items
)

from .ledger_store import (
    LedgerStore,
    StorageError,
    StorageCorruptError,
    StorageIoError,
    StorageNotFoundError,
    DuplicateTransactionError
)

from .atomic_numbering import (
    TransactionNumberSequence,
    AtomicArtifactNumbering,
    SequenceCollisionError
)

from .invariant_validator import (
    TransactionInvariantValidator,
    TransactionValidationError,
    ValidationErrorCode
)

from .transaction_service import (
    TransactionService,
    TransactionResult
)

from .receipt_service import (
    StoreInfo,
    ReceiptFormatter,
    ReceiptWriter,
    ReceiptService,
    ReceiptWriteError
)

from .pdf_service import ReceiptPDFGenerator

from .config import Settings, get_settings, configure_logging

from .bootstrap import PosServices, create_services

__all__ = [
    # Financial Precision
    'to_decimal',
    'round_currency',
    'round_litres',
    'calculate_line_total',
    'calculate_change',
    'format_currency',
    'format_litres',
    'FinancialPrecisionError',
    'NegativeValueError',
    # Models
    'PaymentMethod',
    'FuelGrade',
    'RetailLineItem',
    'FuelLineItem',
    'Transaction',
    'parse_line_items',
    # Ledger Store
    'LedgerStore',
    'StorageError',
    'StorageCorruptError',
    'StorageIoError',
    'StorageNotFoundError',
    'DuplicateTransactionError',
    # Numbering
    'TransactionNumberSequence',
    'AtomicArtifactNumbering',
    'SequenceCollisionError',
    # Validation
    'TransactionInvariantValidator',
    'TransactionValidationError',
    'ValidationErrorCode',
    # Transaction Service
    'TransactionService',
    'TransactionResult',
    # Receipts
    'StoreInfo',
    'ReceiptFormatter',
    'ReceiptWriter',
    'ReceiptService',
    'ReceiptWriteError',
    'ReceiptPDFGenerator',
    # Configuration
    'Settings',
    'get_settings',
    'configure_logging',
    'PosServices',
    'create_services',
]
