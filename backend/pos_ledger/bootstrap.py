"""
Service wiring: builds the ledger store, transaction service and receipt
pipeline from settings.
"""

from dataclasses import dataclass
from typing import Optional
import logging

from pos_ledger.config import Settings, configure_logging, get_settings
from pos_ledger.ledger_store import LedgerStore
from pos_ledger.pdf_service import ReceiptPDFGenerator
from pos_ledger.receipt_service import (
    ReceiptFormatter,
    ReceiptService,
    ReceiptWriter,
    StoreInfo,
)
from pos_ledger.transaction_service import TransactionService

logger = logging.getLogger(__name__)


@dataclass
class PosServices:
    settings: Settings
    store: LedgerStore
    transaction_service: TransactionService
    receipt_service: ReceiptService


def create_services(settings: Optional[Settings] = None) -> PosServices:
    """
    Initialize all services.

    Raises StorageCorruptError if an existing ledger cannot be read, since
    the number sequence is initialized from it.
    """
    if settings is None:
        settings = get_settings()
        configure_logging(settings)

    store_info = StoreInfo(
        name=settings.store_name,
        address_lines=tuple(settings.store_address_lines),
        phone=settings.store_phone
    )

    # Initialize services
    store = LedgerStore(settings.ledger_path)
    transaction_service = TransactionService(store)
    receipt_service = ReceiptService(
        transaction_service,
        formatter=ReceiptFormatter(store_info),
        writer=ReceiptWriter(settings.receipt_output_dir),
        pdf_generator=ReceiptPDFGenerator(store_info)
    )

    logger.info(
        f"POS ledger ready: {settings.ledger_path} "
        f"(next transaction #{transaction_service.next_transaction_number})"
    )
    return PosServices(
        settings=settings,
        store=store,
        transaction_service=transaction_service,
        receipt_service=receipt_service
    )
