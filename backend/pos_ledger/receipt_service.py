"""
POS LEDGER: RECEIPT SERVICE

Provides:
1. Plain-text receipt rendering from a persisted transaction
2. Stable per-transaction regulatory numbers (GST, S/S, terminal, auth, card tail)
3. Uniquely numbered receipt artifacts (receipt_NNNNN.txt / .pdf)
4. Print flow: clamp number -> load -> render -> write

Rendering is a pure function of the stored transaction and the store
metadata, so printing the same transaction twice gives identical text.
"""

from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from pathlib import Path
from typing import List, Optional, Tuple, Union
import random
import logging

from pos_ledger.atomic_numbering import AtomicArtifactNumbering, SequenceCollisionError
from pos_ledger.financial_precision import format_currency, format_litres
from pos_ledger.models import PaymentMethod, Transaction

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("txt", "pdf")


class ReceiptWriteError(Exception):
    """Raised when a receipt artifact cannot be written"""
    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(message)


# =============================================================================
# STORE METADATA & REGULATORY NUMBERS
# =============================================================================

@dataclass(frozen=True)
class StoreInfo:
    """Fixed store metadata printed in the receipt header"""
    name: str
    address_lines: Tuple[str, ...] = field(default_factory=tuple)
    phone: str = ""


@dataclass(frozen=True)
class RegulatoryNumbers:
    gst: str
    service_station: str
    terminal: str
    authorization: str
    card_tail: str


def generate_regulatory_numbers(transaction_number: int) -> RegulatoryNumbers:
    """
    Receipt identification numbers for one transaction.

    Seeded by the transaction number so a reprint shows the same values.
    """
    rng = random.Random(transaction_number)
    return RegulatoryNumbers(
        gst=str(rng.randint(100_000_000, 999_999_999)),
        service_station=str(rng.randint(1_000_000, 9_999_999)),
        terminal="0" + str(rng.randint(10_000_000, 99_999_999)),
        authorization=f"{rng.randint(1_000_000, 9_999_999)}-{rng.randint(0, 9)}",
        card_tail=str(rng.randint(1_000, 9_999))
    )


# =============================================================================
# TEXT RENDERING
# =============================================================================

class ReceiptFormatter:
    """Renders the tab-aligned plain-text receipt"""

    def __init__(self, store_info: StoreInfo, display_tz: tzinfo = timezone.utc):
        self.store_info = store_info
        self.display_tz = display_tz

    def local_timestamp(self, transaction: Transaction):
        return transaction.timestamp.astimezone(self.display_tz)

    def render(self, transaction: Transaction) -> str:
        numbers = generate_regulatory_numbers(transaction.transaction_number)
        when = self.local_timestamp(transaction)
        total = format_currency(transaction.total_amount)

        lines: List[str] = []

        # Header
        lines.append("Gas Prices")
        lines.append("Self Serve")
        lines.append("")
        lines.append(self.store_info.name)
        lines.extend(self.store_info.address_lines)
        lines.append(self.store_info.phone)
        lines.append("")

        # Identification
        lines.append(f"GST:\t{numbers.gst}\t\tTRANSACTION #:\t{transaction.transaction_number}")
        lines.append(f"DATE:\t{when:%Y-%m-%d}\t\tTIME:\t\t\t{when:%H:%M}")
        lines.append(f"S/S:\t{numbers.service_station}\t\t\tTERMINAL:\t{numbers.terminal}")
        lines.append("")
        lines.append(f"AUTHORIZATION #:\t{numbers.authorization}")
        lines.append("")

        # Items
        lines.append("RETAIL PRODUCT")
        for item in transaction.retail_items:
            lines.append(
                f"{item.quantity}\t\t{item.product_name}\t\t\t\t{format_currency(item.total_price)}"
            )
        lines.append("")

        lines.append("GASOLINE")
        for item in transaction.fuel_items:
            lines.append(
                f"{format_litres(item.quantity_litres)}L\t\t{item.product_name}\t\t\t\t"
                f"{format_currency(item.total_price)}"
            )
        lines.append("")

        # Totals
        lines.append(f"{transaction.item_count} Items\t\tSUBTOTAL:\t\t\t\t\t{total}")
        lines.append(f"\t\t\t\t\t\tTOTAL:\t\t\t{total}")

        # Payment
        if transaction.payment_method == PaymentMethod.CARD:
            lines.append(f"VISA CARD XXXXXXXXXXXXXXXX{numbers.card_tail}")
            lines.append("ENTRY METHOD CONTACTLESS")
        else:
            lines.append("CASH")
        lines.append("")
        lines.append(f"\t\t\t\t\t\tTENDERED:\t\t{format_currency(transaction.tendered_amount)}")
        lines.append(f"\t\t\t\t\t\tCASH CHANGE:\t{format_currency(transaction.change_amount)}")
        lines.append("")

        lines.append(f"THANK YOU FOR SHOPPING AT {self.store_info.name.upper()}")

        return "\n".join(lines) + "\n"


# =============================================================================
# ARTIFACT WRITING
# =============================================================================

class ReceiptWriter:
    """Persists rendered receipts as uniquely numbered files"""

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)
        self.numbering = AtomicArtifactNumbering(self.output_dir, prefix="receipt")

    def write_receipt(self, text: str) -> Path:
        """Write receipt text to receipt_<NNNNN>.txt and return its path."""
        return self._write(text.encode("utf-8"), ".txt")

    def write_receipt_pdf(self, pdf_bytes: bytes) -> Path:
        """Write a PDF receipt to receipt_<NNNNN>.pdf and return its path."""
        return self._write(pdf_bytes, ".pdf")

    def _write(self, payload: bytes, suffix: str) -> Path:
        path = None
        try:
            path, handle = self.numbering.open_next(suffix)
            with handle:
                handle.write(payload)
        except (OSError, SequenceCollisionError) as e:
            logger.error(f"[RECEIPT] Failed to write receipt in {self.output_dir}: {e}")
            if path is not None:
                # Release the number; no partial artifact stays behind
                path.unlink(missing_ok=True)
            raise ReceiptWriteError(
                f"Failed to write receipt in {self.output_dir}: {e}", path=path
            ) from e

        logger.info(f"[RECEIPT] Printed to: {path}")
        return path


# =============================================================================
# PRINT FLOW
# =============================================================================

class ReceiptService:
    """Looks up a transaction and prints its receipt"""

    def __init__(self, transaction_service, formatter: ReceiptFormatter, writer: ReceiptWriter, pdf_generator=None):
        self.transaction_service = transaction_service
        self.formatter = formatter
        self.writer = writer
        self.pdf_generator = pdf_generator

    async def print_receipt(self, transaction_number: int, output_format: str = "txt") -> Optional[Path]:
        """
        Print the receipt of a past transaction.

        The number is clamped into the assigned range first.

        Returns:
            Path of the written artifact, or None if no transaction exists

        Raises:
            ValueError: unsupported output format
            ReceiptWriteError: artifact could not be written
        """
        if output_format not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported receipt format '{output_format}', expected one of {SUPPORTED_FORMATS}"
            )
        if output_format == "pdf" and self.pdf_generator is None:
            raise ValueError("PDF receipts require a pdf_generator")

        transaction = await self.transaction_service.get_transaction(transaction_number)
        if transaction is None:
            logger.warning(f"[RECEIPT] No transaction found for #{transaction_number}")
            return None

        if output_format == "pdf":
            return self.writer.write_receipt_pdf(self.pdf_generator.generate_pdf(transaction))
        return self.writer.write_receipt(self.formatter.render(transaction))
