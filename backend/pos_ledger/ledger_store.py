"""
POS LEDGER: DURABLE TRANSACTION STORE

Provides:
1. Append-only persistence of committed transactions in one JSON document
2. Atomic rewrite (temp file + fsync + os.replace) - no partial records on disk
3. Insertion-ordered reads and lookup by transaction number
4. Bulk clear (transactions are never deleted individually)
5. Typed storage failures (corrupt vs I/O vs not found)

On-disk layout:
    {
        "schema_version": 1,
        "transactions": [ {transaction record}, ... ]
    }
"""

from pydantic import ValidationError
from pathlib import Path
from typing import List, Optional, Union
import json
import os
import tempfile
import threading
import logging

from pos_ledger.models import Transaction

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
TRANSACTIONS_KEY = "transactions"


# =============================================================================
# EXCEPTIONS
# =============================================================================

class StorageError(Exception):
    """Base exception for ledger storage failures."""
    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(message)


class StorageNotFoundError(StorageError):
    """Raised when a record that must exist is absent."""
    pass


class StorageIoError(StorageError):
    """Raised when the ledger file cannot be read or written."""
    pass


class StorageCorruptError(StorageError):
    """Raised when the persisted ledger is malformed or partially written."""
    pass


class DuplicateTransactionError(StorageError):
    """Raised when a transaction number is already present in the ledger."""
    def __init__(self, transaction_number: int, path: Optional[Path] = None):
        self.transaction_number = transaction_number
        super().__init__(
            f"Transaction #{transaction_number} already exists in ledger",
            path=path
        )


# =============================================================================
# LEDGER STORE
# =============================================================================

class LedgerStore:
    """
    Append-only ledger store for committed transactions.

    Writers are serialized with an in-process lock. Readers take no lock:
    every write replaces the file atomically, so a reader sees either the
    previous document or the new one.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._write_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def load_all(self) -> List[Transaction]:
        """
        Read all transactions in insertion order.

        Returns an empty list if the ledger does not exist yet.

        Raises:
            StorageCorruptError: content is not a valid ledger document
            StorageIoError: file exists but cannot be read
        """
        records = self._read_records()
        transactions = []
        for index, record in enumerate(records):
            try:
                transactions.append(Transaction.from_record(record))
            except ValidationError as e:
                raise StorageCorruptError(
                    f"Invalid transaction record at index {index} in {self.path}: {e}",
                    path=self.path
                ) from e
        return transactions

    def find_by_number(self, transaction_number: int) -> Optional[Transaction]:
        """Return the transaction with this number, or None if absent."""
        for transaction in self.load_all():
            if transaction.transaction_number == transaction_number:
                return transaction
        return None

    def get_by_number(self, transaction_number: int) -> Transaction:
        """Like find_by_number, but absence raises StorageNotFoundError."""
        transaction = self.find_by_number(transaction_number)
        if transaction is None:
            raise StorageNotFoundError(
                f"Transaction #{transaction_number} not found in {self.path}",
                path=self.path
            )
        return transaction

    def max_transaction_number(self) -> int:
        """Highest stored transaction number, 0 when empty."""
        return max((t.transaction_number for t in self.load_all()), default=0)

    def count(self) -> int:
        return len(self._read_records())

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def append(self, transaction: Transaction) -> None:
        """
        Durably append one transaction.

        The existing records are re-read and the full document is rewritten
        atomically, so previously stored records are never lost and no
        partially written record can be observed.

        Raises:
            DuplicateTransactionError: number already stored
            StorageCorruptError: existing ledger cannot be parsed
            StorageIoError: write failed (ledger left unchanged)
        """
        with self._write_lock:
            records = self._read_records()

            # Transaction numbers are unique across the ledger
            for record in records:
                if record.get("transaction_number") == transaction.transaction_number:
                    raise DuplicateTransactionError(transaction.transaction_number, path=self.path)

            records.append(transaction.to_record())
            self._write_records(records)

        logger.info(
            f"[LEDGER] Appended transaction #{transaction.transaction_number} "
            f"({len(records)} total) to {self.path}"
        )

    def clear(self) -> None:
        """Remove all transactions. Subsequent load_all returns empty."""
        with self._write_lock:
            self._write_records([])
        logger.info(f"[LEDGER] Cleared all transactions in {self.path}")

    # -------------------------------------------------------------------------
    # File handling
    # -------------------------------------------------------------------------

    def _read_records(self) -> List[dict]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            # Cold start: no ledger yet
            return []
        except OSError as e:
            raise StorageIoError(f"Failed to read ledger {self.path}: {e}", path=self.path) from e

        if not raw.strip():
            return []

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageCorruptError(
                f"Ledger {self.path} is not valid JSON: {e}", path=self.path
            ) from e

        if not isinstance(document, dict) or not isinstance(document.get(TRANSACTIONS_KEY), list):
            raise StorageCorruptError(
                f"Ledger {self.path} has no '{TRANSACTIONS_KEY}' collection", path=self.path
            )

        records = document[TRANSACTIONS_KEY]
        if not all(isinstance(r, dict) for r in records):
            raise StorageCorruptError(
                f"Ledger {self.path} contains non-object records", path=self.path
            )
        return records

    def _write_records(self, records: List[dict]) -> None:
        """Write temp file in the same directory, fsync, then swap into place."""
        document = {"schema_version": SCHEMA_VERSION, TRANSACTIONS_KEY: records}
        payload = json.dumps(document, indent=2)

        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            logger.error(f"[LEDGER] Write failed for {self.path}: {e}")
            raise StorageIoError(f"Failed to write ledger {self.path}: {e}", path=self.path) from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
