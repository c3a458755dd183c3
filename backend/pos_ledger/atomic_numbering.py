"""
POS LEDGER: ATOMIC NUMBERING

Provides:
1. Transaction number sequence (sole owner of number assignment)
2. Sequence initialization from the persisted ledger (max + 1)
3. Clamping of requested numbers into the assigned range
4. Receipt artifact numbering with collision retry
"""

from pathlib import Path
from typing import BinaryIO, Tuple, Union
import re
import logging

logger = logging.getLogger(__name__)


class SequenceCollisionError(Exception):
    """Raised when sequence collision occurs after max retries"""
    pass


# =============================================================================
# TRANSACTION NUMBER SEQUENCE
# =============================================================================

class TransactionNumberSequence:
    """
    Monotonic transaction number counter.

    The next number is only consumed by advance(), which the transaction
    service calls after a successful append. Numbers are never handed out
    twice and are never reset, even after the ledger is cleared.
    """

    def __init__(self, next_number: int = 1):
        if next_number < 1:
            raise ValueError(f"next_number must be >= 1, got {next_number}")
        self._next_number = next_number

    @classmethod
    def from_store(cls, store) -> "TransactionNumberSequence":
        """Initialize from the highest number already in the ledger."""
        highest = store.max_transaction_number()
        sequence = cls(highest + 1)
        logger.info(f"[NUMBERING] Sequence initialized at #{sequence.next_number} (ledger max: {highest})")
        return sequence

    @property
    def next_number(self) -> int:
        return self._next_number

    @property
    def latest(self) -> int:
        """Most recently assigned number, or 1 if none was ever assigned."""
        return max(self._next_number - 1, 1)

    def advance(self) -> int:
        """
        Consume the current number.

        Returns:
            The number that was just committed (pre-increment value).
        """
        committed = self._next_number
        self._next_number += 1
        return committed

    def clamp(self, requested: int) -> int:
        """Constrain a requested number into [1, latest]."""
        return min(max(requested, 1), self.latest)


# =============================================================================
# RECEIPT ARTIFACT NUMBERING
# =============================================================================

class AtomicArtifactNumbering:
    """
    Numbered file generator with collision protection.

    Files are named <prefix>_<NNNNN><suffix>. The candidate number starts
    after the highest existing file; opening uses exclusive-create mode so a
    concurrent writer that took the same number causes a retry with the next
    one instead of an overwrite.
    """

    MAX_RETRIES = 5

    def __init__(self, directory: Union[str, Path], prefix: str = "receipt"):
        self.directory = Path(directory)
        self.prefix = prefix

    def format_name(self, sequence: int, suffix: str) -> str:
        return f"{self.prefix}_{sequence:05d}{suffix}"

    def highest_existing(self, suffix: str) -> int:
        """Highest sequence among existing files with this suffix, 0 if none."""
        if not self.directory.exists():
            return 0
        pattern = re.compile(rf"^{re.escape(self.prefix)}_(\d+){re.escape(suffix)}$")
        highest = 0
        for entry in self.directory.iterdir():
            match = pattern.match(entry.name)
            if match:
                highest = max(highest, int(match.group(1)))
        return highest

    def open_next(self, suffix: str) -> Tuple[Path, BinaryIO]:
        """
        Create and open the next numbered file for binary writing.

        Returns:
            tuple: (path, open file handle) - caller must close the handle

        Raises:
            SequenceCollisionError: If max retries exceeded
            OSError: Directory cannot be created or file cannot be opened
        """
        self.directory.mkdir(parents=True, exist_ok=True)
        sequence = self.highest_existing(suffix) + 1

        for attempt in range(self.MAX_RETRIES):
            path = self.directory / self.format_name(sequence, suffix)
            try:
                handle = open(path, "xb")
            except FileExistsError:
                logger.warning(f"[NUMBERING] Artifact collision: {path.name}, retry {attempt + 1}")
                sequence += 1
                continue

            logger.info(f"[NUMBERING] Generated artifact name: {path.name}")
            return path, handle

        raise SequenceCollisionError(
            f"Failed to generate unique {self.prefix} file name after {self.MAX_RETRIES} attempts"
        )
