from typing import Optional, Set
from sqlalchemy.ext.asyncio import AsyncSession

from leadintake.crud import buyer as crud_buyer

DUPLICATE_IN_FILE = "Duplicate phone number within this file"
DUPLICATE_IN_DATABASE = "Phone number already exists"


class DuplicateDetector:
    """
    Phone-keyed duplicate check for one import run.

    Two in-memory scopes are consulted before storage: phones committed by
    earlier batches of the run, and phones accepted earlier in the batch that
    is currently open. Batch phones are only promoted to the run scope once
    the batch commits, so a rolled-back batch leaves no trace.
    """

    def __init__(self):
        self.committed: Set[str] = set()
        self.pending: Set[str] = set()

    async def check(self, db: AsyncSession, phone: str) -> Optional[str]:
        """Return the skip reason for a duplicate phone, or None."""
        if phone in self.committed or phone in self.pending:
            return DUPLICATE_IN_FILE
        if await crud_buyer.get_buyer_by_phone(db, phone) is not None:
            return DUPLICATE_IN_DATABASE
        return None

    def accept(self, phone: str) -> None:
        self.pending.add(phone)

    def commit_batch(self) -> None:
        self.committed |= self.pending
        self.pending = set()

    def discard_batch(self) -> None:
        self.pending = set()
