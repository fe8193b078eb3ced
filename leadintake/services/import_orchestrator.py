import asyncio
import logging
from typing import Iterator, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from leadintake.config import IMPORT_BATCH_SIZE, IMPORT_BATCH_TIMEOUT_SECONDS, IMPORT_MAX_BYTES, IMPORT_MAX_ROWS
from leadintake.crud import buyer as crud_buyer
from leadintake.schemas.buyer_import import BuyerImportRow, ImportSummary, ImportedRow, FailedRow
from leadintake.services.duplicate_detector import DuplicateDetector
from leadintake.services.exceptions import ImportFileError, ImportValidationError
from leadintake.services.file_parser import parse_upload
from leadintake.services.history_recorder import HistoryRecorder
from leadintake.services.normalizer import validate_import_rows

logger = logging.getLogger(__name__)

ROW_WRITE_FAILED = "Failed to create record in batch"
BATCH_FAILED = "Batch processing failed"

NumberedRow = Tuple[int, BuyerImportRow]


class BuyerImportOrchestrator:
    """
        Bulk import of buyers from an uploaded CSV / Excel file.

        Workflow:
        1. Reject files over IMPORT_MAX_BYTES, then parse the file into rows;
           reject empty, unreadable files and files over IMPORT_MAX_ROWS rows.
        2. Validate every row. If any row fails, raise ImportValidationError with
           the errors of all rows; nothing is written.
        3. Split the valid rows into batches (IMPORT_BATCH_SIZE rows each).
        4. Run each batch in its own session and transaction, bounded by
           IMPORT_BATCH_TIMEOUT_SECONDS. Rows are handled in file order:
           - duplicates (within the file or already stored) are skipped,
           - the buyer is inserted inside a savepoint, so a failing row only
             loses itself,
           - an IMPORT history entry is written for every inserted buyer.
        5. A batch that times out or fails to commit is rolled back and all of
           its rows are reported as failed. Earlier batches stay committed and
           later batches still run. Nothing is retried.
        6. Aggregate all row outcomes into an ImportSummary.

        The session factory is injected so each batch gets a fresh session.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        batch_size: int = IMPORT_BATCH_SIZE,
        max_rows: int = IMPORT_MAX_ROWS,
        max_bytes: int = IMPORT_MAX_BYTES,
        batch_timeout: float = IMPORT_BATCH_TIMEOUT_SECONDS,
    ):
        self.session_factory = session_factory
        self.batch_size = batch_size
        self.max_rows = max_rows
        self.max_bytes = max_bytes
        self.batch_timeout = batch_timeout


    async def run(
        self,
        content: bytes,
        filename: Optional[str],
        content_type: Optional[str],
        actor_id: UUID,
    ) -> ImportSummary:

        # 1. --- Parse ---
        if len(content) > self.max_bytes:
            raise ImportFileError(f"File is larger than {self.max_bytes} bytes")
        rows = parse_upload(content, filename, content_type)
        if not rows:
            raise ImportFileError("No data found in CSV file")
        if len(rows) > self.max_rows:
            raise ImportFileError(f"File contains more than {self.max_rows} rows")

        # 2. --- Validate all rows before touching storage ---
        valid_rows, errors = validate_import_rows(rows)
        if errors:
            logger.info("Import rejected: %d of %d rows failed validation", len(errors), len(rows))
            raise ImportValidationError(errors)

        # 3-6. --- Persist batch by batch ---
        return await self.persist(valid_rows, actor_id)


    async def persist(self, valid_rows: List[NumberedRow], actor_id: UUID) -> ImportSummary:
        detector = DuplicateDetector()
        imported: List[ImportedRow] = []
        failed: List[FailedRow] = []

        for batch_number, batch in enumerate(self.batches(valid_rows), start=1):
            try:
                outcomes = await asyncio.wait_for(
                    self._process_batch(batch, actor_id, detector),
                    timeout=self.batch_timeout,
                )
            except (asyncio.TimeoutError, SQLAlchemyError) as e:
                logger.error("Batch %d failed (%d rows): %r", batch_number, len(batch), e)
                detector.discard_batch()
                outcomes = [
                    FailedRow(row=row_number, full_name=record.full_name, phone=record.phone, error=BATCH_FAILED)
                    for row_number, record in batch
                ]
            else:
                detector.commit_batch()

            for outcome in outcomes:
                if outcome.success:
                    imported.append(outcome)
                else:
                    failed.append(outcome)

        logger.info(
            "Import finished for user %s: %d imported, %d skipped", actor_id, len(imported), len(failed)
        )
        return ImportSummary(
            message=f"Imported {len(imported)} of {len(valid_rows)} records successfully",
            imported_count=len(imported),
            skipped_count=len(failed),
            imported=imported,
            failed=failed,
        )


    def batches(self, rows: List[NumberedRow]) -> Iterator[List[NumberedRow]]:
        for start in range(0, len(rows), self.batch_size):
            yield rows[start:start + self.batch_size]


    async def _process_batch(self, batch: List[NumberedRow], actor_id: UUID, detector: DuplicateDetector):
        outcomes = []
        async with self.session_factory() as db:
            async with db.begin():
                recorder = HistoryRecorder(db)

                for row_number, record in batch:
                    # --- Duplicate check (file first, then storage) ---
                    reason = await detector.check(db, record.phone)
                    if reason:
                        outcomes.append(
                            FailedRow(row=row_number, full_name=record.full_name, phone=record.phone, error=reason)
                        )
                        continue

                    # --- Insert buyer + IMPORT history inside a savepoint ---
                    data = record.model_dump(mode="json")
                    try:
                        async with db.begin_nested():
                            buyer = await crud_buyer.create_buyer(db, data, owner_id=actor_id)
                            await recorder.record_import(buyer.id, actor_id, data)
                    except SQLAlchemyError as e:
                        logger.warning("Row %d could not be written: %r", row_number, e)
                        outcomes.append(
                            FailedRow(row=row_number, full_name=record.full_name, phone=record.phone, error=ROW_WRITE_FAILED)
                        )
                        continue

                    detector.accept(record.phone)
                    outcomes.append(
                        ImportedRow(row=row_number, id=buyer.id, full_name=buyer.full_name, phone=buyer.phone)
                    )
        return outcomes
