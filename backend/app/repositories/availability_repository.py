# backend/app/repositories/availability_repository.py
"""
AvailabilityRepository - canonical block storage

Reads and writes 15-minute availability blocks. Writes never commit: the
calling service owns the transaction, which is what makes a multi-chunk
upsert or a delete-then-insert replace atomic for readers.
"""

from datetime import datetime, timezone
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, cast

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import AvailabilityRole
from ..core.exceptions import RepositoryException
from ..core.ulid_helper import generate_ulid
from ..models.availability import AvailabilityBlock
from ..utils.intervals import TimeInterval, ensure_utc
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

_UPSERT_KEY = ["user_id", "start_time", "end_time"]
_INSERT_BUILDERS: Dict[str, Callable[..., Any]] = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class AvailabilityRepository(BaseRepository[AvailabilityBlock]):
    """
    Repository for availability blocks.

    Rows are keyed by (user_id, start_time, end_time); writing the same
    block twice updates it in place instead of inserting a duplicate.
    """

    def __init__(self, db: Session, batch_size: Optional[int] = None):
        """Initialize repository."""
        super().__init__(db, AvailabilityBlock)
        self.batch_size = batch_size or settings.availability_upsert_batch_size

    def select_blocks(self, user_id: str) -> List[AvailabilityBlock]:
        """
        Get a user's blocks ordered by start time.

        When more than one row shares a start time only the most recently
        created one is returned.

        Args:
            user_id: The owning user's ID

        Returns:
            List of blocks, ascending by start_time
        """
        try:
            ranked = (
                select(
                    AvailabilityBlock.id.label("block_id"),
                    func.row_number()
                    .over(
                        partition_by=(AvailabilityBlock.user_id, AvailabilityBlock.start_time),
                        order_by=(AvailabilityBlock.created_at.desc(), AvailabilityBlock.id.desc()),
                    )
                    .label("rn"),
                )
                .where(AvailabilityBlock.user_id == user_id)
                .subquery()
            )
            return cast(
                List[AvailabilityBlock],
                self.db.query(AvailabilityBlock)
                .join(ranked, ranked.c.block_id == AvailabilityBlock.id)
                .filter(ranked.c.rn == 1)
                .order_by(AvailabilityBlock.start_time, AvailabilityBlock.end_time)
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting availability blocks: {str(e)}")
            raise RepositoryException(f"Failed to get availability blocks: {str(e)}")

    def upsert_blocks_batch(
        self,
        user_id: str,
        org_id: str,
        role: AvailabilityRole,
        matched: bool,
        timestamp: datetime,
        blocks: Sequence[TimeInterval],
    ) -> int:
        """
        Insert blocks, updating rows that already exist for the same key.

        On conflict the row's org_id, role, matched and updated_at are
        overwritten, so a previously matched block comes back unmatched.
        Blocks must be unique within the call.

        Returns:
            Number of rows written

        Raises:
            RepositoryException: If any chunk fails
        """
        if not blocks:
            return 0

        insert_builder = self._insert_builder()
        stamp = ensure_utc(timestamp)
        total = 0
        try:
            for chunk_start in range(0, len(blocks), self.batch_size):
                chunk = blocks[chunk_start : chunk_start + self.batch_size]
                rows = [
                    {
                        "id": generate_ulid(),
                        "org_id": org_id,
                        "user_id": user_id,
                        "role": AvailabilityRole(role).value,
                        "start_time": ensure_utc(block.start),
                        "end_time": ensure_utc(block.end),
                        "matched": matched,
                        "created_at": stamp,
                        "updated_at": stamp,
                    }
                    for block in chunk
                ]
                stmt = insert_builder(AvailabilityBlock).values(rows)
                stmt = stmt.on_conflict_do_update(
                    index_elements=_UPSERT_KEY,
                    set_={
                        "org_id": stmt.excluded.org_id,
                        "role": stmt.excluded.role,
                        "matched": stmt.excluded.matched,
                        "updated_at": stmt.excluded.updated_at,
                    },
                )
                self.db.execute(stmt)
                total += len(chunk)
            return total
        except IntegrityError as e:
            self.logger.error(f"Integrity error upserting availability: {str(e)}")
            raise RepositoryException(f"Availability constraint violated: {str(e)}") from e
        except SQLAlchemyError as e:
            self.logger.error(f"Error upserting availability: {str(e)}")
            raise RepositoryException(f"Failed to upsert availability: {str(e)}") from e

    def delete_blocks_for_user(self, user_id: str) -> int:
        """Delete every block owned by ``user_id``; returns rows removed."""
        try:
            deleted = (
                self.db.query(AvailabilityBlock)
                .filter(AvailabilityBlock.user_id == user_id)
                .delete(synchronize_session=False)
            )
            return int(deleted or 0)
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting availability: {str(e)}")
            raise RepositoryException(f"Failed to delete availability: {str(e)}") from e

    def replace_blocks(
        self,
        user_id: str,
        org_id: str,
        role: AvailabilityRole,
        blocks: Sequence[TimeInterval],
    ) -> int:
        """
        Replace a user's blocks with ``blocks``.

        Deletes then inserts within the caller's transaction; a reader on
        another connection sees either the old set or the new one.

        Returns:
            Number of rows inserted
        """
        deleted = self.delete_blocks_for_user(user_id)
        written = self.upsert_blocks_batch(
            user_id,
            org_id,
            role,
            matched=False,
            timestamp=datetime.now(timezone.utc),
            blocks=blocks,
        )
        self.logger.debug(
            "Replaced availability blocks",
            extra={"user_id": user_id, "deleted": deleted, "inserted": written},
        )
        return written

    def _insert_builder(self) -> Callable[..., Any]:
        dialect = self.dialect_name
        builder = _INSERT_BUILDERS.get(dialect)
        if builder is None:
            raise RepositoryException(f"Upsert is not supported on dialect '{dialect}'")
        return builder
