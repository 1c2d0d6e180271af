# backend/app/services/availability_service.py
"""
Availability Service for the Scheduler API

Coordinates reads and writes of a user's availability:
- Authorization (self or elevated role) before any storage access
- Normalization of submitted ranges into 15-minute blocks
- Incremental add/remove edits replayed onto the stored set
- Translation of storage failures into AvailabilityStorageException
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import ERROR_BATCH_SELF_ONLY, ERROR_SELF_OR_ADMIN
from ..core.enums import AccountRole, AvailabilityRole
from ..core.exceptions import (
    AvailabilityStorageException,
    ForbiddenException,
    MalformedIntervalException,
    NoIntervalsException,
    NotFoundException,
    NoValidIntervalsException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import CurrentUser
from ..repositories.availability_repository import AvailabilityRepository
from ..repositories.base_repository import BaseRepository
from ..repositories.factory import RepositoryFactory
from ..utils.intervals import (
    TimeInterval,
    coerce_interval,
    ensure_utc,
    format_ranges,
    subtract_range,
    to_blocks,
    to_ranges,
    validate_boundary,
)
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass
class UserAvailability:
    """A user's availability as merged ranges; derived, never stored."""

    user_id: str
    intervals: List[TimeInterval] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "available_time_intervals": format_ranges(self.intervals),
        }


class AvailabilityService(BaseService):
    """
    Service layer for availability operations.

    Blocks are the stored form, ranges the presented form. Every write runs
    inside one transaction so a reader never sees a half-applied change.
    """

    def __init__(
        self,
        db: Session,
        repository: Optional[AvailabilityRepository] = None,
        user_repository: Optional[BaseRepository[Any]] = None,
    ):
        """Initialize availability service with repositories."""
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_availability_repository(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)

    # Authorization

    @property
    def elevated_roles(self) -> List[AccountRole]:
        return list(settings.availability_elevated_roles)

    def _ensure_can_access(self, actor: CurrentUser, user_id: str) -> None:
        if not actor.can_act_for(user_id, self.elevated_roles):
            self.logger.warning(
                "Availability access denied",
                extra={"actor_id": actor.user_id, "target_user_id": user_id},
            )
            raise ForbiddenException(
                ERROR_SELF_OR_ADMIN,
                details={"user_id": user_id},
            )

    def _resolve_owner(self, actor: CurrentUser, user_id: str) -> Tuple[str, AvailabilityRole]:
        """Organization and role stamped onto the target user's blocks."""
        if actor.user_id == user_id:
            return actor.org_id, AvailabilityRole.from_account_role(actor.role)

        with self._storage_errors("resolve_owner", user_id):
            owner = self.user_repository.get_by_id(user_id)
        if owner is None:
            raise NotFoundException(
                f"User {user_id} not found",
                code="USER_NOT_FOUND",
                details={"user_id": user_id},
            )
        return owner.org_id, AvailabilityRole.from_account_role(owner.role)

    @contextmanager
    def _storage_errors(self, operation: str, user_id: str) -> Iterator[None]:
        try:
            yield
        except AvailabilityStorageException:
            raise
        except (RepositoryException, SQLAlchemyError, ServiceException) as exc:
            self.logger.error(
                f"Availability storage failure during {operation}: {str(exc)}",
                extra={"operation": operation, "user_id": user_id},
            )
            raise AvailabilityStorageException(operation, user_id, cause=exc) from exc

    def _load_ranges(self, user_id: str, operation: str) -> List[TimeInterval]:
        with self._storage_errors(operation, user_id):
            rows = self.repository.select_blocks(user_id)
        return to_ranges(
            TimeInterval(ensure_utc(row.start_time), ensure_utc(row.end_time)) for row in rows
        )

    # Operations

    @BaseService.measure_operation("create_availability")
    def create_availability(
        self, user_id: str, ranges: Sequence[Any], actor: CurrentUser
    ) -> UserAvailability:
        """
        Store the given ranges as blocks for ``user_id``.

        Existing blocks are kept; blocks already present are updated in
        place and come back unmatched.

        Returns:
            The submitted ranges, echoed back

        Raises:
            ForbiddenException: Actor is neither the owner nor elevated
            NoIntervalsException: No ranges were submitted
            MalformedIntervalException: A range lacks exactly two endpoints
            InvalidBoundaryException: An endpoint is off a 15-minute boundary
            NoValidIntervalsException: Only zero-length ranges were submitted
            NotFoundException: Target user does not exist
            AvailabilityStorageException: Persisting failed
        """
        self._ensure_can_access(actor, user_id)
        if not ranges:
            raise NoIntervalsException()

        blocks = to_blocks(ranges)
        if not blocks:
            raise NoValidIntervalsException()

        org_id, role = self._resolve_owner(actor, user_id)
        unique_blocks = sorted(set(blocks))
        now = datetime.now(timezone.utc)

        with self._storage_errors("create_availability", user_id):
            with self.transaction():
                written = self.repository.upsert_blocks_batch(
                    user_id,
                    org_id,
                    role,
                    matched=False,
                    timestamp=now,
                    blocks=unique_blocks,
                )

        prometheus_metrics.inc_blocks_written("create_availability", written)
        self.log_operation(
            "create_availability",
            user_id=user_id,
            actor_id=actor.user_id,
            org_id=org_id,
            block_count=written,
        )
        return UserAvailability(user_id=user_id, intervals=[coerce_interval(r) for r in ranges])

    @BaseService.measure_operation("get_availability")
    def get_availability(self, user_id: str, actor: CurrentUser) -> UserAvailability:
        """
        Get a user's availability as merged ranges.

        A user with no stored blocks has an empty list, not an error.
        """
        self._ensure_can_access(actor, user_id)
        intervals = self._load_ranges(user_id, "get_availability")
        self.logger.debug(
            "Loaded availability",
            extra={"user_id": user_id, "range_count": len(intervals)},
        )
        return UserAvailability(user_id=user_id, intervals=intervals)

    @BaseService.measure_operation("get_batch_availability")
    def get_batch_availability(
        self, user_ids: Sequence[str], actor: CurrentUser
    ) -> List[UserAvailability]:
        """
        Get availability for several users, in the order requested.

        Non-elevated callers may only list themselves; one foreign id
        rejects the whole request before anything is read.
        """
        if not user_ids:
            raise ValidationException("At least one user ID is required", code="NO_USERS")

        if not actor.is_elevated(self.elevated_roles):
            foreign = [uid for uid in user_ids if uid != actor.user_id]
            if foreign:
                self.logger.warning(
                    "Batch availability access denied",
                    extra={"actor_id": actor.user_id, "foreign_count": len(foreign)},
                )
                raise ForbiddenException(ERROR_BATCH_SELF_ONLY)

        return [
            UserAvailability(
                user_id=uid, intervals=self._load_ranges(uid, "get_batch_availability")
            )
            for uid in user_ids
        ]

    @BaseService.measure_operation("update_availability")
    def update_availability(
        self,
        user_id: str,
        add: Optional[Sequence[Any]],
        remove: Optional[Sequence[Any]],
        actor: CurrentUser,
    ) -> UserAvailability:
        """
        Apply removals then additions to the stored availability.

        Removals run in order against the current merged ranges; additions
        are merged into what remains. The result replaces every stored block
        for the user in a single transaction.

        Returns:
            The final merged ranges
        """
        self._ensure_can_access(actor, user_id)
        org_id, role = self._resolve_owner(actor, user_id)

        current = self._load_ranges(user_id, "update_availability")
        remaining = current
        for raw in remove or []:
            try:
                removal = coerce_interval(raw)
            except MalformedIntervalException:
                self.logger.warning(
                    "Skipping malformed removal interval",
                    extra={"user_id": user_id, "interval": repr(raw)},
                )
                continue
            validate_boundary("start", removal.start)
            validate_boundary("end", removal.end)
            remaining = subtract_range(remaining, removal)

        merged = to_ranges(to_blocks([*remaining, *(add or [])]))
        final_blocks = to_blocks(merged)

        with self._storage_errors("update_availability", user_id):
            with self.transaction():
                written = self.repository.replace_blocks(user_id, org_id, role, final_blocks)

        prometheus_metrics.inc_blocks_written("update_availability", written)
        self.log_operation(
            "update_availability",
            user_id=user_id,
            actor_id=actor.user_id,
            before_ranges=len(current),
            after_ranges=len(merged),
            block_count=written,
        )
        return UserAvailability(user_id=user_id, intervals=merged)
