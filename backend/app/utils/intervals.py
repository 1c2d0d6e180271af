"""
Canonical 15-minute block arithmetic for availability.

Availability is stored as fixed 15-minute blocks and shown as merged
ranges. Everything here is pure: no I/O, no clock, deterministic output.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List, NamedTuple, Sequence

from ..core.constants import ALIGNED_MINUTES, BLOCK_DURATION
from ..core.exceptions import InvalidBoundaryException, MalformedIntervalException


class TimeInterval(NamedTuple):
    """Half-open ``[start, end)`` range; sorts by start then end."""

    start: datetime
    end: datetime

    def overlaps(self, other: "TimeInterval") -> bool:
        return self.start < other.end and other.start < self.end

    def to_list(self) -> List[str]:
        return [self.start.isoformat(), self.end.isoformat()]


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` in UTC; naive datetimes are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def coerce_interval(raw: Any) -> TimeInterval:
    """Turn a two-element sequence of datetimes into a UTC ``TimeInterval``."""
    if isinstance(raw, TimeInterval):
        return TimeInterval(ensure_utc(raw.start), ensure_utc(raw.end))
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        raise MalformedIntervalException()
    if len(raw) != 2:
        raise MalformedIntervalException(size=len(raw))
    start, end = raw
    if not isinstance(start, datetime) or not isinstance(end, datetime):
        raise MalformedIntervalException(size=len(raw))
    return TimeInterval(ensure_utc(start), ensure_utc(end))


def is_block_aligned(value: datetime) -> bool:
    utc_value = ensure_utc(value)
    return (
        utc_value.minute in ALIGNED_MINUTES
        and utc_value.second == 0
        and utc_value.microsecond == 0
    )


def validate_boundary(field: str, value: datetime) -> None:
    """Raise ``InvalidBoundaryException`` unless ``value`` sits on a block edge."""
    if not is_block_aligned(value):
        raise InvalidBoundaryException(field, value.isoformat())


def validate_interval(raw: Any) -> TimeInterval:
    """Coerce and check both endpoints of one submitted range."""
    interval = coerce_interval(raw)
    validate_boundary("start", interval.start)
    validate_boundary("end", interval.end)
    if interval.end < interval.start:
        raise InvalidBoundaryException(
            "end",
            interval.end.isoformat(),
            reason="end time must not be before start time",
        )
    return interval


def to_blocks(intervals: Iterable[Any]) -> List[TimeInterval]:
    """
    Split ranges into canonical 15-minute blocks.

    Each input is handled independently and in order, so overlapping input
    produces duplicate blocks; callers regroup with :func:`to_ranges`.
    Zero-length ranges contribute nothing.

    Raises:
        MalformedIntervalException: a range without exactly two endpoints
        InvalidBoundaryException: an endpoint off a 15-minute boundary
    """
    blocks: List[TimeInterval] = []
    for raw in intervals:
        interval = validate_interval(raw)
        current = interval.start
        while current < interval.end:
            block_end = current + BLOCK_DURATION
            blocks.append(TimeInterval(current, block_end))
            current = block_end
    return blocks


def _group_consecutive(ranges: List[TimeInterval]) -> List[TimeInterval]:
    grouped: List[TimeInterval] = []
    for item in ranges:
        if grouped and grouped[-1].end == item.start:
            grouped[-1] = TimeInterval(grouped[-1].start, item.end)
        else:
            grouped.append(item)
    return grouped


def to_ranges(blocks: Iterable[Any]) -> List[TimeInterval]:
    """
    Collapse blocks (any order, duplicates allowed) into minimal ranges.

    Output is ascending, pairwise disjoint and never has one range ending
    exactly where the next begins.
    """
    ordered = sorted(coerce_interval(block) for block in blocks)
    if not ordered:
        return []

    merged: List[TimeInterval] = [ordered[0]]
    for block in ordered[1:]:
        last = merged[-1]
        if last.end >= block.start:
            merged[-1] = TimeInterval(last.start, max(last.end, block.end))
        else:
            merged.append(block)

    return _group_consecutive(merged)


def subtract_range(ranges: Iterable[TimeInterval], removal: TimeInterval) -> List[TimeInterval]:
    """Remove ``removal`` from every range, splitting ranges it cuts through."""
    remaining: List[TimeInterval] = []
    for item in ranges:
        if not item.overlaps(removal):
            remaining.append(item)
            continue
        if item.start < removal.start:
            remaining.append(TimeInterval(item.start, removal.start))
        if item.end > removal.end:
            remaining.append(TimeInterval(removal.end, item.end))
    return remaining


def format_ranges(ranges: Iterable[TimeInterval]) -> List[List[str]]:
    """ISO-8601 pairs, as rendered in API payloads and logs."""
    return [item.to_list() for item in ranges]
