"""Access-phase evaluation for a reservation's stay window."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from str_access.utils.datetime import ensure_utc, parse_iso_timestamp


class AccessPhase(str, Enum):
    """Where ``now`` falls relative to the check-in/check-out window."""

    BEFORE = "before"
    ACTIVE = "active"
    AFTER = "after"


def evaluate_access_phase(now: datetime, check_in_iso: str, check_out_iso: str) -> AccessPhase:
    """
    Compute the access phase for a stay.

    Both boundaries belong to the active window. If either timestamp cannot
    be parsed the phase is BEFORE, which keeps unlock actions disabled.

    Args:
        now: Current instant (naive values are taken as UTC)
        check_in_iso: Check-in timestamp, ISO 8601
        check_out_iso: Check-out timestamp, ISO 8601

    Returns:
        AccessPhase.BEFORE, ACTIVE or AFTER

    Example:
        >>> from datetime import datetime, timezone
        >>> evaluate_access_phase(
        ...     datetime(2026, 1, 5, tzinfo=timezone.utc),
        ...     "2026-01-03T12:00:00-05:00",
        ...     "2026-01-10T11:00:00-05:00",
        ... )
        <AccessPhase.ACTIVE: 'active'>
    """
    check_in = parse_iso_timestamp(check_in_iso)
    check_out = parse_iso_timestamp(check_out_iso)
    if check_in is None or check_out is None:
        return AccessPhase.BEFORE

    instant = ensure_utc(now)
    if instant < check_in:
        return AccessPhase.BEFORE
    if instant > check_out:
        return AccessPhase.AFTER
    return AccessPhase.ACTIVE
