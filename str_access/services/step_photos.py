"""
Step ordering, step photos and countdowns for the guest instructions page.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from str_access.schemas.reservations import ReservationStep
from str_access.services.access_phase import AccessPhase
from str_access.utils.datetime import ensure_utc, parse_iso_timestamp, to_iso

# Known door steps, in the order a guest walks through them
STEP_ORDER: tuple[str, ...] = ("building", "apartment", "room")

# step id -> (filename keywords, positional fallback index)
STEP_PHOTO_HINTS: dict[str, tuple[tuple[str, ...], int]] = {
    "building": (("building", "portal", "entrance", "front"), 0),
    "apartment": (("apartment", "unit", "door", "flat"), 1),
    "room": (("room",), 2),
}


def resolve_step_photo(
    step_id: str, step_photo_url: Optional[str], photos: Sequence[str]
) -> Optional[str]:
    """
    Pick the photo to show next to an unlock step.

    Priority: the step's own photo, then a property photo whose URL contains
    a keyword for the step, then the photo at the step's usual position,
    then the first photo.

    Example:
        >>> resolve_step_photo("apartment", None, ["/img/front.jpg", "/img/unit-4b.jpg"])
        '/img/unit-4b.jpg'
    """
    if step_photo_url:
        return step_photo_url
    if not photos:
        return None

    hints = STEP_PHOTO_HINTS.get(step_id.lower())
    if hints is None:
        return photos[0]

    keywords, position = hints
    for photo in photos:
        lowered = photo.lower()
        if any(k in lowered for k in keywords):
            return photo

    if position < len(photos):
        return photos[position]
    return photos[0]


def order_steps(steps: Sequence[ReservationStep]) -> list[ReservationStep]:
    """Known door steps first (building, apartment, room), then the rest in source order."""
    by_id = {step.id: step for step in steps}
    ordered = [by_id[step_id] for step_id in STEP_ORDER if step_id in by_id]
    ordered.extend(step for step in steps if step.id not in STEP_ORDER)
    return ordered


def format_duration(seconds: int) -> str:
    """
    Format a duration as "{d}d {h}h {m}m {s}s", omitting days when zero.

    Example:
        >>> format_duration(90061)
        '1d 1h 1m 1s'
        >>> format_duration(59)
        '0h 0m 59s'
    """
    total = max(0, int(seconds))
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)

    parts = [f"{days}d"] if days > 0 else []
    parts.extend([f"{hours}h", f"{minutes}m", f"{secs}s"])
    return " ".join(parts)


@dataclass
class Countdown:
    label: str
    target_iso: Optional[str]
    remaining_seconds: int
    display: str

    def to_dict(self) -> dict[str, object]:
        return {
            "label": self.label,
            "targetISO": self.target_iso,
            "remainingSeconds": self.remaining_seconds,
            "display": self.display,
        }


def build_countdown(
    phase: AccessPhase, now: datetime, check_in_iso: str, check_out_iso: str
) -> Countdown:
    """
    Countdown to the next boundary of the stay window.

    Before the stay it counts to check-in, during the stay to check-out;
    after check-out there is no target.
    """
    if phase == AccessPhase.AFTER:
        return Countdown("Reservation ended", None, 0, format_duration(0))

    label, raw_target = (
        ("Access starts in", check_in_iso)
        if phase == AccessPhase.BEFORE
        else ("Access ends in", check_out_iso)
    )
    target = parse_iso_timestamp(raw_target)
    if target is None:
        return Countdown(label, None, 0, format_duration(0))

    remaining = max(0, int((target - ensure_utc(now)).total_seconds()))
    return Countdown(label, to_iso(target), remaining, format_duration(remaining))
