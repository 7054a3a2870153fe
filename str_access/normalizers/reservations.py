from typing import Any, Mapping, Optional

import structlog

from str_access.schemas.reservations import NormalizedReservation, ReservationStep, WifiInfo

logger = structlog.get_logger(__name__)

# Where the reservation object may sit inside a stored payload, in priority order.
# Hospitable webhooks send {"data": {...}}, relayed webhooks {"body": {"data": {...}}},
# and hand-written seeds often store the reservation object bare.
PAYLOAD_DATA_PATHS: tuple[tuple[str, ...], ...] = (
    ("data",),
    ("body", "data"),
    (),
)

STEP_FIELD_KEYS = frozenset(
    ("id", "title", "description", "actionLabel", "action_label", "photoUrl", "photo_url")
)


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _first_present(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return None


def extract_reservation_data(payload: Any) -> dict[str, Any]:
    """
    Locate the reservation object inside a raw payload.

    Walks PAYLOAD_DATA_PATHS and returns the first path that resolves to a
    non-empty dict. The empty path means the payload itself.

    Args:
        payload: Raw webhook body or seed payload

    Returns:
        The reservation dict, or an empty dict if the payload is not an object
    """
    for path in PAYLOAD_DATA_PATHS:
        node: Any = payload
        for key in path:
            node = node.get(key) if isinstance(node, dict) else None
        if isinstance(node, dict) and node:
            return node
    return {}


def extract_identity(body: Any) -> tuple[Optional[str], Optional[str]]:
    """
    Pull the (reservation id, access code) pair used to index a webhook body.

    Hospitable sends the guest-facing code as either ``code`` or ``platform_id``
    depending on the event.

    Returns:
        Tuple of (id, code); either may be None
    """
    data = extract_reservation_data(body)
    top = body if isinstance(body, dict) else {}

    reservation_id = _first_present(data, "id", "reservationId") or top.get("id")
    code = _first_present(data, "code", "platform_id")

    return (
        str(reservation_id) if reservation_id else None,
        str(code) if code else None,
    )


def normalize_step(raw: Any) -> Optional[ReservationStep]:
    """Build a ReservationStep from a raw step dict; non-dict entries are dropped."""
    if not isinstance(raw, dict):
        return None

    # Both spellings of a modelled field are consumed, camelCase first
    extras = {k: v for k, v in raw.items() if k not in STEP_FIELD_KEYS}
    photo_url = _first_present(raw, "photoUrl", "photo_url")

    return ReservationStep(
        id=_as_str(raw.get("id")),
        title=_as_str(raw.get("title")),
        description=_as_str(raw.get("description")),
        action_label=_as_str(_first_present(raw, "actionLabel", "action_label")),
        photo_url=str(photo_url) if photo_url else None,
        **extras,
    )


def normalize_wifi(raw: Any) -> Optional[WifiInfo]:
    """Build WifiInfo from a raw dict, or None when no credentials are present."""
    if not isinstance(raw, dict) or not raw:
        return None

    notes = raw.get("notes")
    return WifiInfo(
        ssid=_as_str(raw.get("ssid")),
        password=_as_str(raw.get("password")),
        notes=str(notes) if notes else None,
    )


def normalize_photos(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [str(p) for p in raw if p]


def normalize_reservation(
    payload: Any,
    fallback_id: Optional[str] = None,
    fallback_code: Optional[str] = None,
) -> NormalizedReservation:
    """
    Convert a stored payload into the canonical reservation shape.

    Args:
        payload: Raw payload saved by the webhook or seed endpoint
        fallback_id: Record-level id used when the payload has none
        fallback_code: Record-level code used when the payload has none

    Returns:
        NormalizedReservation with every string field defaulted to ""
    """
    data = extract_reservation_data(payload)

    reservation_id = _first_present(data, "reservationId", "id") or fallback_id
    code = _first_present(data, "code", "platform_id") or fallback_code

    raw_steps = data.get("steps")
    steps: list[ReservationStep] = []
    if isinstance(raw_steps, list):
        for raw_step in raw_steps:
            step = normalize_step(raw_step)
            if step is not None:
                steps.append(step)

    reservation = NormalizedReservation(
        reservation_id=_as_str(reservation_id),
        code=_as_str(code),
        address=_as_str(data.get("address")),
        check_in_iso=_as_str(data.get("checkInISO")),
        check_out_iso=_as_str(data.get("checkOutISO")),
        steps=steps,
        property_id=_as_str(data.get("propertyId")),
        photos=normalize_photos(data.get("photos")),
        map_address=_as_str(data.get("mapAddress") or data.get("address")),
        wifi=normalize_wifi(data.get("wifi")),
    )

    logger.debug(
        "reservation_normalized",
        reservation_id=reservation.reservation_id,
        code=reservation.code,
        steps=len(reservation.steps),
    )
    return reservation
