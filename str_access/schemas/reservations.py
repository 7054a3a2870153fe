from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class WifiInfo(BaseModel):
    """
    Wi-Fi credentials shown to the guest.
    """

    model_config = ConfigDict(populate_by_name=True)

    ssid: str = Field("", description="Network name")
    password: str = Field("", description="Network password")
    notes: Optional[str] = Field(None, description="Free-text hints (bands, router location)")


class ReservationStep(BaseModel):
    """
    One unlock instruction step (building door, apartment door, room door...).

    Unknown keys from the source payload are kept so the guest page can use them.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field("", description="Step identifier, also the default unlock action")
    title: str = Field("", description="Short step title")
    description: str = Field("", description="Guest-facing instructions")
    action_label: str = Field("", alias="actionLabel", description="Unlock button label")
    photo_url: Optional[str] = Field(None, alias="photoUrl", description="Step-specific photo")


class NormalizedReservation(BaseModel):
    """
    Canonical reservation view derived from a stored webhook/seed payload.

    Rebuilt from the raw payload on every read. All string fields are
    empty strings (never None) when the payload does not carry them.
    """

    model_config = ConfigDict(populate_by_name=True)

    reservation_id: str = Field("", alias="reservationId")
    code: str = ""
    address: str = ""
    check_in_iso: str = Field("", alias="checkInISO")
    check_out_iso: str = Field("", alias="checkOutISO")
    steps: list[ReservationStep] = Field(default_factory=list)
    property_id: str = Field("", alias="propertyId")
    photos: list[str] = Field(default_factory=list)
    map_address: str = Field("", alias="mapAddress")
    wifi: Optional[WifiInfo] = None

    def to_response(self) -> dict[str, Any]:
        """Serialize with the camelCase keys the guest page expects."""
        return self.model_dump(by_alias=True, mode="json")


class ReservationRecord(BaseModel):
    """
    Stored reservation as written by the webhook or seed endpoint.

    ``payload`` is the untouched source body; it is the source of truth and
    every read re-derives a NormalizedReservation from it.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, description="Reservation ID (byId key)")
    code: Optional[str] = Field(None, description="Guest access code (byCode key)")
    updated_at: str = Field("", alias="updatedAt", description="ISO timestamp of the last write")
    payload: Any = Field(None, description="Raw webhook or seed body")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
