from typing import Any, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field

from str_access.schemas.reservations import WifiInfo


class PartialConfig(TypedDict, total=False):
    """
    One configuration layer as stored in the properties file.

    Every key is optional; a key that is present replaces the value from
    lower-precedence layers.
    """

    agentUrl: Optional[str]
    photos: list[str]
    mapAddress: str
    wifi: Optional[dict[str, Any]]
    propertyId: str


class PropertyConfig(BaseModel):
    """
    Effective configuration for one access code after layering.
    """

    model_config = ConfigDict(populate_by_name=True)

    agent_url: Optional[str] = Field(None, alias="agentUrl", description="Access agent base URL")
    photos: list[str] = Field(default_factory=list, description="Property photo URLs")
    map_address: str = Field("", alias="mapAddress", description="Address used for the map")
    wifi: Optional[WifiInfo] = Field(None, description="Wi-Fi credentials")
    property_id: Optional[str] = Field(None, alias="propertyId", description="Property ID")
