"""
Property configuration layering.

The properties file carries three layers:

    {
        "defaults":     {"agentUrl": null, "photos": [], "mapAddress": "", "wifi": null},
        "byPropertyId": {"prop_jersey_001": {...}},
        "byCode":       {"5039895833": {...}}
    }

For a given (code, propertyId) the effective configuration is
defaults <- byPropertyId[propertyId] <- byCode[code], merged field by field.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Protocol

import structlog

from str_access.exceptions import StoreUnavailableError
from str_access.normalizers.reservations import normalize_photos, normalize_wifi
from str_access.schemas.properties import PartialConfig, PropertyConfig

logger = structlog.get_logger(__name__)

CONFIG_FIELDS: tuple[str, ...] = ("agentUrl", "photos", "mapAddress", "wifi", "propertyId")


@dataclass(frozen=True)
class PropertyConfigSnapshot:
    """Immutable view of the properties file at one point in time."""

    defaults: PartialConfig = field(default_factory=dict)  # type: ignore[assignment]
    by_code: Mapping[str, PartialConfig] = field(default_factory=dict)
    by_property_id: Mapping[str, PartialConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> "PropertyConfigSnapshot":
        """Build a snapshot from parsed JSON, dropping sections of the wrong type."""
        if not isinstance(raw, dict):
            return cls()

        def _section(name: str) -> dict[str, Any]:
            value = raw.get(name)
            return value if isinstance(value, dict) else {}

        def _layers(name: str) -> dict[str, PartialConfig]:
            return {str(k): v for k, v in _section(name).items() if isinstance(v, dict)}

        return cls(
            defaults=_section("defaults"),  # type: ignore[arg-type]
            by_code=_layers("byCode"),
            by_property_id=_layers("byPropertyId"),
        )


class PropertyConfigStore(Protocol):
    """Read-only source of property configuration."""

    def load(self) -> PropertyConfigSnapshot: ...


class JsonFilePropertyConfigStore:
    """
    Property configuration read from a JSON file on every call.

    A missing file is an empty configuration. A file that cannot be read or
    parsed raises StoreUnavailableError.
    """

    def __init__(self, path: str):
        self.path = path

    def load(self) -> PropertyConfigSnapshot:
        if not os.path.exists(self.path):
            return PropertyConfigSnapshot()

        try:
            with open(self.path, encoding="utf-8") as f:
                raw = f.read().strip()
            return PropertyConfigSnapshot.from_dict(json.loads(raw) if raw else {})
        except (OSError, ValueError) as e:
            raise StoreUnavailableError(f"Cannot read properties file {self.path}: {e}") from e


def merge_config_layers(layers: Iterable[Optional[Mapping[str, Any]]]) -> PartialConfig:
    """
    Shallow-merge configuration layers, lowest precedence first.

    A field present in a later layer replaces the earlier value entirely;
    lists and objects are never concatenated or deep-merged. None layers are
    skipped. Keys outside CONFIG_FIELDS are ignored.

    Example:
        >>> merge_config_layers([{"photos": ["a"], "mapAddress": "A"}, {"photos": ["b"]}])
        {'photos': ['b'], 'mapAddress': 'A'}
    """
    merged: dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key in CONFIG_FIELDS:
            if key in layer:
                merged[key] = layer[key]
    return merged  # type: ignore[return-value]


def build_property_config(merged: Mapping[str, Any]) -> PropertyConfig:
    """Apply documented defaults and type coercion to a merged layer."""
    agent_url = merged.get("agentUrl")
    property_id = merged.get("propertyId")
    map_address = merged.get("mapAddress")

    return PropertyConfig(
        agent_url=str(agent_url) if agent_url else None,
        photos=normalize_photos(merged.get("photos")),
        map_address=str(map_address) if map_address else "",
        wifi=normalize_wifi(merged.get("wifi")),
        property_id=str(property_id) if property_id else None,
    )


class ConfigResolver:
    """
    Resolves the effective PropertyConfig for an access code.

    Example:
        >>> resolver = ConfigResolver(JsonFilePropertyConfigStore("properties.json"))
        >>> config = resolver.resolve("5039895833", "prop_jersey_001")
        >>> config.agent_url
    """

    def __init__(self, store: PropertyConfigStore):
        self.store = store

    def resolve(self, code: Optional[str], property_id: Optional[str]) -> PropertyConfig:
        """
        Layer defaults, the property entry and the code entry.

        Args:
            code: Guest access code (byCode key), or None
            property_id: Property identifier (byPropertyId key), or None

        Returns:
            PropertyConfig; all defaults when the store is missing or unreadable
        """
        try:
            snapshot = self.store.load()
        except StoreUnavailableError as e:
            logger.warning("property_config_unavailable", error=str(e))
            snapshot = PropertyConfigSnapshot()

        property_layer = snapshot.by_property_id.get(str(property_id)) if property_id else None
        code_layer = snapshot.by_code.get(str(code)) if code else None

        merged = merge_config_layers([snapshot.defaults, property_layer, code_layer])
        return build_property_config(merged)
