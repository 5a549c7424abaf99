from __future__ import annotations

import math
from typing import Any, Optional

from greencredits.core.zones import GONDA_ZONES
from greencredits.models.zone import Coordinates, ZoneConfig


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(f):
        return None
    return f


def parse_coordinates(lat: Any, lng: Any) -> Optional[Coordinates]:
    """Malformed or out-of-range pairs come back as None."""
    lat_f = _as_float(lat)
    lng_f = _as_float(lng)
    if lat_f is None or lng_f is None:
        return None
    if not (-90.0 <= lat_f <= 90.0) or not (-180.0 <= lng_f <= 180.0):
        return None
    return Coordinates(lat=lat_f, lng=lng_f)


class ZoneClassifier:
    def __init__(self, config: ZoneConfig = GONDA_ZONES):
        self.config = config

    @property
    def default_zone(self) -> str:
        return self.config.default_zone

    def zone_for_address(self, address: Optional[str]) -> Optional[str]:
        if not address or not address.strip():
            return None
        address_lower = address.lower()
        for zone in self.config.zones:
            if zone.matches(address_lower):
                return zone.name
        return None

    def zone_for_coordinates(self, coordinates: Optional[Coordinates]) -> Optional[str]:
        if coordinates is None:
            return None
        for rule in self.config.coordinate_rules:
            if rule.matches(coordinates.lat, coordinates.lng):
                return rule.zone
        return None

    def classify(self, address: Optional[str] = None, coordinates: Any = None) -> str:
        """
        Address keywords first, then coordinate thresholds, then the default zone.

        ``coordinates`` may be a Coordinates record, a ``(lat, lng)`` pair or a
        mapping with ``lat``/``lng`` keys.
        """
        zone = self.zone_for_address(address)
        if zone:
            return zone
        zone = self.zone_for_coordinates(self._coerce(coordinates))
        if zone:
            return zone
        return self.config.default_zone

    @staticmethod
    def _coerce(coordinates: Any) -> Optional[Coordinates]:
        if coordinates is None or isinstance(coordinates, Coordinates):
            return coordinates
        if isinstance(coordinates, dict):
            return parse_coordinates(coordinates.get("lat"), coordinates.get("lng"))
        if isinstance(coordinates, (tuple, list)) and len(coordinates) == 2:
            return parse_coordinates(coordinates[0], coordinates[1])
        return None


zone_classifier = ZoneClassifier()
