from __future__ import annotations

from typing import Literal, Optional, Tuple

from greencredits.models.common import FrozenModel


class Zone(FrozenModel):
    name: str
    keywords: Tuple[str, ...]
    areas: Tuple[str, ...] = ()

    def matches(self, address_lower: str) -> bool:
        return any(keyword in address_lower for keyword in self.keywords)


class CoordinateRule(FrozenModel):
    """``axis`` above/below ``threshold`` maps to ``zone``."""

    axis: Literal["lat", "lng"]
    op: Literal["gt", "lt"]
    threshold: float
    zone: str

    def matches(self, lat: float, lng: float) -> bool:
        value = lat if self.axis == "lat" else lng
        if self.op == "gt":
            return value > self.threshold
        return value < self.threshold


class Coordinates(FrozenModel):
    lat: float
    lng: float


class ZoneConfig(FrozenModel):
    zones: Tuple[Zone, ...]
    coordinate_rules: Tuple[CoordinateRule, ...]
    default_zone: str

    def get(self, name: str) -> Optional[Zone]:
        for zone in self.zones:
            if zone.name == name:
                return zone
        return None
