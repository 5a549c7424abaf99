# Zone configuration for Gonda
from greencredits.models.zone import CoordinateRule, Zone, ZoneConfig

NORTH = "Zone 1 - North Gonda"
SOUTH = "Zone 2 - South Gonda"
EAST = "Zone 3 - East Gonda"
WEST = "Zone 4 - West Gonda"
CENTRAL = "Zone 5 - Central Gonda"

GONDA_ZONES = ZoneConfig(
    zones=(
        Zone(
            name=NORTH,
            areas=("Station Road", "Civil Lines", "Railway Colony", "Nehru Nagar", "Gandhi Nagar"),
            keywords=("station", "civil lines", "railway", "nehru", "gandhi nagar", "north"),
        ),
        Zone(
            name=SOUTH,
            areas=("Colonelganj", "Mankapur", "Katra", "Shahar Kotwali"),
            keywords=("colonelganj", "mankapur", "katra", "kotwali", "south"),
        ),
        Zone(
            name=EAST,
            areas=("Paraspur", "Itiathok", "Wazirganj Road", "Tarabganj"),
            keywords=("paraspur", "itiathok", "wazirganj", "tarabganj", "east"),
        ),
        Zone(
            name=WEST,
            areas=("Bahraich Road", "Wazirganj", "Jhilahi", "Nawabganj Road"),
            keywords=("bahraich", "jhilahi", "nawabganj", "west"),
        ),
        Zone(
            name=CENTRAL,
            areas=("City Center", "Sadar Bazaar", "Collectorate", "Old City"),
            keywords=("city center", "sadar", "collectorate", "old city", "center", "central"),
        ),
    ),
    # approximate city boundaries, evaluated in order
    coordinate_rules=(
        CoordinateRule(axis="lat", op="gt", threshold=27.15, zone=NORTH),
        CoordinateRule(axis="lat", op="lt", threshold=27.10, zone=SOUTH),
        CoordinateRule(axis="lng", op="gt", threshold=81.98, zone=EAST),
        CoordinateRule(axis="lng", op="lt", threshold=81.95, zone=WEST),
    ),
    default_zone=CENTRAL,
)
