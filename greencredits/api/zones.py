from fastapi import APIRouter

from greencredits.core.zones import GONDA_ZONES

router = APIRouter(prefix="/zones", tags=["Zones"])


@router.get("")
async def list_zones():
    return [
        {"name": z.name, "areas": list(z.areas), "keywords": list(z.keywords)}
        for z in GONDA_ZONES.zones
    ]
