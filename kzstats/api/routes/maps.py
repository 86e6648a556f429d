import time
from typing import Optional

from fastapi import APIRouter, Depends

from kzstats.api.dependencies import get_services
from kzstats.api.responses import envelope
from kzstats.services.registry import ServiceRegistry

router = APIRouter()


@router.get("/api/maps")
async def api_list_maps(
    name: Optional[str] = None,
    tier: Optional[str] = None,
    courses: Optional[int] = None,
    validated: Optional[bool] = None,
    created_by: Optional[str] = None,
    approved_by: Optional[str] = None,
    created_after: Optional[str] = None,
    created_before: Optional[str] = None,
    limit: Optional[int] = None,
    services: ServiceRegistry = Depends(get_services),
):
    started = time.perf_counter_ns()
    maps = await services.catalog.list_maps(
        name=name,
        tier=tier,
        courses=courses,
        validated=validated,
        created_by=created_by,
        approved_by=approved_by,
        created_after=created_after,
        created_before=created_before,
        limit=limit,
    )
    return envelope([map_detail.to_dict() for map_detail in maps], started)


@router.get("/api/maps/{identifier}")
async def api_map(identifier: str, services: ServiceRegistry = Depends(get_services)):
    started = time.perf_counter_ns()
    map_detail = await services.catalog.get_map_detail(identifier)
    return envelope(map_detail.to_dict(), started)
