import time

from fastapi import APIRouter, Depends

from kzstats.api.dependencies import get_services
from kzstats.api.responses import envelope
from kzstats.services.registry import ServiceRegistry

router = APIRouter()


@router.get("/api/modes")
async def api_list_modes(services: ServiceRegistry = Depends(get_services)):
    started = time.perf_counter_ns()
    modes = await services.catalog.get_modes()
    return envelope([mode.to_dict() for mode in modes], started)


@router.get("/api/modes/{identifier}")
async def api_mode(identifier: str, services: ServiceRegistry = Depends(get_services)):
    started = time.perf_counter_ns()
    mode = await services.catalog.get_mode(identifier)
    return envelope(mode.to_dict(), started)
