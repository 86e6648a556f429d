import time
from typing import Optional

from fastapi import APIRouter, Depends

from kzstats.api.dependencies import get_services
from kzstats.api.responses import envelope
from kzstats.services.registry import ServiceRegistry

router = APIRouter()


@router.get("/api/servers")
async def api_list_servers(
    name: Optional[str] = None,
    owned_by: Optional[str] = None,
    approved_by: Optional[str] = None,
    limit: Optional[int] = None,
    services: ServiceRegistry = Depends(get_services),
):
    started = time.perf_counter_ns()
    servers = await services.catalog.list_servers(
        name=name, owned_by=owned_by, approved_by=approved_by, limit=limit
    )
    return envelope([server.to_dict() for server in servers], started)


@router.get("/api/servers/{identifier}")
async def api_server(identifier: str, services: ServiceRegistry = Depends(get_services)):
    started = time.perf_counter_ns()
    server = await services.catalog.get_server_detail(identifier)
    return envelope(server.to_dict(), started)
