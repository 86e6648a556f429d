from fastapi import APIRouter

from kzstats.api.routes import core, maps, modes, players, records, servers

api_router = APIRouter()
api_router.include_router(core.router)
api_router.include_router(players.router)
api_router.include_router(maps.router)
api_router.include_router(servers.router)
api_router.include_router(modes.router)
api_router.include_router(records.router)
