import time
from typing import Optional

from fastapi import APIRouter, Depends

from kzstats.api.dependencies import get_services
from kzstats.api.responses import envelope
from kzstats.services.registry import ServiceRegistry

router = APIRouter()


@router.get("/api/players")
async def api_list_players(
    is_banned: Optional[bool] = None,
    limit: Optional[int] = None,
    offset: int = 0,
    services: ServiceRegistry = Depends(get_services),
):
    started = time.perf_counter_ns()
    players = await services.profile.list_players(is_banned=is_banned, limit=limit, offset=offset)
    return envelope([player.to_dict() for player in players], started)


@router.get("/api/players/{identifier}")
async def api_player(identifier: str, services: ServiceRegistry = Depends(get_services)):
    """Player profile by account id, global id, legacy id or name."""
    started = time.perf_counter_ns()
    profile = await services.profile.get_player_profile(identifier)
    return envelope(profile.to_dict(), started)
