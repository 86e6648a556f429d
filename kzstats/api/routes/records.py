import time
from typing import Optional

from fastapi import APIRouter, Depends, Query

from kzstats.api.dependencies import get_services
from kzstats.api.responses import envelope
from kzstats.services.filters import FilterSpec
from kzstats.services.registry import ServiceRegistry

router = APIRouter()


@router.get("/api/records")
async def api_list_records(
    map_identifier: Optional[str] = Query(None, alias="map"),
    mode: Optional[str] = None,
    player: Optional[str] = None,
    server: Optional[str] = None,
    stage: Optional[int] = None,
    has_teleports: Optional[bool] = None,
    created_after: Optional[str] = None,
    created_before: Optional[str] = None,
    limit: Optional[int] = None,
    services: ServiceRegistry = Depends(get_services),
):
    """Every run matching the filters, newest first."""
    started = time.perf_counter_ns()
    spec = FilterSpec(
        map=map_identifier,
        stage=stage,
        mode=mode,
        player=player,
        server=server,
        has_teleports=has_teleports,
        created_after=created_after,
        created_before=created_before,
    )
    records = await services.records.get_records(spec, limit=limit)
    return envelope([record.to_dict() for record in records], started)


@router.get("/api/records/{record_id}")
async def api_record(record_id: int, services: ServiceRegistry = Depends(get_services)):
    started = time.perf_counter_ns()
    record = await services.records.get_record(record_id)
    return envelope(record.to_dict(), started)


@router.get("/api/records/top/map/{identifier}")
async def api_map_top(
    identifier: str,
    mode: Optional[str] = None,
    stage: int = 0,
    player: Optional[str] = None,
    has_teleports: Optional[bool] = None,
    allow_banned: bool = False,
    limit: Optional[int] = None,
    services: ServiceRegistry = Depends(get_services),
):
    """Personal bests on one course of a map, fastest first."""
    started = time.perf_counter_ns()
    entries = await services.leaderboard.map_leaderboard(
        identifier,
        mode=mode,
        stage=stage,
        player=player,
        has_teleports=has_teleports,
        allow_banned=allow_banned,
        limit=limit,
    )
    return envelope([entry.to_dict() for entry in entries], started)


@router.get("/api/records/top/player/{identifier}")
async def api_player_top(
    identifier: str,
    mode: Optional[str] = None,
    map_identifier: Optional[str] = Query(None, alias="map"),
    stage: Optional[int] = None,
    has_teleports: Optional[bool] = None,
    limit: Optional[int] = None,
    services: ServiceRegistry = Depends(get_services),
):
    """A player's personal bests, fastest first."""
    started = time.perf_counter_ns()
    records = await services.leaderboard.player_personal_bests(
        identifier,
        mode=mode,
        map_identifier=map_identifier,
        stage=stage,
        has_teleports=has_teleports,
        limit=limit,
    )
    return envelope([record.to_dict() for record in records], started)


@router.get("/api/records/place/{record_id}")
async def api_record_place(
    record_id: int,
    allow_banned: bool = False,
    services: ServiceRegistry = Depends(get_services),
):
    started = time.perf_counter_ns()
    place = await services.leaderboard.rank_of(record_id, allow_banned=allow_banned)
    return envelope(place, started)
