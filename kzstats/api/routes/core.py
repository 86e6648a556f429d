import time

from fastapi import APIRouter

from kzstats.api.responses import envelope

router = APIRouter()


@router.get("/")
async def api_health():
    started = time.perf_counter_ns()
    return envelope("healthy", started)
