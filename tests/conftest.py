"""
Shared fixtures: a throwaway SQLite store seeded with a small dataset.

Every async scenario runs inside a single `asyncio.run` so the aiosqlite
connections never outlive their event loop.
"""

import asyncio
import os
from datetime import datetime

os.environ.setdefault("LOG_DIR", "")

import pytest

from kzstats.database.database import Database
from kzstats.database.models import Course, GameMode, Map, Player, Record, Server
from kzstats.services.registry import ServiceRegistry

ALPHA = 322356345  # ID_1:1:161178172 / 76561198282622073
IBRA = 1
BANNED = 2
CHARLIE = 3
DELTA = 4

LIONHARDER = 992
LIONHEART = 50
BEGINNERBLOCK = 100


def _day(month: int, day: int) -> datetime:
    return datetime(2023, month, day)


def seed_rows():
    players = [
        Player(id=ALPHA, name="AlphaKZ", is_banned=False),
        Player(id=IBRA, name="ibrahizy", is_banned=False),
        Player(id=BANNED, name="Banned Bob", is_banned=True),
        Player(id=CHARLIE, name="charlie_100%", is_banned=False),
        Player(id=DELTA, name="delta", is_banned=False),
    ]
    modes = [
        GameMode(id=200, name="kz_timer", created_on=datetime(2018, 1, 1)),
        GameMode(id=201, name="kz_simple", created_on=datetime(2018, 1, 1)),
        GameMode(id=202, name="kz_vanilla", created_on=datetime(2018, 1, 1)),
    ]
    maps = [
        Map(id=LIONHEART, name="kz_lionheart", courses=1, validated=True, filesize=1000,
            created_by=IBRA, approved_by=ALPHA,
            created_on=datetime(2020, 1, 1), updated_on=datetime(2020, 1, 1)),
        Map(id=BEGINNERBLOCK, name="kz_beginnerblock", courses=1, validated=False, filesize=2000,
            created_by=ALPHA, approved_by=ALPHA,
            created_on=datetime(2022, 6, 1), updated_on=datetime(2022, 6, 1)),
        Map(id=LIONHARDER, name="kz_lionharder", courses=3, validated=True, filesize=3000,
            created_by=ALPHA, approved_by=IBRA,
            created_on=datetime(2021, 1, 1), updated_on=datetime(2021, 3, 1)),
    ]
    courses = [
        Course(id=99200, map_id=LIONHARDER, stage=0, kzt=True, kzt_difficulty=7,
               skz=True, skz_difficulty=7, vnl=False, vnl_difficulty=7),
        Course(id=99201, map_id=LIONHARDER, stage=1, kzt=True, kzt_difficulty=5,
               skz=True, skz_difficulty=5, vnl=False, vnl_difficulty=6),
        Course(id=99202, map_id=LIONHARDER, stage=2, kzt=True, kzt_difficulty=4,
               skz=True, skz_difficulty=4, vnl=True, vnl_difficulty=5),
        Course(id=5000, map_id=LIONHEART, stage=0, kzt=True, kzt_difficulty=3,
               skz=True, skz_difficulty=3, vnl=True, vnl_difficulty=4),
        Course(id=10000, map_id=BEGINNERBLOCK, stage=0, kzt=True, kzt_difficulty=1,
               skz=True, skz_difficulty=1, vnl=True, vnl_difficulty=1),
    ]
    servers = [
        Server(id=1, name="Hikari KZ", owned_by=ALPHA, approved_by=IBRA),
        Server(id=2, name="Kiwi Server", owned_by=IBRA, approved_by=ALPHA),
    ]

    def record(id, course_id, mode_id, player_id, time, teleports, created_on, server_id=1):
        return Record(id=id, course_id=course_id, mode_id=mode_id, player_id=player_id,
                      server_id=server_id, time=time, teleports=teleports, created_on=created_on)

    records = [
        # Three pro runs by one player on one course
        record(10, 99200, 200, ALPHA, 31.2, 0, _day(1, 1)),
        record(11, 99200, 200, ALPHA, 29.9, 0, _day(1, 2)),
        record(12, 99200, 200, ALPHA, 30.0, 0, _day(1, 3)),
        record(13, 99200, 200, IBRA, 30.5, 0, _day(1, 4)),
        # Equal times, lower id wins
        record(15, 99200, 200, DELTA, 32.0, 0, _day(1, 5)),
        record(16, 99200, 200, DELTA, 32.0, 0, _day(1, 6)),
        record(17, 99200, 200, BANNED, 20.0, 0, _day(1, 7)),
        # Teleport runs
        record(18, 99200, 200, ALPHA, 25.0, 3, _day(1, 8)),
        record(19, 99200, 200, IBRA, 27.0, 5, _day(1, 9)),
        record(20, 99202, 200, IBRA, 40.0, 2, _day(1, 10), server_id=2),
        record(21, 99202, 201, ALPHA, 45.0, 0, _day(1, 11)),
        record(22, 5000, 201, ALPHA, 50.0, 0, _day(2, 1), server_id=2),
        record(23, 5000, 202, CHARLIE, 60.0, 1, _day(2, 2)),
    ]
    return players + modes + maps + courses + servers + records


async def seed_database(database_url: str):
    database = Database(database_url)
    await database.initialize(create_tables=True)
    try:
        async with database.get_session() as session:
            session.add_all(seed_rows())
            await session.commit()
    finally:
        await database.close()


@pytest.fixture
def database_url(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'kzstats.db'}"
    asyncio.run(seed_database(url))
    return url


@pytest.fixture
def run(database_url):
    """Run `scenario(services)` against the seeded store and return its result."""

    def runner(scenario):
        async def main():
            database = Database(database_url)
            await database.initialize()
            try:
                return await scenario(ServiceRegistry.from_session_factory(database.session_factory))
            finally:
                await database.close()

        return asyncio.run(main())

    return runner
