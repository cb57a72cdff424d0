import asyncio
from pathlib import Path

from lakewatch.database import SAMPLE_LOCATIONS, SqlLocationStore, init_db


def test_init_db_seeds_once(tmp_path: Path) -> None:
    db_path = tmp_path / "locations.db"
    assert init_db(db_path) == len(SAMPLE_LOCATIONS)
    assert init_db(db_path) == 0


def test_init_db_without_seed(tmp_path: Path) -> None:
    db_path = tmp_path / "empty.db"
    assert init_db(db_path, seed=False) == 0
    assert SqlLocationStore(db_path).load() == []


def test_store_lists_locations_by_name(tmp_path: Path) -> None:
    db_path = tmp_path / "locations.db"
    init_db(db_path)
    locations = asyncio.run(SqlLocationStore(db_path).list_locations())

    names = [loc.name for loc in locations]
    assert names == sorted(names)
    assert len(locations) == 5
    marina = next(loc for loc in locations if loc.type == "marina")
    assert marina.cam_embed_url is None
    assert marina.to_wire()["isOpen"] is True
    assert SqlLocationStore(db_path).load(limit=2) == locations[:2]


def test_store_reuses_its_engine_across_reads(tmp_path: Path) -> None:
    db_path = tmp_path / "locations.db"
    init_db(db_path)
    store = SqlLocationStore(db_path)

    async def read_twice() -> tuple[list, list]:
        first = await store.list_locations()
        engine = store.engine
        second = await store.list_locations()
        assert store.engine is engine
        return first, second

    first, second = asyncio.run(read_twice())
    assert first == second
    assert len(first) == len(SAMPLE_LOCATIONS)
