"""Local SQLite locations store using SQLModel, for offline development."""

from __future__ import annotations

import asyncio
import uuid
from pathlib import Path
from typing import List

from sqlmodel import Field, Session, SQLModel, create_engine, select

from .models import Location

SAMPLE_LOCATIONS = [
    ("Shady Gators Bar & Grill", "bar", 38.1350, -92.7850, "https://www.youtube.com/embed/dQw4w9WgXcQ", True),
    ("Backwater Jack's", "restaurant", 38.1100, -92.7600, "https://www.youtube.com/embed/dQw4w9WgXcQ", True),
    ("Marina Bay Resort", "marina", 38.1250, -92.7750, None, True),
    ("Coconuts Caribbean Beach Bar", "bar", 38.1050, -92.7700, "https://www.youtube.com/embed/dQw4w9WgXcQ", False),
    ("H. Toad's Bar & Grill", "restaurant", 38.1300, -92.7800, None, True),
]


class LocationRecord(SQLModel, table=True):
    __tablename__ = "locations"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(index=True)
    type: str = Field(index=True)
    lat: float
    lng: float
    cam_embed_url: str | None = None
    is_open: bool | None = None


def default_db_path() -> Path:
    return Path.home() / ".lakewatch" / "locations.db"


def build_engine(path: Path | None = None):
    db_path = path or default_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})


def init_db(path: Path | None = None, *, seed: bool = True) -> int:
    """Create the table and insert the sample rows when empty. Returns rows inserted."""
    engine = build_engine(path)
    SQLModel.metadata.create_all(engine)
    if not seed:
        return 0
    with Session(engine) as session:
        if session.exec(select(LocationRecord)).first() is not None:
            return 0
        for name, kind, lat, lng, cam, is_open in SAMPLE_LOCATIONS:
            session.add(LocationRecord(name=name, type=kind, lat=lat, lng=lng, cam_embed_url=cam, is_open=is_open))
        session.commit()
    return len(SAMPLE_LOCATIONS)


def record_to_location(record: LocationRecord) -> Location:
    return Location(
        id=record.id,
        name=record.name,
        type=record.type,
        lat=record.lat,
        lng=record.lng,
        cam_embed_url=record.cam_embed_url or None,
        is_open=record.is_open,
    )


class SqlLocationStore:
    """Reads map locations from the local SQLite file, off the event loop."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._engine = None

    @property
    def engine(self):
        if self._engine is None:
            self._engine = build_engine(self.path)
            SQLModel.metadata.create_all(self._engine)
        return self._engine

    def load(self, limit: int = 10000) -> List[Location]:
        with Session(self.engine) as session:
            rows = session.exec(select(LocationRecord).order_by(LocationRecord.name).limit(limit)).all()
            return [record_to_location(r) for r in rows]

    async def list_locations(self) -> List[Location]:
        return await asyncio.to_thread(self.load)
