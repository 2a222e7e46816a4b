"""
farm/store.py -- SQLAlchemy-backed persistence layer for farms and tasks.

Uses SQLAlchemy Core (not ORM) so the dataclasses in farm/models.py remain
the authoritative domain representation.

Pattern: Repository + Data Mapper. FarmStore is the repository; the _row_to_*
functions are the mappers. Service code never touches SQL directly.

Ownership: every farm read or write that takes a farm_id also takes the
farmer_id and filters on BOTH. A farm owned by someone else is
indistinguishable from a farm that does not exist.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = FarmStore()                               # SQLite default
    store = FarmStore("postgresql://user:pw@host/db") # PostgreSQL
    farm_id = store.create_farm(farm)
    store.get_farm(farm_id, farmer_id)
    store.close()
"""

import json
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Float, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

from core.config import get_settings
from farm.models import Farm, Task

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_farms = Table(
    "farms",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("farmer_id", Integer, nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("location", Text),  # JSON object serialized as text
    Column("size", Float, nullable=False),
    Column("size_unit", String(20), nullable=False),
    Column("status", String(20), nullable=False),
    Column("soil", Text, nullable=False),  # JSON object, like location
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_tasks = Table(
    "tasks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("farm_id", Integer, nullable=False, index=True),
    Column("description", Text, nullable=False),
    Column("status", String(30), nullable=False, server_default="pending"),
    Column("priority", String(30), nullable=False, server_default="medium"),
    Column("due_date", String(10)),  # YYYY-MM-DD
)

_JSON_FIELDS = ("location", "soil")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _owned(farm_id: int, farmer_id: int):
    return (_farms.c.id == farm_id) & (_farms.c.farmer_id == farmer_id)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class FarmStore:
    def __init__(self, db_url: Optional[str] = None) -> None:
        db_url = db_url or get_settings().database_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            # The same store is shared by FastAPI's threadpool workers.
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Farms
    # ------------------------------------------------------------------

    def create_farm(self, farm: Farm) -> int:
        """Insert a new farm and return its assigned database ID.

        The farmer_id column is the only link between account and farm, so
        one INSERT in one transaction both creates and attaches the farm.
        """
        now = _now_iso()
        with self.engine.begin() as conn:
            result = conn.execute(
                _farms.insert().values(
                    farmer_id=farm.farmer_id,
                    name=farm.name,
                    location=json.dumps(farm.location),
                    size=farm.size,
                    size_unit=farm.size_unit,
                    status=farm.status,
                    soil=json.dumps(farm.soil),
                    created_at=now,
                    updated_at=now,
                )
            )
            return result.inserted_primary_key[0]

    def list_farms(self, farmer_id: int) -> list[Farm]:
        """Return every farm owned by farmer_id, oldest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _farms.select().where(_farms.c.farmer_id == farmer_id).order_by(_farms.c.id)
            ).fetchall()
        return [_row_to_farm(r) for r in rows]

    def get_farm(self, farm_id: int, farmer_id: int) -> Optional[Farm]:
        """Fetch one farm by (id, farmer_id). Returns None if missing or not owned."""
        with self.engine.connect() as conn:
            row = conn.execute(_farms.select().where(_owned(farm_id, farmer_id))).fetchone()
        return _row_to_farm(row) if row is not None else None

    def update_farm(self, farm_id: int, farmer_id: int, **fields) -> bool:
        """Update mutable fields on a farm the caller owns.

        Accepts any subset of: name, location, size, size_unit, status, soil.
        location and soil must be passed as dicts; this method serializes them
        to JSON before writing.

        Returns True if a row was updated, False if no farm matched both keys.
        """
        for key in _JSON_FIELDS:
            if key in fields:
                fields[key] = json.dumps(fields[key])
        fields["updated_at"] = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(_farms.update().where(_owned(farm_id, farmer_id)).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete_farm(self, farm_id: int, farmer_id: int) -> bool:
        """Delete a farm the caller owns, together with its tasks.

        Both deletes share one transaction. Returns False (and deletes
        nothing) if no farm matched both keys.
        """
        with self.engine.begin() as conn:
            result = conn.execute(_farms.delete().where(_owned(farm_id, farmer_id)))
            if result.rowcount == 0:
                return False
            conn.execute(_tasks.delete().where(_tasks.c.farm_id == farm_id))
        return True

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def create_task(self, task: Task) -> int:
        with self.engine.begin() as conn:
            result = conn.execute(
                _tasks.insert().values(
                    farm_id=task.farm_id,
                    description=task.description,
                    status=task.status,
                    priority=task.priority,
                    due_date=task.due_date,
                )
            )
            return result.inserted_primary_key[0]

    def list_tasks(self, farm_id: int) -> list[Task]:
        with self.engine.connect() as conn:
            rows = conn.execute(_tasks.select().where(_tasks.c.farm_id == farm_id).order_by(_tasks.c.id)).fetchall()
        return [_row_to_task(r) for r in rows]

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_farm(row) -> Farm:
    return Farm(
        id=row.id,
        farmer_id=row.farmer_id,
        name=row.name,
        location=json.loads(row.location) if row.location else None,
        size=row.size,
        size_unit=row.size_unit,
        status=row.status,
        soil=json.loads(row.soil) if row.soil else {},
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_task(row) -> Task:
    return Task(
        id=row.id,
        farm_id=row.farm_id,
        description=row.description,
        status=row.status,
        priority=row.priority,
        due_date=row.due_date,
    )
