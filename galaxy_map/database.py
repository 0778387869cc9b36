"""
Row store schema and engine helpers (SQLAlchemy Core).

Solar systems sit at hex (x, y) inside a sector; stars belong to solar
systems and inherit their location.
"""
import enum
import logging
from typing import Any, Dict

from sqlalchemy import (
    Column, ForeignKey, Integer, MetaData, String, Table, UniqueConstraint,
    create_engine, insert, select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import Select

logger = logging.getLogger(__name__)

metadata = MetaData()

sector = Table(
    "sector",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("x", Integer, nullable=False),
    Column("y", Integer, nullable=False),
    Column("name", String(128), nullable=False, unique=True),
    UniqueConstraint("x", "y", name="uq_sector_xy"),
)

solar_system = Table(
    "solar_system",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("sector_id", Integer, ForeignKey("sector.id"), nullable=False, index=True),
    Column("x", Integer, nullable=False),
    Column("y", Integer, nullable=False),
    Column("name", String(128), nullable=False),
)

star = Table(
    "star",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("solar_system_id", Integer, ForeignKey("solar_system.id"), nullable=False, index=True),
    Column("name", String(128), nullable=False),
    Column("spectral_type", String(16)),
)


class Projection(str, enum.Enum):
    """Column sets the entity query can return"""
    FULL = "full"
    STARS = "stars"


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across threads"""
    if database_url.startswith("sqlite") and (":memory:" in database_url or database_url in ("sqlite://", "sqlite:///")):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def create_schema(engine: Engine) -> None:
    metadata.create_all(engine)
    logger.info("Database schema created", extra={"event": "schema_created", "tables": sorted(metadata.tables)})


def load_seed_data(engine: Engine, data: Dict[str, Any]) -> Dict[str, int]:
    """Insert sectors, solar systems and stars from a plain dict.

    Expected keys are ``sectors``, ``solar_systems`` and ``stars``, each a
    list of row dicts keyed by column name. Returns the row count per table.
    """
    counts = {}
    with engine.begin() as conn:
        for table, key in ((sector, "sectors"), (solar_system, "solar_systems"), (star, "stars")):
            rows = data.get(key) or []
            if rows:
                conn.execute(insert(table), rows)
            counts[table.name] = len(rows)
    logger.info(f"Seed data loaded: {counts}", extra={"event": "seed_loaded"})
    return counts


def select_for_projection(projection: Projection) -> Select:
    """Joined SELECT for a projection, without any WHERE clause"""
    if projection == Projection.FULL:
        return (
            select(
                solar_system,
                sector.c.x.label("sector_x"),
                sector.c.y.label("sector_y"),
                sector.c.name.label("sector_name"),
            )
            .select_from(solar_system.join(sector, solar_system.c.sector_id == sector.c.id))
            .order_by(sector.c.x, sector.c.y.desc(), solar_system.c.y, solar_system.c.x, solar_system.c.id)
        )
    if projection == Projection.STARS:
        return (
            select(
                star,
                solar_system.c.x,
                solar_system.c.y,
                sector.c.x.label("sector_x"),
                sector.c.y.label("sector_y"),
            )
            .select_from(
                star.join(solar_system, star.c.solar_system_id == solar_system.c.id)
                .join(sector, solar_system.c.sector_id == sector.c.id)
            )
            .order_by(sector.c.x, sector.c.y.desc(), solar_system.c.y, solar_system.c.x, star.c.id)
        )
    raise ValueError(f"Unknown projection: {projection}")
