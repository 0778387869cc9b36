#!/usr/bin/env python3
"""
Create the Galaxy Map schema and optionally load seed data.

Examples:
  python scripts/init_database.py
  python scripts/init_database.py --seed data/seed.json
  python scripts/init_database.py --database-url sqlite:///./galaxy_map.db --seed data/seed.json
"""
import json
import logging
from pathlib import Path

from galaxy_map.config import get_settings
from galaxy_map.database import create_db_engine, create_schema, load_seed_data
from galaxy_map.logging_config import setup_logging

logger = logging.getLogger("galaxy_map.scripts.init_database")


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Create the Galaxy Map database schema')
    parser.add_argument('--database-url', help='SQLAlchemy URL (defaults to DATABASE_URL)')
    parser.add_argument('--seed', type=Path, help='JSON file with sectors, solar_systems and stars')
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(level=settings.LOG_LEVEL, service_name="galaxy-map-init")

    engine = create_db_engine(args.database_url or settings.DATABASE_URL)
    try:
        create_schema(engine)
        if args.seed:
            with open(args.seed, 'r', encoding='utf-8') as f:
                counts = load_seed_data(engine, json.load(f))
            logger.info(f"Loaded {args.seed}: {counts}")
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
