"""
Shared test fixtures for the Galaxy Map test suite.
Provides a seeded in-memory row store, a map asset directory and a test client.
"""
import logging
import os

# Must be set before the app module reads its settings
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from galaxy_map.database import create_db_engine, create_schema, load_seed_data
from galaxy_map.dependencies import get_query_service, get_region_query_observer
from galaxy_map.main import app
from galaxy_map.observers import RegionQueryObserver
from galaxy_map.services.query_service import QueryService
from galaxy_map.services.thread_pool_service import ThreadPoolService


# Box used throughout: upper-left (2, 5) hex (10, 3), lower-right (4, 3) hex (20, 15)
BOX_PARAMS = {
    "ulsx": "2", "ulsy": "5", "ulhx": "10", "ulhy": "3",
    "lrsx": "4", "lrsy": "3", "lrhx": "20", "lrhy": "15",
}

# Solar system ids inside BOX_PARAMS, in response order
IDS_IN_BOX = [1, 3, 10, 4, 5, 12, 6]

SEED_DATA = {
    "sectors": [
        {"id": 1, "x": 2, "y": 5, "name": "Alpha"},
        {"id": 2, "x": 3, "y": 5, "name": "Beta"},
        {"id": 3, "x": 4, "y": 5, "name": "Gamma"},
        {"id": 4, "x": 2, "y": 4, "name": "Delta"},
        {"id": 5, "x": 3, "y": 4, "name": "Epsilon"},
        {"id": 6, "x": 4, "y": 4, "name": "Zeta"},
        {"id": 7, "x": 2, "y": 3, "name": "Eta"},
        {"id": 8, "x": 3, "y": 3, "name": "Theta"},
        {"id": 9, "x": 4, "y": 3, "name": "Iota"},
        {"id": 10, "x": 5, "y": 5, "name": "Kappa"},
    ],
    "solar_systems": [
        {"id": 1, "sector_id": 1, "x": 10, "y": 3, "name": "Alpha Corner"},
        {"id": 2, "sector_id": 1, "x": 9, "y": 3, "name": "Alpha West"},
        {"id": 3, "sector_id": 1, "x": 32, "y": 40, "name": "Alpha Far"},
        {"id": 4, "sector_id": 5, "x": 1, "y": 1, "name": "Epsilon Near"},
        {"id": 5, "sector_id": 5, "x": 32, "y": 40, "name": "Epsilon Far"},
        {"id": 6, "sector_id": 9, "x": 20, "y": 15, "name": "Iota Corner"},
        {"id": 7, "sector_id": 9, "x": 21, "y": 15, "name": "Iota East"},
        {"id": 8, "sector_id": 9, "x": 1, "y": 16, "name": "Iota South"},
        {"id": 9, "sector_id": 10, "x": 5, "y": 5, "name": "Kappa Outside"},
        {"id": 10, "sector_id": 7, "x": 10, "y": 15, "name": "Eta Edge"},
        {"id": 11, "sector_id": 7, "x": 10, "y": 16, "name": "Eta Below"},
        {"id": 12, "sector_id": 3, "x": 20, "y": 3, "name": "Gamma Edge"},
        {"id": 13, "sector_id": 3, "x": 20, "y": 2, "name": "Gamma Above"},
    ],
    "stars": [
        {"id": 1, "solar_system_id": 1, "name": "Alpha Prime", "spectral_type": "G2V"},
        {"id": 2, "solar_system_id": 1, "name": "Alpha Minor", "spectral_type": "M4V"},
        {"id": 3, "solar_system_id": 4, "name": "Epsilon Star", "spectral_type": None},
        {"id": 4, "solar_system_id": 9, "name": "Kappa Star", "spectral_type": "K0III"},
    ],
}


@pytest.fixture
def seeded_engine():
    """In-memory SQLite engine with the schema and SEED_DATA loaded."""
    engine = create_db_engine("sqlite://")
    create_schema(engine)
    load_seed_data(engine, SEED_DATA)
    yield engine
    engine.dispose()


@pytest.fixture
def asset_dir(tmp_path):
    """Map asset root holding one image for sector Alpha, hex 0101."""
    root = tmp_path / "maps"
    (root / "Alpha").mkdir(parents=True)
    (root / "Alpha" / "0101.png").write_bytes(b"\x89PNG-alpha-0101")
    (tmp_path / "outside.png").write_bytes(b"outside")
    return root


@pytest.fixture
def thread_pool_service():
    service = ThreadPoolService(io_workers=2)
    yield service
    service.close()


@pytest.fixture
def query_service(seeded_engine, asset_dir, thread_pool_service):
    return QueryService(seeded_engine, asset_dir, ".png", thread_pool_service)


@pytest.fixture
def broken_query_service(asset_dir, thread_pool_service):
    """QueryService over a database with no tables, so every query fails."""
    engine = create_db_engine("sqlite://")
    yield QueryService(engine, asset_dir, ".png", thread_pool_service)
    engine.dispose()


@pytest.fixture
def test_client(query_service):
    """FastAPI test client wired to the seeded query service."""
    app.dependency_overrides[get_query_service] = lambda: query_service
    app.dependency_overrides[get_region_query_observer] = lambda: RegionQueryObserver()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_test_client(broken_query_service):
    app.dependency_overrides[get_query_service] = lambda: broken_query_service
    app.dependency_overrides[get_region_query_observer] = lambda: RegionQueryObserver()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def suppress_logging():
    """Suppress logging during tests to reduce noise."""
    logging.disable(logging.CRITICAL)
    yield
    logging.disable(logging.NOTSET)


# Helper functions for tests
def assert_error_response(response, expected_status_code: int, expected_detail_substring: str = None):
    """Helper to assert the status and detail of an error response."""
    assert response.status_code == expected_status_code
    if expected_detail_substring:
        assert expected_detail_substring.lower() in response.json()["detail"].lower()
