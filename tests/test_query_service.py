"""
Tests for QueryService against a seeded in-memory SQLite store.
"""
import threading

import pytest

from galaxy_map.database import Projection
from galaxy_map.exceptions import AssetNotFoundError, InternalError, ValidationError
from galaxy_map.observers import RegionQueryObserver
from galaxy_map.region_query import plan_region_query
from tests.conftest import BOX_PARAMS, IDS_IN_BOX, SEED_DATA


class ThreadRecordingObserver(RegionQueryObserver):
    def __init__(self):
        self.thread_names = []

    def regions_decomposed(self, box, regions):
        self.thread_names.append(threading.current_thread().name)


class TestListEntities:

    @pytest.mark.asyncio
    async def test_box_query_full_projection(self, query_service):
        rows = await query_service.list_entities(plan_region_query(BOX_PARAMS), Projection.FULL)

        assert [row["id"] for row in rows] == IDS_IN_BOX
        first = rows[0]
        assert first == {
            "id": 1, "sector_id": 1, "x": 10, "y": 3, "name": "Alpha Corner",
            "sector_x": 2, "sector_y": 5, "sector_name": "Alpha",
        }

    @pytest.mark.asyncio
    async def test_box_query_excludes_row_outside_last_row_bound(self, query_service):
        rows = await query_service.list_entities(plan_region_query(BOX_PARAMS), Projection.FULL)

        # (2, 3) is the last row but not the last column; y=16 lies below the box
        assert 11 not in {row["id"] for row in rows}

    @pytest.mark.asyncio
    async def test_whole_sector_query(self, query_service):
        rows = await query_service.list_entities(
            plan_region_query({"ulsx": "3", "ulsy": "4"}), Projection.FULL
        )

        assert [row["id"] for row in rows] == [4, 5]

    @pytest.mark.asyncio
    async def test_single_sector_query(self, query_service):
        params = dict(BOX_PARAMS, lrsx="2", lrsy="5", lrhx="32", lrhy="3")
        rows = await query_service.list_entities(plan_region_query(params), Projection.FULL)

        assert [row["id"] for row in rows] == [1]

    @pytest.mark.asyncio
    async def test_stars_projection(self, query_service):
        rows = await query_service.list_entities(plan_region_query(BOX_PARAMS), Projection.STARS)

        assert [row["id"] for row in rows] == [1, 2, 3]
        assert rows[2] == {
            "id": 3, "solar_system_id": 4, "name": "Epsilon Star", "spectral_type": None,
            "x": 1, "y": 1, "sector_x": 3, "sector_y": 4,
        }

    @pytest.mark.asyncio
    async def test_empty_sector_returns_no_rows(self, query_service):
        rows = await query_service.list_entities(
            plan_region_query({"ulsx": "40", "ulsy": "40"}), Projection.FULL
        )

        assert rows == []

    @pytest.mark.asyncio
    async def test_box_spanning_1640_sectors(self, query_service):
        params = {
            "ulsx": "0", "ulsy": "40", "ulhx": "1", "ulhy": "1",
            "lrsx": "39", "lrsy": "0", "lrhx": "32", "lrhy": "40",
        }
        composite = plan_region_query(params)

        rows = await query_service.list_entities(composite, Projection.FULL)

        assert len(composite) == 1640
        assert sorted(row["id"] for row in rows) == [system["id"] for system in SEED_DATA["solar_systems"]]

    @pytest.mark.asyncio
    async def test_store_failure_wrapped(self, broken_query_service):
        with pytest.raises(InternalError) as exc_info:
            await broken_query_service.list_entities(plan_region_query(BOX_PARAMS), Projection.FULL)
        assert exc_info.value.operation == "list_entities"
        assert exc_info.value.__cause__ is not None


class TestPlanRegion:

    @pytest.mark.asyncio
    async def test_planning_runs_on_cpu_pool(self, query_service):
        observer = ThreadRecordingObserver()

        composite = await query_service.plan_region(BOX_PARAMS, observer)

        assert len(composite) == 9
        assert observer.thread_names
        assert all(name.startswith("galaxy-cpu") for name in observer.thread_names)
        assert query_service.thread_pool_service.get_pool_stats()["cpu_pool"]["active"] is True

    @pytest.mark.asyncio
    async def test_validation_error_propagates(self, query_service):
        with pytest.raises(ValidationError, match="missing upper-left sector coordinates"):
            await query_service.plan_region({"ulsx": "2"})


class TestListSectors:

    @pytest.mark.asyncio
    async def test_sectors_ordered_by_x_then_y(self, query_service):
        rows = await query_service.list_sectors()

        coordinates = [(row["x"], row["y"]) for row in rows]
        assert coordinates == sorted(coordinates)
        assert len(rows) == len(SEED_DATA["sectors"])
        assert rows[0] == {"id": 7, "x": 2, "y": 3, "name": "Eta"}

    @pytest.mark.asyncio
    async def test_store_failure_wrapped(self, broken_query_service):
        with pytest.raises(InternalError):
            await broken_query_service.list_sectors()


class TestSectorAsset:

    @pytest.mark.asyncio
    async def test_existing_asset_resolved(self, query_service, asset_dir):
        path = await query_service.get_sector_asset(2, 5, "0101")

        assert path == (asset_dir / "Alpha" / "0101.png").resolve()

    @pytest.mark.asyncio
    async def test_missing_file_not_found(self, query_service):
        with pytest.raises(AssetNotFoundError) as exc_info:
            await query_service.get_sector_asset(2, 5, "0202")
        assert exc_info.value.hex_label == "0202"

    @pytest.mark.asyncio
    async def test_unknown_sector_not_found(self, query_service):
        with pytest.raises(AssetNotFoundError):
            await query_service.get_sector_asset(99, 99, "0101")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("label", ["../outside", "a/b", "", "0101.png"])
    async def test_invalid_label_rejected(self, query_service, label):
        with pytest.raises(ValidationError, match="invalid hex label"):
            await query_service.get_sector_asset(2, 5, label)

    @pytest.mark.asyncio
    async def test_store_failure_wrapped(self, broken_query_service):
        with pytest.raises(InternalError):
            await broken_query_service.get_sector_asset(2, 5, "0101")


@pytest.mark.asyncio
async def test_check_database(query_service, broken_query_service):
    assert await query_service.check_database() is True
    # SELECT 1 needs no tables, so an empty database is still reachable
    assert await broken_query_service.check_database() is True
