"""Tests for tender storage."""

import json
import threading
from datetime import datetime

import pytest

from tender_scraper.core.models import TenderCategory
from tender_scraper.storage import (
    DuplicateReferenceError,
    InMemoryTenderRepository,
    JsonFileTenderRepository,
)


def tender_fields(ref: str, is_scraped: bool = True) -> dict:
    return {
        "title": "Construction of check dams",
        "reference_number": ref,
        "description": "Check dams on seasonal streams",
        "budget": 12_500_000,
        "deadline": datetime(2025, 10, 15),
        "category": TenderCategory.CONSTRUCTION,
        "location": "India",
        "organisation": "Water Resources Department",
        "source_url": "https://eprocure.gov.in/tender/55",
        "is_scraped": is_scraped,
    }


class TestInMemoryTenderRepository:
    """Tests for InMemoryTenderRepository."""

    @pytest.mark.asyncio
    async def test_create_and_find(self):
        """Test created tender is found by reference."""
        repo = InMemoryTenderRepository()
        created = await repo.create(**tender_fields("WRD/2024/55/K"))

        found = await repo.find_by_reference("WRD/2024/55/K")

        assert found is created
        assert created.id
        assert await repo.find_by_reference("missing") is None

    @pytest.mark.asyncio
    async def test_duplicate_reference(self):
        """Test reference numbers are unique."""
        repo = InMemoryTenderRepository()
        await repo.create(**tender_fields("WRD/2024/55/K"))

        with pytest.raises(DuplicateReferenceError) as exc_info:
            await repo.create(**tender_fields("WRD/2024/55/K"))

        assert exc_info.value.reference_number == "WRD/2024/55/K"
        assert len(repo) == 1

    @pytest.mark.asyncio
    async def test_count_by_origin(self):
        """Test scraped and manual counts."""
        repo = InMemoryTenderRepository()
        await repo.create(**tender_fields("A/0001"))
        await repo.create(**tender_fields("A/0002"))
        await repo.create(**tender_fields("M/0001", is_scraped=False))

        assert await repo.count_by_origin() == {"total": 3, "scraped": 2, "manual": 1}


class TestJsonFileTenderRepository:
    """Tests for JsonFileTenderRepository."""

    @pytest.mark.asyncio
    async def test_missing_file_starts_empty(self, tmp_path):
        """Test a missing store is not an error."""
        repo = JsonFileTenderRepository(str(tmp_path / "store" / "tenders.json"))
        assert await repo.list_all() == []

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path):
        """Test tenders survive a reload."""
        path = tmp_path / "store" / "tenders.json"
        repo = JsonFileTenderRepository(str(path))
        created = await repo.create(**tender_fields("WRD/2024/55/K"))

        reloaded = JsonFileTenderRepository(str(path))
        tender = await reloaded.find_by_reference("WRD/2024/55/K")

        assert tender.id == created.id
        assert tender.deadline == datetime(2025, 10, 15)
        assert tender.category == TenderCategory.CONSTRUCTION
        assert tender.is_scraped is True

    @pytest.mark.asyncio
    async def test_file_uses_camel_case(self, tmp_path):
        """Test the stored JSON uses the wire field names."""
        path = tmp_path / "tenders.json"
        repo = JsonFileTenderRepository(str(path))
        await repo.create(**tender_fields("WRD/2024/55/K"))

        data = json.loads(path.read_text(encoding="utf-8"))

        assert data[0]["referenceNumber"] == "WRD/2024/55/K"
        assert data[0]["isScraped"] is True
        assert data[0]["category"] == "Construction"

    @pytest.mark.asyncio
    async def test_duplicate_after_reload(self, tmp_path):
        """Test uniqueness holds against previously stored tenders."""
        path = tmp_path / "tenders.json"
        await JsonFileTenderRepository(str(path)).create(**tender_fields("WRD/2024/55/K"))

        with pytest.raises(DuplicateReferenceError):
            await JsonFileTenderRepository(str(path)).create(**tender_fields("WRD/2024/55/K"))

    @pytest.mark.asyncio
    async def test_save_runs_off_event_loop(self, tmp_path):
        """Test the file write happens outside the event loop thread."""
        save_threads = []

        class RecordingRepository(JsonFileTenderRepository):
            def _save(self):
                save_threads.append(threading.get_ident())
                super()._save()

        repo = RecordingRepository(str(tmp_path / "tenders.json"))
        await repo.create(**tender_fields("WRD/2024/55/K"))

        assert len(save_threads) == 1
        assert save_threads[0] != threading.get_ident()
        assert (tmp_path / "tenders.json").exists()

    @pytest.mark.asyncio
    async def test_failed_save_rolls_back(self, tmp_path):
        """Test a write error leaves the tender unstored."""
        class ReadOnlyRepository(JsonFileTenderRepository):
            def _save(self):
                raise PermissionError("read-only filesystem")

        repo = ReadOnlyRepository(str(tmp_path / "tenders.json"))

        with pytest.raises(OSError):
            await repo.create(**tender_fields("WRD/2024/55/K"))

        assert await repo.find_by_reference("WRD/2024/55/K") is None
