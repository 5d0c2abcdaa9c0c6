"""
Tender storage.

The repository enforces reference-number uniqueness itself; the import
pipeline's "skip if exists" check is only a first line.
"""

import asyncio
import json
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import structlog

from .core.models import Tender

logger = structlog.get_logger(__name__)


class DuplicateReferenceError(Exception):
    """A tender with this reference number is already stored."""

    def __init__(self, reference_number: str):
        super().__init__(f"Tender already exists: {reference_number}")
        self.reference_number = reference_number


class TenderRepository(ABC):
    """Abstract tender store."""

    @abstractmethod
    async def find_by_reference(self, reference_number: str) -> Optional[Tender]:
        """
        Look up a tender by reference number.

        Args:
            reference_number: Unique tender reference

        Returns:
            Tender or None
        """
        pass

    @abstractmethod
    async def create(self, **fields) -> Tender:
        """
        Store a new tender.

        Args:
            **fields: Tender fields except id and created_at

        Returns:
            Stored Tender

        Raises:
            DuplicateReferenceError: If reference_number is taken
        """
        pass

    @abstractmethod
    async def list_all(self) -> list[Tender]:
        """All stored tenders in insertion order."""
        pass

    async def count_by_origin(self) -> dict:
        """
        Count scraped vs manually entered tenders.

        Returns:
            Dict with keys: total, scraped, manual
        """
        tenders = await self.list_all()
        scraped = sum(1 for t in tenders if t.is_scraped)
        return {
            "total": len(tenders),
            "scraped": scraped,
            "manual": len(tenders) - scraped,
        }


class InMemoryTenderRepository(TenderRepository):
    """Dict-backed repository for tests and test mode."""

    def __init__(self):
        self._tenders: dict[str, Tender] = {}
        self._lock = asyncio.Lock()

    async def find_by_reference(self, reference_number: str) -> Optional[Tender]:
        return self._tenders.get(reference_number)

    async def create(self, **fields) -> Tender:
        async with self._lock:
            reference_number = fields["reference_number"]
            if reference_number in self._tenders:
                raise DuplicateReferenceError(reference_number)

            tender = Tender(id=str(uuid.uuid4()), **fields)
            self._tenders[reference_number] = tender
            return tender

    async def list_all(self) -> list[Tender]:
        return list(self._tenders.values())

    def __len__(self) -> int:
        return len(self._tenders)


class JsonFileTenderRepository(InMemoryTenderRepository):
    """
    Repository persisted to a single JSON file.

    The whole file is rewritten after every create, in a worker thread
    so the event loop keeps serving while the lock is held. Fine for the
    few hundred tenders a portal lists; not meant as a database.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.info("store_not_found_starting_empty", path=str(self.path))
            return

        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)

        for item in data:
            tender = Tender.from_dict(item)
            self._tenders[tender.reference_number] = tender

        logger.info("store_loaded", path=str(self.path), tenders=len(self._tenders))

    def _save(self) -> None:
        os.makedirs(self.path.parent, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump([t.to_dict() for t in self._tenders.values()], f, ensure_ascii=False, indent=2)

        os.replace(tmp_path, self.path)

    async def create(self, **fields) -> Tender:
        async with self._lock:
            reference_number = fields["reference_number"]
            if reference_number in self._tenders:
                raise DuplicateReferenceError(reference_number)

            tender = Tender(id=str(uuid.uuid4()), **fields)
            self._tenders[reference_number] = tender
            try:
                await asyncio.to_thread(self._save)
            except OSError:
                del self._tenders[reference_number]
                raise

            logger.debug("tender_stored", ref=reference_number, path=str(self.path))
            return tender
