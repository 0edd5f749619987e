"""
Repositories - Key-Value Storage for Analyses and Buyer Profiles

In-memory storage keyed by an opaque id, with optional persistence to a
single JSON file. Good enough for development and single-process
deployments; the scoring core never touches it.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from core.buyer_profile import BuyerProfile
from core.models import AnalysisRecord, AnalysisStatus


logger = logging.getLogger(__name__)


# =============================================================================
# Key-Value Store
# =============================================================================


class KeyValueStore:
    """
    Dictionary-of-dictionaries store.

    Values must be JSON-serialisable. When a persist path is given the
    whole store is rewritten on every change and loaded on construction.
    """

    def __init__(self, persist_path: Optional[str] = None):
        """
        Initialise store.

        Args:
            persist_path: Optional path to persist data to JSON file
        """
        self._items: dict[str, dict] = {}
        self._persist_path = Path(persist_path) if persist_path else None

        if self._persist_path and self._persist_path.exists():
            self._load_from_file()

    def _save_to_file(self) -> None:
        if not self._persist_path:
            return

        data = {
            "items": self._items,
            "saved_at": datetime.utcnow().isoformat(),
        }
        self._persist_path.parent.mkdir(parents=True, exist_ok=True)
        self._persist_path.write_text(json.dumps(data, indent=2))

    def _load_from_file(self) -> None:
        try:
            data = json.loads(self._persist_path.read_text())
            items = data.get("items", {})
            if not isinstance(items, dict):
                raise ValueError("items must be an object")
            self._items = {str(k): v for k, v in items.items()}
        except (json.JSONDecodeError, ValueError, AttributeError) as e:
            logger.warning("Could not load store %s, starting empty: %s", self._persist_path, e)

    def put(self, key: str, value: dict) -> None:
        self._items[key] = value
        self._save_to_file()

    def get(self, key: str) -> Optional[dict]:
        return self._items.get(key)

    def delete(self, key: str) -> bool:
        if key not in self._items:
            return False
        del self._items[key]
        self._save_to_file()
        return True

    def keys(self) -> list[str]:
        return list(self._items.keys())

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)


# =============================================================================
# Analysis Repository
# =============================================================================


class AnalysisRepository:
    """
    Storage for analysis records.

    Records are stored as dictionaries, so callers always receive fresh
    objects and must save() after a status transition.
    """

    def __init__(self, persist_path: Optional[str] = None, store: Optional[KeyValueStore] = None):
        self._store = store or KeyValueStore(persist_path)

    def create(
        self,
        address: str,
        listing_text: Optional[str] = None,
        list_price: Optional[int] = None,
        property_type: Optional[str] = None,
    ) -> AnalysisRecord:
        """Create and store a pending record with a fresh id."""
        record = AnalysisRecord(
            id=uuid.uuid4().hex,
            address=address,
            listing_text=listing_text,
            list_price=list_price,
            property_type=property_type,
        )
        self._store.put(record.id, record.to_dict())
        return record

    def get(self, analysis_id: str) -> Optional[AnalysisRecord]:
        data = self._store.get(analysis_id)
        if data is None:
            return None
        return AnalysisRecord.from_dict(data)

    def save(self, record: AnalysisRecord) -> AnalysisRecord:
        self._store.put(record.id, record.to_dict())
        return record

    def delete(self, analysis_id: str) -> bool:
        return self._store.delete(analysis_id)

    def list(self, status: Optional[AnalysisStatus] = None) -> list[AnalysisRecord]:
        """All records, newest first, optionally filtered by status."""
        records = [AnalysisRecord.from_dict(self._store.get(k)) for k in self._store.keys()]
        if status is not None:
            records = [r for r in records if r.status == status]
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    def __iter__(self) -> Iterator[AnalysisRecord]:
        return iter(self.list())

    def __len__(self) -> int:
        return len(self._store)


# =============================================================================
# Buyer Profile Repository
# =============================================================================


class BuyerProfileRepository:
    """Storage for buyer profiles keyed by profile id."""

    def __init__(self, persist_path: Optional[str] = None, store: Optional[KeyValueStore] = None):
        self._store = store or KeyValueStore(persist_path)

    def save(self, profile_id: str, profile: BuyerProfile) -> None:
        """Store a profile, replacing any earlier one under the same id."""
        data = profile.to_dict()
        data["id"] = profile_id
        self._store.put(profile_id, data)

    def get(self, profile_id: str) -> Optional[BuyerProfile]:
        data = self._store.get(profile_id)
        if data is None:
            return None
        return BuyerProfile.from_dict(data)

    def delete(self, profile_id: str) -> bool:
        return self._store.delete(profile_id)

    def __len__(self) -> int:
        return len(self._store)


# =============================================================================
# Singletons
# =============================================================================

_analysis_repository: Optional[AnalysisRepository] = None
_profile_repository: Optional[BuyerProfileRepository] = None


def get_analysis_repository() -> AnalysisRepository:
    """Process-wide analysis repository, configured from the environment."""
    global _analysis_repository
    if _analysis_repository is None:
        from utils.config import Config

        _analysis_repository = AnalysisRepository(Config.load().analyses_path)
    return _analysis_repository


def get_profile_repository() -> BuyerProfileRepository:
    """Process-wide profile repository, configured from the environment."""
    global _profile_repository
    if _profile_repository is None:
        from utils.config import Config

        _profile_repository = BuyerProfileRepository(Config.load().profiles_path)
    return _profile_repository
