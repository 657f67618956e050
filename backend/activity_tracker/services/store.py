"""
Keyed document store holding daily activity aggregates.
"""
import copy
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ActivityStore:
    """Keyed get/merge access to daily activity documents.

    ``merge`` upserts: it creates the document when absent, otherwise
    overwrites only the given top-level fields. The store assigns
    ``updatedAt`` on every write. No read-modify-write atomicity is offered.
    """

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    async def merge(self, key: str, fields: Dict[str, Any]) -> None:
        raise NotImplementedError

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class InMemoryActivityStore(ActivityStore):
    """Process-local store for development and tests."""

    def __init__(self):
        self._documents: Dict[str, Dict[str, Any]] = {}

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        doc = self._documents.get(key)
        if doc is None:
            logger.debug(f"Store miss for {key}")
            return None
        return copy.deepcopy(doc)

    async def merge(self, key: str, fields: Dict[str, Any]) -> None:
        doc = self._documents.setdefault(key, {"_id": key})
        doc.update(copy.deepcopy(fields))
        doc["updatedAt"] = datetime.now(timezone.utc)

    def clear(self) -> None:
        self._documents.clear()

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, key: str) -> bool:
        return key in self._documents
