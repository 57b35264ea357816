"""Most-recent-first ticker search history kept in a key-value store."""

import json
from typing import List

from loguru import logger

from stockcal.domain.placements import KeyValueStore

MAX_RECENT_SEARCHES = 5


class RecentSearches:
    def __init__(self, store: KeyValueStore, user_id: str, limit: int = MAX_RECENT_SEARCHES):
        self.store = store
        self.key = f"stock-recent-searches-{user_id}"
        self.limit = limit

    def list(self) -> List[str]:
        raw = self.store.get(self.key)
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to load recent searches for {self.key}: {e}")
            return []
        return [str(t) for t in items][: self.limit]

    def add(self, ticker: str) -> List[str]:
        upper = ticker.strip().upper()
        if not upper:
            return self.list()
        updated = [upper] + [t for t in self.list() if t != upper]
        updated = updated[: self.limit]
        self.store.set(self.key, json.dumps(updated))
        return updated

    def clear(self) -> None:
        self.store.delete(self.key)
