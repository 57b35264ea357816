"""
Per-user placement store.

A placement pins a catalog event to a calendar date chosen by the user,
distinct from the event's native date. Placements are kept in a small
key-value store, one JSON document per (user, calendar scope), and every
mutation rewrites the whole set synchronously.
"""

import json
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from loguru import logger

from stockcal.domain.events import EventRecord
from stockcal.utils.datetime import to_iso_date
from stockcal.utils.errors import FixedDateEventError, InvalidDateError


# ============================================================================
# Key-value storage
# ============================================================================

class KeyValueStore(ABC):
    """Minimal string key-value interface (browser-local-storage shaped)."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Durable key-value store backed by one JSON file.

    The file is rewritten on every set/delete. Safe for one process; a
    lock serializes writers within it. An unreadable file reads as empty
    and is moved aside to ``<name>.corrupt`` before the next rewrite.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> Tuple[Dict[str, str], bool]:
        """Stored documents and whether the file on disk was readable."""
        if not self.path.exists():
            return {}, True
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Key-value file {self.path} is corrupt, reading as empty: {e}")
            return {}, False
        if not isinstance(data, dict):
            logger.error(f"Key-value file {self.path} does not hold an object, reading as empty")
            return {}, False
        return {k: v for k, v in data.items() if isinstance(v, str)}, True

    def _quarantine(self) -> None:
        target = self.path.with_suffix(self.path.suffix + ".corrupt")
        self.path.replace(target)
        logger.warning(f"Moved unreadable key-value file {self.path} to {target}")

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            data, _ = self._read_all()
            return data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data, readable = self._read_all()
            if not readable:
                self._quarantine()
            data[key] = value
            self._write_all(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data, readable = self._read_all()
            if key in data:
                del data[key]
                self._write_all(data)
            elif not readable:
                logger.warning(f"Skipped delete of {key}: {self.path} is unreadable")


# ============================================================================
# Placement store
# ============================================================================

@dataclass(frozen=True)
class Placement:
    event_id: int
    date: str
    stock_ticker: Optional[str] = None


def placement_storage_key(user_id: str, stock_ticker: Optional[str] = None) -> str:
    """Storage namespace for one user's calendar (global or per ticker)."""
    key = f"event-placements-{user_id}"
    if stock_ticker:
        key += f"-{stock_ticker.upper()}"
    return key


def ensure_placeable(event: EventRecord) -> None:
    """Fixed-date events stay pinned to their native date."""
    if event.is_fixed_date:
        raise FixedDateEventError(
            f"Event {event.id} has a fixed date and cannot be placed",
            details={"event_id": event.id},
        )


class PlacementStore:
    """Placements for one user and one calendar scope."""

    def __init__(self, store: KeyValueStore, user_id: str, stock_ticker: Optional[str] = None):
        self.store = store
        self.user_id = user_id
        self.stock_ticker = stock_ticker.upper() if stock_ticker else None
        self.storage_key = placement_storage_key(user_id, self.stock_ticker)
        self._placements: List[Placement] = self._load()

    def _load(self) -> List[Placement]:
        raw = self.store.get(self.storage_key)
        if not raw:
            return []
        try:
            items = json.loads(raw)
            return [
                Placement(event_id=int(item["eventId"]), date=to_iso_date(item["date"]), stock_ticker=self.stock_ticker)
                for item in items
            ]
        except (ValueError, TypeError, KeyError, InvalidDateError) as e:
            logger.error(f"Failed to parse placements for {self.storage_key}: {e}")
            return []

    def _persist(self) -> None:
        payload = [{"eventId": p.event_id, "date": p.date} for p in self._placements]
        self.store.set(self.storage_key, json.dumps(payload))

    def placements(self) -> List[Placement]:
        return list(self._placements)

    def placements_on(self, day) -> List[Placement]:
        day_str = to_iso_date(day)
        return [p for p in self._placements if p.date == day_str]

    def is_placed(self, event_id: int, day) -> bool:
        day_str = to_iso_date(day)
        return any(p.event_id == event_id and p.date == day_str for p in self._placements)

    def place(self, event_id: int, day, event: Optional[EventRecord] = None) -> Placement:
        """Place an event on a date. Returns the existing placement on repeat calls."""
        if event is not None:
            ensure_placeable(event)
        day_str = to_iso_date(day)
        for existing in self._placements:
            if existing.event_id == event_id and existing.date == day_str:
                return existing

        placement = Placement(event_id=event_id, date=day_str, stock_ticker=self.stock_ticker)
        self._placements.append(placement)
        self._persist()
        logger.debug(f"Saved placement user={self.user_id} event={event_id} date={day_str}")
        return placement

    def remove(self, event_id: int, day) -> bool:
        """Remove the (event, date) placement. Returns False when none existed."""
        day_str = to_iso_date(day)
        remaining = [p for p in self._placements if not (p.event_id == event_id and p.date == day_str)]
        if len(remaining) == len(self._placements):
            return False
        self._placements = remaining
        self._persist()
        logger.debug(f"Removed placement user={self.user_id} event={event_id} date={day_str}")
        return True

    def to_dicts(self) -> List[dict]:
        return [asdict(p) for p in self._placements]
