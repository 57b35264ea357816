"""
Server-backed placement store.

Same call surface as stockcal.domain.placements.PlacementStore, so the
calendar grid and the drag controller work unchanged against the
event_placements table (multi-device sync).
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from stockcal.db.repositories import PlacementRepository
from stockcal.domain.events import EventRecord
from stockcal.domain.placements import Placement, ensure_placeable
from stockcal.utils.datetime import to_iso_date
from stockcal.utils.errors import RecordNotFoundError


class ServerPlacementStore:
    def __init__(self, db: Session, user_id: str, stock_ticker: Optional[str] = None):
        self.repo = PlacementRepository(db)
        self.user_id = user_id
        self.stock_ticker = stock_ticker.upper() if stock_ticker else None

    @staticmethod
    def _to_domain(row) -> Placement:
        return Placement(event_id=row.event_id, date=row.date, stock_ticker=row.stock_ticker)

    def placements(self) -> List[Placement]:
        rows = self.repo.list_for_user(self.user_id, stock_ticker=self.stock_ticker)
        return [self._to_domain(r) for r in rows]

    def placements_on(self, day) -> List[Placement]:
        day_str = to_iso_date(day)
        rows = self.repo.list_for_user(self.user_id, day_str, day_str, stock_ticker=self.stock_ticker)
        return [self._to_domain(r) for r in rows]

    def is_placed(self, event_id: int, day) -> bool:
        return self.repo.find(self.user_id, event_id, day, self.stock_ticker) is not None

    def place(self, event_id: int, day, event: Optional[EventRecord] = None) -> Placement:
        if event is not None:
            ensure_placeable(event)
        row, _ = self.repo.create(self.user_id, event_id, day, self.stock_ticker)
        return self._to_domain(row)

    def remove(self, event_id: int, day) -> bool:
        try:
            self.repo.delete_matching(self.user_id, event_id, day, self.stock_ticker)
        except RecordNotFoundError:
            return False
        return True
