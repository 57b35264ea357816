"""
Month calendar composition and drag-and-drop placement.

build_month_grid() lays the filtered catalog onto a Sunday-first month
view: every event appears on its native date ("default" occurrences), and
events the user placed appear again on their placement dates.

DragController is the drag-and-drop state machine behind the grid:

    idle --start_drag--> dragging --enter_day--> over_day
    over_day --leave_day--> dragging
    dragging --enter_trash--> over_trash --leave_trash--> dragging
    over_day | over_trash --drop--> idle

Only placed blocks can be trashed; default occurrences render from the
event's own date and are not removable. Fixed-date events never start a drag.
"""

import calendar
import time
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from loguru import logger

from stockcal.domain.events import EventRecord
from stockcal.domain.filters import EventFilters, filter_events
from stockcal.domain.placements import Placement, PlacementStore, ensure_placeable
from stockcal.utils.datetime import to_calendar_date, to_iso_date
from stockcal.utils.errors import InvalidDragTransitionError

MESSAGE_TTL_SECONDS = 2.0

REMOVED_MESSAGE = "Event removed from calendar"
DEFAULT_EVENT_MESSAGE = "Cannot remove default events"


# ============================================================================
# Month grid
# ============================================================================

@dataclass
class DayCell:
    date: date
    in_month: bool
    is_today: bool
    default_events: List[EventRecord] = field(default_factory=list)
    placed_events: List[EventRecord] = field(default_factory=list)

    @property
    def event_count(self) -> int:
        return len(self.default_events) + len(self.placed_events)


@dataclass
class MonthGrid:
    year: int
    month: int
    weeks: List[List[DayCell]]
    visible_event_count: int

    def days(self) -> List[DayCell]:
        return [day for week in self.weeks for day in week]

    def cell(self, day) -> Optional[DayCell]:
        target = to_calendar_date(day)
        for cell in self.days():
            if cell.date == target:
                return cell
        return None


def month_bounds(year: int, month: int) -> tuple:
    """First and last day shown for the month (full Sunday-first weeks)."""
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    # date.weekday(): Monday=0 ... Sunday=6
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    end = last + timedelta(days=(5 - last.weekday()) % 7)
    return start, end


def build_month_grid(
    year: int,
    month: int,
    events: Iterable[EventRecord],
    placements: Iterable[Placement],
    filters: Optional[EventFilters] = None,
    query: str = "",
    today: Optional[date] = None,
) -> MonthGrid:
    """
    Compose the month view from the catalog, the user's placements and the filters.

    Args:
        year: Calendar year
        month: Calendar month (1-12)
        events: Catalog events in display order
        placements: Placements for the calendar scope being rendered
        filters: Event filters (placed events are filtered too)
        query: Free-text search
        today: Override for the highlighted current day

    Returns:
        MonthGrid of Sunday-first weeks
    """
    today = today or date.today()
    visible = filter_events(events, filters, query).events
    visible_by_id = {e.id: e for e in visible}

    defaults_by_day: Dict[date, List[EventRecord]] = {}
    for event in visible:
        defaults_by_day.setdefault(event.calendar_date, []).append(event)

    placed_by_day: Dict[date, List[EventRecord]] = {}
    for placement in placements:
        event = visible_by_id.get(placement.event_id)
        if event is None:
            continue
        day = to_calendar_date(placement.date)
        bucket = placed_by_day.setdefault(day, [])
        if event not in bucket:
            bucket.append(event)

    start, end = month_bounds(year, month)
    weeks: List[List[DayCell]] = []
    current = start
    while current <= end:
        week = []
        for _ in range(7):
            week.append(DayCell(
                date=current,
                in_month=current.month == month,
                is_today=current == today,
                default_events=defaults_by_day.get(current, []),
                placed_events=placed_by_day.get(current, []),
            ))
            current += timedelta(days=1)
        weeks.append(week)

    return MonthGrid(year=year, month=month, weeks=weeks, visible_event_count=len(visible))


# ============================================================================
# Drag and drop
# ============================================================================

class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    OVER_DAY = "over_day"
    OVER_TRASH = "over_trash"


@dataclass
class DropResult:
    action: str  # "placed", "removed", "rejected"
    event_id: int
    date: Optional[str] = None
    message: Optional[str] = None


class DragController:
    """Drives placements from drag gestures on the month grid."""

    def __init__(self, store: PlacementStore, clock: Callable[[], float] = time.monotonic):
        self.store = store
        self.clock = clock
        self.state = DragState.IDLE
        self.dragged: Optional[EventRecord] = None
        self.dragged_from: Optional[str] = None
        self.highlighted_day: Optional[str] = None
        self._message: Optional[str] = None
        self._message_expires_at = 0.0

    # -- transient confirmation message --------------------------------------

    @property
    def message(self) -> Optional[str]:
        if self._message and self.clock() >= self._message_expires_at:
            self._message = None
        return self._message

    def _flash(self, text: str) -> None:
        self._message = text
        self._message_expires_at = self.clock() + MESSAGE_TTL_SECONDS

    # -- transitions ----------------------------------------------------------

    def _require(self, *states: DragState) -> None:
        if self.state not in states:
            raise InvalidDragTransitionError(
                f"Action not allowed while {self.state.value}",
                details={"state": self.state.value, "allowed": [s.value for s in states]},
            )

    def start_drag(self, event: EventRecord, placed_on=None) -> None:
        """
        Pick up an event block.

        Args:
            event: Event under the pointer
            placed_on: Date of the placed block being dragged, or None for
                a default occurrence or an event pool card
        """
        self._require(DragState.IDLE)
        ensure_placeable(event)
        self.dragged = event
        self.dragged_from = to_iso_date(placed_on) if placed_on is not None else None
        self.state = DragState.DRAGGING

    def enter_day(self, day) -> None:
        self._require(DragState.DRAGGING, DragState.OVER_DAY)
        self.highlighted_day = to_iso_date(day)
        self.state = DragState.OVER_DAY

    def leave_day(self) -> None:
        self._require(DragState.OVER_DAY)
        self.highlighted_day = None
        self.state = DragState.DRAGGING

    def enter_trash(self) -> None:
        self._require(DragState.DRAGGING)
        self.state = DragState.OVER_TRASH

    def leave_trash(self) -> None:
        self._require(DragState.OVER_TRASH)
        self.state = DragState.DRAGGING

    def drop(self) -> DropResult:
        self._require(DragState.OVER_DAY, DragState.OVER_TRASH)
        event = self.dragged
        try:
            if self.state == DragState.OVER_DAY:
                placement = self.store.place(event.id, self.highlighted_day, event=event)
                logger.info(f"Placed event {event.id} on {placement.date}")
                return DropResult(action="placed", event_id=event.id, date=placement.date)

            if self.dragged_from is not None and self.store.is_placed(event.id, self.dragged_from):
                self.store.remove(event.id, self.dragged_from)
                self._flash(REMOVED_MESSAGE)
                return DropResult(action="removed", event_id=event.id, date=self.dragged_from, message=REMOVED_MESSAGE)

            self._flash(DEFAULT_EVENT_MESSAGE)
            return DropResult(action="rejected", event_id=event.id, message=DEFAULT_EVENT_MESSAGE)
        finally:
            self._reset()

    def cancel(self) -> None:
        """Drag ended without a drop (pointer released elsewhere)."""
        self._reset()

    def _reset(self) -> None:
        self.state = DragState.IDLE
        self.dragged = None
        self.dragged_from = None
        self.highlighted_day = None
