from __future__ import annotations

import logging
import time
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional

from .errors import SeatLockedError, TransitionInFlightError, UnknownSeatError
from .models import SeatStatus

logger = logging.getLogger(__name__)

StatusCallback = Callable[[str, SeatStatus], None]


class PendingTransition:
    """
    A toggle that has been accepted but not yet applied.

    The seat stays guarded until `complete()` is called (or the engine is
    cleared / the guard is released). Completing twice is a no-op.
    """

    def __init__(self, engine: "SeatStatusEngine", seat_id: str, previous: SeatStatus, target: SeatStatus, started_at: float):
        self._engine = engine
        self.seat_id = seat_id
        self.previous = previous
        self.target = target
        self.started_at = started_at
        self.done = False

    def complete(self) -> Optional[SeatStatus]:
        if self.done:
            return None
        self.done = True
        return self._engine._finish(self)

    def __repr__(self) -> str:
        return f"PendingTransition({self.seat_id!r}, {self.previous.value} -> {self.target.value})"


class SeatStatusEngine:
    """
    Per-seat status store with an at-most-one-in-flight toggle guard.

    One engine belongs to one open document. When `known_seat` is given,
    reads for seats it rejects return available and writes are dropped.
    """

    def __init__(
        self,
        known_seat: Optional[Callable[[str], bool]] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._statuses: dict[str, SeatStatus] = {}
        self._in_flight: dict[str, PendingTransition] = {}
        self._holders: dict[str, str] = {}
        self._known_seat = known_seat
        self._clock = clock

    @property
    def statuses(self) -> Mapping[str, SeatStatus]:
        return MappingProxyType(self._statuses)

    def bind(self, known_seat: Optional[Callable[[str], bool]]) -> None:
        self._known_seat = known_seat

    def _is_known(self, seat_id: str) -> bool:
        return self._known_seat is None or self._known_seat(seat_id)

    def get_status(self, seat_id: str) -> SeatStatus:
        if not self._is_known(seat_id):
            return SeatStatus.available
        return self._statuses.get(seat_id, SeatStatus.available)

    def set_status(self, seat_id: str, status: SeatStatus | str) -> bool:
        if not self._is_known(seat_id):
            logger.info("ignoring status write for unknown seat %s", seat_id)
            return False
        status = SeatStatus(status)
        self._statuses[seat_id] = status
        if status is not SeatStatus.locked:
            self._holders.pop(seat_id, None)
        return True

    def lock(self, seat_id: str, holder: Optional[str] = None) -> bool:
        if not self.set_status(seat_id, SeatStatus.locked):
            return False
        if holder:
            self._holders[seat_id] = holder
        return True

    def unlock(self, seat_id: str) -> bool:
        if self.get_status(seat_id) is not SeatStatus.locked:
            return False
        del self._statuses[seat_id]
        self._holders.pop(seat_id, None)
        return True

    def holder(self, seat_id: str) -> Optional[str]:
        return self._holders.get(seat_id)

    def holder_pairs(self) -> list[tuple[str, str]]:
        return sorted(self._holders.items())

    def load_holders(self, pairs: Iterable[tuple[str, str]]) -> int:
        """Restore lock holders. Entries for seats that are not locked are dropped."""
        loaded = 0
        for sid, email in pairs:
            if email and self._statuses.get(sid) is SeatStatus.locked:
                self._holders[sid] = email
                loaded += 1
        return loaded

    def load(self, pairs: Iterable[tuple[str, SeatStatus | str]]) -> int:
        loaded = 0
        for sid, status in pairs:
            if self.set_status(sid, status):
                loaded += 1
        return loaded

    def to_pairs(self) -> list[tuple[str, SeatStatus]]:
        return sorted(self._statuses.items())

    # --- toggling ---

    def is_in_flight(self, seat_id: str) -> bool:
        return seat_id in self._in_flight

    def in_flight(self) -> list[str]:
        return sorted(self._in_flight)

    def begin_toggle(self, seat_id: str) -> PendingTransition:
        if not self._is_known(seat_id):
            raise UnknownSeatError(seat_id)
        current = self.get_status(seat_id)
        if current is SeatStatus.locked:
            raise SeatLockedError(seat_id)
        if seat_id in self._in_flight:
            raise TransitionInFlightError(seat_id)

        target = SeatStatus.available if current is SeatStatus.occupied else SeatStatus.occupied
        pending = PendingTransition(self, seat_id, current, target, self._clock())
        self._in_flight[seat_id] = pending
        logger.debug("toggle started for %s: %s -> %s", seat_id, current.value, target.value)
        return pending

    def _finish(self, pending: PendingTransition) -> Optional[SeatStatus]:
        if self._in_flight.get(pending.seat_id) is not pending:
            logger.warning("dropping completion for %s: guard was released", pending.seat_id)
            return None
        del self._in_flight[pending.seat_id]
        if self.get_status(pending.seat_id) is SeatStatus.locked:
            logger.info("dropping completion for %s: seat was locked mid-transition", pending.seat_id)
            return None
        self._statuses[pending.seat_id] = pending.target
        return pending.target

    def toggle(self, seat_id: str, on_change: Optional[StatusCallback] = None) -> bool:
        """
        Flip available <-> occupied. Returns False when the seat is locked,
        unknown, or already mid-transition.

        `on_change` runs once with the new status while the guard is still
        held, so a re-entrant toggle for the same seat is rejected.
        """
        try:
            pending = self.begin_toggle(seat_id)
        except (SeatLockedError, TransitionInFlightError, UnknownSeatError) as e:
            logger.info("toggle rejected: %s", e)
            return False

        new_status = pending.target
        self._statuses[seat_id] = new_status
        try:
            if on_change is not None:
                on_change(seat_id, new_status)
        finally:
            pending.done = True
            if self._in_flight.get(seat_id) is pending:
                del self._in_flight[seat_id]
        return True

    def stale_transitions(self, max_age: float) -> list[str]:
        now = self._clock()
        return sorted(sid for sid, p in self._in_flight.items() if now - p.started_at > max_age)

    def release(self, seat_id: str) -> bool:
        return self._in_flight.pop(seat_id, None) is not None

    def clear(self) -> None:
        self._statuses.clear()
        self._in_flight.clear()
        self._holders.clear()
