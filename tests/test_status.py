import unittest

from seatmap.errors import SeatLockedError, TransitionInFlightError, UnknownSeatError
from seatmap.models import SeatStatus
from seatmap.status import SeatStatusEngine


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestSeatStatusEngine(unittest.TestCase):
    def test_default_available(self):
        self.assertIs(SeatStatusEngine().get_status("A-R1-S1"), SeatStatus.available)

    def test_back_to_back_toggles_apply_once(self):
        engine = SeatStatusEngine()
        pending = engine.begin_toggle("s1")
        with self.assertRaises(TransitionInFlightError):
            engine.begin_toggle("s1")
        self.assertFalse(engine.toggle("s1"))
        self.assertIs(engine.get_status("s1"), SeatStatus.available)

        self.assertIs(pending.complete(), SeatStatus.occupied)
        self.assertIs(engine.get_status("s1"), SeatStatus.occupied)
        self.assertFalse(engine.is_in_flight("s1"))

        engine.begin_toggle("s1").complete()
        self.assertIs(engine.get_status("s1"), SeatStatus.available)

    def test_complete_twice_is_noop(self):
        engine = SeatStatusEngine()
        pending = engine.begin_toggle("s1")
        pending.complete()
        self.assertIsNone(pending.complete())
        self.assertIs(engine.get_status("s1"), SeatStatus.occupied)

    def test_toggle_callback_runs_once_and_guards_reentry(self):
        engine = SeatStatusEngine()
        calls = []

        def on_change(seat_id, status):
            calls.append((seat_id, status))
            self.assertTrue(engine.is_in_flight(seat_id))
            self.assertFalse(engine.toggle(seat_id, on_change))

        self.assertTrue(engine.toggle("s1", on_change))
        self.assertEqual(calls, [("s1", SeatStatus.occupied)])
        self.assertIs(engine.get_status("s1"), SeatStatus.occupied)
        self.assertFalse(engine.is_in_flight("s1"))

        self.assertTrue(engine.toggle("s1", on_change))
        self.assertIs(engine.get_status("s1"), SeatStatus.available)

    def test_independent_seats(self):
        engine = SeatStatusEngine()
        a = engine.begin_toggle("a")
        b = engine.begin_toggle("b")
        b.complete()
        a.complete()
        self.assertIs(engine.get_status("a"), SeatStatus.occupied)
        self.assertIs(engine.get_status("b"), SeatStatus.occupied)

    def test_locked_rejected(self):
        engine = SeatStatusEngine()
        engine.set_status("s1", SeatStatus.locked)
        self.assertFalse(engine.toggle("s1"))
        with self.assertRaises(SeatLockedError):
            engine.begin_toggle("s1")
        self.assertIs(engine.get_status("s1"), SeatStatus.locked)

    def test_lock_mid_flight_wins(self):
        engine = SeatStatusEngine()
        pending = engine.begin_toggle("s1")
        engine.lock("s1")
        self.assertIsNone(pending.complete())
        self.assertIs(engine.get_status("s1"), SeatStatus.locked)

    def test_lock_holder_and_unlock(self):
        engine = SeatStatusEngine()
        self.assertTrue(engine.lock("s1", "guest@example.com"))
        self.assertEqual(engine.holder("s1"), "guest@example.com")
        self.assertTrue(engine.unlock("s1"))
        self.assertIsNone(engine.holder("s1"))
        self.assertIs(engine.get_status("s1"), SeatStatus.available)
        self.assertFalse(engine.unlock("s1"))

    def test_unknown_seats(self):
        engine = SeatStatusEngine(lambda sid: sid.startswith("A-"))
        self.assertFalse(engine.set_status("B-R1-S1", SeatStatus.occupied))
        self.assertIs(engine.get_status("B-R1-S1"), SeatStatus.available)
        self.assertFalse(engine.toggle("B-R1-S1"))
        with self.assertRaises(UnknownSeatError):
            engine.begin_toggle("B-R1-S1")
        self.assertTrue(engine.set_status("A-R1-S1", "occupied"))
        self.assertIs(engine.get_status("A-R1-S1"), SeatStatus.occupied)

    def test_stale_in_flight_stays_until_released(self):
        clock = FakeClock()
        engine = SeatStatusEngine(clock=clock)
        pending = engine.begin_toggle("s1")
        clock.now = 10.0
        self.assertEqual(engine.stale_transitions(5.0), ["s1"])
        self.assertEqual(engine.stale_transitions(30.0), [])
        self.assertFalse(engine.toggle("s1"))

        self.assertTrue(engine.release("s1"))
        self.assertIsNone(pending.complete())
        self.assertIs(engine.get_status("s1"), SeatStatus.available)
        self.assertTrue(engine.toggle("s1"))

    def test_set_status_bypasses_guard(self):
        engine = SeatStatusEngine()
        engine.begin_toggle("s1")
        self.assertTrue(engine.set_status("s1", SeatStatus.occupied))
        self.assertTrue(engine.is_in_flight("s1"))

    def test_clear(self):
        engine = SeatStatusEngine()
        engine.set_status("s1", SeatStatus.occupied)
        engine.begin_toggle("s2")
        engine.clear()
        self.assertEqual(engine.to_pairs(), [])
        self.assertEqual(engine.in_flight(), [])

    def test_load_and_pairs(self):
        engine = SeatStatusEngine()
        self.assertEqual(engine.load([("b", "locked"), ("a", SeatStatus.occupied)]), 2)
        self.assertEqual(engine.to_pairs(), [("a", SeatStatus.occupied), ("b", SeatStatus.locked)])
        with self.assertRaises(TypeError):
            engine.statuses["c"] = SeatStatus.occupied


if __name__ == "__main__":
    unittest.main()
