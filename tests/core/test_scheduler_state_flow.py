import logging
import threading
import unittest

from pomodoro_blocker.scheduler import PhaseScheduler, PhaseTransition


def _quiet_logger() -> logging.Logger:
    logger = logging.getLogger("test.scheduler")
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger


class PhaseSchedulerStateFlowTests(unittest.TestCase):
    def setUp(self) -> None:
        self.scheduler = PhaseScheduler(logger=_quiet_logger())

    def _tick(self, count: int) -> list[PhaseTransition]:
        transitions = []
        for _ in range(count):
            transition = self.scheduler.tick()
            if transition is not None:
                transitions.append(transition)
        return transitions

    def test_new_scheduler_is_idle_at_work_baseline(self) -> None:
        snap = self.scheduler.snapshot()
        self.assertEqual("idle", snap.state)
        self.assertEqual("work", snap.phase)
        self.assertEqual(25 * 60, snap.remaining_seconds)
        self.assertEqual(5 * 60, snap.break_duration_seconds)
        self.assertFalse(snap.enforcement_gate)
        self.assertEqual("25:00", snap.remaining_mmss)

    def test_tick_is_noop_while_idle(self) -> None:
        self.assertIsNone(self.scheduler.tick())
        self.assertEqual(1500, self.scheduler.snapshot().remaining_seconds)

    def test_each_tick_decrements_by_exactly_one(self) -> None:
        self.scheduler.start()
        previous = self.scheduler.snapshot().remaining_seconds
        for _ in range(50):
            self.scheduler.tick()
            current = self.scheduler.snapshot().remaining_seconds
            self.assertEqual(previous - 1, current)
            previous = current

    def test_full_cycle_with_default_durations(self) -> None:
        self.scheduler.start()

        transitions = self._tick(1500)
        snap = self.scheduler.snapshot()
        self.assertEqual("break", snap.phase)
        self.assertEqual(300, snap.remaining_seconds)
        self.assertEqual("running", snap.state)
        self.assertEqual(1, len(transitions))

        transitions = self._tick(300)
        snap = self.scheduler.snapshot()
        self.assertEqual("work", snap.phase)
        self.assertEqual(1500, snap.remaining_seconds)
        self.assertEqual(1, len(transitions))
        self.assertEqual(2, snap.transitions)

    def test_configured_durations_drive_the_flip(self) -> None:
        result = self.scheduler.set_durations(10, 2)
        self.assertTrue(result.accepted)
        self.scheduler.start()

        transitions = self._tick(600)
        snap = self.scheduler.snapshot()
        self.assertEqual("break", snap.phase)
        self.assertEqual(120, snap.remaining_seconds)
        self.assertEqual(1, len(transitions))

    def test_transition_happens_in_the_tick_that_reaches_zero(self) -> None:
        self.scheduler.set_durations(1, 1)
        self.scheduler.start()

        self.assertEqual([], self._tick(59))
        self.assertEqual(1, self.scheduler.snapshot().remaining_seconds)
        transition = self.scheduler.tick()
        self.assertIsNotNone(transition)
        if transition is None:
            self.fail("Expected a phase transition")
        self.assertEqual("work", transition.previous)
        self.assertEqual("break", transition.current)
        self.assertEqual(60, transition.snapshot.remaining_seconds)

    def test_pause_freezes_remaining_and_phase(self) -> None:
        self.scheduler.start()
        self._tick(100)
        paused = self.scheduler.pause()

        self._tick(1000)
        snap = self.scheduler.snapshot()
        self.assertEqual("paused", snap.state)
        self.assertEqual(paused.remaining_seconds, snap.remaining_seconds)
        self.assertEqual(1400, snap.remaining_seconds)
        self.assertEqual("work", snap.phase)
        self.assertFalse(snap.enforcement_gate)

    def test_start_after_pause_resumes_from_same_value(self) -> None:
        self.scheduler.start()
        self._tick(10)
        self.scheduler.pause()
        resumed = self.scheduler.start()

        self.assertEqual("running", resumed.state)
        self.assertEqual(1490, resumed.remaining_seconds)
        self.scheduler.tick()
        self.assertEqual(1489, self.scheduler.snapshot().remaining_seconds)

    def test_pause_is_noop_unless_running(self) -> None:
        snap = self.scheduler.pause()
        self.assertEqual("idle", snap.state)

    def test_start_is_idempotent(self) -> None:
        self.scheduler.start()
        self._tick(5)
        snap = self.scheduler.start()
        self.assertEqual("running", snap.state)
        self.assertEqual(1495, snap.remaining_seconds)

    def test_reset_returns_to_baseline_from_any_state(self) -> None:
        self.scheduler.start()
        self._tick(1600)
        self.assertEqual("break", self.scheduler.snapshot().phase)

        snap = self.scheduler.reset()
        self.assertEqual(("idle", "work", 1500), (snap.state, snap.phase, snap.remaining_seconds))

        self.scheduler.start()
        self.scheduler.pause()
        snap = self.scheduler.reset()
        self.assertEqual(("idle", "work", 1500), (snap.state, snap.phase, snap.remaining_seconds))

    def test_reset_uses_current_work_duration(self) -> None:
        self.scheduler.start()
        self._tick(3)
        self.scheduler.pause()
        self.scheduler.set_durations(40, 10)
        snap = self.scheduler.reset()
        self.assertEqual(40 * 60, snap.remaining_seconds)

    def test_gate_is_open_only_for_running_work_phase(self) -> None:
        self.scheduler.set_durations(1, 1)
        self.scheduler.start()
        self.assertTrue(self.scheduler.snapshot().enforcement_gate)
        self._tick(60)
        self.assertFalse(self.scheduler.snapshot().enforcement_gate)
        self._tick(60)
        self.assertTrue(self.scheduler.snapshot().enforcement_gate)

    def test_constructor_rejects_non_positive_durations(self) -> None:
        with self.assertRaises(ValueError):
            PhaseScheduler(work_minutes=0)


class PhaseSchedulerDurationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.scheduler = PhaseScheduler(logger=_quiet_logger())

    def test_rejected_while_running(self) -> None:
        self.scheduler.start()
        result = self.scheduler.set_durations(10, 2)
        self.assertFalse(result.accepted)
        self.assertEqual("running", result.reason)
        self.assertEqual(1500, result.snapshot.work_duration_seconds)
        self.assertEqual(300, result.snapshot.break_duration_seconds)

    def test_out_of_range_values_are_rejected_without_mutation(self) -> None:
        for work, brk in ((0, 5), (121, 5), (25, 0), (25, 61), (-3, 5)):
            result = self.scheduler.set_durations(work, brk)
            self.assertFalse(result.accepted)
            self.assertEqual("out_of_range", result.reason)
            self.assertEqual(1500, result.snapshot.remaining_seconds)
            self.assertEqual(300, result.snapshot.break_duration_seconds)

    def test_range_bounds_are_inclusive(self) -> None:
        self.assertTrue(self.scheduler.set_durations(1, 1).accepted)
        self.assertTrue(self.scheduler.set_durations(120, 60).accepted)
        self.assertEqual(120 * 60, self.scheduler.snapshot().remaining_seconds)

    def test_non_integer_values_are_rejected(self) -> None:
        for work, brk in (("10", 5), (10.5, 5), (True, 5), (25, None)):
            result = self.scheduler.set_durations(work, brk)  # type: ignore[arg-type]
            self.assertFalse(result.accepted)
            self.assertEqual("invalid", result.reason)

    def test_idle_change_moves_remaining_to_new_work_duration(self) -> None:
        result = self.scheduler.set_durations(50, 10)
        self.assertTrue(result.accepted)
        self.assertEqual("updated", result.reason)
        self.assertEqual(3000, result.snapshot.remaining_seconds)
        self.assertEqual("work", result.snapshot.phase)

    def test_snapshot_reports_whether_durations_already_match(self) -> None:
        snap = self.scheduler.snapshot()
        self.assertTrue(snap.has_durations(25, 5))
        self.assertFalse(snap.has_durations(25, 6))
        self.assertFalse(snap.has_durations(30, 5))

        snap = self.scheduler.set_durations(30, 10).snapshot
        self.assertTrue(snap.has_durations(30, 10))

    def test_paused_change_keeps_remaining_and_applies_next_phase(self) -> None:
        self.scheduler.set_durations(1, 1)
        self.scheduler.start()
        for _ in range(30):
            self.scheduler.tick()
        self.scheduler.pause()

        result = self.scheduler.set_durations(2, 3)
        self.assertTrue(result.accepted)
        self.assertEqual(30, result.snapshot.remaining_seconds)

        self.scheduler.start()
        for _ in range(30):
            self.scheduler.tick()
        snap = self.scheduler.snapshot()
        self.assertEqual("break", snap.phase)
        self.assertEqual(180, snap.remaining_seconds)


class PhaseSchedulerListenerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.scheduler = PhaseScheduler(logger=_quiet_logger())
        self.scheduler.set_durations(1, 1)

    def test_listener_fires_once_per_transition(self) -> None:
        seen: list[tuple[str, str]] = []
        self.scheduler.add_transition_listener(lambda t: seen.append((t.previous, t.current)))
        self.scheduler.start()
        for _ in range(180):
            self.scheduler.tick()

        self.assertEqual(
            [("work", "break"), ("break", "work"), ("work", "break")],
            seen,
        )

    def test_listener_runs_synchronously_inside_tick(self) -> None:
        seen: list[int] = []
        self.scheduler.add_transition_listener(lambda t: seen.append(t.snapshot.remaining_seconds))
        self.scheduler.start()
        for _ in range(59):
            self.scheduler.tick()
        self.assertEqual([], seen)
        self.scheduler.tick()
        self.assertEqual([60], seen)

    def test_failing_listener_does_not_break_tick_or_other_listeners(self) -> None:
        seen: list[str] = []

        def _boom(_t) -> None:
            raise RuntimeError("speaker unplugged")

        self.scheduler.add_transition_listener(_boom)
        self.scheduler.add_transition_listener(lambda t: seen.append(t.current))
        self.scheduler.start()
        for _ in range(60):
            self.scheduler.tick()

        self.assertEqual(["break"], seen)
        self.assertEqual("break", self.scheduler.snapshot().phase)

    def test_removed_listener_is_not_called(self) -> None:
        seen: list[str] = []

        def listener(t) -> None:
            seen.append(t.current)

        self.scheduler.add_transition_listener(listener)
        self.scheduler.remove_transition_listener(listener)
        self.scheduler.start()
        for _ in range(60):
            self.scheduler.tick()
        self.assertEqual([], seen)

    def test_concurrent_ticks_never_drop_or_double_count(self) -> None:
        transitions: list[str] = []
        self.scheduler.add_transition_listener(lambda t: transitions.append(t.current))
        self.scheduler.start()

        def _worker() -> None:
            for _ in range(60):
                self.scheduler.tick()

        threads = [threading.Thread(target=_worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        snap = self.scheduler.snapshot()
        self.assertEqual(4, len(transitions))
        self.assertEqual(4, snap.transitions)
        self.assertEqual("work", snap.phase)
        self.assertEqual(60, snap.remaining_seconds)


if __name__ == "__main__":
    unittest.main()
