import unittest

from .instances import InstancePool
from .records import PartyRecord
from .runner import PartyRunner
from .timers import ClearTimer, TimerFactory


class TestClearTimer(unittest.TestCase):
    def test_draw_is_inclusive_and_in_range(self):
        timer = ClearTimer(1, 3)
        draws = {timer.draw() for _ in range(300)}
        self.assertEqual(draws, {1, 2, 3})

    def test_wait_scales_simulated_seconds(self):
        slept = []
        timer = ClearTimer(2, 4, seconds_per_unit=0.5, sleep=slept.append)
        timer.wait(3)
        self.assertEqual(slept, [1.5])

    def test_factory_seed_is_reproducible(self):
        a = TimerFactory(1, 15, seed=42)
        b = TimerFactory(1, 15, seed=42)
        draws_a = [a.create_timer().draw() for _ in range(20)]
        draws_b = [b.create_timer().draw() for _ in range(20)]
        self.assertEqual(draws_a, draws_b)

    def test_negative_time_scale_rejected(self):
        with self.assertRaises(ValueError):
            ClearTimer(1, 3, seconds_per_unit=-0.5)
        with self.assertRaises(ValueError):
            TimerFactory(1, 3, seconds_per_unit=-1.0)

    def test_zero_time_scale_allowed(self):
        slept = []
        timer = TimerFactory(2, 2, seconds_per_unit=0.0, sleep=slept.append).create_timer()
        timer.wait(timer.draw())
        self.assertEqual(slept, [0.0])


class TestPartyRunner(unittest.TestCase):
    def setUp(self):
        self.pool = InstancePool(capacity=2)
        self.slept = []
        self.timer = ClearTimer(4, 4, sleep=self.slept.append)

    def test_run_releases_slot_with_clear_time(self):
        slot = self.pool.try_claim_idle_slot()
        events = []
        runner = PartyRunner(
            slot,
            self.pool,
            self.timer,
            on_enter=[lambda i, t: events.append(("enter", i, t, self.pool.any_active()))],
            on_complete=[lambda i, t: events.append(("complete", i, t, self.pool.any_active()))],
        )
        runner.run()

        self.assertEqual(runner.clear_time, 4)
        self.assertEqual(self.slept, [4])
        self.assertEqual(self.pool.slot_stats()[0], (1, 1, 4))
        # 进入时副本处于活动状态，完成回调在释放之后
        self.assertEqual(events, [("enter", 1, 4, True), ("complete", 1, 4, False)])

    def test_failing_listener_still_releases_slot(self):
        slot = self.pool.try_claim_idle_slot()

        def broken(instance_id, clear_time):
            raise RuntimeError("display failed")

        records = PartyRecord()
        runner = PartyRunner(slot, self.pool, self.timer, records=records, on_enter=[broken])
        with self.assertRaises(RuntimeError):
            runner.run()
        self.assertFalse(self.pool.any_active())
        self.assertEqual(self.pool.slot_stats()[0], (1, 1, 4))

        # 回调出错时详单仍然被关闭
        record = records.get_record(runner.record_id)
        self.assertIsNotNone(record["end_time"])
        self.assertEqual(records.get_summary()["completed_parties"], 1)
        records.close()

    def test_run_writes_party_record(self):
        records = PartyRecord()
        slot = self.pool.try_claim_idle_slot()
        runner = PartyRunner(slot, self.pool, self.timer, records=records)
        runner.run()

        record = records.get_record(runner.record_id)
        self.assertEqual(record["instance_id"], 1)
        self.assertEqual(record["clear_time"], 4)
        self.assertIsNotNone(record["end_time"])
        records.close()


if __name__ == '__main__':
    unittest.main()
