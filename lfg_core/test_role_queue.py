import unittest
from threading import Thread

from .models import PARTY_RECIPE
from .queues import RoleQueue


class TestRoleQueue(unittest.TestCase):
    def setUp(self):
        self.queue = RoleQueue(tanks=3, healers=2, dps=7)

    def test_form_party_consumes_recipe(self):
        self.assertTrue(self.queue.try_form_party())
        self.assertEqual(self.queue.snapshot(), (2, 1, 4))

    def test_form_party_fails_without_changing_counts(self):
        queue = RoleQueue(tanks=5, healers=5, dps=2)
        self.assertFalse(queue.try_form_party())
        self.assertEqual(queue.snapshot(), (5, 5, 2))
        self.assertFalse(queue.can_form_party())

    def test_can_form_party_does_not_consume(self):
        self.assertTrue(self.queue.can_form_party())
        self.assertEqual(self.queue.snapshot(), (3, 2, 7))

    def test_max_formable_after_k_parties(self):
        # 初始 (T, H, D)，k 次组队后应为 min(T-k, H-k, (D-3k)//3)
        t, h, d = 6, 4, 14
        queue = RoleQueue(t, h, d)
        k = 0
        while True:
            expected = min(t - k, h - k, (d - 3 * k) // 3)
            self.assertEqual(queue.max_formable_parties(), expected, f"k={k}")
            if not queue.try_form_party():
                break
            k += 1
        self.assertEqual(k, 4)
        self.assertEqual(queue.snapshot(), (2, 0, 2))

    def test_counts_never_negative(self):
        for _ in range(10):
            self.queue.try_form_party()
            self.assertTrue(all(c >= 0 for c in self.queue.snapshot()))
        self.assertEqual(self.queue.snapshot(), (1, 0, 1))

    def test_concurrent_formation_never_double_spends(self):
        queue = RoleQueue(tanks=200, healers=150, dps=600)
        formed = []

        def worker():
            count = 0
            for _ in range(100):
                if queue.try_form_party():
                    count += 1
            formed.append(count)

        threads = [Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        parties = sum(formed)
        self.assertEqual(parties, 150)
        self.assertEqual(queue.snapshot(), (50, 0, 150))
        # 消耗的玩家数 = 5 * 队伍数
        self.assertEqual(950 - queue.total_remaining(), PARTY_RECIPE.size * parties)

    def test_negative_counts_rejected(self):
        with self.assertRaises(ValueError):
            RoleQueue(tanks=-1, healers=1, dps=3)


if __name__ == '__main__':
    unittest.main()
