import math
import unittest

from virtscroll.core.size_store import SizeStore


class TestSizeStore(unittest.TestCase):
    def setUp(self):
        self.store = SizeStore(estimate_size=20)

    def test_estimate_falls_back_to_estimate_size(self):
        self.assertEqual(self.store.average_size, 20)
        self.assertEqual(self.store.estimate("missing"), 20)
        self.assertIsNone(self.store.size_of("missing"))
        self.assertEqual(self.store.count(), 0)

    def test_average_of_measured_items(self):
        self.store.record("a", 10)
        self.store.record("b", 30)
        self.assertEqual(self.store.count(), 2)
        self.assertEqual(self.store.average_size, 20)
        self.assertEqual(self.store.estimate("a"), 10)
        self.assertEqual(self.store.estimate("c"), 20)

    def test_remeasure_replaces_previous_value(self):
        self.store.record("a", 10)
        self.store.record("a", 30)
        self.assertEqual(self.store.count(), 1)
        self.assertEqual(self.store.size_of("a"), 30)
        self.assertEqual(self.store.average_size, 30)
        self.assertEqual(self.store.total_measured_size, 30)

    def test_malformed_sizes_are_ignored(self):
        self.store.record("a", 40)
        for bad in (-1, math.nan, math.inf, "12", None, True):
            self.assertFalse(self.store.record("b", bad))
        self.assertEqual(self.store.count(), 1)
        self.assertEqual(self.store.average_size, 40)
        self.assertNotIn("b", self.store)

    def test_zero_size_is_valid(self):
        self.assertTrue(self.store.record("a", 0))
        self.assertEqual(self.store.size_of("a"), 0)
        self.assertEqual(self.store.average_size, 0)

    def test_version_changes_only_when_estimates_may_change(self):
        version = self.store.version
        self.store.record("a", 10)
        self.assertGreater(self.store.version, version)
        version = self.store.version
        self.store.record("a", 10)
        self.assertEqual(self.store.version, version)
        self.store.record("a", -3)
        self.assertEqual(self.store.version, version)
        self.store.estimate_size = 25
        self.assertGreater(self.store.version, version)

    def test_reset(self):
        self.store.record("a", 10)
        self.store.reset()
        self.assertEqual(len(self.store), 0)
        self.assertEqual(self.store.total_measured_size, 0)
        self.assertEqual(self.store.average_size, 20)


if __name__ == '__main__':
    unittest.main()
