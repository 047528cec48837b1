"""Tests for the BackoffSchedule class."""

import unittest

from deface_crawler.backoff import DEFAULT_BACKOFF_SECONDS, BackoffSchedule


class TestBackoffSchedule(unittest.TestCase):
    """Verify the fixed schedule returns delays in list order."""

    def test_default_schedule(self):
        """Default schedule is 10..30s in five steps."""
        schedule = BackoffSchedule()
        self.assertEqual(schedule.delays, DEFAULT_BACKOFF_SECONDS)
        self.assertEqual(schedule.max_attempts, 5)
        self.assertEqual(len(schedule), 5)

    def test_delays_follow_list_order(self):
        """Delays are taken from the list, not computed exponentially."""
        schedule = BackoffSchedule([3, 1, 2])
        self.assertEqual(
            [schedule.get_sleep(i) for i in (1, 2, 3)],
            [3.0, 1.0, 2.0],
        )

    def test_attempt_outside_schedule_raises(self):
        schedule = BackoffSchedule([1, 2])
        with self.assertRaises(IndexError):
            schedule.get_sleep(0)
        with self.assertRaises(IndexError):
            schedule.get_sleep(3)

    def test_empty_schedule_rejected(self):
        with self.assertRaises(ValueError):
            BackoffSchedule([])

    def test_negative_delay_rejected(self):
        with self.assertRaises(ValueError):
            BackoffSchedule([1, -1])


class TestBackoffParse(unittest.TestCase):
    """Verify parsing of the comma-separated command-line form."""

    def test_parse(self):
        schedule = BackoffSchedule.parse("10, 15,20")
        self.assertEqual(schedule.delays, (10.0, 15.0, 20.0))

    def test_parse_fractional(self):
        self.assertEqual(BackoffSchedule.parse("0.5").delays, (0.5,))

    def test_parse_rejects_garbage(self):
        with self.assertRaises(ValueError):
            BackoffSchedule.parse("10,abc")

    def test_parse_rejects_empty(self):
        with self.assertRaises(ValueError):
            BackoffSchedule.parse(" , ")


if __name__ == "__main__":
    unittest.main()
