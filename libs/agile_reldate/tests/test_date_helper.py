"""
测试 date_helper.py：绝对时间解析与 UTC 时间戳转换
"""

import datetime
import unittest
from zoneinfo import ZoneInfo

from libs.agile_reldate.src.utils.date_helper import (
    get_timezone,
    localize,
    parse_absolute,
    to_epoch_millis,
    to_utc_timestamp,
    truncate_to_millis,
)

UTC = datetime.timezone.utc


def utc_millis(*args) -> int:
    return int(datetime.datetime(*args, tzinfo=UTC).timestamp()) * 1000


class TestParseAbsolute(unittest.TestCase):

    def test_auto_format(self):
        self.assertEqual(parse_absolute("2026-10-19 12:30"), datetime.datetime(2026, 10, 19, 12, 30))
        self.assertEqual(parse_absolute("2026-10-19 8:00 pm"), datetime.datetime(2026, 10, 19, 20, 0))

    def test_explicit_format(self):
        self.assertEqual(parse_absolute("19/10/2026 12:30", "%d/%m/%Y %H:%M"), datetime.datetime(2026, 10, 19, 12, 30))

    def test_invalid_raises(self):
        with self.assertRaises(ValueError):
            parse_absolute("hello world")
        with self.assertRaises(ValueError):
            parse_absolute("2026-10-19", "%d/%m/%Y")


class TestToUtcTimestamp(unittest.TestCase):

    def test_default_timezone(self):
        self.assertEqual(to_utc_timestamp("2026-10-19 12:00:00"), utc_millis(2026, 10, 19, 4, 0))

    def test_explicit_format_and_timezone(self):
        self.assertEqual(
            to_utc_timestamp("19/10/2026 12:00", "%d/%m/%Y %H:%M", timezone="America/New_York"),
            utc_millis(2026, 10, 19, 16, 0)
        )

    def test_milliseconds_are_kept(self):
        self.assertEqual(to_utc_timestamp("2026-10-19 12:00:00.250", timezone="UTC"), utc_millis(2026, 10, 19, 12, 0) + 250)


class TestTimezoneHelpers(unittest.TestCase):

    def test_unknown_timezone(self):
        with self.assertRaises(ValueError):
            get_timezone("Mars/Olympus")

    def test_localize(self):
        shanghai = get_timezone("Asia/Shanghai")
        naive = datetime.datetime(2026, 10, 19, 12, 0)
        self.assertEqual(localize(naive, shanghai), datetime.datetime(2026, 10, 19, 12, 0, tzinfo=ZoneInfo("Asia/Shanghai")))
        aware = datetime.datetime(2026, 10, 19, 4, 0, tzinfo=UTC)
        self.assertEqual(localize(aware, shanghai).hour, 12)

    def test_millis(self):
        dt = datetime.datetime(2026, 10, 19, 4, 0, 0, 987654, tzinfo=UTC)
        self.assertEqual(truncate_to_millis(dt).microsecond, 987000)
        self.assertEqual(to_epoch_millis(dt), utc_millis(2026, 10, 19, 4, 0) + 987)


if __name__ == "__main__":
    unittest.main()
