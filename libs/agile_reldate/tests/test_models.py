"""
测试 ParseResult / ReldateSettings 模型
"""

import datetime
import unittest

from libs.agile_reldate.src.utils.models import Branch, ParseResult, ReldateSettings, ResultKind

UTC = datetime.timezone.utc


class TestParseResult(unittest.TestCase):

    def test_resolved(self):
        instant = datetime.datetime(2026, 10, 19, 4, 0, tzinfo=UTC)
        result = ParseResult.resolved_at("刚刚", instant, Branch.JUST_NOW)
        self.assertTrue(result.resolved)
        self.assertEqual(result.value(), instant)
        self.assertEqual(result.timestamp_ms(), int(instant.timestamp()) * 1000)

    def test_no_match_keeps_text(self):
        result = ParseResult.no_match("随便说点什么")
        self.assertFalse(result.resolved)
        self.assertEqual(result.kind, ResultKind.NO_MATCH)
        self.assertEqual(result.value(), "随便说点什么")
        self.assertIsNone(result.timestamp_ms())

    def test_dict_like_access(self):
        result = ParseResult.invalid("今天abc", Branch.LITERAL, anchor="today")
        self.assertEqual(result["anchor"], "today")
        self.assertEqual(result.get("duration"), {})
        self.assertIsNone(result.get("missing"))
        with self.assertRaises(KeyError):
            result["missing"]


class TestReldateSettings(unittest.TestCase):

    def test_defaults(self):
        settings = ReldateSettings()
        self.assertEqual(settings.timezone, "Asia/Shanghai")
        self.assertIsNone(settings.now)

    def test_invalid_timezone(self):
        with self.assertRaises(ValueError):
            ReldateSettings(timezone="Mars/Olympus")


if __name__ == "__main__":
    unittest.main()
