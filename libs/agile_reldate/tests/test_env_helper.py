"""
EnvHelper / load_settings 测试套件
测试类型转换：str、datetime，以及运行配置读取
"""
import datetime
import os
import tempfile
import unittest

from libs.agile_reldate.src.utils.env_helper import EnvHelper
from libs.agile_reldate.src.utils.settings import load_settings


class EnvTestCase(unittest.TestCase):

    def setUp(self):
        self.env_keys = []
        self.env_helper = EnvHelper()

    def tearDown(self):
        for key in self.env_keys:
            os.environ.pop(key, None)

    def _set_env(self, key, value):
        """设置环境变量并记录"""
        self.env_keys.append(key)
        os.environ[key] = value


class TestEnvHelperGet(EnvTestCase):
    """测试 get() 方法"""

    def test_empty_key_raises_error(self):
        with self.assertRaises(ValueError):
            self.env_helper.get('')

    def test_missing_returns_default(self):
        self.assertEqual(self.env_helper.get('RELDATE_TEST_MISSING', 'fallback'), 'fallback')

    def test_blank_returns_default(self):
        self._set_env('RELDATE_TEST_BLANK', '   ')
        self.assertEqual(self.env_helper.get('RELDATE_TEST_BLANK', 'fallback'), 'fallback')

    def test_str_is_stripped(self):
        self._set_env('RELDATE_TEST_STR', '  Asia/Shanghai  ')
        self.assertEqual(self.env_helper.get('RELDATE_TEST_STR'), 'Asia/Shanghai')

    def test_datetime_formats(self):
        for raw in ('2026-10-19 12:00:00', '2026-10-19 12:00', '2026/10/19 12:00:00'):
            with self.subTest(raw=raw):
                self._set_env('RELDATE_TEST_DT', raw)
                self.assertEqual(self.env_helper.get('RELDATE_TEST_DT', var_type=datetime.datetime),
                                 datetime.datetime(2026, 10, 19, 12, 0))

    def test_date_only(self):
        self._set_env('RELDATE_TEST_DATE', '2026-10-19')
        self.assertEqual(self.env_helper.get('RELDATE_TEST_DATE', var_type=datetime.datetime),
                         datetime.datetime(2026, 10, 19))

    def test_datetime_invalid(self):
        self._set_env('RELDATE_TEST_DT_BAD', '昨天')
        with self.assertRaises(TypeError):
            self.env_helper.get('RELDATE_TEST_DT_BAD', var_type=datetime.datetime)

    def test_unsupported_type(self):
        self._set_env('RELDATE_TEST_INT', '42')
        with self.assertRaises(TypeError):
            self.env_helper.get('RELDATE_TEST_INT', var_type=int)


class TestLoadSettings(EnvTestCase):
    """测试运行配置读取"""

    def test_defaults(self):
        for key in ('RELDATE_TIMEZONE', 'RELDATE_NOW', 'RELDATE_LOG_LEVEL'):
            self._set_env(key, '')
        settings = load_settings()
        self.assertEqual(settings.timezone, 'Asia/Shanghai')
        self.assertIsNone(settings.now)
        self.assertEqual(settings.log_level, 'WARNING')

    def test_from_environment(self):
        self._set_env('RELDATE_TIMEZONE', 'Europe/London')
        self._set_env('RELDATE_NOW', '2026-10-19 12:00:00')
        self._set_env('RELDATE_LOG_LEVEL', 'debug')
        settings = load_settings()
        self.assertEqual(settings['timezone'], 'Europe/London')
        self.assertEqual(settings.now, datetime.datetime(2026, 10, 19, 12, 0))
        self.assertEqual(settings.log_level, 'DEBUG')

    def test_from_env_file(self):
        os.environ.pop('RELDATE_TIMEZONE', None)
        self.env_keys.append('RELDATE_TIMEZONE')
        with tempfile.NamedTemporaryFile('w', suffix='.env', delete=False, encoding='utf-8') as f:
            f.write('RELDATE_TIMEZONE=America/New_York\n')
        try:
            self.assertEqual(load_settings(f.name).timezone, 'America/New_York')
        finally:
            os.remove(f.name)

    def test_invalid_timezone(self):
        self._set_env('RELDATE_TIMEZONE', 'Mars/Olympus')
        with self.assertRaises(ValueError):
            load_settings()


if __name__ == "__main__":
    unittest.main()
