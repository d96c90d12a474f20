"""
日期时间工具函数

相对时间解析器依赖的叶子工具：时区获取、本地化、绝对时间解析、UTC 毫秒时间戳转换
"""

import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as dateutil_parser

DEFAULT_TIMEZONE = "Asia/Shanghai"

EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


def get_timezone(name: str) -> datetime.tzinfo:
    """
    根据 IANA 时区名称获取时区对象
    :param name: 时区名称，如 Asia/Shanghai
    :raises ValueError: 时区不存在时抛出
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def utc_now() -> datetime.datetime:
    """当前时刻（UTC，带时区）"""
    return datetime.datetime.now(datetime.timezone.utc)


def localize(dt: datetime.datetime, tz: datetime.tzinfo) -> datetime.datetime:
    """不带时区的时间视作 tz 的本地时间；带时区的时间转换到 tz"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def truncate_to_millis(dt: datetime.datetime) -> datetime.datetime:
    return dt.replace(microsecond=dt.microsecond // 1000 * 1000)


def to_epoch_millis(dt: datetime.datetime) -> int:
    """带时区的时间转为 UTC 毫秒时间戳"""
    return (dt - EPOCH) // datetime.timedelta(milliseconds=1)


def parse_absolute(text: str, fmt: Optional[str] = None) -> datetime.datetime:
    """
    解析绝对时间字符串

    Args:
        text: 时间字符串，如 2026-10-19 20:00、2026-10-19 8:00 pm
        fmt: strptime 格式，如 %Y-%m-%d %H:%M；为空时自动识别

    Returns:
        datetime，字符串不带时区信息时返回 naive datetime

    Raises:
        ValueError: 无法解析
    """
    if fmt:
        return datetime.datetime.strptime(text, fmt)
    try:
        return dateutil_parser.parse(text)
    except OverflowError as e:
        raise ValueError(f"Date out of range: {text}") from e


def to_utc_timestamp(text: str, fmt: Optional[str] = None, timezone: str = DEFAULT_TIMEZONE) -> int:
    """
    将某个时区的本地时间字符串（不携带时区）转换为 UTC 毫秒时间戳

    Args:
        text: 本地时间字符串
        fmt: strptime 格式，为空时自动识别
        timezone: 本地时间所在时区

    Returns:
        UTC 毫秒时间戳
    """
    dt = localize(parse_absolute(text, fmt), get_timezone(timezone))
    return to_epoch_millis(dt)
