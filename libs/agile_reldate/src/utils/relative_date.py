"""
中文/英文相对时间解析器

将 `昨天20:00`、`3天前`、`in 2 hours`、`周一 10:00` 等表达式转换为指定时区下的绝对时间

处理流程：
1. 预处理(normalize)：转小写，`a`/`an` 替换为 `1`，`几` 替换为 `3`，移除空格和逗号
2. 分段(segment)：将 `\\d+年\\d+月...\\d+秒前` 切分为 `['\\d+年', ..., '\\d+秒前']`
3. 解析(resolve)：根据最后一段的 `前`/`ago`、`后`/`in` 标识加减时长；
   否则根据第一段的特殊词（今天、昨天、周一...）取对应日零时为起点，再加上时长

主要类：
- AnchorRule: 特殊词规则，特殊词 -> 起始日期
- DurationUnitRule: 时长单位规则，数字+单位 -> 年/月/周/天/时/分/秒
- ComposedDuration: 组合后的时长
- RelativeDateParser: 相对时间解析器主类
"""

import datetime
import re
from dataclasses import dataclass, fields
from typing import Callable, Dict, List, Optional, Tuple, Any

from dateutil.relativedelta import relativedelta

from .date_helper import (
    DEFAULT_TIMEZONE,
    get_timezone,
    localize,
    parse_absolute,
    truncate_to_millis,
    utc_now,
)
from .log_helper import LogHelper
from .models import Branch, ParseResult

logger = LogHelper.get_logger()

JUST_NOW = "刚刚"

ARTICLE_PATTERN = re.compile(r"(^an?\s)|(\san?\s)")
VAGUE_QUANTITY_PATTERN = re.compile(r"[几幾]")
SEPARATOR_PATTERN = re.compile(r"[\s,]")

# 一个数字（后面不是 `:`、`-`、`/`、`am`、`pm`）加前后的非数字部分
CHUNK_PATTERN = re.compile(r"\D*\d+(?![:\-/]|[ap]m)\D+")

AGO_PATTERN = re.compile(r"(.*)(?:前|ago)$")
AFTER_PATTERN = re.compile(r"(?:^in(.*)|(.*)[后後])$")
MERIDIEM_PATTERN = re.compile(r"(?<!\s)([ap]m)$")


@dataclass(frozen=True)
class AnchorRule:
    """特殊词规则，匹配成功时 group(1) 为特殊词之后的剩余文本"""
    name: str
    pattern: re.Pattern
    start_at: Callable[[datetime.date], datetime.date]

    def match(self, text: str) -> Optional[str]:
        matched = self.pattern.match(text)
        return matched.group(1) if matched else None


@dataclass(frozen=True)
class DurationUnitRule:
    """时长单位规则，匹配成功时 group(1) 为数值"""
    unit: str
    pattern: re.Pattern

    def match(self, token: str) -> Optional[int]:
        matched = self.pattern.search(token)
        return int(matched.group(1)) if matched else None


def _days_from_today(days: int) -> Callable[[datetime.date], datetime.date]:
    def start_at(today: datetime.date) -> datetime.date:
        return today + datetime.timedelta(days=days)

    return start_at


def _last_weekday(weekday: int) -> Callable[[datetime.date], datetime.date]:
    """
    最近一个已过去的星期几

    一周从周日开始：weekday 1-6 为本周周一至周六，7 为下周日。
    目标日期不早于今天时取上一周，因此周一至周六总是早于今天，周日可以是今天
    """

    def start_at(today: datetime.date) -> datetime.date:
        sunday = today - datetime.timedelta(days=today.isoweekday() % 7)
        target = sunday + datetime.timedelta(days=weekday)
        if target >= today:
            target -= datetime.timedelta(weeks=1)
        return target

    return start_at


# 顺序即优先级，先匹配先生效
ANCHOR_RULES: Tuple[AnchorRule, ...] = (
    AnchorRule("today", re.compile(r"^(?:今[天日]|to?day?)(.*)"), _days_from_today(0)),
    AnchorRule("yesterday", re.compile(r"^(?:昨[天日]|y(?:ester)?day?)(.*)"), _days_from_today(-1)),
    AnchorRule("day_before_yesterday", re.compile(r"^(?:前天|(?:the)?d(?:ay)?b(?:eforeyesterda)?y)(.*)"), _days_from_today(-2)),
    AnchorRule("monday", re.compile(r"^(?:周|星期)一(.*)"), _last_weekday(1)),
    AnchorRule("tuesday", re.compile(r"^(?:周|星期)二(.*)"), _last_weekday(2)),
    AnchorRule("wednesday", re.compile(r"^(?:周|星期)三(.*)"), _last_weekday(3)),
    AnchorRule("thursday", re.compile(r"^(?:周|星期)四(.*)"), _last_weekday(4)),
    AnchorRule("friday", re.compile(r"^(?:周|星期)五(.*)"), _last_weekday(5)),
    AnchorRule("saturday", re.compile(r"^(?:周|星期)六(.*)"), _last_weekday(6)),
    AnchorRule("sunday", re.compile(r"^(?:周|星期)[天日](.*)"), _last_weekday(7)),
    # FIXME: 英文分支与 yesterday 相同且排在其后，英文 tomorrow 永远无法命中，待确认预期行为
    AnchorRule("tomorrow", re.compile(r"^(?:明[天日]|y(?:ester)?day?)(.*)"), _days_from_today(1)),
    AnchorRule("day_after_tomorrow", re.compile(r"^(?:[后後][天日]|(?:the)?d(?:ay)?a(?:fter)?t(?:omorrow)?)(.*)"), _days_from_today(2)),
)

# 必须按 年 -> 秒 的顺序排列
DURATION_UNIT_RULES: Tuple[DurationUnitRule, ...] = (
    DurationUnitRule("years", re.compile(r"(\d+)(?:年|y(?:ea)?rs?)")),
    DurationUnitRule("months", re.compile(r"(\d+)(?:[个個]?月|months?)")),
    DurationUnitRule("weeks", re.compile(r"(\d+)(?:周|[个個]?星期|weeks?)")),
    DurationUnitRule("days", re.compile(r"(\d+)(?:天|日|d(?:ay)?s?)")),
    DurationUnitRule("hours", re.compile(r"(\d+)(?:[个個]?(?:小?时|[時点點])|h(?:(?:ou)?r)?s?)")),
    DurationUnitRule("minutes", re.compile(r"(\d+)(?:分[鐘钟]?|m(?:in(?:ute)?)?s?)")),
    DurationUnitRule("seconds", re.compile(r"(\d+)(?:秒[鐘钟]?|s(?:ec(?:ond)?)?s?)")),
)


@dataclass
class ComposedDuration:
    """由多个时间单元组合而成的时长"""

    years: int = 0
    months: int = 0
    weeks: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    def calendar_part(self) -> relativedelta:
        """年/月/周/天，按目标时区的日历计算"""
        return relativedelta(years=self.years, months=self.months, weeks=self.weeks, days=self.days)

    def clock_part(self) -> datetime.timedelta:
        """时/分/秒，按经过的实际时长计算"""
        return datetime.timedelta(hours=self.hours, minutes=self.minutes, seconds=self.seconds)

    def as_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name)}

    def apply(self, moment: datetime.datetime, sign: int = 1) -> datetime.datetime:
        """
        在 moment 上加（sign=1）或减（sign=-1）该时长

        日历部分在 moment 所在时区按墙上时间计算，时分秒部分在 UTC 上计算
        """
        tz = moment.tzinfo
        shifted = moment + self.calendar_part() if sign > 0 else moment - self.calendar_part()
        shifted = shifted.astimezone(datetime.timezone.utc)
        shifted = shifted + self.clock_part() if sign > 0 else shifted - self.clock_part()
        return shifted.astimezone(tz)


def normalize(text: str) -> str:
    """
    预处理日期字符串
    :param text: 原始日期字符串
    :return: 小写、无空格和逗号的字符串
    """
    text = text.lower()
    text = ARTICLE_PATTERN.sub("1", text)  # `a hour` / `an hour` 视作 `1hour`
    text = VAGUE_QUANTITY_PATTERN.sub("3", text)  # `几秒钟前` 视作 `3秒钟前`
    return SEPARATOR_PATTERN.sub("", text)


def segment(normalized: str) -> Tuple[List[str], bool]:
    """
    将 `\\d+年\\d+月...\\d+秒前` 分割成 `['\\d+年', ..., '\\d+秒前']`
    :param normalized: 预处理后的字符串
    :return: (分段列表, 是否为 `特殊词 + 标准时间格式` 的情形)
    """
    chunks = [m.group(0) for m in CHUNK_PATTERN.finditer(normalized)]
    return chunks, not chunks


def compose_duration(tokens: List[str], rules: Tuple[DurationUnitRule, ...] = DURATION_UNIT_RULES) -> ComposedDuration:
    """
    将 `['\\d+时', ..., '\\d+秒']` 转换为 `{hours: \\d+, ..., seconds: \\d+}`

    规则游标只向前移动：每个分段从上一次命中的下一条规则开始匹配，
    单位顺序颠倒的分段匹配不到任何规则，直接丢弃
    """
    duration = ComposedDuration()
    cursor = 0
    for token in tokens:
        for index in range(cursor, len(rules)):
            value = rules[index].match(token)
            if value is not None:
                setattr(duration, rules[index].unit, value)
                cursor = index + 1
                break
        else:
            logger.debug(f"丢弃无法识别的时间单元: token='{token}', cursor={cursor}")
    return duration


class RelativeDateParser:
    """
    相对时间解析器

    使用示例：
        parser = RelativeDateParser(timezone='Asia/Shanghai')
        result = parser.parse("昨天20:00")
        if result.resolved:
            print(result.instant)
    """

    def __init__(self,
                 timezone: str = DEFAULT_TIMEZONE,
                 clock: Callable[[], datetime.datetime] = None,
                 tz_resolver: Callable[[str], datetime.tzinfo] = None):
        """
        Args:
            timezone: 目标时区名称
            clock: 返回当前时刻的函数，默认系统时钟
            tz_resolver: 时区名称 -> tzinfo，默认 zoneinfo
        """
        self.timezone = timezone
        self.tz = (tz_resolver or get_timezone)(timezone)
        self.clock = clock or utc_now
        self.anchor_rules = ANCHOR_RULES
        self.duration_rules = DURATION_UNIT_RULES

    def _now(self, now: datetime.datetime = None) -> datetime.datetime:
        return localize(now if now is not None else self.clock(), self.tz)

    def _midnight(self, day: datetime.date) -> datetime.datetime:
        return datetime.datetime.combine(day, datetime.time.min, tzinfo=self.tz)

    def _finish(self, instant: datetime.datetime) -> datetime.datetime:
        return truncate_to_millis(instant.astimezone(self.tz))

    def parse(self, text: str, now: datetime.datetime = None) -> ParseResult:
        """
        解析相对时间表达式

        Args:
            text: 时间表达式
            now: 参考时间，默认取 clock()；不带时区时视作目标时区的本地时间

        Returns:
            ParseResult，无法识别时 kind 为 no_match，text 为原始输入

        `刚刚` 与预处理后的文本比较，因此 ` 刚刚 ` 等带空格的写法同样视作当前时间
        """
        now = self._now(now)
        normalized = normalize(text)

        if normalized == JUST_NOW:
            return ParseResult.resolved_at(text, self._finish(now), Branch.JUST_NOW)

        chunks, is_literal = segment(normalized)
        if is_literal:
            return self._resolve_literal(text, normalized, now)
        return self._resolve_chunks(text, chunks, now)

    def _shift(self, text: str, branch: Branch, start: datetime.datetime, duration: ComposedDuration, sign: int,
               **kwargs) -> ParseResult:
        """在 start 上加减时长；超出日期范围时返回 invalid"""
        try:
            instant = self._finish(duration.apply(start, sign))
        except (OverflowError, ValueError) as e:
            logger.warning(f"时长超出范围: text='{text}', duration={duration.as_dict()}, error={e}")
            return ParseResult.invalid(text, branch, duration=duration.as_dict(), **kwargs)
        return ParseResult.resolved_at(text, instant, branch, duration=duration.as_dict(), **kwargs)

    def _resolve_chunks(self, text: str, chunks: List[str], now: datetime.datetime) -> ParseResult:
        # 最后的时间单元，如 `\d+秒前`
        last_chunk = chunks.pop()

        # 含有 `前`/`ago`，减去相应的时长，如 `1分10秒前`
        ago_match = AGO_PATTERN.match(last_chunk)
        if ago_match:
            chunks.append(ago_match.group(1))
            duration = compose_duration(chunks, self.duration_rules)
            logger.debug(f"匹配: branch=ago, tokens={chunks}, duration={duration.as_dict()}")
            return self._shift(text, Branch.AGO, now, duration, -1)

        # 含有 `后`/`in`，加上相应的时长，如 `1分10秒后`、`in2hours`
        after_match = AFTER_PATTERN.match(last_chunk)
        if after_match:
            chunks.append(after_match.group(1) if after_match.group(1) is not None else after_match.group(2))
            duration = compose_duration(chunks, self.duration_rules)
            logger.debug(f"匹配: branch=after, tokens={chunks}, duration={duration.as_dict()}")
            return self._shift(text, Branch.AFTER, now, duration, 1)

        # 含有特殊词的情形，如 `今天1点10分`
        chunks.append(last_chunk)
        first_chunk = chunks.pop(0)
        for rule in self.anchor_rules:
            remainder = rule.match(first_chunk)
            if remainder is None:
                continue
            chunks.insert(0, remainder)
            duration = compose_duration(chunks, self.duration_rules)
            # 取特殊词对应日零时为起点，加上相应的时长
            start = self._midnight(rule.start_at(now.date()))
            logger.debug(f"匹配: branch=anchor, anchor={rule.name}, tokens={chunks}, duration={duration.as_dict()}")
            return self._shift(text, Branch.ANCHOR, start, duration, 1, anchor=rule.name)

        logger.info(f"未匹配到任何时间表达式: {text}")
        return ParseResult.no_match(text)

    def _resolve_literal(self, text: str, normalized: str, now: datetime.datetime) -> ParseResult:
        """
        `特殊词 + 标准时间格式` 的情形，直接将特殊词替换为对应日期
        如今天为 `2022-03-22`，则 `今天 20:00` => `2022-03-22 20:00`
        """
        for rule in self.anchor_rules:
            remainder = rule.match(normalized)
            if remainder is None:
                continue
            # 预处理移除了空格，`8:00pm` 需还原为 `8:00 pm`
            time_text = MERIDIEM_PATTERN.sub(r" \1", remainder)
            literal = f"{rule.start_at(now.date()):%Y-%m-%d} {time_text}".strip()
            try:
                instant = localize(parse_absolute(literal), self.tz)
            except ValueError as e:
                logger.warning(f"无法解析时间: text='{text}', literal='{literal}', error={e}")
                return ParseResult.invalid(text, Branch.LITERAL, anchor=rule.name)
            logger.debug(f"匹配: branch=literal, anchor={rule.name}, literal='{literal}'")
            return ParseResult.resolved_at(text, self._finish(instant), Branch.LITERAL, anchor=rule.name)

        logger.info(f"未匹配到任何时间表达式: {text}")
        return ParseResult.no_match(text)

    def explain(self, text: str, now: datetime.datetime = None) -> Dict[str, Any]:
        """
        返回解析过程的详细信息，用于排查规则

        Returns:
            包含预处理结果、分段和解析结果的字典
        """
        normalized = normalize(text)
        chunks, is_literal = segment(normalized)
        return {
            'text': text,
            'normalized': normalized,
            'chunks': chunks,
            'is_literal': is_literal,
            'result': self.parse(text, now).model_dump(mode='json'),
        }


def parse_relative_date(text: str, timezone: str = DEFAULT_TIMEZONE, now: datetime.datetime = None) -> ParseResult:
    """
    解析相对时间的快捷函数

    Args:
        text: 时间表达式，如 `3天前`、`昨天20:00`、`in 2 hours`
        timezone: 目标时区
        now: 参考时间，默认为系统当前时间

    Returns:
        ParseResult
    """
    return RelativeDateParser(timezone).parse(text, now)
