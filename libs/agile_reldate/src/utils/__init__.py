# 导出相对时间解析相关模块
from .relative_date import (
    RelativeDateParser,
    parse_relative_date,
    normalize,
    segment,
    compose_duration,
    AnchorRule,
    DurationUnitRule,
    ComposedDuration,
    ANCHOR_RULES,
    DURATION_UNIT_RULES,
)
from .date_helper import parse_absolute, to_utc_timestamp, get_timezone
from .models import ParseResult, ResultKind, Branch, ReldateSettings
from .settings import load_settings

__all__ = [
    # 相对时间解析
    'RelativeDateParser',
    'parse_relative_date',
    'normalize',
    'segment',
    'compose_duration',
    'AnchorRule',
    'DurationUnitRule',
    'ComposedDuration',
    'ANCHOR_RULES',
    'DURATION_UNIT_RULES',
    # 绝对时间工具
    'parse_absolute',
    'to_utc_timestamp',
    'get_timezone',
    # 模型与配置
    'ParseResult',
    'ResultKind',
    'Branch',
    'ReldateSettings',
    'load_settings',
]
