import datetime
from abc import ABC
from enum import Enum
from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .date_helper import DEFAULT_TIMEZONE, get_timezone, to_epoch_millis


class BaseModelEnhance(BaseModel, ABC):
    """
    Base model that supports dictionary-like access.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="allow"
    )

    def __getitem__(self, key: str):
        if key not in self.__class__.model_fields:
            raise KeyError(f"field '{key}' does not exist")
        return getattr(self, key)

    def get(self, key: str, default=None):
        try:
            return self[key]
        except KeyError:
            return default


class ResultKind(str, Enum):
    """解析结果类型"""
    RESOLVED = "resolved"  # 解析成功
    NO_MATCH = "no_match"  # 未匹配到任何表达式
    INVALID = "invalid"  # 匹配到特殊词，但时间部分无法解析


class Branch(str, Enum):
    """命中的解析分支"""
    JUST_NOW = "just_now"
    AGO = "ago"
    AFTER = "after"
    ANCHOR = "anchor"
    LITERAL = "literal"


class ParseResult(BaseModelEnhance):
    """
    相对时间解析结果

    调用方需通过 kind / resolved 判断是否解析成功，而不是检查返回值类型
    """

    kind: ResultKind
    text: str
    instant: Optional[datetime.datetime] = None
    branch: Optional[Branch] = None
    anchor: Optional[str] = None
    duration: Dict[str, int] = Field(default_factory=dict)

    @classmethod
    def resolved_at(cls, text: str, instant: datetime.datetime, branch: Branch, **kwargs) -> 'ParseResult':
        return cls(kind=ResultKind.RESOLVED, text=text, instant=instant, branch=branch, **kwargs)

    @classmethod
    def no_match(cls, text: str) -> 'ParseResult':
        return cls(kind=ResultKind.NO_MATCH, text=text)

    @classmethod
    def invalid(cls, text: str, branch: Branch, **kwargs) -> 'ParseResult':
        return cls(kind=ResultKind.INVALID, text=text, branch=branch, **kwargs)

    @property
    def resolved(self) -> bool:
        return self.kind == ResultKind.RESOLVED

    def value(self) -> Union[datetime.datetime, str]:
        """解析成功返回时间，否则原样返回输入文本"""
        return self.instant if self.resolved else self.text

    def timestamp_ms(self) -> Optional[int]:
        if not self.resolved:
            return None
        return to_epoch_millis(self.instant)


class ReldateSettings(BaseModelEnhance):
    """运行配置，见 settings.load_settings"""

    timezone: str = DEFAULT_TIMEZONE
    now: Optional[datetime.datetime] = None
    log_level: str = "WARNING"

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str) -> str:
        get_timezone(value)
        return value
