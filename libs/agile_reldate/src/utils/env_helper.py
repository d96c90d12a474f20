import datetime
import os
from pathlib import Path
from typing import Any, Union, Type

import dotenv

# 支持的变量类型（类型对象而非值）
VarType = Union[Type[str], Type[datetime.datetime]]


class EnvHelper:
    ACCEPT_DATETIME_FORMATS = ["%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d", "%Y/%m/%d %H:%M:%S", "%Y/%m/%d"]

    def __init__(self, env_file_path: str | Path = None, override: bool = False):
        """
        初始化环境变量读取器
        :param env_file_path: 环境变量文件路径
        :param override: 是否覆盖系统环境变量
        """
        dotenv.load_dotenv(dotenv_path=env_file_path, override=override)

    def get(self, key: str, default: Any = None, var_type: VarType = None) -> Any:
        """
        获取环境变量值，并进行类型转换
        :param key: 环境变量的键
        :param default: 默认值，如果环境变量不存在或为空则返回该值
        :param var_type: 期望的类型，为空时按字符串返回
        :return: 转换后的值或默认值
        :raises ValueError: 当 key 为空时抛出
        :raises TypeError: 当类型转换失败时抛出
        """
        if not key:
            raise ValueError("Environment variable key cannot be empty")

        raw_value = os.getenv(key)
        if raw_value is None or raw_value.strip() == "":
            return default

        try:
            return self._convert_to_type(raw_value, var_type or str)
        except ValueError as e:
            raise TypeError(f"Environment variable {key} with value '{raw_value}' cannot be converted to the specified type: {e}") from e

    @classmethod
    def _convert_to_type(cls, raw_value: str, target_type: VarType):
        """
        将字符串值转换为指定类型
        :param raw_value: 原始字符串值
        :param target_type: 目标变量类型
        :return: 转换后的值
        :raises ValueError: 当值无法转换为目标类型时抛出
        :raises TypeError: 当不支持的类型传入时抛出
        """
        value = raw_value.strip()
        # 字符串
        if target_type is str:
            return value
        # 日期时间（参考时间，如 "2026-10-19 12:00:00"）
        elif target_type is datetime.datetime:
            for fmt in cls.ACCEPT_DATETIME_FORMATS:
                try:
                    return datetime.datetime.strptime(value, fmt)
                except ValueError:
                    continue
            raise ValueError(f"Cannot convert to datetime type (supported formats: {cls.ACCEPT_DATETIME_FORMATS}): {raw_value}")
        # 不支持的类型
        else:
            raise TypeError(f"Unsupported target type: {target_type}")
