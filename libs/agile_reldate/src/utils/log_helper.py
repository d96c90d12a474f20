import sys
from typing import Optional

from loguru import logger

from .env_helper import EnvHelper


class LogHelper:
    """
    统一日志入口，基于 loguru

    作为库导入时沿用宿主程序的 loguru 配置；命令行入口调用 setup() 重新配置：
    日志级别读取环境变量 RELDATE_LOG_LEVEL（默认 WARNING），
    如果设置了 RELDATE_LOG_FILE，则同时输出到文件
    """

    DEFAULT_LEVEL = "WARNING"
    DEFAULT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"

    _configured = False

    @classmethod
    def setup(cls, level: Optional[str] = None, log_file: Optional[str] = None, force: bool = False) -> None:
        """
        配置日志输出
        :param level: 日志级别，为空时从环境变量读取
        :param log_file: 日志文件路径，为空时从环境变量读取
        :param force: 已配置过时是否重新配置
        """
        if cls._configured and not force:
            return

        env_helper = EnvHelper()
        level = (level or env_helper.get("RELDATE_LOG_LEVEL", cls.DEFAULT_LEVEL, var_type=str)).upper()
        log_file = log_file or env_helper.get("RELDATE_LOG_FILE", var_type=str)

        logger.remove()
        logger.add(sys.stderr, level=level, format=cls.DEFAULT_FORMAT)
        if log_file:
            logger.add(log_file, level=level, format=cls.DEFAULT_FORMAT, encoding="utf-8")

        cls._configured = True

    @classmethod
    def get_logger(cls):
        """返回 loguru logger，不改动已有的日志输出；需要统一配置时显式调用 setup()"""
        return logger
