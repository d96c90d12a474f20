import datetime
from pathlib import Path

from .date_helper import DEFAULT_TIMEZONE
from .env_helper import EnvHelper
from .models import ReldateSettings


def load_settings(env_file_path: str | Path = None) -> ReldateSettings:
    """
    从环境变量（以及 .env 文件）读取运行配置

    - RELDATE_TIMEZONE: 目标时区，默认 Asia/Shanghai
    - RELDATE_NOW: 固定参考时间（目标时区的本地时间），便于复现解析结果
    - RELDATE_LOG_LEVEL: 日志级别
    """
    env_helper = EnvHelper(env_file_path)
    return ReldateSettings(
        timezone=env_helper.get("RELDATE_TIMEZONE", DEFAULT_TIMEZONE, var_type=str),
        now=env_helper.get("RELDATE_NOW", var_type=datetime.datetime),
        log_level=env_helper.get("RELDATE_LOG_LEVEL", ReldateSettings.model_fields["log_level"].default, var_type=str).upper(),
    )
