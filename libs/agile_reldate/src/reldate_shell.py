import json
from typing import Optional

import typer

from .utils.date_helper import parse_absolute, to_utc_timestamp
from .utils.log_helper import LogHelper
from .utils.relative_date import RelativeDateParser
from .utils.settings import load_settings

reldate_shell_name = "reldate"
reldate_shell = typer.Typer(
    name=reldate_shell_name,
    help=f"""
    相对时间解析命令行工具 🕒
    核心功能：
    1. 解析中文/英文相对时间表达式，如 3天前、昨天20:00、in 2 hours
    2. 查看解析过程（预处理、分段、命中的规则）
    3. 将本地时间转换为 UTC 毫秒时间戳

    示例用法：
    $ {reldate_shell_name} parse 昨天20:00 --timezone Asia/Shanghai
    $ {reldate_shell_name} to-utc "2026-10-19 12:00:00"
    """,
    no_args_is_help=True,
    add_completion=False,
)


@reldate_shell.callback()
def setup(
        verbose: bool = typer.Option(
            False,
            "--verbose", "-v",
            help="输出调试日志"
        )
):
    settings = load_settings()
    LogHelper.setup(level="DEBUG" if verbose else settings.log_level, force=True)


def _build_parser(timezone: Optional[str], now: Optional[str]):
    settings = load_settings()
    try:
        parser = RelativeDateParser(timezone or settings.timezone)
        reference = parse_absolute(now) if now else settings.now
    except ValueError as e:
        raise typer.BadParameter(str(e))
    return parser, reference


@reldate_shell.command(
    name="parse",
    help="解析相对时间表达式，输出目标时区的绝对时间",
    short_help="解析相对时间"
)
def parse(
        text: str = typer.Argument(..., help="时间表达式，例如：3天前、昨天20:00、in 2 hours"),
        timezone: Optional[str] = typer.Option(
            None,
            "--timezone", "-t",
            help="目标时区（默认读取 RELDATE_TIMEZONE，未设置时为 Asia/Shanghai）"
        ),
        now: Optional[str] = typer.Option(
            None,
            "--now", "-n",
            help="参考时间，目标时区的本地时间，例如：2026-10-19 12:00:00（默认读取 RELDATE_NOW，未设置时为当前时间）"
        ),
        as_timestamp: bool = typer.Option(
            False,
            "--timestamp",
            help="输出 UTC 毫秒时间戳"
        )
):
    parser, reference = _build_parser(timezone, now)
    result = parser.parse(text, reference)
    if not result.resolved:
        typer.echo(f"无法解析：{text}（{result.kind.value}）", err=True)
        raise typer.Exit(code=1)

    if as_timestamp:
        typer.echo(result.timestamp_ms())
    else:
        typer.echo(result.instant.isoformat(sep=" ", timespec="milliseconds"))


@reldate_shell.command(
    name="explain",
    help="输出解析过程：预处理结果、分段、命中的分支和规则",
    short_help="查看解析过程"
)
def explain(
        text: str = typer.Argument(..., help="时间表达式"),
        timezone: Optional[str] = typer.Option(None, "--timezone", "-t", help="目标时区"),
        now: Optional[str] = typer.Option(None, "--now", "-n", help="参考时间")
):
    parser, reference = _build_parser(timezone, now)
    typer.echo(json.dumps(parser.explain(text, reference), ensure_ascii=False, indent=2))


@reldate_shell.command(
    name="to-utc",
    help="将某个时区的本地时间（不携带时区）转换为 UTC 毫秒时间戳",
    short_help="转换为 UTC 时间戳"
)
def to_utc(
        text: str = typer.Argument(..., help="本地时间，例如：2026-10-19 12:00:00"),
        fmt: Optional[str] = typer.Option(
            None,
            "--format", "-f",
            help="strptime 格式，例如：%Y-%m-%d %H:%M（默认自动识别）"
        ),
        timezone: Optional[str] = typer.Option(None, "--timezone", "-t", help="本地时间所在时区")
):
    try:
        timestamp = to_utc_timestamp(text, fmt, timezone or load_settings().timezone)
    except ValueError as e:
        typer.echo(f"无法转换：{e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(timestamp)


# 主入口
def main():
    reldate_shell()


if __name__ == "__main__":
    main()
