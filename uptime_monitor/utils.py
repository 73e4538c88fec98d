"""
工具函数模块
"""

import re
from datetime import datetime, timezone

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def utc_now() -> datetime:
    """当前 UTC 时间（带时区）"""
    return datetime.now(timezone.utc)


def pretty_timestamp(ts: datetime) -> str:
    """
    格式化为报告使用的时间戳

    例如 "2026-01-17 10:00:00 (UTC)"
    """
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%d %H:%M:%S") + " (UTC)"


def target_file_name(target_id: str) -> str:
    """
    由目标 URL 生成日志文件名

    去掉协议头，路径分隔符替换为下划线：
        "http://example.com/a/b" -> "example.com_a_b.txt"
    """
    trimmed = _SCHEME_RE.sub("", target_id)
    return trimmed.replace("/", "_") + ".txt"
