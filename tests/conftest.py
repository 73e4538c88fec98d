"""
测试公共夹具
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# 添加项目路径到 sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from uptime_monitor.models import FailureDetail, OutcomeRecord, SuccessDetail


BASE_TIME = datetime(2026, 1, 20, 10, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """可手动推进的时钟"""

    def __init__(self, start: datetime = BASE_TIME):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now = self.now + timedelta(seconds=seconds)


def make_record(offset: float, success: bool = True, latency: float = 50.0, code: int = None) -> OutcomeRecord:
    """构造距 BASE_TIME offset 秒的记录"""
    ts = BASE_TIME + timedelta(seconds=offset)
    if success:
        return OutcomeRecord(
            timestamp=ts,
            success=True,
            code=code if code is not None else 200,
            detail=SuccessDetail(latency_ms=latency),
        )
    return OutcomeRecord(
        timestamp=ts,
        success=False,
        code=code,
        detail=FailureDetail(message="timeout"),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def lines():
    """收集报告输出的 sink"""
    return []
