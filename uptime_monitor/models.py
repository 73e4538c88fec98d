"""
数据模型定义

包括：
- 探测结果记录（OutcomeRecord）
- 汇总统计（SummaryStatistic）
- 告警事件（AlertEvent）
- API 响应模型
"""

from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# 探测结果
# =============================================================================

class ProbeTiming(BaseModel):
    """探测耗时信息（由探测器提供）"""
    total_time: float  # 毫秒


class SuccessDetail(BaseModel):
    """成功记录的附加信息"""
    model_config = ConfigDict(frozen=True)

    latency_ms: float


class FailureDetail(BaseModel):
    """失败记录的附加信息"""
    model_config = ConfigDict(frozen=True)

    message: str


class OutcomeRecord(BaseModel):
    """
    一次探测的标准化结果

    创建后不可修改，success 只在分类时计算一次。
    """
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    success: bool
    code: Optional[int] = None  # HTTP 状态码或错误码，仅用于诊断
    detail: Union[SuccessDetail, FailureDetail]

    @property
    def latency_ms(self) -> Optional[float]:
        if isinstance(self.detail, SuccessDetail):
            return self.detail.latency_ms
        return None


# =============================================================================
# 统计与事件
# =============================================================================

class SummaryStatistic(BaseModel):
    """一次扫描中单个目标的汇总统计（无数据的字段为 None）"""
    availability: Optional[float] = None
    avg_success_latency: Optional[float] = None
    min_success_latency: Optional[float] = None
    max_success_latency: Optional[float] = None
    successes: int = 0
    failures: int = 0


class ScanSpec(BaseModel):
    """扫描配置：每 delay 秒查询最近 amplitude 秒的数据"""
    model_config = ConfigDict(frozen=True)

    delay: float = Field(gt=0)
    amplitude: float = Field(ge=0)


class AlertEvent(BaseModel):
    """可用性越过阈值产生的事件"""
    type: Literal["alert", "resolve"]
    target: str
    availability: float
    ts: datetime
    message: str


# =============================================================================
# API 响应模型
# =============================================================================

class TargetStatusResponse(BaseModel):
    """目标实时状态（GET /api/targets）"""
    target: str
    window_size: int
    availability: Optional[float] = None
    alerting: bool = False


class SummaryResponse(BaseModel):
    """目标汇总统计（GET /api/targets/{target}/summary）"""
    target: str
    amplitude: float
    statistic: SummaryStatistic


class EventListResponse(BaseModel):
    """最近事件列表"""
    total: int
    data: List[AlertEvent] = Field(default_factory=list)
