"""
目标 API

提供目标实时可用性和按时间窗口的汇总统计。
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...exceptions import DurationExceedsRetention, UnknownTarget
from ...models import SummaryResponse, TargetStatusResponse
from ...pipeline import Pipeline
from ...scheduler import compute_summary
from ..dependencies import get_pipeline

router = APIRouter(prefix="/api/targets", tags=["targets"])


@router.get("", response_model=List[TargetStatusResponse])
async def list_targets(pipeline: Pipeline = Depends(get_pipeline)):
    """获取所有目标的滑动窗口状态"""
    return [
        TargetStatusResponse(
            target=url,
            window_size=target.monitor.window_size,
            availability=target.monitor.availability_or_none(),
            alerting=target.monitor.alerting,
        )
        for url, target in pipeline.targets.items()
    ]


@router.get("/{target:path}/summary", response_model=SummaryResponse)
async def get_summary(
    target: str,
    amplitude: float = Query(600, ge=0, description="统计窗口（秒）"),
    pipeline: Pipeline = Depends(get_pipeline)
):
    """
    获取目标最近 amplitude 秒的汇总统计

    - 404: 目标不存在
    - 400: 窗口超过保留时长
    """
    try:
        records = pipeline.store.range_query(target, amplitude)
    except UnknownTarget as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DurationExceedsRetention as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return SummaryResponse(target=target, amplitude=amplitude, statistic=compute_summary(records))
