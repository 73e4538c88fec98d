"""
事件 API

提供告警/恢复事件查询。
"""

from fastapi import APIRouter, Depends, Query

from ...models import EventListResponse
from ...pipeline import Pipeline
from ..dependencies import get_pipeline

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=EventListResponse)
async def list_events(
    limit: int = Query(50, ge=1, le=200, description="返回数量限制"),
    pipeline: Pipeline = Depends(get_pipeline)
):
    """
    获取最近事件

    按时间倒序返回。
    """
    events = pipeline.recent_events(limit)
    return EventListResponse(total=len(events), data=events)
