"""
FastAPI 应用配置

只读 API：目标实时状态、汇总统计、最近告警事件。
"""

import logging

from fastapi import FastAPI

from .routers import events, targets

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="Uptime Monitor",
        description="站点可用性监控 API",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json"
    )

    app.include_router(targets.router)
    app.include_router(events.router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    return app
