"""
依赖注入模块

提供 FastAPI 依赖项。
"""

from typing import Optional

from ..pipeline import Pipeline

_pipeline: Optional[Pipeline] = None


def set_pipeline(pipeline: Optional[Pipeline]):
    """注册当前进程的流水线实例（由 main 在启动时调用）"""
    global _pipeline
    _pipeline = pipeline


async def get_pipeline() -> Pipeline:
    """获取流水线实例"""
    if _pipeline is None:
        raise RuntimeError("Pipeline not initialized")
    return _pipeline
