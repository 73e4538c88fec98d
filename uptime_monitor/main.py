"""
主程序入口

启动并发任务：
1. 每个目标的探测循环
2. 每个 ScanSpec 的汇总循环
3. REST API 服务（可选）
"""

import asyncio
import logging
import sys
from pathlib import Path

import uvicorn

from . import __version__
from .api.dependencies import set_pipeline
from .config import get_config
from .pipeline import Pipeline


def setup_logging():
    """配置日志"""
    config = get_config()

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    level = getattr(logging, config.logging.level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    if config.logging.file:
        log_path = Path(config.logging.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(str(log_path), encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(log_format))
        logging.getLogger().addHandler(file_handler)

    # 降低第三方库日志级别
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


async def run_api_server():
    """运行 API 服务器"""
    from .api.app import create_app

    config = get_config()
    app = create_app()

    server_config = uvicorn.Config(
        app=app,
        host=config.api.host,
        port=config.api.port,
        log_level="info",
        access_log=False
    )
    server = uvicorn.Server(server_config)
    await server.serve()


async def main():
    """主函数：启动所有任务"""
    logger = logging.getLogger(__name__)

    setup_logging()
    logger.info("=" * 60)
    logger.info(f"Uptime Monitor v{__version__}")
    logger.info("=" * 60)

    config = get_config()
    if not config.targets:
        logger.warning("No targets configured, only the scheduler will run")

    pipeline = Pipeline(config)
    set_pipeline(pipeline)

    tasks = [pipeline.run()]
    if config.api.enabled:
        logger.info(f"API enabled at {config.api.host}:{config.api.port}")
        tasks.append(run_api_server())

    try:
        await asyncio.gather(*tasks)
    except asyncio.CancelledError:
        logger.info("Tasks cancelled, shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise
    finally:
        pipeline.stop()
        set_pipeline(None)


def cli():
    """命令行入口"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nShutdown requested, exiting...")
        sys.exit(0)


if __name__ == "__main__":
    cli()
