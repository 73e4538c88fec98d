"""
HTTP 探测器

每隔 interval 秒对目标发起一次 HEAD 请求：
- 收到任何响应都回调 on_success（状态码由分类器判断）
- 超时、连接失败等传输错误回调 on_failure
"""

import asyncio
import logging
import time
from typing import Any, Callable, Optional

import httpx

from .models import ProbeTiming

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[int, Any, Any, ProbeTiming], None]
FailureCallback = Callable[[BaseException, Optional[int]], None]


class HttpProber:
    """单个目标的周期探测器"""

    def __init__(
        self,
        url: str,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
        interval: float = 10,
        timeout: float = 2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            url: 目标地址（没有协议头时补 http://）
            on_success: 收到响应时的回调
            on_failure: 请求失败时的回调
            interval: 探测间隔（秒）
            timeout: 请求超时（秒），必须小于 interval
            transport: 自定义 httpx 传输层（测试用）
        """
        if not url:
            raise ValueError("url should not be empty")
        if interval <= timeout:
            raise ValueError(
                f"interval ({interval}s) must be strictly greater than timeout ({timeout}s)"
            )

        self.url = url if "://" in url else f"http://{url}"
        self.on_success = on_success
        self.on_failure = on_failure
        self.interval = interval
        self.timeout = timeout
        self._transport = transport
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def probe_once(self, client: httpx.AsyncClient):
        """执行一次探测并触发对应回调"""
        started = time.monotonic()
        try:
            response = await client.head(self.url)
        except httpx.HTTPError as e:
            logger.debug(f"Probe failed for {self.url}: {e}")
            self.on_failure(e, None)
            return
        total_time = (time.monotonic() - started) * 1000
        self.on_success(
            response.status_code,
            response.content,
            response.headers,
            ProbeTiming(total_time=total_time),
        )

    async def run(self):
        """探测循环"""
        logger.info(f"Starting prober for {self.url} (interval={self.interval}s, timeout={self.timeout}s)")

        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            while True:
                try:
                    await self.probe_once(client)
                except asyncio.CancelledError:
                    logger.info(f"Prober for {self.url} cancelled")
                    raise
                except Exception as e:
                    logger.error(f"Prober loop error for {self.url}: {e}", exc_info=True)

                await asyncio.sleep(self.interval)

    def start(self):
        """在当前事件循环中启动探测任务"""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self.run())

    def stop(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None
