"""
监控目标

把一个目标的探测器、分类器、滑动窗口监控器和保留存储连接起来。
"""

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

import httpx

from .classifier import OutcomeClassifier
from .config import MonitorConfig, RetentionConfig
from .monitor import AvailabilityMonitor, ReportSink
from .prober import HttpProber
from .store import RetentionStore

logger = logging.getLogger(__name__)


class MonitoredTarget:
    """单个被监控的站点"""

    def __init__(
        self,
        url: str,
        store: RetentionStore,
        interval: float = 10,
        timeout: float = 2,
        error_list: Optional[Iterable[str]] = None,
        file_name: Optional[str] = None,
        monitor_config: Optional[MonitorConfig] = None,
        retention_config: Optional[RetentionConfig] = None,
        sink: Optional[ReportSink] = None,
        clock: Optional[Callable[[], datetime]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not url:
            raise ValueError("url should not be empty")

        monitor_config = monitor_config or MonitorConfig()
        self.retention_config = retention_config or RetentionConfig()
        self.url = url
        self.store = store

        self.classifier = OutcomeClassifier(url, store, error_list=error_list, clock=clock)
        self.monitor = AvailabilityMonitor(
            url,
            span=monitor_config.span,
            alert_threshold=monitor_config.alert_threshold,
            persist=monitor_config.persist,
            log_dir=monitor_config.log_dir,
            file_name=file_name,
            sink=sink,
        )
        self.prober = HttpProber(
            url,
            on_success=self.classifier.on_success,
            on_failure=self.classifier.on_failure,
            interval=interval,
            timeout=timeout,
            transport=transport,
        )

    def prepare(self):
        """创建存储条目并让监控器订阅分类器（不启动探测）"""
        self.store.create_target(self.url, self.retention_config.horizon)
        self.monitor.watch(self.classifier)

    def start(self):
        """开始监控（需在事件循环中调用）"""
        self.prepare()
        self.prober.start()
        logger.info(f"Monitoring {self.url}")

    def stop(self):
        self.prober.stop()
        self.monitor.unwatch()
