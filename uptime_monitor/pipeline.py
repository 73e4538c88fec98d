"""
监控流水线

持有共享的保留存储、汇总调度器和全部监控目标，并记录最近的告警事件。
"""

import asyncio
import logging
from collections import deque
from datetime import datetime
from typing import Callable, Deque, Dict, List, Optional

from .config import AppConfig, TargetConfig
from .models import AlertEvent
from .monitor import ReportSink
from .scheduler import RollupScheduler
from .store import RetentionStore
from .target import MonitoredTarget

logger = logging.getLogger(__name__)

EVENT_HISTORY_SIZE = 200


class Pipeline:
    """进程级监控对象"""

    def __init__(
        self,
        config: AppConfig,
        sink: Optional[ReportSink] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        self.sink = sink
        self.clock = clock
        self.store = RetentionStore(clock=clock)
        self.scheduler = RollupScheduler(self.store, config.statistics.scans, sink=sink)
        self.targets: Dict[str, MonitoredTarget] = {}
        self._events: Deque[AlertEvent] = deque(maxlen=EVENT_HISTORY_SIZE)
        self._running = False

        for target_config in config.targets:
            self.add_target(target_config)

    def add_target(self, target_config: TargetConfig, **kwargs) -> MonitoredTarget:
        """
        注册目标：创建存储条目、订阅监控并加入统计跟踪

        同一 URL 重复注册会覆盖之前的目标和数据。
        流水线已运行时立即启动该目标的探测（需在事件循环中调用）。
        """
        error_list = target_config.error_list
        if error_list is None:
            error_list = self.config.classifier.error_list

        previous = self.targets.get(target_config.url)
        if previous is not None:
            previous.stop()

        target = MonitoredTarget(
            target_config.url,
            self.store,
            interval=target_config.interval,
            timeout=target_config.timeout,
            error_list=error_list,
            file_name=target_config.file_name,
            monitor_config=self.config.monitor,
            retention_config=self.config.retention,
            sink=self.sink,
            clock=self.clock,
            **kwargs,
        )
        target.prepare()
        target.monitor.add_listener(self._events.append)
        self.scheduler.track(target.url)
        self.targets[target.url] = target
        if self._running:
            target.prober.start()
        return target

    def recent_events(self, limit: int = EVENT_HISTORY_SIZE) -> List[AlertEvent]:
        """最近事件，按时间倒序"""
        events = list(self._events)
        events.reverse()
        return events[:limit]

    @property
    def running(self) -> bool:
        return self._running

    async def run(self):
        """启动所有探测器和汇总任务，直到被取消"""
        self._running = True
        for target in self.targets.values():
            target.prober.start()
        logger.info(f"Pipeline running with {len(self.targets)} target(s)")
        try:
            await self.scheduler.run()
        finally:
            self.stop()

    def stop(self):
        self._running = False
        for target in self.targets.values():
            target.stop()
        self.scheduler.stop()
