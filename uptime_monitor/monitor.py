"""
滑动窗口可用性监控

维护最近 span 秒（默认 120s）的记录队列和成功计数，
可用性向下穿越阈值时告警，向上穿越时解除告警。
恰好等于阈值时不触发任何状态变化。
"""

import logging
from collections import deque
from pathlib import Path
from typing import Callable, Deque, List, Optional, Union

from .classifier import OutcomeClassifier
from .exceptions import PersistenceFailure
from .models import AlertEvent, OutcomeRecord
from .utils import pretty_timestamp, target_file_name

logger = logging.getLogger(__name__)

DEFAULT_SPAN = 120
DEFAULT_ALERT_THRESHOLD = 0.8

ReportSink = Callable[[str], None]
EventListener = Callable[[AlertEvent], None]


def console_sink(line: str):
    """默认报告输出：标准输出"""
    print(line, flush=True)


class AlertLog:
    """单个目标的告警日志文件（只追加，不回读）"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def append(self, line: str):
        """
        追加一行

        Raises:
            PersistenceFailure: 写入失败
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            raise PersistenceFailure(str(self.path), e) from e


class AvailabilityMonitor:
    """单个目标的滑动窗口监控器"""

    def __init__(
        self,
        label: str,
        span: float = DEFAULT_SPAN,
        alert_threshold: float = DEFAULT_ALERT_THRESHOLD,
        persist: bool = True,
        log_dir: Union[str, Path] = "logs",
        file_name: Optional[str] = None,
        sink: Optional[ReportSink] = None,
    ):
        """
        Args:
            label: 目标标识（通常为 URL），用于消息和日志文件名
            span: 窗口时长（秒）
            alert_threshold: 告警阈值（0~1）
            persist: 是否把告警写入日志文件
            log_dir: 日志文件目录
            file_name: 自定义日志文件名（不含 .txt），默认由 label 推导
            sink: 告警消息输出
        """
        self.label = label
        self.span = span
        self.alert_threshold = alert_threshold
        self.persist = persist
        name = file_name + ".txt" if file_name else target_file_name(label)
        self.alert_log = AlertLog(Path(log_dir) / name)
        self.sink = sink or console_sink

        self._window: Deque[OutcomeRecord] = deque()
        self._success_sum = 0
        self._alerting = False
        self._listeners: List[EventListener] = []
        self._classifier: Optional[OutcomeClassifier] = None

    @property
    def window_size(self) -> int:
        return len(self._window)

    @property
    def success_sum(self) -> int:
        return self._success_sum

    @property
    def alerting(self) -> bool:
        return self._alerting

    @property
    def availability(self) -> float:
        """窗口内成功比例，窗口为空时不可用"""
        if not self._window:
            raise ValueError(f"Availability window for {self.label} is empty")
        return self._success_sum / len(self._window)

    def availability_or_none(self) -> Optional[float]:
        return self.availability if self._window else None

    def window(self) -> List[OutcomeRecord]:
        return list(self._window)

    def add_listener(self, listener: EventListener):
        """注册告警/恢复事件回调"""
        self._listeners.append(listener)

    def watch(self, classifier: OutcomeClassifier):
        """订阅分类器产出的每条记录"""
        self.unwatch()
        classifier.subscribe(self.ingest)
        self._classifier = classifier

    def unwatch(self):
        if self._classifier is not None:
            self._classifier.unsubscribe(self.ingest)
            self._classifier = None

    def ingest(self, record: OutcomeRecord):
        """
        接收一条记录

        入队、更新成功计数、淘汰超出窗口的旧记录，然后执行告警判断。
        """
        window = self._window
        if window and record.timestamp < window[-1].timestamp:
            logger.warning(f"Out-of-order record for {self.label}: {record.timestamp.isoformat()}")

        window.append(record)
        if record.success:
            self._success_sum += 1

        newest = record.timestamp
        while (newest - window[0].timestamp).total_seconds() > self.span:
            evicted = window.popleft()
            if evicted.success:
                self._success_sum -= 1

        self._check_alert(record)

    def _check_alert(self, record: OutcomeRecord):
        availability = self.availability
        logger.debug(f"{self.label} availability is now {availability:.3f}")

        if availability < self.alert_threshold and not self._alerting:
            self._alerting = True
            message = (
                f"ALERT: website {{{self.label}}} is down. "
                f"Availability: {availability:.2f} (time: {pretty_timestamp(record.timestamp)})"
            )
            logger.warning(f"Target {self.label} went below threshold ({availability:.2f})")
            self._emit("alert", availability, record, message)
        elif availability > self.alert_threshold and self._alerting:
            self._alerting = False
            message = (
                f"INFO: website {{{self.label}}} is running again. "
                f"Availability: {availability:.2f} (solved at: {pretty_timestamp(record.timestamp)})"
            )
            logger.info(f"Target {self.label} recovered ({availability:.2f})")
            self._emit("resolve", availability, record, message)

    def _emit(self, event_type: str, availability: float, record: OutcomeRecord, message: str):
        # 输出、日志文件、事件回调互相独立，任何一步失败都不影响其余步骤
        try:
            self.sink(message)
        except Exception as e:
            logger.error(f"Report sink failed for {self.label}: {e}", exc_info=True)

        if self.persist:
            try:
                self.alert_log.append(message)
            except PersistenceFailure as e:
                logger.error(f"Alert log write failed for {self.label}: {e}")

        event = AlertEvent(
            type=event_type,
            target=self.label,
            availability=availability,
            ts=record.timestamp,
            message=message,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Alert listener failed for {self.label}: {e}", exc_info=True)
