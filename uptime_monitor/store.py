"""
保留存储（内存）

每个目标一个按时间排序的记录队列，超过保留时长的记录在写入时立即淘汰。
范围查询从最新记录向前扫描，遇到超出查询窗口的记录即停止。

注意：记录必须按时间戳非递减顺序写入。乱序写入不会被重新排序，
较旧的记录可能滞留在队列中（仅记录警告）。
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Deque, Dict, List, Optional

from .exceptions import DurationExceedsRetention, UnknownTarget
from .models import OutcomeRecord
from .utils import utc_now

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_HORIZON = 3600


@dataclass
class TargetEntry:
    """单个目标的保留数据"""
    retention_horizon: float
    records: Deque[OutcomeRecord] = field(default_factory=deque)
    lock: threading.Lock = field(default_factory=threading.Lock)


class RetentionStore:
    """按目标保存最近记录的内存存储"""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            clock: 返回当前 UTC 时间的函数，范围查询以它为"现在"
        """
        self._clock = clock or utc_now
        self._entries: Dict[str, TargetEntry] = {}

    def create_target(self, target_id: str, retention_horizon: float = DEFAULT_RETENTION_HORIZON):
        """
        创建（或重建）目标条目

        已存在的条目会被覆盖，之前的记录全部丢弃。
        """
        if target_id in self._entries:
            logger.info(f"Target {target_id} already exists in store, overwriting")
        self._entries[target_id] = TargetEntry(retention_horizon=retention_horizon)

    def has_target(self, target_id: str) -> bool:
        return target_id in self._entries

    def retention_horizon(self, target_id: str) -> float:
        return self._get_entry(target_id).retention_horizon

    def size(self, target_id: str) -> int:
        return len(self._get_entry(target_id).records)

    def append(self, target_id: str, record: OutcomeRecord):
        """
        追加记录并淘汰过期数据

        以最新记录为基准，淘汰队首所有早于 retention_horizon 的记录。

        Raises:
            UnknownTarget: 目标未创建
        """
        entry = self._get_entry(target_id)
        with entry.lock:
            records = entry.records
            if records and record.timestamp < records[-1].timestamp:
                logger.warning(
                    f"Out-of-order record for {target_id}: {record.timestamp.isoformat()} "
                    f"< {records[-1].timestamp.isoformat()}"
                )
            records.append(record)

            newest = records[-1].timestamp
            while (newest - records[0].timestamp).total_seconds() > entry.retention_horizon:
                records.popleft()

    def range_query(self, target_id: str, duration: float) -> List[OutcomeRecord]:
        """
        查询最近 duration 秒内的记录

        Args:
            target_id: 目标标识
            duration: 查询窗口（秒），不能大于保留时长

        Returns:
            记录列表，最新的在前

        Raises:
            UnknownTarget: 目标未创建
            DurationExceedsRetention: duration > retention_horizon
        """
        entry = self._get_entry(target_id)
        if duration > entry.retention_horizon:
            raise DurationExceedsRetention(target_id, duration, entry.retention_horizon)

        now = self._clock()
        result = []
        with entry.lock:
            for record in reversed(entry.records):
                if (now - record.timestamp).total_seconds() > duration:
                    break
                result.append(record)
        return result

    def _get_entry(self, target_id: str) -> TargetEntry:
        entry = self._entries.get(target_id)
        if entry is None:
            raise UnknownTarget(target_id)
        return entry
