"""
探测结果分类

将探测器的成功/失败回调转换为 OutcomeRecord：
- 状态码命中错误列表（如 "4xx"、"5xx"）时按失败处理
- 每条记录先写入保留存储，再依次推送给订阅者（滑动窗口监控等）
"""

import logging
import re
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional, Pattern

from .exceptions import MonitorError
from .models import FailureDetail, OutcomeRecord, ProbeTiming, SuccessDetail
from .store import RetentionStore
from .utils import utc_now

logger = logging.getLogger(__name__)

DEFAULT_ERROR_LIST = ("4xx", "5xx")
ERROR_CODE_MESSAGE = "Bad HTTP status code (matched error list)"

RecordListener = Callable[[OutcomeRecord], None]


def compile_pattern(pattern: str) -> Pattern:
    """
    编译状态码匹配模式

    "x"（不区分大小写）匹配任意一位数字，其余字符按字面匹配。
    """
    expanded = "".join("[0-9]" if ch in "xX" else re.escape(ch) for ch in pattern)
    return re.compile(expanded)


def match_code(pattern: str, code: int) -> bool:
    """状态码的十进制表示是否完整匹配该模式"""
    return compile_pattern(pattern).fullmatch(str(code)) is not None


class OutcomeClassifier:
    """单个目标的探测结果分类器"""

    def __init__(
        self,
        target_id: str,
        store: RetentionStore,
        error_list: Optional[Iterable[str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.target_id = target_id
        self.store = store
        self.error_list = list(error_list if error_list is not None else DEFAULT_ERROR_LIST)
        self._patterns = [compile_pattern(p) for p in self.error_list]
        self._clock = clock or utc_now
        self._listeners: List[RecordListener] = []

    def subscribe(self, listener: RecordListener):
        """注册记录订阅者，每条记录都会同步推送"""
        self._listeners.append(listener)

    def unsubscribe(self, listener: RecordListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def is_error_code(self, status_code: int) -> bool:
        text = str(status_code)
        return any(p.fullmatch(text) for p in self._patterns)

    def classify_success(
        self,
        status_code: int,
        timing: ProbeTiming,
        body: Any = None,
        headers: Any = None,
    ) -> OutcomeRecord:
        """
        处理一次完成的 HTTP 请求

        命中错误列表的状态码转为失败记录（不携带耗时）。
        """
        if self.is_error_code(status_code):
            return self.classify_failure(Exception(ERROR_CODE_MESSAGE), status_code)

        record = OutcomeRecord(
            timestamp=self._clock(),
            success=True,
            code=status_code,
            detail=SuccessDetail(latency_ms=timing.total_time),
        )
        self._export(record)
        return record

    def classify_failure(self, error: BaseException, error_code: Optional[int] = None) -> OutcomeRecord:
        """处理一次失败的探测（超时、连接错误或命中错误列表）"""
        record = OutcomeRecord(
            timestamp=self._clock(),
            success=False,
            code=error_code,
            detail=FailureDetail(message=str(error)),
        )
        self._export(record)
        return record

    # 探测器回调签名
    def on_success(self, status_code: int, body: Any, headers: Any, timing: ProbeTiming):
        self.classify_success(status_code, timing, body=body, headers=headers)

    def on_failure(self, error: BaseException, error_code: Optional[int]):
        self.classify_failure(error, error_code)

    def _export(self, record: OutcomeRecord):
        """写入存储并推送给订阅者，任何一步失败都不影响其余步骤"""
        try:
            self.store.append(self.target_id, record)
        except MonitorError as e:
            logger.error(f"Failed to store record for {self.target_id}: {e}")

        for listener in list(self._listeners):
            try:
                listener(record)
            except Exception as e:
                logger.error(f"Record listener failed for {self.target_id}: {e}", exc_info=True)
