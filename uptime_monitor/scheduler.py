"""
周期汇总任务

每个 ScanSpec 一个独立的 asyncio 任务：每 delay 秒对所有跟踪目标
查询最近 amplitude 秒的记录，计算可用性与成功耗时统计并输出报告。
"""

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence

from .exceptions import MonitorError
from .models import OutcomeRecord, ScanSpec, SummaryStatistic
from .monitor import ReportSink, console_sink
from .store import RetentionStore

logger = logging.getLogger(__name__)

NO_DATA = "NO_DATA"

DEFAULT_SCANS = (
    ScanSpec(delay=10, amplitude=600),   # 每 10s 统计最近 10 分钟
    ScanSpec(delay=60, amplitude=3600),  # 每分钟统计最近 1 小时
)


def compute_summary(records: Iterable[OutcomeRecord]) -> SummaryStatistic:
    """
    计算汇总统计

    Args:
        records: 记录列表（顺序无关）

    Returns:
        SummaryStatistic，没有数据的字段为 None
    """
    successes = 0
    failures = 0
    latencies = []
    for record in records:
        if record.success:
            successes += 1
            latencies.append(record.latency_ms)
        else:
            failures += 1

    total = successes + failures
    return SummaryStatistic(
        availability=successes / total if total > 0 else None,
        avg_success_latency=sum(latencies) / len(latencies) if latencies else None,
        min_success_latency=min(latencies) if latencies else None,
        max_success_latency=max(latencies) if latencies else None,
        successes=successes,
        failures=failures,
    )


def _fmt_ratio(value: Optional[float]) -> str:
    return f"{value:.2f}" if value is not None else NO_DATA


def _fmt_latency(value: Optional[float]) -> str:
    return f"{value:.1f} (ms)" if value is not None else NO_DATA


def _fmt_seconds(value: float) -> str:
    return f"{value:g}"


def format_summary(target_id: str, amplitude: float, statistic: SummaryStatistic) -> str:
    """单个目标的报告行"""
    return (
        f"Statistics for the website {target_id} over the last {_fmt_seconds(amplitude)} seconds: "
        f"availability={_fmt_ratio(statistic.availability)} | "
        f"average success time={_fmt_latency(statistic.avg_success_latency)} | "
        f"max success time={_fmt_latency(statistic.max_success_latency)} | "
        f"min success time={_fmt_latency(statistic.min_success_latency)}"
    )


class RollupScheduler:
    """多周期汇总调度器"""

    def __init__(
        self,
        store: RetentionStore,
        scans: Optional[Sequence[ScanSpec]] = None,
        sink: Optional[ReportSink] = None,
    ):
        self.store = store
        self.scans = list(scans if scans is not None else DEFAULT_SCANS)
        self.sink = sink or console_sink
        self._tracked: List[str] = []
        self._tasks: List[asyncio.Task] = []

    @property
    def tracked(self) -> List[str]:
        return list(self._tracked)

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def track(self, target_id: str):
        """跟踪目标（目标必须已在存储中创建，否则忽略）"""
        if not self.store.has_target(target_id):
            logger.debug(f"Not tracking {target_id}: no store entry")
            return
        if target_id not in self._tracked:
            self._tracked.append(target_id)

    def scan(self, amplitude: float) -> List[str]:
        """
        执行一次扫描

        单个目标查询失败只输出错误行，不影响其它目标。

        Returns:
            本次输出的所有报告行
        """
        lines = [f"### SCAN REPORT (amplitude: {_fmt_seconds(amplitude)} s) ###"]
        for target_id in list(self._tracked):
            try:
                records = self.store.range_query(target_id, amplitude)
            except MonitorError as e:
                logger.warning(f"Scan failed for {target_id}: {e}")
                lines.append(
                    f"   Statistics for the website {target_id} over the last "
                    f"{_fmt_seconds(amplitude)} seconds: ERROR: {e}"
                )
                continue
            statistic = compute_summary(records)
            lines.append("   " + format_summary(target_id, amplitude, statistic))
        lines.append("### ------ ###")

        for line in lines:
            self.sink(line)
        return lines

    def start(self):
        """为每个 ScanSpec 启动独立的周期任务（需在事件循环中调用）"""
        if self.running:
            logger.warning("Rollup scheduler already running")
            return
        loop = asyncio.get_running_loop()
        self._tasks = [loop.create_task(self._run_scan_loop(spec)) for spec in self.scans]
        logger.info(f"Rollup scheduler started with {len(self.scans)} scan(s)")

    def stop(self):
        """取消所有周期任务，正在执行的扫描会先完成"""
        for task in self._tasks:
            task.cancel()
        self._tasks = []

    async def run(self):
        """启动并等待所有周期任务（用于 asyncio.gather）"""
        self.start()
        tasks = list(self._tasks)
        try:
            if tasks:
                await asyncio.gather(*tasks)
            else:
                # 没有配置扫描时保持运行，直到被取消
                await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.stop()
            raise

    async def _run_scan_loop(self, spec: ScanSpec):
        logger.info(f"Starting scan loop (delay={spec.delay}s, amplitude={spec.amplitude}s)")

        while True:
            try:
                await asyncio.sleep(spec.delay)
                self.scan(spec.amplitude)
            except asyncio.CancelledError:
                logger.info(f"Scan loop cancelled (amplitude={spec.amplitude}s)")
                raise
            except Exception as e:
                logger.error(f"Scan loop error: {e}", exc_info=True)
