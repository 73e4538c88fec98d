"""
异常定义

- UnknownTarget: 操作了未创建的目标（编排错误，总是抛给调用方）
- DurationExceedsRetention: 查询窗口大于保留时长（只影响本次查询）
- PersistenceFailure: 告警日志写入失败（只记录日志，不向上抛出）
"""


class MonitorError(Exception):
    """所有监控异常的基类"""


class UnknownTarget(MonitorError):
    def __init__(self, target_id: str):
        self.target_id = target_id
        super().__init__(f"Unknown target '{target_id}', create it first")


class DurationExceedsRetention(MonitorError):
    def __init__(self, target_id: str, duration: float, horizon: float):
        self.target_id = target_id
        self.duration = duration
        self.horizon = horizon
        super().__init__(
            f"Query duration {duration}s for '{target_id}' exceeds retention horizon {horizon}s"
        )


class PersistenceFailure(MonitorError):
    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to append to {path}: {cause}")
