"""
配置加载模块

从 config.yaml 加载配置，使用 Pydantic 校验，构造后不可修改。
"""

import os
import re
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .classifier import DEFAULT_ERROR_LIST
from .models import ScanSpec
from .scheduler import DEFAULT_SCANS

_PATTERN_RE = re.compile(r"^[0-9xX]+$")


def _check_error_list(patterns: List[str]) -> List[str]:
    for p in patterns:
        if not _PATTERN_RE.match(p):
            raise ValueError(f"Invalid status code pattern: {p!r} (digits and 'x' only)")
    return patterns


class ClassifierConfig(BaseModel):
    """结果分类配置"""
    model_config = ConfigDict(frozen=True)

    error_list: List[str] = Field(default_factory=lambda: list(DEFAULT_ERROR_LIST))

    @field_validator("error_list")
    @classmethod
    def _validate_error_list(cls, v: List[str]) -> List[str]:
        return _check_error_list(v)


class MonitorConfig(BaseModel):
    """滑动窗口监控配置"""
    model_config = ConfigDict(frozen=True)

    span: float = Field(default=120, gt=0)
    alert_threshold: float = Field(default=0.8, ge=0, le=1)
    persist: bool = True
    log_dir: str = "logs"


class RetentionConfig(BaseModel):
    """数据保留策略"""
    model_config = ConfigDict(frozen=True)

    horizon: float = Field(default=3600, gt=0)


class StatisticsConfig(BaseModel):
    """周期统计配置"""
    model_config = ConfigDict(frozen=True)

    scans: List[ScanSpec] = Field(default_factory=lambda: list(DEFAULT_SCANS))


class TargetConfig(BaseModel):
    """监控目标"""
    model_config = ConfigDict(frozen=True)

    url: str = Field(min_length=1)
    interval: float = Field(default=10, gt=0)
    timeout: float = Field(default=2, gt=0)
    file_name: Optional[str] = None
    error_list: Optional[List[str]] = None

    @field_validator("error_list")
    @classmethod
    def _validate_error_list(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _check_error_list(v) if v is not None else v

    @model_validator(mode="after")
    def _check_timeout(self):
        # 超时必须小于探测间隔
        if self.timeout >= self.interval:
            raise ValueError(
                f"timeout ({self.timeout}s) must be strictly less than interval ({self.interval}s)"
            )
        return self


class APIConfig(BaseModel):
    """API 服务配置"""
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 8080


class LoggingConfig(BaseModel):
    """日志配置"""
    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    file: Optional[str] = None


class AppConfig(BaseModel):
    """应用配置（完整配置）"""
    model_config = ConfigDict(frozen=True)

    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    retention: RetentionConfig = Field(default_factory=RetentionConfig)
    statistics: StatisticsConfig = Field(default_factory=StatisticsConfig)
    targets: List[TargetConfig] = Field(default_factory=list)
    api: APIConfig = Field(default_factory=APIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    加载配置文件

    优先级：
    1. 参数指定的路径
    2. 环境变量 UPTIME_MONITOR_CONFIG
    3. 默认路径 config.yaml

    文件不存在时使用默认配置。
    """
    if config_path is None:
        config_path = os.environ.get("UPTIME_MONITOR_CONFIG", "config.yaml")

    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
            if raw_config:
                return AppConfig(**raw_config)

    return AppConfig()


# 全局配置实例（延迟加载）
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """获取全局配置实例（单例模式）"""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config():
    """重置配置（主要用于测试）"""
    global _config
    _config = None
