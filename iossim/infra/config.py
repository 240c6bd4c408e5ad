"""配置管理 — 基于 Pydantic v2。

配置从 YAML 文件加载，经过 Pydantic 校验后生成不可变的配置对象。

使用方式::

    from iossim.infra.config import ConfigManager

    config = ConfigManager.load("iossim.yaml")
    print(config.simulator.default_device_name)

YAML 示例::

    simulator:
      default_device_name: "iPhone 8"
      boot_settle_delay: 2.0
    log:
      level: INFO
"""

from __future__ import annotations

import datetime
from pathlib import Path
from typing import Any, Literal

from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigError
from .file_utils import load_yaml, merge_dicts
from iossim.types import OSType


_DEFAULT_DEVICES_ROOT = Path("~/Library/Developer/CoreSimulator/Devices")
_DEFAULT_LOGS_ROOT = Path("~/Library/Logs/CoreSimulator")


# ── 子配置模型 ──


class SimulatorConfig(BaseModel):
    """模拟器行为配置。"""

    model_config = {"frozen": True, "validate_default": True}

    default_device_name: str = "iPhone 6"
    """无法按条件匹配时回退使用的设备名"""
    host_app_name: str = "Simulator"
    """宿主进程名，对应 ``<Xcode>/Applications/Simulator.app``"""
    xcode_path: Path | None = None
    """Xcode Developer 目录。None = 通过 ``xcode-select -print-path`` 获取"""
    devices_root: Path = _DEFAULT_DEVICES_ROOT
    """CoreSimulator 设备数据根目录"""
    logs_root: Path = _DEFAULT_LOGS_ROOT
    """旧版 iOS（< 11）system.log 所在根目录"""

    boot_settle_delay: float = 1.0
    """启动模拟器后的等待时间 (秒)"""
    launch_settle_delay: float = 0.5
    """启动应用后的等待时间 (秒)"""
    terminate_settle_delay: float = 0.5
    """终止应用后的等待时间 (秒)"""

    log_stream_min_version: int = 11
    """iOS 主版本号 >= 此值时使用 ``log stream``，否则 tail system.log"""
    killall_max_xcode_version: int = 8
    """Xcode 主版本号 < 此值时使用 ``killall`` 终止应用"""

    @field_validator("boot_settle_delay", "launch_settle_delay", "terminate_settle_delay")
    @classmethod
    def _validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("等待时间不能为负数")
        return v

    @field_validator("devices_root", "logs_root", "xcode_path")
    @classmethod
    def _expand_user(cls, v: Path | None) -> Path | None:
        return v.expanduser() if v is not None else None


class LogConfig(BaseModel):
    """日志配置。"""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    """日志级别"""
    root: Path = Path("log")
    """日志保存根目录"""
    dir: Path | None = None
    """日志保存路径。自动按日期生成"""
    to_file: bool = False
    """是否写入日志文件"""

    @model_validator(mode="after")
    def _set_log_dir(self) -> LogConfig:
        if self.dir is None:
            ts = datetime.datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            object.__setattr__(self, "dir", self.root / ts)
        return self


# ── 顶层配置 ──


class UserConfig(BaseModel):
    """用户配置（顶层聚合）。"""

    model_config = {"frozen": True}

    simulator: SimulatorConfig = Field(default_factory=SimulatorConfig)
    log: LogConfig = Field(default_factory=LogConfig)

    os_type: OSType = Field(default_factory=OSType.auto)
    """操作系统类型，自动检测"""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserConfig:
        """从字典构建配置，校验失败统一转换为 :class:`ConfigError`。"""
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"配置校验失败: {exc}") from exc

    @classmethod
    def from_yaml(cls, path: str | Path) -> UserConfig:
        """从 YAML 文件加载配置。"""
        return cls.from_dict(load_yaml(path))


# ── ConfigManager ──


class ConfigManager:
    """配置管理器 — 提供加载入口。"""

    @staticmethod
    def load(
        path: str | Path | None,
        overrides: dict[str, Any] | None = None,
    ) -> UserConfig:
        """从文件加载用户配置。

        Parameters
        ----------
        path:
            YAML 文件路径。未指定或不存在时使用默认配置。
        overrides:
            覆盖项（例如命令行参数），深度合并到文件内容之上；值为 None 的键被忽略。
        """
        data: dict[str, Any] = {}
        if path is not None:
            path = Path(path)
            if path.exists():
                data = load_yaml(path)
                logger.info("已加载配置: {}", path)
            else:
                logger.warning("配置文件 {} 不存在，使用默认配置", path)
        if overrides:
            data = merge_dicts(data, overrides)
        return UserConfig.from_dict(data)
