"""基础设施层 — 日志、配置、异常体系、文件工具。"""

from .config import (
    ConfigManager,
    LogConfig,
    SimulatorConfig,
    UserConfig,
)
from .exceptions import (
    CommandError,
    ConfigError,
    DeviceNotFoundError,
    IOSSimError,
    NoDeviceAvailableError,
    SimulatorError,
    SimulatorHostError,
    XcodeError,
)
from .file_utils import load_yaml, merge_dicts
from .logger import setup_logger

__all__ = [
    # config
    "ConfigManager",
    "LogConfig",
    "SimulatorConfig",
    "UserConfig",
    # exceptions
    "CommandError",
    "ConfigError",
    "DeviceNotFoundError",
    "IOSSimError",
    "NoDeviceAvailableError",
    "SimulatorError",
    "SimulatorHostError",
    "XcodeError",
    # file_utils
    "load_yaml",
    "merge_dicts",
    # logger
    "setup_logger",
]
