"""全局枚举类型定义。

与模拟器语义相关的枚举集中于此，供各层引用。
"""

from __future__ import annotations

import sys
from enum import Enum


# ── 枚举基类 ──


class BaseEnum(Enum):
    """提供更友好的中文报错信息。"""

    @classmethod
    def _missing_(cls, value: object) -> None:
        supported = ", ".join(str(m.value) for m in cls)
        raise ValueError(f'"{value}" 不是合法的 {cls.__name__} 取值。 支持: [{supported}]')


class StrEnum(str, BaseEnum):
    """字符串枚举基类。"""


# ── 系统 / 环境 ──


class OSType(StrEnum):
    """操作系统类型。"""

    windows = "Windows"
    linux = "linux"
    macos = "macOS"

    @classmethod
    def auto(cls) -> OSType:
        """根据当前运行环境自动检测。"""
        if sys.platform.startswith("win"):
            return cls.windows
        if sys.platform == "darwin":
            return cls.macos
        if sys.platform.startswith("linux"):
            return cls.linux
        raise ValueError(f"不支持的操作系统: {sys.platform}")


# ── 模拟器 ──


class DeviceState(StrEnum):
    """``simctl`` 报告的设备状态。"""

    booted = "Booted"
    shutdown = "Shutdown"
    booting = "Booting"
    shutting_down = "Shutting Down"
    creating = "Creating"
    unknown = "Unknown"

    @classmethod
    def parse(cls, raw: str | None) -> DeviceState:
        """宽松解析：无法识别的状态统一映射为 :attr:`unknown`。"""
        try:
            return cls(raw)
        except ValueError:
            return cls.unknown
