"""模拟器层数据模型。

所有模型均为不可变数据类；设备集合只由 ``simctl`` 创建和销毁，
本项目只读取其快照。
"""

from __future__ import annotations

from dataclasses import dataclass

from iossim.types import DeviceState


DEVICE_TYPE_PREFIX = "com.apple.CoreSimulator.SimDeviceType."


def parse_version(version: str | None) -> tuple[int, ...]:
    """将 ``"12.1"`` 形式的版本号转换为可比较的整数元组。

    无法解析的分量按 0 处理，空字符串返回 ``()``。
    """
    if not version:
        return ()
    parts: list[int] = []
    for piece in version.split("."):
        digits = "".join(ch for ch in piece if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    return tuple(parts)


@dataclass(frozen=True, slots=True)
class Device:
    """``simctl`` 报告的单个模拟器设备。

    Attributes
    ----------
    id:
        设备 UDID。为 ``None`` 时表示占位设备（"使用默认解析结果"）。
    name:
        设备名，例如 ``"iPhone X"``，不同运行时之间可能重名。
    runtime_version:
        iOS 版本号，例如 ``"12.1"``。
    state:
        当前启动状态。
    full_id:
        设备类型完整标识，例如 ``"com.apple.CoreSimulator.SimDeviceType.iPhone-X"``。
    """

    id: str | None = None
    name: str = ""
    runtime_version: str = ""
    state: DeviceState = DeviceState.shutdown
    full_id: str = ""

    @property
    def is_booted(self) -> bool:
        return self.state == DeviceState.booted

    @property
    def is_complete(self) -> bool:
        """是否携带完整描述（运行时版本与设备类型标识）。"""
        return bool(self.runtime_version and self.full_id)

    @property
    def major_version(self) -> int | None:
        """iOS 主版本号；版本未知时为 ``None``。"""
        version = parse_version(self.runtime_version)
        return version[0] if version else None


@dataclass(frozen=True, slots=True)
class Sdk:
    """设备列表中出现的 iOS 运行时。"""

    display_name: str
    version: str


@dataclass(frozen=True, slots=True)
class Application:
    """设备上已安装的应用。

    Attributes
    ----------
    guid:
        应用容器目录名。
    app_identifier:
        Bundle ID (``CFBundleIdentifier``)。
    path:
        ``.app`` 包的绝对路径。
    """

    guid: str
    app_identifier: str
    path: str


@dataclass(frozen=True, slots=True)
class SelectionCriteria:
    """调用方给出的设备选择条件，两个字段均可缺省。

    Attributes
    ----------
    device:
        设备 UDID 或设备名。
    sdk_version:
        iOS 运行时版本号。
    """

    device: str | None = None
    sdk_version: str | None = None


@dataclass(frozen=True, slots=True)
class LaunchOptions(SelectionCriteria):
    """``run`` / ``start_application`` 的完整选项。"""

    skip_install: bool = False
    wait_for_debugger: bool = False
    args: tuple[str, ...] = ()
