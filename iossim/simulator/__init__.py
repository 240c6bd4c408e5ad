"""模拟器层 — 设备解析、生命周期与应用管理。

提供三大核心能力：

1. **设备目录与解析** (`DeviceDirectory` / `DeviceResolver`)：
   从 ``simctl`` 设备快照中确定唯一的目标设备。

2. **生命周期与应用会话** (`SimctlSimulator` / `create_simulator`)：
   启动设备、安装/启动/终止应用、获取日志流。

3. **宿主进程管理** (`SimulatorHost`)：
   在 macOS 上启动、停止、检测 Simulator.app。
"""

from iossim.simulator.directory import DeviceDirectory
from iossim.simulator.host import SimulatorHost
from iossim.simulator.models import (
    Application,
    Device,
    LaunchOptions,
    Sdk,
    SelectionCriteria,
)
from iossim.simulator.resolver import DeviceResolver, select_device
from iossim.simulator.simctl import Simctl
from iossim.simulator.simulator import (
    IPhoneSimulator,
    SimctlSimulator,
    create_simulator,
)
from iossim.simulator.xcode import XcodeVersion, get_xcode_version

__all__ = [
    # models
    "Application",
    "Device",
    "LaunchOptions",
    "Sdk",
    "SelectionCriteria",
    # directory / resolver
    "DeviceDirectory",
    "DeviceResolver",
    "select_device",
    # services
    "Simctl",
    "SimulatorHost",
    "XcodeVersion",
    "get_xcode_version",
    # simulator
    "IPhoneSimulator",
    "SimctlSimulator",
    "create_simulator",
]
