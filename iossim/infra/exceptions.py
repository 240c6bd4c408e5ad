"""iossim 异常层级体系。

层级树::

    IOSSimError
    ├── ConfigError
    ├── CommandError
    ├── XcodeError
    └── SimulatorError
        ├── DeviceNotFoundError
        ├── NoDeviceAvailableError
        └── SimulatorHostError
"""

from __future__ import annotations


# ── 基类 ──


class IOSSimError(Exception):
    """所有 iossim 异常的基类。"""


# ── 基础设施异常 ──


class ConfigError(IOSSimError):
    """配置错误（文件缺失、字段非法等）。"""


class CommandError(IOSSimError):
    """外部命令执行失败。"""

    def __init__(
        self,
        cmd: list[str] | str,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        self.cmd = cmd if isinstance(cmd, str) else " ".join(cmd)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"命令执行失败: {self.cmd}"
        if returncode is not None:
            msg += f" (退出码 {returncode})"
        if stderr:
            msg += f": {stderr}"
        super().__init__(msg)


class XcodeError(IOSSimError):
    """Xcode 工具链探测失败。"""


# ── 模拟器异常 ──


class SimulatorError(IOSSimError):
    """模拟器操作失败。"""


class DeviceNotFoundError(SimulatorError):
    """指定的设备标识不在当前设备列表中。"""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"没有可用于设备标识 '{identifier}' 的模拟器镜像")


class NoDeviceAvailableError(SimulatorError):
    """设备列表为空，无法选择任何模拟器。"""


class SimulatorHostError(SimulatorError):
    """模拟器宿主进程（Simulator.app）启动或停止失败。"""
