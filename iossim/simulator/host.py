"""模拟器宿主进程（Simulator.app）管理。

仅负责在 macOS 上管理宿主 **进程** 的生命周期，
与设备内部的应用操作（安装/启动等，见 :mod:`.simctl`）无关。
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from loguru import logger

from iossim.infra import CommandError, SimulatorConfig, SimulatorHostError, XcodeError

from .process import exec_sync
from .xcode import get_xcode_path


class SimulatorHost:
    """Simulator.app 宿主进程。

    Parameters
    ----------
    config:
        模拟器配置，提供宿主进程名与 Xcode 路径。
    """

    def __init__(self, config: SimulatorConfig) -> None:
        self._process_name = config.host_app_name
        self._xcode_path = config.xcode_path

    def is_running(self) -> bool:
        """宿主进程是否存在。每次调用都重新探测。"""
        try:
            subprocess.run(
                ["pgrep", "-x", self._process_name],
                check=True,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except (subprocess.CalledProcessError, OSError):
            return False
        return True

    @property
    def app_path(self) -> Path:
        """``<Xcode>/Applications/Simulator.app`` 的路径。"""
        xcode_path = self._xcode_path or get_xcode_path()
        return xcode_path / "Applications" / f"{self._process_name}.app"

    def start(self, device_id: str) -> None:
        """启动宿主进程并聚焦到指定设备。宿主已运行时只切换设备。

        Raises
        ------
        SimulatorHostError
            启动失败时抛出。
        """
        try:
            exec_sync(["open", "-a", str(self.app_path), "--args", "-CurrentDeviceUDID", device_id])
        except (CommandError, XcodeError) as exc:
            raise SimulatorHostError(f"启动 {self._process_name} 失败: {exc}") from exc
        logger.info("[Host] 已请求 {} 显示设备 {}", self._process_name, device_id)

    def stop(self) -> None:
        """强制结束宿主进程。

        Raises
        ------
        SimulatorHostError
            停止失败时抛出。
        """
        try:
            exec_sync(["pkill", "-9", "-f", self._process_name])
        except CommandError as exc:
            raise SimulatorHostError(f"停止 {self._process_name} 失败: {exc}") from exc
        logger.info("[Host] {} 已停止", self._process_name)
