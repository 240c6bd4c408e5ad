"""iOS 模拟器控制器 — 模拟器层核心。

提供两大能力：

1. **生命周期** (:meth:`SimctlSimulator.start_simulator`)：解析目标设备，
   在需要时启动设备与宿主进程，可重复调用。
2. **应用会话** (:meth:`SimctlSimulator.run` 等)：安装、启动、终止、
   卸载应用，以及获取设备日志流。

使用方式::

    from iossim.infra import UserConfig
    from iossim.simulator import LaunchOptions, create_simulator

    sim = create_simulator(UserConfig())
    result = sim.run("build/App.app", "org.example.app", LaunchOptions(sdk_version="12.1"))
"""

from __future__ import annotations

import subprocess
import time
from abc import ABC, abstractmethod

from loguru import logger

from iossim.infra import (
    DeviceNotFoundError,
    SimulatorConfig,
    SimulatorError,
    UserConfig,
    XcodeError,
)
from iossim.types import OSType

from .apps import get_installed_applications
from .directory import DeviceDirectory
from .host import SimulatorHost
from .models import Application, Device, LaunchOptions, Sdk, SelectionCriteria
from .process import exec_sync, spawn
from .resolver import DeviceResolver
from .simctl import Simctl
from .xcode import get_xcode_version

# 低于该 Xcode 主版本的是基于原生桥接的旧版模拟器，不受支持
_MIN_SIMCTL_XCODE_VERSION = 6


class IPhoneSimulator(ABC):
    """iOS 模拟器能力接口。

    仅描述对外暴露的操作，具体实现由 :func:`create_simulator` 在启动时选定。
    """

    # ── 设备查询 ──

    @abstractmethod
    def get_devices(self) -> list[Device]:
        """返回当前所有可用设备。"""
        ...

    @abstractmethod
    def get_sdks(self) -> list[Sdk]:
        """返回每个设备对应的 iOS 运行时。"""
        ...

    # ── 生命周期 ──

    @abstractmethod
    def start_simulator(self, options: SelectionCriteria, device: Device | None = None) -> Device:
        """确保目标设备已启动，返回最终使用的设备。"""
        ...

    @abstractmethod
    def run(self, application_path: str, app_identifier: str, options: LaunchOptions) -> str:
        """启动设备、安装并运行应用，返回启动结果。"""
        ...

    # ── 应用管理 ──

    @abstractmethod
    def install_application(self, device_id: str, application_path: str) -> None:
        ...

    @abstractmethod
    def uninstall_application(self, device_id: str, app_identifier: str) -> None:
        ...

    @abstractmethod
    def start_application(
        self,
        device_id: str,
        app_identifier: str,
        options: LaunchOptions | None = None,
    ) -> str:
        ...

    @abstractmethod
    def stop_application(
        self,
        device_id: str,
        app_identifier: str,
        bundle_executable: str,
    ) -> str | None:
        ...

    @abstractmethod
    def get_application_path(self, device_id: str, app_identifier: str) -> str | None:
        ...

    @abstractmethod
    def get_installed_applications(self, device_id: str) -> list[Application]:
        ...

    # ── 其他 ──

    @abstractmethod
    def send_notification(self, notification: str, device_id: str) -> None:
        ...

    @abstractmethod
    def kill_simulator(self) -> None:
        """强制结束模拟器宿主进程。"""

    @abstractmethod
    def get_device_log_process(
        self,
        device_id: str,
        predicate: str | None = None,
    ) -> subprocess.Popen:
        ...


# ── simctl 实现 ──


class SimctlSimulator(IPhoneSimulator):
    """基于 ``xcrun simctl`` 的 iOS 模拟器控制器。

    启动状态、宿主进程是否运行等外部状态每次都重新查询，不做缓存；
    实例内唯一保留的状态是日志流进程句柄。

    Parameters
    ----------
    config:
        模拟器配置。为 None 时使用默认配置。
    simctl:
        设备控制服务，测试时可注入替身。
    host:
        宿主进程管理器，测试时可注入替身。
    """

    def __init__(
        self,
        config: SimulatorConfig | None = None,
        simctl: Simctl | None = None,
        host: SimulatorHost | None = None,
    ) -> None:
        self._config = config or SimulatorConfig()
        self._simctl = simctl or Simctl()
        self._host = host or SimulatorHost(self._config)
        self._directory = DeviceDirectory(self._simctl)
        self._resolver = DeviceResolver(self._directory, self._config.default_device_name)
        self._device_log_process: subprocess.Popen | None = None
        self._is_device_log_operation_started = False

    # ── 设备查询 ──

    def get_devices(self) -> list[Device]:
        return self._directory.list_devices()

    def get_sdks(self) -> list[Sdk]:
        return self._directory.get_sdks()

    # ── 生命周期 ──

    def start_simulator(self, options: SelectionCriteria, device: Device | None = None) -> Device:
        """确保目标设备已启动。

        流程：

        1. 解析并校验目标设备，描述不完整时以其为提示重新解析。
        2. 设备已启动 → 直接返回。
        3. 宿主进程在运行：若没有任何已启动设备（窗口被关闭但进程仍在），
           重新解析默认设备；随后通过 ``simctl boot`` 启动。
        4. 宿主进程未运行：直接启动宿主进程。
        5. 无论哪条路径，都再请求一次宿主进程显示该设备，并等待
           ``boot_settle_delay`` 秒，之后才允许安装应用。

        Raises
        ------
        DeviceNotFoundError
            显式给出的设备不存在。
        NoDeviceAvailableError
            没有任何可用设备。
        """
        if device is None and options.device:
            self._resolver.verify_device(options.device)

        device = device or self._resolver.resolve(options)

        # 占位设备没有 id，跳过校验，使用默认解析结果
        if device.id:
            self._resolver.verify_device(device)

        if not device.is_complete:
            device = self._resolver.resolve(options, hint=device)

        if device.is_booted:
            logger.debug("[Simulator] 设备已启动: {} ({})", device.name, device.id)
            return device

        if self._host.is_running():
            if not self._directory.has_booted_devices():
                device = self._resolver.resolve(options)
            self._simctl.boot(device.id)
        else:
            self._host.start(device.id)

        self._host.start(device.id)
        time.sleep(self._config.boot_settle_delay)
        logger.info(
            "[Simulator] 设备已就绪: {} (iOS {}, {})",
            device.name, device.runtime_version, device.id,
        )
        return device

    def run(self, application_path: str, app_identifier: str, options: LaunchOptions) -> str:
        device = self._resolver.resolve(options)
        device = self.start_simulator(options, device)
        if not options.skip_install:
            self._simctl.install(device.id, application_path)
        return self._simctl.launch(device.id, app_identifier, options)

    # ── 应用管理 ──

    def install_application(self, device_id: str, application_path: str) -> None:
        self._simctl.install(device_id, application_path)

    def uninstall_application(self, device_id: str, app_identifier: str) -> None:
        self._simctl.uninstall(device_id, app_identifier, skip_error=True)

    def start_application(
        self,
        device_id: str,
        app_identifier: str,
        options: LaunchOptions | None = None,
    ) -> str:
        # simctl launch 返回时进程未必已就绪，稍等相关服务启动
        result = self._simctl.launch(device_id, app_identifier, options)
        time.sleep(self._config.launch_settle_delay)
        return result

    def stop_application(
        self,
        device_id: str,
        app_identifier: str,
        bundle_executable: str,
    ) -> str | None:
        """尽力终止应用，任何失败都只记录日志，不向调用方抛出。

        Xcode 7 及以下没有 ``simctl terminate``，改用 ``killall``；
        Xcode 版本未知时按新版处理。

        Returns
        -------
        str | None
            终止命令的输出；失败时为 ``None``。
        """
        try:
            xcode_major: int | None = None
            try:
                xcode_major = get_xcode_version().major
            except XcodeError as exc:
                logger.debug("[Simulator] Xcode 版本未知: {}", exc)

            if xcode_major and xcode_major < self._config.killall_max_xcode_version:
                result = exec_sync(["killall", bundle_executable], skip_error=True)
            else:
                result = self._simctl.terminate(device_id, app_identifier)

            # killall / terminate 返回时进程未必已退出
            time.sleep(self._config.terminate_settle_delay)
            return result
        except Exception as exc:
            logger.warning("[Simulator] 停止应用 {} 失败（已忽略）: {}", app_identifier, exc)
            return None

    def get_application_path(self, device_id: str, app_identifier: str) -> str | None:
        return self._simctl.get_app_container(device_id, app_identifier)

    def get_installed_applications(self, device_id: str) -> list[Application]:
        return get_installed_applications(device_id, self._config.devices_root)

    # ── 其他 ──

    def send_notification(self, notification: str, device_id: str) -> None:
        if self._resolver.find_by_identifier(device_id) is None:
            raise DeviceNotFoundError(device_id)
        self._simctl.notify_post(device_id, notification)

    def kill_simulator(self) -> None:
        self._host.stop()

    def get_device_log_process(
        self,
        device_id: str,
        predicate: str | None = None,
    ) -> subprocess.Popen:
        """返回设备日志流进程。同一实例只派生一次，之后复用同一句柄。

        iOS 11 及以上使用 ``log stream``，更早的版本 tail 设备的 ``system.log``。
        """
        if not self._is_device_log_operation_started:
            device = self._resolver.find_by_identifier(device_id)
            major_version = device.major_version if device else None

            if major_version is not None and major_version >= self._config.log_stream_min_version:
                self._device_log_process = self._simctl.get_log(device_id, predicate)
            else:
                log_file = self._config.logs_root / device_id / "system.log"
                self._device_log_process = spawn(["tail", "-f", "-n", "1", str(log_file)])

            self._is_device_log_operation_started = True

        return self._device_log_process


# ── 工厂函数 ──


def create_simulator(
    config: UserConfig,
    os_type: OSType | None = None,
) -> IPhoneSimulator:
    """根据宿主系统与 Xcode 版本创建模拟器控制器。

    Parameters
    ----------
    config:
        用户配置。
    os_type:
        操作系统类型，为 None 时使用 ``config.os_type``。

    Raises
    ------
    SimulatorError
        非 macOS 系统，或 Xcode 版本过旧（旧版原生桥接模拟器不受支持）。
    """
    os_type = os_type or config.os_type
    if os_type != OSType.macos:
        raise SimulatorError(f"iOS 模拟器仅支持 macOS，当前系统: {os_type.value}")

    try:
        xcode_version = get_xcode_version()
    except XcodeError as exc:
        logger.warning("[Simulator] 无法确定 Xcode 版本，按 simctl 处理: {}", exc)
    else:
        if xcode_version.major < _MIN_SIMCTL_XCODE_VERSION:
            raise SimulatorError(
                f"Xcode {xcode_version} 不支持 simctl，旧版模拟器不受支持"
            )
        logger.debug("[Simulator] Xcode {}", xcode_version)

    return SimctlSimulator(config.simulator)
