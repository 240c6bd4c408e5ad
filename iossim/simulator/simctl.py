"""``xcrun simctl`` 设备控制服务适配器。

所有调用都是对 ``xcrun simctl <command> ...`` 的同步封装，失败时
:class:`~iossim.infra.exceptions.CommandError` 原样向上传播。

使用方式::

    from iossim.simulator.simctl import Simctl

    simctl = Simctl()
    for device in simctl.get_devices():
        print(device.name, device.runtime_version, device.state)
"""

from __future__ import annotations

import json
import re
import subprocess
from typing import Any

from loguru import logger

from iossim.infra import CommandError
from iossim.types import DeviceState

from .models import DEVICE_TYPE_PREFIX, Device, LaunchOptions
from .process import exec_sync, spawn

# "iOS 12.1" 或 "com.apple.CoreSimulator.SimRuntime.iOS-12-1"
_RUNTIME_RE = re.compile(
    r"^(?:com\.apple\.CoreSimulator\.SimRuntime\.)?iOS[ -](\d+(?:[.-]\d+)*)$"
)


def runtime_version_from_key(key: str) -> str | None:
    """从 ``simctl list`` 的运行时键中提取 iOS 版本号，非 iOS 运行时返回 ``None``。"""
    match = _RUNTIME_RE.match(key.strip())
    if match is None:
        return None
    return match.group(1).replace("-", ".")


def _is_available(raw: dict[str, Any]) -> bool:
    available = raw.get("isAvailable")
    if isinstance(available, bool):
        return available
    if isinstance(available, str):
        return available.upper() == "YES"
    availability = raw.get("availability")
    if isinstance(availability, str):
        return "unavailable" not in availability
    return True


def parse_device_list(raw_json: str) -> list[Device]:
    """解析 ``simctl list devices --json`` 的输出。

    Raises
    ------
    CommandError
        输出不是合法的 JSON 或结构不符合预期。
    """
    try:
        data = json.loads(raw_json)
        runtimes = data["devices"]
    except (json.JSONDecodeError, KeyError, TypeError) as exc:
        raise CommandError("xcrun simctl list devices --json", stderr=f"无法解析设备列表: {exc}") from exc

    devices: list[Device] = []
    for runtime_key, entries in runtimes.items():
        runtime_version = runtime_version_from_key(runtime_key)
        if runtime_version is None:
            continue
        for raw in entries:
            if not _is_available(raw):
                logger.debug("[Simctl] 忽略不可用设备: {} ({})", raw.get("name"), runtime_key)
                continue
            name = raw.get("name", "")
            devices.append(
                Device(
                    id=raw.get("udid"),
                    name=name,
                    runtime_version=runtime_version,
                    state=DeviceState.parse(raw.get("state")),
                    full_id=raw.get("deviceTypeIdentifier") or f"{DEVICE_TYPE_PREFIX}{name}",
                )
            )
    return devices


class Simctl:
    """``xcrun simctl`` 命令面。"""

    def get_devices(self) -> list[Device]:
        devices = parse_device_list(self._exec("list", ["devices", "--json"]))
        logger.debug("[Simctl] 检测到 {} 个 iOS 设备", len(devices))
        return devices

    def boot(self, device_id: str) -> str:
        logger.info("[Simctl] 启动设备: {}", device_id)
        return self._exec("boot", [device_id])

    def install(self, device_id: str, application_path: str) -> str:
        logger.info("[Simctl] 安装应用: {} → {}", application_path, device_id)
        return self._exec("install", [device_id, application_path])

    def uninstall(self, device_id: str, app_identifier: str, skip_error: bool = False) -> str:
        logger.info("[Simctl] 卸载应用: {} ({})", app_identifier, device_id)
        return self._exec("uninstall", [device_id, app_identifier], skip_error=skip_error)

    def launch(
        self,
        device_id: str,
        app_identifier: str,
        options: LaunchOptions | None = None,
    ) -> str:
        """启动应用，返回 simctl 输出（通常为 ``"<bundle id>: <pid>"``）。"""
        options = options or LaunchOptions()
        args: list[str] = []
        if options.wait_for_debugger:
            args.append("-w")
        args += [device_id, app_identifier, *options.args]
        logger.info("[Simctl] 启动应用: {} ({})", app_identifier, device_id)
        return self._exec("launch", args)

    def terminate(self, device_id: str, app_identifier: str) -> str:
        logger.info("[Simctl] 终止应用: {} ({})", app_identifier, device_id)
        return self._exec("terminate", [device_id, app_identifier])

    def notify_post(self, device_id: str, notification: str) -> str:
        return self._exec("notify_post", [device_id, notification])

    def get_app_container(self, device_id: str, app_identifier: str) -> str | None:
        """返回应用容器路径；应用未安装时返回 ``None``。"""
        try:
            return self._exec("get_app_container", [device_id, app_identifier])
        except CommandError as exc:
            if "No such file or directory" in exc.stderr:
                return None
            raise

    def get_log(self, device_id: str, predicate: str | None = None) -> subprocess.Popen:
        """派生 ``log stream`` 进程并返回其句柄。"""
        args = ["xcrun", "simctl", "spawn", device_id, "log", "stream", "--style", "syslog"]
        if predicate:
            args += ["--predicate", predicate]
        return spawn(args)

    @staticmethod
    def _exec(command: str, args: list[str], skip_error: bool = False) -> str:
        return exec_sync(["xcrun", "simctl", command, *args], skip_error=skip_error)
