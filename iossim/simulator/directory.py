"""设备目录 — 设备列表的只读视图。

每次查询都向 ``simctl`` 重新获取快照，不做任何缓存；
启动状态、设备集合都属于外部全局状态。
"""

from __future__ import annotations

from .models import Device, Sdk, parse_version
from .simctl import Simctl


def sort_by_runtime(devices: list[Device]) -> list[Device]:
    """按运行时版本号数值升序排序（稳定排序）。"""
    return sorted(devices, key=lambda d: parse_version(d.runtime_version))


class DeviceDirectory:
    """对 :class:`Simctl` 设备列表的查询封装。"""

    def __init__(self, simctl: Simctl) -> None:
        self._simctl = simctl

    def list_devices(self) -> list[Device]:
        return self._simctl.get_devices()

    def get_sdks(self) -> list[Sdk]:
        """每个设备对应一项，不按版本去重。"""
        return [
            Sdk(display_name=f"iOS {device.runtime_version}", version=device.runtime_version)
            for device in self.list_devices()
        ]

    def find_by_id(self, device_id: str) -> Device | None:
        return next((d for d in self.list_devices() if d.id == device_id), None)

    def booted_devices(self) -> list[Device]:
        return [d for d in self.list_devices() if d.is_booted]

    def has_booted_devices(self) -> bool:
        return bool(self.booted_devices())
