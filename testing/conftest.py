"""测试公共 fixtures。

``simctl`` 与宿主进程都依赖真实的 macOS 环境，这里提供记录调用的替身。
"""

from __future__ import annotations

from pathlib import Path

import pytest

from iossim.infra import SimulatorConfig
from iossim.simulator import Device, SimctlSimulator
from iossim.types import DeviceState


class FakeSimctl:
    """记录调用的 simctl 替身。设备列表可在测试中直接修改。"""

    def __init__(self, devices: list[Device]) -> None:
        self.devices = list(devices)
        self.calls: list[tuple] = []
        self.log_process = object()

    def get_devices(self) -> list[Device]:
        return list(self.devices)

    def boot(self, device_id):
        self.calls.append(("boot", device_id))
        return ""

    def install(self, device_id, application_path):
        self.calls.append(("install", device_id, application_path))
        return ""

    def uninstall(self, device_id, app_identifier, skip_error=False):
        self.calls.append(("uninstall", device_id, app_identifier, skip_error))
        return ""

    def launch(self, device_id, app_identifier, options=None):
        self.calls.append(("launch", device_id, app_identifier))
        return f"{app_identifier}: 1234"

    def terminate(self, device_id, app_identifier):
        self.calls.append(("terminate", device_id, app_identifier))
        return "terminated"

    def notify_post(self, device_id, notification):
        self.calls.append(("notify_post", device_id, notification))
        return ""

    def get_app_container(self, device_id, app_identifier):
        self.calls.append(("get_app_container", device_id, app_identifier))
        return f"/containers/{device_id}/{app_identifier}"

    def get_log(self, device_id, predicate=None):
        self.calls.append(("get_log", device_id, predicate))
        return self.log_process

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]


class FakeHost:
    """宿主进程替身。"""

    def __init__(self, running: bool = False) -> None:
        self.running = running
        self.started: list[str] = []

    def is_running(self) -> bool:
        return self.running

    def start(self, device_id: str) -> None:
        self.started.append(device_id)

    def stop(self) -> None:
        self.running = False


def make_device(
    id: str,
    name: str,
    runtime_version: str,
    state: DeviceState = DeviceState.shutdown,
) -> Device:
    return Device(
        id=id,
        name=name,
        runtime_version=runtime_version,
        state=state,
        full_id=f"com.apple.CoreSimulator.SimDeviceType.{name.replace(' ', '-')}",
    )


@pytest.fixture
def device_factory():
    """创建完整设备描述的工厂 fixture。"""
    return make_device


@pytest.fixture
def sample_devices() -> list[Device]:
    """iPhone 6 (9.3) 与 iPhone X (12.1)，均未启动。"""
    return [
        make_device("A", "iPhone 6", "9.3"),
        make_device("B", "iPhone X", "12.1"),
    ]


@pytest.fixture
def sim_config(tmp_path: Path) -> SimulatorConfig:
    """等待时间为 0 的模拟器配置。"""
    return SimulatorConfig(
        boot_settle_delay=0,
        launch_settle_delay=0,
        terminate_settle_delay=0,
        devices_root=tmp_path / "Devices",
        logs_root=tmp_path / "Logs",
    )


@pytest.fixture
def make_simulator(sim_config: SimulatorConfig):
    """构造注入了替身的 SimctlSimulator，返回 ``(sim, simctl, host)``。"""

    def _factory(devices: list[Device], host_running: bool = False):
        simctl = FakeSimctl(devices)
        host = FakeHost(running=host_running)
        sim = SimctlSimulator(sim_config, simctl=simctl, host=host)
        return sim, simctl, host

    return _factory


@pytest.fixture
def tmp_yaml(tmp_path: Path):
    """创建临时 YAML 文件的工厂 fixture。"""

    def _factory(name: str, content: str) -> Path:
        p = tmp_path / name
        p.write_text(content, encoding="utf-8")
        return p

    return _factory
