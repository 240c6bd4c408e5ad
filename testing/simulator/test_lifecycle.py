"""测试 SimctlSimulator.start_simulator 的启动状态机。"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from iossim.infra import DeviceNotFoundError, NoDeviceAvailableError, SimulatorConfig
from iossim.simulator import Device, LaunchOptions, SelectionCriteria, SimctlSimulator
from iossim.types import DeviceState


# ═══════════════════════════════════════════════
# 已启动设备
# ═══════════════════════════════════════════════


class TestAlreadyBooted:
    """目标设备已启动时不做任何操作。"""

    def test_noop(self, make_simulator, device_factory):
        booted = device_factory("B", "iPhone X", "12.1", DeviceState.booted)
        sim, simctl, host = make_simulator([booted], host_running=True)
        result = sim.start_simulator(SelectionCriteria())
        assert result == booted
        assert simctl.calls == []
        assert host.started == []

    def test_idempotent(self, make_simulator, device_factory):
        booted = device_factory("B", "iPhone X", "12.1", DeviceState.booted)
        sim, simctl, host = make_simulator([booted], host_running=True)
        with patch("iossim.simulator.simulator.time.sleep") as sleep:
            sim.start_simulator(SelectionCriteria(device="B"))
            sim.start_simulator(SelectionCriteria(device="B"))
        assert simctl.calls == []
        assert host.started == []
        sleep.assert_not_called()


# ═══════════════════════════════════════════════
# 宿主进程未运行
# ═══════════════════════════════════════════════


class TestHostNotRunning:
    """宿主进程未运行时直接启动宿主进程，不调用 simctl boot。"""

    def test_starts_host_twice(self, make_simulator, sample_devices):
        sim, simctl, host = make_simulator(sample_devices, host_running=False)
        result = sim.start_simulator(SelectionCriteria(sdk_version="12.1"))
        assert result.id == "B"
        assert "boot" not in simctl.names()
        assert host.started == ["B", "B"]

    def test_settle_delay(self, make_simulator, sample_devices):
        _, simctl, host = make_simulator(sample_devices)
        sim = SimctlSimulator(SimulatorConfig(boot_settle_delay=1.0), simctl=simctl, host=host)
        with patch("iossim.simulator.simulator.time.sleep") as sleep:
            sim.start_simulator(SelectionCriteria())
        sleep.assert_called_once_with(1.0)


# ═══════════════════════════════════════════════
# 宿主进程在运行
# ═══════════════════════════════════════════════


class TestHostRunning:
    """宿主进程在运行时通过 simctl boot 启动设备。"""

    def test_no_booted_device_reresolves_and_boots(self, make_simulator, sample_devices):
        sim, simctl, host = make_simulator(sample_devices, host_running=True)
        result = sim.start_simulator(SelectionCriteria(sdk_version="12.1"))
        assert result.id == "B"
        assert simctl.calls == [("boot", "B")]
        assert host.started == ["B"]

    def test_no_booted_device_replaces_explicit_device(self, make_simulator, sample_devices):
        explicit = sample_devices[1]
        sim, simctl, host = make_simulator(sample_devices, host_running=True)
        result = sim.start_simulator(SelectionCriteria(), device=explicit)
        assert result.id == "A"
        assert simctl.calls == [("boot", "A")]
        assert host.started == ["A"]

    def test_other_device_booted_boots_resolved(self, make_simulator, device_factory):
        devices = [
            device_factory("A", "iPhone 6", "9.3", DeviceState.booted),
            device_factory("B", "iPhone X", "12.1"),
        ]
        sim, simctl, host = make_simulator(devices, host_running=True)
        result = sim.start_simulator(SelectionCriteria(device="iPhone X"))
        assert result.id == "B"
        assert simctl.calls == [("boot", "B")]
        assert host.started == ["B"]


# ═══════════════════════════════════════════════
# 设备解析与校验
# ═══════════════════════════════════════════════


class TestResolution:
    """入口处的设备解析与校验。"""

    def test_unknown_option_device_raises(self, make_simulator, sample_devices):
        sim, simctl, host = make_simulator(sample_devices)
        with pytest.raises(DeviceNotFoundError):
            sim.start_simulator(SelectionCriteria(device="iPhone 99"))
        assert host.started == []

    def test_unknown_explicit_device_raises(self, make_simulator, sample_devices):
        sim, _, _ = make_simulator(sample_devices)
        with pytest.raises(DeviceNotFoundError):
            sim.start_simulator(SelectionCriteria(), Device(id="missing"))

    def test_placeholder_device_uses_default(self, make_simulator, sample_devices):
        sim, _, host = make_simulator(sample_devices)
        result = sim.start_simulator(SelectionCriteria(), Device())
        assert result.id == "A"
        assert host.started == ["A", "A"]

    def test_incomplete_device_is_completed(self, make_simulator, sample_devices):
        sim, _, _ = make_simulator(sample_devices)
        result = sim.start_simulator(SelectionCriteria(), Device(id="B"))
        assert result.id == "B"
        assert result.runtime_version == "12.1"
        assert result.is_complete

    def test_empty_directory_raises(self, make_simulator):
        sim, _, host = make_simulator([])
        with pytest.raises(NoDeviceAvailableError):
            sim.start_simulator(SelectionCriteria())
        assert host.started == []


# ═══════════════════════════════════════════════
# run
# ═══════════════════════════════════════════════


class TestRun:
    """run = 启动设备 + 安装 + 启动应用。"""

    def test_install_and_launch(self, make_simulator, sample_devices):
        sim, simctl, _ = make_simulator(sample_devices)
        result = sim.run("/tmp/App.app", "org.example.app", LaunchOptions(sdk_version="12.1"))
        assert result == "org.example.app: 1234"
        assert simctl.calls == [
            ("install", "B", "/tmp/App.app"),
            ("launch", "B", "org.example.app"),
        ]

    def test_skip_install(self, make_simulator, sample_devices):
        sim, simctl, _ = make_simulator(sample_devices)
        sim.run("/tmp/App.app", "org.example.app", LaunchOptions(skip_install=True))
        assert simctl.names() == ["launch"]

    def test_run_on_booted_device_does_not_boot(self, make_simulator, device_factory):
        devices = [device_factory("B", "iPhone X", "12.1", DeviceState.booted)]
        sim, simctl, host = make_simulator(devices, host_running=True)
        sim.run("/tmp/App.app", "org.example.app", LaunchOptions())
        assert simctl.names() == ["install", "launch"]
        assert host.started == []
