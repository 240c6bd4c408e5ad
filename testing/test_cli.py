"""测试命令行入口（create_simulator 替换为 mock）。"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from iossim.cli import build_parser, main, parse_args
from iossim.infra import DeviceNotFoundError
from iossim.simulator import Application, Device, LaunchOptions, SelectionCriteria, Sdk
from iossim.types import DeviceState


@pytest.fixture
def sim():
    mock = MagicMock()
    with patch("iossim.cli.create_simulator", return_value=mock):
        yield mock


class TestParser:

    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_launch_args(self):
        args = parse_args(["--sdk", "12.1", "launch", "--skip-install", "App.app", "org.x", "--", "-v"])
        assert args.sdk == "12.1"
        assert args.skip_install is True
        assert args.app_args == ("-v",)

    def test_launch_flag_after_positionals(self):
        args = parse_args(["launch", "App.app", "org.x", "--skip-install"])
        assert args.skip_install is True
        assert args.app_args == ()

    def test_start_app_flag_after_positionals(self):
        args = parse_args(["start-app", "B", "org.x", "--wait-for-debugger", "--", "--wait-for-debugger"])
        assert args.wait_for_debugger is True
        assert args.app_args == ("--wait-for-debugger",)

    def test_app_args_rejected_elsewhere(self):
        with pytest.raises(SystemExit):
            parse_args(["devices", "--", "-v"])


class TestCommands:

    def test_devices(self, sim, capsys):
        sim.get_devices.return_value = [
            Device(id="B", name="iPhone X", runtime_version="12.1", state=DeviceState.booted),
        ]
        assert main(["devices"]) == 0
        out = capsys.readouterr().out
        assert "iPhone X" in out
        assert "Booted" in out

    def test_sdks(self, sim, capsys):
        sim.get_sdks.return_value = [Sdk("iOS 12.1", "12.1")]
        assert main(["sdks"]) == 0
        assert "iOS 12.1" in capsys.readouterr().out

    def test_boot(self, sim, capsys):
        sim.start_simulator.return_value = Device(id="B")
        assert main(["--device", "iPhone X", "boot"]) == 0
        sim.start_simulator.assert_called_once_with(SelectionCriteria(device="iPhone X"))
        assert capsys.readouterr().out.strip() == "B"

    def test_launch(self, sim, capsys):
        sim.run.return_value = "org.x: 42"
        assert main(["--sdk", "12.1", "launch", "App.app", "org.x", "--", "-v"]) == 0
        sim.run.assert_called_once_with(
            "App.app", "org.x", LaunchOptions(sdk_version="12.1", args=("-v",))
        )
        assert "org.x: 42" in capsys.readouterr().out

    def test_stop_app_without_result(self, sim, capsys):
        sim.stop_application.return_value = None
        assert main(["stop-app", "B", "org.x", "App"]) == 0
        assert capsys.readouterr().out == ""

    def test_app_path_not_installed(self, sim):
        sim.get_application_path.return_value = None
        assert main(["app-path", "B", "org.x"]) == 1

    def test_apps(self, sim, capsys):
        sim.get_installed_applications.return_value = [Application("G", "org.x", "/p/X.app")]
        assert main(["apps", "B"]) == 0
        assert "org.x" in capsys.readouterr().out

    def test_uninstall(self, sim):
        assert main(["uninstall", "B", "org.x"]) == 0
        sim.uninstall_application.assert_called_once_with("B", "org.x")

    def test_log_streams_lines(self, sim, capsys):
        proc = MagicMock()
        proc.stdout = iter(["line 1\n", "line 2\n"])
        sim.get_device_log_process.return_value = proc
        assert main(["log", "B", "--predicate", "x"]) == 0
        sim.get_device_log_process.assert_called_once_with("B", "x")
        assert capsys.readouterr().out == "line 1\nline 2\n"
        proc.terminate.assert_called_once()

    def test_domain_error_exit_code(self, sim):
        sim.send_notification.side_effect = DeviceNotFoundError("B")
        assert main(["notify", "B", "com.example.ping"]) == 1

    def test_launch_skip_install_after_positionals(self, sim):
        sim.run.return_value = "org.x: 42"
        assert main(["launch", "App.app", "org.x", "--skip-install"]) == 0
        sim.run.assert_called_once_with("App.app", "org.x", LaunchOptions(skip_install=True))

    def test_kill(self, sim):
        assert main(["kill"]) == 0
        sim.kill_simulator.assert_called_once_with()
