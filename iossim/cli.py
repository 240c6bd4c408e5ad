"""iossim 命令行入口。

用法
----
列出设备与运行时::

    iossim devices
    iossim sdks

启动设备（按名称 / 版本选择，不指定则使用已启动或默认设备）::

    iossim --device "iPhone X" --sdk 12.1 boot

安装并运行应用::

    iossim --sdk 12.1 launch build/App.app org.example.app -- --verbose

设备级操作::

    iossim stop-app <udid> org.example.app App
    iossim log <udid> --predicate 'process == "App"'
    iossim start-app <udid> org.example.app --wait-for-debugger -- --verbose
    iossim kill
"""

from __future__ import annotations

import argparse
import sys
from typing import Any

from loguru import logger

from iossim.infra import ConfigManager, IOSSimError, setup_logger
from iossim.simulator import IPhoneSimulator, LaunchOptions, SelectionCriteria, create_simulator

_APP_ARG_COMMANDS = ("launch", "start-app")


# ══════════════════════════════════════════════════════════════════════════════
# 子命令
# ══════════════════════════════════════════════════════════════════════════════

def _cmd_devices(sim: IPhoneSimulator, args: argparse.Namespace) -> int:
    for device in sim.get_devices():
        print(f"{device.name:<28} iOS {device.runtime_version:<8} {device.state.value:<14} {device.id}")
    return 0


def _cmd_sdks(sim: IPhoneSimulator, args: argparse.Namespace) -> int:
    for sdk in sim.get_sdks():
        print(f"{sdk.display_name:<16} {sdk.version}")
    return 0


def _cmd_boot(sim: IPhoneSimulator, args: argparse.Namespace) -> int:
    device = sim.start_simulator(SelectionCriteria(device=args.device, sdk_version=args.sdk))
    print(device.id)
    return 0


def _cmd_launch(sim: IPhoneSimulator, args: argparse.Namespace) -> int:
    options = LaunchOptions(
        device=args.device,
        sdk_version=args.sdk,
        skip_install=args.skip_install,
        wait_for_debugger=args.wait_for_debugger,
        args=args.app_args,
    )
    print(sim.run(args.app_path, args.app_id, options))
    return 0


def _cmd_install(sim: IPhoneSimulator, args: argparse.Namespace) -> int:
    sim.install_application(args.device_id, args.app_path)
    return 0


def _cmd_uninstall(sim: IPhoneSimulator, args: argparse.Namespace) -> int:
    sim.uninstall_application(args.device_id, args.app_id)
    return 0


def _cmd_start_app(sim: IPhoneSimulator, args: argparse.Namespace) -> int:
    options = LaunchOptions(wait_for_debugger=args.wait_for_debugger, args=args.app_args)
    print(sim.start_application(args.device_id, args.app_id, options))
    return 0


def _cmd_stop_app(sim: IPhoneSimulator, args: argparse.Namespace) -> int:
    result = sim.stop_application(args.device_id, args.app_id, args.bundle_executable)
    if result:
        print(result)
    return 0


def _cmd_notify(sim: IPhoneSimulator, args: argparse.Namespace) -> int:
    sim.send_notification(args.notification, args.device_id)
    return 0


def _cmd_kill(sim: IPhoneSimulator, args: argparse.Namespace) -> int:
    sim.kill_simulator()
    return 0


def _cmd_app_path(sim: IPhoneSimulator, args: argparse.Namespace) -> int:
    path = sim.get_application_path(args.device_id, args.app_id)
    if path is None:
        logger.error("应用 {} 未安装在设备 {} 上", args.app_id, args.device_id)
        return 1
    print(path)
    return 0


def _cmd_apps(sim: IPhoneSimulator, args: argparse.Namespace) -> int:
    for app in sim.get_installed_applications(args.device_id):
        print(f"{app.app_identifier:<40} {app.path}")
    return 0


def _cmd_log(sim: IPhoneSimulator, args: argparse.Namespace) -> int:
    proc = sim.get_device_log_process(args.device_id, args.predicate)
    try:
        for line in proc.stdout:
            sys.stdout.write(line)
    except KeyboardInterrupt:
        pass
    finally:
        proc.terminate()
    return 0


# ══════════════════════════════════════════════════════════════════════════════
# 参数解析
# ══════════════════════════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="iossim",
        description="iOS 模拟器设备解析与生命周期管理",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("--config", default=None, help="YAML 配置文件路径")
    p.add_argument("--log-level", default=None, help="日志级别（DEBUG / INFO / WARNING）")
    p.add_argument("--device", default=None, help="设备 UDID 或名称")
    p.add_argument("--sdk", default=None, help="iOS 运行时版本，例如 12.1")

    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("devices", help="列出所有设备").set_defaults(func=_cmd_devices)
    sub.add_parser("sdks", help="列出设备对应的 iOS 运行时").set_defaults(func=_cmd_sdks)
    sub.add_parser("boot", help="启动目标设备").set_defaults(func=_cmd_boot)

    launch = sub.add_parser("launch", help="启动设备并安装、运行应用")
    launch.add_argument("app_path")
    launch.add_argument("app_id")
    launch.add_argument("--skip-install", action="store_true", help="跳过安装")
    launch.add_argument("--wait-for-debugger", action="store_true", help="等待调试器附加")
    launch.set_defaults(func=_cmd_launch)

    install = sub.add_parser("install", help="安装应用")
    install.add_argument("device_id")
    install.add_argument("app_path")
    install.set_defaults(func=_cmd_install)

    uninstall = sub.add_parser("uninstall", help="卸载应用（未安装时忽略）")
    uninstall.add_argument("device_id")
    uninstall.add_argument("app_id")
    uninstall.set_defaults(func=_cmd_uninstall)

    start_app = sub.add_parser("start-app", help="启动已安装的应用")
    start_app.add_argument("device_id")
    start_app.add_argument("app_id")
    start_app.add_argument("--wait-for-debugger", action="store_true", help="等待调试器附加")
    start_app.set_defaults(func=_cmd_start_app)

    stop_app = sub.add_parser("stop-app", help="终止应用（尽力而为）")
    stop_app.add_argument("device_id")
    stop_app.add_argument("app_id")
    stop_app.add_argument("bundle_executable")
    stop_app.set_defaults(func=_cmd_stop_app)

    notify = sub.add_parser("notify", help="向设备发送 Darwin 通知")
    notify.add_argument("device_id")
    notify.add_argument("notification")
    notify.set_defaults(func=_cmd_notify)

    sub.add_parser("kill", help="强制结束 Simulator.app").set_defaults(func=_cmd_kill)

    app_path = sub.add_parser("app-path", help="输出应用容器路径")
    app_path.add_argument("device_id")
    app_path.add_argument("app_id")
    app_path.set_defaults(func=_cmd_app_path)

    apps = sub.add_parser("apps", help="列出已安装的应用")
    apps.add_argument("device_id")
    apps.set_defaults(func=_cmd_apps)

    log = sub.add_parser("log", help="输出设备系统日志")
    log.add_argument("device_id")
    log.add_argument("--predicate", default=None, help="log stream 过滤谓词（iOS 11+）")
    log.set_defaults(func=_cmd_log)

    return p


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """解析命令行。第一个 ``--`` 之后的内容原样转发给应用（仅 launch / start-app）。"""
    argv = list(sys.argv[1:] if argv is None else argv)
    app_args: list[str] = []
    if "--" in argv:
        index = argv.index("--")
        argv, app_args = argv[:index], argv[index + 1:]

    parser = build_parser()
    args = parser.parse_args(argv)
    if app_args and args.command not in _APP_ARG_COMMANDS:
        parser.error(f"子命令 {args.command} 不接受应用参数")
    args.app_args = tuple(app_args)
    return args


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    overrides: dict[str, Any] = {"log": {"level": args.log_level.upper() if args.log_level else None}}

    try:
        config = ConfigManager.load(args.config, overrides)
        setup_logger(
            log_dir=config.log.dir if config.log.to_file else None,
            level=config.log.level,
        )
        sim = create_simulator(config)
        return args.func(sim, args)
    except IOSSimError as exc:
        logger.error("{}", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
