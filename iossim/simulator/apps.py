"""读取模拟器数据目录，列出已安装的应用。

目录结构（iOS 8 及以上）::

    <devices_root>/<udid>/data/Containers/Bundle/Application/<guid>/<Name>.app/Info.plist

iOS 7 及以下为 ``<devices_root>/<udid>/data/Applications/<guid>/<Name>.app``。
"""

from __future__ import annotations

import plistlib
from pathlib import Path

from loguru import logger

from .models import Application

_APPLICATION_DIRS = (
    Path("data", "Containers", "Bundle", "Application"),
    Path("data", "Applications"),
)


def get_applications_root(device_id: str, devices_root: Path) -> Path | None:
    """返回设备的应用容器根目录；设备从未安装过应用时为 ``None``。"""
    device_dir = devices_root / device_id
    for relative in _APPLICATION_DIRS:
        candidate = device_dir / relative
        if candidate.is_dir():
            return candidate
    return None


def _read_bundle_identifier(app_bundle: Path) -> str | None:
    info_plist = app_bundle / "Info.plist"
    try:
        with open(info_plist, "rb") as fh:
            info = plistlib.load(fh)
    except (OSError, plistlib.InvalidFileException) as exc:
        logger.debug("[Apps] 无法读取 {}: {}", info_plist, exc)
        return None
    identifier = info.get("CFBundleIdentifier")
    return identifier if isinstance(identifier, str) else None


def get_installed_applications(device_id: str, devices_root: Path) -> list[Application]:
    """列出设备上已安装的应用。

    Parameters
    ----------
    device_id:
        设备 UDID。
    devices_root:
        CoreSimulator 设备根目录。

    Returns
    -------
    list[Application]
        按容器目录名排序；无法识别的容器被跳过。
    """
    root = get_applications_root(device_id, devices_root)
    if root is None:
        logger.debug("[Apps] 设备 {} 没有应用目录", device_id)
        return []

    applications: list[Application] = []
    for container in sorted(p for p in root.iterdir() if p.is_dir()):
        bundles = sorted(container.glob("*.app"))
        if not bundles:
            logger.debug("[Apps] 容器 {} 中没有 .app 包", container.name)
            continue
        identifier = _read_bundle_identifier(bundles[0])
        if identifier is None:
            continue
        applications.append(
            Application(guid=container.name, app_identifier=identifier, path=str(bundles[0]))
        )
    return applications
