"""Xcode 工具链探测。"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from iossim.infra import CommandError, XcodeError

from .process import exec_sync

_VERSION_RE = re.compile(r"Xcode\s+(\d+)(?:\.(\d+))?(?:\.(\d+))?")


@dataclass(frozen=True, slots=True)
class XcodeVersion:
    major: int
    minor: int = 0
    patch: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def parse_xcode_version(output: str) -> XcodeVersion:
    """解析 ``xcodebuild -version`` 的输出。

    Parameters
    ----------
    output:
        形如 ``"Xcode 9.2\\nBuild version 9C40b"`` 的文本。

    Raises
    ------
    XcodeError
        输出中不含版本号。
    """
    match = _VERSION_RE.search(output)
    if match is None:
        raise XcodeError(f"无法解析 Xcode 版本: {output!r}")
    major, minor, patch = (int(g) if g else 0 for g in match.groups())
    return XcodeVersion(major, minor, patch)


def get_xcode_version() -> XcodeVersion:
    """返回当前选中的 Xcode 版本。

    Raises
    ------
    XcodeError
        ``xcodebuild`` 不可用或输出无法解析。
    """
    try:
        output = exec_sync(["xcodebuild", "-version"])
    except CommandError as exc:
        raise XcodeError(f"获取 Xcode 版本失败: {exc}") from exc
    return parse_xcode_version(output)


def get_xcode_path() -> Path:
    """返回 ``xcode-select`` 选中的 Developer 目录。"""
    try:
        output = exec_sync(["xcode-select", "-print-path"])
    except CommandError as exc:
        raise XcodeError(f"获取 Xcode 路径失败: {exc}") from exc
    if not output:
        raise XcodeError("xcode-select 未返回 Developer 目录")
    return Path(output)
