"""外部进程工具 — 同步执行与后台派生。"""

from __future__ import annotations

import subprocess

from loguru import logger

from iossim.infra import CommandError


def exec_sync(cmd: list[str], *, skip_error: bool = False) -> str:
    """同步执行外部命令并返回去除首尾空白的 stdout。

    Parameters
    ----------
    cmd:
        命令及参数列表。
    skip_error:
        ``True`` 时命令失败不抛异常，返回空字符串。

    Raises
    ------
    CommandError
        命令不存在或以非零状态退出（``skip_error`` 为 ``False`` 时）。
    """
    logger.debug("[Process] exec: {}", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as exc:
        if skip_error:
            logger.debug("[Process] 忽略错误: {}", exc)
            return ""
        raise CommandError(cmd, stderr=str(exc)) from exc

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        if skip_error:
            logger.debug("[Process] 忽略错误 (退出码 {}): {}", result.returncode, stderr)
            return ""
        raise CommandError(cmd, result.returncode, stderr)
    return (result.stdout or "").strip()


def spawn(cmd: list[str]) -> subprocess.Popen:
    """在后台派生进程，stdout/stderr 以文本管道返回给调用方。"""
    logger.debug("[Process] spawn: {}", " ".join(cmd))
    try:
        return subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except OSError as exc:
        raise CommandError(cmd, stderr=str(exc)) from exc
