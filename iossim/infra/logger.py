"""全局日志配置。

使用方式::

    # 应用启动时调用一次
    from iossim.infra.logger import setup_logger
    setup_logger(log_dir=Path("log/2026-01-01"), level="DEBUG")

    # 各模块直接使用 loguru
    from loguru import logger
    logger.info("[Simulator] 启动设备 {}", device.name)
"""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

# 项目根目录，用于将绝对路径转换为相对路径
_PROJECT_ROOT = Path(__file__).parent.parent.parent

_FMT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level:8}</level> | "
    "<cyan>{extra[src]}</cyan> | "
    "{message}"
)


def _src_patcher(record: dict) -> None:
    """为每条记录附加 ``iossim/simulator/simctl.py:42`` 形式的源码位置。"""
    try:
        rel = Path(record["file"].path).relative_to(_PROJECT_ROOT)
        record["extra"]["src"] = f"{rel.as_posix()}:{record['line']}"
    except ValueError:
        record["extra"]["src"] = f"{record['file'].name}:{record['line']}"


def setup_logger(
    log_dir: Path | None = None,
    level: str = "INFO",
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """配置全局 loguru logger。

    日志策略：
    - 控制台：按 *level* 过滤输出。
    - 文件（全量）：始终以 DEBUG 级别记录，文件名含 ``.debug`` 后缀。
    - 文件（过滤）：与控制台 *level* 一致，仅在 *level* 不是 DEBUG 时额外创建。

    Parameters
    ----------
    log_dir:
        日志文件存放目录。为 *None* 时仅输出到控制台。
    level:
        控制台及过滤文件的最低日志级别。
    rotation:
        单个日志文件最大体积或时间周期。
    retention:
        日志文件保留时长。
    """
    logger.remove()
    logger.configure(patcher=_src_patcher)

    logger.add(sys.stderr, level=level, format=_FMT)

    if log_dir is None:
        return

    log_dir.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_dir / "iossim_{time:YYYY-MM-DD}.debug.log",
        level="DEBUG",
        rotation=rotation,
        retention=retention,
        encoding="utf-8",
        format=_FMT,
    )
    if level.upper() != "DEBUG":
        logger.add(
            log_dir / "iossim_{time:YYYY-MM-DD}.log",
            level=level,
            rotation=rotation,
            retention=retention,
            encoding="utf-8",
            format=_FMT,
        )
    logger.debug("日志目录: {}", log_dir)
