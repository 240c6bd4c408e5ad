"""YAML 读取与字典合并工具。"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError


def load_yaml(path: str | Path) -> dict[str, Any]:
    """读取 YAML 配置文件。

    Parameters
    ----------
    path:
        YAML 文件路径。

    Returns
    -------
    dict[str, Any]
        顶层映射；空文件返回 ``{}``。

    Raises
    ------
    FileNotFoundError
        文件不存在。
    ConfigError
        YAML 语法错误，或顶层不是映射。
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML 文件不存在: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML 解析失败 {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"YAML 顶层必须是映射，实际为 {type(data).__name__}: {path}")
    return data


def merge_dicts(base: dict, override: dict) -> dict:
    """递归合并，*override* 覆盖 *base*，返回新字典。

    ``override`` 中值为 ``None`` 的键被忽略（嵌套字典同样适用），
    便于直接合并命令行参数。
    """
    merged = dict(base)
    for key, value in override.items():
        if value is None:
            continue
        current = merged.get(key)
        if isinstance(value, dict):
            merged[key] = merge_dicts(current if isinstance(current, dict) else {}, value)
        else:
            merged[key] = value
    return merged
