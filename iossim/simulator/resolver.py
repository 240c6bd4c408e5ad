"""目标设备解析。

根据调用方给出的条件（设备 UDID/名称、iOS 版本，或什么都不给）
从当前设备列表中确定唯一的目标设备。

决策优先级（从高到低），在按运行时版本升序排列的设备列表上依次求值：

1. 提示设备 (*hint*) 自带的版本号 / UDID 覆盖调用方条件
2. 按已给出的字段匹配：

   - 仅版本      → 首个版本相同的设备
   - 仅设备      → 首个名称或 UDID 相同的设备
   - 版本 + 设备 → 首个两者都满足的设备
   - 都没有      → 首个已启动的设备

3. 名称等于默认设备名（如 ``"iPhone 6"``）的设备
4. 版本最高的设备（排序后最后一个）
5. 设备列表为空 → :class:`~iossim.infra.exceptions.NoDeviceAvailableError`

同一快照、同一条件下结果确定，且一定是列表中的成员。
"""

from __future__ import annotations

from loguru import logger

from iossim.infra import DeviceNotFoundError, NoDeviceAvailableError

from .directory import DeviceDirectory, sort_by_runtime
from .models import Device, SelectionCriteria


def _matches_identifier(device: Device, identifier: str) -> bool:
    return device.name == identifier or device.id == identifier


def select_device(
    devices: list[Device],
    criteria: SelectionCriteria,
    default_device_name: str,
    hint: Device | None = None,
) -> Device:
    """纯函数版本的设备选择，见模块文档中的优先级。

    Raises
    ------
    NoDeviceAvailableError
        *devices* 为空。
    """
    if not devices:
        raise NoDeviceAvailableError("没有可用的 iOS 模拟器设备")

    ordered = sort_by_runtime(devices)
    sdk_version = criteria.sdk_version
    identifier = criteria.device

    if hint is not None:
        if hint.runtime_version:
            sdk_version = hint.runtime_version
        if hint.id:
            identifier = hint.id

    if sdk_version and identifier:
        candidates = (
            d for d in ordered
            if d.runtime_version == sdk_version and _matches_identifier(d, identifier)
        )
    elif sdk_version:
        candidates = (d for d in ordered if d.runtime_version == sdk_version)
    elif identifier:
        candidates = (d for d in ordered if _matches_identifier(d, identifier))
    else:
        candidates = (d for d in ordered if d.is_booted)

    result = next(candidates, None)
    if result is not None:
        return result

    result = next((d for d in ordered if d.name == default_device_name), None)
    if result is not None:
        logger.debug(
            "[Resolver] 条件 (device={}, sdk={}) 无匹配，使用默认设备 {}",
            identifier, sdk_version, default_device_name,
        )
        return result

    result = ordered[-1]
    logger.debug(
        "[Resolver] 默认设备 {} 不存在，使用最高版本设备 {} (iOS {})",
        default_device_name, result.name, result.runtime_version,
    )
    return result


class DeviceResolver:
    """基于 :class:`DeviceDirectory` 实时快照的设备解析器。

    Parameters
    ----------
    directory:
        设备目录。
    default_device_name:
        无匹配时优先回退的设备名。
    """

    def __init__(self, directory: DeviceDirectory, default_device_name: str) -> None:
        self._directory = directory
        self._default_device_name = default_device_name

    def resolve(self, criteria: SelectionCriteria, hint: Device | None = None) -> Device:
        """解析目标设备，每次调用都重新读取设备列表。

        Raises
        ------
        NoDeviceAvailableError
            设备列表为空。
        """
        device = select_device(
            self._directory.list_devices(),
            criteria,
            self._default_device_name,
            hint=hint,
        )
        logger.debug(
            "[Resolver] 解析结果: {} (iOS {}, {}, {})",
            device.name, device.runtime_version, device.id, device.state.value,
        )
        return device

    def verify_device(self, device: Device | str) -> None:
        """确认设备标识存在于当前设备列表中（按 UDID 或名称匹配）。

        占位设备（``id is None``）跳过校验。

        Raises
        ------
        DeviceNotFoundError
            标识不存在。
        """
        identifier = device if isinstance(device, str) else device.id
        if not identifier:
            return
        if not any(_matches_identifier(d, identifier) for d in self._directory.list_devices()):
            raise DeviceNotFoundError(identifier)

    def find_by_identifier(self, device_id: str) -> Device | None:
        return self._directory.find_by_id(device_id)
