"""iossim — iOS 模拟器设备解析与生命周期管理。"""

__version__ = "0.1.0"
