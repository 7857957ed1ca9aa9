"""
核心模块 - 纯静态配置

使用方式:
    from anifeed.core import settings
    from anifeed.core.config import Settings
"""

from .config import settings, Settings, LogConfig, ReconcileConfig

__all__ = [
    'settings',
    'Settings',
    'LogConfig',
    'ReconcileConfig',
]
