"""
存储适配器模块
提供对象存储与本地文件存储的适配器实现
"""

from app.core.storage.adapters.local_file import LocalFileStorage
from app.core.storage.adapters.tencent_cos import TencentCosAdapter

__all__ = [
    'TencentCosAdapter',
    'LocalFileStorage',
]
