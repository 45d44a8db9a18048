"""
存储服务模块
提供统一的存储服务访问接口：对象存储为主，本地文件为备
"""

from typing import Optional

from app.core.cos import get_cos_config, validate_cos_config
from app.core.log_utils import get_logger
from app.core.storage.adapters.local_file import LocalFileStorage
from app.core.storage.adapters.tencent_cos import TencentCosAdapter
from app.core.storage.base_storage import BaseStorage
from app.core.storage.exceptions import *
from app.core.storage.factory import (
    create_adapter,
    register_adapter,
)
from app.core.storage.fallback import FallbackStorage, store_with_fallback
from app.core.storage.models import *
from app.core.storage.utils import detect_image_mime_type

logger = get_logger(__name__)

# 自动注册适配器
register_adapter(TencentCosAdapter.ADAPTER_NAME, TencentCosAdapter)
register_adapter(LocalFileStorage.ADAPTER_NAME, LocalFileStorage)


def get_storage_service(adapter_name: str | None = None) -> Optional[BaseStorage]:
    """
    获取主存储服务实例

    Args:
        adapter_name: 适配器名称，不指定则在COS配置完整时使用腾讯云COS

    Returns:
        Optional[BaseStorage]: 存储服务实例；未配置对象存储时返回None
    """
    if adapter_name is None:
        if not validate_cos_config(get_cos_config()):
            return None
        adapter_name = TencentCosAdapter.ADAPTER_NAME

    return create_adapter(adapter_name)


def get_image_storage() -> FallbackStorage:
    """
    获取插画存储（COS为主，本地文件为备）

    对象存储不可用时（未配置或SDK创建失败）直接使用本地文件存储。
    """
    try:
        primary = get_storage_service()
    except ConfigurationError as e:
        logger.warning("对象存储不可用，仅使用本地文件存储", error=str(e))
        primary = None

    return FallbackStorage(primary=primary, fallback=create_adapter(LocalFileStorage.ADAPTER_NAME))


__all__ = [
    # 工厂函数
    'get_storage_service',
    'get_image_storage',
    'create_adapter',
    'register_adapter',
    # 抽象接口与组合
    'BaseStorage',
    'FallbackStorage',
    'store_with_fallback',
    # 适配器类
    'TencentCosAdapter',
    'LocalFileStorage',
    # 工具函数
    'detect_image_mime_type',
]
