"""
存储服务数据模型
定义存储操作中使用的所有数据结构
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class StorageBackend(str, Enum):
    """存储后端类型"""
    BLOB_STORAGE = "blob_storage"
    LOCAL_FILESYSTEM = "local_filesystem"


@dataclass(frozen=True)
class UploadResult:
    """
    上传结果

    Attributes:
        key: 存储键
        url: 访问URL
        size: 文件大小（字节）
        mime_type: MIME类型
        backend: 实际写入的存储后端
        bucket: 存储桶名称
        region: 区域
        etag: 文件ETag
        uploaded_at: 上传时间
    """
    key: str
    url: str
    size: int
    mime_type: str
    backend: StorageBackend
    bucket: Optional[str] = None
    region: Optional[str] = None
    etag: Optional[str] = None
    uploaded_at: Optional[datetime] = None


@dataclass(frozen=True)
class StoredImage:
    """
    已持久化的插画

    创建后不再修改；本地文件仅由清理任务删除。
    """
    url: str
    backend: StorageBackend
    key: str


__all__ = [
    'StorageBackend',
    'UploadResult',
    'StoredImage',
]
