"""
存储抽象基类
定义统一的存储接口，支持多种存储后端
"""

import asyncio
from abc import ABC, abstractmethod
from functools import partial
from typing import Any, Callable, Dict, Optional, TypeVar

from app.core.storage.models import StorageBackend, UploadResult

T = TypeVar('T')


class BaseStorage(ABC):
    """存储抽象基类"""

    # 适配器名称，用于工厂模式注册
    ADAPTER_NAME: str = ""
    # 写入后的存储后端类型
    BACKEND: StorageBackend

    async def _run_in_executor(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        在线程池中运行同步函数（SDK调用、文件读写）

        Args:
            func: 同步函数
            *args: 位置参数
            **kwargs: 关键字参数

        Returns:
            函数执行结果
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    @abstractmethod
    async def upload(
        self,
        data: bytes,
        key: str,
        mime_type: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> UploadResult:
        """
        上传文件

        Args:
            data: 文件数据
            key: 存储键（文件名）
            mime_type: MIME类型
            metadata: 可选的元数据

        Returns:
            UploadResult: 上传结果

        Raises:
            StorageError: 上传失败时抛出
        """

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        删除文件

        Raises:
            DeleteError: 删除失败时抛出
        """

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """检查文件是否存在"""

    @abstractmethod
    def get_public_url(self, key: str) -> str:
        """获取文件的公开访问URL"""
