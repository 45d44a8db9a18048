"""
本地文件存储适配器
在对象存储不可用时，将插画写入静态资源目录，由只读图片路由对外提供
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from app.core.config import settings
from app.core.log_utils import get_logger
from app.core.storage.base_storage import BaseStorage
from app.core.storage.exceptions import DeleteError, UploadError
from app.core.storage.models import StorageBackend, UploadResult
from app.utils.file_utils import resolve_within_directory

logger = get_logger(__name__)


class LocalFileStorage(BaseStorage):
    """
    本地文件存储

    并发写入依赖时间戳加随机后缀的文件名避免冲突，不使用锁。
    """

    ADAPTER_NAME: str = "local_file"
    BACKEND = StorageBackend.LOCAL_FILESYSTEM

    def __init__(
        self,
        base_dir: Optional[Union[str, Path]] = None,
        url_prefix: Optional[str] = None
    ) -> None:
        self.base_dir = Path(base_dir or settings.absolute_images_dir)
        self.url_prefix = (url_prefix if url_prefix is not None else settings.local_images_url_prefix).rstrip("/")

    def _resolve(self, key: str) -> Path:
        path = resolve_within_directory(self.base_dir, key)
        if path is None:
            raise UploadError("非法的存储路径: {}".format(key))
        return path

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def upload(
        self,
        data: bytes,
        key: str,
        mime_type: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> UploadResult:
        """
        写入本地静态目录（目录不存在时自动创建）

        Raises:
            UploadError: 路径非法或写入失败时抛出
        """
        if not data:
            raise UploadError("写入内容为空")

        path = self._resolve(key)
        try:
            await self._run_in_executor(self._write, path, data)
        except OSError as e:
            logger.error("本地图片写入失败", key=key, path=str(path), error=str(e))
            raise UploadError("写入本地文件失败: {}".format(str(e))) from e

        return UploadResult(
            key=key,
            url=self.get_public_url(key),
            size=len(data),
            mime_type=mime_type,
            backend=self.BACKEND,
            uploaded_at=datetime.now()
        )

    async def delete(self, key: str) -> bool:
        """删除本地文件，文件不存在时返回False"""
        path = resolve_within_directory(self.base_dir, key)
        if path is None:
            raise DeleteError("非法的存储路径: {}".format(key))
        try:
            await self._run_in_executor(path.unlink)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise DeleteError("删除本地文件失败: {}".format(str(e))) from e

    async def exists(self, key: str) -> bool:
        path = resolve_within_directory(self.base_dir, key)
        return path is not None and path.is_file()

    def get_public_url(self, key: str) -> str:
        """返回由只读图片路由提供的路径式URL"""
        return "{prefix}/{key}".format(prefix=self.url_prefix, key=key.lstrip("/"))


__all__ = ['LocalFileStorage']
