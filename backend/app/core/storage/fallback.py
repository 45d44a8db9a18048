"""
主备存储组合
按顺序尝试各个存储后端，第一个写入成功的结果即为最终结果
"""

from typing import List, Optional, Sequence

from app.core.log_messages import log_messages
from app.core.log_utils import get_logger
from app.core.storage.base_storage import BaseStorage
from app.core.storage.models import StoredImage

logger = get_logger(__name__)


class FallbackStorage:
    """
    主存储 + 备用存储的所有权链

    主存储（对象存储）写入失败时自动、静默地（仅记录日志）回退到备用存储
    （本地文件）。全部失败时返回None，由调用方按“未生成图片”处理，不抛出异常。
    """

    def __init__(self, primary: Optional[BaseStorage], fallback: Optional[BaseStorage] = None):
        self.primary = primary
        self.fallback = fallback

    @property
    def chain(self) -> List[BaseStorage]:
        return [sink for sink in (self.primary, self.fallback) if sink is not None]

    async def save(self, data: bytes, key: str, mime_type: str = "image/png") -> Optional[StoredImage]:
        """
        保存图片并返回公开访问地址

        Args:
            data: 图片数据
            key: 文件名
            mime_type: MIME类型

        Returns:
            Optional[StoredImage]: 保存结果，所有后端都失败时为None
        """
        return await store_with_fallback(self.chain, data, key, mime_type)


async def store_with_fallback(
    sinks: Sequence[BaseStorage],
    data: bytes,
    key: str,
    mime_type: str = "image/png"
) -> Optional[StoredImage]:
    """
    依次尝试写入，返回第一个成功的结果

    Args:
        sinks: 按优先级排列的存储后端
        data: 图片数据
        key: 文件名
        mime_type: MIME类型

    Returns:
        Optional[StoredImage]: 写入结果；全部失败返回None
    """
    for position, sink in enumerate(sinks):
        try:
            result = await sink.upload(data, key, mime_type)
        except Exception as e:
            is_last = position == len(sinks) - 1
            if is_last:
                logger.error(
                    log_messages.STORAGE_FALLBACK_FAILED,
                    exception=e,
                    operation="store_image",
                    backend=sink.BACKEND.value,
                    key=key
                )
            else:
                logger.warning(
                    log_messages.STORAGE_PRIMARY_FAILED,
                    operation="store_image",
                    backend=sink.BACKEND.value,
                    key=key,
                    error=str(e)
                )
            continue

        logger.info(
            log_messages.STORAGE_SAVED,
            operation="store_image",
            backend=result.backend.value,
            key=key,
            url=result.url
        )
        return StoredImage(url=result.url, backend=result.backend, key=result.key)

    return None


__all__ = ['FallbackStorage', 'store_with_fallback']
