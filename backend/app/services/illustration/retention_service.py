"""
本地插画清理服务
只保留最近生成的若干张本地回退图片
"""

import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from app.core.config import settings
from app.core.log_messages import log_messages
from app.core.log_utils import get_logger
from app.utils.id_utils import extract_filename_timestamp

logger = get_logger(__name__)


class ImageRetentionService:
    """
    本地图片保留策略

    按文件名中的时间戳倒序排列，保留最新的 retention_limit 张，其余删除。
    不符合命名规则的文件不参与清理。
    """

    def __init__(self, images_dir: Optional[Union[str, Path]] = None, retention_limit: int = 50):
        self.images_dir = Path(images_dir or settings.absolute_images_dir)
        self.retention_limit = max(0, retention_limit)

    def _list_images(self) -> List[Tuple[int, Path]]:
        if not self.images_dir.is_dir():
            return []

        images = []
        for path in self.images_dir.iterdir():
            if not path.is_file():
                continue
            timestamp = extract_filename_timestamp(path.name)
            if timestamp is not None:
                images.append((timestamp, path))

        images.sort(key=lambda item: item[0], reverse=True)
        return images

    def _sweep(self) -> Dict[str, int]:
        images = self._list_images()
        kept = images[:self.retention_limit]
        expired = images[self.retention_limit:]

        deleted = 0
        for _, path in expired:
            try:
                path.unlink()
                deleted += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("删除本地图片失败", operation="cleanup_images", path=str(path), error=str(e))

        return {"deleted": deleted, "kept": len(kept)}

    async def cleanup(self) -> Dict[str, int]:
        """
        执行清理

        Returns:
            Dict[str, int]: {"deleted": 删除数量, "kept": 保留数量}
        """
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, self._sweep)

        logger.info(log_messages.CLEANUP_COMPLETED, operation="cleanup_images", **result)
        return result
