"""
本地图片读取处理器
为只读图片路由解析文件路径并做目录越界检查
"""

from pathlib import Path
from typing import Optional, Tuple, Union

from fastapi import HTTPException, status

from app.core.config import settings
from app.core.log_utils import get_logger
from app.utils.file_utils import get_mime_type, resolve_within_directory

logger = get_logger(__name__)


class ImageFileHandler:
    """本地回退图片读取处理器"""

    def __init__(self, images_dir: Optional[Union[str, Path]] = None):
        self.images_dir = Path(images_dir or settings.absolute_images_dir)

    @property
    def cache_control(self) -> str:
        return f"public, max-age={settings.image_cache_max_age}, immutable"

    def handle_get_image(self, image_path: str) -> Tuple[Path, str]:
        """
        解析图片文件

        Args:
            image_path: 相对于图片目录的路径

        Returns:
            Tuple[Path, str]: 文件路径和MIME类型

        Raises:
            HTTPException: 路径越界返回403，文件不存在返回404
        """
        path = resolve_within_directory(self.images_dir, *[part for part in image_path.split("/") if part])
        if path is None:
            logger.warning("拒绝访问图片目录之外的路径", operation="get_image", image_path=image_path)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

        if not path.is_file():
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")

        return path, get_mime_type(path)
