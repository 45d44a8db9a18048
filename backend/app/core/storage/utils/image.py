"""
图片数据工具
提供图片内容类型识别相关的工具函数
"""

import io

from PIL import Image, UnidentifiedImageError

from app.core.log_utils import get_logger

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "image/png"


def detect_image_mime_type(data: bytes) -> str:
    """
    通过图片内容识别MIME类型

    Args:
        data: 图片数据

    Returns:
        str: MIME类型；无法识别时返回 image/png（文件仍按PNG保存）
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.debug("无法识别图片格式，按PNG处理", error=str(e), size_bytes=len(data))
        return DEFAULT_MIME_TYPE

    return Image.MIME.get(image_format or "", DEFAULT_MIME_TYPE)


__all__ = ['detect_image_mime_type', 'DEFAULT_MIME_TYPE']
