"""
本地图片访问端点
只读提供本地回退存储中的插画文件
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from app.core.log_utils import get_logger
from app.services.illustration.image_file_handler import ImageFileHandler

logger = get_logger(__name__)

router = APIRouter(tags=["图片访问"])


def get_image_file_handler() -> ImageFileHandler:
    """图片读取处理器依赖"""
    return ImageFileHandler()


@router.get(
    "/{image_path:path}",
    summary="访问本地插画",
    description="按路径读取本地回退存储中的图片，带长期缓存头"
)
async def get_image(
    image_path: str,
    handler: ImageFileHandler = Depends(get_image_file_handler)
) -> FileResponse:
    """
    读取本地图片

    Args:
        image_path: 图片相对路径

    Returns:
        FileResponse: 图片文件
    """
    path, media_type = handler.handle_get_image(image_path)
    return FileResponse(
        path,
        media_type=media_type,
        headers={"Cache-Control": handler.cache_control}
    )
