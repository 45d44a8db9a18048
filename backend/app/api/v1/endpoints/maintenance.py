"""
维护API端点
"""

from fastapi import APIRouter, Depends

from app.schemas.common import StandardResponse
from app.schemas.illustration import CleanupResult
from app.services.illustration.maintenance_handler import MaintenanceHandler

router = APIRouter(tags=["系统维护"])


def get_maintenance_handler() -> MaintenanceHandler:
    """维护处理器依赖"""
    return MaintenanceHandler()


@router.post(
    "/cleanup-images",
    response_model=StandardResponse,
    summary="清理本地图片",
    description="只保留最近生成的本地回退图片，删除其余图片"
)
async def cleanup_images(
    handler: MaintenanceHandler = Depends(get_maintenance_handler)
) -> StandardResponse:
    result = await handler.handle_cleanup_images()
    return StandardResponse(
        status="success",
        message="图片清理完成",
        data=CleanupResult(**result).model_dump()
    )
