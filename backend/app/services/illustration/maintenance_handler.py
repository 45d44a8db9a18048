"""
维护业务处理器
"""

from typing import Dict, Optional

from fastapi import HTTPException, status

from app.core.log_utils import get_logger
from app.services.illustration.models import IllustrationSettings
from app.services.illustration.retention_service import ImageRetentionService

logger = get_logger(__name__)


class MaintenanceHandler:
    """维护业务处理器"""

    def __init__(self, retention_service: Optional[ImageRetentionService] = None):
        if retention_service is None:
            config = IllustrationSettings.from_settings()
            retention_service = ImageRetentionService(retention_limit=config.retention_limit)
        self.retention_service = retention_service

    async def handle_cleanup_images(self) -> Dict[str, int]:
        """
        清理本地回退图片

        Raises:
            HTTPException: 清理失败时抛出
        """
        try:
            return await self.retention_service.cleanup()
        except Exception as e:
            logger.error("清理本地图片失败", exception=e, operation="cleanup_images")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"清理图片失败: {str(e)}"
            )
