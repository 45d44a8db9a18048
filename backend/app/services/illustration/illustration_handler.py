"""
插画生成业务处理器
处理请求参数转换、异常到HTTP状态码的映射和响应格式化
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status

from app.core.image_generation import GenerationConfigError, get_image_provider
from app.core.log_utils import get_logger
from app.core.storage import get_image_storage
from app.schemas.illustration import AdvancedIllustrateRequest, BatchIllustrateRequest, IllustrateRequest
from app.services.illustration.batch_orchestrator import BatchOrchestrator
from app.services.illustration.illustration_service import NO_IMAGE_ERROR, IllustrationService
from app.services.illustration.models import (
    BatchPage,
    IllustrationRequest,
    IllustrationResult,
    IllustrationSettings,
    IllustrationStage,
    PromptVariant,
)
from app.utils.id_utils import ADVANCED_ILLUSTRATION_PREFIX, ILLUSTRATION_PREFIX

logger = get_logger(__name__)


def _enabled(flag: bool) -> str:
    return "Enabled" if flag else "Disabled"


def _applied(value: Optional[str]) -> str:
    return "Applied" if value else "None"


class IllustrationHandler:
    """插画生成业务处理器"""

    def __init__(
        self,
        service: Optional[IllustrationService] = None,
        config: Optional[IllustrationSettings] = None
    ):
        self.config = config or (service.config if service else IllustrationSettings.from_settings())
        self._service = service

    def _get_service(self) -> IllustrationService:
        """
        获取插画服务，首次使用时创建

        Raises:
            HTTPException: 生成服务未配置时返回500，不做任何生成
        """
        if self._service is None:
            try:
                provider = get_image_provider()
            except GenerationConfigError as e:
                logger.error("图片生成服务未配置", operation="create_illustration_service", error=e.message)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=e.message
                )
            self._service = IllustrationService(provider, get_image_storage(), self.config)
        return self._service

    @staticmethod
    def _raise_for_failure(result: IllustrationResult) -> None:
        """单图接口的失败映射：未得到图片返回502，其余返回500"""
        if result.failed_stage == IllustrationStage.EXTRACTING:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=NO_IMAGE_ERROR)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"插画生成失败: {result.error}"
        )

    @staticmethod
    def _backend_name(result: IllustrationResult) -> str:
        return result.backend.value if result.backend else "remote"

    async def handle_illustrate(self, request: IllustrateRequest) -> Dict[str, Any]:
        """
        处理单张插画请求

        Raises:
            HTTPException: 请求处理失败时抛出HTTP异常
        """
        service = self._get_service()
        try:
            illustration_request = IllustrationRequest(
                scene_prompt=request.prompt,
                style=request.style,
                character_description=request.character_description,
                previous_image_url=request.previous_image_url,
                consistency_mode=request.consistency_mode,
                edit_mode=request.edit_mode,
            )
            result = await service.illustrate(
                illustration_request,
                filename_prefix=ILLUSTRATION_PREFIX,
                allow_remote_fallback=True
            )
        except GenerationConfigError as e:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
        except Exception as e:
            logger.error("插画请求处理异常", exception=e, operation="handle_illustrate")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"插画生成失败: {str(e)}"
            )

        if not result.success:
            self._raise_for_failure(result)

        return {"imageUrl": result.image_url, "backend": self._backend_name(result)}

    async def handle_advanced_illustrate(self, request: AdvancedIllustrateRequest) -> Dict[str, Any]:
        """
        处理高级插画请求

        batchGenerate 且 pageCount > 1 时按页顺序生成，跳过未得到图片的页。
        """
        service = self._get_service()
        paged = request.batch_generate and request.page_count > 1

        def build_request(page_number: Optional[int]) -> IllustrationRequest:
            return IllustrationRequest(
                scene_prompt=request.prompt,
                style=request.style,
                character_description=request.character_description,
                previous_image_url=request.previous_image_url,
                consistency_mode=request.consistency_mode,
                edit_mode=request.edit_mode,
                fusion_mode=request.fusion_mode,
                variant=PromptVariant.ADVANCED,
                page_number=page_number,
            )

        try:
            if paged:
                image_urls: List[str] = []
                for page_number in range(1, request.page_count + 1):
                    result = await service.generate(
                        build_request(page_number),
                        filename_prefix=ADVANCED_ILLUSTRATION_PREFIX,
                        page_count=request.page_count
                    )
                    if result.success:
                        image_urls.append(result.image_url)
            else:
                result = await service.illustrate(
                    build_request(None),
                    filename_prefix=ADVANCED_ILLUSTRATION_PREFIX,
                    allow_remote_fallback=True
                )
        except GenerationConfigError as e:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
        except Exception as e:
            logger.error("高级插画请求处理异常", exception=e, operation="handle_advanced_illustrate")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"插画生成失败: {str(e)}"
            )

        if paged:
            if not image_urls:
                raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=NO_IMAGE_ERROR)
            return {"imageUrls": image_urls, "batchGenerated": True, "count": len(image_urls)}

        if not result.success:
            self._raise_for_failure(result)

        return {
            "imageUrl": result.image_url,
            "batchGenerated": False,
            "features": {
                "style": request.style.value,
                "consistencyMode": _enabled(request.consistency_mode),
                "editMode": _enabled(request.edit_mode),
                "fusionMode": _enabled(request.fusion_mode),
                "characterDescription": _applied(request.character_description),
            },
        }

    async def handle_batch_illustrate(self, request: BatchIllustrateRequest) -> Dict[str, Any]:
        """
        处理批量插画请求

        单页失败记录在 failedResults 中，不影响其他页面。
        """
        service = self._get_service()
        orchestrator = BatchOrchestrator(service, self.config)
        pages = [
            BatchPage(page_index=page.page_index, prompt=page.prompt, text=page.text)
            for page in request.pages
        ]

        try:
            outcome = await orchestrator.run(
                pages,
                style=request.style,
                character_description=request.character_description,
                consistency_mode=request.consistency_mode,
                fusion_mode=request.fusion_mode,
                batch_size=request.batch_size,
            )
        except Exception as e:
            logger.error("批量插画请求处理异常", exception=e, operation="handle_batch_illustrate", book_id=request.book_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"批量插画生成失败: {str(e)}"
            )

        features = {
            "style": request.style.value,
            "consistencyMode": _enabled(request.consistency_mode),
            "fusionMode": _enabled(request.fusion_mode),
            "characterDescription": _applied(request.character_description),
        }

        return {
            "success": True,
            "bookId": request.book_id,
            "results": [
                {
                    "pageIndex": result.page_index,
                    "imageUrl": result.image_url,
                    "success": True,
                    "prompt": result.prompt,
                    "text": result.text,
                    "features": features,
                }
                for result in outcome.successes
            ],
            "failedResults": [
                {
                    "pageIndex": result.page_index,
                    "error": result.error,
                    "success": False,
                }
                for result in outcome.failures
            ],
            "summary": outcome.summary,
            "batchProcessing": {
                "totalBatches": outcome.total_batches,
                "batchSize": outcome.batch_size,
            },
        }
