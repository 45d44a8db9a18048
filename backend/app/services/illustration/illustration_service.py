"""
插画生成服务
串联提示词组装、模型调用、图片提取和存储，产出可公开访问的图片地址
"""

from typing import Optional

from app.core.image_generation import BaseImageProvider, GenerationConfigError
from app.core.log_messages import log_messages
from app.core.log_utils import get_logger
from app.core.storage import FallbackStorage, detect_image_mime_type
from app.services.illustration.models import (
    IllustrationRequest,
    IllustrationResult,
    IllustrationSettings,
    IllustrationStage,
)
from app.services.illustration.prompt_composer import append_page_marker, compose_prompt
from app.services.illustration.remote_client import RemoteIllustrationClient
from app.services.illustration.response_extractor import ResponseExtractor
from app.utils.id_utils import ILLUSTRATION_PREFIX, build_image_filename

logger = get_logger(__name__)

NO_IMAGE_ERROR = "No image returned from model"
STORAGE_FAILED_ERROR = "Failed to store generated image"


class IllustrationService:
    """
    插画生成服务

    单次调用对应一页插画的完整流水线:
    pending -> generating -> extracting -> persisting -> succeeded | failed
    流水线内部不重试；除配置错误外的异常都转换为失败结果。
    """

    def __init__(
        self,
        provider: BaseImageProvider,
        storage: FallbackStorage,
        config: Optional[IllustrationSettings] = None,
        extractor: Optional[ResponseExtractor] = None,
        remote_client: Optional[RemoteIllustrationClient] = None
    ):
        self.provider = provider
        self.storage = storage
        self.config = config or IllustrationSettings()
        self.extractor = extractor or ResponseExtractor()

        if remote_client is None and self.config.fallback_url:
            remote_client = RemoteIllustrationClient(
                self.config.fallback_url,
                timeout=self.config.fallback_timeout
            )
        self.remote_client = remote_client

    def _log_stage(self, request: IllustrationRequest, stage: IllustrationStage, **kwargs) -> None:
        page_number = request.page_number or 1
        fields = dict(
            operation="illustration_stage",
            page_number=page_number,
            page_index=page_number - 1,
            stage=stage.value,
            **kwargs
        )
        if stage == IllustrationStage.FAILED:
            logger.warning(log_messages.PAGE_STAGE_CHANGED, **fields)
        else:
            logger.info(log_messages.PAGE_STAGE_CHANGED, **fields)

    def _failed(
        self,
        request: IllustrationRequest,
        stage: IllustrationStage,
        error: str,
        prompt: Optional[str] = None
    ) -> IllustrationResult:
        self._log_stage(request, IllustrationStage.FAILED, failed_stage=stage.value, error=error)
        return IllustrationResult(success=False, prompt=prompt, error=error, failed_stage=stage)

    async def generate(
        self,
        request: IllustrationRequest,
        filename_prefix: str = ILLUSTRATION_PREFIX,
        page_count: Optional[int] = None
    ) -> IllustrationResult:
        """
        执行一次插画流水线

        Args:
            request: 插画请求
            filename_prefix: 文件名前缀，标识生成路径
            page_count: 多页生成时的总页数，提示词末尾追加页码说明

        Returns:
            IllustrationResult: 流水线结果

        Raises:
            GenerationConfigError: 生成服务未配置
        """
        self._log_stage(request, IllustrationStage.PENDING)

        prompt = compose_prompt(request)
        if page_count and request.page_number:
            prompt = append_page_marker(prompt, request.page_number, page_count)

        self._log_stage(request, IllustrationStage.GENERATING, prompt_length=len(prompt))
        try:
            response = await self.provider.generate_content(prompt)
        except GenerationConfigError:
            raise
        except Exception as e:
            return self._failed(request, IllustrationStage.GENERATING, str(e), prompt)

        self._log_stage(request, IllustrationStage.EXTRACTING)
        try:
            image = self.extractor.extract(response)
        except Exception as e:
            logger.error("解析模型响应异常", exception=e, operation="extract_image")
            image = None
        if image is None:
            logger.warning(log_messages.ILLUSTRATION_NO_IMAGE, operation="extract_image")
            return self._failed(request, IllustrationStage.EXTRACTING, NO_IMAGE_ERROR, prompt)

        self._log_stage(
            request,
            IllustrationStage.PERSISTING,
            source=image.source_format.value,
            size_bytes=len(image.data)
        )
        filename = build_image_filename(filename_prefix, page_number=request.page_number)
        stored = await self.storage.save(image.data, filename, detect_image_mime_type(image.data))
        if stored is None:
            return self._failed(request, IllustrationStage.PERSISTING, STORAGE_FAILED_ERROR, prompt)

        self._log_stage(request, IllustrationStage.SUCCEEDED, image_url=stored.url, backend=stored.backend.value)
        return IllustrationResult(
            success=True,
            image_url=stored.url,
            backend=stored.backend,
            prompt=prompt
        )

    async def illustrate(
        self,
        request: IllustrationRequest,
        filename_prefix: str = ILLUSTRATION_PREFIX,
        page_count: Optional[int] = None,
        allow_remote_fallback: bool = False
    ) -> IllustrationResult:
        """
        生成插画，可选在未得到图片时调用远程插画接口兜底

        远程兜底仅在模型未返回图片或图片保存失败时触发；兜底失败时返回原始失败结果。
        """
        logger.info(log_messages.ILLUSTRATION_START, operation="illustrate", style=request.style.value)

        result = await self.generate(request, filename_prefix=filename_prefix, page_count=page_count)
        if result.success:
            logger.info(log_messages.ILLUSTRATION_SUCCESS, operation="illustrate", image_url=result.image_url)
            return result

        remote_eligible = result.failed_stage in (IllustrationStage.EXTRACTING, IllustrationStage.PERSISTING)
        if not (allow_remote_fallback and remote_eligible and self.remote_client):
            return result

        try:
            image_url = await self.remote_client.illustrate(request.scene_prompt)
        except Exception as e:
            logger.error("远程插画兜底失败", exception=e, operation="remote_fallback")
            return result

        if not image_url:
            logger.warning("远程插画接口未返回图片", operation="remote_fallback")
            return result

        logger.info("远程插画兜底成功", operation="remote_fallback", image_url=image_url)
        return IllustrationResult(success=True, image_url=image_url, prompt=result.prompt)
