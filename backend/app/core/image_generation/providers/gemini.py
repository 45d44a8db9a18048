"""
Gemini图片生成提供商
基于 Google GenAI SDK 实现
"""

import asyncio
from functools import partial
from typing import Any, Optional

from google import genai
from google.genai import types

from app.core.image_generation.base import BaseImageProvider, ImageModelConfig
from app.core.image_generation.exceptions import GenerationConfigError, GenerationRequestError
from app.core.log_utils import get_logger

logger = get_logger(__name__)


class GeminiImageProvider(BaseImageProvider):
    """Gemini图片生成提供商"""

    SUPPORTED_MODELS = [
        "gemini-2.5-flash-image-preview",
        "gemini-2.5-flash-image",
        "gemini-3-pro-image-preview",
        "gemini-2.0-flash-exp",
    ]

    # 同时请求文本和图片，文本中可能携带data URL形式的图片
    RESPONSE_MODALITIES = ["TEXT", "IMAGE"]

    def __init__(self, model_config: ImageModelConfig, client: Optional[Any] = None):
        """
        初始化Gemini提供商

        Args:
            model_config: 模型配置
            client: 已创建的GenAI客户端（测试时注入）

        Raises:
            GenerationConfigError: 未配置API密钥时抛出
        """
        if client is None and not model_config.api_key:
            raise GenerationConfigError("Missing GOOGLE_GENAI_API_KEY", provider="gemini")

        super().__init__(model_config)

        if client is None:
            http_options = None
            if model_config.base_url:
                http_options = {"base_url": model_config.base_url}
            client = genai.Client(api_key=model_config.api_key, http_options=http_options)

        self.client = client
        self.model = model_config.model
        self.timeout = model_config.timeout

        logger.info(
            "GeminiImageProvider初始化成功",
            operation="gemini_init_success",
            model=self.model,
            has_api_base=bool(model_config.base_url)
        )

    async def _generate_content_internal(self, prompt: str) -> Any:
        """
        调用 generate_content

        SDK为同步接口，在线程池中执行；配置了超时时用 asyncio.wait_for 限制等待时间。

        Raises:
            GenerationRequestError: 调用失败或超时
        """
        loop = asyncio.get_running_loop()
        call = loop.run_in_executor(
            None,
            partial(
                self.client.models.generate_content,
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(response_modalities=self.RESPONSE_MODALITIES),
            )
        )

        try:
            if self.timeout:
                return await asyncio.wait_for(call, timeout=self.timeout)
            return await call
        except asyncio.TimeoutError as e:
            logger.error(
                "Gemini调用超时",
                operation="gemini_generation_timeout",
                model=self.model,
                timeout_seconds=self.timeout
            )
            raise GenerationRequestError(
                f"Gemini调用超时（{self.timeout}秒）",
                provider="gemini"
            ) from e
        except Exception as e:
            logger.error(
                "Gemini图片生成调用失败",
                operation="gemini_generation_failed",
                exception=e,
                model=self.model
            )
            raise GenerationRequestError(f"Gemini图片生成错误: {str(e)}", provider="gemini") from e
