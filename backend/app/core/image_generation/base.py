"""
图片生成提供商基类
定义所有图片生成提供商的统一接口
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

from app.core.config import settings
from app.core.log_utils import get_logger
from app.core.mlflow_tracker import ensure_mlflow_initialized, get_mlflow_tracker

logger = get_logger(__name__)


@dataclass(frozen=True)
class ImageModelConfig:
    """
    图片生成模型配置

    Attributes:
        provider: 提供商名称
        model: 模型标识
        api_key: API密钥
        base_url: 自定义API地址
        timeout: 单次调用超时（秒），None表示不限制
    """
    provider: str
    model: str
    api_key: str = ""
    base_url: Optional[str] = None
    timeout: Optional[float] = None

    @classmethod
    def from_settings(cls) -> "ImageModelConfig":
        """从全局配置构建Gemini模型配置"""
        return cls(
            provider="gemini",
            model=settings.gemini_image_model,
            api_key=settings.gemini_api_key,
            base_url=settings.gemini_base_url,
            timeout=settings.gemini_generation_timeout,
        )


class BaseImageProvider(ABC):
    """
    图片生成提供商基类

    提供商只负责发起一次远程调用并返回原始响应，不做重试；
    图片提取由上层的响应解析器完成。
    """

    SUPPORTED_MODELS: List[str] = []

    def __init__(self, model_config: ImageModelConfig):
        self.model_config = model_config
        self.mlflow_tracker = get_mlflow_tracker()
        self._initialize_mlflow()

    def _initialize_mlflow(self) -> None:
        """初始化MLflow追踪，失败时仅记录日志"""
        try:
            if ensure_mlflow_initialized():
                logger.info(
                    "MLflow追踪已启用",
                    operation="image_provider_mlflow_init_success",
                    provider=self.__class__.__name__
                )
        except Exception as e:
            logger.error(
                "初始化MLflow追踪时出现错误",
                operation="image_provider_mlflow_init_error",
                provider=self.__class__.__name__,
                exception=e
            )

    async def generate_content(self, prompt: str) -> Any:
        """
        发送提示词并返回模型的原始响应

        Args:
            prompt: 组装好的提示词

        Returns:
            Any: 模型响应（由响应解析器处理）

        Raises:
            GenerationConfigError: 配置缺失
            GenerationRequestError: 远程调用失败
        """
        start_time = time.time()
        logger.info(
            "开始调用图片生成模型",
            operation="image_generation_start",
            provider=self.__class__.__name__,
            model=self.model_config.model,
            prompt_length=len(prompt)
        )

        response = await self._generate_content_internal(prompt)

        logger.info(
            "图片生成模型调用完成",
            operation="image_generation_completed",
            provider=self.__class__.__name__,
            execution_time_seconds=round(time.time() - start_time, 3)
        )
        return response

    @abstractmethod
    async def _generate_content_internal(self, prompt: str) -> Any:
        """
        实际的模型调用（由子类实现）

        Args:
            prompt: 提示词

        Returns:
            Any: 模型原始响应
        """
        pass

    @classmethod
    def supports_model(cls, model_name: str) -> bool:
        """检查是否支持指定模型"""
        return model_name in cls.SUPPORTED_MODELS
