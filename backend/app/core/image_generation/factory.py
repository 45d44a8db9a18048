"""
图片生成提供商工厂
负责创建和管理图片生成提供商实例
"""

from typing import Dict, List, Optional, Type

from app.core.image_generation.base import BaseImageProvider, ImageModelConfig
from app.core.image_generation.exceptions import GenerationConfigError
from app.core.log_utils import get_logger

logger = get_logger(__name__)


class ImageProviderFactory:
    """图片生成提供商工厂"""

    _providers: Dict[str, Type[BaseImageProvider]] = {}

    @classmethod
    def register_provider(cls, provider_name: str, provider_class: Type[BaseImageProvider]) -> None:
        """
        注册提供商

        Args:
            provider_name: 提供商名称
            provider_class: 提供商类
        """
        if provider_name in cls._providers:
            logger.warning("提供商已存在，将被覆盖", provider_name=provider_name)

        cls._providers[provider_name] = provider_class
        logger.debug("注册图片生成提供商", provider_name=provider_name)

    @classmethod
    def create_provider(cls, model_config: Optional[ImageModelConfig] = None) -> BaseImageProvider:
        """
        创建提供商实例

        Args:
            model_config: 模型配置，默认从全局配置读取

        Returns:
            BaseImageProvider: 提供商实例

        Raises:
            GenerationConfigError: 提供商类型不支持或配置不完整
        """
        model_config = model_config or ImageModelConfig.from_settings()

        if model_config.provider not in cls._providers:
            raise GenerationConfigError(
                f"不支持的提供商类型: {model_config.provider}",
                provider=model_config.provider
            )

        provider_class = cls._providers[model_config.provider]
        return provider_class(model_config)

    @classmethod
    def get_available_providers(cls) -> List[str]:
        """获取所有可用的提供商名称"""
        return list(cls._providers.keys())

    @classmethod
    def is_provider_supported(cls, provider_name: str) -> bool:
        """检查是否支持指定的提供商"""
        return provider_name in cls._providers
