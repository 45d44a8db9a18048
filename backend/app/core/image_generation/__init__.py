"""
图片生成模块
"""

from .base import BaseImageProvider, ImageModelConfig
from .exceptions import GenerationConfigError, GenerationRequestError, ImageGenerationError
from .factory import ImageProviderFactory
from .providers.gemini import GeminiImageProvider

# 注册所有提供商
ImageProviderFactory.register_provider("gemini", GeminiImageProvider)


def get_image_provider(model_config: ImageModelConfig | None = None) -> BaseImageProvider:
    """获取图片生成提供商实例"""
    return ImageProviderFactory.create_provider(model_config)


__all__ = [
    "BaseImageProvider",
    "ImageModelConfig",
    "ImageProviderFactory",
    "GeminiImageProvider",
    "ImageGenerationError",
    "GenerationConfigError",
    "GenerationRequestError",
    "get_image_provider",
]
