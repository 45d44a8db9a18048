"""
图片生成异常定义
"""

from typing import Any, Dict, Optional


class ImageGenerationError(Exception):
    """图片生成基础异常"""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.details = details or {}


class GenerationConfigError(ImageGenerationError):
    """生成服务配置错误（如缺少API密钥），整个请求直接失败"""


class GenerationRequestError(ImageGenerationError):
    """调用生成服务失败（网络、服务端错误或超时）"""


__all__ = [
    'ImageGenerationError',
    'GenerationConfigError',
    'GenerationRequestError',
]
