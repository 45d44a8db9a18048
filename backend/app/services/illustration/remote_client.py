"""
远程插画服务客户端
直接生成未得到图片时，调用已部署的插画接口作为兜底
"""

from typing import Any, Dict, Optional

import httpx

from app.core.log_utils import get_logger

logger = get_logger(__name__)


class RemoteIllustrationError(Exception):
    """远程插画接口调用失败"""


class RemoteIllustrationClient:
    """远程插画接口客户端"""

    def __init__(
        self,
        endpoint_url: str,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            endpoint_url: 插画接口完整地址
            timeout: 请求超时时间（秒）
            transport: 自定义传输层（测试时注入）
        """
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self.transport = transport

    @staticmethod
    def _parse_image_url(payload: Dict[str, Any]) -> Optional[str]:
        """兼容直接返回和 StandardResponse 包装两种格式"""
        if not isinstance(payload, dict):
            return None
        if payload.get("imageUrl"):
            return payload["imageUrl"]
        data = payload.get("data")
        if isinstance(data, dict):
            return data.get("imageUrl") or data.get("image_url")
        return None

    async def illustrate(self, prompt: str) -> Optional[str]:
        """
        请求远程接口生成插画

        Args:
            prompt: 场景描述

        Returns:
            Optional[str]: 图片地址，接口未返回图片时为None

        Raises:
            RemoteIllustrationError: 请求失败时抛出
        """
        logger.info(
            "调用远程插画接口",
            operation="remote_illustrate",
            endpoint=self.endpoint_url,
            prompt_length=len(prompt)
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.endpoint_url, json={"prompt": prompt})
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"远程插画接口请求异常: {str(e)}", operation="remote_illustrate")
            raise RemoteIllustrationError(f"请求远程插画接口失败: {str(e)}") from e
        except ValueError as e:
            raise RemoteIllustrationError(f"远程插画接口返回了无效的JSON: {str(e)}") from e

        return self._parse_image_url(payload)
