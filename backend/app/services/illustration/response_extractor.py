"""
模型响应解析
按顺序尝试多种提取策略，从生成响应中取出第一张图片
"""

import base64
import binascii
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

from app.core.log_utils import get_logger

logger = get_logger(__name__)


class ImageSource(str, Enum):
    """图片来源"""
    INLINE_DATA = "inline_data"
    EMBEDDED_DATA_URL = "embedded_data_url"


@dataclass(frozen=True)
class ExtractedImage:
    """从响应中提取出的图片"""
    data: bytes
    source_format: ImageSource


# 单个响应片段 -> 图片；不匹配时返回None
ExtractionStrategy = Callable[[Any], Optional[ExtractedImage]]

_DATA_URL_PREFIX = re.compile(r"data:image/[\w.+-]+;base64,")
_BASE64_RUN = re.compile(r"[A-Za-z0-9+/]*={0,2}")


def _decode_base64(payload: str) -> Optional[bytes]:
    try:
        return base64.b64decode(payload.strip(), validate=False) or None
    except (binascii.Error, ValueError):
        return None


def read_base64_payload(text: str) -> str:
    """
    读取data URL逗号之后的base64内容

    模型可能按固定宽度折行输出（如MIME的76字符换行）：首行写满时，
    后续整行都是base64字符且不超过首行宽度的行视为续行，直到出现短行或补位符。
    同一行中base64之后的普通文本不计入。
    """
    lines = text.split("\n")
    first_line = lines[0].rstrip()
    first = _BASE64_RUN.match(first_line).group(0)
    if not first or len(first) < len(first_line) or first.endswith("="):
        return first

    width = len(first)
    chunks = [first]
    for line in lines[1:]:
        line = line.strip()
        if not line or not _BASE64_RUN.fullmatch(line) or len(line) > width:
            break
        chunks.append(line)
        if len(line) < width or line.endswith("="):
            break

    return "".join(chunks)


def get_response_parts(response: Any) -> List[Any]:
    """
    取出响应中的所有片段

    优先读取 candidates[0].content.parts，其次读取 response.parts；
    任一层级缺失时返回空列表。
    """
    if response is None:
        return []

    candidates = getattr(response, "candidates", None)
    if candidates:
        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None)
        if parts:
            return list(parts)

    try:
        parts = getattr(response, "parts", None)
    except (AttributeError, IndexError, ValueError):
        parts = None
    return list(parts) if parts else []


def extract_inline_image(part: Any) -> Optional[ExtractedImage]:
    """
    内联图片数据策略

    SDK 返回的 inline_data.data 通常为 bytes；为字符串时按base64解码。
    数据为空或无法解码时视为不匹配。
    """
    inline_data = getattr(part, "inline_data", None)
    if inline_data is None:
        return None

    data = getattr(inline_data, "data", None)
    if isinstance(data, str):
        data = _decode_base64(data)
    if not isinstance(data, (bytes, bytearray)) or not data:
        return None

    return ExtractedImage(data=bytes(data), source_format=ImageSource.INLINE_DATA)


def extract_embedded_data_url(part: Any) -> Optional[ExtractedImage]:
    """
    文本内嵌data URL策略

    在文本中查找 data:image 开头的子串，对第一个逗号之后的内容做base64解码。
    """
    text = getattr(part, "text", None)
    if not isinstance(text, str) or "data:image" not in text:
        return None

    match = _DATA_URL_PREFIX.search(text)
    if match:
        remainder = text[match.end():]
    else:
        tail = text[text.index("data:image"):]
        if "," not in tail:
            return None
        remainder = tail.split(",", 1)[1]

    data = _decode_base64(read_base64_payload(remainder))
    if not data:
        return None

    return ExtractedImage(data=data, source_format=ImageSource.EMBEDDED_DATA_URL)


DEFAULT_STRATEGIES: Sequence[ExtractionStrategy] = (
    extract_inline_image,
    extract_embedded_data_url,
)


class ResponseExtractor:
    """
    响应图片提取器

    每个策略对全部片段完整扫描一遍，命中即返回；前一个策略在任何片段上都未命中时
    才尝试下一个。全部未命中返回None，这不是错误。
    """

    def __init__(self, strategies: Optional[Sequence[ExtractionStrategy]] = None):
        self.strategies = list(strategies if strategies is not None else DEFAULT_STRATEGIES)

    def extract(self, response: Any) -> Optional[ExtractedImage]:
        """
        从生成响应中提取第一张图片

        Args:
            response: 模型原始响应

        Returns:
            Optional[ExtractedImage]: 提取到的图片，没有图片时为None
        """
        parts = get_response_parts(response)
        if not parts:
            logger.debug("模型响应中没有任何片段")
            return None

        for strategy in self.strategies:
            for part in parts:
                image = strategy(part)
                if image is not None:
                    logger.debug(
                        "从模型响应中提取到图片",
                        source=image.source_format.value,
                        size_bytes=len(image.data)
                    )
                    return image

        return None
