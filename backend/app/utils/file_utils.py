"""
文件工具模块
提供统一的文件处理函数
"""

from pathlib import Path
from typing import Optional, Union

# 图片路由支持的扩展名，未知扩展名按PNG处理
IMAGE_MIME_TYPES = {
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.png': 'image/png',
    '.gif': 'image/gif',
    '.webp': 'image/webp',
}

DEFAULT_IMAGE_MIME_TYPE = 'image/png'


def get_file_extension(file_path: Union[str, Path]) -> str:
    """
    获取文件扩展名（小写）

    Args:
        file_path: 文件路径

    Returns:
        str: 文件扩展名（如：.jpg, .png）
    """
    return Path(file_path).suffix.lower()


def get_mime_type(file_path: Union[str, Path]) -> str:
    """
    根据文件扩展名获取图片MIME类型

    Args:
        file_path: 文件路径

    Returns:
        str: MIME类型，无法识别时为 image/png
    """
    return IMAGE_MIME_TYPES.get(get_file_extension(file_path), DEFAULT_IMAGE_MIME_TYPE)


def resolve_within_directory(base_dir: Union[str, Path], *parts: str) -> Optional[Path]:
    """
    拼接并解析路径，确保结果仍位于 base_dir 内

    Args:
        base_dir: 根目录
        *parts: 路径片段

    Returns:
        Optional[Path]: 解析后的绝对路径；越界（如 ../ 穿越）时返回None
    """
    root = Path(base_dir).resolve()
    candidate = root.joinpath(*parts).resolve()
    if candidate == root or not candidate.is_relative_to(root):
        return None
    return candidate
