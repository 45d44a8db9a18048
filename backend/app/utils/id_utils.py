"""
ID生成工具模块
提供插画文件名等标识的生成方法
"""

import random
import re
import string
import time
from typing import Optional

# 文件名前缀，标识生成路径
ILLUSTRATION_PREFIX = "illustration"
BATCH_ILLUSTRATION_PREFIX = "batch_illustration"
ADVANCED_ILLUSTRATION_PREFIX = "advanced_illustration"

IMAGE_EXTENSION = ".png"

# 本服务生成的三种PNG文件名，清理任务只处理这些文件并按时间戳排序
_TIMESTAMP_PATTERN = re.compile(r"^(?:illustration|batch_illustration|advanced_illustration)_(\d+)_[a-z0-9_]+\.png$")


def generate_random_suffix(length: int = 6) -> str:
    """生成小写字母加数字的随机后缀"""
    return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))


def build_image_filename(
    prefix: str = ILLUSTRATION_PREFIX,
    page_number: Optional[int] = None,
    timestamp_ms: Optional[int] = None
) -> str:
    """
    生成不冲突的插画文件名

    格式: <prefix>_<毫秒时间戳>_[page<N>_]<6位随机串>.png

    Args:
        prefix: 语义前缀
        page_number: 页码（从1开始），批量路径使用
        timestamp_ms: 时间戳，默认当前时间

    Returns:
        str: 文件名
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)

    parts = [prefix, str(timestamp_ms)]
    if page_number is not None:
        parts.append(f"page{page_number}")
    parts.append(generate_random_suffix())

    return "_".join(parts) + IMAGE_EXTENSION


def extract_filename_timestamp(filename: str) -> Optional[int]:
    """
    从插画文件名中提取毫秒时间戳

    Returns:
        Optional[int]: 时间戳；不是本服务生成的PNG文件名时为None
    """
    match = _TIMESTAMP_PATTERN.search(filename)
    if not match:
        return None
    return int(match.group(1))
