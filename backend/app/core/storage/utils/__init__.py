"""
存储工具模块
提供存储相关的工具函数
"""

from app.core.storage.utils.image import detect_image_mime_type

__all__ = ['detect_image_mime_type']
