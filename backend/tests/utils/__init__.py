"""
测试工具包
提供统一的测试工具和辅助函数
"""

from .mock_utils import MockBuilder, mock_config
from .test_data_utils import TestDataGenerator, TestDataValidator

__all__ = [
    'MockBuilder',
    'mock_config',
    'TestDataGenerator',
    'TestDataValidator',
]
