"""
测试配置和fixtures
为所有测试提供共享的配置和fixtures

应用配置在导入时读取环境变量，因此测试环境变量必须在导入app之前设置
"""

import os
import tempfile

# 测试使用独立的工作目录，且不连接真实的Gemini和COS
os.environ.setdefault("WORKSPACE_DIR", tempfile.mkdtemp(prefix="storybook-tests-"))
os.environ.setdefault("ENABLE_MLFLOW", "false")
os.environ.setdefault("ILLUSTRATION_BATCH_DELAY", "0")
for _key in ("GEMINI_API_KEY", "GOOGLE_GENAI_API_KEY", "GOOGLE_API_KEY", "COS_SECRET_ID", "COS_SECRET_KEY", "COS_BUCKET"):
    os.environ[_key] = ""

import pytest

from app.core.storage.adapters.local_file import LocalFileStorage
from app.core.storage.fallback import FallbackStorage
from app.services.illustration.models import IllustrationSettings
from tests.utils.mock_utils import MockBuilder
from tests.utils.test_data_utils import TestDataGenerator


@pytest.fixture(scope="function")
def images_dir(tmp_path):
    """本地回退图片目录"""
    directory = tmp_path / "public" / "images"
    directory.mkdir(parents=True)
    return directory


@pytest.fixture(scope="function")
def local_storage(images_dir):
    """本地文件存储"""
    return LocalFileStorage(base_dir=images_dir, url_prefix="/images")


@pytest.fixture(scope="function")
def illustration_config():
    """插画流水线配置（批次间不等待）"""
    return IllustrationSettings(batch_delay=0)


@pytest.fixture(scope="function")
def png_bytes():
    """合法的PNG图片数据"""
    return TestDataGenerator.png_bytes()


@pytest.fixture(scope="function")
def image_provider(png_bytes):
    """返回一张内联图片的生成提供商"""
    return MockBuilder.create_mock_image_provider(MockBuilder.inline_response(png_bytes))


@pytest.fixture(scope="function")
def fallback_storage(local_storage):
    """只有本地存储的存储链"""
    return FallbackStorage(primary=None, fallback=local_storage)


# 测试标记配置
def pytest_configure(config):
    """配置pytest标记"""
    config.addinivalue_line("markers", "unit: 单元测试")
    config.addinivalue_line("markers", "interface: 接口测试")
    config.addinivalue_line("markers", "basic: 基础功能测试")
    config.addinivalue_line("markers", "logging: 日志相关测试")
    config.addinivalue_line("markers", "illustration: 插画流水线相关测试")
    config.addinivalue_line("markers", "storage: 存储相关测试")
    config.addinivalue_line("markers", "batch: 批量生成相关测试")
    config.addinivalue_line("markers", "maintenance: 维护任务相关测试")
