"""
插画生成接口测试
使用依赖覆盖注入mock生成提供商和本地存储，不访问Gemini和COS
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.api.v1.endpoints.illustration import get_illustration_handler
from app.core.image_generation import GenerationConfigError, GenerationRequestError
from app.core.storage.adapters.local_file import LocalFileStorage
from app.core.storage.fallback import FallbackStorage
from app.services.illustration.illustration_handler import IllustrationHandler
from app.services.illustration.illustration_service import IllustrationService
from app.services.illustration.models import IllustrationSettings
from main import app
from tests.utils.mock_utils import MockBuilder
from tests.utils.test_data_utils import TestDataGenerator, TestDataValidator

BASE = "/api/v1/illustrations"


class FailingPageProvider:
    """指定页码失败、其余页返回内联图片的生成提供商"""

    def __init__(self, png_bytes, failing_page_number):
        self.png_bytes = png_bytes
        self.failing_page_number = failing_page_number

    async def generate_content(self, prompt):
        if f"for page {self.failing_page_number}. " in prompt:
            raise GenerationRequestError("rate limited")
        return MockBuilder.inline_response(self.png_bytes)


@pytest.mark.interface
@pytest.mark.illustration
class TestIllustrationAPI:
    """插画接口测试类"""

    @pytest.fixture(autouse=True)
    def setup_client(self, images_dir, png_bytes):
        """为每个测试注入使用本地存储的插画处理器"""
        self.images_dir = images_dir
        self.png_bytes = png_bytes
        self.provider = MockBuilder.create_mock_image_provider(MockBuilder.inline_response(png_bytes))
        self.use_provider(self.provider)
        self.client = TestClient(app)
        yield
        app.dependency_overrides.clear()

    def use_provider(self, provider):
        storage = FallbackStorage(primary=None, fallback=LocalFileStorage(base_dir=self.images_dir, url_prefix="/images"))
        service = IllustrationService(provider, storage, IllustrationSettings(batch_delay=0))
        app.dependency_overrides[get_illustration_handler] = lambda: IllustrationHandler(service=service)

    def test_illustrate_success(self):
        """测试单张插画生成"""
        response = self.client.post(f"{BASE}/illustrate", json=TestDataGenerator.generate_illustrate_request(
            consistencyMode=True
        ))

        assert response.status_code == 200
        body = response.json()
        assert TestDataValidator.validate_standard_response(body)
        assert body["data"]["imageUrl"].startswith("/images/illustration_")
        assert body["data"]["backend"] == "local_filesystem"

        prompt = self.provider.generate_content.await_args.args[0]
        assert "colorful cartoon illustration" in prompt
        assert "consistent character appearance throughout the story" in prompt
        assert prompt.endswith("A child waves at a lighthouse")

        stored_name = body["data"]["imageUrl"].rsplit("/", 1)[1]
        assert (self.images_dir / stored_name).read_bytes() == self.png_bytes

    def test_consistency_mode_defaults_to_false(self):
        """测试未传consistencyMode时不追加一致性子句"""
        response = self.client.post(f"{BASE}/illustrate", json={"prompt": "A dragon sleeps under a tree"})

        assert response.status_code == 200
        prompt = self.provider.generate_content.await_args.args[0]
        assert "Character consistency" not in prompt
        assert "photorealistic" in prompt

    @pytest.mark.parametrize("payload", [
        {"prompt": "tiny"},
        {"prompt": "A dragon sleeps under a tree", "style": "oil"},
        {},
    ])
    def test_invalid_body(self, payload):
        """测试请求体不合法时返回400和字段错误"""
        response = self.client.post(f"{BASE}/illustrate", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid body"
        assert len(body["details"]) >= 1
        self.provider.generate_content.assert_not_awaited()

    def test_no_image_returns_502(self):
        """测试模型未返回图片"""
        self.use_provider(MockBuilder.create_mock_image_provider(MockBuilder.response([MockBuilder.part(text="sorry")])))

        response = self.client.post(f"{BASE}/illustrate", json={"prompt": "A dragon sleeps under a tree"})

        assert response.status_code == 502
        assert response.json()["detail"] == "No image returned from model"

    def test_generation_error_returns_500(self):
        self.use_provider(MockBuilder.create_mock_image_provider(side_effect=GenerationRequestError("quota")))

        response = self.client.post(f"{BASE}/illustrate", json={"prompt": "A dragon sleeps under a tree"})

        assert response.status_code == 500
        assert "quota" in response.json()["detail"]

    def test_missing_api_key_returns_500(self):
        """测试未配置API密钥时直接返回500"""
        app.dependency_overrides.clear()
        with patch(
            "app.services.illustration.illustration_handler.get_image_provider",
            side_effect=GenerationConfigError("Missing GOOGLE_GENAI_API_KEY")
        ):
            response = self.client.post(f"{BASE}/illustrate", json={"prompt": "A dragon sleeps under a tree"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Missing GOOGLE_GENAI_API_KEY"

    def test_advanced_single(self):
        """测试高级插画单张生成"""
        response = self.client.post(f"{BASE}/advanced-illustrate", json={
            "prompt": "Two friends build a sandcastle",
            "style": "sketch",
            "fusionMode": True,
            "characterDescription": "twin sisters with curly hair",
        })

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["batchGenerated"] is False
        assert data["imageUrl"].startswith("/images/advanced_illustration_")
        assert data["features"] == {
            "style": "sketch",
            "consistencyMode": "Disabled",
            "editMode": "Disabled",
            "fusionMode": "Enabled",
            "characterDescription": "Applied",
        }
        prompt = self.provider.generate_content.await_args.args[0]
        assert prompt.startswith("Create a high-quality children's book illustration with advanced features. ")
        assert "image fusion techniques" in prompt

    def test_advanced_paged(self):
        """测试高级插画连续生成多页"""
        response = self.client.post(f"{BASE}/advanced-illustrate", json={
            "prompt": "Two friends build a sandcastle",
            "batchGenerate": True,
            "pageCount": 3,
        })

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["batchGenerated"] is True
        assert data["count"] == 3
        assert all("_page" in url for url in data["imageUrls"])

        prompts = [call.args[0] for call in self.provider.generate_content.await_args_list]
        assert [prompt.endswith(f" This is page {index} of 3. ") for index, prompt in enumerate(prompts, 1)] == [True] * 3

    def test_advanced_page_count_limit(self):
        response = self.client.post(f"{BASE}/advanced-illustrate", json={
            "prompt": "Two friends build a sandcastle",
            "batchGenerate": True,
            "pageCount": 6,
        })

        assert response.status_code == 400

    def test_batch_partial_failure(self):
        """测试批量生成中单页失败"""
        self.use_provider(FailingPageProvider(self.png_bytes, failing_page_number=2))
        payload = TestDataGenerator.generate_batch_request(page_count=4, batch_size=2, character_description="a brave mouse")

        response = self.client.post(f"{BASE}/batch-illustrate", json=payload)

        assert response.status_code == 200
        data = response.json()["data"]
        assert TestDataValidator.validate_batch_response(data, total_pages=4)
        assert data["success"] is True
        assert data["bookId"] == "book-001"
        assert [item["pageIndex"] for item in data["results"]] == [0, 2, 3]
        assert data["failedResults"] == [{"pageIndex": 1, "error": "rate limited", "success": False}]
        assert data["summary"] == {"totalPages": 4, "successful": 3, "failed": 1, "successRate": "75%"}
        assert data["batchProcessing"] == {"totalBatches": 2, "batchSize": 2}

        first = data["results"][0]
        assert first["text"] == "第1页正文"
        assert first["imageUrl"].startswith("/images/batch_illustration_")
        assert first["features"] == {
            "style": "watercolor",
            "consistencyMode": "Disabled",
            "fusionMode": "Disabled",
            "characterDescription": "Applied",
        }

    def test_batch_duplicate_page_indexes(self):
        """测试客户端页面索引重复时结果仍按列表位置编号为0..N-1"""
        payload = TestDataGenerator.generate_batch_request(page_count=3, batch_size=3)
        for page, client_index in zip(payload["pages"], [0, 0, 7]):
            page["pageIndex"] = client_index

        response = self.client.post(f"{BASE}/batch-illustrate", json=payload)

        assert response.status_code == 200
        data = response.json()["data"]
        assert TestDataValidator.validate_batch_response(data, total_pages=3)
        assert [item["pageIndex"] for item in data["results"]] == [0, 1, 2]
        assert [item["text"] for item in data["results"]] == ["第1页正文", "第2页正文", "第3页正文"]
        assert sorted(item["imageUrl"].split("_")[3] for item in data["results"]) == ["page1", "page2", "page3"]

    @pytest.mark.parametrize("overrides", [
        {"batchSize": 6},
        {"batchSize": 0},
        {"pages": []},
    ])
    def test_batch_invalid_body(self, overrides):
        payload = TestDataGenerator.generate_batch_request()
        payload.update(overrides)

        response = self.client.post(f"{BASE}/batch-illustrate", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid body"
