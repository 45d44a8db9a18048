"""
本地文件存储单元测试
"""

import pytest

from app.core.storage.adapters.local_file import LocalFileStorage
from app.core.storage.exceptions import DeleteError, UploadError
from app.core.storage.models import StorageBackend


@pytest.mark.unit
@pytest.mark.storage
class TestLocalFileStorage:
    """LocalFileStorage 单元测试类"""

    @pytest.mark.asyncio
    async def test_upload_creates_directory(self, tmp_path, png_bytes):
        """测试目录不存在时自动创建"""
        base_dir = tmp_path / "public" / "images"
        storage = LocalFileStorage(base_dir=base_dir, url_prefix="/images")

        result = await storage.upload(png_bytes, "illustration_1_abcdef.png", "image/png")

        assert (base_dir / "illustration_1_abcdef.png").read_bytes() == png_bytes
        assert result.url == "/images/illustration_1_abcdef.png"
        assert result.backend == StorageBackend.LOCAL_FILESYSTEM
        assert result.size == len(png_bytes)

    @pytest.mark.asyncio
    async def test_upload_rejects_traversal(self, local_storage, png_bytes):
        """测试拒绝写到目录之外"""
        with pytest.raises(UploadError):
            await local_storage.upload(png_bytes, "../escape.png", "image/png")

    @pytest.mark.asyncio
    async def test_upload_rejects_empty(self, local_storage):
        with pytest.raises(UploadError):
            await local_storage.upload(b"", "empty.png", "image/png")

    @pytest.mark.asyncio
    async def test_exists_and_delete(self, local_storage, png_bytes):
        """测试存在检查和删除"""
        await local_storage.upload(png_bytes, "a.png", "image/png")

        assert await local_storage.exists("a.png") is True
        assert await local_storage.delete("a.png") is True
        assert await local_storage.exists("a.png") is False
        assert await local_storage.delete("a.png") is False

    @pytest.mark.asyncio
    async def test_delete_rejects_traversal(self, local_storage):
        with pytest.raises(DeleteError):
            await local_storage.delete("../../etc/passwd")

    def test_public_url_prefix(self, images_dir):
        """测试URL前缀末尾的斜杠被规范化"""
        storage = LocalFileStorage(base_dir=images_dir, url_prefix="/static/images/")
        assert storage.get_public_url("x.png") == "/static/images/x.png"
