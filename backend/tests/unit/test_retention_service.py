"""
本地插画清理单元测试
"""

import pytest

from app.services.illustration.retention_service import ImageRetentionService


def create_images(directory, count, start=1_700_000_000_000):
    """创建带不同时间戳的插画文件，返回按时间从旧到新排列的文件名"""
    names = []
    for offset in range(count):
        prefix = ["illustration", "batch_illustration", "advanced_illustration"][offset % 3]
        name = f"{prefix}_{start + offset * 1000}_abc{offset:03d}.png"
        (directory / name).write_bytes(b"png")
        names.append(name)
    return names


@pytest.mark.unit
@pytest.mark.maintenance
class TestImageRetentionService:
    """ImageRetentionService 单元测试类"""

    @pytest.mark.asyncio
    async def test_keeps_most_recent(self, images_dir):
        """测试60张图片保留最新50张，删除最旧10张"""
        names = create_images(images_dir, 60)
        service = ImageRetentionService(images_dir=images_dir, retention_limit=50)

        result = await service.cleanup()

        assert result == {"deleted": 10, "kept": 50}
        remaining = {path.name for path in images_dir.iterdir()}
        assert remaining == set(names[10:])

    @pytest.mark.asyncio
    async def test_below_limit(self, images_dir):
        """测试数量未超过上限时不删除"""
        create_images(images_dir, 5)

        result = await ImageRetentionService(images_dir=images_dir, retention_limit=50).cleanup()

        assert result == {"deleted": 0, "kept": 5}

    @pytest.mark.asyncio
    async def test_sorts_by_embedded_timestamp(self, images_dir):
        """测试按文件名中的时间戳而非文件名排序"""
        (images_dir / "illustration_900_zzzzzz.png").write_bytes(b"old")
        (images_dir / "batch_illustration_1000_page1_aaaaaa.png").write_bytes(b"new")

        result = await ImageRetentionService(images_dir=images_dir, retention_limit=1).cleanup()

        assert result == {"deleted": 1, "kept": 1}
        assert [path.name for path in images_dir.iterdir()] == ["batch_illustration_1000_page1_aaaaaa.png"]

    @pytest.mark.asyncio
    async def test_ignores_unrelated_files(self, images_dir):
        """测试不符合命名规则的文件不参与清理"""
        create_images(images_dir, 3)
        (images_dir / "README.txt").write_text("keep me")
        (images_dir / "nested").mkdir()

        result = await ImageRetentionService(images_dir=images_dir, retention_limit=1).cleanup()

        assert result == {"deleted": 2, "kept": 1}
        assert (images_dir / "README.txt").exists()
        assert (images_dir / "nested").is_dir()

    @pytest.mark.asyncio
    async def test_only_generated_png_files_swept(self, images_dir):
        """测试非PNG或其他前缀的同名格式文件不会被删除"""
        create_images(images_dir, 2)
        foreign = [
            "illustration_1600000000000_abcdef.jpg",
            "cover_illustration_1600000000000_abcdef.png",
            "illustration_1600000000000_abcdef.png.bak",
        ]
        for name in foreign:
            (images_dir / name).write_bytes(b"other")

        result = await ImageRetentionService(images_dir=images_dir, retention_limit=1).cleanup()

        assert result == {"deleted": 1, "kept": 1}
        assert all((images_dir / name).exists() for name in foreign)

    @pytest.mark.asyncio
    async def test_missing_directory(self, tmp_path):
        """测试目录不存在时返回0"""
        result = await ImageRetentionService(images_dir=tmp_path / "missing").cleanup()

        assert result == {"deleted": 0, "kept": 0}
