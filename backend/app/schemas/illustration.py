"""
插画生成相关的Pydantic数据模型
请求体字段使用camelCase，与前端保持一致
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.config import settings
from app.services.illustration.models import IllustrationStyle


class CamelModel(BaseModel):
    """camelCase别名的基础模型，同时接受蛇形命名"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _style_default() -> IllustrationStyle:
    return IllustrationStyle.parse(settings.illustration_default_style)


def _consistency_default() -> bool:
    return settings.illustration_consistency_default


# ============================================================================
# 请求模型
# ============================================================================

class IllustrateRequest(CamelModel):
    """单张插画请求"""
    prompt: str = Field(..., min_length=5, description="场景描述")
    character_description: Optional[str] = Field(None, description="角色外观描述")
    previous_image_url: Optional[str] = Field(None, description="上一张插画地址（编辑模式使用）")
    style: IllustrationStyle = Field(default_factory=_style_default, description="插画风格")
    consistency_mode: bool = Field(default_factory=_consistency_default, description="是否保持角色一致")
    edit_mode: bool = Field(default=False, description="是否为上一场景的编辑/延续")


class AdvancedIllustrateRequest(IllustrateRequest):
    """高级插画请求"""
    fusion_mode: bool = Field(default=False, description="是否启用图像融合")
    batch_generate: bool = Field(default=False, description="是否连续生成多页")
    page_count: int = Field(default=1, ge=1, le=5, description="连续生成的页数")


class BatchPageItem(CamelModel):
    """批量请求中的单页"""
    text: str = Field(..., description="页面正文")
    prompt: str = Field(..., description="页面场景描述")
    page_index: int = Field(..., ge=0, description="页面索引（从0开始）")


class BatchIllustrateRequest(CamelModel):
    """批量插画请求"""
    book_id: str = Field(..., description="绘本ID")
    pages: List[BatchPageItem] = Field(..., min_length=1, description="页面列表")
    character_description: Optional[str] = Field(None, description="角色外观描述")
    style: IllustrationStyle = Field(default_factory=_style_default, description="插画风格")
    consistency_mode: bool = Field(default_factory=_consistency_default, description="是否保持角色一致")
    fusion_mode: bool = Field(default=False, description="是否启用图像融合")
    batch_size: int = Field(default=3, ge=1, le=5, description="每批并发生成的页数")


# ============================================================================
# 响应模型
# ============================================================================

class CleanupResult(BaseModel):
    """本地图片清理结果"""
    deleted: int = Field(..., ge=0, description="删除数量")
    kept: int = Field(..., ge=0, description="保留数量")
