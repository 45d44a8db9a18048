"""
插画流水线数据模型
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from app.core.config import settings
from app.core.storage.models import StorageBackend


class IllustrationStyle(str, Enum):
    """插画风格"""
    REALISTIC = "realistic"
    CARTOON = "cartoon"
    WATERCOLOR = "watercolor"
    SKETCH = "sketch"

    @classmethod
    def parse(cls, value: Any, default: Optional["IllustrationStyle"] = None) -> "IllustrationStyle":
        """解析风格值，未知或缺失时使用默认风格（realistic）"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return default or cls.REALISTIC


class PromptVariant(str, Enum):
    """提示词开头的变体，对应不同的生成入口"""
    STANDARD = "standard"
    ADVANCED = "advanced"
    BATCH = "batch"


class IllustrationStage(str, Enum):
    """单页插画的处理阶段"""
    PENDING = "pending"
    GENERATING = "generating"
    EXTRACTING = "extracting"
    PERSISTING = "persisting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (IllustrationStage.SUCCEEDED, IllustrationStage.FAILED)


@dataclass(frozen=True)
class IllustrationRequest:
    """
    单张插画请求

    Attributes:
        scene_prompt: 场景描述，原样追加在提示词末尾
        style: 插画风格
        character_description: 角色描述
        previous_image_url: 上一张图片地址（编辑模式使用）
        consistency_mode: 是否要求角色一致
        edit_mode: 是否为上一场景的编辑/延续
        fusion_mode: 是否启用图像融合
        variant: 提示词开头变体
        page_number: 页码（从1开始，批量路径使用）
    """
    scene_prompt: str
    style: IllustrationStyle = IllustrationStyle.REALISTIC
    character_description: Optional[str] = None
    previous_image_url: Optional[str] = None
    consistency_mode: bool = False
    edit_mode: bool = False
    fusion_mode: bool = False
    variant: PromptVariant = PromptVariant.STANDARD
    page_number: Optional[int] = None

    def __post_init__(self):
        if not self.scene_prompt or not self.scene_prompt.strip():
            raise ValueError("scene_prompt不能为空")
        if not isinstance(self.style, IllustrationStyle):
            object.__setattr__(self, "style", IllustrationStyle.parse(self.style))


@dataclass(frozen=True)
class IllustrationResult:
    """
    单次插画流水线的结果

    success为False时 error 说明原因，failed_stage 记录失败发生的阶段。
    """
    success: bool
    image_url: Optional[str] = None
    backend: Optional[StorageBackend] = None
    prompt: Optional[str] = None
    error: Optional[str] = None
    failed_stage: Optional[IllustrationStage] = None


@dataclass(frozen=True)
class BatchResult:
    """批量生成中单页的结果，创建后不再修改"""
    page_index: int
    success: bool
    image_url: Optional[str] = None
    error: Optional[str] = None
    prompt: Optional[str] = None
    text: Optional[str] = None


@dataclass(frozen=True)
class BatchPage:
    """批量请求中的一页"""
    page_index: int
    prompt: str
    text: str = ""


@dataclass(frozen=True)
class IllustrationSettings:
    """
    插画流水线配置

    在服务入口处由全局配置构建一次并显式传入，测试可按用例自行构造。
    """
    default_style: IllustrationStyle = IllustrationStyle.REALISTIC
    default_batch_size: int = 3
    max_batch_size: int = 5
    batch_delay: float = 1.0
    consistency_default: bool = False
    fallback_url: Optional[str] = None
    fallback_timeout: float = 120.0
    retention_limit: int = 50

    @classmethod
    def from_settings(cls) -> "IllustrationSettings":
        return cls(
            default_style=IllustrationStyle.parse(settings.illustration_default_style),
            default_batch_size=settings.illustration_default_batch_size,
            max_batch_size=settings.illustration_max_batch_size,
            batch_delay=settings.illustration_batch_delay,
            consistency_default=settings.illustration_consistency_default,
            fallback_url=settings.illustration_fallback_url,
            fallback_timeout=settings.illustration_fallback_timeout,
            retention_limit=settings.image_retention_limit,
        )
