"""
应用配置管理模块
统一管理所有配置信息，包括环境变量和文件配置
"""

from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, field_validator

from app.utils.config_utils import get_workspace_path, parse_list_config, parse_json_config


class Settings(BaseSettings):
    """应用配置类 - 统一管理所有配置信息"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==================== 基础配置 ====================
    app_name: str = "Storybook Illustrator"
    app_version: str = "1.0.0"
    app_debug: bool = True
    app_env: str = "development"

    # ==================== API配置 ====================
    api_v1_str: str = "/api/v1"
    project_name: str = "Storybook Illustrator API"

    # ==================== Gemini配置 ====================
    # 兼容 GOOGLE_GENAI_API_KEY / GOOGLE_API_KEY 两种环境变量
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("gemini_api_key", "google_genai_api_key", "google_api_key"),
    )
    gemini_image_model: str = "gemini-2.5-flash-image-preview"
    gemini_base_url: Optional[str] = None
    gemini_generation_timeout: Optional[float] = None  # None表示不限制，沿用传输层默认值

    # ==================== COS存储配置 ====================
    cos_secret_id: str = ""
    cos_secret_key: str = ""
    cos_region: str = "ap-beijing"
    cos_bucket: str = ""
    cos_scheme: str = "https"

    cos_timeout: int = 30
    cos_max_retries: int = 3
    cos_retry_delay_base: int = 1

    cos_images_prefix: str = "story-images"
    cos_allowed_mime_types: str = "image/png,image/jpeg,image/gif,image/webp"
    cos_max_file_size: int = 5242880  # 5MB

    # ==================== 本地存储配置 ====================
    static_dir: str = "public"
    local_images_subdir: str = "images"
    local_images_url_prefix: str = "/images"
    image_cache_max_age: int = 31536000

    # ==================== 插画生成配置 ====================
    illustration_default_style: str = "realistic"
    illustration_default_batch_size: int = 3
    illustration_max_batch_size: int = 5
    illustration_batch_delay: float = 1.0
    illustration_consistency_default: bool = False
    illustration_fallback_url: Optional[str] = None
    illustration_fallback_timeout: float = 120.0

    # ==================== 图片清理配置 ====================
    image_retention_limit: int = 50

    # ==================== MLflow配置 ====================
    enable_mlflow: bool = False
    mlflow_tracking_uri: str = "http://localhost:5001"
    mlflow_experiment_name: str = "storybook-illustrator"

    # ==================== 日志配置 ====================
    workspace_dir: str = str(get_workspace_path())
    log_level: str = "INFO"
    log_file: str = "backend.log"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # ==================== 应用服务配置 ====================
    app_port: int = 8080
    app_host: str = "0.0.0.0"

    # ==================== CORS配置 ====================
    cors_origins: str = '["*"]'

    # ==================== 验证器 ====================
    @field_validator("cos_allowed_mime_types")
    @classmethod
    def split_allowed_mime_types(cls, value: str) -> List[str]:
        """将允许的MIME类型字符串转换为列表"""
        return parse_list_config(value)

    @field_validator("cors_origins")
    @classmethod
    def parse_cors_origins(cls, value: str) -> List[str]:
        """解析CORS origins配置"""
        return parse_json_config(value)

    @field_validator("illustration_default_style")
    @classmethod
    def normalize_default_style(cls, value: str) -> str:
        """默认风格统一为小写"""
        return (value or "realistic").strip().lower()

    # ==================== 计算属性 ====================
    @property
    def absolute_images_dir(self) -> str:
        """获取本地回退图片目录的绝对路径"""
        return str(Path(self.workspace_dir) / self.static_dir / self.local_images_subdir)

    @property
    def absolute_log_dir(self) -> str:
        """获取绝对日志目录路径"""
        return str(Path(self.workspace_dir) / "log")


def get_settings() -> Settings:
    """获取配置实例"""
    return Settings()


# 全局配置实例
settings = get_settings()
