"""
腾讯云COS配置模块
从全局配置组装COS连接参数
"""

from typing import List

from pydantic import BaseModel, Field

from app.core.config import settings


class COSConfig(BaseModel):
    """COS配置数据类"""

    secret_id: str = Field(default="", description="腾讯云COS SecretId")
    secret_key: str = Field(default="", description="腾讯云COS SecretKey")
    region: str = Field(default="ap-beijing", description="COS地域")
    bucket: str = Field(default="", description="COS存储桶名称（含APPID后缀）")
    scheme: str = Field(default="https", description="连接协议")

    timeout: int = Field(default=30, description="连接超时时间（秒）")
    max_retries: int = Field(default=3, description="最大重试次数")
    retry_delay_base: int = Field(default=1, description="重试基础延迟（秒）")

    images_prefix: str = Field(default="story-images", description="插画存储前缀")
    allowed_mime_types: List[str] = Field(
        default_factory=lambda: ["image/png", "image/jpeg", "image/gif", "image/webp"],
        description="允许上传的MIME类型"
    )
    max_file_size: int = Field(default=5242880, description="单个文件大小上限（字节）")


def get_cos_config() -> COSConfig:
    """从全局配置获取COS配置"""
    return COSConfig(
        secret_id=settings.cos_secret_id,
        secret_key=settings.cos_secret_key,
        region=settings.cos_region,
        bucket=settings.cos_bucket,
        scheme=settings.cos_scheme,
        timeout=settings.cos_timeout,
        max_retries=settings.cos_max_retries,
        retry_delay_base=settings.cos_retry_delay_base,
        images_prefix=settings.cos_images_prefix,
        allowed_mime_types=settings.cos_allowed_mime_types,
        max_file_size=settings.cos_max_file_size,
    )


def validate_cos_config(config: COSConfig) -> bool:
    """验证COS配置完整性"""
    required_fields = ["secret_id", "secret_key", "bucket"]
    return all(getattr(config, field) for field in required_fields)


def get_cos_base_url(config: COSConfig) -> str:
    """构建存储桶的公开访问地址"""
    return f"{config.scheme}://{config.bucket}.cos.{config.region}.myqcloud.com"


def get_storage_path(config: COSConfig, filename: str) -> str:
    """生成插画在存储桶中的键"""
    if not config.images_prefix:
        return filename
    return f"{config.images_prefix.strip('/')}/{filename}"
