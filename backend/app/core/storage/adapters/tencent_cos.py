"""
腾讯云COS存储适配器
实现BaseStorage接口，作为插画的主存储（公开读存储桶）
"""

import asyncio
from datetime import datetime
from typing import Any, Dict, Optional

from app.core.cos import COSConfig, get_cos_base_url, get_cos_config, get_storage_path, validate_cos_config
from app.core.log_utils import get_logger
from app.core.storage.base_storage import BaseStorage
from app.core.storage.exceptions import (
    ClientError,
    ConfigurationError,
    DeleteError,
    StorageError,
    UploadError,
)
from app.core.storage.models import StorageBackend, UploadResult

logger = get_logger(__name__)


class TencentCosAdapter(BaseStorage):
    """
    腾讯云COS存储适配器

    使用腾讯云COS SDK提供对象存储服务，支持：
    - 首次使用时检查并创建公开读存储桶
    - 上传前校验MIME类型与文件大小
    - 带线性退避的上传重试
    """

    ADAPTER_NAME: str = "tencent_cos"
    BACKEND = StorageBackend.BLOB_STORAGE

    def __init__(self, config: Optional[COSConfig] = None, client: Any = None) -> None:
        """
        初始化COS存储客户端

        Args:
            config: COS配置，默认从全局配置读取
            client: 已创建的COS客户端（测试时注入）

        Raises:
            ConfigurationError: 配置不完整时抛出
        """
        self.config = config or get_cos_config()

        if not validate_cos_config(self.config):
            raise ConfigurationError("腾讯云COS配置不完整，请检查环境变量")

        self._client = client if client is not None else self._create_client()
        self._bucket_ready = False
        self._bucket_lock = asyncio.Lock()

    def _create_client(self):
        """
        创建COS客户端

        Raises:
            StorageError: SDK未安装时抛出
        """
        try:
            from qcloud_cos import CosConfig, CosS3Client
        except ImportError as e:
            logger.warning("腾讯云COS SDK未安装")
            raise StorageError(
                "腾讯云COS SDK未安装，请运行: pip install cos-python-sdk-v5",
                code="SDK_NOT_INSTALLED"
            ) from e

        cos_config = CosConfig(
            Region=self.config.region,
            SecretId=self.config.secret_id,
            SecretKey=self.config.secret_key,
            Scheme=self.config.scheme,
            Timeout=self.config.timeout
        )
        return CosS3Client(cos_config)

    def _object_key(self, key: str) -> str:
        return get_storage_path(self.config, key)

    async def ensure_bucket(self) -> None:
        """
        确保存储桶存在，不存在则以公开读权限创建

        Raises:
            ClientError: 列举或创建存储桶失败时抛出
        """
        if self._bucket_ready:
            return

        async with self._bucket_lock:
            if self._bucket_ready:
                return

            try:
                response = await self._run_in_executor(self._client.list_buckets)
            except Exception as e:
                logger.error("列举COS存储桶失败", exception=e, bucket=self.config.bucket)
                raise ClientError("列举存储桶失败: {}".format(str(e))) from e

            buckets = ((response or {}).get('Buckets') or {}).get('Bucket') or []
            if isinstance(buckets, dict):
                buckets = [buckets]
            bucket_names = {bucket.get('Name') for bucket in buckets}

            if self.config.bucket not in bucket_names:
                logger.info("存储桶不存在，开始创建", bucket=self.config.bucket)
                try:
                    await self._run_in_executor(
                        self._client.create_bucket,
                        Bucket=self.config.bucket,
                        ACL='public-read'
                    )
                except Exception as e:
                    logger.error("创建COS存储桶失败", exception=e, bucket=self.config.bucket)
                    raise ClientError("创建存储桶失败: {}".format(str(e))) from e
                logger.info("存储桶创建成功", bucket=self.config.bucket)

            self._bucket_ready = True

    def _validate_upload(self, data: bytes, mime_type: str) -> None:
        if not data:
            raise UploadError("上传内容为空")
        if mime_type not in self.config.allowed_mime_types:
            raise UploadError(
                "不允许的文件类型: {}".format(mime_type),
                details={'allowed': self.config.allowed_mime_types}
            )
        if len(data) > self.config.max_file_size:
            raise UploadError(
                "文件超过大小限制: {} > {}".format(len(data), self.config.max_file_size)
            )

    async def upload(
        self,
        data: bytes,
        key: str,
        mime_type: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> UploadResult:
        """
        上传文件到COS

        Raises:
            UploadError: 校验或上传失败时抛出
            ClientError: 存储桶不可用时抛出
        """
        self._validate_upload(data, mime_type)
        await self.ensure_bucket()

        object_key = self._object_key(key)
        upload_params = {
            'Bucket': self.config.bucket,
            'Key': object_key,
            'Body': data,
            'ContentType': mime_type
        }
        if metadata:
            upload_params['Metadata'] = metadata

        max_retries = self.config.max_retries
        response: Dict[str, Any] = {}

        for attempt in range(max_retries + 1):
            try:
                response = await self._run_in_executor(self._client.put_object, **upload_params) or {}
                break
            except Exception as e:
                if attempt < max_retries:
                    await asyncio.sleep(self.config.retry_delay_base * (attempt + 1))
                    continue
                logger.error(
                    "COS上传失败，重试{retries}次后仍然失败",
                    retries=max_retries,
                    key=object_key,
                    error=str(e)
                )
                raise UploadError("上传文件失败: {}".format(str(e))) from e

        return UploadResult(
            key=object_key,
            url=self.get_public_url(key),
            size=len(data),
            mime_type=mime_type,
            backend=self.BACKEND,
            bucket=self.config.bucket,
            region=self.config.region,
            etag=str(response.get('ETag', '')).strip('"'),
            uploaded_at=datetime.now()
        )

    async def delete(self, key: str) -> bool:
        """从COS删除文件"""
        object_key = self._object_key(key)
        try:
            await self._run_in_executor(
                self._client.delete_object,
                Bucket=self.config.bucket,
                Key=object_key
            )
            logger.info("COS文件删除成功", key=object_key)
            return True
        except Exception as e:
            logger.error("COS删除失败", key=object_key, error=str(e))
            raise DeleteError("删除文件失败: {}".format(str(e))) from e

    async def exists(self, key: str) -> bool:
        """检查文件是否存在"""
        try:
            await self._run_in_executor(
                self._client.head_object,
                Bucket=self.config.bucket,
                Key=self._object_key(key)
            )
            return True
        except Exception:
            return False

    def get_public_url(self, key: str) -> str:
        """公开读存储桶的直接访问URL"""
        return "{base}/{key}".format(base=get_cos_base_url(self.config), key=self._object_key(key))


__all__ = ['TencentCosAdapter']
