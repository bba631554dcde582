"""
腾讯云COS存储适配器
同步SDK调用放到线程池执行，SDK异常转换为存储异常
"""

import asyncio
from datetime import datetime
from functools import partial
from typing import Any, Callable, Optional, TypeVar

from qcloud_cos import CosConfig, CosS3Client
from qcloud_cos.cos_exception import CosClientError, CosServiceError

from chongyang.core.config.cos_config import COSConfig, get_cos_config, validate_cos_config
from chongyang.core.log_utils import get_logger
from chongyang.core.storage.base_storage import SECONDS_PER_DAY, BaseStorage
from chongyang.core.storage.exceptions import (
    ConfigurationError,
    SigningError,
    StorageWriteError,
)
from chongyang.core.storage.models import UploadResult

logger = get_logger(__name__)

T = TypeVar('T')

# SDK 抛出的预期异常
COS_ERRORS = (CosClientError, CosServiceError)


class TencentCosAdapter(BaseStorage):
    """
    基于 cos-python-sdk-v5 的对象存储适配器

    写入不做内部重试；签名URL可附带数据万象图片处理指令。
    """

    ADAPTER_NAME: str = "tencent_cos"

    def __init__(self, config: Optional[COSConfig] = None, client: Optional[Any] = None) -> None:
        """
        Args:
            config: COS配置，不传时从全局配置读取
            client: 预先构建的SDK客户端，测试时注入替身

        Raises:
            ConfigurationError: 密钥或存储桶缺失
        """
        self.config = config or get_cos_config()

        if not validate_cos_config(self.config):
            raise ConfigurationError("COS密钥或存储桶未配置")

        self._client = client or self._create_client()

    def _create_client(self) -> CosS3Client:
        """创建COS客户端"""
        cos_config = CosConfig(
            Region=self.config.region,
            SecretId=self.config.secret_id,
            SecretKey=self.config.secret_key,
            Scheme=self.config.scheme,
            Timeout=self.config.timeout
        )
        return CosS3Client(cos_config)

    async def _run_in_executor(self, func: Callable[..., T], **kwargs) -> T:
        """SDK是同步的，放到默认线程池里执行"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, **kwargs))

    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        cache_control: Optional[str] = None
    ) -> UploadResult:
        """
        上传文件到COS

        Args:
            key: 存储键
            data: 文件数据
            content_type: MIME类型
            cache_control: Cache-Control 头

        Returns:
            UploadResult: 上传结果

        Raises:
            StorageWriteError: 上传失败时抛出
        """
        upload_params = {
            'Bucket': self.config.bucket,
            'Key': key,
            'Body': data,
            'ContentType': content_type
        }
        if cache_control:
            upload_params['CacheControl'] = cache_control

        try:
            response = await self._run_in_executor(self._client.put_object, **upload_params)
        except COS_ERRORS as e:
            logger.error("COS上传失败", extra={'key': key, 'error': str(e)})
            raise StorageWriteError("上传文件失败: {}".format(str(e)), details={'key': key}) from e

        etag = (response or {}).get('ETag', '').strip('"')

        logger.info("COS上传成功", extra={'key': key, 'size': len(data), 'content_type': content_type})

        return UploadResult(
            key=key,
            size=len(data),
            mime_type=content_type,
            bucket=self.config.bucket,
            region=self.config.region,
            etag=etag,
            uploaded_at=datetime.now()
        )

    async def signed_url(
        self,
        key: str,
        expires_in_days: int = 30,
        transform: Optional[str] = None
    ) -> str:
        """
        生成预签名访问URL

        Args:
            key: 存储键
            expires_in_days: 有效天数
            transform: 数据万象处理指令，如 "imageMogr2/format/webp/quality/75"

        Returns:
            str: 预签名URL

        Raises:
            SigningError: 生成URL失败时抛出
        """
        self.validate_key(key)
        expires = expires_in_days * SECONDS_PER_DAY

        # 处理指令作为无值查询参数参与签名
        params = {transform: ''} if transform else {}

        try:
            url = await self._run_in_executor(
                self._client.get_presigned_url,
                Method='GET',
                Bucket=self.config.bucket,
                Key=key,
                Expired=expires,
                Params=params
            )
        except COS_ERRORS as e:
            logger.error(
                "COS生成预签名URL失败",
                extra={'key': key, 'expires': expires, 'error': str(e)}
            )
            raise SigningError("生成图像访问链接失败: {}".format(str(e)), details={'key': key}) from e

        logger.debug("成功生成COS预签名URL", extra={'key': key[:50], 'expires': expires})
        return url

    async def exists(self, key: str) -> bool:
        """HEAD 请求失败（包括对象不存在）一律返回 False"""
        try:
            await self._run_in_executor(
                self._client.head_object,
                Bucket=self.config.bucket,
                Key=key
            )
            return True
        except COS_ERRORS:
            return False

    async def delete(self, key: str) -> bool:
        """删除失败记录日志并返回 False"""
        try:
            await self._run_in_executor(
                self._client.delete_object,
                Bucket=self.config.bucket,
                Key=key
            )
        except COS_ERRORS as e:
            logger.error("COS删除失败", extra={'key': key, 'error': str(e)})
            return False

        logger.info("COS文件删除成功", extra={'key': key})
        return True


__all__ = ['TencentCosAdapter']
