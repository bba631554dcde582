"""
参考图上传服务
处理老照片修复时用户上传的原图：校验、格式兼容转换、存储并签发访问URL
"""

import asyncio
from dataclasses import dataclass
from functools import partial
from typing import Optional

from chongyang.core.config import settings
from chongyang.core.image import (
    ImageNormalizer,
    InvalidUploadError,
    declared_extension,
)
from chongyang.core.log_utils import get_logger
from chongyang.core.storage import BaseStorage
from chongyang.utils.id_utils import generate_uuid, normalize_client_segment

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReferenceUpload:
    """参考图上传结果"""
    url: str
    key: str
    project_prefix: str
    original_size: int
    final_size: int
    format: str
    converted: bool


def make_project_prefix(prefix: str, client_id: Optional[str]) -> str:
    """{前缀}/{客户端标识数字或guest}/{uuid}"""
    return f"{prefix}/{normalize_client_segment(client_id or '')}/{generate_uuid()}"


class ReferenceImageService:
    """参考图上传服务"""

    def __init__(self, storage: BaseStorage, normalizer: Optional[ImageNormalizer] = None):
        self.storage = storage
        self.normalizer = normalizer or ImageNormalizer()

    def validate_upload(self, data: bytes, content_type: Optional[str], file_name: Optional[str]) -> None:
        """
        校验上传的文件

        Raises:
            InvalidUploadError: 文件为空、过大或类型不被接受
        """
        if not data:
            raise InvalidUploadError("上传的文件为空")

        if len(data) > settings.upload_max_size:
            raise InvalidUploadError(
                "图片大小不能超过{}MB".format(settings.upload_max_size // (1024 * 1024)),
                details={'size': len(data)}
            )

        extension = declared_extension(content_type, file_name)
        if extension not in settings.upload_accepted_extensions:
            raise InvalidUploadError(
                "请上传 JPG、PNG、WebP、HEIC 或 HEIF 格式的图片",
                details={'content_type': content_type, 'file_name': file_name}
            )

    async def upload_reference(
        self,
        data: bytes,
        content_type: Optional[str] = None,
        file_name: Optional[str] = None,
        client_id: Optional[str] = None,
        prefix: Optional[str] = None
    ) -> ReferenceUpload:
        """
        上传参考图

        Args:
            data: 文件数据
            content_type: 声明的MIME类型
            file_name: 原始文件名
            client_id: 客户端标识（如手机号），只保留数字作为目录
            prefix: 存储前缀，默认取配置的 upload_prefix

        Returns:
            ReferenceUpload: 上传结果

        Raises:
            InvalidUploadError: 文件不合规
            UnsupportedInputError: 图片无法解码
            StorageWriteError / SigningError: 存储失败
        """
        self.validate_upload(data, content_type, file_name)

        loop = asyncio.get_running_loop()
        normalized = await loop.run_in_executor(
            None,
            partial(self.normalizer.prepare_for_provider, data, content_type, file_name)
        )

        project_prefix = make_project_prefix(prefix or settings.upload_prefix, client_id)
        key = f"{project_prefix}/original.{normalized.extension}"

        await self.storage.put(
            key,
            normalized.data,
            content_type=normalized.mime_type,
            cache_control=settings.image_cache_control
        )
        url = await self.storage.signed_url(key, settings.image_signed_url_days)

        logger.info("参考图上传成功", extra={
            'key': key,
            'original_size': len(data),
            'final_size': normalized.size,
            'converted': normalized.converted
        })

        return ReferenceUpload(
            url=url,
            key=key,
            project_prefix=project_prefix,
            original_size=len(data),
            final_size=normalized.size,
            format=normalized.extension,
            converted=normalized.converted
        )
