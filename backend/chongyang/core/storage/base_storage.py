"""
存储抽象基类
定义统一的对象存储接口，支持多种存储后端
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from chongyang.core.log_utils import get_logger
from chongyang.core.storage.exceptions import SigningError
from chongyang.core.storage.models import DeleteManyResult, UploadResult

logger = get_logger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


class BaseStorage(ABC):
    """存储抽象基类"""

    @abstractmethod
    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        cache_control: Optional[str] = None
    ) -> UploadResult:
        """
        写入文件，已存在则覆盖

        Args:
            key: 存储键
            data: 文件数据
            content_type: MIME类型
            cache_control: Cache-Control 头

        Returns:
            UploadResult: 上传结果

        Raises:
            StorageWriteError: 网络或鉴权失败时抛出，不在内部重试
        """
        ...

    @abstractmethod
    async def signed_url(
        self,
        key: str,
        expires_in_days: int = 30,
        transform: Optional[str] = None
    ) -> str:
        """
        生成限时读取URL

        Args:
            key: 存储键
            expires_in_days: 有效天数，URL有效期为 expires_in_days*86400 秒
            transform: 可选的服务端图片处理指令，原样透传

        Returns:
            str: 预签名URL

        Raises:
            SigningError: 存储键非法或凭证缺失时抛出
        """
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """
        检查文件是否存在，查询失败一律视为不存在

        Args:
            key: 存储键

        Returns:
            bool: 文件是否存在
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        删除文件，失败时返回 False 而不是抛出异常

        Args:
            key: 存储键

        Returns:
            bool: 删除是否成功
        """
        ...

    async def delete_many(self, keys: List[str]) -> DeleteManyResult:
        """
        逐个删除，单个失败不中断

        Args:
            keys: 存储键列表

        Returns:
            DeleteManyResult: 按结果划分的存储键
        """
        deleted: List[str] = []
        failed: List[str] = []

        for key in keys:
            if await self.delete(key):
                deleted.append(key)
            else:
                failed.append(key)

        return DeleteManyResult(deleted=deleted, failed=failed)

    async def signed_urls(self, keys: List[str], expires_in_days: int = 30) -> Dict[str, str]:
        """
        批量生成预签名URL，签名失败的键被跳过

        Args:
            keys: 存储键列表
            expires_in_days: 有效天数

        Returns:
            Dict[str, str]: 存储键到URL的映射
        """
        urls: Dict[str, str] = {}
        for key in keys:
            try:
                urls[key] = await self.signed_url(key, expires_in_days)
            except SigningError as e:
                logger.error("批量生成签名URL时跳过失败的存储键", extra={'key': key, 'error': str(e)})
        return urls

    @staticmethod
    def validate_key(key: str) -> None:
        """
        校验存储键格式

        Raises:
            SigningError: 存储键为空或以斜杠开头
        """
        if not key or not key.strip() or key.startswith("/"):
            raise SigningError("存储键格式非法: {!r}".format(key))


__all__ = ['BaseStorage', 'SECONDS_PER_DAY']
