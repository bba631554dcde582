"""
存储服务数据模型
定义存储操作中使用的所有数据结构
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class UploadResult:
    """
    上传结果

    Attributes:
        key: 存储键
        size: 文件大小（字节）
        mime_type: MIME类型
        bucket: 存储桶名称
        region: 区域
        etag: 文件ETag
        uploaded_at: 上传时间
    """
    key: str
    size: int
    mime_type: str
    bucket: Optional[str] = None
    region: Optional[str] = None
    etag: Optional[str] = None
    uploaded_at: Optional[datetime] = None


@dataclass(frozen=True)
class DeleteManyResult:
    """
    批量删除结果，按单个键的结果划分

    Attributes:
        deleted: 删除成功的存储键
        failed: 删除失败的存储键
    """
    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


__all__ = [
    'UploadResult',
    'DeleteManyResult',
]
