"""
图片处理管线数据模型
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Union


@dataclass(frozen=True)
class ImageProcessResult:
    """
    单张图片的处理结果，创建后不再修改

    成功时携带存储信息，失败时只携带错误描述。

    Attributes:
        success: 是否处理成功
        url: 限时签名访问URL
        storage_key: 存储键
        original_size: 原始字节数
        compressed_size: 压缩后字节数
        compression_ratio: 压缩率（百分比）
        source_url: 源图片URL
        error: 错误描述
        error_code: 错误码
    """
    success: bool
    url: Optional[str] = None
    storage_key: Optional[str] = None
    original_size: Optional[int] = None
    compressed_size: Optional[int] = None
    compression_ratio: Optional[float] = None
    source_url: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def failure(cls, source_url: Optional[str], error: str, error_code: Optional[str] = None) -> "ImageProcessResult":
        return cls(success=False, source_url=source_url, error=error, error_code=error_code)

    def to_record(self) -> Dict[str, Any]:
        """交给持久化层的字段"""
        return {
            "storage_key": self.storage_key,
            "url": self.url,
            "original_size": self.original_size,
            "compressed_size": self.compressed_size,
            "compression_ratio": self.compression_ratio,
        }


@dataclass(frozen=True)
class UploadBatchProgress:
    """批处理进度，只在一次批处理调用期间存在"""
    completed: int
    total: int
    last_result: Optional[ImageProcessResult]


ProgressCallback = Callable[[int, int, Optional[ImageProcessResult]], Union[None, Awaitable[None]]]


def compute_compression_ratio(original_size: int, compressed_size: int) -> float:
    """压缩率（百分比），原始大小为0时返回0"""
    if original_size <= 0:
        return 0.0
    return (original_size - compressed_size) / original_size * 100
