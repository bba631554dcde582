"""
图片处理异常定义
单张图片的处理失败，在批量处理中只影响当前条目
"""

from typing import Any, Dict, Optional


class ImageProcessingError(Exception):
    """
    图片处理基础异常

    Attributes:
        message: 错误消息
        code: 错误码
        details: 错误详情
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class FetchError(ImageProcessingError):
    """下载源图片失败（非2xx响应或网络错误）"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, code="FETCH_ERROR", details=details)
        self.status_code = status_code


class EmptyPayloadError(ImageProcessingError):
    """下载到的图片数据为空"""

    def __init__(self, message: str = "图像数据为空", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="EMPTY_PAYLOAD", details=details)


class UnsupportedInputError(ImageProcessingError):
    """图片数据无法解码（损坏或无法识别的格式）"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="UNSUPPORTED_INPUT", details=details)


class InvalidUploadError(ImageProcessingError):
    """用户上传的参考图不合规（为空、过大或类型不被接受）"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="INVALID_UPLOAD", details=details)


__all__ = [
    'ImageProcessingError',
    'FetchError',
    'EmptyPayloadError',
    'UnsupportedInputError',
    'InvalidUploadError',
]
