"""
图片生成异常定义
"""

from typing import Any, Dict, Optional


class ImageGenerationError(Exception):
    """
    图片生成基础异常

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


class GenerationValidationError(ImageGenerationError):
    """请求参数不合法，在发起任何网络调用前抛出"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ProviderError(ImageGenerationError):
    """生成服务调用失败"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        provider_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, code="PROVIDER_ERROR", details=details)
        self.status_code = status_code
        self.provider_code = provider_code


class ProcessingFailedError(ImageGenerationError):
    """生成成功但所有图片的下载、压缩、上传都失败"""

    def __init__(self, message: str = "所有图像处理都失败了", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="PROCESSING_FAILED", details=details)


__all__ = [
    'ImageGenerationError',
    'GenerationValidationError',
    'ProviderError',
    'ProcessingFailedError',
]
