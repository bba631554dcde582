"""
图片生成模块
提供统一的图片生成接口和提供商实现
"""

from chongyang.core.imggen.base import BaseImageProvider
from chongyang.core.imggen.config import ImageModelConfig
from chongyang.core.imggen.exceptions import (
    GenerationValidationError,
    ImageGenerationError,
    ProcessingFailedError,
    ProviderError,
)
from chongyang.core.imggen.models import ImageGenerationResult
from chongyang.core.imggen.providers.volcengine_ark import VolcengineArkProvider

__all__ = [
    "BaseImageProvider",
    "ImageModelConfig",
    "ImageGenerationResult",
    "VolcengineArkProvider",
    "ImageGenerationError",
    "GenerationValidationError",
    "ProviderError",
    "ProcessingFailedError",
]
