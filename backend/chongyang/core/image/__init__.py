"""
图片处理模块
格式识别、重编码、缩放与元信息读取
"""

from chongyang.core.image.exceptions import (
    EmptyPayloadError,
    FetchError,
    ImageProcessingError,
    InvalidUploadError,
    UnsupportedInputError,
)
from chongyang.core.image.models import ImageInfo, NormalizedImage, ResizeFit, ResizeOptions
from chongyang.core.image.normalizer import (
    ACCEPTED_MIME_TYPES,
    ImageNormalizer,
    declared_extension,
    parse_size_directive,
)

__all__ = [
    'ImageNormalizer',
    'parse_size_directive',
    'declared_extension',
    'ACCEPTED_MIME_TYPES',
    'ResizeOptions',
    'ResizeFit',
    'ImageInfo',
    'NormalizedImage',
    'ImageProcessingError',
    'FetchError',
    'EmptyPayloadError',
    'UnsupportedInputError',
    'InvalidUploadError',
]
