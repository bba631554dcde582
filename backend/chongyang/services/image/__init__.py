"""
图片服务模块
"""

from chongyang.services.image.models import (
    ImageProcessResult,
    UploadBatchProgress,
    compute_compression_ratio,
)
from chongyang.services.image.pipeline import ImageUploadPipeline
from chongyang.services.image.reference_service import (
    ReferenceImageService,
    ReferenceUpload,
    make_project_prefix,
)

__all__ = [
    "ImageProcessResult",
    "UploadBatchProgress",
    "compute_compression_ratio",
    "ImageUploadPipeline",
    "ReferenceImageService",
    "ReferenceUpload",
    "make_project_prefix",
]
