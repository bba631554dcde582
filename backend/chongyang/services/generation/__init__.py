"""
图片生成服务
"""

from chongyang.services.generation.models import GenerationOutcome
from chongyang.services.generation.prompts import (
    PHOTO_RESTORE_PROMPT,
    build_photo_restore_prompt,
    build_poem_image_prompt,
)
from chongyang.services.generation.service import ImageGenerationService
from chongyang.services.generation.sizes import (
    ResolutionTier,
    SizeResolution,
    list_supported_sizes,
    map_quality,
    resolve_size,
)

__all__ = [
    'ImageGenerationService',
    'GenerationOutcome',
    'ResolutionTier',
    'SizeResolution',
    'resolve_size',
    'map_quality',
    'list_supported_sizes',
    'PHOTO_RESTORE_PROMPT',
    'build_photo_restore_prompt',
    'build_poem_image_prompt',
]
