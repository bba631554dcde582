"""
图片生成API端点
薄路由：参数校验交给schema，生成逻辑交给 ImageGenerationService
"""

from fastapi import APIRouter, Depends

from chongyang.api.deps import get_generation_service, raise_for_outcome
from chongyang.core.log_utils import get_logger
from chongyang.schemas.common import StandardResponse
from chongyang.schemas.image_generation import BatchGenerationRequest, GenerationRequest
from chongyang.services.generation import ImageGenerationService, list_supported_sizes

logger = get_logger(__name__)

router = APIRouter(tags=["图片生成"])


@router.post(
    "/generate",
    response_model=StandardResponse,
    summary="生成图片",
    description="调用生成服务生成图片，压缩为WebP后上传对象存储，返回签名访问URL"
)
async def generate_image(
    request: GenerationRequest,
    service: ImageGenerationService = Depends(get_generation_service)
) -> StandardResponse:
    """
    生成图片

    功能流程：
    1. 解析尺寸档位与质量
    2. 调用生成服务，张数不足时补充调用
    3. 下载、压缩、上传生成的图片
    """
    outcome = await service.generate_image(request)
    raise_for_outcome(outcome)

    return StandardResponse(
        status="success",
        message=f"成功生成 {len(outcome.images)} 张图片",
        data=outcome.to_dict()
    )


@router.post(
    "/generate/batch",
    response_model=StandardResponse,
    summary="批量生成图片",
    description="按顺序逐个提示词生成，每个提示词的结果独立返回"
)
async def generate_images_batch(
    request: BatchGenerationRequest,
    service: ImageGenerationService = Depends(get_generation_service)
) -> StandardResponse:
    outcomes = await service.generate_images_batch(request.prompts, request.options)
    succeeded = sum(1 for outcome in outcomes if outcome.success)

    return StandardResponse(
        status="success" if succeeded else "error",
        message=f"批量生成完成: 成功 {succeeded}/{len(outcomes)}",
        data={
            "total": len(outcomes),
            "succeeded": succeeded,
            "results": [outcome.to_dict() for outcome in outcomes]
        }
    )


@router.get(
    "/sizes",
    response_model=StandardResponse,
    summary="支持的尺寸",
    description="返回生成服务支持的尺寸档位"
)
async def get_supported_sizes() -> StandardResponse:
    return StandardResponse(
        status="success",
        message="获取支持的尺寸成功",
        data=list_supported_sizes()
    )
