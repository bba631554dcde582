"""
重阳节活动API端点
老照片修复与诗词配图
"""

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from chongyang.api.deps import get_generation_service, get_reference_service, raise_for_outcome
from chongyang.core.config import settings
from chongyang.core.image import ImageProcessingError
from chongyang.core.log_utils import get_logger
from chongyang.core.storage import StorageError
from chongyang.schemas.common import StandardResponse
from chongyang.schemas.image_generation import PoemImageRequest
from chongyang.services.generation import (
    ImageGenerationService,
    build_photo_restore_prompt,
    build_poem_image_prompt,
)
from chongyang.services.image import ReferenceImageService, ReferenceUpload, make_project_prefix

logger = get_logger(__name__)

router = APIRouter(tags=["重阳节活动"])

FESTIVAL_SIZE = "2K"
FESTIVAL_QUALITY = "hd"


async def _upload(
    file: UploadFile,
    client_id: Optional[str],
    service: ReferenceImageService
) -> ReferenceUpload:
    """上传参考图，把领域异常转换为HTTP错误"""
    data = await file.read()
    try:
        return await service.upload_reference(
            data,
            content_type=file.content_type,
            file_name=file.filename,
            client_id=client_id
        )
    except ImageProcessingError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except StorageError as e:
        logger.error("参考图存储失败", exception=e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)


@router.post(
    "/upload",
    response_model=StandardResponse,
    summary="上传参考图",
    description="上传老照片，必要时转换为生成服务兼容的格式"
)
async def upload_reference_image(
    file: UploadFile = File(..., description="要上传的图片文件"),
    client_id: Optional[str] = Form(None, description="客户端标识（如手机号）"),
    service: ReferenceImageService = Depends(get_reference_service)
) -> StandardResponse:
    upload = await _upload(file, client_id, service)

    return StandardResponse(
        status="success",
        message="上传成功",
        data=asdict(upload)
    )


@router.post(
    "/photo-restore",
    response_model=StandardResponse,
    summary="老照片修复",
    description="上传老照片并以其为参考图生成修复后的图片"
)
async def restore_photo(
    file: UploadFile = File(..., description="需要修复的照片"),
    client_id: Optional[str] = Form(None, description="客户端标识（如手机号）"),
    prompt: Optional[str] = Form(None, description="自定义修复提示词"),
    reference_service: ReferenceImageService = Depends(get_reference_service),
    generation_service: ImageGenerationService = Depends(get_generation_service)
) -> StandardResponse:
    """
    老照片修复

    功能流程：
    1. 校验并上传原图
    2. 以原图签名URL作为参考图调用生成服务
    3. 返回原图与修复图URL
    """
    upload = await _upload(file, client_id, reference_service)

    outcome = await generation_service.generate_image({
        'prompt': build_photo_restore_prompt(prompt),
        'image': upload.url,
        'project_id': upload.project_prefix,
        'size': FESTIVAL_SIZE,
        'quality': FESTIVAL_QUALITY,
    })
    raise_for_outcome(outcome)

    return StandardResponse(
        status="success",
        message="老照片修复成功",
        data={
            "original_url": upload.url,
            "restored_url": outcome.urls[0],
            "gallery": outcome.urls,
            "images": outcome.to_dict()["images"],
        }
    )


@router.post(
    "/poem-image",
    response_model=StandardResponse,
    summary="诗词配图",
    description="根据诗词关键词生成重阳节主题配图"
)
async def generate_poem_image(
    request: PoemImageRequest,
    service: ImageGenerationService = Depends(get_generation_service)
) -> StandardResponse:
    prompt = build_poem_image_prompt(request.keywords, request.title, request.content)

    outcome = await service.generate_image({
        'prompt': prompt,
        'project_id': make_project_prefix(settings.poem_prefix, request.client_id),
        'size': request.size or FESTIVAL_SIZE,
        'quality': FESTIVAL_QUALITY,
    })
    raise_for_outcome(outcome)

    return StandardResponse(
        status="success",
        message="诗词配图生成成功",
        data={
            "image_url": outcome.urls[0],
            "prompt": prompt,
            "gallery": outcome.urls,
            "images": outcome.to_dict()["images"],
        }
    )
