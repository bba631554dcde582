"""
图片处理API端点
对远程图片执行下载、压缩、上传，以及缩略图与元信息查询
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status

from chongyang.api.deps import get_pipeline
from chongyang.core.log_utils import get_logger
from chongyang.schemas.common import StandardResponse
from chongyang.schemas.image_generation import (
    ImageMetadataRequest,
    ProcessBatchRequest,
    ProcessImageRequest,
    ThumbnailRequest,
)
from chongyang.services.image import ImageProcessResult, ImageUploadPipeline

logger = get_logger(__name__)

router = APIRouter(tags=["图片处理"])


def _result_or_raise(result: ImageProcessResult) -> dict:
    if not result.success:
        status_code = (
            status.HTTP_502_BAD_GATEWAY
            if result.error_code in ("FETCH_ERROR", "EMPTY_PAYLOAD")
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        raise HTTPException(status_code=status_code, detail=result.error)
    return asdict(result)


@router.post(
    "/process",
    response_model=StandardResponse,
    summary="处理单张图片",
    description="下载远程图片，压缩为WebP并上传对象存储"
)
async def process_image(
    request: ProcessImageRequest,
    pipeline: ImageUploadPipeline = Depends(get_pipeline)
) -> StandardResponse:
    result = await pipeline.process_one(
        request.source_url,
        project_id=request.project_id,
        file_name=request.file_name,
        quality=request.quality,
        resize=request.resize.to_options() if request.resize else None
    )

    return StandardResponse(
        status="success",
        message="图片处理成功",
        data=_result_or_raise(result)
    )


@router.post(
    "/process/batch",
    response_model=StandardResponse,
    summary="批量处理图片",
    description="分批并发处理远程图片，单张失败不影响其余"
)
async def process_images_batch(
    request: ProcessBatchRequest,
    pipeline: ImageUploadPipeline = Depends(get_pipeline)
) -> StandardResponse:
    results = await pipeline.process_batch(
        request.urls,
        project_id=request.project_id,
        quality=request.quality,
        concurrency=request.concurrency,
        resize=request.resize.to_options() if request.resize else None
    )
    succeeded = sum(1 for result in results if result.success)

    return StandardResponse(
        status="success" if succeeded else "error",
        message=f"批量处理完成: 成功 {succeeded}/{len(results)}",
        data={
            "total": len(results),
            "succeeded": succeeded,
            "failed": len(results) - succeeded,
            "results": [asdict(result) for result in results]
        }
    )


@router.post(
    "/thumbnail",
    response_model=StandardResponse,
    summary="生成缩略图",
    description="居中裁剪生成缩略图并上传对象存储"
)
async def generate_thumbnail(
    request: ThumbnailRequest,
    pipeline: ImageUploadPipeline = Depends(get_pipeline)
) -> StandardResponse:
    result = await pipeline.thumbnail(
        request.source_url,
        width=request.width,
        height=request.height,
        project_id=request.project_id
    )

    return StandardResponse(
        status="success",
        message="缩略图生成成功",
        data=_result_or_raise(result)
    )


@router.post(
    "/metadata",
    response_model=StandardResponse,
    summary="图片元信息",
    description="读取已存储图片的尺寸、格式和大小"
)
async def get_image_metadata(
    request: ImageMetadataRequest,
    pipeline: ImageUploadPipeline = Depends(get_pipeline)
) -> StandardResponse:
    info = await pipeline.image_metadata(request.url)
    if info is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="无法读取图片信息")

    return StandardResponse(
        status="success",
        message="获取图片信息成功",
        data=asdict(info)
    )
