"""
API依赖注入
服务实例在应用启动时创建并挂在 app.state 上，这里按需取出
"""

from fastapi import HTTPException, Request, status

from chongyang.services.generation import GenerationOutcome, ImageGenerationService
from chongyang.services.image import ImageUploadPipeline, ReferenceImageService

# 生成失败的错误码 -> HTTP状态码
_OUTCOME_STATUS = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "PROVIDER_ERROR": status.HTTP_502_BAD_GATEWAY,
}


def _require(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="对象存储未配置，图片服务不可用"
        )
    return service


def get_pipeline(request: Request) -> ImageUploadPipeline:
    return _require(request, "pipeline")


def get_reference_service(request: Request) -> ReferenceImageService:
    return _require(request, "reference_service")


def get_generation_service(request: Request) -> ImageGenerationService:
    return _require(request, "generation_service")


def raise_for_outcome(outcome: GenerationOutcome) -> None:
    """生成失败时抛出对应状态码的 HTTPException"""
    if outcome.success:
        return
    raise HTTPException(
        status_code=_OUTCOME_STATUS.get(outcome.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=outcome.error
    )
