"""
图片生成服务
调用生成服务、补齐不足的张数，再交给上传管线压缩存储
"""

import asyncio
import dataclasses
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from chongyang.core.config import settings
from chongyang.core.image import ResizeOptions
from chongyang.core.imggen import (
    BaseImageProvider,
    GenerationValidationError,
    ImageGenerationError,
    ProcessingFailedError,
    ProviderError,
)
from chongyang.core.log_messages import log_messages
from chongyang.core.log_utils import get_logger
from chongyang.schemas.image_generation import GenerationOptions, GenerationRequest
from chongyang.services.generation.models import GenerationOutcome
from chongyang.services.generation.sizes import list_supported_sizes, map_quality, resolve_size
from chongyang.services.image.pipeline import ImageUploadPipeline

logger = get_logger(__name__)

RequestLike = Union[GenerationRequest, Mapping[str, Any]]


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item.get("loc", ()))
        parts.append(f"{field}: {item.get('msg')}" if field else str(item.get("msg")))
    return "请求参数无效: " + "; ".join(parts)


class ImageGenerationService:
    """
    图片生成服务

    生成服务一次调用返回的张数可能少于请求数，不足部分逐张补充调用；
    生成的图片全部交给上传管线处理，只要有一张成功即视为成功。
    """

    def __init__(self, provider: BaseImageProvider, pipeline: ImageUploadPipeline):
        self.provider = provider
        self.pipeline = pipeline

    async def _pause(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    @staticmethod
    def validate_request(request: RequestLike) -> GenerationRequest:
        """
        校验生成请求

        Raises:
            GenerationValidationError: 参数不合法
        """
        if isinstance(request, GenerationRequest):
            return request
        try:
            return GenerationRequest.model_validate(dict(request))
        except ValidationError as e:
            raise GenerationValidationError(
                _format_validation_error(e),
                details={'errors': e.errors(include_url=False)}
            ) from e

    # ==================== 单次生成 ====================

    async def generate_image(
        self,
        request: RequestLike,
        resize: Optional[ResizeOptions] = None
    ) -> GenerationOutcome:
        """
        生成图片并上传存储

        领域错误不会抛出，而是返回 success=False 的结果，error_code 标明原因
        （VALIDATION_ERROR / PROVIDER_ERROR / PROCESSING_FAILED）。

        Args:
            request: 生成请求，GenerationRequest 或等价的字典
            resize: 可选的缩放指令，优先于尺寸推导

        Returns:
            GenerationOutcome: 生成结果
        """
        try:
            validated = self.validate_request(request)
            if resize is None and validated.resize is not None:
                resize = validated.resize.to_options()
            return await self._generate(validated, resize)
        except ImageGenerationError as e:
            logger.error(log_messages.OPERATION_FAILED, operation_name="图片生成",
                         extra={"error": e.message, "error_code": e.code})
            return GenerationOutcome.failure(e.message, e.code)

    async def _generate(self, request: GenerationRequest, resize: Optional[ResizeOptions]) -> GenerationOutcome:
        resolution = resolve_size(request.size, resize)
        compression_quality = map_quality(request.quality)

        call_kwargs: Dict[str, Any] = {
            'prompt': request.prompt,
            'size': resolution.tier.provider_size,
            'negative_prompt': request.negative_prompt,
            'image': request.image,
            'watermark': request.watermark,
            'seed': request.seed,
            'quality': request.quality,
            'stream': request.stream,
        }

        logger.info(log_messages.GENERATION_START, extra={
            'prompt_length': len(request.prompt),
            'size': request.size,
            'tier': resolution.tier.value,
            'num_images': request.num_images,
        })

        primary = await self.provider.generate_images(num_images=settings.ark_primary_num_images, **call_kwargs)
        if not primary.success:
            raise ProviderError(
                primary.error_message or "图片生成失败",
                status_code=primary.status_code,
                provider_code=primary.error_code
            )

        image_urls = list(primary.image_urls)
        if len(image_urls) < request.num_images:
            logger.info(log_messages.GENERATION_UNDERFILLED, requested=request.num_images, received=len(image_urls))
            image_urls.extend(await self._supplement(call_kwargs, request.num_images - len(image_urls)))

        results = await self.pipeline.process_batch(
            image_urls,
            project_id=request.project_id,
            quality=compression_quality,
            concurrency=settings.image_batch_concurrency,
            resize=resolution.resize
        )

        successful = [result for result in results if result.success]
        if not successful:
            raise ProcessingFailedError(details={
                'errors': [result.error for result in results]
            })

        logger.info(log_messages.GENERATION_DONE, extra={
            'generated': len(image_urls),
            'stored': len(successful),
        })

        return GenerationOutcome(
            success=True,
            images=successful,
            requested_count=request.num_images,
            generated_count=len(image_urls)
        )

    async def _supplement(self, call_kwargs: Dict[str, Any], missing: int) -> List[str]:
        """
        逐张补充调用，每次取返回的第一张

        补充调用不带 num_images；单次失败记录后跳过，调用之间间隔固定时长。
        """
        urls: List[str] = []
        for index in range(missing):
            attempt = index + 2
            result = await self.provider.generate_images(**call_kwargs)
            if result.success and result.image_urls:
                urls.append(result.image_urls[0])
            else:
                logger.warning(log_messages.GENERATION_SUPPLEMENTAL_FAILED, attempt=attempt,
                               extra={'error': result.error_message})

            if index < missing - 1:
                await self._pause(settings.ark_supplemental_delay)
        return urls

    # ==================== 批量生成 ====================

    async def generate_images_batch(
        self,
        prompts: List[str],
        options: Optional[Union[GenerationOptions, Mapping[str, Any]]] = None
    ) -> List[GenerationOutcome]:
        """
        按顺序逐个提示词生成，提示词之间间隔固定时长

        每个提示词的结果独立，单个失败不影响其余。
        """
        if isinstance(options, BaseModel):
            shared = options.model_dump(exclude_none=True)
        else:
            shared = dict(options or {})

        outcomes: List[GenerationOutcome] = []
        for index, prompt in enumerate(prompts):
            outcome = await self.generate_image({**shared, 'prompt': prompt})
            outcomes.append(dataclasses.replace(outcome, prompt=prompt))

            if index < len(prompts) - 1:
                await self._pause(settings.generation_batch_delay)

        logger.info("批量生成完成", extra={
            'total': len(prompts),
            'succeeded': sum(1 for outcome in outcomes if outcome.success)
        })
        return outcomes

    @staticmethod
    def list_supported_sizes() -> List[Dict[str, str]]:
        """支持的尺寸列表"""
        return list_supported_sizes()
