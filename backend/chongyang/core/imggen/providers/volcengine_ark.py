"""
火山引擎方舟图片生成提供商
调用方舟 Seedream 文生图/图生图 HTTP API
"""

import time
from typing import Any, Dict, List, Optional, Union

import httpx

from chongyang.core.imggen.base import BaseImageProvider
from chongyang.core.imggen.config import ImageModelConfig
from chongyang.core.imggen.models import ImageGenerationResult
from chongyang.core.log_utils import get_logger

logger = get_logger(__name__)


class VolcengineArkProvider(BaseImageProvider):
    """火山引擎方舟图片生成提供商"""

    GENERATIONS_PATH = "/images/generations"

    def __init__(self, model_config: ImageModelConfig, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__(model_config)
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def endpoint(self) -> str:
        return f"{self.model_config.base_url}{self.GENERATIONS_PATH}"

    def _get_client(self) -> httpx.AsyncClient:
        """确保客户端已初始化"""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.model_config.timeout))
        return self._client

    async def close(self) -> None:
        """关闭自行创建的客户端"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def build_request_body(
        self,
        prompt: str,
        size: str,
        num_images: Optional[int] = None,
        negative_prompt: Optional[str] = None,
        image: Optional[Union[str, List[str]]] = None,
        watermark: bool = False,
        seed: Optional[int] = None,
        quality: Optional[Union[int, str]] = None,
        stream: bool = False
    ) -> Dict[str, Any]:
        """构建请求体，未设置的可选参数不出现在请求中"""
        body: Dict[str, Any] = {
            'model': self.model_config.name,
            'prompt': prompt,
            'size': size,
            # 由服务端决定单次调用是否返回多张
            'sequential_image_generation': 'auto',
            'stream': stream,
            'response_format': 'url',
            'watermark': watermark,
        }

        if num_images is not None:
            body['num_images'] = num_images
        if negative_prompt:
            body['negative_prompt'] = negative_prompt
        if image:
            body['image'] = image
        if seed is not None:
            body['seed'] = seed
        if quality is not None:
            body['quality'] = quality

        return body

    async def generate_images(
        self,
        prompt: str,
        size: str,
        num_images: Optional[int] = None,
        negative_prompt: Optional[str] = None,
        image: Optional[Union[str, List[str]]] = None,
        watermark: bool = False,
        seed: Optional[int] = None,
        quality: Optional[Union[int, str]] = None,
        stream: bool = False
    ) -> ImageGenerationResult:
        """调用方舟图片生成接口"""
        if not self.validate_config():
            return self._create_error_result("火山引擎方舟API密钥未配置", error_code="CONFIG_ERROR")

        body = self.build_request_body(
            prompt=prompt,
            size=size,
            num_images=num_images,
            negative_prompt=negative_prompt,
            image=image,
            watermark=watermark,
            seed=seed,
            quality=quality,
            stream=stream
        )

        logger.info("调用火山引擎方舟图片生成", extra={
            "model": body['model'],
            "prompt_length": len(prompt),
            "size": size,
            "num_images": num_images,
            "has_image": bool(image),
            "has_negative_prompt": bool(negative_prompt)
        })

        try:
            response = await self._get_client().post(
                self.endpoint,
                json=body,
                headers={'Authorization': f"Bearer {self.model_config.api_key}"}
            )
        except httpx.HTTPError as e:
            logger.error("火山引擎方舟API请求异常", extra={"error": str(e)})
            return self._create_error_result(f"API 请求异常: {str(e)}")

        if response.is_error:
            return self._handle_error_response(response)

        try:
            payload = response.json()
        except ValueError:
            logger.error("火山引擎方舟API返回非JSON内容", extra={"response_preview": response.text[:200]})
            return self._create_error_result("API 响应解析失败", status_code=response.status_code)

        image_urls = self._extract_image_urls(payload)
        if not image_urls:
            return self._create_error_result("API 响应中未找到图像 URL", status_code=response.status_code)

        logger.info("火山引擎方舟图片生成成功", extra={"image_count": len(image_urls)})

        return ImageGenerationResult(
            success=True,
            image_urls=image_urls,
            metadata=self._extract_metadata(payload, body)
        )

    def _handle_error_response(self, response: httpx.Response) -> ImageGenerationResult:
        """尽力解析错误信封 {error: {message, code}}"""
        error_text = response.text
        message = None
        error_code = None

        try:
            error_info = response.json().get('error') or {}
            if isinstance(error_info, dict):
                message = error_info.get('message')
                error_code = error_info.get('code')
        except (ValueError, AttributeError):
            pass

        if message:
            error_message = f"API 调用失败: {message} ({error_code or response.status_code})"
        else:
            error_message = f"API 调用失败: {response.status_code} {response.reason_phrase} - {error_text}"

        logger.error("火山引擎方舟API调用失败", extra={
            "status_code": response.status_code,
            "error_code": error_code,
            "error_text": error_text[:500]
        })

        return self._create_error_result(
            error_message,
            status_code=response.status_code,
            error_code=str(error_code) if error_code is not None else None
        )

    @staticmethod
    def _extract_image_urls(payload: Any) -> List[str]:
        """提取 data[].url"""
        if not isinstance(payload, dict):
            return []
        items = payload.get('data') or []
        return [item['url'] for item in items if isinstance(item, dict) and item.get('url')]

    @staticmethod
    def _extract_metadata(payload: Dict[str, Any], body: Dict[str, Any]) -> Dict[str, Any]:
        """提取元数据"""
        metadata = {
            'provider': 'volcengine_ark',
            'model': body.get('model'),
            'size': body.get('size'),
            'created': payload.get('created') or int(time.time())
        }
        if payload.get('usage'):
            metadata['usage'] = payload['usage']
        return metadata

    @staticmethod
    def _create_error_result(
        error_message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None
    ) -> ImageGenerationResult:
        """创建错误结果"""
        return ImageGenerationResult(
            success=False,
            error_message=error_message,
            status_code=status_code,
            error_code=error_code
        )
