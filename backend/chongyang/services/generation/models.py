"""
图片生成结果模型
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from chongyang.services.image.models import ImageProcessResult


@dataclass(frozen=True)
class GenerationOutcome:
    """
    一次生成调用的结果

    只要有一张图片处理成功即视为成功，images 只包含成功的部分。

    Attributes:
        success: 是否成功
        images: 处理成功的图片
        error: 错误描述
        error_code: 错误码
        requested_count: 调用方请求的张数
        generated_count: 生成服务实际返回的张数（含补充调用）
        prompt: 批量生成时对应的提示词
    """
    success: bool
    images: List[ImageProcessResult] = field(default_factory=list)
    error: Optional[str] = None
    error_code: Optional[str] = None
    requested_count: int = 0
    generated_count: int = 0
    prompt: Optional[str] = None

    @classmethod
    def failure(cls, error: str, error_code: Optional[str] = None, **kwargs: Any) -> "GenerationOutcome":
        return cls(success=False, error=error, error_code=error_code, **kwargs)

    @property
    def urls(self) -> List[str]:
        return [image.url for image in self.images if image.url]

    @property
    def storage_keys(self) -> List[str]:
        return [image.storage_key for image in self.images if image.storage_key]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "urls": self.urls,
            "storage_keys": self.storage_keys,
            "images": [
                image.to_record() for image in self.images
            ],
            "requested_count": self.requested_count,
            "generated_count": self.generated_count,
        }
        if self.error:
            data["error"] = self.error
            data["error_code"] = self.error_code
        if self.prompt is not None:
            data["prompt"] = self.prompt
        return data
