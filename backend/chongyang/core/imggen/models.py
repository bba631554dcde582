"""
图片生成数据模型
定义图片生成相关的数据结构
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ImageGenerationResult:
    """图片生成结果

    Attributes:
        success: 是否生成成功
        image_urls: 生成服务返回的原始图片URL
        error_message: 错误消息（失败时）
        status_code: 失败时的HTTP状态码
        error_code: 生成服务返回的错误码
        metadata: 额外的元数据信息
    """
    success: bool
    image_urls: List[str] = field(default_factory=list)
    error_message: Optional[str] = None
    status_code: Optional[int] = None
    error_code: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
