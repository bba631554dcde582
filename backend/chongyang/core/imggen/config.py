"""
图片生成模型配置
"""

from typing import Optional

from pydantic import BaseModel, Field

from chongyang.core.config import Settings, settings


class ImageModelConfig(BaseModel):
    """图片生成模型配置"""

    name: str = Field(description="模型ID")
    api_key: str = Field(default="", description="API密钥")
    base_url: str = Field(description="API基础地址")
    timeout: float = Field(default=120.0, description="请求超时时间（秒）")

    @classmethod
    def from_settings(cls, source: Optional[Settings] = None) -> "ImageModelConfig":
        """从全局配置构建"""
        source = source or settings
        return cls(
            name=source.ark_image_model,
            api_key=source.ark_api_key,
            base_url=source.ark_base_url,
            timeout=source.ark_timeout,
        )
