"""
图片生成提供商基类
定义所有图片生成提供商的统一接口
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Union

from chongyang.core.imggen.config import ImageModelConfig
from chongyang.core.imggen.models import ImageGenerationResult


class BaseImageProvider(ABC):
    """图片生成提供商基类"""

    def __init__(self, model_config: ImageModelConfig):
        """初始化图片生成提供商

        Args:
            model_config: 模型配置对象
        """
        self.model_config = model_config

    @abstractmethod
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
        """
        调用生成服务

        Args:
            prompt: 图片描述提示词
            size: 生成服务的分辨率档位
            num_images: 期望张数，None 表示不传该参数
            negative_prompt: 反向提示词
            image: 参考图URL（一张或多张）
            watermark: 是否加水印
            seed: 随机种子
            quality: 质量档位或1-10数值
            stream: 是否流式返回

        Returns:
            ImageGenerationResult: 生成结果，HTTP失败也以结果形式返回
        """
        ...

    def validate_config(self) -> bool:
        """验证配置是否完整"""
        required_fields = ['api_key', 'name']
        for field in required_fields:
            if not getattr(self.model_config, field, None):
                return False
        return True

    async def close(self) -> None:
        """释放提供商持有的资源"""
        return None
