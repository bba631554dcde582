"""
图片生成与图片处理相关的Pydantic数据模型
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from chongyang.core.config import settings
from chongyang.core.image import ResizeFit, ResizeOptions


QualityLevel = Union[Annotated[int, Field(ge=1, le=10)], Literal["standard", "hd"]]


# ============================================================================
# 请求模型
# ============================================================================

class ResizeSpec(BaseModel):
    """缩放指令"""
    width: Optional[int] = Field(None, gt=0, description="目标宽度")
    height: Optional[int] = Field(None, gt=0, description="目标高度")
    fit: ResizeFit = Field(default=ResizeFit.COVER, description="适配方式: cover|contain|fill|inside")

    def to_options(self) -> Optional[ResizeOptions]:
        if self.width is None and self.height is None:
            return None
        return ResizeOptions(width=self.width, height=self.height, fit=self.fit)


class GenerationOptions(BaseModel):
    """除提示词外的生成参数，批量生成时共享"""
    negative_prompt: Optional[str] = Field(None, max_length=500, description="反向提示词")
    image: Optional[Union[str, List[str]]] = Field(None, description="参考图URL，单个或多个")
    size: Optional[str] = Field("2K", description="尺寸：2K、4K 或 宽x高")
    num_images: int = Field(1, ge=1, le=4, description="期望生成的图片数量")
    watermark: bool = Field(False, description="是否添加水印")
    seed: Optional[int] = Field(None, ge=0, le=2147483647, description="随机种子")
    quality: Optional[QualityLevel] = Field(None, description="质量：1-10 或 standard/hd")
    stream: bool = Field(False, description="是否流式返回")
    project_id: Optional[str] = Field(None, description="项目ID，决定存储目录")


class GenerationRequest(GenerationOptions):
    """单次生成请求"""
    prompt: str = Field(..., min_length=1, max_length=800, description="提示词")
    resize: Optional[ResizeSpec] = Field(None, description="可选的缩放指令，优先于尺寸推导")


class BatchGenerationRequest(BaseModel):
    """批量生成请求，提示词按顺序逐个生成"""
    prompts: List[str] = Field(..., min_length=1, description="提示词列表")
    options: GenerationOptions = Field(default_factory=GenerationOptions, description="共享生成参数")


class ProcessImageRequest(BaseModel):
    """处理单张远程图片"""
    source_url: str = Field(..., min_length=1, description="原始图像URL")
    project_id: Optional[str] = Field(None, description="项目ID")
    file_name: Optional[str] = Field(None, description="文件名（可选）")
    quality: int = Field(settings.image_default_quality, ge=1, le=100, description="压缩质量 (1-100)")
    resize: Optional[ResizeSpec] = Field(None, description="可选的缩放指令")


class ProcessBatchRequest(BaseModel):
    """批量处理远程图片"""
    urls: List[str] = Field(..., min_length=1, description="图像URL列表")
    project_id: Optional[str] = Field(None, description="项目ID")
    quality: int = Field(settings.image_default_quality, ge=1, le=100, description="压缩质量 (1-100)")
    concurrency: int = Field(3, ge=1, le=10, description="每批并发数")
    resize: Optional[ResizeSpec] = Field(None, description="可选的缩放指令")


class ThumbnailRequest(BaseModel):
    """缩略图请求"""
    source_url: str = Field(..., min_length=1, description="原始图像URL")
    width: int = Field(settings.image_thumbnail_size, gt=0, le=2048, description="缩略图宽度")
    height: int = Field(settings.image_thumbnail_size, gt=0, le=2048, description="缩略图高度")
    project_id: Optional[str] = Field(None, description="项目ID")


class ImageMetadataRequest(BaseModel):
    """已存储图片的元信息查询"""
    url: str = Field(..., min_length=1, description="图片访问URL")


class PoemImageRequest(BaseModel):
    """诗词配图请求"""
    keywords: str = Field(..., min_length=1, max_length=200, description="关键词")
    title: Optional[str] = Field(None, max_length=100, description="诗词标题")
    content: Optional[str] = Field(None, max_length=500, description="诗词内容")
    client_id: Optional[str] = Field(None, description="客户端标识")
    size: Optional[str] = Field("2K", description="尺寸")
