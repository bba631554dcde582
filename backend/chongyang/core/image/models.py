"""
图片处理数据模型
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ResizeFit(str, Enum):
    """缩放适配策略"""
    COVER = "cover"        # 等比填满目标尺寸，居中裁掉溢出部分
    CONTAIN = "contain"    # 等比缩放后居中留边
    FILL = "fill"          # 忽略宽高比拉伸
    INSIDE = "inside"      # 等比缩放到不超过目标尺寸


@dataclass(frozen=True)
class ResizeOptions:
    """
    缩放指令

    Attributes:
        width: 目标宽度
        height: 目标高度
        fit: 适配策略
    """
    width: Optional[int] = None
    height: Optional[int] = None
    fit: ResizeFit = ResizeFit.COVER


@dataclass(frozen=True)
class ImageInfo:
    """图片元信息，仅解析文件头得到"""
    width: int
    height: int
    format: Optional[str]
    size: int


@dataclass(frozen=True)
class NormalizedImage:
    """
    供下游使用的规范化图片

    Attributes:
        data: 图片数据
        extension: 扩展名（不含点）
        mime_type: MIME类型
        converted: 是否经过格式转换
        original_size: 转换前字节数
    """
    data: bytes
    extension: str
    mime_type: str
    converted: bool
    original_size: int

    @property
    def size(self) -> int:
        return len(self.data)
