"""
尺寸与质量映射
把面向用户的尺寸标记映射为生成服务的分辨率档位，把质量档位映射为压缩质量
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union

from chongyang.core.image import ResizeOptions, parse_size_directive


class ResolutionTier(str, Enum):
    """分辨率档位"""
    STANDARD = "standard"
    HIGH = "high"

    @property
    def provider_size(self) -> str:
        """生成服务接受的 size 参数"""
        return _PROVIDER_SIZES[self]


_PROVIDER_SIZES: Dict[ResolutionTier, str] = {
    ResolutionTier.STANDARD: "2K",
    ResolutionTier.HIGH: "4K",
}

# 具名标记，大小写不敏感
_NAMED_TIERS: Dict[str, ResolutionTier] = {
    "2k": ResolutionTier.STANDARD,
    "4k": ResolutionTier.HIGH,
    "standard": ResolutionTier.STANDARD,
    "high": ResolutionTier.HIGH,
}

# 宽或高超过该值时使用高分辨率档位
HIGH_TIER_THRESHOLD = 2048

DEFAULT_TIER = ResolutionTier.STANDARD

# 质量档位 -> 压缩质量(1-100)
DEFAULT_COMPRESSION_QUALITY = 80
_QUALITY_TIERS: Dict[str, int] = {
    "standard": 80,
    "hd": 95,
}

SUPPORTED_SIZES: List[Dict[str, str]] = [
    {"token": "2K", "label": "2K (2048×2048)", "aspect_ratio": "1:1"},
    {"token": "4K", "label": "4K (4096×4096)", "aspect_ratio": "1:1"},
]


@dataclass(frozen=True)
class SizeResolution:
    """尺寸解析结果"""
    tier: ResolutionTier
    resize: Optional[ResizeOptions] = None


def resolve_size(size: Optional[str], resize: Optional[ResizeOptions] = None) -> SizeResolution:
    """
    解析尺寸标记

    - "宽x高"：较大边超过 2048 用高档位，否则标准档位；调用方未给出缩放指令
      时推导居中裁剪指令
    - 具名标记（2K/4K/standard/high）：直接映射
    - 其余情况（包括格式错误的 "宽x高"）：退回标准档位，不推导缩放指令

    Args:
        size: 尺寸标记
        resize: 调用方显式给出的缩放指令，优先于推导结果

    Returns:
        SizeResolution: 档位与缩放指令
    """
    directive = parse_size_directive(size)
    if directive:
        tier = (
            ResolutionTier.HIGH
            if max(directive.width, directive.height) > HIGH_TIER_THRESHOLD
            else ResolutionTier.STANDARD
        )
        return SizeResolution(tier=tier, resize=resize or directive)

    if isinstance(size, str):
        named = _NAMED_TIERS.get(size.strip().lower())
        if named:
            return SizeResolution(tier=named, resize=resize)

    return SizeResolution(tier=DEFAULT_TIER, resize=resize)


def map_quality(quality: Optional[Union[int, str]]) -> int:
    """
    质量映射：1-10 的数值乘以10，standard 为80，hd 为95，未设置为80
    """
    if quality is None:
        return DEFAULT_COMPRESSION_QUALITY
    if isinstance(quality, int) and not isinstance(quality, bool):
        return quality * 10
    return _QUALITY_TIERS.get(str(quality).lower(), DEFAULT_COMPRESSION_QUALITY)


def list_supported_sizes() -> List[Dict[str, str]]:
    """支持的尺寸列表（静态数据）"""
    return [dict(item) for item in SUPPORTED_SIZES]
