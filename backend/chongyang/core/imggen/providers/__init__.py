"""
图片生成提供商实现
"""

from chongyang.core.imggen.providers.volcengine_ark import VolcengineArkProvider

__all__ = ["VolcengineArkProvider"]
