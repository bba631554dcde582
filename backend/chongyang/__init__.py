"""
重阳节 AI 工坊后端
老照片修复与诗歌配图的图片生成、处理与存储服务
"""

__version__ = "1.0.0"
