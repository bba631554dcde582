"""
核心基础设施模块
配置、日志、对象存储、图片处理与图片生成提供商
"""
