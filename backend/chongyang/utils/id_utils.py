"""
ID生成工具模块
提供存储键、项目前缀使用的ID生成方法
"""

import random
import re
import string
import time
import uuid


def generate_uuid() -> str:
    """生成标准UUID字符串"""
    return str(uuid.uuid4())


def generate_random_suffix(length: int = 6) -> str:
    """
    生成随机后缀（小写字母+数字）

    Args:
        length: 后缀长度，默认6位

    Returns:
        str: 随机后缀
    """
    return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))


def current_millis() -> int:
    """当前毫秒时间戳"""
    return int(time.time() * 1000)


def generate_timestamped_name(extension: str, suffix: str = "") -> str:
    """
    生成带时间戳和随机后缀的文件名

    Args:
        extension: 文件扩展名（不含点）
        suffix: 附加在随机部分之后的标记，如 "300x300"

    Returns:
        str: 如 "1700000000000-a1b2c3.webp"
    """
    name = f"{current_millis()}-{generate_random_suffix()}"
    if suffix:
        name = f"{name}-{suffix}"
    return f"{name}.{extension}"


def normalize_client_segment(raw: str, default: str = "guest") -> str:
    """
    将客户端标识（如手机号）规整为只含数字的路径段

    Args:
        raw: 原始标识
        default: 规整后为空时使用的值

    Returns:
        str: 路径段
    """
    normalized = re.sub(r"[^0-9]", "", raw or "")
    return normalized or default
