"""
测试配置和fixtures
单元测试不依赖任何外部服务：对象存储使用内存替身，HTTP使用 MockTransport
"""

import pytest

from chongyang.core.image import ImageNormalizer
from tests.utils.image_utils import make_image_bytes
from tests.utils.storage_doubles import InMemoryStorage


@pytest.fixture
def storage():
    """内存存储替身"""
    return InMemoryStorage()


@pytest.fixture
def normalizer():
    return ImageNormalizer()


@pytest.fixture
def png_bytes():
    """64x48 的PNG图片"""
    return make_image_bytes(64, 48, "PNG")


@pytest.fixture
def jpeg_bytes():
    """64x48 的JPEG图片"""
    return make_image_bytes(64, 48, "JPEG")


def pytest_configure(config):
    """配置pytest标记"""
    config.addinivalue_line("markers", "unit: 单元测试")
    config.addinivalue_line("markers", "interface: 接口测试")
    config.addinivalue_line("markers", "storage: 对象存储测试")
    config.addinivalue_line("markers", "images: 图片处理测试")
    config.addinivalue_line("markers", "generation: 图片生成测试")
    config.addinivalue_line("markers", "logging: 日志测试")
