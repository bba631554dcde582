"""
存储服务模块
提供统一的对象存储访问接口，支持多种存储适配器
"""

from typing import Optional

from chongyang.core.config import settings
from chongyang.core.storage.adapters.tencent_cos import TencentCosAdapter
from chongyang.core.storage.base_storage import BaseStorage
from chongyang.core.storage.exceptions import (
    ConfigurationError,
    SigningError,
    StorageError,
    StorageWriteError,
)
from chongyang.core.storage.factory import (
    create_adapter,
    list_available_adapters,
    register_adapter,
)
from chongyang.core.storage.models import DeleteManyResult, UploadResult

# 自动注册腾讯云COS适配器
register_adapter(TencentCosAdapter.ADAPTER_NAME, TencentCosAdapter)


def get_storage_service(adapter_name: Optional[str] = None) -> BaseStorage:
    """
    创建存储服务实例

    每次调用都会构建新实例，由调用方持有并注入到各组件中。

    Args:
        adapter_name: 适配器名称，不指定时读取配置

    Returns:
        BaseStorage: 存储服务实例

    Raises:
        ConfigurationError: 适配器不存在或配置不完整时抛出
    """
    return create_adapter(adapter_name or settings.storage_adapter)


__all__ = [
    # 工厂函数
    'get_storage_service',
    'create_adapter',
    'list_available_adapters',
    'register_adapter',
    # 抽象接口与适配器
    'BaseStorage',
    'TencentCosAdapter',
    # 数据模型
    'UploadResult',
    'DeleteManyResult',
    # 异常
    'StorageError',
    'ConfigurationError',
    'StorageWriteError',
    'SigningError',
]
