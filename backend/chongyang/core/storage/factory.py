"""
存储适配器工厂
按名称登记适配器类，并按配置名称构建实例
"""

from typing import Dict, List, Type

from chongyang.core.log_utils import get_logger
from chongyang.core.storage.base_storage import BaseStorage
from chongyang.core.storage.exceptions import ConfigurationError

logger = get_logger(__name__)

_ADAPTERS: Dict[str, Type[BaseStorage]] = {}


def register_adapter(name: str, adapter_class: Type[BaseStorage]) -> None:
    """登记适配器类，同名登记会覆盖之前的类"""
    if name in _ADAPTERS and _ADAPTERS[name] is not adapter_class:
        logger.warning("存储适配器被重新登记", extra={'adapter': name})
    _ADAPTERS[name] = adapter_class


def get_adapter_class(name: str) -> Type[BaseStorage]:
    """
    Raises:
        ConfigurationError: 名称未登记
    """
    try:
        return _ADAPTERS[name]
    except KeyError:
        raise ConfigurationError(
            "未知的存储适配器: {}".format(name),
            details={'available': list_available_adapters()}
        ) from None


def create_adapter(name: str, **kwargs) -> BaseStorage:
    """
    构建适配器实例，关键字参数透传给适配器构造函数

    Raises:
        ConfigurationError: 名称未登记，或适配器认为配置不完整
    """
    return get_adapter_class(name)(**kwargs)


def list_available_adapters() -> List[str]:
    return sorted(_ADAPTERS)


__all__ = [
    'register_adapter',
    'get_adapter_class',
    'create_adapter',
    'list_available_adapters',
]
