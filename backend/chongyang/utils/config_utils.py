"""
路径与配置解析工具
"""

from pathlib import Path
from typing import List

# backend/chongyang/utils/config_utils.py 往上三级是仓库根目录
PROJECT_ROOT = Path(__file__).resolve().parents[3]


def get_workspace_path(sub_path: str = "") -> Path:
    """运行期产物（日志等）所在目录: {仓库根}/workspace/{sub_path}"""
    return PROJECT_ROOT / "workspace" / sub_path if sub_path else PROJECT_ROOT / "workspace"


def get_config_path(sub_path: str = "") -> Path:
    """配置文件目录: {仓库根}/config/{sub_path}"""
    return PROJECT_ROOT / "config" / sub_path if sub_path else PROJECT_ROOT / "config"


def parse_list_config(value: str, separator: str = ",") -> List[str]:
    """把 "jpg, PNG,webp" 这类配置拆成小写列表，忽略空项"""
    if not value:
        return []
    return [item.strip().lower() for item in value.split(separator) if item.strip()]
