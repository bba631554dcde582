"""
应用配置管理模块
统一管理所有配置信息，包括环境变量和文件配置
"""

from typing import List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chongyang.utils.config_utils import get_config_path, get_workspace_path, parse_list_config


class Settings(BaseSettings):
    """应用配置类 - 统一管理所有配置信息"""

    # ==================== 基础配置 ====================
    app_name: str = "重阳 AI 工坊"
    app_version: str = "1.0.0"
    app_debug: bool = False

    # ==================== API配置 ====================
    api_v1_str: str = "/api/v1"
    project_name: str = "Chongyang AI Studio API"

    # ==================== 日志配置 ====================
    log_level: str = "INFO"
    log_file: str = "backend.log"
    log_dir: str = "log"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # ==================== 应用服务配置 ====================
    app_port: int = 8080
    app_host: str = "0.0.0.0"

    # ==================== 对象存储配置 ====================
    storage_adapter: str = "tencent_cos"

    cos_secret_id: str = ""
    cos_secret_key: str = ""
    cos_region: str = "ap-beijing"
    cos_bucket: str = ""
    cos_scheme: str = "https"
    cos_timeout: int = 30

    # ==================== 图片生成提供商配置 ====================
    ark_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("ark_api_key", "seed_edit_key"),
    )
    ark_base_url: str = "https://ark.cn-beijing.volces.com/api/v3"
    ark_image_model: str = "doubao-seedream-4-0-250828"
    ark_timeout: float = 120.0
    # 主调用固定多要图片，减少补充调用次数
    ark_primary_num_images: int = 2
    ark_supplemental_delay: float = 1.0
    generation_batch_delay: float = 1.0

    # ==================== 图片处理管线配置 ====================
    image_fetch_timeout: float = 60.0
    image_fetch_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    )
    image_default_quality: int = 80
    image_batch_concurrency: int = 3
    image_signed_url_days: int = 30
    image_cache_control: str = "public, max-age=31536000"
    image_storage_prefix: str = "generated-images"
    image_thumbnail_prefix: str = "thumbnails"
    image_thumbnail_quality: int = 85
    image_thumbnail_size: int = 300

    # ==================== 参考图上传配置 ====================
    upload_max_size: int = 15 * 1024 * 1024  # 15MB
    upload_accepted_extensions: str = "jpg,jpeg,png,webp,heic,heif"
    upload_prefix: str = "photo-restore"
    poem_prefix: str = "poem"

    # ==================== 验证器 ====================
    @field_validator("upload_accepted_extensions")
    @classmethod
    def split_accepted_extensions(cls, value: str) -> List[str]:
        """将允许的扩展名字符串转换为列表"""
        return parse_list_config(value)

    @field_validator("ark_base_url")
    @classmethod
    def normalize_base_url(cls, value: str) -> str:
        """去除首尾空格和末尾斜杠，缺少协议时补全https"""
        value = value.strip().rstrip("/")
        if value and not value.startswith(("http://", "https://")):
            value = f"https://{value}"
        return value

    # ==================== 计算属性 ====================
    @property
    def cos_enabled(self) -> bool:
        """检查COS是否启用"""
        return bool(self.cos_secret_id and self.cos_secret_key and self.cos_bucket)

    @property
    def absolute_log_file(self) -> str:
        """获取绝对日志文件路径"""
        return str(get_workspace_path(self.log_dir) / self.log_file)

    model_config = SettingsConfigDict(
        env_file=get_config_path(".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
        populate_by_name=True,
    )


def get_settings() -> Settings:
    """获取应用配置实例"""
    return Settings()


# 全局配置实例
settings = get_settings()
