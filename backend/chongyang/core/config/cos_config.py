"""
腾讯云COS配置模块
从全局配置派生COS连接参数
"""

from typing import Optional

from pydantic import BaseModel, Field

from chongyang.core.config.config import Settings, settings


class COSConfig(BaseModel):
    """COS配置数据类"""

    secret_id: str = Field(default="", description="腾讯云COS SecretId")
    secret_key: str = Field(default="", description="腾讯云COS SecretKey")
    region: str = Field(default="ap-beijing", description="COS地域")
    bucket: str = Field(default="", description="COS存储桶名称")
    scheme: str = Field(default="https", description="连接协议")
    timeout: int = Field(default=30, description="连接超时时间（秒）")


def get_cos_config(source: Optional[Settings] = None) -> COSConfig:
    """从全局配置获取COS配置"""
    source = source or settings
    return COSConfig(
        secret_id=source.cos_secret_id,
        secret_key=source.cos_secret_key,
        region=source.cos_region,
        bucket=source.cos_bucket,
        scheme=source.cos_scheme,
        timeout=source.cos_timeout,
    )


def validate_cos_config(config: COSConfig) -> bool:
    """验证COS配置完整性"""
    required_fields = ["secret_id", "secret_key", "bucket"]

    for field in required_fields:
        if not getattr(config, field):
            return False

    return True
