"""
重阳节AI创作 - FastAPI主应用
"""

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chongyang.api.v1.router import api_router
from chongyang.core.config import settings
from chongyang.core.image import ImageNormalizer
from chongyang.core.imggen import ImageModelConfig, VolcengineArkProvider
from chongyang.core.log_utils import get_logger, setup_logging
from chongyang.core.storage import BaseStorage, ConfigurationError, get_storage_service
from chongyang.services.generation import ImageGenerationService
from chongyang.services.image import ImageUploadPipeline, ReferenceImageService

# 初始化日志系统
setup_logging()

# 在导入其他模块之前完成日志设置
logger = get_logger(__name__)


def install_services(
    app: FastAPI,
    storage: Optional[BaseStorage],
    provider: VolcengineArkProvider,
    http_client: Optional[httpx.AsyncClient] = None
) -> None:
    """创建服务实例并挂到 app.state，存储不可用时图片服务保持为空"""
    app.state.provider = provider
    app.state.storage = storage

    if storage is None:
        app.state.pipeline = None
        app.state.reference_service = None
        app.state.generation_service = None
        return

    normalizer = ImageNormalizer()
    pipeline = ImageUploadPipeline(storage, normalizer=normalizer, http_client=http_client)
    app.state.pipeline = pipeline
    app.state.reference_service = ReferenceImageService(storage, normalizer=normalizer)
    app.state.generation_service = ImageGenerationService(provider, pipeline)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info("应用启动中...")

    try:
        storage = get_storage_service()
    except ConfigurationError as e:
        logger.warning("对象存储未配置，图片服务不可用", extra={'error': str(e)})
        storage = None

    provider = VolcengineArkProvider(ImageModelConfig.from_settings())
    if not provider.validate_config():
        logger.warning("图片生成API密钥未配置，生成调用将返回失败")

    fetch_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.image_fetch_timeout),
        follow_redirects=True
    )
    install_services(app, storage, provider, http_client=fetch_client)

    logger.info("应用启动完成")

    yield

    await provider.close()
    await fetch_client.aclose()
    logger.info("应用关闭")


# 创建FastAPI应用实例
app = FastAPI(
    title=settings.project_name,
    version=settings.app_version,
    description="重阳节老照片修复与诗词配图服务",
    openapi_url=f"{settings.api_v1_str}/openapi.json",
    docs_url=f"{settings.api_v1_str}/docs",
    redoc_url=f"{settings.api_v1_str}/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册API路由
app.include_router(api_router, prefix=settings.api_v1_str)


@app.get("/")
def read_root():
    """根路径"""
    return {
        "message": settings.project_name,
        "version": settings.app_version,
        "docs": f"{settings.api_v1_str}/docs"
    }


@app.get("/health")
def health_check():
    """健康检查"""
    return {
        "status": "healthy",
        "storage": getattr(app.state, "storage", None) is not None
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug,
        log_level=settings.log_level.lower()
    )
