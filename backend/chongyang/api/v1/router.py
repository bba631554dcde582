"""
API路由聚合模块
将所有v1版本的路由统一注册，前缀统一在这里管理
"""

from fastapi import APIRouter

from chongyang.api.v1.endpoints import festival, image_generation, image_processing

api_router = APIRouter()

# ==================== 图片生成路由 ====================
api_router.include_router(image_generation.router, prefix="/images", tags=["图片生成"])

# ==================== 图片处理路由 ====================
api_router.include_router(image_processing.router, prefix="/images", tags=["图片处理"])

# ==================== 重阳节活动路由 ====================
api_router.include_router(festival.router, prefix="/festival", tags=["重阳节活动"])
