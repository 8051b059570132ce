"""API 汇总路由：统一挂载所有子路由。"""

from fastapi import APIRouter

from app.packages.portal.api.v1.endpoints import auth, files, folders, waitlist

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(waitlist.router)
api_router.include_router(folders.router)
api_router.include_router(files.router)
