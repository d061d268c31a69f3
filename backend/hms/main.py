"""
HMS 控制台主应用入口
多租户酒店管理系统的 Web 控制台（浏览器与上游 REST API 之间的 BFF 层）
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hms.api_client import ApiError, relay_session_cookies
from hms.config import settings
from hms.routers import auth, bookings, dashboard, finance, guests, rooms, super_admin

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info(f"{settings.APP_NAME} starting, upstream API at {settings.API_BASE_URL}")
    yield
    logger.info(f"{settings.APP_NAME} shutting down")


# 创建应用
app = FastAPI(
    title=settings.APP_NAME,
    description="多租户酒店管理系统 Web 控制台",
    version="1.0.0",
    lifespan=lifespan
)

# CORS 配置（会话 Cookie 需要 allow_credentials）
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def relay_cookies(request: Request, call_next):
    """把本次请求中上游轮换的会话 Cookie 写回浏览器"""
    response = await call_next(request)
    relay_session_cookies(getattr(request.state, "api", None), response)
    return response


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    """上游错误按原状态码返回，网络错误为 503"""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# 注册路由
app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(rooms.router)
app.include_router(guests.router)
app.include_router(bookings.router)
app.include_router(finance.router)
app.include_router(super_admin.router)


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """健康检查"""
    return {"status": "healthy"}
