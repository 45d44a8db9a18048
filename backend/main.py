"""
绘本插画服务 - FastAPI主应用
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.api.v1.router import api_router
from app.api.v1.endpoints import image_proxy
from app.core.log_utils import setup_logging, get_logger
from app.core.mlflow_tracker import ensure_mlflow_initialized

# 初始化日志系统
setup_logging()

# 在导入其他模块之前完成日志设置
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """应用生命周期管理"""
    logger.info("应用启动中...")

    # 初始化MLflow追踪
    mlflow_enabled = ensure_mlflow_initialized()
    if mlflow_enabled:
        logger.info("MLflow追踪已启用 - 将自动捕获Gemini调用的request/response内容")
    else:
        logger.warning("MLflow追踪未启用，Gemini调用将不会被追踪")

    logger.info("应用启动完成", images_dir=settings.absolute_images_dir)

    yield

    logger.info("应用关闭")


# 创建FastAPI应用实例
app = FastAPI(
    title=settings.project_name,
    version=settings.app_version,
    description="为儿童绘本生成插画的服务，支持单张、高级和批量生成",
    openapi_url=f"{settings.api_v1_str}/openapi.json",
    docs_url=f"{settings.api_v1_str}/docs",
    redoc_url=f"{settings.api_v1_str}/redoc",
    lifespan=lifespan
)

# 添加CORS中间件 - 确保在所有路由之前添加
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"]
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求体校验失败统一返回400，附带字段级错误"""
    logger.warning("请求参数校验失败", path=request.url.path, error_count=len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid body", "details": jsonable_encoder(exc.errors())}
    )


# 注册API路由
app.include_router(api_router, prefix=settings.api_v1_str)

# 本地回退图片的只读路由挂载在根路径下，与存储返回的URL前缀一致
app.include_router(image_proxy.router, prefix=settings.local_images_url_prefix)


@app.get("/")
def read_root():
    """根路径"""
    return {
        "message": "Storybook Illustrator API",
        "version": settings.app_version,
        "docs": f"{settings.api_v1_str}/docs"
    }


@app.get("/health")
def health_check():
    """健康检查"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug,
        log_level=settings.log_level.lower()
    )
