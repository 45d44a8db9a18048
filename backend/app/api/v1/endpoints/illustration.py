"""
插画生成API端点
采用薄路由、重服务的架构设计
"""

from fastapi import APIRouter, Depends

from app.core.log_utils import get_logger
from app.schemas.common import StandardResponse
from app.schemas.illustration import AdvancedIllustrateRequest, BatchIllustrateRequest, IllustrateRequest
from app.services.illustration.illustration_handler import IllustrationHandler

logger = get_logger(__name__)

router = APIRouter(tags=["插画生成"])


def get_illustration_handler() -> IllustrationHandler:
    """插画处理器依赖"""
    return IllustrationHandler()


@router.post(
    "/illustrate",
    response_model=StandardResponse,
    summary="生成单张插画",
    description="根据场景描述生成一张绘本插画，返回可公开访问的图片地址"
)
async def illustrate(
    request: IllustrateRequest,
    handler: IllustrationHandler = Depends(get_illustration_handler)
) -> StandardResponse:
    result = await handler.handle_illustrate(request)
    return StandardResponse(status="success", message="插画生成成功", data=result)


@router.post(
    "/advanced-illustrate",
    response_model=StandardResponse,
    summary="高级插画生成",
    description="支持图像融合和多页连续生成的插画接口"
)
async def advanced_illustrate(
    request: AdvancedIllustrateRequest,
    handler: IllustrationHandler = Depends(get_illustration_handler)
) -> StandardResponse:
    result = await handler.handle_advanced_illustrate(request)
    return StandardResponse(status="success", message="插画生成成功", data=result)


@router.post(
    "/batch-illustrate",
    response_model=StandardResponse,
    summary="批量生成插画",
    description="""
    为绘本的多个页面批量生成插画

    功能流程：
    1. 按batchSize将页面切分为连续批次
    2. 批内并发生成，批与批之间串行并间隔等待
    3. 单页失败记录在failedResults中，不影响其他页面
    4. 返回成功结果、失败结果和成功率汇总
    """
)
async def batch_illustrate(
    request: BatchIllustrateRequest,
    handler: IllustrationHandler = Depends(get_illustration_handler)
) -> StandardResponse:
    result = await handler.handle_batch_illustrate(request)
    summary = result["summary"]
    return StandardResponse(
        status="success",
        message=f"批量插画完成: 成功{summary['successful']}页，失败{summary['failed']}页",
        data=result
    )
