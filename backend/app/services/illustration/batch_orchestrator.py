"""
批量插画编排
按固定大小分批并发生成，批与批之间串行并间隔等待，单页失败互不影响
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from app.core.log_messages import log_messages
from app.core.log_utils import get_logger
from app.services.illustration.illustration_service import IllustrationService
from app.services.illustration.models import (
    BatchPage,
    BatchResult,
    IllustrationRequest,
    IllustrationSettings,
    IllustrationStyle,
    PromptVariant,
)
from app.utils.id_utils import BATCH_ILLUSTRATION_PREFIX

logger = get_logger(__name__)


def format_success_rate(successful: int, total: int) -> str:
    """成功率，四舍五入到整数百分比"""
    if total <= 0:
        return "0%"
    return f"{int(successful * 100 / total + 0.5)}%"


def chunk_pages(pages: Sequence[BatchPage], batch_size: int) -> List[List[BatchPage]]:
    """将页面按顺序切分为大小为 batch_size 的连续批次"""
    return [list(pages[i:i + batch_size]) for i in range(0, len(pages), batch_size)]


@dataclass(frozen=True)
class BatchOutcome:
    """
    批量生成结果

    results 与输入页面顺序一致；successes/failures 为其划分。
    """
    results: List[BatchResult]
    batch_size: int
    total_batches: int

    @property
    def successes(self) -> List[BatchResult]:
        return [result for result in self.results if result.success]

    @property
    def failures(self) -> List[BatchResult]:
        return [result for result in self.results if not result.success]

    @property
    def summary(self) -> Dict[str, Any]:
        total = len(self.results)
        successful = len(self.successes)
        return {
            "totalPages": total,
            "successful": successful,
            "failed": total - successful,
            "successRate": format_success_rate(successful, total),
        }


class BatchOrchestrator:
    """批量插画编排器"""

    def __init__(
        self,
        illustration_service: IllustrationService,
        config: Optional[IllustrationSettings] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        self.illustration_service = illustration_service
        self.config = config or illustration_service.config
        self._sleep = sleep

    def resolve_batch_size(self, batch_size: Optional[int]) -> int:
        """未指定时使用默认值，并限制在 1..max_batch_size 之间"""
        size = batch_size or self.config.default_batch_size
        return max(1, min(size, self.config.max_batch_size))

    async def _illustrate_page(
        self,
        position: int,
        page: BatchPage,
        style: IllustrationStyle,
        character_description: Optional[str],
        consistency_mode: bool,
        fusion_mode: bool
    ) -> BatchResult:
        """
        生成单页插画，任何异常都转换为该页的失败结果

        页码取页面在请求列表中的位置，客户端传入的 page_index 不参与编号。
        """
        try:
            request = IllustrationRequest(
                scene_prompt=page.prompt,
                style=style,
                character_description=character_description,
                consistency_mode=consistency_mode,
                fusion_mode=fusion_mode,
                variant=PromptVariant.BATCH,
                page_number=position + 1,
            )
            result = await self.illustration_service.generate(
                request,
                filename_prefix=BATCH_ILLUSTRATION_PREFIX
            )
        except Exception as e:
            logger.error(
                log_messages.ILLUSTRATION_FAILED,
                exception=e,
                operation="batch_page",
                page_index=position,
                client_page_index=page.page_index
            )
            return BatchResult(
                page_index=position,
                success=False,
                error=str(e) or type(e).__name__,
                prompt=page.prompt,
                text=page.text
            )

        return BatchResult(
            page_index=position,
            success=result.success,
            image_url=result.image_url,
            error=result.error,
            prompt=result.prompt if result.success else page.prompt,
            text=page.text
        )

    async def run(
        self,
        pages: Sequence[BatchPage],
        style: IllustrationStyle = IllustrationStyle.REALISTIC,
        character_description: Optional[str] = None,
        consistency_mode: bool = False,
        fusion_mode: bool = False,
        batch_size: Optional[int] = None
    ) -> BatchOutcome:
        """
        批量生成插画

        Args:
            pages: 按顺序排列的页面
            style: 插画风格
            character_description: 角色描述
            consistency_mode: 是否要求角色一致
            fusion_mode: 是否启用图像融合
            batch_size: 每批并发数量

        Returns:
            BatchOutcome: 每页一个结果，顺序与输入一致
        """
        size = self.resolve_batch_size(batch_size)
        chunks = chunk_pages(pages, size)

        logger.info(log_messages.BATCH_START, operation="batch_illustrate", total_pages=len(pages), batch_size=size)

        if [page.page_index for page in pages] != list(range(len(pages))):
            logger.warning(
                "客户端页面索引不连续，按列表位置重新编号",
                operation="batch_illustrate",
                client_page_indexes=[page.page_index for page in pages]
            )

        results: List[BatchResult] = []
        start_index = 0
        for chunk_number, chunk in enumerate(chunks, start=1):
            logger.info(
                log_messages.BATCH_CHUNK_START,
                operation="batch_chunk",
                chunk_number=chunk_number,
                total_chunks=len(chunks),
                first_page=start_index + 1,
                last_page=start_index + len(chunk)
            )

            chunk_results = await asyncio.gather(*[
                self._illustrate_page(
                    start_index + offset, page, style, character_description, consistency_mode, fusion_mode
                )
                for offset, page in enumerate(chunk)
            ])
            results.extend(chunk_results)
            start_index += len(chunk)

            if chunk_number < len(chunks) and self.config.batch_delay > 0:
                await self._sleep(self.config.batch_delay)

        outcome = BatchOutcome(results=results, batch_size=size, total_batches=len(chunks))
        logger.info(
            log_messages.BATCH_COMPLETED,
            operation="batch_illustrate",
            successful=outcome.summary["successful"],
            failed=outcome.summary["failed"]
        )
        return outcome
