"""Serial batch execution with per-operation failure isolation."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Protocol, Sequence

from productboard_mcp.core.logging import logger

from .types import BatchOperation, BatchResult


class RequestMaker(Protocol):
    async def make_request(
        self,
        method: Any,
        path: Optional[str] = None,
        body: Optional[Any] = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any: ...


class BatchExecutor:
    """Runs operations one at a time, in order.

    Each operation still goes through the client's dispatch path, so it takes
    its own rate slot and retries. A failure is recorded and the next
    operation runs; nothing raised by an operation escapes `run`.
    """

    def __init__(self, client: RequestMaker):
        self.client = client

    async def run(self, operations: Sequence[BatchOperation]) -> List[BatchResult]:
        results: List[BatchResult] = []

        for index, operation in enumerate(operations):
            try:
                data = await self.client.make_request(
                    operation.method,
                    operation.path,
                    body=operation.body,
                    params=operation.params,
                )
                results.append(BatchResult(success=True, data=data))
            except Exception as e:
                logger.warning(
                    "Batch operation {} ({} {}) failed: {}",
                    index,
                    operation.method,
                    operation.path,
                    e,
                )
                results.append(BatchResult(success=False, error=str(e) or type(e).__name__))

        failed = sum(1 for r in results if not r.success)
        logger.info("Batch finished: {} operation(s), {} failed", len(results), failed)
        return results
