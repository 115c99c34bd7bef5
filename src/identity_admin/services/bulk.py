"""
identity_admin.services.bulk

Bulk deletion with per-item fault isolation.

Responsibilities:
- Run the single-user deletion workflow for each ref independently.
- Bound in-flight workflows with a semaphore (sequential by default).
- Return results in input order; counts are derived from the results list.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from identity_admin.errors import ServiceError
from identity_admin.observability.logging import get_logger
from identity_admin.services.lifecycle import IdentityLifecycleManager, PrincipalRef
from identity_admin.services.results import BulkSummary, OperationResult, OperationStatus

log = get_logger(__name__)


class BulkOperationExecutor:
    def __init__(self, manager: IdentityLifecycleManager, *, max_concurrency: int = 1) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._manager = manager
        self._max_concurrency = max_concurrency

    async def delete_many(
        self,
        refs: Sequence[PrincipalRef],
        *,
        actor: str,
        revoke_tokens: bool = True,
    ) -> BulkSummary:
        gate = asyncio.Semaphore(self._max_concurrency)

        async def _bounded(ref: PrincipalRef) -> OperationResult:
            async with gate:
                return await self._delete_one(ref, actor=actor, revoke_tokens=revoke_tokens)

        log.info("bulk_delete_started", count=len(refs), max_concurrency=self._max_concurrency)
        # gather() returns results in argument order regardless of completion order.
        results = await asyncio.gather(*(_bounded(ref) for ref in refs))
        summary = BulkSummary(results=list(results))
        log.info(
            "bulk_delete_finished",
            successful=summary.success_count,
            failed=summary.failure_count,
        )
        return summary

    async def _delete_one(
        self, ref: PrincipalRef, *, actor: str, revoke_tokens: bool
    ) -> OperationResult:
        try:
            return await self._manager.delete_user(ref, actor=actor, revoke_tokens=revoke_tokens)
        except ServiceError as e:
            log.warning("bulk_item_failed", ref=ref.value, code=e.code, error=e.message)
            return OperationResult(
                ref_id=ref.value,
                status=OperationStatus.failed,
                detail={"error": e.message, "code": e.code},
            )
        except Exception as e:
            # One broken item must not abort its siblings.
            log.exception("bulk_item_crashed", ref=ref.value)
            return OperationResult(
                ref_id=ref.value,
                status=OperationStatus.failed,
                detail={"error": str(e), "code": "INTERNAL_ERROR"},
            )
