"""
identity_admin.services.results

Structured outcomes returned by lifecycle and bulk operations.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class OperationStatus(enum.StrEnum):
    deleted = "deleted"
    failed = "failed"
    disabled = "disabled"
    enabled = "enabled"


@dataclass(slots=True)
class OperationResult:
    ref_id: str
    status: OperationStatus
    detail: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status != OperationStatus.failed

    def to_dict(self) -> dict[str, Any]:
        return {"refId": self.ref_id, "status": self.status.value, "detail": dict(self.detail)}


@dataclass(slots=True)
class BulkSummary:
    results: list[OperationResult] = field(default_factory=list)

    # Counts are derived from `results` on every read so they cannot drift.
    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.results if not r.succeeded)

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "successCount": self.success_count,
            "failureCount": self.failure_count,
            "total": len(self.results),
        }
