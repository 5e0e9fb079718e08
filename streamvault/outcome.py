# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Per-stream outcome bookkeeping shared by the backup and restore runs.

The ledger only accumulates; printing lives in streamvault.report so the
aggregation rules can be tested without capturing output.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class OutcomeKind(str, Enum):
    """Result of one stream's backup or restore attempt."""

    SUCCESS = "success"
    WARNING = "warning"
    FAILURE = "failure"


@dataclass(frozen=True)
class OutcomeRecord:
    """Outcome of a single stream."""

    stream: str
    kind: OutcomeKind
    reason: str = ""

    def __str__(self) -> str:
        if self.reason:
            return f"{self.stream}: {self.reason}"
        return self.stream


@dataclass
class OutcomeLedger:
    """Ordered outcomes of one orchestration run. Never persisted."""

    succeeded: List[str] = field(default_factory=list)
    warnings: List[OutcomeRecord] = field(default_factory=list)
    failures: List[OutcomeRecord] = field(default_factory=list)

    def success(self, stream: str) -> OutcomeRecord:
        self.succeeded.append(stream)
        return OutcomeRecord(stream, OutcomeKind.SUCCESS)

    def warning(self, stream: str, reason: str) -> OutcomeRecord:
        record = OutcomeRecord(stream, OutcomeKind.WARNING, reason)
        self.warnings.append(record)
        return record

    def failure(self, stream: str, reason: str) -> OutcomeRecord:
        record = OutcomeRecord(stream, OutcomeKind.FAILURE, reason)
        self.failures.append(record)
        return record

    @property
    def processed(self) -> int:
        return len(self.succeeded) + len(self.warnings) + len(self.failures)

    def is_failed(self, fail_on_warning: bool = False) -> bool:
        """
        Overall verdict of the run.

        Any failure fails the run; warnings only do when fail_on_warning
        is set.
        """
        return bool(self.failures) or (bool(self.warnings) and fail_on_warning)

    def as_details(self) -> dict:
        return {
            "succeeded": list(self.succeeded),
            "warnings": [str(w) for w in self.warnings],
            "failures": [str(f) for f in self.failures],
        }
