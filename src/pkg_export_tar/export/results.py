"""Result model for an export run.

``ExportResult`` follows the ``mark_complete()`` pattern: the workflow
creates it up front, fills it in as the pipeline progresses, and calls
``mark_complete()`` on every exit path to finalise timestamps, duration
and status.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


class ExportStatus(str, Enum):
    """Outcome of an export run."""

    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class PackageSummary(BaseModel):
    """One requested or base package as classified in the build root."""

    ident: str
    kind: Literal["service", "library"]
    exposes: list[str] = Field(default_factory=list)
    base: bool = False


class ExportResult(BaseModel):
    """Outcome of one ``export()`` call."""

    tokens: list[str]
    channel: str
    status: ExportStatus = ExportStatus.PENDING
    tarball: str | None = None
    primary_ident: str | None = None
    packages: list[PackageSummary] = Field(default_factory=list)
    started_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    completed_at: str | None = None
    duration_seconds: float = 0.0
    error: dict[str, Any] | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == ExportStatus.SUCCEEDED

    def mark_complete(self, status: ExportStatus | None = None) -> None:
        """Finalise timestamps and derive status when not given."""
        self.completed_at = datetime.now(UTC).isoformat()
        start = datetime.fromisoformat(self.started_at)
        end = datetime.fromisoformat(self.completed_at)
        self.duration_seconds = (end - start).total_seconds()
        if status is not None:
            self.status = status
        elif self.error is None and self.tarball is not None:
            self.status = ExportStatus.SUCCEEDED
        else:
            self.status = ExportStatus.FAILED

    @property
    def summary(self) -> str:
        services = sum(1 for p in self.packages if p.kind == "service")
        libraries = sum(1 for p in self.packages if p.kind == "library")
        target = self.tarball or "<no archive>"
        return f"{self.status.value}: {services} service(s), {libraries} library package(s) -> {target}"


__all__ = ["ExportResult", "ExportStatus", "PackageSummary"]
