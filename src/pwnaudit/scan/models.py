"""
Data models for store scans.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Iterable, Mapping


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one breach check job.

    ``skipped`` means the job named an entry missing from the decrypted
    map, which only happens if the pipeline itself is broken.
    """

    entry: str
    is_breached: bool = False
    error: Exception | None = None
    skipped: bool = False
    occurrences: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None and not self.skipped

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (never includes the secret)."""
        return {
            "entry": self.entry,
            "is_breached": self.is_breached,
            "occurrences": self.occurrences,
            "error": str(self.error) if self.error else None,
            "error_type": type(self.error).__name__ if self.error else None,
            "skipped": self.skipped,
        }


@dataclass
class DecryptionReport:
    """Output of the serial decryption phase.

    ``secrets`` is read-only: it is handed to concurrent workers after the
    phase completes and must not change afterwards.
    """

    secrets: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    files_found: int = 0
    decryption_errors: int = 0
    empty_entries: int = 0
    failed_entries: list[str] = field(default_factory=list)

    @property
    def decrypted(self) -> int:
        return len(self.secrets)


@dataclass
class ScanSummary:
    """Aggregate counters for one scan."""

    files_found: int = 0
    decryption_errors: int = 0
    empty_entries: int = 0
    passwords_checked: int = 0
    breaches_found: int = 0
    check_errors: int = 0
    skipped: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def has_breaches(self) -> bool:
        return self.breaches_found > 0

    @property
    def duration_seconds(self) -> float | None:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "files_found": self.files_found,
            "decryption_errors": self.decryption_errors,
            "empty_entries": self.empty_entries,
            "passwords_checked": self.passwords_checked,
            "breaches_found": self.breaches_found,
            "check_errors": self.check_errors,
            "skipped": self.skipped,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
        }


@dataclass
class ScanReport:
    """Summary plus per-entry results of a scan."""

    summary: ScanSummary
    results: list[CheckResult] = field(default_factory=list)
    store_path: str | None = None

    @classmethod
    def build(
        cls,
        decryption: DecryptionReport,
        results: Iterable[CheckResult],
        started_at: datetime | None = None,
        store_path: str | None = None,
    ) -> "ScanReport":
        """Aggregate results. Order of ``results`` is irrelevant."""
        summary = ScanSummary(
            files_found=decryption.files_found,
            decryption_errors=decryption.decryption_errors,
            empty_entries=decryption.empty_entries,
            started_at=started_at,
        )
        collected = []
        for result in results:
            collected.append(result)
            if result.skipped:
                summary.skipped += 1
                continue
            summary.passwords_checked += 1
            if result.error is not None:
                summary.check_errors += 1
            elif result.is_breached:
                summary.breaches_found += 1

        summary.completed_at = datetime.now()
        return cls(summary=summary, results=collected, store_path=store_path)

    @property
    def breached(self) -> list[CheckResult]:
        return sorted(
            (r for r in self.results if r.is_breached and r.error is None),
            key=lambda r: r.entry,
        )

    @property
    def errored(self) -> list[CheckResult]:
        return sorted((r for r in self.results if r.error is not None), key=lambda r: r.entry)

    @property
    def skipped(self) -> list[CheckResult]:
        return sorted((r for r in self.results if r.skipped), key=lambda r: r.entry)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "store_path": self.store_path,
            "summary": self.summary.to_dict(),
            "breached": [r.to_dict() for r in self.breached],
            "errors": [r.to_dict() for r in self.errored],
            "skipped": [r.to_dict() for r in self.skipped],
        }
