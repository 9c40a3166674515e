"""
Store scanning: decryption phase, worker pool and aggregation.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from pwnaudit.scan.models import (
    CheckResult,
    DecryptionReport,
    ScanReport,
    ScanSummary,
)
from pwnaudit.scan.decrypt import decrypt_entries
from pwnaudit.scan.pool import CheckPool
from pwnaudit.scan.pipeline import check_secrets, check_single, run_scan

__all__ = [
    "CheckPool",
    "CheckResult",
    "DecryptionReport",
    "ScanReport",
    "ScanSummary",
    "check_secrets",
    "check_single",
    "decrypt_entries",
    "run_scan",
]
