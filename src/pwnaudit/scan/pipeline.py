"""
Two-phase store scan: serial decryption, then concurrent breach checks.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import asyncio
import logging
from datetime import datetime
from typing import Mapping

from pwnaudit.config import AuditConfig
from pwnaudit.hibp.models import PasswordCheckResult
from pwnaudit.scan.decrypt import ProgressCallback, decrypt_entries
from pwnaudit.scan.models import CheckResult, ScanReport
from pwnaudit.scan.pool import BreachChecker, CheckPool
from pwnaudit.store.gpg import Decryptor, GPGDecryptor
from pwnaudit.store.paths import list_entries, resolve_store_path

logger = logging.getLogger(__name__)


async def check_secrets(
    secrets: Mapping[str, str],
    config: AuditConfig,
    checker: BreachChecker | None = None,
) -> list[CheckResult]:
    """Run the check phase over an already decrypted store.

    Args:
        secrets: Read-only entry -> secret mapping
        config: Audit configuration
        checker: Breach checker (default: a range API client from config)

    Returns:
        One CheckResult per entry, in completion order
    """
    if not secrets:
        return []

    if checker is not None:
        return await CheckPool(checker, workers=config.workers).run(secrets)

    async with config.create_client() as client:
        return await CheckPool(client, workers=config.workers).run(secrets)


def run_scan(
    config: AuditConfig,
    decryptor: Decryptor | None = None,
    checker: BreachChecker | None = None,
    progress: ProgressCallback | None = None,
) -> ScanReport:
    """Audit a whole password store.

    Store-level problems raise StoreNotFoundError before any work starts.
    Per-entry problems end up in the report.

    Args:
        config: Audit configuration
        decryptor: Decryption capability (default: gpg)
        checker: Breach checker (default: a range API client from config)
        progress: Decryption progress callback

    Returns:
        ScanReport with counters and per-entry results
    """
    started_at = datetime.now()
    store_path = resolve_store_path(config.store_dir)
    entries = list_entries(store_path, suffix=config.entry_suffix)
    logger.info(f"Found {len(entries)} password files in {store_path}")

    decryptor = decryptor or GPGDecryptor(config.gpg_binary)
    decryption = decrypt_entries(
        entries,
        store_path,
        decryptor,
        suffix=config.entry_suffix,
        progress=progress,
    )

    results = asyncio.run(check_secrets(decryption.secrets, config, checker))
    report = ScanReport.build(decryption, results, started_at=started_at, store_path=str(store_path))

    summary = report.summary
    logger.info(
        f"Scan complete: {summary.passwords_checked} checked, "
        f"{summary.breaches_found} pwned, {summary.check_errors} errors"
    )
    if summary.skipped:
        logger.error(f"{summary.skipped} checks were skipped: decrypted map and job list disagree")
    return report


def check_single(
    password: str,
    config: AuditConfig,
    checker: BreachChecker | None = None,
) -> PasswordCheckResult:
    """Check one ad-hoc password (piped mode).

    Raises:
        BreachCheckError: the check did not reach a verdict
    """
    async def _check():
        if checker is not None:
            return await checker.check_password(password)
        async with config.create_client() as client:
            return await client.check_password(password)

    return asyncio.run(_check())
