"""
Serial decryption phase of a store scan.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Sequence

from pwnaudit.config import DEFAULT_ENTRY_SUFFIX
from pwnaudit.exceptions import DecryptionError
from pwnaudit.scan.models import DecryptionReport
from pwnaudit.store.gpg import Decryptor
from pwnaudit.store.paths import entry_path

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 10

ProgressCallback = Callable[[int, int], None]


def first_line(plaintext: str) -> str:
    """The secret is the first line; later lines hold metadata."""
    line = plaintext.split("\n", 1)[0]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def decrypt_entries(
    entries: Sequence[str],
    store_root: str | Path,
    decryptor: Decryptor,
    suffix: str = DEFAULT_ENTRY_SUFFIX,
    progress: ProgressCallback | None = None,
) -> DecryptionReport:
    """Decrypt every entry and collect the non-empty secrets.

    A failing or empty entry is counted and skipped; it never stops the
    phase.

    Args:
        entries: Entry identifiers from list_entries()
        store_root: Store directory
        decryptor: Decryption capability
        suffix: Encrypted file suffix
        progress: Called as progress(processed, total) every 10 entries
            and on the last one

    Returns:
        DecryptionReport with a read-only secrets mapping
    """
    secrets: dict[str, str] = {}
    report = DecryptionReport(files_found=len(entries))
    total = len(entries)

    for processed, entry in enumerate(entries, start=1):
        if progress and (processed % PROGRESS_EVERY == 0 or processed == total):
            progress(processed, total)

        try:
            plaintext = decryptor.decrypt(entry_path(store_root, entry, suffix))
        except DecryptionError as e:
            logger.debug(f"Failed to decrypt {entry}: {e}")
            report.decryption_errors += 1
            report.failed_entries.append(entry)
            continue

        secret = first_line(plaintext)
        if not secret:
            logger.debug(f"Skipping empty password in {entry}")
            report.empty_entries += 1
            continue

        secrets[entry] = secret

    # Phase barrier: from here on the mapping is only read
    report.secrets = MappingProxyType(secrets)
    logger.info(
        f"Decrypted {report.decrypted}/{total} entries "
        f"(errors: {report.decryption_errors}, empty: {report.empty_entries})"
    )
    return report
