"""
Password store location and entry enumeration.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
import os
from pathlib import Path
from typing import Mapping

from pwnaudit.config import DEFAULT_ENTRY_SUFFIX
from pwnaudit.exceptions import StoreNotFoundError

logger = logging.getLogger(__name__)

STORE_DIR_ENV = "PASSWORD_STORE_DIR"


def _existing_dir(raw: str | Path, source: str) -> Path:
    path = Path(raw).expanduser().absolute()
    if not path.exists():
        raise StoreNotFoundError(f"{source} does not exist: {path}", path=str(path))
    if not path.is_dir():
        raise StoreNotFoundError(f"{source} is not a directory: {path}", path=str(path))
    return path


def resolve_store_path(
    explicit: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Determine the password store directory.

    Precedence is the explicit override, then PASSWORD_STORE_DIR, then
    ~/.password-store. Overrides must exist; the default is checked when
    entries are listed.

    Args:
        explicit: Path given on the command line
        environ: Environment mapping (default: os.environ)

    Returns:
        Absolute store path
    """
    env = os.environ if environ is None else environ

    if explicit:
        return _existing_dir(explicit, "specified pass-dir")

    env_dir = env.get(STORE_DIR_ENV)
    if env_dir:
        return _existing_dir(env_dir, STORE_DIR_ENV)

    return Path.home() / ".password-store"


def list_entries(store_root: str | Path, suffix: str = DEFAULT_ENTRY_SUFFIX) -> list[str]:
    """Find every encrypted entry in the store.

    Args:
        store_root: Store directory
        suffix: Encrypted file suffix

    Returns:
        Sorted entry identifiers: relative POSIX paths without the suffix
    """
    root = Path(store_root)
    if not root.exists():
        raise StoreNotFoundError(f"Password store directory not found: {root}", path=str(root))
    if not root.is_dir():
        raise StoreNotFoundError(f"Password store path is not a directory: {root}", path=str(root))

    entries = []
    try:
        for path in root.rglob(f"*{suffix}"):
            if not path.is_file():
                continue
            relative = path.relative_to(root).as_posix()
            entries.append(relative[: -len(suffix)])
    except OSError as e:
        raise StoreNotFoundError(f"Error scanning password store {root}: {e}", path=str(root)) from e

    if not entries:
        raise StoreNotFoundError(f"No {suffix} files found in password store at {root}", path=str(root))

    logger.debug(f"Found {len(entries)} entries under {root}")
    return sorted(entries)


def entry_path(store_root: str | Path, entry: str, suffix: str = DEFAULT_ENTRY_SUFFIX) -> Path:
    """Absolute path of the encrypted file behind an entry identifier."""
    return Path(store_root) / f"{entry}{suffix}"
