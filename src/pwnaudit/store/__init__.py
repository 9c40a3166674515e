"""
Password store access: location, enumeration and decryption.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from pwnaudit.store.paths import (
    STORE_DIR_ENV,
    entry_path,
    list_entries,
    resolve_store_path,
)
from pwnaudit.store.gpg import Decryptor, GPGDecryptor

__all__ = [
    "STORE_DIR_ENV",
    "Decryptor",
    "GPGDecryptor",
    "entry_path",
    "list_entries",
    "resolve_store_path",
]
