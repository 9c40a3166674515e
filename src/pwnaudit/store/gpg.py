"""
GPG decryption of password store entries.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
import subprocess
from pathlib import Path
from typing import Protocol

from pwnaudit.exceptions import DecryptionError

logger = logging.getLogger(__name__)


class Decryptor(Protocol):
    """Anything that turns an encrypted entry file into plaintext.

    Implementations raise DecryptionError on failure and return the whole
    plaintext (possibly empty) on success.
    """

    def decrypt(self, path: Path) -> str:
        ...


class GPGDecryptor:
    """Decrypt entries with the gpg binary.

    Relies on gpg-agent caching; the agent may prompt for a passphrase.
    """

    def __init__(self, gpg_binary: str = "gpg"):
        self.gpg_binary = gpg_binary

    def command(self, path: Path) -> list[str]:
        return [self.gpg_binary, "--quiet", "--batch", "--decrypt", str(path)]

    def decrypt(self, path: Path) -> str:
        """Run gpg against one file.

        Args:
            path: Absolute path to the encrypted file

        Returns:
            Decrypted output, non UTF-8 bytes kept via surrogateescape
        """
        try:
            result = subprocess.run(
                self.command(path),
                capture_output=True,
            )
        except OSError as e:
            raise DecryptionError(
                f"could not run {self.gpg_binary}: {e}", path=str(path)
            ) from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise DecryptionError(
                f"gpg decryption failed (exit {result.returncode}): {stderr}",
                path=str(path),
                stderr=stderr,
            )

        # Undecodable bytes survive as surrogates so the secret hashes byte for byte
        return result.stdout.decode("utf-8", errors="surrogateescape")
