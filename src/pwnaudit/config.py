"""
Configuration for password store audits.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from pwnaudit.hibp.client import PwnedPasswordsClient

DEFAULT_WORKERS = 10
DEFAULT_ENTRY_SUFFIX = ".gpg"


@dataclass
class AuditConfig:
    """Configuration for one audit run."""

    # Explicit store override; None falls back to PASSWORD_STORE_DIR, then ~/.password-store
    store_dir: str | Path | None = None
    entry_suffix: str = DEFAULT_ENTRY_SUFFIX

    # Decryption
    gpg_binary: str = "gpg"

    # Range API
    api_url: str = PwnedPasswordsClient.PWNED_PASSWORDS_API
    user_agent: str = PwnedPasswordsClient.DEFAULT_USER_AGENT
    timeout: float = PwnedPasswordsClient.DEFAULT_TIMEOUT
    add_padding: bool = True

    # Fixed pool size, not derived from store size
    workers: int = DEFAULT_WORKERS

    # Reporting only, never changes control flow
    verbose: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AuditConfig":
        """Load configuration from environment variables."""
        env = os.environ if environ is None else environ

        try:
            timeout = float(env.get("PWNAUDIT_TIMEOUT", PwnedPasswordsClient.DEFAULT_TIMEOUT))
        except ValueError:
            timeout = PwnedPasswordsClient.DEFAULT_TIMEOUT

        return cls(
            gpg_binary=env.get("PWNAUDIT_GPG", "gpg"),
            api_url=env.get("PWNAUDIT_API_URL", PwnedPasswordsClient.PWNED_PASSWORDS_API),
            user_agent=env.get("PWNAUDIT_USER_AGENT", PwnedPasswordsClient.DEFAULT_USER_AGENT),
            timeout=timeout,
            add_padding=env.get("PWNAUDIT_ADD_PADDING", "true").lower() in ("true", "yes", "1"),
        )

    def create_client(self) -> PwnedPasswordsClient:
        """Build a range API client from this configuration."""
        return PwnedPasswordsClient(
            base_url=self.api_url,
            user_agent=self.user_agent,
            timeout=self.timeout,
            add_padding=self.add_padding,
        )

    def validate(self) -> list[str]:
        """Validate configuration. Returns list of errors."""
        errors = []

        if self.workers < 1:
            errors.append("At least one worker is required")
        if self.timeout <= 0:
            errors.append("Timeout must be positive")
        if not self.api_url.startswith(("http://", "https://")):
            errors.append(f"API URL must be http(s): {self.api_url}")
        if not self.entry_suffix:
            errors.append("Entry suffix must not be empty")

        return errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "store_dir": str(self.store_dir) if self.store_dir else None,
            "entry_suffix": self.entry_suffix,
            "gpg_binary": self.gpg_binary,
            "api_url": self.api_url,
            "user_agent": self.user_agent,
            "timeout": self.timeout,
            "add_padding": self.add_padding,
            "workers": self.workers,
            "verbose": self.verbose,
        }
