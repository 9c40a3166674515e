"""
Pwned Passwords integration module.

Password breach checking against the Pwned Passwords range API
using k-anonymity: only a 5 character SHA-1 prefix is disclosed.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from pwnaudit.hibp.fingerprint import Fingerprint, fingerprint, fingerprint_hash
from pwnaudit.hibp.models import PasswordCheckResult, RiskLevel
from pwnaudit.hibp.client import PwnedPasswordsClient

__all__ = [
    "PwnedPasswordsClient",
    "Fingerprint",
    "PasswordCheckResult",
    "RiskLevel",
    "fingerprint",
    "fingerprint_hash",
]
