"""
SHA-1 fingerprints for k-anonymity range queries.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import hashlib
import string
from typing import NamedTuple

from pwnaudit.exceptions import FingerprintError

PREFIX_LENGTH = 5
HASH_LENGTH = 40


class Fingerprint(NamedTuple):
    """A SHA-1 hash split for a range query.

    Only ``prefix`` is ever sent over the network.
    """

    prefix: str
    suffix: str

    @property
    def full_hash(self) -> str:
        return self.prefix + self.suffix


def fingerprint(secret: str) -> Fingerprint:
    """Hash a secret and split it into (prefix, suffix).

    Args:
        secret: Plaintext secret (NOT stored or logged)

    Returns:
        Fingerprint with a 5 character prefix and 35 character suffix
    """
    try:
        raw = secret.encode("utf-8", "surrogateescape")
    except (UnicodeEncodeError, AttributeError) as e:
        raise FingerprintError(f"cannot hash secret: {e.__class__.__name__}") from None

    digest = hashlib.sha1(raw).hexdigest().upper()
    return Fingerprint(digest[:PREFIX_LENGTH], digest[PREFIX_LENGTH:])


def fingerprint_hash(sha1_hash: str) -> Fingerprint:
    """Split a pre-computed SHA-1 hex digest.

    Args:
        sha1_hash: Full SHA-1 hash of the password, any case

    Returns:
        Fingerprint of the normalised hash
    """
    sha1_hash = sha1_hash.strip().upper()
    if len(sha1_hash) != HASH_LENGTH or any(c not in string.hexdigits for c in sha1_hash):
        raise FingerprintError("expected a 40 character SHA-1 hex digest")
    return Fingerprint(sha1_hash[:PREFIX_LENGTH], sha1_hash[PREFIX_LENGTH:])
