"""
Pwned Passwords range API client.

Implements the k-anonymity range lookup:
- Only the first 5 characters of the SHA-1 hash are sent
- The matching suffix is searched locally in the streamed response
- Padding is requested so the bucket size leaks nothing
- Rate limiting and transport failures surface as typed errors

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import asyncio
import logging

import aiohttp

from pwnaudit.exceptions import (
    RateLimitedError,
    RequestFailedError,
    ResponseReadError,
    UnexpectedStatusError,
)
from pwnaudit.hibp.fingerprint import Fingerprint, fingerprint, fingerprint_hash
from pwnaudit.hibp.models import PasswordCheckResult

logger = logging.getLogger(__name__)


class PwnedPasswordsClient:
    """Client for the Pwned Passwords range API.

    One client (and one HTTP session) is shared by every worker of a scan.
    The client never retries: a rate-limited check is reported as an error
    for this run.
    """

    # API endpoint
    PWNED_PASSWORDS_API = "https://api.pwnedpasswords.com/range"

    DEFAULT_USER_AGENT = "pwnaudit-password-store-checker/1.0"
    DEFAULT_TIMEOUT = 15.0  # seconds, covers connect and body read

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        add_padding: bool = True,
    ):
        """Initialize the range API client.

        Args:
            base_url: Range endpoint, the prefix is appended as a path segment
            user_agent: User-Agent header for requests
            timeout: Total request timeout in seconds (default: 15.0)
            add_padding: Send ``Add-Padding: true`` with every request
        """
        self.base_url = (base_url or self.PWNED_PASSWORDS_API).rstrip("/")
        self.user_agent = user_agent or self.DEFAULT_USER_AGENT
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.add_padding = add_padding
        self._session: aiohttp.ClientSession | None = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure HTTP session exists."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "PwnedPasswordsClient":
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    def _headers(self) -> dict[str, str]:
        headers = {"User-Agent": self.user_agent}
        if self.add_padding:
            headers["Add-Padding"] = "true"
        return headers

    async def _query_range(self, fp: Fingerprint) -> PasswordCheckResult:
        """Fetch the range bucket for ``fp.prefix`` and look for ``fp.suffix``.

        Returns:
            PasswordCheckResult, ``occurrences`` is 0 when the suffix is absent

        Raises:
            RequestFailedError: transport failure or timeout
            RateLimitedError: HTTP 429
            UnexpectedStatusError: any other non-200 status
            ResponseReadError: body broke off before a verdict
        """
        session = await self._ensure_session()
        url = f"{self.base_url}/{fp.prefix}"
        result = PasswordCheckResult(hash_prefix=fp.prefix)

        try:
            async with session.get(
                url,
                headers=self._headers(),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status == 429:
                    retry_after = response.headers.get("Retry-After")
                    logger.warning(f"Rate limited on prefix {fp.prefix}. Retry after {retry_after}s")
                    raise RateLimitedError(retry_after)

                if response.status != 200:
                    text = await response.text(errors="replace")
                    raise UnexpectedStatusError(response.status, text, prefix=fp.prefix)

                try:
                    # Response format: "SUFFIX:COUNT\r\n"
                    async for raw_line in response.content:
                        line = raw_line.decode("utf-8", errors="replace").strip()
                        hash_suffix, sep, count = line.partition(":")
                        if not sep or hash_suffix.upper() != fp.suffix:
                            continue
                        try:
                            result.occurrences = max(int(count), 1)
                        except ValueError:
                            result.occurrences = 1
                        return result
                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    raise ResponseReadError(
                        f"error reading range response for prefix {fp.prefix}: {e!r}"
                    ) from e

        except asyncio.TimeoutError as e:
            raise RequestFailedError(f"request failed for prefix {fp.prefix}: timeout") from e
        except aiohttp.ClientError as e:
            raise RequestFailedError(f"request failed for prefix {fp.prefix}: {e}") from e

        return result

    async def check_password(self, password: str) -> PasswordCheckResult:
        """Check if a password has been exposed in data breaches.

        Uses k-anonymity model - only the first 5 characters of the
        SHA-1 hash are sent to the API. The full password never leaves
        this system.

        Args:
            password: Password to check (NOT stored or logged)

        Returns:
            PasswordCheckResult with exposure count
        """
        return await self._query_range(fingerprint(password))

    async def check_hash(self, sha1_hash: str) -> PasswordCheckResult:
        """Check a pre-computed SHA-1 hash against Pwned Passwords.

        Args:
            sha1_hash: Full SHA-1 hash of the password

        Returns:
            PasswordCheckResult with exposure count
        """
        return await self._query_range(fingerprint_hash(sha1_hash))

    async def check_breached(self, password: str) -> bool:
        """Return True when the password appears in the breach corpus."""
        result = await self.check_password(password)
        return result.is_pwned
