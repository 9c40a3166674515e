"""
Shared test fixtures for pwnaudit.

The range API is a real aiohttp application served in-process; decryption
and breach checks have in-memory doubles. No test touches the network or
a real gpg.
"""

import asyncio
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from pwnaudit.exceptions import BreachCheckError, DecryptionError
from pwnaudit.hibp.fingerprint import fingerprint
from pwnaudit.hibp.models import PasswordCheckResult


# =============================================================================
# Fake range API
# =============================================================================

class FakeRangeAPI:
    """In-process stand-in for the Pwned Passwords range endpoint."""

    def __init__(self):
        self.buckets: dict[str, str] = {}
        self.status = 200
        self.body = ""
        self.headers: dict[str, str] = {}
        self.delay = 0.0
        self.truncate = False
        self.requests: list[dict] = []
        self.base_url = ""

    def add_password(self, password: str, count: int) -> None:
        """Put a password's suffix into its prefix bucket."""
        fp = fingerprint(password)
        line = f"{fp.suffix}:{count}"
        existing = self.buckets.get(fp.prefix)
        self.buckets[fp.prefix] = f"{existing}\r\n{line}" if existing else line

    async def handle(self, request: web.Request) -> web.StreamResponse:
        prefix = request.match_info["prefix"]
        self.requests.append({
            "path": request.path,
            "prefix": prefix,
            "headers": dict(request.headers),
        })

        if self.delay:
            await asyncio.sleep(self.delay)

        if self.status != 200:
            return web.Response(status=self.status, text=self.body, headers=self.headers)

        if self.truncate:
            response = web.StreamResponse()
            response.enable_chunked_encoding()
            await response.prepare(request)
            await response.write(b"00000000000000000000000000000000000:1\r\n")
            request.transport.close()
            return response

        return web.Response(text=self.buckets.get(prefix.upper(), ""))


@pytest_asyncio.fixture
async def range_api():
    """Running fake range API; ``base_url`` points at its /range route."""
    fake = FakeRangeAPI()
    app = web.Application()
    app.router.add_get("/range/{prefix}", fake.handle)

    server = TestServer(app)
    await server.start_server()
    fake.base_url = str(server.make_url("/range"))
    yield fake
    await server.close()


# =============================================================================
# In-memory collaborators
# =============================================================================

class FakeChecker:
    """Breach checker backed by a dict of secret -> occurrences."""

    def __init__(
        self,
        pwned: dict[str, int] | None = None,
        failing: dict[str, BreachCheckError] | None = None,
        delay: float = 0.0,
    ):
        self.pwned = pwned or {}
        self.failing = failing or {}
        self.delay = delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def check_password(self, password: str) -> PasswordCheckResult:
        self.calls.append(password)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if password in self.failing:
                raise self.failing[password]
            return PasswordCheckResult(
                hash_prefix=fingerprint(password).prefix,
                occurrences=self.pwned.get(password, 0),
            )
        finally:
            self.in_flight -= 1


class FakeDecryptor:
    """Decryptor keyed by file name relative to the store root."""

    def __init__(self, store_root: Path, plaintexts: dict[str, str | Exception]):
        self.store_root = store_root
        self.plaintexts = plaintexts
        self.calls: list[Path] = []

    def decrypt(self, path: Path) -> str:
        self.calls.append(path)
        value = self.plaintexts[Path(path).relative_to(self.store_root).as_posix()]
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def password_store(tmp_path: Path) -> Path:
    """A small store layout with nested folders and a non-entry file."""
    root = tmp_path / "password-store"
    for name in ("email/work.gpg", "email/home.gpg", "bank.gpg", "social/forum.gpg"):
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"-----BEGIN PGP MESSAGE-----")
    (root / ".gpg-id").write_text("ABCDEF0123456789\n")
    return root


@pytest.fixture
def decrypt_failure() -> DecryptionError:
    return DecryptionError("gpg decryption failed (exit 2): no secret key")
