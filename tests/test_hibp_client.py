"""Tests for the range API client against an in-process server."""

from unittest.mock import patch

import pytest

from pwnaudit.exceptions import (
    RateLimitedError,
    RequestFailedError,
    ResponseReadError,
    UnexpectedStatusError,
)
from pwnaudit.hibp.client import PwnedPasswordsClient
from pwnaudit.hibp.fingerprint import Fingerprint, fingerprint
from pwnaudit.hibp.models import RiskLevel

B_SUFFIX = "B" * 35
C_SUFFIX = "C" * 35
D_SUFFIX = "D" * 35


def make_client(range_api, **kwargs) -> PwnedPasswordsClient:
    return PwnedPasswordsClient(base_url=range_api.base_url, **kwargs)


# ---------------------------------------------------------------------------
# Suffix matching
# ---------------------------------------------------------------------------

class TestSuffixMatching:
    @pytest.mark.asyncio
    async def test_matching_suffix_is_breached(self, range_api):
        range_api.buckets["AAAAA"] = f"{B_SUFFIX}:3\n{C_SUFFIX}:1"

        with patch(
            "pwnaudit.hibp.client.fingerprint",
            return_value=Fingerprint("AAAAA", B_SUFFIX),
        ):
            async with make_client(range_api) as client:
                assert await client.check_breached("whatever") is True

    @pytest.mark.asyncio
    async def test_missing_suffix_is_not_breached(self, range_api):
        range_api.buckets["AAAAA"] = f"{B_SUFFIX}:3\n{C_SUFFIX}:1"

        with patch(
            "pwnaudit.hibp.client.fingerprint",
            return_value=Fingerprint("AAAAA", D_SUFFIX),
        ):
            async with make_client(range_api) as client:
                assert await client.check_breached("whatever") is False

    @pytest.mark.asyncio
    async def test_check_hash_uses_same_lookup(self, range_api):
        range_api.buckets["AAAAA"] = f"{B_SUFFIX}:3\r\n{C_SUFFIX}:1\r\n"

        async with make_client(range_api) as client:
            hit = await client.check_hash("AAAAA" + C_SUFFIX)
            miss = await client.check_hash("aaaaa" + D_SUFFIX.lower())

        assert hit.is_pwned and hit.occurrences == 1
        assert not miss.is_pwned
        assert [r["prefix"] for r in range_api.requests] == ["AAAAA", "AAAAA"]

    @pytest.mark.asyncio
    async def test_real_password_with_occurrences(self, range_api):
        range_api.add_password("password", 9_545_824)

        async with make_client(range_api) as client:
            result = await client.check_password("password")

        assert result.is_pwned
        assert result.occurrences == 9_545_824
        assert result.risk_level == RiskLevel.CRITICAL
        assert result.hash_prefix == "5BAA6"

    @pytest.mark.asyncio
    async def test_suffix_comparison_is_case_insensitive(self, range_api):
        fp = fingerprint("hunter2")
        range_api.buckets[fp.prefix] = f"{fp.suffix.lower()}:17"

        async with make_client(range_api) as client:
            result = await client.check_password("hunter2")

        assert result.occurrences == 17
        assert result.risk_level == RiskLevel.MEDIUM

    @pytest.mark.asyncio
    async def test_padding_lines_do_not_match(self, range_api):
        fp = fingerprint("not-in-corpus")
        range_api.buckets[fp.prefix] = "\r\n".join(
            f"{i:035X}:0" for i in range(200)
        )

        async with make_client(range_api) as client:
            result = await client.check_password("not-in-corpus")

        assert result.occurrences == 0
        assert result.risk_level == RiskLevel.SAFE

    @pytest.mark.asyncio
    async def test_malformed_lines_are_ignored(self, range_api):
        fp = fingerprint("hunter2")
        range_api.buckets[fp.prefix] = f"garbage\r\n\r\n{fp.suffix}:notanumber"

        async with make_client(range_api) as client:
            result = await client.check_password("hunter2")

        assert result.is_pwned
        assert result.occurrences == 1

    @pytest.mark.asyncio
    async def test_empty_body_is_not_breached(self, range_api):
        async with make_client(range_api) as client:
            assert await client.check_breached("nobody-has-this") is False

    @pytest.mark.asyncio
    async def test_repeat_check_gives_same_verdict(self, range_api):
        range_api.add_password("letmein", 5)

        async with make_client(range_api) as client:
            verdicts = [await client.check_breached("letmein") for _ in range(3)]

        assert verdicts == [True, True, True]


# ---------------------------------------------------------------------------
# Request shape and privacy
# ---------------------------------------------------------------------------

class TestRequest:
    @pytest.mark.asyncio
    async def test_only_prefix_is_sent(self, range_api):
        secret = "correct horse battery staple"
        fp = fingerprint(secret)

        async with make_client(range_api) as client:
            await client.check_password(secret)

        request = range_api.requests[0]
        assert request["path"] == f"/range/{fp.prefix}"
        sent = repr(request)
        assert fp.suffix not in sent
        assert secret not in sent

    @pytest.mark.asyncio
    async def test_headers(self, range_api):
        async with make_client(range_api, user_agent="pwnaudit-tests/0.1") as client:
            await client.check_password("x")

        headers = range_api.requests[0]["headers"]
        assert headers["User-Agent"] == "pwnaudit-tests/0.1"
        assert headers["Add-Padding"] == "true"

    @pytest.mark.asyncio
    async def test_padding_can_be_disabled(self, range_api):
        async with make_client(range_api, add_padding=False) as client:
            await client.check_password("x")

        assert "Add-Padding" not in range_api.requests[0]["headers"]

    def test_defaults(self):
        client = PwnedPasswordsClient()
        assert client.base_url == "https://api.pwnedpasswords.com/range"
        assert client.timeout == 15.0
        assert client.user_agent

    def test_trailing_slash_is_trimmed(self):
        client = PwnedPasswordsClient(base_url="http://localhost:9999/range/")
        assert client.base_url == "http://localhost:9999/range"

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, range_api):
        client = make_client(range_api)
        await client.check_password("x")
        await client.close()
        await client.close()


# ---------------------------------------------------------------------------
# Error outcomes
# ---------------------------------------------------------------------------

class TestErrors:
    @pytest.mark.asyncio
    async def test_rate_limited_with_retry_after(self, range_api):
        range_api.status = 429
        range_api.headers = {"Retry-After": "30"}

        async with make_client(range_api) as client:
            with pytest.raises(RateLimitedError) as exc_info:
                await client.check_password("x")

        assert exc_info.value.retry_after == "30"
        assert "30" in str(exc_info.value)
        assert not isinstance(exc_info.value, RequestFailedError)

    @pytest.mark.asyncio
    async def test_rate_limited_without_retry_after(self, range_api):
        range_api.status = 429

        async with make_client(range_api) as client:
            with pytest.raises(RateLimitedError) as exc_info:
                await client.check_password("x")

        assert exc_info.value.retry_after is None

    @pytest.mark.asyncio
    async def test_rate_limit_is_not_retried(self, range_api):
        range_api.status = 429
        range_api.headers = {"Retry-After": "1"}

        async with make_client(range_api) as client:
            with pytest.raises(RateLimitedError):
                await client.check_password("x")

        assert len(range_api.requests) == 1

    @pytest.mark.asyncio
    async def test_non_200_carries_status_and_body(self, range_api):
        range_api.status = 503
        range_api.body = "service unavailable"

        async with make_client(range_api) as client:
            with pytest.raises(UnexpectedStatusError) as exc_info:
                await client.check_password("x")

        error = exc_info.value
        assert error.status == 503
        assert error.body == "service unavailable"
        assert "503" in str(error)
        assert "service unavailable" in str(error)

    @pytest.mark.asyncio
    async def test_connection_refused_is_request_failure(self):
        client = PwnedPasswordsClient(base_url="http://127.0.0.1:1/range", timeout=2)
        async with client:
            with pytest.raises(RequestFailedError) as exc_info:
                await client.check_password("x")

        assert "request failed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout_is_request_failure(self, range_api):
        range_api.delay = 1.0

        async with make_client(range_api, timeout=0.1) as client:
            with pytest.raises(RequestFailedError):
                await client.check_password("x")

    @pytest.mark.asyncio
    async def test_truncated_body_is_an_error_not_a_miss(self, range_api):
        range_api.truncate = True

        async with make_client(range_api) as client:
            with pytest.raises(ResponseReadError):
                await client.check_password("x")
