"""Tests for robot request signing."""

import base64
import hashlib
import hmac

from fluxtalk.dingtalk.signing import build_query, now_ms, sign


def _expected(secret: str, ts: int) -> str:
    digest = hmac.new(secret.encode(), f"{ts}\n{secret}".encode(), hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


class TestSign:
    def test_matches_reference_hmac(self):
        assert sign("s3cr3t", 1700000000000) == _expected("s3cr3t", 1700000000000)

    def test_deterministic(self):
        assert sign("k", 42) == sign("k", 42)

    def test_timestamp_changes_signature(self):
        assert sign("k", 1700000000000) != sign("k", 1700000000001)

    def test_secret_changes_signature(self):
        assert sign("a", 1) != sign("b", 1)

    def test_is_standard_base64_of_sha256(self):
        raw = base64.b64decode(sign("k", 1), validate=True)
        assert len(raw) == 32


class TestBuildQuery:
    def test_without_secret_only_token(self):
        assert build_query("tok123", "", 1700000000000) == {"access_token": "tok123"}

    def test_with_secret_adds_timestamp_and_sign(self):
        params = build_query("tok", "s3cr3t", 1700000000000)
        assert params["access_token"] == "tok"
        assert params["timestamp"] == "1700000000000"
        assert params["sign"] == _expected("s3cr3t", 1700000000000)


class TestNowMs:
    def test_whole_seconds_in_ms(self):
        value = now_ms()
        assert value % 1000 == 0
        assert value > 1_600_000_000_000
