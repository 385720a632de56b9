"""
Unit tests for admin bearer token verification.

Tests verify:
- Token comparison accepts only an exact match.
- Empty tokens never match.
- AdminAuth is disabled when no token is configured.

CHANGELOG:
- 2026-10-09: Initial creation

TODO:
- None
"""

import pytest

from solar_datagen.auth.bearer import AdminAuth, verify_bearer_token


class TestVerifyBearerToken:
    """Constant-time token comparison."""

    def test_match(self) -> None:
        assert verify_bearer_token("s3cret", "s3cret")

    @pytest.mark.parametrize("token", ["s3cre", "s3cret ", "S3CRET", ""])
    def test_mismatch(self, token: str) -> None:
        assert not verify_bearer_token(token, "s3cret")

    def test_empty_expected_never_matches(self) -> None:
        assert not verify_bearer_token("", "")
        assert not verify_bearer_token("anything", "")


class TestAdminAuth:
    def test_enabled_with_token(self) -> None:
        assert AdminAuth("s3cret").enabled

    def test_disabled_without_token(self) -> None:
        assert not AdminAuth("").enabled
