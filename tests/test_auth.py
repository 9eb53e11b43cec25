"""
Tests for Bearer token authentication (STORY-011).

Validates that the auth module parses API_TOKENS, checks Bearer tokens with
constant-time comparison, and returns 401 for invalid or missing tokens.

CHANGELOG:
- 2026-10-06: Initial creation (STORY-011)

TODO:
- None
"""

from unittest.mock import patch

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from plantops.auth.bearer import BearerAuth, parse_api_tokens, verify_bearer_token

VALID_TOKENS = "tokenA:alice,tokenB:bob"


def _make_test_app(token_map: dict[str, str]) -> FastAPI:
    """Create a minimal FastAPI app with a protected endpoint."""
    test_app = FastAPI()
    auth = BearerAuth(token_map)

    @test_app.post("/protected")
    async def protected(user: str = Depends(auth.verify)) -> dict:
        return {"user": user}

    return test_app


class TestParseApiTokens:
    """Tests for the token string parser."""

    def test_multiple_tokens(self) -> None:
        assert parse_api_tokens(VALID_TOKENS) == {"tokenA": "alice", "tokenB": "bob"}

    def test_empty_string_returns_empty_dict(self) -> None:
        assert parse_api_tokens("") == {}
        assert parse_api_tokens("   ") == {}

    def test_whitespace_stripped(self) -> None:
        assert parse_api_tokens(" tok : carol , ") == {"tok": "carol"}

    def test_malformed_entry_skipped(self) -> None:
        assert parse_api_tokens("nocolon,tok:dave") == {"tok": "dave"}

    def test_colon_in_user_kept(self) -> None:
        assert parse_api_tokens("tok:team:ops") == {"tok": "team:ops"}


class TestVerifyBearerToken:
    """Tests for verify_bearer_token()."""

    def test_valid_token(self) -> None:
        assert verify_bearer_token("tokenB", parse_api_tokens(VALID_TOKENS)) == "bob"

    def test_invalid_token(self) -> None:
        assert verify_bearer_token("nope", parse_api_tokens(VALID_TOKENS)) is None

    def test_empty_token(self) -> None:
        assert verify_bearer_token("", parse_api_tokens(VALID_TOKENS)) is None

    def test_uses_compare_digest(self) -> None:
        with patch("plantops.auth.bearer.secrets.compare_digest", return_value=False) as cd:
            verify_bearer_token("tokenA", {"tokenA": "alice"})
        cd.assert_called()


class TestBearerAuthDependency:
    """HTTP behaviour of BearerAuth.verify."""

    def test_valid_token_returns_user(self) -> None:
        client = TestClient(_make_test_app(parse_api_tokens(VALID_TOKENS)))
        resp = client.post("/protected", headers={"Authorization": "Bearer tokenA"})
        assert resp.status_code == 200
        assert resp.json() == {"user": "alice"}

    def test_missing_header_is_401(self) -> None:
        client = TestClient(_make_test_app(parse_api_tokens(VALID_TOKENS)))
        resp = client.post("/protected")
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Bearer"

    def test_wrong_token_is_401(self) -> None:
        client = TestClient(_make_test_app(parse_api_tokens(VALID_TOKENS)))
        resp = client.post("/protected", headers={"Authorization": "Bearer wrong"})
        assert resp.status_code == 401
