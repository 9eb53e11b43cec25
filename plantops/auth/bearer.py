"""
Bearer token authentication for mutating plant and RTU routes.

API_TOKENS holds ``token:user`` pairs. A request carrying
``Authorization: Bearer <token>`` is resolved to the paired user name,
which the routers record as ``changed_by`` in the change history. Tokens
are compared with secrets.compare_digest. Read routes are not guarded.

CHANGELOG:
- 2026-10-06: Initial creation (STORY-011)

TODO:
- None
"""

import logging
import secrets

from fastapi import HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def parse_api_tokens(raw: str) -> dict[str, str]:
    """Build the token -> user mapping from the API_TOKENS setting.

    Example: ``"k1:alice, k2:bob"`` gives ``{"k1": "alice", "k2": "bob"}``.
    Only the first colon separates; the rest belongs to the user name.
    Entries with no colon, or an empty side, are dropped.

    Args:
        raw: Comma-separated ``token:user`` pairs.

    Returns:
        dict[str, str]: Mapping of token to user name; empty if none parse.
    """
    users: dict[str, str] = {}
    for position, pair in enumerate((raw or "").split(",")):
        pair = pair.strip()
        if not pair:
            continue
        token, sep, user = pair.partition(":")
        if not sep:
            logger.warning("Ignoring API_TOKENS entry %d: expected token:user", position)
            continue
        token, user = token.strip(), user.strip()
        if token and user:
            users[token] = user
    return users


def verify_bearer_token(token: str, token_map: dict[str, str]) -> str | None:
    """Return the user owning *token*, or None.

    Every registered token is checked so the lookup time does not depend
    on which entry matches.
    """
    if not token:
        return None
    presented = token.encode("utf-8")
    owner: str | None = None
    for candidate, user in token_map.items():
        if secrets.compare_digest(presented, candidate.encode("utf-8")):
            owner = user
    return owner


class BearerAuth:
    """Request authenticator used through ``Depends(auth.verify)``.

    Attributes:
        token_map: Token -> user name.
        scheme: HTTPBearer extractor, also documents the scheme in OpenAPI.
    """

    def __init__(self, token_map: dict[str, str]) -> None:
        self.token_map = token_map
        self.scheme = HTTPBearer(auto_error=False)

    async def verify(self, request: Request) -> str:
        """Return the user behind the request's Bearer token.

        Raises:
            HTTPException: 401 with a Bearer challenge when the header is
                absent or the token is unknown.
        """
        credentials: HTTPAuthorizationCredentials | None = await self.scheme(request)
        if credentials is None:
            raise HTTPException(401, "Missing authorization credentials.", _CHALLENGE)

        user = verify_bearer_token(credentials.credentials, self.token_map)
        if user is None:
            logger.info("Rejected bearer token on %s %s", request.method, request.url.path)
            raise HTTPException(401, "Invalid or expired token.", _CHALLENGE)
        return user
