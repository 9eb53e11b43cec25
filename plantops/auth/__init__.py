"""
Token authentication for the plant operations API.

CHANGELOG:
- 2026-10-06: Initial creation (STORY-011)

TODO:
- None
"""

from plantops.auth.bearer import BearerAuth, parse_api_tokens, verify_bearer_token

__all__ = ["BearerAuth", "parse_api_tokens", "verify_bearer_token"]
