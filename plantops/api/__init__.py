"""
HTTP layer: FastAPI application, routers and dependency providers.

CHANGELOG:
- 2026-10-02: Initial creation (STORY-001)

TODO:
- None
"""
