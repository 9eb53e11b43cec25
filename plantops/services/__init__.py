"""
Service layer: query engine, aggregation, record stores, telemetry feed,
change-history journal and demo seed data.

CHANGELOG:
- 2026-10-03: Initial creation (STORY-004)

TODO:
- None
"""
