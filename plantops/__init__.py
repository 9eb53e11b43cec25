"""
Plant operations backend package.

Serves power-plant and RTU records over a JSON API, with a shared
search/filter/pagination engine, grouped statistics, a change-history
journal and a simulated RTU telemetry feed.

CHANGELOG:
- 2026-10-02: Initial creation (STORY-001)

TODO:
- None
"""
