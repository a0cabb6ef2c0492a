"""Infrastructure Layer — database pool, connector, transaction runner, logging.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All database faults leave this layer translated (core/classify_errors.py)

Design Decisions:
    - Resilient wrappers over raw connections: retry and error mapping live here,
      not in repositories (ADR: single responsibility)
"""
